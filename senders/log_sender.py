from .base_sender import BaseSender
from typing import Dict, Any
import logging

logger = logging.getLogger("recipe_service")


class LogSender(BaseSender):
    """Logs instead of delivering. Selected with MAIL_PROVIDER=log for local runs."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    async def send(self, from_email, to_email, subject, html_body, text_body=None, from_name=None) -> bool:
        logger.info("[log] Sending email...")
        logger.info(f"   From: {from_name} <{from_email}>")
        logger.info(f"   To: {to_email}")
        logger.info(f"   Subject: {subject}")
        logger.debug(f"   Body: {len(html_body)} chars of HTML")
        return True
