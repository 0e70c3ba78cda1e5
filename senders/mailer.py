import logging
from typing import Iterable, List, Optional

from errors import SendError
from .base_sender import BaseSender

logger = logging.getLogger("recipe_service")


class Mailer:
    """
    Sends the same message to a list of recipients, one message per recipient.

    A failed recipient does not stop the batch. When any recipient failed,
    SendError is raised after the whole batch with the failed addresses.
    """

    def __init__(self, sender: BaseSender, from_email: str, from_name: Optional[str] = None):
        self.sender = sender
        self.from_email = from_email
        self.from_name = from_name

    async def send_one(self, to_email: str, subject: str, html_body: str, text_body: Optional[str] = None) -> bool:
        try:
            sent = await self.sender.send(
                from_email=self.from_email,
                to_email=to_email,
                subject=subject,
                html_body=html_body,
                text_body=text_body,
                from_name=self.from_name,
            )
        except Exception as e:
            logger.error(f"       Error sending to {to_email}: {e}")
            return False

        if sent:
            logger.info(f"       Email sent to {to_email}")
        else:
            logger.error(f"       Failed to send email to {to_email}")
        return sent

    async def send(self, recipients: Iterable[str], subject: str, html_body: str, text_body: Optional[str] = None) -> int:
        """Returns the number of recipients the message was delivered to."""
        recipients = list(recipients)
        failed: List[str] = []

        logger.info(f"Sending '{subject}' to {len(recipients)} recipient(s)")
        for idx, to_email in enumerate(recipients):
            logger.debug(f"   [{idx + 1}/{len(recipients)}] Processing: {to_email}")
            if not await self.send_one(to_email, subject, html_body, text_body):
                failed.append(to_email)

        succeeded = len(recipients) - len(failed)
        logger.info(f"Send complete. Succeeded: {succeeded}, Failed: {len(failed)}")
        if failed:
            raise SendError(f"Failed to send email to {len(failed)} of {len(recipients)} recipients: {failed}", failed=failed)
        return succeeded
