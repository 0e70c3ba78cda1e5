import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Dict, Any
import logging
import asyncio
from .base_sender import BaseSender

logger = logging.getLogger("recipe_service")


class SMTPSender(BaseSender):
    def __init__(self, config: Dict[str, Any]):
        self.host = config.get("host")
        self.port = config.get("port", 587)
        self.username = config.get("username")
        self.password = config.get("password")
        self.use_tls = config.get("use_tls", True)

    async def send(
        self,
        from_email: str,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> bool:
        # Wrap synchronous SMTP in a thread to keep the service responsive
        return await asyncio.to_thread(
            self._send_sync,
            from_email,
            to_email,
            subject,
            html_body,
            text_body,
            from_name
        )

    def build_message(
        self,
        from_email: str,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject

        clean_from_email = from_email.strip() if from_email else ""
        clean_to_email = to_email.strip() if to_email else ""

        if from_name:
            msg["From"] = f"{from_name.strip()} <{clean_from_email}>"
        else:
            msg["From"] = clean_from_email
        msg["To"] = clean_to_email

        # Plain part first so clients that understand HTML prefer the last one
        if text_body:
            msg.attach(MIMEText(text_body, "plain", "utf-8"))
        if html_body:
            msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def _send_sync(
        self,
        from_email: str,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> bool:
        try:
            msg = self.build_message(from_email, to_email, subject, html_body, text_body, from_name)

            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(from_email.strip(), [to_email.strip()], msg.as_string())

            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP send failed to {to_email}: {e}")
            return False
