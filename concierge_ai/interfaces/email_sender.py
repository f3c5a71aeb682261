"""
Email Sender
HTML email over SMTP. smtplib blocks, so sends run on the executor.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from loguru import logger

from ..config import settings


EMAIL_TEMPLATE = """<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; color: #222; max-width: 640px; margin: 0 auto;">
  <div style="padding: 24px;">
    {content}
  </div>
  <p style="font-size: 12px; color: #888; padding: 0 24px;">
    Sent by the Stays concierge. Please do not reply to this email.
  </p>
</body>
</html>"""


def wrap_html(content: str) -> str:
    """Insert body content into the standard email layout"""
    return EMAIL_TEMPLATE.format(content=content)


class EmailSender:
    """Base class: ``send(to, subject, html_body) -> bool``"""
    
    async def send(self, to: str, subject: str, html_body: str) -> bool:
        raise NotImplementedError


class SmtpEmailSender(EmailSender):
    """
    SMTP delivery with STARTTLS when credentials are configured
    
    Failures are logged and reported as False, never raised.
    """
    
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.sender = sender or settings.EMAIL_FROM
        self.timeout = timeout or settings.EMAIL_TIMEOUT_SECONDS
    
    def _build_message(self, to: str, subject: str, html_body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This email requires an HTML-capable client.")
        message.add_alternative(wrap_html(html_body), subtype="html")
        return message
    
    def _send_sync(self, message: EmailMessage):
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.username:
                smtp.starttls()
                smtp.login(self.username, self.password)
            smtp.send_message(message)
    
    async def send(self, to: str, subject: str, html_body: str) -> bool:
        loop = asyncio.get_running_loop()
        
        try:
            message = self._build_message(to, subject, html_body)
            await asyncio.wait_for(
                loop.run_in_executor(None, self._send_sync, message),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Email to {to} timed out after {self.timeout}s")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False
        except ValueError as e:
            logger.error(f"Could not build email to {to}: {e}")
            return False
        
        logger.info(f"Email sent to {to}: {subject}")
        return True
