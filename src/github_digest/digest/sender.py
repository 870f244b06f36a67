"""Email sending via SMTP."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ..config import Config
from ..errors import MailError

logger = logging.getLogger(__name__)

DIGEST_SUBJECT = "Your GitHub timeline update"


class SmtpMailer:
    """Sends multipart text/HTML messages through an SMTP-over-SSL relay."""

    def __init__(self, host: str, port: int, username: str, password: str, sender: str):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender

    @classmethod
    def from_config(cls, config: Config) -> "SmtpMailer":
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.mail_user,
            password=config.mail_password,
            sender=config.mail_from,
        )

    def build_message(self, to: str, subject: str, text: str, html: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"GitHub Digest <{self.sender}>"
        msg["To"] = to

        # Attach text and HTML parts
        msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))
        return msg

    def send(self, to: str, subject: str, text: str, html: str):
        """Send one message. Raises MailError if delivery fails."""
        msg = self.build_message(to, subject, text, html)
        try:
            with smtplib.SMTP_SSL(self.host, self.port) as server:
                server.login(self.username, self.password)
                server.sendmail(self.sender, to, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise MailError(f"Failed to send to {to}: {e}") from e

        logger.info(f"Email sent to {to}")


def send_test_email(mailer: SmtpMailer, to: str) -> bool:
    """Send a test email to verify SMTP is configured correctly."""
    text = "Test Email\n\nIf you're seeing this, your GitHub Digest email delivery is working correctly!"
    html = """
        <h1>Test Email</h1>
        <p>If you're seeing this, your GitHub Digest email delivery is working correctly!</p>
    """
    try:
        mailer.send(to, "GitHub Digest - Test Email", text, html)
        return True
    except MailError as e:
        logger.error(f"Failed to send test email: {e}")
        return False
