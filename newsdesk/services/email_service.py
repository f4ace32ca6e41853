"""
Email Service

Renders notification mails from Jinja2 templates and sends them over SMTP.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from newsdesk.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates" / "emails"

SUBJECTS = {
    "awaiting_approval": "{kind} submitted for approval!",
    "published": "{kind} published!",
    "role_updated": "Your {app_name} role has been updated",
}


class EmailService:
    """Service for sending emails with template support"""

    def __init__(self):
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
        )

        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.smtp_from = settings.smtp_from

    def render(self, template_kind: str, context: dict) -> tuple[str, str]:
        """
        Render the subject and HTML body for a notification kind.

        Raises:
            jinja2.TemplateNotFound: if no template exists for the kind
        """
        values = {"app_name": settings.app_name, "app_url": settings.app_url, **context}
        subject = SUBJECTS.get(template_kind, "{app_name} notification").format(
            kind=str(values.get("kind_label", "Content")).capitalize(),
            app_name=settings.app_name,
        )
        html_body = self.env.get_template(f"{template_kind}.html").render(**values)
        return subject, html_body

    def send_email(
        self,
        to_email: str | list[str],
        subject: str,
        html_body: str,
        text_body: str | None = None,
    ) -> bool:
        """
        Send an email using SMTP.

        Blocking; callers on the event loop run it in a worker thread.

        Raises:
            smtplib.SMTPException / OSError: on delivery failure
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.smtp_from
        msg["To"] = to_email if isinstance(to_email, str) else ", ".join(to_email)

        if text_body:
            msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.starttls()
            if self.smtp_user and self.smtp_password:
                server.login(self.smtp_user, self.smtp_password)
            server.send_message(msg)

        logger.info(f"Sent '{subject}' to {msg['To']}")
        return True


email_service = EmailService()
