import os
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")

templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def render_reset_email(frontend_url: str, reset_token: str) -> str:
    return templates.get_template("reset_email.html").render(
        reset_url=f"{frontend_url}/reset?resetToken={reset_token}",
    )


@dataclass(frozen=True)
class MailMessage:
    sender: str
    to: str
    subject: str
    html: str


class Mailer(ABC):
    @abstractmethod
    def send(self, message: MailMessage) -> None:
        """Deliver `message`; raise on failure."""
        ...


class SMTPMailer(Mailer):
    def __init__(self, host: str, port: int = 25, timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    def send(self, message: MailMessage) -> None:
        email = EmailMessage()
        email["From"] = message.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content("This message requires an HTML capable mail client.")
        email.add_alternative(message.html, subtype="html")
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.send_message(email)


class OutboxMailer(Mailer):
    """Keeps sent messages in memory; used in development and tests."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.outbox: list[MailMessage] = []

    def send(self, message: MailMessage) -> None:
        if self.fail:
            raise ConnectionError("mail transport unavailable")
        self.outbox.append(message)
