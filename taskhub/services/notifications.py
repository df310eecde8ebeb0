import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from ..config import MAIL_FROM, SMTP_HOST, SMTP_PASSWORD, SMTP_PORT, SMTP_USE_TLS, SMTP_USERNAME
from ..models import Task, User

REMINDER_SUBJECT = "Task reminder: {title}"

REMINDER_BODY = """Hello {name},

This is a reminder that your task "{title}" was moved to In Progress.
Current status: {status}

Please make sure to complete the task as soon as possible.

Thank you!
"""


@dataclass(frozen=True)
class ReminderMessage:
    to: str
    subject: str
    body: str


def render_reminder(task: Task, owner: User) -> ReminderMessage:
    """Build the reminder from the task as it is now, not as it was when scheduled."""
    return ReminderMessage(
        to=owner.email,
        subject=REMINDER_SUBJECT.format(title=task.title),
        body=REMINDER_BODY.format(
            name=owner.name,
            title=task.title,
            status=task.status.value,
        ),
    )


class SmtpReminderTransport:
    """Delivers reminder messages over SMTP. Errors propagate to the caller."""

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        username: str = SMTP_USERNAME,
        password: str = SMTP_PASSWORD,
        use_tls: bool = SMTP_USE_TLS,
        sender: str = MAIL_FROM,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender = sender

    def build_email(self, message: ReminderMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.sender
        email["To"] = message.to
        email["Subject"] = message.subject
        email.set_content(message.body)
        return email

    def send(self, message: ReminderMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(self.build_email(message))
