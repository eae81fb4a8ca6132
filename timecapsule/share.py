"""Share a capsule by email through the system mail handler."""

from dataclasses import dataclass
from urllib.parse import quote

from timecapsule.capsule.engine import format_date
from timecapsule.capsule.types import Capsule

RULE = "━" * 20


@dataclass(frozen=True)
class ShareEmail:
    """A pre-filled email, ready to hand to a mail client."""
    recipient: str
    subject: str
    body: str

    @property
    def mailto_url(self) -> str:
        return f"mailto:{self.recipient}?subject={quote(self.subject)}&body={quote(self.body)}"


def compose_email(capsule: Capsule) -> ShareEmail:
    """Build the share email. The capsule must have a recipient."""
    if not capsule.recipient_email:
        raise ValueError(f"Capsule {capsule.id} has no recipient email")

    body = (
        "Hello!\n\nYou have received a Time Capsule message:\n\n"
        f"{RULE}\n"
        f"📦 Title: {capsule.title}\n"
        f"📅 Unlock Date: {format_date(capsule.unlock_date)}\n"
        f"{RULE}\n\n"
        f"📝 Message:\n{capsule.message}\n\n"
    )
    if capsule.predictions:
        body += f"🔮 Predictions:\n{capsule.predictions}\n\n"
    body += (
        f"{RULE}\n"
        f"Created on: {format_date(capsule.created_date)}\n\n"
        "This time capsule was created using TimeCapsule app ⏳"
    )

    return ShareEmail(
        recipient=capsule.recipient_email,
        subject=f"Time Capsule: {capsule.title}",
        body=body,
    )
