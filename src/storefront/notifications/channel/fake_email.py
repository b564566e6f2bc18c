"""In-memory email channel used in development and tests."""

from uuid import uuid4

from storefront.notifications.channel.email_port import EmailPort
from storefront.utils.logging import logger


class FakeEmailAdapter(EmailPort):
    """Keeps every accepted message in ``sent_emails`` instead of talking to SMTP.

    ``configure(should_succeed=False)`` makes every send fail with
    ``failure_reason``; ``bounce`` fails only the listed recipients.
    """

    name = "fake"

    def __init__(self):
        self.sent_emails: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
        self.bounced: set[str] = set()

    def configure(self, should_succeed: bool = True, failure_reason: str = "Email delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def bounce(self, *addresses: str):
        self.bounced.update(address.lower() for address in addresses)

    def emails_to(self, address: str) -> list[dict]:
        return [email for email in self.sent_emails if email["to"].lower() == address.lower()]

    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> dict:
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}
        if to.lower() in self.bounced:
            return {"message_id": None, "status": "failed", "error": f"Mailbox {to} rejected the message"}

        message_id = f"fake-{uuid4().hex[:16]}"
        self.sent_emails.append(
            {"message_id": message_id, "to": to, "subject": subject, "body": body, "html_body": html_body}
        )
        logger.debug("Email captured", to=to, subject=subject, message_id=message_id)
        return {"message_id": message_id, "status": "sent"}
