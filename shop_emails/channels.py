"""
Mock mail dispatcher for transactional emails.

The dispatcher simulates sending by logging each message and keeping it in
an outbox. In a real deployment this would hand messages to an MTA or a
provider such as SendGrid, AWS SES or Mailgun.

Design decisions:
- All sends are logged for visibility
- The outbox is kept for test assertions and the /outbox endpoint
- Failures can be simulated; they are recorded, never raised
- Body composition per email type lives here, next to the transport
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from typing import Optional

from shop_emails.models import EmailType

# Configure logging for notification channels
logger = logging.getLogger("notifications")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S"
    ))
    logger.addHandler(handler)
logger.setLevel(logging.INFO)


@dataclass
class NotificationResult:
    """
    Result of a send attempt.

    Captures success/failure and the full message for debugging and testing.
    """
    success: bool
    recipients: list[str]
    subject: str
    body: str
    headers: dict[str, str] = field(default_factory=dict)
    attachments: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.utcnow)
    error: Optional[str] = None

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "text/plain")

    def __str__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"{status} EMAIL to {', '.join(self.recipients)}: {self.subject}"


class EmailChannel:
    """
    Mock email transport.

    Logs sends and tracks them for test assertions.
    Can simulate failures for testing error handling.
    """

    def __init__(self, fail_rate: float = 0.0, from_addr: str = "shop@example.com"):
        """
        Initialize the email channel.

        Args:
            fail_rate: Probability of send failure (0.0 to 1.0), for testing.
            from_addr: Sender address (for logging)
        """
        self.fail_rate = fail_rate
        self.from_addr = from_addr
        self.sent_messages: list[NotificationResult] = []

    def send(
        self,
        recipients: list[str],
        subject: str,
        body: str,
        headers: Optional[dict[str, str]] = None,
        attachments: Optional[list[str]] = None,
    ) -> NotificationResult:
        """
        Send an email (mock implementation).

        Args:
            recipients: Recipient addresses
            subject: Subject line
            body: Body as produced by compose_body
            headers: Extra headers, including Content-Type
            attachments: File paths to attach

        Returns:
            NotificationResult indicating success/failure
        """
        result = NotificationResult(
            success=True,
            recipients=list(recipients),
            subject=subject,
            body=body,
            headers=dict(headers or {}),
            attachments=list(attachments or []),
        )

        if self.fail_rate and random.random() < self.fail_rate:
            result.success = False
            result.error = "Simulated email delivery failure"
            logger.error(
                f"[EMAIL FAILED] To: {', '.join(recipients)} | Subject: {subject} | "
                f"Error: {result.error}"
            )
        else:
            logger.info(f"[EMAIL] To: {', '.join(recipients)} | Subject: {subject}")
            logger.debug(f"[EMAIL BODY] {body}")

        self.sent_messages.append(result)
        return result

    def get_sent_count(self) -> int:
        """Get the number of messages sent (for testing)."""
        return len(self.sent_messages)

    def get_successful_sends(self) -> list[NotificationResult]:
        """Get all successful sends."""
        return [m for m in self.sent_messages if m.success]

    def clear_history(self):
        """Clear sent message history (useful between tests)."""
        self.sent_messages.clear()

    def find_message_to(self, recipient: str) -> Optional[NotificationResult]:
        """Find a message sent to a specific recipient."""
        for msg in self.sent_messages:
            if recipient in msg.recipients:
                return msg
        return None


def compose_body(
    email_type: EmailType,
    html_body: Optional[str],
    plain_body: Optional[str],
) -> tuple[str, str]:
    """
    Select or build the body to dispatch for an email type.

    Multipart bodies are a MIME multipart/alternative payload holding the
    plain part first and the HTML part second; the returned content type
    carries the boundary.

    Returns:
        Tuple of (body, content_type)

    Raises:
        ValueError: If a body the email type needs was not rendered
    """
    if email_type == EmailType.PLAIN:
        if plain_body is None:
            raise ValueError("plain email requires a plain text body")
        return plain_body, EmailType.PLAIN.content_type

    if email_type == EmailType.HTML:
        if html_body is None:
            raise ValueError("html email requires an HTML body")
        return html_body, EmailType.HTML.content_type

    if html_body is None or plain_body is None:
        raise ValueError("multipart email requires both HTML and plain text bodies")

    message = EmailMessage()
    message.set_content(plain_body)
    message.add_alternative(html_body, subtype="html")

    # Headers end at the first blank line; everything after is the payload
    _, _, payload = message.as_string().partition("\n\n")
    return payload, str(message["Content-Type"])
