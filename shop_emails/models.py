"""
Domain models for the shop email framework.

These models describe the records a transactional email works with: the
order that triggered it, the per-email settings snapshot, and the fully
rendered message handed to the mail dispatcher.

Design decisions:
- Using Pydantic for validation and serialization
- NotificationConfig is frozen: it is a snapshot for a single trigger
- Orders are read-only from the email's point of view
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


# =============================================================================
# Enums
# =============================================================================

class OrderStatus(str, Enum):
    """Order lifecycle states as the shop reports them."""
    PENDING = "pending"           # Created, awaiting payment
    PROCESSING = "processing"     # Paid, being fulfilled
    ON_HOLD = "on-hold"           # Awaiting manual action
    COMPLETED = "completed"       # Fulfilled
    CANCELLED = "cancelled"       # Cancelled by admin or customer


class EmailType(str, Enum):
    """
    Output format of an email.

    Multipart sends both representations so the mail client can pick one.
    """
    PLAIN = "plain"
    HTML = "html"
    MULTIPART = "multipart"

    @property
    def content_type(self) -> str:
        return {
            EmailType.PLAIN: "text/plain",
            EmailType.HTML: "text/html",
            EmailType.MULTIPART: "multipart/alternative",
        }[self]

    @property
    def label(self) -> str:
        """Human readable name used in the settings schema."""
        return {
            EmailType.PLAIN: "Plain text",
            EmailType.HTML: "HTML",
            EmailType.MULTIPART: "Multipart",
        }[self]


# =============================================================================
# Orders
# =============================================================================

class LineItem(BaseModel):
    """A single product line within an order."""
    name: str = Field(..., description="Product name at time of order")
    quantity: int = Field(..., ge=1, description="Quantity ordered")
    unit_price: float = Field(..., ge=0, description="Price at time of order")

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price


class Order(BaseModel):
    """
    Order record supplied by the shop.

    `id` is the internal identifier; `number` is the human readable order
    number shown to people. Shops that do not customise numbering simply
    display the id.
    """
    id: int = Field(..., ge=1, description="Internal order identifier")
    number: Optional[str] = Field(
        default=None,
        description="Human readable order number (defaults to the id)"
    )
    status: OrderStatus = Field(default=OrderStatus.PENDING)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    billing_first_name: str = Field(default="")
    billing_last_name: str = Field(default="")
    billing_email: Optional[str] = Field(default=None)
    currency: str = Field(default="USD")
    line_items: list[LineItem] = Field(default_factory=list)
    total: float = Field(..., ge=0, description="Order total")

    model_config = ConfigDict(use_enum_values=True)

    @property
    def order_number(self) -> str:
        """The number people see, distinct from the internal id."""
        return self.number or str(self.id)

    @property
    def billing_full_name(self) -> str:
        return " ".join(
            part for part in (self.billing_first_name, self.billing_last_name) if part
        )

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.line_items)


# =============================================================================
# Email configuration and output
# =============================================================================

class NotificationConfig(BaseModel):
    """
    Settings snapshot for one email, loaded once per trigger.

    Defaults (fallback recipient, built-in subject and heading) are applied
    by the loader in shop_emails.settings, not by the store.
    """
    enabled: bool = True
    recipients: list[str] = Field(default_factory=list)
    subject_override: Optional[str] = None
    heading_override: Optional[str] = None
    additional_content: Optional[str] = None
    email_type: EmailType = EmailType.HTML

    model_config = ConfigDict(frozen=True)


class RenderedNotification(BaseModel):
    """
    A message ready for the mail dispatcher.

    Produced once per successful trigger and consumed immediately.
    """
    recipients: list[str]
    subject: str
    heading: str
    email_type: EmailType
    html_body: Optional[str] = None
    plain_body: Optional[str] = None
    body: str = Field(..., description="Body as dispatched, selected per email type")
    headers: dict[str, str] = Field(default_factory=dict)
    attachments: list[str] = Field(default_factory=list)
