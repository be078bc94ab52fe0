"""
FastAPI application for the shop email extension.

This application provides:
1. Email listing and settings endpoints (/emails/...)
2. Order creation, which triggers the Pending Order email (/orders)
3. Manual re-triggering of an email for an order
4. The dispatcher outbox, for inspecting what was sent (/outbox)

Run with:
    uv run uvicorn api.main:app --reload

Then visit http://localhost:8000/docs for interactive API documentation.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional, Union

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from hooks.event_bus import EventBus
from hooks.ordering import OrderingService
from pending_order import add_pending_order_email
from shop_emails.channels import EmailChannel, NotificationResult
from shop_emails.data_store import OrderRepository
from shop_emails.models import LineItem, Order, RenderedNotification
from shop_emails.registry import EmailRegistry
from shop_emails.settings import FormField, OptionsStore, SettingsError, update_email_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)


# =============================================================================
# Shop wiring
# =============================================================================

class Shop:
    """All collaborators of one running shop, wired together."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.event_bus = EventBus()
        self.orders = OrderRepository(data_dir)
        self.options = OptionsStore(data_dir)
        self.dispatcher = EmailChannel()
        self.registry = EmailRegistry()
        self.ordering = OrderingService(event_bus=self.event_bus, orders=self.orders)

        add_pending_order_email(
            self.registry,
            orders=self.orders,
            options=self.options,
            dispatcher=self.dispatcher,
            event_bus=self.event_bus,
        )
        for email in self.registry.all():
            email.start()

    def stop(self) -> None:
        for email in self.registry.all():
            email.stop()


_shop: Optional[Shop] = None


def get_shop() -> Shop:
    """Get the shop singleton (overridable as a FastAPI dependency)."""
    global _shop
    if _shop is None:
        _shop = Shop()
    return _shop


# =============================================================================
# Request / response models
# =============================================================================

class EmailSummary(BaseModel):
    id: str
    title: str
    description: str
    enabled: bool


class EmailSettingsResponse(BaseModel):
    id: str
    fields: dict[str, FormField]
    values: dict[str, Any]


class EmailSettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their stored value."""
    enabled: Optional[Union[bool, str]] = None
    recipient: Optional[str] = None
    subject: Optional[str] = None
    heading: Optional[str] = None
    additional_content: Optional[str] = None
    email_type: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class OrderCreateRequest(BaseModel):
    line_items: list[LineItem] = Field(..., min_length=1)
    billing_first_name: str = ""
    billing_last_name: str = ""
    billing_email: Optional[EmailStr] = None
    number: Optional[str] = None
    currency: str = "USD"
    include_order: bool = Field(
        default=True,
        description="Send the loaded order with the event instead of only its id",
    )


class SentMessage(BaseModel):
    recipients: list[str]
    subject: str
    content_type: str
    success: bool
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: NotificationResult) -> "SentMessage":
        return cls(
            recipients=result.recipients,
            subject=result.subject,
            content_type=result.content_type,
            success=result.success,
            error=result.error,
        )


class OrderCreateResponse(BaseModel):
    order: Order
    notifications_sent: int
    messages: list[SentMessage]


class TriggerResponse(BaseModel):
    sent: bool
    notification: Optional[RenderedNotification] = None


# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logging.info("Starting shop email API")
    yield
    logging.info("Shutting down")


app = FastAPI(
    title="Pending Order Email",
    description="""
    Admin notification email sent when a customer places an order.

    ## Endpoints

    - `/emails` - Registered emails and their settings
    - `/orders` - Place an order (triggers the Pending Order email)
    - `/emails/{email_id}/trigger/{order_id}` - Re-send an email for an order
    - `/outbox` - Messages handed to the mail dispatcher
    """,
    version="1.0.0",
    lifespan=lifespan,
)


def _get_email(shop: Shop, email_id: str):
    email = shop.registry.get(email_id)
    if email is None:
        raise HTTPException(status_code=404, detail=f"Email not found: {email_id}")
    return email


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "pending-order-email"}


# =============================================================================
# Emails
# =============================================================================

@app.get("/emails", response_model=list[EmailSummary], tags=["Emails"])
def list_emails(shop: Shop = Depends(get_shop)):
    """List registered emails."""
    return [
        EmailSummary(
            id=email.id,
            title=email.title,
            description=email.description,
            enabled=email.is_enabled(),
        )
        for email in shop.registry.all()
    ]


@app.get("/emails/{email_id}/settings", response_model=EmailSettingsResponse, tags=["Emails"])
def get_email_settings(email_id: str, shop: Shop = Depends(get_shop)):
    """Settings form and current values of an email."""
    email = _get_email(shop, email_id)
    return EmailSettingsResponse(
        id=email.id,
        fields=email.form_fields(),
        values=email.settings.current(),
    )


@app.put("/emails/{email_id}/settings", response_model=EmailSettingsResponse, tags=["Emails"])
def put_email_settings(
    email_id: str,
    update: EmailSettingsUpdate,
    shop: Shop = Depends(get_shop),
):
    """Update some or all settings of an email."""
    email = _get_email(shop, email_id)
    try:
        update_email_settings(
            shop.options,
            email.id,
            email.form_fields(),
            update.model_dump(exclude_unset=True),
        )
    except SettingsError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return EmailSettingsResponse(
        id=email.id,
        fields=email.form_fields(),
        values=email.settings.current(),
    )


@app.post(
    "/emails/{email_id}/trigger/{order_id}",
    response_model=TriggerResponse,
    tags=["Emails"],
)
def trigger_email(email_id: str, order_id: int, shop: Shop = Depends(get_shop)):
    """
    Trigger an email for an existing order.

    Orders that cannot be loaded, a disabled email or missing recipients
    result in sent=false; this is not an error.
    """
    email = _get_email(shop, email_id)
    notification = email.on_order_created(order_id)
    return TriggerResponse(sent=notification is not None, notification=notification)


# =============================================================================
# Orders
# =============================================================================

@app.post("/orders", response_model=OrderCreateResponse, status_code=201, tags=["Orders"])
def create_order(request: OrderCreateRequest, shop: Shop = Depends(get_shop)):
    """
    Place an order.

    Publishes OrderCreated; the response lists the emails this produced.
    """
    already_sent = shop.dispatcher.get_sent_count()
    order = shop.ordering.create_order(
        line_items=[item.model_dump() for item in request.line_items],
        billing_first_name=request.billing_first_name,
        billing_last_name=request.billing_last_name,
        billing_email=request.billing_email,
        number=request.number,
        currency=request.currency,
        include_order=request.include_order,
    )
    new_messages = shop.dispatcher.sent_messages[already_sent:]
    return OrderCreateResponse(
        order=order,
        notifications_sent=len(new_messages),
        messages=[SentMessage.from_result(m) for m in new_messages],
    )


@app.get("/orders/{order_id}", response_model=Order, tags=["Orders"])
def get_order(order_id: int, shop: Shop = Depends(get_shop)):
    order = shop.orders.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order not found: {order_id}")
    return order


# =============================================================================
# Outbox
# =============================================================================

@app.get("/outbox", response_model=list[SentMessage], tags=["Outbox"])
def get_outbox(shop: Shop = Depends(get_shop)):
    """Messages handed to the mail dispatcher so far."""
    return [SentMessage.from_result(m) for m in shop.dispatcher.sent_messages]


@app.delete("/outbox", status_code=204, tags=["Outbox"])
def clear_outbox(shop: Shop = Depends(get_shop)):
    shop.dispatcher.clear_history()
