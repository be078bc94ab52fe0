"""
Shop email framework.

This package contains the collaborators a transactional email is built from:
- Domain models (Order, NotificationConfig, RenderedNotification)
- Order repository backed by JSON fixtures
- Options store and settings schema
- Jinja2 template renderer
- Mock mail dispatcher
- Email registry
"""

from shop_emails.models import (
    Order,
    LineItem,
    OrderStatus,
    EmailType,
    NotificationConfig,
    RenderedNotification,
)
from shop_emails.data_store import OrderRepository
from shop_emails.settings import OptionsStore, FormField, SettingsError
from shop_emails.templates import TemplateRenderer
from shop_emails.channels import EmailChannel, NotificationResult
from shop_emails.registry import EmailRegistry

__all__ = [
    "Order",
    "LineItem",
    "OrderStatus",
    "EmailType",
    "NotificationConfig",
    "RenderedNotification",
    "OrderRepository",
    "OptionsStore",
    "FormField",
    "SettingsError",
    "TemplateRenderer",
    "EmailChannel",
    "NotificationResult",
    "EmailRegistry",
]
