"""
Pending Order email.

Notifies shop administrators when a customer places an order. The email
subscribes to OrderCreated events and, for each one:

1. Resolves the order (from the event, or by id through the repository)
2. Loads its settings snapshot
3. Computes the placeholder values for the order
4. Checks that it is enabled and has recipients
5. Renders subject, heading and body in the configured format
6. Hands the message to the mail dispatcher, once

Orders that cannot be resolved, a disabled email and an empty recipient list
all end the trigger quietly. Renderer and dispatcher errors are not caught
here.
"""

import logging
from email.utils import formataddr
from typing import Optional, Union
from urllib.parse import urlparse

from hooks.event_bus import Event, EventBus, get_event_bus
from hooks.events import EventTypes
from shop_emails.channels import EmailChannel, compose_body
from shop_emails.data_store import OrderRepository, get_order_repository
from shop_emails.locale import site_locale
from shop_emails.models import EmailType, NotificationConfig, Order, RenderedNotification
from shop_emails.settings import (
    ADMIN_EMAIL,
    DATE_FORMAT,
    SITE_LOCALE,
    SITE_TITLE,
    SITE_URL,
    EmailSettings,
    FormField,
    OptionsStore,
    build_form_fields,
    get_options_store,
    load_notification_config,
)
from shop_emails.templates import (
    TemplateRenderer,
    format_order_date,
    substitute_placeholders,
)

logger = logging.getLogger("pending_order_email")


class PendingOrderEmail:
    """
    Admin notification sent when an order is created.

    Example:
        email = PendingOrderEmail(orders=repo, options=store, dispatcher=channel)
        email.start()

        # Now every OrderCreated event on the bus triggers the email
        ordering.create_order(...)

        # It can also be triggered directly
        email.on_order_created(1007)
    """

    id = "wc_pending_order"
    title = "Pending Order"
    description = "Pending Order Notification emails are sent when a customer places an order"

    template_html = "emails/admin-new-order.html"
    template_plain = "emails/plain/admin-new-order.txt"

    placeholder_tokens = (
        "{site_title}",
        "{site_address}",
        "{site_url}",
        "{order_date}",
        "{order_number}",
    )

    def __init__(
        self,
        orders: Optional[OrderRepository] = None,
        options: Optional[OptionsStore] = None,
        renderer: Optional[TemplateRenderer] = None,
        dispatcher: Optional[EmailChannel] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Initialize the email.

        Args:
            orders: Order lookup (defaults to singleton)
            options: Site options and email settings (defaults to singleton)
            renderer: Body template renderer (defaults to new instance)
            dispatcher: Mail dispatcher (defaults to new instance)
            event_bus: Bus to subscribe to on start() (defaults to singleton)
        """
        self.orders = orders or get_order_repository()
        self.options = options or get_options_store()
        self.renderer = renderer or TemplateRenderer()
        self.dispatcher = dispatcher or EmailChannel()
        self.event_bus = event_bus or get_event_bus()

        self._started = False

    # =========================================================================
    # Subscription
    # =========================================================================

    def start(self) -> None:
        """Subscribe to OrderCreated events."""
        if self._started:
            logger.warning("PendingOrderEmail already started")
            return

        self.event_bus.subscribe(EventTypes.ORDER_CREATED, self._handle_order_created)
        self._started = True
        logger.info("PendingOrderEmail started - subscribed to OrderCreated")

    def stop(self) -> None:
        """Unsubscribe from OrderCreated events."""
        if not self._started:
            return

        self.event_bus.unsubscribe(EventTypes.ORDER_CREATED, self._handle_order_created)
        self._started = False
        logger.info("PendingOrderEmail stopped")

    def _handle_order_created(self, event: Event) -> None:
        payload = event.payload
        self.on_order_created(payload.get("order_id"), payload.get("order"))

    # =========================================================================
    # Defaults and settings
    # =========================================================================

    def get_default_subject(self) -> str:
        return "[{site_title}]: New order #{order_number}"

    def get_default_heading(self) -> str:
        return "New Order: #{order_number}"

    def get_default_additional_content(self) -> str:
        """Default content to show below the main email content."""
        return "Congrats on the order."

    def form_fields(self) -> dict[str, FormField]:
        """Settings schema for this email."""
        return build_form_fields(
            default_subject=self.get_default_subject(),
            default_heading=self.get_default_heading(),
            default_additional_content=self.get_default_additional_content(),
            placeholders=list(self.placeholder_tokens),
            admin_email=self.options.get(ADMIN_EMAIL),
        )

    @property
    def settings(self) -> EmailSettings:
        return EmailSettings(self.options, self.id, self.form_fields())

    def load_config(self) -> NotificationConfig:
        return load_notification_config(self.options, self.id, self.form_fields())

    def is_enabled(self) -> bool:
        return self.load_config().enabled

    # =========================================================================
    # Placeholders and headers
    # =========================================================================

    def site_placeholders(self) -> dict[str, str]:
        """Site-wide tokens; tokens whose option is not set are left out."""
        placeholders = {}
        site_title = self.options.get(SITE_TITLE)
        if site_title:
            placeholders["{site_title}"] = site_title
        site_url = self.options.get(SITE_URL)
        if site_url:
            placeholders["{site_url}"] = site_url
            placeholders["{site_address}"] = urlparse(site_url).netloc or site_url
        return placeholders

    def order_placeholders(self, order: Order) -> dict[str, str]:
        return {
            "{order_date}": format_order_date(order.created_at, self.options.get(DATE_FORMAT)),
            "{order_number}": order.order_number,
        }

    def get_headers(self, order: Order, content_type: str) -> dict[str, str]:
        """
        Message headers.

        Admin emails reply to the customer when the order has a billing
        email and name.
        """
        headers = {"Content-Type": content_type}
        if order.billing_email and order.billing_full_name:
            headers["Reply-To"] = formataddr((order.billing_full_name, order.billing_email))
        return headers

    # =========================================================================
    # Trigger
    # =========================================================================

    def resolve_order(
        self,
        order_id: Optional[Union[int, str]],
        order: Optional[Order] = None,
    ) -> Optional[Order]:
        if isinstance(order, Order):
            return order
        if order_id:
            return self.orders.get_order(order_id)
        return None

    def on_order_created(
        self,
        order_id: Optional[Union[int, str]],
        order: Optional[Order] = None,
    ) -> Optional[RenderedNotification]:
        """
        Decide whether to send the email for a new order, and send it.

        Args:
            order_id: Id of the created order
            order: The loaded order, if the caller has it

        Returns:
            The dispatched notification, or None when nothing was sent
        """
        order = self.resolve_order(order_id, order)
        if order is None:
            logger.info(f"Order {order_id!r} could not be loaded, skipping {self.id}")
            return None

        config = self.load_config()
        placeholders = {**self.site_placeholders(), **self.order_placeholders(order)}

        if not config.enabled:
            logger.debug(f"{self.id} is disabled, skipping order {order.id}")
            return None
        if not config.recipients:
            logger.info(f"{self.id} has no recipients, skipping order {order.id}")
            return None

        with site_locale(self.options.get(SITE_LOCALE)) as locale:
            notification = self._render(order, config, placeholders, locale)

        self.dispatcher.send(
            notification.recipients,
            notification.subject,
            notification.body,
            notification.headers,
            notification.attachments,
        )
        logger.info(f"Sent {self.id} for order #{order.order_number} to {len(config.recipients)} recipient(s)")
        return notification

    def _render(
        self,
        order: Order,
        config: NotificationConfig,
        placeholders: dict[str, str],
        locale: str,
    ) -> RenderedNotification:
        subject = substitute_placeholders(
            config.subject_override or self.get_default_subject(), placeholders
        )
        heading = substitute_placeholders(
            config.heading_override or self.get_default_heading(), placeholders
        )

        additional_content = config.additional_content
        if additional_content is None:
            additional_content = self.get_default_additional_content()
        additional_content = substitute_placeholders(additional_content, placeholders)

        context = {
            "order": order,
            "order_date": placeholders["{order_date}"],
            "email_heading": heading,
            "additional_content": additional_content,
            "sent_to_admin": True,
            "email": self,
            "site_title": self.options.get(SITE_TITLE),
            "locale": locale,
        }

        html_body = None
        plain_body = None
        if config.email_type in (EmailType.HTML, EmailType.MULTIPART):
            html_body = self.renderer.render(self.template_html, context, is_html=True)
        if config.email_type in (EmailType.PLAIN, EmailType.MULTIPART):
            plain_body = self.renderer.render(self.template_plain, context, is_html=False)

        body, content_type = compose_body(config.email_type, html_body, plain_body)

        return RenderedNotification(
            recipients=config.recipients,
            subject=subject,
            heading=heading,
            email_type=config.email_type,
            html_body=html_body,
            plain_body=plain_body,
            body=body,
            headers=self.get_headers(order, content_type),
            attachments=[],
        )
