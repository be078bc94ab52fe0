"""
Pending Order email extension.

Registers an admin email that is sent whenever a customer places an order.
"""

from pending_order.order_email import PendingOrderEmail
from shop_emails.registry import EmailRegistry

EMAIL_CLASS_NAME = "WC_Pending_Order_Email"


def add_pending_order_email(registry: EmailRegistry, **collaborators) -> PendingOrderEmail:
    """
    Add the Pending Order email to the list of emails the shop loads.

    Args:
        registry: The shop's email registry
        **collaborators: Passed through to PendingOrderEmail

    Returns:
        The registered email instance
    """
    email = PendingOrderEmail(**collaborators)
    registry.register(EMAIL_CLASS_NAME, email)
    return email


__all__ = ["PendingOrderEmail", "add_pending_order_email", "EMAIL_CLASS_NAME"]
