"""
Email template rendering.

Bodies are rendered with Jinja2 from template files under
shop_emails/template_files/. A site may supply an override directory; templates
found there take precedence over the built-in ones, path for path.

Subjects, headings and additional content are plain strings with literal
``{token}`` placeholders. They are substituted with simple replacement, not
with str.format, so unknown tokens and stray braces pass through untouched.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)

logger = logging.getLogger("templates")

BUILTIN_TEMPLATE_DIR = Path(__file__).parent / "template_files"


class TemplateNotFoundError(ValueError):
    """Raised when no template exists for a template id."""
    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class TemplateRenderError(ValueError):
    """Raised when a template exists but fails to render."""
    def __init__(self, template_id: str, reason: str):
        self.template_id = template_id
        self.reason = reason
        super().__init__(f"Failed to render template {template_id}: {reason}")


class TemplateRenderer:
    """
    Jinja2-backed renderer for email bodies.

    Example:
        renderer = TemplateRenderer()
        html = renderer.render(
            "emails/admin-new-order.html",
            {"order": order, "email_heading": "New Order: #1007"},
            is_html=True,
        )
    """

    def __init__(self, override_dir: Optional[Path] = None):
        """
        Initialize the renderer.

        Args:
            override_dir: Directory searched before the built-in templates.
        """
        loaders = []
        if override_dir is not None:
            loaders.append(FileSystemLoader(str(override_dir)))
        loaders.append(FileSystemLoader(str(BUILTIN_TEMPLATE_DIR)))

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(enabled_extensions=("html",), default=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["money"] = format_money

    def render(self, template_id: str, context: dict[str, Any], is_html: bool) -> str:
        """
        Render a body template.

        Args:
            template_id: Path of the template relative to the template dirs
            context: Variables made available to the template
            is_html: Whether the HTML or the plain text flavour is being rendered

        Returns:
            The rendered body

        Raises:
            TemplateNotFoundError: If no template matches template_id
            TemplateRenderError: If the template fails to render
        """
        try:
            template = self._env.get_template(template_id)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(template_id) from e

        try:
            body = template.render(**{**context, "plain_text": not is_html})
        except TemplateError as e:
            raise TemplateRenderError(template_id, str(e)) from e

        logger.debug(f"Rendered {template_id} ({'html' if is_html else 'plain'})")
        return body


def substitute_placeholders(text: Optional[str], placeholders: dict[str, str]) -> str:
    """Replace each ``{token}`` in text with its value."""
    if not text:
        return ""
    for token, value in placeholders.items():
        text = text.replace(token, value)
    return text


def format_order_date(value: datetime, date_format: Optional[str] = None) -> str:
    """
    Format an order timestamp for display.

    Args:
        value: The timestamp
        date_format: strftime format configured for the site. Without one the
                     date reads like "January 1, 2024".
    """
    if date_format:
        return value.strftime(date_format)
    return f"{value:%B} {value.day}, {value.year}"


def format_money(amount: float, currency: str = "USD") -> str:
    """Format an amount with its currency, e.g. "$12.50" or "12.50 EUR"."""
    if currency == "USD":
        return f"${amount:,.2f}"
    return f"{amount:,.2f} {currency}"
