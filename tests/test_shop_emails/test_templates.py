"""
Tests for template rendering and placeholder substitution.
"""

import pytest
from datetime import datetime

from shop_emails.models import Order
from shop_emails.templates import (
    TemplateNotFoundError,
    TemplateRenderError,
    TemplateRenderer,
    format_money,
    format_order_date,
    substitute_placeholders,
)

HTML_TEMPLATE = "emails/admin-new-order.html"
PLAIN_TEMPLATE = "emails/plain/admin-new-order.txt"


@pytest.fixture
def order() -> Order:
    return Order(
        id=9,
        number="2009",
        created_at=datetime(2024, 5, 4, 12, 0),
        billing_first_name="Dana",
        billing_last_name="<Script>",
        billing_email="dana@example.com",
        line_items=[{"name": "Cable & Plug", "quantity": 2, "unit_price": 4.25}],
        total=8.5,
    )


def context_for(order: Order, **overrides) -> dict:
    context = {
        "order": order,
        "order_date": "May 4, 2024",
        "email_heading": "New Order: #2009",
        "additional_content": "Thanks!",
        "sent_to_admin": True,
        "email": None,
        "site_title": "Example Shop",
        "locale": "en_US",
    }
    context.update(overrides)
    return context


class TestTemplateRenderer:

    def test_render_html(self, order):
        body = TemplateRenderer().render(HTML_TEMPLATE, context_for(order), is_html=True)

        assert "<h1>New Order: #2009</h1>" in body
        assert "[Order #2009]" in body
        assert "$8.50" in body
        assert "Thanks!" in body
        assert '<html lang="en_US">' in body

    def test_html_is_escaped(self, order):
        body = TemplateRenderer().render(HTML_TEMPLATE, context_for(order), is_html=True)

        assert "&lt;Script&gt;" in body
        assert "Cable &amp; Plug" in body

    def test_render_plain(self, order):
        body = TemplateRenderer().render(PLAIN_TEMPLATE, context_for(order), is_html=False)

        assert body.startswith("= New Order: #2009 =")
        assert "Dana <Script>" in body
        assert "Cable & Plug x 2 = $8.50" in body
        assert "Billing email: dana@example.com" in body

    def test_plain_skips_empty_additional_content(self, order):
        body = TemplateRenderer().render(
            PLAIN_TEMPLATE, context_for(order, additional_content=""), is_html=False
        )

        assert "Thanks!" not in body

    def test_unknown_template(self, order):
        with pytest.raises(TemplateNotFoundError):
            TemplateRenderer().render("emails/nope.html", context_for(order), is_html=True)

    def test_missing_variable_is_render_error(self, order):
        context = context_for(order)
        del context["email_heading"]

        with pytest.raises(TemplateRenderError):
            TemplateRenderer().render(HTML_TEMPLATE, context, is_html=True)

    def test_override_dir_takes_precedence(self, order, tmp_path):
        override = tmp_path / "emails"
        override.mkdir()
        (override / "admin-new-order.html").write_text("<p>Custom {{ order.order_number }}</p>")

        body = TemplateRenderer(override_dir=tmp_path).render(
            HTML_TEMPLATE, context_for(order), is_html=True
        )

        assert body == "<p>Custom 2009</p>"

    def test_override_dir_falls_back_to_builtin(self, order, tmp_path):
        body = TemplateRenderer(override_dir=tmp_path).render(
            PLAIN_TEMPLATE, context_for(order), is_html=False
        )

        assert "[Order #2009]" in body


class TestSubstitutePlaceholders:

    def test_replaces_tokens(self):
        text = substitute_placeholders(
            "[{site_title}]: New order #{order_number}",
            {"{site_title}": "Shop", "{order_number}": "1042"},
        )

        assert text == "[Shop]: New order #1042"

    def test_unknown_tokens_and_braces_are_kept(self):
        text = substitute_placeholders("{unknown} {} #{order_number}", {"{order_number}": "7"})

        assert text == "{unknown} {} #7"

    def test_empty_text(self):
        assert substitute_placeholders(None, {"{a}": "b"}) == ""
        assert substitute_placeholders("", {"{a}": "b"}) == ""


class TestFormatting:

    def test_default_date_format(self):
        assert format_order_date(datetime(2024, 1, 1, 9, 30)) == "January 1, 2024"

    def test_custom_date_format(self):
        assert format_order_date(datetime(2024, 1, 1), "%d/%m/%Y") == "01/01/2024"

    def test_format_money(self):
        assert format_money(1234.5) == "$1,234.50"
        assert format_money(12, "EUR") == "12.00 EUR"
