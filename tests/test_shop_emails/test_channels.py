"""
Tests for the mock mail dispatcher and body composition.
"""

import pytest
from email import message_from_string
from email.policy import default as default_policy

from shop_emails.channels import EmailChannel, NotificationResult, compose_body
from shop_emails.models import EmailType


class TestEmailChannel:
    """Tests for the mock email transport."""

    def test_send_email_success(self, dispatcher: EmailChannel):
        result = dispatcher.send(
            ["test@example.com"],
            "Test Subject",
            "<p>Body</p>",
            {"Content-Type": "text/html"},
            [],
        )

        assert result.success is True
        assert result.recipients == ["test@example.com"]
        assert result.subject == "Test Subject"
        assert result.body == "<p>Body</p>"
        assert result.content_type == "text/html"
        assert result.attachments == []
        assert result.error is None

    def test_tracks_sent_messages(self, dispatcher: EmailChannel):
        dispatcher.send(["a@example.com"], "Subject A", "Body A")
        dispatcher.send(["b@example.com", "c@example.com"], "Subject B", "Body B")

        assert dispatcher.get_sent_count() == 2
        assert dispatcher.sent_messages[1].recipients == ["b@example.com", "c@example.com"]

    def test_find_message_to(self, dispatcher: EmailChannel):
        dispatcher.send(["target@example.com", "cc@example.com"], "Hello", "World")
        dispatcher.send(["other@example.com"], "Hi", "There")

        assert dispatcher.find_message_to("cc@example.com").subject == "Hello"
        assert dispatcher.find_message_to("nobody@example.com") is None

    def test_clear_history(self, dispatcher: EmailChannel):
        dispatcher.send(["test@example.com"], "Test", "Body")
        dispatcher.clear_history()

        assert dispatcher.get_sent_count() == 0

    def test_simulated_failure_is_recorded_not_raised(self):
        channel = EmailChannel(fail_rate=1.0)

        result = channel.send(["test@example.com"], "Test", "Body")

        assert result.success is False
        assert result.error is not None
        assert channel.get_sent_count() == 1
        assert channel.get_successful_sends() == []

    def test_default_content_type(self):
        result = NotificationResult(success=True, recipients=["a@x.com"], subject="S", body="B")

        assert result.content_type == "text/plain"
        assert "a@x.com" in str(result)


class TestComposeBody:

    def test_plain(self):
        assert compose_body(EmailType.PLAIN, None, "text") == ("text", "text/plain")

    def test_html(self):
        assert compose_body(EmailType.HTML, "<p>x</p>", None) == ("<p>x</p>", "text/html")

    def test_multipart_payload_parses_as_alternative(self):
        body, content_type = compose_body(EmailType.MULTIPART, "<p>Hello</p>", "Hello")

        raw = f"Content-Type: {content_type}\nMIME-Version: 1.0\n\n{body}"
        message = message_from_string(raw, policy=default_policy)

        assert message.get_content_type() == "multipart/alternative"
        parts = list(message.iter_parts())
        assert [p.get_content_type() for p in parts] == ["text/plain", "text/html"]
        assert parts[0].get_content().strip() == "Hello"
        assert parts[1].get_content().strip() == "<p>Hello</p>"

    @pytest.mark.parametrize("email_type,html,plain", [
        (EmailType.PLAIN, "<p>x</p>", None),
        (EmailType.HTML, None, "x"),
        (EmailType.MULTIPART, "<p>x</p>", None),
        (EmailType.MULTIPART, None, "x"),
    ])
    def test_missing_body_is_rejected(self, email_type, html, plain):
        with pytest.raises(ValueError):
            compose_body(email_type, html, plain)
