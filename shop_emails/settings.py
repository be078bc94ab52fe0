"""
Configuration store and settings schema for transactional emails.

Site options and per-email settings live in a single JSON-backed key-value
store. Each email keeps its settings as one dict under
``woocommerce_<email_id>_settings``; site-wide options (admin address, site
title, date format) are plain keys.

Design decisions:
- The store holds raw values only; defaults are applied here, by the loader
- The settings schema is declared as FormField models so any UI (the HTTP
  API, the CLI) can render and validate it
- Stored "yes"/"no" strings are accepted for checkboxes
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.networks import validate_email

from shop_emails.models import EmailType, NotificationConfig

logger = logging.getLogger("settings")


# Site option keys
ADMIN_EMAIL = "admin_email"
SITE_TITLE = "blogname"
SITE_URL = "siteurl"
DATE_FORMAT = "date_format"
SITE_LOCALE = "site_locale"


class SettingsError(ValueError):
    """Raised when a settings update is rejected."""


# =============================================================================
# Options store
# =============================================================================

class OptionsStore:
    """
    Key-value store for site options and email settings.

    Values are loaded from options.json on first access. Updates are kept in
    memory and written back only when ``persist`` is enabled.
    """

    def __init__(self, data_dir: Optional[Path] = None, persist: bool = False):
        """
        Initialize the store.

        Args:
            data_dir: Directory containing options.json.
                     Defaults to ./data relative to project root.
            persist: Write updates back to options.json.
        """
        if data_dir is None:
            data_dir = Path(__file__).parent.parent / "data"

        self.data_dir = Path(data_dir)
        self.persist = persist
        self._options: Optional[dict[str, Any]] = None

    @property
    def path(self) -> Path:
        return self.data_dir / "options.json"

    def _ensure_loaded(self):
        if self._options is None:
            if self.path.exists():
                with open(self.path, "r") as f:
                    self._options = json.load(f)
            else:
                self._options = {}

    def _save(self):
        if not self.persist:
            return
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._options, f, indent=2, sort_keys=True)

    def get(self, key: str, default: Any = None) -> Any:
        """Get an option value, or default when it was never stored."""
        self._ensure_loaded()
        return self._options.get(key, default)

    def update(self, key: str, value: Any) -> None:
        """Set an option value."""
        self._ensure_loaded()
        self._options[key] = value
        self._save()
        logger.debug(f"Updated option '{key}'")

    def delete(self, key: str) -> bool:
        """Remove an option. Returns False if it was not set."""
        self._ensure_loaded()
        if key not in self._options:
            return False
        del self._options[key]
        self._save()
        return True

    def reload(self):
        """Force reload from options.json."""
        self._options = None


_default_store: Optional[OptionsStore] = None


def get_options_store() -> OptionsStore:
    """Get the default options store singleton."""
    global _default_store
    if _default_store is None:
        _default_store = OptionsStore()
    return _default_store


# =============================================================================
# Settings schema
# =============================================================================

class FormField(BaseModel):
    """One entry of an email's settings form."""
    title: str
    type: str = Field(..., description="checkbox, text, textarea or select")
    default: str = ""
    label: Optional[str] = None
    description: Optional[str] = None
    placeholder: Optional[str] = None
    desc_tip: bool = False
    options: Optional[dict[str, str]] = None


def placeholder_description(placeholders: list[str]) -> str:
    return "Available placeholders: " + ", ".join(placeholders)


def build_form_fields(
    default_subject: str,
    default_heading: str,
    default_additional_content: str,
    placeholders: list[str],
    admin_email: Optional[str] = None,
) -> dict[str, FormField]:
    """
    Settings schema shared by admin-facing emails.

    Args:
        default_subject: Shown as the subject field placeholder
        default_heading: Shown as the heading field placeholder
        default_additional_content: Default value of the additional content field
        placeholders: Tokens the email substitutes, listed in field descriptions
        admin_email: Fallback recipient, mentioned in the recipient description
    """
    placeholder_text = placeholder_description(placeholders)
    return {
        "enabled": FormField(
            title="Enable/Disable",
            type="checkbox",
            label="Enable this email notification",
            default="yes",
        ),
        "recipient": FormField(
            title="Recipient(s)",
            type="text",
            description=(
                "Enter recipients (comma separated) for this email. "
                f"Defaults to {admin_email or '(no admin address configured)'}."
            ),
            placeholder="",
            default="",
        ),
        "subject": FormField(
            title="Subject",
            type="text",
            desc_tip=True,
            description=placeholder_text,
            placeholder=default_subject,
            default="",
        ),
        "heading": FormField(
            title="Email heading",
            type="text",
            desc_tip=True,
            description=placeholder_text,
            placeholder=default_heading,
            default="",
        ),
        "additional_content": FormField(
            title="Additional content",
            type="textarea",
            desc_tip=True,
            description=f"Text to appear below the main email content. {placeholder_text}",
            placeholder="N/A",
            default=default_additional_content,
        ),
        "email_type": FormField(
            title="Email type",
            type="select",
            description="Choose which format of email to send.",
            default=EmailType.HTML.value,
            options={t.value: t.label for t in EmailType},
        ),
    }


# =============================================================================
# Reading settings
# =============================================================================

def settings_key(email_id: str) -> str:
    return f"woocommerce_{email_id}_settings"


def parse_bool(value: Any) -> bool:
    """Checkbox values are stored as "yes"/"no"; real booleans are accepted too."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "yes"


def is_valid_email(address: str) -> bool:
    try:
        validate_email(address)
    except ValueError:
        return False
    return True


def parse_recipients(raw: Optional[str]) -> list[str]:
    """
    Split a comma separated recipient string.

    Entries are trimmed; empty and invalid entries are dropped, order kept.
    """
    if not raw:
        return []
    recipients = []
    for part in raw.split(","):
        address = part.strip()
        if not address:
            continue
        if not is_valid_email(address):
            logger.warning(f"Ignoring invalid recipient address: {address!r}")
            continue
        recipients.append(address)
    return recipients


def parse_email_type(value: Any) -> EmailType:
    if isinstance(value, EmailType):
        return value
    try:
        return EmailType(value)
    except ValueError:
        logger.warning(f"Unknown email type {value!r}, using html")
        return EmailType.HTML


class EmailSettings:
    """
    Read access to one email's stored settings.

    Keys that were never saved fall back to the form field default.
    """

    def __init__(self, store: OptionsStore, email_id: str, fields: dict[str, FormField]):
        self.store = store
        self.email_id = email_id
        self.fields = fields

    @property
    def values(self) -> dict[str, Any]:
        return dict(self.store.get(settings_key(self.email_id)) or {})

    def get_option(self, key: str, empty_value: Optional[str] = None) -> Any:
        """
        Get a setting value.

        Args:
            key: Field name
            empty_value: Returned instead of a stored empty string, if given
        """
        values = self.values
        if key in values:
            value = values[key]
        else:
            field = self.fields.get(key)
            value = field.default if field else None

        if empty_value is not None and value == "":
            return empty_value
        return value

    def current(self) -> dict[str, Any]:
        """All fields with their effective values."""
        return {key: self.get_option(key) for key in self.fields}


def load_notification_config(
    store: OptionsStore,
    email_id: str,
    fields: dict[str, FormField],
) -> NotificationConfig:
    """
    Build the settings snapshot for one trigger.

    An empty recipient setting falls back to the site admin address, used as
    configured. Empty subject and heading settings become None so the email
    uses its defaults.
    """
    settings = EmailSettings(store, email_id, fields)

    recipients = parse_recipients(settings.get_option("recipient"))
    if not recipients:
        admin_email = (store.get(ADMIN_EMAIL) or "").strip()
        recipients = [admin_email] if admin_email else []

    return NotificationConfig(
        enabled=parse_bool(settings.get_option("enabled")),
        recipients=recipients,
        subject_override=settings.get_option("subject") or None,
        heading_override=settings.get_option("heading") or None,
        additional_content=settings.get_option("additional_content"),
        email_type=parse_email_type(settings.get_option("email_type")),
    )


# =============================================================================
# Writing settings
# =============================================================================

def update_email_settings(
    store: OptionsStore,
    email_id: str,
    fields: dict[str, FormField],
    values: dict[str, Any],
) -> dict[str, Any]:
    """
    Validate and save a partial settings update.

    Returns:
        The stored settings dict after the update

    Raises:
        SettingsError: For unknown keys, bad email types or bad recipients
    """
    unknown = sorted(set(values) - set(fields))
    if unknown:
        raise SettingsError(f"Unknown settings for {email_id}: {', '.join(unknown)}")

    cleaned: dict[str, Any] = {}
    for key, value in values.items():
        if key == "enabled":
            if isinstance(value, str) and value.strip().lower() not in ("yes", "no"):
                raise SettingsError(f"enabled must be 'yes' or 'no', got {value!r}")
            cleaned[key] = "yes" if parse_bool(value) else "no"
        elif key == "email_type":
            try:
                cleaned[key] = EmailType(value).value
            except ValueError:
                choices = ", ".join(t.value for t in EmailType)
                raise SettingsError(f"email_type must be one of {choices}, got {value!r}")
        elif key == "recipient":
            value = "" if value is None else str(value)
            invalid = [
                part.strip() for part in value.split(",")
                if part.strip() and not is_valid_email(part.strip())
            ]
            if invalid:
                raise SettingsError(f"Invalid recipient address(es): {', '.join(invalid)}")
            cleaned[key] = value
        else:
            cleaned[key] = "" if value is None else str(value)

    stored = dict(store.get(settings_key(email_id)) or {})
    stored.update(cleaned)
    store.update(settings_key(email_id), stored)
    logger.info(f"Saved settings for {email_id}: {', '.join(sorted(cleaned))}")
    return stored
