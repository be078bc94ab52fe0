"""
Registry of transactional emails known to the shop.

Extensions add their emails here, keyed by class name, and the API and CLI
look them up by email id.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger("email_registry")


class EmailRegistry:
    """Ordered collection of registered email instances."""

    def __init__(self):
        self._emails: dict[str, Any] = {}

    def register(self, class_name: str, email: Any) -> None:
        """
        Add an email under its class name.

        Registering the same class name again replaces the earlier instance.
        """
        if class_name in self._emails:
            logger.warning(f"Replacing registered email {class_name}")
        self._emails[class_name] = email
        logger.debug(f"Registered email {class_name} ({email.id})")

    def get(self, email_id: str) -> Optional[Any]:
        """Find an email by its id (not its class name)."""
        for email in self._emails.values():
            if email.id == email_id:
                return email
        return None

    def all(self) -> list[Any]:
        return list(self._emails.values())

    def class_names(self) -> list[str]:
        return list(self._emails)

    def __contains__(self, class_name: str) -> bool:
        return class_name in self._emails

    def __len__(self) -> int:
        return len(self._emails)
