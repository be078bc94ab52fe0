"""
Scoped locale switching for email rendering.

Emails render in the site locale, which can differ from the locale of the
request that triggered them. The switch is scoped: the previous locale is
restored on every exit path, including exceptions raised while rendering.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

DEFAULT_LOCALE = "en_US"

_current_locale: ContextVar[str] = ContextVar("email_locale", default=DEFAULT_LOCALE)


def get_locale() -> str:
    """The locale emails are currently rendered in."""
    return _current_locale.get()


@contextmanager
def site_locale(locale: Optional[str]) -> Iterator[str]:
    """
    Render in the given locale for the duration of the block.

    A falsy locale keeps the current one.
    """
    token = _current_locale.set(locale or _current_locale.get())
    try:
        yield _current_locale.get()
    finally:
        _current_locale.reset(token)
