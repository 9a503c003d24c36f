"""Email address validation."""

import re

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    """Check that ``email`` has the ``local@domain.tld`` shape.

    Exactly one @, no whitespace, and a dot somewhere in the domain part.
    """
    return bool(email) and _EMAIL_PATTERN.match(email) is not None
