"""Phone number validation."""

import re


def is_valid_phone(number: str) -> bool:
    """Accept digits, spaces, hyphens, parentheses, and an optional leading +."""
    if not number:
        return False

    # Must contain at least one digit
    if not re.search(r"\d", number):
        return False

    return re.match(r"^\+?[\d\s\-()]+$", number) is not None
