"""
Contact detail helpers
"""
import re

PHONE_PATTERN = re.compile(r'^[+]?[0-9]{10,15}$')


def normalize_phone(raw):
    """
    Strip spaces and hyphens from a phone number.

    Returns the normalised number, or None if it does not look like a
    10 to 15 digit number with an optional leading '+'.
    """
    if raw is None:
        return None
    cleaned = re.sub(r'[\s-]', '', str(raw))
    if not PHONE_PATTERN.match(cleaned):
        return None
    return cleaned
