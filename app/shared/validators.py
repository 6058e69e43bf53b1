"""Shared validation utilities"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def parse_email_list(raw: Optional[str]) -> list[str]:
    """
    Parse a comma-separated address list.

    Entries are trimmed and empty entries dropped. Malformed addresses are
    kept as-is (the transport reports them) but logged.
    """
    emails = []
    for entry in (raw or "").split(","):
        entry = entry.strip()
        if not entry:
            continue
        try:
            validate_email(entry)
        except ValueError:
            logger.warning(f"⚠️ Organizer address looks malformed: {entry}")
        emails.append(entry)
    return emails


def clean_optional_text(value: Optional[str]) -> Optional[str]:
    """Collapse blank strings to None"""
    if value is None or not value.strip():
        return None
    return value
