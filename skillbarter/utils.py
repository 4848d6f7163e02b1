"""Utility functions for Skill Barter."""
import hashlib
import logging
import re
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


def sanitize_text(value: Optional[str]) -> Optional[str]:
    """
    Sanitize user input by stripping HTML tags and collapsing whitespace.
    Text is stored as typed otherwise; clients render it as plain text.
    Returns None if input is None.
    """
    if value is None:
        return None
    # Strip HTML tags
    clean = re.sub(r"<[^>]+>", "", value)
    # Collapse excessive whitespace
    clean = re.sub(r"\s+", " ", clean).strip()
    return clean


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def email_hash(email: Optional[str]) -> Optional[str]:
    """Gravatar-style md5 of the trimmed, lower-cased email, or None."""
    if not email or not email.strip():
        return None
    return hashlib.md5(email.strip().lower().encode()).hexdigest()
