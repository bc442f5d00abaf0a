"""Small text helpers shared by services."""

from typing import Optional


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def display_name(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    """Join first/last name, returning None when both are empty."""
    parts = [part.strip() for part in (first_name, last_name) if part and part.strip()]
    return " ".join(parts) or None
