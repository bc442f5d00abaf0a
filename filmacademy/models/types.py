"""Column types that degrade gracefully on SQLite."""

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import ARRAY as PG_ARRAY, JSONB as PG_JSONB


def array_type(item_type):
    """
    Return an ARRAY type that automatically falls back to JSON for SQLite.
    """
    base = PG_ARRAY(item_type)
    return base.with_variant(JSON, "sqlite")


def jsonb_type():
    """
    Return a JSONB type that stores JSON on SQLite.
    """
    return PG_JSONB().with_variant(JSON, "sqlite")


__all__ = ["array_type", "jsonb_type"]
