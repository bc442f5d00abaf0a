"""Models package; domain models are aggregated in `filmacademy.models.registry`."""

from filmacademy.models.base import Base

__all__ = ["Base"]
