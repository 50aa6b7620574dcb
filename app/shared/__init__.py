"""Shared building blocks used across features."""

from app.shared.models import StringIdMixin, TimestampMixin, generate_id

__all__ = [
    "StringIdMixin",
    "TimestampMixin",
    "generate_id",
]
