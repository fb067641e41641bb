"""Database repositories."""

from .key_values import KeyValueRepository, key_values

__all__ = ["KeyValueRepository", "key_values"]
