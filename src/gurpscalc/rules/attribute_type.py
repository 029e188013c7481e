"""Kinds of attribute."""

from enum import StrEnum


class AttributeType(StrEnum):
    """How an attribute's value is stored and displayed."""

    INTEGER = "integer"
    DECIMAL = "decimal"
    POOL = "pool"

    @classmethod
    def from_string(cls, value: str) -> "AttributeType":
        """Parse a type key case-insensitively, defaulting to INTEGER."""
        key = value.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return cls.INTEGER

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.capitalize()
