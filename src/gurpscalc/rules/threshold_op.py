"""Effects applied while a pool is at or below a threshold."""

from enum import StrEnum


class ThresholdOp(StrEnum):
    """An operation triggered when a pool threshold is reached."""

    UNKNOWN = "unknown"
    HALVE_MOVE = "halve_move"
    HALVE_DODGE = "halve_dodge"
    HALVE_ST = "halve_st"

    @classmethod
    def from_string(cls, value: str) -> "ThresholdOp":
        """Parse an op key case-insensitively, defaulting to UNKNOWN."""
        key = value.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return cls.UNKNOWN

    @property
    def display_name(self) -> str:
        """Short display name."""
        return _TITLES[self]

    @property
    def description(self) -> str:
        """What the operation does."""
        return _DESCRIPTIONS[self]


_TITLES = {
    ThresholdOp.UNKNOWN: "Unknown",
    ThresholdOp.HALVE_MOVE: "Halve Move",
    ThresholdOp.HALVE_DODGE: "Halve Dodge",
    ThresholdOp.HALVE_ST: "Halve ST",
}

_DESCRIPTIONS = {
    ThresholdOp.UNKNOWN: "Unknown",
    ThresholdOp.HALVE_MOVE: "Halve Move (round up)",
    ThresholdOp.HALVE_DODGE: "Halve Dodge (round up)",
    ThresholdOp.HALVE_ST: "Halve ST (round up; does not affect HP and damage)",
}
