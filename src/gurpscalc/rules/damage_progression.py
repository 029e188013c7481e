"""Damage progression rule options.

Only the identity of the selected progression matters to attribute costs: Hit
Points ignore the size modifier cost adjustment under Knowing Your Own
Strength.
"""

from enum import StrEnum


class DamageProgression(StrEnum):
    """The method used to derive thrust and swing damage from ST."""

    BASIC_SET = "basic_set"
    KNOWING_YOUR_OWN_STRENGTH = "knowing_your_own_strength"
    NO_SCHOOL_GROGNARD_DAMAGE = "no_school_grognard_damage"
    THRUST_EQUALS_SWING_MINUS_2 = "thrust_equals_swing_minus_2"
    SWING_EQUALS_THRUST_PLUS_2 = "swing_equals_thrust_plus_2"
    PHOENIX_FLAME_D3 = "phoenix_flame_d3"

    @classmethod
    def from_string(cls, value: str) -> "DamageProgression":
        """Parse a progression key case-insensitively, defaulting to BASIC_SET."""
        key = value.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return cls.BASIC_SET

    @property
    def display_name(self) -> str:
        return _TITLES[self]

    @property
    def footnote(self) -> str:
        """Source reference for the rule, if any."""
        return _FOOTNOTES.get(self, "")


_TITLES = {
    DamageProgression.BASIC_SET: "Basic Set",
    DamageProgression.KNOWING_YOUR_OWN_STRENGTH: "Knowing Your Own Strength",
    DamageProgression.NO_SCHOOL_GROGNARD_DAMAGE: "No School Grognard",
    DamageProgression.THRUST_EQUALS_SWING_MINUS_2: "Thrust = Swing-2",
    DamageProgression.SWING_EQUALS_THRUST_PLUS_2: "Swing = Thrust+2",
    DamageProgression.PHOENIX_FLAME_D3: "PhoenixFlame d3",
}

_FOOTNOTES = {
    DamageProgression.KNOWING_YOUR_OWN_STRENGTH: "Pyramid 3-83, pages 16-19",
    DamageProgression.NO_SCHOOL_GROGNARD_DAMAGE: (
        "https://noschoolgrognard.blogspot.com/2013/04/adjusting-swing-damage-in-dungeon.html"
    ),
    DamageProgression.THRUST_EQUALS_SWING_MINUS_2: "https://github.com/richardwilkes/gcs/issues/97",
    DamageProgression.SWING_EQUALS_THRUST_PLUS_2: "Houserule originating with Kevin Smyth",
    DamageProgression.PHOENIX_FLAME_D3: "Houserule that uses d3s instead of d6s for damage",
}
