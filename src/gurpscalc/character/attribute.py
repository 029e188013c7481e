"""Per-character attribute state and its computed values.

An Attribute stores only what the user edits (adjustment and damage) plus the
bonus and cost reduction handed in by modifier resolution. Everything the
sheet displays is derived on demand from those fields, the attribute's
definition and the owning character.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from gurpscalc.fxp import ZERO, FixedDecimal
from gurpscalc.rules import AttributeDef, AttributeType, PoolThreshold, sanitize_id

if TYPE_CHECKING:
    from .entity import Entity


class AttributeResolutionError(Exception):
    """Raised when an attribute cannot be matched to its definition."""

    def __init__(self, attr_id: str, message: str) -> None:
        super().__init__(message)
        self.attr_id = attr_id


class MissingContextError(AttributeResolutionError):
    """Raised when an attribute is computed without a character context."""

    def __init__(self, attr_id: str) -> None:
        super().__init__(attr_id, f"Attribute '{attr_id}' requires a character context")


class UndefinedAttributeError(AttributeResolutionError):
    """Raised when an attribute references an ID missing from the active definitions."""

    def __init__(self, attr_id: str) -> None:
        super().__init__(attr_id, f"Reference to undefined attribute '{attr_id}'")


@dataclass(frozen=True)
class IntegerCalc:
    """Computed values for an integer attribute."""

    value: FixedDecimal
    points: int

    def to_document(self) -> dict[str, Any]:
        data: dict[str, Any] = {"value": self.value.to_number()}
        if self.points:
            data["points"] = self.points
        return data


@dataclass(frozen=True)
class DecimalCalc:
    """Computed values for a decimal attribute."""

    value: FixedDecimal
    points: int

    def to_document(self) -> dict[str, Any]:
        data: dict[str, Any] = {"value": self.value.to_number()}
        if self.points:
            data["points"] = self.points
        return data


@dataclass(frozen=True)
class PoolCalc:
    """Computed values for a pool attribute."""

    value: FixedDecimal
    current: int  # Negative once damage exceeds the maximum
    points: int

    def to_document(self) -> dict[str, Any]:
        data: dict[str, Any] = {"value": self.value.to_number(), "current": self.current}
        if self.points:
            data["points"] = self.points
        return data


ComputedBlock = IntegerCalc | DecimalCalc | PoolCalc


@dataclass
class Attribute:
    """
    One attribute on one character.

    Attributes:
        attr_id: ID of the AttributeDef this attribute instantiates
        adjustment: User-entered change from the base value
        damage: Damage taken, pools only
        bonus: Bonus from features, supplied by modifier resolution
        cost_reduction: Percentage discount on point cost (0-100), supplied
            by modifier resolution
    """

    attr_id: str
    adjustment: FixedDecimal = ZERO
    damage: int = 0
    bonus: FixedDecimal = ZERO
    cost_reduction: int = 0

    def definition(self, entity: "Entity | None") -> AttributeDef:
        """
        Look up this attribute's definition in the character's rules.

        Raises:
            MissingContextError: If no character is supplied
            UndefinedAttributeError: If the character's rules lack the ID
        """
        if entity is None:
            raise MissingContextError(self.attr_id)
        definition = entity.attribute_defs.get(self.attr_id)
        if definition is None:
            raise UndefinedAttributeError(self.attr_id)
        return definition

    def _maximum(self, definition: AttributeDef, entity: "Entity") -> FixedDecimal:
        value = definition.base_value(entity) + self.adjustment + self.bonus
        if definition.type != AttributeType.DECIMAL:
            value = value.trunc()
        return value

    def maximum(self, entity: "Entity | None") -> FixedDecimal:
        """The attribute's value; for pools, the pool's maximum."""
        return self._maximum(self.definition(entity), entity)

    def current(self, entity: "Entity | None") -> FixedDecimal:
        """The current value; for pools this is the maximum less damage."""
        definition = self.definition(entity)
        value = self._maximum(definition, entity)
        if definition.type == AttributeType.POOL:
            return value - self.damage
        return value

    def point_cost(self, entity: "Entity | None") -> int:
        """Points spent on the adjustment."""
        definition = self.definition(entity)
        return definition.compute_cost(
            self.adjustment,
            entity.size_modifier,
            self.cost_reduction,
            entity.damage_progression,
        )

    def current_threshold(self, entity: "Entity | None") -> PoolThreshold | None:
        """
        Find the pool state the current value falls in.

        Thresholds are checked in definition order; the first one whose
        value is at or above the current value wins.

        Returns:
            The matching threshold, or None for non-pools or when none match
        """
        definition = self.definition(entity)
        if definition.type != AttributeType.POOL:
            return None
        maximum = self._maximum(definition, entity).as_int()
        current = maximum - self.damage
        for threshold in definition.thresholds:
            if current <= threshold.threshold(maximum):
                return threshold
        return None

    def compute(self, entity: "Entity | None") -> ComputedBlock:
        """
        Calculate the values shown on the sheet.

        Args:
            entity: The owning character

        Returns:
            PoolCalc, DecimalCalc or IntegerCalc depending on the attribute's kind

        Raises:
            MissingContextError: If no character is supplied
            UndefinedAttributeError: If the character's rules lack the ID
        """
        definition = self.definition(entity)
        points = definition.compute_cost(
            self.adjustment,
            entity.size_modifier,
            self.cost_reduction,
            entity.damage_progression,
        )
        value = self._maximum(definition, entity)
        if definition.type == AttributeType.POOL:
            return PoolCalc(value=value, current=(value - self.damage).as_int(), points=points)
        if definition.type == AttributeType.DECIMAL:
            return DecimalCalc(value=value, points=points)
        return IntegerCalc(value=value, points=points)

    def to_document(self, entity: "Entity | None") -> dict[str, Any]:
        """
        Serialize the stored fields together with the computed block.

        Zero adjustment, zero damage and zero points are omitted; damage is
        only written for pools.
        """
        calc = self.compute(entity)
        data: dict[str, Any] = {"attr_id": self.attr_id}
        if self.adjustment:
            data["adj"] = self.adjustment.to_number()
        if isinstance(calc, PoolCalc) and self.damage:
            data["damage"] = self.damage
        data["calc"] = calc.to_document()
        return data

    @classmethod
    def from_document(cls, data: Mapping[str, Any]) -> "Attribute":
        """
        Create an attribute from its stored document.

        Any ``calc`` block is ignored since it is recomputed on demand.

        Raises:
            ValueError: If the document has no attr_id
        """
        if "attr_id" not in data:
            raise ValueError("Attribute document missing required field: attr_id")
        return cls(
            attr_id=sanitize_id(str(data["attr_id"])),
            adjustment=FixedDecimal.coerce_forced(data.get("adj")),
            damage=FixedDecimal.coerce_forced(data.get("damage")).as_int(),
        )
