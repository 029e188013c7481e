"""
Attribute definition module.

Defines the AttributeDef class, the rules-data description of one attribute:
its identity, kind, base value formula, point cost and pool thresholds.
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from gurpscalc.fxp import FixedDecimal, VariableResolver, evaluate_to_number

from .attribute_type import AttributeType
from .cost import compute_cost
from .damage_progression import DamageProgression
from .ids import sanitize_id
from .pool_threshold import PoolThreshold

_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")


class AttributeDef(BaseModel):
    """
    Immutable definition of an attribute, loaded from rules data.

    Attributes:
        id: Unique identifier within a rules set (e.g., "st", "basic_speed")
        type: Integer, decimal or pool
        name: Short display name (e.g., "ST")
        full_name: Optional long-form name (e.g., "Strength")
        attribute_base: Formula for the base value (e.g., "10" or "$st")
        cost_per_point: Points per level of adjustment
        cost_adj_percent_per_sm: Cost reduction percentage per point of positive SM
        thresholds: Ordered state breakpoints, pools only
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique attribute identifier")
    type: AttributeType = Field(default=AttributeType.INTEGER, description="Attribute kind")
    name: str = Field(default="", description="Short display name")
    full_name: str = Field(default="", description="Long-form display name")
    attribute_base: str = Field(default="", description="Base value formula")
    cost_per_point: int = Field(default=0, description="Point cost per level")
    cost_adj_percent_per_sm: int = Field(
        default=0, description="Cost reduction percentage per point of size modifier"
    )
    thresholds: tuple[PoolThreshold, ...] = Field(
        default=(), description="Pool state thresholds, in evaluation order"
    )

    @field_validator("id", mode="before")
    @classmethod
    def _sanitize_id(cls, value: Any) -> Any:
        if isinstance(value, str):
            return sanitize_id(value)
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, AttributeType):
            return AttributeType.from_string(value)
        return value

    @field_validator("attribute_base", mode="before")
    @classmethod
    def _number_base(cls, value: Any) -> Any:
        # YAML reads a bare "10" as an int
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("thresholds", mode="before")
    @classmethod
    def _none_thresholds(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("thresholds")
    @classmethod
    def _pool_only_thresholds(
        cls, value: tuple[PoolThreshold, ...], info: ValidationInfo
    ) -> tuple[PoolThreshold, ...]:
        if info.data.get("type") != AttributeType.POOL:
            return ()
        return value

    @property
    def primary(self) -> bool:
        """True if the base value is a plain integer rather than derived from other values."""
        return _INTEGER_LITERAL.fullmatch(self.attribute_base.strip()) is not None

    def resolve_full_name(self) -> str:
        """Return the full name, falling back to the short name."""
        return self.full_name or self.name

    def combined_name(self) -> str:
        """
        Return the full and short names combined for display.

        Examples:
            "Strength (ST)", or just "ST" when there is no full name
        """
        full = self.full_name.strip()
        name = self.name.strip()
        if not full:
            return name
        if not name or name == full:
            return full
        return f"{full} ({name})"

    def base_value(self, resolver: VariableResolver | None) -> FixedDecimal:
        """
        Evaluate the base value formula.

        Args:
            resolver: Supplies values for variables in the formula

        Returns:
            The base value, or zero if the formula cannot be evaluated
        """
        return evaluate_to_number(self.attribute_base, resolver)

    def compute_cost(
        self,
        value: FixedDecimal,
        size_modifier: int,
        cost_reduction: int,
        damage_progression: DamageProgression = DamageProgression.BASIC_SET,
    ) -> int:
        """Return the point cost of the given adjustment. See cost.compute_cost()."""
        return compute_cost(self, value, size_modifier, cost_reduction, damage_progression)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the rules-data document shape."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
        }
        if self.full_name:
            data["full_name"] = self.full_name
        data["attribute_base"] = self.attribute_base
        data["cost_per_point"] = self.cost_per_point
        if self.cost_adj_percent_per_sm:
            data["cost_adj_percent_per_sm"] = self.cost_adj_percent_per_sm
        if self.thresholds:
            data["thresholds"] = [threshold.to_document() for threshold in self.thresholds]
        return data
