"""The character context that attributes are computed against."""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from gurpscalc.config import Settings, get_settings
from gurpscalc.rules import (
    AttributeDefs,
    AttributeType,
    DamageProgression,
    ThresholdOp,
    factory_attribute_defs,
    load_attribute_defs,
)

from .attribute import Attribute

logger = structlog.get_logger(__name__)

SIZE_MODIFIER_VARIABLE = "sm"


class Entity:
    """
    A character: its attributes plus the rules they are computed against.

    The entity is also the VariableResolver for attribute formulas, so
    ``$st`` in a base value formula resolves to this character's ST.

    Attributes:
        attribute_defs: The active attribute definitions
        size_modifier: The character's size modifier
        damage_progression: The active damage progression rule
        attributes: The character's attributes, keyed by ID
    """

    def __init__(
        self,
        attribute_defs: AttributeDefs,
        *,
        size_modifier: int = 0,
        damage_progression: DamageProgression = DamageProgression.BASIC_SET,
        attributes: Iterable[Attribute] | None = None,
    ) -> None:
        """
        Initialize the entity.

        When no attributes are given, one fresh attribute is created per
        definition.
        """
        self.attribute_defs = attribute_defs
        self.size_modifier = size_modifier
        self.damage_progression = damage_progression
        if attributes is None:
            attributes = [Attribute(attr_id) for attr_id in attribute_defs]
        self.attributes: dict[str, Attribute] = {attr.attr_id: attr for attr in attributes}
        # Variables currently being resolved, to stop formulas referring to themselves
        self._resolving: set[str] = set()

    def attribute(self, attr_id: str) -> Attribute | None:
        """Get one of this character's attributes by ID."""
        return self.attributes.get(attr_id)

    def resolve_variable(self, variable_name: str) -> str:
        """
        Resolve a formula variable to text.

        Supported variables:
            - sm: the size modifier
            - <id>: the attribute's current value
            - <id>.current / <id>.maximum: a pool's current or maximum value

        Returns:
            The value as text, or an empty string if it cannot be resolved
        """
        if variable_name in self._resolving:
            logger.warning("variable_self_reference", variable=variable_name)
            return ""
        self._resolving.add(variable_name)
        try:
            return self._resolve(variable_name)
        finally:
            self._resolving.discard(variable_name)

    def _resolve(self, variable_name: str) -> str:
        if variable_name == SIZE_MODIFIER_VARIABLE:
            return str(self.size_modifier)

        attr_id, _, part = variable_name.partition(".")
        attr = self.attributes.get(attr_id)
        if attr is None:
            logger.warning("variable_unresolved", variable=variable_name)
            return ""
        definition = self.attribute_defs.get(attr_id)
        if definition is None:
            logger.warning("variable_undefined", variable=variable_name)
            return ""

        if definition.type == AttributeType.POOL and part:
            if part == "current":
                return str(attr.current(self).trunc())
            if part == "maximum":
                return str(attr.maximum(self).trunc())
            logger.warning("variable_unresolved", variable=variable_name)
            return ""
        return str(attr.current(self))

    def attribute_points(self) -> int:
        """Total points spent on attributes."""
        return sum(attr.point_cost(self) for attr in self.attributes.values())

    def primary_attribute_points(self) -> int:
        """Points spent on attributes whose base value is not derived."""
        return sum(
            attr.point_cost(self)
            for attr in self.attributes.values()
            if attr.definition(self).primary
        )

    def secondary_attribute_points(self) -> int:
        """Points spent on attributes derived from other values."""
        return sum(
            attr.point_cost(self)
            for attr in self.attributes.values()
            if not attr.definition(self).primary
        )

    def count_threshold_op_met(self, op: ThresholdOp) -> int:
        """
        Count the pools currently in a state that applies the given op.

        Used to stack effects such as halving Move once per exhausted pool.
        """
        count = 0
        for attr in self.attributes.values():
            definition = self.attribute_defs.get(attr.attr_id)
            if definition is None or definition.type != AttributeType.POOL:
                continue
            threshold = attr.current_threshold(self)
            if threshold is not None and threshold.contains_op(op):
                count += 1
        return count

    def attributes_document(self) -> list[dict[str, Any]]:
        """
        Serialize every attribute, in definition order.

        Raises:
            UndefinedAttributeError: If any attribute lacks a definition
        """
        order = {attr_id: index for index, attr_id in enumerate(self.attribute_defs)}
        ordered = sorted(
            self.attributes.values(),
            key=lambda attr: order.get(attr.attr_id, len(order)),
        )
        return [attr.to_document(self) for attr in ordered]

    def load_attributes(self, documents: Iterable[Mapping[str, Any]]) -> None:
        """Replace this character's attributes with ones read from stored documents."""
        self.attributes = {}
        for document in documents:
            attr = Attribute.from_document(document)
            self.attributes[attr.attr_id] = attr
        logger.debug("attributes_loaded", count=len(self.attributes))


def create_entity(
    settings: Settings | None = None,
    *,
    size_modifier: int = 0,
    attribute_defs: AttributeDefs | None = None,
) -> Entity:
    """
    Create a character using the configured rules.

    Args:
        settings: Settings to use; defaults to get_settings()
        size_modifier: The character's size modifier
        attribute_defs: Definitions to use instead of the configured ones

    Returns:
        A new Entity with one attribute per definition
    """
    if settings is None:
        settings = get_settings()
    if attribute_defs is None:
        if settings.rules_file is not None:
            attribute_defs = load_attribute_defs(settings.rules_file)
        else:
            attribute_defs = factory_attribute_defs()
    return Entity(
        attribute_defs,
        size_modifier=size_modifier,
        damage_progression=settings.damage_progression,
    )
