"""Character attributes and the context they are computed in."""

from .attribute import (
    Attribute,
    AttributeResolutionError,
    ComputedBlock,
    DecimalCalc,
    IntegerCalc,
    MissingContextError,
    PoolCalc,
    UndefinedAttributeError,
)
from .entity import Entity, create_entity

__all__ = [
    "Attribute",
    "AttributeResolutionError",
    "ComputedBlock",
    "DecimalCalc",
    "Entity",
    "IntegerCalc",
    "MissingContextError",
    "PoolCalc",
    "UndefinedAttributeError",
    "create_entity",
]
