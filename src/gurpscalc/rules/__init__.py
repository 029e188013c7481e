"""Rules data: attribute definitions, costs and pool thresholds."""

from .attribute_def import AttributeDef
from .attribute_defs import (
    AttributeDefs,
    AttributeValidationError,
    DuplicateAttributeError,
    RulesLoadError,
    factory_attribute_defs,
    load_attribute_defs,
    parse_attribute_defs,
    save_attribute_defs,
)
from .attribute_type import AttributeType
from .cost import apply_cost_reduction, compute_cost
from .damage_progression import DamageProgression
from .ids import RESERVED_IDS, sanitize_id
from .pool_threshold import PoolThreshold
from .threshold_op import ThresholdOp

__all__ = [
    "AttributeDef",
    "AttributeDefs",
    "AttributeType",
    "AttributeValidationError",
    "DamageProgression",
    "DuplicateAttributeError",
    "PoolThreshold",
    "RESERVED_IDS",
    "RulesLoadError",
    "ThresholdOp",
    "apply_cost_reduction",
    "compute_cost",
    "factory_attribute_defs",
    "load_attribute_defs",
    "parse_attribute_defs",
    "sanitize_id",
    "save_attribute_defs",
]
