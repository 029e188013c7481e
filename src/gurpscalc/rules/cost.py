"""Point cost calculation for attribute adjustments.

Point costs are compared and displayed verbatim, so everything past the
initial fixed-point multiply is integer arithmetic. Division and remainder
truncate toward zero.
"""

from typing import TYPE_CHECKING

from gurpscalc.fxp import FixedDecimal, div_trunc

from .damage_progression import DamageProgression

if TYPE_CHECKING:
    from .attribute_def import AttributeDef

MAX_COST_REDUCTION = 80

# Hit Points ignore the SM cost adjustment under this progression
_SM_EXEMPT_ID = "hp"
_SM_EXEMPT_PROGRESSION = DamageProgression.KNOWING_YOUR_OWN_STRENGTH


def apply_cost_reduction(cost: int, cost_reduction: int) -> int:
    """
    Reduce a point cost by a percentage.

    The remainder of the division by 100 rounds the quotient away from zero
    when it is above 49, or below -50.

    Examples:
        >>> apply_cost_reduction(149, 50)
        75
        >>> apply_cost_reduction(-149, 50)
        -74
    """
    if cost_reduction == 0:
        return cost
    scaled = cost * (100 - cost_reduction)
    quotient = div_trunc(scaled, 100)
    remainder = scaled - quotient * 100
    if remainder > 49:
        quotient += 1
    elif remainder < -50:
        quotient -= 1
    return quotient


def compute_cost(
    definition: "AttributeDef",
    value: FixedDecimal,
    size_modifier: int,
    cost_reduction: int,
    damage_progression: DamageProgression = DamageProgression.BASIC_SET,
) -> int:
    """
    Calculate the points spent on an attribute adjustment.

    Args:
        definition: The attribute's rules definition
        value: The adjustment being paid for
        size_modifier: The character's size modifier
        cost_reduction: Percentage discount from external sources
        damage_progression: The active damage progression rule

    Returns:
        The integer point cost

    Cost rules:
        - Base cost: value * cost_per_point, truncated to a whole number
        - Positive SM adds SM * cost_adj_percent_per_sm to the reduction,
          which is then clamped to 0-80 (except "hp" under Knowing Your Own
          Strength, which skips the SM adjustment entirely)
        - A non-zero reduction is applied by apply_cost_reduction()
    """
    cost = (value * FixedDecimal.from_int(definition.cost_per_point)).as_int()
    if (
        size_modifier > 0
        and definition.cost_adj_percent_per_sm > 0
        and not (definition.id == _SM_EXEMPT_ID and damage_progression == _SM_EXEMPT_PROGRESSION)
    ):
        cost_reduction += size_modifier * definition.cost_adj_percent_per_sm
        cost_reduction = min(max(cost_reduction, 0), MAX_COST_REDUCTION)
    return apply_cost_reduction(cost, cost_reduction)
