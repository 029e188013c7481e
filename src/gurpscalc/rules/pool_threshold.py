"""
Pool threshold module.

Defines the PoolThreshold class: a point within a pool (such as Hit Points)
below which the character enters a named state like "Reeling".
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gurpscalc.fxp import div_trunc

from .threshold_op import ThresholdOp


class PoolThreshold(BaseModel):
    """
    A breakpoint within a pool's range where a change in state occurs.

    Attributes:
        state: Name of the state (e.g., "Reeling")
        explanation: Optional rules text shown alongside the state
        multiplier: Multiplies the pool maximum
        divisor: Divides the multiplied maximum, rounding up (0 and 1 skip division)
        addition: Added after multiplying and dividing
        ops: Effects applied while at or below the threshold
    """

    model_config = ConfigDict(frozen=True)

    state: str = Field(..., description="State name")
    explanation: str = Field(default="", description="Optional explanation of the state")
    multiplier: int = Field(default=0, description="Multiplier applied to the pool maximum")
    divisor: int = Field(default=0, description="Divisor applied after the multiplier")
    addition: int = Field(default=0, description="Amount added after multiplying and dividing")
    ops: tuple[ThresholdOp, ...] = Field(default=(), description="Effects while in this state")

    @field_validator("ops", mode="before")
    @classmethod
    def _parse_ops(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(
                op if isinstance(op, ThresholdOp) else ThresholdOp.from_string(str(op))
                for op in value
            )
        return value

    def threshold(self, maximum: int) -> int:
        """
        Calculate the pool value at which this state begins.

        With a divisor above 1 the scaled maximum is divided, bumped up by one
        when the maximum does not divide evenly, lowered by one and kept
        non-negative. The addition is applied last.

        Args:
            maximum: The pool's maximum value

        Returns:
            The threshold value; the state applies when the current value is
            at or below it

        Examples:
            >>> PoolThreshold(state="Reeling", multiplier=1, divisor=3).threshold(10)
            3
            >>> PoolThreshold(state="Dead", multiplier=-5, divisor=1).threshold(10)
            -50
        """
        value = maximum * self.multiplier
        if self.divisor > 1:
            value = div_trunc(value, self.divisor)
            if maximum % self.divisor != 0:
                value += 1
            value -= 1
            value = max(value, 0)
        return value + self.addition

    def contains_op(self, op: ThresholdOp) -> bool:
        """Check whether this threshold applies the given op."""
        return op in self.ops

    def to_document(self) -> dict[str, Any]:
        """Serialize to the rules-data document shape, omitting zero and empty fields."""
        data: dict[str, Any] = {"state": self.state}
        if self.explanation:
            data["explanation"] = self.explanation
        if self.multiplier:
            data["multiplier"] = self.multiplier
        if self.divisor:
            data["divisor"] = self.divisor
        if self.addition:
            data["addition"] = self.addition
        if self.ops:
            data["ops"] = [op.value for op in self.ops]
        return data
