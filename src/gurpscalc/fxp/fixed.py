"""Fixed-point decimal numbers with four fractional digits.

Values are stored as a signed integer scaled by 10,000. Every arithmetic
result is brought back to that scale by truncating toward zero, so repeated
calculations never accumulate floating-point drift.
"""

import math
import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, Context, Decimal, DecimalException

import structlog

logger = structlog.get_logger(__name__)

SCALE = 10_000

# Raw bounds of a signed 64-bit integer
MIN_RAW = -(2**63)
MAX_RAW = 2**63 - 1

# Decimal exponents outside these bounds are out of range, or truncate to zero,
# before any scaling happens
_MAX_ADJUSTED_EXPONENT = 20
_MIN_ADJUSTED_EXPONENT = -5

_SCALE_CONTEXT = Context(prec=60, rounding=ROUND_DOWN)

_NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class FixedDecimalError(ValueError):
    """Raised when a value cannot be converted to a FixedDecimal."""

    pass


def div_trunc(numerator: int, denominator: int) -> int:
    """Integer division that truncates toward zero instead of flooring."""
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


@dataclass(frozen=True, slots=True, eq=False)
class FixedDecimal:
    """
    A signed fixed-point number with exactly four decimal digits.

    Attributes:
        raw: The value multiplied by 10,000

    Examples:
        >>> FixedDecimal.parse("1.5") * FixedDecimal.from_int(3)
        FixedDecimal('4.5')
        >>> FixedDecimal.parse("1") / FixedDecimal.from_int(3)
        FixedDecimal('0.3333')
    """

    raw: int = 0

    @classmethod
    def from_raw(cls, raw: int) -> "FixedDecimal":
        """Create a value from an already-scaled integer."""
        return cls(raw)

    @classmethod
    def from_int(cls, value: int) -> "FixedDecimal":
        """Create a value from a whole number."""
        return cls(value * SCALE)

    @classmethod
    def from_float(cls, value: float) -> "FixedDecimal":
        """
        Create a value from a float.

        The float's shortest decimal representation is used, so 0.1 becomes
        exactly 0.1 rather than the nearest binary approximation. Digits past
        the fourth decimal place are truncated.

        Raises:
            FixedDecimalError: If the float is NaN, infinite or out of range
        """
        if not math.isfinite(value):
            raise FixedDecimalError(f"Cannot represent {value!r} as a fixed-point number")
        return cls._from_decimal(Decimal(repr(value)))

    @classmethod
    def parse(cls, text: str) -> "FixedDecimal":
        """
        Parse a decimal string.

        Accepts an optional sign, thousands separators and an optional
        fraction. Digits past the fourth decimal place are truncated.

        Raises:
            FixedDecimalError: If the text is not a number, or lies outside MIN..MAX
        """
        cleaned = text.strip().replace(",", "")
        if not _NUMBER_PATTERN.fullmatch(cleaned):
            raise FixedDecimalError(f"Invalid number: {text!r}")
        try:
            return cls._from_decimal(Decimal(cleaned))
        except DecimalException as e:
            raise FixedDecimalError(f"Invalid number: {text!r}") from e

    @classmethod
    def parse_forced(cls, text: str) -> "FixedDecimal":
        """Parse a decimal string, substituting zero if it is not a number."""
        try:
            return cls.parse(text)
        except FixedDecimalError:
            logger.warning("number_parse_failed", text=text)
            return ZERO

    @classmethod
    def coerce(cls, value: "FixedDecimal | int | float | str") -> "FixedDecimal":
        """
        Convert a document value (number or numeric string) to a FixedDecimal.

        Raises:
            FixedDecimalError: If the value is not numeric
        """
        if isinstance(value, FixedDecimal):
            return value
        if isinstance(value, bool):
            raise FixedDecimalError(f"Invalid number: {value!r}")
        if isinstance(value, int):
            return cls.from_int(value)
        if isinstance(value, float):
            return cls.from_float(value)
        if isinstance(value, str):
            return cls.parse(value)
        raise FixedDecimalError(f"Invalid number: {value!r}")

    @classmethod
    def coerce_forced(cls, value: "FixedDecimal | int | float | str | None") -> "FixedDecimal":
        """Like coerce(), but substitutes zero for anything non-numeric."""
        if value is None:
            return ZERO
        try:
            return cls.coerce(value)
        except FixedDecimalError:
            logger.warning("number_parse_failed", text=repr(value))
            return ZERO

    @classmethod
    def _from_decimal(cls, value: Decimal) -> "FixedDecimal":
        if not value.is_finite():
            raise FixedDecimalError(f"Cannot represent {value} as a fixed-point number")
        if value.is_zero() or value.adjusted() <= _MIN_ADJUSTED_EXPONENT:
            return cls(0)
        if value.adjusted() >= _MAX_ADJUSTED_EXPONENT:
            raise FixedDecimalError(f"{value} is out of range")
        scaled = _SCALE_CONTEXT.multiply(value, SCALE).to_integral_value(
            rounding=ROUND_DOWN, context=_SCALE_CONTEXT
        )
        raw = int(scaled)
        if not MIN_RAW <= raw <= MAX_RAW:
            raise FixedDecimalError(f"{value} is out of range")
        return cls(raw)

    # Arithmetic

    def __add__(self, other: object) -> "FixedDecimal":
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        return FixedDecimal(self.raw + rhs.raw)

    __radd__ = __add__

    def __sub__(self, other: object) -> "FixedDecimal":
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        return FixedDecimal(self.raw - rhs.raw)

    def __rsub__(self, other: object) -> "FixedDecimal":
        lhs = _coerce_operand(other)
        if lhs is None:
            return NotImplemented
        return FixedDecimal(lhs.raw - self.raw)

    def __mul__(self, other: object) -> "FixedDecimal":
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        return FixedDecimal(div_trunc(self.raw * rhs.raw, SCALE))

    __rmul__ = __mul__

    def __truediv__(self, other: object) -> "FixedDecimal":
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        if rhs.raw == 0:
            raise ZeroDivisionError("FixedDecimal division by zero")
        return FixedDecimal(div_trunc(self.raw * SCALE, rhs.raw))

    def __rtruediv__(self, other: object) -> "FixedDecimal":
        lhs = _coerce_operand(other)
        if lhs is None:
            return NotImplemented
        return lhs / self

    def __neg__(self) -> "FixedDecimal":
        return FixedDecimal(-self.raw)

    def __pos__(self) -> "FixedDecimal":
        return self

    def __abs__(self) -> "FixedDecimal":
        return FixedDecimal(abs(self.raw))

    # Comparison

    def __eq__(self, other: object) -> bool:
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        return self.raw == rhs.raw

    def __lt__(self, other: object) -> bool:
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        return self.raw < rhs.raw

    def __le__(self, other: object) -> bool:
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        return self.raw <= rhs.raw

    def __gt__(self, other: object) -> bool:
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        return self.raw > rhs.raw

    def __ge__(self, other: object) -> bool:
        rhs = _coerce_operand(other)
        if rhs is None:
            return NotImplemented
        return self.raw >= rhs.raw

    def __hash__(self) -> int:
        # Whole values hash like the equal int
        if self.raw % SCALE == 0:
            return hash(self.raw // SCALE)
        return hash(self.raw)

    def __bool__(self) -> bool:
        return self.raw != 0

    # Rounding

    def trunc(self) -> "FixedDecimal":
        """Drop the fractional part, rounding toward zero."""
        return FixedDecimal(div_trunc(self.raw, SCALE) * SCALE)

    def floor(self) -> "FixedDecimal":
        """Round toward negative infinity."""
        return FixedDecimal((self.raw // SCALE) * SCALE)

    def ceil(self) -> "FixedDecimal":
        """Round toward positive infinity."""
        return FixedDecimal(-((-self.raw) // SCALE) * SCALE)

    def round(self) -> "FixedDecimal":
        """Round to the nearest whole number, halves away from zero."""
        whole = (abs(self.raw) + SCALE // 2) // SCALE * SCALE
        return FixedDecimal(-whole if self.raw < 0 else whole)

    def as_int(self) -> int:
        """Return the whole part as an int, truncating toward zero."""
        return div_trunc(self.raw, SCALE)

    def min(self, other: "FixedDecimal") -> "FixedDecimal":
        """Return the smaller of this value and other."""
        return self if self <= other else other

    def max(self, other: "FixedDecimal") -> "FixedDecimal":
        """Return the larger of this value and other."""
        return self if self >= other else other

    def __int__(self) -> int:
        return self.as_int()

    def __float__(self) -> float:
        return self.raw / SCALE

    # Formatting

    def __str__(self) -> str:
        sign = "-" if self.raw < 0 else ""
        whole, fraction = divmod(abs(self.raw), SCALE)
        if fraction == 0:
            return f"{sign}{whole}"
        return f"{sign}{whole}.{fraction:04d}".rstrip("0")

    def __repr__(self) -> str:
        return f"FixedDecimal('{self}')"

    def string_with_sign(self) -> str:
        """Format the value, prefixing '+' when it is not negative."""
        text = str(self)
        return text if self.raw < 0 else "+" + text

    def to_number(self) -> int | float:
        """
        Return the value as a plain number for JSON or YAML documents.

        Whole values become ints. Other values become the float whose
        shortest representation is this value's decimal string.
        """
        if self.raw % SCALE == 0:
            return self.raw // SCALE
        return float(str(self))


def _coerce_operand(value: object) -> FixedDecimal | None:
    if isinstance(value, FixedDecimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return FixedDecimal.from_int(value)
    return None


ZERO = FixedDecimal(0)
ONE = FixedDecimal.from_int(1)
HUNDRED = FixedDecimal.from_int(100)

# Sentinels used as "unbounded" markers in range checks
MIN = FixedDecimal(MIN_RAW)
MAX = FixedDecimal(MAX_RAW)
