"""Identifier sanitizing for rules data."""

from collections.abc import Iterable

RESERVED_IDS = ("skill", "parry", "block", "dodge", "sm")


def sanitize_id(
    value: str,
    permit_leading_digits: bool = False,
    reserved: Iterable[str] = RESERVED_IDS,
) -> str:
    """
    Normalize an identifier for use in formulas and lookups.

    Letters are lowercased and anything other than letters, digits and
    underscores is dropped. Leading digits are dropped unless permitted.
    Reserved words get underscores appended until they no longer collide.

    Examples:
        >>> sanitize_id("Basic Speed")
        'basicspeed'
        >>> sanitize_id("SM")
        'sm_'
        >>> sanitize_id("2nd_wind")
        'nd_wind'
    """
    chars: list[str] = []
    for ch in value:
        ch = ch.lower() if "A" <= ch <= "Z" else ch
        if ch == "_" or "a" <= ch <= "z":
            chars.append(ch)
        elif "0" <= ch <= "9" and (permit_leading_digits or chars):
            chars.append(ch)
    result = "".join(chars) or "_"
    taken = frozenset(reserved)
    while result in taken:
        result += "_"
    return result
