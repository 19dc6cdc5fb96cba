"""Quantity lexer for recipe text.

Recognises plain decimals (``1.5``), simple fractions (``1/2``), mixed
numbers (``1 1/2``) and unicode vulgar fractions with an optional leading
integer (``½``, ``2½``, ``1 ¾``). Values are computed with
:class:`fractions.Fraction` and converted to float once.
"""

import re
from dataclasses import dataclass
from fractions import Fraction

from recipe_nutrition.domain.errors import ParseError

MAX_QUANTITY = 1_000_000.0

UNICODE_FRACTIONS: dict[str, Fraction] = {
    "½": Fraction(1, 2),
    "⅓": Fraction(1, 3),
    "⅔": Fraction(2, 3),
    "¼": Fraction(1, 4),
    "¾": Fraction(3, 4),
    "⅕": Fraction(1, 5),
    "⅖": Fraction(2, 5),
    "⅗": Fraction(3, 5),
    "⅘": Fraction(4, 5),
    "⅙": Fraction(1, 6),
    "⅚": Fraction(5, 6),
    "⅐": Fraction(1, 7),
    "⅛": Fraction(1, 8),
    "⅜": Fraction(3, 8),
    "⅝": Fraction(5, 8),
    "⅞": Fraction(7, 8),
    "⅑": Fraction(1, 9),
    "⅒": Fraction(1, 10),
}

_VULGAR_FRACTIONS = "".join(UNICODE_FRACTIONS)

_QUANTITY_PATTERN = re.compile(
    rf"""
    (?:
        (?P<whole>\d+)\s+(?P<mixed_num>\d+)\s*/\s*(?P<mixed_den>\d+)
      | (?P<num>\d+)\s*/\s*(?P<den>\d+)
      | (?P<vulgar_whole>\d+)?\s*(?P<vulgar>[{_VULGAR_FRACTIONS}])
      | (?P<decimal>\d+(?:\.\d+)?|\.\d+)
    )
    (?![\d/.])
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class LexedQuantity:
    """A quantity read from the start of a piece of text."""

    value: float
    literal: str
    capped: bool
    remainder: str


def lex_leading_quantity(text: str) -> LexedQuantity | None:
    """Read a quantity from the start of text.

    Returns ``None`` when text does not start with a quantity. Raises
    :class:`ParseError` for a zero denominator.
    """
    stripped = text.lstrip()
    match = _QUANTITY_PATTERN.match(stripped)
    if match is None:
        return None
    literal = match.group(0)
    value, capped = cap_quantity(_fraction_from_match(match))
    return LexedQuantity(
        value=value,
        literal=literal.strip(),
        capped=capped,
        remainder=stripped[match.end() :].strip(),
    )


def parse_quantity(token: str) -> float | None:
    """Return the decimal value of a quantity token, or None if it is not one."""
    match = _QUANTITY_PATTERN.fullmatch(token.strip())
    if match is None:
        return None
    value, _ = cap_quantity(_fraction_from_match(match))
    return value


def cap_quantity(value: Fraction | float) -> tuple[float, bool]:
    """Clamp a quantity to MAX_QUANTITY, reporting whether it was clamped.

    The comparison happens before the float conversion, so literals too large
    for a float are clamped instead of overflowing.
    """
    if value > MAX_QUANTITY:
        return MAX_QUANTITY, True
    return float(value), False


def _fraction_from_match(match: re.Match[str]) -> Fraction:
    groups = match.groupdict()
    if groups["mixed_den"] is not None:
        fraction = _divide(groups["mixed_num"], groups["mixed_den"], match.group(0))
        return Fraction(int(groups["whole"])) + fraction
    if groups["den"] is not None:
        return _divide(groups["num"], groups["den"], match.group(0))
    if groups["vulgar"] is not None:
        whole = Fraction(int(groups["vulgar_whole"])) if groups["vulgar_whole"] else 0
        return whole + UNICODE_FRACTIONS[groups["vulgar"]]
    return Fraction(groups["decimal"])


def _divide(numerator: str, denominator: str, literal: str) -> Fraction:
    if int(denominator) == 0:
        raise ParseError(
            f"Cannot resolve fraction {literal.strip()!r}: division by zero"
        )
    return Fraction(int(numerator), int(denominator))
