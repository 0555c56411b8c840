"""
The fallback notation every role uses when nothing else is configured.

Ordinary numbers are written with thousands separators and a few decimals ("1,234.5"). Past
``maxnum`` the output switches to scientific ("1.5e15"), then to chains of leading e's
("ee1e15"), then to a tetration mantissa ("3.5F8"), and finally to "F" followed by the tower
height written in this same notation.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
from dataclasses import dataclass

# Local ----------------------------------------------------------------------------------------------------------------
from .decompose import hyperscientifify, scientifify
from .magnitude import Magnitude, ONE, ZERO, iteratedexp, log10, pow10, slog, tetrate
from .notation import Notation
from .numeric import to_magnitude
from .tools import fmt_type, fmt_value

__all__ = [
    'DefaultNotation',
    'add_commas',
    'commas_and_decimals',
]


# Methods --------------------------------------------------------------------------------------------------------------

def add_commas(text: str, comma_char: str = ",", spacing: int = 3) -> str:
    """
    Insert comma_char between groups of ``spacing`` digits, counted from the right.

    Examples:
        >>> add_commas("1234567")
        '1,234,567'
    """
    groups = []
    while len(text) > spacing:
        groups.insert(0, text[-spacing:])
        text = text[:-spacing]
    groups.insert(0, text)
    return comma_char.join(groups)


def commas_and_decimals(
        value: float,
        places_above_1: int = -4,
        places_below_1: int = -4,
        commas: float = 0,
        decimal_char: str = ".",
        comma_char: str = ",",
) -> str:
    """
    Write a float with grouped digits and a bounded number of decimals.

    Args:
        value: The number; meant for values well inside float range.
        places_above_1: Decimal places kept for |value| >= 1. Negative values count significant
            figures instead, so -4 keeps four.
        places_below_1: The same for |value| < 1.
        commas: Values at or above this get thousands separators; negative disables them.
        decimal_char: Decimal point.
        comma_char: Thousands separator.

    Examples:
        >>> commas_and_decimals(1234.5678)
        '1,235'
        >>> commas_and_decimals(0.00123456)
        '0.001235'
        >>> commas_and_decimals(12.3456, places_above_1=2)
        '12.35'
    """
    if value == 0:
        return "0"
    if not math.isfinite(value):
        return str(value)
    if value < 0:
        return "-" + commas_and_decimals(-value, places_above_1, places_below_1, commas, decimal_char, comma_char)

    places = places_below_1 if value < 1 else places_above_1
    places = min(places, 16)
    mantissa, exponent = scientifify(value)
    base, exponent = mantissa.to_float(), int(exponent.to_float())
    sig_figs = places < 0
    if sig_figs:
        places = max(-places - exponent - 1, 0)

    if value >= 1e21:
        # Digits this long are written in scientific form
        digits = -places_above_1 - 1 if places_above_1 < 0 else places_above_1
        scale = 10 ** digits
        base = _round_half_up(base * scale) / scale
        if base >= 10:
            base /= 10
            exponent += 1
        text = commas_and_decimals(base, digits, digits, commas, decimal_char, comma_char)
        return f"{text}e+{exponent}"

    if value < 1:
        ending = _round_half_up(value * 10 ** places)
        if ending == 0:
            return "0"
        if ending >= 10 ** (places + exponent + 1):
            exponent += 1
        if exponent >= 0:
            return commas_and_decimals(ending / 10 ** places, places_above_1, places_below_1,
                                       commas, decimal_char, comma_char)
        digits = str(ending).rjust(places + exponent + 1, "0").rstrip("0")
        return "0" + decimal_char + "0" * (-exponent - 1) + digits

    whole = math.trunc(value)
    leftover = _round_half_up((value - whole) * 10 ** places)
    if leftover >= 10 ** places:
        leftover -= 10 ** places
        whole += 1
    result = str(whole)
    if 0 <= commas <= value:
        result = add_commas(result, comma_char)
    if leftover != 0:
        decimals = (decimal_char + str(leftover).rjust(places, "0")).rstrip("0")
        if decimals != decimal_char:
            result += decimals
    return result


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True, kw_only=True)
class DefaultNotation(Notation):
    """
    Plain digits for ordinary values, then progressively more compressed forms.

    Attributes:
        places_above_1: Decimal places for values >= 1; negative means significant figures.
        places_below_1: Decimal places for values < 1; negative means significant figures.
        commas_min: Smallest value that gets thousands separators; negative disables them.
        maxnum: Values at or above this switch to scientific notation. The exponent is also
            written in full while it is below maxnum.
        minnum: Values below this switch to scientific notation with a negative exponent.
        max_es_in_a_row: Longest run of leading e's before switching to tetration.
        decimal_char: Decimal point.
        comma_char: Thousands separator.

    Examples:
        >>> DefaultNotation().format(1500)
        '1,500'
        >>> DefaultNotation().format(1.5e15)
        '1.5e15'
        >>> DefaultNotation().format("1e1e15")
        'e1e15'
    """
    name: str = "Default Notation"
    places_above_1: int = -4
    places_below_1: int = -4
    commas_min: float = 0
    maxnum: Magnitude = Magnitude(1e12)
    minnum: Magnitude = Magnitude(1e-6)
    max_es_in_a_row: int = 5
    decimal_char: str = "."
    comma_char: str = ","

    def __post_init__(self):
        super().__post_init__()
        for name in ("places_above_1", "places_below_1", "max_es_in_a_row"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be int, not {fmt_type(value)}")
        if self.max_es_in_a_row < 0:
            raise ValueError(f"max_es_in_a_row must be non-negative, got {fmt_value(self.max_es_in_a_row)}")
        if isinstance(self.commas_min, bool) or not isinstance(self.commas_min, (int, float)):
            raise TypeError(f"commas_min must be a number, not {fmt_type(self.commas_min)}")
        for name in ("decimal_char", "comma_char"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"{name} must be str, not {fmt_type(getattr(self, name))}")
        maxnum, minnum = to_magnitude(self.maxnum), to_magnitude(self.minnum)
        if not maxnum > ONE:
            raise ValueError(f"maxnum must be greater than 1, got {fmt_value(self.maxnum)}")
        if not (ZERO <= minnum <= ONE):
            raise ValueError(f"minnum must be between 0 and 1, got {fmt_value(self.minnum)}")
        object.__setattr__(self, "maxnum", maxnum)
        object.__setattr__(self, "minnum", minnum)

    def format_magnitude(self, value: Magnitude) -> str:
        if value == ZERO:
            return "0"
        if self.minnum <= value < self.maxnum:
            return self._digits(value)

        places = self.places_above_1 if value >= ONE else self.places_below_1
        if places < 0:
            places = -places - 1
        rounding = 10.0 ** -places

        reciprocal = value < ONE
        if reciprocal:
            mantissa, exponent = scientifify(value, 10, rounding)
            value = pow10(-exponent) * mantissa

        if value < pow10(self.maxnum):
            mantissa, exponent = scientifify(value, 10, rounding)
            if reciprocal:
                exponent = -exponent
            return self._digits(mantissa) + "e" + self._digits(exponent)

        if value < iteratedexp(10, self.max_es_in_a_row + 1, self.maxnum):
            prefix = ""
            while value >= pow10(self.maxnum):
                prefix += "e"
                value = log10(value)
            if reciprocal:
                value = -value
            return prefix + self.format(value)

        if value < tetrate(10, self.maxnum):
            mantissa, exponent = hyperscientifify(value, 10, rounding)
            if reciprocal:
                exponent = -exponent
            return self._digits(mantissa) + "F" + self._digits(exponent)

        height = slog(value)
        return "F" + self.format(-height if reciprocal else height)

    def _digits(self, value: Magnitude) -> str:
        return commas_and_decimals(value.to_float(), self.places_above_1, self.places_below_1,
                                   self.commas_min, self.decimal_char, self.comma_char)
