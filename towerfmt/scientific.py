"""
Mantissa-and-exponent notations built on the decomposition primitives.

Each notation splits a value with one primitive from :mod:`towerfmt.decompose` and writes
``mantissa + before + exponent + after``. Values too large for one split have their exponent
split again; the repeated splits show as a run of leading markers ("ee1.5e12") or, past
``max_in_a_row``, as one collapsed marker holding the count ("(e^7)1.5e12").

Marker triples
--------------
``exp_chars`` holds three (before, after) pairs:

1. around the exponent of a single split,
2. around the whole result for each repeated split,
3. around the collapsed count.

An entry of the second pair may be a bool instead of a string. False puts the mantissa
notation's "1" in front of the first pair's text, True puts it behind, so ``("e", "")`` with
``(False, "")`` repeats as "1e".

``neg_exp_chars`` replaces the first pair for negative exponents. Its first entry may also be
True, meaning "write the reciprocal wrapped in the second pair" (for example "1 / 5e20").
"""

# Standard library -----------------------------------------------------------------------------------------------------
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .decompose import (
    Rounding, factorial_scientifify, factorial_slog, hyperscientifify, inverse_factorial,
    iteratedexpmult, iteratedmultlog, multabs, multslog, pentascientifify, scientifify,
    weak_hyperscientifify, weak_slog, weak_tetrate,
)
from .engineering import EngineeringLike, EngineeringSpec
from .magnitude import (
    CONVERGENT_BASE, Magnitude, ONE, TEN, TWO, ZERO, factorial, iteratedlog, penta_log, pentate,
    slog,
)
from .notation import Notation, as_notation, default_notation
from .numeric import to_magnitude
from .sentinels import UNSET, UnsetType
from .tools import as_char_pair, fmt_type, fmt_value, wrap_repeated

__all__ = [
    'FactorialScientificNotation',
    'HyperscientificNotation',
    'PentaScientificNotation',
    'ScientificNotation',
    'WeakHyperscientificNotation',
]

ExpChars = tuple[tuple[str, str], tuple[str | bool, str | bool], tuple[str, str]]
NegExpChars = tuple[tuple[str, str] | bool, tuple[str, str]]

# Repeated-split counts past this are not worth computing one by one
_COUNT_LIMIT = 9e15


# Base -----------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True, kw_only=True)
class ExponentNotation(Notation):
    """
    Shared machinery for notations of the form mantissa-marker-exponent.

    Attributes:
        maxnum: Controls where a single split stops being enough; its exact meaning is the
            threshold of each subclass.
        max_in_a_row: Longest run of repeated-split markers before they collapse into a count.
        rounding: Multiple the mantissa is rounded to, or a function giving that multiple.
        engineerings: Allowed exponents.
        mantissa_power: Shifts the mantissa window up by this many exponent steps.
        iteration_zero: Write values between 1/maxnum and maxnum with the mantissa notation
            alone, without an exponent of zero.
        exp_chars: Marker triple, see the module docstring.
        neg_exp_chars: Markers for negative exponents, or None to write the negative exponent.
        exp_before: Put the exponent in front of the mantissa.
        superexp_after: Put the collapsed count after the rest of the output.
        mantissa_notation: Writes the mantissa. Defaults to a fresh DefaultNotation.
        exponent_notation: Writes the exponent. None means this notation itself; unset means
            the mantissa notation.
        superexponent_notation: Writes the collapsed count. None means this notation itself;
            unset means the exponent notation.
    """
    maxnum: Magnitude = Magnitude(1e12)
    max_in_a_row: int = 5
    rounding: Rounding = 0
    engineerings: EngineeringLike = 1
    mantissa_power: Magnitude = ZERO
    iteration_zero: bool = False
    exp_chars: ExpChars = (("e", ""), ("e", ""), ("(e^", ")"))
    neg_exp_chars: NegExpChars | None = None
    exp_before: bool = False
    superexp_after: bool = False
    mantissa_notation: Notation = field(default_factory=default_notation)
    exponent_notation: Notation | None | UnsetType = UNSET
    superexponent_notation: Notation | None | UnsetType = UNSET

    def __post_init__(self):
        super().__post_init__()
        maxnum = to_magnitude(self.maxnum)
        if not maxnum > ZERO:
            raise ValueError(f"maxnum must be positive, got {fmt_value(self.maxnum)}")
        object.__setattr__(self, "maxnum", maxnum)
        if isinstance(self.max_in_a_row, bool) or not isinstance(self.max_in_a_row, int):
            raise TypeError(f"max_in_a_row must be int, not {fmt_type(self.max_in_a_row)}")
        if not callable(self.rounding):
            object.__setattr__(self, "rounding", to_magnitude(self.rounding))
        object.__setattr__(self, "engineerings", EngineeringSpec.of(self.engineerings))
        object.__setattr__(self, "mantissa_power", to_magnitude(self.mantissa_power))

        as_notation(self.mantissa_notation, "mantissa_notation", allow_self=False)
        if self.exponent_notation is UNSET:
            object.__setattr__(self, "exponent_notation", self.mantissa_notation)
        as_notation(self.exponent_notation, "exponent_notation")
        if self.superexponent_notation is UNSET:
            object.__setattr__(self, "superexponent_notation", self.exponent_notation)
        as_notation(self.superexponent_notation, "superexponent_notation")

        object.__setattr__(self, "exp_chars", self._resolve_exp_chars(self.exp_chars))
        if self.neg_exp_chars is not None:
            object.__setattr__(self, "neg_exp_chars", _as_neg_exp_chars(self.neg_exp_chars))

    # Threshold below which one split is shown
    @abstractmethod
    def _threshold(self) -> Magnitude: ...

    @abstractmethod
    def _decompose(self, value: Magnitude) -> tuple[Magnitude, Magnitude]: ...

    @abstractmethod
    def _format_overflow(self, value: Magnitude) -> str: ...

    def format_magnitude(self, value: Magnitude) -> str:
        if value == ZERO:
            return self.mantissa_notation.format(ZERO)
        if self.iteration_zero and self.maxnum.recip() < value < self.maxnum:
            return self.mantissa_notation.format(value)
        if multabs(value) < self._threshold():
            return self._format_split(value)
        return self._format_overflow(value)

    def _format_split(self, value: Magnitude) -> str:
        mantissa, exponent = self._decompose(value)
        before, after = self.exp_chars[0]
        if exponent < ZERO and self.neg_exp_chars is not None and self.neg_exp_chars[0] is not False:
            if self.neg_exp_chars[0] is True:
                return self._reciprocal(value)
            before, after = self.neg_exp_chars[0]
            exponent = -exponent
        mantissa_text = self.mantissa_notation.format(mantissa)
        exponent_text = self.role(self.exponent_notation).format(exponent)
        if self.exp_before:
            return before + exponent_text + after + mantissa_text
        return mantissa_text + before + exponent_text + after

    def _reciprocal(self, value: Magnitude) -> str:
        before, after = self.neg_exp_chars[1]
        return before + self.format(value.recip()) + after

    def _with_count(self, text: str, count: int) -> str:
        """Add ``count`` repeated-split markers to text, collapsing long runs."""
        chars = self.exp_chars
        if count <= self.max_in_a_row:
            return wrap_repeated(text, chars[1], count)
        count_text = self.role(self.superexponent_notation).format(count)
        count_text = chars[2][0] + count_text + chars[2][1]
        return text + count_text if self.superexp_after else count_text + text

    def _resolve_exp_chars(self, chars: Any) -> tuple[tuple[str, str], ...]:
        if isinstance(chars, str) or not isinstance(chars, (tuple, list)) or len(chars) != 3:
            raise TypeError(f"exp_chars must hold 3 pairs, got {fmt_value(chars)}")
        first = as_char_pair(chars[0], "exp_chars[0]")
        third = as_char_pair(chars[2], "exp_chars[2]")
        repeated = chars[1]
        if isinstance(repeated, str) or not isinstance(repeated, (tuple, list)) or len(repeated) != 2:
            raise TypeError(f"exp_chars[1] must be a pair, got {fmt_value(repeated)}")
        one = None
        second = []
        for own, entry in zip(first, repeated):
            if isinstance(entry, bool):
                if one is None:
                    one = self.mantissa_notation.format(ONE)
                entry = own + one if entry else one + own
            elif not isinstance(entry, str):
                raise TypeError(f"exp_chars[1] entries must be str or bool, not {fmt_type(entry)}")
            second.append(entry)
        return first, tuple(second), third

    def _count_to_int(self, count: Magnitude) -> int:
        count = max(count, ZERO)
        return int(count.to_float()) if count.is_finite() else int(_COUNT_LIMIT)


def _as_neg_exp_chars(chars: Any) -> tuple:
    if isinstance(chars, str) or not isinstance(chars, (tuple, list)) or len(chars) != 2:
        raise TypeError(f"neg_exp_chars must be None or a pair, got {fmt_value(chars)}")
    first = chars[0] if isinstance(chars[0], bool) else as_char_pair(chars[0], "neg_exp_chars[0]")
    return first, as_char_pair(chars[1], "neg_exp_chars[1]")


def _check_divergent(base: Magnitude, exp_multiplier: Magnitude, notation: str) -> None:
    if exp_multiplier == ZERO:
        raise ValueError("exp_multiplier must not be zero")
    effective = base ** exp_multiplier.recip()
    if not effective > CONVERGENT_BASE:
        raise ValueError(
            f"{notation} needs a base whose tetration diverges (above {CONVERGENT_BASE}), "
            f"got {fmt_value(base)} with exp_multiplier {fmt_value(exp_multiplier)}"
        )


# Notations ------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True, kw_only=True)
class ScientificNotation(ExponentNotation):
    """
    Scientific notation: mantissa * base^exponent, written "1.5e12".

    Values past base^maxnum get leading e's ("e1.5e12") for each time the exponent itself had
    to be split, collapsing to "(e^7)1.5e12" past max_in_a_row.

    Attributes:
        base: Exponent base; its tetration must diverge.
        exp_multiplier: The exponent shown is multiplied by this.

    Examples:
        >>> ScientificNotation().format(1500)
        '1.5e3'
        >>> ScientificNotation(engineerings=3).format(123456)
        '123.5e3'
    """
    name: str = "Scientific Notation"
    base: Magnitude = TEN
    exp_multiplier: Magnitude = ONE

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "base", to_magnitude(self.base))
        object.__setattr__(self, "exp_multiplier", to_magnitude(self.exp_multiplier))
        _check_divergent(self.base, self.exp_multiplier, "ScientificNotation")

    def _threshold(self) -> Magnitude:
        return self.base ** self.maxnum

    def _decompose(self, value: Magnitude) -> tuple[Magnitude, Magnitude]:
        return scientifify(value, self.base, self.rounding, self.mantissa_power, self.engineerings,
                           self.exp_multiplier)

    def _format_overflow(self, value: Magnitude) -> str:
        reciprocal = False
        if value < ONE:
            if self.neg_exp_chars is not None:
                return self._reciprocal(value)
            reciprocal = True
            mantissa, exponent = self._decompose(value)
            value = self.base ** -exponent * mantissa
        added = (multslog(value, self.base, self.exp_multiplier)
                 - multslog(self.maxnum, self.base, self.exp_multiplier)).floor()
        added = self._count_to_int(added)
        if added >= _COUNT_LIMIT:
            value = self.maxnum
        else:
            value = iteratedmultlog(value, self.base, added, self.exp_multiplier)
        threshold = self._threshold()
        while value >= threshold:
            added += 1
            value = iteratedmultlog(value, self.base, 1, self.exp_multiplier)
        return self._with_count(self.format(-value if reciprocal else value), added)


@dataclass(frozen=True, kw_only=True)
class HyperscientificNotation(ExponentNotation):
    """
    Tetrational scientific notation: iteratedexp(base, exponent, mantissa), written "2F3".

    "2F3" is 10^10^10^2. Past base^^maxnum the exponent is split again, giving "F2F3" and,
    past max_in_a_row, "(F^7)2F3".

    Attributes:
        base: Tower base; its tetration must diverge.
        exp_multiplier: Each tower level is base^(x / exp_multiplier).
        hyperexp_multiplier: The tower height shown is multiplied by this.
        format_negatives: Decompose negative values directly (a negative mantissa or height)
            instead of writing a minus sign.

    Examples:
        >>> HyperscientificNotation().format(10 ** 10 ** 4)
        '4F2'
    """
    name: str = "Hyperscientific Notation"
    maxnum: Magnitude = Magnitude(1e10)
    exp_chars: ExpChars = (("F", ""), ("F", ""), ("(F^", ")"))
    base: Magnitude = TEN
    exp_multiplier: Magnitude = ONE
    hyperexp_multiplier: Magnitude = ONE
    format_negatives: bool = True

    def __post_init__(self):
        super().__post_init__()
        for name in ("base", "exp_multiplier", "hyperexp_multiplier"):
            object.__setattr__(self, name, to_magnitude(getattr(self, name)))
        _check_divergent(self.base, self.exp_multiplier, "HyperscientificNotation")
        if self.hyperexp_multiplier == ZERO:
            raise ValueError("hyperexp_multiplier must not be zero")
        if self.mantissa_power < Magnitude(-2):
            raise ValueError(f"mantissa_power must be at least -2, got {fmt_value(self.mantissa_power)}")

    def formats_negative(self, value: Magnitude) -> bool:
        return self.format_negatives

    def _threshold(self) -> Magnitude:
        return iteratedexpmult(self.base, 1, self.maxnum, self.exp_multiplier)

    def _decompose(self, value: Magnitude) -> tuple[Magnitude, Magnitude]:
        return hyperscientifify(value, self.base, self.rounding, self.mantissa_power, self.engineerings,
                                self.exp_multiplier, self.hyperexp_multiplier)

    def format_magnitude(self, value: Magnitude) -> str:
        if value == ZERO:
            return self.mantissa_notation.format(value)
        if self.iteration_zero and self.maxnum.recip() < value < self.maxnum:
            return self.mantissa_notation.format(value)
        if value < self._threshold():
            return self._format_split(value)
        return self._format_overflow(value)

    def _format_overflow(self, value: Magnitude) -> str:
        if value < ONE and self.neg_exp_chars is not None:
            return self._reciprocal(value)
        added = 0
        threshold = self._threshold()
        while value >= threshold:
            added += 1
            value = multslog(value, self.base, self.exp_multiplier) * self.hyperexp_multiplier
        return self._with_count(self.format(value), added)


@dataclass(frozen=True, kw_only=True)
class WeakHyperscientificNotation(ExponentNotation):
    """
    Weak-tetration scientific notation: (base↓↓exponent)^mantissa, written "2f3".

    base↓↓n is the bottom-up tower base^(base^(n-1)), which grows far slower than base^^n.

    Attributes:
        base: Tower base, above 1.
        recip_string: Wrapper for values below 1, written as the reciprocal. None writes them
            with the mantissa notation.

    Examples:
        >>> WeakHyperscientificNotation().format(1e100)
        '1f3'
    """
    name: str = "Weak Hyperscientific Notation"
    exp_chars: ExpChars = (("f", ""), ("f", ""), ("(f^", ")"))
    base: Magnitude = TEN
    recip_string: tuple[str, str] | None = ("1 / ", "")

    def __post_init__(self):
        super().__post_init__()
        base = to_magnitude(self.base)
        if not base > ONE:
            raise ValueError(f"base must be greater than 1, got {fmt_value(self.base)}")
        object.__setattr__(self, "base", base)
        if self.recip_string is not None:
            object.__setattr__(self, "recip_string", as_char_pair(self.recip_string, "recip_string"))

    def _threshold(self) -> Magnitude:
        return weak_tetrate(self.base, self.maxnum)

    def _decompose(self, value: Magnitude) -> tuple[Magnitude, Magnitude]:
        return weak_hyperscientifify(value, self.base, self.rounding, self.mantissa_power, self.engineerings)

    def format_magnitude(self, value: Magnitude) -> str:
        if value == ZERO or value == ONE:
            return self.mantissa_notation.format(value)
        if value < ONE:
            if self.recip_string is None:
                return self.mantissa_notation.format(value)
            return self.recip_string[0] + self.format(value.recip()) + self.recip_string[1]
        return super().format_magnitude(value)

    def _format_split(self, value: Magnitude) -> str:
        mantissa, exponent = self._decompose(value)
        before, after = self.exp_chars[0]
        if exponent < ZERO and self.neg_exp_chars is not None and not isinstance(self.neg_exp_chars[0], bool):
            before, after = self.neg_exp_chars[0]
            exponent = -exponent
        mantissa_text = self.mantissa_notation.format(mantissa)
        exponent_text = self.role(self.exponent_notation).format(exponent)
        if self.exp_before:
            return before + exponent_text + after + mantissa_text
        return mantissa_text + before + exponent_text + after

    def _format_overflow(self, value: Magnitude) -> str:
        # Two logarithms undo one weak-tetration level, so estimate the count from slog / 2
        added = ((slog(value, self.base) - slog(self.maxnum, self.base) - 3) / TWO).floor()
        added = self._count_to_int(added)
        if added >= _COUNT_LIMIT:
            value = self.maxnum
        else:
            value = iteratedlog(value, self.base, 2 * added)
        threshold = self._threshold()
        while value >= threshold:
            added += 1
            value = weak_slog(value, self.base)
        return self._with_count(self.format(value), added)


@dataclass(frozen=True, kw_only=True)
class PentaScientificNotation(ExponentNotation):
    """
    Pentational scientific notation: pentate(base, exponent, mantissa), written "3G1".

    "3G1" is 10^^3. Past pentate(base, maxnum) the exponent is split again ("G3G1"), which in
    practice only happens with a small maxnum.

    Attributes:
        base: Base of the pentation; its tetration must diverge.
        format_negatives: Decompose negative values directly instead of writing a minus sign.

    Examples:
        >>> PentaScientificNotation().format("ee10")
        '3G1'
    """
    name: str = "Penta-Scientific Notation"
    maxnum: Magnitude = Magnitude(1e10)
    exp_chars: ExpChars = (("G", ""), ("G", ""), ("(G^", ")"))
    base: Magnitude = TEN
    format_negatives: bool = True

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "base", to_magnitude(self.base))
        _check_divergent(self.base, ONE, "PentaScientificNotation")

    def formats_negative(self, value: Magnitude) -> bool:
        return self.format_negatives

    def _threshold(self) -> Magnitude:
        return pentate(self.base, self.maxnum)

    def _decompose(self, value: Magnitude) -> tuple[Magnitude, Magnitude]:
        return pentascientifify(value, self.base, self.rounding, self.mantissa_power, self.engineerings)

    def format_magnitude(self, value: Magnitude) -> str:
        if self.iteration_zero and self.maxnum.recip() < value < self.maxnum:
            return self.mantissa_notation.format(value)
        if value < self._threshold():
            return self._format_split(value)
        return self._format_overflow(value)

    def _format_overflow(self, value: Magnitude) -> str:
        if value < ONE and self.neg_exp_chars is not None:
            return self._reciprocal(value)
        added = 0
        threshold = self._threshold()
        while value >= threshold:
            added += 1
            value = penta_log(value, self.base)
        return self._with_count(self.format(value), added)


@dataclass(frozen=True, kw_only=True)
class FactorialScientificNotation(ExponentNotation):
    """
    Factorial scientific notation: mantissa * exponent!, written "1.5 * 7!".

    Values below 1 are written as the reciprocal ("1 / 5 * 7!"). Past maxnum! the whole value
    is wrapped in factorials, "(3.5 * 8!)!", collapsing to "3.5 * 8! (!7)" past max_in_a_row.

    Examples:
        >>> FactorialScientificNotation().format(120)
        '1 * 5!'
    """
    name: str = "Factorial Scientific Notation"
    maxnum: Magnitude = Magnitude(3628800)
    exp_chars: ExpChars = ((" * ", "!"), ("(", ")!"), (" (!", ")"))
    neg_exp_chars: NegExpChars | None = ((" / ", "!"), ("1 / ", ""))
    superexp_after: bool = True

    def __post_init__(self):
        super().__post_init__()
        if not self.maxnum > TWO:
            raise ValueError(f"maxnum must be greater than 2, got {fmt_value(self.maxnum)}")

    def _threshold(self) -> Magnitude:
        return factorial(self.maxnum)

    def _decompose(self, value: Magnitude) -> tuple[Magnitude, Magnitude]:
        return factorial_scientifify(value, self.rounding, self.mantissa_power, self.engineerings)

    def _format_overflow(self, value: Magnitude) -> str:
        reciprocal = False
        if value < ONE:
            if self.neg_exp_chars is not None:
                return self._reciprocal(value)
            reciprocal = True
            mantissa, exponent = self._decompose(value)
            value = mantissa * factorial(-exponent)
        added = self._count_to_int(factorial_slog(value, self.maxnum).floor())
        if added >= _COUNT_LIMIT:
            value = self.maxnum
        else:
            value = inverse_factorial(value, added)
        threshold = self._threshold()
        while value >= threshold:
            added += 1
            value = inverse_factorial(value, 1)
        return self._with_count(self.format(-value if reciprocal else value), added)
