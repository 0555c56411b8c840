"""
The formatting contract shared by every notation.

A Notation is a frozen dataclass: validated once in ``__post_init__``, changed only by
``merge(**overrides)``, which builds a new instance. ``format(value)`` is the front door. It
coerces the value to a Magnitude, answers NaN, infinities and effectively-zero values with
configured symbols, peels off the sign, and hands the rest to ``format_magnitude``.

Notations render their pieces (mantissa, exponent, iteration counts) by calling other
notations held in role fields. A role set to ``None`` means "this notation itself", which is
how a notation writes its own overflow count in its own terms. Recursion ends because every
nested call sees a strictly smaller value; a context-local depth counter still caps nesting at
``NotationConf.MAX_DEPTH`` and raises NotationDepthError past it.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import contextvars
import dataclasses
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Self

# Local ----------------------------------------------------------------------------------------------------------------
from .magnitude import Magnitude, ZERO
from .numeric import to_magnitude
from .sentinels import UNSET, UnsetType
from .tools import as_callable, as_char_pair, fmt_type, fmt_value

__all__ = [
    'Notation',
    'NotationConf',
    'NotationDepthError',
    'NotationSymbols',
    'as_notation',
    'as_positive',
    'as_whole',
    'default_notation',
]


# Configuration --------------------------------------------------------------------------------------------------------

class NotationConf:
    """
    Default constants shared by all notations.

    Attributes:
        MAX_DEPTH: Maximum number of nested ``format`` calls in one context.
        NAN: Text for NaN.
        INFINITY: Text for positive infinity.
        NEGATIVE: Text placed around negative values.
    """
    MAX_DEPTH = 200
    NAN = "???"
    INFINITY = "Infinite"
    NEGATIVE = ("-", "")


class NotationDepthError(RecursionError):
    """Raised when nested notations recurse past NotationConf.MAX_DEPTH."""


_format_depth: contextvars.ContextVar[int] = contextvars.ContextVar("towerfmt_format_depth", default=0)


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class NotationSymbols:
    """
    Sentinel texts for values a notation cannot decompose.

    Attributes:
        nan: Text for NaN.
        infinity: Text for positive infinity.
        negative_infinity: Text for negative infinity. None wraps ``infinity`` in the
            notation's negative markers.

    Examples:
        >>> NotationSymbols.unicode().infinity
        '∞'
    """
    nan: str = NotationConf.NAN
    infinity: str = NotationConf.INFINITY
    negative_infinity: str | None = None

    def __post_init__(self):
        for name in ("nan", "infinity"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"{name} must be str, not {fmt_type(getattr(self, name))}")
        if not isinstance(self.negative_infinity, (str, type(None))):
            raise TypeError(f"negative_infinity must be str or None, not {fmt_type(self.negative_infinity)}")

    @classmethod
    def ascii(cls) -> Self:
        """Plain-text symbols, the library default."""
        return cls(nan=NotationConf.NAN, infinity=NotationConf.INFINITY, negative_infinity=None)

    @classmethod
    def unicode(cls) -> Self:
        """Mathematical symbols."""
        return cls(nan="NaN", infinity="∞", negative_infinity="−∞")

    def merge(self,
              nan: str | UnsetType = UNSET,
              infinity: str | UnsetType = UNSET,
              negative_infinity: str | None | UnsetType = UNSET,
              ) -> "NotationSymbols":
        """
        Create a new NotationSymbols with the given fields replaced.

        Parameters not provided (UNSET) are inherited from the current instance.
        """
        nan = self.nan if nan is UNSET else nan
        infinity = self.infinity if infinity is UNSET else infinity
        negative_infinity = self.negative_infinity if negative_infinity is UNSET else negative_infinity
        return NotationSymbols(nan=nan, infinity=infinity, negative_infinity=negative_infinity)


@dataclass(frozen=True, kw_only=True)
class Notation(ABC):
    """
    Base class of all notations.

    Attributes:
        name: Display name.
        symbols: Texts for NaN and the infinities.
        negative: (before, after) pair wrapped around negative values.
        is_infinite: Predicate deciding which values count as infinite; None means only true
            infinities. Values whose reciprocal counts as infinite format as 0.
    """
    name: str = ""
    symbols: NotationSymbols = field(default_factory=NotationSymbols)
    negative: tuple[str, str] = NotationConf.NEGATIVE
    is_infinite: Callable[[Magnitude], bool] | None = None

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise TypeError(f"name must be str, not {fmt_type(self.name)}")
        if not isinstance(self.symbols, NotationSymbols):
            raise TypeError(f"symbols must be NotationSymbols, not {fmt_type(self.symbols)}")
        object.__setattr__(self, "negative", as_char_pair(self.negative, "negative"))
        if self.is_infinite is not None:
            as_callable(self.is_infinite, "is_infinite")

    def __str__(self) -> str:
        return self.name or type(self).__name__

    def format(self, value: Any) -> str:
        """
        Render value as a string.

        Accepts anything ``to_magnitude`` understands.

        Raises:
            TypeError: For values that are not number-like.
            NotationDepthError: If nested notations recurse too deeply.
        """
        value = to_magnitude(value)
        with _nested_format(self):
            if value.is_nan():
                return self.symbols.nan
            if self._infinite(value):
                if value.sign > 0:
                    return self.symbols.infinity
                if self.symbols.negative_infinity is not None:
                    return self.symbols.negative_infinity
                return self.negative[0] + self.symbols.infinity + self.negative[1]
            if value != ZERO and self._infinite(value.recip()):
                return self.format(ZERO)
            if value.sign < 0 and not self.formats_negative(value):
                return self.negative[0] + self.format_magnitude(-value) + self.negative[1]
            return self.format_magnitude(value)

    @abstractmethod
    def format_magnitude(self, value: Magnitude) -> str:
        """Render a finite value; negative only when formats_negative() accepted it."""

    def formats_negative(self, value: Magnitude) -> bool:
        """True if format_magnitude renders this negative value itself instead of the sign wrapper."""
        return False

    def merge(self, **overrides) -> Self:
        """
        Create a new notation of the same type with fields replaced.

        UNSET values are ignored, so callers can forward optional arguments unchanged.

        Raises:
            TypeError: For unknown field names.
        """
        changes = {name: value for name, value in overrides.items() if value is not UNSET}
        return dataclasses.replace(self, **changes)

    def role(self, notation: "Notation | None") -> "Notation":
        """Resolve a role field: None stands for this notation."""
        return self if notation is None else notation

    def _infinite(self, value: Magnitude) -> bool:
        if self.is_infinite is None:
            return value.is_inf()
        return bool(self.is_infinite(value))


# Methods --------------------------------------------------------------------------------------------------------------

def default_notation() -> "Notation":
    """Return a fresh DefaultNotation for a role left unconfigured."""
    from .default import DefaultNotation
    return DefaultNotation()


def as_notation(value: Any, field_name: str, *, allow_self: bool = True) -> "Notation | None":
    """Validate a role field holding a notation (or None for self-reference)."""
    if value is None and allow_self:
        return None
    if not isinstance(value, Notation):
        raise TypeError(f"{field_name} must be a Notation, not {fmt_type(value)}")
    return value


def as_positive(value: Any, field_name: str) -> Magnitude:
    """Coerce to Magnitude and require value > 0."""
    converted = to_magnitude(value)
    if not converted > ZERO:
        raise ValueError(f"{field_name} must be positive, got {fmt_value(value)}")
    return converted


def as_whole(value: Any, field_name: str) -> Magnitude:
    """Coerce to Magnitude and require a whole number."""
    converted = to_magnitude(value)
    if not converted.is_integer():
        raise ValueError(f"{field_name} must be a whole number, got {fmt_value(value)}")
    return converted


@contextmanager
def _nested_format(notation: Notation) -> Iterator[None]:
    depth = _format_depth.get()
    if depth >= NotationConf.MAX_DEPTH:
        raise NotationDepthError(
            f"{notation} nested format() calls deeper than {NotationConf.MAX_DEPTH} levels"
        )
    token = _format_depth.set(depth + 1)
    try:
        yield
    finally:
        _format_depth.reset(token)
