"""
Notations that wrap other notations.

AppliedFunctionNotation transforms the value before an inner notation writes it and
transforms the text afterwards. ConditionalNotation picks one of several notations by
predicate.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .magnitude import Magnitude
from .notation import Notation, _nested_format, as_notation, default_notation
from .numeric import to_magnitude
from .tools import as_callable, fmt_value

__all__ = [
    'AppliedFunctionNotation',
    'ConditionalNotation',
]


def _identity(value):
    return value


@dataclass(frozen=True, kw_only=True)
class AppliedFunctionNotation(Notation):
    """
    Write ``string_func(inner.format(value_func(value)))``.

    Attributes:
        value_func: Applied to the value first.
        inner: Writes the transformed value.
        string_func: Applied to the inner notation's text.
        non_finite_applied: Also transform NaN and infinities. Otherwise they go to the inner
            notation untouched.

    Examples:
        >>> percent = AppliedFunctionNotation(value_func=lambda v: v * 100, string_func=lambda s: s + "%")
        >>> percent.format(0.25)
        '25%'
    """
    name: str = "Applied Function Notation"
    value_func: Callable[[Magnitude], Any] = _identity
    inner: Notation = field(default_factory=default_notation)
    string_func: Callable[[str], str] = _identity
    non_finite_applied: bool = False

    def __post_init__(self):
        super().__post_init__()
        as_callable(self.value_func, "value_func")
        as_callable(self.string_func, "string_func")
        as_notation(self.inner, "inner", allow_self=False)

    def format(self, value: Any) -> str:
        value = to_magnitude(value)
        with _nested_format(self):
            if not value.is_finite() and not self.non_finite_applied:
                return self.inner.format(value)
            return self.format_magnitude(value)

    def format_magnitude(self, value: Magnitude) -> str:
        return self.string_func(self.inner.format(self.value_func(value)))


@dataclass(frozen=True, kw_only=True)
class ConditionalNotation(Notation):
    """
    Use the first notation whose predicate accepts the value.

    Attributes:
        special_included: Predicates also see NaN, infinities and negative values. Otherwise
            those are handled by the usual front door and predicates only see values >= 0.
        options: (notation, predicate) pairs, tried in order.

    Raises:
        LookupError: From format() when no predicate accepts the value.

    Examples:
        >>> small = ConditionalNotation(options=[
        ...     (DefaultNotation(), lambda v: v < 1e6),
        ...     (ScientificNotation(), lambda v: True),
        ... ])
        >>> small.format(1e9)
        '1e9'
    """
    name: str = "Conditional Notation"
    special_included: bool = False
    options: tuple[tuple[Notation, Callable[[Magnitude], bool]], ...] = ()

    def __post_init__(self):
        super().__post_init__()
        options = []
        for i, option in enumerate(self.options):
            if not isinstance(option, (tuple, list)) or len(option) != 2:
                raise TypeError(f"options[{i}] must be a (notation, predicate) pair, got {fmt_value(option)}")
            notation, predicate = option
            as_notation(notation, f"options[{i}][0]", allow_self=False)
            as_callable(predicate, f"options[{i}][1]")
            options.append((notation, predicate))
        object.__setattr__(self, "options", tuple(options))

    def format(self, value: Any) -> str:
        if not self.special_included:
            return super().format(value)
        value = to_magnitude(value)
        with _nested_format(self):
            return self.format_magnitude(value)

    def format_magnitude(self, value: Magnitude) -> str:
        for notation, predicate in self.options:
            if predicate(value):
                return notation.format(value)
        raise LookupError(f"no notation in {self} accepts {fmt_value(value)}")
