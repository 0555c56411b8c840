"""
Notations built from caller-supplied increasing functions.

IncreasingFunctionNotation writes a value as ``f(f(...f(x)))``. It undoes f until the argument
is below ``maxnum`` and shows the undone applications as markers. The two variants below
share a preprocessing stage that first shrinks the value with an iteration function (10^x by
default) and a layer function (10^^x by default), then split what is left:

* IncreasingFunctionProductNotation peels off terms, "f(3)^2 * f(1) * 5";
* IncreasingFunctionScientificNotation solves the arguments of an n-ary function, the way
  scientific notation solves mantissa and exponent of m * 10^e.

Functions are given as :class:`towerfmt.stepper.Forward` or :class:`towerfmt.stepper.Inverse`.
A plain callable counts as Forward, and the missing direction is found by bisection.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, NamedTuple, Sequence

# Local ----------------------------------------------------------------------------------------------------------------
from .decompose import Rounding, increasing_scientifify, round_to
from .engineering import EngineeringLike, EngineeringSpec
from .magnitude import INF, NEG_INF, ONE, ZERO, Magnitude, increasing_inverse, log, log10, pow10
from .notation import Notation, as_notation, as_whole, default_notation
from .numeric import to_magnitude
from .sentinels import UNSET, UnsetType
from .stepper import (
    Forward, IncreasingFunction, Inverse, StepResult, arity, as_increasing, iterate, layer_count,
    recip_applies, render_count, tower_layers, validate_whole_spec,
)
from .tools import as_callable, as_char_pair, as_char_pairs, fmt_type, fmt_value

__all__ = [
    'IncreasingFunctionNotation',
    'IncreasingFunctionProductNotation',
    'IncreasingFunctionScientificNotation',
]

CountChars = tuple[tuple[str, str], tuple[str, str], tuple[str, str]]
ArgumentChars = tuple[str, str, str, str, str, str]

ITERATION_CHARS: CountChars = (("f(", ")"), ("f(", ")"), ("(f^", ")"))
NEG_ITERATION_CHARS: CountChars = (("f^-1(", ")"), ("f^-1(", ")"), ("(f^-", ")"))
LAYER_CHARS: CountChars = (("e", ""), ("e", ""), ("(e^", ")"))


def _as_bools(values: Any, field_name: str, count: int) -> tuple[bool, ...]:
    if isinstance(values, str) or not isinstance(values, Sequence) or len(values) != count:
        raise TypeError(f"{field_name} must hold {count} booleans, got {fmt_value(values)}")
    return tuple(bool(v) for v in values)


def _as_in_a_row(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{field_name} must be int, not {fmt_type(value)}")
    return value


def _as_maxnum(value: Any) -> Magnitude:
    return INF if value is None else to_magnitude(value)


# Single function ------------------------------------------------------------------------------------------------------

@dataclass(frozen=True, kw_only=True)
class IncreasingFunctionNotation(Notation):
    """
    Write a value as an increasing function applied some number of times to a small argument.

    The function is undone (in steps along iteration_engineerings) until the rounded argument
    is below maxnum and at least min_iterations applications were undone. With f(x) = 10x and
    maxnum 100, 5000 is "f(f(50))".

    Values past layer_maxnum first lose whole layers of layer_function, written with
    layer_chars ("e" by default, so 10^10^x counts as two layers).

    A negative min_iterations applies f instead, counting down, as long as the argument stays
    below maxnum; those counts use neg_iteration_chars ("f^-1(...)").

    Attributes:
        func: The increasing function f, or an Inverse holding f^-1.
        layer_function: Faster-growing function whose applications are removed first.
        layer_mimics: Count removed layers as iterations on the iteration lattice.
        iteration_chars: Markers for iterations: innermost, each further one, collapsed count.
        neg_iteration_chars: Markers for negative iteration counts; None writes them with
            iteration_chars and the sign in the count.
        layer_chars: Markers for layers.
        min_iterations: Smallest number of applications undone; must be whole.
        maxnum: Largest argument shown, exclusive. None means no limit, which needs an
            unbounded range.
        layer_maxnum: Values at or above this lose layers first.
        range_minimum: Lower end of the domain f is increasing on.
        range_maximum: Upper end of that domain; must be at least maxnum.
        max_iterations_in_a_row: Longest run of iteration markers before they collapse.
        max_layers_in_a_row: Longest run of layer markers before they collapse.
        superexp_after: Put the collapsed count after the text instead of before, for
            iterations, negative iterations and layers respectively.
        rounding: Rounding applied to the argument before comparing and writing it.
        iteration_engineerings: Allowed iteration counts; must be whole.
        layer_engineerings: Allowed layer counts.
        inner_notation: Writes the argument.
        iteration_notation: Writes collapsed iteration counts. None means this notation;
            unset means inner_notation.
        layer_notation: Writes collapsed layer counts. None means this notation; unset means
            iteration_notation.
        recip_string: Wrapper for small values written as a reciprocal.

    Raises:
        ValueError: If the range is empty or narrower than maxnum, if maxnum is None with a
            finite range maximum, or if an iteration setting is not whole.

    Examples:
        >>> IncreasingFunctionNotation(func=lambda x: x * 10, maxnum=100).format(5000)
        'f(f(50))'
    """
    name: str = "Increasing Function Notation"
    func: IncreasingFunction
    layer_function: IncreasingFunction = field(default_factory=tower_layers)
    layer_mimics: bool = False
    iteration_chars: CountChars = ITERATION_CHARS
    neg_iteration_chars: CountChars | None = NEG_ITERATION_CHARS
    layer_chars: CountChars = LAYER_CHARS
    min_iterations: Magnitude = ONE
    maxnum: Magnitude | None = Magnitude(1e12)
    layer_maxnum: Magnitude = Magnitude("(e^6)12")
    range_minimum: Magnitude = ZERO
    range_maximum: Magnitude = INF
    max_iterations_in_a_row: int = 5
    max_layers_in_a_row: int = 3
    superexp_after: tuple[bool, bool, bool] = (False, False, False)
    rounding: Rounding = 0
    iteration_engineerings: EngineeringLike = 1
    layer_engineerings: EngineeringLike = 1
    inner_notation: Notation = field(default_factory=default_notation)
    iteration_notation: Notation | None | UnsetType = UNSET
    layer_notation: Notation | None | UnsetType = UNSET
    recip_string: tuple[str, str] = ("1 / ", "")

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "func", as_increasing(self.func, "func"))
        object.__setattr__(self, "layer_function", as_increasing(self.layer_function, "layer_function"))
        object.__setattr__(self, "iteration_chars", as_char_pairs(self.iteration_chars, "iteration_chars", 3))
        if self.neg_iteration_chars is not None:
            object.__setattr__(self, "neg_iteration_chars",
                               as_char_pairs(self.neg_iteration_chars, "neg_iteration_chars", 3))
        object.__setattr__(self, "layer_chars", as_char_pairs(self.layer_chars, "layer_chars", 3))
        object.__setattr__(self, "min_iterations", as_whole(self.min_iterations, "min_iterations"))
        if self.maxnum is not None:
            object.__setattr__(self, "maxnum", to_magnitude(self.maxnum))
        object.__setattr__(self, "layer_maxnum", to_magnitude(self.layer_maxnum))

        minimum, maximum = to_magnitude(self.range_minimum), to_magnitude(self.range_maximum)
        if self.maxnum is not None and maximum < self.maxnum:
            raise ValueError(f"range_maximum must be at least maxnum, got {fmt_value(self.range_maximum)} "
                             f"with maxnum {fmt_value(self.maxnum)}")
        if self.maxnum is None and maximum.is_finite():
            raise ValueError(f"range_maximum must be infinite when maxnum is None, got {fmt_value(self.range_maximum)}")
        if not maximum > minimum:
            raise ValueError(f"range_maximum must be greater than range_minimum, got "
                             f"[{fmt_value(self.range_minimum)}, {fmt_value(self.range_maximum)}]")
        object.__setattr__(self, "range_minimum", minimum)
        object.__setattr__(self, "range_maximum", maximum)

        _as_in_a_row(self.max_iterations_in_a_row, "max_iterations_in_a_row")
        _as_in_a_row(self.max_layers_in_a_row, "max_layers_in_a_row")
        object.__setattr__(self, "superexp_after", _as_bools(self.superexp_after, "superexp_after", 3))
        if not callable(self.rounding):
            object.__setattr__(self, "rounding", to_magnitude(self.rounding))
        iteration_spec = validate_whole_spec(EngineeringSpec.of(self.iteration_engineerings), "iteration_engineerings")
        object.__setattr__(self, "iteration_engineerings", iteration_spec)
        object.__setattr__(self, "layer_engineerings", EngineeringSpec.of(self.layer_engineerings))

        as_notation(self.inner_notation, "inner_notation", allow_self=False)
        if self.iteration_notation is UNSET:
            object.__setattr__(self, "iteration_notation", self.inner_notation)
        as_notation(self.iteration_notation, "iteration_notation")
        if self.layer_notation is UNSET:
            object.__setattr__(self, "layer_notation", self.iteration_notation)
        as_notation(self.layer_notation, "layer_notation")
        object.__setattr__(self, "recip_string", as_char_pair(self.recip_string, "recip_string"))

    def formats_negative(self, value: Magnitude) -> bool:
        return value >= self.range_minimum

    def format_magnitude(self, value: Magnitude) -> str:
        pair = self.func.resolve(self.range_minimum, self.range_maximum)
        if recip_applies(value, pair.grow(self.range_minimum)):
            return self.recip_string[0] + self.format(value.recip()) + self.recip_string[1]

        layer = self.layer_function.resolve()
        step = layer_count(value, layer, self.layer_maxnum, self.layer_engineerings,
                           self.iteration_engineerings, self.layer_mimics, self.rounding)
        argument, iterations = iterate(
            step.argument, pair,
            maxnum=_as_maxnum(self.maxnum),
            min_iterations=self.min_iterations,
            spec=self.iteration_engineerings,
            rounding=self.rounding,
            minimum=self.range_minimum,
            maximum=self.range_maximum,
            iterations=step.iterations,
        )

        text = self.inner_notation.format(round_to(argument, self.rounding))
        negative = self.neg_iteration_chars is not None and iterations < ZERO
        if negative:
            chars, after, iterations = self.neg_iteration_chars, self.superexp_after[1], -iterations
        else:
            chars, after = self.iteration_chars, self.superexp_after[0]
        text = render_count(text, iterations, chars, self.max_iterations_in_a_row,
                            self.role(self.iteration_notation).format, after)
        return render_count(text, step.layers, self.layer_chars, self.max_layers_in_a_row,
                            self.role(self.layer_notation).format, self.superexp_after[2])


# Shared preprocessing -------------------------------------------------------------------------------------------------

@dataclass(frozen=True, kw_only=True)
class _PreprocessedNotation(Notation):
    """
    Shrinks a value with an iteration function and a layer function before a subclass splits
    the rest.

    Attributes:
        iteration_maxnum: Values at or above this are shrunk with iteration_function. None
            turns the iteration stage off.
        iteration_function: Function whose applications are undone, 10^x by default.
        layer_maxnum: Values at or above this lose layers of layer_function first.
        layer_function: Faster-growing function, 10^^x by default.
        layer_mimics: Count removed layers as iterations on the iteration lattice.
        iteration_chars: Markers for iterations: innermost, each further one, collapsed count.
        layer_chars: Markers for layers.
        max_iterations_in_a_row: Longest run of iteration markers before they collapse.
        max_layers_in_a_row: Longest run of layer markers before they collapse.
        superexp_after: Put the collapsed iteration and layer counts after the text.
        iteration_engineerings: Allowed iteration counts; must be whole.
        layer_engineerings: Allowed layer counts.
        iteration_notation: Writes collapsed iteration counts; None means this notation.
        layer_notation: Writes collapsed layer counts. None means this notation; unset means
            iteration_notation.
        min_value: Values below this are written whole by the constant notation, and negative
            values at or above it are split directly.
        recip_string: Wrapper for small values written as a reciprocal.
    """
    iteration_maxnum: Magnitude | None = Magnitude("(e^5)12")
    iteration_function: IncreasingFunction = field(default_factory=lambda: Forward(pow10, inverse=log10))
    layer_maxnum: Magnitude = Magnitude("(e^5)12")
    layer_function: IncreasingFunction = field(default_factory=tower_layers)
    layer_mimics: bool = False
    iteration_chars: CountChars = ITERATION_CHARS
    layer_chars: CountChars = LAYER_CHARS
    max_iterations_in_a_row: int = 5
    max_layers_in_a_row: int = 3
    superexp_after: tuple[bool, bool] = (False, False)
    iteration_engineerings: EngineeringLike = 1
    layer_engineerings: EngineeringLike = 1
    iteration_notation: Notation | None = field(default_factory=default_notation)
    layer_notation: Notation | None | UnsetType = UNSET
    min_value: Magnitude = ZERO
    recip_string: tuple[str, str] = ("1 / ", "")

    def __post_init__(self):
        super().__post_init__()
        if self.iteration_maxnum is not None:
            object.__setattr__(self, "iteration_maxnum", to_magnitude(self.iteration_maxnum))
        object.__setattr__(self, "layer_maxnum", to_magnitude(self.layer_maxnum))
        object.__setattr__(self, "iteration_function", as_increasing(self.iteration_function, "iteration_function"))
        object.__setattr__(self, "layer_function", as_increasing(self.layer_function, "layer_function"))
        object.__setattr__(self, "iteration_chars", as_char_pairs(self.iteration_chars, "iteration_chars", 3))
        object.__setattr__(self, "layer_chars", as_char_pairs(self.layer_chars, "layer_chars", 3))
        _as_in_a_row(self.max_iterations_in_a_row, "max_iterations_in_a_row")
        _as_in_a_row(self.max_layers_in_a_row, "max_layers_in_a_row")
        object.__setattr__(self, "superexp_after", _as_bools(self.superexp_after, "superexp_after", 2))
        iteration_spec = validate_whole_spec(EngineeringSpec.of(self.iteration_engineerings), "iteration_engineerings")
        object.__setattr__(self, "iteration_engineerings", iteration_spec)
        object.__setattr__(self, "layer_engineerings", EngineeringSpec.of(self.layer_engineerings))
        as_notation(self.iteration_notation, "iteration_notation")
        if self.layer_notation is UNSET:
            object.__setattr__(self, "layer_notation", self.iteration_notation)
        as_notation(self.layer_notation, "layer_notation")
        object.__setattr__(self, "min_value", to_magnitude(self.min_value))
        object.__setattr__(self, "recip_string", as_char_pair(self.recip_string, "recip_string"))

    def formats_negative(self, value: Magnitude) -> bool:
        return value >= self.min_value

    @abstractmethod
    def _format_argument(self, argument: Magnitude) -> str: ...

    def format_magnitude(self, value: Magnitude) -> str:
        if recip_applies(value, self.min_value):
            return self.recip_string[0] + self.format(value.recip()) + self.recip_string[1]
        argument, iterations, layers = self._preprocess(value)
        text = self._format_argument(argument)
        text = render_count(text, iterations, self.iteration_chars, self.max_iterations_in_a_row,
                            self.role(self.iteration_notation).format, self.superexp_after[0])
        return render_count(text, layers, self.layer_chars, self.max_layers_in_a_row,
                            self.role(self.layer_notation).format, self.superexp_after[1])

    def _preprocess(self, value: Magnitude) -> StepResult:
        step = layer_count(value, self.layer_function.resolve(), self.layer_maxnum,
                           self.layer_engineerings, self.iteration_engineerings, self.layer_mimics)
        argument, iterations = iterate(
            step.argument, self.iteration_function.resolve(),
            maxnum=_as_maxnum(self.iteration_maxnum),
            spec=self.iteration_engineerings,
            iterations=step.iterations,
        )
        return StepResult(argument, iterations, step.layers)


# Product of terms -----------------------------------------------------------------------------------------------------

class _BinaryPair(NamedTuple):
    # apply(a, b) gives the combined value; solve(value, known) gives the missing argument
    apply: Callable[[Magnitude, Magnitude], Magnitude]
    solve: Callable[[Magnitude, Magnitude], Magnitude]


def _binary(function: IncreasingFunction, minimum: Magnitude, maximum: Magnitude,
            unknown_first: bool) -> _BinaryPair:
    """
    Resolve a two-argument function increasing in its unknown argument.

    Forward holds ``f(a, b)``; Inverse holds the solver ``(value, known) -> unknown``. The
    unknown is the first argument of f when unknown_first is set, else the second.
    """
    def arrange(unknown, known):
        return (unknown, known) if unknown_first else (known, unknown)

    if isinstance(function, Forward):
        apply = function.func
        if function.inverse is not None:
            solve = function.inverse
        else:
            def solve(value, known):
                return increasing_inverse(lambda x: to_magnitude(apply(*arrange(x, known))),
                                          minimum, maximum)(value)
    else:
        solve = function.func
        if function.forward is not None:
            apply = function.forward
        else:
            def apply(a, b):
                unknown, known = arrange(a, b)
                return increasing_inverse(lambda v: to_magnitude(solve(v, known)))(unknown)

    return _BinaryPair(lambda a, b: to_magnitude(apply(a, b)),
                       lambda value, known: to_magnitude(solve(value, known)))


def _as_binary(value: Any, field_name: str) -> IncreasingFunction:
    if isinstance(value, (Forward, Inverse)):
        return value
    if callable(value):
        return Forward(value)
    raise TypeError(f"{field_name} must be callable, Forward or Inverse, not {fmt_type(value)}")


def _power(term, power):
    return to_magnitude(term) ** power


def _power_log(value, term):
    return log(value, term)


def _times(leftover, term):
    return to_magnitude(leftover) * term


def _divide(value, term):
    return to_magnitude(value) / term


def _always(*args) -> bool:
    return True


def _never(*args) -> bool:
    return False


def _unbounded() -> tuple[tuple[Magnitude, Magnitude], ...]:
    return ((NEG_INF, INF),) * 3


@dataclass(frozen=True, kw_only=True)
class IncreasingFunctionProductNotation(_PreprocessedNotation):
    """
    Write a value as a product of terms, each a whole number run through term_func.

    The largest term that fits is taken first, raised to the largest power that still fits,
    and removed from the value with between_func; the rest becomes the next terms. When no
    term of at least min_term fits, what is left is the constant term. With
    ``term_func = 10^n``, 5000 is "f(3) * 5".

    The power and between functions take two arguments. power_func is ``(term, power) ->
    value`` and between_func is ``(leftover, term) -> value``; an Inverse holds the solver
    for the missing argument instead, ``(value, term) -> power`` or ``(value, term) ->
    leftover``.

    Attributes:
        term_func: Increasing function generating term values from whole numbers.
        power_func: Combines a term with its power; term ** power by default.
        between_func: Combines the rest of the value with a term; leftover * term by default.
        max_terms: Most terms shown; positive.
        min_term: Smallest term number; smaller ones end the product.
        max_chars: Stop adding terms once the text is this long.
        term_chars: Wrapper around a term number.
        power_chars: (before power, after power, outer) markers of a term with a power.
        between_char: Separator between terms.
        power_before: Write the power in front of the term.
        reverse_terms: List terms smallest first.
        constant_term_chars: Wrapper around the constant term.
        edge_chars: Wrapper around the whole product.
        between_powers_char: Separator between repeated copies of a term.
        term_wrapper_chars: Wrapper around a run of repeated copies of a term.
        max_powers_in_a_row: Whole powers up to this are written as repeated terms.
        range_limits: Domains of term_func, power_func and between_func, as (min, max) pairs.
        term_engineerings: Allowed term numbers.
        power_engineerings: Allowed powers.
        constant_notation: Writes the constant term.
        term_notation: Writes term numbers. None means this notation; unset means
            constant_notation.
        power_notation: Writes powers. None means this notation; unset means
            constant_notation.
        show_constant_term: Predicate on the constant term deciding whether it is written.
        show_terms: Predicate on (term, power) deciding whether a term is written.
        irrelevancy_func: Predicate on (current value, value before the terms) that stops the
            product early.

    Examples:
        >>> IncreasingFunctionProductNotation(term_func=pow10).format(5000)
        'f(3) * 5'
    """
    name: str = "Increasing Function Product Notation"
    term_func: IncreasingFunction
    power_func: IncreasingFunction = field(default_factory=lambda: Forward(_power, inverse=_power_log))
    between_func: IncreasingFunction = field(default_factory=lambda: Forward(_times, inverse=_divide))
    max_terms: int = 8
    min_term: Magnitude = ONE
    max_chars: float = float("inf")
    term_chars: tuple[str, str] = ("f(", ")")
    power_chars: tuple[str, str, str] = ("^", "", "")
    between_char: str = " * "
    power_before: bool = False
    reverse_terms: bool = False
    constant_term_chars: tuple[str, str] = ("", "")
    edge_chars: tuple[str, str] = ("", "")
    between_powers_char: str = ""
    term_wrapper_chars: tuple[str, str] = ("", "")
    max_powers_in_a_row: int = 1
    range_limits: tuple[tuple[Magnitude, Magnitude], ...] = field(default_factory=_unbounded)
    term_engineerings: EngineeringLike = 1
    power_engineerings: EngineeringLike = 1
    constant_notation: Notation = field(default_factory=default_notation)
    term_notation: Notation | None | UnsetType = UNSET
    power_notation: Notation | None | UnsetType = UNSET
    show_constant_term: Callable[[Magnitude], bool] = _always
    show_terms: Callable[[Magnitude, Magnitude], bool] = _always
    irrelevancy_func: Callable[[Magnitude, Magnitude], bool] = _never

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "term_func", as_increasing(self.term_func, "term_func"))
        object.__setattr__(self, "power_func", _as_binary(self.power_func, "power_func"))
        object.__setattr__(self, "between_func", _as_binary(self.between_func, "between_func"))
        if isinstance(self.max_terms, bool) or not isinstance(self.max_terms, int):
            raise TypeError(f"max_terms must be int, not {fmt_type(self.max_terms)}")
        if self.max_terms <= 0:
            raise ValueError(f"max_terms must be positive, got {fmt_value(self.max_terms)}")
        object.__setattr__(self, "min_term", to_magnitude(self.min_term))
        _as_in_a_row(self.max_powers_in_a_row, "max_powers_in_a_row")

        for name in ("term_chars", "constant_term_chars", "edge_chars", "term_wrapper_chars"):
            object.__setattr__(self, name, as_char_pair(getattr(self, name), name))
        power_chars = self.power_chars
        if (isinstance(power_chars, str) or not isinstance(power_chars, Sequence) or len(power_chars) != 3
                or not all(isinstance(c, str) for c in power_chars)):
            raise TypeError(f"power_chars must hold 3 strings, got {fmt_value(power_chars)}")
        object.__setattr__(self, "power_chars", tuple(power_chars))
        for name in ("between_char", "between_powers_char"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"{name} must be str, not {fmt_type(getattr(self, name))}")

        if len(self.range_limits) != 3:
            raise TypeError(f"range_limits must hold 3 (min, max) pairs, got {fmt_value(self.range_limits)}")
        limits = []
        for i, (low, high) in enumerate(self.range_limits):
            low, high = to_magnitude(low), to_magnitude(high)
            if not high > low:
                raise ValueError(f"range_limits[{i}] must have min < max, got [{fmt_value(low)}, {fmt_value(high)}]")
            limits.append((low, high))
        object.__setattr__(self, "range_limits", tuple(limits))
        object.__setattr__(self, "term_engineerings", EngineeringSpec.of(self.term_engineerings))
        object.__setattr__(self, "power_engineerings", EngineeringSpec.of(self.power_engineerings))

        as_notation(self.constant_notation, "constant_notation", allow_self=False)
        for name in ("term_notation", "power_notation"):
            if getattr(self, name) is UNSET:
                object.__setattr__(self, name, self.constant_notation)
            as_notation(getattr(self, name), name)
        for name in ("show_constant_term", "show_terms", "irrelevancy_func"):
            as_callable(getattr(self, name), name)

    def _format_argument(self, argument: Magnitude) -> str:
        if argument < self.min_value:
            return self.constant_notation.format(argument)
        term_pair = self.term_func.resolve(*self.range_limits[0])
        power = _binary(self.power_func, *self.range_limits[1], unknown_first=False)
        between = _binary(self.between_func, *self.range_limits[2], unknown_first=True)

        pieces = []
        value = argument
        while (len(pieces) < self.max_terms and len(self._join(pieces)) < self.max_chars
               and not self.irrelevancy_func(value, argument)):
            term = self.term_engineerings.current(term_pair.shrink(value))
            if not (term.is_finite() and term >= self.min_term):
                if self.show_constant_term(value):
                    before, after = self.constant_term_chars
                    pieces.append(before + self.constant_notation.format(value) + after)
                break
            term_value = term_pair.grow(term)
            exponent = self.power_engineerings.current(power.solve(value, term_value))
            remaining = between.solve(value, power.apply(term_value, exponent))
            if self.show_terms(term, exponent):
                pieces.append(self._term_text(term, exponent))
            if not (remaining.is_finite() and remaining < value):
                break
            value = remaining
        return self.edge_chars[0] + self._join(pieces) + self.edge_chars[1]

    def _join(self, pieces: list[str]) -> str:
        return self.between_char.join(reversed(pieces) if self.reverse_terms else pieces)

    def _term_text(self, term: Magnitude, exponent: Magnitude) -> str:
        single = self.term_chars[0] + self.role(self.term_notation).format(term) + self.term_chars[1]
        if ZERO <= exponent <= self.max_powers_in_a_row and exponent.is_integer():
            repeated = self.between_powers_char.join([single] * int(exponent.to_float()))
            return self.term_wrapper_chars[0] + repeated + self.term_wrapper_chars[1]
        before, after, outer = self.power_chars
        power_text = self.role(self.power_notation).format(exponent)
        if self.power_before:
            return before + power_text + after + single + outer
        return outer + single + before + power_text + after


# N-ary scientific -----------------------------------------------------------------------------------------------------

def _order(order: Sequence[Any], count: int) -> tuple[int, ...]:
    # Drop entries that are not argument indices, then append the missing ones
    result = []
    for entry in order:
        if isinstance(entry, int) and not isinstance(entry, bool) and 0 <= entry < count and entry not in result:
            result.append(entry)
    result.extend(i for i in range(count) if i not in result)
    return tuple(result)


def _pad(items: list, count: int) -> list:
    while len(items) < count:
        items.append(items[-1])
    return items


@dataclass(frozen=True, kw_only=True)
class IncreasingFunctionScientificNotation(_PreprocessedNotation):
    """
    Scientific notation generalized to any function increasing in each of its arguments.

    The value is solved for the arguments of ``func``: the last argument is the most
    significant and unbounded, every other argument i is kept at or above ``limits[i]`` (or
    at or below, with limits_are_maximums). With ``func = m * 10^e`` and ``limits = [1]``,
    1500 is written "1.5, 3".

    Attributes:
        func: The n-ary increasing function.
        argument_count: Number of arguments of func; read from its signature when None.
        limits: Bounds of every argument but the last; short lists repeat their last entry.
        limits_are_maximums: limits are upper bounds instead of lower bounds.
        engineerings: Allowed values of arguments 1 to n-1, one lattice each; argument 0 is
            only rounded.
        rounding: Rounding applied to argument 0.
        range_limits: (min, max) domain of each argument.
        revert_values: What replaces an argument that came out NaN or infinite: True means
            its limit, a number means that number, False keeps it.
        argument_order: Order arguments are written in; invalid entries are dropped and
            missing arguments appended.
        argument_chars: Six strings per argument: wrapper around the text so far, wrapper
            around the argument, wrapper around the result.
        argument_to_left: Put the argument in front of the text so far.
        argument_shown: Predicate on (value, index, all arguments) deciding whether an
            argument is written.
        inner_notations: Notation writing each argument; None means this notation.

    Raises:
        ValueError: If func takes fewer than two arguments, limits is empty, or a range
            limit has min >= max.

    Examples:
        >>> IncreasingFunctionScientificNotation(func=lambda m, e: m * 10 ** e, limits=[1]).format(1500)
        '1.5, 3'
    """
    name: str = "Increasing Function Scientific Notation"
    func: Callable[..., Any]
    argument_count: int | None = None
    limits: Sequence[Magnitude]
    limits_are_maximums: bool = False
    engineerings: Sequence[EngineeringLike] | EngineeringLike = 1
    rounding: Rounding = 0
    range_limits: Sequence[tuple[Magnitude, Magnitude]] = ((NEG_INF, INF),)
    revert_values: Sequence[bool | Magnitude] = (False,)
    argument_order: Sequence[int] = ()
    argument_chars: Sequence[ArgumentChars] = ()
    argument_to_left: Sequence[bool] = (False,)
    argument_shown: Callable[[Magnitude, int, list[Magnitude]], bool] = _always
    inner_notations: Notation | None | Sequence[Notation | None] = field(default_factory=default_notation)

    def __post_init__(self):
        super().__post_init__()
        as_callable(self.func, "func")
        count = arity(self.func) if self.argument_count is None else self.argument_count
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError(f"argument_count must be int, not {fmt_type(count)}")
        if count < 2:
            raise ValueError(f"func must take at least 2 arguments, got {count}")
        object.__setattr__(self, "argument_count", count)

        if not self.limits:
            raise ValueError("limits must not be empty")
        limits = _pad([to_magnitude(limit) for limit in self.limits], count - 1)[:count - 1]
        object.__setattr__(self, "limits", tuple(limits))

        engineerings = self.engineerings
        if isinstance(engineerings, (EngineeringSpec, Magnitude, int, float, str)):
            engineerings = [engineerings]
        specs = [EngineeringSpec.of(spec) for spec in engineerings] or [EngineeringSpec()]
        object.__setattr__(self, "engineerings", tuple(_pad(specs, count - 1)[:count - 1]))
        if not callable(self.rounding):
            object.__setattr__(self, "rounding", to_magnitude(self.rounding))

        ranges = []
        for i, (low, high) in enumerate(self.range_limits):
            low, high = to_magnitude(low), to_magnitude(high)
            if not high > low:
                raise ValueError(f"range_limits[{i}] must have min < max, got [{fmt_value(low)}, {fmt_value(high)}]")
            ranges.append((low, high))
        object.__setattr__(self, "range_limits", tuple(_pad(ranges or [(NEG_INF, INF)], count)))

        reverts = [v if isinstance(v, bool) else to_magnitude(v) for v in self.revert_values] or [False]
        object.__setattr__(self, "revert_values", tuple(_pad(reverts, count)))

        order = _order(self.argument_order, count)
        object.__setattr__(self, "argument_order", order)
        chars = []
        for i, entry in enumerate(self.argument_chars):
            if (isinstance(entry, str) or not isinstance(entry, Sequence) or len(entry) != 6
                    or not all(isinstance(c, str) for c in entry)):
                raise TypeError(f"argument_chars[{i}] must hold 6 strings, got {fmt_value(entry)}")
            chars.append(tuple(entry))
        while len(chars) < count:
            chars.append(("",) * 6 if len(chars) == order[-1] else ("", "", "", ", ", "", ""))
        object.__setattr__(self, "argument_chars", tuple(chars))
        to_left = [bool(v) for v in self.argument_to_left]
        object.__setattr__(self, "argument_to_left", tuple(to_left + [False] * (count - len(to_left))))
        as_callable(self.argument_shown, "argument_shown")

        notations = self.inner_notations
        if notations is None or isinstance(notations, Notation):
            notations = [notations]
        notations = list(notations)
        for i, notation in enumerate(notations):
            as_notation(notation, f"inner_notations[{i}]")
        while len(notations) < count:
            notations.append(default_notation())
        object.__setattr__(self, "inner_notations", tuple(notations))

    def _format_argument(self, argument: Magnitude) -> str:
        if argument < self.min_value:
            return self.role(self.inner_notations[0]).format(argument)
        arguments = increasing_scientifify(argument, self.func, self.limits, self.limits_are_maximums,
                                           self.engineerings, self.rounding, self.range_limits,
                                           self.revert_values)
        text = ""
        for index in self.argument_order:
            if not self.argument_shown(arguments[index], index, arguments):
                continue
            chars = self.argument_chars[index]
            text = chars[0] + text + chars[1]
            piece = chars[2] + self.role(self.inner_notations[index]).format(arguments[index]) + chars[3]
            text = piece + text if self.argument_to_left[index] else text + piece
            text = chars[4] + text + chars[5]
        return text
