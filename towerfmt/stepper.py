"""
Iterate an increasing function backwards to shrink a value into a displayable argument.

A notation built on an increasing function f writes a big value v as ``f(f(...f(x)))``:
it undoes f until the argument x is small enough, counting the undone applications. This
module holds the engine shared by those notations:

* :class:`Forward` and :class:`Inverse` say whether the caller supplied f or f^-1. The missing
  direction is found by bisection (:func:`towerfmt.magnitude.increasing_inverse`) unless a
  closed form is given.
* :func:`step_layers` collapses astronomically many would-be iterations into a short count of
  a faster-growing "layer" function, the way a tower height compresses repeated exponentiation.
* :func:`iterate` runs the iteration loop (and, for negative minimum counts, the loop that
  applies f instead), stepping the count along an EngineeringSpec.
* :func:`render_count` writes a count as repeated markers or as one collapsed marker.

Loops stop early, keeping the last good state, when a value leaves the function's domain or
stops being finite.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import inspect
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Union

# Local ----------------------------------------------------------------------------------------------------------------
from .decompose import Rounding, round_to
from .engineering import EngineeringSpec
from .magnitude import INF, NEG_INF, ONE, TEN, ZERO, Magnitude, MagnitudeLike, increasing_inverse, slog, tetrate
from .numeric import to_magnitude
from .tools import as_callable, fmt_type, fmt_value, wrap_repeated

__all__ = [
    'Forward',
    'FunctionPair',
    'IncreasingFunction',
    'Inverse',
    'StepResult',
    'arity',
    'as_increasing',
    'iterate',
    'layer_count',
    'recip_applies',
    'render_count',
    'step_layers',
    'tower_layers',
    'validate_whole_spec',
]

MagnitudeFunc = Callable[[Magnitude], Any]


# Function variants ----------------------------------------------------------------------------------------------------

class FunctionPair(NamedTuple):
    """
    Both directions of an increasing function.

    Attributes:
        grow: f, which makes values bigger.
        shrink: f^-1, which the iteration loop applies to make values smaller.
    """
    grow: Callable[[Magnitude], Magnitude]
    shrink: Callable[[Magnitude], Magnitude]


@dataclass(frozen=True)
class Forward:
    """
    An increasing function f given directly.

    Attributes:
        func: f itself.
        inverse: Closed-form f^-1, if known. Otherwise it is found by bisection over the
            domain passed to resolve().
    """
    func: MagnitudeFunc
    inverse: MagnitudeFunc | None = None

    def __post_init__(self):
        as_callable(self.func, "func")
        if self.inverse is not None:
            as_callable(self.inverse, "inverse")

    def resolve(self, minimum: MagnitudeLike = NEG_INF, maximum: MagnitudeLike = INF) -> FunctionPair:
        grow = _returning_magnitude(self.func)
        if self.inverse is not None:
            return FunctionPair(grow, _returning_magnitude(self.inverse))
        return FunctionPair(grow, increasing_inverse(grow, minimum, maximum))


@dataclass(frozen=True)
class Inverse:
    """
    An increasing function given as its inverse f^-1.

    Attributes:
        func: f^-1, the shrinking direction.
        forward: Closed-form f, if known. Otherwise it is found by bisection.
    """
    func: MagnitudeFunc
    forward: MagnitudeFunc | None = None

    def __post_init__(self):
        as_callable(self.func, "func")
        if self.forward is not None:
            as_callable(self.forward, "forward")

    def resolve(self, minimum: MagnitudeLike = NEG_INF, maximum: MagnitudeLike = INF) -> FunctionPair:
        shrink = _returning_magnitude(self.func)
        if self.forward is not None:
            return FunctionPair(_returning_magnitude(self.forward), shrink)
        return FunctionPair(increasing_inverse(shrink, minimum, maximum), shrink)


IncreasingFunction = Union[Forward, Inverse]


def as_increasing(value: Any, field: str) -> IncreasingFunction:
    """Accept a Forward or Inverse as is; a bare callable is taken as Forward."""
    if isinstance(value, (Forward, Inverse)):
        return value
    if callable(value):
        return Forward(value)
    raise TypeError(f"{field} must be callable, Forward or Inverse, not {fmt_type(value)}")


def tower_layers() -> Forward:
    """Default layer function: height h maps to 10^^h, undone by slog."""
    return Forward(lambda height: tetrate(TEN, height), inverse=slog)


def arity(func: Callable) -> int:
    """
    Number of positional parameters of func.

    Raises:
        TypeError: If the signature cannot be read or func accepts no positional parameters.
    """
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError) as e:
        raise TypeError(f"cannot read the parameters of {fmt_value(func)}: {e}") from e
    positional = [p for p in parameters
                  if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    if not positional:
        raise TypeError(f"{fmt_value(func)} takes no positional arguments")
    return len(positional)


# Stepping -------------------------------------------------------------------------------------------------------------

class StepResult(NamedTuple):
    """Output of the stepper: value == grow^iterations(layers-grown argument)."""
    argument: Magnitude
    iterations: Magnitude
    layers: Magnitude


def step_layers(
        value: Magnitude,
        layer: FunctionPair,
        layer_maxnum: Magnitude,
        spec: EngineeringSpec,
        rounding: Rounding = 0,
) -> tuple[Magnitude, Magnitude]:
    """
    Remove whole layers until the rounded value is below layer_maxnum.

    ``layer.shrink`` turns the value into a level (for towers, the height), the count is
    quantized on spec, and ``layer.grow`` rebuilds the reduced value.

    Returns:
        ``(value, layers)``; the value comes back unchanged with 0 layers when it is already
        below layer_maxnum.
    """
    if round_to(value, rounding) < layer_maxnum:
        return value, ZERO
    level = layer.shrink(value)
    count = spec.current(level - layer.shrink(layer_maxnum))
    reduced = layer.grow(level - count)
    while count.is_finite() and round_to(reduced, rounding) >= layer_maxnum:
        following = spec.next(count)
        if following <= count:
            break
        count = following
        reduced = layer.grow(level - count)
    if not (count.is_finite() and reduced.is_finite()):
        return value, ZERO
    return reduced, count


def iterate(
        value: Magnitude,
        pair: FunctionPair,
        *,
        maxnum: Magnitude = INF,
        min_iterations: Magnitude = ZERO,
        spec: EngineeringSpec = EngineeringSpec(),
        rounding: Rounding = 0,
        minimum: Magnitude = NEG_INF,
        maximum: Magnitude = INF,
        iterations: Magnitude = ZERO,
) -> tuple[Magnitude, Magnitude]:
    """
    Undo f until the rounded value drops below maxnum and at least min_iterations were taken.

    Iteration counts move along spec, applying f^-1 ``next - current`` times per move. A
    rounded value equal to maxnum takes another iteration.

    With a negative min_iterations, f is first applied (counting down) until the count reaches
    min_iterations or the value would reach maxnum.

    Every counted iteration costs one call of f^-1, so a lattice step of s costs s calls and
    a slow function on a huge value (10x on ``1e1e15`` needs 1e15 calls) will not finish in
    practice. Such values belong to the layer step; see step_layers().

    Returns:
        ``(argument, iterations)``. When a step leaves [minimum, maximum], produces a
        non-finite value, or returns its input unchanged, the loop stops with the state
        before that step.
    """
    if min_iterations < ZERO:
        value, iterations = _grow_loop(value, pair, maxnum, min_iterations, spec, rounding,
                                       minimum, maximum, iterations)
    while iterations < min_iterations or round_to(value, rounding) >= maxnum:
        following = spec.next(iterations)
        reduced = _apply(value, pair.shrink, following - iterations, minimum, maximum)
        if reduced is None:
            break
        iterations, value = following, reduced
    return value, iterations


def _grow_loop(value, pair, maxnum, min_iterations, spec, rounding, minimum, maximum, iterations):
    low, high = pair.shrink(minimum), pair.shrink(maximum)
    while iterations > min_iterations:
        preceding = spec.previous(iterations)
        grown = value
        for _ in range(_steps(iterations - preceding)):
            if grown < low or grown > high:
                return value, iterations
            grown = pair.grow(grown)
            if not grown.is_finite() or round_to(grown, rounding) >= maxnum:
                return value, iterations
        iterations, value = preceding, grown
    return value, iterations


def _apply(value, func, times, minimum, maximum):
    # None when an application leaves the domain, overflows or stalls
    for _ in range(_steps(times)):
        if value < minimum or value > maximum:
            return None
        applied = func(value)
        if not applied.is_finite() or applied == value:
            return None
        value = applied
    return value


def _steps(count: Magnitude) -> int:
    return int(count.to_float())


def _returning_magnitude(func: MagnitudeFunc) -> Callable[[Magnitude], Magnitude]:
    def wrapped(value: Magnitude) -> Magnitude:
        return to_magnitude(func(value))
    return wrapped


# Rendering ------------------------------------------------------------------------------------------------------------

def render_count(
        text: str,
        count: Magnitude,
        chars: tuple[tuple[str, str], tuple[str, str], tuple[str, str]],
        max_in_a_row: int,
        count_text: Callable[[Magnitude], str],
        after: bool = False,
) -> str:
    """
    Add ``count`` markers around text.

    Whole counts from 1 to max_in_a_row repeat the markers: ``chars[0]`` innermost, then
    ``chars[1]`` for each further one. Any other nonzero count becomes one collapsed marker,
    ``chars[2]`` around count_text(count), placed before text (or after it).

    Examples:
        >>> chars = (("f(", ")"), ("f(", ")"), ("(f^", ")"))
        >>> render_count("50", Magnitude(2), chars, 5, str)
        'f(f(50))'
        >>> render_count("50", Magnitude(9), chars, 5, str)
        '(f^9)50'
    """
    if count == ZERO:
        return text
    if ZERO < count <= max_in_a_row and count.is_integer():
        times = _steps(count)
        text = chars[0][0] + text + chars[0][1]
        return wrap_repeated(text, chars[1], times - 1)
    marker = chars[2][0] + count_text(count) + chars[2][1]
    return text + marker if after else marker + text


# Helpers --------------------------------------------------------------------------------------------------------------

def validate_whole_spec(spec: EngineeringSpec, field: str) -> EngineeringSpec:
    """Require every step of spec to be a whole number."""
    if not spec.is_whole():
        raise ValueError(f"{field} must hold whole numbers, got {fmt_value([str(s) for s in spec.steps])}")
    return spec


def layer_count(value: Magnitude, layer: FunctionPair, layer_maxnum: Magnitude,
                layer_spec: EngineeringSpec, iteration_spec: EngineeringSpec, mimics: bool,
                rounding: Rounding = 0) -> StepResult:
    """
    Run the layer step. When layers mimic iterations the count is taken on the iteration
    lattice and returned as iterations instead of layers.
    """
    if mimics:
        reduced, count = step_layers(value, layer, layer_maxnum, iteration_spec, rounding)
        return StepResult(reduced, count, ZERO)
    reduced, count = step_layers(value, layer, layer_maxnum, layer_spec, rounding)
    return StepResult(reduced, ZERO, count)


def recip_applies(value: Magnitude, floor: Magnitude) -> bool:
    """True when a value below 1 should be written as 1 / (its reciprocal)."""
    return ZERO < value < ONE and value < floor and value.recip() >= floor
