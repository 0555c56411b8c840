"""
The fast-growing hierarchy and a notation that writes values with it.

f0(n) = n + 1, and every further function iterates the previous one n times:
f1(n) = 2n, f2(n) = n * 2^n, f3(n) = f2^n(n), f4(n) = f3^n(n). f1 multiplies, f2 is
exponential, f3 tetrational and f4 pentational.

Fractional iterates of f2 and up use a linear approximation, the same one slog uses for
tetration: a value's height is the number of times f must be undone to land in [1, 2), plus
its offset inside that interval. Whole iterates are plain repeated application.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

# Third-party ----------------------------------------------------------------------------------------------------------
import mpmath

# Local ----------------------------------------------------------------------------------------------------------------
from .decompose import Rounding, round_to
from .engineering import EngineeringLike, EngineeringSpec
from .magnitude import (
    INF, NAN, ONE, TWO, ZERO, Magnitude, MagnitudeLike, increasing_inverse, iteratedexp, iteratedlog,
    log,
)
from .notation import Notation, as_notation, default_notation
from .numeric import to_magnitude
from .sentinels import UNSET, UnsetType
from .stepper import validate_whole_spec
from .tools import as_callable, as_char_pair, fmt_type, fmt_value, wrap_repeated

__all__ = [
    'FastGrowingHierarchyNotation',
    'RankState',
    'f0',
    'f1',
    'f2',
    'f3',
    'f4',
    'fgh',
    'fgh_evaluate',
    'fgh_inverse',
    'fgh_iterated',
    'fgh_iterated_log',
]

RANKS = 5

LN2 = math.log(2)

# Largest argument handed to the closed-form f2 inverse
_FLOAT_LIMIT = 1e300

# Heights past this overflow any representable value
_HEIGHT_LIMIT = 9e15

_MAX_STEPS = 10_000

# Bisection budget for the f3 and f4 inverses, which nest other searches
_SEARCH_STEPS = 120


# Functions ------------------------------------------------------------------------------------------------------------

def f0(n: MagnitudeLike) -> Magnitude:
    return to_magnitude(n) + ONE


def f1(n: MagnitudeLike) -> Magnitude:
    return to_magnitude(n) * TWO


def f2(n: MagnitudeLike) -> Magnitude:
    n = to_magnitude(n)
    return n * TWO ** n


def f3(n: MagnitudeLike) -> Magnitude:
    n = to_magnitude(n)
    return fgh_iterated(2, n, n)


def f4(n: MagnitudeLike) -> Magnitude:
    n = to_magnitude(n)
    return fgh_iterated(3, n, n)


_FUNCTIONS = (f0, f1, f2, f3, f4)


def fgh(rank: int, n: MagnitudeLike) -> Magnitude:
    """f_rank(n) for rank 0 to 4."""
    return _FUNCTIONS[_check_rank(rank)](n)


def fgh_inverse(rank: int, value: MagnitudeLike) -> Magnitude:
    """
    Inverse of f_rank.

    f2 is inverted through the Lambert W function, or by fixed-point iteration for values
    beyond float range. The inverses of f3 and f4 are searched on [1, inf), so values below
    f(1) = 2 give NaN.
    """
    rank = _check_rank(rank)
    value = to_magnitude(value)
    if rank == 0:
        return value - ONE
    if rank == 1:
        return value / TWO
    if rank == 2:
        return _f2_inverse(value)
    # height(f(x)) == height(x) + x for both f3 and f4
    lower = rank - 1
    target = _height(lower, value)
    if not target.is_finite():
        return NAN
    search = increasing_inverse(lambda x: _height(lower, x) + x, ONE, INF, _SEARCH_STEPS)
    return search(target)


def fgh_iterated(rank: int, value: MagnitudeLike, times: MagnitudeLike = 1) -> Magnitude:
    """
    Apply f_rank ``times`` times; negative counts apply the inverse.

    Examples:
        >>> fgh_iterated(1, 3, 4)
        Magnitude('48')
    """
    rank = _check_rank(rank)
    value, times = to_magnitude(value), to_magnitude(times)
    if value.is_nan() or times.is_nan():
        return NAN
    if rank == 0:
        return value + times
    if rank == 1:
        return value * TWO ** times
    if not times.is_integer():
        return _unheight(rank, _height(rank, value) + times)

    forward = times > ZERO
    count = abs(times)
    if count > _MAX_STEPS and rank > 2:
        return _unheight(rank, _height(rank, value) + times)
    if rank == 2:
        return _f2_steps(value, count, forward)
    for _ in range(int(count.to_float())):
        value = fgh(rank, value) if forward else fgh_inverse(rank, value)
        if not value.is_finite() or value == ZERO:
            break
    return value


def fgh_iterated_log(rank: int, value: MagnitudeLike, limit: MagnitudeLike) -> Magnitude:
    """
    How many times f_rank must be undone to bring value down to limit; may be fractional.

    Examples:
        >>> fgh_iterated_log(1, 48, 3)
        Magnitude('4')
    """
    rank = _check_rank(rank)
    value, limit = to_magnitude(value), to_magnitude(limit)
    if rank == 0:
        return value - limit
    if rank == 1:
        return log(value / limit, TWO)
    return _height(rank, value) - _height(rank, limit)


def fgh_evaluate(argument: MagnitudeLike, iterations: Sequence[MagnitudeLike]) -> Magnitude:
    """
    Fold iteration counts back into a value, lowest rank first.

    ``iterations[r]`` applications of f_r are made for each rank present. The f4 count is
    applied one application at a time and stops early at 0 or a non-finite value.
    """
    result = to_magnitude(argument)
    for rank, count in enumerate(iterations[:RANKS - 1]):
        result = fgh_iterated(rank, result, count)
    if len(iterations) >= RANKS:
        count = to_magnitude(iterations[RANKS - 1])
        for _ in range(int(abs(count).to_float())):
            result = f4(result) if count > ZERO else fgh_inverse(4, result)
            if result == ZERO or not result.is_finite():
                break
    return result


# Private Methods ------------------------------------------------------------------------------------------------------

def _check_rank(rank: int) -> int:
    if isinstance(rank, bool) or not isinstance(rank, int):
        raise TypeError(f"rank must be int, not {fmt_type(rank)}")
    if not 0 <= rank < RANKS:
        raise ValueError(f"rank must be between 0 and {RANKS - 1}, got {rank}")
    return rank


def _f2_inverse(value: Magnitude) -> Magnitude:
    if value.is_nan() or value < ZERO:
        return NAN
    if value == ZERO:
        return ZERO
    if value.is_inf():
        return INF
    if value < _FLOAT_LIMIT:
        return Magnitude(float(mpmath.re(mpmath.lambertw(value.to_float() * LN2))) / LN2)
    # n * 2^n = v means n = log2(v) - log2(n), which settles in a few rounds for large n
    target = log(value, TWO)
    n = target
    for _ in range(64):
        following = target - log(n, TWO)
        if following == n:
            break
        n = following
    return n


def _f2_steps(value: Magnitude, count: Magnitude, forward: bool) -> Magnitude:
    # Past a few layers f2 behaves like base-2 exponentiation
    remaining = count
    while remaining > ZERO and value.is_finite() and value > ZERO:
        if value.layer >= 3:
            if forward:
                return iteratedexp(TWO, remaining, value)
            drop = min(remaining, Magnitude(value.layer - 2))
            value = iteratedlog(value, TWO, drop)
            remaining = remaining - drop
            continue
        value = f2(value) if forward else _f2_inverse(value)
        remaining = remaining - ONE
    return value


def _height(rank: int, value: MagnitudeLike) -> Magnitude:
    """Number of f_rank steps from the interval [1, 2) to value, linear inside the interval."""
    value = to_magnitude(value)
    if value.is_nan() or value <= ZERO:
        return NAN
    if value.is_inf():
        return INF
    count = 0
    for _ in range(_MAX_STEPS):
        if value < ONE:
            value = fgh(rank, value)
            count -= 1
        elif value >= TWO:
            if rank == 2 and value.layer >= 3:
                drop = value.layer - 2
                value = iteratedlog(value, TWO, drop)
                count += drop
                continue
            value = fgh_inverse(rank, value)
            count += 1
        else:
            return Magnitude(count) + value - ONE
        if not value.is_finite():
            return NAN
    return NAN


def _unheight(rank: int, height: Magnitude) -> Magnitude:
    if height.is_nan():
        return NAN
    if height > _HEIGHT_LIMIT:
        return INF
    whole = height.floor()
    return fgh_iterated(rank, ONE + (height - whole), whole)


# Notation -------------------------------------------------------------------------------------------------------------

class RankState(Enum):
    """Progress of one rank of the hierarchy controller."""
    CONVERGING = "converging"
    CONVERGED = "converged"


@dataclass
class _Rank:
    value: Magnitude
    iterations: Magnitude = ZERO
    state: RankState = RankState.CONVERGING


def _positive(value: Magnitude) -> bool:
    return value > ZERO


DEFAULT_MAXIMUMS = (ONE, Magnitude(4), Magnitude(32), Magnitude("ee41373247578.35493"), INF)
DEFAULT_FUNCTION_CHARS = tuple((f"f{r}(", ")") for r in range(RANKS))
DEFAULT_ITERATION_CHARS = tuple((f"(f{r}^", ")", "") for r in range(RANKS))


def _per_rank(values: Any, fill: Callable[[list], Any], scalar: type | tuple = ()) -> list:
    if isinstance(values, str) or (scalar and isinstance(values, scalar)) or not isinstance(values, Sequence):
        values = [values]
    values = list(values)[:RANKS]
    while len(values) < RANKS:
        values.append(fill(values))
    return values


def _permutation(index: int) -> list[int]:
    # Mixed-radix digits of index choose where each rank is inserted
    order = [0]
    order.insert(index % 2, 1)
    order.insert(index // 2 % 3, 2)
    order.insert(index // 6 % 4, 3)
    order.insert(index // 24 % 5, 4)
    return order


@dataclass(frozen=True, kw_only=True)
class FastGrowingHierarchyNotation(Notation):
    """
    Write a value as fast-growing hierarchy functions applied to a small argument.

    Rank 4 is undone first, then rank 3 on what is left, and so on down to rank 0, which
    leaves an argument below ``maximums[0]``. Every rank takes at least one pass, even when its
    value is already below its maximum, so that lower ranks always run again after a higher
    rank changed. After rank 0 converges its count is folded back up: if re-applying the
    lower ranks pushes a rank's value back over its maximum, that rank runs again.

    With the default maximums the argument stays below 1 and each count below 4:
    10 is "f1(f1(f0(f0(0.5))))".

    Attributes:
        maximums: Value at which each rank is undone once more, ranks 0 to 4. Missing
            entries are infinite, which hides those ranks.
        function_chars: Marker pair of each rank; missing entries keep their defaults.
        max_in_a_row: Longest run of markers per rank before they collapse into a count. A
            single number applies to every rank; short lists repeat their last entry.
        iteration_chars: (before count, after count, other side) strings for collapsed counts.
        iteration_after: Put the collapsed count of a rank after the argument.
        edge_chars: (left, right, always) wrapper of the whole text; used when any rank is
            shown, or always if the flag is set.
        argument_chars: (left, right, always) wrapper of the argument, used the same way.
        rounding: Rounding of the argument at rank 0.
        delimiter_permutation: Which of the 120 orders the ranks are written in; 119 puts f0
            innermost.
        engineerings: Allowed counts per rank. A single lattice applies to every rank; short
            lists repeat their last entry. Rank 4 counts must be whole.
        inner_notation: Writes the argument.
        iteration_notations: Writes the collapsed count of each rank. None means this
            notation; unset means inner_notation.
        function_shown: Predicate on each rank's count deciding whether it is written;
            defaults to counts above zero.

    Raises:
        ValueError: If delimiter_permutation is outside 0 to 119, or a rank 4 engineering
            step is not whole.

    Examples:
        >>> FastGrowingHierarchyNotation().format(3)
        'f0(f0(f0(0)))'
        >>> FastGrowingHierarchyNotation().format(10)
        'f1(f1(f0(f0(0.5))))'
    """
    name: str = "Fast-Growing Hierarchy Notation"
    maximums: Sequence[Magnitude] = DEFAULT_MAXIMUMS
    function_chars: Sequence[tuple[str, str]] = DEFAULT_FUNCTION_CHARS
    max_in_a_row: int | Sequence[int] = 4
    iteration_chars: Sequence[tuple[str, str, str]] = DEFAULT_ITERATION_CHARS
    iteration_after: Sequence[bool] = (False,)
    edge_chars: tuple[str, str, bool] = ("", "", False)
    argument_chars: tuple[str, str, bool] = ("", "", False)
    rounding: Rounding = 0
    delimiter_permutation: int = 119
    engineerings: EngineeringLike | Sequence[EngineeringLike] = 1
    inner_notation: Notation = field(default_factory=default_notation)
    iteration_notations: Notation | None | Sequence[Notation | None] | UnsetType = UNSET
    function_shown: Callable[[Magnitude], bool] | Sequence[Callable[[Magnitude], bool]] = (_positive,)

    def __post_init__(self):
        super().__post_init__()
        maximums = [to_magnitude(m) for m in _per_rank(self.maximums, lambda _: INF, scalar=(int, float))]
        object.__setattr__(self, "maximums", tuple(maximums))

        chars = list(self.function_chars)[:RANKS]
        chars += DEFAULT_FUNCTION_CHARS[len(chars):]
        object.__setattr__(self, "function_chars",
                           tuple(as_char_pair(pair, f"function_chars[{r}]") for r, pair in enumerate(chars)))
        triples = list(self.iteration_chars)[:RANKS]
        triples += DEFAULT_ITERATION_CHARS[len(triples):]
        for r, triple in enumerate(triples):
            if (isinstance(triple, str) or not isinstance(triple, Sequence) or len(triple) != 3
                    or not all(isinstance(c, str) for c in triple)):
                raise TypeError(f"iteration_chars[{r}] must hold 3 strings, got {fmt_value(triple)}")
        object.__setattr__(self, "iteration_chars", tuple(tuple(t) for t in triples))

        in_a_row = _per_rank(self.max_in_a_row, lambda v: v[-1] if v else 4, scalar=int)
        for r, limit in enumerate(in_a_row):
            if isinstance(limit, bool) or not isinstance(limit, int):
                raise TypeError(f"max_in_a_row[{r}] must be int, not {fmt_type(limit)}")
        object.__setattr__(self, "max_in_a_row", tuple(in_a_row))
        after = _per_rank(self.iteration_after, lambda _: False, scalar=bool)
        object.__setattr__(self, "iteration_after", tuple(bool(v) for v in after))

        for name in ("edge_chars", "argument_chars"):
            value = getattr(self, name)
            if (isinstance(value, str) or not isinstance(value, Sequence) or len(value) != 3
                    or not isinstance(value[0], str) or not isinstance(value[1], str)):
                raise TypeError(f"{name} must be (str, str, bool), got {fmt_value(value)}")
            object.__setattr__(self, name, (value[0], value[1], bool(value[2])))
        if not callable(self.rounding):
            object.__setattr__(self, "rounding", to_magnitude(self.rounding))
        if isinstance(self.delimiter_permutation, bool) or not isinstance(self.delimiter_permutation, int):
            raise TypeError(f"delimiter_permutation must be int, not {fmt_type(self.delimiter_permutation)}")
        if not 0 <= self.delimiter_permutation < 120:
            raise ValueError(f"delimiter_permutation must be between 0 and 119, got {self.delimiter_permutation}")

        raw = self.engineerings
        if isinstance(raw, (EngineeringSpec, Magnitude, int, float, str)):
            raw = [raw] * RANKS
        specs = [EngineeringSpec.of(spec) for spec in raw] or [EngineeringSpec()]
        specs = _per_rank(specs, lambda v: v[-1])
        validate_whole_spec(specs[RANKS - 1], "engineerings[4]")
        object.__setattr__(self, "engineerings", tuple(specs))

        as_notation(self.inner_notation, "inner_notation", allow_self=False)
        notations = self.iteration_notations
        if notations is UNSET:
            notations = self.inner_notation
        if notations is None or isinstance(notations, Notation):
            notations = [notations]
        notations = list(notations) or [default_notation()]
        for r, notation in enumerate(notations):
            as_notation(notation, f"iteration_notations[{r}]")
        object.__setattr__(self, "iteration_notations", tuple(_per_rank(notations, lambda v: v[-1])))

        shown = self.function_shown
        if callable(shown):
            shown = [shown]
        shown = list(shown) or [_positive]
        for r, predicate in enumerate(shown):
            as_callable(predicate, f"function_shown[{r}]")
        object.__setattr__(self, "function_shown", tuple(_per_rank(shown, lambda v: v[-1])))

    def format_magnitude(self, value: Magnitude) -> str:
        ranks = [_Rank(value) for _ in range(RANKS)]
        if value != ZERO:
            self._run(RANKS - 1, ranks)
        return self._render(ranks[0].value, [rank.iterations for rank in ranks])

    def _run(self, rank: int, ranks: list[_Rank]) -> None:
        """Converge rank and every rank below it; leaves the re-evaluated value in ranks[rank]."""
        current = ranks[rank]
        current.state = RankState.CONVERGING
        maximum = self.maximums[rank]
        while current.state is RankState.CONVERGING or current.value >= maximum:
            for lower in ranks[:rank]:
                lower.iterations = ZERO
            reduced = self._undo(rank, current)
            stuck = reduced >= maximum
            current.state = RankState.CONVERGED
            if rank == 0:
                current.value = reduced
                return
            below = ranks[rank - 1]
            below.value = reduced
            self._run(rank - 1, ranks)
            current.value = fgh_iterated(rank - 1, below.value, below.iterations)
            if stuck:
                # Undoing this rank stopped early; another pass would repeat it
                return

    def _undo(self, rank: int, current: _Rank) -> Magnitude:
        """Undo f_rank on current.value in lattice steps until it is below the rank maximum."""
        spec = self.engineerings[rank]
        maximum = self.maximums[rank]
        value = current.value

        def measure(v: Magnitude) -> Magnitude:
            return round_to(v, self.rounding) if rank == 0 else v

        if measure(value) < maximum:
            return measure(value)
        if rank < RANKS - 1:
            if rank == 0:
                estimate = measure(value) - maximum
            else:
                estimate = fgh_iterated_log(rank, value, maximum)
            if estimate.is_finite():
                count = spec.current(max(estimate.floor(), ZERO))
                reduced = fgh_iterated(rank, value, -count)
                if reduced.is_finite():
                    value = reduced
                    current.iterations = current.iterations + count
        while measure(value) >= maximum:
            following = spec.next(current.iterations)
            step = following - current.iterations
            reduced = fgh_iterated(rank, value, -step)
            if not reduced.is_finite() or not reduced < value:
                break
            value = reduced
            current.iterations = following
        return measure(value)

    def _render(self, argument: Magnitude, iterations: list[Magnitude]) -> str:
        shown = [predicate(count) for predicate, count in zip(self.function_shown, iterations)]
        visible = any(shown)
        text = self.inner_notation.format(argument)
        if visible or self.argument_chars[2]:
            text = self.argument_chars[0] + text + self.argument_chars[1]
        for rank in _permutation(self.delimiter_permutation):
            if not shown[rank]:
                continue
            count = iterations[rank]
            if ZERO < count <= self.max_in_a_row[rank] and count.is_integer():
                text = wrap_repeated(text, self.function_chars[rank], int(count.to_float()))
                continue
            before, after, opposite = self.iteration_chars[rank]
            count_text = before + self.role(self.iteration_notations[rank]).format(count) + after
            if self.iteration_after[rank]:
                text = opposite + text + count_text
            else:
                text = count_text + text + opposite
        if visible or self.edge_chars[2]:
            text = self.edge_chars[0] + text + self.edge_chars[1]
        return text
