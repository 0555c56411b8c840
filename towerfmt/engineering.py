"""
Allowed-value lattices ("engineering" steps).

An EngineeringSpec is a descending list of step sizes ``[s1 > s2 > ... > sk]``. The values it
allows are the sums ``c1*s1 + c2*s2 + ... + ck*sk`` built greedily, most significant step first,
like digits of a mixed-radix number. Notations use it to restrict exponents, tower heights and
iteration counts to a cadence such as "multiples of 3".

Examples:
    >>> spec = EngineeringSpec.of(3)
    >>> spec.current(7), spec.next(6)
    (Magnitude('6'), Magnitude('9'))
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Iterable, Union

# Local ----------------------------------------------------------------------------------------------------------------
from .magnitude import Magnitude, MagnitudeLike, ONE, ZERO, INF, NEG_INF
from .numeric import to_magnitude
from .tools import fmt_value

__all__ = [
    'EngineeringSpec',
    'EngineeringLike',
    'nearest_allowed_above',
    'nearest_allowed_below',
    'next_allowed',
    'previous_allowed',
]


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineeringSpec:
    """
    Immutable lattice of allowed values.

    Attributes:
        steps: Positive step sizes, sorted descending. An empty input becomes ``(1,)``,
            which allows every integer.

    Raises:
        ValueError: If a step is zero, negative, NaN or infinite.
    """
    steps: tuple[Magnitude, ...] = (ONE,)

    def __post_init__(self):
        raw = self.steps
        if isinstance(raw, (Magnitude, int, float, str)):
            raw = (raw,)
        converted = tuple(to_magnitude(step) for step in raw)
        for step in converted:
            if not step.is_finite() or step <= ZERO:
                raise ValueError(f"engineering steps must be positive and finite, got {fmt_value(step)}")
        if not converted:
            converted = (ONE,)
        object.__setattr__(self, "steps", tuple(sorted(converted, reverse=True)))

    @classmethod
    def of(cls, value: "EngineeringLike") -> "EngineeringSpec":
        """Return value if it already is a spec, otherwise build one from a step or steps."""
        if isinstance(value, EngineeringSpec):
            return value
        return cls(value)

    @property
    def smallest(self) -> Magnitude:
        return self.steps[-1]

    def is_whole(self) -> bool:
        """True when every allowed value is an integer."""
        return all(step.is_integer() for step in self.steps)

    def places(self, value: MagnitudeLike) -> list[Magnitude]:
        """
        Greedy coefficients of value, most significant step first.

        Raises:
            ValueError: For negative values.
        """
        value = to_magnitude(value)
        if value < ZERO:
            raise ValueError(f"places() does not support negative values, got {value}")
        if value == ZERO:
            return [ZERO] * len(self.steps)
        result = []
        remaining = value
        for step in self.steps:
            portion = max((remaining / step).floor(), ZERO)
            remaining = remaining - portion * step
            result.append(portion)
        return result

    def compose(self, places: Iterable[Magnitude]) -> Magnitude:
        """Sum of coefficients times their steps; the inverse of places()."""
        total = ZERO
        for coefficient, step in zip(places, self.steps):
            total = total + coefficient * step
        return total

    def current(self, value: MagnitudeLike) -> Magnitude:
        """Largest allowed value at or below value (for negatives, mirrored through zero)."""
        value = to_magnitude(value)
        if value == ZERO:
            return ZERO
        if value < ZERO:
            return -self.upper(-value)
        return self.compose(self.places(value))

    def upper(self, value: MagnitudeLike) -> Magnitude:
        """Smallest allowed value at or above value."""
        value = to_magnitude(value)
        below = self.current(value)
        if below == value:
            return below
        return self.next(value)

    def next(self, value: MagnitudeLike) -> Magnitude:
        """Smallest allowed value strictly above value."""
        value = to_magnitude(value)
        if value == ZERO:
            return self.smallest
        if value < ZERO:
            return -self.previous(-value)
        return self.compose(self._next_places(value))

    def previous(self, value: MagnitudeLike) -> Magnitude:
        """Largest allowed value strictly below value, reading places as digits."""
        value = to_magnitude(value)
        if value == ZERO:
            return -self.smallest
        if value < ZERO:
            return -self.next(-value)
        below = self.current(value)
        if below < value:
            return below
        return self.compose(self._previous_places(value))

    def _next_places(self, value: Magnitude) -> list[Magnitude]:
        # Increment one place and zero everything less significant; keep the smallest result
        best_value = INF
        old = self.places(value)
        best = list(old)
        for s in range(len(self.steps) - 1, -1, -1):
            candidate = list(old)
            candidate[s] = candidate[s] + ONE
            for t in range(s + 1, len(self.steps)):
                candidate[t] = ZERO
            candidate_value = self.compose(candidate)
            if value < candidate_value < best_value:
                best_value = candidate_value
                best = candidate
        return best

    def _previous_places(self, value: Magnitude) -> list[Magnitude]:
        # Decrement a nonzero place, then refill the less significant places greedily
        best_value = NEG_INF
        old = self.places(value)
        best = list(old)
        for s in range(len(self.steps) - 1, -1, -1):
            if not old[s] > ZERO:
                continue
            candidate = old[:s + 1]
            candidate[s] = candidate[s] - ONE
            candidate_value = self.compose(candidate)
            difference = self.steps[s]
            for t in range(s + 1, len(self.steps)):
                coefficient = max((difference / self.steps[t]).floor(), ZERO)
                portion = coefficient * self.steps[t]
                if portion == difference:
                    # The refill must stay strictly below the step it replaces
                    coefficient = coefficient - ONE
                    portion = portion - self.steps[t]
                difference = difference - portion
                candidate_value = candidate_value + portion
                candidate.append(coefficient)
            if best_value < candidate_value < value:
                best_value = candidate_value
                best = candidate
        return best


EngineeringLike = Union[EngineeringSpec, MagnitudeLike, Iterable[MagnitudeLike]]


# Methods --------------------------------------------------------------------------------------------------------------

def next_allowed(current: MagnitudeLike, spec: EngineeringLike = 1) -> Magnitude:
    return EngineeringSpec.of(spec).next(current)


def previous_allowed(current: MagnitudeLike, spec: EngineeringLike = 1) -> Magnitude:
    return EngineeringSpec.of(spec).previous(current)


def nearest_allowed_below(current: MagnitudeLike, spec: EngineeringLike = 1) -> Magnitude:
    """Largest allowed value less than or equal to current."""
    return EngineeringSpec.of(spec).current(current)


def nearest_allowed_above(current: MagnitudeLike, spec: EngineeringLike = 1) -> Magnitude:
    """Smallest allowed value greater than or equal to current."""
    return EngineeringSpec.of(spec).upper(current)
