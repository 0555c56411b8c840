"""
Decomposition primitives: split a value into a bounded mantissa and an exponent-like count.

Every function here returns a ``(mantissa, exponent)`` pair that reproduces the value through
its own composition law:

==========================  ==================================================
Function                    Composition law
==========================  ==================================================
scientifify                 mantissa * base^exponent
hyperscientifify            iteratedexp(base^(1/exp_multiplier), exponent, mantissa)
weak_hyperscientifify       weak_tetrate(base, exponent) ^ mantissa
pentascientifify            pentate(base, exponent, mantissa)
factorial_scientifify       mantissa * exponent!  (mantissa / |exponent|! below 1)
factorial_hyperscientifify  mantissa!!...! with exponent factorials
==========================  ==================================================

Exponents are quantized onto an EngineeringSpec, and a correction loop nudges the pair until
the mantissa sits in its window. Rounding the mantissa can push it across the window edge; if
the loop has then moved both up and down it clamps the mantissa to the lower limit and stops.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
import warnings
from typing import Callable, Sequence, Union

# Local ----------------------------------------------------------------------------------------------------------------
from .engineering import EngineeringLike, EngineeringSpec
from .magnitude import (
    INF, NAN, NEG_INF, ONE, TWO, ZERO, Magnitude, MagnitudeLike, factorial,
    increasing_inverse, infinite_tetration, isclose, iteratedexp, iteratedlog,
    log, penta_log, pentate, slog,
)
from .numeric import to_magnitude

__all__ = [
    'GAMMA_MINIMUM',
    'Rounding',
    'factorial_hyperscientifify',
    'factorial_scientifify',
    'factorial_slog',
    'hyperscientifify',
    'increasing_scientifify',
    'inverse_factorial',
    'iteratedexpmult',
    'iteratedfactorial',
    'iteratedmultlog',
    'multabs',
    'multslog',
    'pentascientifify',
    'round_to',
    'scientifify',
    'weak_hyperscientifify',
    'weak_slog',
    'weak_tetrate',
]

Rounding = Union[MagnitudeLike, Callable[[Magnitude], MagnitudeLike]]

MAX_SAFE_INTEGER = 2 ** 53 - 1

# Lattice moves allowed when settling a bisected argument
_SETTLE_STEPS = 4

# x! has its minimum here; it is increasing above this point
GAMMA_MINIMUM = 0.461632144968362341262659542325


# Helpers --------------------------------------------------------------------------------------------------------------

def round_to(value: MagnitudeLike, rounding: Rounding) -> Magnitude:
    """
    Round value to the nearest multiple of ``rounding``.

    ``rounding`` may also be a function of the value that returns the multiple to use. A
    multiple of 0 leaves the value untouched.

    Examples:
        >>> round_to(1.537, 0.01)
        Magnitude('1.54')
        >>> round_to(1.537, 0)
        Magnitude('1.537')
    """
    value = to_magnitude(value)
    multiple = to_magnitude(rounding(value) if callable(rounding) else rounding)
    if multiple == ZERO:
        return value
    return (value / multiple).round() * multiple


def multabs(value: MagnitudeLike) -> Magnitude:
    """Multiplicative absolute value: the reciprocal for |value| < 1, value otherwise."""
    value = to_magnitude(value)
    if value == ZERO:
        return ZERO
    if abs(value) < ONE:
        return value.recip()
    return value


def iteratedexpmult(base: MagnitudeLike, payload: MagnitudeLike, height: MagnitudeLike,
                    mult: MagnitudeLike) -> Magnitude:
    """iteratedexp where each step is base^(x / mult) instead of base^x."""
    return iteratedexp(to_magnitude(base) ** to_magnitude(mult).recip(), height, payload)


def iteratedmultlog(value: MagnitudeLike, base: MagnitudeLike, times: MagnitudeLike,
                    mult: MagnitudeLike) -> Magnitude:
    """iteratedlog where each logarithm is multiplied by mult; inverse of iteratedexpmult."""
    return iteratedlog(value, to_magnitude(base) ** to_magnitude(mult).recip(), times)


def multslog(value: MagnitudeLike, base: MagnitudeLike, mult: MagnitudeLike) -> Magnitude:
    """slog matching iteratedexpmult."""
    return slog(value, to_magnitude(base) ** to_magnitude(mult).recip())


# Scientific -----------------------------------------------------------------------------------------------------------

def scientifify(
        value: MagnitudeLike,
        base: MagnitudeLike = 10,
        rounding: Rounding = 0,
        mantissa_power: MagnitudeLike = 0,
        engineerings: EngineeringLike = 1,
        exp_multiplier: MagnitudeLike = 1,
) -> tuple[Magnitude, Magnitude]:
    """
    Split value into ``(mantissa, exponent)`` with value = mantissa * base^exponent.

    Args:
        value: Number to split.
        base: Exponent base; bases below 1 swap the roles of the window edges.
        rounding: Multiple (or function giving the multiple) the mantissa is rounded to.
        mantissa_power: Shifts the mantissa window to [base^p, base^(p+1)).
        engineerings: Allowed exponents, e.g. 3 for engineering notation.
        exp_multiplier: The returned exponent is multiplied by this.

    Returns:
        The pair. Zero gives (0, -inf), infinities give (+-inf, inf) and an invalid base
        gives (base, NaN) with a RuntimeWarning.

    Examples:
        >>> scientifify(1500)
        (Magnitude('1.5'), Magnitude('3'))
        >>> scientifify(123456, engineerings=3)
        (Magnitude('123.456'), Magnitude('3'))
    """
    value, base = to_magnitude(value), to_magnitude(base)
    power, exp_multiplier = to_magnitude(mantissa_power), to_magnitude(exp_multiplier)
    spec = EngineeringSpec.of(engineerings)
    if value == ZERO:
        return ZERO, NEG_INF
    if value.is_inf():
        return value, INF
    if value.is_nan():
        return NAN, NAN
    if value < ZERO:
        mantissa, exponent = scientifify(-value, base, rounding, power, spec, exp_multiplier)
        return -mantissa, exponent
    if base == ONE or base <= ZERO:
        warnings.warn(f"scientifify got an unusable base {base}", RuntimeWarning, stacklevel=2)
        return base, NAN

    target = log(value, base) - power
    e = spec.current(target)
    if e < ZERO and e != target:
        e = spec.previous(target)
    unrounded = value / base ** e
    mantissa = round_to(unrounded, rounding)
    if abs(e) > MAX_SAFE_INTEGER:
        return base ** power, e * exp_multiplier

    lower_limit = base ** power
    loop_watch = False
    while True:
        previous_unrounded = unrounded
        upper_limit = base ** (spec.next(e) - spec.current(e) + power)
        if base < ONE:
            move_down = mantissa <= upper_limit
            move_up = not move_down and mantissa > lower_limit
        else:
            move_up = mantissa >= upper_limit
            move_down = not move_up and mantissa < lower_limit
        if move_up:
            following = spec.next(e)
            unrounded = unrounded * base ** (e - following)
            e = following
            mantissa = round_to(lower_limit if loop_watch else unrounded, rounding)
            if loop_watch:
                break
        elif move_down:
            preceding = spec.previous(e)
            unrounded = unrounded * base ** (e - preceding)
            e = preceding
            mantissa = round_to(unrounded, rounding)
            loop_watch = True
        else:
            break
        if previous_unrounded == unrounded:
            break
    return mantissa, e * exp_multiplier


def hyperscientifify(
        value: MagnitudeLike,
        base: MagnitudeLike = 10,
        rounding: Rounding = 0,
        hypermantissa_power: MagnitudeLike = 0,
        engineerings: EngineeringLike = 1,
        exp_multiplier: MagnitudeLike = 1,
        hyperexp_multiplier: MagnitudeLike = 1,
) -> tuple[Magnitude, Magnitude]:
    """
    Split value into ``(mantissa, exponent)`` with
    value = iteratedexp(base^(1/exp_multiplier), exponent, mantissa).

    The mantissa window is [base^^p, base^^(p+1)) for hypermantissa_power p. Values at or
    above the infinite-tetration limit of a convergent base give (value / limit, inf).

    A value v in (0, 1) has the exponent -1 and the mantissa base^v, which is a float. Below
    about 1e-16 that mantissa rounds to exactly 1, so such values come back as (1, -1) and
    rebuild to 0.

    Examples:
        >>> hyperscientifify(Magnitude("eee10"))
        (Magnitude('1'), Magnitude('4'))
    """
    value, base = to_magnitude(value), to_magnitude(base)
    power, mult = to_magnitude(hypermantissa_power), to_magnitude(exp_multiplier)
    spec = EngineeringSpec.of(engineerings)
    effective = base ** mult.recip()
    if effective <= ONE:
        return base, NAN
    if value.is_inf():
        return (INF, INF) if value > ZERO else (NEG_INF, Magnitude(-2))
    if value.is_nan():
        return NAN, NAN
    limit = infinite_tetration(effective)
    if value >= limit:
        return value / limit, INF

    mantissa, exponent = _iterated_decompose(
        value,
        climb=lambda payload, height: iteratedexp(effective, height, payload),
        descend=lambda x, times: iteratedlog(x, effective, times),
        level=lambda x: slog(x, effective),
        spec=spec,
        rounding=rounding,
        power=power,
    )
    return mantissa, exponent * to_magnitude(hyperexp_multiplier)


def weak_tetrate(base: MagnitudeLike, height: MagnitudeLike) -> Magnitude:
    """Bottom-up tower base↓↓height = base^(base^(height - 1))."""
    base = to_magnitude(base)
    return base ** (base ** (to_magnitude(height) - ONE))


def weak_slog(value: MagnitudeLike, base: MagnitudeLike = 10) -> Magnitude:
    """Inverse of weak_tetrate."""
    return log(log(value, base), base) + ONE


def weak_hyperscientifify(
        value: MagnitudeLike,
        base: MagnitudeLike = 10,
        rounding: Rounding = 0,
        mantissa_power: MagnitudeLike = 0,
        engineerings: EngineeringLike = 1,
) -> tuple[Magnitude, Magnitude]:
    """
    Split value into ``(mantissa, exponent)`` with value = weak_tetrate(base, exponent)^mantissa.

    Since weak_tetrate(b, e)^m = b^(m * b^(e-1)), this is scientific notation applied to
    log_b(value) * b.
    """
    value, base = to_magnitude(value), to_magnitude(base)
    if value.is_nan():
        return NAN, NAN
    if value.is_inf():
        return (INF, INF) if value > ZERO else (NEG_INF, INF)
    return scientifify(log(value, base) * base, base, rounding, mantissa_power, engineerings)


def pentascientifify(
        value: MagnitudeLike,
        base: MagnitudeLike = 10,
        rounding: Rounding = 0,
        mantissa_power: MagnitudeLike = 0,
        engineerings: EngineeringLike = 1,
) -> tuple[Magnitude, Magnitude]:
    """
    Split value into ``(mantissa, exponent)`` with value = pentate(base, exponent, mantissa).

    Examples:
        >>> pentascientifify(9)
        (Magnitude('9'), Magnitude('0'))
        >>> pentascientifify(Magnitude("ee10"))
        (Magnitude('3'), Magnitude('1'))
    """
    value, base = to_magnitude(value), to_magnitude(base)
    if base <= ONE:
        return base, NAN
    if value.is_inf():
        return (INF, INF) if value > ZERO else (NEG_INF, Magnitude(-2))
    if value.is_nan():
        return NAN, NAN
    return _iterated_decompose(
        value,
        climb=lambda payload, height: pentate(base, height, payload),
        descend=lambda x, times: _iterated_slog(x, base, times),
        level=lambda x: penta_log(x, base),
        spec=EngineeringSpec.of(engineerings),
        rounding=rounding,
        power=to_magnitude(mantissa_power),
    )


# Factorial ------------------------------------------------------------------------------------------------------------

def iteratedfactorial(value: MagnitudeLike, iterations: float = 1) -> Magnitude:
    """
    Apply the factorial ``iterations`` times.

    A fractional part f multiplies the payload by (x!/x)^f. Negative counts invert.
    """
    value = to_magnitude(value)
    if iterations == 0:
        return value
    if iterations == 1:
        return factorial(value)
    if value < GAMMA_MINIMUM and iterations % 1 != 0:
        return NAN
    if iterations < 0:
        return inverse_factorial(value, -iterations)
    whole = math.floor(iterations)
    fraction = iterations - whole
    payload = value
    if fraction:
        payload = payload * (factorial(value) / value) ** fraction
    threshold = Magnitude.from_components(1, 1, MAX_SAFE_INTEGER)
    for step in range(whole):
        if payload == ONE or payload == TWO:
            return payload
        if payload > threshold:
            # x! and 10^x agree at this scale
            return iteratedexp(10, whole - step, payload)
        payload = factorial(payload)
        if step > 10_000:
            break
    return payload


def inverse_factorial(value: MagnitudeLike, iterations: float = 1) -> Magnitude:
    """
    The x with iteratedfactorial(x, iterations) == value.

    Returns NaN when the search cannot match the value to 1e-9.

    Raises:
        ValueError: Below the image of the factorial's minimum, where x! is not invertible.
    """
    value = to_magnitude(value)
    if value == ONE or value == TWO or iterations == 0:
        return value
    if iterations < 0:
        return iteratedfactorial(value, -iterations)
    if value < iteratedfactorial(GAMMA_MINIMUM, iterations):
        raise ValueError(f"inverse_factorial is not defined below the factorial's minimum, got {value}")
    inverse = increasing_inverse(lambda x: iteratedfactorial(x, iterations), GAMMA_MINIMUM, INF)
    found = inverse(value)
    if isclose(iteratedfactorial(found, iterations), value, 1e-9):
        return found
    return NAN


def factorial_slog(value: MagnitudeLike, base: MagnitudeLike = 3) -> Magnitude:
    """
    How many factorials take ``base`` to ``value``; to iteratedfactorial as slog is to tetrate.

    Raises:
        ValueError: For base <= 2, where repeated factorials do not increase.
    """
    value, base = to_magnitude(value), to_magnitude(base)
    if base <= TWO:
        raise ValueError(f"factorial_slog needs a base above 2, got {base}")
    if value == TWO:
        return NEG_INF
    if value < TWO:
        return NAN
    if value == base:
        return ZERO
    if value >= iteratedexp(base, 1e17):
        return slog(value, base)

    below = value < base

    def short_of(height: float) -> bool:
        reached = iteratedfactorial(base, height)
        return reached > value if below else reached < value

    lower, upper = (-1e-18, -2e-18) if below else (1e-18, 2e-18)
    # Double the bracket until it contains the answer
    while short_of(upper):
        lower *= 2
        upper *= 2
    guess, previous = 0.0, -1.0
    while previous != guess:
        previous = guess
        guess = (lower + upper) / 2
        overshoot = iteratedfactorial(base, guess) > value
        if overshoot == below:
            lower = guess
        else:
            upper = guess
    return Magnitude(guess)


def factorial_scientifify(
        value: MagnitudeLike,
        rounding: Rounding = 0,
        mantissa_power: MagnitudeLike = 0,
        engineerings: EngineeringLike = 1,
) -> tuple[Magnitude, Magnitude]:
    """
    Split value into ``(mantissa, exponent)`` with value = mantissa * exponent!.

    Values below 1 give value = mantissa / |exponent|! with a negative exponent.

    Examples:
        >>> factorial_scientifify(120)
        (Magnitude('1'), Magnitude('5'))
    """
    value, power = to_magnitude(value), to_magnitude(mantissa_power)
    spec = EngineeringSpec.of(engineerings)
    if value == ZERO:
        return ZERO, ZERO
    if value == ONE:
        return ONE, ONE
    if value.is_inf():
        return value, INF
    if value.is_nan():
        return NAN, NAN
    if value < ZERO:
        mantissa, exponent = factorial_scientifify(-value, rounding, power, spec)
        return -mantissa, exponent

    if value < ONE:
        e = spec.current(inverse_factorial(value.recip()) + power)
        unrounded = value * factorial(e)
        mantissa = round_to(unrounded, rounding)
        if value <= Magnitude("e-9e15"):
            mantissa = factorial(e) / factorial(e - power)
        else:
            while True:
                previous_unrounded = unrounded
                upper_limit = factorial(spec.previous(e) - power).recip()
                lower_limit = factorial(spec.current(e) - power).recip()
                scaled = mantissa / factorial(e)
                if e > ZERO and scaled >= upper_limit:
                    e = spec.previous(e)
                elif scaled < lower_limit:
                    e = spec.next(e)
                else:
                    break
                unrounded = value * factorial(e)
                mantissa = round_to(unrounded, rounding)
                if previous_unrounded == unrounded:
                    break
        return mantissa, -e

    e = spec.current(inverse_factorial(value) - power)
    unrounded = value / factorial(e)
    mantissa = round_to(unrounded, rounding)
    if value >= Magnitude("e9e15"):
        return factorial(e) / factorial(e - power), e
    while True:
        previous_unrounded = unrounded
        scaled = mantissa * factorial(e)
        following, preceding = spec.next(e), spec.previous(e)
        if scaled >= factorial(following + power):
            unrounded = unrounded * factorial(e) / factorial(following)
            e = following
        elif e > ZERO and scaled < factorial(spec.current(e) + power):
            unrounded = unrounded * factorial(e) / factorial(preceding)
            e = preceding
        else:
            break
        mantissa = round_to(unrounded, rounding)
        if previous_unrounded == unrounded:
            break
    return mantissa, e


def factorial_hyperscientifify(
        value: MagnitudeLike,
        limit: MagnitudeLike = 3,
        rounding: Rounding = 0,
        engineerings: EngineeringLike = 1,
) -> tuple[Magnitude, Magnitude]:
    """
    Split value into ``(mantissa, exponent)`` with value = mantissa!!...! (exponent factorials).

    The mantissa is kept at or above ``limit``; values at or below 2 are returned whole.
    """
    value, limit = to_magnitude(value), to_magnitude(limit)
    spec = EngineeringSpec.of(engineerings)
    if value.is_inf():
        return INF, INF
    if value <= TWO or limit <= TWO:
        return value, ZERO
    if value.is_nan():
        return NAN, NAN

    level = factorial_slog(value, limit)
    e = spec.current(level)
    if e < ZERO and e != level:
        e = spec.previous(level)
    unrounded = inverse_factorial(value, e.to_float())
    mantissa = round_to(unrounded, rounding)
    if abs(e) > MAX_SAFE_INTEGER:
        return limit, e
    if e < ZERO:
        return mantissa, e

    loop_watch = False
    while True:
        previous_unrounded = unrounded
        upper_limit = iteratedfactorial(limit, (spec.next(e) - spec.current(e)).to_float())
        if mantissa >= upper_limit:
            e = spec.next(e)
            unrounded = limit if loop_watch else inverse_factorial(value, e.to_float())
            mantissa = round_to(unrounded, rounding)
            if loop_watch:
                break
        elif mantissa < limit:
            e = spec.previous(e)
            unrounded = inverse_factorial(value, e.to_float())
            mantissa = round_to(unrounded, rounding)
            loop_watch = True
        else:
            break
        if previous_unrounded == unrounded:
            break
    return mantissa, e


# Increasing functions -------------------------------------------------------------------------------------------------

def increasing_scientifify(
        value: MagnitudeLike,
        func: Callable[..., MagnitudeLike],
        limits: Sequence[MagnitudeLike],
        limits_are_maximums: bool = False,
        engineerings: Sequence[EngineeringLike] = (1,),
        rounding: Rounding = 0,
        range_limits: Sequence[tuple[MagnitudeLike, MagnitudeLike]] = ((NEG_INF, INF),),
        revert_values: Sequence[bool | MagnitudeLike] = (False,),
) -> list[Magnitude]:
    """
    Split value into the arguments of an n-ary increasing function, value = func(*arguments).

    This generalizes scientifify to any function increasing in each argument: with
    ``func(m, e) = m * 10**e`` and ``limits=[1]`` it is scientific notation.

    ``limits[i]`` bounds argument i from below, or from above with limits_are_maximums. The
    last argument has no bound, so limits holds one entry per argument but the last. Starting
    from the last argument, each argument is solved by bisection while the arguments below it
    sit at their limits, then moved onto its lattice: down for minimums, up for maximums.
    ``engineerings[k]`` is the lattice of argument k + 1. Argument 0 takes what is left and
    is only rounded.

    Bisection is only as precise as func's output, so a snapped argument is checked against
    its lattice neighbour and moved one step when the neighbour brackets value better. When
    func cannot tell the neighbour apart (an exponent past 9e15 is only known to about 1e-15
    of itself), the lower arguments carry no information and stay at their limits.

    When a solved argument is NaN or infinite, ``revert_values[i]`` decides: True puts the
    limit back, a number replaces it, False keeps it.

    Short sequences are padded by repeating their last entry.

    Examples:
        >>> increasing_scientifify(1500, lambda m, e: m * 10 ** e, [1])
        [Magnitude('1.5'), Magnitude('3')]
    """
    value = to_magnitude(value)
    if not limits:
        raise ValueError("increasing_scientifify needs at least one limit")
    count = len(limits) + 1
    arguments = [to_magnitude(limit) for limit in limits]
    arguments.append(INF if limits_are_maximums else NEG_INF)
    engineerings = _padded(engineerings, count - 1)
    range_limits = _padded(range_limits, count)
    revert_values = _padded(revert_values, count)

    for i in range(count - 1, -1, -1):
        def partial(x: Magnitude, i: int = i) -> Magnitude:
            trial = list(arguments)
            trial[i] = x
            return to_magnitude(func(*trial))

        low, high = range_limits[i]
        solved = increasing_inverse(partial, low, high)(value)
        settled = True
        if i == 0:
            solved = round_to(solved, rounding)
        elif solved.is_finite():
            spec = EngineeringSpec.of(engineerings[i - 1])
            solved = spec.upper(solved) if limits_are_maximums else spec.current(solved)
            solved, settled = _settle(partial, value, solved, spec, limits_are_maximums)
        if not solved.is_finite():
            revert = revert_values[i]
            if revert is True:
                solved = arguments[i]
            elif revert is not False:
                solved = to_magnitude(revert)
        arguments[i] = solved
        if not settled:
            break
    return arguments


# Private Methods ------------------------------------------------------------------------------------------------------

def _padded(items: Sequence, count: int) -> list:
    items = list(items)
    while len(items) < count:
        items.append(items[-1])
    return items


def _settle(func: Callable[[Magnitude], Magnitude], value: Magnitude, solved: Magnitude,
            spec: EngineeringSpec, maximums: bool) -> tuple[Magnitude, bool]:
    # Lattice point bracketing value: func(solved) <= value < func(next) for minimums,
    # func(previous) < value <= func(solved) for maximums. False when the neighbour is
    # indistinguishable through func.
    if solved + spec.smallest == solved:
        return solved, False
    step = spec.previous if maximums else spec.next
    for _ in range(_SETTLE_STEPS):
        here = func(solved)
        neighbour = step(solved)
        there = func(neighbour)
        if here.is_nan() or there.is_nan():
            return solved, True
        if maximums:
            if not there < here:
                return solved, False
            if here < value:
                solved = spec.next(solved)
            elif there >= value:
                solved = neighbour
            else:
                return solved, True
        else:
            if not there > here:
                return solved, False
            if here > value:
                solved = spec.previous(solved)
            elif there <= value:
                solved = neighbour
            else:
                return solved, True
    return solved, True


def _iterated_slog(value: Magnitude, base: Magnitude, times: MagnitudeLike) -> Magnitude:
    # Inverse of pentate(base, times, payload)
    times = to_magnitude(times).to_float()
    if times < 0:
        return pentate(base, -times, value)
    whole = math.floor(times)
    for _ in range(whole):
        value = slog(value, base)
        if not value.is_finite():
            return value
    fraction = times - whole
    if fraction:
        value = pentate(base, penta_log(value, base).to_float() - fraction)
    return value


def _iterated_decompose(
        value: Magnitude,
        climb: Callable[[Magnitude, MagnitudeLike], Magnitude],
        descend: Callable[[Magnitude, MagnitudeLike], Magnitude],
        level: Callable[[Magnitude], Magnitude],
        spec: EngineeringSpec,
        rounding: Rounding,
        power: Magnitude,
) -> tuple[Magnitude, Magnitude]:
    """
    Shared correction loop for the tower-shaped laws, value = climb(mantissa, exponent).

    Small values skip the level estimate and let the loop walk to the window, since level
    functions are least accurate there.
    """
    span = spec.smallest * 10
    high_probe = climb(ONE, span)
    low_probe = climb(ONE, -span)
    if low_probe.is_nan():
        low_probe = NEG_INF
    if low_probe < value < high_probe:
        e, unrounded = ZERO, value
    else:
        target = level(value) - power
        e = spec.current(target)
        if e < ZERO and e != target:
            e = spec.previous(target)
        unrounded = descend(value, e)
    mantissa = round_to(unrounded, rounding)
    if abs(e) > MAX_SAFE_INTEGER:
        return climb(ONE, power), e

    lower_limit = climb(ONE, power)
    loop_watch = False
    while True:
        previous_unrounded = unrounded
        upper_limit = climb(ONE, spec.next(e) - spec.current(e) + power)
        if mantissa >= upper_limit:
            following = spec.next(e)
            unrounded = descend(unrounded, following - e)
            e = following
            mantissa = round_to(lower_limit if loop_watch else unrounded, rounding)
            if loop_watch:
                break
        elif mantissa < lower_limit:
            preceding = spec.previous(e)
            unrounded = climb(unrounded, e - preceding)
            e = preceding
            mantissa = round_to(unrounded, rounding)
            loop_watch = True
        else:
            break
        if previous_unrounded == unrounded:
            break
    return mantissa, e
