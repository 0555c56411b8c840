"""
Layered magnitude numbers reaching far past the float range.

A Magnitude stores a sign, an integer layer and a float mantissa ``mag``. Layer 0 holds an
ordinary float. Each further layer raises 10 to the power of the layer below, so
``layer=3, mag=12`` is 10^10^10^12. On layers 1 and up a negative ``mag`` stands for the
reciprocal of the positive tower, which keeps tiny numbers on the same footing as huge ones.

Besides ordinary arithmetic the module provides the hyper-operators that notations rely on:
tetration and its inverse the super-logarithm (slog), pentation and its inverse penta_log,
iterated exponentials and logarithms, the gamma function, and a bisection search that inverts
any increasing Magnitude function.

Fractional heights follow the linear approximation of tetration, b^^h = 1 + h on (-1, 0].
"""

# Standard library -----------------------------------------------------------------------------------------------------
import decimal
import math
import re
from typing import Callable, Final, Union

# Third-party ----------------------------------------------------------------------------------------------------------
import mpmath

__all__ = [
    'Magnitude',
    'MagnitudeLike',
    'ZERO',
    'ONE',
    'TWO',
    'TEN',
    'INF',
    'NEG_INF',
    'NAN',
    'CONVERGENT_BASE',
    'factorial',
    'gamma',
    'increasing_inverse',
    'infinite_tetration',
    'isclose',
    'iteratedexp',
    'iteratedlog',
    'log',
    'log10',
    'penta_log',
    'pentate',
    'pow10',
    'slog',
    'tetrate',
]

# Constants ------------------------------------------------------------------------------------------------------------

EXP_LIMIT: Final = 9e15
LAYER_DOWN: Final = math.log10(EXP_LIMIT)
FIRST_NEG_LAYER: Final = 1 / EXP_LIMIT

# e^(1/e); tetration of any base at or below this converges to a finite limit
CONVERGENT_BASE: Final = 1.44466786100976613366

LN10: Final = math.log(10)
LOG10_E: Final = math.log10(math.e)
LOG10_2PI: Final = math.log10(2 * math.pi)

# Upper bound of the super-logarithm key used by increasing_inverse
LADDER_LIMIT: Final = 1e16

MAX_ITERATIONS: Final = 10_000

_TOWER_RE = re.compile(r"^\(e\^([^)]+)\)(.+)$")


# Classes --------------------------------------------------------------------------------------------------------------

class Magnitude:
    """
    Immutable sign-layer-mantissa number.

    Accepts int, float, str or another Magnitude. Strings understand float syntax plus the
    layered forms produced by ``str()``: ``"1.5e400"``, ``"ee400"``, ``"e-e400"``,
    ``"(e^7)12"``, ``"10^^3"`` and ``"10^^^2"``.

    Examples:
        >>> Magnitude(1500) * 2
        Magnitude('3000')
        >>> Magnitude("ee400").layer
        2
        >>> Magnitude(10) ** 400 > Magnitude(9e300)
        True
    """
    __slots__ = ('_sign', '_layer', '_mag')

    def __init__(self, value: "MagnitudeLike" = 0):
        if isinstance(value, Magnitude):
            sign, layer, mag = value._sign, value._layer, value._mag
        elif isinstance(value, str):
            parsed = _parse(value)
            sign, layer, mag = parsed._sign, parsed._layer, parsed._mag
        elif isinstance(value, bool):
            raise TypeError("Magnitude does not accept bool values")
        elif isinstance(value, int):
            sign, layer, mag = _int_components(value)
        elif isinstance(value, float):
            sign, layer, mag = _normalize(1, 0, value)
        else:
            raise TypeError(f"Magnitude expects int, float, str or Magnitude, "
                            f"not {type(value).__name__}")
        self._sign = sign
        self._layer = layer
        self._mag = mag

    @classmethod
    def from_components(cls, sign: int, layer: int, mag: float) -> "Magnitude":
        """Build a Magnitude from raw sign, layer and mag, normalizing them."""
        return cls._raw(*_normalize(sign, int(layer), float(mag)))

    @classmethod
    def _raw(cls, sign: int, layer: int, mag: float) -> "Magnitude":
        obj = object.__new__(cls)
        obj._sign = sign
        obj._layer = layer
        obj._mag = mag
        return obj

    # Components

    @property
    def sign(self) -> int:
        return self._sign

    @property
    def layer(self) -> int:
        return self._layer

    @property
    def mag(self) -> float:
        return self._mag

    # Predicates

    def is_nan(self) -> bool:
        return math.isnan(self._mag)

    def is_inf(self) -> bool:
        return self._mag == math.inf

    def is_finite(self) -> bool:
        return math.isfinite(self._mag)

    def is_integer(self) -> bool:
        """True for whole values; every value on layer 1 and up with positive mag counts."""
        if not self.is_finite():
            return False
        if self._layer == 0:
            return self._mag.is_integer()
        return self._mag > 0

    # Conversion

    def to_float(self) -> float:
        if self._layer == 0:
            return self._sign * self._mag if self._sign else 0.0
        if self._layer == 1:
            try:
                return self._sign * (10.0 ** self._mag)
            except OverflowError:
                return self._sign * math.inf
        return self._sign * (math.inf if self._mag > 0 else 0.0)

    def __float__(self) -> float:
        return self.to_float()

    def __int__(self) -> int:
        if self.is_nan():
            raise ValueError("cannot convert NaN Magnitude to int")
        if self.is_inf():
            raise OverflowError("cannot convert infinite Magnitude to int")
        if self._layer == 0 or self._mag < 0:
            return int(self.to_float())
        if self._layer == 1:
            power = decimal.Decimal(10) ** decimal.Decimal(repr(self._mag))
            return self._sign * int(power)
        raise OverflowError(f"Magnitude {self} is too large to convert to int")

    def __bool__(self) -> bool:
        return self._sign != 0 or self.is_nan()

    def __repr__(self) -> str:
        return f"Magnitude('{self}')"

    def __str__(self) -> str:
        if self.is_nan():
            return "NaN"
        if self.is_inf():
            return "-Infinity" if self._sign < 0 else "Infinity"
        sign = "-" if self._sign < 0 else ""
        if self._layer == 0:
            return sign + _float_text(self._mag)
        if self._layer == 1:
            exponent = math.floor(self._mag)
            mantissa = float(f"{10.0 ** (self._mag - exponent):.14g}")
            if mantissa >= 10:
                mantissa, exponent = mantissa / 10, exponent + 1
            return f"{sign}{_float_text(mantissa)}e{exponent}"
        prefix = "e-" if self._mag < 0 else "e"
        if self._layer <= 5:
            return sign + prefix + "e" * (self._layer - 1) + _float_text(abs(self._mag))
        return f"{sign}{prefix}(e^{self._layer - 1}){_float_text(abs(self._mag))}"

    def __format__(self, format_spec: str) -> str:
        if format_spec:
            return format(self.to_float(), format_spec)
        return str(self)

    # Ordering

    def _key(self) -> tuple:
        if self._sign == 0:
            return 0, 0, 0.0
        if self._layer == 0:
            tier, value = (math.inf, 0.0) if self.is_inf() else (0, self._mag)
        else:
            tier, value = (self._layer if self._mag > 0 else -self._layer), self._mag
        if self._sign > 0:
            return 1, tier, value
        return -1, -tier, -value

    def __eq__(self, other) -> bool:
        other = _coerce(other)
        if other is None:
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return False
        return self._key() == other._key()

    def __lt__(self, other) -> bool:
        other = _coerce(other)
        if other is None:
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return False
        return self._key() < other._key()

    def __le__(self, other) -> bool:
        other = _coerce(other)
        if other is None:
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return False
        return self._key() <= other._key()

    def __gt__(self, other) -> bool:
        other = _coerce(other)
        if other is None:
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return False
        return self._key() > other._key()

    def __ge__(self, other) -> bool:
        other = _coerce(other)
        if other is None:
            return NotImplemented
        if self.is_nan() or other.is_nan():
            return False
        return self._key() >= other._key()

    def __hash__(self) -> int:
        if self._layer == 0:
            return hash(self.to_float())
        return hash(self._key())

    # Arithmetic

    def __neg__(self) -> "Magnitude":
        return Magnitude._raw(-self._sign, self._layer, self._mag)

    def __pos__(self) -> "Magnitude":
        return self

    def __abs__(self) -> "Magnitude":
        return Magnitude._raw(abs(self._sign) if not self.is_nan() else 1, self._layer, self._mag)

    def __add__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _add(self, other)

    def __radd__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _add(other, self)

    def __sub__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _add(self, -other)

    def __rsub__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _add(other, -self)

    def __mul__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _mul(self, other)

    def __rmul__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _mul(other, self)

    def __truediv__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _mul(self, other.recip())

    def __rtruediv__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _mul(other, self.recip())

    def __pow__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _pow(self, other)

    def __rpow__(self, other) -> "Magnitude":
        other = _coerce(other)
        return NotImplemented if other is None else _pow(other, self)

    def recip(self) -> "Magnitude":
        """1 / self; the reciprocal of zero is infinity."""
        if self.is_nan():
            return NAN
        if self._sign == 0:
            return INF
        if self.is_inf():
            return ZERO
        if self._layer == 0:
            return Magnitude(self._sign / self._mag)
        return Magnitude.from_components(self._sign, self._layer, -self._mag)

    def floor(self) -> "Magnitude":
        if not self.is_finite():
            return self
        if self._layer == 0:
            return Magnitude(math.floor(self.to_float()))
        if self._mag > 0:
            return self
        return ZERO if self._sign > 0 else Magnitude(-1)

    def ceil(self) -> "Magnitude":
        if not self.is_finite():
            return self
        if self._layer == 0:
            return Magnitude(math.ceil(self.to_float()))
        if self._mag > 0:
            return self
        return ONE if self._sign > 0 else ZERO

    def round(self) -> "Magnitude":
        """Round half up, matching the usual display convention."""
        if not self.is_finite():
            return self
        if self._layer == 0:
            return Magnitude(math.floor(self.to_float() + 0.5))
        return self if self._mag > 0 else ZERO

    def trunc(self) -> "Magnitude":
        if not self.is_finite():
            return self
        if self._layer == 0:
            return Magnitude(math.trunc(self.to_float()))
        return self if self._mag > 0 else ZERO

    # Transcendental shortcuts

    def log10(self) -> "Magnitude":
        return log10(self)

    def ln(self) -> "Magnitude":
        return log10(self) * LN10

    def log(self, base: "MagnitudeLike" = 10) -> "Magnitude":
        return log(self, base)

    def pow10(self) -> "Magnitude":
        """10 ** self."""
        return pow10(self)

    def exp(self) -> "Magnitude":
        return pow10(self * LOG10_E)

    def sqrt(self) -> "Magnitude":
        return _pow(self, Magnitude(0.5))

    def root(self, degree: "MagnitudeLike") -> "Magnitude":
        return _pow(self, Magnitude(degree).recip())

    def tetrate(self, height: "MagnitudeLike" = 2, payload: "MagnitudeLike" = 1) -> "Magnitude":
        """self ^^ height, with ``payload`` at the top of the tower."""
        return iteratedexp(self, height, payload)

    def iteratedexp(self, height: "MagnitudeLike" = 2, payload: "MagnitudeLike" = 1) -> "Magnitude":
        return iteratedexp(self, height, payload)

    def iteratedlog(self, base: "MagnitudeLike" = 10, times: "MagnitudeLike" = 1) -> "Magnitude":
        return iteratedlog(self, base, times)

    def slog(self, base: "MagnitudeLike" = 10) -> "Magnitude":
        return slog(self, base)

    def pentate(self, height: "MagnitudeLike" = 2, payload: "MagnitudeLike" = 1) -> "Magnitude":
        return pentate(self, height, payload)

    def penta_log(self, base: "MagnitudeLike" = 10) -> "Magnitude":
        return penta_log(self, base)

    def gamma(self) -> "Magnitude":
        return gamma(self)

    def factorial(self) -> "Magnitude":
        return factorial(self)


MagnitudeLike = Union[Magnitude, int, float, str]

ZERO: Final = Magnitude._raw(0, 0, 0.0)
ONE: Final = Magnitude._raw(1, 0, 1.0)
TWO: Final = Magnitude._raw(1, 0, 2.0)
TEN: Final = Magnitude._raw(1, 0, 10.0)
INF: Final = Magnitude._raw(1, 0, math.inf)
NEG_INF: Final = Magnitude._raw(-1, 0, math.inf)
NAN: Final = Magnitude._raw(1, 0, math.nan)


# Methods --------------------------------------------------------------------------------------------------------------

def isclose(a: MagnitudeLike, b: MagnitudeLike, rel_tol: float = 1e-9) -> bool:
    """Relative closeness test that keeps working across layers."""
    a, b = Magnitude(a), Magnitude(b)
    if a == b:
        return True
    if not (a.is_finite() and b.is_finite()):
        return False
    return abs(a - b) <= max(abs(a), abs(b)) * rel_tol


def log10(value: MagnitudeLike) -> Magnitude:
    """Base-10 logarithm; NaN for negatives, -inf for zero."""
    x = Magnitude(value)
    if x.is_nan() or x._sign < 0:
        return NAN
    if x._sign == 0:
        return NEG_INF
    return _log10_abs(x)


def log(value: MagnitudeLike, base: MagnitudeLike = 10) -> Magnitude:
    base = Magnitude(base)
    if base == TEN:
        return log10(value)
    return log10(value) / log10(base)


def pow10(value: MagnitudeLike) -> Magnitude:
    """10 ** value, exact in layer arithmetic for large exponents."""
    x = Magnitude(value)
    if x.is_nan():
        return NAN
    if x.is_inf():
        return INF if x._sign > 0 else ZERO
    if x._sign == 0:
        return ONE
    if x._layer == 0:
        return Magnitude.from_components(1, 1, x._sign * x._mag)
    if x._mag < 0:
        # |x| < 1/9e15
        return Magnitude(10.0 ** x.to_float())
    return Magnitude.from_components(1, x._layer + 1, x._mag if x._sign > 0 else -x._mag)


def iteratedexp(base: MagnitudeLike, height: MagnitudeLike = 2, payload: MagnitudeLike = 1) -> Magnitude:
    """
    Raise ``base`` to ``payload`` repeatedly, ``height`` times.

    Fractional heights use the linear approximation; negative heights take logarithms instead.
    With the default payload of 1 this is tetration, base^^height.
    """
    base, payload = Magnitude(base), Magnitude(payload)
    height = Magnitude(height).to_float()
    if math.isnan(height) or base.is_nan() or payload.is_nan():
        return NAN
    if height == 0:
        return payload
    if height < 0:
        if payload == ONE:
            return _negative_tower(base, height)
        return iteratedlog(payload, base, -height)
    if math.isinf(height):
        return infinite_tetration(base)

    whole = math.floor(height)
    fraction = height - whole
    if fraction:
        if payload == ONE:
            payload = base ** fraction
        else:
            level = slog(payload, base)
            if not level.is_finite():
                return NAN
            payload = iteratedexp(base, level.to_float() + fraction)

    divergent = base > CONVERGENT_BASE
    shortcut_layer = 1 if base == TEN else 3
    step = 0
    while step < whole:
        if divergent and payload._sign > 0 and payload._layer >= shortcut_layer and payload._mag > 0:
            # base^x only adds a layer once x is this large
            return Magnitude.from_components(1, payload._layer + (whole - step), payload._mag)
        previous = payload
        payload = base ** payload
        step += 1
        if not payload.is_finite():
            return payload
        if not divergent and (payload == previous or step > MAX_ITERATIONS):
            return payload
    return payload


tetrate = iteratedexp


def iteratedlog(value: MagnitudeLike, base: MagnitudeLike = 10, times: MagnitudeLike = 1) -> Magnitude:
    """Take the base-``base`` logarithm ``times`` times; the inverse of iteratedexp."""
    value, base = Magnitude(value), Magnitude(base)
    times = Magnitude(times).to_float()
    if math.isnan(times) or value.is_nan() or base.is_nan():
        return NAN
    if times == 0:
        return value
    if times < 0:
        return iteratedexp(base, -times, value)
    if math.isinf(times):
        return NAN

    whole = math.floor(times)
    fraction = times - whole
    floor_layer = 1 if base == TEN else 2
    step = 0
    while step < whole:
        if value._sign > 0 and value._mag > 0 and value._layer > floor_layer:
            drop = min(whole - step, value._layer - floor_layer)
            value = Magnitude.from_components(1, value._layer - drop, value._mag)
            step += drop
            continue
        value = log(value, base)
        step += 1
        if not value.is_finite():
            return value
    if fraction:
        level = slog(value, base)
        if not level.is_finite():
            return NAN
        value = iteratedexp(base, level.to_float() - fraction)
    return value


def slog(value: MagnitudeLike, base: MagnitudeLike = 10) -> Magnitude:
    """
    Super-logarithm: the height h with iteratedexp(base, h) == value.

    Uses the linear approximation, so slog(x) = x - 1 on (0, 1]. Values that never fall below
    1 under repeated logarithms (convergent bases) give infinity.
    """
    x, base = Magnitude(value), Magnitude(base)
    if x.is_nan() or base.is_nan() or base <= ONE:
        return NAN
    if x._sign <= 0:
        return Magnitude((base ** x).to_float() - 2)
    if x.is_inf():
        return INF

    count = 0.0
    for _ in range(MAX_ITERATIONS):
        if x <= ONE:
            return Magnitude(count + x.to_float() - 1)
        if x._layer >= 3:
            skipped = x._layer - 2
            count += skipped
            x = Magnitude.from_components(1, 2, x._mag)
            continue
        x = log(x, base)
        count += 1
    return INF


def infinite_tetration(base: MagnitudeLike) -> Magnitude:
    """Limit of base^^n as n grows: finite only for e^-e <= base <= e^(1/e)."""
    base = Magnitude(base)
    if base.is_nan():
        return NAN
    if base > CONVERGENT_BASE:
        return INF
    b = base.to_float()
    if b == 1:
        return ONE
    if b < math.exp(-math.e):
        return NAN
    ln_b = math.log(b)
    fixed_point = -mpmath.lambertw(-ln_b) / ln_b
    return Magnitude(float(mpmath.re(fixed_point)))


def pentate(base: MagnitudeLike, height: MagnitudeLike = 2, payload: MagnitudeLike = 1) -> Magnitude:
    """Tetrate ``base`` to ``payload`` repeatedly, ``height`` times (base^^^height for payload 1)."""
    base, payload = Magnitude(base), Magnitude(payload)
    height = Magnitude(height).to_float()
    if math.isnan(height) or base.is_nan() or payload.is_nan():
        return NAN
    if height == 0:
        return payload
    if height < 0:
        if payload == ONE:
            # base^^^h = 1 + h on (-2, 0]
            return Magnitude(1 + height) if height > -2 else NAN
        level = penta_log(payload, base)
        return pentate(base, level.to_float() + height) if level.is_finite() else NAN
    if math.isinf(height):
        return infinite_tetration(base)

    whole = math.floor(height)
    fraction = height - whole
    if fraction:
        if payload == ONE:
            payload = Magnitude(fraction)
            whole += 1
        else:
            level = penta_log(payload, base)
            if not level.is_finite():
                return NAN
            payload = pentate(base, level.to_float() + fraction)

    for step in range(whole):
        previous = payload
        payload = iteratedexp(base, payload.to_float())
        if not payload.is_finite():
            return payload
        if payload == previous or step > MAX_ITERATIONS:
            break
    return payload


def penta_log(value: MagnitudeLike, base: MagnitudeLike = 10) -> Magnitude:
    """Inverse of pentate: the height h with pentate(base, h) == value."""
    x, base = Magnitude(value), Magnitude(base)
    if x.is_nan() or base.is_nan() or base <= ONE:
        return NAN
    if x.is_inf():
        return INF if x._sign > 0 else NAN
    count = 0.0
    for _ in range(100):
        if x <= ONE:
            if x <= -1:
                return NAN
            return Magnitude(count + x.to_float() - 1)
        x = slog(x, base)
        count += 1
    return INF


def gamma(value: MagnitudeLike) -> Magnitude:
    """Gamma function; Stirling's series in log space beyond the float range."""
    x = Magnitude(value)
    if x.is_nan():
        return NAN
    if x.is_inf():
        return INF if x._sign > 0 else NAN
    if x._layer == 0:
        v = x.to_float()
        if v < 171:
            try:
                return Magnitude(math.gamma(v))
            except (ValueError, OverflowError):
                return NAN
        return pow10(Magnitude(float(mpmath.loggamma(v)) / LN10))
    if x._mag < 0:
        # gamma(x) ~ 1/x near zero
        return x.recip()
    if x._sign < 0:
        return NAN
    lx = log10(x)
    log_gamma = x * (lx - LOG10_E) - lx * 0.5 + LOG10_2PI / 2
    return pow10(log_gamma)


def factorial(value: MagnitudeLike) -> Magnitude:
    """x! as gamma(x + 1)."""
    return gamma(Magnitude(value) + ONE)


def increasing_inverse(
        func: Callable[[Magnitude], Magnitude],
        minimum: MagnitudeLike = NEG_INF,
        maximum: MagnitudeLike = INF,
        iterations: int = 240,
) -> Callable[[MagnitudeLike], Magnitude]:
    """
    Build the inverse of a strictly increasing Magnitude function by bisection.

    The search brackets the answer inside [minimum, maximum]. While the brackets sit on
    different layers it bisects in super-logarithm space, which crosses layers in a few dozen
    steps; once both share a layer it bisects their mantissas. Targets outside
    [func(minimum), func(maximum)] have no preimage and give NaN.

    Args:
        func: Strictly increasing function on [minimum, maximum].
        minimum: Smallest argument tried; may be -inf.
        maximum: Largest argument tried; may be inf.
        iterations: Bisection step budget.

    Returns:
        Callable mapping a target value to the argument that produces it.

    Raises:
        ValueError: If maximum <= minimum.
    """
    low_bound, high_bound = Magnitude(minimum), Magnitude(maximum)
    if not low_bound < high_bound:
        raise ValueError(f"increasing_inverse needs minimum < maximum, got [{low_bound}, {high_bound}]")

    def inverse(target: MagnitudeLike) -> Magnitude:
        target = Magnitude(target)
        if target.is_nan():
            return NAN
        low, high = low_bound, high_bound
        if low.is_finite():
            at_low = Magnitude(func(low))
            if target == at_low:
                return low
            if target < at_low:
                return NAN
        if high.is_finite():
            at_high = Magnitude(func(high))
            if target == at_high:
                return high
            if target > at_high:
                return NAN
        elif target.is_inf() and target > ZERO:
            return INF
        if low < ZERO < high:
            at_zero = Magnitude(func(ZERO))
            if target == at_zero:
                return ZERO
            if target > at_zero:
                low = ZERO
            else:
                high = ZERO
        if high <= ZERO:
            near, far = _bisect(-high, -low, lambda y: Magnitude(func(-y)) < target, iterations)
            return _closest(func, target, -near, -far)
        low, high = _bisect(low, high, lambda x: Magnitude(func(x)) > target, iterations)
        return _closest(func, target, low, high)

    return inverse


# Private Methods ------------------------------------------------------------------------------------------------------

def _normalize(sign: int, layer: int, mag: float) -> tuple[int, int, float]:
    if math.isnan(mag):
        return 1, 0, math.nan
    if sign == 0 or (mag == 0 and layer == 0):
        return 0, 0, 0.0
    if layer == 0 and mag < 0:
        sign, mag = -sign, -mag
    if math.isinf(mag):
        return (sign, 0, math.inf) if mag > 0 else (0, 0, 0.0)
    if layer == 0:
        if FIRST_NEG_LAYER <= mag < EXP_LIMIT:
            return sign, 0, mag
        layer, mag = 1, math.log10(mag)
    while abs(mag) >= EXP_LIMIT:
        layer += 1
        mag = math.copysign(math.log10(abs(mag)), mag)
    while abs(mag) < LAYER_DOWN:
        layer -= 1
        if layer == 0:
            return sign, 0, 10.0 ** mag
        mag = math.copysign(10.0 ** abs(mag), mag) if mag else 1.0
    return sign, layer, mag


def _int_components(value: int) -> tuple[int, int, float]:
    if abs(value) < 2 ** 1000:
        return _normalize(1, 0, float(value))
    shift = abs(value).bit_length() - 64
    top = abs(value) >> shift
    exponent = math.log10(top) + shift * math.log10(2)
    return _normalize(1 if value > 0 else -1, 1, exponent)


def _float_text(value: float) -> str:
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def _coerce(other) -> Magnitude | None:
    if isinstance(other, Magnitude):
        return other
    if isinstance(other, (int, float, str)) and not isinstance(other, bool):
        return Magnitude(other)
    return None


def _parse(text: str) -> Magnitude:
    text = text.strip().replace("E", "e").replace(",", "")
    lowered = text.lower()
    if lowered in ("nan", "+nan", "-nan"):
        return NAN
    if lowered in ("inf", "+inf", "infinity", "+infinity"):
        return INF
    if lowered in ("-inf", "-infinity"):
        return NEG_INF
    if not text:
        raise ValueError("cannot parse an empty string as a Magnitude")

    tower = _TOWER_RE.match(text)
    if tower:
        return iteratedexp(10, _parse(tower.group(1)), _parse(tower.group(2)))
    for operator, operation in (("^^^", pentate), ("^^", iteratedexp)):
        if operator in text:
            left, _, right = text.partition(operator)
            return operation(_parse(left), _parse(right))
    if "^" in text:
        left, _, right = text.partition("^")
        return _parse(left) ** _parse(right)

    try:
        quick = float(text)
    except ValueError:
        quick = None
    if quick is not None and (math.isfinite(quick) and quick != 0 or "e" not in text):
        return Magnitude(quick)

    mantissa_text, separator, exponent_text = text.partition("e")
    if not separator or not exponent_text:
        raise ValueError(f"cannot parse {text!r} as a Magnitude")
    if mantissa_text in ("", "+", "-"):
        mantissa = Magnitude(-1 if mantissa_text == "-" else 1)
    else:
        mantissa = Magnitude(float(mantissa_text))
    return mantissa * pow10(_parse(exponent_text))


def _log10_float(x: Magnitude) -> float:
    # log10|x| as a float for nonzero finite x, clipped to +-inf on layer 2 and up
    if x._layer == 0:
        return math.log10(x._mag)
    if x._layer == 1:
        return x._mag
    return math.inf if x._mag > 0 else -math.inf


def _log10_abs(x: Magnitude) -> Magnitude:
    if x.is_inf():
        return INF
    if x._layer == 0:
        return Magnitude(math.log10(x._mag))
    if x._mag > 0:
        return Magnitude.from_components(1, x._layer - 1, x._mag)
    return Magnitude.from_components(-1, x._layer - 1, -x._mag)


def _add(a: Magnitude, b: Magnitude) -> Magnitude:
    if a.is_nan() or b.is_nan():
        return NAN
    if a.is_inf() or b.is_inf():
        if a.is_inf() and b.is_inf() and a._sign != b._sign:
            return NAN
        return a if a.is_inf() else b
    if a._sign == 0:
        return b
    if b._sign == 0:
        return a
    if a._layer == 0 and b._layer == 0:
        return Magnitude(a._sign * a._mag + b._sign * b._mag)

    big, small = (a, b) if abs(a) >= abs(b) else (b, a)
    log_big, log_small = _log10_float(big), _log10_float(small)
    if math.isinf(log_big) or math.isinf(log_small):
        if abs(big) == abs(small):
            return big * 2 if big._sign == small._sign else ZERO
        return big
    if log_big - log_small > 17:
        return big
    ratio = 10.0 ** (log_small - log_big)
    if big._sign == small._sign:
        total = log_big + math.log1p(ratio) / LN10
    else:
        if ratio >= 1:
            return ZERO
        total = log_big + math.log1p(-ratio) / LN10
    return Magnitude.from_components(big._sign, 1, total)


def _mul(a: Magnitude, b: Magnitude) -> Magnitude:
    if a.is_nan() or b.is_nan():
        return NAN
    if a._sign == 0 or b._sign == 0:
        return NAN if a.is_inf() or b.is_inf() else ZERO
    sign = a._sign * b._sign
    if a.is_inf() or b.is_inf():
        return INF if sign > 0 else NEG_INF
    if a._layer == 0 and b._layer == 0:
        return Magnitude(sign * a._mag * b._mag)
    product = pow10(_add(_log10_abs(a), _log10_abs(b)))
    return product if sign > 0 else -product


def _pow(base: Magnitude, exponent: Magnitude) -> Magnitude:
    if base.is_nan() or exponent.is_nan():
        return NAN
    if exponent._sign == 0 or base == ONE:
        return ONE
    if base._sign == 0:
        return ZERO if exponent._sign > 0 else INF
    if base._sign < 0:
        if not exponent.is_integer():
            return NAN
        result = _pow(abs(base), exponent)
        odd = exponent._layer == 0 and int(exponent.to_float()) % 2 == 1
        return -result if odd else result
    if base.is_inf():
        return INF if exponent._sign > 0 else ZERO
    if exponent.is_inf():
        if base > ONE:
            return INF if exponent._sign > 0 else ZERO
        return ZERO if exponent._sign > 0 else INF
    if base._layer == 0 and exponent._layer == 0:
        try:
            result = math.pow(base._mag, exponent.to_float())
        except OverflowError:
            result = math.inf
        if 0 < result < math.inf:
            return Magnitude(result)
    if base == TEN:
        return pow10(exponent)
    return pow10(_mul(_log10_abs(base), exponent))


def _negative_tower(base: Magnitude, height: float) -> Magnitude:
    # base^^h for h < 0 under the linear approximation
    if height > -1:
        return Magnitude(1 + height)
    if height > -2:
        return log(Magnitude(2 + height), base)
    if height == -2:
        return NEG_INF
    return NAN


def _ladder(x: Magnitude) -> float:
    # Order-preserving map from [0, inf] onto floats
    if x._sign == 0:
        return -LADDER_LIMIT
    if x.is_inf():
        return LADDER_LIMIT
    if x >= ONE:
        return min(slog(x).to_float(), LADDER_LIMIT)
    return max(-slog(x.recip()).to_float(), -LADDER_LIMIT)


def _unladder(key: float) -> Magnitude:
    if key >= 0:
        return iteratedexp(TEN, key)
    return iteratedexp(TEN, -key).recip()


def _bisect(low: Magnitude, high: Magnitude, too_high: Callable[[Magnitude], bool],
            iterations: int) -> tuple[Magnitude, Magnitude]:
    # Bisection over 0 <= low < high for the switching point of an increasing predicate
    key_low, key_high = _ladder(low), _ladder(high)
    for _ in range(iterations):
        same_layer = (low._sign > 0 and high.is_finite() and low._layer == high._layer)
        if same_layer:
            if low._layer == 0:
                mid = Magnitude((low._mag + high._mag) / 2)
            else:
                mid = Magnitude.from_components(1, low._layer, (low._mag + high._mag) / 2)
        else:
            key_mid = (key_low + key_high) / 2
            if key_mid <= key_low or key_mid >= key_high:
                break
            mid = _unladder(key_mid)
        if not low < mid < high:
            break
        if too_high(mid):
            high = mid
            key_high = key_mid if not same_layer else _ladder(mid)
        else:
            low = mid
            key_low = key_mid if not same_layer else _ladder(mid)
    return low, high


def _closest(func: Callable[[Magnitude], Magnitude], target: Magnitude,
             first: Magnitude, second: Magnitude) -> Magnitude:
    if not second.is_finite():
        return first
    if not first.is_finite():
        return second
    miss_first = abs(Magnitude(func(first)) - target)
    miss_second = abs(Magnitude(func(second)) - target)
    return second if miss_second < miss_first else first
