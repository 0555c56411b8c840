"""
Coerce number-like values from Python stdlib and third-party libraries into Magnitudes.

Every notation runs its input through :func:`to_magnitude`, so ``format`` accepts ints of any
size, floats, Decimal, Fraction, numpy/pandas scalars, mpmath numbers and notation strings such
as ``"1e1e5"`` or ``"10^^3"`` without the caller converting anything first.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
import operator
from decimal import Decimal
from fractions import Fraction
from typing import Literal

# Third-party ----------------------------------------------------------------------------------------------------------
import mpmath

# Local ----------------------------------------------------------------------------------------------------------------
from .magnitude import Magnitude, NAN
from .tools import fmt_type

__all__ = ['to_magnitude']


def to_magnitude(
        value,
        *,
        on_error: Literal["raise", "nan"] = "raise",
        allow_bool: bool = False
) -> Magnitude:
    """
    Convert a number-like value to a Magnitude.

    Parameters
    ----------
    value : various
        Magnitude, int, float, str, Decimal, Fraction, mpmath number, or any third-party type
        exposing __index__, .item(), .value (with .unit), __int__ or __float__.

    on_error : {"raise", "nan"}, default "raise"
        How to handle values that cannot be read as a number (unsupported types, unparsable
        strings):

        - "raise": Raise TypeError (ValueError for unparsable strings)
        - "nan": Return a NaN Magnitude, which notations display as their NaN symbol

        Numeric edge cases (inf, nan, huge or tiny values) are always preserved.

    allow_bool : bool, default False
        If True, convert bool to 0 or 1. Booleans are rejected otherwise, since bool is a
        subclass of int and is almost always passed by mistake.

    Returns
    -------
    Magnitude

    Raises
    ------
    TypeError
        Unsupported type, or bool without allow_bool, when on_error="raise".
    ValueError
        String that does not parse as a number, when on_error="raise".

    Examples
    --------
    >>> to_magnitude(10 ** 400).layer
    1
    >>> to_magnitude(Decimal("1e-500")) < 1e-300
    True
    >>> to_magnitude("ee400").layer
    2
    >>> to_magnitude([1, 2], on_error="nan").is_nan()
    True
    """
    if isinstance(value, Magnitude):
        return value

    if isinstance(value, bool):
        if allow_bool:
            return Magnitude(int(value))
        return _fail(on_error, TypeError(
            f"boolean values not supported, got {value}. "
            f"Set allow_bool=True to convert booleans to 0 or 1"
        ))

    # Fast path; Python int has arbitrary precision and Magnitude keeps it
    if isinstance(value, (int, float)):
        return Magnitude(value)

    if isinstance(value, str):
        try:
            return Magnitude(value)
        except ValueError as e:
            return _fail(on_error, e)

    if isinstance(value, Decimal):
        return _from_decimal(value)

    if isinstance(value, Fraction):
        if value.denominator == 1:
            return Magnitude(value.numerator)
        return Magnitude(value.numerator) / Magnitude(value.denominator)

    if isinstance(value, (mpmath.mpf, mpmath.mpc)):
        return _from_mpmath(value, on_error)

    # pandas.NA has __float__ but raises TypeError, so handle it before duck typing
    cls = value.__class__
    cls_name = getattr(cls, "__name__", "")
    cls_module = getattr(cls, "__module__", "")
    if cls_name == "NAType" and "pandas" in cls_module:
        return NAN
    if cls_name == "MaskedConstant" and cls_module.startswith("numpy.ma"):
        return NAN

    # NumPy integer types implement __index__
    if hasattr(value, '__index__'):
        try:
            return Magnitude(operator.index(value))
        except (TypeError, ValueError) as e:
            return _fail(on_error, TypeError(f"cannot convert {fmt_type(value)} to int via __index__: {e}"))

    # Array and tensor scalars
    if hasattr(value, 'item') and callable(value.item):
        try:
            result = value.item()
        except (TypeError, ValueError, AttributeError):
            result = None
        if isinstance(result, (int, float)):
            return to_magnitude(result, on_error=on_error, allow_bool=allow_bool)

    # Quantities with units carry their number in .value
    if hasattr(value, 'value') and hasattr(value, 'unit'):
        try:
            return to_magnitude(value.value, on_error=on_error, allow_bool=allow_bool)
        except AttributeError:
            pass

    if hasattr(value, '__int__') and not hasattr(value, '__float__'):
        try:
            return Magnitude(int(value))
        except (TypeError, ValueError, OverflowError) as e:
            return _fail(on_error, TypeError(f"cannot convert {fmt_type(value)} to int via __int__: {e}"))

    if hasattr(value, '__float__'):
        try:
            return Magnitude(float(value))
        except (TypeError, ValueError) as e:
            return _fail(on_error, TypeError(f"cannot convert {fmt_type(value)} to float: {e}"))

    return _fail(on_error, TypeError(
        f"unsupported numeric type: {fmt_type(value)}. "
        f"Expected Magnitude, int, float, str, Decimal, Fraction, mpmath numbers, or types "
        f"implementing __index__, __int__, __float__, .item(), or having a .value attribute"
    ))


def _fail(on_error: str, error: Exception) -> Magnitude:
    if on_error == "nan":
        return NAN
    raise error


def _from_decimal(value: Decimal) -> Magnitude:
    if value.is_nan():
        return NAN
    if value.is_infinite() or value.is_zero():
        return Magnitude(float(value))
    as_float = float(value)
    if as_float != 0 and math.isfinite(as_float):
        return Magnitude(as_float)
    # Beyond the float range; Decimal keeps the exponent exactly
    sign = -1 if value.is_signed() else 1
    return Magnitude.from_components(sign, 1, float(abs(value).log10()))


def _from_mpmath(value, on_error: str) -> Magnitude:
    if isinstance(value, mpmath.mpc):
        if value.imag != 0:
            return _fail(on_error, TypeError(f"complex values not supported, got {value}"))
        value = value.real
    if mpmath.isnan(value):
        return NAN
    as_float = float(value)
    if as_float != 0 and math.isfinite(as_float) or value == 0 or mpmath.isinf(value):
        return Magnitude(as_float)
    sign = -1 if value < 0 else 1
    return Magnitude.from_components(sign, 1, float(mpmath.log10(abs(value))))
