"""
Test suite for to_magnitude(): stdlib, mpmath and duck-typed third-party numbers.

Tests cover: basic types, Decimal/Fraction, values beyond the float range, mpmath numbers,
duck typing, boolean handling and error modes.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from decimal import Decimal
from fractions import Fraction

# Third-party ----------------------------------------------------------------------------------------------------------
import mpmath
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from towerfmt.magnitude import INF, Magnitude
from towerfmt.numeric import to_magnitude


# Local Classes --------------------------------------------------------------------------------------------------------

class IndexOnly:
    """Integer-like object exposing only __index__."""

    def __index__(self):
        return 7


class ItemScalar:
    """Array scalar lookalike with .item()."""

    def item(self):
        return 2.5


class Quantity:
    """Unit-carrying quantity lookalike."""
    value = 12
    unit = "m"


class FloatOnly:
    """Object exposing only __float__."""

    def __float__(self):
        return 0.25


# Tests ----------------------------------------------------------------------------------------------------------------

class TestToMagnitudeBasicTypes:
    """Python numbers and Magnitudes."""

    def test_magnitude_passthrough(self):
        """Return a Magnitude unchanged."""
        value = Magnitude(5)
        assert to_magnitude(value) is value

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(42, Magnitude(42), id="int"),
            pytest.param(3.25, Magnitude(3.25), id="float"),
            pytest.param("1.5e3", Magnitude(1500), id="string"),
            pytest.param(10 ** 400, Magnitude(10) ** 400, id="huge-int"),
        ],
    )
    def test_convert(self, value, expected):
        """Convert plain numbers and number strings."""
        assert to_magnitude(value) == expected


class TestToMagnitudeStdlib:
    """Decimal and Fraction."""

    def test_decimal_in_range(self):
        """Go through float for ordinary Decimals."""
        assert to_magnitude(Decimal("3.5")) == Magnitude(3.5)

    def test_decimal_beyond_float(self):
        """Keep the exponent of Decimals too large or small for a float."""
        assert to_magnitude(Decimal("1e500")).layer == 1
        assert to_magnitude(Decimal("1e-500")) < Magnitude(1e-300)
        assert to_magnitude(Decimal("1e-500")) > 0

    def test_decimal_nan(self):
        """Map a Decimal NaN to NaN."""
        assert to_magnitude(Decimal("NaN")).is_nan()

    def test_fraction(self):
        """Divide numerator by denominator."""
        assert to_magnitude(Fraction(3, 4)) == Magnitude(0.75)
        assert to_magnitude(Fraction(6, 1)) == Magnitude(6)


class TestToMagnitudeMpmath:
    """mpmath numbers."""

    def test_mpf(self):
        """Convert real mpf values."""
        assert to_magnitude(mpmath.mpf(2.5)) == Magnitude(2.5)

    def test_mpf_beyond_float(self):
        """Keep huge mpf values through their logarithm."""
        huge = mpmath.mpf(10) ** 1000
        assert to_magnitude(huge).layer == 1

    def test_mpf_infinity(self):
        """Keep infinities."""
        assert to_magnitude(mpmath.inf) == INF

    def test_complex_rejected(self):
        """Refuse mpc values with an imaginary part."""
        with pytest.raises(TypeError, match=r"complex"):
            to_magnitude(mpmath.mpc(1, 2))

    def test_real_mpc_accepted(self):
        """Accept mpc values on the real axis."""
        assert to_magnitude(mpmath.mpc(3, 0)) == Magnitude(3)


class TestToMagnitudeDuckTyping:
    """Third-party scalars recognized by their protocols."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(IndexOnly(), Magnitude(7), id="index"),
            pytest.param(ItemScalar(), Magnitude(2.5), id="item"),
            pytest.param(Quantity(), Magnitude(12), id="quantity"),
            pytest.param(FloatOnly(), Magnitude(0.25), id="float"),
        ],
    )
    def test_protocols(self, value, expected):
        """Read numbers through __index__, .item(), .value and __float__."""
        assert to_magnitude(value) == expected


class TestToMagnitudeErrors:
    """Booleans, unsupported types and on_error."""

    def test_bool_rejected(self):
        """Refuse bools unless allow_bool is set."""
        with pytest.raises(TypeError, match=r"allow_bool"):
            to_magnitude(True)

    def test_bool_allowed(self):
        """Convert bools to 0 or 1 when asked."""
        assert to_magnitude(True, allow_bool=True) == Magnitude(1)
        assert to_magnitude(False, allow_bool=True) == Magnitude(0)

    def test_unsupported_type(self):
        """Raise TypeError for containers."""
        with pytest.raises(TypeError, match=r"unsupported numeric type"):
            to_magnitude([1, 2])

    def test_bad_string(self):
        """Raise ValueError for unparsable text."""
        with pytest.raises(ValueError):
            to_magnitude("twelve")

    @pytest.mark.parametrize(
        "value",
        [
            pytest.param([1, 2], id="list"),
            pytest.param("twelve", id="bad-string"),
            pytest.param(True, id="bool"),
        ],
    )
    def test_on_error_nan(self, value):
        """Return NaN instead of raising with on_error='nan'."""
        assert to_magnitude(value, on_error="nan").is_nan()
