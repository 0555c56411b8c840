#
# towerfmt - Magnitude Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import math

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from towerfmt.magnitude import (
    INF, NAN, NEG_INF, ONE, ZERO, Magnitude, factorial, gamma, increasing_inverse, infinite_tetration,
    iteratedexp, iteratedlog, log10, penta_log, pentate, pow10, slog, tetrate,
)


# Construction ---------------------------------------------------------------------------------------------------------

class TestMagnitudeConstruction:
    """Building Magnitudes from Python values and strings."""

    @pytest.mark.parametrize(
        "value, layer",
        [
            pytest.param(1500, 0, id="int"),
            pytest.param(2.5, 0, id="float"),
            pytest.param(10 ** 400, 1, id="huge-int"),
            pytest.param("1e400", 1, id="exponent-string"),
            pytest.param("ee400", 2, id="double-e-string"),
        ],
    )
    def test_layer(self, value, layer):
        """Pick the layer from the size of the value."""
        assert Magnitude(value).layer == layer

    def test_bool_rejected(self):
        """Refuse bools, which are ints by accident."""
        with pytest.raises(TypeError, match=r"(?i)bool"):
            Magnitude(True)

    def test_unsupported_type(self):
        """Refuse containers."""
        with pytest.raises(TypeError, match=r"(?i)magnitude expects"):
            Magnitude([1, 2])

    def test_unparsable_string(self):
        """Raise ValueError for text that is not a number."""
        with pytest.raises(ValueError, match=r"(?i)cannot parse"):
            Magnitude("e")

    @pytest.mark.parametrize(
        "text, expected",
        [
            pytest.param("nan", NAN, id="nan"),
            pytest.param("inf", INF, id="inf"),
            pytest.param("-Infinity", NEG_INF, id="neg-inf"),
        ],
    )
    def test_special_strings(self, text, expected):
        """Read NaN and infinities from text."""
        value = Magnitude(text)
        if expected.is_nan():
            assert value.is_nan()
        else:
            assert value == expected

    def test_tower_string(self):
        """Read the collapsed tower form."""
        assert Magnitude("(e^2)10") == Magnitude("ee10")


# Text -----------------------------------------------------------------------------------------------------------------

class TestMagnitudeText:
    """str() of Magnitudes on every layer."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(Magnitude(1500), "1500", id="whole"),
            pytest.param(Magnitude(1.5), "1.5", id="fraction"),
            pytest.param(Magnitude(10) ** 400, "1e400", id="layer-1"),
            pytest.param(Magnitude("ee400"), "ee400", id="layer-2"),
            pytest.param(-Magnitude("ee400"), "-ee400", id="negative-layer-2"),
            pytest.param(NAN, "NaN", id="nan"),
            pytest.param(INF, "Infinity", id="inf"),
            pytest.param(NEG_INF, "-Infinity", id="neg-inf"),
        ],
    )
    def test_str(self, value, expected):
        """Write each layer in its own form."""
        assert str(value) == expected

    def test_repr_round_trips(self):
        """Quote str() inside repr()."""
        assert repr(Magnitude(3000)) == "Magnitude('3000')"


# Ordering and arithmetic ----------------------------------------------------------------------------------------------

class TestMagnitudeOrdering:
    """Comparisons across layers and signs."""

    def test_across_layers(self):
        """Order values by layer before mantissa."""
        assert Magnitude("ee400") > Magnitude(10) ** 400 > Magnitude(9e300)

    def test_signs(self):
        """Put negatives below zero below positives."""
        assert Magnitude(-5) < ZERO < Magnitude(3)
        assert -Magnitude("ee400") < Magnitude(-1e300)

    def test_nan_unordered(self):
        """Answer False to every comparison with NaN."""
        assert not NAN == NAN
        assert not NAN < ONE
        assert not NAN >= ONE

    def test_compares_with_numbers(self):
        """Accept plain ints and floats on the other side."""
        assert Magnitude(2) == 2
        assert Magnitude(2.5) < 3


class TestMagnitudeArithmetic:
    """Arithmetic and rounding."""

    def test_small_values_exact(self):
        """Use ordinary float arithmetic on layer 0."""
        assert Magnitude(1500) * 2 == 3000
        assert Magnitude(2) + 3 == 5
        assert 10 - Magnitude(4) == 6

    def test_large_product(self):
        """Multiply past the float range through logarithms."""
        big = Magnitude(10) ** 400
        assert big * big == Magnitude("1e800")

    def test_reciprocal(self):
        """Map huge values to tiny positive ones."""
        tiny = (Magnitude(10) ** 400).recip()
        assert ZERO < tiny < Magnitude(1e-300)
        assert ZERO.recip() == INF

    @pytest.mark.parametrize(
        "value, floor, rounded",
        [
            pytest.param(2.5, 2, 3, id="half-up"),
            pytest.param(-2.5, -3, -2, id="negative-half"),
            pytest.param(7, 7, 7, id="whole"),
        ],
    )
    def test_floor_and_round(self, value, floor, rounded):
        """Round half up and floor toward -inf."""
        assert Magnitude(value).floor() == floor
        assert Magnitude(value).round() == rounded

    def test_is_integer(self):
        """Treat every value on layer 1 and up as whole."""
        assert Magnitude(3).is_integer()
        assert not Magnitude(3.5).is_integer()
        assert (Magnitude(10) ** 400).is_integer()
        assert not INF.is_integer()

    def test_to_float_overflow(self):
        """Return inf for values past the float range."""
        assert (Magnitude(10) ** 400).to_float() == math.inf
        assert Magnitude(2.5).to_float() == 2.5


# Hyper-operators ------------------------------------------------------------------------------------------------------

class TestHyperOperators:
    """Logarithms, towers and their inverses."""

    def test_pow10_and_log10(self, assert_close):
        """Invert each other on ordinary values."""
        assert pow10(3) == 1000
        assert_close(log10(1000), 3)
        assert log10(ZERO) == NEG_INF
        assert log10(-1).is_nan()

    def test_tetrate(self):
        """Stack 10s into a tower."""
        assert tetrate(10, 3) == Magnitude("ee10")
        assert tetrate(10, 0) == ONE

    def test_slog(self):
        """Count the logarithms back down to 1."""
        assert slog(10) == 1
        assert slog(tetrate(10, 3)) == 3

    def test_slog_linear_below_one(self, assert_close):
        """Follow the linear approximation on (0, 1]."""
        assert_close(slog(0.5), -0.5)

    def test_iteratedlog(self):
        """Undo iteratedexp."""
        assert iteratedlog(Magnitude("ee10"), 10, 2) == 10
        assert iteratedexp(10, 2, 2) == Magnitude("1e100")

    def test_pentate(self):
        """Tetrate repeatedly."""
        assert pentate(10, 2) == tetrate(10, 10)
        assert penta_log(10) == 1

    def test_infinite_tetration(self, assert_close):
        """Converge for small bases and diverge past e^(1/e)."""
        assert_close(infinite_tetration(math.sqrt(2)), 2)
        assert infinite_tetration(10) == INF

    def test_gamma_and_factorial(self, assert_close):
        """Match math.gamma in range and keep going past it."""
        assert_close(gamma(5), 24)
        assert_close(factorial(5), 120)
        assert log10(gamma(1000)).to_float() == pytest.approx(2564.6046, rel=1e-6)

    @pytest.mark.parametrize(
        "height",
        [
            pytest.param(-0.5, id="below-zero"),
            pytest.param(0.5, id="fraction"),
            pytest.param(1, id="one"),
            pytest.param(2.5, id="two-and-a-half"),
            pytest.param(5.25, id="past-float"),
            pytest.param(20, id="tall"),
        ],
    )
    def test_slog_inverts_tetrate(self, height, assert_close):
        """slog(10^^h) gives h back at every height."""
        assert_close(slog(tetrate(10, height)), height)

    @pytest.mark.parametrize(
        "value",
        [
            pytest.param(3, id="small"),
            pytest.param(1e100, id="googol"),
            pytest.param("1e400", id="past-float"),
        ],
    )
    def test_iteratedlog_inverts_iteratedexp(self, value, assert_close):
        """Two logarithms undo two exponentials."""
        assert_close(iteratedlog(iteratedexp(10, 2, value), 10, 2), value)


class TestIncreasingInverse:
    """Bisection inverse of increasing functions."""

    def test_cube_root(self, assert_close):
        """Find the preimage of a simple power."""
        cube_root = increasing_inverse(lambda x: x * x * x, 0, INF)
        assert_close(cube_root(27), 3)

    def test_outside_range(self):
        """Return NaN for targets the range cannot reach."""
        inverse = increasing_inverse(lambda x: x * 2, 0, 10)
        assert inverse(2000).is_nan()
        assert inverse(-1).is_nan()

    def test_infinite_target(self):
        """Map an infinite target to an infinite maximum."""
        inverse = increasing_inverse(lambda x: x * 2, 0, INF)
        assert inverse(INF) == INF

    def test_negative_preimage(self, assert_close):
        """Search below zero when the range allows it."""
        inverse = increasing_inverse(lambda x: x * 3)
        assert_close(inverse(-12), -4)

    def test_empty_range(self):
        """Reject a range with maximum <= minimum."""
        with pytest.raises(ValueError, match=r"minimum < maximum"):
            increasing_inverse(lambda x: x, 5, 5)
