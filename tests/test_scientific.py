#
# towerfmt - Scientific Notation Family Tests
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from towerfmt.default import DefaultNotation
from towerfmt.magnitude import Magnitude
from towerfmt.scientific import (
    FactorialScientificNotation, HyperscientificNotation, PentaScientificNotation, ScientificNotation,
    WeakHyperscientificNotation,
)


# Scientific -----------------------------------------------------------------------------------------------------------

class TestScientificNotation:
    """mantissa e exponent."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(0, "0", id="zero"),
            pytest.param(1500, "1.5e3", id="basic"),
            pytest.param(0.0015, "1.5e-3", id="negative-exponent"),
            pytest.param(-1500, "-1.5e3", id="negative-value"),
            pytest.param(Magnitude(10) ** 400, "1e400", id="beyond-float"),
        ],
    )
    def test_format(self, value, expected):
        """Split once below base^maxnum."""
        assert ScientificNotation().format(value) == expected

    @pytest.mark.parametrize(
        "value",
        [
            pytest.param(1500, id="thousands"),
            pytest.param(0.0015, id="negative-exponent"),
            pytest.param(123456, id="rounded"),
            pytest.param(6.02e23, id="avogadro"),
            pytest.param(Magnitude(10) ** 400, id="beyond-float"),
            pytest.param(Magnitude("ee15"), id="repeated-split"),
        ],
    )
    def test_reformat_is_stable(self, value):
        """Reading the text back and formatting it again gives the same text."""
        notation = ScientificNotation()
        text = notation.format(value)
        assert notation.format(Magnitude(text)) == text

    def test_engineering(self):
        """Keep exponents on multiples of 3."""
        assert ScientificNotation(engineerings=3).format(123456) == "123.5e3"

    def test_repeated_split(self):
        """Split the exponent again past base^maxnum."""
        assert ScientificNotation().format(Magnitude("ee15")) == "e1e15"

    def test_collapsed_count(self):
        """Collapse the markers past max_in_a_row."""
        assert ScientificNotation(max_in_a_row=0).format(Magnitude("ee15")) == "(e^1)1e15"

    def test_iteration_zero(self):
        """Skip the exponent for ordinary values."""
        assert ScientificNotation(iteration_zero=True).format(1500) == "1,500"

    def test_exp_before(self):
        """Write the exponent first."""
        assert ScientificNotation(exp_before=True).format(1500) == "e31.5"

    def test_negative_exponent_chars(self):
        """Use the negative markers with a positive exponent."""
        notation = ScientificNotation(neg_exp_chars=(("e-", ""), ("1 / ", "")))
        assert notation.format(0.0015) == "1.5e-3"

    def test_reciprocal_chars(self):
        """Write the reciprocal when the first negative entry is True."""
        notation = ScientificNotation(neg_exp_chars=(True, ("1 / ", "")))
        assert notation.format(0.0015) == "1 / 6.667e2"

    def test_mantissa_notation(self):
        """Write the mantissa with the configured notation."""
        notation = ScientificNotation(mantissa_notation=DefaultNotation(places_above_1=0))
        assert notation.format(1500) == "2e3"

    @pytest.mark.parametrize(
        "kwargs, error, message",
        [
            pytest.param({"base": 1.2}, ValueError, r"diverges", id="base"),
            pytest.param({"maxnum": 0}, ValueError, r"maxnum must be positive", id="maxnum"),
            pytest.param({"max_in_a_row": 1.5}, TypeError, r"max_in_a_row must be int", id="row"),
            pytest.param({"exp_chars": "e"}, TypeError, r"3 pairs", id="chars"),
            pytest.param({"mantissa_notation": None}, TypeError, r"mantissa_notation", id="mantissa"),
        ],
    )
    def test_validation(self, kwargs, error, message):
        """Reject bad configuration at construction."""
        with pytest.raises(error, match=message):
            ScientificNotation(**kwargs)


# Towers ---------------------------------------------------------------------------------------------------------------

class TestHyperscientificNotation:
    """mantissa F height."""

    def test_tower(self):
        """10^10^10^4 splits into 4 and 2."""
        assert HyperscientificNotation().format(10 ** 10 ** 4) == "4F2"

    def test_small_value(self):
        """Values below the base sit at height zero."""
        assert HyperscientificNotation().format(5) == "5F0"

    def test_mantissa_power(self):
        """Refuse windows below -2."""
        with pytest.raises(ValueError, match=r"at least -2"):
            HyperscientificNotation(mantissa_power=-3)


class TestWeakHyperscientificNotation:
    """(base↓↓height)^mantissa."""

    def test_format(self):
        """1e100 is (10↓↓3)^1."""
        assert WeakHyperscientificNotation().format(1e100) == "1f3"

    def test_one(self):
        """Write 1 with the mantissa notation."""
        assert WeakHyperscientificNotation().format(1) == "1"

    def test_reciprocal(self):
        """Write values below 1 as a reciprocal."""
        notation = WeakHyperscientificNotation()
        assert notation.format(1e-100) == "1 / " + notation.format(1e100)

    def test_base(self):
        """Refuse bases at or below 1."""
        with pytest.raises(ValueError, match=r"greater than 1"):
            WeakHyperscientificNotation(base=1)


class TestPentaScientificNotation:
    """mantissa G height over tetration."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(9, "9G0", id="below-base"),
            pytest.param(Magnitude("ee10"), "3G1", id="tower-of-three"),
        ],
    )
    def test_format(self, value, expected):
        """Split into a tetration height and a pentation count."""
        assert PentaScientificNotation().format(value) == expected


class TestFactorialScientificNotation:
    """mantissa * exponent!."""

    def test_format(self):
        """120 is 1 * 5!."""
        assert FactorialScientificNotation().format(120) == "1 * 5!"

    def test_maxnum(self):
        """Refuse maxnum at or below 2."""
        with pytest.raises(ValueError, match=r"greater than 2"):
            FactorialScientificNotation(maxnum=2)
