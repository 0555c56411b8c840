#
# towerfmt - Increasing Function Notation Tests
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from towerfmt.increasing import (
    IncreasingFunctionNotation, IncreasingFunctionProductNotation, IncreasingFunctionScientificNotation,
)
from towerfmt.magnitude import log10, pow10, tetrate
from towerfmt.stepper import Forward


# Local Methods --------------------------------------------------------------------------------------------------------

def times_ten():
    return Forward(lambda x: x * 10, inverse=lambda x: x / 10)


def powers_of_ten():
    return Forward(pow10, inverse=log10)


def scientific(m, e):
    return m * 10 ** e


# Single function ------------------------------------------------------------------------------------------------------

class TestIncreasingFunctionNotation:
    """f(f(...f(x)))."""

    def test_bisected_inverse(self):
        """Find f^-1 by bisection when only f is given."""
        notation = IncreasingFunctionNotation(func=lambda x: x * 10, maxnum=100)
        assert notation.format(5000) == "f(f(50))"

    def test_collapsed_count(self):
        """Collapse long runs of markers."""
        notation = IncreasingFunctionNotation(func=times_ten(), maxnum=10)
        assert notation.format(1e8) == "(f^8)1"

    def test_negative_iterations(self):
        """Apply f for a negative minimum count."""
        notation = IncreasingFunctionNotation(func=times_ten(), maxnum=1000, min_iterations=-2)
        assert notation.format(5) == "f^-1(f^-1(500))"

    def test_reciprocal(self):
        """Write small values as a reciprocal."""
        notation = IncreasingFunctionNotation(func=times_ten(), range_minimum=1)
        assert notation.format(0.05) == "1 / f(2)"

    def test_layers(self):
        """Remove tower layers before iterating."""
        notation = IncreasingFunctionNotation(func=powers_of_ten())
        assert notation.format(tetrate(10, 20)) == "(e^13)f(f(f(f(f(10,000,000,000)))))"

    def test_superexp_after(self):
        """Put the collapsed count after the argument."""
        notation = IncreasingFunctionNotation(func=times_ten(), maxnum=10, superexp_after=(True, False, False))
        assert notation.format(1e8) == "1(f^8)"

    @pytest.mark.parametrize(
        "kwargs, error, message",
        [
            pytest.param({"maxnum": 100, "range_maximum": 50}, ValueError, r"at least maxnum", id="narrow"),
            pytest.param({"maxnum": None, "range_maximum": 50}, ValueError, r"must be infinite", id="no-maxnum"),
            pytest.param({"maxnum": 3, "range_minimum": 5, "range_maximum": 5}, ValueError,
                         r"greater than range_minimum", id="empty-range"),
            pytest.param({"min_iterations": 1.5}, ValueError, r"whole number", id="min-iterations"),
            pytest.param({"iteration_engineerings": 0.5}, ValueError, r"whole numbers", id="engineerings"),
            pytest.param({"max_layers_in_a_row": "3"}, TypeError, r"max_layers_in_a_row must be int", id="row"),
        ],
    )
    def test_validation(self, kwargs, error, message):
        """Reject bad configuration at construction."""
        with pytest.raises(error, match=message):
            IncreasingFunctionNotation(func=times_ten(), **kwargs)

    def test_func_required_callable(self):
        """Refuse a func that is not callable."""
        with pytest.raises(TypeError, match=r"func must be callable"):
            IncreasingFunctionNotation(func=5)


# Product of terms -----------------------------------------------------------------------------------------------------

class TestIncreasingFunctionProductNotation:
    """f(a)^p * f(b) * c."""

    def test_bisected_terms(self):
        """Find term numbers by bisection when only term_func is given."""
        assert IncreasingFunctionProductNotation(term_func=pow10).format(5000) == "f(3) * 5"

    @pytest.mark.parametrize(
        "kwargs, expected",
        [
            pytest.param({}, "f(3) * 5", id="default"),
            pytest.param({"reverse_terms": True, "edge_chars": ("[", "]")}, "[5 * f(3)]", id="reversed"),
            pytest.param({"show_constant_term": lambda v: False}, "f(3)", id="no-constant"),
            pytest.param({"max_terms": 1}, "f(3)", id="one-term"),
            pytest.param({"max_powers_in_a_row": 0}, "f(3)^1 * 5", id="power-form"),
            pytest.param({"between_char": " x "}, "f(3) x 5", id="separator"),
        ],
    )
    def test_format(self, kwargs, expected):
        """Arrange terms and the constant."""
        notation = IncreasingFunctionProductNotation(term_func=powers_of_ten(), **kwargs)
        assert notation.format(5000) == expected

    def test_max_terms(self):
        """Require at least one term."""
        with pytest.raises(ValueError, match=r"max_terms must be positive"):
            IncreasingFunctionProductNotation(term_func=powers_of_ten(), max_terms=0)

    def test_power_chars(self):
        """Require three power markers."""
        with pytest.raises(TypeError, match=r"power_chars must hold 3 strings"):
            IncreasingFunctionProductNotation(term_func=powers_of_ten(), power_chars=("^", ""))


# N-ary scientific -----------------------------------------------------------------------------------------------------

class TestIncreasingFunctionScientificNotation:
    """Arguments of an n-ary function."""

    def test_scientific_law(self):
        """m * 10^e with a minimum mantissa of 1."""
        notation = IncreasingFunctionScientificNotation(func=scientific, limits=[1])
        assert notation.format(1500) == "1.5, 3"

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param("1e1e20", "1, 1e20", id="twenty"),
            pytest.param("1e1e50", "1, 1e50", id="fifty"),
        ],
    )
    def test_exponent_past_precision(self, value, expected):
        """Keep the mantissa at its limit when only the exponent is known."""
        notation = IncreasingFunctionScientificNotation(func=scientific, limits=[1])
        assert notation.format(value) == expected

    def test_argument_order(self):
        """Write the exponent first."""
        notation = IncreasingFunctionScientificNotation(func=scientific, limits=[1], argument_order=[1, 0])
        assert notation.format(1500) == "3, 1.5"

    def test_argument_shown(self):
        """Skip arguments the predicate rejects."""
        notation = IncreasingFunctionScientificNotation(
            func=scientific, limits=[1], argument_shown=lambda value, index, arguments: index == 1,
        )
        assert notation.format(1500) == "3"

    def test_explicit_argument_count(self):
        """Take the count as given for functions with *args."""
        notation = IncreasingFunctionScientificNotation(
            func=lambda *args: args[0] * 10 ** args[1], argument_count=2, limits=[1],
        )
        assert notation.format(1500) == "1.5, 3"

    def test_unreadable_signature(self):
        """Raise TypeError when the count cannot be read."""
        with pytest.raises(TypeError, match=r"no positional"):
            IncreasingFunctionScientificNotation(func=lambda *args: args[0], limits=[1])

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            pytest.param({"func": lambda m: m, "limits": [1]}, r"at least 2 arguments", id="unary"),
            pytest.param({"func": scientific, "limits": []}, r"limits must not be empty", id="no-limits"),
            pytest.param({"func": scientific, "limits": [1], "range_limits": [(2, 1)]}, r"min < max",
                         id="range"),
        ],
    )
    def test_validation(self, kwargs, message):
        """Reject bad configuration at construction."""
        with pytest.raises(ValueError, match=message):
            IncreasingFunctionScientificNotation(**kwargs)
