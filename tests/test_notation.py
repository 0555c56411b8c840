#
# towerfmt - Notation Base Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import dataclasses

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from towerfmt.default import DefaultNotation
from towerfmt.magnitude import INF, NAN, NEG_INF, Magnitude
from towerfmt.notation import (
    Notation, NotationConf, NotationDepthError, NotationSymbols, as_notation, as_positive, as_whole,
    default_notation,
)
from towerfmt.sentinels import UNSET


# Local Classes --------------------------------------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True, kw_only=True)
class Echo(Notation):
    """Notation that formats its own value again, forever."""

    def format_magnitude(self, value: Magnitude) -> str:
        return self.format(value)


@dataclasses.dataclass(frozen=True, kw_only=True)
class Signed(Notation):
    """Notation that writes negative values itself."""

    def format_magnitude(self, value: Magnitude) -> str:
        return f"<{value}>"

    def formats_negative(self, value: Magnitude) -> bool:
        return True


# Front door -----------------------------------------------------------------------------------------------------------

class TestFormatFrontDoor:
    """Special values and signs handled before format_magnitude."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(NAN, NotationConf.NAN, id="nan"),
            pytest.param(INF, NotationConf.INFINITY, id="inf"),
            pytest.param(NEG_INF, "-" + NotationConf.INFINITY, id="neg-inf"),
            pytest.param(-1500, "-1,500", id="negative"),
        ],
    )
    def test_special_values(self, value, expected, default):
        """Answer NaN, infinities and signs with configured text."""
        assert default.format(value) == expected

    def test_unicode_symbols(self):
        """Use the negative infinity text when it is set."""
        notation = DefaultNotation(symbols=NotationSymbols.unicode())
        assert notation.format(NEG_INF) == "−∞"
        assert notation.format(NAN) == "NaN"

    def test_negative_wrapper(self):
        """Wrap negative values in the negative pair."""
        notation = DefaultNotation(negative=("(", ")"))
        assert notation.format(-5) == "(5)"

    def test_is_infinite(self):
        """Treat values the predicate accepts as infinite and their reciprocals as zero."""
        notation = DefaultNotation(is_infinite=lambda v: v > 1e100)
        assert notation.format(1e200) == NotationConf.INFINITY
        assert notation.format(1e-200) == "0"

    def test_formats_negative(self):
        """Hand negative values over when formats_negative accepts them."""
        assert Signed().format(-3) == "<-3>"

    def test_rejects_non_numbers(self, default):
        """Raise TypeError for values that are not number-like."""
        with pytest.raises(TypeError):
            default.format([1, 2])

    def test_str(self, default):
        """Show the display name."""
        assert str(default) == "Default Notation"


class TestDepthGuard:
    """Runaway nesting."""

    def test_depth_error(self):
        """Raise NotationDepthError instead of overflowing the stack."""
        with pytest.raises(NotationDepthError, match=r"deeper than"):
            Echo().format(5)

    def test_depth_error_is_recursion_error(self):
        """Stay catchable as RecursionError."""
        assert issubclass(NotationDepthError, RecursionError)

    def test_depth_resets(self, default):
        """Leave the counter at zero after the error."""
        with pytest.raises(NotationDepthError):
            Echo().format(5)
        assert default.format(5) == "5"


# Configuration --------------------------------------------------------------------------------------------------------

class TestMerge:
    """merge() and immutability."""

    def test_merge_replaces_fields(self, default):
        """Build a new notation with fields replaced."""
        merged = default.merge(places_above_1=2)
        assert merged.format(12.3456) == "12.35"
        assert default.format(12.3456) == "12.35"
        assert merged is not default

    def test_merge_ignores_unset(self, default):
        """Skip UNSET overrides."""
        assert default.merge(places_above_1=UNSET) == default

    def test_merge_unknown_field(self, default):
        """Raise TypeError for unknown names."""
        with pytest.raises(TypeError):
            default.merge(no_such_field=1)

    def test_frozen(self, default):
        """Refuse attribute assignment."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            default.name = "other"

    def test_symbols_merge(self):
        """Replace only the given symbols."""
        symbols = NotationSymbols().merge(infinity="inf")
        assert symbols.infinity == "inf"
        assert symbols.nan == NotationConf.NAN

    def test_symbols_validate(self):
        """Refuse non-string symbols."""
        with pytest.raises(TypeError, match=r"nan must be str"):
            NotationSymbols(nan=0)


class TestRoleHelpers:
    """Validation helpers for role fields."""

    def test_role_none_is_self(self, default):
        """Resolve None to the notation itself."""
        assert default.role(None) is default
        other = DefaultNotation()
        assert default.role(other) is other

    def test_as_notation(self, default):
        """Accept notations and, where allowed, None."""
        assert as_notation(default, "inner") is default
        assert as_notation(None, "inner") is None
        with pytest.raises(TypeError, match=r"inner must be a Notation"):
            as_notation(None, "inner", allow_self=False)
        with pytest.raises(TypeError, match=r"inner must be a Notation"):
            as_notation("default", "inner")

    def test_as_positive(self):
        """Require values above zero."""
        assert as_positive(3, "maxnum") == 3
        with pytest.raises(ValueError, match=r"maxnum must be positive"):
            as_positive(0, "maxnum")

    def test_as_whole(self):
        """Require whole numbers."""
        assert as_whole(4, "count") == 4
        with pytest.raises(ValueError, match=r"count must be a whole number"):
            as_whole(1.5, "count")

    def test_default_notation(self):
        """Return a fresh DefaultNotation."""
        assert isinstance(default_notation(), DefaultNotation)
        assert default_notation() is not default_notation()
