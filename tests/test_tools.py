#
# towerfmt - Tools and Sentinels Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import pickle

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from towerfmt.sentinels import UNSET, UnsetType
from towerfmt.tools import as_callable, as_char_pair, as_char_pairs, fmt_type, fmt_value, wrap_repeated


# Message formatting ---------------------------------------------------------------------------------------------------

class TestFmtType:
    """Type names for error messages."""

    @pytest.mark.parametrize(
        "obj, expected",
        [
            pytest.param(42, "<type: int>", id="instance"),
            pytest.param(int, "<type: int>", id="type"),
            pytest.param(None, "<type: NoneType>", id="none"),
        ],
    )
    def test_names(self, obj, expected):
        """Name the type of instances and types alike."""
        assert fmt_type(obj) == expected


class TestFmtValue:
    """Type-value pairs for error messages."""

    def test_basic(self):
        """Pair the type name with the repr."""
        assert fmt_value(42) == "<int: 42>"

    def test_truncated(self):
        """Shorten long reprs and keep the quotes."""
        assert fmt_value("hello world", max_repr=8) == "<str: 'hell'...>"

    def test_broken_repr(self):
        """Report a failing __repr__ instead of raising."""

        class Broken:
            def __repr__(self):
                raise RuntimeError("boom")

        assert "repr failed: RuntimeError" in fmt_value(Broken())


# Field helpers --------------------------------------------------------------------------------------------------------

class TestFieldHelpers:
    """Validation of notation fields."""

    def test_as_callable(self):
        """Pass callables through and name the field otherwise."""
        assert as_callable(abs, "func") is abs
        with pytest.raises(TypeError, match=r"func must be callable"):
            as_callable(3, "func")

    @pytest.mark.parametrize(
        "chars",
        [
            pytest.param("ab", id="string"),
            pytest.param(("a",), id="short"),
            pytest.param(("a", 1), id="not-str"),
        ],
    )
    def test_as_char_pair_rejects(self, chars):
        """Refuse anything but two strings."""
        with pytest.raises(TypeError, match=r"negative must"):
            as_char_pair(chars, "negative")

    def test_as_char_pair(self):
        """Return lists as tuples."""
        assert as_char_pair(["(", ")"], "negative") == ("(", ")")

    def test_as_char_pairs(self):
        """Check the count and each pair."""
        assert as_char_pairs([("a", "b"), ("c", "d")], "chars", 2) == (("a", "b"), ("c", "d"))
        with pytest.raises(TypeError, match=r"chars must hold 3 pairs"):
            as_char_pairs([("a", "b")], "chars", 3)
        with pytest.raises(TypeError, match=r"chars\[1\]"):
            as_char_pairs([("a", "b"), ("c", 4)], "chars", 2)

    @pytest.mark.parametrize(
        "chars, times, before, expected",
        [
            pytest.param(("f(", ")"), 2, True, "f(f(5))", id="nested"),
            pytest.param(("", "!"), 3, False, "5!!!", id="suffix"),
            pytest.param(("e", ""), 0, True, "5", id="zero"),
        ],
    )
    def test_wrap_repeated(self, chars, times, before, expected):
        """Stack markers in front or append them."""
        assert wrap_repeated("5", chars, times, before=before) == expected


# Sentinels ------------------------------------------------------------------------------------------------------------

class TestUnset:
    """The UNSET singleton."""

    def test_singleton(self):
        """Return the same object from every instantiation."""
        assert UnsetType() is UNSET

    def test_falsy(self):
        """Evaluate to False."""
        assert not UNSET

    def test_repr(self):
        """Show a short marker."""
        assert repr(UNSET) == "<UNSET>"

    def test_equality(self):
        """Equal only to itself."""
        assert UNSET == UNSET
        assert UNSET != None  # noqa: E711
        assert hash(UNSET) == hash(UnsetType())

    def test_pickle(self):
        """Survive pickling as the same object."""
        assert pickle.loads(pickle.dumps(UNSET)) is UNSET
