#
# towerfmt - Engineering Lattice Tests
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from towerfmt.engineering import (
    EngineeringSpec, nearest_allowed_above, nearest_allowed_below, next_allowed, previous_allowed,
)
from towerfmt.magnitude import Magnitude


# Tests ----------------------------------------------------------------------------------------------------------------

class TestEngineeringSpec:
    """Construction and validation."""

    def test_default_allows_integers(self):
        """Default to a single step of 1."""
        assert EngineeringSpec().steps == (Magnitude(1),)
        assert EngineeringSpec(()).steps == (Magnitude(1),)

    def test_steps_sorted_descending(self):
        """Sort steps most significant first."""
        assert EngineeringSpec((1, 5)).steps == (Magnitude(5), Magnitude(1))

    def test_of_passthrough(self):
        """Return an existing spec unchanged."""
        spec = EngineeringSpec.of(3)
        assert EngineeringSpec.of(spec) is spec
        assert spec.steps == (Magnitude(3),)

    @pytest.mark.parametrize(
        "steps",
        [
            pytest.param(0, id="zero"),
            pytest.param(-3, id="negative"),
            pytest.param(float("inf"), id="infinite"),
        ],
    )
    def test_invalid_steps(self, steps):
        """Reject steps that are not positive and finite."""
        with pytest.raises(ValueError, match=r"positive and finite"):
            EngineeringSpec(steps)

    def test_is_whole(self):
        """Whole only when every step is."""
        assert EngineeringSpec.of((3, 1)).is_whole()
        assert not EngineeringSpec.of(0.5).is_whole()


class TestSingleStep:
    """A lattice of multiples of 3."""

    @pytest.mark.parametrize(
        "value, current, upper, following, preceding",
        [
            pytest.param(7, 6, 9, 9, 6, id="between"),
            pytest.param(6, 6, 6, 9, 3, id="on-lattice"),
            pytest.param(0, 0, 0, 3, -3, id="zero"),
            pytest.param(-4, -6, -3, -3, -6, id="negative"),
        ],
    )
    def test_moves(self, value, current, upper, following, preceding):
        """Move to the neighbouring multiples."""
        spec = EngineeringSpec.of(3)
        assert spec.current(value) == current
        assert spec.upper(value) == upper
        assert spec.next(value) == following
        assert spec.previous(value) == preceding

    def test_next_of_current(self):
        """Step 3 maps 7 to 6 and the next allowed value after 6 is 9."""
        assert nearest_allowed_below(7, 3) == 6
        assert next_allowed(6, 3) == 9


class TestMixedSteps:
    """A lattice with steps 5 and 1 read like digits."""

    def test_places_and_compose(self):
        """Split greedily and rebuild."""
        spec = EngineeringSpec.of((5, 1))
        assert spec.places(13) == [Magnitude(2), Magnitude(3)]
        assert spec.compose([Magnitude(2), Magnitude(3)]) == 13

    def test_places_negative(self):
        """Refuse negative values."""
        with pytest.raises(ValueError, match=r"negative"):
            EngineeringSpec.of((5, 1)).places(-1)

    def test_fractional_steps(self):
        """Allow non-integer lattices."""
        spec = EngineeringSpec.of(0.5)
        assert spec.current(1.7) == 1.5
        assert spec.next(1.5) == 2


class TestShortcuts:
    """Module-level helpers."""

    def test_helpers(self):
        """Build the spec from a plain step."""
        assert next_allowed(7, 3) == 9
        assert previous_allowed(7, 3) == 6
        assert nearest_allowed_below(7, 3) == 6
        assert nearest_allowed_above(7, 3) == 9
        assert nearest_allowed_above(9, 3) == 9


class TestLatticeLaws:
    """next() and previous() walk the same lattice in opposite directions."""

    @pytest.mark.parametrize(
        "steps",
        [
            pytest.param(3, id="single"),
            pytest.param(0.5, id="fractional"),
            pytest.param((5, 2), id="five-two"),
            pytest.param((10, 3), id="ten-three"),
            pytest.param((4, 2), id="exact-refill"),
        ],
    )
    def test_walk_up(self, steps):
        """Each next() is larger, on the lattice, and undone by previous()."""
        spec = EngineeringSpec.of(steps)
        value = Magnitude(0)
        for _ in range(25):
            following = spec.next(value)
            assert following > value
            assert spec.current(following) == following
            assert spec.previous(following) == value
            value = following

    @pytest.mark.parametrize(
        "steps",
        [
            pytest.param(3, id="single"),
            pytest.param((5, 2), id="five-two"),
            pytest.param((10, 3), id="ten-three"),
        ],
    )
    def test_walk_down(self, steps):
        """Each previous() is smaller and undone by next(), below zero as well."""
        spec = EngineeringSpec.of(steps)
        value = Magnitude(0)
        for _ in range(25):
            preceding = spec.previous(value)
            assert preceding < value
            assert spec.next(preceding) == value
            value = preceding

    def test_mixed_lattice_values(self):
        """Steps 5 and 2 allow 0, 2, 4, 5, 7, 9, 10, ..."""
        spec = EngineeringSpec.of((5, 2))
        values = [Magnitude(0)]
        for _ in range(7):
            values.append(spec.next(values[-1]))
        assert values == [Magnitude(v) for v in (0, 2, 4, 5, 7, 9, 10, 12)]
