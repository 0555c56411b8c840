#
# Pytest Fixtures
#

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from towerfmt.default import DefaultNotation
from towerfmt.magnitude import Magnitude, isclose


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def default():
    """Fresh DefaultNotation with library defaults."""
    return DefaultNotation()


@pytest.fixture
def assert_close():
    """Compare Magnitudes (or anything Magnitude accepts) with a relative tolerance."""

    def _assert_close(actual, expected, rel_tol: float = 1e-9):
        actual, expected = Magnitude(actual), Magnitude(expected)
        assert isclose(actual, expected, rel_tol), f"{actual!r} is not close to {expected!r}"

    return _assert_close
