"""
Unit tests for knot vector utilities.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_equal, assert_array_almost_equal

from lrIGA.discretization.knot_vector import (
    KnotVector, make_open_knot_vector, make_uniform_knot_vector
)


class TestKnotVector:
    """Tests for KnotVector class."""

    def test_open_knot_vector_creation(self):
        """Test creating an open (clamped) uniform knot vector."""
        kv = make_open_knot_vector(n_basis=5, degree=2, domain=(0.0, 1.0))

        assert kv.degree == 2
        assert kv.n_basis == 5
        assert len(kv.knots) == 5 + 2 + 1  # n + p + 1

        # Open knot vector structure: p+1 repeated at ends
        assert_array_equal(kv.knots[:3], [0.0, 0.0, 0.0])
        assert_array_equal(kv.knots[-3:], [1.0, 1.0, 1.0])

    def test_knot_vector_domain(self):
        """Test that domain is correctly computed."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(-1.0, 2.0))
        assert kv.domain == (-1.0, 2.0)

    def test_elements_list(self):
        """Test that element intervals are correct."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))
        elements = kv.elements

        assert kv.n_elements == 2
        assert elements[0] == (0.0, 0.5)
        assert elements[1] == (0.5, 1.0)

    def test_repeated_interior_knot_is_not_an_element(self):
        """A double interior knot does not create a zero-length element."""
        kv = KnotVector(np.array([0, 0, 0, 0.5, 0.5, 1, 1, 1]), 2)
        assert kv.n_basis == 5
        assert kv.n_elements == 2

    def test_uniform_by_elements(self):
        """Test creating a knot vector from an element count."""
        kv = make_uniform_knot_vector(n_elements=3, degree=2)
        assert kv.n_elements == 3
        assert kv.n_basis == 5
        assert_array_almost_equal(kv.unique_knots, [0.0, 1 / 3, 2 / 3, 1.0])

    def test_degree_zero(self):
        """Degree 0 knot vectors have one function per element."""
        kv = make_uniform_knot_vector(n_elements=4, degree=0)
        assert kv.n_basis == 4
        assert_array_almost_equal(kv.greville_abscissae(), [0.125, 0.375, 0.625, 0.875])

    def test_invalid_knots(self):
        """Test that decreasing knots raise an error."""
        with pytest.raises(ValueError):
            KnotVector(np.array([0, 0, 1, 0.5, 1, 1]), 1)

    def test_too_short(self):
        """Test that too few knots for the degree raise an error."""
        with pytest.raises(ValueError):
            KnotVector(np.array([0, 0, 1]), 2)


class TestLocalKnots:
    """Tests for local knot vectors of single basis functions."""

    def test_local_knots(self):
        """Function i sees knots i .. i+p+1."""
        kv = KnotVector(np.array([0, 0, 0, 0.5, 1, 1, 1]), 2)
        assert_array_equal(kv.local_knots(0), [0, 0, 0, 0.5])
        assert_array_equal(kv.local_knots(1), [0, 0, 0.5, 1])
        assert_array_equal(kv.local_knots(3), [0.5, 1, 1, 1])

    def test_local_knots_out_of_range(self):
        """Asking for a non-existent function raises IndexError."""
        kv = make_open_knot_vector(n_basis=3, degree=1)
        with pytest.raises(IndexError):
            kv.local_knots(3)

    def test_local_knots_is_copy(self):
        """Modifying local knots does not modify the knot vector."""
        kv = make_open_knot_vector(n_basis=3, degree=1)
        local = kv.local_knots(1)
        local[0] = 42.0
        assert kv.knots[1] == 0.0


class TestGrevilleAbscissae:
    """Tests for Greville abscissae computation."""

    def test_greville_linear(self):
        """Test Greville abscissae for linear B-splines."""
        kv = KnotVector(np.array([0, 0, 0.5, 1, 1]), 1)
        assert_array_almost_equal(kv.greville_abscissae(), [0, 0.5, 1])

    def test_greville_quadratic(self):
        """Test Greville abscissae for quadratic B-splines."""
        kv = KnotVector(np.array([0, 0, 0, 0.5, 1, 1, 1]), 2)
        assert_array_almost_equal(kv.greville_abscissae(), [0, 0.25, 0.75, 1])

    def test_greville_count(self):
        """One Greville abscissa per basis function."""
        kv = make_uniform_knot_vector(n_elements=5, degree=3)
        assert len(kv.greville_abscissae()) == kv.n_basis
