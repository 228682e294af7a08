"""
Unit tests for Greville interpolation and solution projection.
"""

import logging

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal

from lrIGA.errors import ConfigurationError, SizeMismatch
from lrIGA.geometry.primitives import make_lr_quarter_annulus
from lrIGA.recovery.evaluator import FunctionEvaluator
from lrIGA.recovery.interpolation import (
    interpolate, make_field_surface, regular_interpolation, project_solution
)
from lrIGA.recovery.sampling import greville_parameters


class TestInterpolate:
    """Tests for interpolate and regular_interpolation."""

    def test_identity_on_t_junction(self, t_junction_surface):
        """Bilinear Greville interpolation has the identity as matrix."""
        gu = greville_parameters(t_junction_surface, 0)
        gv = greville_parameters(t_junction_surface, 1)
        values = np.arange(10.0).reshape(1, -1)

        field = regular_interpolation(t_junction_surface, gu, gv, values)
        assert field.dimension == 1
        assert_array_almost_equal(field.coefficients[:, 0], values[0])

    def test_input_surface_untouched(self, t_junction_surface):
        """The result is a copy; the geometry keeps its coefficients."""
        before = t_junction_surface.coefficients.copy()
        gu = greville_parameters(t_junction_surface, 0)
        gv = greville_parameters(t_junction_surface, 1)
        field = interpolate(t_junction_surface, gu, gv, np.ones((3, 10)))
        assert field.dimension == 3
        assert field is not t_junction_surface
        assert_array_almost_equal(t_junction_surface.coefficients, before)

    def test_interpolation_condition(self, biquadratic_square):
        """The interpolant matches the data at the sample points."""
        gu = greville_parameters(biquadratic_square, 0)
        gv = greville_parameters(biquadratic_square, 1)
        values = np.sin(3.0 * gu) * np.cos(2.0 * gv)
        field = regular_interpolation(biquadratic_square, gu, gv, values)
        for k in range(biquadratic_square.n_basis):
            assert abs(field.point(gu[k], gv[k])[0] - values[k]) < 1e-10

    def test_quadratic_field_reproduced(self, biquadratic_square):
        """Fields in the spline space are reproduced everywhere."""
        f = lambda x, y: 2.0 * x * x - x * y + 3.0 * y
        gu = greville_parameters(biquadratic_square, 0)
        gv = greville_parameters(biquadratic_square, 1)
        field = regular_interpolation(biquadratic_square, gu, gv, f(gu, gv))
        for u, v in [(0.1, 0.9), (0.45, 0.5), (0.8, 0.3)]:
            assert abs(field.point(u, v)[0] - f(u, v)) < 1e-10

    def test_size_mismatch(self, t_junction_surface, caplog):
        """Arrays of the wrong length are reported."""
        gu = greville_parameters(t_junction_surface, 0)
        gv = greville_parameters(t_junction_surface, 1)

        with pytest.raises(SizeMismatch) as info:
            interpolate(t_junction_surface, gu[:-1], gv, np.zeros(10))
        assert info.value.expected == 10
        assert info.value.got == 9

        with pytest.raises(SizeMismatch):
            interpolate(t_junction_surface, gu, gv, np.zeros((2, 11)))

        with caplog.at_level(logging.ERROR):
            assert regular_interpolation(t_junction_surface, gu, gv[:3], np.zeros(10)) is None
        assert "regular_interpolation failed" in caplog.text

    def test_rational_rejected(self):
        """Rational bases are not interpolated."""
        surface = make_lr_quarter_annulus()
        gu = greville_parameters(surface, 0)
        gv = greville_parameters(surface, 1)
        with pytest.raises(ConfigurationError):
            interpolate(surface, gu, gv, np.zeros(surface.n_basis))
        assert regular_interpolation(surface, gu, gv, np.zeros(surface.n_basis)) is None

    def test_singular_samples(self, t_junction_surface):
        """Repeated sample points make the matrix singular."""
        gu = np.full(10, 0.3)
        gv = np.full(10, 0.3)
        assert regular_interpolation(t_junction_surface, gu, gv, np.zeros(10)) is None


class TestMakeFieldSurface:
    """Tests for make_field_surface."""

    def test_dimension_and_values(self, t_junction_surface):
        """Coefficients are stored per basis function."""
        coeffs = np.vstack([np.arange(10.0), -np.arange(10.0)])
        field = make_field_surface(t_junction_surface, coeffs)
        assert field.dimension == 2
        assert_array_almost_equal(field.coefficients, coeffs.T)

    def test_wrong_count(self, t_junction_surface):
        """The number of columns must equal the number of basis functions."""
        with pytest.raises(SizeMismatch):
            make_field_surface(t_junction_surface, np.zeros((1, 4)))


class TestProjectSolution:
    """Tests for project_solution."""

    def test_bilinear_field(self, t_junction_surface):
        """Coefficients are the field at the Greville points."""
        f = lambda x, y: (x - y, 2.0 * x * y)
        field = project_solution(t_junction_surface, FunctionEvaluator(f, n_fields=2))
        G = t_junction_surface.greville_points()
        assert_array_almost_equal(field.coefficients[:, 0], G[:, 0] - G[:, 1])
        assert_array_almost_equal(field.coefficients[:, 1], 2.0 * G[:, 0] * G[:, 1])

    def test_rectangle_physical_coordinates(self):
        """The field is a function of the physical coordinates."""
        from lrIGA.geometry.primitives import make_lr_rectangle

        surface = make_lr_rectangle(x_range=(1.0, 3.0), y_range=(0.0, 2.0), p=2,
                                    n_elem_u=2, n_elem_v=2)
        field = project_solution(surface, FunctionEvaluator(lambda x, y: x + y))
        # x + y = 1 + 2u + 2v on the parametric domain
        for u, v in [(0.2, 0.3), (0.9, 0.6)]:
            assert abs(field.point(u, v)[0] - (1.0 + 2.0 * u + 2.0 * v)) < 1e-10

    def test_failures(self):
        """Missing or rational surfaces give None."""
        evaluator = FunctionEvaluator(lambda x, y: 1.0)
        assert project_solution(None, evaluator) is None
        assert project_solution(make_lr_quarter_annulus(), evaluator) is None
