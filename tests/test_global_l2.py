"""
Unit tests for global L2 projection.

Tests cover:
- Reproduction of fields contained in the spline space (continuous and discrete)
- Rational geometry
- Failure reporting (singular systems, missing quadrature, bad topology)
"""

import logging

import pytest
import numpy as np
from numpy.testing import assert_almost_equal, assert_array_almost_equal

from lrIGA.discretization.basis_function import BasisFunction
from lrIGA.errors import QuadratureUnavailable, TopologyError
from lrIGA.geometry.lr_spline import LRSplineSurface
from lrIGA.geometry.primitives import make_lr_unit_square, make_lr_quarter_annulus
from lrIGA.io.config import RecoveryConfig
from lrIGA.quadrature.gauss import GaussQuadratureTable
from lrIGA.recovery.evaluator import FunctionEvaluator, SplineFieldEvaluator
from lrIGA.recovery.global_l2 import GlobalL2Projector, global_l2_projection
from lrIGA.recovery.interpolation import make_field_surface


def bilinear(x, y):
    return 1.0 + 2.0 * x - 3.0 * y + 0.5 * x * y


class TestContinuousProjection:
    """Jacobian-weighted L2 projection."""

    def test_constant_single_element(self):
        """A constant is reproduced on one bilinear element."""
        surface = make_lr_unit_square(p=1, n_elem_u=1, n_elem_v=1)
        coeffs = global_l2_projection(surface, FunctionEvaluator(lambda x, y: 3.5))
        assert coeffs.shape == (1, 4)
        assert_array_almost_equal(coeffs, np.full((1, 4), 3.5))

    def test_bilinear_on_t_junction(self, t_junction_surface):
        """A bilinear field is in the space: coefficients are f at the Greville points."""
        coeffs = global_l2_projection(t_junction_surface, FunctionEvaluator(bilinear))
        G = t_junction_surface.greville_points()
        assert_array_almost_equal(coeffs[0], bilinear(G[:, 0], G[:, 1]))

    def test_multiple_components(self, t_junction_surface):
        """Each component gets its own row."""
        evaluator = FunctionEvaluator(lambda x, y: (x, y, 2.0), n_fields=3)
        coeffs = global_l2_projection(t_junction_surface, evaluator)
        G = t_junction_surface.greville_points()
        assert coeffs.shape == (3, 10)
        assert_array_almost_equal(coeffs[0], G[:, 0])
        assert_array_almost_equal(coeffs[1], G[:, 1])
        assert_array_almost_equal(coeffs[2], np.full(10, 2.0))

    def test_rational_constant(self):
        """Rational bases still reproduce constants."""
        surface = make_lr_quarter_annulus()
        coeffs = global_l2_projection(surface, FunctionEvaluator(lambda x, y: -1.25))
        assert_array_almost_equal(coeffs, np.full((1, surface.n_basis), -1.25))

    def test_spline_field_reproduced(self, biquadratic_square):
        """A field on the same basis is its own projection."""
        rng = np.random.default_rng(7)
        c = rng.standard_normal(biquadratic_square.n_basis)
        coeffs = global_l2_projection(biquadratic_square, SplineFieldEvaluator(c))
        assert_array_almost_equal(coeffs[0], c)

    def test_mass_matrix_symmetric(self, t_junction_surface):
        """The assembled mass matrix is symmetric and integrates to the area."""
        projector = GlobalL2Projector(t_junction_surface)
        A, B = projector.assemble(FunctionEvaluator(lambda x, y: 1.0))
        dense = A.toarray()
        assert_array_almost_equal(dense, dense.T)
        # sum_ij integral N_i N_j = integral 1 = area of the unit square
        assert_almost_equal(dense.sum(), 1.0)
        assert_almost_equal(B.sum(), 1.0)

    def test_empty_surface(self):
        """A surface without basis functions gives an empty result."""
        surface = LRSplineSurface.from_basis_functions([])
        coeffs = global_l2_projection(surface, FunctionEvaluator(lambda x, y: 1.0))
        assert coeffs.shape == (1, 0)


class TestDiscreteProjection:
    """Unweighted least squares at (order - 1) points per direction."""

    def test_points_per_direction(self, biquadratic_square):
        """Discrete mode uses order - 1 points, continuous mode n_gauss."""
        projector = GlobalL2Projector(biquadratic_square, n_gauss=5)
        assert projector.n_points_per_direction(False) == (2, 2)
        assert projector.n_points_per_direction(True) == (5, 5)

    def test_spline_field_reproduced(self):
        """A biquadratic spline field is recovered exactly."""
        surface = make_lr_unit_square(p=2, n_elem_u=2, n_elem_v=2)
        c = np.linspace(-1.0, 2.0, surface.n_basis)
        coeffs = global_l2_projection(surface, SplineFieldEvaluator(c), continuous=False)
        assert_array_almost_equal(coeffs[0], c)

    def test_discrete_ignores_geometry(self):
        """Discrete mode needs no physical coordinates."""
        surface = make_lr_unit_square(p=2, n_elem_u=2, n_elem_v=2)
        c = np.arange(float(surface.n_basis))
        field = make_field_surface(surface, c.reshape(1, -1))
        coeffs = global_l2_projection(field, SplineFieldEvaluator(c), continuous=False)
        assert_array_almost_equal(coeffs[0], c)

    def test_degree_zero_has_no_rule(self, caplog):
        """Piecewise constants need zero points per direction: no rule exists."""
        surface = make_lr_unit_square(p=0, n_elem_u=2, n_elem_v=2)
        with caplog.at_level(logging.ERROR):
            result = global_l2_projection(surface, FunctionEvaluator(lambda x, y: 1.0),
                                          continuous=False)
        assert result is None
        assert "global_l2_projection failed" in caplog.text

        projector = GlobalL2Projector(surface)
        with pytest.raises(QuadratureUnavailable):
            projector.project(FunctionEvaluator(lambda x, y: 1.0), continuous=False)


class TestProjectionFailures:
    """Failures are logged and reported as None."""

    def test_missing_surface(self):
        """No surface gives None."""
        assert global_l2_projection(None, FunctionEvaluator(lambda x, y: 1.0)) is None

    def test_isolated_function_is_singular(self, t_junction_surface):
        """A basis function without support gives a singular mass matrix."""
        basis = list(t_junction_surface.mesh.iter_basis_functions())
        basis.append(BasisFunction(id=10, knots_u=[0.5, 0.5, 0.5], knots_v=[0.0, 0.5, 1.0],
                                   coefficients=[0.5, 0.5]))
        surface = LRSplineSurface.from_basis_functions(basis)
        assert global_l2_projection(surface, FunctionEvaluator(lambda x, y: 1.0)) is None

    def test_negative_area(self, t_junction_surface):
        """Inverted element bounds are a topology error."""
        elem = t_junction_surface.mesh.get_element(0)
        elem.parametric_bounds = ((0.25, 0.0), (0.0, 0.5))
        assert global_l2_projection(t_junction_surface,
                                    FunctionEvaluator(lambda x, y: 1.0)) is None

        projector = GlobalL2Projector(t_junction_surface)
        with pytest.raises(TopologyError):
            projector.assemble(FunctionEvaluator(lambda x, y: 1.0))

    def test_quadrature_unavailable(self, t_junction_surface):
        """n_gauss above the table size gives None."""
        config = RecoveryConfig(n_gauss=3, max_gauss_points=2)
        result = global_l2_projection(t_junction_surface,
                                      FunctionEvaluator(lambda x, y: 1.0), config=config)
        assert result is None

    def test_explicit_table_overrides_config(self, t_junction_surface):
        """An explicit quadrature table wins over the configured one."""
        config = RecoveryConfig(n_gauss=3, max_gauss_points=2)
        result = global_l2_projection(t_junction_surface, FunctionEvaluator(bilinear),
                                      config=config,
                                      quadrature=GaussQuadratureTable(max_points=3))
        G = t_junction_surface.greville_points()
        assert_array_almost_equal(result[0], bilinear(G[:, 0], G[:, 1]))

    def test_flat_geometry_skips_points(self, t_junction_surface, caplog):
        """Points with zero Jacobian are skipped; with none left the system is singular."""
        coords = t_junction_surface.coefficients
        coords[:, 1] = 0.0
        t_junction_surface.set_coefficients(coords)

        with caplog.at_level(logging.DEBUG, logger="lrIGA.recovery.global_l2"):
            result = global_l2_projection(t_junction_surface,
                                          FunctionEvaluator(lambda x, y: 1.0))
        assert result is None
        assert "skipping" in caplog.text

    def test_partly_degenerate_mapping(self, t_junction_surface, caplog):
        """Points in a strip with zero Jacobian are skipped; the rest still determine f."""
        map_points = t_junction_surface.map_points

        def strip_map_points(element, u, v):
            points, jacobians, det_jac = map_points(element, u, v)
            det_jac = np.where(points[:, 0] < 0.1, 0.0, det_jac)
            return points, jacobians, det_jac

        t_junction_surface.map_points = strip_map_points
        with caplog.at_level(logging.DEBUG, logger="lrIGA.recovery.global_l2"):
            coeffs = global_l2_projection(t_junction_surface, FunctionEvaluator(bilinear))

        assert coeffs is not None
        assert "skipping" in caplog.text
        G = t_junction_surface.greville_points()
        assert_array_almost_equal(coeffs[0], bilinear(G[:, 0], G[:, 1]))

    def test_field_surface_as_geometry(self, t_junction_surface):
        """Continuous mode needs physical coordinates."""
        field = make_field_surface(t_junction_surface, np.ones((1, 10)))
        assert global_l2_projection(field, SplineFieldEvaluator(np.ones(10))) is None
        with pytest.raises(TopologyError):
            GlobalL2Projector(field).assemble(SplineFieldEvaluator(np.ones(10)))

    def test_wrong_field_shape(self, t_junction_surface):
        """An evaluator returning too few points is rejected."""

        class ShortEvaluator(SplineFieldEvaluator):
            def _evaluate_on_element(self, surface, element, u, v):
                return super()._evaluate_on_element(surface, element, u, v)[:, :-1]

        assert global_l2_projection(t_junction_surface, ShortEvaluator(np.ones(10))) is None
