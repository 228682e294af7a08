"""
Superconvergent patch recovery (SCR) on LR splines.

For every basis function N_i a local polynomial is fitted, in the least
squares sense, to the field values at the Gauss points of the extended
support of N_i. The fitted polynomial evaluated at the Greville point of
N_i is the recovered nodal value. The nodal values are finally turned
into spline coefficients by interpolation at the Greville points.

With basis order p (degree + 1) per direction and a field of derivative
order m (0 for values, 1 for gradients, ...):

    Gauss points per element and direction:   ng = p - m
    monomial terms per direction:              n  = p - m + 1
    polynomial:  sum_{j<n_v} sum_{i<n_u} a_ij ((x - G_x)/h)^i ((y - G_y)/h)^j

where G is the physical location of the Greville point and h the largest
extent of the sample points of the patch. The constant coefficient a_00
is the recovered value.

The extended support is used for every basis function. It contains the
direct support, and it still provides enough sample points when some
knot spans of the direct support have zero measure.

Each basis function is processed independently with its own small
dense system; a single unsolvable system makes the whole recovery fail.
"""

import logging
import numpy as np
from typing import Dict, Optional, Tuple

from ..errors import ConfigurationError, LinearSystemError, TopologyError, fail_safe
from ..geometry.lr_spline import LRSplineSurface
from ..io.config import RecoveryConfig
from ..quadrature.gauss import GaussQuadratureTable
from ..solver.linear import solve_dense
from .evaluator import FieldEvaluator
from .interpolation import interpolate
from .sampling import expand_tensor_grid, greville_parameters


_LOGGER = logging.getLogger(__name__)


def eval_monomials(n_u: int, n_v: int, x, y) -> np.ndarray:
    """
    Tensor-product monomials x^i y^j for i < n_u, j < n_v.

    Parameters:
        n_u, n_v: Number of terms per direction
        x, y: Coordinates (scalars or arrays of equal length)

    Returns:
        Array of shape (n_u * n_v, n_points); row j * n_u + i holds x^i y^j
    """
    x = np.atleast_1d(np.asarray(x, dtype=np.float64))
    y = np.atleast_1d(np.asarray(y, dtype=np.float64))

    P = np.ones((n_u * n_v, len(x)))
    for j in range(n_v):
        for i in range(n_u):
            P[j * n_u + i] = x ** i * y ** j
    return P


class PatchRecovery:
    """
    Superconvergent patch recovery of nodal values.

    Attributes:
        surface: Geometry surface (read only)
        quadrature: Gauss table
    """

    def __init__(self, surface: LRSplineSurface,
                 quadrature: Optional[GaussQuadratureTable] = None):
        self.surface = surface
        self.quadrature = quadrature if quadrature is not None else GaussQuadratureTable()

    def patch_sizes(self, derivative_order: int) -> Tuple[int, int]:
        """Monomial terms per direction, order - m + 1."""
        p_u, p_v = self.surface.orders
        return (p_u - derivative_order + 1, p_v - derivative_order + 1)

    def recover_values(self, evaluator: FieldEvaluator
                       ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Recovered value of every basis function at its Greville point.

        Parameters:
            evaluator: Field sampled at the Gauss points

        Returns:
            (gpar_u, gpar_v, values) with Greville parameters of length
            n_basis and values of shape (n_fields, n_basis)
        """
        surface = self.surface
        if surface.dimension < 2:
            raise TopologyError(
                f"Patch recovery needs physical coordinates, surface has dimension "
                f"{surface.dimension}"
            )

        m = evaluator.derivative_order
        p_u, p_v = surface.orders
        xg, _ = self.quadrature.get(p_u - m)
        yg, _ = self.quadrature.get(p_v - m)

        gpar_u = greville_parameters(surface, 0)
        gpar_v = greville_parameters(surface, 1)

        n_u, n_v = self.patch_sizes(m)
        samples = self._sample_elements(evaluator, xg, yg)

        values = np.zeros((evaluator.n_fields, surface.n_basis))
        for bf in surface.mesh.iter_basis_functions():
            values[:, bf.id] = self._recover_basis_function(
                bf.id, gpar_u[bf.id], gpar_v[bf.id], samples, n_u, n_v)

        return gpar_u, gpar_v, values

    def _sample_elements(self, evaluator: FieldEvaluator,
                         xg: np.ndarray, yg: np.ndarray
                         ) -> Dict[int, Tuple[np.ndarray, np.ndarray]]:
        """
        Physical Gauss points and field values of every element.

        Returns:
            Dictionary element ID -> (points (n_pts, 2), field (n_fields, n_pts))
        """
        samples = {}
        for element in self.surface.mesh.iter_elements():
            u, v = expand_tensor_grid(element.gauss_point_parameters(0, xg),
                                      element.gauss_point_parameters(1, yg))
            X = self.surface.evaluate(u, v, element)[:, :2]
            field = np.asarray(evaluator.evaluate(self.surface, u, v, element))
            samples[element.id] = (X, field)
        return samples

    def _recover_basis_function(self, bf_id: int, gu: float, gv: float,
                                samples: Dict[int, Tuple[np.ndarray, np.ndarray]],
                                n_u: int, n_v: int) -> np.ndarray:
        """
        Fit the local polynomial of one basis function.

        Only reads the shared samples; A and B are private to the call.
        Coordinates are centred at the Greville point and divided by the
        patch size h, so the monomials stay of order one on any mesh.
        Scaling leaves the constant coefficient unchanged.

        Returns:
            Recovered value per field component, shape (n_fields,)

        Raises:
            LinearSystemError: if the sample points do not determine the
                local polynomial
        """
        G = self.surface.point(gu, gv)[:2]

        support = self.surface.mesh.get_extended_support(bf_id)
        X = np.vstack([samples[eid][0] for eid in support]) - G
        field = np.hstack([samples[eid][1] for eid in support])

        n_pol = n_u * n_v
        h = max(np.ptp(X[:, 0]), np.ptp(X[:, 1]))
        if h <= 0.0:
            raise LinearSystemError(
                f"Basis function {bf_id}: support of {len(support)} element(s) "
                f"has zero physical extent"
            )

        P = eval_monomials(n_u, n_v, X[:, 0] / h, X[:, 1] / h)
        if P.shape[1] < n_pol or np.linalg.matrix_rank(P) < n_pol:
            raise LinearSystemError(
                f"Basis function {bf_id}: {P.shape[1]} sample point(s) over "
                f"{len(support)} element(s) do not determine {n_pol} terms"
            )

        A = P @ P.T
        B = P @ field.T

        try:
            coeffs = solve_dense(A, B)
        except LinearSystemError as exc:
            raise LinearSystemError(
                f"Basis function {bf_id}: local fit over {len(support)} element(s) "
                f"with {n_pol} terms failed ({exc})"
            ) from exc

        _LOGGER.debug("Basis function %d: %d support elements, h = %g, value %s",
                      bf_id, len(support), h, coeffs[0])
        return coeffs[0]


@fail_safe
def sc_recovery(surface: LRSplineSurface, evaluator: FieldEvaluator,
                config: Optional[RecoveryConfig] = None,
                quadrature: Optional[GaussQuadratureTable] = None
                ) -> Optional[LRSplineSurface]:
    """
    Superconvergent patch recovery of a field.

    Parameters:
        surface: Geometry surface
        evaluator: Field sampled at the Gauss points
        config: Supplies the quadrature table
        quadrature: Gauss table, overrides the one from config

    Returns:
        New surface on the same basis carrying the recovered field as
        coefficients (dimension = n_fields), or None on failure
    """
    if surface is None:
        raise ConfigurationError("No surface to recover on")
    if quadrature is None:
        config = config if config is not None else RecoveryConfig()
        quadrature = config.quadrature_table()

    gpar_u, gpar_v, values = PatchRecovery(surface, quadrature).recover_values(evaluator)
    return interpolate(surface, gpar_u, gpar_v, values)
