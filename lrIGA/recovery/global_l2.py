"""
Global L2 projection of sampled fields onto the spline basis.

Given a field f sampled at quadrature points, find coefficients x such
that sum_j x_j N_j is the least-squares best approximation of f:

    A x = B,   A_ij = integral N_i N_j dOmega,   B_i = integral N_i f dOmega

Two modes are supported:

- continuous: true mass-matrix projection. Each element uses the global
  n_gauss rule in both directions and every point is weighted with
      dJw = |element| * w_i * w_j * |det J|
  Gauss rules live on [0, 1], so |element| (parametric area) maps the
  reference weights to the element. Points where dJw == 0 (singular
  geometric mapping) are skipped.

- discrete: collocation-style least squares with (order - 1) unweighted
  points per direction and element, dJw = 1.

The assembly loop is:
    for element in mesh.elements:
        # 1. Gauss parameters of the element, flattened to a point list
        # 2. Field values at all points (one evaluator call)
        # 3. Basis values (and Jacobian determinants, continuous mode)
        # 4. Element matrix and right-hand side
        # 5. Scatter to global triplets using element.basis_function_ids

The system is solved once with one right-hand side column per field
component.
"""

import logging
import numpy as np
from scipy import sparse
from typing import Optional, Tuple

from ..errors import ConfigurationError, TopologyError, SizeMismatch, fail_safe
from ..geometry.lr_spline import LRSplineSurface
from ..io.config import RecoveryConfig
from ..quadrature.gauss import GaussQuadratureTable
from ..solver.linear import assemble_sparse, solve_sparse
from .evaluator import FieldEvaluator
from .sampling import expand_tensor_grid


_LOGGER = logging.getLogger(__name__)


class GlobalL2Projector:
    """
    Assembles and solves the global L2 projection system.

    Attributes:
        surface: Geometry surface (read only)
        quadrature: Gauss table used for all elements
        n_gauss: Points per direction in continuous mode
    """

    def __init__(self, surface: LRSplineSurface,
                 quadrature: Optional[GaussQuadratureTable] = None,
                 n_gauss: Optional[int] = None):
        """
        Parameters:
            surface: Geometry surface
            quadrature: Gauss table, defaults to GaussQuadratureTable()
            n_gauss: Points per direction in continuous mode, defaults to 4
        """
        self.surface = surface
        self.quadrature = quadrature if quadrature is not None else GaussQuadratureTable()
        self.n_gauss = n_gauss if n_gauss is not None else 4

    def n_points_per_direction(self, continuous: bool) -> Tuple[int, int]:
        """Gauss points per direction for the given mode."""
        if continuous:
            return (self.n_gauss, self.n_gauss)
        p_u, p_v = self.surface.orders
        return (p_u - 1, p_v - 1)

    def assemble(self, evaluator: FieldEvaluator,
                 continuous: bool = True) -> Tuple[sparse.csr_matrix, np.ndarray]:
        """
        Assemble the projection system.

        Parameters:
            evaluator: Field to project
            continuous: True for the Jacobian-weighted projection

        Returns:
            (A, B) with A of shape (n_basis, n_basis) and
            B of shape (n_basis, n_fields)
        """
        surface = self.surface
        n_basis = surface.n_basis
        n_comp = evaluator.n_fields

        ng_u, ng_v = self.n_points_per_direction(continuous)
        xg, wg_u = self.quadrature.get(ng_u)
        yg, wg_v = self.quadrature.get(ng_v)
        w_u, w_v = expand_tensor_grid(wg_u, wg_v)
        weights = w_u * w_v

        row_indices = []
        col_indices = []
        values = []
        B = np.zeros((n_basis, n_comp))
        n_skipped = 0

        for element in surface.mesh.iter_elements():
            area = 1.0
            if continuous:
                area = element.parametric_area
                if area < 0.0:
                    raise TopologyError(
                        f"Element {element.id} has negative parametric area {area}"
                    )

            u, v = expand_tensor_grid(element.gauss_point_parameters(0, xg),
                                      element.gauss_point_parameters(1, yg))
            field = np.asarray(evaluator.evaluate(surface, u, v, element))
            if field.shape != (n_comp, len(u)):
                raise SizeMismatch(f"Field values on element {element.id}",
                                   n_comp * len(u), field.size)

            ids, R = surface.element_basis(element, u, v)
            phi = R[0]

            if continuous:
                _, _, det_jac = surface.map_points(element, u, v)
                dJw = area * weights * np.abs(det_jac)
            else:
                dJw = np.ones(len(u))

            singular = dJw == 0.0
            if np.any(singular):
                n_skipped += int(np.sum(singular))
                _LOGGER.debug("Element %d: skipping %d point(s) with zero Jacobian",
                              element.id, int(np.sum(singular)))

            keep = ~singular
            phi_w = phi[:, keep] * dJw[keep]
            A_e = phi_w @ phi[:, keep].T
            B_e = phi_w @ field[:, keep].T

            # Scatter to global system
            for i_local, i_global in enumerate(ids):
                B[i_global] += B_e[i_local]
                for j_local, j_global in enumerate(ids):
                    row_indices.append(i_global)
                    col_indices.append(j_global)
                    values.append(A_e[i_local, j_local])

        if n_skipped:
            _LOGGER.debug("Skipped %d quadrature point(s) with zero Jacobian", n_skipped)

        A = assemble_sparse(row_indices, col_indices, values, n_basis)
        _LOGGER.debug("Assembled %s L2 system: %d basis functions, %d components, %d non-zeros",
                      "continuous" if continuous else "discrete", n_basis, n_comp, A.nnz)
        return A, B

    def project(self, evaluator: FieldEvaluator, continuous: bool = True) -> np.ndarray:
        """
        Project a field onto the basis.

        Parameters:
            evaluator: Field to project
            continuous: True for the Jacobian-weighted projection

        Returns:
            Coefficients of shape (n_fields, n_basis)
        """
        if self.surface.n_basis == 0:
            return np.zeros((evaluator.n_fields, 0))

        A, B = self.assemble(evaluator, continuous)
        X = solve_sparse(A, B)
        return X.T.copy()


@fail_safe
def global_l2_projection(surface: LRSplineSurface, evaluator: FieldEvaluator,
                         continuous: bool = True,
                         config: Optional[RecoveryConfig] = None,
                         quadrature: Optional[GaussQuadratureTable] = None
                         ) -> Optional[np.ndarray]:
    """
    L2 projection of a field onto the basis of a surface.

    Parameters:
        surface: Geometry surface
        evaluator: Field to project
        continuous: True for the Jacobian-weighted projection,
            False for the discrete (unweighted) variant
        config: Supplies n_gauss and the quadrature table
        quadrature: Gauss table, overrides the one from config

    Returns:
        Coefficients of shape (n_fields, n_basis), or None on failure
    """
    if surface is None:
        raise ConfigurationError("No surface to project onto")
    config = config if config is not None else RecoveryConfig()
    if quadrature is None:
        quadrature = config.quadrature_table()
    projector = GlobalL2Projector(surface, quadrature, config.n_gauss)
    return projector.project(evaluator, continuous)
