"""
Sampling of recovered fields for visualization and error checks.

A recovered field is an LRSplineSurface on the same basis as the
geometry, with one coefficient component per field component. These
utilities evaluate geometry and field together.

Key functions:
- sample_field_2d: Evaluate a field on a uniform parametric grid
- evaluate_field_at_point: Evaluate a field at a single parametric point
- compute_l2_error: L2 norm of the error against an analytic field
"""

import numpy as np
from typing import Callable, Optional, Tuple

from ..geometry.lr_spline import LRSplineSurface
from ..quadrature.gauss import GaussQuadratureTable
from ..recovery.sampling import expand_tensor_grid


def sample_field_2d(geometry: LRSplineSurface,
                    field: LRSplineSurface,
                    n_u: int = 50,
                    n_v: int = 50) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Sample a field on a uniform grid in parametric space.

    Parameters:
        geometry: Geometry surface
        field: Field surface on the same basis
        n_u: Number of sample points in u direction
        n_v: Number of sample points in v direction

    Returns:
        (X, Y, F) where:
        - X: Physical x-coordinates, shape (n_u, n_v)
        - Y: Physical y-coordinates, shape (n_u, n_v)
        - F: Field values, shape (n_fields, n_u, n_v)
    """
    (u0, u1), (v0, v1) = geometry.domain
    u_vals = np.linspace(u0, u1, n_u)
    v_vals = np.linspace(v0, v1, n_v)

    X = np.zeros((n_u, n_v))
    Y = np.zeros((n_u, n_v))
    F = np.zeros((field.dimension, n_u, n_v))

    for i, u in enumerate(u_vals):
        for j, v in enumerate(v_vals):
            x_pt, values = evaluate_field_at_point(geometry, field, (u, v))
            X[i, j] = x_pt[0]
            Y[i, j] = x_pt[1]
            F[:, i, j] = values

    return X, Y, F


def evaluate_field_at_point(geometry: LRSplineSurface,
                            field: LRSplineSurface,
                            xi: Tuple[float, float]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evaluate geometry and field at a single parametric point.

    Parameters:
        geometry: Geometry surface
        field: Field surface on the same basis
        xi: Parametric coordinates (u, v)

    Returns:
        (physical_point, field_values)
    """
    u, v = xi
    element = geometry.mesh.find_element(u, v)
    return geometry.evaluate(u, v, element)[0], field.evaluate(u, v, element)[0]


def compute_l2_error(geometry: LRSplineSurface,
                     field: LRSplineSurface,
                     exact: Callable,
                     n_gauss: int = 4,
                     quadrature: Optional[GaussQuadratureTable] = None) -> float:
    """
    L2 norm of field - exact over the physical domain.

    Integrated element by element with Gauss quadrature, weighted with
    the Jacobian determinant of the geometry.

    Parameters:
        geometry: Geometry surface
        field: Field surface on the same basis
        exact: Function f(x, y) returning a scalar or n_fields values
        n_gauss: Gauss points per direction
        quadrature: Gauss table, defaults to GaussQuadratureTable()

    Returns:
        L2 error (summed over all components)
    """
    quadrature = quadrature if quadrature is not None else GaussQuadratureTable()
    points, weights = quadrature.get(n_gauss)
    w_u, w_v = expand_tensor_grid(weights, weights)

    error_sq = 0.0
    for element in geometry.mesh.iter_elements():
        u, v = expand_tensor_grid(element.gauss_point_parameters(0, points),
                                  element.gauss_point_parameters(1, points))
        X, _, det_jac = geometry.map_points(element, u, v)
        values = field.evaluate(u, v, element)

        dJw = element.parametric_area * w_u * w_v * np.abs(det_jac)
        for k in range(len(u)):
            diff = values[k] - np.atleast_1d(exact(X[k, 0], X[k, 1]))
            error_sq += np.sum(diff ** 2) * dJw[k]

    return np.sqrt(error_sq)
