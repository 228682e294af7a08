"""
Primitive geometry factory functions.

This module provides factory functions for creating common LR spline
geometries used in recovery tests and examples, such as:
- Unit square and rectangles (tensor-product layout)
- A locally refined unit square with a T-junction
- A quarter annulus (rational)

These are the building blocks for more complex geometries.
"""

import numpy as np
from typing import Tuple

from .lr_spline import LRSplineSurface
from ..discretization.basis_function import BasisFunction
from ..discretization.knot_vector import KnotVector, make_uniform_knot_vector


def make_lr_unit_square(p: int = 2, n_elem_u: int = 4, n_elem_v: int = 4,
                        physical_dim: int = 2) -> LRSplineSurface:
    """
    Create an LR spline surface representing the unit square [0,1]².

    This is the simplest test geometry: identity mapping where parametric
    coordinates equal physical coordinates. Control points sit at the
    Greville points, which reproduces the identity for any p >= 1.

    Parameters:
        p: Polynomial degree in both directions
        n_elem_u: Number of elements in u direction
        n_elem_v: Number of elements in v direction
        physical_dim: 2 for 2D domain, 3 for surface in 3D (z=0)

    Returns:
        LRSplineSurface representing the unit square
    """
    kv_u = make_uniform_knot_vector(n_elem_u, p)
    kv_v = make_uniform_knot_vector(n_elem_v, p)
    return _greville_surface(kv_u, kv_v, physical_dim)


def make_lr_rectangle(x_range: Tuple[float, float] = (0.0, 1.0),
                      y_range: Tuple[float, float] = (0.0, 1.0),
                      p: int = 2,
                      n_elem_u: int = 4,
                      n_elem_v: int = 4) -> LRSplineSurface:
    """
    Create an LR spline surface representing a rectangle.

    Parameters:
        x_range: (x_min, x_max)
        y_range: (y_min, y_max)
        p: Polynomial degree
        n_elem_u: Number of elements in u direction
        n_elem_v: Number of elements in v direction

    Returns:
        LRSplineSurface representing the rectangle
    """
    surface = make_lr_unit_square(p, n_elem_u, n_elem_v, physical_dim=2)

    coords = surface.coefficients
    coords[:, 0] = x_range[0] + coords[:, 0] * (x_range[1] - x_range[0])
    coords[:, 1] = y_range[0] + coords[:, 1] * (y_range[1] - y_range[0])
    surface.set_coefficients(coords)

    return surface


def make_lr_tensor_surface(kv_u: KnotVector, kv_v: KnotVector,
                           physical_dim: int = 2) -> LRSplineSurface:
    """
    Identity-mapped surface on arbitrary knot vectors.

    Parameters:
        kv_u, kv_v: Global knot vectors (any degrees, any multiplicities)
        physical_dim: 2 or 3

    Returns:
        LRSplineSurface with control points at the Greville points
    """
    return _greville_surface(kv_u, kv_v, physical_dim)


def _greville_surface(kv_u: KnotVector, kv_v: KnotVector,
                      physical_dim: int) -> LRSplineSurface:
    greville_u = kv_u.greville_abscissae()
    greville_v = kv_v.greville_abscissae()
    n_u, n_v = kv_u.n_basis, kv_v.n_basis

    control_points = np.zeros((n_u * n_v, physical_dim))
    idx = 0
    for j in range(n_v):
        for i in range(n_u):
            control_points[idx, 0] = greville_u[i]
            control_points[idx, 1] = greville_v[j]
            idx += 1

    return LRSplineSurface.from_knot_vectors(kv_u, kv_v, control_points)


def make_lr_t_junction_square() -> LRSplineSurface:
    """
    Bilinear unit square with one local refinement.

    Starting from 2x2 bilinear elements, the mesh line u = 0.25 is
    inserted over v in [0, 0.5] only. This leaves a T-junction at
    (0.25, 0.5), five elements and ten basis functions:

        v
        1 +-----------+-----------------------+
          |           |                       |
          |    E3     |          E4           |
          |           |                       |
      0.5 +-----+-----+-----------------------+
          |     |     |                       |
          | E0  | E1  |          E2           |
          |     |     |                       |
        0 +-----+-----+-----------------------+
          0    0.25  0.5                      1   u

    Control points sit at the Greville points (identity mapping).

    Returns:
        LRSplineSurface with a non tensor-product basis
    """
    lower = [[0.0, 0.0, 0.25], [0.0, 0.25, 0.5], [0.25, 0.5, 1.0], [0.5, 1.0, 1.0]]
    coarse = [[0.0, 0.0, 0.5], [0.0, 0.5, 1.0], [0.5, 1.0, 1.0]]

    rows = [([0.0, 0.0, 0.5], lower),
            ([0.0, 0.5, 1.0], coarse),
            ([0.5, 1.0, 1.0], coarse)]

    basis_functions = []
    for knots_v, row in rows:
        for knots_u in row:
            basis_functions.append(BasisFunction(
                id=len(basis_functions),
                knots_u=knots_u,
                knots_v=knots_v,
                coefficients=np.zeros(2),
            ))

    for bf in basis_functions:
        bf.coefficients = np.array(bf.greville)

    return LRSplineSurface.from_basis_functions(basis_functions)


def make_lr_quarter_annulus(inner_radius: float = 0.5,
                            outer_radius: float = 1.0,
                            p_radial: int = 1,
                            n_elem_radial: int = 2) -> LRSplineSurface:
    """
    Create a rational LR surface representing a quarter annulus.

    The annulus is parameterized with:
    - u (radial): 0 at inner radius, 1 at outer radius
    - v (angular): 0 at angle 0, 1 at angle 90 degrees

    The angular direction is one quadratic rational element with
    weights (1, 1/sqrt(2), 1), which represents the circular arc exactly.

    Parameters:
        inner_radius: Inner radius
        outer_radius: Outer radius
        p_radial: Polynomial degree in radial direction
        n_elem_radial: Number of elements in radial direction

    Returns:
        Rational LRSplineSurface representing the quarter annulus
    """
    kv_u = make_uniform_knot_vector(n_elem_radial, p_radial)
    kv_v = KnotVector(np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0]), 2)

    arc_points = np.array([[1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    arc_weights = np.array([1.0, 1.0 / np.sqrt(2.0), 1.0])

    greville_u = kv_u.greville_abscissae()
    n_u = kv_u.n_basis

    control_points = np.zeros((n_u * 3, 2))
    weights = np.ones(n_u * 3)

    idx = 0
    for j in range(3):
        for i in range(n_u):
            r = inner_radius + greville_u[i] * (outer_radius - inner_radius)
            control_points[idx] = r * arc_points[j]
            weights[idx] = arc_weights[j]
            idx += 1

    return LRSplineSurface.from_knot_vectors(kv_u, kv_v, control_points, weights)
