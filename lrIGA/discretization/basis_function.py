"""
Basis function abstraction for LR splines.

In an LR spline the basis functions are the fundamental objects. Unlike a
tensor-product B-spline, where a function is identified by an index pair
into global knot vectors, each LR basis function carries:
- Its own local knot vectors in u and v (p+2 knots each)
- A NURBS weight (1.0 for polynomial splines)
- A coefficient vector (geometry coordinates or field values)
- Knowledge of supporting elements (bidirectional linking)

Key invariant (must always hold):
    bf in element.basis_function_ids  <=>  element.id in bf.supported_elements
"""

import numpy as np
from typing import Set, Tuple
from dataclasses import dataclass, field

from ..geometry.bspline import eval_local_basis, greville_coordinate


@dataclass
class BasisFunction:
    """
    Tensor-product B-spline with local knot vectors.

    Attributes:
        id: Index in the canonical enumeration (0..n_basis-1)
        knots_u: Local knot vector in u, length p_u + 2
        knots_v: Local knot vector in v, length p_v + 2
        coefficients: Control value, one entry per surface dimension
        weight: NURBS weight (1.0 for B-splines)
        supported_elements: Set of element IDs this function is non-zero on
    """
    id: int
    knots_u: np.ndarray
    knots_v: np.ndarray
    coefficients: np.ndarray
    weight: float = 1.0
    supported_elements: Set[int] = field(default_factory=set)

    def __post_init__(self):
        self.knots_u = np.asarray(self.knots_u, dtype=np.float64)
        self.knots_v = np.asarray(self.knots_v, dtype=np.float64)
        self.coefficients = np.atleast_1d(np.asarray(self.coefficients, dtype=np.float64))
        if not isinstance(self.supported_elements, set):
            self.supported_elements = set(self.supported_elements)

        for name, knots in (("knots_u", self.knots_u), ("knots_v", self.knots_v)):
            if len(knots) < 2:
                raise ValueError(f"{name} needs at least 2 knots, got {len(knots)}")
            if not np.all(np.diff(knots) >= 0):
                raise ValueError(f"{name} must be non-decreasing")

    @property
    def degrees(self) -> Tuple[int, int]:
        """Polynomial degrees (p_u, p_v)."""
        return (len(self.knots_u) - 2, len(self.knots_v) - 2)

    @property
    def dimension(self) -> int:
        """Number of coefficient components."""
        return len(self.coefficients)

    @property
    def greville(self) -> Tuple[float, float]:
        """Greville point (u, v) of this function."""
        return (greville_coordinate(self.knots_u), greville_coordinate(self.knots_v))

    @property
    def support_bounds(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Parametric bounding box of the support."""
        return ((self.knots_u[0], self.knots_u[-1]),
                (self.knots_v[0], self.knots_v[-1]))

    def covers(self, bounds: Tuple[Tuple[float, float], ...]) -> bool:
        """
        Check if a rectangle with positive area lies inside the support.

        Parameters:
            bounds: ((u_min, u_max), (v_min, v_max))
        """
        (u0, u1), (v0, v1) = bounds
        return (self.knots_u[0] <= u0 and u1 <= self.knots_u[-1]
                and self.knots_v[0] <= v0 and v1 <= self.knots_v[-1]
                and u0 < u1 and v0 < v1)

    def evaluate(self, u: np.ndarray, v: np.ndarray,
                 bounds: Tuple[Tuple[float, float], ...],
                 n_ders: int = 0) -> np.ndarray:
        """
        Evaluate the (non-rational) tensor-product B-spline on an element.

        Parameters:
            u, v: Parameter values inside the element
            bounds: Element bounds ((u_min, u_max), (v_min, v_max))
            n_ders: 0 for values, 1 to add d/du and d/dv

        Returns:
            Array of shape (1, n_pts) or (3, n_pts) holding
            [N] or [N, dN/du, dN/dv]
        """
        bu = eval_local_basis(self.knots_u, u, bounds[0], n_ders)
        bv = eval_local_basis(self.knots_v, v, bounds[1], n_ders)
        if n_ders == 0:
            return bu[0:1] * bv[0:1]
        return np.vstack([bu[0] * bv[0], bu[1] * bv[0], bu[0] * bv[1]])

    def add_element(self, element_id: int) -> None:
        """Register that this function is non-zero on an element."""
        self.supported_elements.add(element_id)

    def __hash__(self) -> int:
        """Hash based on ID for use in sets/dicts."""
        return hash(self.id)

    def __eq__(self, other) -> bool:
        """Equality based on ID."""
        if isinstance(other, BasisFunction):
            return self.id == other.id
        return False

    def __repr__(self) -> str:
        return (f"BasisFunction(id={self.id}, knots_u={self.knots_u}, "
                f"knots_v={self.knots_v}, w={self.weight}, "
                f"n_elements={len(self.supported_elements)})")
