"""
Element abstraction for LR meshes.

An element is a maximal axis-aligned rectangle of the parametric domain
that is not crossed by any mesh line. Every basis function restricted to
an element is a single polynomial, so elements are the units of
quadrature and connectivity.

Bidirectional linking invariant:
    bf_id in element.basis_function_ids  <=>  element.id in basis_functions[bf_id].supported_elements
"""

import numpy as np
from typing import Tuple, List
from dataclasses import dataclass, field


@dataclass
class Element:
    """
    LR element with explicit basis function linking.

    Attributes:
        id: Unique element identifier
        parametric_bounds: ((u_min, u_max), (v_min, v_max))
        basis_function_ids: Supported basis functions, ascending id.
            This is the local-to-global connectivity of the element.
    """
    id: int
    parametric_bounds: Tuple[Tuple[float, float], ...]
    basis_function_ids: List[int] = field(default_factory=list)

    @property
    def n_basis(self) -> int:
        """Number of basis functions supported on this element."""
        return len(self.basis_function_ids)

    @property
    def parametric_area(self) -> float:
        """
        Parametric measure of the element.

        Product of all (max - min) values; negative if the bounds
        of an odd number of directions are inverted.
        """
        area = 1.0
        for lo, hi in self.parametric_bounds:
            area *= (hi - lo)
        return area

    def gauss_point_parameters(self, direction: int, points: np.ndarray) -> np.ndarray:
        """
        Map 1D reference quadrature points on [0, 1] into this element.

        Parameters:
            direction: Parametric direction (0 or 1)
            points: Reference points in [0, 1]

        Returns:
            Parameter values inside the element's interval in `direction`
        """
        lo, hi = self.parametric_bounds[direction]
        return lo + np.asarray(points, dtype=np.float64) * (hi - lo)

    def contains_point(self, u: float, v: float,
                       domain_end: Tuple[float, float]) -> bool:
        """
        Check if (u, v) lies in the half-open rectangle [u0, u1) x [v0, v1).

        An upper bound that coincides with the domain end (u_max, v_max)
        is closed, so every point of the domain belongs to one element.
        """
        (u0, u1), (v0, v1) = self.parametric_bounds
        in_u = (u0 <= u < u1) or (u == u1 == domain_end[0])
        in_v = (v0 <= v < v1) or (v == v1 == domain_end[1])
        return in_u and in_v

    def add_basis_function(self, bf_id: int) -> None:
        """Register a supported basis function, keeping ids sorted."""
        if bf_id not in self.basis_function_ids:
            self.basis_function_ids.append(bf_id)
            self.basis_function_ids.sort()

    def __hash__(self) -> int:
        """Hash based on ID for use in sets/dicts."""
        return hash(self.id)

    def __eq__(self, other) -> bool:
        """Equality based on ID."""
        if isinstance(other, Element):
            return self.id == other.id
        return False
