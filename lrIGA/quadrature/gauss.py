"""
Gauss-Legendre quadrature tables.

n points integrate exactly polynomials up to degree 2n-1. The reference
interval is [0, 1], so the weights of every rule sum to one and an element
integral is scaled by the element's parametric area.

The recovery operations never call the module-level rule directly. They
receive a GaussQuadratureTable, a side-effect free lookup object with a
finite set of supported orders. Asking for an order outside the table raises
QuadratureUnavailable, which lets tests exercise that failure with a
synthetic small table.

Usage:
    points, weights = gauss_legendre_1d(n)   # rule on [0, 1]

    table = GaussQuadratureTable(max_points=10)
    points, weights = table.get(3)
"""

import numpy as np
from typing import Tuple
from functools import lru_cache

from ..errors import QuadratureUnavailable


@lru_cache(maxsize=16)
def gauss_legendre_1d(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gauss-Legendre quadrature points and weights on [0, 1].

    Parameters:
        n: Number of quadrature points

    Returns:
        (points, weights) where:
        - points: Array of n quadrature points in [0, 1]
        - weights: Array of n quadrature weights (sum to 1)
    """
    if n < 1:
        raise ValueError("Need at least 1 quadrature point")

    # Standard Gauss points on [-1, 1]
    points_std, weights_std = np.polynomial.legendre.leggauss(n)

    # Map to [0, 1]: x = (xi + 1) / 2, dx = 1/2 * dxi
    points = 0.5 * (points_std + 1.0)
    weights = 0.5 * weights_std

    return points.copy(), weights.copy()


class GaussQuadratureTable:
    """
    Lookup of 1D Gauss-Legendre rules on [0, 1] for a bounded set of orders.

    Attributes:
        max_points: Largest supported number of points per direction
    """

    def __init__(self, max_points: int = 10):
        if max_points < 1:
            raise ValueError("max_points must be at least 1")
        self.max_points = max_points

    def supports(self, n: int) -> bool:
        """True if a rule with n points is available."""
        return 1 <= n <= self.max_points

    def get(self, n: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Points and weights of the n-point rule.

        Parameters:
            n: Number of quadrature points

        Returns:
            (points, weights), copies owned by the caller

        Raises:
            QuadratureUnavailable: if n is outside 1..max_points
        """
        if not self.supports(n):
            raise QuadratureUnavailable(n, self.max_points)
        points, weights = gauss_legendre_1d(n)
        return points.copy(), weights.copy()

    def __repr__(self) -> str:
        return f"GaussQuadratureTable(max_points={self.max_points})"
