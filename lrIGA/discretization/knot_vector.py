"""
Global knot vectors for seeding unrefined LR meshes.

An LR spline stores a local knot vector per basis function. A global
knot vector is only needed to create the unrefined (tensor-product)
starting point: with n = len(knots) - p - 1 basis functions, function i
receives the p+2 consecutive knots

    local_knots(i) = knots[i : i + p + 2]

Elements are the knot spans of positive length; repeated interior knots
lower the continuity but add no element.
"""

import numpy as np
from typing import Iterator, List, Tuple
from dataclasses import dataclass

from ..geometry.bspline import greville_coordinate


@dataclass
class KnotVector:
    """
    Non-decreasing knot sequence with a polynomial degree.

    Attributes:
        knots: Knot values
        degree: Polynomial degree p
    """
    knots: np.ndarray
    degree: int

    def __post_init__(self):
        self.knots = np.asarray(self.knots, dtype=np.float64)
        if self.degree < 0:
            raise ValueError(f"Degree must be non-negative, got {self.degree}")
        if len(self.knots) < 2 * (self.degree + 1):
            raise ValueError(
                f"Degree {self.degree} needs at least {2 * (self.degree + 1)} knots, "
                f"got {len(self.knots)}"
            )
        if np.any(np.diff(self.knots) < 0):
            raise ValueError("Knots must be non-decreasing")

    @property
    def n_basis(self) -> int:
        return len(self.knots) - self.degree - 1

    @property
    def unique_knots(self) -> np.ndarray:
        """Breakpoints (distinct knot values)."""
        return np.unique(self.knots)

    @property
    def elements(self) -> List[Tuple[float, float]]:
        """Knot spans of positive length as (start, end) pairs."""
        breaks = self.unique_knots
        return [(float(a), float(b)) for a, b in zip(breaks[:-1], breaks[1:])]

    @property
    def n_elements(self) -> int:
        return len(self.unique_knots) - 1

    @property
    def domain(self) -> Tuple[float, float]:
        return (float(self.knots[0]), float(self.knots[-1]))

    def local_knots(self, i: int) -> np.ndarray:
        """
        Local knot vector of basis function i.

        Raises:
            IndexError: if i is not in 0..n_basis-1
        """
        if not 0 <= i < self.n_basis:
            raise IndexError(f"Basis index {i} out of range [0, {self.n_basis})")
        return self.knots[i:i + self.degree + 2].copy()

    def iter_local_knots(self) -> Iterator[np.ndarray]:
        """Local knot vectors of all basis functions in index order."""
        for i in range(self.n_basis):
            yield self.local_knots(i)

    def greville_abscissae(self) -> np.ndarray:
        """Greville abscissa of every basis function (span midpoint for p = 0)."""
        return np.array([greville_coordinate(t) for t in self.iter_local_knots()])


def make_open_knot_vector(n_basis: int, degree: int,
                          domain: Tuple[float, float] = (0.0, 1.0)) -> KnotVector:
    """
    Open (clamped) knot vector with uniformly spaced interior knots.

    Parameters:
        n_basis: Number of basis functions
        degree: Polynomial degree p
        domain: Parametric domain (start, end)

    Returns:
        KnotVector with p+1 repeated knots at both ends
    """
    n_spans = n_basis - degree
    if n_spans < 1:
        raise ValueError(
            f"Cannot create knot vector: n_basis={n_basis} too small for degree={degree}"
        )

    a, b = domain
    breaks = np.linspace(a, b, n_spans + 1)
    knots = np.concatenate([np.full(degree, a), breaks, np.full(degree, b)])
    return KnotVector(knots, degree)


def make_uniform_knot_vector(n_elements: int, degree: int,
                             domain: Tuple[float, float] = (0.0, 1.0)) -> KnotVector:
    """Open uniform knot vector with n_elements spans (n_elements + p functions)."""
    if n_elements < 1:
        raise ValueError("Need at least one element")
    return make_open_knot_vector(n_elements + degree, degree, domain)
