"""
LR (locally refined) B-spline and NURBS surfaces.

An LR spline surface is a collection of tensor-product B-splines, each
with its own local knot vectors, living on an LR mesh. A surface point is

    S(u, v) = sum_i R_i(u, v) * c_i

where c_i are the coefficient vectors of the basis functions and

    R_i = N_i                                  (polynomial surface)
    R_i = w_i N_i / sum_j w_j N_j              (rational surface)

The coefficient dimension is free: a geometry surface stores physical
coordinates (dimension 2 or 3), a recovered field stores one value per
field component on the same basis.

This module is read-only with respect to the spline space: it evaluates,
enumerates and copies. It does not refine.
"""

import copy
import numpy as np
from typing import List, Optional, Tuple

from ..discretization.basis_function import BasisFunction
from ..discretization.element import Element
from ..discretization.knot_vector import KnotVector
from ..discretization.mesh import Mesh, build_lr_mesh, build_tensor_basis
from ..errors import TopologyError


class LRSplineSurface:
    """
    LR spline surface over a two-dimensional parametric domain.

    Attributes:
        mesh: LR mesh owning elements and basis functions

    Properties:
        n_basis: Number of basis functions
        degrees: Polynomial degrees (p_u, p_v)
        orders: Polynomial orders (p_u + 1, p_v + 1)
        dimension: Number of coefficient components
        rational: True if any basis function has a weight != 1
    """

    def __init__(self, mesh: Mesh):
        self.mesh = mesh
        dims = {bf.dimension for bf in mesh.iter_basis_functions()}
        if len(dims) > 1:
            raise ValueError(f"Basis functions have mixed coefficient dimensions: {sorted(dims)}")

    @classmethod
    def from_basis_functions(cls, basis_functions: List[BasisFunction]) -> 'LRSplineSurface':
        """
        Create a surface from basis functions with local knot vectors.

        Parameters:
            basis_functions: Functions in canonical order (ids are reassigned)

        Returns:
            LRSplineSurface on the mesh spanned by the local knot lines
        """
        return cls(build_lr_mesh(basis_functions))

    @classmethod
    def from_knot_vectors(cls, kv_u: KnotVector, kv_v: KnotVector,
                          coefficients: np.ndarray,
                          weights: Optional[np.ndarray] = None) -> 'LRSplineSurface':
        """
        Create an unrefined (tensor-product) surface.

        Parameters:
            kv_u, kv_v: Global knot vectors
            coefficients: Shape (n_u * n_v, dim), u index varying fastest
            weights: Optional NURBS weights, shape (n_u * n_v,)

        Returns:
            LRSplineSurface with tensor-product layout
        """
        return cls.from_basis_functions(build_tensor_basis(kv_u, kv_v, coefficients, weights))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def n_basis(self) -> int:
        """Number of basis functions."""
        return self.mesh.n_basis

    @property
    def n_elements(self) -> int:
        """Number of elements."""
        return self.mesh.n_elements

    @property
    def degrees(self) -> Tuple[int, int]:
        """Polynomial degrees (p_u, p_v)."""
        return self.mesh.degrees

    @property
    def orders(self) -> Tuple[int, int]:
        """Polynomial orders (p_u + 1, p_v + 1)."""
        p_u, p_v = self.mesh.degrees
        return (p_u + 1, p_v + 1)

    @property
    def dimension(self) -> int:
        """Number of coefficient components per basis function."""
        if self.n_basis == 0:
            return 0
        return self.mesh.get_basis_function(0).dimension

    @property
    def rational(self) -> bool:
        """True if the basis is rational (some weight differs from 1)."""
        return any(bf.weight != 1.0 for bf in self.mesh.iter_basis_functions())

    @property
    def domain(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Parametric domain ((u_min, u_max), (v_min, v_max))."""
        return self.mesh.domain

    @property
    def coefficients(self) -> np.ndarray:
        """Coefficient matrix of shape (n_basis, dimension)."""
        return np.array([bf.coefficients for bf in self.mesh.iter_basis_functions()])

    @property
    def weights(self) -> np.ndarray:
        """NURBS weights, shape (n_basis,)."""
        return np.array([bf.weight for bf in self.mesh.iter_basis_functions()])

    def set_coefficients(self, coefficients: np.ndarray) -> None:
        """
        Replace all coefficients.

        Parameters:
            coefficients: Array of shape (n_basis, dimension)
        """
        coefficients = np.asarray(coefficients, dtype=np.float64)
        if coefficients.ndim == 1:
            coefficients = coefficients.reshape(-1, 1)
        if coefficients.shape != (self.n_basis, self.dimension):
            raise ValueError(
                f"Expected coefficients of shape {(self.n_basis, self.dimension)}, "
                f"got {coefficients.shape}"
            )
        for bf in self.mesh.iter_basis_functions():
            bf.coefficients = coefficients[bf.id].copy()

    def rebuild_dimension(self, dimension: int) -> None:
        """
        Reset the coefficient dimension, zeroing all coefficients.

        Parameters:
            dimension: New number of components per basis function
        """
        if dimension < 1:
            raise ValueError(f"Dimension must be positive, got {dimension}")
        for bf in self.mesh.iter_basis_functions():
            bf.coefficients = np.zeros(dimension)

    def copy(self) -> 'LRSplineSurface':
        """Deep copy sharing no state with this surface."""
        return copy.deepcopy(self)

    # -------------------------------------------------------------------------
    # Basis evaluation
    # -------------------------------------------------------------------------

    def greville_points(self) -> np.ndarray:
        """Greville points of all basis functions, shape (n_basis, 2)."""
        return np.array([bf.greville for bf in self.mesh.iter_basis_functions()])

    def element_basis(self, element: Element, u, v,
                      n_ders: int = 0) -> Tuple[List[int], np.ndarray]:
        """
        Evaluate the basis functions supported on one element.

        Parameters:
            element: Element containing the points
            u, v: Paired parameter values (scalars or arrays of equal length)
            n_ders: 0 for values, 1 to add first parametric derivatives

        Returns:
            (ids, R) where ids is the element connectivity and R has shape
            (1, n_local, n_pts) or (3, n_local, n_pts) holding
            [R] or [R, dR/du, dR/dv]
        """
        u = np.atleast_1d(np.asarray(u, dtype=np.float64))
        v = np.atleast_1d(np.asarray(v, dtype=np.float64))
        ids = element.basis_function_ids
        bounds = element.parametric_bounds

        n_rows = 1 if n_ders == 0 else 3
        N = np.zeros((n_rows, len(ids), len(u)))
        w = np.zeros(len(ids))
        for a, bf_id in enumerate(ids):
            bf = self.mesh.get_basis_function(bf_id)
            N[:, a, :] = bf.evaluate(u, v, bounds, n_ders)
            w[a] = bf.weight

        if np.all(w == 1.0):
            return ids, N

        # Rational basis: R = w N / W, derivatives by the quotient rule
        Nw = N * w[None, :, None]
        W = np.sum(Nw[0], axis=0)
        R = np.zeros_like(N)
        R[0] = Nw[0] / W
        if n_ders == 1:
            for d in (1, 2):
                dW = np.sum(Nw[d], axis=0)
                R[d] = (Nw[d] * W - Nw[0] * dW) / (W * W)
        return ids, R

    def compute_basis(self, u: float, v: float, element: Optional[Element] = None,
                      n_ders: int = 0) -> np.ndarray:
        """
        Evaluate all basis functions at a single parametric point.

        Parameters:
            u, v: Parametric coordinates
            element: Element containing the point; located if not given
            n_ders: 0 for values, 1 to add first parametric derivatives

        Returns:
            Dense array of shape (n_basis,) for n_ders=0, otherwise
            (3, n_basis) with rows [R, dR/du, dR/dv]
        """
        if element is None:
            element = self.mesh.find_element(u, v)
        ids, R = self.element_basis(element, u, v, n_ders)
        dense = np.zeros((R.shape[0], self.n_basis))
        dense[:, ids] = R[:, :, 0]
        return dense[0] if n_ders == 0 else dense

    # -------------------------------------------------------------------------
    # Geometric mapping
    # -------------------------------------------------------------------------

    def element_coordinates(self, element: Element) -> np.ndarray:
        """
        Nodal coordinates of the functions supported on an element.

        Returns:
            Array of shape (n_local, dimension)

        Raises:
            TopologyError: if the surface does not carry physical
                coordinates (dimension < 2)
        """
        if self.dimension < 2:
            raise TopologyError(
                f"Element {element.id}: surface of dimension {self.dimension} "
                f"has no physical coordinates"
            )
        return np.array([self.mesh.get_basis_function(i).coefficients
                         for i in element.basis_function_ids])

    def evaluate(self, u, v, element: Optional[Element] = None) -> np.ndarray:
        """
        Evaluate the surface at paired parameter values.

        Parameters:
            u, v: Parameter values (scalars or arrays of equal length)
            element: Element containing all points; each point is located
                separately if not given

        Returns:
            Array of shape (n_pts, dimension)
        """
        u = np.atleast_1d(np.asarray(u, dtype=np.float64))
        v = np.atleast_1d(np.asarray(v, dtype=np.float64))
        if element is not None:
            ids, R = self.element_basis(element, u, v)
            C = np.array([self.mesh.get_basis_function(i).coefficients for i in ids])
            return R[0].T @ C

        values = np.zeros((len(u), self.dimension))
        for k in range(len(u)):
            values[k] = self.evaluate(u[k], v[k], self.mesh.find_element(u[k], v[k]))[0]
        return values

    def point(self, u: float, v: float) -> np.ndarray:
        """Surface value at a single parametric point, shape (dimension,)."""
        return self.evaluate(u, v)[0]

    def map_points(self, element: Element, u, v) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Physical points, Jacobians and Jacobian determinants on an element.

        For a planar surface det J = dx/du * dy/dv - dx/dv * dy/du;
        for a surface embedded in 3D the area element |S_u x S_v| is used.

        Parameters:
            element: Element containing the points
            u, v: Paired parameter values

        Returns:
            (points, jacobians, det_jac) with shapes (n_pts, dim),
            (n_pts, dim, 2) and (n_pts,)
        """
        X = self.element_coordinates(element)
        _, R = self.element_basis(element, u, v, n_ders=1)

        points = R[0].T @ X
        jacobians = np.stack([R[1].T @ X, R[2].T @ X], axis=2)

        if X.shape[1] == 2:
            det_jac = (jacobians[:, 0, 0] * jacobians[:, 1, 1]
                       - jacobians[:, 0, 1] * jacobians[:, 1, 0])
        else:
            det_jac = np.linalg.norm(
                np.cross(jacobians[:, :3, 0], jacobians[:, :3, 1]), axis=1)

        return points, jacobians, det_jac

    def __repr__(self) -> str:
        return (f"LRSplineSurface(n_basis={self.n_basis}, n_elements={self.n_elements}, "
                f"degrees={self.degrees}, dimension={self.dimension}, "
                f"rational={self.rational})")
