"""
Field evaluators: the data source of every recovery method.

A field evaluator turns a set of parametric points into a matrix of
field values of shape (n_fields, n_points). The recovery methods call it
with all quadrature points of one element at a time and pass that element
along, so evaluators never have to locate points themselves.

Evaluators hold no mutable state between calls and may be called for
any points in any order.

Provided evaluators:
- FunctionEvaluator: analytic function of the physical coordinates
- SplineFieldEvaluator: field given by coefficients on the same basis
- SolutionGradientEvaluator: physical gradient of a scalar primary
  solution, the classic input of superconvergent patch recovery
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..discretization.element import Element
from ..errors import TopologyError
from ..geometry.lr_spline import LRSplineSurface


class FieldEvaluator(ABC):
    """
    Abstract source of field values at parametric points.

    Subclasses implement n_fields and _evaluate_on_element. The
    derivative order tells patch recovery how much smoothness the field
    has lost relative to the basis (0 for values, 1 for gradients).
    """

    @property
    @abstractmethod
    def n_fields(self) -> int:
        """Number of field components."""
        pass

    @property
    def derivative_order(self) -> int:
        """Derivative order of the field relative to the primary unknown."""
        return 0

    def evaluate(self, surface: LRSplineSurface, u, v,
                 element: Optional[Element] = None) -> np.ndarray:
        """
        Evaluate the field at paired parametric points.

        Parameters:
            surface: Geometry surface
            u, v: Parameter values (scalars or arrays of equal length)
            element: Element containing all points; each point is located
                separately if not given

        Returns:
            Array of shape (n_fields, n_points)
        """
        u = np.atleast_1d(np.asarray(u, dtype=np.float64))
        v = np.atleast_1d(np.asarray(v, dtype=np.float64))
        if element is not None:
            return self._evaluate_on_element(surface, element, u, v)

        values = np.zeros((self.n_fields, len(u)))
        for k in range(len(u)):
            elem = surface.mesh.find_element(u[k], v[k])
            values[:, k] = self._evaluate_on_element(surface, elem, u[k:k + 1], v[k:k + 1])[:, 0]
        return values

    @abstractmethod
    def _evaluate_on_element(self, surface: LRSplineSurface, element: Element,
                             u: np.ndarray, v: np.ndarray) -> np.ndarray:
        pass


class FunctionEvaluator(FieldEvaluator):
    """
    Analytic field f(x, y) of the physical coordinates.

    Example:
        evaluator = FunctionEvaluator(lambda x, y: (x * y, x + y), n_fields=2)
    """

    def __init__(self, func: Callable, n_fields: int = 1, derivative_order: int = 0):
        """
        Parameters:
            func: Callable f(x, y) returning a scalar or a sequence of
                n_fields values
            n_fields: Number of components returned by func
            derivative_order: Derivative order reported to patch recovery
        """
        self.func = func
        self._n_fields = n_fields
        self._derivative_order = derivative_order

    @property
    def n_fields(self) -> int:
        return self._n_fields

    @property
    def derivative_order(self) -> int:
        return self._derivative_order

    def _evaluate_on_element(self, surface, element, u, v):
        X = surface.evaluate(u, v, element)
        values = np.zeros((self.n_fields, len(u)))
        for k in range(len(u)):
            values[:, k] = np.atleast_1d(self.func(X[k, 0], X[k, 1]))
        return values


class SplineFieldEvaluator(FieldEvaluator):
    """
    Field given by its coefficients on the basis of the surface.

    Parameters:
        coefficients: Shape (n_basis,) or (n_basis, n_fields)
    """

    def __init__(self, coefficients: np.ndarray):
        coefficients = np.asarray(coefficients, dtype=np.float64)
        if coefficients.ndim == 1:
            coefficients = coefficients.reshape(-1, 1)
        self.coefficients = coefficients

    @property
    def n_fields(self) -> int:
        return self.coefficients.shape[1]

    def _evaluate_on_element(self, surface, element, u, v):
        ids, R = surface.element_basis(element, u, v)
        return self.coefficients[ids].T @ R[0]


class SolutionGradientEvaluator(FieldEvaluator):
    """
    Physical gradient (du/dx, du/dy) of a scalar solution.

    The gradient is one derivative order below the solution, so it is
    reported with derivative_order = 1. Needs a planar geometry.

    Parameters:
        solution: Solution coefficients, shape (n_basis,)
    """

    def __init__(self, solution: np.ndarray):
        self.solution = np.asarray(solution, dtype=np.float64).ravel()

    @property
    def n_fields(self) -> int:
        return 2

    @property
    def derivative_order(self) -> int:
        return 1

    def _evaluate_on_element(self, surface, element, u, v):
        if surface.dimension != 2:
            raise TopologyError(
                f"Solution gradient needs a planar geometry, got dimension {surface.dimension}"
            )
        ids, R = surface.element_basis(element, u, v, n_ders=1)
        _, jacobians, det_jac = surface.map_points(element, u, v)

        c = self.solution[ids]
        grad_param = np.vstack([c @ R[1], c @ R[2]])  # (2, n_pts)

        grad = np.zeros((2, len(u)))
        for k in range(len(u)):
            if det_jac[k] == 0.0:
                raise TopologyError(f"Singular geometric mapping in element {element.id}")
            # du/dxi = J^T grad_x u
            grad[:, k] = np.linalg.solve(jacobians[k].T, grad_param[:, k])
        return grad
