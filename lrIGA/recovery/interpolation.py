"""
Interpolation of point values by the spline basis.

Given one parametric sample point per basis function and field values
at those points, the coefficients x solve the square system

    A x = values,   A[i, j] = N_j(u_i, v_i)

With the Greville points as samples the system is non-singular for
regular LR meshes. The result is a copy of the input surface whose
coefficient dimension equals the number of field components.

Rational bases are not supported here.
"""

import logging
import numpy as np
from typing import Optional

from ..errors import ConfigurationError, SizeMismatch, fail_safe
from ..geometry.lr_spline import LRSplineSurface
from ..solver.linear import solve_dense
from .evaluator import FieldEvaluator
from .sampling import greville_parameters


_LOGGER = logging.getLogger(__name__)


def interpolate(surface: LRSplineSurface, upar, vpar, values) -> LRSplineSurface:
    """
    Interpolate point values with the basis of a surface.

    Parameters:
        surface: Surface whose basis is used (not modified)
        upar, vpar: Parameters of the sample points, length n_basis
        values: Field values of shape (n_fields, n_basis)

    Returns:
        New surface with dimension n_fields and the solved coefficients

    Raises:
        ConfigurationError: for a missing or rational surface
        SizeMismatch: if any array length differs from n_basis
        LinearSystemError: if the interpolation matrix is singular
    """
    if surface is None:
        raise ConfigurationError("No surface to interpolate with")
    if surface.rational:
        raise ConfigurationError("Interpolation with a rational basis is not supported")

    upar = np.asarray(upar, dtype=np.float64).ravel()
    vpar = np.asarray(vpar, dtype=np.float64).ravel()
    values = np.asarray(values, dtype=np.float64)
    if values.ndim == 1:
        values = values.reshape(1, -1)

    n_basis = surface.n_basis
    if len(upar) != n_basis:
        raise SizeMismatch("u parameters", n_basis, len(upar))
    if len(vpar) != n_basis:
        raise SizeMismatch("v parameters", n_basis, len(vpar))
    if values.shape[1] != n_basis:
        raise SizeMismatch("sample values", n_basis, values.shape[1])

    A = np.zeros((n_basis, n_basis))
    for i in range(n_basis):
        A[i, :] = surface.compute_basis(upar[i], vpar[i])

    coeffs = solve_dense(A, values.T)
    _LOGGER.debug("Interpolated %d component(s) on %d basis functions",
                  values.shape[0], n_basis)

    return make_field_surface(surface, coeffs.T)


def make_field_surface(surface: LRSplineSurface, coefficients: np.ndarray) -> LRSplineSurface:
    """
    Copy of a surface carrying field coefficients.

    Parameters:
        surface: Source surface (not modified)
        coefficients: Shape (n_fields, n_basis)

    Returns:
        New surface with dimension n_fields
    """
    coefficients = np.asarray(coefficients, dtype=np.float64)
    if coefficients.ndim == 1:
        coefficients = coefficients.reshape(1, -1)
    if coefficients.shape[1] != surface.n_basis:
        raise SizeMismatch("field coefficients", surface.n_basis, coefficients.shape[1])

    field = surface.copy()
    field.rebuild_dimension(coefficients.shape[0])
    field.set_coefficients(coefficients.T)
    return field


@fail_safe
def regular_interpolation(surface: LRSplineSurface, upar, vpar,
                          values) -> Optional[LRSplineSurface]:
    """
    Interpolate point values; None on failure.

    See interpolate() for the parameters.
    """
    return interpolate(surface, upar, vpar, values)


@fail_safe
def project_solution(surface: LRSplineSurface,
                     evaluator: FieldEvaluator) -> Optional[LRSplineSurface]:
    """
    Project a field by interpolation at the Greville points.

    The field is evaluated once at all Greville points and interpolated.

    Parameters:
        surface: Geometry surface
        evaluator: Field to project

    Returns:
        New surface carrying the field, or None on failure
    """
    gpar_u = greville_parameters(surface, 0)
    gpar_v = greville_parameters(surface, 1)
    values = evaluator.evaluate(surface, gpar_u, gpar_v)
    return interpolate(surface, gpar_u, gpar_v, values)
