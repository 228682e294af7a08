"""
Parametric sample sets for recovery.

- greville_parameters: one parametric coordinate per basis function,
  in canonical basis function order
- expand_tensor_grid: structured per-direction coordinates to an
  unstructured list of points
"""

import numpy as np
from typing import Optional, Sequence, Tuple

from ..errors import ConfigurationError
from ..geometry.lr_spline import LRSplineSurface


def greville_parameters(surface: Optional[LRSplineSurface], direction: int) -> np.ndarray:
    """
    Greville coordinates of all basis functions in one direction.

    Parameters:
        surface: Spline surface
        direction: Parametric direction, 0 (u) or 1 (v)

    Returns:
        Array of length n_basis

    Raises:
        ConfigurationError: if the surface is missing or direction is invalid
    """
    if surface is None:
        raise ConfigurationError("No surface to sample Greville points from")
    if direction not in (0, 1):
        raise ConfigurationError(f"Invalid parametric direction {direction}, expected 0 or 1")

    return np.array([bf.greville[direction] for bf in surface.mesh.iter_basis_functions()],
                    dtype=np.float64)


def expand_tensor_grid(coords_u: Sequence[float],
                       coords_v: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Flatten a tensor grid into paired coordinate arrays.

    For inputs of length m and n the outputs have length m*n and the
    first direction varies fastest:

        out_u[i*m + k] = coords_u[k]
        out_v[i*m + k] = coords_v[i]

    Example:
        >>> expand_tensor_grid([0, 1, 2], [2, 3, 5])
        (array([0., 1., 2., 0., 1., 2., 0., 1., 2.]),
         array([2., 2., 2., 3., 3., 3., 5., 5., 5.]))
    """
    coords_u = np.asarray(coords_u, dtype=np.float64)
    coords_v = np.asarray(coords_v, dtype=np.float64)
    return np.tile(coords_u, len(coords_v)), np.repeat(coords_v, len(coords_u))
