"""
B-spline evaluation on local knot vectors.

In an LR spline every basis function carries its own local knot vector
of length p+2 in each parametric direction. The univariate factor is the
single B-spline defined by those knots, evaluated with the Cox-de Boor
recursion

    N_{j,0}(xi) = 1 on the j-th knot interval, else 0

    N_{j,k}(xi) = (xi - t_j)/(t_{j+k} - t_j) * N_{j,k-1}(xi)
                + (t_{j+k+1} - xi)/(t_{j+k+1} - t_{j+1}) * N_{j+1,k-1}(xi)

with the convention 0/0 = 0 for repeated knots.

Which degree-0 indicator is non-zero is decided by the element interval
the point belongs to, not by the point itself. Evaluating on the element
keeps one-sided values and derivatives consistent on element boundaries.

Properties:
- Local support: non-zero only on [t_0, t_{p+1}]
- Non-negativity
- The first derivative is p * (N_{0,p-1}/(t_p - t_0) - N_{1,p-1}/(t_{p+1} - t_1))
"""

import numpy as np
from typing import Tuple


def _safe_ratio(num: np.ndarray, den: float) -> np.ndarray:
    """num/den with 0/0 = 0 for repeated knots."""
    if den == 0.0:
        return np.zeros_like(num)
    return num / den


def eval_local_basis(knots: np.ndarray, xi: np.ndarray,
                     interval: Tuple[float, float],
                     n_ders: int = 0) -> np.ndarray:
    """
    Evaluate one B-spline given by its local knot vector.

    Parameters:
        knots: Local knot vector of length p+2
        xi: Parameter values (scalar or array), all inside `interval`
        interval: (lo, hi) element interval containing the points
        n_ders: 0 for values only, 1 to add first derivatives

    Returns:
        Array of shape (n_ders+1, n_points); row 0 holds values,
        row 1 (if requested) first derivatives
    """
    if n_ders not in (0, 1):
        raise ValueError(f"Only values and first derivatives supported, got n_ders={n_ders}")

    t = np.asarray(knots, dtype=np.float64)
    x = np.atleast_1d(np.asarray(xi, dtype=np.float64))
    p = len(t) - 2
    lo, hi = interval

    # Degree 0: the single knot interval that contains the element
    N = np.zeros((p + 1, len(x)))
    for j in range(p + 1):
        if t[j] < t[j + 1] and t[j] <= lo and hi <= t[j + 1]:
            N[j, :] = 1.0
            break

    result = np.zeros((n_ders + 1, len(x)))
    if not N.any():
        return result

    lower = N
    for k in range(1, p + 1):
        lower = N
        N = np.zeros((p + 1 - k, len(x)))
        for j in range(p + 1 - k):
            N[j] = (_safe_ratio(x - t[j], t[j + k] - t[j]) * lower[j]
                    + _safe_ratio(t[j + k + 1] - x, t[j + k + 1] - t[j + 1]) * lower[j + 1])

    result[0] = N[0]

    if n_ders == 1 and p > 0:
        # lower holds the two degree p-1 functions
        result[1] = p * (_safe_ratio(lower[0], t[p] - t[0])
                         - _safe_ratio(lower[1], t[p + 1] - t[1]))

    return result


def greville_coordinate(knots: np.ndarray) -> float:
    """
    Greville abscissa of a single local knot vector.

    The average of the p interior knots; for degree 0 (no interior
    knots) the midpoint of the support.
    """
    t = np.asarray(knots, dtype=np.float64)
    p = len(t) - 2
    if p == 0:
        return 0.5 * (t[0] + t[1])
    return float(np.sum(t[1:p + 1]) / p)
