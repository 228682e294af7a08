"""
Direct linear solvers for recovery systems.

Two kinds of systems appear during field recovery:

- The global L2 projection assembles a sparse, symmetric mass matrix
  over all basis functions. It is built from (row, col, value) triplets,
  exactly like a stiffness matrix, and solved with SuperLU.
- Patch recovery and interpolation solve small dense systems, one per
  basis function or one for the whole (small) basis. These go to LAPACK.

Both solvers take one right-hand side column per field component and
raise LinearSystemError instead of returning NaNs or warnings when the
system is singular.
"""

import warnings
import numpy as np
from scipy import linalg, sparse
from scipy.sparse.linalg import spsolve, MatrixRankWarning
from typing import List

from ..errors import LinearSystemError


def assemble_sparse(row_indices: List[int], col_indices: List[int],
                    values: List[float], n: int) -> sparse.csr_matrix:
    """
    Build an n x n sparse matrix from triplets.

    Duplicate (row, col) entries are summed, which is the scatter-add of
    element contributions.
    """
    return sparse.csr_matrix((values, (row_indices, col_indices)), shape=(n, n))


def solve_sparse(A: sparse.spmatrix, B: np.ndarray) -> np.ndarray:
    """
    Solve A X = B with a sparse direct solver.

    Parameters:
        A: Sparse square matrix of shape (n, n)
        B: Right-hand side of shape (n,) or (n, n_rhs)

    Returns:
        Solution with the same shape as B

    Raises:
        LinearSystemError: if A is singular or the solution is not finite
    """
    B = np.asarray(B, dtype=np.float64)
    if A.shape[0] != A.shape[1] or A.shape[0] != B.shape[0]:
        raise LinearSystemError(
            f"Incompatible system: matrix {A.shape}, right-hand side {B.shape}"
        )

    with warnings.catch_warnings():
        warnings.simplefilter("error", MatrixRankWarning)
        try:
            X = spsolve(sparse.csc_matrix(A), B, use_umfpack=False)
        except MatrixRankWarning as exc:
            raise LinearSystemError(f"Singular sparse system of size {A.shape[0]}: {exc}")
        except RuntimeError as exc:
            raise LinearSystemError(f"Sparse factorization failed: {exc}")

    X = np.asarray(X, dtype=np.float64).reshape(B.shape)
    if not np.all(np.isfinite(X)):
        raise LinearSystemError(f"Sparse system of size {A.shape[0]} has no finite solution")
    return X


def solve_dense(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """
    Solve A X = B with LU factorization (LAPACK).

    A poorly conditioned but regular matrix is solved; callers that need
    a rank guarantee check it on their own data.

    Parameters:
        A: Dense square matrix of shape (n, n)
        B: Right-hand side of shape (n,) or (n, n_rhs)

    Returns:
        Solution with the same shape as B

    Raises:
        LinearSystemError: if A is exactly singular or the solution is not finite
    """
    try:
        X = linalg.solve(A, B)
    except linalg.LinAlgError as exc:
        raise LinearSystemError(f"Singular dense system of size {A.shape[0]}: {exc}")

    if not np.all(np.isfinite(X)):
        raise LinearSystemError(f"Dense system of size {A.shape[0]} has no finite solution")
    return X
