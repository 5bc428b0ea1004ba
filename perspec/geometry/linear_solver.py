"""
Dense linear system solver.

Solves ``A x = b`` by Gaussian elimination with partial pivoting followed by
back substitution on the augmented matrix ``[A | b]``.  The homography
estimator always calls it with the 8 x 8 DLT system, but nothing here
depends on that size.

The solver is strict: a pivot below ``PIVOT_EPSILON`` anywhere, or a
non-finite unknown during back substitution, aborts the whole solve.  No
partial solution is ever returned.
"""

import logging

import numpy as np

from perspec.geometry.errors import NonFiniteSolutionError, SingularSystemError

logger = logging.getLogger(__name__)

PIVOT_EPSILON = 1e-10


def solve_linear_system(A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve the square system ``A x = b``.

    Parameters
    ----------
    A : np.ndarray
        n x n coefficient matrix.
    b : np.ndarray
        Right-hand side of length n.

    Returns
    -------
    x : np.ndarray
        Solution vector of length n; every entry is finite.

    Raises
    ------
    SingularSystemError
        If the largest candidate pivot in a column, or a diagonal entry met
        during back substitution, has magnitude below ``PIVOT_EPSILON``.
    NonFiniteSolutionError
        If an unknown evaluates to NaN or infinity.
    """
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float).reshape(-1)
    n = A.shape[0]
    if A.shape != (n, n) or b.shape != (n,):
        raise ValueError(f"expected an n x n system, got A{A.shape} and b{b.shape}")

    # Augmented matrix [A | b]
    aug = np.empty((n, n + 1), dtype=float)
    aug[:, :n] = A
    aug[:, n] = b

    # Overflow in intermediate rows shows up as a non-finite unknown below
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        for i in range(n):
            column = np.abs(aug[i:, i])
            max_row = i + int(np.argmax(column))
            max_val = column[max_row - i]

            if max_val < PIVOT_EPSILON:
                logger.debug("Matrix is nearly singular at column %d "
                             "(pivot %.3e)", i, max_val)
                raise SingularSystemError(f"pivot below epsilon in column {i}")

            if max_row != i:
                aug[[i, max_row]] = aug[[max_row, i]]

            for j in range(i + 1, n):
                factor = aug[j, i] / aug[i, i]
                aug[j, i:] -= factor * aug[i, i:]

        x = np.zeros(n, dtype=float)
        for i in range(n - 1, -1, -1):
            if abs(aug[i, i]) < PIVOT_EPSILON:
                logger.debug("Zero pivot encountered in row %d", i)
                raise SingularSystemError(f"zero pivot in row {i}")

            x[i] = (aug[i, n] - aug[i, i + 1:n] @ x[i + 1:]) / aug[i, i]

            if not np.isfinite(x[i]):
                logger.debug("Invalid result detected for unknown %d", i)
                raise NonFiniteSolutionError(f"unknown {i} is not finite")

    return x
