"""
Sparse Linear System
====================

Symmetric sparse system accumulated coefficient by coefficient and solved
with Jacobi-preconditioned conjugate gradients.
"""

import numpy as np
from scipy.sparse import lil_matrix
from scipy.sparse.linalg import cg, LinearOperator
from typing import Optional


class SparseLinearSystem:
    """
    Symmetric positive definite system K V = b.

    Attributes:
        n: number of unknowns
        bandwidth: largest node index difference across an element edge,
            plus one (informational)
        K: lil_matrix, shape (n, n)
        b: right-hand side, shape (n,)
        V: on input, prescribed values (negative for unconstrained);
            after solve(), the solution
        n_iterations: CG iterations used by the last solve
    """

    def __init__(self, n: int, bandwidth: int = 0,
                 tol: float = 1e-10, max_iter: Optional[int] = None):
        """
        Create an empty system.

        Args:
            n: number of unknowns
            bandwidth: matrix bandwidth
            tol: relative residual tolerance
            max_iter: CG iteration cap (None for scipy's default)
        """
        if n <= 0:
            raise ValueError(f"System size must be positive, got {n}")
        self.n = n
        self.bandwidth = bandwidth
        self.tol = tol
        self.max_iter = max_iter

        self.K = lil_matrix((n, n))
        self.b = np.zeros(n)
        self.V = np.full(n, -1.0)
        self.n_iterations = 0

    def get(self, row: int, col: int) -> float:
        """Coefficient at (row, col)."""
        return self.K[row, col]

    def put(self, value: float, row: int, col: int) -> None:
        """Set the symmetric pair of coefficients at (row, col) and (col, row)."""
        self.K[row, col] = value
        if row != col:
            self.K[col, row] = value

    def solve(self) -> bool:
        """
        Solve the system, overwriting V with the solution.

        Rows without any coefficient (nodes in no element) keep their
        prescribed value, or 0 when free.

        Returns:
            True if CG converged
        """
        A = self.K.tocsr()
        diag = A.diagonal()
        empty = diag == 0
        if np.any(empty):
            A = A.tolil()
            for i in np.nonzero(empty)[0]:
                A[i, i] = 1.0
            A = A.tocsr()
            diag = A.diagonal()
            self.b[empty] = np.where(self.V[empty] >= 0, self.V[empty], 0.0)

        inv_diag = 1.0 / diag
        M = LinearOperator((self.n, self.n), matvec=lambda r: inv_diag * r)

        iterations = [0]

        def count(_):
            iterations[0] += 1

        x, info = cg(A, self.b, rtol=self.tol, atol=0.0,
                     maxiter=self.max_iter, M=M, callback=count)
        self.n_iterations = iterations[0]

        if info != 0:
            return False

        self.V = x
        return True
