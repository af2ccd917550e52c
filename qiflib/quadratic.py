"""Convex quadratic programs: minimize 1/2 x^T P x + c^T x subject to l <= A x <= u."""

from __future__ import annotations

import math
from enum import Enum

import numpy as np
from scipy import sparse
from scipy.optimize import linprog, minimize

from qiflib import probab


class Status(Enum):
    """Outcome of solving a quadratic program."""

    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    ERROR = "error"


_FEASIBILITY_TOL = 1e-6


def _dense(M) -> np.ndarray:
    if sparse.issparse(M):
        return np.asarray(M.toarray(), dtype=float)
    return np.atleast_2d(np.asarray(M, dtype=float))


class QuadraticProgram:
    """A quadratic program built variable by variable or from matrices.

    Only the upper triangle of P is stored; it is read as a symmetric matrix.
    After solve(), the optimum is in ``solution`` and its value in ``objective``.
    """

    def __init__(
        self,
        non_negative: bool = False,
        eps_abs: float = 1e-3,
        eps_rel: float = 1e-3,
        max_iter: int = 1000,
    ) -> None:
        self.non_negative = non_negative
        self.eps_abs = eps_abs
        self.eps_rel = eps_rel
        self.max_iter = max_iter
        self.status: Status | None = None
        self.solution = np.empty(0)
        self.objective = math.nan
        self.clear()

    def clear(self) -> None:
        """Remove all variables, constraints and coefficients."""
        self._obj_lin: list[float] = []
        self._obj_quad: dict[tuple[int, int], float] = {}
        self._con_coeff: dict[tuple[int, int], float] = {}
        self._con_lb: list[float] = []
        self._con_ub: list[float] = []

    @property
    def n_var(self) -> int:
        return len(self._obj_lin)

    @property
    def n_con(self) -> int:
        return len(self._con_lb)

    def from_matrix(self, P, c, A, l, u) -> None:
        """Load the whole program from P, c, A and the bounds l, u."""
        self.clear()
        P = _dense(P)
        A = _dense(A)
        c = np.asarray(c, dtype=float).ravel()
        l = np.asarray(l, dtype=float).ravel()
        u = np.asarray(u, dtype=float).ravel()
        n_con, n_var = A.shape

        if P.shape != (n_var, n_var) or c.size != n_var or l.size != n_con or u.size != n_con:
            raise ValueError("invalid size")

        self._obj_lin = [float(v) for v in c]
        self._con_lb = [float(v) for v in l]
        self._con_ub = [float(v) for v in u]

        # column-major order over the non-zero entries
        cols, rows = np.nonzero(P.T)
        for col, row in zip(cols, rows):
            self.set_quad_coeff(int(row), int(col), P[row, col])
        cols, rows = np.nonzero(A.T)
        for col, row in zip(cols, rows):
            self.set_con_coeff(int(row), int(col), A[row, col])

    def make_var(self) -> int:
        """Add a variable and return its index."""
        self._obj_lin.append(0.0)
        return len(self._obj_lin) - 1

    def make_vars(self, n: int, m: int | None = None) -> list:
        """Add n variables, or an n x m table of them when m is given."""
        if m is None:
            return [self.make_var() for _ in range(n)]
        return [[self.make_var() for _ in range(m)] for _ in range(n)]

    def make_con(self, lb: float, ub: float) -> int:
        """Add a constraint lb <= (row) x <= ub and return its index."""
        lb, ub = float(lb), float(ub)
        if ub == math.inf and lb == -math.inf:
            raise ValueError("trying to add unconstrained constraint")
        self._con_lb.append(lb)
        self._con_ub.append(ub)
        return len(self._con_lb) - 1

    def set_obj_coeff(self, var: int, coeff: float, add: bool = False) -> None:
        """Set (or add to) the linear objective coefficient of var."""
        if add:
            self._obj_lin[var] += float(coeff)
        else:
            self._obj_lin[var] = float(coeff)

    def set_quad_coeff(self, var1: int, var2: int, coeff: float, add: bool = False) -> None:
        """Set (or add to) the entry of P for the pair var1, var2."""
        if probab.approx_equal(coeff, 0.0):
            return
        key = (min(var1, var2), max(var1, var2))
        if add and key in self._obj_quad:
            self._obj_quad[key] += float(coeff)
        else:
            self._obj_quad[key] = float(coeff)

    def set_con_coeff(self, con: int, var: int, coeff: float, add: bool = False) -> None:
        """Set (or add to) the coefficient of var in constraint con."""
        if probab.approx_equal(coeff, 0.0):
            return
        key = (con, var)
        if add and key in self._con_coeff:
            self._con_coeff[key] += float(coeff)
        else:
            self._con_coeff[key] = float(coeff)

    def value(self, var: int) -> float:
        """The value of var in the computed solution."""
        return float(self.solution[var])

    def _matrices(self):
        n, m = self.n_var, self.n_con
        P = np.zeros((n, n))
        for (i, j), v in self._obj_quad.items():
            P[i, j] = v
            P[j, i] = v
        A = np.zeros((m, n))
        for (con, var), v in self._con_coeff.items():
            A[con, var] = v
        return P, np.array(self._obj_lin, dtype=float), A, np.array(self._con_lb), np.array(self._con_ub)

    def _fail(self, status: Status) -> bool:
        self.status = status
        self.solution = np.empty(0)
        self.objective = math.nan
        return False

    def solve(self) -> bool:
        """Solve the program; True if an optimal solution was found."""
        P, c, A, lb, ub = self._matrices()
        n = self.n_var

        if n == 0:
            if np.all(lb <= 0.0) and np.all(ub >= 0.0):
                self.status = Status.OPTIMAL
                self.solution = np.empty(0)
                self.objective = 0.0
                return True
            return self._fail(Status.INFEASIBLE)

        eq = lb == ub
        upper = ~eq & np.isfinite(ub)
        lower = ~eq & np.isfinite(lb)
        A_eq, b_eq = A[eq], lb[eq]
        A_ub = np.vstack([A[upper], -A[lower]])
        b_ub = np.concatenate([ub[upper], -lb[lower]])
        var_bounds = [(0.0, None) if self.non_negative else (None, None)] * n

        def opt(arr):
            return arr if arr.shape[0] else None

        feas = linprog(
            np.zeros(n),
            A_ub=opt(A_ub), b_ub=b_ub if A_ub.shape[0] else None,
            A_eq=opt(A_eq), b_eq=b_eq if A_eq.shape[0] else None,
            bounds=var_bounds, method="highs",
        )
        if feas.status == 2:
            return self._fail(Status.INFEASIBLE)
        if feas.status != 0:
            return self._fail(Status.ERROR)

        # unbounded below iff some recession direction d has P d = 0 and c.d < 0
        rec_eq = np.vstack([P, A_eq])
        rec = linprog(
            c,
            A_ub=opt(A_ub), b_ub=np.zeros(A_ub.shape[0]) if A_ub.shape[0] else None,
            A_eq=rec_eq, b_eq=np.zeros(rec_eq.shape[0]),
            bounds=[(0.0, 1.0) if self.non_negative else (-1.0, 1.0)] * n,
            method="highs",
        )
        if rec.status == 0 and rec.fun < -1e-9:
            return self._fail(Status.INFEASIBLE)

        def fun(x):
            return 0.5 * float(x @ P @ x) + float(c @ x)

        def jac(x):
            return P @ x + c

        constraints = []
        if A_eq.shape[0]:
            constraints.append({"type": "eq", "fun": lambda x: A_eq @ x - b_eq, "jac": lambda x: A_eq})
        if A_ub.shape[0]:
            constraints.append({"type": "ineq", "fun": lambda x: b_ub - A_ub @ x, "jac": lambda x: -A_ub})

        res = minimize(
            fun, feas.x, jac=jac, method="SLSQP",
            bounds=var_bounds if self.non_negative else None,
            constraints=constraints,
            options={"maxiter": self.max_iter, "ftol": 1e-12},
        )
        x = res.x
        violation = 0.0
        if A_eq.shape[0]:
            violation = max(violation, float(np.max(np.abs(A_eq @ x - b_eq))))
        if A_ub.shape[0]:
            violation = max(violation, float(np.max(A_ub @ x - b_ub)))
        if self.non_negative:
            violation = max(violation, float(-np.min(x)))

        if not np.all(np.isfinite(x)) or violation > _FEASIBILITY_TOL:
            return self._fail(Status.ERROR)
        if not res.success and res.status != 8:
            return self._fail(Status.ERROR)

        self.status = Status.OPTIMAL
        self.solution = np.array(x, dtype=float)
        self.objective = fun(x)
        return True