"""Refinement between channels: deciding whether one channel can never leak more than another."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from itertools import permutations

import numpy as np
from scipy.optimize import linprog

from qiflib import channel, probab
from qiflib.measure import d_privacy
from qiflib.quadratic import QuadraticProgram

_QP_EPS = 1e-5


@dataclass
class RefinementResult:
    """Outcome of a refinement check by projection.

    ``gain`` is a counter-example gain function (one row per output of B, one
    column per secret, values in [0, 1]) when B does not refine A, and empty
    otherwise. ``remap`` is the channel R minimizing the euclidean distance
    between A R and B; when ``refined`` holds, A R = B.
    """

    refined: bool
    gain: np.ndarray = field(default_factory=lambda: np.empty((0, 0)))
    remap: np.ndarray = field(default_factory=lambda: np.empty((0, 0)))

    def __bool__(self) -> bool:
        return self.refined


def refined_by(A, B) -> bool:
    """True if A is refined by B, i.e. B = A X for some channel X."""
    X = channel.factorize(B, A)
    return X.size > 0


def refine_with_witness(A, B) -> RefinementResult:
    """Decide refinement by projecting B onto { A R | R a channel } with a quadratic program."""
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if A.shape[0] != B.shape[0]:
        raise ValueError("invalid sizes")

    c_rows, c_cols = B.shape
    r_rows, r_cols = A.shape[1], B.shape[1]

    # minimize |C - B|^2 = C.C - 2 B.C + B.B over C = A R, R a channel
    qp = QuadraticProgram(eps_abs=_QP_EPS, eps_rel=_QP_EPS)
    c_vars = qp.make_vars(c_rows, c_cols)
    r_vars = qp.make_vars(r_rows, r_cols)

    for x in range(c_rows):
        for z in range(c_cols):
            con = qp.make_con(0.0, 0.0)
            qp.set_con_coeff(con, c_vars[x][z], 1.0)
            for y in range(r_rows):
                qp.set_con_coeff(con, r_vars[y][z], -A[x, y])

    for y in range(r_rows):
        for z in range(r_cols):
            con = qp.make_con(0.0, 1.0)
            qp.set_con_coeff(con, r_vars[y][z], 1.0)
        con = qp.make_con(1.0, 1.0)
        for z in range(r_cols):
            qp.set_con_coeff(con, r_vars[y][z], 1.0)

    for x in range(c_rows):
        for z in range(c_cols):
            qp.set_quad_coeff(c_vars[x][z], c_vars[x][z], 2.0)
            qp.set_obj_coeff(c_vars[x][z], -2.0 * B[x, z])

    if not qp.solve():
        raise RuntimeError("refine_with_witness: QP infeasible, this shouldn't happen")

    dist = qp.objective + float(np.sum(B * B))
    refined = probab.approx_equal(dist, 0.0, qp.eps_abs, qp.eps_rel)

    C = np.array([[qp.value(v) for v in row] for row in c_vars]).reshape(c_rows, c_cols)
    R = np.array([[qp.value(v) for v in row] for row in r_vars]).reshape(r_rows, r_cols)

    if refined:
        G = np.empty((0, 0))
    else:
        G = (B - C).T.copy()
        G -= G.min()
        top = G.max()
        if top > 0:
            G /= top

    return RefinementResult(refined, G, R)


def max_refined_by(A, B) -> bool:
    """True if A is max-case refined by B."""
    An = channel.normalize(np.asarray(A, dtype=float).T)
    Bn = channel.normalize(np.asarray(B, dtype=float).T)
    X = channel.left_factorize(Bn, An)
    return X.size > 0


def _mult_total_variation(a: np.ndarray, b: np.ndarray) -> float:
    res = 0.0
    for u, v in zip(a, b):
        if u == v:
            continue
        if u <= 0 or v <= 0:
            return math.inf
        res = max(res, abs(math.log(u) - math.log(v)))
    return res


def priv_refined_by(A, B) -> bool:
    """True if every d-privacy guarantee of A also holds for B."""
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if A.shape[0] != B.shape[0]:
        raise ValueError("invalid sizes")
    distances = {
        (x1, x2): _mult_total_variation(A[x1], A[x2])
        for x1, x2 in permutations(range(A.shape[0]), 2)
    }

    def d_A(x1: int, x2: int) -> float:
        return 0.0 if x1 == x2 else distances[(x1, x2)]

    return d_privacy.is_private(B, d_A)


def add_metric(pi, A, B) -> tuple[float, np.ndarray]:
    """The additive refinement metric between A and B on prior pi, over 1-bounded gains.

    Returns the value and a gain function reaching it: one row per column of
    A, then of B, plus a final all-zero row; one column per secret.
    """
    pi = np.asarray(pi, dtype=float)
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if pi.size != A.shape[0] or A.shape[0] != B.shape[0]:
        raise ValueError("invalid sizes")

    AB = np.hstack([A, B])
    K, M = A.shape
    N = B.shape[1]
    n_vars = (M + N) * K

    def var(y: int, x: int) -> int:
        return y * K + x

    objective = np.zeros(n_vars)
    for y in range(M + N):
        sign = -1.0 if y < M else 1.0
        for x in range(K):
            objective[var(y, x)] = sign * pi[x] * AB[x, y]

    rows = []
    for y in range(M):
        weights = pi * AB[:, y]
        for w in range(M + N):
            if w == y:
                continue
            row = np.zeros(n_vars)
            for x in range(K):
                row[var(y, x)] += weights[x]
                row[var(w, x)] -= weights[x]
            rows.append(-row)
    for y in range(M):
        row = np.zeros(n_vars)
        for x in range(K):
            row[var(y, x)] = pi[x] * AB[x, y]
        rows.append(-row)

    res = linprog(
        -objective,
        A_ub=np.vstack(rows) if rows else None,
        b_ub=np.zeros(len(rows)) if rows else None,
        bounds=(None, 1.0),
        method="highs",
    )
    if res.status != 0:
        raise RuntimeError("add_metric: LP infeasible, this shouldn't happen")

    G = np.zeros((M + N + 1, K))
    G[: M + N] = res.x.reshape(M + N, K)
    return float(-res.fun), G