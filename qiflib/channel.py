"""Channels: row-stochastic matrices mapping secrets (rows) to observations (columns)."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Callable, Sequence

import numpy as np
from scipy.optimize import linprog

from qiflib import probab
from qiflib.probab import DEF_MD, DEF_MRD


def _empty() -> np.ndarray:
    return np.empty((0, 0))


def from_string(text: str) -> np.ndarray:
    """Parse a matrix written as rows separated by ';'."""
    rows = [probab.from_string(r) for r in text.split(";") if r.strip()]
    if not rows:
        return _empty()
    if len({r.size for r in rows}) != 1:
        raise ValueError("rows of different length")
    return np.vstack(rows)


def normalize(C: np.ndarray) -> np.ndarray:
    """Scale every row of C so that it sums to 1."""
    arr = np.asarray(C, dtype=float)
    return arr / arr.sum(axis=1, keepdims=True)


def identity(n: int) -> np.ndarray:
    """The n x n identity channel."""
    return np.eye(n)


def no_interference(n: int, cols: int = 1) -> np.ndarray:
    """A channel with n rows that always outputs the first column."""
    C = np.zeros((n, cols))
    if cols:
        C[:, 0] = 1.0
    return C


def randu(n: int, m: int = 0, rng: np.random.Generator | None = None) -> np.ndarray:
    """A random n x m channel (square if m is 0), each row uniform on the simplex."""
    if m == 0:
        m = n
    rng = rng if rng is not None else np.random.default_rng()
    C = np.zeros((n, m))
    for row in C:
        row[:] = probab.randu(m, rng)
    return C


def deterministic(
    mapping: Sequence[int] | Callable[[int], int],
    n_cols: int,
    n_rows: int | None = None,
) -> np.ndarray:
    """The channel sending each row x with certainty to column mapping(x).

    The mapping is either a sequence (one column per row) or a function, in
    which case n_rows must be given.
    """
    if callable(mapping):
        if n_rows is None:
            raise ValueError("n_rows is needed when mapping is a function")
        targets = [mapping(x) for x in range(n_rows)]
    else:
        targets = [int(t) for t in mapping]
    C = np.zeros((len(targets), n_cols))
    for x, y in enumerate(targets):
        C[x, y] = 1.0
    return C


def is_proper(C: np.ndarray, mrd: float = DEF_MRD) -> bool:
    """True if every row of C is a proper distribution."""
    return all(probab.is_proper(row, mrd) for row in np.asarray(C, dtype=float))


def assert_proper(C: np.ndarray) -> None:
    """Raise ValueError unless C is a proper channel."""
    if not is_proper(C):
        raise ValueError("not a proper matrix")


def check_prior_size(pi: np.ndarray, C: np.ndarray) -> None:
    """Raise ValueError if the prior does not match the rows of C."""
    if np.asarray(C).shape[0] != np.asarray(pi).size:
        raise ValueError("invalid prior size")


def equal(A: np.ndarray, B: np.ndarray, md: float = DEF_MD, mrd: float = DEF_MRD) -> bool:
    """Element-wise approximate equality of two matrices of the same shape."""
    return probab.equal(A, B, md, mrd)


def compare_columns(A: np.ndarray, j1: int, j2: int) -> int:
    """Lexicographic comparison of two columns: -1, 0 or 1."""
    for a, b in zip(A[:, j1], A[:, j2]):
        if probab.less_than(a, b):
            return -1
        if probab.less_than(b, a):
            return 1
    return 0


def posterior(C: np.ndarray, pi: np.ndarray, y: int) -> np.ndarray:
    """The posterior distribution on secrets after observing y."""
    col = np.asarray(C, dtype=float)[:, y]
    pi = np.asarray(pi, dtype=float)
    return col * pi / np.dot(col, pi)


def posteriors(C: np.ndarray, pi: np.ndarray | None = None) -> np.ndarray:
    """All posteriors, one per column; a missing prior is taken as uniform."""
    res = np.array(C, dtype=float)
    if pi is not None and np.asarray(pi).size:
        res = res * np.asarray(pi, dtype=float)[:, None]
    return res / res.sum(axis=0)


def hyper(C: np.ndarray, pi: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """The hyper-distribution produced by C on prior pi.

    Returns (outer, inners): columns of zero probability are dropped, and the
    outer mass of equal inners is gathered on one of them, the others being
    left with probability 0.
    """
    C = np.asarray(C, dtype=float)
    pi = np.asarray(pi, dtype=float)
    outer = pi @ C
    keep = [j for j, o in enumerate(outer) if not probab.approx_equal(o, 0.0)]
    outer = outer[keep].copy()
    inners = C[:, keep] * pi[:, None] / outer

    order = sorted(range(inners.shape[1]), key=cmp_to_key(lambda a, b: compare_columns(inners, a, b)))
    if order:
        first = order[0]
        for col in order[1:]:
            if compare_columns(inners, first, col) == 0:
                outer[first] += outer[col]
                outer[col] = 0.0
            else:
                first = col
    return outer, inners


def reduced(C: np.ndarray) -> np.ndarray:
    """The reduced form of C, computed through its hyper on the uniform prior."""
    C = np.asarray(C, dtype=float)
    outer, R = hyper(C, probab.uniform(C.shape[0]))
    return normalize(R * outer)


def iterative_bayesian_update(
    C: np.ndarray,
    out: np.ndarray,
    start: np.ndarray | None = None,
    max_diff: float = 1e-6,
    max_reps: int = 0,
) -> tuple[np.ndarray, int]:
    """Estimate the prior that, through C, produced the output distribution out.

    Returns the estimate and the number of iterations used.
    """
    almost_zero = 1e-6
    C = np.asarray(C, dtype=float)
    out = np.asarray(out, dtype=float)
    pi = probab.uniform(C.shape[0]) if start is None or np.asarray(start).size == 0 else np.array(start, dtype=float)

    if C.shape[0] != pi.size or C.shape[1] != out.size:
        raise ValueError("invalid sizes")

    count = 1
    while True:
        out_cur = pi @ C
        # where out_cur is ~0 so is out; use 1 to get out/out_cur = 0
        out_cur[out_cur < almost_zero] = 1.0
        new_pi = pi * (C @ (out / out_cur))
        diff = float(np.abs(pi - new_pi).sum())
        pi = new_pi
        if diff <= max_diff or count == max_reps:
            return pi, count
        count += 1


def factorize_lp(A: np.ndarray, B: np.ndarray, col_stoch: bool = False) -> np.ndarray:
    """A channel X with A = B X, found by linear programming; empty if none exists.

    With col_stoch the returned X is column-stochastic instead.
    """
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    M, N = A.shape
    R = B.shape[1]
    if B.shape[0] != M:
        return _empty()

    # variable X[r, n] has index r * N + n
    product_eq = np.kron(B, np.eye(N))
    if col_stoch:
        stoch_eq = np.kron(np.ones((1, R)), np.eye(N))
        stoch_b = np.ones(N)
    else:
        stoch_eq = np.kron(np.eye(R), np.ones((1, N)))
        stoch_b = np.ones(R)

    res = linprog(
        np.zeros(R * N),
        A_eq=np.vstack([product_eq, stoch_eq]),
        b_eq=np.concatenate([A.ravel(), stoch_b]),
        bounds=(0.0, 1.0),
        method="highs",
    )
    if res.status != 0:
        return _empty()
    return res.x.reshape(R, N)


def _simplex_project_vec(v: np.ndarray) -> np.ndarray:
    u = np.sort(v)[::-1]
    css = np.cumsum(u)
    ks = np.arange(1, v.size + 1)
    positive = np.nonzero(u - (css - 1.0) / ks > 0)[0]
    rho = positive[-1] if positive.size else 0
    theta = (css[rho] - 1.0) / (rho + 1)
    return np.maximum(v - theta, 0.0)


def _simplex_project(X: np.ndarray, col_stoch: bool) -> np.ndarray:
    if col_stoch:
        return np.column_stack([_simplex_project_vec(c) for c in X.T]) if X.shape[1] else X
    return np.vstack([_simplex_project_vec(r) for r in X]) if X.shape[0] else X


def factorize_subgrad(
    A: np.ndarray, B: np.ndarray, col_stoch: bool = False, max_diff: float = 1e-4
) -> np.ndarray:
    """A channel X with A = B X, found by a projected subgradient method.

    Returns an empty matrix once a lower bound proves that no X exists.
    """
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    M, N = A.shape
    L = B.shape[1]
    if B.shape[0] != M:
        return _empty()

    X = np.linalg.lstsq(B, A, rcond=None)[0]
    if X.shape[1] == 0:
        return X
    X = _simplex_project(X, col_stoch)

    radius = np.sqrt(2.0 * L)
    S = np.zeros((L, N))
    best = 1.0
    sum1 = -radius * radius
    sum2 = 0.0

    with np.errstate(over="ignore", invalid="ignore"):
        while True:
            # f = max_{i,j} |(B X - A)(i,j)|, with the position and sign of the max
            Z = B @ X - A
            abs_z = np.abs(Z)
            idx = int(np.argmax(abs_z))
            f = float(abs_z.flat[idx])
            if f > 0:
                f_i, f_j = divmod(idx, N)
                sign = -1.0 if Z[f_i, f_j] < 0 else 1.0
            else:
                f, f_i, f_j, sign = 0.0, 0, 0, 1.0

            if f < best:
                best = f
                if probab.approx_equal(best, 0.0, max_diff):
                    break

            g = sign * B[f_i]
            g_norm_sq = float(g @ g)

            beta = max(0.0, -1.5 * float(S[:, f_j] @ g) / g_norm_sq)
            S *= beta
            S[:, f_j] += g

            # S may grow until its norm overflows; then restart from g alone
            s_norm_sq = float(np.sum(S * S))
            if s_norm_sq == np.inf:
                S.fill(0.0)
                S[:, f_j] = g
                s_norm_sq = g_norm_sq

            alpha = f / s_norm_sq
            X = _simplex_project(X - alpha * S, col_stoch)

            # a positive lower bound on the optimum means A cannot be factorized
            sum1 += alpha * (2 * f - alpha * g_norm_sq)
            sum2 += 2 * alpha
            bound = sum1 / sum2
            if not probab.less_than_or_eq(bound, 0.0, max_diff):
                return _empty()

    return X


def factorize(A: np.ndarray, B: np.ndarray, col_stoch: bool = False) -> np.ndarray:
    """A channel X with A = B X, or an empty matrix if there is none."""
    A = np.asarray(A, dtype=float)
    if A.size >= 1000:
        return factorize_subgrad(A, B, col_stoch)
    return factorize_lp(A, B, col_stoch)


def left_factorize(A: np.ndarray, B: np.ndarray, col_stoch: bool = False) -> np.ndarray:
    """A channel X with A = X B, or an empty matrix if there is none."""
    X = factorize(np.asarray(A, dtype=float).T, np.asarray(B, dtype=float).T, not col_stoch)
    return X.T.copy()


def sum_column_min(C: np.ndarray) -> float:
    """The sum of the column minima of C."""
    return float(np.asarray(C, dtype=float).min(axis=0).sum())


def sample(C: np.ndarray, pi: np.ndarray, rng: np.random.Generator | None = None) -> tuple[int, int]:
    """Sample a secret from pi, then an output from its row of C."""
    rng = rng if rng is not None else np.random.default_rng()
    C = np.asarray(C, dtype=float)
    x = probab.sample(pi, rng)
    y = probab.sample(C[x], rng)
    return x, y


def sample_many(
    C: np.ndarray, pi: np.ndarray, n: int, rng: np.random.Generator | None = None
) -> np.ndarray:
    """Sample n (secret, output) pairs from the joint distribution; an n x 2 array."""
    C = np.asarray(C, dtype=float)
    joint = C * np.asarray(pi, dtype=float)[:, None]
    n_rows = joint.shape[0]
    sampled = probab.sample_many(joint.ravel(order="F"), n, rng)
    return np.column_stack([sampled % n_rows, sampled // n_rows])


def parallel(C1: np.ndarray, C2: np.ndarray) -> np.ndarray:
    """The parallel composition of two channels on the same secrets."""
    C1 = np.asarray(C1, dtype=float)
    C2 = np.asarray(C2, dtype=float)
    if C1.shape[0] != C2.shape[0]:
        raise ValueError("rows mismatch")
    return np.einsum("ij,ik->ijk", C1, C2).reshape(C1.shape[0], C1.shape[1] * C2.shape[1])


def repeated_independent(C: np.ndarray, n: int) -> np.ndarray:
    """C run n times independently on the same secret."""
    C = np.asarray(C, dtype=float)
    if n == 0:
        return no_interference(C.shape[0])
    if n == 1:
        return C.copy()
    result = parallel(C, C)
    for _ in range(n - 2):
        result = parallel(result, C)
    return result