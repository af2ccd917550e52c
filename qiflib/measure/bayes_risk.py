"""Bayes risk: the probability of guessing the secret wrong in one try."""

from __future__ import annotations

import math

import numpy as np

from qiflib import probab
from qiflib.measure import bayes_vuln


def prior(pi) -> float:
    """One minus the prior Bayes vulnerability."""
    return 1.0 - bayes_vuln.prior(pi)


def posterior(pi, C) -> float:
    """One minus the posterior Bayes vulnerability."""
    return 1.0 - bayes_vuln.posterior(pi, C)


def add_leakage(pi, C) -> float:
    """Additive leakage, the same as for Bayes vulnerability."""
    return bayes_vuln.add_leakage(pi, C)


def mult_leakage(pi, C) -> float:
    """Prior risk over posterior risk."""
    pr = prior(pi)
    if probab.approx_equal(pr, 0.0):
        return 1.0
    post = posterior(pi, C)
    if probab.approx_equal(post, 0.0):
        return math.inf
    return pr / post


def _l1_diameter(C: np.ndarray) -> tuple[float, int, int]:
    best, x1, x2 = 0.0, 0, 0
    for i in range(C.shape[0]):
        for j in range(i + 1, C.shape[0]):
            dist = float(np.abs(C[i] - C[j]).sum())
            if probab.less_than(best, dist):
                best, x1, x2 = dist, i, j
    return best, x1, x2


def mult_capacity(C) -> tuple[float, np.ndarray]:
    """Multiplicative capacity from the l1-diameter of C's rows, with a prior reaching it."""
    C = np.asarray(C, dtype=float)
    diam, x1, x2 = _l1_diameter(C)
    cap = math.inf if probab.approx_equal(diam, 2.0) else 1.0 / (1.0 - diam / 2)
    pi = np.zeros(C.shape[0])
    pi[x1] = pi[x2] = 0.5
    return cap, pi


def _total_variation(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.abs(a - b).sum() / 2)


def mult_capacity_bound1(C, row) -> tuple[float, float]:
    """Lower and upper bounds from the largest tv distance of C's rows to row.

    The lower bound holds when row is a convex combination of C's rows.
    """
    C = np.asarray(C, dtype=float)
    row = np.asarray(row, dtype=float)
    tv_max = 0.0
    for r in C:
        tv_cur = _total_variation(r, row)
        if probab.less_than(tv_max, tv_cur):
            tv_max = tv_cur
    d = 2 * tv_max
    lower = 1.0 / (1.0 - d / 2)
    upper = 1.0 / (1.0 - d) if probab.less_than(d, 1.0) else math.inf
    return lower, upper


def mult_capacity_bound2(C) -> tuple[float, float]:
    """Bound 1 taken around the middle row."""
    C = np.asarray(C, dtype=float)
    return mult_capacity_bound1(C, C[C.shape[0] // 2])


def mult_capacity_bound3(C) -> tuple[float, float]:
    """Bound 1 taken around the average of all rows."""
    C = np.asarray(C, dtype=float)
    return mult_capacity_bound1(C, C.mean(axis=0))


def mult_capacity_bound4(C) -> tuple[float, float]:
    """Bound 1 taken around the uniform row (the lower bound may not hold)."""
    C = np.asarray(C, dtype=float)
    return mult_capacity_bound1(C, probab.uniform(C.shape[1]))


def mult_capacity_bound5(C) -> tuple[float, float]:
    """Bounds from the largest euclidean distance between rows."""
    C = np.asarray(C, dtype=float)
    euclid_max = 0.0
    for i in range(C.shape[0]):
        for j in range(i + 1, C.shape[0]):
            cur = float(np.linalg.norm(C[i] - C[j]))
            if probab.less_than(euclid_max, cur):
                euclid_max = cur
    lbound = euclid_max / 2
    ubound = euclid_max * math.sqrt(C.shape[1]) / 2
    return (
        1.0 / (1.0 - lbound),
        1.0 / (1.0 - ubound) if probab.less_than(ubound, 1.0) else math.inf,
    )


def strategy(pi, C) -> np.ndarray:
    """The optimal guessing strategy, the same as for Bayes vulnerability."""
    return bayes_vuln.strategy(pi, C)


def posterior_bound_via_risk_mult_cap(pi, C) -> float:
    """Lower bound on posterior risk from the risk multiplicative capacity."""
    return prior(pi) / mult_capacity(C)[0]


def posterior_bound_via_vuln_mult_cap(pi, C) -> float:
    """Lower bound on posterior risk from the vulnerability multiplicative capacity."""
    return max(1.0 - bayes_vuln.prior(pi) * bayes_vuln.mult_capacity(C), 0.0)