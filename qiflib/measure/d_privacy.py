"""d-privacy of channels with respect to a metric on the secrets."""

from __future__ import annotations

import math
from itertools import permutations
from typing import Callable

import numpy as np

from qiflib import probab

Metric = Callable[[int, int], float]


def _log(v: float) -> float:
    return math.log(v) if v > 0 else -math.inf


def _mult_total_variation(a: np.ndarray, b: np.ndarray) -> float:
    res = 0.0
    for u, v in zip(a, b):
        if u == v:
            continue
        if u <= 0 or v <= 0:
            return math.inf
        res = max(res, abs(math.log(u) - math.log(v)))
    return res


def _ratio(num: float, den: float) -> float:
    if num == 0:
        return 0.0
    if den == 0:
        return math.inf
    return num / den


def is_private(C, d: Metric) -> bool:
    """True if C's rows are d-close in multiplicative total variation."""
    C = np.asarray(C, dtype=float)
    return all(
        probab.less_than_or_eq(_mult_total_variation(C[x1], C[x2]), d(x1, x2))
        for x1, x2 in permutations(range(C.shape[0]), 2)
    )


def smallest_epsilon(C, d: Metric) -> float:
    """The smallest epsilon such that C satisfies epsilon * d privacy."""
    C = np.asarray(C, dtype=float)
    return max(
        (_ratio(_mult_total_variation(C[x1], C[x2]), d(x1, x2)) for x1, x2 in permutations(range(C.shape[0]), 2)),
        default=0.0,
    )


def prior(pi, d: Metric) -> float:
    """The d-vulnerability of pi: max over pairs of |log pi_i - log pi_j| / d(i, j)."""
    pi = np.asarray(pi, dtype=float)
    res = 0.0
    for i in range(pi.size):
        for j in range(i + 1, pi.size):
            a, b = _log(pi[i]), _log(pi[j])
            diff = 0.0 if a == b else abs(a - b)
            ratio = _ratio(diff, d(i, j))
            if probab.less_than(res, ratio):
                res = ratio
    return res