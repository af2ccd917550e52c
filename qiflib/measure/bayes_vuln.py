"""Bayes vulnerability: the probability of guessing the secret in one try."""

from __future__ import annotations

import math

import numpy as np

from qiflib import channel, probab


def prior(pi) -> float:
    """The largest probability in pi."""
    return float(np.max(np.asarray(pi, dtype=float)))


def posterior(pi, C) -> float:
    """sum_y max_x pi[x] C[x, y]."""
    pi = np.asarray(pi, dtype=float)
    C = np.asarray(C, dtype=float)
    channel.check_prior_size(pi, C)

    if probab.is_uniform(pi):
        return float(C.max(axis=0).sum() / pi.size)
    return float((C * pi[:, None]).max(axis=0).sum())


def add_leakage(pi, C) -> float:
    """Posterior minus prior vulnerability."""
    return posterior(pi, C) - prior(pi)


def mult_leakage(pi, C) -> float:
    """Posterior over prior vulnerability."""
    return posterior(pi, C) / prior(pi)


def min_entropy_leakage(pi, C) -> float:
    """The base-2 logarithm of the multiplicative leakage."""
    return math.log2(mult_leakage(pi, C))


def mult_capacity(C) -> float:
    """The sum of the column maxima of C."""
    return float(np.asarray(C, dtype=float).max(axis=0).sum())


def strategy(pi, C) -> np.ndarray:
    """For each output y, the secret an optimal adversary guesses."""
    pi = np.asarray(pi, dtype=float)
    C = np.asarray(C, dtype=float)
    channel.check_prior_size(pi, C)
    return np.argmax(C * pi[:, None], axis=0)


def cap(b: int, n: int) -> float:
    """Upper bound on cap_b(n), from the recurrence and the bound on cap_2(n)."""
    if b == 1:
        return 1.0
    cap1 = 1.0
    cap2 = math.sqrt(math.pi * n / 2) + 2.0 / 3 + math.sqrt(math.pi / (2 * n)) / 12
    for i in range(3, b + 1):
        cap1, cap2 = cap2, cap2 + cap1 * n / (i - 2)
    return cap2


def mult_capacity_bound_cap(C, n: int) -> float:
    """Bound on the multiplicative capacity of C repeated n times."""
    return cap(np.asarray(C).shape[1], int(n))