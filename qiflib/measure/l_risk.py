"""l-risk: the expected loss of an adversary under a loss function.

A loss function is either a matrix L with one row per guess and one column
per secret, or a callable l(w, x) read on guesses equal to the secrets.
"""

from __future__ import annotations

from typing import Callable, Union

import numpy as np

from qiflib import probab
from qiflib.measure import g_vuln

Loss = Union[np.ndarray, Callable[[int, int], float]]


def _loss_matrix(L: Loss, n: int) -> np.ndarray:
    if callable(L):
        return np.array([[float(L(w, x)) for x in range(n)] for w in range(n)], dtype=float)
    return np.atleast_2d(np.asarray(L, dtype=float))


def prior(L: Loss, pi) -> float:
    """min_w sum_x pi[x] L[w, x]."""
    pi = np.asarray(pi, dtype=float)
    return -g_vuln.prior(-_loss_matrix(L, pi.size), pi)


def posterior(L: Loss, pi, C) -> float:
    """sum_y min_w sum_x pi[x] C[x, y] L[w, x]."""
    pi = np.asarray(pi, dtype=float)
    return -g_vuln.posterior(-_loss_matrix(L, pi.size), pi, C)


def add_leakage(L: Loss, pi, C) -> float:
    """Prior minus posterior risk."""
    return prior(L, pi) - posterior(L, pi, C)


def mult_leakage(L: Loss, pi, C) -> float:
    """Prior over posterior risk."""
    return prior(L, pi) / posterior(L, pi, C)


def strategy(L: Loss, pi, C) -> np.ndarray:
    """For each output y, the guess that minimizes the expected loss."""
    pi = np.asarray(pi, dtype=float)
    return g_vuln.strategy(-_loss_matrix(L, pi.size), pi, C)


def add_capacity(pi, C, one_spanning_g: bool = False) -> float:
    """Additive capacity, the same as for g-vulnerability."""
    return g_vuln.add_capacity(pi, C, one_spanning_g)


def loss_to_gain(
    n_secrets: int, n_guesses: int, loss: Callable[[int, int], float]
) -> Callable[[int, int], float]:
    """A gain function obtained by subtracting the loss from its largest value."""
    ceiling = 0.0
    for w in range(n_guesses):
        for x in range(n_secrets):
            value = float(loss(w, x))
            if probab.less_than(ceiling, value):
                ceiling = value

    def gain(w: int, x: int) -> float:
        return ceiling - float(loss(w, x))

    return gain


def l_zero_one(w: int, x: int) -> float:
    """The zero-one loss: 0 for a correct guess, 1 otherwise (the complement of g_id)."""
    return 1.0 - g_vuln.g_id(w, x)


def loss_zero_one(n: int) -> np.ndarray:
    """The zero-one loss matrix on n secrets."""
    return 1.0 - np.eye(n)