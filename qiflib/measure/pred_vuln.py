"""Vulnerability of a predicate: guessing whether the secret satisfies it."""

from __future__ import annotations

import numpy as np

from qiflib import probab
from qiflib.measure import g_vuln


def _predicate(P) -> np.ndarray:
    return np.asarray(P, dtype=int).ravel()


def gain_pred(P) -> np.ndarray:
    """The two-block gain function: row 0 guesses P holds, row 1 that it does not."""
    PP = _predicate(P).astype(float)
    return np.vstack([PP, 1.0 - PP])


def prior(P, pi) -> float:
    """Prior vulnerability of the predicate."""
    return g_vuln.prior(gain_pred(P), pi)


def posterior(P, pi, C) -> float:
    """Posterior vulnerability of the predicate."""
    return g_vuln.posterior(gain_pred(P), pi, C)


def add_leakage(P, pi, C) -> float:
    """Posterior minus prior vulnerability of the predicate."""
    return g_vuln.add_leakage(gain_pred(P), pi, C)


def mult_leakage(P, pi, C) -> float:
    """Posterior over prior vulnerability of the predicate."""
    return g_vuln.mult_leakage(gain_pred(P), pi, C)


def mult_capacity(P, C) -> tuple[float, np.ndarray]:
    """Multiplicative capacity and a prior reaching it.

    It is given by the largest l1 distance between a row satisfying P and
    one that does not.
    """
    P = _predicate(P)
    C = np.asarray(C, dtype=float)
    if P.size != C.shape[0]:
        raise ValueError("invalid predicate size")
    inside = np.flatnonzero(P == 1)
    outside = np.flatnonzero(P == 0)
    if not inside.size or not outside.size:
        raise ValueError("predicate must split the secrets")

    diam, x1, x2 = 0.0, int(inside[0]), int(outside[0])
    for i in inside:
        for j in outside:
            dist = float(np.abs(C[i] - C[j]).sum())
            if probab.less_than(diam, dist):
                diam, x1, x2 = dist, int(i), int(j)

    pi = np.zeros(C.shape[0])
    pi[x1] = pi[x2] = 0.5
    return 1.0 + diam / 2, pi


def binary_channel(P, pi, C) -> tuple[np.ndarray, np.ndarray]:
    """A prior and channel on the two secrets "P" and "not P" with the same vulnerability."""
    rho, R, _, _ = g_vuln.g_to_bayes(gain_pred(P), pi)
    return rho, R @ np.asarray(C, dtype=float)