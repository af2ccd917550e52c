"""g-vulnerability: the expected gain of an adversary under a gain function.

A gain function is either a matrix G with one row per guess and one column
per secret, or a callable g(w, x); a callable is read on guesses equal to
the secrets.
"""

from __future__ import annotations

from typing import Callable, Union

import numpy as np

from qiflib import channel, probab
from qiflib.measure import bayes_vuln

Gain = Union[np.ndarray, Callable[[int, int], float]]


def _as_matrix(G: Gain, n: int) -> np.ndarray:
    if callable(G):
        return np.array([[float(G(w, x)) for x in range(n)] for w in range(n)], dtype=float)
    return np.atleast_2d(np.asarray(G, dtype=float))


def _check_g_size(G: np.ndarray, pi: np.ndarray) -> None:
    if G.shape[1] != pi.size:
        raise ValueError("invalid prior size")


def _check_g_pair(G1: np.ndarray, G2: np.ndarray) -> None:
    if G1.shape[1] != G2.shape[1]:
        raise ValueError("invalid G size")


def prior(G: Gain, pi) -> float:
    """max_w sum_x pi[x] G[w, x]."""
    pi = np.asarray(pi, dtype=float)
    G = _as_matrix(G, pi.size)
    _check_g_size(G, pi)
    return float((G @ pi).max())


def posterior(G: Gain, pi, C) -> float:
    """sum_y max_w sum_x pi[x] C[x, y] G[w, x]."""
    pi = np.asarray(pi, dtype=float)
    C = np.asarray(C, dtype=float)
    G = _as_matrix(G, pi.size)
    _check_g_size(G, pi)
    channel.check_prior_size(pi, C)

    if probab.is_uniform(pi):
        return float((G @ C).max(axis=0).sum() / pi.size)
    return float((G @ (C * pi[:, None])).max(axis=0).sum())


def add_leakage(G: Gain, pi, C) -> float:
    """Posterior minus prior g-vulnerability."""
    return posterior(G, pi, C) - prior(G, pi)


def mult_leakage(G: Gain, pi, C) -> float:
    """Posterior over prior g-vulnerability."""
    return posterior(G, pi, C) / prior(G, pi)


def strategy(G: Gain, pi, C) -> np.ndarray:
    """For each output y, the guess that maximizes the expected gain."""
    pi = np.asarray(pi, dtype=float)
    C = np.asarray(C, dtype=float)
    G = _as_matrix(G, pi.size)
    _check_g_size(G, pi)
    channel.check_prior_size(pi, C)
    return np.argmax(G @ (C * pi[:, None]), axis=0)


def add_capacity(pi, C, one_spanning_g: bool = False) -> float:
    """Additive capacity for a fixed prior.

    By default g ranges over gain functions whose Vg is 1-spanning (the
    larger class); with one_spanning_g it ranges over 1-spanning g's.
    """
    pi = np.asarray(pi, dtype=float)
    C = np.asarray(C, dtype=float)
    channel.check_prior_size(pi, C)

    if one_spanning_g:
        # Kantorovich distance between the point hyper on pi and [pi, C], over tv
        outer = pi @ C
        res = 0.0
        for y, mass in enumerate(outer):
            if not probab.approx_equal(mass, 0.0):
                post = channel.posterior(C, pi, y)
                res += mass * float(np.abs(pi - post).sum() / 2)
        return res

    # 1 minus the sum of column minima over the rows in the support of pi
    res = 1.0
    support = [x for x, p in enumerate(pi) if not probab.approx_equal(p, 0.0)]
    for col in C.T:
        res -= min((col[x] for x in support if col[x] < 1.0), default=1.0)
    return res


def mult_leakage_bound1(G: Gain, pi, C) -> float:
    """Multiplicative leakage bound from the miracle theorem, valid for negative gains too."""
    pi = np.asarray(pi, dtype=float)
    G = _as_matrix(G, pi.size)
    z = float(pi @ G.min(axis=0)) / prior(G, pi)
    return bayes_vuln.mult_capacity(C) * (1 - z) + z


def posterior_bound1(G: Gain, pi, C) -> float:
    """Posterior g-vulnerability bound from mult_leakage_bound1."""
    return prior(G, pi) * mult_leakage_bound1(G, pi, C)


def mult_leakage_bound2(G: Gain, pi, C) -> float:
    """Multiplicative leakage bound from the additive theorem."""
    pi = np.asarray(pi, dtype=float)
    G = _as_matrix(G, pi.size)
    span = float(G.max() - G.min())
    return span * (1.0 - channel.sum_column_min(C)) / prior(G, pi) + 1.0


def add_leakage_bound1(G, C) -> float:
    """Additive leakage bound from the additive miracle theorem."""
    G = np.atleast_2d(np.asarray(G, dtype=float))
    return float(G.max()) * (1.0 - channel.sum_column_min(C))


def posterior_bound2(G: Gain, pi, C) -> float:
    """Posterior g-vulnerability bound from add_leakage_bound1."""
    pi = np.asarray(pi, dtype=float)
    G = _as_matrix(G, pi.size)
    return prior(G, pi) + add_leakage_bound1(G, C)


def g_id(w: int, x: int) -> float:
    """The identity gain function: 1 for a correct guess, 0 otherwise.

    Guesses and secrets are indices, so negative values are rejected.
    """
    if w < 0 or x < 0:
        raise ValueError("guess and secret must be non-negative indices")
    return float(w == x)


def gain_identity(n: int) -> np.ndarray:
    """The identity gain matrix on n secrets."""
    return np.eye(n)


def g_add(G1, G2) -> np.ndarray:
    """A gain function G with Vg = Vg1 + Vg2; its guesses are all pairs of guesses."""
    G1 = np.atleast_2d(np.asarray(G1, dtype=float))
    G2 = np.atleast_2d(np.asarray(G2, dtype=float))
    _check_g_pair(G1, G2)
    return (G1[:, None, :] + G2[None, :, :]).reshape(G1.shape[0] * G2.shape[0], G1.shape[1])


def g_from_posterior(G, C) -> np.ndarray:
    """A gain function whose prior vulnerability is the posterior Vg through C."""
    G = np.atleast_2d(np.asarray(G, dtype=float))
    C = np.asarray(C, dtype=float)
    if G.shape[1] != C.shape[0]:
        raise ValueError("invalid G size")

    result = np.zeros((1, G.shape[1]))
    for col in C.T:
        result = g_add(result, G * col[None, :])
    return result


def g_to_bayes(G: Gain, pi) -> tuple[np.ndarray, np.ndarray, float, float]:
    """Return (rho, R, a, b) with Vg(pi, C) = a * V(rho, R C) + b for every channel C."""
    pi = np.asarray(pi, dtype=float)
    G = _as_matrix(G, pi.size).copy()
    _check_g_size(G, pi)

    mins = G.min(axis=0)
    b = 0.0
    if np.any(mins < 0):
        G -= mins
        b = float(pi @ mins)

    G *= pi[None, :]
    a = float(np.abs(G).sum())

    row_sums = G.sum(axis=1)
    rho = row_sums / a

    # a zero row of R has rho[w] = 0; give it a 1 in the first column to keep R a channel
    zeros = row_sums == 0
    row_sums[zeros] = 1.0
    G /= row_sums[:, None]
    G[zeros, 0] = 1.0

    return rho, G, a, b