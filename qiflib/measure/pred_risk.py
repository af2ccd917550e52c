"""Risk of a predicate: the probability of guessing wrong whether the secret satisfies it."""

from __future__ import annotations

import math

import numpy as np

from qiflib import probab
from qiflib.measure import l_risk, pred_vuln


def loss_pred(P) -> np.ndarray:
    """The two-block loss function; the same matrix as the gain, with rows swapping meaning."""
    return pred_vuln.gain_pred(P)


def prior(P, pi) -> float:
    """Prior risk of the predicate."""
    return l_risk.prior(loss_pred(P), pi)


def posterior(P, pi, C) -> float:
    """Posterior risk of the predicate."""
    return l_risk.posterior(loss_pred(P), pi, C)


def add_leakage(P, pi, C) -> float:
    """Prior minus posterior risk of the predicate."""
    return l_risk.add_leakage(loss_pred(P), pi, C)


def mult_leakage(P, pi, C) -> float:
    """Prior over posterior risk of the predicate."""
    return l_risk.mult_leakage(loss_pred(P), pi, C)


def mult_capacity(P, C) -> tuple[float, np.ndarray]:
    """Multiplicative capacity and a prior reaching it, from the largest l1 distance
    between a row satisfying P and one that does not."""
    vuln_cap, pi = pred_vuln.mult_capacity(P, C)
    diam = 2.0 * (vuln_cap - 1.0)
    cap = math.inf if probab.approx_equal(diam, 2.0) else 1.0 / (1.0 - diam / 2)
    return cap, pi


def binary_channel(P, pi, C) -> tuple[np.ndarray, np.ndarray]:
    """A prior and channel on the two secrets "P" and "not P"."""
    return pred_vuln.binary_channel(P, pi, C)