"""Guessing entropy: the expected number of tries to guess the secret."""

from __future__ import annotations

import numpy as np

from qiflib import channel


def prior(pi) -> float:
    """Expected number of guesses, trying secrets in decreasing probability."""
    ordered = np.sort(np.asarray(pi, dtype=float))[::-1]
    return float(ordered @ np.arange(1, ordered.size + 1))


def posterior(pi, C) -> float:
    """Expected number of guesses after observing the output of C."""
    pi = np.asarray(pi, dtype=float)
    C = np.asarray(C, dtype=float)
    channel.check_prior_size(pi, C)
    return sum(prior(pi * col) for col in C.T)


def add_leakage(pi, C) -> float:
    """Prior minus posterior guessing entropy."""
    return prior(pi) - posterior(pi, C)


def mult_leakage(pi, C) -> float:
    """Prior over posterior guessing entropy."""
    return prior(pi) / posterior(pi, C)