"""Shannon entropy, conditional entropy and capacity."""

from __future__ import annotations

import math

import numpy as np

from qiflib import channel, probab
from qiflib.probab import DEF_MD, DEF_MRD


def prior(pi) -> float:
    """H(X) = - sum_x pi[x] log2 pi[x]."""
    return -sum(p * math.log2(p) for p in np.asarray(pi, dtype=float) if p > 0)


def posterior(pi, C) -> float:
    """H(X|Y), computed as H(Y|X) + H(X) - H(Y)."""
    pi = np.asarray(pi, dtype=float)
    C = np.asarray(C, dtype=float)
    channel.check_prior_size(pi, C)
    h_yx = sum(p * prior(row) for p, row in zip(pi, C))
    return h_yx + prior(pi) - prior(pi @ C)


def add_leakage(pi, C) -> float:
    """Mutual information H(X) - H(X|Y)."""
    return prior(pi) - posterior(pi, C)


def mult_leakage(pi, C) -> float:
    """H(X) over H(X|Y)."""
    return prior(pi) / posterior(pi, C)


def add_capacity(C, md: float = DEF_MD, mrd: float = DEF_MRD) -> tuple[float, np.ndarray]:
    """Shannon capacity of C by the Blahut-Arimoto algorithm, with a prior reaching it."""
    C = np.asarray(C, dtype=float)
    px = probab.uniform(C.shape[0])
    positive = C > 0
    while True:
        py = px @ C
        with np.errstate(divide="ignore", invalid="ignore"):
            terms = np.where(positive, C * np.log(np.where(positive, C, 1.0) / py), 0.0)
        F = np.exp(terms.sum(axis=1))

        d = float(F @ px)
        il = math.log2(d)
        iu = math.log2(float(F.max()))
        if probab.approx_equal(iu, il, md, mrd):
            return il, px
        px = px * F / d