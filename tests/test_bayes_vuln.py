import math

import numpy as np
import pytest

from qiflib import channel, probab
from qiflib.measure import bayes_vuln

UNIF_2 = probab.uniform(2)
UNIF_10 = probab.uniform(10)
POINT_2 = probab.point(2)
POINT_4 = probab.point(4)
POINT_10 = probab.point(10)
PI1 = np.array([0.8, 0.2])
ID_2 = channel.identity(2)
ID_4 = channel.identity(4)
ID_10 = channel.identity(10)
NOINT_10 = channel.no_interference(10)
C1 = np.array([[0.2, 0.2, 0.6], [0.7, 0.1, 0.2]])


def approx(v):
    return pytest.approx(v, rel=1e-7, abs=1e-7)


def test_prior():
    assert bayes_vuln.prior(UNIF_2) == approx(0.5)
    assert bayes_vuln.prior(UNIF_10) == approx(0.1)
    assert bayes_vuln.prior(POINT_4) == approx(1.0)
    assert bayes_vuln.prior(PI1) == approx(0.8)


def test_posterior():
    assert bayes_vuln.posterior(UNIF_2, ID_2) == approx(1.0)
    assert bayes_vuln.posterior(POINT_2, ID_2) == approx(1.0)
    assert bayes_vuln.posterior(PI1, ID_2) == approx(1.0)
    assert bayes_vuln.posterior(UNIF_10, ID_10) == approx(1.0)
    assert bayes_vuln.posterior(POINT_10, ID_10) == approx(1.0)
    assert bayes_vuln.posterior(UNIF_10, NOINT_10) == approx(0.1)
    assert bayes_vuln.posterior(POINT_10, NOINT_10) == approx(1.0)


def test_noint_keeps_prior():
    pi = probab.randu(10, np.random.default_rng(3))
    assert bayes_vuln.posterior(pi, NOINT_10) == approx(bayes_vuln.prior(pi))
    assert bayes_vuln.add_leakage(pi, NOINT_10) == approx(0.0)


def test_posterior_size_mismatch():
    with pytest.raises(ValueError):
        bayes_vuln.posterior(UNIF_2, ID_10)


def test_mult_capacity():
    assert bayes_vuln.mult_capacity(ID_2) == approx(2.0)
    assert bayes_vuln.mult_capacity(ID_10) == approx(10.0)
    assert bayes_vuln.mult_capacity(NOINT_10) == approx(1.0)
    assert bayes_vuln.mult_capacity(C1) == approx(1.5)


def test_mult_capacity_reached_on_uniform():
    C = channel.randu(10, rng=np.random.default_rng(7))
    assert bayes_vuln.mult_leakage(UNIF_10, C) == approx(bayes_vuln.mult_capacity(C))


def test_min_entropy_leakage():
    assert bayes_vuln.min_entropy_leakage(UNIF_2, ID_2) == approx(1.0)
    assert bayes_vuln.min_entropy_leakage(UNIF_10, ID_10) == approx(math.log2(10))
    assert bayes_vuln.min_entropy_leakage(UNIF_10, NOINT_10) == approx(0.0)
    assert bayes_vuln.min_entropy_leakage(UNIF_2, C1) == approx(math.log2(1.5))


def test_mult_capacity_bound_cap():
    expected = 627991708.193414211273193359375
    assert bayes_vuln.mult_capacity_bound_cap(ID_4, 1e6) == approx(expected)


def test_cap_single_output():
    assert bayes_vuln.cap(1, 50) == 1.0


def test_strategy_identity_guesses_output():
    assert list(bayes_vuln.strategy(UNIF_10, ID_10)) == list(range(10))


def test_strategy_achieves_posterior():
    rng = np.random.default_rng(11)
    C = channel.randu(5, 4, rng)
    pi = probab.randu(5, rng)
    s = bayes_vuln.strategy(pi, C)
    value = sum(pi[x] * C[x, y] for y, x in enumerate(s))
    assert value == approx(bayes_vuln.posterior(pi, C))