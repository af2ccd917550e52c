import math

import numpy as np
import pytest

from qiflib import channel, probab
from qiflib.measure import bayes_risk

UNIF_2 = probab.uniform(2)
UNIF_10 = probab.uniform(10)
POINT_2 = probab.point(2)
POINT_4 = probab.point(4)
POINT_10 = probab.point(10)
PI1 = np.array([0.8, 0.2])
ID_2 = channel.identity(2)
ID_10 = channel.identity(10)
NOINT_10 = channel.no_interference(10)
C1 = np.array([[0.2, 0.2, 0.6], [0.7, 0.1, 0.2]])


def approx(v):
    return pytest.approx(v, rel=1e-7, abs=1e-7)


def test_prior():
    assert bayes_risk.prior(UNIF_2) == approx(0.5)
    assert bayes_risk.prior(UNIF_10) == approx(0.9)
    assert bayes_risk.prior(POINT_4) == approx(0.0)
    assert bayes_risk.prior(PI1) == approx(0.2)


def test_posterior():
    assert bayes_risk.posterior(UNIF_2, ID_2) == approx(0.0)
    assert bayes_risk.posterior(POINT_2, ID_2) == approx(0.0)
    assert bayes_risk.posterior(PI1, ID_2) == approx(0.0)
    assert bayes_risk.posterior(UNIF_10, ID_10) == approx(0.0)
    assert bayes_risk.posterior(POINT_10, NOINT_10) == approx(0.0)
    assert bayes_risk.posterior(UNIF_10, NOINT_10) == approx(0.9)


def test_noint_keeps_prior():
    pi = probab.randu(10, np.random.default_rng(5))
    assert bayes_risk.posterior(pi, NOINT_10) == approx(bayes_risk.prior(pi))


def test_posterior_size_mismatch():
    with pytest.raises(ValueError):
        bayes_risk.posterior(UNIF_2, ID_10)


def test_mult_capacity():
    assert bayes_risk.mult_capacity(ID_2)[0] == math.inf
    assert bayes_risk.mult_capacity(ID_10)[0] == math.inf
    assert bayes_risk.mult_capacity(NOINT_10)[0] == approx(1.0)
    assert bayes_risk.mult_capacity(C1)[0] == approx(2.0)


def test_mult_capacity_prior_is_proper():
    cap, pi = bayes_risk.mult_capacity(C1)
    assert probab.is_proper(pi)
    assert bayes_risk.mult_leakage(pi, C1) == approx(cap)


def test_mult_capacity_reached_on_two_secrets():
    C = channel.randu(2, rng=np.random.default_rng(9))
    assert bayes_risk.mult_leakage(UNIF_2, C) == approx(bayes_risk.mult_capacity(C)[0])


def test_mult_leakage_point_prior():
    assert bayes_risk.mult_leakage(POINT_10, ID_10) == 1.0


def test_bounds_contain_capacity():
    C = channel.randu(6, 5, np.random.default_rng(13))
    cap = bayes_risk.mult_capacity(C)[0]
    for bound in (bayes_risk.mult_capacity_bound2, bayes_risk.mult_capacity_bound3, bayes_risk.mult_capacity_bound5):
        lower, upper = bound(C)
        assert lower <= cap + 1e-9
        assert cap <= upper + 1e-9
    assert cap <= bayes_risk.mult_capacity_bound4(C)[1] + 1e-9


def test_add_leakage_matches_risk_difference():
    C = channel.randu(4, 3, np.random.default_rng(17))
    pi = probab.randu(4, np.random.default_rng(19))
    assert bayes_risk.add_leakage(pi, C) == approx(bayes_risk.prior(pi) - bayes_risk.posterior(pi, C))


def test_posterior_bounds_are_lower_bounds():
    C = channel.randu(4, 3, np.random.default_rng(23))
    pi = probab.randu(4, np.random.default_rng(29))
    post = bayes_risk.posterior(pi, C)
    assert bayes_risk.posterior_bound_via_risk_mult_cap(pi, C) <= post + 1e-9
    assert bayes_risk.posterior_bound_via_vuln_mult_cap(pi, C) <= post + 1e-9