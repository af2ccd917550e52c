import numpy as np
import pytest

from qiflib import channel, probab
from qiflib.measure import guessing

UNIF_2 = probab.uniform(2)
UNIF_10 = probab.uniform(10)
POINT_2 = probab.point(2)
POINT_4 = probab.point(4)
POINT_10 = probab.point(10)
PI1 = np.array([0.8, 0.2])
ID_2 = channel.identity(2)
ID_10 = channel.identity(10)
NOINT_10 = channel.no_interference(10)


def approx(v):
    return pytest.approx(v, rel=1e-7, abs=1e-7)


def test_prior():
    assert guessing.prior(UNIF_2) == approx(1.5)
    assert guessing.prior(UNIF_10) == approx(5.5)
    assert guessing.prior(POINT_4) == approx(1.0)
    assert guessing.prior(PI1) == approx(1.2)


def test_posterior():
    assert guessing.posterior(UNIF_2, ID_2) == approx(1.0)
    assert guessing.posterior(POINT_2, ID_2) == approx(1.0)
    assert guessing.posterior(PI1, ID_2) == approx(1.0)
    assert guessing.posterior(UNIF_10, ID_10) == approx(1.0)
    assert guessing.posterior(POINT_10, ID_10) == approx(1.0)
    assert guessing.posterior(UNIF_10, NOINT_10) == approx(5.5)
    assert guessing.posterior(POINT_10, NOINT_10) == approx(1.0)


def test_noint_keeps_prior():
    pi = probab.randu(10, np.random.default_rng(2))
    assert guessing.posterior(pi, NOINT_10) == approx(guessing.prior(pi))
    assert guessing.add_leakage(pi, NOINT_10) == approx(0.0)
    assert guessing.mult_leakage(pi, NOINT_10) == approx(1.0)


def test_prior_order_independent():
    pi = np.array([0.1, 0.6, 0.3])
    assert guessing.prior(pi) == approx(guessing.prior(pi[::-1]))


def test_posterior_size_mismatch():
    with pytest.raises(ValueError):
        guessing.posterior(UNIF_2, ID_10)