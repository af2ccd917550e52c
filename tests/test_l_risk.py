import numpy as np
import pytest

from qiflib import channel, probab
from qiflib.measure import bayes_risk, bayes_vuln, g_vuln, l_risk


@pytest.fixture
def rng():
    return np.random.default_rng(99)


def test_zero_one_loss_is_bayes_risk(rng):
    pi = probab.randu(5, rng)
    C = channel.randu(5, 4, rng)
    L = l_risk.loss_zero_one(5)
    assert l_risk.prior(L, pi) == pytest.approx(bayes_risk.prior(pi))
    assert l_risk.posterior(L, pi, C) == pytest.approx(bayes_risk.posterior(pi, C))


def test_callable_matches_matrix(rng):
    pi = probab.randu(4, rng)
    C = channel.randu(4, 3, rng)
    L = l_risk.loss_zero_one(4)
    assert l_risk.prior(l_risk.l_zero_one, pi) == pytest.approx(l_risk.prior(L, pi))
    assert l_risk.posterior(l_risk.l_zero_one, pi, C) == pytest.approx(l_risk.posterior(L, pi, C))
    assert l_risk.add_leakage(l_risk.l_zero_one, pi, C) == pytest.approx(l_risk.add_leakage(L, pi, C))
    assert l_risk.mult_leakage(l_risk.l_zero_one, pi, C) == pytest.approx(l_risk.mult_leakage(L, pi, C))


def test_leakages_consistent(rng):
    L = rng.random((3, 4))
    pi = probab.randu(4, rng)
    C = channel.randu(4, 5, rng)
    pr, post = l_risk.prior(L, pi), l_risk.posterior(L, pi, C)
    assert post <= pr + 1e-12
    assert l_risk.add_leakage(L, pi, C) == pytest.approx(pr - post)
    assert l_risk.mult_leakage(L, pi, C) == pytest.approx(pr / post)


def test_zero_one_add_leakage_matches_bayes(rng):
    pi = probab.randu(4, rng)
    C = channel.randu(4, 4, rng)
    assert l_risk.add_leakage(l_risk.loss_zero_one(4), pi, C) == pytest.approx(bayes_vuln.add_leakage(pi, C))


def test_strategy_matches_bayes(rng):
    pi = probab.randu(6, rng)
    C = channel.randu(6, 4, rng)
    assert np.array_equal(l_risk.strategy(l_risk.loss_zero_one(6), pi, C), bayes_vuln.strategy(pi, C))


def test_add_capacity_matches_g_vuln(rng):
    pi = probab.randu(4, rng)
    C = channel.randu(4, 3, rng)
    for flag in (False, True):
        assert l_risk.add_capacity(pi, C, flag) == pytest.approx(g_vuln.add_capacity(pi, C, flag))


def test_loss_to_gain_of_zero_one_is_identity():
    gain = l_risk.loss_to_gain(3, 3, l_risk.l_zero_one)
    assert all(gain(w, x) == g_vuln.g_id(w, x) for w in range(3) for x in range(3))


def test_loss_zero_one_matches_callable():
    L = l_risk.loss_zero_one(4)
    assert all(L[w, x] == l_risk.l_zero_one(w, x) for w in range(4) for x in range(4))


def test_size_mismatch_raises():
    with pytest.raises(ValueError):
        l_risk.posterior(l_risk.loss_zero_one(10), probab.uniform(2), np.eye(10))