import numpy as np
import pytest

from qiflib import channel, probab, refinement
from qiflib.measure import g_vuln


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


def test_refined_by_identity_and_noint(rng):
    crand = channel.randu(10, rng=rng)
    id_10 = channel.identity(10)
    noint = channel.no_interference(10)
    assert refinement.refined_by(id_10, crand)
    assert refinement.refined_by(crand, noint)
    assert not refinement.refined_by(crand, id_10)
    assert not refinement.refined_by(noint, crand)


def test_refined_by_composition(rng):
    crand = channel.randu(10, rng=rng)
    T = crand @ crand
    assert refinement.refined_by(crand, T)
    assert not refinement.refined_by(T, crand)


def test_witness_when_not_refined(rng):
    crand = channel.randu(4, rng=rng)
    id_4 = channel.identity(4)
    unif = probab.uniform(4)
    result = refinement.refine_with_witness(crand, id_4)
    assert not result.refined
    assert not bool(result)
    assert result.gain.shape == (4, 4)
    assert result.gain.min() == pytest.approx(0.0)
    assert result.gain.max() == pytest.approx(1.0)
    assert g_vuln.posterior(result.gain, unif, crand) < g_vuln.posterior(result.gain, unif, id_4)


def test_witness_noint_vs_random(rng):
    crand = channel.randu(4, rng=rng)
    noint = channel.no_interference(4)
    unif = probab.uniform(4)
    result = refinement.refine_with_witness(noint, crand)
    assert not result.refined
    assert g_vuln.posterior(result.gain, unif, noint) < g_vuln.posterior(result.gain, unif, crand)


def test_witness_when_refined(rng):
    crand = channel.randu(4, rng=rng)
    id_4 = channel.identity(4)
    result = refinement.refine_with_witness(id_4, crand)
    assert result.refined
    assert result.gain.size == 0
    assert channel.equal(id_4 @ result.remap, crand, 1e-3, 0.0)


def test_witness_composition(rng):
    crand = channel.randu(4, rng=rng)
    T = crand @ channel.randu(4, rng=rng)
    result = refinement.refine_with_witness(crand, T)
    assert result.refined
    assert channel.equal(crand @ result.remap, T, 1e-3, 0.0)


def test_witness_size_mismatch():
    with pytest.raises(ValueError):
        refinement.refine_with_witness(channel.identity(3), channel.identity(4))


def test_max_refined_by():
    id_4 = channel.identity(4)
    noint = channel.no_interference(4)
    assert refinement.max_refined_by(id_4, noint)
    assert not refinement.max_refined_by(noint, id_4)


def test_priv_refined_by(rng):
    crand = channel.randu(4, rng=rng)
    noint = channel.no_interference(4)
    id_4 = channel.identity(4)
    assert refinement.priv_refined_by(crand, noint)
    assert refinement.priv_refined_by(crand, crand)
    assert not refinement.priv_refined_by(noint, id_4)


def test_add_metric_refined_is_zero():
    value, _ = refinement.add_metric(probab.uniform(4), channel.identity(4), channel.no_interference(4))
    assert probab.approx_equal(value, 0.0, 1e-5, 0.0)


def test_add_metric_random(rng):
    crand = channel.randu(10, rng=rng)
    unif = probab.uniform(10)
    for A, B in [
        (channel.identity(10), crand),
        (crand, channel.no_interference(10)),
        (crand, crand @ crand),
    ]:
        value, _ = refinement.add_metric(unif, A, B)
        assert probab.approx_equal(value, 0.0, 1e-5, 0.0)


def test_add_metric_known_value():
    pi = probab.from_string("62/100 3/100 35/100")
    A = channel.from_string("1/10 2/5 1/10 2/5; 1/5 1/5 3/10 3/10; 1/2 1/10 1/10 3/10")
    B = channel.from_string("1/5 11/50 29/50; 1/5 2/5  2/5; 7/20 2/5 1/4")
    value, G = refinement.add_metric(pi, A, B)
    assert probab.approx_equal(value, 18643 / 2220000, 0.0, 1e-5)
    assert G.shape == (4 + 3 + 1, 3)
    assert np.all(G[-1] == 0.0)
    assert np.all(G <= 1.0 + 1e-9)


def test_add_metric_invalid_sizes():
    with pytest.raises(ValueError):
        refinement.add_metric(probab.uniform(3), channel.identity(4), channel.identity(4))
    with pytest.raises(ValueError):
        refinement.add_metric(probab.uniform(4), channel.identity(4), channel.identity(3))