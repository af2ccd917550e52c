# qiflib

Tools for quantitative information flow. A system is modelled as a channel,
which is a row-stochastic matrix from secrets (rows) to observations
(columns). The package then measures how much the channel leaks.

Priors are 1-D NumPy arrays of floats. Channels are 2-D NumPy arrays of
floats. Approximate comparisons use an absolute and a relative tolerance,
both `1e-7` by default (`probab.DEF_MD`, `probab.DEF_MRD`).

## Installation

```
pip install .
```

To also install the test dependencies:

```
pip install ".[test]"
```

## Priors: `qiflib.probab`

```python
from qiflib import probab

pi = probab.uniform(4)                    # [0.25, 0.25, 0.25, 0.25]
dirac = probab.point(4, 2)                # [0, 0, 1, 0]
rand = probab.randu(5)                    # uniform on the simplex
parsed = probab.from_string("1/2 1/4 1/4")
probab.assert_proper(parsed)              # raises ValueError if not a distribution
```

Other functions:

- `normalize`, `is_uniform`, `is_proper` and `equal`.
- `sample` and `sample_many`, for sampling indices.
- `to_grid` and `from_grid`, to lay a distribution out on a grid and flatten it back.
- `approx_equal`, `less_than` and `less_than_or_eq`, for tolerant comparisons.

Every random function takes an optional `numpy.random.Generator`.

## Channels: `qiflib.channel`

```python
from qiflib import channel, probab

C = channel.from_string("0.5 0.5; 0.1 0.9")
channel.assert_proper(C)

outer, inners = channel.hyper(C, probab.uniform(2))
R = channel.reduced(C)
post = channel.posterior(C, probab.uniform(2), 0)
```

Constructors:

- `identity`
- `no_interference`
- `randu`
- `deterministic`, which takes a sequence, or a function together with `n_rows`

Factorization:

- `factorize(A, B)` looks for a channel `X` with `A = B @ X`. It uses linear
  programming for small matrices and a projected subgradient method for
  matrices with at least 1000 entries.
- `left_factorize(A, B)` looks for a channel `X` with `A = X @ B`.
- `factorize_lp` and `factorize_subgrad` run one method directly.

When no channel exists, these functions return an empty matrix.

Other functions:

- `iterative_bayesian_update(C, out)` estimates the prior that produced the
  output distribution `out`. It returns the estimate and the number of
  iterations.
- `parallel` and `repeated_independent` compose channels.
- `sample` draws one (secret, output) pair.
- `sample_many` draws an `n x 2` array of (secret, output) pairs from the joint distribution.
- `posteriors`, `sum_column_min` and `compare_columns`.

## Measures: `qiflib.measure`

Each measure module provides `prior`, `posterior`, `add_leakage` and
`mult_leakage`. Some of them also provide capacities and bounds.

```python
import numpy as np
from qiflib import probab
from qiflib.measure import bayes_vuln, shannon, g_vuln

pi = probab.uniform(2)
C = np.eye(2)
bayes_vuln.posterior(pi, C)                       # 1.0
bayes_vuln.mult_capacity(C)                       # 2.0
cap, best_prior = shannon.add_capacity(C)         # 1.0, [0.5, 0.5]
g_vuln.posterior(g_vuln.gain_identity(2), pi, C)  # 1.0
```

| Module | What it measures | Other functions |
| --- | --- | --- |
| `bayes_vuln` | Bayes vulnerability | `min_entropy_leakage`, `mult_capacity`, `strategy`, `cap`, `mult_capacity_bound_cap` |
| `bayes_risk` | Bayes risk | `mult_capacity` (returns the capacity and a prior), `mult_capacity_bound1` to `mult_capacity_bound5`, posterior bounds |
| `guessing` | Guessing entropy | |
| `shannon` | Shannon entropy | `add_capacity`, computed with the Blahut-Arimoto algorithm |
| `g_vuln` | g-vulnerability | see below |
| `l_risk` | l-risk | `loss_to_gain`, `l_zero_one`, `loss_zero_one` |
| `pred_vuln` | Vulnerability of a predicate `P` | `gain_pred`, `mult_capacity`, `binary_channel` |
| `pred_risk` | Risk of a predicate `P` | `loss_pred`, `mult_capacity`, `binary_channel` |
| `d_privacy` | d-privacy | `is_private(C, d)`, `smallest_epsilon(C, d)`, `prior(pi, d)`; `d` is a callable `d(x1, x2)` |

In `g_vuln` and `l_risk`, a gain or loss function is either a matrix with one
row per guess and one column per secret, or a callable `g(w, x)`. A callable
is evaluated with the guesses taken to be the secrets.

`g_vuln` also provides:

- `strategy` and `add_capacity`
- leakage bounds
- gain-function algebra: `g_id`, `gain_identity`, `g_add`,
  `g_from_posterior` and `g_to_bayes`

In `pred_vuln` and `pred_risk`, a predicate is a 0/1 vector with one entry per
secret.

## Refinement: `qiflib.refinement`

```python
from qiflib import refinement

refinement.refined_by(A, B)          # True if B = A @ X for some channel X
result = refinement.refine_with_witness(A, B)
if not result:
    G = result.gain                  # a gain function under which B leaks more
R = result.remap                     # channel minimizing |A @ R - B|
leak, G = refinement.add_metric(pi, A, B)
```

Other functions:

- `max_refined_by` checks max-case refinement.
- `priv_refined_by` checks that every d-privacy guarantee of `A` also holds
  for `B`.

## Other modules

- `qiflib.quadratic`: `QuadraticProgram` minimizes `1/2 x^T P x + c^T x`
  subject to `l <= A x <= u`. You can build the program variable by variable
  or load it with `from_matrix`. After `solve()`, the result is available in
  `status` (a `Status`), `solution`, `objective` and `value(var)`.
- `qiflib.geo`: provides the following.
  - `Point` and `LatLon`. `LatLon.add_vector` moves a given distance, in
    meters, in a given direction.
  - `cell_to_point` and `point_to_cell`, for grid cells.
  - `grid_walk`, an infinite generator that visits grid points ring by ring.
- `qiflib.plot`: `gnuplot_barycentric_3d(f, filename)` writes a gnuplot
  script that plots `f` over all priors on three secrets.

## What the package does not do

- It is a library only. It has no command-line interface.
- `qiflib.plot` writes a script file but does not run gnuplot.
- Exact rational arithmetic is not supported. All values are floats.