"""Probability distributions over a finite set of secrets, stored as 1-D numpy arrays."""

from __future__ import annotations

import math
import re
from fractions import Fraction
from typing import Iterable

import numpy as np

DEF_MD = 1e-7
"""Default maximum absolute difference for approximate comparisons."""

DEF_MRD = 1e-7
"""Default maximum relative difference for approximate comparisons."""


def approx_equal(a: float, b: float, md: float = DEF_MD, mrd: float = DEF_MRD) -> bool:
    """True if a and b differ by at most md absolutely or mrd relatively."""
    a = float(a)
    b = float(b)
    if a == b:
        return True
    if math.isinf(a) or math.isinf(b) or math.isnan(a) or math.isnan(b):
        return False
    diff = abs(a - b)
    return diff <= md or diff <= mrd * max(abs(a), abs(b))


def less_than(a: float, b: float, md: float = DEF_MD, mrd: float = DEF_MRD) -> bool:
    """True if a < b and the two are not approximately equal."""
    return float(a) < float(b) and not approx_equal(a, b, md, mrd)


def less_than_or_eq(a: float, b: float, md: float = DEF_MD, mrd: float = DEF_MRD) -> bool:
    """True if a <= b or the two are approximately equal."""
    return float(a) <= float(b) or approx_equal(a, b, md, mrd)


def _parse_number(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        try:
            return float(Fraction(token))
        except (ValueError, ZeroDivisionError) as exc:
            raise ValueError(f"invalid number: {token!r}") from exc


def from_string(text: str) -> np.ndarray:
    """Parse a whitespace (or comma) separated list of numbers, fractions allowed."""
    if ";" in text:
        raise ValueError("a distribution has a single row")
    tokens = [t for t in re.split(r"[\s,]+", text.strip()) if t]
    return np.array([_parse_number(t) for t in tokens], dtype=float)


def uniform(n: int) -> np.ndarray:
    """The uniform distribution on n elements."""
    if n == 0:
        return np.empty(0)
    return np.full(n, 1.0 / n)


def point(n: int, i: int = 0) -> np.ndarray:
    """The point distribution on element i, out of n."""
    if not 0 <= i < n:
        raise IndexError("point index out of range")
    pi = np.zeros(n)
    pi[i] = 1.0
    return pi


def randu(n: int, rng: np.random.Generator | None = None) -> np.ndarray:
    """A distribution drawn uniformly from the (n-1)-simplex.

    Draws n-1 uniform numbers, adds 1, sorts, and takes consecutive
    differences; this is uniform on the simplex and sums very close to 1.
    """
    if n == 0:
        return np.empty(0)
    rng = rng if rng is not None else np.random.default_rng()
    values = rng.random(n)
    values[-1] = 1.0
    values.sort()
    return np.diff(values, prepend=0.0)


def normalize(pi: Iterable[float]) -> np.ndarray:
    """Scale pi so that it sums to 1."""
    arr = np.asarray(pi, dtype=float)
    return arr / arr.sum()


def sample(pi: Iterable[float], rng: np.random.Generator | None = None) -> int:
    """Draw one index from the distribution pi."""
    rng = rng if rng is not None else np.random.default_rng()
    values = [float(v) for v in pi]
    p = rng.random()
    accu = 0.0
    for index, value in enumerate(values):
        accu += value
        if not less_than(accu, p):
            return index
    return len(values) - 1


def sample_many(
    pi: Iterable[float], n: int, rng: np.random.Generator | None = None
) -> np.ndarray:
    """Draw n indices from pi with a single pass over its elements."""
    rng = rng if rng is not None else np.random.default_rng()
    values = iter(float(v) for v in pi)
    ps = rng.random(n)
    order = np.argsort(ps, kind="stable")
    result = np.zeros(n, dtype=np.int64)

    accu = 0.0
    cur = -1
    exhausted = False
    for idx in order:
        p = ps[idx]
        while not exhausted and less_than(accu, p):
            try:
                accu += next(values)
            except StopIteration:
                exhausted = True
                break
            cur += 1
        result[idx] = max(cur, 0)
    return result


def is_uniform(pi: Iterable[float], mrd: float = DEF_MRD) -> bool:
    """True if every element equals 1/n up to relative difference mrd."""
    arr = np.asarray(pi, dtype=float)
    if arr.size == 0:
        return True
    v = 1.0 / arr.size
    return all(approx_equal(v, x, 0.0, mrd) for x in arr)


def is_proper(pi: Iterable[float], mrd: float = DEF_MRD) -> bool:
    """True if pi is non-negative and sums to 1."""
    arr = np.asarray(pi, dtype=float)
    if any(less_than(x, 0.0) for x in arr):
        return False
    return approx_equal(arr.sum(), 1.0, DEF_MD, mrd)


def assert_proper(pi: Iterable[float]) -> None:
    """Raise ValueError unless pi is a proper distribution."""
    if not is_proper(pi):
        raise ValueError("not a proper dist")


def equal(a: Iterable[float], b: Iterable[float], md: float = DEF_MD, mrd: float = DEF_MRD) -> bool:
    """Element-wise approximate equality of two distributions of the same size."""
    x = np.asarray(a, dtype=float)
    y = np.asarray(b, dtype=float)
    if x.shape != y.shape:
        return False
    return all(approx_equal(u, v, md, mrd) for u, v in zip(x.flat, y.flat))


def to_grid(pi: Iterable[float], width: int) -> np.ndarray:
    """Lay out a distribution on a grid of the given width as a matrix.

    Element k ends up at row k // (n / width), column k % (n / width).
    """
    arr = np.asarray(pi, dtype=float)
    if width <= 0 or arr.size % width:
        raise ValueError("size is not a multiple of width")
    return arr.reshape(width, arr.size // width).copy()


def from_grid(grid: np.ndarray) -> np.ndarray:
    """Flatten a grid matrix row by row into a distribution."""
    return np.asarray(grid, dtype=float).ravel().copy()