# stochastic/values.py
"""
Pure functions over path values.

A value is either a ``numpy.float64`` (deterministic) or a read-only 1-D
``float64`` array with one entry per Monte-Carlo path. Every function returns a
new value and never mutates its inputs. Floating point edge cases (x/0, log of a
non-positive number, ...) propagate as NaN/inf without warnings.
"""
from __future__ import annotations

import builtins
import functools
from typing import Any, Union

import numpy as np

Value = Union[np.float64, np.ndarray]


def freeze(x) -> Value:
    """Normalize a numpy result: 0-d -> float64, arrays -> read-only."""
    if isinstance(x, np.ndarray):
        if x.ndim == 0:
            return np.float64(x)
        x.flags.writeable = False
        return x
    return np.float64(x)


def _quiet(fn):
    """Evaluate ``fn`` with numpy floating point warnings silenced."""
    @functools.wraps(fn)
    def wrapper(*args):
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return freeze(fn(*args))
    return wrapper


def as_value(x: Any) -> Value:
    """
    Convert user input into a path value.

    int/float/numpy scalar -> float64 scalar (deterministic)
    list/tuple/1-D ndarray -> read-only float64 array (copied)
    """
    if isinstance(x, (int, float, np.integer, np.floating)):
        return np.float64(x)
    if isinstance(x, (list, tuple, np.ndarray)):
        arr = np.array(x, dtype=np.float64)
        if arr.ndim == 0:
            return np.float64(arr)
        if arr.ndim != 1:
            raise ValueError(f"path values must be 1-D, got shape {arr.shape}")
        if arr.shape[0] == 0:
            raise ValueError("path values need at least one path")
        arr.flags.writeable = False
        return arr
    raise TypeError(
        f"path values only accept numeric types (int, float, list, tuple, ndarray), "
        f"but got {type(x)}"
    )


def is_deterministic(x: Value) -> bool:
    return np.ndim(x) == 0


def size(x: Value) -> int:
    """Number of paths; 1 for a deterministic value."""
    return 1 if np.ndim(x) == 0 else int(np.shape(x)[0])


def constant_like(x: Value, c: float) -> Value:
    if is_deterministic(x):
        return np.float64(c)
    return freeze(np.full(size(x), c, dtype=np.float64))


def ones_like(x: Value) -> Value:
    return constant_like(x, 1.0)


def zeros_like(x: Value) -> Value:
    return constant_like(x, 0.0)


@_quiet
def sum_paths(x: Value) -> Value:
    return np.sum(x)


# ---------------- elementwise ----------------

@_quiet
def add(x, y): return np.add(x, y)

@_quiet
def sub(x, y): return np.subtract(x, y)

@_quiet
def mult(x, y): return np.multiply(x, y)

@_quiet
def div(x, y): return np.divide(x, y)

@_quiet
def squared(x): return np.multiply(x, x)

@_quiet
def sqrt(x): return np.sqrt(x)

@_quiet
def log(x): return np.log(x)

@_quiet
def exp(x): return np.exp(x)

@_quiet
def sin(x): return np.sin(x)

@_quiet
def cos(x): return np.cos(x)

@_quiet
def invert(x): return np.divide(1.0, x)

@_quiet
def abs(x): return np.abs(x)

@_quiet
def sign(x): return np.sign(x)

@_quiet
def pow(x, y): return np.power(x, y)

@_quiet
def cap(x, y):
    """Elementwise min(x, y)."""
    return np.minimum(x, y)

@_quiet
def floor(x, y):
    """Elementwise max(x, y)."""
    return np.maximum(x, y)

@_quiet
def add_product(x, y, z): return x + y * z

@_quiet
def add_ratio(x, y, z): return x + y / z

@_quiet
def sub_ratio(x, y, z): return x - y / z

@_quiet
def accrue(x, rate, period):
    """x * (1 + rate * period)"""
    return x * (1.0 + rate * period)

@_quiet
def discount(x, rate, period):
    """x / (1 + rate * period)"""
    return x / (1.0 + rate * period)

@_quiet
def barrier(trigger, if_non_negative, if_negative):
    """``if_non_negative`` where trigger >= 0, else ``if_negative``."""
    return np.where(np.greater_equal(trigger, 0.0), if_non_negative, if_negative)

@_quiet
def indicator(condition):
    """1.0 where condition holds, else 0.0."""
    return np.where(condition, 1.0, 0.0)


# ---------------- reductions (always deterministic) ----------------

@_quiet
def average(x): return np.mean(x)

@_quiet
def variance(x):
    """Population variance (denominator N)."""
    return np.mean(np.square(x - np.mean(x)))

@_quiet
def sample_variance(x):
    """Sample variance (denominator N - 1); NaN for a single path."""
    return np.sum(np.square(x - np.mean(x))) / np.float64(size(x) - 1)

@_quiet
def standard_deviation(x): return np.sqrt(variance(x))

@_quiet
def standard_error(x): return np.sqrt(variance(x) / size(x))

@_quiet
def min(x): return np.min(x)

@_quiet
def max(x): return np.max(x)


# ---------------- probability-weighted reductions ----------------

def broadcast_size(x: Value, p: Value) -> int:
    """Number of paths of x and p taken together."""
    return builtins.max(size(x), size(p))

@_quiet
def weighted_average(x, p):
    """mean(x * p): with p the path probabilities times N this is E[x]."""
    return np.mean(np.multiply(x, p) + np.zeros(broadcast_size(x, p)))

@_quiet
def weighted_variance(x, p):
    """sum((x - a)^2 * p) with a = weighted_average(x, p)."""
    a = weighted_average(x, p)
    return np.sum(np.square(x - a) * p + np.zeros(broadcast_size(x, p)))

@_quiet
def weighted_standard_deviation(x, p): return np.sqrt(weighted_variance(x, p))

@_quiet
def weighted_standard_error(x, p):
    return np.sqrt(weighted_variance(x, p) / broadcast_size(x, p))
