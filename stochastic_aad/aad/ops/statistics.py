# aad/ops/statistics.py
"""
Path statistics: reductions of a path vector to a deterministic number.

With N the number of paths and m the path average, the local derivatives are

    AVERAGE   : 1/N
    VARIANCE  : 2/N * (X - m * (2N - 1) / N)
    STDEV     : VARIANCE' * 0.5 / sqrt(variance)
    STDERROR  : VARIANCE' * 0.5 / sqrt(variance * N)
    SVARIANCE : 2/(N - 1) * (X - m * (2N - 1) / N)
    MIN / MAX : 1 on every path attaining the extremum, 0 elsewhere

With probabilities P, a = mean(X * P) and c = sum(2 (X - a) P), the weighted
reductions use the exact derivatives

    WEIGHTED_AVERAGE  : dX = P / N,  dP = X / N
    WEIGHTED_VARIANCE : dX = 2 (X - a) P - c P / N,  dP = (X - a)^2 - c X / N
    WEIGHTED_STDEV    : WEIGHTED_VARIANCE' * 0.5 / sqrt(weighted variance)
    WEIGHTED_STDERROR : WEIGHTED_VARIANCE' * 0.5 / sqrt(weighted variance * N)

The unweighted variance-family rules equal the exact derivative only where m == 0.
Ties in MIN / MAX give every tied path a full unit (no normalization by the
number of ties).
"""
import numpy as np

from ...stochastic import values as V
from .kinds import OperatorKind, binary, unary


def _variance_partial(x):
    n = V.size(x)
    return (x - V.average(x) * (2.0 * n - 1.0) / n) * (2.0 / n)


def _average_partial(x):
    return V.constant_like(x, 1.0 / V.size(x))


def _stdev_partial(x):
    return _variance_partial(x) * 0.5 / np.sqrt(V.variance(x))


def _stderror_partial(x):
    return _variance_partial(x) * 0.5 / np.sqrt(V.variance(x) * V.size(x))


def _sample_variance_partial(x):
    n = V.size(x)
    return (x - V.average(x) * (2.0 * n - 1.0) / n) * (2.0 / np.float64(n - 1))


RULES = {
    OperatorKind.AVERAGE: unary(V.average, _average_partial),
    OperatorKind.VARIANCE: unary(V.variance, _variance_partial),
    OperatorKind.STDEV: unary(V.standard_deviation, _stdev_partial),
    OperatorKind.STDERROR: unary(V.standard_error, _stderror_partial),
    OperatorKind.SVARIANCE: unary(V.sample_variance, _sample_variance_partial),
    OperatorKind.MIN: unary(V.min, lambda x: np.where(x == np.min(x), 1.0, 0.0)),
    OperatorKind.MAX: unary(V.max, lambda x: np.where(x == np.max(x), 1.0, 0.0)),
}


def _weighted_spread(x, p):
    n = V.broadcast_size(x, p)
    deviation = x - V.weighted_average(x, p)
    return n, deviation, np.sum(2.0 * deviation * p + np.zeros(n))


def _weighted_variance_dx(x, p):
    n, deviation, c = _weighted_spread(x, p)
    return 2.0 * deviation * p - c * p / n


def _weighted_variance_dp(x, p):
    n, deviation, c = _weighted_spread(x, p)
    return np.square(deviation) - c * x / n


def _scaled(dv, scale):
    return lambda x, p: dv(x, p) * 0.5 / np.sqrt(scale(x, p))


def _variance_times_n(x, p):
    return V.weighted_variance(x, p) * V.broadcast_size(x, p)


RULES.update({
    OperatorKind.WEIGHTED_AVERAGE: binary(
        V.weighted_average,
        lambda x, p: np.add(V.zeros_like(x), p) / V.broadcast_size(x, p),
        lambda x, p: np.add(V.zeros_like(p), x) / V.broadcast_size(x, p),
    ),
    OperatorKind.WEIGHTED_VARIANCE: binary(
        V.weighted_variance, _weighted_variance_dx, _weighted_variance_dp),
    OperatorKind.WEIGHTED_STDEV: binary(
        V.weighted_standard_deviation,
        _scaled(_weighted_variance_dx, V.weighted_variance),
        _scaled(_weighted_variance_dp, V.weighted_variance),
    ),
    OperatorKind.WEIGHTED_STDERROR: binary(
        V.weighted_standard_error,
        _scaled(_weighted_variance_dx, _variance_times_n),
        _scaled(_weighted_variance_dp, _variance_times_n),
    ),
})
