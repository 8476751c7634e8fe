# aad/ops/special.py
"""
Non-smooth and financial operators: abs, cap, floor, accrue, discount, barrier.

Kinks (abs at 0, cap/floor at x == y) use one-sided conventions, the barrier
trigger derivative is a Dirac delta (see _barrier_partial).
"""
import numpy as np

from ...stochastic import values as V
from .kinds import OperatorKind, OperatorRule, binary, ternary, unary


def _like(trigger, v):
    """`v` broadcast to at least the shape of the trigger."""
    return np.add(V.zeros_like(trigger), v)


def _barrier_partial(k, args, result, config):
    trigger, if_non_negative, if_negative = args
    if k == 1:
        return np.where(trigger >= 0.0, 1.0, 0.0)
    if k == 2:
        return np.where(trigger >= 0.0, 0.0, 1.0)

    method = config.barrier_dirac_method
    if method == "one":
        return _like(trigger, if_non_negative - if_negative)
    if method == "zero":
        return V.zeros_like(trigger)

    width = config.barrier_dirac_width
    if method is None and width == 0.0:
        # Exact derivative: a Dirac delta located at the trigger boundary.
        return np.where(trigger == 0.0, np.inf, 0.0)

    # Smoothed delta: local finite difference over [-eps/2, eps/2).
    epsilon = width * V.standard_deviation(trigger)
    if np.isinf(epsilon):
        return _like(trigger, if_non_negative - if_negative)
    if not epsilon > 0.0:
        return V.zeros_like(trigger)
    inside = np.logical_and(trigger + 0.5 * epsilon >= 0.0, trigger - 0.5 * epsilon < 0.0)
    return (if_non_negative - if_negative) * np.where(inside, 1.0, 0.0) / epsilon


RULES = {
    OperatorKind.ABS: unary(V.abs, lambda x: np.sign(x)),

    # min(x, y)
    OperatorKind.CAP: binary(
        V.cap,
        lambda x, y: np.where(x > y, 0.0, 1.0),
        lambda x, y: np.where(x > y, 1.0, 0.0),
    ),
    # max(x, y)
    OperatorKind.FLOOR: binary(
        V.floor,
        lambda x, y: np.where(x > y, 1.0, 0.0),
        lambda x, y: np.where(x > y, 0.0, 1.0),
    ),

    # x * (1 + y * z)
    OperatorKind.ACCRUE: ternary(
        V.accrue,
        lambda x, y, z: 1.0 + y * z,
        lambda x, y, z: x * z,
        lambda x, y, z: x * y,
    ),
    # x / (1 + y * z)
    OperatorKind.DISCOUNT: ternary(
        V.discount,
        lambda x, y, z: 1.0 / (1.0 + y * z),
        lambda x, y, z: -x * z / np.square(1.0 + y * z),
        lambda x, y, z: -x * y / np.square(1.0 + y * z),
    ),

    # y where x >= 0 else z
    OperatorKind.BARRIER: OperatorRule(3, V.barrier, _barrier_partial),
}
