# aad/ops/arithmetic.py
"""
Rational operators: add, sub, mult, div, pow, squared, invert and the fused
three-argument forms add_product / add_ratio / sub_ratio.

Partials are written against the forward argument values captured on the
tape, never against other nodes' adjoints.
"""
import numpy as np

from ...stochastic import values as V
from .kinds import OperatorKind, binary, ternary, unary

ONE = np.float64(1.0)
MINUS_ONE = np.float64(-1.0)
ZERO = np.float64(0.0)


RULES = {
    OperatorKind.ADD: binary(V.add, lambda a, b: ONE, lambda a, b: ONE),
    OperatorKind.SUB: binary(V.sub, lambda a, b: ONE, lambda a, b: MINUS_ONE),
    OperatorKind.MULT: binary(V.mult, lambda a, b: b, lambda a, b: a),
    OperatorKind.DIV: binary(V.div, lambda a, b: 1.0 / b, lambda a, b: -a / np.square(b)),

    # The exponent is treated as deterministic: d/d(exponent) is zero.
    OperatorKind.POW: binary(V.pow, lambda a, b: b * np.power(a, b - 1.0), lambda a, b: ZERO),

    OperatorKind.SQUARED: unary(V.squared, lambda a: 2.0 * a),
    OperatorKind.INVERT: unary(V.invert, lambda a: -1.0 / np.square(a)),

    # x + y * z
    OperatorKind.ADDPRODUCT: ternary(
        V.add_product,
        lambda x, y, z: ONE,
        lambda x, y, z: z,
        lambda x, y, z: y,
    ),
    # x + y / z
    OperatorKind.ADDRATIO: ternary(
        V.add_ratio,
        lambda x, y, z: ONE,
        lambda x, y, z: 1.0 / z,
        lambda x, y, z: -y / np.square(z),
    ),
    # x - y / z
    OperatorKind.SUBRATIO: ternary(
        V.sub_ratio,
        lambda x, y, z: ONE,
        lambda x, y, z: -1.0 / z,
        lambda x, y, z: y / np.square(z),
    ),
}
