# aad/ops/transcendental.py
import numpy as np

from ...stochastic import values as V
from .kinds import OperatorKind, unary

RULES = {
    OperatorKind.SQRT: unary(V.sqrt, lambda x: 0.5 / np.sqrt(x)),
    OperatorKind.LOG: unary(V.log, lambda x: 1.0 / x),
    OperatorKind.EXP: unary(V.exp, lambda x: np.exp(x)),
    OperatorKind.SIN: unary(V.sin, lambda x: np.cos(x)),
    OperatorKind.COS: unary(V.cos, lambda x: -np.sin(x)),
}
