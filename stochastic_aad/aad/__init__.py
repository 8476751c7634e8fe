# aad/__init__.py
# Adjoint algorithmic differentiation over Monte-Carlo path values

from .ops import OperatorKind, OperatorRule
from .core.tape import Tape, variable, constant
from .core.var import DifferentiableValue, VariableHandle
from .core.engine import Gradient, ReverseAccumulator, gradient
from .core.seeds import grad, grads, grads_list, value

__all__ = [
    # Operators
    'OperatorKind',
    'OperatorRule',
    # Core
    'Tape',
    'variable',
    'constant',
    'DifferentiableValue',
    'VariableHandle',
    # Engine
    'Gradient',
    'ReverseAccumulator',
    'gradient',
    # Drivers
    'grad',
    'grads',
    'grads_list',
    'value',
]
