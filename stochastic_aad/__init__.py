# Adjoint algorithmic differentiation for Monte-Carlo sensitivities

from .config import AADConfig, DEFAULT_CONFIG
from .errors import (
    AADError,
    UsageError,
    UnknownOperatorError,
    ArityError,
    NodeNotFoundError,
    TapeMismatchError,
    StaleValueError,
    TapeCapacityError,
    UnsupportedOperationError,
)
from .aad import (
    OperatorKind,
    Tape,
    variable,
    constant,
    DifferentiableValue,
    VariableHandle,
    Gradient,
    ReverseAccumulator,
    gradient,
    grad,
    grads,
    grads_list,
    value,
)

__version__ = "0.1.0"

__all__ = [
    'AADConfig', 'DEFAULT_CONFIG',
    'AADError', 'UsageError', 'UnknownOperatorError', 'ArityError',
    'NodeNotFoundError', 'TapeMismatchError', 'StaleValueError',
    'TapeCapacityError', 'UnsupportedOperationError',
    'OperatorKind', 'Tape', 'variable', 'constant',
    'DifferentiableValue', 'VariableHandle',
    'Gradient', 'ReverseAccumulator', 'gradient',
    'grad', 'grads', 'grads_list', 'value',
]
