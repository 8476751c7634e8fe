# aad/core/__init__.py

"""
Core public API for the AAD package.

Exports:
    Tape                : Append-only record of one differentiation session.
    variable, constant  : Record a free variable / constant leaf on a tape.
    DifferentiableValue : Value recorded on a tape; operations record new nodes.
    VariableHandle      : Key of a variable in a Gradient.
    ReverseAccumulator  : One reverse sweep over a tape.
    Gradient            : Read-only mapping of adjoints returned by a sweep.
    gradient            : Reverse sweep from a DifferentiableValue.
    grad, grads, grads_list, value : Convenience drivers on a fresh tape.
"""

from .node import Node
from .tape import Tape, variable, constant
from .var import DifferentiableValue, VariableHandle
from .engine import Gradient, ReverseAccumulator, gradient
from .seeds import grad, grads, grads_list, value

__all__ = [
    "Node",
    "Tape", "variable", "constant",
    "DifferentiableValue", "VariableHandle",
    "Gradient", "ReverseAccumulator", "gradient",
    "grad", "grads", "grads_list", "value",
]
