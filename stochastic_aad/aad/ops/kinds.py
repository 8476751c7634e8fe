# aad/ops/kinds.py
"""
The closed set of operators that can be recorded on a tape.

Each member carries its arity and whether it reduces a path vector to a
deterministic number. Adding an operator means adding a member here and one
rule in the table (see table.py), never subclassing.
"""
from enum import Enum
from typing import Any, Callable, NamedTuple


class OperatorKind(Enum):

    # one argument
    SQUARED = ("squared", 1, False)
    SQRT = ("sqrt", 1, False)
    LOG = ("log", 1, False)
    SIN = ("sin", 1, False)
    COS = ("cos", 1, False)
    EXP = ("exp", 1, False)
    INVERT = ("invert", 1, False)
    ABS = ("abs", 1, False)
    AVERAGE = ("average", 1, True)
    VARIANCE = ("variance", 1, True)
    STDEV = ("stdev", 1, True)
    STDERROR = ("stderror", 1, True)
    SVARIANCE = ("svariance", 1, True)
    MIN = ("min", 1, True)
    MAX = ("max", 1, True)

    # two arguments
    ADD = ("add", 2, False)
    SUB = ("sub", 2, False)
    MULT = ("mult", 2, False)
    DIV = ("div", 2, False)
    POW = ("pow", 2, False)
    CAP = ("cap", 2, False)
    FLOOR = ("floor", 2, False)
    WEIGHTED_AVERAGE = ("waverage", 2, True)
    WEIGHTED_VARIANCE = ("wvariance", 2, True)
    WEIGHTED_STDEV = ("wstdev", 2, True)
    WEIGHTED_STDERROR = ("wstderror", 2, True)

    # three arguments
    ADDPRODUCT = ("addproduct", 3, False)
    ADDRATIO = ("addratio", 3, False)
    SUBRATIO = ("subratio", 3, False)
    ACCRUE = ("accrue", 3, False)
    DISCOUNT = ("discount", 3, False)
    BARRIER = ("barrier", 3, False)

    def __init__(self, tag: str, arity: int, is_reduction: bool):
        self.tag = tag
        self.arity = arity
        self.is_reduction = is_reduction

    def __repr__(self):
        return f"OperatorKind.{self.name}"


class OperatorRule(NamedTuple):
    """
    Forward and partial-derivative rule of one operator kind.

    forward(*args) -> value
    partial(position, args, result, config) -> d result / d args[position]
    """
    arity: int
    forward: Callable[..., Any]
    partial: Callable[..., Any]


def unary(f, df) -> OperatorRule:
    return OperatorRule(1, f, lambda k, args, result, config: df(*args))


def binary(f, dfdx, dfdy) -> OperatorRule:
    partials = (dfdx, dfdy)
    return OperatorRule(2, f, lambda k, args, result, config: partials[k](*args))


def ternary(f, dfdx, dfdy, dfdz) -> OperatorRule:
    partials = (dfdx, dfdy, dfdz)
    return OperatorRule(3, f, lambda k, args, result, config: partials[k](*args))
