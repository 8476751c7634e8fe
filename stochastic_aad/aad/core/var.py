# aad/core/var.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import numpy as np

from ...errors import StaleValueError, TapeMismatchError, UnsupportedOperationError
from ...stochastic import values as V
from ..ops.kinds import OperatorKind


@dataclass(frozen=True)
class VariableHandle:
    """
    Identity of a node on a specific tape generation, used as gradient key.

    Attributes
    ----------
    node_id : int
        Id of the node on the tape.
    tape_uid : int
        `Tape.uid` of the owning tape.
    generation : int
        Tape generation the node was recorded in.
    """
    node_id: int
    tape_uid: int
    generation: int


class DifferentiableValue:
    """
    A value recorded on a tape.

    Every operation records a new node on the same tape and returns a new
    DifferentiableValue; nothing is mutated. Plain numbers mixed into an
    operation are recorded as constant leaves.

    Attributes
    ----------
    tape : Tape
        Owning tape.
    node_id : int
        Id of the node holding this value.
    value : float64 | ndarray
        Forward value (read-only).
    """

    __slots__ = ("_tape", "_node_id", "_value", "_generation")

    # numpy must not treat this object as an array; reflected operators are used instead
    __array_ufunc__ = None

    def __init__(self, tape, node_id: int):
        self._tape = tape
        self._node_id = node_id
        self._value = tape.value_of(node_id)
        self._generation = tape.generation

    def __repr__(self):
        node = self._tape.nodes[self._node_id] if not self.is_stale else None
        tag = node.tag if node is not None else "stale"
        return f"DifferentiableValue(id={self._node_id}, {tag}, value={self._value!r})"

    # ---------------- identity ----------------

    @property
    def tape(self):
        return self._tape

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def value(self):
        return self._value

    @property
    def is_stale(self) -> bool:
        return self._generation != self._tape.generation

    @property
    def is_constant(self) -> bool:
        return self._node().is_constant

    @property
    def is_variable(self) -> bool:
        return self._node().is_variable

    @property
    def handle(self) -> VariableHandle:
        self._check_live()
        return VariableHandle(self._node_id, self._tape.uid, self._generation)

    # ---------------- plain value helpers ----------------

    @property
    def size(self) -> int:
        return V.size(self._value)

    def is_deterministic(self) -> bool:
        return V.is_deterministic(self._value)

    @property
    def realizations(self) -> np.ndarray:
        """Path values as a 1-D array (deterministic values are broadcast to one path)."""
        return np.atleast_1d(self._value)

    def __float__(self):
        if not V.is_deterministic(self._value):
            raise TypeError(f"cannot convert a value with {self.size} paths to float")
        return float(self._value)

    # ---------------- recording ----------------

    def _check_live(self):
        if self.is_stale:
            raise StaleValueError(
                f"node {self._node_id} belongs to generation {self._generation} of tape "
                f"{self._tape.uid}, which has been reset"
            )

    def _node(self):
        self._check_live()
        return self._tape.nodes[self._node_id]

    def _operand(self, other: Any) -> "DifferentiableValue":
        if isinstance(other, DifferentiableValue):
            if other._tape is not self._tape:
                raise TapeMismatchError(
                    f"cannot combine values from tape {other._tape.uid} and tape {self._tape.uid}"
                )
            other._check_live()
            return other
        return self._tape.constant(other)

    def _record(self, kind: OperatorKind, *others: Any) -> "DifferentiableValue":
        self._check_live()
        operands = [self._operand(o) for o in others]
        ids = [self._node_id] + [o._node_id for o in operands]
        return DifferentiableValue(self._tape, self._tape.record_operation(kind, ids))

    # ---------------- elementwise ----------------

    def add(self, other): return self._record(OperatorKind.ADD, other)
    def sub(self, other): return self._record(OperatorKind.SUB, other)
    def mult(self, other): return self._record(OperatorKind.MULT, other)
    def div(self, other): return self._record(OperatorKind.DIV, other)

    def pow(self, exponent):
        """self ** exponent. The exponent is treated as deterministic: it receives no adjoint."""
        return self._record(OperatorKind.POW, exponent)

    def squared(self): return self._record(OperatorKind.SQUARED)
    def sqrt(self): return self._record(OperatorKind.SQRT)
    def exp(self): return self._record(OperatorKind.EXP)
    def log(self): return self._record(OperatorKind.LOG)
    def sin(self): return self._record(OperatorKind.SIN)
    def cos(self): return self._record(OperatorKind.COS)
    def invert(self): return self._record(OperatorKind.INVERT)
    def abs(self): return self._record(OperatorKind.ABS)

    def cap(self, cap):
        """Elementwise min(self, cap)."""
        return self._record(OperatorKind.CAP, cap)

    def floor(self, floor):
        """Elementwise max(self, floor)."""
        return self._record(OperatorKind.FLOOR, floor)

    def add_product(self, factor1, factor2):
        """self + factor1 * factor2"""
        return self._record(OperatorKind.ADDPRODUCT, factor1, factor2)

    def add_ratio(self, numerator, denominator):
        """self + numerator / denominator"""
        return self._record(OperatorKind.ADDRATIO, numerator, denominator)

    def sub_ratio(self, numerator, denominator):
        """self - numerator / denominator"""
        return self._record(OperatorKind.SUBRATIO, numerator, denominator)

    def accrue(self, rate, period_length):
        """self * (1 + rate * period_length)"""
        return self._record(OperatorKind.ACCRUE, rate, period_length)

    def discount(self, rate, period_length):
        """self / (1 + rate * period_length)"""
        return self._record(OperatorKind.DISCOUNT, rate, period_length)

    def barrier(self, if_non_negative, if_negative):
        """Use self as trigger: `if_non_negative` where self >= 0, else `if_negative`."""
        return self._record(OperatorKind.BARRIER, if_non_negative, if_negative)

    # ---------------- reductions ----------------

    def _reduce(self, kind, weighted, probabilities):
        if probabilities is None:
            return self._record(kind)
        return self._record(weighted, probabilities)

    def average(self, probabilities=None):
        """Path average; with `probabilities` P, mean(self * P)."""
        return self._reduce(OperatorKind.AVERAGE, OperatorKind.WEIGHTED_AVERAGE, probabilities)

    def variance(self, probabilities=None):
        """Population variance; with `probabilities` P, sum((self - a)^2 * P), a = average(P)."""
        return self._reduce(OperatorKind.VARIANCE, OperatorKind.WEIGHTED_VARIANCE, probabilities)

    def sample_variance(self): return self._record(OperatorKind.SVARIANCE)

    def standard_deviation(self, probabilities=None):
        return self._reduce(OperatorKind.STDEV, OperatorKind.WEIGHTED_STDEV, probabilities)

    def standard_error(self, probabilities=None):
        return self._reduce(OperatorKind.STDERROR, OperatorKind.WEIGHTED_STDERROR, probabilities)

    def min(self): return self._record(OperatorKind.MIN)
    def max(self): return self._record(OperatorKind.MAX)

    def get_average(self, probabilities=None) -> float:
        return float(self.average(probabilities).value)

    def get_variance(self, probabilities=None) -> float:
        return float(self.variance(probabilities).value)

    def get_sample_variance(self) -> float: return float(self.sample_variance().value)

    def get_standard_deviation(self, probabilities=None) -> float:
        return float(self.standard_deviation(probabilities).value)

    def get_standard_error(self, probabilities=None) -> float:
        return float(self.standard_error(probabilities).value)

    def get_min(self) -> float: return float(self.min().value)
    def get_max(self) -> float: return float(self.max().value)

    def apply(self, fn, *args):
        raise UnsupportedOperationError(
            "apply() with an arbitrary function cannot be differentiated; "
            "compose the supported operations instead"
        )

    # ---------------- differentiation ----------------

    def gradient(self, wrt: Optional[Iterable[Any]] = None, *, lower_bound: int = 0,
                 restrict_to_dependencies: bool = False):
        """
        d self / d v for every free variable v the value depends on.

        Args:
            wrt: optional variables (DifferentiableValue or VariableHandle) to report
            lower_bound: nodes with smaller ids are not expanded
            restrict_to_dependencies: skip branches that cannot reach `wrt`
        Returns:
            Gradient mapping keyed by VariableHandle
        """
        from .engine import gradient
        return gradient(self, wrt, lower_bound=lower_bound,
                        restrict_to_dependencies=restrict_to_dependencies)

    # ---------------- operator overloading ----------------

    def __add__(self, other): return self.add(other)
    def __radd__(self, other): return self._operand(other).add(self)
    def __sub__(self, other): return self.sub(other)
    def __rsub__(self, other): return self._operand(other).sub(self)
    def __mul__(self, other): return self.mult(other)
    def __rmul__(self, other): return self._operand(other).mult(self)
    def __truediv__(self, other): return self.div(other)
    def __rtruediv__(self, other): return self._operand(other).div(self)
    def __pow__(self, other): return self.pow(other)

    def __rpow__(self, other):
        # base ** self, written as exp(self * log(base)) so the exponent is differentiated
        return self.mult(self._operand(other).log()).exp()

    def __neg__(self): return self.mult(-1.0)
    def __pos__(self): return self
    def __abs__(self): return self.abs()
