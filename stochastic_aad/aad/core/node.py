# aad/core/node.py
from dataclasses import dataclass
from typing import Optional, Tuple

from ...stochastic.values import Value
from ..ops.kinds import OperatorKind


@dataclass(frozen=True)
class Node:
    """
    One node on the tape: a leaf, or one application of an operator.

    Attributes
    ----------
    id : int
        Position on the tape; strictly greater than every id in `argument_ids`.
    operator : Optional[OperatorKind]
        The operator that produced `value`; None for leaves.
    argument_ids : Tuple[int, ...]
        Ids of the 1-3 argument nodes, in argument order (empty for leaves).
    value : float64 | ndarray
        Forward value snapshot taken when the node was recorded. Partial
        derivative rules read argument values from here.
    is_constant : bool
        Leaf whose derivative is forced to zero (literals, frozen parameters).
    """
    id: int
    operator: Optional[OperatorKind]
    argument_ids: Tuple[int, ...]
    value: Value
    is_constant: bool = False

    @property
    def is_leaf(self) -> bool:
        return self.operator is None

    @property
    def is_variable(self) -> bool:
        """Leaf that is differentiated against (a free variable)."""
        return self.operator is None and not self.is_constant

    @property
    def tag(self) -> str:
        if self.operator is not None:
            return self.operator.tag
        return "const" if self.is_constant else "var"
