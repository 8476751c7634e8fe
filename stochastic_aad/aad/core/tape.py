# aad/core/tape.py
from __future__ import annotations

import itertools
import logging
import numbers
import threading
from typing import List, Optional, Sequence, Tuple

from ...config import DEFAULT_CONFIG, AADConfig
from ...errors import NodeNotFoundError, TapeCapacityError
from ...stochastic import values as V
from ..ops import table
from ..ops.kinds import OperatorKind
from .node import Node

logger = logging.getLogger(__name__)

_tape_uids = itertools.count()


class Tape:
    """
    Append-only record of one differentiation session.

    Node ids are positions in `nodes` and are issued in creation order, so an
    argument id is always smaller than the id of the node using it. The reverse
    sweep relies on this: descending id order is a valid reverse topological
    order.

    Recording is serialized by a writer lock; reading committed nodes is not.
    Use one tape per session; tapes are never shared implicitly.

        with Tape() as tape:
            x = tape.variable([1.0, 2.0, 3.0])
            y = (x * 2.0).average()
            dx = y.gradient()[x]
    """

    def __init__(self, config: Optional[AADConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.nodes: List[Node] = []
        self.uid = next(_tape_uids)
        self.generation = 0
        self._path_count: Optional[int] = None
        self._lock = threading.Lock()
        self._capacity_warned = False

    def __enter__(self) -> "Tape":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.reset()
        return False

    def __len__(self):
        return len(self.nodes)

    def __repr__(self):
        return f"Tape(uid={self.uid}, nodes={len(self.nodes)}, generation={self.generation})"

    def reset(self):
        """Discard all nodes. Values recorded before the reset become stale."""
        with self._lock:
            n = len(self.nodes)
            self.nodes = []
            self._path_count = None
            self.generation += 1
            self._capacity_warned = False
        logger.debug("tape %d reset after %d nodes (generation %d)", self.uid, n, self.generation)

    # ---------------- recording ----------------

    def record_leaf(self, value, is_constant: bool) -> int:
        """Record a constant (is_constant=True) or a free variable; return its id."""
        value = V.as_value(value)
        return self._append(None, (), value, bool(is_constant))

    def record_operation(self, kind: OperatorKind, argument_ids: Sequence[int]) -> int:
        """Evaluate `kind` on existing nodes, record the result and return its id."""
        argument_ids = tuple(argument_ids)
        table.rule_for(kind)
        table.check_arity(kind, len(argument_ids))
        args = [self.node(a).value for a in argument_ids]
        value = table.forward(kind, args)
        return self._append(kind, argument_ids, value, False)

    def _append(self, operator, argument_ids: Tuple[int, ...], value, is_constant: bool) -> int:
        with self._lock:
            node_id = len(self.nodes)
            cap = self.config.max_nodes
            if cap is not None:
                if node_id >= cap:
                    raise TapeCapacityError(f"tape {self.uid} reached max_nodes={cap}")
                if not self._capacity_warned and node_id >= 0.9 * cap:
                    self._capacity_warned = True
                    logger.warning("tape %d holds %d of at most %d nodes", self.uid, node_id, cap)
            for a in argument_ids:
                if not 0 <= a < node_id:
                    raise NodeNotFoundError(f"argument node {a} is not on the tape (next id {node_id})")
            self._check_paths(value)
            self.nodes.append(Node(node_id, operator, argument_ids, value, is_constant))
            return node_id

    def _check_paths(self, value):
        if V.is_deterministic(value):
            return
        n = V.size(value)
        if self._path_count is None:
            self._path_count = n
        elif n != self._path_count:
            raise ValueError(
                f"values with different numbers of paths on one tape: {n} vs {self._path_count}"
            )

    # ---------------- leaf constructors ----------------

    def variable(self, value):
        """Free variable leaf (differentiable)."""
        from .var import DifferentiableValue
        return DifferentiableValue(self, self.record_leaf(value, is_constant=False))

    def constant(self, value):
        """Constant leaf; its gradient is always zero."""
        from .var import DifferentiableValue
        return DifferentiableValue(self, self.record_leaf(value, is_constant=True))

    # ---------------- read accessors ----------------

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def path_count(self) -> Optional[int]:
        """Number of paths of the stochastic values on this tape (None if all deterministic)."""
        return self._path_count

    def node(self, node_id: int) -> Node:
        nodes = self.nodes
        if not isinstance(node_id, numbers.Integral) or not 0 <= node_id < len(nodes):
            raise NodeNotFoundError(f"node {node_id!r} is not on tape {self.uid}")
        return nodes[node_id]

    def value_of(self, node_id: int):
        return self.node(node_id).value

    def arguments_of(self, node_id: int) -> Tuple[int, ...]:
        return self.node(node_id).argument_ids

    def operator_of(self, node_id: int) -> Optional[OperatorKind]:
        return self.node(node_id).operator

    def is_constant(self, node_id: int) -> bool:
        return self.node(node_id).is_constant


def variable(value, tape: Tape):
    """Record `value` as a free variable on `tape`."""
    return tape.variable(value)


def constant(value, tape: Tape):
    """Record `value` as a constant on `tape`."""
    return tape.constant(value)
