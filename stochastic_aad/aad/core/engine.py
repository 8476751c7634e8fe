# aad/core/engine.py
from __future__ import annotations

import heapq
import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from ...errors import StaleValueError, TapeMismatchError
from ...stochastic import values as V
from ...stochastic.values import Value
from ..ops import table
from .tape import Tape
from .var import DifferentiableValue, VariableHandle

logger = logging.getLogger(__name__)


class ReverseAccumulator:
    """
    One reverse (adjoint) sweep over a tape.

    For each visited node y and each argument p:  p.adj += y.adj * dy/dp.
    Nodes are visited in strictly descending id order from the root, which is a
    reverse topological order because argument ids are always smaller than the
    id of the node using them. Only nodes reachable from the root are visited.

    A per-path contribution flowing into a deterministic node is summed over
    paths, so the adjoint of a deterministic node is the derivative of the sum
    of the root's paths.
    """

    def __init__(self, tape: Tape):
        self.tape = tape
        self.config = tape.config

    def run(self, root_id: int, wrt: Optional[Iterable[int]] = None, lower_bound: int = 0,
            restrict_to_dependencies: bool = False) -> Dict[int, Value]:
        """
        Propagate adjoints from `root_id`.

        Args:
            root_id: node seeded with ones
            wrt: optional ids of the variables of interest
            lower_bound: nodes with id < lower_bound are not expanded
            restrict_to_dependencies: skip arguments that cannot reach `wrt`
        Returns:
            dict {node_id: adjoint}; constant leaves never appear
        """
        tape = self.tape
        nodes = tape.nodes
        root = tape.node(root_id)
        wrt_ids = None if wrt is None else {tape.node(i).id for i in wrt}

        relevant = None
        if restrict_to_dependencies:
            relevant = self._dependents(root_id, wrt_ids)

        adjoints: Dict[int, Value] = {root_id: V.ones_like(root.value)}
        pending: List[int] = [-root_id]
        queued: Set[int] = {root_id}
        retain_leaves_only = self.config.retain_leaf_nodes_only
        visited = 0

        while pending:
            node_id = -heapq.heappop(pending)
            node = nodes[node_id]
            visited += 1
            if node.is_leaf or node_id < lower_bound:
                continue

            adjoint = adjoints[node_id]
            args = [nodes[a].value for a in node.argument_ids]
            for k, arg_id in enumerate(node.argument_ids):
                arg = nodes[arg_id]
                if arg.is_constant:
                    continue
                if relevant is not None and arg_id not in relevant:
                    continue
                local = table.partial(node.operator, k, args, node.value, self.config)
                contribution = V.mult(adjoint, local)
                if V.is_deterministic(arg.value) and not V.is_deterministic(contribution):
                    contribution = V.sum_paths(contribution)
                previous = adjoints.get(arg_id)
                adjoints[arg_id] = contribution if previous is None else V.add(previous, contribution)
                if arg_id not in queued:
                    queued.add(arg_id)
                    heapq.heappush(pending, -arg_id)

            if retain_leaves_only and (wrt_ids is None or node_id not in wrt_ids):
                del adjoints[node_id]

        logger.debug("reverse sweep from node %d on tape %d: visited %d of %d nodes, %d adjoints",
                     root_id, tape.uid, visited, len(nodes), len(adjoints))
        return adjoints

    def _dependents(self, root_id: int, wrt_ids: Optional[Set[int]]) -> Set[int]:
        """Ids in [min(wrt), root] that depend on at least one id in `wrt_ids`."""
        nodes = self.tape.nodes
        if wrt_ids is None:
            wrt_ids = {n.id for n in nodes[:root_id + 1] if n.is_variable}
        if not wrt_ids:
            return set()
        depends = set(wrt_ids)
        for node_id in range(min(wrt_ids), root_id + 1):
            if node_id not in depends and any(a in depends for a in nodes[node_id].argument_ids):
                depends.add(node_id)
        return depends


class Gradient(Mapping):
    """
    Read-only result of a reverse sweep, keyed by VariableHandle.

    Lookups also accept a DifferentiableValue. A variable on the same tape that
    the root does not depend on reads as zero, shaped like the variable.
    """

    def __init__(self, tape: Tape, adjoints: Dict[int, Value], node_ids: Iterable[int]):
        self._tape = tape
        self._generation = tape.generation
        self._adjoints = {i: adjoints[i] if i in adjoints else V.zeros_like(tape.value_of(i))
                          for i in node_ids}

    def _node_id(self, key: Any) -> int:
        if isinstance(key, DifferentiableValue):
            if key.tape is not self._tape:
                raise TapeMismatchError("gradient key belongs to a different tape")
            key = key.handle
        if not isinstance(key, VariableHandle):
            raise TypeError(f"gradient keys are VariableHandle or DifferentiableValue, got {type(key)}")
        if key.tape_uid != self._tape.uid:
            raise TapeMismatchError("gradient key belongs to a different tape")
        if key.generation != self._generation:
            raise StaleValueError(f"gradient key for node {key.node_id} is from another tape generation")
        return key.node_id

    def __getitem__(self, key: Any) -> Value:
        node_id = self._node_id(key)
        if node_id in self._adjoints:
            return self._adjoints[node_id]
        if self._generation != self._tape.generation:
            raise StaleValueError("gradient of a reset tape has no value for this key")
        return V.zeros_like(self._tape.value_of(node_id))

    def __contains__(self, key: Any) -> bool:
        try:
            return self._node_id(key) in self._adjoints
        except (TypeError, TapeMismatchError, StaleValueError):
            return False

    def __iter__(self) -> Iterator[VariableHandle]:
        for node_id in self._adjoints:
            yield VariableHandle(node_id, self._tape.uid, self._generation)

    def __len__(self) -> int:
        return len(self._adjoints)

    def by_id(self) -> Dict[int, Value]:
        """Plain dict {node_id: adjoint}."""
        return dict(self._adjoints)

    def __repr__(self):
        inner = ", ".join(f"{i}: {v!r}" for i, v in self._adjoints.items())
        return f"Gradient({{{inner}}})"


def _wrt_id(tape: Tape, item: Any) -> int:
    if isinstance(item, DifferentiableValue):
        if item.tape is not tape:
            raise TapeMismatchError("wrt variable belongs to a different tape")
        return item.handle.node_id
    if isinstance(item, VariableHandle):
        if item.tape_uid != tape.uid:
            raise TapeMismatchError("wrt variable belongs to a different tape")
        if item.generation != tape.generation:
            raise StaleValueError(f"handle for node {item.node_id} is from a reset tape")
        return item.node_id
    raise TypeError(f"wrt accepts DifferentiableValue or VariableHandle, got {type(item)}")


def gradient(value: DifferentiableValue, wrt: Optional[Iterable[Any]] = None, *,
             lower_bound: int = 0, restrict_to_dependencies: bool = False) -> Gradient:
    """
    Reverse sweep from `value`, projected onto free variables.

    Without `wrt` the result holds every free variable reached by the sweep.
    """
    if not isinstance(value, DifferentiableValue):
        raise TypeError(f"gradient() needs a DifferentiableValue, got {type(value)}")
    tape = value.tape
    root_id = value.handle.node_id
    wrt_ids = None if wrt is None else [_wrt_id(tape, w) for w in wrt]

    adjoints = ReverseAccumulator(tape).run(root_id, wrt_ids, lower_bound=lower_bound,
                                            restrict_to_dependencies=restrict_to_dependencies)
    if wrt_ids is None:
        keys = [i for i in sorted(adjoints) if tape.nodes[i].is_variable]
    else:
        keys = wrt_ids
    return Gradient(tape, adjoints, keys)
