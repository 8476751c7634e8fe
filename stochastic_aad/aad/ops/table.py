# aad/ops/table.py
"""
Static dispatch table: OperatorKind -> (forward, partial).

The table is assembled once at import time from the rule modules and checked
for exhaustiveness, so every member of OperatorKind is guaranteed to have
exactly one rule of matching arity.
"""
from __future__ import annotations

from typing import Dict, Sequence

import numpy as np

from ...config import DEFAULT_CONFIG, AADConfig
from ...errors import ArityError, UnknownOperatorError
from ...stochastic.values import Value, freeze
from . import arithmetic, special, statistics, transcendental
from .kinds import OperatorKind, OperatorRule


def _build_table() -> Dict[OperatorKind, OperatorRule]:
    table: Dict[OperatorKind, OperatorRule] = {}
    for module in (arithmetic, transcendental, special, statistics):
        for kind, rule in module.RULES.items():
            if kind in table:
                raise RuntimeError(f"duplicate rule for {kind!r} in {module.__name__}")
            if rule.arity != kind.arity:
                raise RuntimeError(f"rule for {kind!r} has arity {rule.arity}, expected {kind.arity}")
            table[kind] = rule
    missing = [kind for kind in OperatorKind if kind not in table]
    if missing:
        raise RuntimeError(f"no rule registered for {missing}")
    return table


TABLE = _build_table()


def rule_for(kind: OperatorKind) -> OperatorRule:
    if not isinstance(kind, OperatorKind) or kind not in TABLE:
        raise UnknownOperatorError(f"unsupported operator {kind!r}")
    return TABLE[kind]


def check_arity(kind: OperatorKind, n_args: int) -> None:
    if n_args != kind.arity:
        raise ArityError(f"{kind.name} takes {kind.arity} argument(s), got {n_args}")


def forward(kind: OperatorKind, args: Sequence[Value]) -> Value:
    """Evaluate ``kind`` on the argument values."""
    rule = rule_for(kind)
    check_arity(kind, len(args))
    return rule.forward(*args)


def partial(kind: OperatorKind, position: int, args: Sequence[Value], result: Value,
            config: AADConfig = DEFAULT_CONFIG) -> Value:
    """
    Local derivative d result / d args[position].

    Args:
        kind:     operator of the node
        position: argument position, 0 <= position < kind.arity
        args:     forward argument values captured when the node was recorded
        result:   forward value of the node
        config:   session options (barrier smoothing)
    """
    rule = rule_for(kind)
    check_arity(kind, len(args))
    if not 0 <= position < kind.arity:
        raise ArityError(f"{kind.name} has no argument at position {position}")
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return freeze(rule.partial(position, args, result, config))
