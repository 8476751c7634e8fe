# aad/ops/__init__.py

from .kinds import OperatorKind, OperatorRule
from .table import TABLE, forward, partial, rule_for

__all__ = [
    "OperatorKind", "OperatorRule",
    "TABLE", "forward", "partial", "rule_for",
]
