# stochastic/__init__.py
"""
Vectorized numeric values: one double per simulated path, or a single
deterministic double. Backed by numpy; differentiation-unaware.
"""

from . import values
from .values import as_value, is_deterministic, size

__all__ = ["values", "as_value", "is_deterministic", "size"]
