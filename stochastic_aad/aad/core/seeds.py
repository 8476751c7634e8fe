# aad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the output and let adjoints grow backwards
# through the tape. Each driver records on its own fresh tape, which is reset
# when the driver returns.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
import numpy as np

from ...config import AADConfig
from ...stochastic import values as V
from .var import DifferentiableValue
from .tape import Tape

Numeric = Union[float, np.ndarray]


def value(x: Any) -> Any:
    """Return the numeric value of a DifferentiableValue; pass through plain numbers unchanged."""
    return x.value if isinstance(x, DifferentiableValue) else x


def _adjoint(y: Any, xs: List[DifferentiableValue]) -> List[Numeric]:
    # y did not touch the tape: it does not depend on any input
    if not isinstance(y, DifferentiableValue):
        return [V.zeros_like(x.value) for x in xs]
    g = y.gradient(xs)
    return [g[x] for x in xs]


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[DifferentiableValue], DifferentiableValue],
         x0: Numeric, config: Optional[AADConfig] = None) -> Numeric:
    """
    Gradient of y=f(x) at x0 (single input).

    A stochastic output is seeded with ones on every path, so the result is the
    derivative of the sum of its paths.
    """
    with Tape(config) as tape:
        x = tape.variable(x0)
        return _adjoint(f(x), [x])[0]


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, DifferentiableValue]], DifferentiableValue],
          inputs: Dict[str, Numeric], config: Optional[AADConfig] = None) -> Dict[str, Numeric]:
    """
    Gradient of y=f(vars) w.r.t. ALL inputs (dict form).
    Performs ONE reverse pass to obtain all dy/dvar simultaneously.

    Parameters
    ----------
    f       : function taking a dict {name: DifferentiableValue}
    inputs  : dict {name: numeric}

    Returns
    -------
    dict {name: numeric}  # gradients in the same key order as `inputs`
    """
    with Tape(config) as tape:
        xs = {k: tape.variable(v) for k, v in inputs.items()}
        names = list(xs)
        adj = _adjoint(f(xs), [xs[k] for k in names])
        return dict(zip(names, adj))


def grads_list(f: Callable[[List[DifferentiableValue]], DifferentiableValue],
               x0_list: Iterable[Numeric], config: Optional[AADConfig] = None) -> List[Numeric]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a list
    of partials in the same order.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [4.0, 3.0]
    """
    with Tape(config) as tape:
        xs = [tape.variable(v) for v in x0_list]
        return _adjoint(f(xs), xs)
