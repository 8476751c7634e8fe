"""
Finite-difference cross-checks of the operator rule table.

    from stochastic_aad.testing import check_partials
    check_partials(OperatorKind.DIV, [x, y])
"""
from typing import Sequence

import numpy as np

from .aad.ops import table
from .aad.ops.kinds import OperatorKind
from .config import DEFAULT_CONFIG, AADConfig
from .stochastic import values as V

# Arguments whose partial is intentionally not the mathematical derivative:
# the POW exponent is treated as deterministic and the BARRIER trigger
# derivative is a Dirac delta.
NOT_DIFFERENTIATED = frozenset({(OperatorKind.POW, 1), (OperatorKind.BARRIER, 0)})


def central_difference(kind: OperatorKind, args: Sequence, position: int, h: float = 1e-6):
    """
    Central difference approximation of d kind(args) / d args[position].

    Elementwise kinds bump the whole argument at once, which gives the
    per-path derivative. Reductions of a stochastic argument bump one path at
    a time and return the gradient vector.
    """
    args = [V.as_value(a) for a in args]
    x = args[position]

    def bumped(delta):
        moved = list(args)
        moved[position] = V.add(x, delta)
        return table.forward(kind, moved)

    if kind.is_reduction and not V.is_deterministic(x):
        n = V.size(x)
        out = np.empty(n)
        for i in range(n):
            e = np.zeros(n)
            e[i] = h
            out[i] = (bumped(e) - bumped(-e)) / (2.0 * h)
        return V.freeze(out)

    return V.freeze((bumped(h) - bumped(-h)) / (2.0 * h))


def check_partials(kind: OperatorKind, args: Sequence, rtol: float = 1e-5, atol: float = 1e-6,
                   config: AADConfig = DEFAULT_CONFIG, h: float = 1e-6) -> None:
    """Assert that every differentiated partial of `kind` at `args` matches central differences."""
    args = [V.as_value(a) for a in args]
    result = table.forward(kind, args)
    for k in range(kind.arity):
        if (kind, k) in NOT_DIFFERENTIATED:
            continue
        numeric = central_difference(kind, args, k, h)
        analytic = np.broadcast_to(table.partial(kind, k, args, result, config), np.shape(numeric))
        np.testing.assert_allclose(
            analytic, numeric, rtol=rtol, atol=atol,
            err_msg=f"{kind.name}: partial {k} disagrees with central difference",
        )
