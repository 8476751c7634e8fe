"""
AAD Configuration

Options shared by a Tape, its operator rules and its reverse sweep.
"""

from dataclasses import dataclass
from typing import Optional

# Approximations of the Dirac delta in d barrier / d trigger:
#   "discrete_delta": local finite difference of width barrier_dirac_width * stdev(trigger)
#   "one":            if_non_negative - if_negative on every path
#   "zero":           no derivative through the trigger
DIRAC_METHODS = ("discrete_delta", "one", "zero")


@dataclass(frozen=True)
class AADConfig:
    """Configuration of one differentiation session."""

    # Width (in standard deviations of the trigger) of the local finite
    # difference that replaces the Dirac delta of d barrier / d trigger.
    # 0 keeps the exact rule: +inf where trigger == 0, else 0.
    # An infinite width gives if_non_negative - if_negative on every path.
    barrier_dirac_width: float = 0.0

    # One of DIRAC_METHODS; None selects "discrete_delta" when
    # barrier_dirac_width > 0 and the exact rule otherwise.
    barrier_dirac_method: Optional[str] = None

    # Drop interior adjoints as soon as they have been propagated,
    # except for the nodes a sweep is asked to differentiate against.
    retain_leaf_nodes_only: bool = False

    # Upper bound on the number of recorded nodes (None = unbounded).
    max_nodes: Optional[int] = None

    def __post_init__(self):
        if not self.barrier_dirac_width >= 0.0:
            raise ValueError(f"barrier_dirac_width must be >= 0, got {self.barrier_dirac_width}")
        if self.barrier_dirac_method is not None and self.barrier_dirac_method not in DIRAC_METHODS:
            raise ValueError(
                f"barrier_dirac_method must be one of {DIRAC_METHODS}, got {self.barrier_dirac_method!r}"
            )
        if self.max_nodes is not None and self.max_nodes <= 0:
            raise ValueError(f"max_nodes must be positive, got {self.max_nodes}")


DEFAULT_CONFIG = AADConfig()
