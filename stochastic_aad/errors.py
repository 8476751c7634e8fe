# errors.py
"""
Exception taxonomy for the AAD engine.

Usage errors are programming bugs in the calling code (wrong arity, foreign
tape, stale handle, ...). They are never recoverable and are raised
immediately instead of producing a wrong gradient.

Numeric edge cases (division by zero, log of a non-positive value) are NOT
exceptions: they propagate as NaN/inf like plain floating point.
"""


class AADError(Exception):
    """Base class of all errors raised by stochastic_aad."""


class UsageError(AADError):
    """The engine was driven incorrectly by the calling code."""


class UnknownOperatorError(UsageError):
    """An operator kind without a forward/partial rule was requested."""


class ArityError(UsageError):
    """Wrong number of arguments, or a partial position outside the arity."""


class NodeNotFoundError(UsageError):
    """An argument id does not refer to a node already on the tape."""


class TapeMismatchError(UsageError):
    """Values recorded on two different tapes were combined."""


class StaleValueError(UsageError):
    """A value recorded before the last Tape.reset() was used."""


class TapeCapacityError(AADError):
    """The tape reached AADConfig.max_nodes."""


class UnsupportedOperationError(AADError, NotImplementedError):
    """The operation cannot be differentiated (e.g. applying an opaque function)."""
