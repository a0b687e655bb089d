"""
patchview.errors — Error taxonomy.

Every error carries two bases: ``PatchError`` so callers can catch the
whole family, and the builtin a plain ``dict``/``list`` would raise for
the same kind of mistake so ordinary ``except TypeError`` code still works.

    InvalidArgumentError      → not a live view / not a container / bad key
    InvalidLengthError        → negative or non-integer sequence length
    UnsupportedOperationError → structural edit away from the sequence ends

Missing keys and out-of-range indices raise plain KeyError / IndexError.
"""


class PatchError(Exception):
    """Base class for all patchview errors."""


class InvalidArgumentError(PatchError, TypeError):
    """An argument is not something the operation can act on."""


class InvalidLengthError(PatchError, ValueError):
    """A sequence length must be a non-negative integer."""


class UnsupportedOperationError(PatchError, NotImplementedError):
    """Structural edits are only supported at the two ends of a sequence."""
