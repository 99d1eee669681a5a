"""
Error handling for the gcsim memory engine.

Allocation failures are raised as exceptions. Operations that callers
routinely invoke with stale identifiers (free, root management) report an
Outcome instead of raising.
"""

from enum import Enum, auto
from typing import Optional


class Outcome(Enum):
    """Result of a permissive engine operation"""
    APPLIED = auto()    # State was changed
    NO_OP = auto()      # Unknown id or nothing to do

    def __bool__(self) -> bool:
        return self is Outcome.APPLIED


class GCError(Exception):
    """Base class for all engine errors"""


class OutOfMemoryError(GCError):
    """
    Raised when no contiguous run of free blocks can satisfy an allocation,
    even after the built-in young generation collection.
    """

    def __init__(self, requested: int, free_blocks: int, largest_free_run: int,
                 message: Optional[str] = None):
        self.requested = requested
        self.free_blocks = free_blocks
        self.largest_free_run = largest_free_run
        super().__init__(
            message or
            f"Not enough memory to allocate {requested} blocks "
            f"({free_blocks} free, largest free run {largest_free_run})"
        )


class InvariantViolation(GCError):
    """Raised by the debug consistency check when engine state is corrupt"""
