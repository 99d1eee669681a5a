"""
gcsim Memory Management Simulator

A generational, block-based memory manager with mark-and-sweep
collection and manual compaction, built for exploring GC behaviour
interactively.

Author: xwest
License: MIT
"""

__version__ = "0.1.0-alpha"
__author__ = "xwest"
__email__ = "dev@neuralscript.org"
__license__ = "MIT"

from .gc_core import GarbageCollector, GCConfiguration
from .collector import Collector, GCStats, CollectionMetrics
from .allocator import Allocator
from .compactor import Compactor
from .block_pool import BlockPool, EMPTY
from .object_model import (
    Generation, CollectionScope, ManagedObject, ObjectTable, RootSet,
    ReferenceInfo, ObjectId
)
from .stats import StatsReporter, MemoryStats, SystemMonitor
from .errors import GCError, OutOfMemoryError, InvariantViolation, Outcome

__all__ = [
    # Engine
    'GarbageCollector', 'GCConfiguration',

    # Components
    'Collector', 'Allocator', 'Compactor', 'BlockPool', 'StatsReporter',
    'SystemMonitor', 'EMPTY',

    # Object model
    'Generation', 'CollectionScope', 'ManagedObject', 'ObjectTable',
    'RootSet', 'ReferenceInfo', 'ObjectId',

    # Statistics
    'GCStats', 'CollectionMetrics', 'MemoryStats',

    # Errors
    'GCError', 'OutOfMemoryError', 'InvariantViolation', 'Outcome',

    # Version info
    '__version__',
]
