"""
Core Engine for gcsim

Main interface to the simulated memory manager. One GarbageCollector
instance is one independent session: it owns the block pool, the object
table, the root set and the collector state, and serialises every
operation on them through a single lock.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional
from dataclasses import dataclass

from .allocator import Allocator
from .block_pool import BlockPool
from .collector import CollectionMetrics, Collector
from .compactor import Compactor
from .errors import InvariantViolation, Outcome
from .object_model import (
    CollectionScope, Generation, ManagedObject, ObjectId, ObjectTable,
    ReferenceInfo, RootSet
)
from .stats import MemoryStats, StatsReporter, SystemMonitor


logger = logging.getLogger(__name__)


@dataclass
class GCConfiguration:
    """Configuration parameters for the simulated memory manager"""

    # Pool parameters
    total_blocks: int = 256

    # Promotion parameters (survivor age must exceed these)
    young_promotion_age: int = 1
    middle_promotion_age: int = 2

    # Collection parameters
    collect_on_allocation_failure: bool = True
    history_size: int = 1000

    # Debugging
    debug_mode: bool = False

    def __post_init__(self):
        if self.total_blocks < 0:
            raise ValueError(f"total_blocks must be non-negative, got {self.total_blocks}")
        if self.young_promotion_age < 0 or self.middle_promotion_age < 0:
            raise ValueError("Promotion ages must be non-negative")
        if self.history_size < 1:
            raise ValueError(f"history_size must be at least 1, got {self.history_size}")


class GarbageCollector:
    """
    Generational, block-based memory manager.

    Objects are allocated into contiguous runs of blocks, start in the
    young generation and are promoted as they survive collections.
    Collections either trace the whole object graph from the roots
    (scope ALL) or sweep a single generation with a one-hop reachability
    check. Compaction is manual.
    """

    def __init__(self, config: Optional[GCConfiguration] = None):
        self.config = config or GCConfiguration()

        # Core components
        self.pool = BlockPool(self.config.total_blocks)
        self.table = ObjectTable()
        self.root_set = RootSet()
        self.collector = Collector(
            self.pool, self.table, self.root_set,
            young_promotion_age=self.config.young_promotion_age,
            middle_promotion_age=self.config.middle_promotion_age,
            history_size=self.config.history_size,
        )
        self.allocator = Allocator(
            self.pool, self.table, self.collector,
            collect_on_failure=self.config.collect_on_allocation_failure,
        )
        self.compactor = Compactor(self.pool, self.table)
        self.reporter = StatsReporter(self.pool, self.table, self.collector)
        self._system_monitor = SystemMonitor()

        self._gc_lock = threading.RLock()

    def allocate(self, payload: Any, size: int,
                 references: Optional[Iterable[ObjectId]] = None) -> ObjectId:
        """
        Allocate a new object of `size` blocks.

        Raises OutOfMemoryError if no contiguous run is available even
        after the built-in young collection.
        """
        with self._gc_lock:
            object_id = self.allocator.allocate(payload, size, references)
            self._check_consistency()
            return object_id

    def collect(self, scope=CollectionScope.ALL) -> int:
        """Run a collection and return the number of objects freed"""
        with self._gc_lock:
            collected = self.collector.collect(scope)
            self._check_consistency()
            return collected

    def free(self, object_id: ObjectId) -> Outcome:
        """Explicitly free an object; unknown ids are a no-op"""
        with self._gc_lock:
            freed = self.collector.free(object_id)
            self._check_consistency()
            return Outcome.APPLIED if freed else Outcome.NO_OP

    def compact(self):
        """Move all live objects to the front of the pool"""
        with self._gc_lock:
            self.compactor.compact()
            self._check_consistency()

    def add_root(self, object_id: ObjectId) -> Outcome:
        """Pin an object as a root; unknown ids and existing roots are ignored"""
        with self._gc_lock:
            if object_id not in self.table:
                return Outcome.NO_OP
            return Outcome.APPLIED if self.root_set.add(object_id) else Outcome.NO_OP

    def remove_root(self, object_id: ObjectId) -> Outcome:
        with self._gc_lock:
            return Outcome.APPLIED if self.root_set.discard(object_id) else Outcome.NO_OP

    def stats(self) -> MemoryStats:
        with self._gc_lock:
            return self.reporter.report()

    def object_generation(self, object_id: ObjectId) -> Generation:
        with self._gc_lock:
            obj = self.table.get(object_id)
            return obj.generation if obj is not None else Generation.UNKNOWN

    def object_blocks(self, object_id: ObjectId) -> List[int]:
        with self._gc_lock:
            obj = self.table.get(object_id)
            return list(obj.blocks) if obj is not None else []

    def object_references(self, object_id: ObjectId) -> ReferenceInfo:
        with self._gc_lock:
            obj = self.table.get(object_id)
            if obj is None:
                return ReferenceInfo(count=0, references=())
            return ReferenceInfo(count=len(obj.references), references=tuple(obj.references))

    def memory_pool(self) -> List[Optional[ObjectId]]:
        """Owner of every block, None for free blocks"""
        with self._gc_lock:
            return self.pool.snapshot()

    def allocated_objects(self) -> List[ManagedObject]:
        """Detached copies of all live objects in allocation order"""
        with self._gc_lock:
            return [obj.copy() for obj in self.table]

    def roots(self) -> List[ObjectId]:
        with self._gc_lock:
            return self.root_set.ids()

    def collection_history(self, count: Optional[int] = None) -> List[CollectionMetrics]:
        with self._gc_lock:
            return self.collector.recent_collections(count)

    def get_detailed_statistics(self) -> Dict[str, Any]:
        """Memory statistics plus recent collections and host figures"""
        with self._gc_lock:
            return {
                'memory_stats': self.reporter.report().to_dict(),
                'allocation_stats': self.allocator.get_statistics(),
                'compactions': self.compactor.compaction_count,
                'roots': len(self.root_set),
                'recent_collections': [
                    {
                        'scope': m.scope.value,
                        'epoch': m.epoch,
                        'objects_scanned': m.objects_scanned,
                        'objects_collected': m.objects_collected,
                        'objects_promoted': m.objects_promoted,
                        'pause_time_ms': m.pause_time_ms,
                    }
                    for m in self.collector.recent_collections(10)
                ],
                'system_stats': self._system_monitor.get_system_statistics(),
            }

    def verify_consistency(self):
        """
        Check pool, table and root set agree with each other.

        Raises InvariantViolation describing the first mismatch found.
        """
        with self._gc_lock:
            owners: Dict[int, ObjectId] = {}
            for obj in self.table:
                for index in obj.blocks:
                    if not 0 <= index < self.pool.size():
                        raise InvariantViolation(
                            f"Object {obj.object_id} owns out-of-range block {index}"
                        )
                    if index in owners:
                        raise InvariantViolation(
                            f"Block {index} owned by both {owners[index]} and {obj.object_id}"
                        )
                    owners[index] = obj.object_id

            for index, slot in enumerate(self.pool.snapshot()):
                if slot != owners.get(index):
                    raise InvariantViolation(
                        f"Block {index} holds {slot!r}, expected {owners.get(index)!r}"
                    )

            for root_id in self.root_set:
                if root_id not in self.table:
                    raise InvariantViolation(f"Root {root_id} is not an allocated object")

    def _check_consistency(self):
        if self.config.debug_mode:
            self.verify_consistency()
