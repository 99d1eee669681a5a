"""
Collector for gcsim

Implements the two collection modes over the block pool:

- Full mark-and-sweep (scope ALL): marks everything transitively
  reachable from the root set, frees the rest.
- Generational sweep (scope YOUNG / MIDDLE / OLD): examines only the
  target generation, keeping an object if it is a root or appears in the
  reference list of some other live object. This check is one hop only,
  so garbage that refers to garbage survives until a full collection.

Every survivor goes through the same promotion policy.
"""

import logging
import time
from typing import Dict, List, Optional, Set
from dataclasses import dataclass, replace
from collections import deque

from .block_pool import BlockPool
from .object_model import (
    CollectionScope, Generation, ManagedObject, ObjectId, ObjectTable, RootSet
)


logger = logging.getLogger(__name__)


@dataclass
class GCStats:
    """Cumulative collection counters, never reset"""
    total_collections: int = 0
    young_collections: int = 0
    middle_collections: int = 0
    old_collections: int = 0
    total_objects_collected: int = 0
    total_time_ms: float = 0.0

    @property
    def average_objects_collected(self) -> float:
        return self.total_objects_collected / max(1, self.total_collections)

    def snapshot(self) -> 'GCStats':
        return replace(self)

    def to_dict(self) -> Dict[str, float]:
        return {
            'total_collections': self.total_collections,
            'young_collections': self.young_collections,
            'middle_collections': self.middle_collections,
            'old_collections': self.old_collections,
            'total_objects_collected': self.total_objects_collected,
            'total_time_ms': self.total_time_ms,
            'average_objects_collected': self.average_objects_collected,
        }


@dataclass
class CollectionMetrics:
    """Statistics for a single collection cycle"""
    scope: CollectionScope
    epoch: int
    start_time: float
    end_time: float
    objects_scanned: int
    objects_collected: int
    objects_promoted: int

    @property
    def pause_time_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000


class Collector:
    """
    Mark-and-sweep and per-generation collector.

    Owns the cumulative GCStats and the only code paths that change an
    object's generation or collection epoch.
    """

    def __init__(self, pool: BlockPool, table: ObjectTable, roots: RootSet,
                 young_promotion_age: int = 1, middle_promotion_age: int = 2,
                 history_size: int = 1000):
        self.pool = pool
        self.table = table
        self.roots = roots
        self.young_promotion_age = young_promotion_age
        self.middle_promotion_age = middle_promotion_age

        self.stats = GCStats()
        self.collection_history: deque = deque(maxlen=history_size)

    def collect(self, scope=CollectionScope.ALL) -> int:
        """
        Run one collection and return the number of objects freed.

        Accepts a CollectionScope or its name ('all', 'young', ...).
        """
        scope = CollectionScope.parse(scope)
        start_time = time.time()

        # The counter moves first; survivors are stamped with the new value
        self.stats.total_collections += 1
        epoch = self.stats.total_collections

        if scope is CollectionScope.ALL:
            scanned, collected, promoted = self._mark_and_sweep(epoch)
        else:
            generation = scope.generation
            if generation is Generation.YOUNG:
                self.stats.young_collections += 1
            elif generation is Generation.MIDDLE:
                self.stats.middle_collections += 1
            else:
                self.stats.old_collections += 1
            scanned, collected, promoted = self._sweep_generation(generation, epoch)

        end_time = time.time()
        self.stats.total_objects_collected += collected
        self.stats.total_time_ms += (end_time - start_time) * 1000

        metrics = CollectionMetrics(
            scope=scope,
            epoch=epoch,
            start_time=start_time,
            end_time=end_time,
            objects_scanned=scanned,
            objects_collected=collected,
            objects_promoted=promoted,
        )
        self.collection_history.append(metrics)

        logger.debug(
            "Collection #%d (%s): scanned=%d collected=%d promoted=%d in %.3f ms",
            epoch, scope.value, scanned, collected, promoted, metrics.pause_time_ms
        )
        return collected

    def _mark(self) -> Set[ObjectId]:
        """Ids transitively reachable from the root set"""
        marked: Set[ObjectId] = set()
        work_stack: List[ObjectId] = []

        for root_id in self.roots:
            if root_id in self.table and root_id not in marked:
                marked.add(root_id)
                work_stack.append(root_id)

        while work_stack:
            obj = self.table.get(work_stack.pop())
            for ref_id in obj.references:
                # Dangling references are not edges
                if ref_id in marked or ref_id not in self.table:
                    continue
                marked.add(ref_id)
                work_stack.append(ref_id)

        return marked

    def _mark_and_sweep(self, epoch: int):
        marked = self._mark()

        candidates = self.table.objects()
        collected = 0
        promoted = 0
        for obj in candidates:
            if obj.object_id not in marked:
                self.free(obj.object_id)
                collected += 1
            elif self._promote(obj, epoch):
                promoted += 1

        return len(candidates), collected, promoted

    def is_directly_reachable(self, object_id: ObjectId) -> bool:
        """Root membership or a one-hop reference from another live object"""
        if object_id in self.roots:
            return True
        return self.table.is_referenced_by_other(object_id)

    def _sweep_generation(self, generation: Generation, epoch: int):
        # Reachability is checked against the live table as the sweep
        # progresses, so referrers freed earlier in this pass no longer count
        candidates = self.table.in_generation(generation)
        collected = 0
        promoted = 0
        for obj in candidates:
            if not self.is_directly_reachable(obj.object_id):
                self.free(obj.object_id)
                collected += 1
            elif self._promote(obj, epoch):
                promoted += 1

        return len(candidates), collected, promoted

    def _promote(self, obj: ManagedObject, epoch: int) -> bool:
        """
        Apply the promotion policy to a survivor.

        The age is measured from the epoch the object was last examined
        in (before it is refreshed) to the current collection. Returns
        True if the object changed generation.
        """
        age = epoch - obj.last_collection_epoch
        obj.last_collection_epoch = epoch

        if obj.generation is Generation.YOUNG:
            if age > self.young_promotion_age:
                obj.generation = Generation.MIDDLE
                return True
        elif obj.generation is Generation.MIDDLE:
            if age > self.middle_promotion_age:
                obj.generation = Generation.OLD
                return True
        elif obj.generation is Generation.OLD:
            return False
        else:
            raise ValueError(f"Object {obj.object_id} has invalid generation {obj.generation}")
        return False

    def free(self, object_id: ObjectId) -> bool:
        """
        Release an object's blocks, drop it from the table and the root set.

        Returns False if the id is unknown.
        """
        obj = self.table.remove(object_id)
        if obj is None:
            return False

        self.pool.release(obj.blocks)
        self.roots.discard(object_id)
        return True

    def recent_collections(self, count: Optional[int] = None) -> List[CollectionMetrics]:
        history = list(self.collection_history)
        if count is not None:
            history = history[-count:] if count > 0 else []
        return history
