"""
Allocator for gcsim

First-fit contiguous allocation over the block pool. When no run is
large enough the allocator runs one young generation collection and
retries once before giving up.
"""

import logging
from typing import Any, Iterable, Optional

from .block_pool import BlockPool
from .collector import Collector
from .errors import OutOfMemoryError
from .object_model import CollectionScope, Generation, ManagedObject, ObjectId, ObjectTable


logger = logging.getLogger(__name__)


class Allocator:
    """Places new objects into the pool and registers them"""

    def __init__(self, pool: BlockPool, table: ObjectTable, collector: Collector,
                 collect_on_failure: bool = True):
        self.pool = pool
        self.table = table
        self.collector = collector
        self.collect_on_failure = collect_on_failure

        # Statistics
        self.allocation_count = 0
        self.failed_allocations = 0
        self.blocks_allocated = 0

    def allocate(self, payload: Any, size: int,
                 references: Optional[Iterable[ObjectId]] = None) -> ObjectId:
        """
        Allocate `size` contiguous blocks for a new Young object.

        May run a young collection as a side effect. Raises
        OutOfMemoryError without touching the pool or the table if no
        run is found even after that collection.
        """
        if isinstance(size, bool) or not isinstance(size, int):
            raise ValueError(f"Allocation size must be an integer, got {size!r}")
        if size < 0:
            raise ValueError(f"Allocation size must be non-negative, got {size}")

        blocks = self.pool.find_free_run(size)
        if blocks is None and self.collect_on_failure:
            logger.info("No run of %d free blocks, running young collection", size)
            self.collector.collect(CollectionScope.YOUNG)
            blocks = self.pool.find_free_run(size)

        if blocks is None:
            self.failed_allocations += 1
            error = OutOfMemoryError(
                requested=size,
                free_blocks=self.pool.free_count(),
                largest_free_run=self.pool.largest_free_run(),
            )
            logger.warning("%s", error)
            raise error

        object_id = self.table.next_id()
        self.table.register(ManagedObject(
            object_id=object_id,
            payload=payload,
            blocks=blocks,
            generation=Generation.YOUNG,
            last_collection_epoch=0,
            references=list(references or []),
        ))
        for index in blocks:
            self.pool.set(index, object_id)

        self.allocation_count += 1
        self.blocks_allocated += size
        return object_id

    def get_statistics(self) -> dict:
        return {
            'allocations': self.allocation_count,
            'failed_allocations': self.failed_allocations,
            'blocks_allocated': self.blocks_allocated,
        }
