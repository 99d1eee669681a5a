"""
Compactor for gcsim

Slides every live object to the front of the pool, in object table
insertion order, so that all free blocks form a single run at the end.
"""

import logging

from .block_pool import BlockPool
from .object_model import ObjectTable


logger = logging.getLogger(__name__)


class Compactor:
    """Rewrites block assignments; ids, payloads and generations are untouched"""

    def __init__(self, pool: BlockPool, table: ObjectTable):
        self.pool = pool
        self.table = table
        self.compaction_count = 0

    def compact(self) -> int:
        """
        Relocate live objects into a gap-free prefix of the pool.

        Returns the number of objects whose blocks changed. Compacting an
        already compacted pool moves nothing.
        """
        self.pool.clear()
        current_block = 0
        moved = 0

        for obj in self.table:
            size = obj.size
            new_blocks = list(range(current_block, current_block + size))
            if new_blocks != obj.blocks:
                moved += 1
            obj.blocks = new_blocks
            for index in new_blocks:
                self.pool.set(index, obj.object_id)
            current_block += size

        self.compaction_count += 1
        logger.debug("Compaction moved %d objects, %d blocks in use", moved, current_block)
        return moved
