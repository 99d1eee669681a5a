"""
Test suite for gcsim allocation.

Tests cover:
- First-fit placement and object registration
- Zero-size allocations
- Out-of-memory handling and the young collection retry

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from gcsim import GarbageCollector, GCConfiguration, Generation, OutOfMemoryError


class TestAllocator(unittest.TestCase):
    """Test cases for allocation through the engine."""

    def setUp(self):
        self.gc = GarbageCollector(GCConfiguration(total_blocks=10, debug_mode=True))

    def test_allocate_registers_young_object(self):
        obj_id = self.gc.allocate("payload", 3, [])

        self.assertEqual(self.gc.object_blocks(obj_id), [0, 1, 2])
        self.assertEqual(self.gc.object_generation(obj_id), Generation.YOUNG)
        self.assertEqual(self.gc.memory_pool()[:4], [obj_id, obj_id, obj_id, None])

        obj = self.gc.allocated_objects()[0]
        self.assertEqual(obj.payload, "payload")
        self.assertEqual(obj.last_collection_epoch, 0)

    def test_ids_are_unique(self):
        ids = {self.gc.allocate(i, 1) for i in range(10)}
        self.assertEqual(len(ids), 10)

    def test_first_fit_reuses_leftmost_hole(self):
        a = self.gc.allocate("a", 2)
        b = self.gc.allocate("b", 2)
        c = self.gc.allocate("c", 2)
        for obj_id in (a, b, c):
            self.gc.add_root(obj_id)
        self.gc.free(a)

        d = self.gc.allocate("d", 1)
        e = self.gc.allocate("e", 2)

        self.assertEqual(self.gc.object_blocks(d), [0])
        self.assertEqual(self.gc.object_blocks(e), [6, 7])

    def test_references_are_copied(self):
        target = self.gc.allocate("target", 1)
        refs = [target, "obj_missing"]
        obj_id = self.gc.allocate("holder", 1, refs)
        refs.append("later")

        info = self.gc.object_references(obj_id)
        self.assertEqual(info.count, 2)
        self.assertEqual(info.references, (target, "obj_missing"))

    def test_zero_size_allocation(self):
        filler = self.gc.allocate("filler", 10)
        self.gc.add_root(filler)

        obj_id = self.gc.allocate("empty", 0)

        self.assertEqual(self.gc.object_blocks(obj_id), [])
        self.assertEqual(self.gc.object_generation(obj_id), Generation.YOUNG)
        self.assertEqual(self.gc.stats().free_blocks, 0)
        self.assertEqual(self.gc.stats().gc_stats.total_collections, 0)

    def test_invalid_sizes(self):
        with self.assertRaises(ValueError):
            self.gc.allocate("x", -1)
        with self.assertRaises(ValueError):
            self.gc.allocate("x", 1.5)
        self.assertEqual(self.gc.allocated_objects(), [])
        self.assertEqual(self.gc.stats().free_blocks, 10)


class TestOutOfMemory(unittest.TestCase):
    """Allocation failure and the built-in young collection."""

    def setUp(self):
        self.gc = GarbageCollector(GCConfiguration(total_blocks=8, debug_mode=True))

    def test_fails_when_survivor_blocks_space(self):
        x = self.gc.allocate("x", 5, [])
        self.gc.add_root(x)
        pool_before = self.gc.memory_pool()

        with self.assertRaises(OutOfMemoryError) as ctx:
            self.gc.allocate("y", 5, [])

        self.assertEqual(ctx.exception.requested, 5)
        self.assertEqual(ctx.exception.free_blocks, 3)
        self.assertEqual(ctx.exception.largest_free_run, 3)

        # No partial allocation
        self.assertEqual(self.gc.memory_pool(), pool_before)
        self.assertEqual([o.object_id for o in self.gc.allocated_objects()], [x])

        gc_stats = self.gc.stats().gc_stats
        self.assertEqual(gc_stats.young_collections, 1)
        self.assertEqual(gc_stats.total_collections, 1)

    def test_succeeds_after_collecting_garbage(self):
        x = self.gc.allocate("x", 5, [])

        y = self.gc.allocate("y", 5, [])

        self.assertEqual(self.gc.object_generation(x), Generation.UNKNOWN)
        self.assertEqual(self.gc.object_blocks(y), [0, 1, 2, 3, 4])
        self.assertEqual(self.gc.stats().gc_stats.total_objects_collected, 1)

    def test_no_collection_on_success(self):
        self.gc.allocate("x", 4)
        self.gc.allocate("y", 4)
        self.assertEqual(self.gc.stats().gc_stats.total_collections, 0)

    def test_collection_retry_can_be_disabled(self):
        gc = GarbageCollector(GCConfiguration(total_blocks=8, collect_on_allocation_failure=False))
        gc.allocate("x", 5)

        with self.assertRaises(OutOfMemoryError):
            gc.allocate("y", 5)
        self.assertEqual(gc.stats().gc_stats.total_collections, 0)
        self.assertEqual(gc.allocator.failed_allocations, 1)

    def test_request_larger_than_pool(self):
        with self.assertRaises(OutOfMemoryError):
            self.gc.allocate("huge", 9)
        self.assertEqual(self.gc.stats().free_blocks, 8)


if __name__ == '__main__':
    unittest.main()
