"""
Statistics for gcsim

Derives memory statistics from the current pool, table and collector
state on every call; nothing is cached.
"""

import os
from typing import Any, Dict
from dataclasses import dataclass

import psutil

from .block_pool import BlockPool
from .collector import Collector, GCStats
from .object_model import Generation, ObjectTable


@dataclass
class MemoryStats:
    """Point-in-time view of the simulated memory"""
    total_blocks: int
    allocated_blocks: int
    free_blocks: int
    largest_free_run: int
    fragmentation: float
    objects_by_generation: Dict[Generation, int]
    gc_stats: GCStats

    @property
    def young_objects(self) -> int:
        return self.objects_by_generation[Generation.YOUNG]

    @property
    def middle_objects(self) -> int:
        return self.objects_by_generation[Generation.MIDDLE]

    @property
    def old_objects(self) -> int:
        return self.objects_by_generation[Generation.OLD]

    @property
    def total_objects(self) -> int:
        return sum(self.objects_by_generation.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_blocks': self.total_blocks,
            'allocated_blocks': self.allocated_blocks,
            'free_blocks': self.free_blocks,
            'largest_free_run': self.largest_free_run,
            'fragmentation': self.fragmentation,
            'young_objects': self.young_objects,
            'middle_objects': self.middle_objects,
            'old_objects': self.old_objects,
            'gc_stats': self.gc_stats.to_dict(),
        }


class StatsReporter:
    """Aggregates counts, fragmentation and GC counters"""

    def __init__(self, pool: BlockPool, table: ObjectTable, collector: Collector):
        self.pool = pool
        self.table = table
        self.collector = collector

    def fragmentation(self) -> float:
        """
        1 - largest_free_run / free_blocks, or 0 when nothing is free.

        0 means all free blocks form one run; values near 1 mean free
        space is scattered in small pieces.
        """
        free_blocks = self.pool.free_count()
        if free_blocks == 0:
            return 0.0
        return 1.0 - self.pool.largest_free_run() / free_blocks

    def report(self) -> MemoryStats:
        allocated_blocks = self.table.allocated_blocks()
        return MemoryStats(
            total_blocks=self.pool.size(),
            allocated_blocks=allocated_blocks,
            free_blocks=self.pool.size() - allocated_blocks,
            largest_free_run=self.pool.largest_free_run(),
            fragmentation=self.fragmentation(),
            objects_by_generation=self.table.count_by_generation(),
            gc_stats=self.collector.stats.snapshot(),
        )


class SystemMonitor:
    """Host memory figures for the process running the simulation"""

    def __init__(self):
        self.process = psutil.Process(os.getpid())

    def get_system_statistics(self) -> Dict[str, Any]:
        try:
            memory = psutil.virtual_memory()
            process_memory = self.process.memory_info()

            return {
                'system_memory_total': memory.total,
                'system_memory_available': memory.available,
                'system_memory_percent': memory.percent,
                'process_memory_rss': process_memory.rss,
                'process_memory_vms': process_memory.vms,
            }
        except psutil.Error as e:
            return {'error': str(e)}
