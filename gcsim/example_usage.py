"""
Example Usage of the gcsim Memory Manager

Drives a random workload the way an interactive front end would:
allocations with random payloads and references, occasional roots,
explicit collections of each scope and a compaction, printing the pool
and statistics along the way.
"""

import logging
import random
import string
from typing import Any, List, Optional

from gcsim import GarbageCollector, GCConfiguration, CollectionScope, OutOfMemoryError


def random_payload(rng: random.Random) -> Any:
    """A small random value: string, list, dict or number"""
    kind = rng.choice(['string', 'array', 'object', 'number'])
    if kind == 'string':
        return ''.join(rng.choice(string.hexdigits.lower()) for _ in range(20))
    elif kind == 'array':
        return list(range(1, rng.randint(1, 10) + 1))
    elif kind == 'object':
        return {'value': rng.randint(1, 100)}
    return rng.randint(1, 1000)


def allocate_random(gc: GarbageCollector, rng: random.Random,
                    max_size: int = 8) -> Optional[str]:
    """Allocate one object referencing up to three live objects; one in six become roots"""
    live_ids = [obj.object_id for obj in gc.allocated_objects()]
    ref_count = rng.randint(0, 3)
    references: List[str] = []
    if ref_count and live_ids:
        rng.shuffle(live_ids)
        references = live_ids[:ref_count]

    try:
        object_id = gc.allocate(random_payload(rng), rng.randint(1, max_size), references)
    except OutOfMemoryError as e:
        print(f"  allocation failed: {e}")
        return None

    if rng.randint(0, 5) == 0:
        gc.add_root(object_id)
    return object_id


def render_pool(gc: GarbageCollector, width: int = 64) -> str:
    """One character per block: Y/M/O by owner generation, '.' when free"""
    generations = {obj.object_id: obj.generation for obj in gc.allocated_objects()}
    cells = []
    for owner in gc.memory_pool():
        if owner is None:
            cells.append('.')
        else:
            cells.append(generations[owner].value[0].upper())
    rows = [''.join(cells[i:i + width]) for i in range(0, len(cells), width)]
    return '\n'.join(rows)


def print_stats(gc: GarbageCollector):
    stats = gc.stats()
    print(f"  blocks: {stats.allocated_blocks}/{stats.total_blocks} used, "
          f"{stats.free_blocks} free, fragmentation {stats.fragmentation:.2%}")
    print(f"  objects: young={stats.young_objects} middle={stats.middle_objects} "
          f"old={stats.old_objects}, roots={len(gc.roots())}")
    gc_stats = stats.gc_stats
    print(f"  collections: {gc_stats.total_collections} "
          f"(young={gc_stats.young_collections}, middle={gc_stats.middle_collections}, "
          f"old={gc_stats.old_collections}), {gc_stats.total_objects_collected} collected, "
          f"{gc_stats.average_objects_collected:.2f} per collection")


def workload_example(seed: int = 42, rounds: int = 6, allocations_per_round: int = 12):
    """Random allocation rounds interleaved with every kind of collection"""
    print("=== Random Workload Example ===")
    rng = random.Random(seed)
    gc = GarbageCollector(GCConfiguration(total_blocks=256))
    scopes = [CollectionScope.YOUNG, CollectionScope.MIDDLE,
              CollectionScope.OLD, CollectionScope.ALL]

    for round_number in range(rounds):
        for _ in range(allocations_per_round):
            allocate_random(gc, rng)

        scope = scopes[round_number % len(scopes)]
        collected = gc.collect(scope)
        print(f"\nRound {round_number + 1}: collect({scope.value}) freed {collected} objects")
        print(render_pool(gc))
        print_stats(gc)

    print("\nCompacting...")
    gc.compact()
    print(render_pool(gc))
    print_stats(gc)
    return gc


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    workload_example()


if __name__ == "__main__":
    main()
