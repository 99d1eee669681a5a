"""
Object Model for gcsim

Defines the generations, collection scopes, managed object records and
the bookkeeping tables (object table and root set) shared by the
allocator, collector and compactor.
"""

import itertools
from typing import Any, Dict, Iterator, List, Optional, Tuple
from enum import Enum
from dataclasses import dataclass, field


ObjectId = str


class Generation(Enum):
    """Age class of a managed object"""
    YOUNG = "young"
    MIDDLE = "middle"
    OLD = "old"
    UNKNOWN = "unknown"     # Query sentinel only, never assigned to an object

    @classmethod
    def managed(cls) -> Tuple['Generation', ...]:
        """Generations an object can actually be in, youngest first"""
        return (cls.YOUNG, cls.MIDDLE, cls.OLD)


class CollectionScope(Enum):
    """What a collection examines"""
    ALL = "all"
    YOUNG = "young"
    MIDDLE = "middle"
    OLD = "old"

    @property
    def generation(self) -> Optional[Generation]:
        """Generation targeted by a generational collection, None for ALL"""
        if self is CollectionScope.ALL:
            return None
        return Generation(self.value)

    @classmethod
    def parse(cls, scope) -> 'CollectionScope':
        """Accept a scope member or its name (e.g. 'young')"""
        if isinstance(scope, cls):
            return scope
        if isinstance(scope, Generation) and scope is not Generation.UNKNOWN:
            return cls(scope.value)
        if isinstance(scope, str):
            try:
                return cls(scope.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Invalid collection scope: {scope!r}")


@dataclass
class ManagedObject:
    """Bookkeeping record for one allocated object"""
    object_id: ObjectId
    payload: Any
    blocks: List[int]
    generation: Generation = Generation.YOUNG
    last_collection_epoch: int = 0
    references: List[ObjectId] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.blocks)

    def copy(self) -> 'ManagedObject':
        """Detached copy safe to hand to callers"""
        return ManagedObject(
            object_id=self.object_id,
            payload=self.payload,
            blocks=list(self.blocks),
            generation=self.generation,
            last_collection_epoch=self.last_collection_epoch,
            references=list(self.references),
        )


@dataclass(frozen=True)
class ReferenceInfo:
    """Outgoing references of an object"""
    count: int
    references: Tuple[ObjectId, ...]


class ObjectTable:
    """
    Insertion-ordered mapping from object id to ManagedObject.

    Also hands out fresh identifiers; ids come from a monotonic counter
    so they are never reused within one engine.
    """

    def __init__(self, id_prefix: str = "obj_"):
        self._objects: Dict[ObjectId, ManagedObject] = {}
        self._id_counter = itertools.count(1)
        self._id_prefix = id_prefix

    def next_id(self) -> ObjectId:
        return f"{self._id_prefix}{next(self._id_counter)}"

    def register(self, obj: ManagedObject):
        if obj.object_id in self._objects:
            raise ValueError(f"Object id already registered: {obj.object_id}")
        self._objects[obj.object_id] = obj

    def get(self, object_id: ObjectId) -> Optional[ManagedObject]:
        return self._objects.get(object_id)

    def remove(self, object_id: ObjectId) -> Optional[ManagedObject]:
        return self._objects.pop(object_id, None)

    def objects(self) -> List[ManagedObject]:
        """Snapshot list of records, in insertion order"""
        return list(self._objects.values())

    def in_generation(self, generation: Generation) -> List[ManagedObject]:
        return [obj for obj in self._objects.values() if obj.generation is generation]

    def is_referenced_by_other(self, object_id: ObjectId) -> bool:
        """True if any other live object lists object_id in its references"""
        for other_id, other in self._objects.items():
            if other_id != object_id and object_id in other.references:
                return True
        return False

    def count_by_generation(self) -> Dict[Generation, int]:
        counts = {gen: 0 for gen in Generation.managed()}
        for obj in self._objects.values():
            counts[obj.generation] += 1
        return counts

    def allocated_blocks(self) -> int:
        return sum(obj.size for obj in self._objects.values())

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._objects

    def __iter__(self) -> Iterator[ManagedObject]:
        return iter(self._objects.values())

    def __len__(self) -> int:
        return len(self._objects)


class RootSet:
    """Set of object ids pinned as GC roots"""

    def __init__(self):
        self._roots: Dict[ObjectId, None] = {}

    def add(self, object_id: ObjectId) -> bool:
        """Add a root; returns False if it was already present"""
        if object_id in self._roots:
            return False
        self._roots[object_id] = None
        return True

    def discard(self, object_id: ObjectId) -> bool:
        """Remove a root; returns False if it was absent"""
        if object_id not in self._roots:
            return False
        del self._roots[object_id]
        return True

    def ids(self) -> List[ObjectId]:
        return list(self._roots)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._roots

    def __iter__(self) -> Iterator[ObjectId]:
        return iter(list(self._roots))

    def __len__(self) -> int:
        return len(self._roots)
