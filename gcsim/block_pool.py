"""
Block Pool for gcsim

Fixed-length array of block slots. Each slot is either empty (None) or
holds the id of the object that owns it. The pool carries no policy;
the allocator, collector and compactor decide what goes where.
"""

from typing import List, Optional

from .object_model import ObjectId


EMPTY = None


class BlockPool:
    """Fixed-capacity simulated memory made of equally sized blocks"""

    def __init__(self, total_blocks: int = 256):
        if total_blocks < 0:
            raise ValueError(f"total_blocks must be non-negative, got {total_blocks}")
        self.total_blocks = total_blocks
        self._slots: List[Optional[ObjectId]] = [EMPTY] * total_blocks

    def size(self) -> int:
        return self.total_blocks

    def _check_index(self, index: int):
        if not 0 <= index < self.total_blocks:
            raise IndexError(f"Block index {index} out of range [0, {self.total_blocks})")

    def get(self, index: int) -> Optional[ObjectId]:
        self._check_index(index)
        return self._slots[index]

    def set(self, index: int, owner: Optional[ObjectId]):
        self._check_index(index)
        self._slots[index] = owner

    def release(self, indices: List[int]):
        """Reset the given slots to empty"""
        for index in indices:
            self.set(index, EMPTY)

    def clear(self):
        self._slots = [EMPTY] * self.total_blocks

    def free_count(self) -> int:
        return sum(1 for slot in self._slots if slot is EMPTY)

    def find_free_run(self, size: int) -> Optional[List[int]]:
        """
        First-fit search for `size` contiguous empty slots.

        Scans left to right keeping the length of the current empty run,
        resetting on any owned slot. Returns the indices of the leftmost
        run that reaches `size`, or None if there is none.
        """
        if size <= 0:
            return []

        current_run = 0
        for index, slot in enumerate(self._slots):
            if slot is EMPTY:
                current_run += 1
                if current_run >= size:
                    start = index - size + 1
                    return list(range(start, index + 1))
            else:
                current_run = 0
        return None

    def largest_free_run(self) -> int:
        """Length of the longest contiguous run of empty slots"""
        max_run = 0
        current_run = 0
        for slot in self._slots:
            if slot is EMPTY:
                current_run += 1
                max_run = max(max_run, current_run)
            else:
                current_run = 0
        return max_run

    def snapshot(self) -> List[Optional[ObjectId]]:
        return list(self._slots)

    def __len__(self) -> int:
        return self.total_blocks
