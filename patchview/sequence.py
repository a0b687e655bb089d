"""
patchview.sequence — Pending edits for one list
===============================================

§1  FOUR EDIT CHANNELS
──────────────────────

On top of the per-element ``assign``/``delete``/``children`` inherited
from ScalarPatch, a SequencePatch keeps:

    prepend     virtual elements before the target's live window
    front_trim  leading target elements treated as removed
    back_trim   trailing target elements treated as removed
    append      virtual elements after the target's live window

The logical sequence is laid out as:

    ┌──────────┬───────────────────────────────────┬──────────┐
    │ prepend  │ target[front_trim : n - back_trim] │  append  │
    └──────────┴───────────────────────────────────┴──────────┘

    length = n - front_trim - back_trim + len(prepend) + len(append)

Per-element edits are keyed by the TARGET's own index, so trimming the
front never renumbers them.


§2  END OPERATIONS ARE O(1)
───────────────────────────

    pop     append non-empty → drop its last element
            otherwise        → back_trim += 1 (window), then prepend tail
    push    back_trim > 0    → back_trim -= 1, write into the reclaimed slot
            otherwise        → extend append

shift/unshift mirror these on the front.  Reclaiming a trimmed slot
instead of growing a buffer keeps ``pop(); push(x)`` a single element
edit, and ``pop(); push(original)`` no edit at all.

Because growth always reclaims trimmed slots first:

    back_trim  > 0  ⇒  append  is empty
    front_trim > 0  ⇒  prepend is empty


§3  SHRINKING
─────────────

set_length(n) with n < length removes from the end, most recently
appended first: the append buffer, then the live window (by raising
back_trim), then the prepend buffer from its tail.  Growth reclaims
back-trimmed slots as holes, then pads append with HOLE.


§4  COMMIT
──────────

The inherited commit writes element edits in target index space.  Only
then is the real list spliced: the back is cut and ``append`` added, the
front is cut and ``prepend`` inserted.  Holes land as None.
"""

import logging
from collections import deque
from enum import Enum, auto
from typing import Any, Hashable

from .errors import InvalidLengthError, UnsupportedOperationError
from .patch import HOLE, ScalarPatch
from .store import PathNode

logger = logging.getLogger(__name__)


class Region(Enum):
    """Where a logical index lands."""
    PREPEND = auto()
    TARGET = auto()
    APPEND = auto()


def _materialize(values) -> list:
    return [None if v is HOLE else v for v in values]


class SequencePatch(ScalarPatch):
    """Edit record for a list-like container."""

    __slots__ = ("front_trim", "back_trim", "prepend", "append")

    def __init__(self, parent: PathNode = None, key: Hashable = None):
        super().__init__(parent, key)
        self.front_trim = 0
        self.back_trim = 0
        self.prepend: deque = deque()
        self.append: deque = deque()

    def is_empty(self) -> bool:
        return super().is_empty() and not (
            self.front_trim or self.back_trim or self.prepend or self.append
        )

    def _clear_own(self) -> None:
        super()._clear_own()
        self.front_trim = 0
        self.back_trim = 0
        self.prepend.clear()
        self.append.clear()

    def _in_target(self, target: Any, key: Hashable) -> bool:
        return type(key) is int and 0 <= key < len(target)

    def _commit_delete(self, target: Any, key: Hashable) -> None:
        target[key] = None

    def _forget_index(self, index: int) -> None:
        self.assign.pop(index, None)
        self.delete.discard(index)
        self.drop_child(index)

    # ── index arithmetic ─────────────────────────────────────────────

    def length(self, target: Any) -> int:
        return (
            len(target) - self.front_trim - self.back_trim
            + len(self.prepend) + len(self.append)
        )

    def window(self, target: Any) -> tuple[int, int]:
        """Live target range as ``(start, stop)``."""
        return self.front_trim, len(target) - self.back_trim

    def normalize(self, target: Any, index: int) -> int:
        """Turn a possibly negative index into an in-range one, like list."""
        n = self.length(target)
        if index < 0:
            index += n
        if not 0 <= index < n:
            raise IndexError("list index out of range")
        return index

    def resolve(self, target: Any, index: int) -> tuple[Region, int]:
        """
        Map a non-negative logical index to ``(region, position)``.

        For ``Region.TARGET`` the position is an index into the target
        itself; for the buffers it is an index into that buffer.
        """
        if index < len(self.prepend):
            return Region.PREPEND, index
        index -= len(self.prepend)
        start, stop = self.window(target)
        if index < stop - start:
            return Region.TARGET, start + index
        index -= stop - start
        if index < len(self.append):
            return Region.APPEND, index
        raise IndexError("list index out of range")

    # ── element access ───────────────────────────────────────────────

    def element(self, target: Any, index: int) -> Any:
        """Raw logical value at ``index`` (holes read as None)."""
        region, pos = self.resolve(target, self.normalize(target, index))
        if region is Region.PREPEND:
            value = self.prepend[pos]
        elif region is Region.APPEND:
            value = self.append[pos]
        else:
            value, overridden = self.lookup(pos)
            if not overridden:
                value = target[pos]
        return None if value is HOLE else value

    def has_element(self, target: Any, index: int) -> bool:
        if type(index) is not int or index < 0:
            return False
        try:
            region, pos = self.resolve(target, self.normalize(target, index))
        except IndexError:
            return False
        if region is Region.PREPEND:
            return self.prepend[pos] is not HOLE
        if region is Region.APPEND:
            return self.append[pos] is not HOLE
        return pos not in self.delete

    def set_element(self, target: Any, index: int, value: Any) -> None:
        region, pos = self.resolve(target, self.normalize(target, index))
        if region is Region.PREPEND:
            self.prepend[pos] = value
        elif region is Region.APPEND:
            self.append[pos] = value
        else:
            self.write(target, pos, value)

    def delete_element(self, target: Any, index: int) -> None:
        """Leave a hole at ``index``; the length does not change."""
        region, pos = self.resolve(target, self.normalize(target, index))
        if region is Region.PREPEND:
            self.prepend[pos] = HOLE
        elif region is Region.APPEND:
            self.append[pos] = HOLE
        else:
            self.remove(target, pos)

    def keys(self, target: Any) -> list:
        """Logical indices that hold a value, ascending."""
        return [i for i in range(self.length(target)) if self.has_element(target, i)]

    # ── length changes ───────────────────────────────────────────────

    def set_length(self, target: Any, length: int) -> None:
        if not isinstance(length, int) or isinstance(length, bool) or length < 0:
            raise InvalidLengthError(f"invalid sequence length: {length!r}")
        delta = length - self.length(target)
        if delta > 0:
            self._grow(target, delta)
        elif delta < 0:
            self._shrink(target, -delta)

    def _grow(self, target: Any, count: int) -> None:
        while count and self.back_trim:
            index = len(target) - self.back_trim
            self.back_trim -= 1
            self.remove(target, index)
            count -= 1
        if count:
            self.attach()
            self.append.extend(HOLE for _ in range(count))

    def _shrink(self, target: Any, count: int) -> None:
        self.attach()
        take = min(count, len(self.append))
        for _ in range(take):
            self.append.pop()
        count -= take
        if count:
            start, stop = self.window(target)
            take = min(count, stop - start)
            for index in range(stop - take, stop):
                self._forget_index(index)
            self.back_trim += take
            count -= take
        for _ in range(count):
            self.prepend.pop()
        self.prune()

    # ── end operations ───────────────────────────────────────────────

    def push(self, target: Any, *values: Any) -> int:
        for value in values:
            if self.back_trim:
                index = len(target) - self.back_trim
                self.back_trim -= 1
                self.write(target, index, value)
            else:
                self.attach()
                self.append.append(value)
        return self.length(target)

    def pop(self, target: Any) -> Any:
        if not self.length(target):
            raise IndexError("pop from empty list")
        value = self.element(target, -1)
        if self.append:
            self.append.pop()
            self.prune()
        else:
            self._shrink(target, 1)
        return value

    def unshift(self, target: Any, *values: Any) -> int:
        for value in reversed(values):
            if self.front_trim:
                self.front_trim -= 1
                self.write(target, self.front_trim, value)
            else:
                self.attach()
                self.prepend.appendleft(value)
        return self.length(target)

    def shift(self, target: Any) -> Any:
        if not self.length(target):
            raise IndexError("pop from empty list")
        value = self.element(target, 0)
        start, stop = self.window(target)
        if self.prepend:
            self.prepend.popleft()
        elif start < stop:
            self.attach()
            self._forget_index(start)
            self.front_trim += 1
        else:
            self.append.popleft()
        self.prune()
        return value

    def splice(self, target: Any, start: int, delete_count: int, *items: Any) -> list:
        """
        Remove ``delete_count`` elements at ``start`` and insert ``items``.

        Only edits anchored at index 0 or at the end are supported; anything
        else raises UnsupportedOperationError before touching the patch.
        """
        n = self.length(target)
        start = max(n + start, 0) if start < 0 else min(start, n)
        delete_count = max(0, min(delete_count, n - start))
        if start == 0:
            removed = [self.shift(target) for _ in range(delete_count)]
            self.unshift(target, *items)
        elif start + delete_count == n:
            removed = [self.pop(target) for _ in range(delete_count)]
            removed.reverse()
            self.push(target, *items)
        else:
            raise UnsupportedOperationError(
                f"splice at interior index {start} (length {n}) is not supported"
            )
        return removed

    # ── commit ───────────────────────────────────────────────────────

    def _apply(self, target: Any) -> None:
        super()._apply(target)
        front, back = self.front_trim, self.back_trim
        reindexed = bool(front or back or self.prepend)
        if back:
            del target[len(target) - back:]
        if self.append:
            target.extend(_materialize(self.append))
        if front:
            del target[:front]
        if self.prepend:
            target[0:0] = _materialize(self.prepend)
        logger.debug(
            "spliced sequence at %r: -%d/+%d front, -%d/+%d back",
            self.path(), front, len(self.prepend), back, len(self.append),
        )
        if reindexed:
            # element nodes are keyed by pre-commit target indices
            for key in list(self.children):
                self.children.pop(key).orphan()
            self.orphan_placeholders()

    def __repr__(self) -> str:
        return (
            f"SequencePatch(prepend={list(self.prepend)!r}, "
            f"front_trim={self.front_trim}, back_trim={self.back_trim}, "
            f"append={list(self.append)!r}, assign={self.assign!r}, "
            f"delete={sorted(self.delete)!r}, children={list(self.children)!r})"
        )
