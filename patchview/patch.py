"""
patchview.patch — Pending edits for one mapping
===============================================

§1  THE RECORD
──────────────

A ScalarPatch holds the edits made to ONE container, without touching it:

    assign    {key: value}   keys whose value is overridden (may be new keys)
    delete    {key, ...}     keys hidden even though the target has them
    children  {key: node}    keys whose value is itself being edited

Per key at most one of these applies.  Writing a key clears its delete
mark and its child; deleting a key clears its assignment and its child.


§2  COLLAPSE TO NO-OP
─────────────────────

Writing back the value the target already holds removes every edit for
that key instead of recording one:

    T = {"a": 1}
    v["a"] = 2      →  assign {"a": 2}
    v["a"] = 1      →  (nothing; the node prunes itself)

Equality here is type-strict.  ``True == 1`` in Python, but writing True
over 1 is a real edit and must survive to commit.


§3  COMMIT
──────────

    1. assign  → target[key] = value
    2. delete  → remove key from target
    3. children → commit recursively into target[key]
    4. clear this node (the node object itself is kept for reuse)
    5. bump ``generation``

Own edits run before children.  A child's target was captured from the
pre-commit parent; since a key never carries both an assignment and a
child, step 1 never replaces an object a child is about to edit.

Assigned values are private copies owned by the node.  Views over them
record which generation they were read in; once a commit has moved
the copies into the target those views refuse further writes.
"""

import logging
from typing import Any, Hashable

from .store import PathNode

logger = logging.getLogger(__name__)


class _Hole:
    """Marker for an empty slot.  Reads as None, tests as absent."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "HOLE"

    def __reduce__(self):
        return "HOLE"


HOLE = _Hole()


def same_value(a: Any, b: Any) -> bool:
    """
    Type-strict structural equality used by the collapse check.

    Containers compare element-wise with the same rule, so
    ``{"x": True}`` and ``{"x": 1}`` are different values.
    """
    if a is b:
        return True
    # bool is a subclass of int and 1 == 1.0; neither may collapse an edit
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(same_value(a[k], b[k]) for k in a)
    if isinstance(a, list):
        return len(a) == len(b) and all(map(same_value, a, b))
    return bool(a == b)


class ScalarPatch(PathNode):
    """Edit record for a mapping-like container."""

    __slots__ = ("assign", "delete", "generation")

    def __init__(self, parent: PathNode = None, key: Hashable = None):
        super().__init__(parent, key)
        self.assign: dict[Hashable, Any] = {}
        self.delete: set[Hashable] = set()
        self.generation = 0

    def is_empty(self) -> bool:
        return not (self.assign or self.delete or self.children)

    def _clear_own(self) -> None:
        self.assign.clear()
        self.delete.clear()

    # ── target access (overridden for sequences) ─────────────────────

    def _in_target(self, target: Any, key: Hashable) -> bool:
        return key in target

    def _commit_delete(self, target: Any, key: Hashable) -> None:
        del target[key]

    # ── reads ────────────────────────────────────────────────────────

    def lookup(self, key: Hashable) -> tuple[Any, bool]:
        """
        Resolve ``key`` against the patch alone.

        Returns ``(value, True)`` when the patch decides the answer
        (``HOLE`` for a deleted key) and ``(None, False)`` when the caller
        must read the target.  Keys with a child node fall through too:
        their value is the target's, seen through the child.
        """
        if key in self.delete:
            return HOLE, True
        if key in self.assign:
            return self.assign[key], True
        return None, False

    def contains(self, target: Any, key: Hashable) -> bool:
        if key in self.delete:
            return False
        if key in self.assign or key in self.children:
            return True
        return self._in_target(target, key)

    def keys(self, target: Any) -> list:
        """Target keys minus deletions, then keys the patch introduced."""
        keys = [k for k in target if k not in self.delete]
        keys.extend(k for k in self.assign if not self._in_target(target, k))
        return keys

    # ── writes ───────────────────────────────────────────────────────

    def write(self, target: Any, key: Hashable, value: Any) -> None:
        if self._in_target(target, key) and same_value(target[key], value):
            self.forget(key)
            return
        self.attach()
        self.delete.discard(key)
        self.drop_child(key)
        self.assign[key] = value

    def remove(self, target: Any, key: Hashable) -> None:
        if not self._in_target(target, key):
            # nothing to hide; just drop whatever the patch added
            self.forget(key)
            return
        self.attach()
        self.assign.pop(key, None)
        self.drop_child(key)
        self.delete.add(key)

    def forget(self, key: Hashable) -> None:
        """Drop every edit recorded for ``key`` and prune if now empty."""
        self.assign.pop(key, None)
        self.delete.discard(key)
        self.drop_child(key)
        self.prune()

    # ── commit ───────────────────────────────────────────────────────

    def commit(self, target: Any) -> None:
        """Flush every edit into ``target`` and leave this node empty."""
        if self.is_empty():
            return
        self._apply(target)
        self.clear()
        self.generation += 1

    def _apply(self, target: Any) -> None:
        for key, value in self.assign.items():
            target[key] = value
        for key in self.delete:
            self._commit_delete(target, key)
        for key, node in list(self.children.items()):
            node.commit(target[key])
        logger.debug(
            "committed patch at %r: %d assigned, %d deleted, %d children",
            self.path(), len(self.assign), len(self.delete), len(self.children),
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(assign={self.assign!r}, "
            f"delete={sorted(self.delete, key=repr)!r}, "
            f"children={list(self.children)!r})"
        )
