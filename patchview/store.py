"""
patchview.store — Lazily-growing trie of patch nodes
====================================================

§1  THE PROBLEM
───────────────

A write at a deep path such as ``view["a"]["b"]["c"] = 1`` must record an
edit three levels down, but most traversals never write anything.  If
every read allocated a node and hung it off its parent, simply *looking*
at the data would grow the patch tree, and "no edits made" would no
longer be distinguishable from "patch never touched".


§2  PLACEHOLDERS
────────────────

A node handed out for a path that has not been written yet is a
PLACEHOLDER.  It knows its parent and its key, but the parent does not
list it among its children:

    root.children == {}
    a = root.child("a")         # placeholder, root still empty
    b = a.child("b")            # placeholder of a placeholder
    b.attach()                  # first write: b, a hooked into the tree
    root.children == {"a": a}   # and a.children == {"b": b}

At most one placeholder exists per (parent, key) at a time.  Parents
track them weakly, so a placeholder lives exactly as long as some view
still holds it.


§3  PRUNING
───────────

When a node's last edit is removed it detaches itself from its parent,
and the parent does the same if that left it empty, all the way up.
Empty nodes are removed immediately, never collected later.

A node whose key gets overwritten or deleted in its parent is ORPHANED:
its contents are cleared and it is cut off from the tree for good.  Views
still holding an orphan are stale; writing through them is harmless and
never reaches the target.
"""

import logging
import weakref
from typing import Any, Hashable, Optional

logger = logging.getLogger(__name__)


class PathNode:
    """One position in the trie.  Subclasses decide what "empty" means."""

    __slots__ = ("parent", "key", "children", "orphaned", "_placeholders", "__weakref__")

    def __init__(self, parent: Optional["PathNode"] = None, key: Hashable = None):
        self.parent = parent
        self.key = key
        self.children: dict[Hashable, "PathNode"] = {}
        self.orphaned = False
        self._placeholders: "weakref.WeakValueDictionary[Hashable, PathNode]" = (
            weakref.WeakValueDictionary()
        )

    # ── emptiness ────────────────────────────────────────────────────

    def is_empty(self) -> bool:
        return not self.children

    def _clear_own(self) -> None:
        """Forget this node's own edits.  Overridden by patch nodes."""

    # ── placement in the tree ────────────────────────────────────────

    @property
    def attached(self) -> bool:
        """True when the parent lists this node among its children."""
        if self.parent is None:
            return not self.orphaned
        return self.parent.children.get(self.key) is self

    def is_live(self) -> bool:
        """True unless this node or one of its ancestors has been orphaned."""
        node: Optional[PathNode] = self
        while node is not None:
            if node.orphaned:
                return False
            node = node.parent
        return True

    def child(self, key: Hashable, factory: type) -> "PathNode":
        """
        Return the node for ``key``: the attached child if there is one,
        otherwise the current placeholder, otherwise a fresh placeholder
        built by ``factory(self, key)``.
        """
        node = self.children.get(key)
        if node is not None:
            return node
        node = self._placeholders.get(key)
        if node is None or type(node) is not factory:
            node = factory(self, key)
            self._placeholders[key] = node
        return node

    def attach(self) -> None:
        """Hook this node (and any placeholder ancestors) into the tree."""
        node = self
        while node.parent is not None and not node.attached:
            parent = node.parent
            parent._placeholders.pop(node.key, None)
            parent.children[node.key] = node
            node = parent

    def prune(self) -> None:
        """Detach this node if empty, cascading to emptied ancestors."""
        node = self
        while node.parent is not None and node.attached and node.is_empty():
            parent = node.parent
            del parent.children[node.key]
            parent._placeholders[node.key] = node
            node = parent

    # ── dropping subtrees ────────────────────────────────────────────

    def drop_child(self, key: Hashable) -> None:
        """
        Orphan whatever node exists for ``key`` (attached or placeholder).

        Called when ``key`` is overwritten or deleted: edits recorded
        beneath it no longer describe anything.  Does not prune ``self``.
        """
        node = self.children.pop(key, None)
        if node is None:
            node = self._placeholders.pop(key, None)
        if node is not None:
            node.orphan()

    def orphan(self) -> None:
        """Clear this subtree and cut it off from the tree permanently."""
        logger.debug("orphaning patch node at %r", self.path())
        self.clear()
        self.orphaned = True
        self.parent = None

    def orphan_placeholders(self) -> None:
        """Orphan every outstanding placeholder child of this node."""
        for node in list(self._placeholders.values()):
            node.orphan()
        self._placeholders.clear()

    def clear(self) -> None:
        """
        Empty this node and its whole subtree.  Attached children become
        placeholders again so views that hold them stay usable.
        """
        self._clear_own()
        for key, node in list(self.children.items()):
            node.clear()
            self._placeholders[key] = node
        self.children.clear()

    def path(self) -> tuple[Any, ...]:
        """Keys from the root down to this node."""
        keys = []
        node: Optional[PathNode] = self
        while node is not None and node.parent is not None:
            keys.append(node.key)
            node = node.parent
        return tuple(reversed(keys))
