"""
patchview
=========

Copy-on-write editing of nested dicts and lists, without copying.

    T = {"foo": 5, "items": [1, 2, 3]}
    v = wrap(T)
    v["foo"] += 1                 → v["foo"] == 6, T["foo"] == 5
    v["items"].shift()
    v["items"].push(4, 5)         → v["items"] == [2, 3, 4, 5], T untouched
    commit(v)                     → T == {"foo": 6, "items": [2, 3, 4, 5]}

Edits land in a tree of patch nodes that mirrors only the paths actually
written.  Reads consult the patch first and fall through to the original
data.  ``commit`` flushes every edit into the original in one pass and
leaves the view ready for another round.

  • Read-your-writes: a view always shows its own pending edits
  • Collapse: writing the original value back removes the edit
  • Lists: push / pop / shift / unshift are O(1) and never copy
"""

import logging
from typing import Any

from .errors import (
    InvalidArgumentError,
    InvalidLengthError,
    PatchError,
    UnsupportedOperationError,
)
from .formats import patch_to_python, to_json, to_python
from .patch import HOLE, ScalarPatch
from .sequence import SequencePatch
from .view import MapView, SeqView, View, make_view

logger = logging.getLogger(__name__)


def wrap(target: Any) -> View:
    """Return an editable view over ``target`` backed by a fresh, empty patch."""
    return make_view(target)


def _live_view(view: Any) -> View:
    if not isinstance(view, View):
        raise InvalidArgumentError(
            f"argument must be a patchview view, not {type(view).__name__}"
        )
    if not view._patch.is_live():
        raise InvalidArgumentError("view is stale: its path was overwritten or deleted")
    view._check_owner()
    return view


def commit(view: View) -> None:
    """
    Apply every pending edit of ``view`` to its target and clear the patch.

    Committing a nested view flushes only that subtree.  A second commit
    with no edits in between does nothing.
    """
    view = _live_view(view)
    node = view._patch
    if node.is_empty():
        return
    logger.debug("committing %s at %r", type(node).__name__, node.path())
    node.commit(view._target)
    node.prune()


def get_patch(view: View) -> ScalarPatch:
    """The raw pending-edit record behind ``view``."""
    return _live_view(view)._patch


def is_view(value: Any) -> bool:
    return isinstance(value, View)


def has_pending_edits(view: View) -> bool:
    return not get_patch(view).is_empty()


__version__ = "0.1.0"
__all__ = [
    "wrap", "commit", "get_patch", "is_view", "has_pending_edits",
    "View", "MapView", "SeqView",
    "ScalarPatch", "SequencePatch", "HOLE",
    "to_python", "to_json", "patch_to_python",
    "PatchError", "InvalidArgumentError", "InvalidLengthError",
    "UnsupportedOperationError",
]
