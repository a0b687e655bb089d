"""
patchview.formats — Plain-data renderings of views and patches.

Supported conversions:
    • View → plain Python (dict / list / scalars), holes become None
    • View → JSON string
    • Patch node → nested dict using reserved marker keys, for
      introspection, logging and test assertions
"""

import json
from typing import Any

from .patch import HOLE, ScalarPatch
from .sequence import SequencePatch
from .view import materialize


# ═══════════════════════════════════════════════════════════════════
#  MARKER KEYS
# ═══════════════════════════════════════════════════════════════════

# Reserved keys in the patch rendering.  A data key equal to one of these
# is indistinguishable from the marker; that collision is not handled.
ASSIGN = "$assign"
DELETE = "$delete"
PREPEND = "$prepend"
APPEND = "$append"
FRONT_TRIM = "$front_trim"
BACK_TRIM = "$back_trim"


# ═══════════════════════════════════════════════════════════════════
#  VIEWS ↔ PLAIN DATA
# ═══════════════════════════════════════════════════════════════════

def to_python(value: Any) -> Any:
    """
    Snapshot a view (or plain nested data) as fresh dicts and lists.

    The result shares no containers with the view's target, so it can be
    mutated freely.  For a view ``v`` over ``T``,
        to_python(v) == T   after   commit(v)
    """
    return materialize(value)


def to_json(value: Any, **kwargs) -> str:
    """Render a view as JSON.  Keyword arguments go to json.dumps."""
    return json.dumps(to_python(value), **kwargs)


# ═══════════════════════════════════════════════════════════════════
#  PATCH NODES → PLAIN DATA
# ═══════════════════════════════════════════════════════════════════

def _plain(value: Any) -> Any:
    return None if value is HOLE else materialize(value)


def _sorted_keys(keys) -> list:
    try:
        return sorted(keys)
    except TypeError:
        return sorted(keys, key=repr)


def patch_to_python(node: ScalarPatch) -> dict:
    """
    Render a patch node and its attached children as nested dicts.

        T = {"a": 1, "b": {"c": 2}, "d": 3}
        v["a"] = 10; v["b"]["c"] = 20; del v["d"]
        patch_to_python(get_patch(v))
        → {"$assign": {"a": 10}, "$delete": ["d"],
           "b": {"$assign": {"c": 20}}}

    Empty channels are omitted, so an untouched patch renders as {}.
    Sequence patches add $prepend / $append lists and $front_trim /
    $back_trim counts; their child keys are target indices.
    """
    out: dict = {}
    if node.assign:
        out[ASSIGN] = {k: _plain(v) for k, v in node.assign.items()}
    if node.delete:
        out[DELETE] = _sorted_keys(node.delete)
    if isinstance(node, SequencePatch):
        if node.prepend:
            out[PREPEND] = [_plain(v) for v in node.prepend]
        if node.append:
            out[APPEND] = [_plain(v) for v in node.append]
        if node.front_trim:
            out[FRONT_TRIM] = node.front_trim
        if node.back_trim:
            out[BACK_TRIM] = node.back_trim
    for key, child in node.children.items():
        out[key] = patch_to_python(child)
    return out
