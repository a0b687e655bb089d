"""
Randomised checks against a plain deep-copied mirror.

Every edit is applied twice: once through a view, once to a deepcopy of
the original.  The view must read exactly like the mirror, the original
must stay untouched until commit, and after commit the original must
equal the mirror.

    §1  Random edit scripts
    §2  Undoing every edit collapses the patch
    §3  Length bookkeeping under end operations
"""

import copy
import random
import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from patchview import wrap, commit, has_pending_edits, is_view
from patchview.formats import to_python


SCALARS = [0, 1, 2, True, False, 1.0, "a", "b", None]
NEW_KEYS = ["n0", "n1", "n2"]


def random_value(rng: random.Random, depth: int = 0):
    """A fresh scalar, dict or list; never shares containers."""
    roll = rng.random()
    if depth >= 2 or roll < 0.6:
        return rng.choice(SCALARS)
    if roll < 0.8:
        return {k: random_value(rng, depth + 1) for k in rng.sample("abcd", rng.randint(0, 3))}
    return [random_value(rng, depth + 1) for _ in range(rng.randint(0, 4))]


def random_data(rng: random.Random) -> dict:
    return {
        "cfg": {k: random_value(rng, 1) for k in "abc"},
        "xs": [random_value(rng, 1) for _ in range(rng.randint(0, 5))],
        "rows": [{"id": i, "tags": ["t"]} for i in range(rng.randint(0, 3))],
        "flag": rng.choice(SCALARS),
    }


def _edit_mapping(rng, view, mirror, depth):
    keys = list(mirror)
    op = rng.choice(["set", "set", "delete", "descend", "descend"])
    if op == "descend" and keys and depth < 4:
        key = rng.choice(keys)
        child = view[key]
        if is_view(child):
            return random_edit(rng, child, mirror[key], depth + 1)
    if op == "delete" and keys:
        key = rng.choice(keys)
        del view[key]
        del mirror[key]
        return
    key = rng.choice(keys + NEW_KEYS)
    value = random_value(rng)
    view[key] = value
    mirror[key] = copy.deepcopy(value)


def _edit_sequence(rng, view, mirror, depth):
    n = len(mirror)
    op = rng.choice(["push", "pop", "shift", "unshift", "set", "length", "hole", "descend"])
    if op == "descend" and n and depth < 4:
        index = rng.randrange(n)
        child = view[index]
        if is_view(child):
            return random_edit(rng, child, mirror[index], depth + 1)
        op = "set"
    if op == "push":
        values = [random_value(rng) for _ in range(rng.randint(1, 2))]
        view.push(*values)
        mirror.extend(copy.deepcopy(values))
    elif op == "unshift":
        value = random_value(rng)
        view.insert(0, value)
        mirror.insert(0, copy.deepcopy(value))
    elif op == "pop" and n:
        assert view.pop() == mirror.pop()
    elif op == "shift" and n:
        assert view.pop(0) == mirror.pop(0)
    elif op == "set" and n:
        index = rng.randrange(-n, n)
        value = random_value(rng)
        view[index] = value
        mirror[index] = copy.deepcopy(value)
    elif op == "hole" and n:
        index = rng.randrange(n)
        view.delete(index)
        mirror[index] = None
    elif op == "length":
        length = rng.randint(0, n + 2)
        view.length = length
        if length < n:
            del mirror[length:]
        else:
            mirror.extend([None] * (length - n))


def random_edit(rng: random.Random, view, mirror, depth: int = 0) -> None:
    """Apply one random edit at a random depth to both ``view`` and ``mirror``."""
    if isinstance(mirror, dict):
        _edit_mapping(rng, view, mirror, depth)
    else:
        _edit_sequence(rng, view, mirror, depth)


# ═══════════════════════════════════════════════════════════════════
#  §1  RANDOM EDIT SCRIPTS
# ═══════════════════════════════════════════════════════════════════

class TestRandomScripts:

    @pytest.mark.parametrize("seed", range(60))
    def test_view_matches_mirror_then_commit(self, seed):
        rng = random.Random(seed)
        target = random_data(rng)
        original = copy.deepcopy(target)
        mirror = copy.deepcopy(target)
        view = wrap(target)

        for _ in range(rng.randint(1, 40)):
            random_edit(rng, view, mirror)
            assert to_python(view) == mirror

        assert target == original
        commit(view)
        assert target == mirror
        assert not has_pending_edits(view)

    @pytest.mark.parametrize("seed", range(20))
    def test_several_rounds_on_one_view(self, seed):
        rng = random.Random(1000 + seed)
        target = random_data(rng)
        mirror = copy.deepcopy(target)
        view = wrap(target)

        for _ in range(4):
            for _ in range(rng.randint(0, 15)):
                random_edit(rng, view, mirror)
            commit(view)
            assert target == mirror
            assert to_python(view) == mirror

    @pytest.mark.parametrize("seed", range(20))
    def test_top_level_list(self, seed):
        rng = random.Random(2000 + seed)
        target = [random_value(rng, 1) for _ in range(rng.randint(0, 6))]
        mirror = copy.deepcopy(target)
        view = wrap(target)

        for _ in range(30):
            random_edit(rng, view, mirror)
            assert len(view) == len(mirror)
        assert to_python(view) == mirror
        commit(view)
        assert target == mirror


# ═══════════════════════════════════════════════════════════════════
#  §2  UNDOING EVERY EDIT
# ═══════════════════════════════════════════════════════════════════

class TestUndo:

    @pytest.mark.parametrize("seed", range(30))
    def test_restoring_every_key_leaves_no_edits(self, seed):
        rng = random.Random(3000 + seed)
        target = random_data(rng)
        view = wrap(target)
        mirror = copy.deepcopy(target)
        for _ in range(rng.randint(1, 25)):
            random_edit(rng, view, mirror)

        for key in list(view):
            if key not in target:
                del view[key]
        for key, value in target.items():
            view[key] = copy.deepcopy(value)

        assert not has_pending_edits(view)
        assert to_python(view) == target


# ═══════════════════════════════════════════════════════════════════
#  §3  LENGTH BOOKKEEPING
# ═══════════════════════════════════════════════════════════════════

class TestLengthBookkeeping:

    @pytest.mark.parametrize("seed", range(20))
    def test_length_tracks_end_operations(self, seed):
        rng = random.Random(4000 + seed)
        target = list(range(rng.randint(0, 8)))
        view = wrap(target)
        expected = len(target)

        for _ in range(50):
            op = rng.choice(["push", "pop", "shift", "unshift", "length"])
            if op == "push":
                count = rng.randint(1, 3)
                assert view.push(*range(count)) == expected + count
                expected += count
            elif op == "unshift":
                count = rng.randint(1, 3)
                assert view.unshift(*range(count)) == expected + count
                expected += count
            elif op in ("pop", "shift") and expected:
                getattr(view, op)()
                expected -= 1
            elif op == "length":
                expected = rng.randint(0, expected + 3)
                view.length = expected
            assert view.length == expected
            assert len(to_python(view)) == expected

        patch = view._patch
        assert patch.front_trim + patch.back_trim <= len(target)
        assert not (patch.back_trim and patch.append)
        assert not (patch.front_trim and patch.prepend)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
