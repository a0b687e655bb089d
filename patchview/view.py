"""
patchview.view — Read/write views over (target, patch) pairs
============================================================

§1  WHAT A VIEW IS
──────────────────

A view binds one target container to one patch node and answers every
read as if the node's edits were already applied:

    patch decides   →  deleted key, assigned value, buffer element
    otherwise       →  read straight through to the target

Views are cheap and disposable.  Indexing into a view re-derives a child
view on every access; two views over the same (target, node) pair behave
identically.


§2  WRAP ON READ
────────────────

    T = {"db": {"port": 5432}, "tags": ["a"]}
    v = wrap(T)
    v["db"]          → MapView(T["db"], <placeholder node "db">)
    v["db"]["port"]  → 5432                  (scalars come back as-is)
    v["db"]["port"] = 6543                   (placeholder attaches now)

Every compound value is wrapped before it is handed back, including
values the patch itself holds.


§3  VALUES THE PATCH OWNS
─────────────────────────

Compound values written into a view (assignments, pushed and unshifted
elements) are stored as private deep copies, so nothing the caller keeps
a reference to is ever edited behind its back:

    d = {"x": 1}
    v["a"] = d          → patch stores a copy of d
    v["a"]["x"] = 2     → d is still {"x": 1}

A view over such a copy is an OWNED view.  Nothing outside the patch can
see the copy yet, so an owned view applies each edit to it at once
through a throwaway node.  It remembers the owning node's generation;
after that node commits, the copy belongs to the target and the owned
view rejects further writes.

A bound method whose ``__self__`` is the raw target is rebound to the
view, so code inside the method reads through the patch too.


§4  PYTHON SYNTAX
─────────────────

MapView is a MutableMapping and SeqView a MutableSequence; the
explicit accessors ``get/set/has/delete/keys`` are always available and
the dunder methods route through them.  Structural list edits away from
the two ends raise UnsupportedOperationError.
"""

import copy
import functools
import inspect
import types
from collections.abc import MutableMapping, MutableSequence
from typing import Any, Hashable, Iterator, Optional

from .errors import InvalidArgumentError, UnsupportedOperationError
from .patch import HOLE, ScalarPatch
from .sequence import Region, SequencePatch

_MISSING = object()


def is_compound(value: Any) -> bool:
    """True for containers a view can be built over."""
    return isinstance(value, (MutableMapping, MutableSequence))


def make_view(target: Any, patch: Optional[ScalarPatch] = None) -> "View":
    """Build the right view kind for ``target``, with a fresh root patch if none given."""
    if isinstance(target, MutableMapping):
        return MapView(target, patch if patch is not None else ScalarPatch())
    if isinstance(target, MutableSequence):
        return SeqView(target, patch if patch is not None else SequencePatch())
    raise InvalidArgumentError(
        f"can only wrap a mutable mapping or sequence, not {type(target).__name__}"
    )


def materialize(value: Any) -> Any:
    """Copy a view (or plain nested containers) into fresh dicts and lists."""
    if isinstance(value, View):
        return value.to_python()
    if isinstance(value, dict):
        return {k: materialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [materialize(v) for v in value]
    if value is HOLE:
        return None
    return value


def detach(value: Any) -> Any:
    """Private copy of a value about to be stored in a patch; scalars pass through."""
    if isinstance(value, View):
        return value.to_python()
    if is_compound(value):
        return copy.deepcopy(value)
    return value


def _mutates(method):
    """Check an owned view is still current, run the edit, apply it at once if owned."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        self._check_owner()
        result = method(self, *args, **kwargs)
        if self._owner is not None:
            self._patch.commit(self._target)
        return result
    return wrapper


class View:
    """Common machinery for MapView and SeqView."""

    __slots__ = ("_target", "_patch", "_owner", "_generation")

    def __init__(self, target: Any, patch: ScalarPatch,
                 owner: Optional[ScalarPatch] = None, generation: int = 0):
        self._target = target
        self._patch = patch
        self._owner = owner
        self._generation = generation

    # ── wrapping ─────────────────────────────────────────────────────

    def _wrap(self, key: Hashable, value: Any) -> Any:
        """Wrap a value read from the target."""
        if self._owner is not None:
            return self._adopt(value, self._owner, self._generation)
        if isinstance(value, MutableMapping):
            return MapView(value, self._patch.child(key, ScalarPatch))
        if isinstance(value, MutableSequence):
            return SeqView(value, self._patch.child(key, SequencePatch))
        return self._rebind(value)

    def _stored(self, value: Any) -> Any:
        """Wrap a value read from the patch itself."""
        if self._owner is not None:
            return self._adopt(value, self._owner, self._generation)
        return self._adopt(value, self._patch, self._patch.generation)

    def _adopt(self, value: Any, owner: ScalarPatch, generation: int) -> Any:
        if isinstance(value, MutableMapping):
            return MapView(value, ScalarPatch(), owner, generation)
        if isinstance(value, MutableSequence):
            return SeqView(value, SequencePatch(), owner, generation)
        return self._rebind(value)

    def _rebind(self, value: Any) -> Any:
        if inspect.ismethod(value) and value.__self__ is self._target:
            return types.MethodType(value.__func__, self)
        return value

    def _already_holds(self, key: Hashable, value: Any, raw: Any) -> bool:
        """True when writing ``value`` at ``key`` would store what is already there."""
        if not isinstance(value, View) or value._target is not raw:
            return False
        if value._owner is not None:
            return True
        node = value._patch
        return node.parent is self._patch and node.key == key and node.is_live()

    def _check_owner(self) -> None:
        if self._owner is not None and self._owner.generation != self._generation:
            raise InvalidArgumentError(
                "view is stale: the value it edits has since been committed"
            )

    def __getattr__(self, name: str) -> Any:
        # methods defined on custom container classes, bound to the view
        if name.startswith("_"):
            raise AttributeError(name)
        value = getattr(self._target, name)
        if inspect.ismethod(value) and value.__self__ is self._target:
            return types.MethodType(value.__func__, self)
        if callable(value):
            raise AttributeError(
                f"{type(self).__name__} does not forward {name!r}: "
                f"it would bypass pending edits"
            )
        return value

    # ── introspection ────────────────────────────────────────────────

    @property
    def target(self) -> Any:
        return self._target

    @property
    def owned(self) -> bool:
        """True for views over a value the patch holds rather than the target."""
        return self._owner is not None

    def to_python(self) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_python()!r})"


class MapView(View, MutableMapping):
    """Editable view over a mapping."""

    __slots__ = ()

    def _raw(self, key: Hashable) -> Any:
        value, overridden = self._patch.lookup(key)
        if overridden:
            return value
        return self._target[key] if key in self._target else _MISSING

    def get(self, key: Hashable, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    @_mutates
    def set(self, key: Hashable, value: Any) -> None:
        if self._already_holds(key, value, self._raw(key)):
            return
        self._patch.write(self._target, key, detach(value))

    def has(self, key: Hashable) -> bool:
        return self._patch.contains(self._target, key)

    @_mutates
    def delete(self, key: Hashable) -> None:
        """Hide ``key``.  Deleting a key that does not exist is a no-op."""
        self._patch.remove(self._target, key)

    def __getitem__(self, key: Hashable) -> Any:
        value, overridden = self._patch.lookup(key)
        if overridden:
            if value is HOLE:
                raise KeyError(key)
            return self._stored(value)
        return self._wrap(key, self._target[key])

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Hashable) -> None:
        if not self.has(key):
            raise KeyError(key)
        self.delete(key)

    def __contains__(self, key: object) -> bool:
        return self.has(key)

    def setdefault(self, key: Hashable, default: Any = None) -> Any:
        if not self.has(key):
            self[key] = default
        return self[key]

    def pop(self, key: Hashable, default: Any = _MISSING) -> Any:
        if not self.has(key):
            if default is _MISSING:
                raise KeyError(key)
            return default
        # snapshot first: deleting orphans the child node a view would read
        value = materialize(self[key])
        self.delete(key)
        return value

    def popitem(self) -> tuple:
        for key in self:
            return key, self.pop(key)
        raise KeyError("popitem(): view is empty")

    def __iter__(self) -> Iterator:
        return iter(self._patch.keys(self._target))

    def __len__(self) -> int:
        return len(self._patch.keys(self._target))

    def to_python(self) -> dict:
        return {key: materialize(self[key]) for key in self}


class SeqView(View, MutableSequence):
    """
    Editable view over a list.

    Reads and element writes work at any index.  Growth and shrinkage go
    through the end operations; ``push``/``pop``/``shift``/``unshift``
    never copy the underlying list.
    """

    __slots__ = ()

    def _check_index(self, index: Any) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidArgumentError(
                f"sequence indices must be integers, not {type(index).__name__}"
            )
        return index

    # ── explicit accessors ───────────────────────────────────────────

    def get(self, index: int, default: Any = None) -> Any:
        try:
            return self[index]
        except IndexError:
            return default

    def set(self, index: int, value: Any) -> None:
        self[index] = value

    def has(self, index: Any) -> bool:
        """True when ``index`` (non-negative) holds a value rather than a hole."""
        return self._patch.has_element(self._target, index)

    @_mutates
    def delete(self, index: int) -> None:
        """Leave a hole at ``index`` without shifting later elements."""
        self._patch.delete_element(self._target, self._check_index(index))

    def keys(self) -> list[int]:
        return self._patch.keys(self._target)

    @property
    def length(self) -> int:
        return self._patch.length(self._target)

    @length.setter
    @_mutates
    def length(self, value: int) -> None:
        self._patch.set_length(self._target, value)

    # ── end operations ───────────────────────────────────────────────

    @_mutates
    def push(self, *values: Any) -> int:
        return self._patch.push(self._target, *map(detach, values))

    @_mutates
    def unshift(self, *values: Any) -> int:
        return self._patch.unshift(self._target, *map(detach, values))

    @_mutates
    def shift(self) -> Any:
        if not len(self):
            raise IndexError("pop from empty list")
        value = materialize(self[0])
        self._patch.shift(self._target)
        return value

    @_mutates
    def pop(self, index: int = -1) -> Any:
        n = len(self)
        if not n:
            raise IndexError("pop from empty list")
        index = self._patch.normalize(self._target, self._check_index(index))
        if index == 0:
            return self.shift()
        if index != n - 1:
            raise UnsupportedOperationError(f"cannot pop interior index {index}")
        value = materialize(self[index])
        self._patch.pop(self._target)
        return value

    @_mutates
    def splice(self, start: int, delete_count: Optional[int] = None, *items: Any) -> list:
        """
        Remove ``delete_count`` elements at ``start`` (all of them when
        omitted), insert ``items`` there, return the removed elements.
        Only index 0 and the tail are valid anchors.
        """
        n = len(self)
        if delete_count is None:
            delete_count = n
        first = max(n + start, 0) if start < 0 else min(start, n)
        removed = [materialize(v) for v in self[first:first + max(delete_count, 0)]]
        self._patch.splice(self._target, start, delete_count, *map(detach, items))
        return removed

    def append(self, value: Any) -> None:
        self.push(value)

    def extend(self, values) -> None:
        if isinstance(values, View):
            values = values.to_python()
        self.push(*values)

    def insert(self, index: int, value: Any) -> None:
        n = len(self)
        index = self._check_index(index)
        if index < 0:
            index = max(n + index, 0)
        if index == 0:
            self.unshift(value)
        elif index >= n:
            self.push(value)
        else:
            raise UnsupportedOperationError(f"cannot insert at interior index {index}")

    def reverse(self) -> None:
        # snapshot everything before the first write orphans a child node
        values = [materialize(v) for v in self]
        for i, value in enumerate(reversed(values)):
            self[i] = value

    # ── Python sequence protocol ─────────────────────────────────────

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        node, target = self._patch, self._target
        index = node.normalize(target, self._check_index(index))
        region, pos = node.resolve(target, index)
        if region is Region.PREPEND:
            value = node.prepend[pos]
        elif region is Region.APPEND:
            value = node.append[pos]
        else:
            value, overridden = node.lookup(pos)
            if not overridden:
                return self._wrap(pos, target[pos])
        return None if value is HOLE else self._stored(value)

    @_mutates
    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            raise UnsupportedOperationError("slice assignment is not supported")
        node, target = self._patch, self._target
        index = node.normalize(target, self._check_index(index))
        region, pos = node.resolve(target, index)
        if self._already_holds(pos, value, node.element(target, index)):
            return
        node.set_element(target, index, detach(value))

    def __delitem__(self, index: Any) -> None:
        if isinstance(index, slice):
            raise UnsupportedOperationError("slice deletion is not supported")
        self.pop(index)

    def __len__(self) -> int:
        return self._patch.length(self._target)

    def __iter__(self) -> Iterator:
        for i in range(len(self)):
            yield self[i]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, View):
            other = other.to_python()
        elif not isinstance(other, list):
            return NotImplemented
        return self.to_python() == other

    __hash__ = None

    def to_python(self) -> list:
        return [materialize(v) for v in self]
