"""Lens classes and the factory functions that build them.

A lens is a reusable accessor for one location inside nested mappings and
sequences. It exposes three operations:
- get(structure): read the focused value
- set(structure, value): write it in place
- set_copy(structure, value): return an updated copy, sharing everything
  that is not on the path

Lenses compose with ``and_then`` (or ``>>``) into a lens that behaves like
one longer path.

Lenses are immutable and safe to share between threads as configuration.
The structures they operate on are not internally synchronized: concurrent
``set`` calls on the same structure, or ``set_copy`` racing a ``set`` on the
same original, are the caller's responsibility.
"""

from typing import Any, Iterable, Optional, Tuple

from nestlens.paths import PathKey, WILDCARD, as_path_keys, split_path
from nestlens.traversal import Policy, TraversalEngine


class Lens:
    """Base class shared by every lens variant.

    Subclasses only decide which path and policy the lens runs with; the
    operations themselves are carried out by a ``TraversalEngine``.

    Examples:
        >>> name = path('user.name')
        >>> name.get({'user': {'name': 'Alice'}})
        'Alice'
        >>> name.set_copy({'user': {'name': 'Alice'}}, 'Bob')
        {'user': {'name': 'Bob'}}
    """

    def __init__(self, keys: Tuple[PathKey, ...], policy: Policy):
        self._engine = TraversalEngine(keys, policy)

    @property
    def keys(self) -> Tuple[PathKey, ...]:
        """The full path of this lens as PathKeys."""
        return self._engine.keys

    @property
    def policy(self) -> Policy:
        return self._engine.policy

    @property
    def strict(self) -> bool:
        return self._engine.policy.strict

    @property
    def create_missing(self) -> bool:
        return self._engine.policy.create_missing

    @property
    def description(self) -> str:
        """Human readable path, e.g. ``'users.*.name'``."""
        return self._engine.description

    def get(self, structure: Any) -> Any:
        """Return the focused value, or None if it can't be reached.

        Raises:
            LensError: If the lens is strict and the path can't be followed
        """
        return self._engine.get(structure)

    def set(self, structure: Any, value: Any) -> None:
        """Write ``value`` at the focus, modifying ``structure`` in place.

        Raises:
            LensError: If the lens is strict and the path can't be followed
        """
        self._engine.set_in_place(structure, value)

    def set_copy(self, structure: Any, value: Any) -> Any:
        """Return a copy of ``structure`` with ``value`` at the focus.

        Raises:
            LensError: If the lens is strict and the path can't be followed
        """
        return self._engine.set_copy(structure, value)

    def and_then(self, other: 'Lens') -> 'ComposedLens':
        """Focus on ``other`` inside the value this lens focuses on.

        Examples:
            >>> users = key('users')
            >>> first_name = lens(0, 'name')
            >>> users.and_then(first_name).get({'users': [{'name': 'Ann'}]})
            'Ann'
        """
        if not isinstance(other, Lens):
            raise TypeError(f"Can only compose with a Lens, got {type(other).__name__}")
        return ComposedLens(self, other)

    def __rshift__(self, other: 'Lens') -> 'ComposedLens':
        if not isinstance(other, Lens):
            return NotImplemented
        return self.and_then(other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.description!r}, {self.policy!r})"


class KeyedLens(Lens):
    """A lens over an explicit list of path keys."""

    def __init__(self, keys: Iterable[Any], policy: Optional[Policy] = None):
        super().__init__(as_path_keys(keys), Policy.coerce(policy))


class WildcardLens(Lens):
    """A lens focusing on every element of a sequence.

    Examples:
        >>> everything = WildcardLens()
        >>> everything.get([1, 2, 3])
        [1, 2, 3]
        >>> everything.set_copy([1, 2, 3], 0)
        [0, 0, 0]
    """

    def __init__(self, policy: Optional[Policy] = None):
        super().__init__((WILDCARD,), Policy.coerce(policy))


class ComposedLens(Lens):
    """Two lenses joined into one.

    The result behaves exactly like a single lens over the concatenated
    paths, and its policy is the union of both sides: if either side is
    strict (or creates missing containers) the whole path is.

    Each dynamic key still runs once per step per call, and wildcards in
    the outer lens fan out into the inner lens element by element.
    """

    def __init__(self, outer: Lens, inner: Lens):
        self.outer = outer
        self.inner = inner
        super().__init__(outer.keys + inner.keys, outer.policy.union(inner.policy))

    def __repr__(self) -> str:
        return f"ComposedLens({self.outer!r}, {self.inner!r})"


def lens(*keys: Any) -> KeyedLens:
    """Create a lens from a sequence of keys.

    Each key may be a literal key, a callable computing the key from the
    substructure at its step, or ``WILDCARD``. No keys gives the identity
    lens, which focuses on the whole structure.

    Examples:
        >>> lens('a', 'b').get({'a': {'b': 1}})
        1
        >>> lens('items', WILDCARD, 'id').get({'items': [{'id': 1}, {'id': 2}]})
        [1, 2]
        >>> lens().get([1, 2])
        [1, 2]
    """
    return KeyedLens(keys)


def path(dotted: str, separator: str = '.') -> KeyedLens:
    """Create a lens from a dotted string such as ``'user.address.city'``.

    Every segment is a literal key. Digit segments also index sequences.

    Raises:
        InvalidPathError: If the string is empty or has empty segments

    Examples:
        >>> path('user.address.city').get({'user': {'address': {'city': 'NYC'}}})
        'NYC'
        >>> path('items.1').get({'items': ['a', 'b']})
        'b'
    """
    return KeyedLens(split_path(dotted, separator))


def key(k: Any) -> KeyedLens:
    """Create a lens for a single key.

    Examples:
        >>> key('a').set_copy({'a': 1, 'b': 2}, 10)
        {'a': 10, 'b': 2}
    """
    return KeyedLens((k,))


def with_policy(keys: Iterable[Any], policy: Any = None, **options) -> KeyedLens:
    """Create a lens from a list of keys with an explicit policy.

    Args:
        keys: Path keys (literals, callables or ``WILDCARD``)
        policy: A Policy, a mapping of options, or None
        **options: ``strict`` / ``create_missing`` overrides

    Examples:
        >>> deep = with_policy(['a', 'b', 'c'], create_missing=True)
        >>> deep.set_copy({}, 5)
        {'a': {'b': {'c': 5}}}
    """
    return KeyedLens(keys, Policy.coerce(policy, **options))


def array_wildcard(policy: Any = None, **options) -> WildcardLens:
    """Create a lens over every element of a sequence.

    Examples:
        >>> array_wildcard().set_copy([1, 2, 3], 0)
        [0, 0, 0]
    """
    return WildcardLens(Policy.coerce(policy, **options))
