"""Container primitives for nested data: type tests, lookups and shallow copies.

Lenses only know about three shapes of data:
- mappings (any ``Mapping``)
- sequences (any ``Sequence`` that is not a string)
- scalars (everything else)

This module keeps those decisions in one place so the traversal code never
has to ask ``isinstance`` questions itself.
"""

import copy
import re
from typing import Any, Optional
from collections.abc import Mapping, MutableMapping, Sequence, MutableSequence


class _Missing:
    """Sentinel for a key that is not present in a container."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'MISSING'

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

_STRING_TYPES = (str, bytes, bytearray)
_INDEX_RE = re.compile(r'-?[0-9]+\Z')


def is_mapping(obj: Any) -> bool:
    """Return True if ``obj`` is an associative container.

    Examples:
        >>> is_mapping({'a': 1})
        True
        >>> is_mapping([1, 2])
        False
    """
    return isinstance(obj, Mapping)


def is_sequence(obj: Any) -> bool:
    """Return True if ``obj`` is an ordered sequence (strings excluded).

    Examples:
        >>> is_sequence([1, 2])
        True
        >>> is_sequence((1, 2))
        True
        >>> is_sequence('abc')
        False
    """
    return isinstance(obj, Sequence) and not isinstance(obj, _STRING_TYPES)


def is_container(obj: Any) -> bool:
    """Return True if a lens can step into ``obj``."""
    return is_mapping(obj) or is_sequence(obj)


def is_writable(obj: Any) -> bool:
    """Return True if ``obj`` can be modified in place."""
    return isinstance(obj, MutableMapping) or (
        isinstance(obj, MutableSequence) and not isinstance(obj, bytearray)
    )


def sequence_index(seq: Sequence, key: Any) -> Optional[int]:
    """Normalize ``key`` to an index into ``seq``, or None if it can't be one.

    Integers (not bools) are used as-is and strings of digits are converted,
    so dot paths like ``'items.0'`` address list elements. The result is not
    range-checked.

    Examples:
        >>> sequence_index([1, 2, 3], 1)
        1
        >>> sequence_index([1, 2, 3], '2')
        2
        >>> sequence_index([1, 2, 3], 'x') is None
        True
        >>> sequence_index([1, 2, 3], True) is None
        True
    """
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, str) and _INDEX_RE.match(key):
        return int(key)
    return None


def lookup(container: Any, key: Any) -> Any:
    """Return ``container[key]``, or ``MISSING`` if the key is absent.

    Examples:
        >>> lookup({'a': 1}, 'a')
        1
        >>> lookup({'a': 1}, 'b')
        MISSING
        >>> lookup(['x', 'y'], -1)
        'y'
        >>> lookup(['x', 'y'], 5)
        MISSING
    """
    if is_mapping(container):
        # membership first: defaultdict and friends insert on a missed read
        try:
            present = key in container
        except TypeError:
            return MISSING
        if not present:
            return MISSING
        return container[key]
    if is_sequence(container):
        index = sequence_index(container, key)
        if index is None or not -len(container) <= index < len(container):
            return MISSING
        return container[index]
    return MISSING


def can_store(container: Any, key: Any) -> bool:
    """Return True if ``store(container, key, ...)`` would succeed.

    Mappings accept any hashable key. Sequences accept an existing index or
    ``len(container)``, which appends.
    """
    if is_mapping(container):
        try:
            hash(key)
        except TypeError:
            return False
        return True
    if is_sequence(container):
        index = sequence_index(container, key)
        return index is not None and -len(container) <= index <= len(container)
    return False


def store(container: Any, key: Any, value: Any) -> None:
    """Assign ``value`` at ``key`` in a writable container.

    For sequences, storing at ``len(container)`` appends.

    Examples:
        >>> d = {}
        >>> store(d, 'a', 1)
        >>> d
        {'a': 1}
        >>> items = [1, 2]
        >>> store(items, 2, 3)
        >>> items
        [1, 2, 3]
    """
    if is_mapping(container):
        container[key] = value
        return
    index = sequence_index(container, key)
    if index == len(container):
        container.append(value)
    else:
        container[index] = value


def shallow_copy(container: Any) -> Any:
    """Return a writable one-level copy of a mapping or sequence.

    Nested values are shared with the original. Use ``rebuild`` to turn the
    working copy back into the original's type.

    Examples:
        >>> inner = {'x': 1}
        >>> outer = {'a': inner}
        >>> dup = shallow_copy(outer)
        >>> dup is outer, dup['a'] is inner
        (False, True)
    """
    if isinstance(container, MutableMapping):
        return copy.copy(container)
    if is_mapping(container):
        return dict(container)
    if isinstance(container, list):
        return list(container)
    if isinstance(container, MutableSequence) and not isinstance(container, bytearray):
        return copy.copy(container)
    return list(container)


def rebuild(original: Any, working: Any) -> Any:
    """Convert a working copy made by ``shallow_copy`` back to ``original``'s type.

    Only immutable sequences need converting; everything else is returned
    unchanged.

    Examples:
        >>> rebuild((1, 2), [3, 4])
        (3, 4)
        >>> rebuild([1, 2], [3, 4])
        [3, 4]
    """
    if working is original or not isinstance(original, tuple):
        return working
    if hasattr(original, '_fields'):
        # namedtuple
        return type(original)(*working)
    return type(original)(working)


def empty_container() -> dict:
    """Return the container materialized for a missing intermediate step."""
    return {}
