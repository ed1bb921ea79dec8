"""Composable lenses for reading and updating nested mappings and sequences.

A lens wraps a path through a nested structure and gives you three
operations on the value at the end of it:
- get: read it
- set: write it in place
- set_copy: write it into a copy, sharing everything off the path

Paths may contain literal keys, dynamic keys (functions of the substructure
at that step) and wildcards over sequence elements. Lenses compose into
longer lenses with ``and_then`` or ``>>``.

Basic usage:
    >>> from nestlens import path
    >>> city = path('user.address.city')
    >>> data = {'user': {'address': {'city': 'NYC'}}, 'tags': ['a']}
    >>> city.get(data)
    'NYC'
    >>> updated = city.set_copy(data, 'Paris')
    >>> updated['user']['address']['city'], data['user']['address']['city']
    ('Paris', 'NYC')
    >>> updated['tags'] is data['tags']
    True

Policies:
    >>> from nestlens import with_policy
    >>> with_policy(['a', 'b', 'c'], create_missing=True).set_copy({}, 5)
    {'a': {'b': {'c': 5}}}
"""

from nestlens.base import (
    Lens,
    KeyedLens,
    WildcardLens,
    ComposedLens,
    lens,
    path,
    key,
    with_policy,
    array_wildcard,
)

from nestlens.traversal import (
    Policy,
    DEFAULT_POLICY,
    TraversalEngine,
    LensError,
    NotTraversableError,
    KeyMissingError,
    MissingIntermediateError,
    InvalidWildcardTargetError,
)

from nestlens.paths import (
    PathKey,
    LiteralKey,
    DynamicKey,
    Wildcard,
    WILDCARD,
    as_path_key,
    split_path,
    describe_path,
    InvalidPathError,
)

__version__ = "0.1.0"  # Keep in sync with package version

__all__ = [
    # Factories
    "lens",
    "path",
    "key",
    "with_policy",
    "array_wildcard",
    # Lenses
    "Lens",
    "KeyedLens",
    "WildcardLens",
    "ComposedLens",
    # Policy and engine
    "Policy",
    "DEFAULT_POLICY",
    "TraversalEngine",
    # Paths
    "PathKey",
    "LiteralKey",
    "DynamicKey",
    "Wildcard",
    "WILDCARD",
    "as_path_key",
    "split_path",
    "describe_path",
    # Exceptions
    "LensError",
    "NotTraversableError",
    "KeyMissingError",
    "MissingIntermediateError",
    "InvalidWildcardTargetError",
    "InvalidPathError",
]
