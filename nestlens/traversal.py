"""Traversal engine: walks a path of PathKeys to read, write, or copy-update.

The engine implements the three operations every lens exposes:
- get: read the focused value (never mutates)
- set_in_place: write the focused value into the structure itself
- set_copy: return a new structure with the focused value replaced, sharing
  every container that is not on the path

What happens when the path can't be followed is decided by a ``Policy``:
strict engines raise a ``LensError``, lenient ones return None (reads) or
leave the structure alone (writes). ``create_missing`` makes writes
materialize empty dicts for missing intermediate steps.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple
from collections.abc import Mapping

from nestlens.paths import PathKey, WILDCARD, InvalidPathError, describe_path
from nestlens.util import (
    MISSING,
    is_container,
    is_sequence,
    is_writable,
    lookup,
    can_store,
    store,
    shallow_copy,
    rebuild,
    empty_container,
)

logger = logging.getLogger(__name__)


class LensError(Exception):
    """Base class for errors raised by strict lenses.

    Attributes:
        path: Description of the full lens path, e.g. ``'users.*.name'``
        depth: Index of the step that failed
        key: The resolved key at the failing step, if there was one
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        depth: Optional[int] = None,
        key: Any = MISSING,
    ):
        super().__init__(message)
        self.message = message
        self.path = path
        self.depth = depth
        self.key = key

    def __str__(self) -> str:
        return self.message


class NotTraversableError(LensError, TypeError):
    """Raised when a step needs a container but finds a scalar."""
    pass


class KeyMissingError(LensError, KeyError):
    """Raised when a required key or index is absent."""
    pass


class MissingIntermediateError(KeyMissingError):
    """Raised when a write finds a missing intermediate step and may not create it."""
    pass


class InvalidWildcardTargetError(LensError, TypeError):
    """Raised when a wildcard step is applied to something that is not a sequence."""
    pass


_POLICY_ALIASES = {'createMissing': 'create_missing'}
_POLICY_FIELDS = ('strict', 'create_missing')


def _unalias(options: dict) -> dict:
    """Rename alternate option spellings to their field names."""
    return {_POLICY_ALIASES.get(name, name): value for name, value in options.items()}


@dataclass(frozen=True)
class Policy:
    """How a lens reacts to paths that can't be followed.

    Attributes:
        strict: Raise ``LensError`` instead of returning None / skipping writes
        create_missing: Let writes create empty dicts for missing intermediates

    Examples:
        >>> Policy(strict=True).union(Policy(create_missing=True))
        Policy(strict=True, create_missing=True)
        >>> Policy.coerce({'createMissing': True})
        Policy(strict=False, create_missing=True)
    """

    strict: bool = False
    create_missing: bool = False

    def union(self, other: 'Policy') -> 'Policy':
        """Combine two policies; a flag set on either side is set on the result."""
        return Policy(
            strict=self.strict or other.strict,
            create_missing=self.create_missing or other.create_missing,
        )

    @classmethod
    def coerce(cls, value: Any = None, **overrides) -> 'Policy':
        """Build a Policy from None, a Policy, or a mapping of options.

        Keyword overrides are applied on top. Both ``create_missing`` and
        ``createMissing`` spellings are accepted.

        Raises:
            TypeError: If ``value`` has an unsupported type or an option is unknown
        """
        if isinstance(value, Policy) and not overrides:
            return value

        if value is None:
            options = {}
        elif isinstance(value, Policy):
            options = {'strict': value.strict, 'create_missing': value.create_missing}
        elif isinstance(value, Mapping):
            options = dict(value)
        else:
            raise TypeError(f"Cannot build a Policy from {type(value).__name__}")

        options = _unalias(options)
        options.update(_unalias(overrides))

        unknown = set(options) - set(_POLICY_FIELDS)
        if unknown:
            raise TypeError(f"Unknown policy options: {sorted(unknown)}")

        return cls(
            strict=bool(options.get('strict', False)),
            create_missing=bool(options.get('create_missing', False)),
        )


DEFAULT_POLICY = Policy()

# (container, key, value) assignments collected before an in-place write
Write = Tuple[Any, Any, Any]


class TraversalEngine:
    """Executes get / set_in_place / set_copy for one path and policy.

    Engines are immutable and hold no per-call state, so one engine can be
    applied to any number of structures.

    Examples:
        >>> from nestlens.paths import as_path_keys
        >>> engine = TraversalEngine(as_path_keys(['a', 'b']))
        >>> engine.get({'a': {'b': 1}})
        1
        >>> engine.set_copy({'a': {'b': 1}, 'c': 2}, 5)
        {'a': {'b': 5}, 'c': 2}
    """

    def __init__(self, keys: Sequence[PathKey], policy: Optional[Policy] = None):
        self.keys = tuple(keys)
        self.policy = Policy.coerce(policy)
        self.description = describe_path(self.keys)

    def _fail(self, error_cls, message: str, depth: int, key: Any = MISSING) -> None:
        """Raise ``error_cls`` under a strict policy, otherwise log and return None."""
        if self.policy.strict:
            raise error_cls(
                f"{message} (path '{self.description}', step {depth})",
                path=self.description,
                depth=depth,
                key=key,
            )
        logger.debug("Lens '%s' gave up at step %d: %s", self.description, depth, message)
        return None

    # ------------------------------------------------------------------
    # get
    # ------------------------------------------------------------------

    def get(self, structure: Any) -> Any:
        """Return the focused value, or None if the path can't be followed.

        A wildcard step returns a new list with one result per element;
        under a lenient policy a failed branch contributes None.
        """
        return self._get(structure, 0)

    def _get(self, current: Any, depth: int) -> Any:
        for index in range(depth, len(self.keys)):
            step = self.keys[index]

            if step is WILDCARD:
                if not is_sequence(current):
                    return self._fail(
                        InvalidWildcardTargetError,
                        f"Wildcard needs a sequence, got {type(current).__name__}",
                        index,
                    )
                return [self._get(item, index + 1) for item in current]

            if not is_container(current):
                return self._fail(
                    NotTraversableError,
                    f"Cannot index into {type(current).__name__}",
                    index,
                )

            key = step.resolve(current)
            child = lookup(current, key)
            if child is MISSING:
                return self._fail(KeyMissingError, f"Key {key!r} does not exist", index, key)
            current = child

        return current

    # ------------------------------------------------------------------
    # set_in_place
    # ------------------------------------------------------------------

    def set_in_place(self, structure: Any, value: Any) -> None:
        """Write ``value`` at the focus, mutating ``structure``.

        Every assignment is planned before any is made, so when a strict
        policy raises, nothing has been written. Under a lenient policy a
        path that can't be followed writes nothing; with a wildcard only the
        failing branches are skipped.

        Raises:
            InvalidPathError: If the path is empty and the policy is strict
            LensError: On a path failure under a strict policy
        """
        if not self.keys:
            if self.policy.strict:
                raise InvalidPathError("Cannot set the root in place")
            logger.debug("Ignoring in-place set on the identity lens")
            return

        writes = self._plan(structure, value, 0)
        if writes is None:
            return
        for container, key, item in writes:
            store(container, key, item)

    def _plan(self, current: Any, value: Any, depth: int) -> Optional[List[Write]]:
        """Collect the assignments needed to write ``value`` from ``depth`` on.

        Returns None if this branch can't be written (lenient policy).
        """
        writes = []
        last = len(self.keys) - 1

        for index in range(depth, len(self.keys)):
            step = self.keys[index]

            if step is WILDCARD:
                if not is_sequence(current):
                    return self._fail(
                        InvalidWildcardTargetError,
                        f"Wildcard needs a sequence, got {type(current).__name__}",
                        index,
                    )
                if index == last:
                    if not is_writable(current):
                        return self._fail(
                            NotTraversableError,
                            f"Cannot assign into read-only {type(current).__name__}",
                            index,
                        )
                    writes.extend((current, position, value) for position in range(len(current)))
                else:
                    for item in current:
                        branch = self._plan(item, value, index + 1)
                        if branch is not None:
                            writes.extend(branch)
                return writes

            if not is_container(current):
                return self._fail(
                    NotTraversableError,
                    f"Cannot index into {type(current).__name__}",
                    index,
                )

            key = step.resolve(current)

            if index == last:
                if not is_writable(current):
                    return self._fail(
                        NotTraversableError,
                        f"Cannot assign into read-only {type(current).__name__}",
                        index,
                        key,
                    )
                if not can_store(current, key):
                    return self._fail(KeyMissingError, f"Cannot assign at key {key!r}", index, key)
                writes.append((current, key, value))
                return writes

            child = lookup(current, key)
            if not is_container(child):
                if not self.policy.create_missing:
                    if child is MISSING:
                        return self._fail(
                            MissingIntermediateError,
                            f"Missing key {key!r} and create_missing is off",
                            index,
                            key,
                        )
                    return self._fail(
                        NotTraversableError,
                        f"Expected a container at key {key!r}, got {type(child).__name__}",
                        index,
                        key,
                    )
                if not is_writable(current) or not can_store(current, key):
                    return self._fail(
                        NotTraversableError,
                        f"Cannot create a container at key {key!r} in {type(current).__name__}",
                        index,
                        key,
                    )
                child = empty_container()
                writes.append((current, key, child))
            current = child

        return writes

    # ------------------------------------------------------------------
    # set_copy
    # ------------------------------------------------------------------

    def set_copy(self, structure: Any, value: Any) -> Any:
        """Return a copy of ``structure`` with ``value`` at the focus.

        Every container on the path is a fresh shallow copy; everything off
        the path is shared with ``structure``. If the path can't be followed
        under a lenient policy, ``structure`` itself is returned.

        Raises:
            LensError: On a path failure under a strict policy
        """
        return self._set_copy(structure, value, 0)

    def _set_copy(self, current: Any, value: Any, depth: int) -> Any:
        if depth == len(self.keys):
            return value

        step = self.keys[depth]
        last = depth == len(self.keys) - 1

        if step is WILDCARD:
            if not is_sequence(current):
                self._fail(
                    InvalidWildcardTargetError,
                    f"Wildcard needs a sequence, got {type(current).__name__}",
                    depth,
                )
                return current
            working = shallow_copy(current)
            changed = last
            for position, item in enumerate(current):
                replacement = self._set_copy(item, value, depth + 1)
                changed = changed or replacement is not item
                working[position] = replacement
            return rebuild(current, working) if changed else current

        if not is_container(current):
            self._fail(NotTraversableError, f"Cannot index into {type(current).__name__}", depth)
            return current

        key = step.resolve(current)
        child = lookup(current, key)

        if last:
            if child is MISSING and not can_store(current, key):
                self._fail(KeyMissingError, f"Cannot assign at key {key!r}", depth, key)
                return current
            replacement = value
        elif is_container(child):
            replacement = self._set_copy(child, value, depth + 1)
            if replacement is child:
                # nothing below changed
                return current
        elif self.policy.create_missing:
            if not can_store(current, key):
                self._fail(
                    NotTraversableError,
                    f"Cannot create a container at key {key!r} in {type(current).__name__}",
                    depth,
                    key,
                )
                return current
            fresh = empty_container()
            replacement = self._set_copy(fresh, value, depth + 1)
            if replacement is fresh:
                return current
        else:
            if child is MISSING:
                self._fail(
                    MissingIntermediateError,
                    f"Missing key {key!r} and create_missing is off",
                    depth,
                    key,
                )
            else:
                self._fail(
                    NotTraversableError,
                    f"Expected a container at key {key!r}, got {type(child).__name__}",
                    depth,
                    key,
                )
            return current

        working = shallow_copy(current)
        store(working, key, replacement)
        return rebuild(current, working)
