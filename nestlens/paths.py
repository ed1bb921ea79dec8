"""Path keys: the individual steps a lens takes through a nested structure.

A lens path is an ordered sequence of steps. Each step is one of:
- LiteralKey: a fixed mapping key or sequence index
- DynamicKey: a function that computes the key from the substructure it is
  about to step into
- Wildcard: every index of the sequence at that step

Plain values and callables given to the factories are converted with
``as_path_key``, so ``lens('users', 0, lambda d: d['primary'])`` just works.
"""

from typing import Any, Callable, Iterable, List, Tuple


class InvalidPathError(ValueError):
    """Raised when a path is malformed or invalid."""
    pass


class PathKey:
    """Base class for a single step of a lens path."""

    def resolve(self, current: Any) -> Any:
        """Return the concrete key to use against ``current``."""
        raise NotImplementedError

    def describe(self) -> str:
        """Return a short label for error messages and reprs."""
        raise NotImplementedError


class LiteralKey(PathKey):
    """A fixed key, resolved to itself regardless of the substructure.

    Examples:
        >>> LiteralKey('name').resolve({'name': 'Alice'})
        'name'
    """

    def __init__(self, key: Any):
        self.key = key

    def resolve(self, current: Any) -> Any:
        return self.key

    def describe(self) -> str:
        return str(self.key)

    def __eq__(self, other) -> bool:
        return isinstance(other, LiteralKey) and self.key == other.key

    def __hash__(self) -> int:
        return hash((LiteralKey, self.key))

    def __repr__(self) -> str:
        return f"LiteralKey({self.key!r})"


class DynamicKey(PathKey):
    """A key computed from the substructure at its step.

    The function is called once per step on every ``get``/``set``/``set_copy``
    call, with the substructure at that step (not the root). Results are
    never cached.

    Examples:
        >>> newest = DynamicKey(lambda versions: max(versions))
        >>> newest.resolve({'1.0': 'old', '2.0': 'new'})
        '2.0'
    """

    def __init__(self, func: Callable[[Any], Any]):
        if not callable(func):
            raise TypeError(f"DynamicKey requires a callable, got {type(func).__name__}")
        self.func = func

    def resolve(self, current: Any) -> Any:
        return self.func(current)

    def describe(self) -> str:
        return '<fn>'

    def __eq__(self, other) -> bool:
        return isinstance(other, DynamicKey) and self.func is other.func

    def __hash__(self) -> int:
        return hash((DynamicKey, id(self.func)))

    def __repr__(self) -> str:
        name = getattr(self.func, '__name__', type(self.func).__name__)
        return f"DynamicKey({name})"


class Wildcard(PathKey):
    """Every index of the sequence at this step.

    Not a single key: the traversal fans out into one branch per element.
    Use the ``WILDCARD`` singleton.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def resolve(self, current: Any) -> Any:
        raise TypeError("Wildcard does not resolve to a single key")

    def describe(self) -> str:
        return '*'

    def __repr__(self) -> str:
        return 'WILDCARD'


WILDCARD = Wildcard()


def as_path_key(step: Any) -> PathKey:
    """Convert a value given by the caller into a PathKey.

    PathKeys pass through, callables become DynamicKeys and anything else
    becomes a LiteralKey.

    Examples:
        >>> as_path_key('a')
        LiteralKey('a')
        >>> as_path_key(WILDCARD)
        WILDCARD
        >>> as_path_key(len)
        DynamicKey(len)
    """
    if isinstance(step, PathKey):
        return step
    if callable(step):
        return DynamicKey(step)
    return LiteralKey(step)


def as_path_keys(steps: Iterable[Any]) -> Tuple[PathKey, ...]:
    """Convert an iterable of steps into a tuple of PathKeys.

    A bare string is rejected rather than iterated character by character.

    Raises:
        InvalidPathError: If ``steps`` is a string or not iterable
    """
    if isinstance(steps, (str, bytes)):
        raise InvalidPathError(
            f"Expected a sequence of keys, got the string {steps!r}; use path() for dotted strings"
        )
    try:
        return tuple(as_path_key(step) for step in steps)
    except TypeError as e:
        raise InvalidPathError(f"Expected a sequence of keys: {e}") from e


def split_path(dotted: str, separator: str = '.') -> List[str]:
    """Split a dotted path into its literal segments.

    Args:
        dotted: Path string such as ``'user.address.city'``
        separator: Segment separator (default: '.')

    Returns:
        List of segments

    Raises:
        InvalidPathError: If the path is not a string or has empty segments

    Examples:
        >>> split_path('user.address.city')
        ['user', 'address', 'city']
        >>> split_path('a/b', separator='/')
        ['a', 'b']
    """
    if not isinstance(dotted, str):
        raise InvalidPathError(f"Dotted path must be a string: {dotted!r}")
    if not separator:
        raise InvalidPathError("Path separator cannot be empty")
    if dotted == '':
        raise InvalidPathError("Dotted path cannot be empty")

    parts = dotted.split(separator)
    if any(part == '' for part in parts):
        raise InvalidPathError(f"Empty segment in path: {dotted!r}")
    return parts


def describe_path(keys: Iterable[PathKey]) -> str:
    """Render a path for humans, e.g. ``'users.*.<fn>'``.

    The identity path renders as ``'<root>'``.
    """
    labels = [key.describe() for key in keys]
    return '.'.join(labels) if labels else '<root>'
