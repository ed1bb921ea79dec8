"""Tests for path keys and container primitives."""

from collections import namedtuple

import pytest
from nestlens import (
    LiteralKey,
    DynamicKey,
    Wildcard,
    WILDCARD,
    Policy,
    as_path_key,
    split_path,
    describe_path,
    InvalidPathError,
    LensError,
)
from nestlens.util import (
    MISSING,
    is_mapping,
    is_sequence,
    is_container,
    is_writable,
    lookup,
    sequence_index,
    can_store,
    store,
    shallow_copy,
    rebuild,
)


def test_literal_key():
    """Test that literal keys resolve to themselves."""
    assert LiteralKey('a').resolve({'b': 1}) == 'a'
    assert LiteralKey(0) == LiteralKey(0)
    assert LiteralKey(0) != LiteralKey('0')


def test_dynamic_key():
    """Test that dynamic keys call their function with the substructure."""
    dk = DynamicKey(lambda d: sorted(d)[0])
    assert dk.resolve({'b': 1, 'a': 2}) == 'a'
    assert dk.describe() == '<fn>'


def test_dynamic_key_requires_callable():
    """Test that a non-callable dynamic key is rejected."""
    with pytest.raises(TypeError):
        DynamicKey('a')


def test_wildcard_singleton():
    """Test that Wildcard has a single instance."""
    assert Wildcard() is WILDCARD
    assert WILDCARD.describe() == '*'
    with pytest.raises(TypeError):
        WILDCARD.resolve([1])


def test_as_path_key():
    """Test conversion of raw steps."""
    assert as_path_key('a') == LiteralKey('a')
    assert as_path_key(3) == LiteralKey(3)
    assert as_path_key(WILDCARD) is WILDCARD
    assert isinstance(as_path_key(lambda d: 'a'), DynamicKey)


def test_split_path():
    """Test dotted path parsing."""
    assert split_path('a.b.c') == ['a', 'b', 'c']
    assert split_path('a') == ['a']
    assert split_path('a::b', separator='::') == ['a', 'b']


@pytest.mark.parametrize('bad', ['', 'a.', '.a', 'a..b', '.'])
def test_split_path_rejects_empty_segments(bad):
    """Test that empty segments are construction errors."""
    with pytest.raises(InvalidPathError):
        split_path(bad)


def test_split_path_rejects_non_string():
    """Test that only strings are parsed."""
    with pytest.raises(InvalidPathError):
        split_path(['a', 'b'])
    with pytest.raises(InvalidPathError):
        split_path('a.b', separator='')


def test_describe_path():
    """Test path descriptions."""
    keys = [LiteralKey('a'), WILDCARD, DynamicKey(len)]
    assert describe_path(keys) == 'a.*.<fn>'
    assert describe_path([]) == '<root>'


def test_container_predicates():
    """Test container type tests."""
    assert is_mapping({}) and not is_mapping([])
    assert is_sequence([]) and is_sequence(())
    assert not is_sequence('abc') and not is_sequence(b'abc')
    assert is_container({}) and is_container([])
    assert not is_container(1) and not is_container(None)
    assert is_writable({}) and is_writable([])
    assert not is_writable(()) and not is_writable('a')


def test_lookup():
    """Test key lookup with the MISSING sentinel."""
    assert lookup({'a': None}, 'a') is None
    assert lookup({'a': 1}, 'b') is MISSING
    assert lookup({'a': 1}, ['unhashable']) is MISSING
    assert lookup([1, 2], '1') == 2
    assert lookup([1, 2], -2) == 1
    assert lookup([1, 2], -3) is MISSING
    assert lookup([1, 2], True) is MISSING
    assert lookup(5, 'a') is MISSING
    assert not MISSING


def test_sequence_index_accepts_plain_digits_only():
    """Test that only optionally signed digit strings index sequences."""
    items = list(range(12))
    assert sequence_index(items, '10') == 10
    assert sequence_index(items, '-1') == -1
    for bad in (' 1', '+1', '1_0', '1 ', '', '-'):
        assert sequence_index(items, bad) is None
    assert lookup(items, '1_0') is MISSING


def test_lens_error_defaults():
    """Test that errors can be built from a message alone."""
    error = LensError('boom')
    assert str(error) == 'boom'
    assert error.path is None and error.depth is None
    assert error.key is MISSING


def test_can_store_and_store():
    """Test assignment rules for sequences."""
    items = [1, 2]
    assert can_store(items, 2)
    assert not can_store(items, 3)
    assert not can_store(items, 'x')
    assert not can_store({}, ['unhashable'])
    store(items, 2, 3)
    store(items, '0', 0)
    assert items == [0, 2, 3]


def test_shallow_copy_and_rebuild():
    """Test one-level copies and type restoration."""
    inner = [1]
    original = {'a': inner}
    dup = shallow_copy(original)
    assert dup == original and dup is not original
    assert dup['a'] is inner

    Pair = namedtuple('Pair', 'left right')
    working = shallow_copy(Pair(1, 2))
    working[0] = 5
    assert rebuild(Pair(1, 2), working) == Pair(5, 2)


def test_policy_coerce():
    """Test building policies from different inputs."""
    assert Policy.coerce(None) == Policy()
    assert Policy.coerce({'strict': True}) == Policy(strict=True)
    assert Policy.coerce(Policy(strict=True), create_missing=True) == Policy(True, True)
    assert Policy.coerce({'createMissing': True}, create_missing=False) == Policy()
    assert Policy.coerce({'create_missing': False}, createMissing=True) == Policy(create_missing=True)
    with pytest.raises(TypeError):
        Policy.coerce(42)
    with pytest.raises(TypeError):
        Policy.coerce({'bogus': True})


def test_policy_is_frozen():
    """Test that policies can't be modified."""
    policy = Policy()
    with pytest.raises(AttributeError):
        policy.strict = True


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
