"""Iterator protocol tests: ordering, end iterators, cursor equality and invalidation."""

import pytest

from containers import HashKeyIterator, HashTable, HashTableIterator, HashValueIterator
from errors import IteratorInvalidated


def _table(*keys):
    table = HashTable()
    for key in keys:
        table.insert(key, str(key))
    return table


def test_bucket_order_then_insertion_order():
    table = _table(2, 17, 1)
    # 1 and 17 share bucket 1, 2 sits in bucket 2
    assert list(table) == [(17, "17"), (1, "1"), (2, "2")]


def test_empty_table_yields_nothing():
    table = HashTable()
    assert list(table) == []
    assert table.begin() == table.end()
    assert table.begin().at_end()


def test_iterator_is_not_restartable():
    table = _table(1, 2, 3)
    iterator = iter(table)
    assert iter(iterator) is iterator
    assert len(list(iterator)) == 3
    assert list(iterator) == []
    assert len(list(table)) == 3


def test_advancing_reaches_end():
    table = _table(3, 9, 19)
    iterator = table.begin()
    for _ in range(3):
        assert iterator != table.end()
        next(iterator)
    assert iterator.at_end()
    assert iterator == table.end()
    with pytest.raises(StopIteration):
        next(iterator)


def test_end_iterators_equal_regardless_of_cursor():
    table = _table(5)
    exhausted = table.begin()
    next(exhausted)
    assert exhausted.outer == table.capacity()
    assert exhausted == table.end()
    assert table.end() == table.end()


def test_iterators_at_same_pair_are_equal():
    table = _table(1, 17, 4)
    first = table.begin()
    second = table.begin()
    assert first == second
    next(first)
    assert first != second
    next(second)
    assert first == second


def test_iterators_of_different_tables_are_not_equal():
    first = HashTable()
    second = HashTable()
    assert first.end() != second.end()
    assert first.begin() != second.begin()


def test_iterator_not_equal_to_other_types():
    table = _table(1)
    assert table.begin() != (1, "1")


def test_keys_and_values():
    table = _table(1, 17, 2)
    assert list(table.keys()) == [1, 17, 2]
    assert list(table.values()) == ["1", "17", "2"]
    assert isinstance(table.key_iterator(), HashKeyIterator)
    assert isinstance(table.value_iterator(), HashValueIterator)


def test_yields_tuples():
    table = _table(1)
    pair = next(iter(table))
    assert pair == (1, "1")
    assert isinstance(pair, tuple)


def test_empty_buckets_are_skipped():
    table = HashTable()
    table.insert(0, "a")
    table.insert(15, "b")
    iterator = HashTableIterator(table)
    assert next(iterator) == (0, "a")
    assert iterator.outer == 15
    assert next(iterator) == (15, "b")
    assert iterator.at_end()


def test_insert_invalidates_iterator():
    table = _table(1, 2, 3)
    iterator = iter(table)
    next(iterator)
    table.insert(4, "4")
    with pytest.raises(IteratorInvalidated):
        next(iterator)


def test_growth_invalidates_iterator():
    table = HashTable()
    for i in range(12):
        table.insert(i, i)
    iterator = iter(table)
    table.insert(12, 12)
    assert table.capacity() == 32
    with pytest.raises(IteratorInvalidated):
        next(iterator)


def test_erase_and_clear_invalidate_iterator():
    table = _table(1, 2, 3)
    iterator = iter(table)
    table.erase(2)
    with pytest.raises(IteratorInvalidated):
        next(iterator)
    iterator = iter(table)
    table.clear()
    with pytest.raises(RuntimeError):
        next(iterator)


def test_mutating_inside_loop_raises():
    table = _table(1, 2, 3)
    with pytest.raises(IteratorInvalidated):
        for key, _ in table:
            table.erase(key)


def test_value_overwrite_keeps_iterator_valid():
    table = _table(1, 2, 3)
    for key, _ in table:
        table[key] = "x"
    assert list(table.values()) == ["x", "x", "x"]


def test_failed_insert_keeps_iterator_valid():
    table = _table(1, 2)
    iterator = iter(table)
    assert not table.insert(1, "other")
    assert not table.erase(99)
    assert len(list(iterator)) == 2
