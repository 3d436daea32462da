import logging
from collections.abc import Hashable
from typing import Callable, Generic, Optional, TypeVar

from errors import AllocationFailure, ConfigError, IteratorInvalidated, KeyNotFound

logger = logging.getLogger(__name__)

INITIAL_CAPACITY = 16
TABLE_FACTOR = 2
DEFAULT_LOWER_LOAD_FACTOR = 0.25
DEFAULT_UPPER_LOAD_FACTOR = 0.75

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


# Builds the list of empty buckets backing a table. The capacity must be a power of two
# so that bucket indexes can be computed with a bit mask.
def _allocate(capacity):
    try:
        return [[] for _ in range(capacity)]
    except MemoryError as e:
        raise AllocationFailure("Memory error occurred") from e


class HashTable(Generic[K, V]):
    # Hash table with separate chaining. Keys must be hashable and comparable with ==.
    # Index access on a missing key stores default_factory() (or None when no factory is
    # given), which is how the table builds a "default" value for V.
    # The table grows after an insertion pushes the load factor above the upper bound and
    # shrinks one step after a removal drops it below the lower bound.
    # Initializes in O(1) because the initial capacity is a constant.
    def __init__(self, lower_load_factor=DEFAULT_LOWER_LOAD_FACTOR, upper_load_factor=DEFAULT_UPPER_LOAD_FACTOR,
                 default_factory: Optional[Callable[[], V]] = None):
        if not lower_load_factor <= upper_load_factor:
            raise ConfigError("HashTable must have lower load factor smaller than upper load factor")
        if lower_load_factor < 0 or upper_load_factor > 1:
            raise ConfigError("HashTable lower and upper load factors must be between 0 and 1")
        self._lower_load_factor = lower_load_factor
        self._upper_load_factor = upper_load_factor
        self.default_factory = default_factory
        self._array = _allocate(INITIAL_CAPACITY)
        self._len = 0
        # Bumped on every structural change so outstanding iterators can detect it.
        self._modifications = 0

    # Builds a table from two parallel sequences. A key that repeats overwrites the value
    # stored for it earlier instead of being counted twice. O(n) amortized.
    @classmethod
    def from_sequences(cls, keys, values, lower_load_factor=DEFAULT_LOWER_LOAD_FACTOR,
                       upper_load_factor=DEFAULT_UPPER_LOAD_FACTOR, default_factory=None):
        keys = list(keys)
        values = list(values)
        if len(keys) != len(values):
            raise ConfigError("HashTable constructor got sequences with different sizes")
        table = cls(lower_load_factor, upper_load_factor, default_factory)
        for key, value in zip(keys, values):
            table[key] = value
        return table

    # Allows len() function to take this object as an argument. O(1)
    def __len__(self):
        return self._len

    def size(self) -> int:
        return self._len

    def capacity(self) -> int:
        return len(self._array)

    def load_factor(self) -> float:
        return self._len / len(self._array)

    def is_empty(self) -> bool:
        return self._len == 0

    @property
    def lower_load_factor(self):
        return self._lower_load_factor

    @property
    def upper_load_factor(self):
        return self._upper_load_factor

    # Index access: returns the stored value, inserting a default one first if the key is
    # missing. O(1) amortized (see index_or_insert)
    def __getitem__(self, key: K) -> V:
        return self.index_or_insert(key)

    # Overwrites the value of an existing key in place, otherwise inserts the pair.
    # O(1) amortized
    def __setitem__(self, key: K, value: V):
        entry = self._entry(key)
        if entry is not None:
            entry[1] = value
        else:
            self.insert(key, value)

    # Allows removal of an element using del table[key] syntax. O(1)
    def __delitem__(self, key):
        if self._remove(key) is None:
            raise KeyNotFound(key)

    # Allows stored pairs to be iterated in for each loop.
    # This method is O(1) though iteration itself is O(n).
    def __iter__(self):
        return HashTableIterator(self)

    # Allows use of the in keyword to test existence of key in hash table.
    # O(1) time complexity if there are few hash collisions
    def __contains__(self, key):
        return self._entry(key) is not None

    def __eq__(self, other):
        if not isinstance(other, HashTable):
            return NotImplemented
        if self is other:
            return True
        if (self._len != other._len or self._lower_load_factor != other._lower_load_factor
                or self._upper_load_factor != other._upper_load_factor
                or len(self._array) != len(other._array)):
            return False
        # One lookup per pair of the other table, so O(n)
        for key, value in other:
            entry = self._entry(key)
            if entry is None or entry[1] != value:
                return False
        return True

    # Mutable container, so instances are not hashable.
    __hash__ = None

    def __repr__(self):
        pairs = ", ".join(repr(key) + ": " + repr(value) for key, value in self)
        return "HashTable({" + pairs + "})"

    def __copy__(self):
        return self.copy()

    # Iterator positioned at the first pair. O(capacity) worst case to skip empty buckets.
    def begin(self):
        return HashTableIterator(self)

    # Iterator positioned one past the last pair. O(1)
    def end(self):
        return HashTableIterator(self, end=True)

    # Allows for the keys stored in the hash table to be iterated.
    # This method is O(1)
    def key_iterator(self):
        return HashKeyIterator(self)

    # Allows for the values stored in the hash table to be iterated.
    # This method is O(1)
    def value_iterator(self):
        return HashValueIterator(self)

    keys = key_iterator
    values = value_iterator

    # Calculates the index of the bucket holding the key. Masking with capacity - 1 equals
    # hash(key) mod capacity because capacity is a power of two. O(1)
    def bucket_index(self, key) -> int:
        return hash(key) & (len(self._array) - 1)

    def contains_key(self, key) -> bool:
        return key in self

    # Retrieves the value stored under the given key in O(1)
    def get(self, key: K) -> V:
        entry = self._entry(key)
        if entry is None:
            raise KeyNotFound(key)
        return entry[1]

    at = get

    # Number of pairs sharing a bucket with the given key. Only keys stored in the table
    # are accepted, a missing key raises KeyNotFound instead of reporting the occupancy of
    # the bucket it would land in. O(1)
    def bucket_size(self, key) -> int:
        if key not in self:
            raise KeyNotFound(key)
        return len(self._array[self.bucket_index(key)])

    # Adds a key-value pair to the hash table unless the key is already stored, in which case
    # nothing changes and False is returned.
    # This method runs in O(1) when resizing is not needed, which makes it O(1) amortized.
    def insert(self, key: K, value: V) -> bool:
        if key in self:
            return False
        self._array[self.bucket_index(key)].append([key, value])
        self._len += 1
        self._modifications += 1
        self._keep_upper_load_factor()
        return True

    # Returns the value stored under the key. A missing key is inserted with a default
    # value first, and the value is looked up again once any resize it caused is done.
    # O(1) amortized
    def index_or_insert(self, key: K) -> V:
        entry = self._entry(key)
        if entry is not None:
            return entry[1]
        value = self.default_factory() if self.default_factory is not None else None
        self.insert(key, value)
        return self._entry(key)[1]

    # Removes a key-value pair from the hash table in O(1). Returns False if the key is not stored.
    def erase(self, key) -> bool:
        return self._remove(key) is not None

    # Simultaneously removes a key-value pair and returns the value in O(1)
    def pop(self, key, default=_MISSING):
        entry = self._remove(key)
        if entry is not None:
            return entry[1]
        if default is _MISSING:
            raise KeyNotFound(key)
        return default

    # Empties every bucket without changing the capacity. O(capacity)
    def clear(self):
        for bucket in self._array:
            bucket.clear()
        self._len = 0
        self._modifications += 1

    # Independent table with its own buckets holding the same pairs, thresholds and
    # capacity. Values are shared, not copied. O(n + capacity)
    def copy(self):
        new_table = type(self).__new__(type(self))
        new_table._lower_load_factor = self._lower_load_factor
        new_table._upper_load_factor = self._upper_load_factor
        new_table.default_factory = self.default_factory
        new_table._modifications = 0
        new_table._array = _allocate(len(self._array))
        for bucket_index, bucket in enumerate(self._array):
            for kvp in bucket:
                new_table._array[bucket_index].append([kvp[0], kvp[1]])
        new_table._len = self._len
        return new_table

    # Hands the buckets of this table over to a new table and leaves this one empty with
    # its initial capacity and the same thresholds. O(1)
    def move(self):
        new_table = type(self)(self._lower_load_factor, self._upper_load_factor, self.default_factory)
        self.swap(new_table)
        return new_table

    # Exchanges the whole state of two tables. Iterators of both become invalid. O(1)
    def swap(self, other):
        if not isinstance(other, HashTable):
            raise TypeError("can only swap with another HashTable, not " + type(other).__name__)
        self._array, other._array = other._array, self._array
        self._len, other._len = other._len, self._len
        self._lower_load_factor, other._lower_load_factor = other._lower_load_factor, self._lower_load_factor
        self._upper_load_factor, other._upper_load_factor = other._upper_load_factor, self._upper_load_factor
        self.default_factory, other.default_factory = other.default_factory, self.default_factory
        self._modifications += 1
        other._modifications += 1

    # Linear scan of the key's bucket. Identity is checked before == so keys that are not
    # equal to themselves, such as float("nan"), are still found. O(1) if there are few hash collisions
    def _entry(self, key):
        for kvp in self._array[self.bucket_index(key)]:
            if kvp[0] is key or kvp[0] == key:
                return kvp
        return None

    def _remove(self, key):
        bucket = self._array[self.bucket_index(key)]
        for i in range(len(bucket)):
            if bucket[i][0] is key or bucket[i][0] == key:
                kvp = bucket.pop(i)
                self._len -= 1
                self._modifications += 1
                self._keep_lower_load_factor()
                return kvp
        return None

    # Doubles the capacity until the load factor is back under the upper bound, then
    # rehashes once. An upper bound of 0 cannot be met by any capacity, so the table
    # stays as it is in that case.
    def _keep_upper_load_factor(self):
        if self.load_factor() > self._upper_load_factor > 0:
            new_capacity = len(self._array)
            while self._len / new_capacity > self._upper_load_factor:
                new_capacity *= TABLE_FACTOR
            self._rehash(new_capacity)

    # Halves the capacity a single time, however far below the lower bound the load factor is.
    def _keep_lower_load_factor(self):
        if self.load_factor() < self._lower_load_factor and len(self._array) > 1:
            self._rehash(len(self._array) // TABLE_FACTOR)

    # Moves the existing pairs into a new list of buckets of the given capacity.
    # Runs in O(n). The old buckets are kept if the new ones cannot be allocated.
    def _rehash(self, new_capacity):
        new_array = _allocate(new_capacity)
        mask = new_capacity - 1
        for bucket in self._array:
            for kvp in bucket:
                new_array[hash(kvp[0]) & mask].append(kvp)
        logger.debug("Rehashed %d pairs from %d to %d buckets", self._len, len(self._array), new_capacity)
        self._array = new_array
        self._modifications += 1


class HashTableIterator(object):
    # Cursor made of a bucket index (outer) and a position inside that bucket (inner).
    # The iterator is only valid while the table is not structurally changed: inserting a
    # new key, removing one, clearing or resizing makes the next step raise
    # IteratorInvalidated. Overwriting a stored value is not a structural change.
    # O(1) to initialize apart from skipping leading empty buckets.
    def __init__(self, hash_table, end=False):
        self.ht = hash_table
        self.capacity = len(hash_table._array)
        self.outer = self.capacity if end else 0
        self.inner = 0
        self.modifications = hash_table._modifications
        self._skip_empty_buckets()

    # Conforms to iterator protocol. Runs in O(1)
    def __iter__(self):
        return self

    # Returns the pair under the cursor and then advances it. Once the last pair of a bucket
    # is returned the cursor jumps to the next bucket that is not empty, so reaching the end
    # takes O(1) amortized when the load factor is kept within bounds.
    def __next__(self):
        if self.modifications != self.ht._modifications:
            raise IteratorInvalidated("HashTable changed structurally during iteration")
        if self.at_end():
            raise StopIteration
        bucket = self.ht._array[self.outer]
        kvp = bucket[self.inner]
        self.inner += 1
        if self.inner == len(bucket):
            self.outer += 1
            self.inner = 0
            self._skip_empty_buckets()
        return kvp[0], kvp[1]

    def at_end(self):
        return self.outer >= self.capacity

    # Two iterators are equal when they walk the same table and either both reached the end
    # or both point at the same pair.
    def __eq__(self, other):
        if not isinstance(other, HashTableIterator):
            return NotImplemented
        if self.ht is not other.ht:
            return False
        if self.at_end() and other.at_end():
            return True
        return self.outer == other.outer and self.inner == other.inner

    __hash__ = None

    def _skip_empty_buckets(self):
        array = self.ht._array
        while self.outer < self.capacity and not array[self.outer]:
            self.outer += 1


class HashKeyIterator(object):
    # Provides an abstraction to iterate on the keys of the HashTable. O(1) to initialize.
    def __init__(self, hash_table):
        self.iterator = HashTableIterator(hash_table)

    # Conforms to iterator protocol. Runs in O(1)
    def __iter__(self):
        return self

    # Returns the key from the pair returned by HashTableIterator.__next__() in O(1)
    def __next__(self):
        return next(self.iterator)[0]


class HashValueIterator(object):
    def __init__(self, hash_table):
        self.iterator = HashTableIterator(hash_table)

    # Conforms to iterator protocol. Runs in O(1)
    def __iter__(self):
        return self

    # Returns the value from the pair returned by HashTableIterator.__next__() in O(1)
    def __next__(self):
        return next(self.iterator)[1]
