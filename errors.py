# Exceptions raised by the HashTable container and the spam detector built on it.
# Each container error also derives from the matching builtin so callers can keep
# catching KeyError, ValueError and friends the way they would with a dict.


class HashTableError(Exception):
    pass


# Invalid load factors or mismatched key/value sequences passed at construction.
class ConfigError(HashTableError, ValueError):
    pass


# Lookup of a key that is not stored in the table.
class KeyNotFound(HashTableError, KeyError):
    def __init__(self, key):
        super().__init__(key)
        self.key = key

    def __str__(self):
        return "HashTable doesn't have an element with key " + repr(self.key)


# Bucket storage could not be allocated. The table keeps its previous storage when
# this is raised from a rehash, so it is still safe to use.
class AllocationFailure(HashTableError, MemoryError):
    pass


# An iterator was advanced after the table it walks was structurally changed.
class IteratorInvalidated(HashTableError, RuntimeError):
    pass


# Malformed database or message file, or a threshold that is not a positive number.
class InvalidInput(ValueError):
    def __str__(self):
        return "Invalid input"
