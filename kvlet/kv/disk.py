"""KV store persisted with diskcache."""

from typing import Iterable, Mapping

from .base import KVStore, check_bytes

DEFAULT_SIZE_LIMIT = 2**30


class Disk(KVStore):
    """Store backed by a diskcache directory (SQLite index plus files).

    Eviction is turned off: blobs and commits are never rewritten or
    dropped, whatever ``size_limit`` says.
    """

    def __init__(self, directory: str, size_limit: int = DEFAULT_SIZE_LIMIT) -> None:
        from diskcache import Cache

        self.directory = directory
        self.cache = Cache(directory, size_limit=size_limit, eviction_policy="none")

    def get(self, key: str) -> bytes | None:
        return self.cache.get(key)

    def set(self, key: str, value: bytes) -> None:
        check_bytes(key, value)
        self.cache.set(key, value)

    def get_many(self, *keys: str) -> Mapping[str, bytes]:
        found = {}
        with self.cache.transact():
            for key in keys:
                value = self.cache.get(key)
                if value is not None:
                    found[key] = value
        return found

    def set_many(self, **items: bytes) -> None:
        for key, value in items.items():
            check_bytes(key, value)
        with self.cache.transact():
            for key, value in items.items():
                self.cache.set(key, value)

    def keys(self) -> Iterable[str]:
        return (str(key) for key in self.cache.iterkeys())

    def __contains__(self, key: str) -> bool:
        return key in self.cache

    def remove(self, key: str) -> None:
        self.cache.delete(key)

    def remove_many(self, *keys: str) -> None:
        with self.cache.transact():
            for key in keys:
                self.cache.delete(key)

    def close(self) -> None:
        self.cache.close()
