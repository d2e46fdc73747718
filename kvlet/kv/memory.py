"""In-memory KV store."""

from typing import Iterable, Mapping

from .base import KVStore, check_bytes


class Memory(KVStore):
    """Dict-backed store; used by tests and throwaway repositories."""

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        check_bytes(key, value)
        self.data[key] = value

    def get_many(self, *keys: str) -> Mapping[str, bytes]:
        return {key: self.data[key] for key in keys if key in self.data}

    def set_many(self, **items: bytes) -> None:
        for key, value in items.items():
            check_bytes(key, value)
        self.data.update(items)

    def keys(self) -> Iterable[str]:
        return list(self.data)

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def remove_many(self, *keys: str) -> None:
        for key in keys:
            self.data.pop(key, None)
