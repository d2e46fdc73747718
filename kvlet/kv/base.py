"""Byte-valued KV store interface shared by the repository backends."""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping


def check_bytes(key: str, value: object) -> None:
    """Raise TypeError unless ``value`` is bytes."""
    if not isinstance(value, bytes):
        raise TypeError(f"Expected bytes for {key!r}, got {type(value).__name__}")


class KVStore(ABC):
    """Flat mapping of string keys to bytes.

    The repository keeps everything here under templated keys: blobs,
    pickled commits, branch heads, the current branch and the staging
    index. Encoding happens above this layer (``ContentStore``,
    ``StateStore``), so backends never see anything but bytes.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Value for ``key``, or None."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None: ...

    @abstractmethod
    def get_many(self, *keys: str) -> Mapping[str, bytes]:
        """Values for the given keys; absent keys are left out."""

    @abstractmethod
    def set_many(self, **items: bytes) -> None:
        """Write every pair, or none of them if a value is not bytes."""

    @abstractmethod
    def keys(self) -> Iterable[str]: ...

    @abstractmethod
    def __contains__(self, key: str) -> bool: ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; a missing key is ignored."""

    @abstractmethod
    def remove_many(self, *keys: str) -> None: ...

    def close(self) -> None:
        """Release backend resources."""
