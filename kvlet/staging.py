"""Staging index: pending additions and deletions for the next commit."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .content import ContentStore


@dataclass(frozen=True)
class FileRecord:
    """A tracked file name paired with its blob hash.

    Deletion markers carry ``blob=None``.
    """

    name: str
    blob: str | None = None

    @property
    def is_deletion(self) -> bool:
        return self.blob is None


class StagingIndex:
    """Pending changes prior to the next commit.

    Additions and deletions are kept in two maps. Staging one side does
    not unstage the other; callers unstage the opposite side explicitly.
    """

    def __init__(self) -> None:
        self._additions: dict[str, FileRecord] = {}
        self._deletions: dict[str, FileRecord] = {}

    @property
    def additions(self) -> Mapping[str, FileRecord]:
        return MappingProxyType(self._additions)

    @property
    def deletions(self) -> Mapping[str, FileRecord]:
        return MappingProxyType(self._deletions)

    def stage_addition(self, name: str, data: bytes, content: ContentStore) -> FileRecord:
        """Store ``data`` and record it as the pending version of ``name``."""
        record = FileRecord(name, content.put(name, data))
        self._additions[name] = record
        return record

    def unstage_addition(self, name: str) -> bool:
        return self._additions.pop(name, None) is not None

    def stage_deletion(self, name: str) -> None:
        self._deletions[name] = FileRecord(name)

    def unstage_deletion(self, name: str) -> bool:
        return self._deletions.pop(name, None) is not None

    def is_empty(self) -> bool:
        return not self._additions and not self._deletions

    def clear(self) -> None:
        self._additions.clear()
        self._deletions.clear()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StagingIndex):
            return NotImplemented
        return (
            self._additions == other._additions
            and self._deletions == other._deletions
        )
