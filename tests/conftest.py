"""Shared fixtures for kvlet tests."""

import pytest

from kvlet import MemoryTree, repository


class Clock:
    """Deterministic commit clock: one second per call."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        self.now += 1
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def tree():
    return MemoryTree()


@pytest.fixture
def repo(tree, clock):
    """A fresh in-memory repository holding only the root commit."""
    return repository(tree=tree, create=True, clock=clock)


@pytest.fixture
def commit_files():
    """Write files, stage them and commit; returns the new CommitNode."""

    def _commit(repo, message, files=None, removals=()):
        for name, data in (files or {}).items():
            repo.tree.write(name, data)
            repo.add(name)
        for name in removals:
            repo.rm(name)
        return repo.commit(message)

    return _commit
