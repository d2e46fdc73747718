"""Tests for the kvlet.repository() factory function."""

import os

import pytest

from kvlet import MemoryTree, NotInitialized, Repository, repository
from kvlet.kv.disk import Disk
from kvlet.store import METADATA_DIR
from kvlet.worktree import DirectoryTree


class TestRepositoryFactory:
    def test_memory_create(self):
        r = repository(create=True)
        assert isinstance(r, Repository)
        assert isinstance(r.tree, MemoryTree)
        assert r.head.message == "initial commit"

    def test_memory_open_uninitialized(self):
        with pytest.raises(NotInitialized):
            repository()

    def test_invalid_storage(self):
        with pytest.raises(ValueError, match="Unknown storage"):
            repository(storage="redis")

    def test_disk_requires_path(self):
        with pytest.raises(ValueError, match="path is required"):
            repository(storage="disk")

    def test_disk_open_uninitialized_creates_nothing(self, tmp_path):
        with pytest.raises(NotInitialized):
            repository("disk", path=str(tmp_path))
        assert not os.path.exists(tmp_path / METADATA_DIR)


class TestDiskRoundTrip:
    def test_create_and_reopen(self, tmp_path):
        path = str(tmp_path)
        with repository("disk", path=path, create=True) as r:
            assert isinstance(r.store, Disk)
            assert isinstance(r.tree, DirectoryTree)
            (tmp_path / "a.txt").write_bytes(b"hello")
            r.add("a.txt")
            first = r.commit("first")

        with repository("disk", path=path) as r:
            assert r.head == first
            (tmp_path / "a.txt").write_bytes(b"scribbled")
            r.checkout_file("a.txt")
        assert (tmp_path / "a.txt").read_bytes() == b"hello"

    def test_staging_survives_reopen(self, tmp_path):
        path = str(tmp_path)
        repository("disk", path=path, create=True).close()
        (tmp_path / "a.txt").write_bytes(b"1")
        with repository("disk", path=path) as r:
            r.add("a.txt")
        with repository("disk", path=path) as r:
            assert list(r.status().staged) == ["a.txt"]
