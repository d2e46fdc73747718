"""Tests for working-tree accessors."""

import pytest

from kvlet import DirectoryTree, InvalidFileName, MemoryTree


@pytest.fixture(params=["memory", "directory"])
def tree(request, tmp_path):
    if request.param == "memory":
        return MemoryTree()
    return DirectoryTree(tmp_path)


class TestWorkTree:
    def test_write_read(self, tree):
        tree.write("a.txt", b"hello")
        assert tree.read("a.txt") == b"hello"
        assert tree.exists("a.txt")

    def test_overwrite(self, tree):
        tree.write("a.txt", b"old")
        tree.write("a.txt", b"new")
        assert tree.read("a.txt") == b"new"

    def test_read_missing(self, tree):
        with pytest.raises(FileNotFoundError):
            tree.read("nope.txt")

    def test_delete(self, tree):
        tree.write("a.txt", b"x")
        tree.delete("a.txt")
        assert not tree.exists("a.txt")
        tree.delete("a.txt")

    def test_list_files_sorted(self, tree):
        tree.write("b.txt", b"")
        tree.write("a.txt", b"")
        assert tree.list_files() == ["a.txt", "b.txt"]


class TestDirectoryTree:
    def test_skips_subdirectories(self, tmp_path):
        (tmp_path / ".kvlet").mkdir()
        (tmp_path / ".kvlet" / "cache.db").write_bytes(b"")
        (tmp_path / "a.txt").write_bytes(b"a")
        tree = DirectoryTree(tmp_path)
        assert tree.list_files() == ["a.txt"]
        assert not tree.exists(".kvlet")

    @pytest.mark.parametrize("name", ["../escape.txt", "sub/x.txt", "sub\\x.txt", ".", "..", ""])
    def test_rejects_paths(self, tmp_path, name):
        tree = DirectoryTree(tmp_path)
        with pytest.raises(InvalidFileName):
            tree.write(name, b"x")
        with pytest.raises(InvalidFileName):
            tree.exists(name)
        assert not (tmp_path.parent / "escape.txt").exists()
