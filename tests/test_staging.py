"""Tests for the staging index."""

import pytest

from kvlet import ContentStore, FileRecord, StagingIndex


class TestStagingAdditions:
    def test_new_index_is_empty(self):
        assert StagingIndex().is_empty()

    def test_stage_addition_stores_blob(self):
        c = ContentStore()
        s = StagingIndex()
        record = s.stage_addition("a.txt", b"hello", c)
        assert record == FileRecord("a.txt", record.blob)
        assert c.get(record.blob) == b"hello"
        assert s.additions["a.txt"] == record
        assert not s.is_empty()

    def test_restage_replaces(self):
        c = ContentStore()
        s = StagingIndex()
        s.stage_addition("a.txt", b"one", c)
        second = s.stage_addition("a.txt", b"two", c)
        assert s.additions == {"a.txt": second}

    def test_unstage_addition(self):
        s = StagingIndex()
        s.stage_addition("a.txt", b"one", ContentStore())
        assert s.unstage_addition("a.txt")
        assert not s.unstage_addition("a.txt")
        assert s.is_empty()


class TestStagingDeletions:
    def test_stage_deletion_is_marker(self):
        s = StagingIndex()
        s.stage_deletion("a.txt")
        assert s.deletions["a.txt"].is_deletion
        assert s.deletions["a.txt"].blob is None

    def test_unstage_deletion(self):
        s = StagingIndex()
        s.stage_deletion("a.txt")
        assert s.unstage_deletion("a.txt")
        assert not s.unstage_deletion("a.txt")

    def test_sides_are_independent(self):
        s = StagingIndex()
        s.stage_addition("a.txt", b"x", ContentStore())
        s.stage_deletion("a.txt")
        assert "a.txt" in s.additions
        assert "a.txt" in s.deletions


class TestStagingClear:
    def test_clear_empties_both(self):
        s = StagingIndex()
        s.stage_addition("a.txt", b"x", ContentStore())
        s.stage_deletion("b.txt")
        s.clear()
        assert s.is_empty()
        assert dict(s.additions) == {}
        assert dict(s.deletions) == {}

    def test_views_are_read_only(self):
        s = StagingIndex()
        with pytest.raises(TypeError):
            s.additions["a.txt"] = FileRecord("a.txt", "x")  # type: ignore[index]
        assert s.is_empty()
