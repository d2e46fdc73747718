"""Tests for the kvlet CLI."""

import pytest
from click.testing import CliRunner

from kvlet.cli import main


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workdir(tmp_path, runner):
    """An initialized repository directory."""
    result = runner.invoke(main, ["--dir", str(tmp_path), "init"])
    assert result.exit_code == 0, result.output
    return tmp_path


@pytest.fixture
def kv(runner, workdir):
    """Run a kvlet command in ``workdir`` and return the result."""

    def _run(*args):
        result = runner.invoke(main, ["--dir", str(workdir), *args])
        assert result.exit_code == 0, result.output
        return result

    return _run


# ---------------------------------------------------------------------------
# Init and errors
# ---------------------------------------------------------------------------

class TestInit:
    def test_creates_metadata(self, workdir):
        assert (workdir / ".kvlet").is_dir()

    def test_init_twice(self, kv):
        result = kv("init")
        assert "already exists" in result.output

    def test_uninitialized(self, runner, tmp_path):
        result = runner.invoke(main, ["--dir", str(tmp_path), "log"])
        assert result.exit_code == 0
        assert result.output == "Not in an initialized kvlet directory.\n"

    def test_env_var(self, runner, workdir):
        result = runner.invoke(main, ["status"], env={"KVLET_DIR": str(workdir)})
        assert result.exit_code == 0
        assert result.output.startswith("=== Branches ===\n*main\n")


class TestErrors:
    def test_no_command(self, kv):
        assert kv().output == "Please enter a command.\n"

    def test_unknown_command(self, kv):
        assert kv("frobnicate").output == "No command with that name exists.\n"

    def test_missing_operand(self, kv):
        assert kv("add").output == "Incorrect operands.\n"

    def test_extra_operand(self, kv):
        assert kv("commit", "a", "b").output == "Incorrect operands.\n"

    def test_commit_nothing(self, kv):
        assert kv("commit", "empty").output == "No changes added to the commit.\n"

    def test_add_missing(self, kv):
        assert kv("add", "nope.txt").output == "File does not exist.\n"

    def test_add_path(self, kv, workdir):
        (workdir / "sub").mkdir()
        (workdir / "sub" / "x.txt").write_text("x")
        assert kv("add", "sub/x.txt").output == "Invalid file name.\n"
        assert "sub" not in kv("status").output

    def test_bad_group_option(self, kv):
        assert kv("--bogus", "init").output == "Incorrect operands.\n"

    def test_group_option_missing_value(self, runner):
        result = runner.invoke(main, ["--dir"])
        assert result.exit_code == 0
        assert result.output == "Incorrect operands.\n"

    def test_find_nothing(self, kv):
        assert kv("find", "nope").output == "Found no commit with that message.\n"

    def test_failed_command_changes_nothing(self, kv, workdir):
        (workdir / "a.txt").write_text("1")
        kv("add", "a.txt")
        kv("commit", "")
        assert "a.txt" in kv("status").output.split("=== Staged Files ===")[1]


# ---------------------------------------------------------------------------
# Everyday commands
# ---------------------------------------------------------------------------

class TestCommitAndLog:
    def test_log(self, kv, workdir):
        (workdir / "a.txt").write_text("1")
        kv("add", "a.txt")
        kv("commit", "first")
        (workdir / "a.txt").write_text("2")
        kv("add", "a.txt")
        kv("commit", "second")

        out = kv("log").output
        assert out.startswith("===\ncommit ")
        assert out.index("second") < out.index("first") < out.index("initial commit")
        assert out.count("===\n") == 3

    def test_global_log_and_find(self, kv, workdir):
        (workdir / "a.txt").write_text("1")
        kv("add", "a.txt")
        kv("commit", "first")
        ids = kv("find", "first").output.split()
        assert len(ids) == 1
        assert f"commit {ids[0]}" in kv("global-log").output

    def test_status(self, kv, workdir):
        (workdir / "a.txt").write_text("1")
        kv("add", "a.txt")
        kv("branch", "dev")
        assert kv("status").output == (
            "=== Branches ===\n"
            "dev\n"
            "*main\n"
            "\n"
            "=== Staged Files ===\n"
            "a.txt\n"
            "\n"
            "=== Removed Files ===\n"
            "\n"
            "=== Modifications Not Staged For Commit ===\n"
            "\n"
            "=== Untracked Files ===\n"
            "\n"
        )

    def test_rm(self, kv, workdir):
        (workdir / "a.txt").write_text("1")
        kv("add", "a.txt")
        kv("commit", "first")
        kv("rm", "a.txt")
        assert not (workdir / "a.txt").exists()
        assert "=== Removed Files ===\na.txt\n" in kv("status").output


class TestCheckout:
    @pytest.fixture
    def history(self, kv, workdir):
        (workdir / "a.txt").write_text("1")
        kv("add", "a.txt")
        kv("commit", "first")
        first = kv("find", "first").output.strip()
        (workdir / "a.txt").write_text("2")
        kv("add", "a.txt")
        kv("commit", "second")
        return first

    def test_file_from_head(self, kv, workdir, history):
        (workdir / "a.txt").write_text("scribbled")
        kv("checkout", "--", "a.txt")
        assert (workdir / "a.txt").read_text() == "2"

    def test_file_from_short_id(self, kv, workdir, history):
        kv("checkout", history[:8], "--", "a.txt")
        assert (workdir / "a.txt").read_text() == "1"

    def test_bad_separator(self, kv, history):
        assert kv("checkout", history, "++", "a.txt").output == "Incorrect operands.\n"

    def test_branch(self, kv, workdir, history):
        kv("branch", "dev")
        kv("checkout", "dev")
        (workdir / "b.txt").write_text("b")
        kv("add", "b.txt")
        kv("commit", "on dev")
        kv("checkout", "main")
        assert not (workdir / "b.txt").exists()
        assert kv("checkout", "main").output == "No need to checkout the current branch.\n"
        assert kv("checkout", "ghost").output == "No such branch exists.\n"

    def test_reset(self, kv, workdir, history):
        kv("reset", history)
        assert (workdir / "a.txt").read_text() == "1"
        assert "second" not in kv("log").output
        assert "second" in kv("global-log").output


class TestBranchAndMerge:
    def test_rm_branch(self, kv):
        kv("branch", "dev")
        assert kv("branch", "dev").output == "A branch with that name already exists.\n"
        kv("rm-branch", "dev")
        assert kv("rm-branch", "dev").output == (
            "A branch with that name does not exist.\n"
        )
        assert kv("rm-branch", "main").output == "Cannot remove the current branch.\n"

    def test_merge_conflict(self, kv, workdir):
        (workdir / "a.txt").write_text("one\n")
        kv("add", "a.txt")
        kv("commit", "base")
        kv("branch", "other")
        (workdir / "a.txt").write_text("two\n")
        kv("add", "a.txt")
        kv("commit", "head work")
        kv("checkout", "other")
        (workdir / "a.txt").write_text("three\n")
        kv("add", "a.txt")
        kv("commit", "other work")
        kv("checkout", "main")

        assert kv("merge", "other").output == "Encountered a merge conflict.\n"
        assert (workdir / "a.txt").read_text() == (
            "<<<<<<< HEAD\ntwo\n=======\nthree\n>>>>>>>\n"
        )
        log = kv("log").output
        assert "Merged other into main." in log
        assert "Merge: " in log

    def test_merge_fast_forward(self, kv, workdir):
        kv("branch", "other")
        kv("checkout", "other")
        (workdir / "a.txt").write_text("1")
        kv("add", "a.txt")
        kv("commit", "ahead")
        kv("checkout", "main")
        assert kv("merge", "other").output == "Current branch fast-forwarded.\n"
        assert (workdir / "a.txt").read_text() == "1"
