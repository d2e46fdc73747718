"""Commit graph: immutable commits, branch pointers and HEAD."""

import hashlib
import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Mapping

from .content import ContentStore
from .errors import (
    BranchExists,
    CannotRemoveCurrent,
    EmptyMessage,
    NoChanges,
    NoOp,
    NoSuchBranch,
    NoSuchCommit,
    NotFound,
    NotFoundInCommit,
    NotTracked,
    WouldOverwriteUntracked,
)
from .staging import StagingIndex
from .worktree import MemoryTree, WorkTree

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"
INITIAL_MESSAGE = "initial commit"
DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def _commit_id(message: str, timestamp: float, snapshot: Mapping[str, str]) -> str:
    """Compute a content-addressable commit id.

    Hashes the message, the timestamp and the sorted snapshot entries.
    Parents are not part of the id; ``CommitGraph.commit`` keeps ids unique
    by stepping the timestamp on a collision.
    """
    h = hashlib.sha1()
    h.update(message.encode())
    h.update(b"\0")
    h.update(repr(float(timestamp)).encode())
    for name in sorted(snapshot):
        h.update(b"\0")
        h.update(name.encode())
        h.update(b"\0")
        h.update(snapshot[name].encode())
    return h.hexdigest()


def _format_date(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).astimezone().strftime(DATE_FORMAT)


@dataclass(frozen=True)
class CommitNode:
    """One immutable commit.

    Parents are referenced by id and resolved through ``GraphState.commits``.
    """

    id: str
    parent: str | None
    message: str
    timestamp: float
    snapshot: Mapping[str, str]
    merged_parent: str | None = None

    @classmethod
    def create(
        cls,
        parent: str | None,
        message: str,
        timestamp: float,
        snapshot: Mapping[str, str],
        *,
        merged_parent: str | None = None,
    ) -> "CommitNode":
        snapshot = dict(snapshot)
        return cls(
            id=_commit_id(message, timestamp, snapshot),
            parent=parent,
            message=message,
            timestamp=timestamp,
            snapshot=snapshot,
            merged_parent=merged_parent,
        )

    @property
    def parents(self) -> tuple[str, ...]:
        return tuple(p for p in (self.parent, self.merged_parent) if p is not None)


@dataclass
class GraphState:
    """Everything the commit graph owns, as one explicit value.

    ``commits`` is kept in creation order.
    """

    commits: dict[str, CommitNode] = field(default_factory=dict)
    branches: dict[str, str] = field(default_factory=dict)
    current: str = DEFAULT_BRANCH


@dataclass(frozen=True)
class LogEntry:
    """A rendered history line for one commit."""

    id: str
    date: str
    message: str
    parents: tuple[str, ...] = ()

    @classmethod
    def of(cls, node: CommitNode) -> "LogEntry":
        return cls(node.id, _format_date(node.timestamp), node.message, node.parents)

    def format(self) -> str:
        lines = ["===", f"commit {self.id}"]
        if len(self.parents) > 1:
            lines.append("Merge: " + " ".join(p[:7] for p in self.parents))
        lines.append(f"Date: {self.date}")
        lines.append(self.message)
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class Status:
    """Branches and staged changes, ready to print.

    ``modified`` and ``untracked`` are always empty: comparing the live
    working tree against the index and HEAD is not implemented.
    """

    branches: tuple[str, ...]
    current: str
    staged: tuple[str, ...]
    removed: tuple[str, ...]
    modified: tuple[str, ...] = ()
    untracked: tuple[str, ...] = ()

    def format(self) -> str:
        sections = [
            ("Branches", [("*" + b if b == self.current else b) for b in self.branches]),
            ("Staged Files", list(self.staged)),
            ("Removed Files", list(self.removed)),
            ("Modifications Not Staged For Commit", list(self.modified)),
            ("Untracked Files", list(self.untracked)),
        ]
        out = []
        for title, lines in sections:
            out.append(f"=== {title} ===")
            out.extend(lines)
            out.append("")
        return "\n".join(out) + "\n"


class CommitGraph:
    """Commit DAG over a content store and a working tree.

    Provides:
    - ``commit()`` to turn the staging index into a new commit
    - ``log()`` / ``global_log()`` / ``find()`` / ``status()`` for queries
    - ``checkout_file()`` / ``checkout_branch()`` / ``reset()`` to move
      the working tree and HEAD
    - ``add_branch()`` / ``remove_branch()`` for branch pointers
    """

    def __init__(
        self,
        state: GraphState | None = None,
        content: ContentStore | None = None,
        tree: WorkTree | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.state = state if state is not None else GraphState()
        self.content = content if content is not None else ContentStore()
        self.tree = tree if tree is not None else MemoryTree()
        self._clock = clock

    @property
    def current_branch(self) -> str:
        return self.state.current

    @property
    def head(self) -> CommitNode:
        return self.state.commits[self.state.branches[self.state.current]]

    @property
    def branches(self) -> dict[str, str]:
        return dict(self.state.branches)

    def get(self, commit_id: str) -> CommitNode:
        return self.state.commits[commit_id]

    def create_initial_commit(self) -> CommitNode:
        """Create the root commit and point the default branch at it."""
        if self.state.commits:
            raise ValueError("Commit graph already has a root commit")
        root = CommitNode.create(None, INITIAL_MESSAGE, 0.0, {})
        self.state.commits[root.id] = root
        self.state.branches[DEFAULT_BRANCH] = root.id
        self.state.current = DEFAULT_BRANCH
        logger.debug("created root commit %s", root.id)
        return root

    # -- Commits --

    def commit(
        self,
        staging: StagingIndex,
        message: str,
        *,
        merged_parent: str | None = None,
        allow_empty: bool = False,
    ) -> CommitNode:
        """Create a commit from the staged changes and advance HEAD.

        Args:
            staging: Pending changes; cleared on success.
            message: Commit message, must be non-empty.
            merged_parent: Second parent for merge commits.
            allow_empty: Commit even when nothing is staged (merge
                commits record the merge edge regardless).

        Raises:
            NoChanges: Nothing is staged and ``allow_empty`` is False.
            EmptyMessage: ``message`` is empty.
        """
        if staging.is_empty() and not allow_empty:
            raise NoChanges()
        if not message:
            raise EmptyMessage()

        parent = self.head
        snapshot = dict(parent.snapshot)
        for name, record in staging.additions.items():
            snapshot[name] = record.blob
        for name in staging.deletions:
            snapshot.pop(name, None)

        timestamp = self._clock()
        node = CommitNode.create(
            parent.id, message, timestamp, snapshot, merged_parent=merged_parent
        )
        # Ids leave out parents, so a repeated clock reading can reproduce an
        # existing id. Step the timestamp until the id is unused.
        while node.id in self.state.commits:
            timestamp = math.nextafter(timestamp, math.inf)
            node = CommitNode.create(
                parent.id, message, timestamp, snapshot, merged_parent=merged_parent
            )
        self.state.commits[node.id] = node
        self.state.branches[self.state.current] = node.id
        staging.clear()
        logger.info("committed %s on %s: %s", node.id[:7], self.state.current, message)
        return node

    def remove_file(self, name: str, staging: StagingIndex) -> None:
        """Stage ``name`` for deletion and delete it from the working tree."""
        if name not in self.head.snapshot:
            raise NotTracked()
        staging.stage_deletion(name)
        self.tree.delete(name)

    # -- History --

    def log(self) -> list[LogEntry]:
        """First-parent history from HEAD to the root, newest first."""
        entries = []
        current: str | None = self.head.id
        while current is not None:
            node = self.state.commits[current]
            entries.append(LogEntry.of(node))
            current = node.parent
        return entries

    def global_log(self) -> list[LogEntry]:
        """Every commit ever created, oldest first."""
        return [LogEntry.of(node) for node in self.state.commits.values()]

    def find(self, message: str) -> list[str]:
        """Ids of every commit whose message is exactly ``message``."""
        ids = [n.id for n in self.state.commits.values() if n.message == message]
        if not ids:
            raise NotFound()
        return ids

    def status(self, staging: StagingIndex) -> Status:
        return Status(
            branches=tuple(sorted(self.state.branches)),
            current=self.state.current,
            staged=tuple(sorted(staging.additions)),
            removed=tuple(sorted(staging.deletions)),
        )

    def ancestors(self, commit_id: str) -> set[str]:
        """All commits reachable from ``commit_id`` over both parent edges.

        Includes ``commit_id`` itself.
        """
        seen: set[str] = {commit_id}
        queue: deque[str] = deque([commit_id])
        while queue:
            node = self.state.commits[queue.popleft()]
            for p in node.parents:
                if p not in seen:
                    seen.add(p)
                    queue.append(p)
        return seen

    def resolve(self, commit_ref: str) -> CommitNode | None:
        """Find a commit by full id, else by the first id with that prefix."""
        if not commit_ref:
            return None
        node = self.state.commits.get(commit_ref)
        if node is not None:
            return node
        for commit_id, node in self.state.commits.items():
            if commit_id.startswith(commit_ref):
                return node
        return None

    # -- Working tree --

    def checkout_file(self, name: str, commit_ref: str | None = None) -> None:
        """Overwrite ``name`` in the working tree with a committed version.

        Uses HEAD unless ``commit_ref`` names another commit.
        """
        if commit_ref is None:
            node = self.head
        else:
            node = self.resolve(commit_ref)
            if node is None:
                raise NoSuchCommit()
        blob = node.snapshot.get(name)
        if blob is None:
            raise NotFoundInCommit()
        self.tree.write(name, self.content.get(blob))

    def checkout_branch(self, branch: str, staging: StagingIndex) -> None:
        """Switch the working tree, HEAD and current branch to ``branch``."""
        if branch not in self.state.branches:
            raise NoSuchBranch()
        if branch == self.state.current:
            raise NoOp()
        target = self.state.commits[self.state.branches[branch]]
        self.check_untracked(target.snapshot)

        self._rewrite_tree(target)
        staging.clear()
        self.state.current = branch
        logger.info("switched to branch %s at %s", branch, target.id[:7])

    def reset(self, commit_ref: str, staging: StagingIndex) -> CommitNode:
        """Move the current branch to ``commit_ref`` and check it out.

        History past the old HEAD stays in the graph.
        """
        target = self.resolve(commit_ref)
        if target is None:
            raise NoSuchCommit()
        self.check_untracked(target.snapshot)

        self._rewrite_tree(target)
        staging.clear()
        self.state.branches[self.state.current] = target.id
        logger.info("reset %s to %s", self.state.current, target.id[:7])
        return target

    def untracked_files(self) -> list[str]:
        """Working-tree files that HEAD does not track."""
        tracked = self.head.snapshot
        return [name for name in self.tree.list_files() if name not in tracked]

    def check_untracked(self, names: Iterable[str]) -> None:
        """Raise if an untracked working file would be overwritten by ``names``."""
        incoming = set(names)
        in_the_way = {n for n in self.untracked_files() if n in incoming}
        if in_the_way:
            raise WouldOverwriteUntracked(in_the_way)

    def _rewrite_tree(self, target: CommitNode) -> None:
        for name, blob in target.snapshot.items():
            self.tree.write(name, self.content.get(blob))
        for name in self.head.snapshot:
            if name not in target.snapshot:
                self.tree.delete(name)

    # -- Branches --

    def add_branch(self, name: str) -> None:
        if name in self.state.branches:
            raise BranchExists()
        self.state.branches[name] = self.head.id
        logger.debug("created branch %s at %s", name, self.head.id[:7])

    def remove_branch(self, name: str) -> None:
        if name not in self.state.branches:
            raise NoSuchBranch("A branch with that name does not exist.")
        if name == self.state.current:
            raise CannotRemoveCurrent()
        del self.state.branches[name]
        logger.debug("removed branch %s", name)
