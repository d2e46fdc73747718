"""Repository: one working tree, its staging index and its commit graph."""

import logging
import time
from typing import Callable

from .content import ContentStore, blob_id
from .errors import AlreadyInitialized, NoSuchFile
from .graph import CommitGraph, CommitNode, GraphState, LogEntry, Status
from .kv.base import KVStore
from .merge import MergeEngine, MergeResult
from .persist import StateStore
from .staging import StagingIndex
from .worktree import WorkTree

logger = logging.getLogger(__name__)


class Repository:
    """Runs version-control commands against a KV store and a working tree.

    State is loaded whole by ``open()`` and written whole by ``save()``.
    Used as a context manager, it saves on a clean exit and discards the
    in-memory changes when an exception escapes::

        with Repository.open(store, tree) as repo:
            repo.add("a.txt")
            repo.commit("first")
    """

    def __init__(
        self,
        store: KVStore,
        tree: WorkTree,
        state: GraphState,
        staging: StagingIndex,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.tree = tree
        self.content = ContentStore(store)
        self.staging = staging
        self.graph = CommitGraph(state, self.content, tree, clock=clock)
        self.merger = MergeEngine(self.graph)
        self._state_store = StateStore(store)

    @classmethod
    def init(
        cls,
        store: KVStore,
        tree: WorkTree,
        *,
        clock: Callable[[], float] = time.time,
    ) -> "Repository":
        """Create a repository holding only the root commit and save it."""
        if StateStore(store).initialized():
            raise AlreadyInitialized()
        repo = cls(store, tree, GraphState(), StagingIndex(), clock=clock)
        repo.graph.create_initial_commit()
        repo.save()
        logger.info("initialized repository on branch %s", repo.graph.current_branch)
        return repo

    @classmethod
    def open(
        cls,
        store: KVStore,
        tree: WorkTree,
        *,
        clock: Callable[[], float] = time.time,
    ) -> "Repository":
        """Load a saved repository. Raises NotInitialized if there is none."""
        state, staging = StateStore(store).load()
        return cls(store, tree, state, staging, clock=clock)

    def save(self) -> None:
        self._state_store.save(self.graph.state, self.staging)

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "Repository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.save()
        finally:
            self.close()

    @property
    def head(self) -> CommitNode:
        return self.graph.head

    @property
    def current_branch(self) -> str:
        return self.graph.current_branch

    # -- Staging --

    def add(self, name: str) -> None:
        """Stage the working version of ``name`` for the next commit.

        A file staged for deletion is unstaged and restored from HEAD
        instead. A file identical to HEAD's version is unstaged.
        """
        if name in self.staging.deletions:
            self.staging.unstage_deletion(name)
            blob = self.head.snapshot.get(name)
            if blob is not None:
                self.tree.write(name, self.content.get(blob))
            return
        if not self.tree.exists(name):
            raise NoSuchFile()
        data = self.tree.read(name)
        if self.head.snapshot.get(name) == blob_id(name, data):
            self.staging.unstage_addition(name)
            return
        self.staging.stage_addition(name, data, self.content)
        logger.debug("staged %s", name)

    def rm(self, name: str) -> None:
        """Unstage ``name`` if staged, else stage its removal."""
        if not self.staging.unstage_addition(name):
            self.graph.remove_file(name, self.staging)

    # -- Commits and history --

    def commit(self, message: str) -> CommitNode:
        return self.graph.commit(self.staging, message)

    def log(self) -> list[LogEntry]:
        return self.graph.log()

    def global_log(self) -> list[LogEntry]:
        return self.graph.global_log()

    def find(self, message: str) -> list[str]:
        return self.graph.find(message)

    def status(self) -> Status:
        return self.graph.status(self.staging)

    # -- Checkout, branches, reset, merge --

    def checkout_file(self, name: str, commit_ref: str | None = None) -> None:
        self.graph.checkout_file(name, commit_ref)

    def checkout_branch(self, branch: str) -> None:
        self.graph.checkout_branch(branch, self.staging)

    def branch(self, name: str) -> None:
        self.graph.add_branch(name)

    def rm_branch(self, name: str) -> None:
        self.graph.remove_branch(name)

    def reset(self, commit_ref: str) -> CommitNode:
        return self.graph.reset(commit_ref, self.staging)

    def merge(self, branch: str) -> MergeResult:
        return self.merger.merge(branch, self.staging)
