"""Repository factory function."""

import os
import time
from typing import Callable

from .errors import NotInitialized
from .repository import Repository
from .worktree import WorkTree

METADATA_DIR = ".kvlet"


def repository(
    storage: str = "memory",
    *,
    path: str | None = None,
    tree: WorkTree | None = None,
    create: bool = False,
    clock: Callable[[], float] | None = None,
    size_limit: int | None = None,
) -> Repository:
    """Open or create a Repository with sensible defaults.

    Args:
        storage: ``"memory"`` (default) or ``"disk"``.
        path: Required when ``storage="disk"``. The working directory;
            metadata lives in its ``.kvlet`` subdirectory.
        tree: Working tree (default: the files in ``path`` for disk
            storage, an empty in-memory tree otherwise).
        create: Initialize a new repository instead of opening one.
        clock: Timestamp source for new commits (default ``time.time``).
        size_limit: Disk backend size limit in bytes.

    Returns:
        A ``Repository``.

    Raises:
        NotInitialized: Opening a repository that was never created.
        AlreadyInitialized: Creating over an existing repository.
    """
    if storage == "memory":
        from .kv.memory import Memory
        from .worktree import MemoryTree

        backend = Memory()
        if tree is None:
            tree = MemoryTree()
    elif storage == "disk":
        if path is None:
            raise ValueError("path is required when storage='disk'")
        from .kv.disk import Disk
        from .worktree import DirectoryTree

        metadata = os.path.join(path, METADATA_DIR)
        if not create and not os.path.isdir(metadata):
            raise NotInitialized()
        if size_limit is not None:
            backend = Disk(metadata, size_limit=size_limit)
        else:
            backend = Disk(metadata)
        if tree is None:
            tree = DirectoryTree(path)
    else:
        raise ValueError(f"Unknown storage: {storage!r}")

    clock = clock or time.time
    try:
        if create:
            return Repository.init(backend, tree, clock=clock)
        return Repository.open(backend, tree, clock=clock)
    except Exception:
        backend.close()
        raise
