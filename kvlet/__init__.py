"""kvlet: a local version-control engine over a KV store."""

from .content import ContentStore
from .errors import (
    AlreadyInitialized,
    BranchExists,
    CannotRemoveCurrent,
    EmptyMessage,
    IncorrectOperands,
    InvalidFileName,
    NoChanges,
    NoOp,
    NoSuchBranch,
    NoSuchCommit,
    NoSuchFile,
    NotFound,
    NotFoundInCommit,
    NotInitialized,
    NotTracked,
    SelfMerge,
    UncommittedChanges,
    VCSError,
    WouldOverwriteUntracked,
)
from .graph import CommitGraph, CommitNode, GraphState, LogEntry, Status
from .kv.base import KVStore
from .merge import MergeEngine, MergeResult
from .persist import StateStore
from .repository import Repository
from .staging import FileRecord, StagingIndex
from .store import repository
from .worktree import DirectoryTree, MemoryTree, WorkTree

__all__ = [
    "AlreadyInitialized",
    "BranchExists",
    "CannotRemoveCurrent",
    "CommitGraph",
    "CommitNode",
    "ContentStore",
    "DirectoryTree",
    "EmptyMessage",
    "FileRecord",
    "GraphState",
    "IncorrectOperands",
    "InvalidFileName",
    "KVStore",
    "LogEntry",
    "MemoryTree",
    "MergeEngine",
    "MergeResult",
    "NoChanges",
    "NoOp",
    "NoSuchBranch",
    "NoSuchCommit",
    "NoSuchFile",
    "NotFound",
    "NotFoundInCommit",
    "NotInitialized",
    "NotTracked",
    "Repository",
    "SelfMerge",
    "StagingIndex",
    "StateStore",
    "Status",
    "UncommittedChanges",
    "VCSError",
    "WorkTree",
    "WouldOverwriteUntracked",
    "repository",
]
