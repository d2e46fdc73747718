"""Three-way branch merge over the commit graph.

Each file name present in either branch head is reconciled by comparing
its blob at the split point (S), the other branch (O) and HEAD (H):

    S  O  H     action
    x  -  x     delete (stage deletion, remove from tree)
    x  -  y     conflict
    x  x  -     keep deleted
    -  y  -     take other
    -  y  y     nothing
    -  y  z     conflict
    x  y  x     take other
    x  x  z     keep head (z may be absent)
    x  y  y     nothing
    x  y  z     conflict (z may be absent)

Conflicted files are written with both versions between markers and
staged as additions.
"""

import logging
from dataclasses import dataclass

from .errors import NoSuchBranch, SelfMerge, UncommittedChanges
from .graph import CommitGraph, CommitNode
from .staging import StagingIndex

logger = logging.getLogger(__name__)

MERGE_MESSAGE = "Merged %s into %s."
HEAD_MARKER = b"<<<<<<< HEAD\n"
SEPARATOR = b"=======\n"
END_MARKER = b">>>>>>>\n"


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge operation."""

    strategy: str  # "ancestor", "fast_forward", "three_way"
    commit: str | None
    conflicted_files: tuple[str, ...] = ()

    @property
    def conflicted(self) -> bool:
        return bool(self.conflicted_files)

    @property
    def message(self) -> str | None:
        """The one-line notice to show the user, if any."""
        if self.strategy == "ancestor":
            return "Given branch is an ancestor of the current branch."
        if self.strategy == "fast_forward":
            return "Current branch fast-forwarded."
        if self.conflicted:
            return "Encountered a merge conflict."
        return None


def conflict_content(head: bytes | None, other: bytes | None) -> bytes:
    """Both sides of a conflicted file between conflict markers."""
    return HEAD_MARKER + (head or b"") + SEPARATOR + (other or b"") + END_MARKER


class MergeEngine:
    """Merges another branch into the current branch of a ``CommitGraph``.

    Holds no state of its own.
    """

    def __init__(self, graph: CommitGraph) -> None:
        self.graph = graph

    def split_point(self, commit_a: str, commit_b: str) -> CommitNode:
        """Pick the merge base of two commits.

        Intersects the ancestor closures of both commits and returns the
        common ancestor with the latest timestamp. This approximates the
        lowest common ancestor and can pick a non-lowest one in criss-cross
        histories. Equal timestamps are broken by the larger commit id.
        """
        common = self.graph.ancestors(commit_a) & self.graph.ancestors(commit_b)
        return max(
            (self.graph.get(c) for c in common),
            key=lambda node: (node.timestamp, node.id),
        )

    def merge(self, branch: str, staging: StagingIndex) -> MergeResult:
        """Merge ``branch`` into the current branch.

        Returns:
            A MergeResult. ``conflicted`` tells whether any file conflicted;
            the merge commit is created either way.

        Raises:
            UncommittedChanges: The staging index is not empty.
            NoSuchBranch: ``branch`` does not exist.
            SelfMerge: ``branch`` is the current branch.
            WouldOverwriteUntracked: An untracked working file is in the
                other branch's snapshot.
        """
        graph = self.graph
        if not staging.is_empty():
            raise UncommittedChanges()
        if branch not in graph.branches:
            raise NoSuchBranch("A branch with that name does not exist.")
        if branch == graph.current_branch:
            raise SelfMerge()
        other = graph.get(graph.branches[branch])
        graph.check_untracked(other.snapshot)

        head = graph.head
        split = self.split_point(head.id, other.id)
        if split.id == other.id:
            logger.info("%s is already merged into %s", branch, graph.current_branch)
            return MergeResult("ancestor", None)
        if split.id == head.id:
            graph.checkout_branch(branch, staging)
            logger.info("fast-forwarded to %s at %s", branch, other.id[:7])
            return MergeResult("fast_forward", other.id)

        current = graph.current_branch
        conflicts = self._reconcile(split, other, head, staging)
        node = graph.commit(
            staging,
            MERGE_MESSAGE % (branch, current),
            merged_parent=other.id,
            allow_empty=True,
        )
        if conflicts:
            logger.info("merge of %s into %s conflicted: %s",
                        branch, current, ", ".join(conflicts))
        return MergeResult("three_way", node.id, tuple(conflicts))

    def _reconcile(
        self,
        split: CommitNode,
        other: CommitNode,
        head: CommitNode,
        staging: StagingIndex,
    ) -> list[str]:
        """Apply the per-file merge policy; return the conflicted names."""
        conflicts = []
        for name in sorted(set(head.snapshot) | set(other.snapshot)):
            if self._merge_file(
                name,
                split.snapshot.get(name),
                other.snapshot.get(name),
                head.snapshot.get(name),
                staging,
            ):
                conflicts.append(name)
        return conflicts

    def _merge_file(
        self,
        name: str,
        split: str | None,
        other: str | None,
        head: str | None,
        staging: StagingIndex,
    ) -> bool:
        if other is None:
            if split is None or head is None:
                return False
            if head == split:
                self.graph.remove_file(name, staging)
                return False
            self._conflict(name, head, other, staging)
            return True

        if split is None:
            if head is None:
                self._take_other(name, other, staging)
                return False
            if head == other:
                return False
            self._conflict(name, head, other, staging)
            return True

        if other == split or head == other:
            return False
        if head == split:
            self._take_other(name, other, staging)
            return False
        self._conflict(name, head, other, staging)
        return True

    def _take_other(self, name: str, blob: str, staging: StagingIndex) -> None:
        content = self.graph.content
        data = content.get(blob)
        staging.stage_addition(name, data, content)
        self.graph.tree.write(name, data)

    def _conflict(
        self,
        name: str,
        head: str | None,
        other: str | None,
        staging: StagingIndex,
    ) -> None:
        content = self.graph.content
        data = conflict_content(
            content.get(head) if head is not None else None,
            content.get(other) if other is not None else None,
        )
        self.graph.tree.write(name, data)
        staging.stage_addition(name, data, content)
