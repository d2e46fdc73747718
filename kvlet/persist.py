"""Persistence of the commit graph and staging index in a KV store."""

import logging
import pickle

from .errors import NotInitialized
from .graph import GraphState
from .kv.base import KVStore
from .staging import StagingIndex

logger = logging.getLogger(__name__)

COMMIT_KEY = "__commit__%s"
BRANCH_HEAD = "__branch_head__%s"
CURRENT_BRANCH = "__current_branch__"
STAGING_KEY = "__staging__"


def _prefixed(store: KVStore, template: str) -> dict[str, str]:
    """Map suffix -> full key for every key matching ``template``."""
    prefix = template.replace("%s", "")
    return {
        key[len(prefix):]: key
        for key in list(store.keys())
        if isinstance(key, str) and key.startswith(prefix) and key != prefix
    }


class StateStore:
    """Loads and saves repository state as a whole.

    Commits are written once under their id and never rewritten. Branch
    pointers, the current branch and the staging index are rewritten on
    every save.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    def initialized(self) -> bool:
        return CURRENT_BRANCH in self.store

    def load(self) -> tuple[GraphState, StagingIndex]:
        """Read the full graph state and staging index.

        Raises:
            NotInitialized: Nothing has been saved to this store yet.
        """
        current_bytes = self.store.get(CURRENT_BRANCH)
        if current_bytes is None:
            raise NotInitialized()

        commit_keys = _prefixed(self.store, COMMIT_KEY)
        raw_commits = self.store.get_many(*commit_keys.values())
        nodes = sorted(
            (pickle.loads(raw) for raw in raw_commits.values()),
            key=lambda node: node.timestamp,
        )

        branch_keys = _prefixed(self.store, BRANCH_HEAD)
        raw_branches = self.store.get_many(*branch_keys.values())
        branches = {
            name: pickle.loads(raw_branches[key])
            for name, key in sorted(branch_keys.items())
            if key in raw_branches
        }

        staging_bytes = self.store.get(STAGING_KEY)
        staging = pickle.loads(staging_bytes) if staging_bytes else StagingIndex()

        state = GraphState(
            commits={node.id: node for node in nodes},
            branches=branches,
            current=pickle.loads(current_bytes),
        )
        logger.debug("loaded %d commits, %d branches", len(nodes), len(branches))
        return state, staging

    def save(self, state: GraphState, staging: StagingIndex) -> None:
        """Write ``state`` and ``staging``, replacing what was saved before."""
        diffs: dict[str, bytes] = {}
        for commit_id, node in state.commits.items():
            key = COMMIT_KEY % commit_id
            if key not in self.store:
                diffs[key] = pickle.dumps(node)

        for name, commit_id in state.branches.items():
            diffs[BRANCH_HEAD % name] = pickle.dumps(commit_id)
        stale = [
            key
            for name, key in _prefixed(self.store, BRANCH_HEAD).items()
            if name not in state.branches
        ]

        diffs[CURRENT_BRANCH] = pickle.dumps(state.current)
        diffs[STAGING_KEY] = pickle.dumps(staging)

        self.store.set_many(**diffs)
        if stale:
            self.store.remove_many(*stale)
        logger.debug("saved state (%d keys written, %d removed)", len(diffs), len(stale))
