"""Content-addressed blob storage over a KV store."""

import hashlib
import logging

from .errors import NotFound
from .kv.base import KVStore
from .kv.memory import Memory

logger = logging.getLogger(__name__)

BLOB_KEY = "__blob__%s"


def blob_id(name: str, data: bytes) -> str:
    """Compute the content address of a file version.

    The logical file name is part of the hash, so identical bytes stored
    under two names yield two blobs.
    """
    h = hashlib.sha1()
    h.update(name.encode())
    h.update(data)
    return h.hexdigest()


class ContentStore:
    """Append-only blob store.

    Blobs are written once under their hash and never removed.
    """

    def __init__(self, store: KVStore | None = None) -> None:
        if store is None:
            store = Memory()
        self.store = store

    def put(self, name: str, data: bytes) -> str:
        """Store ``data`` for file ``name`` and return its hash."""
        blob = blob_id(name, data)
        key = BLOB_KEY % blob
        if key not in self.store:
            self.store.set(key, data)
            logger.debug("stored blob %s for %s (%d bytes)", blob, name, len(data))
        return blob

    def get(self, blob: str) -> bytes:
        data = self.store.get(BLOB_KEY % blob)
        if data is None:
            raise NotFound(f"No blob with hash {blob}.")
        return data

    def __contains__(self, blob: str) -> bool:
        return BLOB_KEY % blob in self.store
