"""
Local Filesystem Document Store.
Each document is a JSON file at {base_dir}/{collection_path}/{key}.json.
"""

import asyncio
import json
import logging
import os
import uuid
import aiofiles
from pathlib import Path
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, List, Dict, Any, Set
from datetime import datetime, timezone

from ..core.errors import PersistenceError
from .interface import DocumentStore, DocumentSnapshot, SERVER_TIMESTAMP
from .subscription import CollectionSubscription

logger = logging.getLogger(__name__)


def _merge(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge incoming into existing; nested maps are merged, other values replaced."""
    merged = dict(existing)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class LocalDocumentStore(DocumentStore):
    """
    Local filesystem document store.
    Writes go to a temporary file and are moved into place, so a reader never
    sees a half-written document. Writes to the same document are serialized.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize the store with a base directory.

        Args:
            base_dir: Base directory for all stored documents
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._subscriptions: Dict[str, Set[CollectionSubscription]] = {}

    # ----- paths -----

    def _collection_dir(self, collection_path: str) -> Path:
        """Convert a collection path to a directory within the base directory."""
        segments = [s for s in collection_path.strip("/").split("/")]
        if not segments or any(not s for s in segments) or len(segments) % 2 == 0:
            raise PersistenceError(f"Invalid collection path: {collection_path}", path=collection_path)

        full_path = (self.base_dir / "/".join(segments)).resolve()

        # Security check: ensure path is within base_dir
        if not full_path.is_relative_to(self.base_dir):
            raise PersistenceError(
                f"Invalid path: {collection_path} - path traversal detected", path=collection_path
            )
        return full_path

    def _document_path(self, collection_path: str, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise PersistenceError(f"Invalid document key: {key!r}", path=collection_path)
        return self._collection_dir(collection_path) / f"{key}.json"

    @asynccontextmanager
    async def _locked(self, path: Path) -> AsyncIterator[None]:
        """Hold the document's write lock; the lock is dropped once no writer needs it."""
        key = str(path)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    # ----- raw io -----

    async def _read(self, full_path: Path) -> Optional[Dict[str, Any]]:
        if not full_path.exists():
            return None
        try:
            async with aiofiles.open(full_path, 'r', encoding='utf-8') as f:
                return json.loads(await f.read())
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading document {full_path}: {e}", exc_info=True)
            raise PersistenceError(f"Could not read document: {e}", path=str(full_path)) from e

    async def _write(self, full_path: Path, data: Dict[str, Any]) -> None:
        tmp_path = full_path.with_suffix(".json.tmp")
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(data, indent=2, ensure_ascii=False))
            os.replace(tmp_path, full_path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing document {full_path}: {e}", exc_info=True)
            raise PersistenceError(f"Could not write document: {e}", path=str(full_path)) from e

    def _resolve_sentinels(self, value: Any) -> Any:
        """Replace SERVER_TIMESTAMP markers with the current UTC time."""
        if value is SERVER_TIMESTAMP:
            return datetime.now(timezone.utc).isoformat()
        if isinstance(value, dict):
            return {k: self._resolve_sentinels(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._resolve_sentinels(v) for v in value]
        return value

    # ----- DocumentStore -----

    async def get_document(self, collection_path: str, key: str) -> Optional[Dict[str, Any]]:
        """Read a document."""
        return await self._read(self._document_path(collection_path, key))

    async def set_document(
        self,
        collection_path: str,
        key: str,
        value: Dict[str, Any],
        merge: bool = False
    ) -> None:
        """Write a document, optionally merging into the existing one."""
        full_path = self._document_path(collection_path, key)
        data = self._resolve_sentinels(value)
        async with self._locked(full_path):
            if merge:
                existing = await self._read(full_path)
                if existing:
                    data = _merge(existing, data)
            await self._write(full_path, data)
        self._notify(collection_path)

    async def update_document(
        self,
        collection_path: str,
        key: str,
        partial_value: Dict[str, Any]
    ) -> None:
        """Update top-level fields of an existing document."""
        full_path = self._document_path(collection_path, key)
        async with self._locked(full_path):
            existing = await self._read(full_path)
            if existing is None:
                raise PersistenceError(
                    f"No document to update: {collection_path}/{key}",
                    path=f"{collection_path}/{key}"
                )
            existing.update(self._resolve_sentinels(partial_value))
            await self._write(full_path, existing)
        self._notify(collection_path)

    async def add_document(self, collection_path: str, value: Dict[str, Any]) -> str:
        """Create a document under a generated key."""
        key = uuid.uuid4().hex[:20]
        await self.set_document(collection_path, key, value)
        return key

    async def list_documents(
        self,
        collection_path: str,
        order_by: Optional[str] = None
    ) -> List[DocumentSnapshot]:
        """List documents; with order_by, documents lacking the field are left out."""
        directory = self._collection_dir(collection_path)
        if not directory.exists():
            return []

        snapshots = []
        for file_path in sorted(directory.glob("*.json")):
            data = await self._read(file_path)
            if data is None:
                continue
            if order_by and data.get(order_by) is None:
                continue
            snapshots.append(DocumentSnapshot(
                id=file_path.stem,
                path=f"{collection_path.strip('/')}/{file_path.stem}",
                data=data,
            ))

        if order_by:
            snapshots.sort(key=lambda s: (s.data[order_by], s.id))
        return snapshots

    def subscribe(
        self,
        collection_path: str,
        order_by: Optional[str] = None
    ) -> CollectionSubscription:
        """Watch a collection; see CollectionSubscription."""
        key = str(self._collection_dir(collection_path))
        subscription = CollectionSubscription(
            collection_path,
            fetch=lambda: self.list_documents(collection_path, order_by),
            on_close=lambda sub: self._subscriptions.get(key, set()).discard(sub),
        )
        self._subscriptions.setdefault(key, set()).add(subscription)
        logger.debug(f"Subscribed to {collection_path}")
        return subscription

    def _notify(self, collection_path: str) -> None:
        key = str(self._collection_dir(collection_path))
        for subscription in list(self._subscriptions.get(key, ())):
            subscription.notify()


# Global document store instance
_document_store: Optional[DocumentStore] = None


def init_document_store(store: Optional[DocumentStore] = None, base_dir: str = "./data") -> DocumentStore:
    """
    Initialize the global document store instance.

    Args:
        store: Optional DocumentStore implementation. If None, creates LocalDocumentStore.
        base_dir: Base directory used when creating a LocalDocumentStore
    """
    global _document_store
    if store is None:
        store = LocalDocumentStore(base_dir)
    _document_store = store
    return store


def get_document_store() -> DocumentStore:
    """
    Get the global document store instance.

    Raises:
        RuntimeError: If the store has not been initialized
    """
    if _document_store is None:
        raise RuntimeError("Document store not initialized. Call init_document_store() first.")
    return _document_store
