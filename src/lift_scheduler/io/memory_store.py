"""
In-process DocumentStore.

Used for dry runs and as the base of the JSONL file store.  All operations
take a single lock, so the store can be shared by bulk-writer workers.
"""

import copy
import threading
import uuid
from typing import Any

from .store import STATUS_CONFLICT, DocumentStore, Rejected


def _sort_key(field_name: str):
    # None sorts first; mixed types fall back to their string form.
    def key(doc: dict[str, Any]) -> tuple:
        value = doc.get(field_name)
        if value is None:
            return (0, "")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return (1, value)
        return (2, str(value))

    return key


def apply_query(
    documents: list[dict[str, Any]],
    filters: dict[str, Any] | None = None,
    order: list[str] | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Filter by equality, sort by ``order``, and truncate to ``limit``."""
    result = [
        d for d in documents
        if not filters or all(d.get(k) == v for k, v in filters.items())
    ]
    # Stable sorts applied from the least significant field up.
    for spec in reversed(order or []):
        descending = spec.startswith("-")
        field_name = spec.lstrip("-")
        result.sort(key=_sort_key(field_name), reverse=descending)
    if limit is not None:
        result = result[: max(0, limit)]
    return result


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store keyed by collection, then document id."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.RLock()

    def create_document(
        self,
        collection: str,
        payload: dict[str, Any],
        document_id: str | None = None,
    ) -> str:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            doc_id = document_id or uuid.uuid4().hex
            if doc_id in docs:
                raise Rejected(
                    f"Document '{doc_id}' already exists in '{collection}'",
                    status=STATUS_CONFLICT,
                )
            doc = copy.deepcopy(payload)
            doc["id"] = doc_id
            docs[doc_id] = doc
            self._on_change(collection)
            return doc_id

    def update_document(self, collection: str, document_id: str, payload: dict[str, Any]) -> None:
        with self._lock:
            docs = self._collections.get(collection, {})
            if document_id not in docs:
                raise Rejected(
                    f"Document '{document_id}' not found in '{collection}'",
                    status=404,
                )
            docs[document_id].update(copy.deepcopy(payload))
            docs[document_id]["id"] = document_id
            self._on_change(collection)

    def list_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order: list[str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        with self._lock:
            docs = list(self._collections.get(collection, {}).values())
            return copy.deepcopy(apply_query(docs, filters, order, limit))

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._collections.get(collection, {}))

    def _on_change(self, collection: str) -> None:
        """Hook for subclasses that persist; called with the lock held."""
