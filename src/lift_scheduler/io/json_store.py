"""
JSONL-file DocumentStore.

Each collection is kept in ``<data_dir>/<collection>.jsonl``, one document
per line.  The whole collection is loaded on first access and rewritten
after every change, which is fine for the few hundred records a program
produces.
"""

import json
from pathlib import Path
from typing import Any

from .memory_store import MemoryDocumentStore
from .serializers import ValidationError


class JsonDocumentStore(MemoryDocumentStore):
    """
    Manages documents stored in JSONL format.

    Args:
        data_dir: Directory holding one ``.jsonl`` file per collection
    """

    def __init__(self, data_dir: str | Path):
        super().__init__()
        self.data_dir = Path(data_dir).expanduser()
        self._loaded: set[str] = set()

    def collection_path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.jsonl"

    def create_document(
        self,
        collection: str,
        payload: dict[str, Any],
        document_id: str | None = None,
    ) -> str:
        with self._lock:
            self._ensure_loaded(collection)
            return super().create_document(collection, payload, document_id)

    def update_document(self, collection: str, document_id: str, payload: dict[str, Any]) -> None:
        with self._lock:
            self._ensure_loaded(collection)
            super().update_document(collection, document_id, payload)

    def list_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order: list[str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        with self._lock:
            self._ensure_loaded(collection)
            return super().list_documents(collection, filters, order, limit)

    def _ensure_loaded(self, collection: str) -> None:
        if collection in self._loaded:
            return
        docs: dict[str, dict[str, Any]] = {}
        path = self.collection_path(collection)
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        doc = json.loads(line)
                    except json.JSONDecodeError as e:
                        raise ValidationError(
                            f"Error parsing line {line_num} in {path}: {e}"
                        ) from e
                    if not isinstance(doc, dict) or "id" not in doc:
                        raise ValidationError(f"Line {line_num} in {path} has no document id")
                    docs[doc["id"]] = doc
        self._collections[collection] = docs
        self._loaded.add(collection)

    def _on_change(self, collection: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.collection_path(collection)
        tmp = path.with_suffix(".jsonl.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            for doc in self._collections.get(collection, {}).values():
                f.write(json.dumps(doc, ensure_ascii=False) + "\n")
        tmp.replace(path)
