"""
Document store interface and error taxonomy.

Every adapter (in-memory, JSONL files, HTTP) implements DocumentStore and
translates its own failure signals into exactly one StoreError subclass.
Callers branch on ``StoreError.kind``; nothing above the adapter inspects
error messages.
"""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..core.models import CompositeKey

if TYPE_CHECKING:
    from ..core.engine.config_loader import StoreSettings

# HTTP-style status used by adapters for "document id already exists".
STATUS_CONFLICT = 409


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"


class StoreError(Exception):
    """Base class for failures reported by a DocumentStore."""

    kind: ErrorKind = ErrorKind.REJECTED

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.retry_after = retry_after
        self.attempts = 1

    @property
    def retryable(self) -> bool:
        return self.kind == ErrorKind.RATE_LIMITED


class RateLimited(StoreError):
    """The store refused the request because of its request-rate quota."""

    kind = ErrorKind.RATE_LIMITED


class Rejected(StoreError):
    """Application-level refusal: malformed payload, constraint violation, id conflict."""

    kind = ErrorKind.REJECTED

    @property
    def is_conflict(self) -> bool:
        return self.status == STATUS_CONFLICT


class Unavailable(StoreError):
    """Transport failure; the store may or may not have applied the request."""

    kind = ErrorKind.UNAVAILABLE


def encode_key(key: CompositeKey) -> str:
    """
    Deterministic document id for a composite key.

    The fields and values are serialised as a JSON array before hashing, so
    values containing separators cannot collide.  The result is 36
    characters, starting with a letter.
    """
    raw = json.dumps([list(key.fields), list(key.values)], default=str, separators=(",", ":"))
    return "k" + hashlib.sha256(raw.encode("utf-8")).hexdigest()[:35]


class DocumentStore(ABC):
    """
    Minimal document database interface.

    Documents are flat JSON-compatible dicts.  Documents returned by
    ``list_documents`` carry their identifier under ``"id"``.
    """

    @abstractmethod
    def create_document(
        self,
        collection: str,
        payload: dict[str, Any],
        document_id: str | None = None,
    ) -> str:
        """
        Create a document and return its id.

        Args:
            collection: Target collection name
            payload: Document fields
            document_id: Explicit id, or None for a store-generated one

        Raises:
            Rejected: With status 409 if ``document_id`` already exists
            RateLimited, Unavailable: As reported by the backend
        """

    @abstractmethod
    def update_document(self, collection: str, document_id: str, payload: dict[str, Any]) -> None:
        """Merge ``payload`` into an existing document."""

    @abstractmethod
    def list_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order: list[str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Return documents whose fields equal every value in ``filters``.

        ``order`` lists field names; prefix a name with "-" for descending.
        """


def open_store(settings: StoreSettings) -> DocumentStore:
    """Build the adapter named by ``settings.backend``."""
    if settings.backend == "memory":
        from .memory_store import MemoryDocumentStore

        return MemoryDocumentStore()
    if settings.backend == "json":
        from .json_store import JsonDocumentStore

        return JsonDocumentStore(settings.data_dir)
    if settings.backend == "http":
        from .http_store import HttpDocumentStore

        if not settings.endpoint:
            raise ValueError("store.endpoint must be set for the http backend")
        return HttpDocumentStore(
            settings.endpoint,
            api_key=settings.api_key,
            timeout=settings.timeout_seconds,
        )
    raise ValueError(f"Unknown store backend '{settings.backend}'. Valid: memory, json, http")
