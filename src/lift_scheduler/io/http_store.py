"""
REST DocumentStore over ``requests``.

Endpoints (relative to ``base_url``):

    POST   /collections/{collection}/documents          {"documentId": ..., "data": {...}}
    PATCH  /collections/{collection}/documents/{id}     {"data": {...}}
    GET    /collections/{collection}/documents?field=value&order=a,-b&limit=N
           → {"documents": [{"id": ..., ...}, ...]}

Status mapping happens once, in _raise_for_status():
    429         → RateLimited (Retry-After recorded as retry_after; the
                  writer keeps its own backoff schedule)
    other 4xx   → Rejected
    5xx         → Unavailable
    connection / timeout errors → Unavailable
"""

import json
import logging
from typing import Any

import requests

from .store import DocumentStore, RateLimited, Rejected, StoreError, Unavailable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason or ""
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


def _raise_for_status(response: requests.Response) -> None:
    status = response.status_code
    if status < 400:
        return
    message = f"{response.request.method if response.request else 'HTTP'} {response.url}: {status} {_error_message(response)}"
    if status == 429:
        raise RateLimited(
            message,
            status=status,
            retry_after=_parse_retry_after(response.headers.get("Retry-After")),
        )
    if status >= 500:
        raise Unavailable(message, status=status)
    raise Rejected(message, status=status)


class HttpDocumentStore(DocumentStore):
    """
    DocumentStore backed by a JSON REST API.

    Args:
        base_url: API root, e.g. "https://db.example.com/v1/databases/main"
        api_key: Sent as a Bearer token when given
        timeout: Per-request timeout in seconds
        session: Optional pre-configured ``requests.Session``
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _url(self, collection: str, document_id: str | None = None) -> str:
        url = f"{self.base_url}/collections/{collection}/documents"
        return f"{url}/{document_id}" if document_id else url

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise Unavailable(f"{method} {url}: {e}") from e
        _raise_for_status(response)
        return response

    def _json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(
                f"Invalid JSON from {response.url}: {e}", status=response.status_code
            ) from e

    def create_document(
        self,
        collection: str,
        payload: dict[str, Any],
        document_id: str | None = None,
    ) -> str:
        body: dict[str, Any] = {"data": payload}
        if document_id:
            body["documentId"] = document_id
        response = self._request("POST", self._url(collection), data=json.dumps(body))
        created = self._json(response)
        doc_id = created.get("id") if isinstance(created, dict) else None
        if not doc_id:
            raise Rejected(f"Store did not return an id for new '{collection}' document")
        logger.debug("Created %s/%s", collection, doc_id)
        return str(doc_id)

    def update_document(self, collection: str, document_id: str, payload: dict[str, Any]) -> None:
        self._request(
            "PATCH",
            self._url(collection, document_id),
            data=json.dumps({"data": payload}),
        )

    def list_documents(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order: list[str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {}
        for k, v in (filters or {}).items():
            # Booleans and nulls travel as JSON literals so the server can type them.
            params[k] = json.dumps(v) if isinstance(v, bool) or v is None else v
        if order:
            params["order"] = ",".join(order)
        if limit is not None:
            params["limit"] = limit
        response = self._request("GET", self._url(collection), params=params)
        body = self._json(response)
        documents = body.get("documents", []) if isinstance(body, dict) else []
        return [d for d in documents if isinstance(d, dict)]
