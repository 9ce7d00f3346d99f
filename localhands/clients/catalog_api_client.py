"""Async HTTP client for the remote catalog REST API."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import httpx

from localhands.clients.wire import (
    favorite_from_wire,
    favorite_to_wire,
    product_from_wire,
    product_to_wire,
    seller_from_wire,
    seller_patch_to_wire,
    seller_to_wire,
    user_from_wire,
    user_to_wire,
)
from localhands.errors import (
    CatalogSyncError,
    IdentifierCollision,
    InvalidPayload,
    NotFoundRemotely,
    RemoteRejected,
    RemoteUnavailable,
)
from localhands.models import RemoteResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resource:
    """A REST collection and the codec for its entities."""
    path: str  # Collection path, e.g. "products"
    encode: Callable[[Any], dict]
    decode: Callable[[Any], Any]
    encode_partial: Optional[Callable[[Any], dict]] = None


Resource.PRODUCTS = Resource("products", product_to_wire, product_from_wire)
Resource.SELLERS = Resource("sellers", seller_to_wire, seller_from_wire, seller_patch_to_wire)
Resource.USERS = Resource("users", user_to_wire, user_from_wire)
Resource.FAVORITES = Resource("favorites", favorite_to_wire, favorite_from_wire)


class CatalogApiClient:
    """Async client for the remote catalog with connection management.

    Every call returns a RemoteResult. Network failures, non-2xx answers and
    undecodable bodies are reported inside the result and never raised, so
    callers can decide whether to fall back to a local-only write.
    Supports async context manager pattern for proper resource cleanup.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the catalog client.

        Args:
            base_url: Root URL of the catalog API
            timeout_seconds: Timeout applied to every request
            token: Optional bearer token sent with every request
            transport: Optional httpx transport (used by tests)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._token = token
        self._transport = transport

        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        """Open the underlying HTTP connection pool."""
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout_seconds,
            headers=headers,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the HTTP connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CatalogApiClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Async context manager exit with cleanup."""
        await self.close()
        return False

    async def list_items(self, resource: Resource, **filters) -> RemoteResult[List[Any]]:
        """List every entity of a collection.

        Args:
            resource: Collection to list
            **filters: Field filters sent as query parameters (e.g. email="a@b.c")

        Returns:
            RemoteResult with the decoded entities. Records that cannot be
            decoded are skipped with a warning.
        """
        params = {key: value for key, value in filters.items() if value is not None}
        try:
            response = await self._send("GET", f"/{resource.path}", resource, params=params or None)
            body = self._json(response)
        except CatalogSyncError as e:
            return self._failed(f"list {resource.path}", e)

        if not isinstance(body, list):
            return self._failed(
                f"list {resource.path}",
                InvalidPayload(f"Expected a JSON array for {resource.path}", body),
            )

        items = []
        for record in body:
            try:
                items.append(resource.decode(record))
            except InvalidPayload as e:
                logger.warning(f"Skipping malformed {resource.path} record: {e}")

        return RemoteResult(value=items, status_code=response.status_code)

    async def get_item(self, resource: Resource, entity_id: int) -> RemoteResult[Any]:
        """Fetch one entity by id. A 404 is reported as NotFoundRemotely."""
        try:
            response = await self._send("GET", f"/{resource.path}/{entity_id}", resource, entity_id)
            entity = resource.decode(self._json(response))
        except CatalogSyncError as e:
            return self._failed(f"get {resource.path}/{entity_id}", e)

        return RemoteResult(value=entity, status_code=response.status_code)

    async def create_item(
        self,
        resource: Resource,
        entity: Any,
        entity_id: Optional[int] = None,
    ) -> RemoteResult[Any]:
        """Create an entity, honoring a caller-supplied id when given.

        Args:
            resource: Target collection
            entity: Entity to create
            entity_id: Id to assign remotely. Overrides the entity's own id.

        Returns:
            RemoteResult with the entity as stored remotely. A 409 is
            reported as IdentifierCollision.
        """
        payload = resource.encode(entity)
        if entity_id is not None:
            payload["id"] = entity_id

        try:
            response = await self._send("POST", f"/{resource.path}", resource, json=payload)
            created = resource.decode(self._json(response))
        except RemoteRejected as e:
            error = e
            if e.status_code == 409:
                error = IdentifierCollision(
                    f"{resource.path} id {payload.get('id')} is already taken", 409, e.body
                )
            return self._failed(f"create {resource.path}", error)
        except CatalogSyncError as e:
            return self._failed(f"create {resource.path}", e)

        return RemoteResult(value=created, status_code=response.status_code)

    async def update_item(self, resource: Resource, entity_id: int, entity: Any) -> RemoteResult[Any]:
        """Replace an entity with a full PUT."""
        payload = resource.encode(entity)
        try:
            response = await self._send(
                "PUT", f"/{resource.path}/{entity_id}", resource, entity_id, json=payload
            )
            updated = resource.decode(self._json(response))
        except CatalogSyncError as e:
            return self._failed(f"update {resource.path}/{entity_id}", e)

        return RemoteResult(value=updated, status_code=response.status_code)

    async def patch_item(self, resource: Resource, entity_id: int, partial: Any) -> RemoteResult[Optional[Any]]:
        """Send a partial update. The value is None when the server returns no body."""
        return await self._send_partial("PATCH", resource, entity_id, partial)

    async def put_item(self, resource: Resource, entity_id: int, partial: Any) -> RemoteResult[Optional[Any]]:
        """Send the partial payload with PUT semantics."""
        return await self._send_partial("PUT", resource, entity_id, partial)

    async def delete_item(self, resource: Resource, entity_id: int) -> RemoteResult[None]:
        """Delete an entity. The result carries the response status code."""
        try:
            response = await self._send("DELETE", f"/{resource.path}/{entity_id}", resource, entity_id)
        except CatalogSyncError as e:
            return self._failed(f"delete {resource.path}/{entity_id}", e)

        return RemoteResult(value=None, status_code=response.status_code)

    async def _send_partial(
        self,
        method: str,
        resource: Resource,
        entity_id: int,
        partial: Any,
    ) -> RemoteResult[Optional[Any]]:
        if isinstance(partial, dict):
            payload = partial
        elif resource.encode_partial is not None:
            payload = resource.encode_partial(partial)
        else:
            payload = resource.encode(partial)

        try:
            response = await self._send(
                method, f"/{resource.path}/{entity_id}", resource, entity_id, json=payload
            )
            body = self._json(response)
        except CatalogSyncError as e:
            return self._failed(f"{method} {resource.path}/{entity_id}", e)

        # The status code decides success; an echo that doesn't decode is dropped
        entity = None
        if body:
            try:
                entity = resource.decode(body)
            except InvalidPayload as e:
                logger.warning(f"Ignoring undecodable {method} response for {resource.path}/{entity_id}: {e}")

        return RemoteResult(value=entity, status_code=response.status_code)

    async def _send(
        self,
        method: str,
        url: str,
        resource: Resource,
        entity_id: Optional[int] = None,
        **kwargs,
    ) -> httpx.Response:
        """Send a request and raise a CatalogSyncError for any failed outcome.

        Raises:
            RuntimeError: If client is not connected.
            RemoteUnavailable: On network errors and timeouts.
            NotFoundRemotely: On 404 for a single-entity URL.
            RemoteRejected: On any other non-2xx status.
        """
        if self._client is None:
            raise RuntimeError("Catalog API client not connected. Call connect() first.")

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise RemoteUnavailable(f"{method} {url} failed: {e}") from e

        if response.status_code == 404 and entity_id is not None:
            raise NotFoundRemotely(resource.path, entity_id, response.text)
        if not response.is_success:
            raise RemoteRejected(
                f"{method} {url} returned {response.status_code}",
                response.status_code,
                response.text,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise InvalidPayload(f"Response body is not JSON: {e}", response.text) from e

    @staticmethod
    def _failed(operation: str, error: CatalogSyncError) -> RemoteResult:
        logger.warning(f"Remote {operation} failed: {error}")
        return RemoteResult(error=error, status_code=getattr(error, "status_code", None))

