"""Error taxonomy for the catalog sync layer.

Remote failures are carried inside result objects instead of being raised,
so coordinators can downgrade them to local-only outcomes. Local store
failures are raised and propagate to the caller.
"""

from typing import Optional


class CatalogSyncError(Exception):
    """Base class for all catalog sync failures."""

    pass


class RemoteUnavailable(CatalogSyncError):
    """The remote catalog could not be reached (network error or timeout)."""

    pass


class RemoteRejected(CatalogSyncError):
    """The remote catalog answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NotFoundRemotely(RemoteRejected):
    """The requested entity does not exist on the remote catalog."""

    def __init__(self, resource: str, entity_id, body: str = ""):
        super().__init__(f"{resource}/{entity_id} not found remotely", 404, body)
        self.resource = resource
        self.entity_id = entity_id


class IdentifierCollision(RemoteRejected):
    """A create was refused because the client-assigned id is already taken."""

    pass


class InvalidPayload(CatalogSyncError):
    """The remote catalog returned a body that does not match the entity shape."""

    def __init__(self, message: str, payload: Optional[object] = None):
        super().__init__(message)
        self.payload = payload


class LocalWriteFailed(CatalogSyncError):
    """The local store rejected a write. Treated as fatal by callers."""

    pass


class NotAuthenticated(CatalogSyncError):
    """A session-scoped operation was called without a logged-in user."""

    pass
