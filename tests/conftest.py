"""Shared fixtures.

The remote catalog is an in-process fake behaving like json-server: client
ids are honored, `?field=value` filters work, and it can be switched offline
or told to fail specific routes.
"""

import json
import os
import tempfile
from decimal import Decimal

import httpx
import pytest

from localhands.clients import CatalogApiClient
from localhands.models import Product, Seller, User, UserRole
from localhands.services import (
    AuthService,
    CatalogStore,
    ConsistencyPropagator,
    FavoritesIndex,
    IdentifierAllocator,
    Pbkdf2PasswordHasher,
    ProductSyncCoordinator,
    SellerSyncCoordinator,
)

BASE_URL = "http://catalog.test"


class FakeCatalogServer:
    """In-memory REST catalog served through httpx.MockTransport."""

    def __init__(self):
        self.collections = {"products": {}, "sellers": {}, "users": {}, "favorites": {}}
        self.offline = False
        self.failures = {}
        self.requests = []

    def seed(self, collection: str, *records: dict) -> None:
        for record in records:
            self.collections[collection][int(record["id"])] = dict(record)

    def fail(self, method: str, path: str, status: int) -> None:
        """Answer `method path` with `status` from now on."""
        self.failures[(method, path)] = status

    def calls(self, method: str) -> list:
        return [path for m, path in self.requests if m == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))

        if self.offline:
            raise httpx.ConnectError("catalog is offline", request=request)

        parts = path.strip("/").split("/")
        collection = parts[0]
        item_id = int(parts[1]) if len(parts) > 1 else None

        status = self.failures.get((request.method, path)) or self.failures.get(
            (request.method, f"/{collection}")
        )
        if status:
            return httpx.Response(status, json={"error": "forced failure"})

        if collection not in self.collections:
            return httpx.Response(404, json={})
        records = self.collections[collection]

        if request.method == "GET" and item_id is None:
            items = list(records.values())
            for key, value in request.url.params.items():
                items = [item for item in items if str(item.get(key)) == value]
            return httpx.Response(200, json=items)

        if request.method == "POST":
            body = json.loads(request.content)
            new_id = body.get("id")
            if new_id is None:
                new_id = max(records, default=0) + 1
            new_id = int(new_id)
            if new_id in records:
                return httpx.Response(409, json={"error": f"id {new_id} already exists"})
            body["id"] = new_id
            records[new_id] = body
            return httpx.Response(201, json=body)

        if item_id not in records:
            return httpx.Response(404, json={})

        if request.method == "GET":
            return httpx.Response(200, json=records[item_id])
        if request.method == "PUT":
            body = json.loads(request.content)
            body["id"] = item_id
            records[item_id] = body
            return httpx.Response(200, json=body)
        if request.method == "PATCH":
            records[item_id].update(json.loads(request.content))
            return httpx.Response(200, json=records[item_id])
        if request.method == "DELETE":
            del records[item_id]
            return httpx.Response(200, json={})

        return httpx.Response(405, json={})


def product_record(product_id: int, **overrides) -> dict:
    """Remote (camelCase) product payload."""
    record = {
        "id": product_id,
        "name": f"Product {product_id}",
        "description": "Handmade",
        "producer": "Dulces Ana",
        "category": "Food",
        "images": ["https://img.test/1.jpg"],
        "price": 12.5,
        "location": "Cordoba",
        "ownerId": None,
        "createdAt": 1_700_000_000_000,
    }
    record.update(overrides)
    return record


def seller_record(seller_id: int, **overrides) -> dict:
    """Remote (camelCase) seller payload."""
    record = {
        "id": seller_id,
        "name": "Ana",
        "lastname": "Lopez",
        "email": f"seller{seller_id}@example.com",
        "phone": "3515550000",
        "address": "San Martin 100",
        "entrepreneurship": "Dulces Ana",
        "photoUrl": None,
    }
    record.update(overrides)
    return record


def make_product(product_id: int = 0, **overrides) -> Product:
    fields = dict(
        id=product_id,
        name="Alfajores",
        description="Box of 12",
        producer="Dulces Ana",
        category="Food",
        images=["https://img.test/alfajores.jpg"],
        price=Decimal("12.50"),
        location="Cordoba",
        owner_id=None,
    )
    fields.update(overrides)
    return Product(**fields)


def make_user(**overrides) -> User:
    fields = dict(
        name="Ana",
        last_name="Lopez",
        email="ana@example.com",
        password="secret",
        role=UserRole.CLIENT,
        phone="3515550000",
        address="San Martin 100",
    )
    fields.update(overrides)
    return User(**fields)


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def store(temp_db_path):
    """Create a CatalogStore with temporary database."""
    catalog_store = CatalogStore(temp_db_path)
    yield catalog_store
    catalog_store.close()


@pytest.fixture
def fake_server():
    return FakeCatalogServer()


@pytest.fixture
async def api_client(fake_server):
    """Connected API client talking to the fake catalog."""
    client = CatalogApiClient(BASE_URL, timeout_seconds=2, transport=httpx.MockTransport(fake_server.handler))
    await client.connect()
    yield client
    await client.close()


@pytest.fixture
def allocator(api_client):
    return IdentifierAllocator(api_client)


@pytest.fixture
def product_sync(api_client, store, allocator):
    return ProductSyncCoordinator(api_client, store, allocator)


@pytest.fixture
def propagator(product_sync, store):
    return ConsistencyPropagator(product_sync, store, concurrency=2)


@pytest.fixture
def seller_sync(api_client, store, propagator):
    return SellerSyncCoordinator(api_client, store, propagator)


@pytest.fixture
def favorites(store):
    return FavoritesIndex(store)


@pytest.fixture
def auth(store):
    # Low iteration count keeps the tests fast
    return AuthService(store, Pbkdf2PasswordHasher(iterations=1_000))


@pytest.fixture
def local_seller(store):
    """Store a SELLER user and its seller profile locally."""

    async def create(seller_id: int = 7, entrepreneurship: str = "Dulces Ana") -> Seller:
        user = await store.users.upsert(
            make_user(id=seller_id, email=f"seller{seller_id}@example.com", role=UserRole.SELLER)
        )
        seller = Seller.for_user(user, entrepreneurship, user.address)
        return await store.sellers.upsert(seller)

    return create
