"""Local catalog store.

Keeps the on-device copy of users, sellers, products and favorites in SQLite,
plus the pending_sync ledger of writes the remote catalog never confirmed.

Every statement runs to completion without yielding to the event loop, so
writes are serialized per store. Change notifications are delivered to
`observe` subscribers after the write commits.
"""

import asyncio
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncIterator, Callable, Dict, Iterable, Iterator, List, Optional, Set

from ..clients import SqliteClient
from ..errors import LocalWriteFailed
from ..models import Favorite, PendingChange, Product, Seller, User, UserRole

logger = logging.getLogger(__name__)

# SQL statements
CREATE_SCHEMA_SQL = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE COLLATE NOCASE,
        password TEXT NOT NULL,
        role TEXT NOT NULL,
        phone TEXT NOT NULL,
        address TEXT NOT NULL,
        photo_url TEXT,
        is_email_verified INTEGER NOT NULL DEFAULT 0,
        verification_code TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sellers (
        id INTEGER PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        lastname TEXT NOT NULL,
        email TEXT NOT NULL,
        phone TEXT NOT NULL,
        address TEXT NOT NULL,
        entrepreneurship TEXT NOT NULL,
        photo_url TEXT,
        latitude REAL,
        longitude REAL
    )
    """,
    """
    CREATE TRIGGER IF NOT EXISTS sellers_require_seller_role
    BEFORE INSERT ON sellers
    WHEN (SELECT role FROM users WHERE id = NEW.id) IS NOT 'SELLER'
    BEGIN
        SELECT RAISE(ABORT, 'seller id must belong to a user with role SELLER');
    END
    """,
    """
    CREATE TABLE IF NOT EXISTS products (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT NOT NULL,
        producer TEXT NOT NULL,
        category TEXT NOT NULL,
        images TEXT NOT NULL,
        price TEXT NOT NULL,
        location TEXT NOT NULL,
        owner_id INTEGER,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_products_owner ON products(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_products_category ON products(category)",
    """
    CREATE TABLE IF NOT EXISTS favorites (
        user_id INTEGER NOT NULL,
        product_id INTEGER NOT NULL,
        PRIMARY KEY (user_id, product_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS pending_sync (
        entity TEXT NOT NULL,
        entity_id INTEGER NOT NULL,
        operation TEXT NOT NULL,
        reason TEXT NOT NULL,
        recorded_at TEXT NOT NULL,
        PRIMARY KEY (entity, entity_id)
    )
    """,
]

UPSERT_PRODUCT_SQL = """
INSERT INTO products
    (id, name, description, producer, category, images, price, location, owner_id, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    name = excluded.name,
    description = excluded.description,
    producer = excluded.producer,
    category = excluded.category,
    images = excluded.images,
    price = excluded.price,
    location = excluded.location,
    owner_id = excluded.owner_id,
    created_at = excluded.created_at
"""

UPSERT_SELLER_SQL = """
INSERT INTO sellers
    (id, name, lastname, email, phone, address, entrepreneurship, photo_url, latitude, longitude)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    name = excluded.name,
    lastname = excluded.lastname,
    email = excluded.email,
    phone = excluded.phone,
    address = excluded.address,
    entrepreneurship = excluded.entrepreneurship,
    photo_url = excluded.photo_url,
    latitude = excluded.latitude,
    longitude = excluded.longitude
"""

UPSERT_USER_SQL = """
INSERT INTO users
    (id, name, last_name, email, password, role, phone, address, photo_url,
     is_email_verified, verification_code, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    name = excluded.name,
    last_name = excluded.last_name,
    email = excluded.email,
    password = excluded.password,
    role = excluded.role,
    phone = excluded.phone,
    address = excluded.address,
    photo_url = excluded.photo_url,
    is_email_verified = excluded.is_email_verified,
    verification_code = excluded.verification_code,
    created_at = excluded.created_at
"""

PRODUCTS = "products"
SELLERS = "sellers"
USERS = "users"
FAVORITES = "favorites"
PENDING_SYNC = "pending_sync"


class _ChangeNotifier:
    """Fans table-change signals out to observe() subscribers."""

    def __init__(self):
        self._subscribers: Dict[asyncio.Queue, Set[str]] = {}
        self._deferred: Set[str] = set()
        self._deferring = False

    def subscribe(self, tables: Iterable[str]) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers[queue] = set(tables)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.pop(queue, None)

    def notify(self, table: str) -> None:
        if self._deferring:
            self._deferred.add(table)
            return
        for queue, tables in list(self._subscribers.items()):
            if table in tables:
                queue.put_nowait(table)

    @contextmanager
    def deferred(self) -> Iterator[None]:
        """Hold notifications until the block exits cleanly."""
        if self._deferring:
            yield
            return
        self._deferring = True
        try:
            yield
        except BaseException:
            self._deferred.clear()
            raise
        finally:
            self._deferring = False
        pending, self._deferred = self._deferred, set()
        for table in pending:
            self.notify(table)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _product_from_row(row: sqlite3.Row) -> Product:
    return Product(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        producer=row["producer"],
        category=row["category"],
        images=json.loads(row["images"]),
        price=Decimal(row["price"]),
        location=row["location"],
        owner_id=row["owner_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _product_params(product: Product) -> tuple:
    return (
        product.id,
        product.name,
        product.description,
        product.producer,
        product.category,
        json.dumps(product.images),
        str(product.price),
        product.location,
        product.owner_id,
        product.created_at.isoformat(),
    )


def _seller_from_row(row: sqlite3.Row) -> Seller:
    return Seller(
        id=row["id"],
        name=row["name"],
        lastname=row["lastname"],
        email=row["email"],
        phone=row["phone"],
        address=row["address"],
        entrepreneurship=row["entrepreneurship"],
        photo_url=row["photo_url"],
        latitude=row["latitude"],
        longitude=row["longitude"],
    )


def _seller_params(seller: Seller) -> tuple:
    return (
        seller.id,
        seller.name,
        seller.lastname,
        seller.email,
        seller.phone,
        seller.address,
        seller.entrepreneurship,
        seller.photo_url,
        seller.latitude,
        seller.longitude,
    )


def _user_from_row(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        last_name=row["last_name"],
        email=row["email"],
        password=row["password"],
        role=UserRole(row["role"]),
        phone=row["phone"],
        address=row["address"],
        photo_url=row["photo_url"],
        is_email_verified=bool(row["is_email_verified"]),
        verification_code=row["verification_code"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _user_params(user: User) -> tuple:
    return (
        user.id,
        user.name,
        user.last_name,
        user.email,
        user.password,
        user.role.value,
        user.phone,
        user.address,
        user.photo_url,
        int(user.is_email_verified),
        user.verification_code,
        user.created_at.isoformat(),
    )


class CatalogStore:
    """SQLite-backed local copy of the catalog.

    Entity access is grouped per table: `store.products`, `store.sellers`,
    `store.users`, `store.favorites` and `store.pending`.
    """

    def __init__(self, db_path: str = "localhands.db"):
        """Initialize the store and create the schema if needed.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = db_path
        self._sqlite_client = SqliteClient(db_path)
        self._notifier = _ChangeNotifier()
        self._ensure_schema()

        self.products = ProductTable(self)
        self.sellers = SellerTable(self)
        self.users = UserTable(self)
        self.favorites = FavoriteTable(self)
        self.pending = PendingSyncLedger(self)

    def _ensure_schema(self) -> None:
        """Create tables, indexes and triggers if they don't exist."""
        for statement in CREATE_SCHEMA_SQL:
            self._sqlite_client.execute_query(statement)
        logger.debug(f"Catalog schema initialized at {self._db_path}")

    @contextmanager
    def transaction(self) -> Iterator["CatalogStore"]:
        """Run several writes atomically.

        Notifications for the grouped writes are delivered once, after commit.
        A failed block rolls back and delivers nothing.

        Raises:
            LocalWriteFailed: If SQLite rejects any statement in the block.
        """
        with self._notifier.deferred():
            try:
                with self._sqlite_client.transaction():
                    yield self
            except sqlite3.Error as e:
                raise LocalWriteFailed(f"Local transaction failed: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        self._sqlite_client.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False

    def _query(self, query: str, params=None) -> List[sqlite3.Row]:
        try:
            return self._sqlite_client.execute_query(query, params)
        except sqlite3.Error as e:
            raise LocalWriteFailed(f"Local query failed: {e}") from e

    def _write(self, table: str, query: str, params=None) -> int:
        try:
            affected = self._sqlite_client.execute_update(query, params)
        except sqlite3.Error as e:
            raise LocalWriteFailed(f"Local write to {table} failed: {e}") from e
        if affected:
            self._notifier.notify(table)
        return affected

    def _insert(self, table: str, query: str, params) -> int:
        try:
            row_id = self._sqlite_client.execute_insert(query, params)
        except sqlite3.Error as e:
            raise LocalWriteFailed(f"Local insert into {table} failed: {e}") from e
        self._notifier.notify(table)
        return row_id

    def _write_many(self, table: str, query: str, rows: List[tuple]) -> int:
        if not rows:
            return 0
        try:
            with self._sqlite_client.transaction():
                affected = self._sqlite_client.execute_many(query, rows)
        except sqlite3.Error as e:
            raise LocalWriteFailed(f"Bulk write to {table} failed: {e}") from e
        self._notifier.notify(table)
        return affected

    async def _observe(self, tables: Iterable[str], read: Callable[[], object]) -> AsyncIterator:
        """Yield the current result of `read`, then each distinct new result."""
        queue = self._notifier.subscribe(tables)
        try:
            last = object()
            while True:
                current = read()
                if current != last:
                    last = current
                    yield current
                await queue.get()
                # Coalesce bursts of writes into one re-read
                while not queue.empty():
                    queue.get_nowait()
        finally:
            self._notifier.unsubscribe(queue)


class ProductTable:
    """Product rows, keyed by id."""

    _SELECT = "SELECT * FROM products"

    def __init__(self, store: CatalogStore):
        self._store = store

    def _one(self, product_id: int) -> Optional[Product]:
        rows = self._store._query(f"{self._SELECT} WHERE id = ?", (product_id,))
        return _product_from_row(rows[0]) if rows else None

    def _many(self, where: str = "", params=None) -> List[Product]:
        rows = self._store._query(f"{self._SELECT} {where} ORDER BY id", params)
        return [_product_from_row(row) for row in rows]

    async def get(self, product_id: int) -> Optional[Product]:
        return self._one(product_id)

    def observe(self, product_id: int) -> AsyncIterator[Optional[Product]]:
        return self._store._observe([PRODUCTS], lambda: self._one(product_id))

    async def list_all(self) -> List[Product]:
        return self._many()

    def observe_all(self) -> AsyncIterator[List[Product]]:
        return self._store._observe([PRODUCTS], self._many)

    async def by_owner(self, owner_id: int) -> List[Product]:
        return self._many("WHERE owner_id = ?", (owner_id,))

    def observe_by_owner(self, owner_id: int) -> AsyncIterator[List[Product]]:
        return self._store._observe([PRODUCTS], lambda: self._many("WHERE owner_id = ?", (owner_id,)))

    async def by_category(self, category: str) -> List[Product]:
        return self._many("WHERE category = ?", (category,))

    async def by_city(self, city: str) -> List[Product]:
        """Products whose location mentions the city, ignoring case."""
        return self._many("WHERE location LIKE ? COLLATE NOCASE", (f"%{city}%",))

    async def search_by_producer(self, query: str) -> List[Product]:
        return self._many("WHERE producer LIKE ? COLLATE NOCASE", (f"%{query}%",))

    async def search(self, query: str) -> List[Product]:
        """Case-insensitive substring search over name, category, location and producer."""
        pattern = f"%{query}%"
        return self._many(
            """WHERE name LIKE ? COLLATE NOCASE
                  OR category LIKE ? COLLATE NOCASE
                  OR location LIKE ? COLLATE NOCASE
                  OR producer LIKE ? COLLATE NOCASE""",
            (pattern, pattern, pattern, pattern),
        )

    async def categories(self) -> List[str]:
        rows = self._store._query("SELECT DISTINCT category FROM products ORDER BY category ASC")
        return [row["category"] for row in rows]

    async def upsert(self, product: Product) -> Product:
        """Insert the product, replacing any row with the same id."""
        self._store._write(PRODUCTS, UPSERT_PRODUCT_SQL, _product_params(product))
        return product

    async def update(self, product: Product) -> int:
        """Update an existing product. Returns 0 when no row has its id."""
        return self._store._write(
            PRODUCTS,
            """UPDATE products
               SET name = ?, description = ?, producer = ?, category = ?, images = ?,
                   price = ?, location = ?, owner_id = ?, created_at = ?
               WHERE id = ?""",
            _product_params(product)[1:] + (product.id,),
        )

    async def delete(self, product_id: int) -> int:
        return self._store._write(PRODUCTS, "DELETE FROM products WHERE id = ?", (product_id,))

    async def bulk_upsert(self, products: List[Product]) -> int:
        """Replace-on-conflict insert of many products in one transaction."""
        self._store._write_many(PRODUCTS, UPSERT_PRODUCT_SQL, [_product_params(p) for p in products])
        return len(products)

    async def rekey(self, old_id: int, new_id: int) -> None:
        """Move a product and the favorites pointing at it to a new id."""
        with self._store.transaction():
            self._store._write(PRODUCTS, "UPDATE products SET id = ? WHERE id = ?", (new_id, old_id))
            self._store._write(
                FAVORITES,
                "UPDATE favorites SET product_id = ? WHERE product_id = ?",
                (new_id, old_id),
            )


class SellerTable:
    """Seller rows. A seller's id is the id of the user who owns it."""

    def __init__(self, store: CatalogStore):
        self._store = store

    def _one(self, seller_id: int) -> Optional[Seller]:
        rows = self._store._query("SELECT * FROM sellers WHERE id = ?", (seller_id,))
        return _seller_from_row(rows[0]) if rows else None

    def _many(self) -> List[Seller]:
        rows = self._store._query("SELECT * FROM sellers ORDER BY id")
        return [_seller_from_row(row) for row in rows]

    async def get(self, seller_id: int) -> Optional[Seller]:
        return self._one(seller_id)

    def observe(self, seller_id: int) -> AsyncIterator[Optional[Seller]]:
        return self._store._observe([SELLERS], lambda: self._one(seller_id))

    async def list_all(self) -> List[Seller]:
        return self._many()

    def observe_all(self) -> AsyncIterator[List[Seller]]:
        return self._store._observe([SELLERS], self._many)

    async def upsert(self, seller: Seller) -> Seller:
        """Insert or replace a seller. The owning user must already be a SELLER.

        Raises:
            LocalWriteFailed: If no user with the seller's id has role SELLER.
        """
        self._store._write(SELLERS, UPSERT_SELLER_SQL, _seller_params(seller))
        return seller

    async def update(self, seller: Seller) -> int:
        return self._store._write(
            SELLERS,
            """UPDATE sellers
               SET name = ?, lastname = ?, email = ?, phone = ?, address = ?,
                   entrepreneurship = ?, photo_url = ?, latitude = ?, longitude = ?
               WHERE id = ?""",
            _seller_params(seller)[1:] + (seller.id,),
        )

    async def delete(self, seller_id: int) -> int:
        return self._store._write(SELLERS, "DELETE FROM sellers WHERE id = ?", (seller_id,))

    async def bulk_upsert(self, sellers: List[Seller]) -> int:
        self._store._write_many(SELLERS, UPSERT_SELLER_SQL, [_seller_params(s) for s in sellers])
        return len(sellers)


class UserTable:
    """User rows. Emails are unique regardless of case."""

    def __init__(self, store: CatalogStore):
        self._store = store

    def _one(self, user_id: int) -> Optional[User]:
        rows = self._store._query("SELECT * FROM users WHERE id = ?", (user_id,))
        return _user_from_row(rows[0]) if rows else None

    async def get(self, user_id: int) -> Optional[User]:
        return self._one(user_id)

    def observe(self, user_id: int) -> AsyncIterator[Optional[User]]:
        return self._store._observe([USERS], lambda: self._one(user_id))

    async def list_all(self) -> List[User]:
        rows = self._store._query("SELECT * FROM users ORDER BY id")
        return [_user_from_row(row) for row in rows]

    async def get_by_email(self, email: str) -> Optional[User]:
        rows = self._store._query("SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email,))
        return _user_from_row(rows[0]) if rows else None

    async def email_exists(self, email: str) -> bool:
        rows = self._store._query(
            "SELECT COUNT(*) AS total FROM users WHERE email = ? COLLATE NOCASE", (email,)
        )
        return rows[0]["total"] > 0

    async def upsert(self, user: User) -> User:
        """Insert or replace a user. A user without an id gets one assigned.

        Returns:
            The stored user, carrying its id.
        """
        if user.id is None:
            row_id = self._store._insert(USERS, UPSERT_USER_SQL, _user_params(user))
            user.id = row_id
        else:
            self._store._write(USERS, UPSERT_USER_SQL, _user_params(user))
        return user

    async def update(self, user: User) -> int:
        return self._store._write(
            USERS,
            """UPDATE users
               SET name = ?, last_name = ?, email = ?, password = ?, role = ?, phone = ?,
                   address = ?, photo_url = ?, is_email_verified = ?, verification_code = ?,
                   created_at = ?
               WHERE id = ?""",
            _user_params(user)[1:] + (user.id,),
        )

    async def set_role(self, user_id: int, role: UserRole) -> int:
        return self._store._write(USERS, "UPDATE users SET role = ? WHERE id = ?", (role.value, user_id))

    async def update_password(self, email: str, password_hash: str) -> int:
        return self._store._write(
            USERS,
            "UPDATE users SET password = ? WHERE email = ? COLLATE NOCASE",
            (password_hash, email),
        )

    async def set_verification_code(self, email: str, code: str) -> int:
        return self._store._write(
            USERS,
            "UPDATE users SET verification_code = ? WHERE email = ? COLLATE NOCASE",
            (code, email),
        )

    async def mark_email_verified(self, email: str) -> int:
        return self._store._write(
            USERS,
            """UPDATE users SET is_email_verified = 1, verification_code = NULL
               WHERE email = ? COLLATE NOCASE""",
            (email,),
        )

    async def delete(self, user_id: int) -> int:
        """Delete a user. Its seller profile goes with it."""
        deleted = self._store._write(USERS, "DELETE FROM users WHERE id = ?", (user_id,))
        if deleted:
            self._store._notifier.notify(SELLERS)
        return deleted


class FavoriteTable:
    """Favorite rows, keyed by (user_id, product_id). Local only."""

    _FAVORITE_PRODUCTS_SQL = """
        SELECT p.* FROM products p
        INNER JOIN favorites f ON p.id = f.product_id
        WHERE f.user_id = ?
        ORDER BY p.id
    """

    def __init__(self, store: CatalogStore):
        self._store = store

    def _products_for(self, user_id: int) -> List[Product]:
        rows = self._store._query(self._FAVORITE_PRODUCTS_SQL, (user_id,))
        return [_product_from_row(row) for row in rows]

    async def products_for_user(self, user_id: int) -> List[Product]:
        return self._products_for(user_id)

    def observe_products_for_user(self, user_id: int) -> AsyncIterator[List[Product]]:
        return self._store._observe([FAVORITES, PRODUCTS], lambda: self._products_for(user_id))

    async def list_for_user(self, user_id: int) -> List[Favorite]:
        rows = self._store._query(
            "SELECT user_id, product_id FROM favorites WHERE user_id = ? ORDER BY product_id",
            (user_id,),
        )
        return [Favorite(user_id=row["user_id"], product_id=row["product_id"]) for row in rows]

    async def exists(self, user_id: int, product_id: int) -> bool:
        rows = self._store._query(
            "SELECT 1 FROM favorites WHERE user_id = ? AND product_id = ?",
            (user_id, product_id),
        )
        return bool(rows)

    async def upsert(self, favorite: Favorite) -> Favorite:
        self._store._write(
            FAVORITES,
            "INSERT OR REPLACE INTO favorites (user_id, product_id) VALUES (?, ?)",
            (favorite.user_id, favorite.product_id),
        )
        return favorite

    async def delete(self, user_id: int, product_id: int) -> int:
        return self._store._write(
            FAVORITES,
            "DELETE FROM favorites WHERE user_id = ? AND product_id = ?",
            (user_id, product_id),
        )


class PendingSyncLedger:
    """Local-only writes waiting to be replayed against the remote catalog.

    One row per entity. A later change to the same entity is merged into the
    existing row rather than appended.
    """

    def __init__(self, store: CatalogStore):
        self._store = store

    async def get(self, entity: str, entity_id: int) -> Optional[PendingChange]:
        rows = self._store._query(
            "SELECT * FROM pending_sync WHERE entity = ? AND entity_id = ?",
            (entity, entity_id),
        )
        return self._from_row(rows[0]) if rows else None

    async def list_all(self, entity: Optional[str] = None) -> List[PendingChange]:
        if entity is None:
            rows = self._store._query("SELECT * FROM pending_sync ORDER BY recorded_at")
        else:
            rows = self._store._query(
                "SELECT * FROM pending_sync WHERE entity = ? ORDER BY recorded_at", (entity,)
            )
        return [self._from_row(row) for row in rows]

    async def record(self, entity: str, entity_id: int, operation: str, reason: str) -> Optional[PendingChange]:
        """Record a local-only write, merging it with any earlier pending one.

        An update on top of a pending create stays a create. A delete on top
        of a pending create cancels both, since the remote never saw the entity.

        Returns:
            The resulting ledger entry, or None if the change cancelled out.
        """
        existing = await self.get(entity, entity_id)

        if existing is not None and existing.operation == "create":
            if operation == "delete":
                await self.remove(entity, entity_id)
                logger.debug(f"Pending create of {entity}/{entity_id} cancelled by delete")
                return None
            operation = "create"

        change = PendingChange(
            entity=entity,
            entity_id=entity_id,
            operation=operation,
            reason=reason,
            recorded_at=_utc_now(),
        )
        self._store._write(
            PENDING_SYNC,
            """INSERT OR REPLACE INTO pending_sync
               (entity, entity_id, operation, reason, recorded_at)
               VALUES (?, ?, ?, ?, ?)""",
            (entity, entity_id, operation, reason, change.recorded_at.isoformat()),
        )
        return change

    async def remove(self, entity: str, entity_id: int) -> int:
        return self._store._write(
            PENDING_SYNC,
            "DELETE FROM pending_sync WHERE entity = ? AND entity_id = ?",
            (entity, entity_id),
        )

    @staticmethod
    def _from_row(row: sqlite3.Row) -> PendingChange:
        return PendingChange(
            entity=row["entity"],
            entity_id=row["entity_id"],
            operation=row["operation"],
            reason=row["reason"],
            recorded_at=datetime.fromisoformat(row["recorded_at"]),
        )
