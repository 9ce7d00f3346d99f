"""Tests for seller write-through.

These tests verify:
- convert_to_seller keeps seller id == user id and promotes the user atomically
- update_seller_api never writes locally on remote failure
- the PATCH -> PUT fallback ladder
- sync_sellers_with_api creates co-identity users and skips bad records
- get_seller_by_email falls back to a case-insensitive scan
"""

from conftest import make_product, make_user, product_record, seller_record
from localhands.errors import NotFoundRemotely
from localhands.models import Seller, UserRole


class TestConvertToSeller:
    """Test user to seller promotion."""

    async def test_creates_remote_seller_with_user_id(self, seller_sync, store, fake_server):
        user = await store.users.upsert(make_user(id=7))

        result = await seller_sync.convert_to_seller(user, "Dulces Ana", "Belgrano 50")

        assert result.ok
        assert result.value.id == 7
        assert fake_server.collections["sellers"][7]["entrepreneurship"] == "Dulces Ana"
        assert (await store.sellers.get(7)).address == "Belgrano 50"
        assert (await store.users.get(7)).role == UserRole.SELLER

    async def test_patches_existing_remote_seller(self, seller_sync, store, fake_server):
        fake_server.seed("sellers", seller_record(7, entrepreneurship="Old Name"))
        user = await store.users.upsert(make_user(id=7))

        result = await seller_sync.convert_to_seller(user, "New Name", "Belgrano 50")

        assert result.ok
        assert fake_server.calls("PATCH") == ["/sellers/7"]
        assert fake_server.calls("POST") == []
        assert (await store.sellers.get(7)).entrepreneurship == "New Name"

    async def test_remote_failure_writes_nothing(self, seller_sync, store, fake_server):
        user = await store.users.upsert(make_user(id=7))
        fake_server.offline = True

        result = await seller_sync.convert_to_seller(user, "Dulces Ana", "Belgrano 50")

        assert not result.ok
        assert result.message
        assert await store.sellers.get(7) is None
        assert (await store.users.get(7)).role == UserRole.CLIENT

    async def test_rejected_create_writes_nothing(self, seller_sync, store, fake_server):
        user = await store.users.upsert(make_user(id=7))
        fake_server.fail("POST", "/sellers", 500)

        result = await seller_sync.convert_to_seller(user, "Dulces Ana", "Belgrano 50")

        assert not result.ok
        assert await store.sellers.get(7) is None

    async def test_keeps_verification_and_password_changed_after_registration(self, seller_sync, auth, store):
        registered = (await auth.register(make_user(email="ana@example.com", password="secret"))).value
        await auth.verify_email("ana@example.com")
        await auth.update_password("ana@example.com", "newpass")

        result = await seller_sync.convert_to_seller(registered, "Dulces Ana", "Belgrano 50")

        assert result.ok
        stored = await store.users.get(registered.id)
        assert stored.role == UserRole.SELLER
        assert stored.is_email_verified
        session = await auth.login("ana@example.com", "newpass")
        assert session.ok
        assert session.value.user_id == registered.id

    async def test_unknown_local_user_is_stored_as_seller(self, seller_sync, store):
        result = await seller_sync.convert_to_seller(make_user(id=7), "Dulces Ana", "Belgrano 50")

        assert result.ok
        assert (await store.users.get(7)).role == UserRole.SELLER
        assert (await store.sellers.get(7)) is not None

    async def test_user_without_id_fails(self, seller_sync):
        result = await seller_sync.convert_to_seller(make_user(), "Dulces Ana", "Belgrano 50")

        assert not result.ok
        assert isinstance(result.error, ValueError)


class TestUpdateSellerApi:
    """Test seller profile edits."""

    async def test_missing_remote_seller_writes_nothing(self, seller_sync, store, local_seller):
        before = await local_seller(7, entrepreneurship="Dulces Ana")
        edited = Seller(**{**before.__dict__, "entrepreneurship": "Changed"})

        result = await seller_sync.update_seller_api(edited)

        assert not result.ok
        assert isinstance(result.error, NotFoundRemotely)
        assert await store.sellers.get(7) == before

    async def test_unreachable_remote_is_reported_as_not_found(self, seller_sync, store, fake_server, local_seller):
        before = await local_seller(7)
        fake_server.offline = True

        result = await seller_sync.update_seller_api(before)

        assert isinstance(result.error, NotFoundRemotely)
        assert fake_server.calls("PATCH") == []

    async def test_patch_success_stores_response(self, seller_sync, store, fake_server, local_seller):
        seller = await local_seller(7)
        fake_server.seed("sellers", seller_record(7, email="seller7@example.com"))
        seller.entrepreneurship = "Dulces Ana Gourmet"

        result = await seller_sync.update_seller_api(seller)

        assert result.ok
        assert (await store.sellers.get(7)).entrepreneurship == "Dulces Ana Gourmet"
        assert fake_server.calls("PUT") == []

    async def test_patch_failure_falls_back_to_put(self, seller_sync, store, fake_server, local_seller):
        seller = await local_seller(7)
        fake_server.seed("sellers", seller_record(7))
        fake_server.fail("PATCH", "/sellers/7", 500)
        seller.phone = "999"

        result = await seller_sync.update_seller_api(seller)

        assert result.ok
        assert fake_server.calls("PUT") == ["/sellers/7"]
        stored = await store.sellers.get(7)
        assert stored.phone == "999"
        assert stored.email == "seller7@example.com"

    async def test_patch_and_put_failure_writes_nothing(self, seller_sync, store, fake_server, local_seller):
        before = await local_seller(7)
        fake_server.seed("sellers", seller_record(7))
        fake_server.fail("PATCH", "/sellers/7", 500)
        fake_server.fail("PUT", "/sellers/7", 500)
        edited = Seller(**{**before.__dict__, "phone": "999"})

        result = await seller_sync.update_seller_api(edited)

        assert not result.ok
        assert result.error.status_code == 500
        assert await store.sellers.get(7) == before


class TestSaveSellerProfile:
    """Test profile save with rename propagation."""

    async def test_rename_propagates_to_products(self, seller_sync, store, fake_server, local_seller):
        seller = await local_seller(7, entrepreneurship="Dulces Ana")
        fake_server.seed("sellers", seller_record(7, entrepreneurship="Dulces Ana"))
        fake_server.seed(
            "products",
            product_record(1, ownerId=7, producer="Dulces Ana"),
            product_record(2, ownerId=7, producer="Dulces Ana"),
        )
        await store.products.bulk_upsert([
            make_product(1, owner_id=7),
            make_product(2, owner_id=7),
            make_product(3, owner_id=8, producer="Other"),
        ])
        seller.entrepreneurship = "Ana Gourmet"
        seller.name = "Anita"

        result = await seller_sync.save_seller_profile(seller)

        assert result.ok
        assert [p.producer for p in await store.products.by_owner(7)] == ["Ana Gourmet", "Ana Gourmet"]
        assert (await store.products.get(3)).producer == "Other"
        assert fake_server.collections["products"][1]["producer"] == "Ana Gourmet"
        assert (await store.users.get(7)).name == "Anita"

    async def test_unchanged_name_does_not_touch_products(self, seller_sync, store, fake_server, local_seller):
        seller = await local_seller(7, entrepreneurship="Dulces Ana")
        fake_server.seed("sellers", seller_record(7, entrepreneurship="Dulces Ana"))
        await store.products.upsert(make_product(1, owner_id=7))
        seller.phone = "123"

        result = await seller_sync.save_seller_profile(seller)

        assert result.ok
        assert fake_server.calls("PUT") == []

    async def test_failed_save_returns_failure(self, seller_sync, local_seller):
        seller = await local_seller(7)

        result = await seller_sync.save_seller_profile(seller)

        assert not result.ok


class TestSyncSellersWithApi:
    """Test the full seller pull."""

    async def test_creates_users_and_sellers(self, seller_sync, store, fake_server):
        fake_server.seed("sellers", seller_record(1), seller_record(2))
        await store.users.upsert(make_user(id=2, email="seller2@example.com"))

        sellers = await seller_sync.sync_sellers_with_api()

        assert [s.id for s in sellers] == [1, 2]
        assert [s.id for s in await seller_sync.all_sellers()] == [1, 2]
        assert (await store.users.get(1)).role == UserRole.SELLER
        assert (await store.users.get(2)).role == UserRole.SELLER

    async def test_bad_record_is_skipped(self, seller_sync, store, fake_server):
        # Seller 3 reuses the email of local user 10, so its user cannot be created
        await store.users.upsert(make_user(id=10, email="taken@example.com"))
        fake_server.seed("sellers", seller_record(1), seller_record(3, email="taken@example.com"))

        sellers = await seller_sync.sync_sellers_with_api()

        assert len(sellers) == 2
        assert await store.sellers.get(1) is not None
        assert await store.sellers.get(3) is None

    async def test_updates_existing_seller(self, seller_sync, store, fake_server, local_seller):
        await local_seller(7, entrepreneurship="Old")
        fake_server.seed("sellers", seller_record(7, entrepreneurship="New"))

        await seller_sync.sync_sellers_with_api()

        assert (await seller_sync.get_seller(7)).entrepreneurship == "New"

    async def test_list_failure_returns_empty(self, seller_sync, fake_server):
        fake_server.offline = True

        assert await seller_sync.sync_sellers_with_api() == []


class TestSellerLookup:
    """Test remote seller lookup by email."""

    async def test_server_side_filter(self, seller_sync, fake_server):
        fake_server.seed("sellers", seller_record(1), seller_record(2))

        seller = await seller_sync.get_seller_by_email("seller2@example.com")

        assert seller.id == 2
        assert fake_server.requests.count(("GET", "/sellers")) == 1

    async def test_case_insensitive_fallback(self, seller_sync, fake_server):
        fake_server.seed("sellers", seller_record(1), seller_record(2))

        seller = await seller_sync.get_seller_by_email("SELLER2@Example.com")

        assert seller.id == 2
        assert fake_server.requests.count(("GET", "/sellers")) == 2

    async def test_unknown_email(self, seller_sync, fake_server):
        fake_server.seed("sellers", seller_record(1))

        assert await seller_sync.get_seller_by_email("nobody@example.com") is None
        assert await seller_sync.is_user_seller("nobody@example.com") is False
        assert await seller_sync.is_user_seller("seller1@example.com") is True

    async def test_offline_lookup_returns_none(self, seller_sync, fake_server):
        fake_server.offline = True

        assert await seller_sync.get_seller_by_email("seller1@example.com") is None
