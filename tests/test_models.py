"""Tests for domain models and result types."""

from decimal import Decimal

import pytest

from conftest import make_product, make_user
from localhands.errors import RemoteUnavailable
from localhands.models import (
    OperationResult,
    PropagationReport,
    RemoteResult,
    Seller,
    SellerPatch,
    SyncOutcome,
    SyncState,
)


class TestProduct:
    """Test product construction rules."""

    def test_requires_one_to_ten_images(self):
        with pytest.raises(ValueError):
            make_product(1, images=[])
        with pytest.raises(ValueError):
            make_product(1, images=[f"img{i}.jpg" for i in range(11)])

        assert len(make_product(1, images=[f"img{i}.jpg" for i in range(10)]).images) == 10

    def test_price_is_decimal(self):
        product = make_product(1, price=19.9)

        assert product.price == Decimal("19.9")


class TestSeller:
    """Test co-identity construction."""

    def test_for_user_reuses_user_id(self):
        user = make_user(id=7, photo_url="https://img.test/me.jpg")

        seller = Seller.for_user(user, "Dulces Ana", "Belgrano 50")

        assert seller.id == 7
        assert seller.lastname == user.last_name
        assert seller.photo_url == "https://img.test/me.jpg"

    def test_for_user_without_id(self):
        with pytest.raises(ValueError):
            Seller.for_user(make_user(), "Dulces Ana", "Belgrano 50")

    def test_patch_from_seller(self):
        seller = Seller.for_user(make_user(id=7), "Dulces Ana", "Belgrano 50")

        patch = SellerPatch.from_seller(seller)

        assert patch.entrepreneurship == "Dulces Ana"
        assert patch.address == "Belgrano 50"


class TestResults:
    """Test result value objects."""

    def test_remote_result(self):
        assert RemoteResult(value=[1]).unwrap() == [1]

        failed = RemoteResult(error=RemoteUnavailable("down"))
        assert not failed.ok
        with pytest.raises(RemoteUnavailable):
            failed.unwrap()

    def test_sync_outcome(self):
        synced = SyncOutcome.synced("p")
        local = SyncOutcome.local_only("p", "offline")

        assert synced.is_synced and synced.reason is None
        assert local.state == SyncState.LOCAL_ONLY
        assert local.reason == "offline"

    def test_operation_result(self):
        assert OperationResult.success(3).ok
        failure = OperationResult.failure(ValueError("bad"))
        assert not failure.ok
        assert failure.message == "bad"

    def test_propagation_report(self):
        assert PropagationReport(total=5, remote_confirmed=3).local_only == 2
