"""Tests for the coupon wallet store and the consumption tracker."""

import httpx
import pytest

from danjam.clients.backend import BackendClient
from danjam.services.consumption import (
    CONSUMPTION_FAILED_MESSAGE,
    RESTORE_FAILED_MESSAGE,
    CouponConsumptionTracker,
)
from danjam.services.wallet import CouponWalletStore
from tests.factories import BACKEND_URL, CUSTOMER_ID, HOTEL_ID, FakeBackend, coupon_json

pytestmark = pytest.mark.asyncio

WALLET_PATH = "/api/customer/coupons/wallet"
USE_PATH = "/api/customer/coupons/use"


@pytest.fixture
def loaded_backend(fake_backend: FakeBackend) -> FakeBackend:
    fake_backend.wallet = [
        coupon_json(couponUuid="cpn-1"),
        coupon_json(couponUuid="cpn-2", code="SECOND"),
    ]
    return fake_backend


class TestCouponWalletStore:
    async def test_load_fetches_once(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        first = await wallet_store.load(CUSTOMER_ID, backend_client)
        second = await wallet_store.load(CUSTOMER_ID, backend_client)
        assert first == second
        assert len(first) == 2
        assert len(loaded_backend.calls("GET", WALLET_PATH)) == 1
        assert wallet_store.is_cached(CUSTOMER_ID, backend_client)

    async def test_refresh_replaces_local_state(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        await wallet_store.load(CUSTOMER_ID, backend_client)
        wallet_store.mark_used(CUSTOMER_ID, "cpn-1", backend_client)

        refreshed = await wallet_store.refresh(CUSTOMER_ID, backend_client)

        assert not refreshed[0].used
        assert len(loaded_backend.calls("GET", WALLET_PATH)) == 2

    async def test_mark_used_leaves_earlier_snapshots_alone(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        before = await wallet_store.load(CUSTOMER_ID, backend_client)

        assert wallet_store.mark_used(CUSTOMER_ID, "SECOND", backend_client)

        assert not before[1].used
        assert wallet_store.snapshot(CUSTOMER_ID, backend_client)[1].used
        assert wallet_store.mark_restored(CUSTOMER_ID, "cpn-2", backend_client)
        assert not wallet_store.snapshot(CUSTOMER_ID, backend_client)[1].used

    async def test_unknown_customer_or_coupon(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        assert wallet_store.snapshot("nobody", backend_client) == ()
        assert not wallet_store.mark_used("nobody", "cpn-1", backend_client)
        await wallet_store.load(CUSTOMER_ID, backend_client)
        assert not wallet_store.mark_used(CUSTOMER_ID, "missing", backend_client)

    async def test_clear(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        await wallet_store.load(CUSTOMER_ID, backend_client)
        wallet_store.clear(CUSTOMER_ID)
        assert not wallet_store.is_cached(CUSTOMER_ID, backend_client)

    async def test_tokens_never_share_a_wallet(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        fake_backend: FakeBackend,
    ):
        fake_backend.wallet = [coupon_json(couponUuid="other-only")]
        async with BackendClient(
            "other-token",
            base_url=BACKEND_URL,
            transport=httpx.MockTransport(fake_backend.handler),
        ) as other_client:
            await wallet_store.load(CUSTOMER_ID, other_client)

            fake_backend.wallet = [coupon_json(couponUuid="own-only")]
            own = await wallet_store.load(CUSTOMER_ID, backend_client)

            assert [c.coupon_uuid for c in own] == ["own-only"]
            assert not wallet_store.mark_used(CUSTOMER_ID, "other-only", backend_client)
            assert not wallet_store.snapshot(CUSTOMER_ID, other_client)[0].used
            assert len(fake_backend.calls("GET", WALLET_PATH)) == 2

    async def test_store_is_bounded(
        self, backend_client: BackendClient, loaded_backend: FakeBackend
    ):
        store = CouponWalletStore(maxsize=2)
        for customer_id in ("c-1", "c-2", "c-3"):
            await store.load(customer_id, backend_client)
        assert len(store) == 2

    async def test_shared_code_marks_one_entry(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        fake_backend: FakeBackend,
    ):
        fake_backend.wallet = [
            coupon_json(couponUuid=None, code="WELCOME"),
            coupon_json(couponUuid=None, code="WELCOME"),
        ]
        await wallet_store.load(CUSTOMER_ID, backend_client)

        assert wallet_store.mark_used(CUSTOMER_ID, "WELCOME", backend_client)
        assert [c.used for c in wallet_store.snapshot(CUSTOMER_ID, backend_client)] == [
            True,
            False,
        ]
        assert wallet_store.mark_used(CUSTOMER_ID, "WELCOME", backend_client)
        assert all(c.used for c in wallet_store.snapshot(CUSTOMER_ID, backend_client))


class TestCouponConsumptionTracker:
    async def test_consume_marks_and_reports(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        await wallet_store.load(CUSTOMER_ID, backend_client)
        tracker = CouponConsumptionTracker(wallet_store, backend_client)

        outcome = await tracker.consume(
            hotel_id=HOTEL_ID,
            coupon_uuid="cpn-1",
            reservation_id="res-1",
            customer_id=CUSTOMER_ID,
        )

        assert outcome.marked_locally
        assert outcome.confirmed
        assert outcome.warning is None
        assert wallet_store.snapshot(CUSTOMER_ID, backend_client)[0].used
        assert loaded_backend.bodies("POST", USE_PATH)[0]["reservationId"] == "res-1"

    async def test_backend_failure_keeps_optimistic_update(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        await wallet_store.load(CUSTOMER_ID, backend_client)
        loaded_backend.fail("POST", USE_PATH, 400, "Coupon already used")
        tracker = CouponConsumptionTracker(wallet_store, backend_client)

        outcome = await tracker.consume(
            hotel_id=HOTEL_ID,
            coupon_uuid="cpn-1",
            reservation_id="res-1",
            customer_id=CUSTOMER_ID,
        )

        assert not outcome.confirmed
        assert outcome.warning == CONSUMPTION_FAILED_MESSAGE
        assert wallet_store.snapshot(CUSTOMER_ID, backend_client)[0].used

    async def test_hotel_pool_coupon_not_in_wallet(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        tracker = CouponConsumptionTracker(wallet_store, backend_client)
        outcome = await tracker.consume(
            hotel_id=HOTEL_ID,
            coupon_uuid="hotel-pool-1",
            reservation_id="res-1",
            customer_id=CUSTOMER_ID,
        )
        assert not outcome.marked_locally
        assert outcome.confirmed

    async def test_restore(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        await wallet_store.load(CUSTOMER_ID, backend_client)
        wallet_store.mark_used(CUSTOMER_ID, "cpn-1", backend_client)
        tracker = CouponConsumptionTracker(wallet_store, backend_client)

        outcome = await tracker.restore(coupon_uuid="cpn-1", customer_id=CUSTOMER_ID)

        assert outcome.confirmed
        assert outcome.marked_locally
        assert not wallet_store.snapshot(CUSTOMER_ID, backend_client)[0].used

    async def test_restore_failure_is_a_warning(
        self,
        wallet_store: CouponWalletStore,
        backend_client: BackendClient,
        loaded_backend: FakeBackend,
    ):
        loaded_backend.fail("POST", "/api/customer/coupons/restore", 404, "Coupon not found")
        tracker = CouponConsumptionTracker(wallet_store, backend_client)

        outcome = await tracker.restore(coupon_uuid="cpn-1")

        assert not outcome.confirmed
        assert not outcome.marked_locally
        assert outcome.warning == RESTORE_FAILED_MESSAGE
