"""Coupon consumption after a confirmed reservation, and restoration after a cancel.

The wallet is updated optimistically before the backend call. A failed call
never undoes the reservation (or the cancellation); it comes back as a warning
and the next wallet refresh reconciles the local state.
"""

import logging

from danjam.clients.backend import BackendClient
from danjam.clients.errors import BackendApiError, CouponConsumptionError
from danjam.schemas.reservation import ConsumeCouponRequest, ConsumptionOutcome
from danjam.services.wallet import CouponWalletStore

logger = logging.getLogger(__name__)

CONSUMPTION_FAILED_MESSAGE = (
    "The reservation is confirmed, but the coupon could not be marked as used."
)
RESTORE_FAILED_MESSAGE = "The reservation is cancelled, but the coupon could not be restored."


class CouponConsumptionTracker:
    """The only writer of wallet ``used`` flags."""

    def __init__(self, wallet: CouponWalletStore, client: BackendClient) -> None:
        self.wallet = wallet
        self.client = client

    async def consume(
        self,
        *,
        hotel_id: str,
        coupon_uuid: str,
        reservation_id: str,
        customer_id: str,
    ) -> ConsumptionOutcome:
        """Mark ``coupon_uuid`` used locally, then report it to the backend."""
        marked = self.wallet.mark_used(customer_id, coupon_uuid, self.client)
        request = ConsumeCouponRequest(
            hotel_id=hotel_id,
            coupon_uuid=coupon_uuid,
            reservation_id=reservation_id,
            customer_id=customer_id,
        )
        try:
            await self.client.use_coupon(request)
        except CouponConsumptionError as exc:
            logger.warning(
                "Coupon %s consumption failed for reservation %s: %s",
                coupon_uuid,
                reservation_id,
                exc.message,
            )
            return ConsumptionOutcome(
                coupon_uuid=coupon_uuid,
                marked_locally=marked,
                confirmed=False,
                warning=CONSUMPTION_FAILED_MESSAGE,
            )

        logger.info("Coupon %s consumed by reservation %s", coupon_uuid, reservation_id)
        return ConsumptionOutcome(coupon_uuid=coupon_uuid, marked_locally=marked, confirmed=True)

    async def restore(
        self, *, coupon_uuid: str, customer_id: str | None = None
    ) -> ConsumptionOutcome:
        """Return a coupon to the wallet after its reservation was cancelled."""
        marked = customer_id is not None and self.wallet.mark_restored(
            customer_id, coupon_uuid, self.client
        )
        try:
            await self.client.restore_coupon(coupon_uuid)
        except BackendApiError as exc:
            logger.warning("Coupon %s restore failed: %s", coupon_uuid, exc.message)
            return ConsumptionOutcome(
                coupon_uuid=coupon_uuid,
                marked_locally=marked,
                confirmed=False,
                warning=RESTORE_FAILED_MESSAGE,
            )

        logger.info("Coupon %s restored for customer %s", coupon_uuid, customer_id)
        return ConsumptionOutcome(coupon_uuid=coupon_uuid, marked_locally=marked, confirmed=True)
