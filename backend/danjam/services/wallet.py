"""Coupon wallet store: in-memory copy of each caller's wallet coupons.

Entries are keyed by the bearer token digest the wallet was fetched with and
the customer id, so a wallet is only ever served back to the token that
loaded it. The cache is bounded in size and age.

Everything except the consumption tracker reads immutable snapshots; only
``mark_used`` and ``mark_restored`` change stored coupons.
"""

import logging

from cachetools import TTLCache

from danjam.clients.backend import BackendClient
from danjam.config import settings
from danjam.schemas.promotion import Coupon

logger = logging.getLogger(__name__)

WalletKey = tuple[str, str]


def wallet_key(client: BackendClient, customer_id: str) -> WalletKey:
    return (client.principal, customer_id)


class CouponWalletStore:
    """Owned store of wallet coupons, one entry per (token, customer)."""

    def __init__(self, maxsize: int | None = None, ttl: float | None = None) -> None:
        self._wallets: TTLCache[WalletKey, list[Coupon]] = TTLCache(
            maxsize=settings.wallet_cache_size if maxsize is None else maxsize,
            ttl=settings.wallet_cache_ttl_seconds if ttl is None else ttl,
        )

    def __len__(self) -> int:
        return len(self._wallets)

    def is_cached(self, customer_id: str, client: BackendClient) -> bool:
        return wallet_key(client, customer_id) in self._wallets

    async def load(self, customer_id: str, client: BackendClient) -> tuple[Coupon, ...]:
        """Fetch the wallet on first use, then serve the cached copy."""
        if not self.is_cached(customer_id, client):
            return await self.refresh(customer_id, client)
        return self.snapshot(customer_id, client)

    async def refresh(self, customer_id: str, client: BackendClient) -> tuple[Coupon, ...]:
        """Replace the cached wallet with the backend's authoritative copy."""
        coupons = await client.fetch_wallet()
        self._wallets[wallet_key(client, customer_id)] = list(coupons)
        logger.info("Refreshed wallet for customer %s (%d coupons)", customer_id, len(coupons))
        return self.snapshot(customer_id, client)

    def snapshot(self, customer_id: str, client: BackendClient) -> tuple[Coupon, ...]:
        return tuple(self._wallets.get(wallet_key(client, customer_id), ()))

    def mark_used(self, customer_id: str, coupon_uuid: str, client: BackendClient) -> bool:
        """Flip a wallet coupon to used. Returns whether a coupon was found."""
        return self._set_used(wallet_key(client, customer_id), coupon_uuid, True)

    def mark_restored(self, customer_id: str, coupon_uuid: str, client: BackendClient) -> bool:
        """Flip a wallet coupon back to unused after a cancellation."""
        return self._set_used(wallet_key(client, customer_id), coupon_uuid, False)

    def _set_used(self, key: WalletKey, coupon_uuid: str, used: bool) -> bool:
        wallet = self._wallets.get(key)
        if not wallet:
            return False
        # Exactly one entry: coupons without a uuid may share a code.
        for index, coupon in enumerate(wallet):
            if coupon_uuid in (coupon.coupon_uuid, coupon.code) and coupon.used != used:
                wallet[index] = coupon.model_copy(update={"used": used})
                return True
        return False

    def clear(self, customer_id: str | None = None) -> None:
        """Drop cached wallets, for one customer or all of them."""
        if customer_id is None:
            self._wallets.clear()
            return
        for key in [k for k in self._wallets.keys() if k[1] == customer_id]:
            self._wallets.pop(key, None)
