"""Errors raised by the hotel backend client."""

from typing import Any

import httpx


class BackendApiError(Exception):
    """A backend call failed: non-2xx response, malformed body or network error."""

    def __init__(self, status_code: int, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload

    @classmethod
    def from_response(cls, response: httpx.Response, default_message: str) -> "BackendApiError":
        """Prefer the backend's own ``message`` field over ``default_message``."""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        message = default_message
        if isinstance(payload, dict) and payload.get("message"):
            message = str(payload["message"])
        return cls(response.status_code, message, payload)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class CouponConsumptionError(BackendApiError):
    """The coupon-use call failed after the reservation was created."""
