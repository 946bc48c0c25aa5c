import asyncio
import json
from typing import Optional

from pywebpush import webpush, WebPushException

from app.config import settings

# Push services answer 404/410 once a browser subscription is gone for good
PERMANENT_FAILURE_CODES = {404, 410}


class PushDeliveryError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def permanent(self) -> bool:
        return self.status_code in PERMANENT_FAILURE_CODES


class WebPushClient:
    """Async wrapper around pywebpush for VAPID-signed Web Push delivery."""

    def __init__(self, vapid_private_key: str, vapid_claims_email: str, timeout: Optional[float] = None):
        self.vapid_private_key = vapid_private_key
        self.vapid_claims_email = vapid_claims_email
        self.timeout = timeout

    def _send_sync(self, subscription: dict, data: str):
        try:
            webpush(
                subscription_info={
                    "endpoint": subscription["endpoint"],
                    "keys": subscription.get("keys") or {},
                },
                data=data,
                vapid_private_key=self.vapid_private_key,
                # pywebpush fills in aud/exp on the dict it receives
                vapid_claims={"sub": self.vapid_claims_email},
                timeout=self.timeout,
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None
            raise PushDeliveryError(str(e), status_code=status_code) from e

    async def send(self, subscription: dict, payload: dict):
        """Deliver one payload to one subscription, raising PushDeliveryError on failure."""
        data = json.dumps(payload)
        await asyncio.to_thread(self._send_sync, subscription, data)


def get_push_client() -> Optional[WebPushClient]:
    """Push client built from settings, None when VAPID keys are missing"""
    if not settings.vapid_public_key or not settings.vapid_private_key:
        return None
    return WebPushClient(
        settings.vapid_private_key,
        settings.vapid_claims_email,
        timeout=settings.push_timeout_seconds,
    )
