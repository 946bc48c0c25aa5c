from pydantic import BaseModel, Field
from typing import Optional


class SubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionCreate(BaseModel):
    endpoint: str = Field(..., min_length=1)
    keys: SubscriptionKeys
    expirationTime: Optional[float] = None  # sent by the browser, unused


class UnsubscribeRequest(BaseModel):
    endpoint: str = Field(..., min_length=1)


class TestPushRequest(BaseModel):
    endpoint: Optional[str] = Field(None, description="Only push to this endpoint")


class TestPushResponse(BaseModel):
    sent: bool
    delivered: int = 0
    failed: int = 0
    pruned: int = 0
    message: str
