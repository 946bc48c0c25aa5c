from pymongo.collection import Collection
from typing import List, Optional
from app.utils.dates import utcnow


def _to_dict(subscription: dict) -> dict:
    return {
        "id": str(subscription["_id"]),
        "endpoint": subscription["endpoint"],
        "keys": subscription.get("keys") or {},
        "user_id": subscription.get("user_id"),
        "created_at": subscription.get("created_at"),
    }


class PushSubscription:
    """Browser push endpoints, one document per endpoint."""

    def __init__(self, db):
        self.collection: Collection = db["push_subscriptions"]
        self.collection.create_index("endpoint", unique=True)
        self.collection.create_index("user_id")

    def upsert(self, user_id: str, subscription_data: dict):
        endpoint = subscription_data["endpoint"]
        self.collection.update_one(
            {"endpoint": endpoint},
            {
                "$set": {
                    "user_id": user_id,
                    "keys": subscription_data.get("keys") or {},
                    "updated_at": utcnow(),
                },
                "$setOnInsert": {"endpoint": endpoint, "created_at": utcnow()},
            },
            upsert=True
        )
        return self.get_by_endpoint(endpoint)

    def get_by_endpoint(self, endpoint: str) -> Optional[dict]:
        subscription = self.collection.find_one({"endpoint": endpoint})
        return _to_dict(subscription) if subscription else None

    def get_all(self) -> List[dict]:
        return [_to_dict(s) for s in self.collection.find({})]

    def get_by_user(self, user_id: str) -> List[dict]:
        return [_to_dict(s) for s in self.collection.find({"user_id": user_id})]

    def delete_by_endpoint(self, endpoint: str) -> bool:
        result = self.collection.delete_one({"endpoint": endpoint})
        return result.deleted_count > 0
