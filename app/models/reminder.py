from pymongo.collection import Collection
from bson import ObjectId
from bson.errors import InvalidId
from datetime import datetime
from typing import Optional
from app.utils.dates import utcnow


def _to_dict(reminder: dict) -> dict:
    return {**{k: v for k, v in reminder.items() if k != "_id"}, "id": str(reminder["_id"])}


class ServiceReminder:
    def __init__(self, db):
        self.collection: Collection = db["service_reminders"]
        self.collection.create_index("vehicle_id")
        self.collection.create_index("user_id")
        self.collection.create_index("is_completed")

    def create(self, user_id: str, vehicle_id: str, reminder_data: dict):
        reminder = {
            "user_id": user_id,
            "vehicle_id": vehicle_id,
            "service_type": reminder_data.get("service_type"),
            "notes": reminder_data.get("notes", ""),
            "due_odometer": reminder_data.get("due_odometer"),
            "due_date": reminder_data.get("due_date"),
            "is_completed": False,
            "completed_date": None,
            "completed_odometer": None,
            "service_cost": None,
            "service_location": None,
            "last_notification_sent": None,
            "created_at": utcnow(),
            "updated_at": utcnow(),
        }
        result = self.collection.insert_one(reminder)
        return _to_dict({**reminder, "_id": result.inserted_id})

    def get(self, reminder_id: str) -> Optional[dict]:
        try:
            reminder = self.collection.find_one({"_id": ObjectId(reminder_id)})
        except (InvalidId, TypeError):
            return None
        return _to_dict(reminder) if reminder else None

    def get_by_id(self, reminder_id: str, user_id: str) -> Optional[dict]:
        try:
            reminder = self.collection.find_one({
                "_id": ObjectId(reminder_id),
                "user_id": user_id
            })
        except (InvalidId, TypeError):
            return None
        return _to_dict(reminder) if reminder else None

    def get_by_vehicle(self, vehicle_id: str, user_id: str, include_completed: bool = True):
        query = {"vehicle_id": vehicle_id, "user_id": user_id}
        if not include_completed:
            query["is_completed"] = False
        return [_to_dict(r) for r in self.collection.find(query)]

    def get_open(self):
        """All pending reminders across every vehicle and user."""
        return [_to_dict(r) for r in self.collection.find({"is_completed": False})]

    def update(self, reminder_id: str, user_id: str, data: dict):
        try:
            data["updated_at"] = utcnow()
            result = self.collection.update_one(
                {"_id": ObjectId(reminder_id), "user_id": user_id},
                {"$set": data}
            )
            return result.matched_count > 0
        except InvalidId:
            return False

    def complete(self, reminder_id: str, user_id: str, completion: dict):
        data = {
            "is_completed": True,
            "completed_date": completion.get("completed_date") or utcnow(),
            "completed_odometer": completion.get("completed_odometer"),
            "service_cost": completion.get("service_cost"),
            "service_location": completion.get("service_location"),
        }
        if completion.get("notes"):
            data["notes"] = completion["notes"]
        return self.update(reminder_id, user_id, data)

    def mark_notified(self, reminder_id: str, sent_at: datetime):
        """Persist the cooldown timestamp after a successful dispatch."""
        self.collection.update_one(
            {"_id": ObjectId(reminder_id)},
            {"$set": {"last_notification_sent": sent_at}}
        )

    def delete(self, reminder_id: str, user_id: str):
        try:
            result = self.collection.delete_one({
                "_id": ObjectId(reminder_id),
                "user_id": user_id
            })
            return result.deleted_count > 0
        except InvalidId:
            return False

    def delete_by_vehicle(self, vehicle_id: str, user_id: str):
        self.collection.delete_many({"vehicle_id": vehicle_id, "user_id": user_id})
