from pymongo.collection import Collection
from pymongo import DESCENDING
from bson import ObjectId
from bson.errors import InvalidId
from typing import Optional
from app.services.trip_costs import trip_end
from app.utils.dates import utcnow


def _to_dict(trip: dict) -> dict:
    return {**{k: v for k, v in trip.items() if k != "_id"}, "id": str(trip["_id"])}


def _apply_last_stage(trip: dict) -> dict:
    if trip.get("stages"):
        trip["end_odometer"], trip["end_date"] = trip_end(trip)
    return trip


class Trip:
    def __init__(self, db):
        self.collection: Collection = db["trips"]
        self.collection.create_index("user_id")
        self.collection.create_index([("vehicle_id", 1), ("end_odometer", -1)])

    def create(self, user_id: str, vehicle_id: str, trip_data: dict):
        trip = {
            "user_id": user_id,
            "vehicle_id": vehicle_id,
            "trip_type": trip_data.get("trip_type"),
            "destination": trip_data.get("destination"),
            "notes": trip_data.get("notes"),
            "start_date": trip_data.get("start_date"),
            "start_odometer": trip_data.get("start_odometer"),
            "end_date": trip_data.get("end_date"),
            "end_odometer": trip_data.get("end_odometer"),
            "status": trip_data.get("status", "active"),
            "stages": trip_data.get("stages") or [],
            "expenses": trip_data.get("expenses") or [],
            "exchange_rate": trip_data.get("exchange_rate"),
            "created_at": utcnow(),
            "updated_at": utcnow(),
        }
        _apply_last_stage(trip)
        result = self.collection.insert_one(trip)
        return _to_dict({**trip, "_id": result.inserted_id})

    def get_by_id(self, trip_id: str, user_id: str) -> Optional[dict]:
        try:
            trip = self.collection.find_one({
                "_id": ObjectId(trip_id),
                "user_id": user_id
            })
        except (InvalidId, TypeError):
            return None
        return _to_dict(trip) if trip else None

    def get_by_vehicle(self, vehicle_id: str, user_id: str):
        trips = self.collection.find({
            "vehicle_id": vehicle_id,
            "user_id": user_id
        }).sort("start_odometer", -1)
        return [_to_dict(t) for t in trips]

    def latest_end_odometer(self, vehicle_id: str) -> Optional[float]:
        """Highest end odometer among the vehicle's completed trips."""
        trip = self.collection.find_one(
            {"vehicle_id": vehicle_id, "status": "completed", "end_odometer": {"$ne": None}},
            sort=[("end_odometer", DESCENDING)]
        )
        return trip["end_odometer"] if trip else None

    def update(self, trip_id: str, user_id: str, data: dict):
        try:
            _apply_last_stage(data)
            data["updated_at"] = utcnow()
            result = self.collection.update_one(
                {"_id": ObjectId(trip_id), "user_id": user_id},
                {"$set": data}
            )
            return result.matched_count > 0
        except InvalidId:
            return False

    def delete(self, trip_id: str, user_id: str):
        try:
            result = self.collection.delete_one({
                "_id": ObjectId(trip_id),
                "user_id": user_id
            })
            return result.deleted_count > 0
        except InvalidId:
            return False

    def delete_by_vehicle(self, vehicle_id: str, user_id: str):
        self.collection.delete_many({"vehicle_id": vehicle_id, "user_id": user_id})
