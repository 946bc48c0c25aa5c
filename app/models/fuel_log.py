from pymongo.collection import Collection
from pymongo import DESCENDING
from bson import ObjectId
from bson.errors import InvalidId
from typing import Optional
from app.utils.dates import utcnow


def _to_dict(log: dict) -> dict:
    return {**{k: v for k, v in log.items() if k != "_id"}, "id": str(log["_id"])}


class FuelLog:
    def __init__(self, db):
        self.collection: Collection = db["fuel_logs"]
        self.collection.create_index("user_id")
        self.collection.create_index([("vehicle_id", 1), ("odometer", -1)])

    def create(self, user_id: str, vehicle_id: str, fuel_data: dict):
        liters = fuel_data.get("liters")
        total_cost = fuel_data.get("total_cost")
        price_per_liter = fuel_data.get("price_per_liter")
        if not price_per_liter and liters and total_cost:
            price_per_liter = round(total_cost / liters, 3)

        fuel_log = {
            "user_id": user_id,
            "vehicle_id": vehicle_id,
            "date": fuel_data.get("date") or utcnow(),
            "odometer": fuel_data.get("odometer"),
            "fuel_type": fuel_data.get("fuel_type"),
            "liters": liters,
            "price_per_liter": price_per_liter,
            "total_cost": total_cost,
            "is_fill_up": fuel_data.get("is_fill_up", True),
            "missed_previous_fill_up": fuel_data.get("missed_previous_fill_up", False),
            "gas_station": fuel_data.get("gas_station"),
            "exchange_rate": fuel_data.get("exchange_rate"),
            "created_at": utcnow(),
            "updated_at": utcnow(),
        }
        result = self.collection.insert_one(fuel_log)
        return _to_dict({**fuel_log, "_id": result.inserted_id})

    def get_by_id(self, fuel_log_id: str, user_id: str) -> Optional[dict]:
        try:
            fuel_log = self.collection.find_one({
                "_id": ObjectId(fuel_log_id),
                "user_id": user_id
            })
        except (InvalidId, TypeError):
            return None
        return _to_dict(fuel_log) if fuel_log else None

    def get_by_vehicle(self, vehicle_id: str, user_id: Optional[str] = None):
        query = {"vehicle_id": vehicle_id}
        if user_id is not None:
            query["user_id"] = user_id
        return [_to_dict(log) for log in self.collection.find(query).sort("odometer", 1)]

    def latest_odometer(self, vehicle_id: str) -> Optional[float]:
        """Highest odometer reading logged for the vehicle, None without logs."""
        log = self.collection.find_one(
            {"vehicle_id": vehicle_id, "odometer": {"$ne": None}},
            sort=[("odometer", DESCENDING)]
        )
        return log["odometer"] if log else None

    def update(self, fuel_log_id: str, user_id: str, data: dict):
        try:
            data["updated_at"] = utcnow()
            result = self.collection.update_one(
                {"_id": ObjectId(fuel_log_id), "user_id": user_id},
                {"$set": data}
            )
            return result.matched_count > 0
        except InvalidId:
            return False

    def delete(self, fuel_log_id: str, user_id: str):
        try:
            result = self.collection.delete_one({
                "_id": ObjectId(fuel_log_id),
                "user_id": user_id
            })
            return result.deleted_count > 0
        except InvalidId:
            return False

    def delete_by_vehicle(self, vehicle_id: str, user_id: str):
        self.collection.delete_many({"vehicle_id": vehicle_id, "user_id": user_id})
