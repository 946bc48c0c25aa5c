from pymongo.collection import Collection
from bson import ObjectId
from bson.errors import InvalidId
from typing import Optional
from app.utils.dates import utcnow

FINANCIAL_FIELDS = (
    "purchase_price",
    "resale_value",
    "km_per_year",
    "useful_life_years",
    "annual_insurance_cost",
    "annual_patent_cost",
    "maintenance_cost",
    "maintenance_km",
    "tires_cost",
    "tires_km",
)


def _to_dict(vehicle: dict) -> dict:
    return {**{k: v for k, v in vehicle.items() if k != "_id"}, "id": str(vehicle["_id"])}


class Vehicle:
    def __init__(self, db):
        self.collection: Collection = db["vehicles"]
        self.collection.create_index("user_id")

    def create(self, user_id: str, vehicle_data: dict):
        vehicle = {
            "user_id": user_id,
            "make": vehicle_data.get("make"),
            "model": vehicle_data.get("model"),
            "year": vehicle_data.get("year"),
            "plate": vehicle_data.get("plate"),
            "fuel_capacity_liters": vehicle_data.get("fuel_capacity_liters", 0),
            "average_consumption_km_per_liter": vehicle_data.get("average_consumption_km_per_liter", 0),
            "image_url": vehicle_data.get("image_url"),
            "created_at": utcnow(),
            "updated_at": utcnow(),
        }
        for field in FINANCIAL_FIELDS:
            vehicle[field] = vehicle_data.get(field)
        result = self.collection.insert_one(vehicle)
        return _to_dict({**vehicle, "_id": result.inserted_id})

    def get(self, vehicle_id: str) -> Optional[dict]:
        """Fetch a vehicle regardless of owner (used by the reminder job)."""
        try:
            vehicle = self.collection.find_one({"_id": ObjectId(vehicle_id)})
        except (InvalidId, TypeError):
            return None
        return _to_dict(vehicle) if vehicle else None

    def get_by_id(self, vehicle_id: str, user_id: str) -> Optional[dict]:
        try:
            vehicle = self.collection.find_one({
                "_id": ObjectId(vehicle_id),
                "user_id": user_id
            })
        except (InvalidId, TypeError):
            return None
        return _to_dict(vehicle) if vehicle else None

    def get_all_by_user(self, user_id: str):
        return [_to_dict(v) for v in self.collection.find({"user_id": user_id})]

    def update(self, vehicle_id: str, user_id: str, data: dict):
        try:
            data["updated_at"] = utcnow()
            result = self.collection.update_one(
                {"_id": ObjectId(vehicle_id), "user_id": user_id},
                {"$set": data}
            )
            return result.matched_count > 0
        except InvalidId:
            return False

    def delete(self, vehicle_id: str, user_id: str):
        try:
            result = self.collection.delete_one({
                "_id": ObjectId(vehicle_id),
                "user_id": user_id
            })
            return result.deleted_count > 0
        except InvalidId:
            return False
