"""Shared fixtures: an in-memory MongoDB, a fake push client and seed helpers."""
from datetime import datetime, timezone

import mongomock
import pytest

from app.config import Settings
from app.models.fuel_log import FuelLog
from app.models.push_subscription import PushSubscription
from app.models.reminder import ServiceReminder
from app.models.trip import Trip
from app.models.vehicle import Vehicle
from app.services.push_client import PushDeliveryError

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
USER_ID = "user-1"


class FakePushClient:
    """Records deliveries; endpoints listed in failures raise with that status."""

    def __init__(self, failures=None):
        self.failures = dict(failures or {})
        self.sent = []
        self.attempts = []

    async def send(self, subscription, payload):
        self.attempts.append(subscription["endpoint"])
        status_code = self.failures.get(subscription["endpoint"])
        if status_code is not None:
            raise PushDeliveryError(f"Push failed with {status_code}", status_code=status_code)
        self.sent.append((subscription["endpoint"], payload))


@pytest.fixture
def db():
    return mongomock.MongoClient().db


@pytest.fixture
def push_client():
    return FakePushClient()


@pytest.fixture
def job_settings():
    return Settings(
        _env_file=None,
        vapid_public_key="test-public-key",
        vapid_private_key="test-private-key",
        urgency_threshold_km=1000,
        urgency_threshold_days=15,
        notification_cooldown_hours=1,
    )


@pytest.fixture
def make_vehicle(db):
    def _make(user_id=USER_ID, **fields):
        data = {
            "make": "Toyota",
            "model": "Corolla",
            "year": 2020,
            "plate": "AB123CD",
            "fuel_capacity_liters": 50,
            "average_consumption_km_per_liter": 12,
        }
        data.update(fields)
        return Vehicle(db).create(user_id, data)
    return _make


@pytest.fixture
def make_fuel_log(db):
    def _make(vehicle, odometer, liters=40, total_cost=4000, is_fill_up=True, date=NOW, **fields):
        data = {
            "odometer": odometer,
            "liters": liters,
            "total_cost": total_cost,
            "is_fill_up": is_fill_up,
            "fuel_type": "Gasoline",
            "date": date,
        }
        data.update(fields)
        return FuelLog(db).create(vehicle["user_id"], vehicle["id"], data)
    return _make


@pytest.fixture
def make_reminder(db):
    def _make(vehicle, service_type="Oil change", due_odometer=None, due_date=None, last_notification_sent=None):
        model = ServiceReminder(db)
        reminder = model.create(vehicle["user_id"], vehicle["id"], {
            "service_type": service_type,
            "due_odometer": due_odometer,
            "due_date": due_date,
        })
        if last_notification_sent is not None:
            model.mark_notified(reminder["id"], last_notification_sent)
            reminder = model.get(reminder["id"])
        return reminder
    return _make


@pytest.fixture
def make_trip(db):
    def _make(vehicle, start_odometer, end_odometer=None, status="completed", **fields):
        data = {
            "trip_type": "Vacation",
            "destination": "Coast",
            "start_date": NOW,
            "start_odometer": start_odometer,
            "end_odometer": end_odometer,
            "status": status,
        }
        data.update(fields)
        return Trip(db).create(vehicle["user_id"], vehicle["id"], data)
    return _make


@pytest.fixture
def make_subscription(db):
    def _make(endpoint, user_id=USER_ID):
        return PushSubscription(db).upsert(user_id, {
            "endpoint": endpoint,
            "keys": {"p256dh": "key", "auth": "secret"},
        })
    return _make
