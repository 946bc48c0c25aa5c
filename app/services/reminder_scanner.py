import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, Optional

from app.models.fuel_log import FuelLog
from app.models.reminder import ServiceReminder
from app.models.trip import Trip
from app.models.vehicle import Vehicle
from app.services.cache import TTLCache
from app.services.urgency import (
    DEFAULT_DAY_THRESHOLD,
    DEFAULT_KM_THRESHOLD,
    ReminderUrgency,
    classify_reminder,
)
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


def get_latest_odometer(db, vehicle_id: str) -> Optional[float]:
    """
    Most recent known odometer for a vehicle: the higher of the last fuel log
    and the last completed trip. None when neither exists.
    """
    readings = [
        FuelLog(db).latest_odometer(vehicle_id),
        Trip(db).latest_end_odometer(vehicle_id),
    ]
    readings = [r for r in readings if r is not None]
    return max(readings) if readings else None


@dataclass
class ScannedReminder:
    reminder: dict
    vehicle: dict
    current_odometer: float
    urgency: ReminderUrgency


class ReminderScanner:
    def __init__(
        self,
        db,
        cache: Optional[TTLCache] = None,
        km_threshold: float = DEFAULT_KM_THRESHOLD,
        day_threshold: int = DEFAULT_DAY_THRESHOLD,
        now: Optional[datetime] = None,
    ):
        self.db = db
        self.cache = cache if cache is not None else TTLCache()
        self.km_threshold = km_threshold
        self.day_threshold = day_threshold
        self.now = now or utcnow()
        self.reminders = ServiceReminder(db)
        self.vehicles = Vehicle(db)

    def open_reminders(self):
        return self.reminders.get_open()

    def latest_odometer(self, vehicle_id: str) -> Optional[float]:
        return self.cache.get_or_set(
            ("odometer", vehicle_id),
            lambda: get_latest_odometer(self.db, vehicle_id)
        )

    def vehicle(self, vehicle_id: str) -> Optional[dict]:
        return self.cache.get_or_set(
            ("vehicle", vehicle_id),
            lambda: self.vehicles.get(vehicle_id)
        )

    def scan(self, reminders: Optional[Iterable[dict]] = None) -> Iterator[ScannedReminder]:
        """Yield every open reminder that can be evaluated, with its urgency."""
        if reminders is None:
            reminders = self.open_reminders()

        for reminder in reminders:
            vehicle_id = reminder.get("vehicle_id")
            vehicle = self.vehicle(vehicle_id) if vehicle_id else None
            if not vehicle:
                logger.info(f"Skipping reminder {reminder['id']}: vehicle {vehicle_id} not found")
                continue

            current_odometer = self.latest_odometer(vehicle_id)
            if not current_odometer:
                logger.debug(
                    f"Skipping reminder {reminder['id']}: no odometer reading for "
                    f"{vehicle.get('make')} {vehicle.get('model')}"
                )
                continue

            urgency = classify_reminder(
                reminder,
                current_odometer,
                km_threshold=self.km_threshold,
                day_threshold=self.day_threshold,
                now=self.now,
            )
            yield ScannedReminder(reminder, vehicle, current_odometer, urgency)
