"""
Service reminder urgency.

Every consumer that needs to know whether a reminder is overdue or due soon
(reminder listings, the urgent-services summary, the notification job) goes
through classify_reminder so the rules live in one place.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from app.utils.dates import as_utc, utcnow

DEFAULT_KM_THRESHOLD = 1000
DEFAULT_DAY_THRESHOLD = 15

SECONDS_PER_DAY = 24 * 60 * 60


class UrgencyStatus(str, Enum):
    OVERDUE = "overdue"
    URGENT = "urgent"
    NORMAL = "normal"


@dataclass(frozen=True)
class ReminderUrgency:
    status: UrgencyStatus
    kms_remaining: Optional[float] = None
    days_remaining: Optional[int] = None

    @property
    def is_overdue(self) -> bool:
        return self.status is UrgencyStatus.OVERDUE

    @property
    def is_urgent(self) -> bool:
        return self.status is UrgencyStatus.URGENT

    @property
    def needs_attention(self) -> bool:
        return self.status is not UrgencyStatus.NORMAL


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole days from earlier to later, truncated toward zero."""
    return int((later - earlier).total_seconds() / SECONDS_PER_DAY)


def classify(
    due_odometer: Optional[float],
    due_date,
    current_odometer: Optional[float],
    km_threshold: float = DEFAULT_KM_THRESHOLD,
    day_threshold: int = DEFAULT_DAY_THRESHOLD,
    now: Optional[datetime] = None,
) -> ReminderUrgency:
    now = as_utc(now) or utcnow()

    kms_remaining = None
    if due_odometer is not None and current_odometer is not None:
        kms_remaining = due_odometer - current_odometer

    days_remaining = None
    due = as_utc(due_date)
    if due is not None:
        days_remaining = days_between(due, now)

    is_overdue = (
        (kms_remaining is not None and kms_remaining < 0)
        or (days_remaining is not None and days_remaining < 0)
    )
    is_urgent = not is_overdue and (
        (kms_remaining is not None and kms_remaining <= km_threshold)
        or (days_remaining is not None and days_remaining <= day_threshold)
    )

    if is_overdue:
        status = UrgencyStatus.OVERDUE
    elif is_urgent:
        status = UrgencyStatus.URGENT
    else:
        status = UrgencyStatus.NORMAL
    return ReminderUrgency(status, kms_remaining, days_remaining)


def classify_reminder(
    reminder: dict,
    current_odometer: Optional[float],
    km_threshold: float = DEFAULT_KM_THRESHOLD,
    day_threshold: int = DEFAULT_DAY_THRESHOLD,
    now: Optional[datetime] = None,
) -> ReminderUrgency:
    """Classify a stored reminder document; completed reminders are always normal."""
    if reminder.get("is_completed"):
        return ReminderUrgency(UrgencyStatus.NORMAL)
    return classify(
        reminder.get("due_odometer"),
        reminder.get("due_date"),
        current_odometer,
        km_threshold=km_threshold,
        day_threshold=day_threshold,
        now=now,
    )
