from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional
from app.config import settings
from app.database import get_database
from app.models.reminder import ServiceReminder
from app.models.vehicle import Vehicle
from app.schemas.reminder import (
    ReminderCreate,
    ReminderUpdate,
    ReminderComplete,
    ReminderResponse,
    UrgentRemindersResponse,
)
from app.services.reminder_scanner import get_latest_odometer
from app.services.urgency import classify_reminder
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


def urgency_thresholds(
    km_threshold: Optional[float] = Query(None, ge=0),
    day_threshold: Optional[int] = Query(None, ge=0),
):
    """Per-request threshold overrides, defaulting to the configured ones"""
    return (
        km_threshold if km_threshold is not None else settings.urgency_threshold_km,
        day_threshold if day_threshold is not None else settings.urgency_threshold_days,
    )


def with_urgency(reminder: dict, current_odometer: Optional[float], thresholds) -> dict:
    km_threshold, day_threshold = thresholds
    urgency = classify_reminder(
        reminder,
        current_odometer,
        km_threshold=km_threshold,
        day_threshold=day_threshold,
    )
    return {
        **reminder,
        "urgency": urgency.status.value,
        "is_overdue": urgency.is_overdue,
        "is_urgent": urgency.is_urgent,
        "kms_remaining": urgency.kms_remaining,
        "days_remaining": urgency.days_remaining,
    }


def _verify_vehicle(db, vehicle_id: str, user_id: str):
    vehicle = Vehicle(db).get_by_id(vehicle_id, user_id)
    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )
    return vehicle


def _get_reminder_or_404(db, reminder_id: str, user_id: str):
    reminder = ServiceReminder(db).get_by_id(reminder_id, user_id)
    if not reminder:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Reminder not found"
        )
    return reminder


@router.get("/vehicle/{vehicle_id}", response_model=List[ReminderResponse])
async def get_reminders(
    vehicle_id: str,
    include_completed: bool = True,
    thresholds=Depends(urgency_thresholds),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    _verify_vehicle(db, vehicle_id, user_id)

    reminder_model = ServiceReminder(db)
    reminders = reminder_model.get_by_vehicle(vehicle_id, user_id, include_completed=include_completed)
    current_odometer = get_latest_odometer(db, vehicle_id)
    return [with_urgency(r, current_odometer, thresholds) for r in reminders]


@router.get("/vehicle/{vehicle_id}/urgent", response_model=UrgentRemindersResponse)
async def get_urgent_reminders(
    vehicle_id: str,
    thresholds=Depends(urgency_thresholds),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Pending reminders that are overdue or due soon, overdue first"""
    _verify_vehicle(db, vehicle_id, user_id)

    reminder_model = ServiceReminder(db)
    current_odometer = get_latest_odometer(db, vehicle_id)
    reminders = [
        with_urgency(r, current_odometer, thresholds)
        for r in reminder_model.get_by_vehicle(vehicle_id, user_id, include_completed=False)
    ]
    flagged = [r for r in reminders if r["is_overdue"] or r["is_urgent"]]
    flagged.sort(key=lambda r: not r["is_overdue"])

    overdue_count = sum(1 for r in flagged if r["is_overdue"])
    return {
        "current_odometer": current_odometer,
        "overdue_count": overdue_count,
        "urgent_count": len(flagged) - overdue_count,
        "reminders": flagged,
    }


@router.post("/vehicle/{vehicle_id}", response_model=ReminderResponse, status_code=status.HTTP_201_CREATED)
async def create_reminder(
    vehicle_id: str,
    reminder: ReminderCreate,
    thresholds=Depends(urgency_thresholds),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    _verify_vehicle(db, vehicle_id, user_id)

    reminder_model = ServiceReminder(db)
    created_reminder = reminder_model.create(user_id, vehicle_id, reminder.model_dump())
    return with_urgency(created_reminder, get_latest_odometer(db, vehicle_id), thresholds)


@router.get("/{reminder_id}", response_model=ReminderResponse)
async def get_reminder(
    reminder_id: str,
    thresholds=Depends(urgency_thresholds),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    reminder = _get_reminder_or_404(db, reminder_id, user_id)
    return with_urgency(reminder, get_latest_odometer(db, reminder["vehicle_id"]), thresholds)


@router.put("/{reminder_id}", response_model=ReminderResponse)
async def update_reminder(
    reminder_id: str,
    reminder_update: ReminderUpdate,
    thresholds=Depends(urgency_thresholds),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    _get_reminder_or_404(db, reminder_id, user_id)

    reminder_model = ServiceReminder(db)
    update_data = reminder_update.model_dump(exclude_unset=True)
    if not reminder_model.update(reminder_id, user_id, update_data):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to update reminder"
        )

    updated_reminder = reminder_model.get_by_id(reminder_id, user_id)
    return with_urgency(updated_reminder, get_latest_odometer(db, updated_reminder["vehicle_id"]), thresholds)


@router.post("/{reminder_id}/complete", response_model=ReminderResponse)
async def complete_reminder(
    reminder_id: str,
    completion: ReminderComplete,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Record that the service was done; completed reminders never notify"""
    reminder = _get_reminder_or_404(db, reminder_id, user_id)
    if reminder.get("is_completed"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Reminder already completed"
        )

    reminder_model = ServiceReminder(db)
    reminder_model.complete(reminder_id, user_id, completion.model_dump())
    return with_urgency(reminder_model.get_by_id(reminder_id, user_id), None, (0, 0))


@router.delete("/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reminder(
    reminder_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    reminder_model = ServiceReminder(db)
    if not reminder_model.delete(reminder_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Reminder not found"
        )
    return None
