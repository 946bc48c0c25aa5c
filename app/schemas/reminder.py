from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class ReminderCreate(BaseModel):
    service_type: str
    notes: Optional[str] = ""
    due_odometer: Optional[float] = Field(None, gt=0)
    due_date: Optional[datetime] = None


class ReminderUpdate(BaseModel):
    service_type: Optional[str] = None
    notes: Optional[str] = None
    due_odometer: Optional[float] = Field(None, gt=0)
    due_date: Optional[datetime] = None


class ReminderComplete(BaseModel):
    completed_date: Optional[datetime] = None
    completed_odometer: Optional[float] = Field(None, gt=0)
    service_cost: Optional[float] = Field(None, ge=0)
    service_location: Optional[str] = None
    notes: Optional[str] = None


class ReminderResponse(BaseModel):
    id: str
    vehicle_id: str
    service_type: str
    notes: Optional[str] = None
    due_odometer: Optional[float] = None
    due_date: Optional[datetime] = None
    is_completed: bool
    completed_date: Optional[datetime] = None
    completed_odometer: Optional[float] = None
    service_cost: Optional[float] = None
    service_location: Optional[str] = None
    last_notification_sent: Optional[datetime] = None
    # Derived against the vehicle's latest odometer
    urgency: str = "normal"
    is_overdue: bool = False
    is_urgent: bool = False
    kms_remaining: Optional[float] = None
    days_remaining: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UrgentRemindersResponse(BaseModel):
    current_odometer: Optional[float] = None
    overdue_count: int
    urgent_count: int
    reminders: List[ReminderResponse]
