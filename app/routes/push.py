from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional
import logging
from app.config import settings
from app.database import get_database
from app.models.push_subscription import PushSubscription
from app.models.reminder import ServiceReminder
from app.models.vehicle import Vehicle
from app.schemas.push import (
    PushSubscriptionCreate,
    UnsubscribeRequest,
    TestPushRequest,
    TestPushResponse,
)
from app.services.notification_dispatcher import NotificationDispatcher
from app.services.push_client import get_push_client
from app.services.reminder_scanner import ScannedReminder, get_latest_odometer
from app.services.urgency import classify_reminder
from app.utils.auth import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/push", tags=["push"])


@router.get("/vapid-public-key")
async def get_vapid_public_key():
    """Public key browsers need to create a push subscription"""
    if not settings.vapid_public_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Push notifications are not configured"
        )
    return {"public_key": settings.vapid_public_key}


@router.post("/subscribe")
async def subscribe(
    subscription: PushSubscriptionCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Register (or refresh) this browser's push endpoint"""
    subscription_model = PushSubscription(db)
    saved = subscription_model.upsert(user_id, subscription.model_dump(exclude={"expirationTime"}))
    logger.info(f"Push subscription saved for user {user_id}")
    return {"success": True, "id": saved["id"]}


@router.post("/unsubscribe")
async def unsubscribe(
    request: UnsubscribeRequest,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    subscription_model = PushSubscription(db)
    existing = subscription_model.get_by_endpoint(request.endpoint)
    if not existing or existing.get("user_id") != user_id:
        raise HTTPException(status_code=404, detail="Subscription not found")
    subscription_model.delete_by_endpoint(request.endpoint)
    return {"success": True}


@router.post("/test/{reminder_id}", response_model=TestPushResponse)
async def send_test_push(
    reminder_id: str,
    request: Optional[TestPushRequest] = None,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    push_client=Depends(get_push_client)
):
    """
    Push a reminder notification to the caller's devices right away,
    ignoring the cooldown window. A successful send still resets it.
    """
    if push_client is None:
        raise HTTPException(
            status_code=500,
            detail="Server is not configured to send push notifications."
        )

    reminder = ServiceReminder(db).get_by_id(reminder_id, user_id)
    if not reminder:
        raise HTTPException(status_code=404, detail="Reminder not found")
    vehicle = Vehicle(db).get_by_id(reminder["vehicle_id"], user_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")

    subscription_model = PushSubscription(db)
    endpoint = request.endpoint if request else None
    if endpoint:
        target = subscription_model.get_by_endpoint(endpoint)
        if not target or target.get("user_id") != user_id:
            raise HTTPException(status_code=404, detail="Subscription not found")
        subscriptions = [target]
    else:
        subscriptions = subscription_model.get_by_user(user_id)
    if not subscriptions:
        raise HTTPException(status_code=404, detail="No push subscriptions registered")

    current_odometer = get_latest_odometer(db, reminder["vehicle_id"])
    urgency = classify_reminder(
        reminder,
        current_odometer,
        km_threshold=settings.urgency_threshold_km,
        day_threshold=settings.urgency_threshold_days,
    )
    dispatcher = NotificationDispatcher(
        db,
        push_client,
        cooldown_hours=settings.notification_cooldown_hours,
        default_icon=settings.default_notification_icon,
    )
    report = await dispatcher.dispatch(
        ScannedReminder(reminder, vehicle, current_odometer, urgency),
        ignore_cooldown=True,
        subscriptions=subscriptions,
    )

    if report is None:
        return {"sent": False, "message": "Reminder is not overdue or due soon."}
    if endpoint and report.pruned:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="Subscription has expired or is no longer valid."
        )
    return {
        "sent": report.success,
        "delivered": report.delivered,
        "failed": report.failed,
        "pruned": report.pruned,
        "message": "Notification sent." if report.success else "Notification reached no device.",
    }
