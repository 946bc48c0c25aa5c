"""
Scheduled reminder check.

Scans every open service reminder, classifies it against the vehicle's
latest odometer and today's date, and pushes a notification for overdue or
urgent ones that are outside the cooldown window. Meant to be triggered
periodically (cron, scheduler, or POST /api/notifications/check-reminders);
each run is stateless apart from the cooldown timestamps it writes.

Usage:
    python -m app.jobs.check_reminders
"""
import asyncio
import logging
import sys
from datetime import datetime
from typing import Callable, Optional, Tuple

from app.config import Settings, settings as default_settings
from app.database import get_database
from app.services.cache import TTLCache
from app.services.notification_dispatcher import NotificationDispatcher
from app.services.push_client import WebPushClient
from app.services.reminder_scanner import ReminderScanner
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


async def check_and_send_notifications(db, settings: Settings, push_client, now: datetime) -> Tuple[int, str]:
    cache = TTLCache(ttl_seconds=settings.cache_ttl_seconds)
    scanner = ReminderScanner(
        db,
        cache=cache,
        km_threshold=settings.urgency_threshold_km,
        day_threshold=settings.urgency_threshold_days,
        now=now,
    )

    reminders = scanner.open_reminders()
    if not reminders:
        logger.info("No pending reminders found.")
        return 200, "No pending reminders found."
    logger.info(f"Found {len(reminders)} pending reminders.")

    dispatcher = NotificationDispatcher(
        db,
        push_client,
        cooldown_hours=settings.notification_cooldown_hours,
        default_icon=settings.default_notification_icon,
        cache=cache,
    )
    # Loaded once here; dispatches reuse the cached list
    if not dispatcher.get_subscriptions():
        logger.info("No active push subscriptions.")
        return 200, "No active push subscriptions."

    sent = await dispatcher.dispatch_all(scanner.scan(reminders), now=now)
    return 200, f"Cron job completed. Sent notifications for {sent} reminders."


async def run_check_reminders(
    db=None,
    settings: Optional[Settings] = None,
    push_client=None,
    now: Optional[datetime] = None,
    connect: Callable = get_database,
) -> Tuple[int, str]:
    """
    Run one reminder check, returning an HTTP-style (status_code, body).

    Without a db the job calls connect() only after the configuration check,
    so connection failures also come back as a 500 body.
    """
    settings = settings or default_settings
    logger.info("check_reminders: job triggered")

    if not settings.vapid_public_key or not settings.vapid_private_key:
        logger.error("VAPID keys are not set. Cannot send push notifications.")
        return 500, "VAPID keys are not set on the server."

    try:
        if db is None:
            db = connect()
        if push_client is None:
            push_client = WebPushClient(
                settings.vapid_private_key,
                settings.vapid_claims_email,
                timeout=settings.push_timeout_seconds,
            )
        status_code, body = await check_and_send_notifications(db, settings, push_client, now or utcnow())
        logger.info(f"check_reminders: {body}")
        return status_code, body
    except Exception as e:
        logger.exception("check_reminders: error during execution")
        return 500, f"Internal server error: {e}"


def main():
    logging.basicConfig(level=logging.INFO)
    status_code, body = asyncio.run(run_check_reminders())
    print(body)
    return 0 if status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
