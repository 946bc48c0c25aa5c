import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from app.models.push_subscription import PushSubscription
from app.models.reminder import ServiceReminder
from app.services.cache import TTLCache
from app.services.push_client import PushDeliveryError
from app.services.reminder_scanner import ScannedReminder
from app.services.urgency import ReminderUrgency
from app.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)

SUBSCRIPTIONS_CACHE_KEY = "subscriptions"


def in_cooldown(last_sent, cooldown_hours: float, now: datetime) -> bool:
    """True while less than cooldown_hours have passed since last_sent."""
    last_sent = as_utc(last_sent)
    if last_sent is None:
        return False
    return now - last_sent < timedelta(hours=cooldown_hours)


def build_payload(reminder: dict, vehicle: dict, urgency: ReminderUrgency, default_icon: str) -> dict:
    title = f"Service alert: {vehicle.get('make', '')} {vehicle.get('model', '')}".strip()
    status_text = "Service overdue!" if urgency.is_overdue else "Service due soon!"
    return {
        "title": title,
        "body": f"{reminder.get('service_type')} - {status_text}",
        "icon": vehicle.get("image_url") or default_icon,
        "tag": reminder["id"],
    }


@dataclass
class DeliveryReport:
    delivered: int = 0
    failed: int = 0
    pruned: int = 0

    @property
    def success(self) -> bool:
        return self.delivered > 0


class NotificationDispatcher:
    """
    Fans reminder notifications out to every registered push subscription,
    whoever owns it. Callers wanting one user's devices pass subscriptions
    explicitly, as the test-send route does.

    Subscriptions that the push service reports as gone are deleted; any
    other failure is logged and left for the next run. The reminder's
    cooldown only advances when at least one device received the push.
    """

    def __init__(
        self,
        db,
        push_client,
        cooldown_hours: float = 1,
        default_icon: str = "/icon-192x192.png",
        cache: Optional[TTLCache] = None,
    ):
        self.push_client = push_client
        self.cooldown_hours = cooldown_hours
        self.default_icon = default_icon
        self.cache = cache if cache is not None else TTLCache()
        self.reminders = ServiceReminder(db)
        self.subscriptions = PushSubscription(db)
        self.sent_count = 0

    def get_subscriptions(self) -> List[dict]:
        return self.cache.get_or_set(SUBSCRIPTIONS_CACHE_KEY, self.subscriptions.get_all)

    async def deliver(self, payload: dict, subscriptions: List[dict]) -> DeliveryReport:
        report = DeliveryReport()
        results = await asyncio.gather(
            *(self.push_client.send(s, payload) for s in subscriptions),
            return_exceptions=True
        )

        for subscription, result in zip(subscriptions, results):
            if not isinstance(result, BaseException):
                report.delivered += 1
                continue

            report.failed += 1
            if isinstance(result, PushDeliveryError) and result.permanent:
                logger.info(f"Subscription expired ({result.status_code}), deleting {subscription['endpoint'][:60]}")
                if self.subscriptions.delete_by_endpoint(subscription["endpoint"]):
                    report.pruned += 1
            else:
                logger.error(f"Failed to send notification {payload.get('tag')}: {result}")

        if report.pruned:
            self.cache.invalidate(SUBSCRIPTIONS_CACHE_KEY)
        return report

    async def dispatch(
        self,
        item: ScannedReminder,
        now: Optional[datetime] = None,
        ignore_cooldown: bool = False,
        subscriptions: Optional[List[dict]] = None,
    ) -> Optional[DeliveryReport]:
        """
        Notify about one reminder, returning the delivery report, or None when
        the reminder was skipped (not due, cooling down, nobody subscribed).
        """
        now = now or utcnow()
        reminder = item.reminder

        if not item.urgency.needs_attention:
            logger.debug(f"Reminder {reminder['id']} is not due for notification yet")
            return None

        if not ignore_cooldown and in_cooldown(reminder.get("last_notification_sent"), self.cooldown_hours, now):
            logger.info(
                f"Skipping notification for \"{reminder.get('service_type')}\" ({reminder['id']}): "
                f"cooldown of {self.cooldown_hours}h active"
            )
            return None

        if subscriptions is None:
            subscriptions = self.get_subscriptions()
        if not subscriptions:
            logger.info("No active push subscriptions")
            return None

        payload = build_payload(reminder, item.vehicle, item.urgency, self.default_icon)
        report = await self.deliver(payload, subscriptions)
        if not report.success:
            logger.warning(f"Notification for reminder {reminder['id']} reached no device")
            return report

        self.reminders.mark_notified(reminder["id"], now)
        self.sent_count += 1
        logger.info(
            f"Notification sent for \"{reminder.get('service_type')}\" on "
            f"{item.vehicle.get('make')} {item.vehicle.get('model')} "
            f"({report.delivered} delivered, {report.failed} failed)"
        )
        return report

    async def dispatch_all(self, items: Iterable[ScannedReminder], now: Optional[datetime] = None) -> int:
        # Reminders go one at a time; only the per-reminder fan-out is concurrent
        for item in items:
            await self.dispatch(item, now=now)
        return self.sent_count
