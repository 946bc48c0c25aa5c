"""End-to-end tests for the scheduled reminder check."""
import asyncio
from datetime import timedelta

from app.config import Settings
from app.jobs.check_reminders import run_check_reminders
from app.models.push_subscription import PushSubscription
from app.models.reminder import ServiceReminder
from app.utils.dates import as_utc
from conftest import NOW, FakePushClient


def _run(db, settings, client, now=NOW):
    return asyncio.run(run_check_reminders(db=db, settings=settings, push_client=client, now=now))


class TestConfiguration:
    def test_missing_vapid_keys_is_fatal(self, db, push_client, make_vehicle, make_fuel_log, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        reminder = make_reminder(vehicle, due_odometer=49000)
        make_subscription("https://push/a")

        settings = Settings(_env_file=None, vapid_public_key="pub", vapid_private_key=None)
        status_code, body = _run(db, settings, push_client)

        assert status_code == 500
        assert body == "VAPID keys are not set on the server."
        assert push_client.attempts == []
        assert ServiceReminder(db).get(reminder["id"])["last_notification_sent"] is None

    def test_unhandled_error_returns_500(self, job_settings, push_client):
        class BrokenDb:
            def __getitem__(self, name):
                raise RuntimeError("database unavailable")

        status_code, body = _run(BrokenDb(), job_settings, push_client)

        assert status_code == 500
        assert body == "Internal server error: database unavailable"


    def test_missing_keys_never_connects(self, push_client):
        def connect():
            raise AssertionError("should not connect")

        settings = Settings(_env_file=None, vapid_public_key=None, vapid_private_key=None)
        status_code, body = asyncio.run(run_check_reminders(settings=settings, push_client=push_client, connect=connect))

        assert (status_code, body) == (500, "VAPID keys are not set on the server.")

    def test_connection_failure_returns_500(self, job_settings, push_client):
        def connect():
            raise RuntimeError("Database not connected")

        status_code, body = asyncio.run(run_check_reminders(settings=job_settings, push_client=push_client, connect=connect))

        assert status_code == 500
        assert body == "Internal server error: Database not connected"


class TestRun:
    def test_no_pending_reminders(self, db, job_settings, push_client):
        assert _run(db, job_settings, push_client) == (200, "No pending reminders found.")

    def test_no_subscriptions(self, db, job_settings, push_client, make_vehicle, make_fuel_log, make_reminder):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        make_reminder(vehicle, due_odometer=49000)
        assert _run(db, job_settings, push_client) == (200, "No active push subscriptions.")

    def test_urgent_overdue_and_normal(self, db, job_settings, push_client, make_vehicle, make_fuel_log, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        urgent = make_reminder(vehicle, "Oil change", due_odometer=50500)
        overdue = make_reminder(vehicle, "Brakes", due_odometer=49000)
        normal = make_reminder(vehicle, "Timing belt", due_odometer=60000)
        make_subscription("https://push/a")

        status_code, body = _run(db, job_settings, push_client)

        assert status_code == 200
        assert body == "Cron job completed. Sent notifications for 2 reminders."
        bodies = sorted(payload["body"] for _, payload in push_client.sent)
        assert bodies == ["Brakes - Service overdue!", "Oil change - Service due soon!"]
        reminders = ServiceReminder(db)
        assert as_utc(reminders.get(urgent["id"])["last_notification_sent"]) == NOW
        assert as_utc(reminders.get(overdue["id"])["last_notification_sent"]) == NOW
        assert reminders.get(normal["id"])["last_notification_sent"] is None

    def test_reminder_without_due_fields_is_ignored(self, db, job_settings, push_client, make_vehicle, make_fuel_log, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        make_reminder(vehicle, "Wash")
        make_subscription("https://push/a")

        assert _run(db, job_settings, push_client)[1].endswith("Sent notifications for 0 reminders.")
        assert push_client.sent == []

    def test_vehicle_without_odometer_is_skipped(self, db, job_settings, push_client, make_vehicle, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_reminder(vehicle, due_date=NOW - timedelta(days=3))
        make_subscription("https://push/a")

        status_code, _ = _run(db, job_settings, push_client)

        assert status_code == 200
        assert push_client.sent == []

    def test_trip_odometer_counts(self, db, job_settings, push_client, make_vehicle, make_fuel_log, make_trip, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 48000)
        make_trip(vehicle, 48000, 50000)
        make_reminder(vehicle, due_odometer=49500)
        make_subscription("https://push/a")

        _run(db, job_settings, push_client)

        assert push_client.sent[0][1]["body"].endswith("Service overdue!")

    def test_second_run_within_cooldown_sends_nothing(self, db, job_settings, make_vehicle, make_fuel_log, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        make_reminder(vehicle, due_odometer=50500)
        make_subscription("https://push/a")
        make_subscription("https://push/b")
        client = FakePushClient()

        _run(db, job_settings, client)
        _, body = _run(db, job_settings, client, now=NOW + timedelta(minutes=30))

        assert body.endswith("Sent notifications for 0 reminders.")
        assert sorted(endpoint for endpoint, _ in client.sent) == ["https://push/a", "https://push/b"]

    def test_run_after_cooldown_notifies_again(self, db, job_settings, make_vehicle, make_fuel_log, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        make_reminder(vehicle, due_odometer=50500)
        make_subscription("https://push/a")
        client = FakePushClient()

        _run(db, job_settings, client)
        _run(db, job_settings, client, now=NOW + timedelta(hours=2))

        assert len(client.sent) == 2

    def test_expired_subscription_absent_from_later_runs(self, db, job_settings, make_vehicle, make_fuel_log, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        make_reminder(vehicle, due_odometer=50500)
        make_subscription("https://push/gone")
        make_subscription("https://push/ok")
        client = FakePushClient(failures={"https://push/gone": 410})

        _run(db, job_settings, client)
        _run(db, job_settings, client, now=NOW + timedelta(hours=2))

        assert client.attempts.count("https://push/gone") == 1
        assert [s["endpoint"] for s in PushSubscription(db).get_all()] == ["https://push/ok"]

    def test_failed_delivery_is_retried_next_run(self, db, job_settings, make_vehicle, make_fuel_log, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        reminder = make_reminder(vehicle, due_odometer=50500)
        make_subscription("https://push/flaky")
        client = FakePushClient(failures={"https://push/flaky": 500})

        _, body = _run(db, job_settings, client)
        assert body.endswith("Sent notifications for 0 reminders.")
        assert ServiceReminder(db).get(reminder["id"])["last_notification_sent"] is None

        client.failures.clear()
        _, body = _run(db, job_settings, client, now=NOW + timedelta(minutes=5))
        assert body.endswith("Sent notifications for 1 reminders.")

    def test_thresholds_come_from_settings(self, db, push_client, make_vehicle, make_fuel_log, make_reminder, make_subscription):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        make_reminder(vehicle, due_odometer=52000)
        make_subscription("https://push/a")

        settings = Settings(
            _env_file=None,
            vapid_public_key="pub",
            vapid_private_key="priv",
            urgency_threshold_km=2500,
        )
        _run(db, settings, push_client)

        assert len(push_client.sent) == 1

    def test_subscriptions_loaded_once_per_run(self, db, job_settings, push_client, make_vehicle, make_fuel_log, make_reminder, make_subscription, monkeypatch):
        vehicle = make_vehicle()
        make_fuel_log(vehicle, 50000)
        make_reminder(vehicle, "Oil change", due_odometer=50500)
        make_reminder(vehicle, "Brakes", due_odometer=49000)
        make_subscription("https://push/a")

        calls = []
        original = PushSubscription.get_all

        def counting_get_all(self):
            calls.append(1)
            return original(self)

        monkeypatch.setattr(PushSubscription, "get_all", counting_get_all)
        _, body = _run(db, job_settings, push_client)

        assert body.endswith("Sent notifications for 2 reminders.")
        assert len(calls) == 1
