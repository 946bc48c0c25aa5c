from datetime import date, datetime, time, timezone
from typing import Dict, Any, List, Optional

from app.services.fuel_stats import process_fuel_logs
from app.services.urgency import days_between
from app.utils.dates import as_utc


def period_bounds(start: date, end: date):
    """First and last instant of a from/to day range, in UTC."""
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


def _in_range(value, start: Optional[datetime], end: Optional[datetime]) -> bool:
    moment = as_utc(value)
    if moment is None:
        return False
    if start is not None and moment < start:
        return False
    if end is not None and moment > end:
        return False
    return True


def completed_services_in_range(reminders: List[dict], start: Optional[datetime], end: Optional[datetime]) -> List[dict]:
    return [
        r for r in reminders
        if r.get("is_completed") and _in_range(r.get("completed_date"), start, end)
    ]


def _empty_report(period_days: int) -> Dict[str, Any]:
    return {
        "empty": True,
        "period_days": period_days,
        "fuel_logs_count": 0,
        "services_count": 0,
        "km_traveled": 0,
        "total_cost": 0,
        "total_fuel_cost": 0,
        "total_service_cost": 0,
        "cost_per_km": 0,
        "fuel_cost_per_km": 0,
        "service_cost_per_km": 0,
        "cost_per_day": 0,
        "fuel_cost_per_day": 0,
        "service_cost_per_day": 0,
        "avg_consumption": 0,
        "min_consumption": 0,
        "max_consumption": 0,
        "km_per_day": 0,
        "avg_range_km": 0,
        "avg_km_between_fill_ups": 0,
    }


def report(vehicle: dict, logs: List[dict], reminders: List[dict], start: date, end: date) -> Dict[str, Any]:
    """
    Cost and consumption report for the days from start to end, inclusive.

    Consumption is worked out over the whole log history first, so the first
    log inside the range still gets its value from the log before it. Service
    costs come from reminders completed inside the range.
    """
    range_start, range_end = period_bounds(start, end)
    period_days = max(days_between(range_end, range_start) + 1, 1)

    fuel_logs = [
        log for log in process_fuel_logs(logs)
        if _in_range(log.get("date"), range_start, range_end)
    ]
    services = completed_services_in_range(reminders, range_start, range_end)
    if not fuel_logs:
        return _empty_report(period_days)

    total_fuel_cost = sum(log.get("total_cost") or 0 for log in fuel_logs)
    total_service_cost = sum(s.get("service_cost") or 0 for s in services)
    total_cost = total_fuel_cost + total_service_cost

    km_traveled = (fuel_logs[-1].get("odometer") or 0) - (fuel_logs[0].get("odometer") or 0)

    def per_km(cost):
        return cost / km_traveled if km_traveled > 0 else 0

    consumptions = [log["consumption"] for log in fuel_logs if log.get("consumption")]
    avg_consumption = sum(consumptions) / len(consumptions) if consumptions else 0

    fill_ups = [log for log in fuel_logs if log.get("is_fill_up")]
    gaps = [
        fill_ups[i]["odometer"] - fill_ups[i - 1]["odometer"]
        for i in range(1, len(fill_ups))
        if fill_ups[i]["odometer"] - fill_ups[i - 1]["odometer"] > 0
    ]

    return {
        "empty": False,
        "period_days": period_days,
        "fuel_logs_count": len(fuel_logs),
        "services_count": len(services),
        "km_traveled": km_traveled,
        "total_cost": total_cost,
        "total_fuel_cost": total_fuel_cost,
        "total_service_cost": total_service_cost,
        "cost_per_km": per_km(total_cost),
        "fuel_cost_per_km": per_km(total_fuel_cost),
        "service_cost_per_km": per_km(total_service_cost),
        "cost_per_day": total_cost / period_days,
        "fuel_cost_per_day": total_fuel_cost / period_days,
        "service_cost_per_day": total_service_cost / period_days,
        "avg_consumption": avg_consumption,
        "min_consumption": min(consumptions) if consumptions else 0,
        "max_consumption": max(consumptions) if consumptions else 0,
        "km_per_day": km_traveled / period_days,
        # Range on a full tank
        "avg_range_km": avg_consumption * (vehicle.get("fuel_capacity_liters") or 0),
        "avg_km_between_fill_ups": sum(gaps) / len(gaps) if gaps else 0,
    }


def monthly_costs(
    logs: List[dict],
    reminders: List[dict],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Fuel and service spending grouped by calendar month, oldest month first."""
    range_start = period_bounds(start, start)[0] if start else None
    range_end = period_bounds(end, end)[1] if end else None

    buckets: Dict[str, Dict[str, float]] = {}

    def bucket(moment: datetime):
        key = moment.strftime("%Y-%m")
        return buckets.setdefault(key, {"fuel": 0, "services": 0})

    for log in logs:
        if _in_range(log.get("date"), range_start, range_end):
            bucket(as_utc(log["date"]))["fuel"] += log.get("total_cost") or 0

    for service in completed_services_in_range(reminders, range_start, range_end):
        bucket(as_utc(service["completed_date"]))["services"] += service.get("service_cost") or 0

    return [
        {
            "month": month,
            "fuel": round(values["fuel"], 2),
            "services": round(values["services"], 2),
            "total": round(values["fuel"] + values["services"], 2),
        }
        for month, values in sorted(buckets.items())
    ]
