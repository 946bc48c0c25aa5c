from typing import Dict, Any, List, Optional, Tuple

from app.utils.dates import as_utc


def trip_end(trip: dict) -> Tuple[Optional[float], Any]:
    """End odometer and date, taken from the last stage on staged trips."""
    stages = trip.get("stages") or []
    if stages:
        return stages[-1].get("stage_end_odometer"), stages[-1].get("stage_end_date")
    return trip.get("end_odometer"), trip.get("end_date")


def fuel_logs_for_trip(trip: dict, logs: List[dict]) -> List[dict]:
    """Fuel logs whose odometer falls inside (start, end] of the trip."""
    start = trip.get("start_odometer")
    end, _ = trip_end(trip)
    if not start or not end:
        return []
    return [log for log in logs if start < (log.get("odometer") or 0) <= end]


def trip_expenses_total(trip: dict) -> float:
    expenses = list(trip.get("expenses") or [])
    for stage in trip.get("stages") or []:
        expenses.extend(stage.get("expenses") or [])
    return sum(e.get("amount") or 0 for e in expenses)


def trip_summary(trip: dict, logs: List[dict]) -> Dict[str, Any]:
    start = trip.get("start_odometer")
    end, end_date = trip_end(trip)
    km_traveled = end - start if start and end else 0

    trip_logs = fuel_logs_for_trip(trip, logs)
    fuel_consumed = sum(log.get("liters") or 0 for log in trip_logs)
    fuel_cost = sum(log.get("total_cost") or 0 for log in trip_logs)
    expenses = trip_expenses_total(trip)

    duration_minutes = None
    started, ended = as_utc(trip.get("start_date")), as_utc(end_date)
    if started and ended:
        duration_minutes = int((ended - started).total_seconds() // 60)

    return {
        "km_traveled": km_traveled,
        "fuel_logs_count": len(trip_logs),
        "fuel_consumed": round(fuel_consumed, 2),
        "fuel_cost": round(fuel_cost, 2),
        "consumption": round(km_traveled / fuel_consumed, 2) if km_traveled > 0 and fuel_consumed > 0 else 0,
        "cost_per_km": round(fuel_cost / km_traveled, 2) if km_traveled > 0 and fuel_cost > 0 else 0,
        "expenses_total": round(expenses, 2),
        "total_cost": round(fuel_cost + expenses, 2),
        "duration_minutes": duration_minutes,
    }
