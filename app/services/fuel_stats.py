from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional

from app.services.urgency import days_between
from app.utils.dates import as_utc, utcnow

# Share of the tank kept as reserve when estimating the next refuel
FUEL_RESERVE_RATIO = 0.15


def process_fuel_logs(logs: List[dict]) -> List[dict]:
    """
    Annotate fuel logs, oldest first, with the distance since the previous
    log and the consumption (km/L) over that distance.

    Consumption is only meaningful when the previous log filled the tank and
    the current one does not report a skipped fill-up in between.
    """
    ordered = sorted(logs, key=lambda log: log.get("odometer") or 0)
    processed = []
    for index, log in enumerate(ordered):
        entry = {**log, "distance_traveled": None, "consumption": None}
        if index > 0:
            prev = ordered[index - 1]
            distance = (log.get("odometer") or 0) - (prev.get("odometer") or 0)
            entry["distance_traveled"] = distance
            liters = log.get("liters") or 0
            if prev.get("is_fill_up") and not log.get("missed_previous_fill_up") and distance > 0 and liters > 0:
                entry["consumption"] = round(distance / liters, 2)
        processed.append(entry)
    return processed


def average_consumption(processed_logs: List[dict]) -> float:
    values = [log["consumption"] for log in processed_logs if log.get("consumption")]
    return sum(values) / len(values) if values else 0


def fuel_summary(logs: List[dict]) -> Dict[str, Any]:
    processed = process_fuel_logs(logs)
    total_liters = sum(log.get("liters") or 0 for log in processed)
    total_cost = sum(log.get("total_cost") or 0 for log in processed)
    total_distance = 0
    if len(processed) > 1:
        total_distance = (processed[-1].get("odometer") or 0) - (processed[0].get("odometer") or 0)

    return {
        "logs_count": len(processed),
        "total_liters": round(total_liters, 2),
        "total_cost": round(total_cost, 2),
        "total_distance": round(total_distance, 2),
        "average_consumption": round(average_consumption(processed), 2),
        "average_price_per_liter": round(total_cost / total_liters, 3) if total_liters > 0 else None,
        "last_odometer": processed[-1].get("odometer") if processed else None,
    }


def estimate_refuel(vehicle: dict, logs: List[dict], now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """
    Estimate when the tank reaches its reserve, from the vehicle's average
    consumption and its average km per day across the logged period.
    """
    if not logs or len(logs) < 2:
        return None

    avg_consumption = vehicle.get("average_consumption_km_per_liter") or 0
    capacity = vehicle.get("fuel_capacity_liters") or 0
    if avg_consumption <= 0 or capacity <= 0:
        return None

    by_odometer = sorted(logs, key=lambda log: log.get("odometer") or 0, reverse=True)
    last_log = by_odometer[0]

    by_date = sorted(logs, key=lambda log: as_utc(log.get("date")))
    first_log = by_date[0]
    days = days_between(as_utc(last_log.get("date")), as_utc(first_log.get("date")))
    total_km = (last_log.get("odometer") or 0) - (first_log.get("odometer") or 0)
    avg_km_per_day = total_km / days if days > 0 else 0
    if avg_km_per_day <= 0:
        return None

    last_fill_up = next((log for log in by_odometer if log.get("is_fill_up")), None)
    if last_fill_up is None:
        return None

    km_since_fill = last_log["odometer"] - last_fill_up["odometer"]
    current_fuel = capacity - km_since_fill / avg_consumption
    reserve = capacity * FUEL_RESERVE_RATIO
    if current_fuel <= reserve:
        return None

    km_remaining = (current_fuel - reserve) * avg_consumption
    days_to_refuel = km_remaining / avg_km_per_day
    return {
        "km_expected": round(last_log["odometer"] + km_remaining),
        "km_remaining": round(km_remaining),
        "date_expected": (now or utcnow()) + timedelta(days=days_to_refuel),
    }
