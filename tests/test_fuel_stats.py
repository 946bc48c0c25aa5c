"""Tests for fuel log consumption and refuel estimation."""
from datetime import timedelta

import pytest

from app.services.fuel_stats import (
    average_consumption,
    estimate_refuel,
    fuel_summary,
    process_fuel_logs,
)
from conftest import NOW


def log(odometer, liters=40, total_cost=4000, is_fill_up=True, days_ago=0, **extra):
    return {
        "odometer": odometer,
        "liters": liters,
        "total_cost": total_cost,
        "is_fill_up": is_fill_up,
        "date": NOW - timedelta(days=days_ago),
        **extra,
    }


class TestProcessFuelLogs:
    def test_consumption_after_fill_up(self):
        processed = process_fuel_logs([log(10000), log(10500, liters=40)])
        assert processed[0]["consumption"] is None
        assert processed[1]["distance_traveled"] == 500
        assert processed[1]["consumption"] == 12.5

    def test_sorted_by_odometer(self):
        processed = process_fuel_logs([log(10500), log(10000)])
        assert [p["odometer"] for p in processed] == [10000, 10500]

    def test_no_consumption_after_partial_fill(self):
        processed = process_fuel_logs([log(10000, is_fill_up=False), log(10500)])
        assert processed[1]["distance_traveled"] == 500
        assert processed[1]["consumption"] is None

    def test_missed_previous_fill_up_voids_consumption(self):
        processed = process_fuel_logs([log(10000), log(10500, missed_previous_fill_up=True)])
        assert processed[1]["consumption"] is None

    def test_decreasing_odometer_gives_no_consumption(self):
        processed = process_fuel_logs([log(10000), log(10000)])
        assert processed[1]["consumption"] is None

    def test_rounds_to_two_decimals(self):
        processed = process_fuel_logs([log(0.1), log(333.43, liters=30)])
        assert processed[1]["consumption"] == pytest.approx(11.11)


class TestAverages:
    def test_average_ignores_missing(self):
        processed = process_fuel_logs([log(10000), log(10500), log(11100)])
        assert average_consumption(processed) == pytest.approx((12.5 + 15) / 2)

    def test_average_without_data(self):
        assert average_consumption(process_fuel_logs([log(10000)])) == 0

    def test_summary(self):
        summary = fuel_summary([log(10000, total_cost=4000), log(10500, total_cost=5000)])
        assert summary == {
            "logs_count": 2,
            "total_liters": 80,
            "total_cost": 9000,
            "total_distance": 500,
            "average_consumption": 12.5,
            "average_price_per_liter": 112.5,
            "last_odometer": 10500,
        }

    def test_empty_summary(self):
        summary = fuel_summary([])
        assert summary["logs_count"] == 0
        assert summary["average_price_per_liter"] is None
        assert summary["last_odometer"] is None


class TestEstimateRefuel:
    vehicle = {"fuel_capacity_liters": 50, "average_consumption_km_per_liter": 10}

    def test_estimate(self):
        logs = [log(10000, days_ago=10), log(11000, days_ago=0)]
        result = estimate_refuel(self.vehicle, logs, now=NOW)
        # full tank: 50 L - 7.5 L reserve = 42.5 L -> 425 km at 100 km/day
        assert result["km_remaining"] == 425
        assert result["km_expected"] == 11425
        assert result["date_expected"] == NOW + timedelta(days=4.25)

    def test_accounts_for_km_since_last_fill(self):
        logs = [log(10000, days_ago=10), log(10800, days_ago=2), log(11000, is_fill_up=False, days_ago=0)]
        result = estimate_refuel(self.vehicle, logs, now=NOW)
        # 200 km since the fill at 10800 burned 20 L
        assert result["km_remaining"] == 225

    def test_below_reserve_returns_none(self):
        logs = [log(10000, days_ago=10), log(10500, is_fill_up=False, days_ago=0)]
        assert estimate_refuel(self.vehicle, logs, now=NOW) is None

    def test_needs_two_logs(self):
        assert estimate_refuel(self.vehicle, [log(10000)], now=NOW) is None

    def test_needs_average_consumption(self):
        vehicle = {"fuel_capacity_liters": 50, "average_consumption_km_per_liter": 0}
        assert estimate_refuel(vehicle, [log(10000, days_ago=5), log(10500)], now=NOW) is None

    def test_same_day_logs_have_no_daily_rate(self):
        assert estimate_refuel(self.vehicle, [log(10000), log(10500)], now=NOW) is None
