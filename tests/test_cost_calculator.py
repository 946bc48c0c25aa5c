"""Tests for cost per km breakdown."""
import pytest

from app.services.cost_calculator import CostPerKm, calculate_costs_per_km, estimate_trip_cost, total_cost_per_km

VEHICLE = {
    "purchase_price": 20000,
    "resale_value": 8000,
    "km_per_year": 15000,
    "useful_life_years": 4,
    "annual_insurance_cost": 600,
    "annual_patent_cost": 300,
    "maintenance_cost": 200,
    "maintenance_km": 10000,
    "tires_cost": 400,
    "tires_km": 40000,
}


class TestCalculateCostsPerKm:
    def test_full_breakdown(self):
        costs = calculate_costs_per_km(VEHICLE, average_consumption=12.5, fuel_price=1000)
        assert costs.amortization_per_km == pytest.approx(12000 / 60000)
        assert costs.fixed_cost_per_km == pytest.approx(600 / 15000 + 300 / 15000 + 200 / 10000 + 400 / 40000)
        assert costs.fuel_cost_per_km == pytest.approx(80)

    def test_missing_financials_are_zero(self):
        costs = calculate_costs_per_km({}, average_consumption=10, fuel_price=1000)
        assert costs.amortization_per_km == 0
        assert costs.fixed_cost_per_km == 0
        assert costs.fuel_cost_per_km == 100

    def test_no_amortization_without_useful_life(self):
        costs = calculate_costs_per_km({**VEHICLE, "useful_life_years": 0}, 10, 1000)
        assert costs.amortization_per_km == 0

    def test_no_fuel_cost_without_consumption(self):
        assert calculate_costs_per_km(VEHICLE, 0, 1000).fuel_cost_per_km == 0
        assert calculate_costs_per_km(VEHICLE, 10, 0).fuel_cost_per_km == 0

    def test_to_dict(self):
        assert CostPerKm(1, 2, 3).to_dict() == {
            "amortization_per_km": 1,
            "fixed_cost_per_km": 2,
            "fuel_cost_per_km": 3,
        }


class TestTotalCostPerKm:
    def test_converts_with_exchange_rate(self):
        assert total_cost_per_km(CostPerKm(0.2, 0.1, 80), 1000) == pytest.approx(380)

    def test_without_rate_only_fuel_counts(self):
        assert total_cost_per_km(CostPerKm(0.2, 0.1, 80), 0) == 80
        assert total_cost_per_km(CostPerKm(0.2, 0.1, 80), -5) == 80


class TestEstimateTripCost:
    vehicle = {**VEHICLE, "average_consumption_km_per_liter": 12.5}
    last_log = {"price_per_liter": 1000}

    def test_with_exchange_rate(self):
        result = estimate_trip_cost(self.vehicle, self.last_log, 100, exchange_rate=1000, other_expenses=500)

        costs = calculate_costs_per_km(self.vehicle, 12.5, 1000)
        vehicle_per_km = (costs.amortization_per_km + costs.fixed_cost_per_km) * 1000
        assert result["fuel_cost"] == pytest.approx(8000)
        assert result["vehicle_cost"] == pytest.approx(100 * vehicle_per_km)
        assert result["fuel_total"] == pytest.approx(8500)
        assert result["total_cost"] == pytest.approx(8000 + 100 * vehicle_per_km + 500)
        assert result["total_cost_per_km"] == pytest.approx(80 + vehicle_per_km)

    def test_without_exchange_rate_only_fuel_counts(self):
        result = estimate_trip_cost(self.vehicle, self.last_log, 100, exchange_rate=None, other_expenses=500)

        assert result["vehicle_cost_per_km"] == 0
        assert result["vehicle_cost"] == 0
        assert result["total_cost_per_km"] == pytest.approx(80)
        assert result["total_cost"] == pytest.approx(8500)

    def test_falls_back_to_one_km_per_liter(self):
        result = estimate_trip_cost({"average_consumption_km_per_liter": 0}, {"price_per_liter": 100}, 10)
        assert result["fuel_cost_per_km"] == 100
        assert result["fuel_cost"] == 1000

    def test_without_fuel_logs(self):
        result = estimate_trip_cost(self.vehicle, None, 100, exchange_rate=1000)
        assert result["fuel_cost"] == 0
        assert result["total_cost"] == pytest.approx(result["vehicle_cost"])
