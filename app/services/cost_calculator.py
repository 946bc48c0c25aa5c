from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class CostPerKm:
    amortization_per_km: float  # vehicle currency (e.g. USD)
    fixed_cost_per_km: float  # vehicle currency (e.g. USD)
    fuel_cost_per_km: float  # fuel currency

    def to_dict(self):
        return asdict(self)


def _per_km(cost, km) -> float:
    return (cost or 0) / km if km and km > 0 else 0


def calculate_costs_per_km(vehicle: dict, average_consumption: float, fuel_price: float) -> CostPerKm:
    """
    Break a vehicle's running cost down per kilometer.

    Amortization spreads purchase minus resale value over the vehicle's
    expected lifetime distance. Fixed cost adds insurance and patent (yearly,
    over km per year), plus maintenance and tires over their own intervals.
    Fuel cost is the fuel price over the average consumption in km/L.
    """
    purchase_price = vehicle.get("purchase_price") or 0
    resale_value = vehicle.get("resale_value") or 0
    km_per_year = vehicle.get("km_per_year") or 0
    useful_life_years = vehicle.get("useful_life_years") or 0

    amortization_per_km = 0
    if purchase_price > 0 and km_per_year > 0 and useful_life_years > 0:
        amortization_per_km = (purchase_price - resale_value) / (km_per_year * useful_life_years)

    fixed_cost_per_km = (
        _per_km(vehicle.get("annual_insurance_cost"), km_per_year)
        + _per_km(vehicle.get("annual_patent_cost"), km_per_year)
        + _per_km(vehicle.get("maintenance_cost"), vehicle.get("maintenance_km"))
        + _per_km(vehicle.get("tires_cost"), vehicle.get("tires_km"))
    )

    fuel_cost_per_km = 0
    if average_consumption and average_consumption > 0 and fuel_price and fuel_price > 0:
        fuel_cost_per_km = fuel_price / average_consumption

    return CostPerKm(amortization_per_km, fixed_cost_per_km, fuel_cost_per_km)


def total_cost_per_km(costs: CostPerKm, exchange_rate: float) -> float:
    """Total cost per km in fuel currency; without a rate only fuel is counted."""
    if not exchange_rate or exchange_rate <= 0:
        return costs.fuel_cost_per_km
    return (
        costs.amortization_per_km * exchange_rate
        + costs.fixed_cost_per_km * exchange_rate
        + costs.fuel_cost_per_km
    )


def estimate_trip_cost(
    vehicle: dict,
    last_log: Optional[dict],
    kilometers: float,
    exchange_rate: Optional[float] = None,
    other_expenses: float = 0,
) -> dict:
    """
    Price a planned trip from the vehicle's per-km costs.

    Fuel is priced at the latest refuel's price per liter over the vehicle's
    average consumption (1 km/L when unset). Vehicle cost (amortization and
    fixed costs) needs an exchange rate into the fuel currency; without one
    it is left at zero and only fuel and other expenses are counted.
    """
    consumption = vehicle.get("average_consumption_km_per_liter") or 0
    if consumption <= 0:
        consumption = 1
    fuel_price = (last_log or {}).get("price_per_liter") or 0

    costs = calculate_costs_per_km(vehicle, consumption, fuel_price)
    vehicle_cost_per_km = 0
    if exchange_rate and exchange_rate > 0:
        vehicle_cost_per_km = (costs.amortization_per_km + costs.fixed_cost_per_km) * exchange_rate

    fuel_cost = kilometers * costs.fuel_cost_per_km
    vehicle_cost = kilometers * vehicle_cost_per_km
    other_expenses = other_expenses or 0
    return {
        "kilometers": kilometers,
        "fuel_cost_per_km": costs.fuel_cost_per_km,
        "vehicle_cost_per_km": vehicle_cost_per_km,
        "total_cost_per_km": total_cost_per_km(costs, exchange_rate or 0),
        "fuel_cost": fuel_cost,
        "vehicle_cost": vehicle_cost,
        "other_expenses": other_expenses,
        "fuel_total": fuel_cost + other_expenses,
        "total_cost": fuel_cost + vehicle_cost + other_expenses,
    }
