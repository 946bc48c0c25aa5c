from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional
from datetime import date
from app.database import get_database
from app.models.vehicle import Vehicle
from app.models.fuel_log import FuelLog
from app.models.reminder import ServiceReminder
from app.models.trip import Trip
from app.schemas.vehicle import (
    VehicleCreate,
    VehicleUpdate,
    VehicleResponse,
    VehicleStatsResponse,
    VehicleReportResponse,
    MonthlyCostResponse,
)
from app.services.cost_calculator import calculate_costs_per_km, total_cost_per_km
from app.services.fuel_stats import fuel_summary, estimate_refuel
from app.services.reports import report, monthly_costs
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"])


@router.get("", response_model=List[VehicleResponse])
async def get_vehicles(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    vehicle_model = Vehicle(db)
    return vehicle_model.get_all_by_user(user_id)


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle: VehicleCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    vehicle_model = Vehicle(db)
    return vehicle_model.create(user_id, vehicle.model_dump())


@router.get("/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(
    vehicle_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    vehicle_model = Vehicle(db)
    vehicle = vehicle_model.get_by_id(vehicle_id, user_id)
    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )
    return vehicle


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: str,
    vehicle_update: VehicleUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    vehicle_model = Vehicle(db)
    if not vehicle_model.get_by_id(vehicle_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    update_data = vehicle_update.model_dump(exclude_unset=True)
    if not vehicle_model.update(vehicle_id, user_id, update_data):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to update vehicle"
        )
    return vehicle_model.get_by_id(vehicle_id, user_id)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    vehicle_model = Vehicle(db)
    if not vehicle_model.delete(vehicle_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    # Remove everything recorded against the vehicle
    FuelLog(db).delete_by_vehicle(vehicle_id, user_id)
    ServiceReminder(db).delete_by_vehicle(vehicle_id, user_id)
    Trip(db).delete_by_vehicle(vehicle_id, user_id)
    return None


@router.get("/{vehicle_id}/stats", response_model=VehicleStatsResponse)
async def get_vehicle_stats(
    vehicle_id: str,
    fuel_price: Optional[float] = None,
    exchange_rate: Optional[float] = None,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Fuel totals, cost per km and the next refuel estimate for a vehicle"""
    vehicle = Vehicle(db).get_by_id(vehicle_id, user_id)
    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    logs = FuelLog(db).get_by_vehicle(vehicle_id, user_id)
    fuel = fuel_summary(logs)
    last_log = logs[-1] if logs else {}

    # Fall back to the latest refuel for price and rate
    if fuel_price is None:
        fuel_price = last_log.get("price_per_liter") or 0
    if exchange_rate is None:
        exchange_rate = last_log.get("exchange_rate") or 0

    avg_consumption = fuel["average_consumption"] or vehicle.get("average_consumption_km_per_liter") or 0
    costs = calculate_costs_per_km(vehicle, avg_consumption, fuel_price)

    return {
        "fuel": fuel,
        "costs_per_km": {
            **costs.to_dict(),
            "total_cost_per_km": total_cost_per_km(costs, exchange_rate),
        },
        "refuel_estimate": estimate_refuel(vehicle, logs),
    }


@router.get("/{vehicle_id}/report", response_model=VehicleReportResponse)
async def get_vehicle_report(
    vehicle_id: str,
    from_date: date = Query(..., alias="from"),
    to_date: date = Query(..., alias="to"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Costs and consumption between two days, both inclusive"""
    vehicle = Vehicle(db).get_by_id(vehicle_id, user_id)
    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )
    if from_date > to_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'from' must not be after 'to'"
        )

    logs = FuelLog(db).get_by_vehicle(vehicle_id, user_id)
    reminders = ServiceReminder(db).get_by_vehicle(vehicle_id, user_id)
    return report(vehicle, logs, reminders, from_date, to_date)


@router.get("/{vehicle_id}/monthly-costs", response_model=List[MonthlyCostResponse])
async def get_monthly_costs(
    vehicle_id: str,
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Fuel and service spending per calendar month"""
    if not Vehicle(db).get_by_id(vehicle_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    logs = FuelLog(db).get_by_vehicle(vehicle_id, user_id)
    reminders = ServiceReminder(db).get_by_vehicle(vehicle_id, user_id)
    return monthly_costs(logs, reminders, from_date, to_date)
