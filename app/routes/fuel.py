from fastapi import APIRouter, Depends, HTTPException, status
from app.models.fuel_log import FuelLog
from app.models.vehicle import Vehicle
from app.schemas.fuel import FuelLogCreate, FuelLogUpdate, FuelLogResponse, FuelStatsResponse
from app.services.fuel_stats import process_fuel_logs, fuel_summary
from app.database import get_database
from app.utils.auth import get_current_user_id
from typing import List

router = APIRouter(prefix="/api/fuel", tags=["fuel"])


def _get_vehicle_or_404(db, vehicle_id: str, user_id: str):
    vehicle = Vehicle(db).get_by_id(vehicle_id, user_id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


@router.post("/vehicle/{vehicle_id}", response_model=FuelLogResponse, status_code=status.HTTP_201_CREATED)
async def create_fuel_log(
    vehicle_id: str,
    fuel_log: FuelLogCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Create a new fuel log entry"""
    _get_vehicle_or_404(db, vehicle_id, user_id)
    fuel_model = FuelLog(db)
    return fuel_model.create(user_id, vehicle_id, fuel_log.model_dump())


@router.get("/vehicle/{vehicle_id}", response_model=List[FuelLogResponse])
async def get_fuel_logs(
    vehicle_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Get all fuel logs for a vehicle, newest first, with distance and consumption"""
    _get_vehicle_or_404(db, vehicle_id, user_id)
    fuel_model = FuelLog(db)
    logs = process_fuel_logs(fuel_model.get_by_vehicle(vehicle_id, user_id))
    return list(reversed(logs))


@router.get("/vehicle/{vehicle_id}/stats", response_model=FuelStatsResponse)
async def get_fuel_stats(
    vehicle_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Get fuel consumption statistics for a vehicle"""
    _get_vehicle_or_404(db, vehicle_id, user_id)
    fuel_model = FuelLog(db)
    return fuel_summary(fuel_model.get_by_vehicle(vehicle_id, user_id))


@router.get("/{fuel_log_id}", response_model=FuelLogResponse)
async def get_fuel_log(
    fuel_log_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Get a specific fuel log"""
    fuel_model = FuelLog(db)
    fuel = fuel_model.get_by_id(fuel_log_id, user_id)
    if not fuel:
        raise HTTPException(status_code=404, detail="Fuel log not found")
    return fuel


@router.put("/{fuel_log_id}", response_model=FuelLogResponse)
async def update_fuel_log(
    fuel_log_id: str,
    fuel_log: FuelLogUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Update a fuel log"""
    fuel_model = FuelLog(db)

    # Verify fuel log exists and belongs to user
    existing = fuel_model.get_by_id(fuel_log_id, user_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Fuel log not found")

    update_data = fuel_log.model_dump(exclude_unset=True)
    if not fuel_model.update(fuel_log_id, user_id, update_data):
        raise HTTPException(status_code=400, detail="Failed to update fuel log")
    return fuel_model.get_by_id(fuel_log_id, user_id)


@router.delete("/{fuel_log_id}")
async def delete_fuel_log(
    fuel_log_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Delete a fuel log"""
    fuel_model = FuelLog(db)
    if not fuel_model.delete(fuel_log_id, user_id):
        raise HTTPException(status_code=404, detail="Fuel log not found")
    return {"message": "Fuel log deleted successfully"}
