from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from app.database import get_database
from app.models.fuel_log import FuelLog
from app.models.trip import Trip
from app.models.vehicle import Vehicle
from app.schemas.trip import (
    TripCreate,
    TripUpdate,
    TripResponse,
    TripEstimateRequest,
    TripEstimateResponse,
)
from app.services.cost_calculator import estimate_trip_cost
from app.services.trip_costs import trip_summary
from app.utils.auth import get_current_user_id

router = APIRouter(prefix="/api/trips", tags=["trips"])


def _with_summary(db, trip: dict, user_id: str) -> dict:
    logs = FuelLog(db).get_by_vehicle(trip["vehicle_id"], user_id)
    return {**trip, "summary": trip_summary(trip, logs)}


def _get_trip_or_404(db, trip_id: str, user_id: str):
    trip = Trip(db).get_by_id(trip_id, user_id)
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    return trip


@router.get("/vehicle/{vehicle_id}", response_model=List[TripResponse])
async def get_trips(
    vehicle_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    if not Vehicle(db).get_by_id(vehicle_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    logs = FuelLog(db).get_by_vehicle(vehicle_id, user_id)
    trips = Trip(db).get_by_vehicle(vehicle_id, user_id)
    return [{**t, "summary": trip_summary(t, logs)} for t in trips]


@router.post("/vehicle/{vehicle_id}", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    vehicle_id: str,
    trip: TripCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    if not Vehicle(db).get_by_id(vehicle_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Vehicle not found (id: {vehicle_id})"
        )

    created = Trip(db).create(user_id, vehicle_id, trip.model_dump())
    return _with_summary(db, created, user_id)


@router.post("/vehicle/{vehicle_id}/estimate", response_model=TripEstimateResponse)
async def estimate_trip(
    vehicle_id: str,
    request: TripEstimateRequest,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    """Price a planned trip from the vehicle's per-km costs and latest fuel price"""
    vehicle = Vehicle(db).get_by_id(vehicle_id, user_id)
    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    logs = FuelLog(db).get_by_vehicle(vehicle_id, user_id)
    return estimate_trip_cost(
        vehicle,
        logs[-1] if logs else None,
        request.kilometers,
        exchange_rate=request.exchange_rate,
        other_expenses=request.other_expenses,
    )


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    trip = _get_trip_or_404(db, trip_id, user_id)
    return _with_summary(db, trip, user_id)


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip(
    trip_id: str,
    trip_update: TripUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    _get_trip_or_404(db, trip_id, user_id)

    trip_model = Trip(db)
    update_data = trip_update.model_dump(exclude_unset=True)
    if not trip_model.update(trip_id, user_id, update_data):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to update trip"
        )
    return _with_summary(db, trip_model.get_by_id(trip_id, user_id), user_id)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database)
):
    if not Trip(db).delete(trip_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    return None
