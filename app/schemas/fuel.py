from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class FuelLogCreate(BaseModel):
    date: Optional[datetime] = Field(None, description="When the refuel happened, defaults to now")
    odometer: float = Field(..., gt=0, description="Odometer reading at fill-up in km")
    fuel_type: str = Field(..., description="Type of fuel (Gasoline, Diesel, Ethanol)")
    liters: float = Field(..., gt=0, description="Amount of fuel added in liters")
    total_cost: float = Field(..., gt=0, description="Total price paid")
    price_per_liter: Optional[float] = Field(None, ge=0, description="Price per liter, derived from the total when omitted")
    is_fill_up: bool = Field(True, description="Whether the tank was filled completely")
    missed_previous_fill_up: bool = False
    gas_station: Optional[str] = None
    exchange_rate: Optional[float] = Field(None, gt=0)


class FuelLogUpdate(BaseModel):
    date: Optional[datetime] = None
    odometer: Optional[float] = Field(None, gt=0)
    fuel_type: Optional[str] = None
    liters: Optional[float] = Field(None, gt=0)
    total_cost: Optional[float] = Field(None, gt=0)
    price_per_liter: Optional[float] = Field(None, ge=0)
    is_fill_up: Optional[bool] = None
    missed_previous_fill_up: Optional[bool] = None
    gas_station: Optional[str] = None
    exchange_rate: Optional[float] = Field(None, gt=0)


class FuelLogResponse(BaseModel):
    id: str
    vehicle_id: str
    date: datetime
    odometer: float
    fuel_type: Optional[str] = None
    liters: float
    total_cost: float
    price_per_liter: Optional[float] = None
    is_fill_up: bool = True
    missed_previous_fill_up: bool = False
    gas_station: Optional[str] = None
    exchange_rate: Optional[float] = None
    # Derived from the previous log
    distance_traveled: Optional[float] = None
    consumption: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FuelStatsResponse(BaseModel):
    logs_count: int
    total_liters: float
    total_cost: float
    total_distance: float
    average_consumption: float
    average_price_per_liter: Optional[float] = None
    last_odometer: Optional[float] = None
