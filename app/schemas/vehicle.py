from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from app.schemas.fuel import FuelStatsResponse


class VehicleFinancials(BaseModel):
    purchase_price: Optional[float] = Field(None, ge=0)
    resale_value: Optional[float] = Field(None, ge=0)
    km_per_year: Optional[float] = Field(None, ge=0)
    useful_life_years: Optional[float] = Field(None, ge=0)
    annual_insurance_cost: Optional[float] = Field(None, ge=0)
    annual_patent_cost: Optional[float] = Field(None, ge=0)
    maintenance_cost: Optional[float] = Field(None, ge=0)
    maintenance_km: Optional[float] = Field(None, ge=0)
    tires_cost: Optional[float] = Field(None, ge=0)
    tires_km: Optional[float] = Field(None, ge=0)


class VehicleCreate(VehicleFinancials):
    make: str
    model: str
    year: int
    plate: Optional[str] = None
    fuel_capacity_liters: float = Field(..., gt=0)
    average_consumption_km_per_liter: float = Field(0, ge=0)
    image_url: Optional[str] = None


class VehicleUpdate(VehicleFinancials):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    plate: Optional[str] = None
    fuel_capacity_liters: Optional[float] = Field(None, gt=0)
    average_consumption_km_per_liter: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None


class VehicleResponse(VehicleFinancials):
    id: str
    make: str
    model: str
    year: int
    plate: Optional[str] = None
    fuel_capacity_liters: float
    average_consumption_km_per_liter: float
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CostPerKmResponse(BaseModel):
    amortization_per_km: float
    fixed_cost_per_km: float
    fuel_cost_per_km: float
    total_cost_per_km: float


class RefuelEstimateResponse(BaseModel):
    km_expected: int
    km_remaining: int
    date_expected: datetime


class VehicleStatsResponse(BaseModel):
    fuel: FuelStatsResponse
    costs_per_km: CostPerKmResponse
    refuel_estimate: Optional[RefuelEstimateResponse] = None


class VehicleReportResponse(BaseModel):
    empty: bool
    period_days: int
    fuel_logs_count: int
    services_count: int
    km_traveled: float
    total_cost: float
    total_fuel_cost: float
    total_service_cost: float
    cost_per_km: float
    fuel_cost_per_km: float
    service_cost_per_km: float
    cost_per_day: float
    fuel_cost_per_day: float
    service_cost_per_day: float
    avg_consumption: float
    min_consumption: float
    max_consumption: float
    km_per_day: float
    avg_range_km: float
    avg_km_between_fill_ups: float


class MonthlyCostResponse(BaseModel):
    month: str  # YYYY-MM
    fuel: float
    services: float
    total: float
