from pydantic import BaseModel, Field, model_validator
from typing import List, Literal, Optional
from datetime import datetime


class Expense(BaseModel):
    description: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)


class TripStage(BaseModel):
    stage_end_odometer: float = Field(..., gt=0)
    stage_end_date: datetime
    notes: Optional[str] = None
    expenses: List[Expense] = []


class TripBase(BaseModel):
    trip_type: Optional[str] = None
    destination: Optional[str] = None
    notes: Optional[str] = None
    start_date: Optional[datetime] = None
    start_odometer: Optional[float] = Field(None, gt=0)
    end_date: Optional[datetime] = None
    end_odometer: Optional[float] = Field(None, gt=0)
    status: Optional[Literal["active", "completed"]] = None
    stages: Optional[List[TripStage]] = None
    expenses: Optional[List[Expense]] = None
    exchange_rate: Optional[float] = Field(None, gt=0)

    @model_validator(mode="after")
    def check_odometers(self):
        # Each stage must end further along than the previous one
        last = self.start_odometer
        for stage in self.stages or []:
            if last is not None and stage.stage_end_odometer <= last:
                raise ValueError("Stage end odometer must be greater than the previous reading")
            last = stage.stage_end_odometer
        if not self.stages and self.start_odometer and self.end_odometer and self.end_odometer < self.start_odometer:
            raise ValueError("End odometer must not be lower than the start odometer")
        return self


class TripCreate(TripBase):
    trip_type: str
    destination: str
    start_date: datetime
    start_odometer: float = Field(..., gt=0)
    status: Literal["active", "completed"] = "active"


class TripUpdate(TripBase):
    pass


class TripSummary(BaseModel):
    km_traveled: float
    fuel_logs_count: int
    fuel_consumed: float
    fuel_cost: float
    consumption: float
    cost_per_km: float
    expenses_total: float
    total_cost: float
    duration_minutes: Optional[int] = None


class TripResponse(BaseModel):
    id: str
    vehicle_id: str
    trip_type: str
    destination: str
    notes: Optional[str] = None
    start_date: datetime
    start_odometer: float
    end_date: Optional[datetime] = None
    end_odometer: Optional[float] = None
    status: str
    stages: List[TripStage] = []
    expenses: List[Expense] = []
    exchange_rate: Optional[float] = None
    summary: Optional[TripSummary] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TripEstimateRequest(BaseModel):
    kilometers: float = Field(..., gt=0)
    exchange_rate: Optional[float] = Field(None, gt=0)
    other_expenses: float = Field(0, ge=0)


class TripEstimateResponse(BaseModel):
    kilometers: float
    fuel_cost_per_km: float
    vehicle_cost_per_km: float
    total_cost_per_km: float
    fuel_cost: float
    vehicle_cost: float
    other_expenses: float
    fuel_total: float
    total_cost: float
