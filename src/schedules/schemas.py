from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, time
from decimal import Decimal
from enum import Enum

class DepartureStatus(str, Enum):
    """Scheduled departure status enumeration"""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    DELAYED = "delayed"
    MAINTENANCE = "maintenance"

# Departures open for new reservations
BOOKABLE_STATUSES = {DepartureStatus.ACTIVE.value, DepartureStatus.DELAYED.value}

class DepartureSummary(BaseModel):
    """Scheduled departure as shown in search results.

    `available_seats` is an estimate when served from the search cache.
    """
    id: int
    train_name: Optional[str] = None
    train_number: Optional[str] = None
    departure_station_id: int
    arrival_station_id: int
    departure_time: time
    arrival_time: time
    status: DepartureStatus
    delay_minutes: int = 0
    capacity: int
    available_seats: int
    price: Decimal
    valid_from: date
    valid_until: Optional[date] = None
    days_of_week: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6, 7])

    class Config:
        from_attributes = True

class ScheduleSearch(BaseModel):
    """Search parameters for departures between two stations"""
    from_station_id: int
    to_station_id: int
    journey_date: date
    departure_after: Optional[str] = Field(None, pattern=r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

class ScheduleSearchResult(BaseModel):
    departures: List[DepartureSummary]
    total: int
