from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from src.database import get_db
from src.schedules.schemas import DepartureSummary, ScheduleSearch, ScheduleSearchResult
from src.schedules.service import ScheduleService

router = APIRouter()

@router.get("/search", response_model=ScheduleSearchResult)
def search_schedules(
    from_station: int = Query(..., description="Origin station ID"),
    to_station: int = Query(..., description="Destination station ID"),
    journey_date: date = Query(..., alias="date", description="Journey date (YYYY-MM-DD)"),
    time: Optional[str] = Query(None, pattern=r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$", description="Earliest departure (HH:MM)"),
    db: Session = Depends(get_db)
):
    """Departures between two stations; seat counts may be a few minutes old"""
    search = ScheduleSearch(
        from_station_id=from_station,
        to_station_id=to_station,
        journey_date=journey_date,
        departure_after=time
    )
    departures = ScheduleService(db).search_departures(search)
    return ScheduleSearchResult(departures=departures, total=len(departures))

@router.get("/{schedule_id}", response_model=DepartureSummary)
def get_schedule(
    schedule_id: int,
    db: Session = Depends(get_db)
):
    """Live departure details, including current remaining seats"""
    departure = ScheduleService(db).get_departure(schedule_id)
    if not departure:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Schedule with ID {schedule_id} not found"
        )
    return departure
