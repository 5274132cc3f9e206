from typing import List, Optional
from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.orm import Session, aliased

from src.models import Station, ScheduledDeparture
from src.schedules.schemas import DepartureStatus, DepartureSummary, ScheduleSearch
from src.schedules.search_cache import search_cache as default_search_cache, search_cache_key

class ScheduleService:
    """Schedule lookup and cached departure search"""

    def __init__(self, db: Session, cache=None):
        self.db = db
        self.cache = cache if cache is not None else default_search_cache

    def get_departure(self, departure_id: int) -> Optional[ScheduledDeparture]:
        """Live departure row, read inside the caller's transaction"""
        return self.db.query(ScheduledDeparture).filter(ScheduledDeparture.id == departure_id).first()

    def search_departures(self, search: ScheduleSearch) -> List[DepartureSummary]:
        """Active departures between two stations on a date, optionally at/after a time"""
        cache_key = search_cache_key(
            search.from_station_id,
            search.to_station_id,
            search.journey_date,
            search.departure_after
        )

        cached = self.cache.get(cache_key)
        if cached is not None:
            return [DepartureSummary(**item) for item in cached]

        departures = self._query_departures(search)
        self.cache.set(cache_key, [d.model_dump(mode="json") for d in departures])
        return departures

    def _query_departures(self, search: ScheduleSearch) -> List[DepartureSummary]:
        origin = aliased(Station)
        destination = aliased(Station)

        query = self.db.query(ScheduledDeparture).join(
            origin, ScheduledDeparture.departure_station_id == origin.id
        ).join(
            destination, ScheduledDeparture.arrival_station_id == destination.id
        ).filter(
            ScheduledDeparture.departure_station_id == search.from_station_id,
            ScheduledDeparture.arrival_station_id == search.to_station_id,
            ScheduledDeparture.valid_from <= search.journey_date,
            or_(ScheduledDeparture.valid_until.is_(None), ScheduledDeparture.valid_until >= search.journey_date),
            ScheduledDeparture.status == DepartureStatus.ACTIVE.value,
            origin.is_active.is_(True),
            destination.is_active.is_(True)
        )

        if search.departure_after:
            after = datetime.strptime(search.departure_after, "%H:%M").time()
            query = query.filter(ScheduledDeparture.departure_time >= after)

        # days_of_week is a JSON list; filter it here to stay portable across databases
        weekday = search.journey_date.isoweekday()
        rows = [
            row for row in query.order_by(ScheduledDeparture.departure_time).all()
            if weekday in (row.days_of_week or [])
        ]
        return [DepartureSummary.model_validate(row) for row in rows]
