"""
Schedules & Seat Inventory Module

Scheduled departures for the Transit Booking System and the seat counter that
bookings draw from. It includes:

- Live departure lookup used when pricing and reserving a booking
- Conditional seat reserve/release against the departure row
- Departure search between two stations with a TTL result cache

Key Components:
- service.py: Departure lookup and cached search
- inventory.py: Atomic conditional updates of remaining seats
- search_cache.py: In-memory and Redis search result caches
- router.py: FastAPI endpoints for schedule search
- schemas.py: Pydantic models for departures and search parameters
"""

from .router import router
from .service import ScheduleService
from .inventory import InventoryStore
from .search_cache import InMemorySearchCache, RedisSearchCache, build_search_cache, search_cache_key
from .schemas import DepartureStatus, DepartureSummary, ScheduleSearch, ScheduleSearchResult

__all__ = [
    "router",
    "ScheduleService",
    "InventoryStore",
    "InMemorySearchCache",
    "RedisSearchCache",
    "build_search_cache",
    "search_cache_key",
    "DepartureStatus",
    "DepartureSummary",
    "ScheduleSearch",
    "ScheduleSearchResult"
]
