# api/trips.py
"""
Trip Planner API
- Discover: AI trip content + hotels, fetched in parallel
- Briefing: pre-arrival email for a booking
"""

from fastapi import APIRouter, Depends, HTTPException

from ..runtime import ConciergeRuntime
from ..schemas.ai_schemas import TripResponse, TripSearchCriteria
from .deps import get_runtime


router = APIRouter(prefix="/api/ai/trips", tags=["trips"])


@router.post("/discover", response_model=TripResponse)
async def discover_trip(criteria: TripSearchCriteria, runtime: ConciergeRuntime = Depends(get_runtime)):
    if criteria.end_date < criteria.start_date:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")
    return await runtime.trip_planner.discover_trip(criteria)


@router.post("/{booking_id}/briefing")
async def send_trip_briefing(booking_id: int, runtime: ConciergeRuntime = Depends(get_runtime)):
    result = await runtime.trip_briefing.run(booking_id)
    if result["status"] == "not_found":
        raise HTTPException(status_code=404, detail=f"Booking {booking_id} not found")
    return result
