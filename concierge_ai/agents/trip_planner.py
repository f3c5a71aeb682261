"""
Trip Planner Workflow
Builds a trip plan from two independent fetches run concurrently:
- AI trip content (overview, costs, itinerary) via the generate_trip_content tool
- Hotel recommendations from the hotel search provider

Latency is bounded by the slower fetch. A failed or malformed AI answer
never fails the response: a default overview is used and the hotels are
still attached.
"""

import asyncio
from datetime import date
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from ..interfaces.travel_data import HotelSearchService
from ..llm.output import parse_json_object
from ..schemas.ai_schemas import (
    EstimatedCosts,
    HotelRecommendation,
    ItineraryItem,
    TripOverview,
    TripResponse,
    TripSearchCriteria
)
from .pipeline import ToolRegistry


FALLBACK_DESCRIPTION = "AI generation failed, but here are your hotels."


def trip_length_days(start: date, end: date) -> int:
    """Inclusive number of days, never less than 1"""
    return max((end - start).days + 1, 1)


def _section(data: Dict[str, Any], name: str) -> Any:
    # Accept trip_overview, Trip_Overview and tripOverview alike
    if name in data:
        return data[name]
    return data.get(name.replace("_", ""))


class ParallelEnrichmentWorkflow:
    """
    Usage:
        planner = ParallelEnrichmentWorkflow(registry, HotelSearchService())
        trip = await planner.discover_trip(criteria)
    """
    
    def __init__(
        self,
        registry: ToolRegistry,
        hotel_service: HotelSearchService,
        timeout: Optional[float] = None
    ):
        self.registry = registry
        self.hotel_service = hotel_service
        self.timeout = timeout
    
    async def _bounded(self, coro):
        if self.timeout:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        return await coro
    
    async def discover_trip(self, criteria: TripSearchCriteria, actor_id: Optional[str] = None) -> TripResponse:
        """
        Args:
            criteria: Destination, dates, travelers, interests, budget
            actor_id: Caller, recorded on the audited content call
        
        Returns:
            TripResponse: Always well-formed, possibly degraded
        """
        days = trip_length_days(criteria.start_date, criteria.end_date)
        
        hotels_result, content_result = await asyncio.gather(
            self._bounded(self.hotel_service.get_hotel_recommendations(criteria)),
            self._bounded(self.registry.call(
                "generate_trip_content",
                {
                    "destination": criteria.destination,
                    "days": days,
                    "interests": ", ".join(criteria.interests),
                    "budget": criteria.budget_level
                },
                actor_id=actor_id
            )),
            return_exceptions=True
        )
        
        hotels: List[HotelRecommendation] = []
        if isinstance(hotels_result, BaseException):
            logger.error(f"Hotel search failed for {criteria.destination}: {hotels_result!r}")
        else:
            hotels = list(hotels_result or [])
        
        response = TripResponse()
        if isinstance(content_result, BaseException):
            logger.error(f"Trip content generation failed for {criteria.destination}: {content_result!r}")
        else:
            self._merge_content(response, content_result)
        
        if not response.trip_overview.title:
            response.trip_overview.title = f"Trip to {criteria.destination}"
            if not response.trip_overview.description:
                response.trip_overview.description = FALLBACK_DESCRIPTION
        
        # Real hotels, verbatim, whatever happened to the AI content
        response.lodging_recommendations = hotels
        if hotels:
            response.trip_overview.coordinates = hotels[0].coordinates
        
        logger.info(
            f"Trip to {criteria.destination}: {days} days, {len(response.itinerary)} itinerary days, "
            f"{len(hotels)} hotels"
        )
        return response
    
    def _merge_content(self, response: TripResponse, content: Any):
        data = parse_json_object(content if isinstance(content, str) else None)
        if data is None:
            logger.error("Failed to parse AI JSON response.")
            return
        
        overview = _section(data, "trip_overview")
        if isinstance(overview, dict):
            try:
                response.trip_overview = TripOverview.model_validate(overview)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed trip_overview: {e.error_count()} error(s)")
        
        costs = _section(data, "estimated_costs")
        if isinstance(costs, dict):
            try:
                response.estimated_costs = EstimatedCosts.model_validate(costs)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed estimated_costs: {e.error_count()} error(s)")
        
        itinerary = _section(data, "itinerary")
        if isinstance(itinerary, list):
            for item in itinerary:
                if not isinstance(item, dict):
                    continue
                try:
                    response.itinerary.append(ItineraryItem.model_validate(item))
                except ValidationError:
                    logger.debug(f"Skipping malformed itinerary entry: {item}")
