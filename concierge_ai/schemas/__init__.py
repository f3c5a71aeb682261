# schemas/__init__.py
"""
Pydantic Schemas Package

Contains all Pydantic v2 models for API requests/responses
and the trip planner payloads.
"""

from .ai_schemas import (
    # Trip planner
    TravelersInfo, TripSearchCriteria, GeoCoordinates, TripOverview,
    EstimatedCosts, ItineraryItem, HotelRecommendation, TripResponse,
    # Chat
    ChatMessage, AskRequest, AskResponse,
    # Copywriting
    DescriptionRequest, DescriptionResponse,
    # Sync / health
    SyncStatusResponse, HealthResponse
)

__all__ = [
    "TravelersInfo", "TripSearchCriteria", "GeoCoordinates", "TripOverview",
    "EstimatedCosts", "ItineraryItem", "HotelRecommendation", "TripResponse",
    "ChatMessage", "AskRequest", "AskResponse",
    "DescriptionRequest", "DescriptionResponse",
    "SyncStatusResponse", "HealthResponse"
]
