# schemas/ai_schemas.py
"""
Pydantic v2 schemas for the Concierge service
Covers trip planning, chat, copywriting and knowledge sync
"""

from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field


# ============================================
# Trip Planner (input)
# ============================================

class TravelersInfo(BaseModel):
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)


class TripSearchCriteria(BaseModel):
    """What the guest typed into the trip planner"""
    destination: str = Field(..., min_length=1, max_length=200)
    start_date: date
    end_date: date
    budget_level: str = "medium"  # low, medium, high, luxury
    travelers: TravelersInfo = Field(default_factory=TravelersInfo)
    interests: List[str] = Field(default_factory=list)
    currency: str = "USD"


# ============================================
# Trip Planner (output)
# ============================================

class GeoCoordinates(BaseModel):
    latitude: float = 0.0
    longitude: float = 0.0


class TripOverview(BaseModel):
    title: str = ""
    description: str = ""
    history: str = ""
    coordinates: GeoCoordinates = Field(default_factory=GeoCoordinates)


class EstimatedCosts(BaseModel):
    accommodation: float = 0
    transportation: float = 0
    food: float = 0


class ItineraryItem(BaseModel):
    day: int = 0
    title: str = ""
    activities: List[str] = Field(default_factory=list)


class HotelRecommendation(BaseModel):
    """Hotel returned by the external search provider, attached verbatim"""
    name: str = "Unknown Hotel"
    rating: float = 0.0
    review_count: int = 0
    price_per_night: float = 0.0
    currency: str = "USD"
    image_url: str = ""
    booking_link: str = ""
    description: str = ""
    coordinates: GeoCoordinates = Field(default_factory=GeoCoordinates)


class TripResponse(BaseModel):
    trip_overview: TripOverview = Field(default_factory=TripOverview)
    estimated_costs: EstimatedCosts = Field(default_factory=EstimatedCosts)
    itinerary: List[ItineraryItem] = Field(default_factory=list)
    lodging_recommendations: List[HotelRecommendation] = Field(default_factory=list)


# ============================================
# Chat
# ============================================

class ChatMessage(BaseModel):
    """Single chat message"""
    role: str = Field(..., description="'user' or 'assistant'")
    content: str


class AskRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000)
    history: List[ChatMessage] = Field(default_factory=list)
    user_id: Optional[str] = Field(None, description="Authenticated user id, empty for guests")


class AskResponse(BaseModel):
    question: str
    answer: str


# ============================================
# Copywriting
# ============================================

class DescriptionRequest(BaseModel):
    property_details: str = Field(..., min_length=1, max_length=4000)


class DescriptionResponse(BaseModel):
    descriptions: List[str] = Field(default_factory=list)


# ============================================
# Knowledge sync / health
# ============================================

class SyncStatusResponse(BaseModel):
    skipped: bool
    policy_documents: int = 0
    catalog_documents: int = 0
    upserted: int = 0
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    environment: str
    llm_provider: str
    sync_running: bool
    database: bool = False
    vector_db: bool = False
    embedding_model: str = ""
    timestamp: datetime = Field(default_factory=datetime.utcnow)
