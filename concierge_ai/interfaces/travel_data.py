"""
Travel Data Providers
- Hotels: SerpApi google_hotels
- Weather: Open-Meteo daily forecast
- Events: Ticketmaster discovery API

Every call degrades to an empty or placeholder value instead of raising.
"""

from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from ..config import settings
from ..schemas.ai_schemas import GeoCoordinates, HotelRecommendation, TripSearchCriteria


SERPAPI_URL = "https://serpapi.com/search.json"
OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
TICKETMASTER_URL = "https://app.ticketmaster.com/discovery/v2/events.json"

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300"
WEATHER_UNAVAILABLE = "Weather data unavailable."
EVENTS_UNAVAILABLE = "No events data available."


def parse_hotel(hotel: Dict[str, Any], currency: str) -> Optional[HotelRecommendation]:
    """Map one SerpApi property; None unless it has a nightly rate and a rating"""
    price = (hotel.get("rate_per_night") or {}).get("extracted_lowest")
    rating = hotel.get("overall_rating")
    if price is None or rating is None:
        return None
    
    images = hotel.get("images") or []
    image_url = images[0].get("original_image") if images else None
    
    coordinates = GeoCoordinates()
    gps = hotel.get("gps_coordinates")
    if gps and gps.get("latitude") is not None and gps.get("longitude") is not None:
        coordinates = GeoCoordinates(latitude=gps["latitude"], longitude=gps["longitude"])
    
    return HotelRecommendation(
        name=hotel.get("name") or "Unknown Hotel",
        rating=float(rating),
        review_count=int(hotel.get("reviews") or 0),
        price_per_night=float(price),
        currency=currency,
        image_url=image_url or PLACEHOLDER_IMAGE,
        booking_link=hotel.get("link") or "",
        description=hotel.get("description") or "No description available.",
        coordinates=coordinates
    )


class HotelSearchService:
    """Hotel recommendations for a trip"""
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        max_results: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.api_key = api_key if api_key is not None else settings.SERPAPI_KEY
        self.max_results = max_results or settings.MAX_HOTEL_RESULTS
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
    
    async def get_hotel_recommendations(self, criteria: TripSearchCriteria) -> List[HotelRecommendation]:
        """
        Returns:
            Top hotels sorted by the provider, [] on any failure
        """
        if not self.api_key:
            logger.warning("SERPAPI_KEY not set, skipping hotel search")
            return []
        
        params = {
            "engine": "google_hotels",
            "q": criteria.destination,
            "check_in_date": criteria.start_date.isoformat(),
            "check_out_date": criteria.end_date.isoformat(),
            "currency": criteria.currency,
            "adults": criteria.travelers.adults,
            "sort_by": 8,
            "api_key": self.api_key,
        }
        
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(SERPAPI_URL, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch hotels from SerpApi: {e}")
            return []
        
        hotels = []
        for hotel in data.get("properties") or []:
            try:
                parsed = parse_hotel(hotel, criteria.currency)
            except (TypeError, ValueError, AttributeError) as e:
                logger.debug(f"Skipping malformed hotel entry: {e}")
                continue
            if parsed is not None:
                hotels.append(parsed)
        
        logger.info(f"Found {len(hotels)} hotels in {criteria.destination}")
        return hotels[:self.max_results]


class TripEnrichmentService:
    """Weather and local events, returned as raw JSON text for the model"""
    
    def __init__(self, ticketmaster_key: Optional[str] = None, timeout: Optional[float] = None):
        self.ticketmaster_key = (
            ticketmaster_key if ticketmaster_key is not None else settings.TICKETMASTER_KEY
        )
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
    
    async def get_weather_forecast(self, latitude: float, longitude: float, start: date, end: date) -> str:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "daily": "temperature_2m_max,precipitation_sum",
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "timezone": "auto",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(OPEN_METEO_URL, params=params)
                response.raise_for_status()
                return response.text
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch weather: {e}")
            return WEATHER_UNAVAILABLE
    
    async def get_local_events(self, city: str, start: date, end: date) -> str:
        if not self.ticketmaster_key:
            logger.warning("TICKETMASTER_KEY not set, skipping events")
            return EVENTS_UNAVAILABLE
        
        params = {
            "apikey": self.ticketmaster_key,
            "city": city,
            "startDateTime": f"{start.isoformat()}T00:00:00Z",
            "endDateTime": f"{end.isoformat()}T23:59:59Z",
            "sort": "date,asc",
            "size": 5,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(TICKETMASTER_URL, params=params)
                response.raise_for_status()
                return response.text
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch events: {e}")
            return EVENTS_UNAVAILABLE
