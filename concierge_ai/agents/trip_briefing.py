"""
Trip Briefing Workflow
Pre-arrival email for a booking:
1. Load booking, guest and listing
2. Fetch weather and local events concurrently
3. Ask the reactive model for subject + HTML body
4. Send through the send_trip_briefing_email tool (audited)
"""

import asyncio
import json
from datetime import date, datetime
from typing import Any, Dict, Optional

from loguru import logger

from ..interfaces.sql_executor import NO_DATA, ReadOnlyQueryExecutor
from ..interfaces.travel_data import TripEnrichmentService
from ..llm.chat_provider import ChatProvider, ModelProfile
from ..llm.output import parse_json_object
from ..llm.prompts import TRIP_BRIEFING_PROMPT
from .pipeline import ToolRegistry


BOOKING_DETAILS_SQL = """
    SELECT b.Id, b.StartDate, b.EndDate,
           u.Email, u.FullName, u.UserName,
           l.City, l.Latitude, l.Longitude, l.Description
    FROM Bookings b
    JOIN Users u ON b.GuestId = u.Id
    JOIN Listings l ON b.ListingId = l.Id
    WHERE b.Id = %(booking_id)s
    LIMIT 1
"""

# Used when the listing has no coordinates
DEFAULT_LATITUDE = 30.0444
DEFAULT_LONGITUDE = 31.2357

# Raw provider JSON can be large; the model only needs the gist
MAX_DATA_CHARS = 4000


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        return date.today()


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class TripBriefingWorkflow:
    """
    Usage:
        workflow = TripBriefingWorkflow(reader, enrichment, chat, registry)
        summary = await workflow.run(booking_id=42)
    """
    
    def __init__(
        self,
        reader: ReadOnlyQueryExecutor,
        enrichment: TripEnrichmentService,
        chat_provider: ChatProvider,
        registry: ToolRegistry
    ):
        self.reader = reader
        self.enrichment = enrichment
        self.chat = chat_provider
        self.registry = registry
    
    async def _load_booking(self, booking_id: int) -> Optional[Dict[str, Any]]:
        result = await self.reader.execute(BOOKING_DETAILS_SQL, {"booking_id": booking_id})
        if result.startswith(NO_DATA) or result.startswith("SQL Error") or result.startswith("Error"):
            if not result.startswith(NO_DATA):
                logger.error(f"[Workflow] Booking lookup failed: {result}")
            return None
        try:
            rows = json.loads(result)
        except ValueError:
            logger.error(f"[Workflow] Could not parse booking {booking_id}")
            return None
        return rows[0] if rows else None
    
    async def _compose(self, guest_name: str, city: str, weather: str, events: str, house_rules: str):
        fallback_subject = f"Your trip to {city} is almost here!"
        fallback_body = (
            f"<h3>Welcome, {guest_name}!</h3>"
            f"<p>We can't wait to host you in {city}. Please review the house rules before you arrive.</p>"
        )
        
        try:
            raw = await self.chat.complete(
                TRIP_BRIEFING_PROMPT,
                {
                    "guest_name": guest_name,
                    "city": city,
                    "weather": weather[:MAX_DATA_CHARS],
                    "events": events[:MAX_DATA_CHARS],
                    "house_rules": house_rules or "No special house rules."
                },
                profile=ModelProfile.REACTIVE
            )
        except Exception as e:
            logger.error(f"[Workflow] Briefing generation failed: {e}")
            return fallback_subject, fallback_body
        
        data = parse_json_object(raw) or {}
        subject = " ".join(str(data.get("subject") or "").split()) or fallback_subject
        body = str(data.get("body") or "").strip() or fallback_body
        return subject, body
    
    async def run(self, booking_id: int) -> Dict[str, Any]:
        """
        Returns:
            dict: booking_id, status ("sent", "failed", "not_found") and, when sent, email/subject
        """
        logger.info(f"[Workflow] Starting Trip Planner for Booking {booking_id}...")
        
        booking = await self._load_booking(booking_id)
        if booking is None:
            logger.warning(f"[Workflow] Booking {booking_id} not found")
            return {"booking_id": booking_id, "status": "not_found"}
        
        email = booking.get("Email") or ""
        if not email:
            return {"booking_id": booking_id, "status": "failed", "reason": "Guest has no email"}
        
        guest_name = booking.get("FullName") or booking.get("UserName") or "Guest"
        city = booking.get("City") or ""
        start = _as_date(booking.get("StartDate"))
        end = _as_date(booking.get("EndDate"))
        latitude = _as_float(booking.get("Latitude"), DEFAULT_LATITUDE)
        longitude = _as_float(booking.get("Longitude"), DEFAULT_LONGITUDE)
        
        weather, events = await asyncio.gather(
            self.enrichment.get_weather_forecast(latitude, longitude, start, end),
            self.enrichment.get_local_events(city, start, end)
        )
        
        subject, body = await self._compose(guest_name, city, weather, events, booking.get("Description") or "")
        
        outcome = await self.registry.call(
            "send_trip_briefing_email",
            {"email": email, "subject": subject, "body_content": body}
        )
        status = "sent" if str(outcome).startswith("Email sent") else "failed"
        
        logger.info(f"[Workflow] Trip Plan {status} for {email}")
        return {"booking_id": booking_id, "status": status, "email": email, "subject": subject}
