import asyncio
import json
from datetime import date

import pytest

from concierge_ai.agents.pipeline import ToolRegistry
from concierge_ai.agents.trip_briefing import TripBriefingWorkflow
from concierge_ai.agents.trip_planner import (
    FALLBACK_DESCRIPTION,
    ParallelEnrichmentWorkflow,
    trip_length_days
)
from concierge_ai.interfaces.email_sender import SmtpEmailSender
from concierge_ai.schemas.ai_schemas import GeoCoordinates, HotelRecommendation, TripSearchCriteria
from concierge_ai.tools import GuestCommunicationTool, TripDiscoveryTool

from conftest import FakeChatProvider, FakeEmailSender, FakeReader


def criteria(**overrides):
    values = {
        "destination": "Cairo",
        "start_date": date(2025, 3, 1),
        "end_date": date(2025, 3, 3),
        "interests": ["history", "food"],
        "budget_level": "medium"
    }
    values.update(overrides)
    return TripSearchCriteria(**values)


class StubHotels:
    def __init__(self, hotels=None, error=None, delay=0.0):
        self.hotels = hotels or []
        self.error = error
        self.delay = delay
        self.calls = 0
    
    async def get_hotel_recommendations(self, search):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.hotels


NILE_HOTEL = HotelRecommendation(
    name="Nile View",
    rating=4.5,
    price_per_night=120.0,
    coordinates=GeoCoordinates(latitude=30.05, longitude=31.23)
)


def planner(chat, hotels):
    registry = ToolRegistry()
    TripDiscoveryTool(chat).register(registry)
    return ParallelEnrichmentWorkflow(registry, hotels)


def test_trip_length_is_inclusive_and_at_least_one_day():
    assert trip_length_days(date(2025, 3, 1), date(2025, 3, 3)) == 3
    assert trip_length_days(date(2025, 3, 1), date(2025, 3, 1)) == 1
    assert trip_length_days(date(2025, 3, 5), date(2025, 3, 1)) == 1


@pytest.mark.asyncio
async def test_malformed_ai_content_still_returns_hotels():
    chat = FakeChatProvider(["Sorry, I cannot produce JSON today."])
    
    trip = await planner(chat, StubHotels([NILE_HOTEL])).discover_trip(criteria())
    
    assert trip.trip_overview.title == "Trip to Cairo"
    assert trip.trip_overview.description == FALLBACK_DESCRIPTION
    assert [h.name for h in trip.lodging_recommendations] == ["Nile View"]
    assert trip.trip_overview.coordinates.latitude == 30.05
    assert trip.itinerary == []


@pytest.mark.asyncio
async def test_hotel_failure_keeps_ai_content():
    content = {
        "Trip_Overview": {"Title": "Pharaohs and Falafel", "Description": "Three days in Cairo"},
        "Estimated_Costs": {"Accommodation": 300, "Transportation": 40, "Food": 90},
        "Itinerary": [
            {"Day": 1, "Title": "Giza", "Activities": ["Pyramids"]},
            "not an item",
            {"Day": 2, "Title": "Old Cairo", "Activities": ["Coptic Museum"]}
        ]
    }
    chat = FakeChatProvider([json.dumps(content)])
    
    trip = await planner(chat, StubHotels(error=TimeoutError("serpapi"))).discover_trip(criteria())
    
    assert trip.trip_overview.title == "Pharaohs and Falafel"
    assert trip.estimated_costs.accommodation == 300
    assert [item.day for item in trip.itinerary] == [1, 2]
    assert trip.lodging_recommendations == []


@pytest.mark.asyncio
async def test_prompt_receives_trip_length_and_interests():
    chat = FakeChatProvider(["{}"])
    
    await planner(chat, StubHotels()).discover_trip(criteria())
    
    prompt = chat.requests[0]["messages"][0]["content"]
    assert "3" in prompt
    assert "history, food" in prompt


@pytest.mark.asyncio
async def test_fetches_run_concurrently():
    class SlowChat(FakeChatProvider):
        async def chat(self, messages, tools=None, profile=None, temperature=0.7):
            await asyncio.sleep(0.2)
            return await super().chat(messages, tools=tools, temperature=temperature)
    
    workflow = planner(SlowChat(["{}"]), StubHotels([NILE_HOTEL], delay=0.2))
    
    loop = asyncio.get_running_loop()
    started = loop.time()
    await workflow.discover_trip(criteria())
    
    assert loop.time() - started < 0.35


# ============================================
# Trip briefing
# ============================================

class StubEnrichment:
    def __init__(self):
        self.weather_calls = []
        self.event_calls = []
    
    async def get_weather_forecast(self, latitude, longitude, start, end):
        self.weather_calls.append((latitude, longitude, start, end))
        return "w" * 5000
    
    async def get_local_events(self, city, start, end):
        self.event_calls.append((city, start, end))
        return "[]"


BOOKING = json.dumps([{
    "Id": 9,
    "StartDate": "2025-05-01",
    "EndDate": "2025-05-04",
    "Email": "guest@example.com",
    "FullName": "Sam Guest",
    "City": "Luxor",
    "Latitude": None,
    "Longitude": None,
    "Description": "No parties."
}])


def briefing(reader, chat, email_sender):
    registry = ToolRegistry()
    GuestCommunicationTool(email_sender).register(registry)
    enrichment = StubEnrichment()
    return TripBriefingWorkflow(reader, enrichment, chat, registry), enrichment


@pytest.mark.asyncio
async def test_briefing_for_unknown_booking():
    email = FakeEmailSender()
    workflow, _ = briefing(FakeReader("No data found."), FakeChatProvider(), email)
    
    assert await workflow.run(9) == {"booking_id": 9, "status": "not_found"}
    assert email.sent == []


@pytest.mark.asyncio
async def test_briefing_is_sent_with_model_subject():
    email = FakeEmailSender()
    chat = FakeChatProvider(['{"subject": "Luxor awaits", "body": "<p>Pack sunscreen</p>"}'])
    workflow, enrichment = briefing(FakeReader(BOOKING), chat, email)
    
    summary = await workflow.run(9)
    
    assert summary["status"] == "sent"
    assert summary["subject"] == "Luxor awaits"
    assert email.sent[0]["html_body"] == "<p>Pack sunscreen</p>"
    # Listing without coordinates falls back to the default location
    assert enrichment.weather_calls[0][:2] == (30.0444, 31.2357)
    assert enrichment.event_calls[0][0] == "Luxor"
    prompt = chat.requests[0]["messages"][0]["content"]
    assert "w" * 4001 not in prompt


@pytest.mark.asyncio
async def test_briefing_falls_back_when_model_output_is_garbage():
    email = FakeEmailSender(result=False)
    workflow, _ = briefing(FakeReader(BOOKING), FakeChatProvider(["???"]), email)
    
    summary = await workflow.run(9)
    
    assert summary["status"] == "failed"
    assert summary["subject"] == "Your trip to Luxor is almost here!"


@pytest.mark.asyncio
async def test_multi_line_model_subject_is_flattened(monkeypatch):
    sender = SmtpEmailSender(host="smtp.test", port=25, username="", password="", sender="from@test", timeout=5)
    delivered = []
    monkeypatch.setattr(sender, "_send_sync", delivered.append)
    chat = FakeChatProvider(['{"subject": "Luxor awaits!\\nPack light", "body": "<p>See you soon</p>"}'])
    workflow, _ = briefing(FakeReader(BOOKING), chat, sender)
    
    summary = await workflow.run(9)
    
    assert summary["status"] == "sent"
    assert summary["subject"] == "Luxor awaits! Pack light"
    assert delivered[0]["Subject"] == "Luxor awaits! Pack light"
