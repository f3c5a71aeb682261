"""
Trip Discovery Tool
Creative trip content (overview, history, costs, itinerary) as raw JSON text
"""

from ..llm.chat_provider import ChatProvider, ModelProfile
from ..llm.output import strip_code_fences
from ..llm.prompts import TRIP_CONTENT_PROMPT


class TripDiscoveryTool:
    
    TOOL_NAME = "TripDiscovery"
    
    def __init__(self, chat_provider: ChatProvider):
        self.chat = chat_provider
    
    async def generate_trip_content(self, destination: str, days: int, interests: str, budget: str) -> str:
        raw = await self.chat.complete(
            TRIP_CONTENT_PROMPT,
            {
                "destination": destination,
                "days": days,
                "interests": interests or "general sightseeing",
                "budget": budget
            },
            profile=ModelProfile.REACTIVE
        )
        # The model adds fences despite instructions
        return strip_code_fences(raw) or "{}"
    
    def register(self, registry):
        registry.register(
            tool_name=self.TOOL_NAME,
            function_name="generate_trip_content",
            description="Generates the creative content (Overview, History, Itinerary) for a trip.",
            parameters={
                "type": "object",
                "properties": {
                    "destination": {"type": "string", "description": "Destination city"},
                    "days": {"type": "integer", "description": "Trip duration in days"},
                    "interests": {"type": "string", "description": "User interests"},
                    "budget": {"type": "string", "description": "Budget level"}
                },
                "required": ["destination", "days", "interests", "budget"]
            },
            handler=self.generate_trip_content
        )
