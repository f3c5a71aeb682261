"""
API Routers

- chat: /api/ai/chat/ask
- trips: /api/ai/trips/discover, /api/ai/trips/{booking_id}/briefing
- descriptions: /api/ai/descriptions
- knowledge: /api/ai/knowledge/sync, /status, /search
"""

from .chat import router as chat_router
from .descriptions import router as descriptions_router
from .knowledge import router as knowledge_router
from .trips import router as trips_router

__all__ = [
    "chat_router",
    "descriptions_router",
    "knowledge_router",
    "trips_router",
]
