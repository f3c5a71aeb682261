"""
Agent Tools Package

Each tool registers its functions with the ToolRegistry explicitly:
- DatabaseQueryTool: execute_sql_query
- BookingManagerTool: cancel_my_booking
- CopywritingTool: generate_descriptions
- GeneralAssistantTool: answer_general_question
- GuestCommunicationTool: send_trip_briefing_email
- TripDiscoveryTool: generate_trip_content
"""

from .booking_manager import BookingManagerTool
from .copywriting import CopywritingTool
from .database_query import DatabaseQueryTool
from .general_assistant import GeneralAssistantTool
from .guest_communication import GuestCommunicationTool
from .trip_discovery import TripDiscoveryTool


def register_tools(registry, *tools):
    """Register every given tool with the registry"""
    for tool in tools:
        tool.register(registry)
    return registry


__all__ = [
    "BookingManagerTool",
    "CopywritingTool",
    "DatabaseQueryTool",
    "GeneralAssistantTool",
    "GuestCommunicationTool",
    "TripDiscoveryTool",
    "register_tools",
]
