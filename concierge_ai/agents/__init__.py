# agents/__init__.py
"""
AI Agents Package

Contains the orchestration pieces:
- SecurityGate: Data-access policy for model-authored queries
- ToolRegistry / ToolInvocationPipeline: Explicit tools + audited invocation
- BackgroundTaskGroup: Tracked fire-and-forget work
- ParallelEnrichmentWorkflow: Trip planner
- TripBriefingWorkflow: Pre-arrival email
- ConciergeAgent: Tool-calling chat
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .background import BackgroundTaskGroup
    from .security_gate import SecurityGate, SecurityDecision
    from .pipeline import ToolCall, ToolInvocationPipeline, ToolRegistry
    from .trip_planner import ParallelEnrichmentWorkflow, trip_length_days
    from .trip_briefing import TripBriefingWorkflow
    from .concierge_agent import ConciergeAgent, sanitize_answer

__all__ = [
    "BackgroundTaskGroup",
    "SecurityGate",
    "SecurityDecision",
    "ToolCall",
    "ToolInvocationPipeline",
    "ToolRegistry",
    "ParallelEnrichmentWorkflow",
    "trip_length_days",
    "TripBriefingWorkflow",
    "ConciergeAgent",
    "sanitize_answer",
]
