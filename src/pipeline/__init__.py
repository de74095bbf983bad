"""Pipeline orchestration components for the event search service."""

from src.pipeline.event_details import EventDetailPipeline
from src.pipeline.orchestrator import SearchOrchestrator

__all__ = [
    "EventDetailPipeline",
    "SearchOrchestrator",
]
