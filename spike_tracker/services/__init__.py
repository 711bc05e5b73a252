"""
Service Layer Package

Business logic between the request-handling layer and the store:
- EventProcessingService: registration, event logging, action completion
- InMemoryStore: reference store with per-device locking
- ServiceContainer: wires the store and AI client into services
"""

from spike_tracker.services.container import ServiceContainer
from spike_tracker.services.event_service import EventProcessingService, resolve_log_input
from spike_tracker.services.store import InMemoryStore

__all__ = [
    "ServiceContainer",
    "EventProcessingService",
    "resolve_log_input",
    "InMemoryStore",
]
