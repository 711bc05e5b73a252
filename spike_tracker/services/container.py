"""
Service Container - Dependency Injection Container

Holds the infrastructure handles (store, AI client) and lazily builds the
services that depend on them. Nothing in the engine reads this container;
it exists for the request-handling layer.
"""

from dataclasses import dataclass, field
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    """

    # Infrastructure dependencies (injected)
    store: Any  # InMemoryStore or any store with the same coroutines
    ai_client: Optional[Any] = None  # openai.AsyncOpenAI handle, None disables AI insights
    insight_model: str = "openai:gpt-4o-mini"
    insight_timeout: float = 10.0

    # Services (lazy-loaded via properties)
    _insight_generator: Optional[object] = field(default=None, init=False, repr=False)
    _event_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def insight_generator(self):
        """Get OpenAIInsightGenerator (lazy-loaded), or None without a client"""
        if self._insight_generator is None and self.ai_client is not None:
            from spike_tracker.insights.generator import OpenAIInsightGenerator
            self._insight_generator = OpenAIInsightGenerator(
                self.ai_client,
                model=self.insight_model,
                timeout=self.insight_timeout,
            )
            logger.debug("OpenAIInsightGenerator instantiated")
        return self._insight_generator

    @property
    def event_service(self):
        """Get EventProcessingService instance (lazy-loaded)"""
        if self._event_service is None:
            from spike_tracker.services.event_service import EventProcessingService
            self._event_service = EventProcessingService(
                self.store,
                insight_generator=self.insight_generator,
            )
            logger.debug("EventProcessingService instantiated")
        return self._event_service
