"""Application wiring for the spike tracker engine"""
import logging
from typing import Optional

from spike_tracker import config
from spike_tracker.services.container import ServiceContainer
from spike_tracker.services.event_service import EventProcessingService
from spike_tracker.services.store import InMemoryStore

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, (level or config.LOG_LEVEL).upper())
    )


def build_container(store=None, ai_client=None) -> ServiceContainer:
    """
    Validate configuration and wire the service container.

    An AsyncOpenAI client is created only when AI insights are enabled and
    no client was passed in.
    """
    logger.info("Validating configuration...")
    config.validate_config()

    if ai_client is None and config.ENABLE_AI_INSIGHTS:
        from openai import AsyncOpenAI
        ai_client = AsyncOpenAI(api_key=config.OPENAI_API_KEY)
        logger.info(f"AI insights enabled with {config.INSIGHT_MODEL}")
    elif ai_client is None:
        logger.info("AI insights disabled, using heuristic insights only")

    return ServiceContainer(
        store=store or InMemoryStore(),
        ai_client=ai_client,
        insight_model=config.INSIGHT_MODEL,
        insight_timeout=config.INSIGHT_TIMEOUT_SECONDS,
    )


def build_service(store=None, ai_client=None) -> EventProcessingService:
    """Build a ready-to-use EventProcessingService"""
    return build_container(store=store, ai_client=ai_client).event_service
