"""Tests for application wiring (spike_tracker/main.py and the service container)"""
import pytest
from unittest.mock import Mock

from spike_tracker import config
from spike_tracker.exceptions import ConfigurationError
from spike_tracker.insights.generator import OpenAIInsightGenerator
from spike_tracker.main import build_container, build_service
from spike_tracker.services.container import ServiceContainer
from spike_tracker.services.event_service import EventProcessingService
from spike_tracker.services.store import InMemoryStore


@pytest.fixture
def ai_disabled(monkeypatch):
    monkeypatch.setattr(config, "ENABLE_AI_INSIGHTS", False)
    monkeypatch.setattr(config, "LOG_LEVEL", "INFO")


def test_build_service_without_ai(ai_disabled):
    service = build_service()

    assert isinstance(service, EventProcessingService)
    assert isinstance(service.store, InMemoryStore)
    assert service.insight_generator is None


def test_build_service_uses_given_store_and_client(ai_disabled):
    store = InMemoryStore()
    client = Mock()

    service = build_service(store=store, ai_client=client)

    assert service.store is store
    assert isinstance(service.insight_generator, OpenAIInsightGenerator)
    assert service.insight_generator.client is client


def test_build_container_validates_config(monkeypatch):
    monkeypatch.setattr(config, "ENABLE_AI_INSIGHTS", True)
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")

    with pytest.raises(ConfigurationError):
        build_container()


def test_build_container_creates_openai_client(monkeypatch):
    monkeypatch.setattr(config, "ENABLE_AI_INSIGHTS", True)
    monkeypatch.setattr(config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(config, "INSIGHT_MODEL", "openai:gpt-4o-mini")
    monkeypatch.setattr(config, "LOG_LEVEL", "INFO")

    container = build_container()

    assert container.ai_client is not None
    assert container.insight_generator.model == "gpt-4o-mini"


def test_container_services_are_lazy_singletons():
    container = ServiceContainer(store=InMemoryStore())

    assert container.insight_generator is None
    assert container.event_service is container.event_service
