"""Global test fixtures and utilities for spike-tracker tests"""
import pytest
from datetime import datetime, timezone

from spike_tracker.models.user import User
from spike_tracker.services.event_service import EventProcessingService
from spike_tracker.services.store import InMemoryStore


class FixedRandom:
    """Stand-in for random.Random with scripted draws"""

    def __init__(self, draw: float = 0.99, bonus: int = 10):
        self.draw = draw
        self.bonus = bonus
        self.randint_calls = []

    def random(self) -> float:
        return self.draw

    def randint(self, a: int, b: int) -> int:
        self.randint_calls.append((a, b))
        return self.bonus

    def choice(self, seq):
        return seq[0]


# ============================================================================
# Randomness Fixtures
# ============================================================================

@pytest.fixture
def unlucky_rng():
    """RNG whose draw never triggers the surprise bonus"""
    return FixedRandom(draw=0.99)


@pytest.fixture
def lucky_rng():
    """RNG whose draw always triggers a 10-point surprise bonus"""
    return FixedRandom(draw=0.0, bonus=10)


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def morning():
    """10:00 UTC on a fixed day"""
    return datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def evening():
    """20:00 UTC on a fixed day"""
    return datetime(2024, 1, 15, 20, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_device_id():
    """Standard test device ID"""
    return "device-123456789"


@pytest.fixture
def test_user(test_device_id):
    """Registered user with a normal BMI (23.0)"""
    return User(
        device_id=test_device_id,
        age=30,
        gender="female",
        height=165.0,
        weight=62.5,
        bmi=23.0,
    )


@pytest.fixture
def overweight_user(test_device_id):
    """Registered user with BMI 28.0 (175 cm, 85.75 kg)"""
    return User(
        device_id=test_device_id,
        age=42,
        gender="male",
        height=175.0,
        weight=85.75,
        bmi=28.0,
    )


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Empty in-memory store"""
    return InMemoryStore()


@pytest.fixture
def event_service(store, unlucky_rng):
    """EventProcessingService without AI and without surprise bonuses"""
    return EventProcessingService(store, rng=unlucky_rng)
