"""
EventProcessingService - sugar log business logic

Runs one logged event through the engine on a private snapshot of the
user: body metrics, reward, badges, then insight. The store is only
touched to load the snapshot and write results back.
"""

import logging
import math
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from spike_tracker.exceptions import InvalidInputError, RecordNotFoundError
from spike_tracker.gamification import (
    award_badges,
    compute_reward,
    validate_completion,
    COMPLETION_BONUS,
)
from spike_tracker.health.metrics import calculate_bmi
from spike_tracker.insights.generator import InsightGenerator, resolve_insight
from spike_tracker.models.event import CompletionResult, EventResult
from spike_tracker.models.log import SugarLog
from spike_tracker.models.user import ActivityLevel, User
from spike_tracker.utils.datetime_helpers import ensure_aware, now_utc

logger = logging.getLogger(__name__)

# Values the insight engine assumes when the client sent no activity data
DEFAULT_INSIGHT_STEPS = 5000
DEFAULT_INSIGHT_SLEEP_HOURS = 7
DEFAULT_INTENSITY = 3
LOG_HISTORY_LIMIT = 20

FALLBACK_TYPES = {
    "image": ["AI Visual Scan", "Photo Capture", "Image Analysis"],
    "audio": ["Voice Snippet", "Audio Log", "Voice Memo"],
    "text": ["Quick Entry", "Text Note", "Manual Log"],
}


@dataclass
class EventSession:
    """Mutable working state for one event"""
    user: User
    log: SugarLog
    steps: float
    sleep_hours: float
    now: datetime
    bmi: Optional[float] = None
    points_earned: int = 0
    surprise_bonus: int = 0
    new_badge: Optional[str] = None
    insight: Optional[str] = None
    action: Optional[str] = None
    insight_source: Optional[str] = None


def resolve_log_input(
    sugar_type: Optional[str],
    intensity: Optional[int],
    media_kind: Optional[str] = None,
    rng: Optional[random.Random] = None
) -> Tuple[str, int]:
    """
    Fill in defaults for a log request before it reaches the engine

    A missing type gets a random label matching how the log was captured
    (image, audio, or text); a missing intensity becomes 3.

    Returns:
        (sugar_type, intensity)
    """
    if not sugar_type:
        labels = FALLBACK_TYPES.get(media_kind or "text", FALLBACK_TYPES["text"])
        sugar_type = (rng or random).choice(labels)
    return sugar_type, intensity or DEFAULT_INTENSITY


def _require_number(value, field: str, operation: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
        raise InvalidInputError(
            f"{field} must be a non-negative number",
            field=field,
            value=value,
            operation=operation,
        )


class EventProcessingService:
    """
    Service for logging sugar events and completing suggested actions.

    Responsibilities:
    - User registration (get-or-create by device id)
    - Event processing: reward, streak, badges, insight
    - Action completion within the completion window
    - Log history
    """

    def __init__(
        self,
        store,
        insight_generator: Optional[InsightGenerator] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize EventProcessingService.

        Args:
            store: Store with get/save user and log coroutines and a lock(device_id)
            insight_generator: Optional AI generator, heuristics are used when None
            rng: Random source for surprise bonuses
            clock: Callable returning the current time (defaults to now_utc)
        """
        self.store = store
        self.insight_generator = insight_generator
        self.rng = rng or random.Random()
        self.clock = clock or now_utc
        logger.debug("EventProcessingService initialized")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def register_user(
        self,
        device_id: str,
        age: Optional[int] = None,
        gender: Optional[str] = None,
        height: Optional[float] = None,
        weight: Optional[float] = None,
        activity_level: Optional[str] = None,
        timezone: Optional[str] = None,
    ) -> Tuple[User, bool]:
        """
        Return the user for device_id, creating it if needed.

        BMI is computed once here, when height and weight are known.

        Returns:
            (user, created)
        """
        if not device_id:
            raise InvalidInputError("Device ID is required", field="device_id", operation="register_user")

        async with self.store.lock(device_id):
            existing = await self.store.get_user(device_id)
            if existing:
                return existing, False

            if timezone:
                try:
                    ZoneInfo(timezone)
                except (ZoneInfoNotFoundError, ValueError):
                    raise InvalidInputError(
                        "Unknown timezone",
                        field="timezone",
                        value=timezone,
                        user_id=device_id,
                        operation="register_user",
                    )

            try:
                level = ActivityLevel(activity_level) if activity_level else ActivityLevel.MODERATE
            except ValueError:
                raise InvalidInputError(
                    "Unknown activity level",
                    field="activity_level",
                    value=activity_level,
                    user_id=device_id,
                    operation="register_user",
                )

            user = User(
                device_id=device_id,
                age=age,
                gender=gender,
                height=height,
                weight=weight,
                activity_level=level,
                bmi=calculate_bmi(height, weight),
                timezone=timezone or "UTC",
            )
            await self.store.save_user(user)

        logger.info(f"Registered user {device_id} (bmi={user.bmi})")
        return user, True

    async def get_user(self, device_id: str) -> User:
        user = await self.store.get_user(device_id)
        if user is None:
            raise RecordNotFoundError(
                "User not found", record_type="User", record_id=device_id, operation="get_user"
            )
        return user

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def log_event(
        self,
        device_id: str,
        sugar_type: str,
        intensity: int,
        steps: float = 0,
        sleep_hours: float = 0,
        now: Optional[datetime] = None,
    ) -> EventResult:
        """
        Log a sugar event and compute its feedback.

        Args:
            device_id: Owner's device id
            sugar_type: What was consumed
            intensity: Sugar intensity 1-5
            steps: Steps today (0 if unknown)
            sleep_hours: Sleep last night (0 if unknown)
            now: Event time (defaults to the service clock)

        Raises:
            InvalidInputError: Missing or out-of-range input
            RecordNotFoundError: Unknown device id
        """
        self._validate_event_input(device_id, sugar_type, intensity, steps, sleep_hours)
        now = ensure_aware(now or self.clock())

        async with self.store.lock(device_id):
            user = await self.get_user(device_id)
            log = SugarLog(user_id=device_id, type=sugar_type, intensity=intensity, created_at=now)
            await self.store.save_log(log)

            session = EventSession(user=user, log=log, steps=steps, sleep_hours=sleep_hours, now=now)
            self._apply_body_metrics(session)
            self._apply_reward(session)
            self._apply_badges(session)
            await self.store.save_user(session.user)

        await self._apply_insight(session)
        await self._attach_insight(session)

        logger.info(
            f"Processed log {log.id} for {device_id}: +{session.points_earned} points "
            f"(surprise {session.surprise_bonus}), streak={session.user.streak}, "
            f"badge={session.new_badge}, insight={session.insight_source}"
        )

        return EventResult(
            log=session.log,
            streak=session.user.streak,
            points=session.user.points,
            points_earned=session.points_earned,
            surprise_bonus=session.surprise_bonus,
            new_badge=session.new_badge,
            insight=session.insight,
            action=session.action,
            insight_source=session.insight_source,
            bmi=session.bmi,
        )

    def _validate_event_input(self, device_id, sugar_type, intensity, steps, sleep_hours) -> None:
        if not device_id:
            raise InvalidInputError("Missing required field: deviceId", field="device_id", operation="log_event")
        if not sugar_type or not isinstance(sugar_type, str):
            raise InvalidInputError(
                "Missing required field: type", field="type", value=sugar_type, user_id=device_id, operation="log_event"
            )
        if isinstance(intensity, bool) or not isinstance(intensity, int) or not 1 <= intensity <= 5:
            raise InvalidInputError(
                "Intensity must be an integer between 1 and 5",
                field="intensity",
                value=intensity,
                user_id=device_id,
                operation="log_event",
            )
        _require_number(steps, "steps", "log_event")
        _require_number(sleep_hours, "sleep_hours", "log_event")

    def _apply_body_metrics(self, session: EventSession) -> None:
        # Current value for the response only; the stored bmi stays a registration snapshot
        session.bmi = calculate_bmi(session.user.height, session.user.weight)

    def _apply_reward(self, session: EventSession) -> None:
        user = session.user
        reward = compute_reward(
            previous_streak=user.streak,
            last_log_date=user.last_log_date,
            steps=session.steps,
            now=session.now,
            rng=self.rng,
            tz=user.timezone,
        )
        user.streak = reward["new_streak"]
        user.points += reward["points_earned"]
        user.last_log_date = session.now
        session.points_earned = reward["points_earned"]
        session.surprise_bonus = reward["surprise_bonus"]

    def _apply_badges(self, session: EventSession) -> None:
        result = award_badges(session.user.badges, session.user.streak, session.now)
        session.user.badges = result["badges"]
        session.new_badge = result["awarded_name"]

    async def _apply_insight(self, session: EventSession) -> None:
        result = await resolve_insight(
            session.log.type,
            session.log.intensity,
            session.steps or DEFAULT_INSIGHT_STEPS,
            session.sleep_hours or DEFAULT_INSIGHT_SLEEP_HOURS,
            session.user,
            session.now,
            generator=self.insight_generator,
        )
        session.insight = result["insight"]
        session.action = result["action"]
        session.insight_source = result["source"]

    async def _attach_insight(self, session: EventSession) -> None:
        # The log is visible while the insight is generated; only touch the insight fields
        async with self.store.lock(session.log.user_id):
            log = await self.store.get_log(session.log.id)
            log.insight = session.insight
            log.action = session.action
            await self.store.save_log(log)
        session.log = log

    # ------------------------------------------------------------------
    # Action completion
    # ------------------------------------------------------------------

    async def complete_action(self, log_id: str, now: Optional[datetime] = None) -> CompletionResult:
        """
        Mark a log's suggested action as done and award the bonus.

        Raises:
            RecordNotFoundError: Unknown log id
            AlreadyCompletedError: Action was already completed
            ActionExpiredError: Completion window has closed
        """
        now = ensure_aware(now or self.clock())

        log = await self.store.get_log(log_id)
        if log is None:
            raise RecordNotFoundError("Log not found", record_type="Log", record_id=log_id, operation="complete_action")

        async with self.store.lock(log.user_id):
            # Re-read under the owner's lock so two requests can't both pass the check
            log = await self.store.get_log(log_id)
            validate_completion(log.created_at, log.action_completed, now, log_id=log_id)

            log.action_completed = True
            await self.store.save_log(log)

            points = 0
            user = await self.store.get_user(log.user_id)
            if user:
                user.points += COMPLETION_BONUS
                await self.store.save_user(user)
                points = user.points
            else:
                logger.warning(f"Completed log {log_id} has no owner {log.user_id}, bonus skipped")

        logger.info(f"Action completed for log {log_id}: +{COMPLETION_BONUS} points")
        return CompletionResult(message="Action completed", log_id=log_id, bonus=COMPLETION_BONUS, points=points)

    async def get_logs(self, device_id: str, limit: int = LOG_HISTORY_LIMIT) -> List[SugarLog]:
        """Most recent logs for a device, newest first"""
        return await self.store.list_logs(device_id, limit=limit)
