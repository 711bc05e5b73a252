"""AI insight generation with a guaranteed heuristic fallback"""
import json
import logging
import time
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from pydantic import ValidationError as PydanticValidationError

from spike_tracker.exceptions import (
    InsightGenerationError,
    InsightParseError,
)
from spike_tracker.insights.heuristics import derive_insight
from spike_tracker.models.insight import Insight
from spike_tracker.models.user import User
from spike_tracker.resilience.circuit_breaker import INSIGHT_BREAKER, call_with_breaker
from spike_tracker.resilience.fallback import FallbackStrategy, execute_with_fallbacks
from spike_tracker.resilience.metrics import record_api_call
from spike_tracker.resilience.retry import retry_with_backoff
from spike_tracker.utils.datetime_helpers import local_hour, time_of_day

logger = logging.getLogger(__name__)

AI_SOURCE = "ai"
HEURISTIC_SOURCE = "heuristic"


class InsightGenerator(Protocol):
    """Anything that can produce an Insight for an event"""

    async def generate(
        self,
        sugar_type: str,
        intensity: int,
        steps: float,
        sleep_hours: float,
        user: User,
        now: datetime,
    ) -> Insight:
        ...


def _field(user: Union[User, Mapping[str, Any], None], name: str, default: Any = None) -> Any:
    if user is None:
        return default
    if isinstance(user, Mapping):
        return user.get(name, default)
    value = getattr(user, name, default)
    # Enums render as their value in the prompt
    return getattr(value, "value", value)


def build_insight_prompt(
    sugar_type: str,
    intensity: int,
    steps: float,
    sleep_hours: float,
    user: Union[User, Mapping[str, Any], None],
    now: datetime,
) -> str:
    """Prompt asking the model for a short cause-effect insight and one action"""
    hour = local_hour(now, _field(user, "timezone"))

    return f"""User Profile:
- Age: {_field(user, "age", "unknown")}
- Gender: {_field(user, "gender", "unknown")}
- Activity Level: {_field(user, "activity_level", "unknown")}
- Daily Sugar Target: {_field(user, "target_sugar", 30)}g
- Current Streak: {_field(user, "streak", 0)} days

Current Event:
- Consumed: {sugar_type}
- Intensity (1-5): {intensity}
- Time: {time_of_day(hour)} ({hour}:00)
- Steps Today: {steps}
- Sleep Last Night: {sleep_hours}h

Task:
1. Analyze the health impact of this specific sugar event given the context (time, activity, sleep).
2. Provide a SHORT, scientific "Cause-Effect" insight (max 2 sentences).
3. Suggest ONE immediate, doable corrective action (e.g., walk, water, protein).

Format response as JSON:
{{
  "insight": "...",
  "action": "..."
}}"""


def parse_generated_insight(text: Optional[str]) -> Insight:
    """
    Parse model output into an Insight

    Accepts bare JSON or JSON wrapped in markdown code blocks.

    Raises:
        InsightParseError: If the output is empty, not JSON, or missing fields
    """
    if not text or not text.strip():
        raise InsightParseError("Empty response from insight generator", raw_output=text)

    # Extract JSON from response (may be wrapped in markdown code blocks)
    if "```json" in text:
        json_str = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        json_str = text.split("```")[1].split("```")[0].strip()
    else:
        json_str = text.strip()

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise InsightParseError(f"Insight response is not JSON: {e}", raw_output=text)

    if not isinstance(data, dict):
        raise InsightParseError("Insight response is not a JSON object", raw_output=text)

    try:
        return Insight.model_validate(data)
    except PydanticValidationError as e:
        raise InsightParseError(
            f"Insight response failed validation: {e.error_count()} error(s)",
            raw_output=text,
        )


class OpenAIInsightGenerator:
    """
    Insight generator backed by an OpenAI chat model

    The client handle is injected (an openai.AsyncOpenAI instance or any
    object with the same chat.completions.create coroutine).
    """

    def __init__(
        self,
        client: Any,
        model: str = "gpt-4o-mini",
        timeout: float = 10.0,
        max_retries: int = 2,
        breaker=INSIGHT_BREAKER,
    ):
        self.client = client
        # Accept "openai:gpt-4o-mini" as well as "gpt-4o-mini"
        self.model = model.split(":", 1)[1] if ":" in model else model
        self.timeout = timeout
        self.max_retries = max_retries
        self.breaker = breaker

    async def _complete(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=300,
            timeout=self.timeout,
        )
        return response.choices[0].message.content

    async def generate(
        self,
        sugar_type: str,
        intensity: int,
        steps: float,
        sleep_hours: float,
        user: User,
        now: datetime,
    ) -> Insight:
        """
        Ask the model for an insight

        Raises:
            InsightGenerationError: The call failed or the breaker is open
            InsightParseError: The model answered with something unusable
        """
        prompt = build_insight_prompt(sugar_type, intensity, steps, sleep_hours, user, now)
        started = time.monotonic()

        try:
            content = await call_with_breaker(
                self.breaker,
                retry_with_backoff,
                self._complete,
                prompt,
                max_retries=self.max_retries,
            )
        except Exception as e:
            record_api_call("insight_generator", success=False, duration=time.monotonic() - started)
            raise InsightGenerationError(
                f"Insight generation failed: {type(e).__name__}: {e}",
                status_code=getattr(e, "status_code", None),
                user_id=_field(user, "device_id"),
                operation="generate_insight",
                cause=e,
            )

        record_api_call("insight_generator", success=True, duration=time.monotonic() - started)
        logger.debug(f"Insight generator response: {content}")

        return parse_generated_insight(content)


async def resolve_insight(
    sugar_type: str,
    intensity: int,
    steps: float,
    sleep_hours: float,
    user: User,
    now: datetime,
    generator: Optional[InsightGenerator] = None,
) -> Dict[str, str]:
    """
    Produce the insight shown for an event

    The AI generator's answer wins when it is available and well formed;
    otherwise the rule-based engine answers.

    Returns:
        {'insight': str, 'action': str, 'source': 'ai' | 'heuristic'}
    """
    async def _ai(*args):
        insight = await generator.generate(*args)
        return {"insight": insight.insight, "action": insight.action}

    def _heuristic(*args):
        return derive_insight(*args)

    strategies = [FallbackStrategy(HEURISTIC_SOURCE, _heuristic, priority=2)]
    if generator is not None:
        strategies.append(FallbackStrategy(AI_SOURCE, _ai, priority=1))

    outcome = await execute_with_fallbacks(
        strategies, sugar_type, intensity, steps, sleep_hours, user, now
    )
    return {**outcome.value, "source": outcome.strategy}
