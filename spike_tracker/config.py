"""Configuration management"""
import os
from dotenv import load_dotenv

from spike_tracker.exceptions import ConfigurationError

load_dotenv()

# AI insights
# Format: "<provider>:<model>", only the openai provider is wired up
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
INSIGHT_MODEL: str = os.getenv("INSIGHT_MODEL", "openai:gpt-4o-mini")
ENABLE_AI_INSIGHTS: bool = os.getenv("ENABLE_AI_INSIGHTS", "false").lower() == "true"
INSIGHT_TIMEOUT_SECONDS: float = float(os.getenv("INSIGHT_TIMEOUT_SECONDS", "10"))

# Time handling
DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "UTC")

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


# Validation
def validate_config() -> None:
    """Validate required configuration"""
    if ENABLE_AI_INSIGHTS and not OPENAI_API_KEY:
        raise ConfigurationError(
            "OPENAI_API_KEY is required when ENABLE_AI_INSIGHTS is true",
            config_key="OPENAI_API_KEY",
        )
    if ENABLE_AI_INSIGHTS and not INSIGHT_MODEL.startswith("openai:"):
        raise ConfigurationError(
            f"Unsupported insight model: {INSIGHT_MODEL}",
            config_key="INSIGHT_MODEL",
        )
    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(
            f"Invalid LOG_LEVEL: {LOG_LEVEL}",
            config_key="LOG_LEVEL",
        )
    # DEFAULT_TIMEZONE is checked lazily by utils.datetime_helpers.resolve_timezone
