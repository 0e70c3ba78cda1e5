import json
import logging
import os
from datetime import time, tzinfo
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from errors import ConfigError
from models.preference import MealSlot
from utils.time_utils import parse_hhmm, parse_timezone

logger = logging.getLogger("recipe_service")

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


class SMTPConfig(BaseModel):
    host: str = "smtp.gmail.com"
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True


class Settings(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    firebase_credentials: Dict[str, Any]
    firebase_project_id: Optional[str] = None

    mail_provider: str = "smtp"
    smtp: SMTPConfig = SMTPConfig()
    mail_from: str
    mail_from_name: str = "Recipe Mailer"

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    recipe_count: int = 5

    schedule_timezone: tzinfo
    meal_times: Dict[MealSlot, time]
    scheduler_enabled: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Builds settings from the process environment (and a .env file if present).
        Raises ConfigError when a required secret is missing or a value is malformed.
        """
        load_dotenv()

        raw_creds = os.getenv("FIREBASE_CREDENTIALS", "").strip()
        if not raw_creds:
            raise ConfigError("FIREBASE_CREDENTIALS not set in environment")
        try:
            firebase_credentials = json.loads(raw_creds)
        except json.JSONDecodeError as e:
            raise ConfigError(f"FIREBASE_CREDENTIALS is not valid JSON: {e}")
        if not isinstance(firebase_credentials, dict):
            raise ConfigError("FIREBASE_CREDENTIALS must be a JSON object")

        mail_provider = os.getenv("MAIL_PROVIDER", "smtp").strip().lower()
        try:
            smtp_port = int(os.getenv("SMTP_PORT", "587"))
        except ValueError as e:
            raise ConfigError(f"SMTP_PORT must be an integer: {e}")
        smtp = SMTPConfig(
            host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            port=smtp_port,
            username=os.getenv("SMTP_USERNAME") or None,
            password=os.getenv("SMTP_PASSWORD") or None,
            use_tls=_env_bool("SMTP_USE_TLS", True),
        )
        if mail_provider == "smtp" and not (smtp.username and smtp.password):
            raise ConfigError("SMTP_USERNAME and SMTP_PASSWORD must be set when MAIL_PROVIDER=smtp")

        mail_from = os.getenv("MAIL_FROM") or smtp.username or "noreply@example.com"

        try:
            schedule_timezone = parse_timezone(os.getenv("SCHEDULE_TIMEZONE", "+05:30"))
            meal_times = {
                MealSlot.BREAKFAST: parse_hhmm(os.getenv("BREAKFAST_TIME", "07:30")),
                MealSlot.LUNCH: parse_hhmm(os.getenv("LUNCH_TIME", "12:30")),
                MealSlot.DINNER: parse_hhmm(os.getenv("DINNER_TIME", "18:30")),
            }
            openai_temperature = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
            recipe_count = int(os.getenv("RECIPE_COUNT", "5"))
        except ValueError as e:
            raise ConfigError(f"Invalid schedule or generator configuration: {e}")

        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        if not openai_api_key:
            logger.warning("OPENAI_API_KEY not set. /generate-recipes will be unavailable.")

        return cls(
            firebase_credentials=firebase_credentials,
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            mail_provider=mail_provider,
            smtp=smtp,
            mail_from=mail_from,
            mail_from_name=os.getenv("MAIL_FROM_NAME", "Recipe Mailer"),
            openai_api_key=openai_api_key,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            openai_temperature=openai_temperature,
            recipe_count=recipe_count,
            schedule_timezone=schedule_timezone,
            meal_times=meal_times,
            scheduler_enabled=_env_bool("SCHEDULER_ENABLED", True),
        )
