import logging
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from engine.input_gate import DEFAULT_PROMPT
from story.story_loader import DEFAULT_STORY_PATH

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    typing_scale: float = Field(1.0, ge=0)
    web_typing_scale: float = Field(0.0, ge=0)
    prompt: str = DEFAULT_PROMPT
    story_path: Path = DEFAULT_STORY_PATH
    log_level: str = "WARNING"
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    model_config = SettingsConfigDict(
        env_prefix="ADVENTURE_",
        env_file=".env",
        extra="ignore",
        validate_assignment=True,
    )


settings = Settings()

if not settings.story_path.exists():
    logger.warning("Configured story file does not exist: %s", settings.story_path)
