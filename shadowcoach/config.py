import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROGRESS_PATH = Path.home() / ".shadowcoach" / "learning_state.json"

UnlockRule = Literal["arsenal", "exam"]


class Settings(BaseSettings):
    progress_path: Path = Field(DEFAULT_PROGRESS_PATH, alias="SHADOWCOACH_PROGRESS_PATH")
    storage_key: str = Field("learning_state_v1", alias="SHADOWCOACH_STORAGE_KEY")
    unlock_rule: UnlockRule = Field("arsenal", alias="SHADOWCOACH_UNLOCK_RULE")
    combo_seed: Optional[int] = Field(None, alias="SHADOWCOACH_COMBO_SEED")
    exam_question_count: int = Field(10, ge=1, alias="SHADOWCOACH_EXAM_QUESTION_COUNT")

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid shadowcoach configuration: {exc}") from exc
