"""Settings for the QnA project cleanup tool."""

import os
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

DEFAULT_PATTERN = "TestProject"


def _default_workers() -> int:
    return os.cpu_count() or 1


class Settings(BaseSettings):
    """
    Settings for the QnA project cleanup tool.

    [pydantic.BaseSettings](https://docs.pydantic.dev/latest/concepts/pydantic_settings/) reads
    configuration values from environment variables and, when present, a local .env file.

    Every value here can be overridden by the matching command-line option.
    """

    questionanswering_endpoint: Optional[str] = None
    """Question Answering (formerly QnA Maker) endpoint, e.g. https://<resource>.cognitiveservices.azure.com/."""

    questionanswering_key: Optional[str] = None
    """Question Answering API key. When unset the current Azure identity is used instead."""

    cleanup_pattern: str = DEFAULT_PATTERN
    """Regular expression matched against project names to select projects for deletion."""

    cleanup_workers: int = _default_workers()
    """Maximum number of parallel deletions. Defaults to the number of processors."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",  # Load from .env file if it exists (local development)
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables not defined in the model
        validate_default=True,
    )
