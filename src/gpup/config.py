"""
Configuration management using Pydantic for validation.

Supports loading from:
- Command line options (highest precedence, passed as keyword arguments)
- YAML files
- Environment variables: GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and the
  GPUP_ prefix for everything else
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Can be loaded from:
    - Keyword arguments: Settings(google_client_id="...", new_album="Trip")
    - YAML file: Settings.from_yaml("gpup.yaml")
    - Environment variables: GOOGLE_CLIENT_ID=..., GPUP_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="GPUP_",
        extra="ignore",  # Ignore unknown fields for forward compatibility
    )

    google_client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("google_client_id", "GOOGLE_CLIENT_ID"),
        description="Google API OAuth client ID",
    )
    google_client_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices("google_client_secret", "GOOGLE_CLIENT_SECRET"),
        description="Google API OAuth client secret",
    )
    oauth_method: Literal["browser", "cli"] = Field(
        default="browser",
        description="OAuth authorization method: local browser redirect or code entry",
    )
    new_album: str | None = Field(
        default=None,
        description="Create an album with this title and add the uploads to it",
    )
    upload_workers: int = Field(
        default=4,
        ge=1,
        le=16,
        description="Number of files uploaded concurrently",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("google_client_id", "google_client_secret", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        """Treat empty or whitespace-only credentials as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("new_album")
    @classmethod
    def validate_album_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("new_album title must not be empty")
        return v

    @model_validator(mode="after")
    def validate_credentials(self) -> "Settings":
        """Validate that the OAuth client is configured."""
        missing = []
        if not self.google_client_id:
            missing.append("--google-client-id (or GOOGLE_CLIENT_ID)")
        if not self.google_client_secret:
            missing.append("--google-client-secret (or GOOGLE_CLIENT_SECRET)")
        if missing:
            raise ValueError(f"missing required option(s): {', '.join(missing)}")
        return self

    @classmethod
    def from_yaml(cls, path: Path | str, **overrides) -> "Settings":
        """
        Load settings from a YAML file.

        Args:
            path: Path to YAML configuration file
            **overrides: Values that take precedence over the file

        Returns:
            Settings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {path}")

        data.update(overrides)
        return cls(**data)
