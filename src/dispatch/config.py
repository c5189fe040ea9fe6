"""Runtime settings for the dispatch service.

The settings blob is owned by an external configuration collaborator. This
service only reads it: values come from ``DISPATCH_*`` environment variables
or a ``.env`` file.
"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class DispatchSettings(BaseSettings):
    """Dispatch configuration loaded from the environment."""

    # Application
    environment: str = "development"
    log_level: Optional[str] = None
    log_dir: str = "logs"

    # Maintenance
    maintenance_mode: bool = False
    maintenance_message: str = "We're currently performing maintenance. Please check back soon."

    # Delivery defaults
    standard_delivery_fee: float = 25.0
    order_number_prefix: str = "ORD"

    # Candidate ranking: "load" (least loaded first) or "name"
    candidate_ranking: Literal["load", "name"] = "load"

    # Admin listing
    default_page_size: int = 20
    max_page_size: int = 100

    model_config = SettingsConfigDict(
        env_prefix="DISPATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


_settings: Optional[DispatchSettings] = None


def get_settings() -> DispatchSettings:
    """Return the DispatchSettings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = DispatchSettings()
    return _settings


def set_settings_for_test(**kwargs) -> DispatchSettings:
    """For testing only: replace the settings instance with explicit values."""
    global _settings
    _settings = DispatchSettings(**kwargs)
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next read goes back to the environment."""
    global _settings
    _settings = None
