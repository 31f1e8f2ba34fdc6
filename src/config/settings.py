# src/config/settings.py — v1
"""Typed configuration loaded from environment / .env via pydantic-settings.

Every option can be provided as ``PDFETCH_<FIELD>`` in the environment or in a
``.env`` file. Profiles and command-line options are layered on top by
``config.profiles.merge_sources`` before ``load_settings`` is called.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_NOW_DOMAIN = ".service-now.com"

MANDATORY_FIELDS: tuple[str, ...] = (
    "output_dir",
    "sn_instance_name",
    "sn_user_name",
    "sn_pass",
)


def instance_url(instance_name: str) -> str:
    """Base URL of a ServiceNow instance, e.g. ``https://acme.service-now.com``."""
    return f"https://{instance_name}{SERVICE_NOW_DOMAIN}"


class ConfigurationError(Exception):
    """Raised when configuration is missing or internally inconsistent."""


class Settings(BaseSettings):
    """Application settings for one invocation."""

    model_config = SettingsConfigDict(
        env_prefix="PDFETCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === ServiceNow ===
    sn_instance_name: str = ""
    sn_user_name: str = ""
    sn_pass: str = ""
    sn_query: str = ""

    # === Operation ===
    output_dir: Path | None = None
    storage_mode: Literal["files", "archived_files", "single_file"] = "files"
    operation_mode: Literal[
        "list", "list_changes", "list_files", "list_changes_files"
    ] = "list_files"
    newer_only: bool = False

    # === Snapshot storage ===
    snapshot_backend: Literal["json", "sqlite"] = "json"

    # === Catalog fetch ===
    request_timeout_s: float = 60.0
    page_size: int = 500
    fetch_max_retries: int = 3

    # === Rendering ===
    render_timeout_ms: int = 60_000
    render_headless: bool = True
    pdf_format: str = "A4"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("sn_instance_name")
    @classmethod
    def normalize_instance_name(cls, v: str) -> str:  # noqa: N805
        """Accept ``acme``, ``acme.service-now.com`` or a padded value."""
        name = v.strip()
        if name.lower().endswith(SERVICE_NOW_DOMAIN):
            name = name[: -len(SERVICE_NOW_DOMAIN)]
        return name

    @field_validator("page_size", "request_timeout_s", "render_timeout_ms")
    @classmethod
    def validate_positive(cls, v: float, info) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("fetch_max_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("fetch_max_retries must be >= 0")
        return v

    # --- Helpers ---

    def missing_mandatory(self) -> list[str]:
        """Names of mandatory settings that are still unset."""
        return [name for name in MANDATORY_FIELDS if not getattr(self, name)]


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment / .env with optional overrides.

    Args:
        **overrides: Field-level overrides (merged profiles and CLI options).

    Returns:
        Validated Settings instance.

    Raises:
        pydantic.ValidationError: If a value fails validation.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
