# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from afkbot.defaults import HEALTH_HOST, HEALTH_PORT
from afkbot.paths import default_config_path


class Settings(BaseSettings):
    config_path: Path = Field(default_factory=default_config_path)
    log_level: str = "INFO"
    host: str = HEALTH_HOST
    # Hosting platforms inject PORT; AFKBOT_PORT wins when both are set.
    port: int = Field(default=HEALTH_PORT, validation_alias=AliasChoices("afkbot_port", "port"))

    model_config = SettingsConfigDict(
        env_prefix="AFKBOT_",
        extra="ignore",
    )
