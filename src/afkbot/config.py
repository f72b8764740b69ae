# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration file loading for the bot."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from afkbot.constants import DEFAULT_CHAT_REPEAT_DELAY_S
from afkbot.defaults import DEFAULT_AUTH_TYPE, DEFAULT_RECONNECT_DELAY_S, DEFAULT_USERNAME
from afkbot.errors import ConfigError
from afkbot.logging import get_logger

logger = get_logger(__name__)

_FROZEN = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class AccountConfig(BaseModel):
    """Credentials the client logs in with."""

    username: str = DEFAULT_USERNAME
    password: str | None = None
    type: str = DEFAULT_AUTH_TYPE  # offline, mojang, microsoft

    model_config = _FROZEN

    @field_validator("username", "type", mode="before")
    @classmethod
    def _blank_to_default(cls, v: Any, info: Any) -> Any:
        if v in (None, ""):
            return DEFAULT_USERNAME if info.field_name == "username" else DEFAULT_AUTH_TYPE
        return v

    @field_validator("password", mode="before")
    @classmethod
    def _blank_password(cls, v: Any) -> Any:
        return v or None


class ServerConfig(BaseModel):
    """Remote server address."""

    ip: str
    port: int = 25565
    version: str | None = None  # None lets the client auto-detect

    model_config = _FROZEN

    @field_validator("version", mode="before")
    @classmethod
    def _false_is_autodetect(cls, v: Any) -> Any:
        if v is False or v == "":
            return None
        return v


class AutoAuthConfig(BaseModel):
    enabled: bool = False
    password: str = ""

    model_config = _FROZEN

    @field_validator("password", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v)


class ChatMessagesConfig(BaseModel):
    enabled: bool = False
    repeat: bool = False
    repeat_delay: float = Field(default=DEFAULT_CHAT_REPEAT_DELAY_S, alias="repeat-delay", gt=0)
    messages: tuple[str, ...] = ()

    model_config = _FROZEN

    @field_validator("messages", mode="before")
    @classmethod
    def _null_is_empty(cls, v: Any) -> Any:
        return () if v is None else v


class AntiAfkConfig(BaseModel):
    enabled: bool = False
    sneak: bool = False

    model_config = _FROZEN


class AutoReconnectConfig(BaseModel):
    enabled: bool = False
    delay: float = Field(default=DEFAULT_RECONNECT_DELAY_S, ge=0)  # seconds

    model_config = _FROZEN


class ChatLogConfig(BaseModel):
    enabled: bool = False

    model_config = _FROZEN


class UtilsConfig(BaseModel):
    """Feature toggles under ``utils``."""

    auto_auth: AutoAuthConfig = Field(default_factory=AutoAuthConfig, alias="auto-auth")
    chat_messages: ChatMessagesConfig = Field(default_factory=ChatMessagesConfig, alias="chat-messages")
    anti_afk: AntiAfkConfig = Field(default_factory=AntiAfkConfig, alias="anti-afk")
    auto_reconnect: AutoReconnectConfig = Field(default_factory=AutoReconnectConfig, alias="auto-reconnect")
    chat_log: ChatLogConfig = Field(default_factory=ChatLogConfig, alias="chat-log")

    model_config = _FROZEN

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_forms(cls, data: Any) -> Any:
        """Accept the flat boolean toggles of older settings files.

        ``auto-reconnect: true`` plus ``auto-recconect-delay`` (milliseconds,
        misspelled in the files people already have) and ``chat-log: true``.
        """
        if not isinstance(data, dict):
            return data
        out = dict(data)
        reconnect = out.get("auto-reconnect", out.get("auto_reconnect"))
        if isinstance(reconnect, bool):
            reconnect = {"enabled": reconnect}
        if isinstance(reconnect, dict):
            reconnect = dict(reconnect)
            legacy_ms = out.pop("auto-recconect-delay", None)
            if legacy_ms is not None and "delay" not in reconnect:
                reconnect["delay"] = float(legacy_ms) / 1000.0
            out["auto-reconnect"] = reconnect
            out.pop("auto_reconnect", None)
        chat_log = out.get("chat-log", out.get("chat_log"))
        if isinstance(chat_log, bool):
            out["chat-log"] = {"enabled": chat_log}
            out.pop("chat_log", None)
        return out


class PositionConfig(BaseModel):
    """One-shot movement goal."""

    enabled: bool = False
    x: int = 0
    y: int = 0
    z: int = 0

    model_config = _FROZEN


class BotConfig(BaseModel):
    """Root configuration, loaded once at startup and never mutated."""

    account: AccountConfig = Field(default_factory=AccountConfig, alias="bot-account")
    server: ServerConfig
    utils: UtilsConfig = Field(default_factory=UtilsConfig)
    position: PositionConfig = Field(default_factory=PositionConfig)

    model_config = _FROZEN

    @classmethod
    def from_file(cls, path: Path | str) -> BotConfig:
        """Load from JSON (``.json``) or YAML (anything else)."""
        path = Path(path)
        logger.info("config_loading", path=str(path))
        text = path.read_text(encoding="utf-8")
        data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        return cls.model_validate(data)

    def enabled_features(self) -> list[str]:
        features = []
        if self.utils.auto_auth.enabled:
            features.append("auto-auth")
        if self.utils.chat_messages.enabled:
            features.append("chat-messages")
        if self.utils.anti_afk.enabled:
            features.append("anti-afk")
        if self.position.enabled:
            features.append("position")
        if self.utils.auto_reconnect.enabled:
            features.append("auto-reconnect")
        if self.utils.chat_log.enabled:
            features.append("chat-log")
        return features


def load_config(path: Path | str) -> BotConfig:
    """Load the bot configuration or raise ConfigError.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"{path} not found! Create one based on settings.example.json and restart.")
    try:
        return BotConfig.from_file(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse {path}: {e}") from e
    except (ValidationError, ValueError) as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
