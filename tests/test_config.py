# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from afkbot.config import BotConfig, load_config
from afkbot.errors import ConfigError

LEGACY_SETTINGS = {
    "bot-account": {"username": "AfkBot", "password": "", "type": "offline"},
    "server": {"ip": "mc.example.net", "port": 25566, "version": False},
    "position": {"enabled": True, "x": 1, "y": 64, "z": -2},
    "utils": {
        "auto-auth": {"enabled": True, "password": 1234},
        "anti-afk": {"enabled": True, "sneak": True},
        "chat-messages": {"enabled": True, "repeat": True, "repeat-delay": 60, "messages": ["hi", "bye"]},
        "chat-log": True,
        "auto-reconnect": True,
        "auto-recconect-delay": 5000,
    },
}


def write_json(tmp_path: Path, data: object, name: str = "settings.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_legacy_settings(tmp_path: Path) -> None:
    config = load_config(write_json(tmp_path, LEGACY_SETTINGS))

    assert config.account.username == "AfkBot"
    assert config.account.password is None
    assert config.account.type == "offline"
    assert config.server.ip == "mc.example.net"
    assert config.server.port == 25566
    assert config.server.version is None
    assert config.position.enabled and (config.position.x, config.position.y, config.position.z) == (1, 64, -2)
    assert config.utils.auto_auth.enabled
    assert config.utils.auto_auth.password == "1234"
    assert config.utils.anti_afk.sneak
    assert config.utils.chat_messages.repeat_delay == 60
    assert config.utils.chat_messages.messages == ("hi", "bye")
    assert config.utils.chat_log.enabled
    assert config.utils.auto_reconnect.enabled
    assert config.utils.auto_reconnect.delay == 5.0


def test_structured_reconnect_section(tmp_path: Path) -> None:
    data = {"server": {"ip": "h"}, "utils": {"auto-reconnect": {"enabled": True, "delay": 3}}}
    config = load_config(write_json(tmp_path, data))

    assert config.utils.auto_reconnect.delay == 3.0


def test_defaults(tmp_path: Path) -> None:
    config = load_config(write_json(tmp_path, {"server": {"ip": "h"}}))

    assert config.account.username == "ServerBot"
    assert config.account.type == "mojang"
    assert config.server.port == 25565
    assert not config.utils.auto_reconnect.enabled
    assert config.utils.auto_reconnect.delay == 10.0
    assert config.utils.chat_messages.repeat_delay == 120.0
    assert config.enabled_features() == []


def test_blank_account_fields_fall_back(tmp_path: Path) -> None:
    data = {"bot-account": {"username": "", "type": None}, "server": {"ip": "h"}}
    config = load_config(write_json(tmp_path, data))

    assert config.account.username == "ServerBot"
    assert config.account.type == "mojang"


def test_null_chat_messages_is_empty(tmp_path: Path) -> None:
    data = {"server": {"ip": "h"}, "utils": {"chat-messages": {"enabled": True, "messages": None}}}
    config = load_config(write_json(tmp_path, data))

    assert config.utils.chat_messages.enabled
    assert config.utils.chat_messages.messages == ()


def test_yaml_config(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text(
        "server:\n  ip: mc.example.net\nutils:\n  anti-afk:\n    enabled: true\n",
        encoding="utf-8",
    )
    config = load_config(path)

    assert config.server.ip == "mc.example.net"
    assert config.utils.anti_afk.enabled


def test_config_is_immutable(tmp_path: Path) -> None:
    config = load_config(write_json(tmp_path, {"server": {"ip": "h"}}))

    with pytest.raises(ValidationError):
        config.server.ip = "elsewhere"  # type: ignore[misc]


def test_enabled_features() -> None:
    config = BotConfig.model_validate(LEGACY_SETTINGS)

    assert config.enabled_features() == [
        "auto-auth",
        "chat-messages",
        "anti-afk",
        "position",
        "auto-reconnect",
        "chat-log",
    ]


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "settings.json")


def test_malformed_json(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{ not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="Cannot parse"):
        load_config(path)


def test_missing_server_section(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Invalid"):
        load_config(write_json(tmp_path, {"utils": {}}))


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(write_json(tmp_path, ["server"]))


def test_repeat_delay_must_be_positive(tmp_path: Path) -> None:
    data = {"server": {"ip": "h"}, "utils": {"chat-messages": {"repeat-delay": 0}}}
    with pytest.raises(ConfigError):
        load_config(write_json(tmp_path, data))
