# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared test helpers."""

from __future__ import annotations

from typing import Any

from afkbot.config import BotConfig


def make_config(**sections: Any) -> BotConfig:
    """BotConfig with a server section and the given top-level sections.

    ``bot-account`` can be passed as ``account=...``.
    """
    data: dict[str, Any] = {"server": {"ip": "127.0.0.1", "port": 25565}}
    data.update(sections)
    return BotConfig.model_validate(data)
