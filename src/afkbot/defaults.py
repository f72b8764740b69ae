# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Centralized default values for afkbot."""

from __future__ import annotations

HEALTH_HOST = "0.0.0.0"
HEALTH_PORT = 8000
HEALTH_BODY = "Bot has arrived"

DEFAULT_USERNAME = "ServerBot"
DEFAULT_AUTH_TYPE = "mojang"
DEFAULT_RECONNECT_DELAY_S = 10.0

CONFIG_FILENAME = "settings.json"
