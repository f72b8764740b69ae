# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared constants for afkbot."""

from __future__ import annotations

# Auth handshake budget
DEFAULT_AUTH_MAX_ATTEMPTS = 3
DEFAULT_AUTH_TIMEOUT_S = 8.0

# Auth handshake delays (seconds)
REGISTER_TO_LOGIN_DELAY_S = 2.0
LOGIN_AFTER_REGISTERED_DELAY_S = 1.0
LOGIN_AFTER_ALREADY_REGISTERED_DELAY_S = 0.8
AUTH_SETTLE_DELAY_S = 0.5
AUTH_RETRY_BACKOFF_S = 1.5

# Idle behaviour
DEFAULT_CHAT_REPEAT_DELAY_S = 120.0
ANTI_AFK_JUMP = "jump"
ANTI_AFK_SNEAK = "sneak"
