# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception types raised by afkbot."""

from __future__ import annotations


class AfkBotError(Exception):
    """Base class for afkbot errors."""


class ConfigError(AfkBotError):
    """Configuration file is missing, unreadable or invalid."""


class SessionStateError(AfkBotError):
    """A session was asked to make a lifecycle transition it cannot make."""
