# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Game client interface and adapters."""

from __future__ import annotations

from afkbot.transport.base import ChatEvent, ClientFactory, EventEmitter, EventKind, GameClient, Subscription

__all__ = ["ChatEvent", "ClientFactory", "EventEmitter", "EventKind", "GameClient", "Subscription"]
