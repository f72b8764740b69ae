# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from afkbot.config import BotConfig
from afkbot.core.auth import HandshakeTiming

from .fake_game_client import FakeGameClient
from .helpers import make_config


@pytest.fixture
def fast_timing() -> HandshakeTiming:
    """Handshake delays shrunk for tests."""
    return HandshakeTiming(
        register_to_login_delay=0.05,
        login_after_registered_delay=0.01,
        login_after_already_registered_delay=0.01,
        settle_delay=0.0,
        retry_backoff=0.0,
    )


@pytest.fixture
def client() -> FakeGameClient:
    return FakeGameClient()


@pytest.fixture
def base_config() -> BotConfig:
    return make_config()
