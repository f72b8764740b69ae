# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for idle behaviours."""

from __future__ import annotations

import asyncio

import pytest

from afkbot.core.idle import IdleBehaviorScheduler
from afkbot.transport.base import EventKind

from .fake_game_client import FakeGameClient
from .helpers import make_config


def chat_config(messages: list[str], *, repeat: bool, delay: float = 0.02):
    return make_config(
        utils={"chat-messages": {"enabled": True, "repeat": repeat, "repeat-delay": delay, "messages": messages}}
    )


@pytest.mark.asyncio
async def test_repeat_broadcast_cycles_in_order(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(chat_config(["a", "b", "c"], repeat=True))
    scheduler.attach(client)
    await scheduler.activate()

    # Nothing is sent until the first interval elapses.
    assert client.sent == []
    await asyncio.sleep(0.2)
    await scheduler.stop()

    assert len(client.sent) >= 4
    assert client.sent == (["a", "b", "c"] * 10)[: len(client.sent)]


@pytest.mark.asyncio
async def test_stop_ends_broadcast(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(chat_config(["a"], repeat=True))
    scheduler.attach(client)
    await scheduler.activate()
    assert scheduler.status()["broadcasting"] is True

    await scheduler.stop()
    sent = len(client.sent)
    await asyncio.sleep(0.06)

    assert len(client.sent) == sent
    assert scheduler.status()["broadcasting"] is False


@pytest.mark.asyncio
async def test_broadcast_stops_when_disconnected(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(chat_config(["a"], repeat=True))
    scheduler.attach(client)
    await scheduler.activate()
    client.connected = False
    await asyncio.sleep(0.06)

    assert client.sent == []
    assert scheduler.status()["broadcasting"] is False
    await scheduler.stop()


@pytest.mark.asyncio
async def test_broadcast_survives_send_failure(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(chat_config(["a", "b"], repeat=True))
    scheduler.attach(client)
    client.fail_sends = 1
    await scheduler.activate()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    # "a" was lost to the failure; the cursor moved on regardless.
    assert client.sent[:2] == ["b", "a"]


@pytest.mark.asyncio
async def test_one_shot_messages_sent_in_order(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(chat_config(["hello", "", "world"], repeat=False))
    scheduler.attach(client)
    await scheduler.activate()

    assert client.sent == ["hello", "world"]
    assert scheduler.status()["broadcasting"] is False


@pytest.mark.asyncio
async def test_empty_message_list_is_skipped(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(chat_config([], repeat=True))
    scheduler.attach(client)
    await scheduler.activate()
    await asyncio.sleep(0.05)

    assert client.sent == []
    assert scheduler.status()["broadcasting"] is False


@pytest.mark.asyncio
async def test_anti_afk_jump_and_sneak(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(make_config(utils={"anti-afk": {"enabled": True, "sneak": True}}))
    scheduler.attach(client)
    await scheduler.activate()

    assert client.controls == {"jump": True, "sneak": True}
    assert scheduler.status()["anti_afk_controls"] == ["jump", "sneak"]


@pytest.mark.asyncio
async def test_anti_afk_jump_only(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(make_config(utils={"anti-afk": {"enabled": True}}))
    scheduler.attach(client)
    await scheduler.activate()

    assert client.controls == {"jump": True}


@pytest.mark.asyncio
async def test_movement_goal_requested_once(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(make_config(position={"enabled": True, "x": 10, "y": 64, "z": -3}))
    scheduler.attach(client)
    await scheduler.activate()
    await scheduler.activate()

    assert client.movements == [(10, 64, -3)]


@pytest.mark.asyncio
async def test_nothing_enabled_does_nothing(client: FakeGameClient, base_config) -> None:
    scheduler = IdleBehaviorScheduler(base_config)
    scheduler.attach(client)
    await scheduler.activate()

    assert client.sent == []
    assert client.controls == {}
    assert client.movements == []
    assert client.subscriber_count(EventKind.CHAT) == 0


@pytest.mark.asyncio
async def test_chat_log_lives_for_the_session(client: FakeGameClient) -> None:
    scheduler = IdleBehaviorScheduler(make_config(utils={"chat-log": True}))
    scheduler.attach(client)
    assert client.subscriber_count(EventKind.CHAT) == 1

    client.server_says("hi", sender="Steve")
    await scheduler.stop()

    assert client.subscriber_count(EventKind.CHAT) == 0


@pytest.mark.asyncio
async def test_activate_requires_attach(base_config) -> None:
    with pytest.raises(RuntimeError):
        await IdleBehaviorScheduler(base_config).activate()
