# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Idle behaviours run while a session is active."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

from pydantic import BaseModel

from afkbot.config import BotConfig
from afkbot.constants import ANTI_AFK_JUMP, ANTI_AFK_SNEAK
from afkbot.logging import get_logger
from afkbot.transport.base import ChatEvent, EventKind, GameClient, Subscription

logger = get_logger(__name__)


class IdleStatus(BaseModel):
    active: bool
    broadcasting: bool
    broadcast_cursor: int
    anti_afk_controls: list[str]
    movement_requested: bool
    chat_log: bool


class IdleBehaviorScheduler:
    """Chat broadcasts, anti-AFK controls, a movement goal and the chat log.

    One scheduler serves one session: ``attach`` at session creation,
    ``activate`` once the player has spawned, ``stop`` when the session ends.
    """

    def __init__(self, config: BotConfig) -> None:
        self._config = config
        self._client: GameClient | None = None
        self._task: asyncio.Task[None] | None = None
        self._chat_log: Subscription | None = None
        self._cursor = 0
        self._controls: list[str] = []
        self._movement_requested = False
        self._active = False

    def attach(self, client: GameClient) -> None:
        """Bind to a new session's client and start the chat log if enabled."""
        self._client = client
        if self._config.utils.chat_log.enabled and self._chat_log is None:
            self._chat_log = client.subscribe(EventKind.CHAT, self._log_chat)

    async def activate(self) -> None:
        """Start the configured behaviours. Safe to call once per session."""
        if self._client is None:
            raise RuntimeError("IdleBehaviorScheduler.activate() called before attach()")
        if self._active:
            return
        self._active = True
        client = self._client
        utils = self._config.utils

        if utils.chat_messages.enabled:
            logger.info("idle_chat_messages_started", repeat=utils.chat_messages.repeat)
            await self._start_chat_messages(client)

        position = self._config.position
        if position.enabled:
            logger.info("idle_moving_to", x=position.x, y=position.y, z=position.z)
            try:
                client.request_movement(position.x, position.y, position.z)
                self._movement_requested = True
            except Exception as e:
                logger.error("idle_movement_failed", error=str(e))

        if utils.anti_afk.enabled:
            controls = [ANTI_AFK_JUMP]
            if utils.anti_afk.sneak:
                controls.append(ANTI_AFK_SNEAK)
            for control in controls:
                try:
                    client.set_control_state(control, True)
                    self._controls.append(control)
                except Exception as e:
                    logger.error("idle_control_failed", control=control, error=str(e))
            logger.info("idle_anti_afk_started", controls=self._controls)

    async def stop(self) -> None:
        """Stop everything started for the current session."""
        if self._task and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        if self._chat_log is not None:
            self._chat_log.release()
            self._chat_log = None
        self._client = None
        self._cursor = 0
        self._controls = []
        self._movement_requested = False
        self._active = False

    def status(self) -> dict[str, Any]:
        return IdleStatus(
            active=self._active,
            broadcasting=self._task is not None and not self._task.done(),
            broadcast_cursor=self._cursor,
            anti_afk_controls=list(self._controls),
            movement_requested=self._movement_requested,
            chat_log=self._chat_log is not None,
        ).model_dump()

    async def _start_chat_messages(self, client: GameClient) -> None:
        settings = self._config.utils.chat_messages
        messages = [m for m in settings.messages if m]
        if not messages:
            return
        if settings.repeat:
            self._task = asyncio.create_task(self._broadcast_loop(client, messages, settings.repeat_delay))
            return
        for message in messages:
            await self._say(client, message)

    async def _broadcast_loop(self, client: GameClient, messages: list[str], interval_s: float) -> None:
        try:
            while client.is_connected():
                await asyncio.sleep(interval_s)
                if not client.is_connected():
                    break
                message = messages[self._cursor]
                self._cursor = (self._cursor + 1) % len(messages)
                await self._say(client, message)
        except asyncio.CancelledError:
            return

    async def _say(self, client: GameClient, message: str) -> None:
        try:
            await client.send(message)
        except Exception as e:
            logger.warning("idle_chat_send_failed", error=str(e))

    def _log_chat(self, event: ChatEvent) -> None:
        logger.info("chat", sender=event.sender, message=event.text)
