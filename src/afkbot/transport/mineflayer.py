# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Game client backed by Node's mineflayer through the ``javascript`` bridge.

The bridge runs JS event callbacks on its own thread; every callback is
handed to the asyncio loop with ``call_soon_threadsafe`` so subscribers only
ever run on the loop thread, in arrival order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from afkbot.config import BotConfig
from afkbot.logging import get_logger
from afkbot.transport.base import EventKind, GameClient

logger = get_logger(__name__)

# mineflayer event name -> our kind
_EVENTS: dict[str, EventKind] = {
    "spawn": EventKind.SPAWN,
    "chat": EventKind.CHAT,
    "kicked": EventKind.KICKED,
    "error": EventKind.ERROR,
    "end": EventKind.END,
    "death": EventKind.DEATH,
    "goal_reached": EventKind.GOAL_REACHED,
}


def bot_options(config: BotConfig) -> dict[str, Any]:
    """``mineflayer.createBot`` options for *config*."""
    options: dict[str, Any] = {
        "username": config.account.username,
        "auth": config.account.type,
        "host": config.server.ip,
        "port": config.server.port,
        # false asks mineflayer to auto-detect the server version
        "version": config.server.version or False,
    }
    if config.account.password:
        options["password"] = config.account.password
    return options


class MineflayerClient(GameClient):
    """Adapter from a mineflayer bot proxy to GameClient."""

    def __init__(
        self,
        bot: Any,
        loop: asyncio.AbstractEventLoop,
        *,
        on: Callable[[Any, str], Callable[[Callable[..., None]], Any]],
        off: Callable[[Any, str, Any], None],
        pathfinder: Any = None,
        mc_data_lib: Any = None,
    ) -> None:
        super().__init__()
        self._bot = bot
        self._loop = loop
        self._off = off
        self._pathfinder = pathfinder
        self._mc_data_lib = mc_data_lib
        self._connected = True
        self._listeners: list[tuple[str, Any]] = []
        for js_event, kind in _EVENTS.items():
            listener = self._make_listener(kind)
            on(bot, js_event)(listener)
            self._listeners.append((js_event, listener))

    @classmethod
    async def connect(cls, config: BotConfig) -> MineflayerClient:
        """ClientFactory: create a mineflayer bot for *config*."""
        from javascript import On, off, require

        loop = asyncio.get_running_loop()
        # First require() may install the npm package; keep it off the loop.
        mineflayer, pathfinder, mc_data_lib = await asyncio.to_thread(
            lambda: (require("mineflayer"), require("mineflayer-pathfinder"), require("minecraft-data"))
        )
        bot = mineflayer.createBot(bot_options(config))
        bot.loadPlugin(pathfinder.pathfinder)
        bot.settings.colorsEnabled = False
        return cls(bot, loop, on=On, off=off, pathfinder=pathfinder, mc_data_lib=mc_data_lib)

    def _make_listener(self, kind: EventKind) -> Callable[..., None]:
        def listener(this: Any, *args: Any) -> None:
            self._loop.call_soon_threadsafe(self._dispatch, kind, args)

        return listener

    def _dispatch(self, kind: EventKind, args: tuple[Any, ...]) -> None:
        if kind is EventKind.CHAT:
            sender = str(args[0]) if args else ""
            text = str(args[1]) if len(args) > 1 else ""
            self.emit_chat(sender, text)
            return
        if kind is EventKind.END:
            self._connected = False
            self._detach()
            self.emit(kind, args[0] if args else None)
            return
        if kind is EventKind.KICKED:
            self.emit(kind, args[0] if args else None)
            return
        if kind is EventKind.ERROR:
            err = args[0] if args else None
            self.emit(kind, getattr(err, "message", err))
            return
        self.emit(kind)

    async def send(self, text: str) -> None:
        if not self._connected:
            raise ConnectionError("Not connected")
        await asyncio.to_thread(self._bot.chat, text)

    def set_control_state(self, control: str, enabled: bool) -> None:
        self._bot.setControlState(control, enabled)

    def request_movement(self, x: int, y: int, z: int) -> None:
        if self._pathfinder is None:
            raise RuntimeError("mineflayer-pathfinder is not loaded")
        # bot.version is only known once the server answered
        mc_data = self._mc_data_lib(self._bot.version) if self._mc_data_lib is not None else None
        movements = self._pathfinder.Movements(self._bot, mc_data)
        self._bot.pathfinder.setMovements(movements)
        self._bot.pathfinder.setGoal(self._pathfinder.goals.GoalBlock(x, y, z))

    async def disconnect(self) -> None:
        if not self._connected:
            return
        try:
            await asyncio.to_thread(self._bot.quit)
        except Exception as e:
            logger.warning("mineflayer_quit_failed", error=str(e))

    def is_connected(self) -> bool:
        return self._connected

    def _detach(self) -> None:
        for js_event, handler in self._listeners:
            try:
                self._off(self._bot, js_event, handler)
            except Exception as e:
                logger.debug("mineflayer_off_failed", event=js_event, error=str(e))
        self._listeners = []
