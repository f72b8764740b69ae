# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Abstract game client and the event subscription plumbing it shares."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from afkbot.config import BotConfig
from afkbot.logging import get_logger

logger = get_logger(__name__)


class EventKind(StrEnum):
    SPAWN = "spawn"
    CHAT = "chat"
    KICKED = "kicked"
    ERROR = "error"
    END = "end"
    DEATH = "death"
    GOAL_REACHED = "goal_reached"


class ChatEvent(BaseModel):
    """One inbound chat line, numbered in arrival order."""

    sender: str
    text: str
    seq: int

    model_config = ConfigDict(frozen=True)


Handler = Callable[..., None]


class Subscription:
    """Handle for one registered handler.

    Releasing is idempotent. Use as a context manager to guarantee release
    on every exit path.
    """

    def __init__(self, emitter: EventEmitter, kind: EventKind, handler: Handler) -> None:
        self._emitter = emitter
        self.kind = kind
        self.handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def release(self) -> None:
        if not self._active:
            return
        self._active = False
        self._emitter._remove(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()


class EventEmitter:
    """Synchronous, ordered event dispatch.

    Handlers must stay non-blocking (spawn tasks, set events, etc.).
    ``chat`` handlers receive a ChatEvent; other kinds receive the raw
    event arguments (``kicked(reason)``, ``error(err)``, ``end(reason)``).
    """

    def __init__(self) -> None:
        self._subscriptions: dict[EventKind, list[Subscription]] = {}
        self._chat_seq = 0

    def subscribe(self, kind: EventKind | str, handler: Handler) -> Subscription:
        kind = EventKind(kind)
        sub = Subscription(self, kind, handler)
        self._subscriptions.setdefault(kind, []).append(sub)
        return sub

    def subscriber_count(self, kind: EventKind | str) -> int:
        return len(self._subscriptions.get(EventKind(kind), []))

    def _remove(self, sub: Subscription) -> None:
        subs = self._subscriptions.get(sub.kind, [])
        if sub in subs:
            subs.remove(sub)

    def emit(self, kind: EventKind | str, *args: Any) -> None:
        kind = EventKind(kind)
        # Copy: handlers may release their own subscription while we iterate.
        for sub in list(self._subscriptions.get(kind, [])):
            if not sub.active:
                continue
            try:
                sub.handler(*args)
            except Exception as exc:
                logger.warning("event_handler_failed", kind=str(kind), error=str(exc))

    def emit_chat(self, sender: str, text: str) -> ChatEvent:
        self._chat_seq += 1
        event = ChatEvent(sender=sender or "", text=text or "", seq=self._chat_seq)
        self.emit(EventKind.CHAT, event)
        return event


class GameClient(EventEmitter, ABC):
    """Abstract connection to a game server (one per session)."""

    @abstractmethod
    async def send(self, text: str) -> None:
        """Send a chat line or slash command.

        Raises:
            ConnectionError: If not connected or send fails
        """

    @abstractmethod
    def set_control_state(self, control: str, enabled: bool) -> None:
        """Hold or release a movement control such as ``jump`` or ``sneak``."""

    @abstractmethod
    def request_movement(self, x: int, y: int, z: int) -> None:
        """Ask the client's movement subsystem to walk to a block."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection.

        Should be idempotent - safe to call multiple times. Clients emit
        ``end`` once the connection is closed.
        """

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if connection is active."""


ClientFactory = Callable[[BotConfig], Awaitable[GameClient]]
