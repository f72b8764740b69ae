# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session lifecycle supervision and reconnect policy."""

from __future__ import annotations

import asyncio
import contextlib
import uuid
from enum import StrEnum
from typing import Any

from afkbot.config import BotConfig
from afkbot.constants import DEFAULT_AUTH_MAX_ATTEMPTS, DEFAULT_AUTH_TIMEOUT_S
from afkbot.core.auth import AuthenticationHandshake, AuthOutcome
from afkbot.core.idle import IdleBehaviorScheduler
from afkbot.core.session import Session, SessionState
from afkbot.logging import get_logger
from afkbot.transport.base import ClientFactory, EventKind, Subscription

logger = get_logger(__name__)


class SupervisorState(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    ACTIVE = "active"
    RECONNECT_PENDING = "reconnect_pending"
    STOPPED = "stopped"


class SessionSupervisor:
    """Owns the single live Session and decides when to recreate it."""

    def __init__(
        self,
        config: BotConfig,
        client_factory: ClientFactory,
        *,
        handshake: AuthenticationHandshake | None = None,
        idle: IdleBehaviorScheduler | None = None,
        auth_max_attempts: int = DEFAULT_AUTH_MAX_ATTEMPTS,
        auth_timeout_s: float = DEFAULT_AUTH_TIMEOUT_S,
    ) -> None:
        self._config = config
        self._factory = client_factory
        self._handshake = handshake or AuthenticationHandshake()
        self._idle = idle or IdleBehaviorScheduler(config)
        self._auth_max_attempts = auth_max_attempts
        self._auth_timeout_s = auth_timeout_s

        self._session: Session | None = None
        self._session_counter = 0
        self._subscriptions: list[Subscription] = []
        self._spawn_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None
        self._teardown_task: asyncio.Task[None] | None = None
        self._stopped = False
        self._stopped_event = asyncio.Event()
        self.last_auth_outcome: AuthOutcome | None = None

    @property
    def config(self) -> BotConfig:
        return self._config

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def sessions_started(self) -> int:
        return self._session_counter

    @property
    def state(self) -> SupervisorState:
        if self._stopped:
            return SupervisorState.STOPPED
        if self._session is not None:
            if self._session.state is SessionState.ACTIVE:
                return SupervisorState.ACTIVE
            return SupervisorState.CONNECTING
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return SupervisorState.RECONNECT_PENDING
        return SupervisorState.IDLE

    async def start(self) -> Session | None:
        """Create a new session.

        Returns:
            The new Session, or None if the client could not be created

        Raises:
            RuntimeError: If a session is still live or the supervisor is stopped
        """
        if self._stopped:
            raise RuntimeError("Supervisor is stopped")
        if self._session is not None and not self._session.is_terminated:
            raise RuntimeError(f"Session {self._session.session_id} is still {self._session.state}")

        self._session_counter += 1
        session_number = self._session_counter
        server = self._config.server
        logger.info(
            "session_creating",
            session_number=session_number,
            host=server.ip,
            port=server.port,
            username=self._config.account.username,
        )
        loop = asyncio.get_running_loop()
        try:
            client = await self._factory(self._config)
        except Exception as e:
            logger.error("session_connect_failed", session_number=session_number, error=str(e))
            self._schedule_reconnect(loop.time())
            return None
        if self._stopped:
            # stop() ran while the client was connecting.
            logger.info("session_discarded", session_number=session_number)
            try:
                await client.disconnect()
            except Exception as e:
                logger.warning("session_disconnect_failed", session_number=session_number, error=str(e))
            return None

        # No awaits from here until observers are registered, so no event is missed.
        session = Session(session_id=str(uuid.uuid4()), session_number=session_number, client=client)
        self._session = session
        self._subscriptions = [
            client.subscribe(EventKind.SPAWN, lambda *_: self._on_spawn(session)),
            client.subscribe(EventKind.KICKED, lambda reason=None, *_: self._on_kicked(session, reason)),
            client.subscribe(EventKind.ERROR, lambda err=None, *_: self._on_error(session, err)),
            client.subscribe(EventKind.END, lambda reason=None, *_: self._on_end(session, reason)),
            client.subscribe(EventKind.DEATH, lambda *_: logger.info("bot_died", session_id=session.session_id)),
            client.subscribe(
                EventKind.GOAL_REACHED, lambda *_: logger.info("goal_reached", session_id=session.session_id)
            ),
        ]
        self._idle.attach(client)
        logger.info("session_created", session_id=session.session_id, session_number=session_number)
        return session

    async def stop(self) -> None:
        """Disconnect the live session and disable reconnects."""
        self._stopped = True
        if self._reconnect_task and not self._reconnect_task.done():
            self._reconnect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reconnect_task
        self._reconnect_task = None

        session = self._session
        if session is not None:
            try:
                await session.client.disconnect()
            except Exception as e:
                logger.warning("session_disconnect_failed", session_id=session.session_id, error=str(e))
            if self._session is session:
                # Client never reported end; terminate it ourselves.
                self._terminate(session)

        if self._spawn_task and not self._spawn_task.done():
            self._spawn_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._spawn_task
        await self._idle.stop()
        self._stopped_event.set()
        logger.info("supervisor_stopped", sessions_started=self._session_counter)

    async def wait_stopped(self) -> None:
        await self._stopped_event.wait()

    def status(self) -> dict[str, Any]:
        return {
            "state": str(self.state),
            "session": self._session.get_status() if self._session else None,
            "sessions_started": self._session_counter,
            "reconnect_pending": self._reconnect_task is not None and not self._reconnect_task.done(),
            "last_auth_outcome": str(self.last_auth_outcome) if self.last_auth_outcome else None,
            "idle": self._idle.status(),
        }

    def _on_spawn(self, session: Session) -> None:
        if session is not self._session:
            return
        if session.state is not SessionState.CONNECTING:
            logger.info("bot_respawned", session_id=session.session_id)
            return
        session.transition(SessionState.ACTIVE)
        logger.info("bot_joined", session_id=session.session_id)
        self._spawn_task = asyncio.create_task(self._after_spawn(session))

    async def _after_spawn(self, session: Session) -> None:
        auto_auth = self._config.utils.auto_auth
        if auto_auth.enabled:
            logger.info("auto_auth_started", session_id=session.session_id)
            try:
                outcome = await self._handshake.run(
                    session.client,
                    auto_auth.password,
                    max_attempts=self._auth_max_attempts,
                    per_attempt_timeout=self._auth_timeout_s,
                )
                self.last_auth_outcome = outcome
                logger.info("auto_auth_finished", session_id=session.session_id, outcome=str(outcome))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("auto_auth_failed", session_id=session.session_id, error=str(e))

        if session is self._session and session.state is SessionState.ACTIVE:
            await self._idle.activate()

    def _on_kicked(self, session: Session, reason: Any) -> None:
        logger.warning("bot_kicked", session_id=session.session_id, reason=str(reason))

    def _on_error(self, session: Session, err: Any) -> None:
        logger.error("client_error", session_id=session.session_id, error=str(err))

    def _on_end(self, session: Session, reason: Any) -> None:
        if session is not self._session:
            return
        logger.warning("connection_ended", session_id=session.session_id, reason=str(reason) if reason else None)
        ended_at = asyncio.get_running_loop().time()
        self._terminate(session)
        self._schedule_reconnect(ended_at)

    def _terminate(self, session: Session) -> None:
        for sub in self._subscriptions:
            sub.release()
        self._subscriptions = []
        if self._spawn_task and not self._spawn_task.done():
            self._spawn_task.cancel()
        if not session.is_terminated:
            session.transition(SessionState.TERMINATED)
        self._session = None

    def _schedule_reconnect(self, ended_at: float) -> None:
        reconnect = self._config.utils.auto_reconnect
        if self._stopped:
            return
        if not reconnect.enabled:
            logger.info("auto_reconnect_disabled")
            # Idle behaviours still hold the dead client.
            self._teardown_task = asyncio.create_task(self._idle.stop())
            return
        logger.info("reconnect_scheduled", delay_s=reconnect.delay)
        self._reconnect_task = asyncio.create_task(self._reconnect_after(ended_at, reconnect.delay))

    async def _reconnect_after(self, ended_at: float, delay_s: float) -> None:
        await self._idle.stop()
        loop = asyncio.get_running_loop()
        remaining = ended_at + delay_s - loop.time()
        if remaining > 0:
            await asyncio.sleep(remaining)
        try:
            await self.start()
        except RuntimeError as e:
            logger.warning("reconnect_skipped", error=str(e))
        finally:
            # start() may already have scheduled the next attempt.
            if self._reconnect_task is asyncio.current_task():
                self._reconnect_task = None
