# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Chat-driven /register + /login handshake for server auth plugins.

Security plugins (LoginSecurity, AuthMe, nLogin, ...) freeze a fresh player
until they type ``/register <pw> <pw>`` or ``/login <pw>``. Their replies are
worded differently per plugin and per locale, so replies are sorted into a
small set of categories by case-insensitive substring match. Categories are
checked in order and the first match wins: a line that contains phrases from
two categories is read as the earlier one.

Each attempt sends ``/register`` then, after a short delay, ``/login`` (some
plugins ignore ``/register`` silently when the account exists) and waits for
a login confirmation or a wrong-password reply. Attempts without a verdict
are retried up to the attempt budget.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from afkbot.constants import (
    AUTH_RETRY_BACKOFF_S,
    AUTH_SETTLE_DELAY_S,
    DEFAULT_AUTH_MAX_ATTEMPTS,
    DEFAULT_AUTH_TIMEOUT_S,
    LOGIN_AFTER_ALREADY_REGISTERED_DELAY_S,
    LOGIN_AFTER_REGISTERED_DELAY_S,
    REGISTER_TO_LOGIN_DELAY_S,
)
from afkbot.logging import get_logger
from afkbot.transport.base import ChatEvent, EventKind, GameClient

logger = get_logger(__name__)


class ReplyCategory(StrEnum):
    REGISTRATION_CONFIRMED = "registration_confirmed"
    ALREADY_REGISTERED = "already_registered"
    LOGIN_CONFIRMED = "login_confirmed"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_REGISTERED = "not_registered"
    UNCLASSIFIED = "unclassified"


# Order matters: first match wins.
REPLY_PATTERNS: tuple[tuple[ReplyCategory, tuple[str, ...]], ...] = (
    (
        ReplyCategory.REGISTRATION_CONFIRMED,
        ("successfully registered", "you have registered", "registered successfully"),
    ),
    (ReplyCategory.ALREADY_REGISTERED, ("already registered", "is already registered")),
    (
        ReplyCategory.LOGIN_CONFIRMED,
        ("successfully logged in", "logged in", "you are now logged in", "login successful"),
    ),
    (ReplyCategory.INVALID_CREDENTIALS, ("invalid password", "wrong password", "incorrect password")),
    (ReplyCategory.NOT_REGISTERED, ("not registered", "you are not registered")),
)


def classify_reply(text: str) -> ReplyCategory:
    """Sort one server chat line into a reply category."""
    lowered = (text or "").lower()
    for category, phrases in REPLY_PATTERNS:
        if any(phrase in lowered for phrase in phrases):
            return category
    return ReplyCategory.UNCLASSIFIED


class AuthOutcome(StrEnum):
    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    ABANDONED = "abandoned"


class HandshakePhase(StrEnum):
    IDLE = "idle"
    AWAITING_REGISTER_ACK = "awaiting_register_ack"
    AWAITING_LOGIN_ACK = "awaiting_login_ack"
    RESOLVED = "resolved"


class HandshakeTiming(BaseModel):
    """Delays used by the handshake, in seconds."""

    register_to_login_delay: float = Field(default=REGISTER_TO_LOGIN_DELAY_S, ge=0)
    login_after_registered_delay: float = Field(default=LOGIN_AFTER_REGISTERED_DELAY_S, ge=0)
    login_after_already_registered_delay: float = Field(default=LOGIN_AFTER_ALREADY_REGISTERED_DELAY_S, ge=0)
    settle_delay: float = Field(default=AUTH_SETTLE_DELAY_S, ge=0)
    retry_backoff: float = Field(default=AUTH_RETRY_BACKOFF_S, ge=0)

    model_config = ConfigDict(frozen=True)


@dataclass
class HandshakeState:
    """Per-attempt state. A fresh one is created for every attempt."""

    attempt: int
    phase: HandshakePhase = HandshakePhase.IDLE
    outcome: AuthOutcome | None = None
    deadline: float | None = None
    resolved: asyncio.Event = field(default_factory=asyncio.Event)
    followups: set[asyncio.Task[None]] = field(default_factory=set)

    def resolve(self, outcome: AuthOutcome) -> bool:
        """Record *outcome* unless one is already set."""
        if self.outcome is not None:
            return False
        self.outcome = outcome
        self.phase = HandshakePhase.RESOLVED
        self.resolved.set()
        return True


class AuthenticationHandshake:
    """Bounded-attempt register/login state machine over the chat channel."""

    def __init__(self, timing: HandshakeTiming | None = None) -> None:
        self.timing = timing or HandshakeTiming()
        self._state: HandshakeState | None = None
        self._running = False

    @property
    def state(self) -> HandshakeState | None:
        """State of the attempt in progress, None between attempts."""
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    async def run(
        self,
        client: GameClient,
        password: str,
        max_attempts: int = DEFAULT_AUTH_MAX_ATTEMPTS,
        per_attempt_timeout: float = DEFAULT_AUTH_TIMEOUT_S,
    ) -> AuthOutcome:
        """Register and/or log in, retrying attempts that get no verdict.

        Args:
            client: Connected game client
            password: Account password for the auth plugin
            max_attempts: Attempt budget
            per_attempt_timeout: Seconds to wait for a verdict after /login

        Returns:
            SUCCESS, INVALID_CREDENTIALS (not retried) or ABANDONED

        Raises:
            RuntimeError: If this handshake is already running
            ValueError: If max_attempts < 1
        """
        if self._running:
            raise RuntimeError("Handshake already running")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self._running = True
        try:
            for attempt in range(1, max_attempts + 1):
                logger.info("auth_attempt", attempt=attempt, max_attempts=max_attempts)
                outcome = await self._attempt(client, password, attempt, per_attempt_timeout)
                if outcome is not None:
                    return outcome
                logger.info("auth_attempt_unconfirmed", attempt=attempt, timeout_s=per_attempt_timeout)
                if attempt < max_attempts:
                    await asyncio.sleep(self.timing.retry_backoff)

            logger.warning(
                "auth_abandoned",
                attempts=max_attempts,
                hint="If not logged in check password or plugin messages in chat.",
            )
            return AuthOutcome.ABANDONED
        finally:
            self._running = False

    async def _attempt(
        self,
        client: GameClient,
        password: str,
        attempt: int,
        timeout: float,
    ) -> AuthOutcome | None:
        state = HandshakeState(attempt=attempt)
        self._state = state

        def on_chat(event: ChatEvent) -> None:
            self._on_reply(client, password, state, event)

        try:
            with client.subscribe(EventKind.CHAT, on_chat):
                await self._send(client, state, f"/register {password} {password}", "/register")
                if state.outcome is None:
                    state.phase = HandshakePhase.AWAITING_REGISTER_ACK

                await asyncio.sleep(self.timing.register_to_login_delay)
                await self._send(client, state, f"/login {password}", "/login")
                if state.outcome is None:
                    state.deadline = time.monotonic() + timeout
                    await self._wait_resolved(state, timeout)

            if state.outcome is AuthOutcome.SUCCESS:
                # Let a queued /login go out rather than leave it mid-flight.
                if state.followups:
                    await asyncio.gather(*state.followups, return_exceptions=True)
            else:
                self._cancel_followups(state)

            if state.outcome is None:
                return None
            await asyncio.sleep(self.timing.settle_delay)
            return state.outcome
        finally:
            self._cancel_followups(state)
            self._state = None

    async def _wait_resolved(self, state: HandshakeState, timeout: float) -> bool:
        if state.resolved.is_set():
            return True
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(state.resolved.wait(), timeout=timeout)
        return state.resolved.is_set()

    def _on_reply(self, client: GameClient, password: str, state: HandshakeState, event: ChatEvent) -> None:
        if state.outcome is not None:
            return
        category = classify_reply(event.text)
        if category is ReplyCategory.UNCLASSIFIED:
            return
        logger.debug("auth_reply", attempt=state.attempt, category=str(category), seq=event.seq)

        if category is ReplyCategory.REGISTRATION_CONFIRMED:
            logger.info("auth_registration_confirmed", attempt=state.attempt)
            self._schedule_login(client, password, state, self.timing.login_after_registered_delay, "after register")
        elif category is ReplyCategory.ALREADY_REGISTERED:
            logger.info("auth_already_registered", attempt=state.attempt)
            self._schedule_login(
                client, password, state, self.timing.login_after_already_registered_delay, "already registered"
            )
        elif category is ReplyCategory.LOGIN_CONFIRMED:
            logger.info("auth_login_confirmed", attempt=state.attempt)
            state.resolve(AuthOutcome.SUCCESS)
        elif category is ReplyCategory.INVALID_CREDENTIALS:
            logger.error(
                "auth_invalid_password",
                attempt=state.attempt,
                hint="Fix utils.auto-auth.password in the config file.",
            )
            state.resolve(AuthOutcome.INVALID_CREDENTIALS)
        elif category is ReplyCategory.NOT_REGISTERED:
            logger.info("auth_not_registered", attempt=state.attempt)

    def _schedule_login(
        self,
        client: GameClient,
        password: str,
        state: HandshakeState,
        delay: float,
        reason: str,
    ) -> None:
        async def _later() -> None:
            await asyncio.sleep(delay)
            await self._send(client, state, f"/login {password}", f"/login ({reason})")

        task = asyncio.create_task(_later())
        state.followups.add(task)
        task.add_done_callback(state.followups.discard)

    async def _send(self, client: GameClient, state: HandshakeState, command: str, label: str) -> None:
        # label keeps the password out of the logs
        logger.info("auth_send", attempt=state.attempt, command=label)
        try:
            await client.send(command)
        except Exception as e:
            logger.error("auth_send_failed", attempt=state.attempt, command=label, error=str(e))
            return
        if state.outcome is None and label.startswith("/login"):
            state.phase = HandshakePhase.AWAITING_LOGIN_ACK

    def _cancel_followups(self, state: HandshakeState) -> None:
        for task in list(state.followups):
            task.cancel()
        state.followups.clear()
