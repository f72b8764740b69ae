# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Single game session state."""

from __future__ import annotations

import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from afkbot.errors import SessionStateError
from afkbot.logging import get_logger
from afkbot.transport.base import GameClient

logger = get_logger(__name__)


class SessionState(StrEnum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    TERMINATED = "terminated"


_ALLOWED: dict[SessionState, frozenset[SessionState]] = {
    SessionState.CONNECTING: frozenset({SessionState.ACTIVE, SessionState.TERMINATED}),
    SessionState.ACTIVE: frozenset({SessionState.TERMINATED}),
    SessionState.TERMINATED: frozenset(),
}


class Session(BaseModel):
    """One connection lifetime, from creation to termination."""

    session_id: str
    session_number: int
    client: GameClient
    state: SessionState = SessionState.CONNECTING
    created_at: float = Field(default_factory=time.time)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def is_terminated(self) -> bool:
        return self.state is SessionState.TERMINATED

    def transition(self, new_state: SessionState) -> None:
        """Move to *new_state*.

        Raises:
            SessionStateError: If the lifecycle does not allow the move
        """
        if new_state not in _ALLOWED[self.state]:
            raise SessionStateError(f"Session {self.session_id}: cannot go from {self.state} to {new_state}")
        logger.debug("session_transition", session_id=self.session_id, old=str(self.state), new=str(new_state))
        self.state = new_state

    def get_status(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "session_number": self.session_number,
            "state": str(self.state),
            "created_at": self.created_at,
            "uptime_seconds": round(time.time() - self.created_at, 1),
            "connected": self.client.is_connected(),
        }
