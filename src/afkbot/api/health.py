# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Health check endpoint for uptime monitors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from afkbot.defaults import HEALTH_BODY

if TYPE_CHECKING:
    from afkbot.core.supervisor import SessionSupervisor


def create_app(supervisor: SessionSupervisor | None = None) -> FastAPI:
    """Build the health-check app.

    ``GET /`` always answers 200 while the process is up; ``GET /status``
    reports the supervisor snapshot when one is attached.
    """
    app = FastAPI(title="afkbot", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return HEALTH_BODY

    @app.get("/status")
    async def status() -> dict[str, Any]:
        if supervisor is None:
            return {"state": "detached"}
        return supervisor.status()

    return app
