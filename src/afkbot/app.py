# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process entry: supervisor plus health server on one event loop."""

from __future__ import annotations

import asyncio
import contextlib

import uvicorn

from afkbot.api.health import create_app
from afkbot.config import BotConfig
from afkbot.core.supervisor import SessionSupervisor
from afkbot.logging import get_logger
from afkbot.settings import Settings
from afkbot.transport.base import ClientFactory

logger = get_logger(__name__)


def default_client_factory() -> ClientFactory:
    from afkbot.transport.mineflayer import MineflayerClient

    return MineflayerClient.connect


async def run(
    config: BotConfig,
    settings: Settings,
    *,
    client_factory: ClientFactory | None = None,
    serve_http: bool = True,
) -> None:
    """Run until cancelled or the supervisor is stopped."""
    supervisor = SessionSupervisor(config, client_factory or default_client_factory())

    server: uvicorn.Server | None = None
    server_task: asyncio.Task[None] | None = None
    if serve_http:
        server = uvicorn.Server(
            uvicorn.Config(
                create_app(supervisor),
                host=settings.host,
                port=settings.port,
                log_level=settings.log_level.lower(),
            )
        )
        # uvicorn installs its own signal handlers inside serve(); we stop it via should_exit.
        server_task = asyncio.create_task(server.serve())
        logger.info("health_server_starting", host=settings.host, port=settings.port)

    try:
        await supervisor.start()
        await supervisor.wait_stopped()
    finally:
        await supervisor.stop()
        if server is not None and server_task is not None:
            server.should_exit = True
            with contextlib.suppress(asyncio.CancelledError):
                await server_task
