# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from unittest.mock import Mock

from fastapi.testclient import TestClient

from afkbot.api.health import create_app
from afkbot.core.supervisor import SessionSupervisor


def test_root_answers_for_uptime_monitors() -> None:
    with TestClient(create_app()) as client:
        resp = client.get("/")

    assert resp.status_code == 200
    assert resp.text == "Bot has arrived"
    assert resp.headers["content-type"].startswith("text/plain")


def test_status_reports_supervisor() -> None:
    supervisor = Mock(spec=SessionSupervisor)
    supervisor.status.return_value = {"state": "active", "sessions_started": 3}

    with TestClient(create_app(supervisor)) as client:
        resp = client.get("/status")

    assert resp.status_code == 200
    assert resp.json() == {"state": "active", "sessions_started": 3}


def test_status_without_supervisor() -> None:
    with TestClient(create_app()) as client:
        resp = client.get("/status")

    assert resp.json() == {"state": "detached"}
