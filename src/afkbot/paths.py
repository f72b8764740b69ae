# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Filesystem paths for the configuration file."""

from __future__ import annotations

from pathlib import Path

from platformdirs import user_config_dir

from afkbot.defaults import CONFIG_FILENAME


def default_config_path(cwd: Path | None = None) -> Path:
    """Locate the configuration file.

    Search order:
    1. ``settings.json`` in *cwd* (or the process working directory)
    2. ``settings.json`` in the per-user config directory
    """
    local = (cwd or Path.cwd()) / CONFIG_FILENAME
    if local.exists():
        return local
    return Path(user_config_dir("afkbot", "afkbot")) / CONFIG_FILENAME
