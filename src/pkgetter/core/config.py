# This file is part of pkgetter, a tool for fetching source package dependency graphs.
#
# Copyright 2025 Canonical Ltd.
#
# SPDX-License-Identifier: GPL-3.0-only
#
# pkgetter is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License version 3, as published by the
# Free Software Foundation.
#
# pkgetter is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranties of MERCHANTABILITY,
# SATISFACTORY QUALITY, or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with
# pkgetter. If not, see <http://www.gnu.org/licenses/>.

"""Configuration utilities for pkgetter."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "workspace": {
        "roots": ["~/go"],
        "std_root": "/usr/local/go",
        # Relative path that only exists inside a standard library tree.
        "std_marker": "src/cmd/go/alldocs.go",
    },
    "network": {
        "timeout": 30,
        "user_agent": "pkgetter",
    },
    "behavior": {
        "insecure": False,
        "allow_update": False,
        # Package loader factory as "module:callable".
        "loader": "",
    },
    "paths": {
        "hints_file": "~/.cache/pkgetter/hints.json",
    },
}


def get_config_path() -> Path:
    """Return the path to the config file."""
    return Path.home() / ".config" / "pkgetter" / "config.yaml"


def ensure_config_exists() -> None:
    """Create the config file with defaults if it does not exist."""
    cfg_path = get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists():
        cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG))


def load_config() -> dict[str, Any]:
    """Load configuration from disk and merge with defaults.

    Top-level sections present in the file are merged key by key over the
    matching DEFAULT_CONFIG section. An unreadable file yields the defaults.
    """
    ensure_config_exists()
    cfg_path = get_config_path()
    try:
        raw = yaml.safe_load(cfg_path.read_text()) or {}
    except (OSError, yaml.YAMLError):
        raw = {}
    if not isinstance(raw, dict):
        raw = {}

    merged: dict[str, Any] = {}
    for key, val in DEFAULT_CONFIG.items():
        if isinstance(val, dict):
            # A section that is not a mapping (e.g. left empty) counts as absent.
            section = raw.get(key)
            merged[key] = {**val, **section} if isinstance(section, dict) else dict(val)
        else:
            merged[key] = raw.get(key, val)

    for pkey, pval in merged.get("paths", {}).items():
        merged["paths"][pkey] = str(Path(pval).expanduser())

    return merged


def write_config(data: dict[str, Any]) -> None:
    """Write the provided data as YAML to the config path.

    The caller should pass a complete configuration mapping.
    """
    cfg_path = get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(yaml.safe_dump(data))
