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

"""Build environment descriptor: workspace roots and the standard library root."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pkgetter.core.config import DEFAULT_CONFIG


@dataclass(frozen=True)
class BuildEnvironment:
    """Where fetched source lives and where the standard library lives.

    Attributes:
        workspace_roots: Ordered workspace roots. New checkouts go in the first.
        std_root: Root of the standard library tree.
        std_marker: Path relative to a root that only exists in a standard
            library tree; used to catch a std tree configured as a workspace.
    """

    workspace_roots: list[str] = field(default_factory=list)
    std_root: str = ""
    std_marker: str = DEFAULT_CONFIG["workspace"]["std_marker"]

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> BuildEnvironment:
        ws: Mapping[str, Any] = cfg.get("workspace") or {}
        roots = ws.get("roots") or []
        if isinstance(roots, str):
            roots = [r for r in roots.split(":") if r]
        std_root = ws.get("std_root") or ""
        return cls(
            workspace_roots=[str(Path(r).expanduser()) for r in roots],
            std_root=str(Path(std_root).expanduser()) if std_root else "",
            std_marker=ws.get("std_marker") or DEFAULT_CONFIG["workspace"]["std_marker"],
        )
