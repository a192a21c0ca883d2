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

"""Filesystem access used when preparing checkout directories."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol


class Filesystem(Protocol):
    def stat(self, path: str) -> os.stat_result:
        """Return stat info, raising OSError if ``path`` does not exist."""
        ...

    def mkdir_all(self, path: str, mode: int = 0o777) -> None: ...


class LocalFilesystem:
    """Filesystem backed by the local disk."""

    def stat(self, path: str) -> os.stat_result:
        return Path(path).stat()

    def mkdir_all(self, path: str, mode: int = 0o777) -> None:
        Path(path).mkdir(mode=mode, parents=True, exist_ok=True)


def exists(fs: Filesystem, path: str) -> bool:
    try:
        fs.stat(path)
    except OSError:
        return False
    return True
