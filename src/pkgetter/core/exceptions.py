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

"""pkgetter exception types with associated exit codes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GetterError(Exception):
    """Base class for pkgetter errors with an exit code."""

    message: str = "An error occurred"
    exit_code: int = field(default=1)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass
class ConfigError(GetterError):
    """Workspace configuration is missing or points at the wrong tree."""

    exit_code: int = field(default=1)


@dataclass
class RepoResolutionError(GetterError):
    """The repository owning an import path could not be determined."""

    exit_code: int = field(default=3)
    import_path: str = ""


@dataclass
class InsecureTransportError(GetterError):
    exit_code: int = field(default=4)
    repo: str = ""


@dataclass
class DirectoryCollisionError(GetterError):
    """A checkout target is occupied by something other than the repository."""

    exit_code: int = field(default=5)
    path: str = ""


@dataclass
class PathDisagreementError(GetterError):
    """Two different local directories were computed for one repository root."""

    exit_code: int = field(default=5)
    calculated: str = ""
    expected: str = ""


@dataclass
class UpdateUnsupportedError(GetterError):
    exit_code: int = field(default=6)
    repo_root: str = ""


@dataclass
class CheckoutError(GetterError):
    """The version control tool failed to check out or update a repository."""

    exit_code: int = field(default=8)
    repo: str = ""


@dataclass
class OperationCancelled(GetterError):
    """The caller's context was cancelled before a guarded operation finished."""

    message: str = "operation cancelled"
    exit_code: int = field(default=7)
