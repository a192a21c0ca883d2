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

"""Dependency resolution core.

Walks the import graph below a root package, fetches missing repositories
once per session and computes the repository hint map.
"""

from pkgetter.get.caches import SessionCaches
from pkgetter.get.download import DownloadOrchestrator
from pkgetter.get.getter import Getter
from pkgetter.get.hints import HintComputer, HintSink, JsonHintWriter, LoggingHintSink
from pkgetter.get.package import (
    BuildInfo,
    ImportStack,
    NoVendoring,
    Package,
    PackageError,
    PackageLoader,
    Severity,
    VendorResolver,
    find_vendor,
)
from pkgetter.get.resolver import RepoRootResolver
from pkgetter.get.walker import ImportGraphWalker

__all__ = [
    "BuildInfo",
    "DownloadOrchestrator",
    "Getter",
    "HintComputer",
    "HintSink",
    "ImportGraphWalker",
    "ImportStack",
    "JsonHintWriter",
    "LoggingHintSink",
    "NoVendoring",
    "Package",
    "PackageError",
    "PackageLoader",
    "RepoRootResolver",
    "SessionCaches",
    "Severity",
    "VendorResolver",
    "find_vendor",
]
