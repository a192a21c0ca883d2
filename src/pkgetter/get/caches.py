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

"""Caches owned by one resolution session.

Every map only grows for the lifetime of its Getter. Each has its own lock
so that check-and-set operations are atomic across threads.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from pkgetter.get.package import Package
from pkgetter.vcs.fetchcache import CoalescedFetchCache
from pkgetter.vcs.meta import MetaLookupResult
from pkgetter.vcs.repo import RepoRoot


@dataclass
class RootClaim:
    """Record of one local repository root handled in this session.

    ``done`` is set when the thread that claimed the root has finished its
    checkout attempt, whatever the outcome.
    """

    root: RepoRoot
    done: threading.Event = field(default_factory=threading.Event)


class SessionCaches:
    def __init__(self) -> None:
        self._packages_lock = threading.Lock()
        self._packages: dict[str, Package] = {}
        self._downloaded_lock = threading.Lock()
        self._downloaded: set[str] = set()
        self._roots_lock = threading.Lock()
        self._roots: dict[str, RootClaim] = {}
        self._repos_lock = threading.Lock()
        self._repos: dict[str, RepoRoot] = {}
        self._imports_lock = threading.Lock()
        self._imports: dict[tuple[str, str], str] = {}
        self.fetch_cache: CoalescedFetchCache[MetaLookupResult] = CoalescedFetchCache()

    # packageCache

    def package(self, path: str) -> Package | None:
        with self._packages_lock:
            return self._packages.get(path)

    def store_package(self, pkg: Package) -> None:
        with self._packages_lock:
            self._packages[pkg.import_path] = pkg

    def clear_packages(self, paths: Iterable[str]) -> None:
        """Drop package cache entries for ``paths`` after their source changed on disk."""
        with self._packages_lock:
            for path in paths:
                self._packages.pop(path, None)

    def packages(self) -> dict[str, Package]:
        with self._packages_lock:
            return dict(self._packages)

    # downloadCache

    def check_and_mark_downloaded(self, path: str, mark: bool = True) -> bool:
        """Return True if ``path`` was already processed; otherwise record it if ``mark``."""
        with self._downloaded_lock:
            if path in self._downloaded:
                return True
            if mark:
                self._downloaded.add(path)
            return False

    def downloaded(self, path: str) -> bool:
        with self._downloaded_lock:
            return path in self._downloaded

    # downloadRootCache

    def claim_root(self, root: RepoRoot) -> tuple[RootClaim, bool]:
        """Claim the local directory of ``root`` for checkout.

        Returns:
            The claim for ``root.dir`` and True if this caller made it, in
            which case it must set ``claim.done`` when finished.
        """
        with self._roots_lock:
            claim = self._roots.get(root.dir)
            if claim is not None:
                return claim, False
            claim = RootClaim(root=root)
            self._roots[root.dir] = claim
            return claim, True

    # repoPackages

    def record_repo(self, path: str, root: RepoRoot) -> None:
        with self._repos_lock:
            self._repos[path] = root

    def repo_for(self, path: str) -> RepoRoot | None:
        with self._repos_lock:
            return self._repos.get(path)

    def repos(self) -> dict[str, RepoRoot]:
        with self._repos_lock:
            return dict(self._repos)

    # resolved imports

    def record_import(self, importer: str, written: str, canonical: str) -> None:
        """Remember that ``importer`` spelling ``written`` resolved to ``canonical``."""
        with self._imports_lock:
            self._imports[(importer, written)] = canonical

    def resolved_imports(self) -> dict[tuple[str, str], str]:
        with self._imports_lock:
            return dict(self._imports)
