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

"""Checkout orchestration: one create or update per repository root per session."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from pkgetter.core.cancel import call_guarded, run_guarded
from pkgetter.core.exceptions import (
    ConfigError,
    DirectoryCollisionError,
    OperationCancelled,
    PathDisagreementError,
    UpdateUnsupportedError,
)
from pkgetter.core.fsys import exists
from pkgetter.core.spinner import Downloading

if TYPE_CHECKING:
    from pkgetter.core.buildenv import BuildEnvironment
    from pkgetter.core.cancel import Context
    from pkgetter.core.fsys import Filesystem
    from pkgetter.core.spinner import ProgressSink
    from pkgetter.get.caches import SessionCaches
    from pkgetter.get.package import Package
    from pkgetter.get.resolver import RepoRootResolver
    from pkgetter.vcs.repo import RepoRoot

logger = logging.getLogger(__name__)


class DownloadOrchestrator:
    """Makes sure the repository of a package is checked out.

    Args:
        resolver: Resolver used to find the repository of a package.
        caches: Session caches recording handled roots and package repos.
        env: Workspace and standard library locations.
        fs: Filesystem used to inspect and prepare checkout directories.
        send: Optional progress sink, told about every checkout.
        allow_update: Permit updating checkouts that already exist. When
            False an update request fails with UpdateUnsupportedError.
    """

    def __init__(
        self,
        resolver: RepoRootResolver,
        caches: SessionCaches,
        env: BuildEnvironment,
        fs: Filesystem,
        send: ProgressSink | None = None,
        allow_update: bool = False,
    ) -> None:
        self.resolver = resolver
        self.caches = caches
        self.env = env
        self.fs = fs
        self.send = send
        self.allow_update = allow_update

    def fetch(self, ctx: Context, pkg: Package, update: bool, insecure: bool) -> None:
        """Create or update the checkout holding ``pkg``.

        The backend creates a checkout when none exists on disk and updates
        it otherwise.
        """
        logger.debug("fetching %s (update=%s, insecure=%s)", pkg.import_path, update, insecure)
        root = self.resolver.resolve_root(ctx, pkg, insecure)

        if not pkg.build.src_root:
            self._place_in_workspace(pkg)

        dir = os.path.normpath(os.path.join(pkg.build.src_root, *root.root.split("/")))
        if not root.dir:
            root.dir = dir
        elif os.path.normpath(root.dir) != dir:
            raise PathDisagreementError(
                message=f"path disagreement, calculated {dir}, expected {root.dir}",
                calculated=dir,
                expected=root.dir,
            )

        self.caches.record_repo(pkg.import_path, root)

        claim, owner = self.caches.claim_root(root)
        if not owner:
            logger.debug("repository %s already handled in this session", root.dir)
            if not claim.done.is_set() and run_guarded(ctx, claim.done.wait):
                raise OperationCancelled(message=f"cancelled waiting for checkout of {root.root}")
            return

        try:
            if not root.exists:
                self._checkout(ctx, root)
            else:
                self._update(ctx, root)
        finally:
            claim.done.set()

    def _place_in_workspace(self, pkg: Package) -> None:
        """Put a package that was not found locally in the first workspace root."""
        roots = self.env.workspace_roots
        if not roots:
            raise ConfigError(message="cannot download, no workspace root is configured")
        first = roots[0]
        if self.env.std_root and os.path.normpath(first) == os.path.normpath(self.env.std_root):
            raise ConfigError(message="cannot download, the workspace root must not be the standard library root")
        if exists(self.fs, os.path.join(first, self.env.std_marker)):
            raise ConfigError(message=f"cannot download, {first} is a standard library root, not a workspace root")
        pkg.build.root = first
        pkg.build.src_root = os.path.join(first, "src")
        pkg.build.pkg_root = os.path.join(first, "pkg")

    def _checkout(self, ctx: Context, root: RepoRoot) -> None:
        # Some version control tools require the target not to exist.
        if exists(self.fs, root.dir):
            raise DirectoryCollisionError(message=f"{root.dir} exists but repo does not", path=root.dir)

        # And some require its parent to exist.
        self.fs.mkdir_all(os.path.dirname(root.dir), 0o777)
        if self.send is not None:
            self.send(Downloading(message=root.root))

        logger.info("checking out %s into %s", root.root, root.dir)
        call_guarded(ctx, lambda: self.resolver.backend.create(ctx, root))

    def _update(self, ctx: Context, root: RepoRoot) -> None:
        if not self.allow_update:
            raise UpdateUnsupportedError(
                message=f"cannot update existing checkout of {root.root} at {root.dir}",
                repo_root=root.root,
            )
        if self.send is not None:
            self.send(Downloading(message=root.root))

        logger.info("updating %s in %s", root.root, root.dir)
        call_guarded(ctx, lambda: self.resolver.backend.download(ctx, root))
