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

"""Repository root resolution for packages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgetter.core.exceptions import GetterError, InsecureTransportError
from pkgetter.vcs.repo import RepoRoot, RepositoryBackend, is_secure

if TYPE_CHECKING:
    from pkgetter.core.cancel import Context
    from pkgetter.get.package import Package

logger = logging.getLogger(__name__)


class RepoRootResolver:
    def __init__(self, backend: RepositoryBackend) -> None:
        self.backend = backend

    def resolve_root(self, ctx: Context, pkg: Package, insecure: bool) -> RepoRoot:
        """Determine the repository owning ``pkg``.

        A package found inside a workspace is identified from the checkout on
        disk. Otherwise the import path itself is analyzed, which may need a
        remote metadata lookup.

        Raises:
            InsecureTransportError: The repository is only reachable over an
                insecure transport and ``insecure`` is False.
            GetterError: The backend could not resolve the repository.
        """
        if pkg.build.src_root:
            root = self.backend.identify_from_directory(pkg.dir, pkg.build.src_root)
        else:
            root = self.backend.resolve_from_import_path(ctx, pkg.import_path, insecure)
        if not insecure and not is_secure(root.repo):
            raise InsecureTransportError(
                message=f"cannot download, {root.repo} uses insecure protocol",
                repo=root.repo,
            )
        return root

    def root_for_dir(self, pkg: Package) -> RepoRoot | None:
        """Best-effort identification of the checkout holding an existing package."""
        if not pkg.dir or not pkg.build.src_root:
            return None
        try:
            return self.backend.identify_from_directory(pkg.dir, pkg.build.src_root)
        except (GetterError, OSError) as e:
            logger.debug("no repository found for %s: %s", pkg.import_path, e)
            return None
