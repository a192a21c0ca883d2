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

"""Recursive walk over the import graph, fetching what is missing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgetter.core.exceptions import OperationCancelled
from pkgetter.get.package import CGO_IMPORT, PackageError, find_vendor

if TYPE_CHECKING:
    from collections.abc import Callable

    from pkgetter.core.cancel import Context
    from pkgetter.get.caches import SessionCaches
    from pkgetter.get.download import DownloadOrchestrator
    from pkgetter.get.package import ImportStack, Package, VendorResolver
    from pkgetter.get.resolver import RepoRootResolver

    LoadImport = Callable[[Context, str, str, Package | None, ImportStack, bool], Package]

logger = logging.getLogger(__name__)

# Loader working directory for the root of a walk.
ROOT_SRC_DIR = "/"


class ImportGraphWalker:
    """Loads packages, fetches the ones missing locally and follows their imports."""

    def __init__(
        self,
        load_import: LoadImport,
        orchestrator: DownloadOrchestrator,
        resolver: RepoRootResolver,
        caches: SessionCaches,
        vendor: VendorResolver,
    ) -> None:
        self.load_import = load_import
        self.orchestrator = orchestrator
        self.resolver = resolver
        self.caches = caches
        self.vendor = vendor

    def walk(
        self,
        ctx: Context,
        path: str,
        parent: Package | None,
        stack: ImportStack,
        update: bool,
        insecure: bool,
        single: bool,
    ) -> str:
        """Process ``path`` and, unless ``single``, everything it imports.

        Args:
            ctx: Cancellation context threaded through every fetch.
            path: Import path as written by the importer; may be relative.
            parent: Importing package, or None at the root of the walk.
            stack: Import chain leading to ``path``.
            update: Fetch even if the package is already present.
            insecure: Allow repositories reached over insecure transports.
            single: Process only this package, not its dependencies, and do
                not record it as processed so a later call can revisit it.

        Returns:
            The canonical import path of the processed package.

        Raises:
            PackageError: A hard package error, a disallowed vendor import,
                or a failed fetch (carrying the import stack).
            OperationCancelled: ``ctx`` was cancelled.
        """
        ctx.raise_if_cancelled()

        def load(path: str) -> Package:
            if parent is None:
                return self.load_import(ctx, path, ROOT_SRC_DIR, None, stack, False)
            return self.load_import(ctx, path, parent.dir, parent, stack, False)

        p = load(path)
        if p.error is not None and p.error.hard:
            raise p.error

        # Key everything on the canonical path so two spellings of one
        # package are handled once.
        path = p.import_path

        if p.standard:
            return path

        if self.caches.check_and_mark_downloaded(path, mark=not single):
            logger.debug("%s already processed", path)
            return path

        pkgs = [p]

        if not p.dir or update:
            with stack.pushed(path):
                try:
                    self.orchestrator.fetch(ctx, p, update, insecure)
                except OperationCancelled:
                    raise
                except Exception as e:
                    raise PackageError(import_stack=stack.copy(), err=str(e)) from e

            # The checkout changed what is on disk; load again from scratch.
            self.caches.clear_packages([path])
            p = load(path)
            if p.error is not None:
                raise p.error
            pkgs = [p]
        else:
            root = self.resolver.root_for_dir(p)
            if root is not None:
                self.caches.record_repo(p.import_path, root)

        if single:
            return path

        for pkg in pkgs:
            declared = pkg.build.imports
            for i, written in enumerate(pkg.imports):
                if written == CGO_IMPORT:
                    continue
                imp = written
                orig = declared[i] if i < len(declared) else imp
                j = find_vendor(orig)
                if j is not None:
                    with stack.pushed(imp):
                        raise PackageError(
                            import_stack=stack.copy(),
                            err="must be imported as " + orig[j + len("vendor/"):],
                        )
                # Test imports beyond the declared list still need vendor
                # lookup; the walk caches on the fully qualified path.
                if i >= len(declared):
                    imp = self.vendor.vendored_import_path(pkg, imp)
                canonical = self.walk(ctx, imp, pkg, stack, update, insecure, False)
                self.caches.record_import(pkg.import_path, written, canonical)

        return path
