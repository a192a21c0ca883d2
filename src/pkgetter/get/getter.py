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

"""The Getter: one dependency resolution session.

A Getter owns every cache of the session, so repeated or concurrent
``get`` calls on one instance fetch each repository at most once, while
separate instances never share state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pkgetter.core.fsys import Filesystem, LocalFilesystem
from pkgetter.get.caches import SessionCaches
from pkgetter.get.download import DownloadOrchestrator
from pkgetter.get.hints import HintComputer, Hints, HintSink
from pkgetter.get.package import ImportStack, NoVendoring, Package, PackageLoader, VendorResolver
from pkgetter.get.resolver import RepoRootResolver
from pkgetter.get.walker import ImportGraphWalker
from pkgetter.vcs.gitbackend import GitBackend
from pkgetter.vcs.meta import CoalescedMetaLookup, MetaClient

if TYPE_CHECKING:
    from pkgetter.core.buildenv import BuildEnvironment
    from pkgetter.core.cancel import Context
    from pkgetter.core.spinner import ProgressSink
    from pkgetter.vcs.repo import RepositoryBackend

logger = logging.getLogger(__name__)


def _is_local_import(path: str) -> bool:
    return path == "." or path.startswith(("./", "../", "/")) or path == ".."


class Getter:
    """Resolves and fetches the import graph below a root package.

    Args:
        loader: Loads package metadata; owns all source parsing.
        env: Workspace roots and standard library location.
        backend: Repository backend. Defaults to a GitBackend whose
            metadata lookups are coalesced through this session's cache.
        fs: Filesystem used when preparing checkout directories.
        vendor: Vendoring resolver for test imports.
        hint_sink: Receives the hint map after every non-single get.
        send: Progress sink told about every checkout.
        allow_update: Permit updates of existing checkouts.
        meta_client: HTTP client for metadata lookups of the default backend.
    """

    def __init__(
        self,
        loader: PackageLoader,
        env: BuildEnvironment,
        backend: RepositoryBackend | None = None,
        fs: Filesystem | None = None,
        vendor: VendorResolver | None = None,
        hint_sink: HintSink | None = None,
        send: ProgressSink | None = None,
        allow_update: bool = False,
        meta_client: MetaClient | None = None,
    ) -> None:
        self.loader = loader
        self.env = env
        self.caches = SessionCaches()
        if backend is None:
            lookup = CoalescedMetaLookup(meta_client or MetaClient(), self.caches.fetch_cache)
            backend = GitBackend(meta_lookup=lookup)
        self.backend = backend
        self.hint_sink = hint_sink
        self.resolver = RepoRootResolver(backend)
        self.orchestrator = DownloadOrchestrator(
            self.resolver,
            self.caches,
            env,
            fs or LocalFilesystem(),
            send=send,
            allow_update=allow_update,
        )
        self.walker = ImportGraphWalker(
            self.load_import,
            self.orchestrator,
            self.resolver,
            self.caches,
            vendor or NoVendoring(),
        )
        self.hints = HintComputer(self.caches, self.resolver)

    def load_import(
        self,
        ctx: Context,
        path: str,
        src_dir: str,
        parent: Package | None,
        stack: ImportStack,
        use_vendor: bool,
    ) -> Package:
        """Load ``path`` through the package cache.

        Non-local paths already in the cache are returned without calling
        the loader. Every loaded package is cached under its canonical path.
        """
        if not use_vendor and not _is_local_import(path):
            cached = self.caches.package(path)
            if cached is not None:
                return cached
        pkg = self.loader.load(ctx, path, src_dir, parent, stack, use_vendor)
        self.caches.store_package(pkg)
        return pkg

    def clear_package_cache_partial(self, paths: Iterable[str]) -> None:
        self.caches.clear_packages(paths)

    def get(
        self,
        ctx: Context,
        path: str,
        update: bool = False,
        insecure: bool = False,
        single: bool = False,
    ) -> Hints | None:
        """Fetch ``path`` and, unless ``single``, its transitive imports.

        After a full walk the hint map is computed, handed to the hint sink
        and returned. Single mode skips hints and returns None.

        Raises:
            PackageError: The first hard failure met during the walk.
            OperationCancelled: ``ctx`` was cancelled.
        """
        stack = ImportStack()
        canonical = self.walker.walk(ctx, path, None, stack, update, insecure, single)
        if single:
            return None

        hints = self.hints.compute(canonical)
        if self.hint_sink is not None:
            self.hint_sink.set_hints(hints)
        logger.debug("get %s finished with %d hinted packages", canonical, len(hints))
        return hints
