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

"""Git repository backend.

Resolves import paths to git repositories (statically for known hosts,
through go-import metadata otherwise) and clones them with GitPython.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import git

from pkgetter.core.exceptions import CheckoutError, RepoResolutionError
from pkgetter.vcs.fetchcache import CoalescedFetchCache
from pkgetter.vcs.meta import CoalescedMetaLookup, MetaClient, MetaLookupResult, match_meta_import
from pkgetter.vcs.repo import RepoRoot
from pkgetter.vcs.static import KNOWN_VCS, check_import_path, static_repo_root

if TYPE_CHECKING:
    from pkgetter.core.cancel import Context

logger = logging.getLogger(__name__)

MetaLookup = Callable[["Context", str, bool], MetaLookupResult]


class GitBackend:
    """Repository backend for git hosted packages."""

    vcs = "git"

    def __init__(self, meta_lookup: MetaLookup | None = None) -> None:
        """Initialize the backend.

        Args:
            meta_lookup: Callable fetching go-import metadata for a prefix.
                Defaults to a coalescing lookup with a private fetch cache;
                a Getter passes one bound to its own fetch cache.
        """
        self.meta_lookup = meta_lookup or CoalescedMetaLookup(MetaClient(), CoalescedFetchCache())

    def identify_from_directory(self, dir: str, src_root: str) -> RepoRoot:
        """Find the git checkout containing ``dir``.

        Walks from ``dir`` towards ``src_root`` and stops at the first
        directory holding a ``.git`` entry. The repository root import path
        is that directory's location relative to ``src_root``.

        Raises:
            RepoResolutionError: ``dir`` is outside ``src_root``, no checkout
                was found, or the checkout has no origin remote.
        """
        src = Path(os.path.normpath(src_root))
        current = Path(os.path.normpath(dir))
        if current != src and src not in current.parents:
            raise RepoResolutionError(message=f"directory {dir!r} is outside source root {src_root!r}")

        while current != src:
            if (current / ".git").exists():
                root = current.relative_to(src).as_posix()
                return RepoRoot(root=root, repo=self._remote_url(current), vcs=self.vcs, dir=str(current), exists=True)
            current = current.parent

        raise RepoResolutionError(message=f"directory {dir!r} is not using a known version control system")

    def _remote_url(self, path: Path) -> str:
        try:
            return git.Repo(path).remote("origin").url
        except (git.InvalidGitRepositoryError, git.NoSuchPathError, ValueError) as e:
            raise RepoResolutionError(message=f"cannot read origin remote of {path}: {e}") from e

    def resolve_from_import_path(self, ctx: Context, import_path: str, insecure: bool) -> RepoRoot:
        """Work out the repository owning ``import_path``.

        Raises:
            RepoResolutionError: The path is malformed, the metadata lookup
                failed, or the repository uses an unsupported VCS.
        """
        check_import_path(import_path)
        root = static_repo_root(import_path)
        if root is None:
            root = self._dynamic_repo_root(ctx, import_path, insecure)
        if root.vcs != self.vcs:
            raise RepoResolutionError(
                message=f"{import_path}: unsupported version control system {root.vcs!r}",
                import_path=import_path,
            )
        logger.debug("%s is in repository %s (%s)", import_path, root.root, root.repo)
        return root

    def _dynamic_repo_root(self, ctx: Context, import_path: str, insecure: bool) -> RepoRoot:
        result = self.meta_lookup(ctx, import_path, insecure)
        mi = match_meta_import(result.imports, import_path)
        if mi.prefix != import_path:
            # The prefix must serve the same tag for itself.
            verify = self.meta_lookup(ctx, mi.prefix, insecure)
            if match_meta_import(verify.imports, mi.prefix) != mi:
                raise RepoResolutionError(
                    message=f"{result.url} and {verify.url} disagree about go-import for {mi.prefix}",
                    import_path=import_path,
                )
        if "://" not in mi.repo_root:
            raise RepoResolutionError(
                message=f"{result.url}: invalid repo root {mi.repo_root!r}; no scheme",
                import_path=import_path,
            )
        if mi.vcs not in KNOWN_VCS:
            raise RepoResolutionError(
                message=f"{result.url}: unknown version control system {mi.vcs!r}",
                import_path=import_path,
            )
        return RepoRoot(root=mi.prefix, repo=mi.repo_root, vcs=mi.vcs)

    def create(self, ctx: Context, root: RepoRoot) -> None:
        ctx.raise_if_cancelled()
        logger.info("cloning %s into %s", root.repo, root.dir)
        try:
            git.Repo.clone_from(root.repo, root.dir)
        except git.GitCommandError as e:
            raise CheckoutError(message=f"Clone failed: {e}", repo=root.repo) from e

    def download(self, ctx: Context, root: RepoRoot) -> None:
        """Fetch new remote refs into the existing checkout.

        The working tree is left where it is; choosing a revision is up to
        the caller.
        """
        ctx.raise_if_cancelled()
        logger.info("fetching %s in %s", root.repo, root.dir)
        try:
            git.Repo(root.dir).remote("origin").fetch(prune=True)
        except (git.GitCommandError, ValueError) as e:
            raise CheckoutError(message=f"Fetch failed: {e}", repo=root.repo) from e
