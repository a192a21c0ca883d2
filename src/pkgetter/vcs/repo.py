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

"""Repository roots and the interface of a repository backend."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from pkgetter.core.cancel import Context

SECURE_SCHEMES = frozenset({"https", "ssh", "git+ssh", "svn+ssh", "bzr+ssh"})

# scp-like syntax: user@host:path/to/repo
_SCP_SYNTAX = re.compile(r"^[\w.\-]+@[\w.\-]+:(?!//)")


@dataclass
class RepoRoot:
    """Resolved identity of a version control repository.

    Attributes:
        root: Import path prefix owned by the repository.
        repo: Remote location to check out from.
        vcs: Version control kind, e.g. "git".
        dir: Local checkout directory, empty until computed.
        exists: True if a local checkout was found on disk.
    """

    root: str
    repo: str
    vcs: str = "git"
    dir: str = ""
    exists: bool = False


def is_secure(repo: str) -> bool:
    """Return True if ``repo`` is fetched over an authenticated, encrypted transport."""
    if _SCP_SYNTAX.match(repo):
        return True
    try:
        scheme = urlsplit(repo).scheme
    except ValueError:
        return False
    return scheme in SECURE_SCHEMES


class RepositoryBackend(Protocol):
    """Version control operations the getter relies on."""

    def identify_from_directory(self, dir: str, src_root: str) -> RepoRoot:
        """Find the checkout containing ``dir`` by scanning up to ``src_root``."""
        ...

    def resolve_from_import_path(self, ctx: Context, import_path: str, insecure: bool) -> RepoRoot:
        """Work out the repository owning ``import_path`` without a local checkout."""
        ...

    def create(self, ctx: Context, root: RepoRoot) -> None:
        """Make the first checkout of ``root`` at ``root.dir``."""
        ...

    def download(self, ctx: Context, root: RepoRoot) -> None:
        """Update the existing checkout at ``root.dir``."""
        ...
