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

"""Import path analysis that needs no network access."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pkgetter.core.exceptions import RepoResolutionError
from pkgetter.vcs.repo import RepoRoot

KNOWN_VCS = ("git", "hg", "svn", "bzr", "fossil")


@dataclass(frozen=True)
class HostPattern:
    """A hosting site whose import paths map directly to repositories.

    Attributes:
        prefix: Literal prefix an import path must start with.
        regexp: Pattern with a ``root`` group (and optionally ``vcs``).
        vcs: VCS kind when the pattern has no ``vcs`` group.
        repo: Repository URL template filled from the match groups.
    """

    prefix: str
    regexp: re.Pattern[str]
    vcs: str = ""
    repo: str = "https://{root}"


HOST_PATTERNS: tuple[HostPattern, ...] = (
    HostPattern(
        prefix="github.com/",
        regexp=re.compile(r"^(?P<root>github\.com/[A-Za-z0-9_.\-]+/[A-Za-z0-9_.\-]+)(/[\w.\-]+)*$"),
        vcs="git",
    ),
    HostPattern(
        prefix="bitbucket.org/",
        regexp=re.compile(r"^(?P<root>bitbucket\.org/[A-Za-z0-9_.\-]+/[A-Za-z0-9_.\-]+)(/[A-Za-z0-9_.\-]+)*$"),
        vcs="git",
    ),
    # Explicit VCS suffix: example.com/path/repo.git/sub/pkg
    HostPattern(
        prefix="",
        regexp=re.compile(
            r"^(?P<root>(?P<repo>([a-z0-9.\-]+\.)+[a-z0-9.\-]+(:[0-9]+)?(/~?[A-Za-z0-9_.\-]+)+?)"
            r"\.(?P<vcs>bzr|fossil|git|hg|svn))(/~?[A-Za-z0-9_.\-]+)*$"
        ),
        repo="https://{repo}",
    ),
)


def check_import_path(import_path: str) -> None:
    """Reject import paths that cannot name a remote repository.

    Raises:
        RepoResolutionError: The path is relative or lacks a host element.
    """
    if not import_path or import_path.startswith((".", "/")):
        raise RepoResolutionError(
            message=f"cannot download relative or absolute import path {import_path!r}",
            import_path=import_path,
        )
    host = import_path.split("/", 1)[0]
    if "." not in host:
        raise RepoResolutionError(
            message=f"unrecognized import path {import_path!r}: import path does not begin with hostname",
            import_path=import_path,
        )


def static_repo_root(import_path: str) -> RepoRoot | None:
    """Return the repository for ``import_path`` from the known host table.

    Returns None if no known host matches, leaving the path to a dynamic
    metadata lookup.

    Raises:
        RepoResolutionError: A known host prefix matches but the rest of the
            path is malformed.
    """
    for pattern in HOST_PATTERNS:
        if not import_path.startswith(pattern.prefix):
            continue
        m = pattern.regexp.match(import_path)
        if m is None:
            if pattern.prefix:
                raise RepoResolutionError(
                    message=f"invalid {pattern.prefix.rstrip('/')} import path {import_path!r}",
                    import_path=import_path,
                )
            continue
        groups = {k: v for k, v in m.groupdict().items() if v is not None}
        return RepoRoot(
            root=groups["root"],
            repo=pattern.repo.format(**groups),
            vcs=groups.get("vcs") or pattern.vcs,
        )
    return None
