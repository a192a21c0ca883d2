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

"""Hint map computation.

After a walk, every reachable package is mapped to the repository URLs it
depends on, directly or transitively. A downstream cache uses the map to
warm the repositories a package will need.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pkgetter.get.package import CGO_IMPORT

if TYPE_CHECKING:
    from pkgetter.get.caches import SessionCaches
    from pkgetter.get.resolver import RepoRootResolver

logger = logging.getLogger(__name__)

Hints = dict[str, list[str]]


class HintSink(Protocol):
    def set_hints(self, hints: Hints) -> None: ...


class HintComputer:
    def __init__(self, caches: SessionCaches, resolver: RepoRootResolver) -> None:
        self.caches = caches
        self.resolver = resolver

    def compute(self, root_path: str) -> Hints:
        """Return import path -> sorted repository URLs for everything reachable.

        Standard library packages are neither listed nor followed. Packages
        on an import cycle share one hint set covering the whole cycle.
        """
        packages = self.caches.packages()
        repos = self.caches.repos()
        resolved = self.caches.resolved_imports()

        index: dict[str, int] = {}
        lowlink: dict[str, int] = {}
        stack: list[str] = []
        on_stack: set[str] = set()
        done: dict[str, frozenset[str]] = {}

        def is_standard(path: str) -> bool:
            pkg = packages.get(path)
            return pkg is not None and pkg.standard

        def imports_of(path: str) -> list[str]:
            pkg = packages.get(path)
            if pkg is None:
                return []
            # Follow each import as the walk resolved it, not as written.
            canonical = [resolved.get((path, imp), imp) for imp in pkg.imports if imp != CGO_IMPORT]
            return [imp for imp in canonical if not is_standard(imp)]

        def own_urls(path: str) -> set[str]:
            root = repos.get(path)
            if root is not None:
                return {root.repo}
            pkg = packages.get(path)
            if pkg is not None:
                root = self.resolver.root_for_dir(pkg)
                if root is not None:
                    return {root.repo}
            return set()

        # Tarjan's strongly connected components; each component is
        # finished after every component it depends on.
        def visit(path: str) -> None:
            index[path] = lowlink[path] = len(index)
            stack.append(path)
            on_stack.add(path)

            for imp in imports_of(path):
                if imp not in index:
                    visit(imp)
                    lowlink[path] = min(lowlink[path], lowlink[imp])
                elif imp in on_stack:
                    lowlink[path] = min(lowlink[path], index[imp])

            if lowlink[path] != index[path]:
                return

            members: list[str] = []
            while True:
                member = stack.pop()
                on_stack.discard(member)
                members.append(member)
                if member == path:
                    break

            urls: set[str] = set()
            for member in members:
                urls |= own_urls(member)
                for imp in imports_of(member):
                    urls |= done.get(imp, frozenset())
            frozen = frozenset(urls)
            for member in members:
                done[member] = frozen

        if not is_standard(root_path):
            visit(root_path)

        return {path: sorted(urls) for path, urls in done.items()}


class LoggingHintSink:
    def set_hints(self, hints: Hints) -> None:
        for path, urls in sorted(hints.items()):
            logger.debug("hint %s -> %s", path, ", ".join(urls))
        logger.info("computed hints for %d packages", len(hints))


class JsonHintWriter:
    """Writes the hint map to a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def set_hints(self, hints: Hints) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(hints, indent=2, sort_keys=True))
