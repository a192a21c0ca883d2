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

"""Package metadata, package errors and the import stack.

Also defines the interfaces of the two collaborators that understand
package source: the package loader and the vendoring resolver.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from pkgetter.core.exceptions import GetterError

if TYPE_CHECKING:
    from pkgetter.core.cancel import Context

# Pseudo-import naming foreign function inclusion; never a real package.
CGO_IMPORT = "C"


class Severity(str, Enum):
    HARD = "hard"
    SOFT = "soft"


@dataclass
class PackageError(GetterError):
    """A package resolution failure tagged with its severity.

    Hard errors abort the walk. Soft errors stay on the Package and the walk
    carries on through it.
    """

    exit_code: int = field(default=2)
    import_stack: list[str] = field(default_factory=list)
    err: str = ""
    severity: Severity = Severity.HARD

    def __post_init__(self) -> None:
        if not self.err:
            self.err = self.message
        self.message = self._format()

    @property
    def hard(self) -> bool:
        return self.severity is Severity.HARD

    def _format(self) -> str:
        if not self.import_stack:
            return self.err
        return "package " + "\n\timports ".join(self.import_stack) + ": " + self.err

    def __str__(self) -> str:
        return self.message


@dataclass
class BuildInfo:
    """Build-internal package fields.

    Attributes:
        src_root: Source directory of the workspace holding the package,
            empty when the package was not found locally.
        root: Workspace root directory.
        pkg_root: Compiled package directory of the workspace.
        imports: Imports exactly as declared by the package source, before
            test imports are appended to Package.imports.
    """

    src_root: str = ""
    root: str = ""
    pkg_root: str = ""
    imports: list[str] = field(default_factory=list)


@dataclass
class Package:
    import_path: str
    dir: str = ""
    standard: bool = False
    imports: list[str] = field(default_factory=list)
    error: PackageError | None = None
    build: BuildInfo = field(default_factory=BuildInfo)


class ImportStack:
    """The chain of import paths leading to the package being processed."""

    def __init__(self, paths: list[str] | None = None) -> None:
        self._paths: list[str] = list(paths or [])

    def push(self, path: str) -> None:
        self._paths.append(path)

    def pop(self) -> str:
        return self._paths.pop()

    def copy(self) -> list[str]:
        return list(self._paths)

    @contextlib.contextmanager
    def pushed(self, path: str) -> Iterator[None]:
        """Push ``path`` for the duration of the block.

        The stack is truncated back to its entry depth on every exit path.
        """
        depth = len(self._paths)
        self._paths.append(path)
        try:
            yield
        finally:
            del self._paths[depth:]

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __repr__(self) -> str:
        return f"ImportStack({self._paths!r})"


def find_vendor(path: str) -> int | None:
    """Return the index where the effective import path starts after vendor/.

    The index points at the final ``vendor/`` element of ``path``, so
    ``path[index + len("vendor/"):]`` is the unqualified import path.
    Returns None when ``path`` has no vendor element.
    """
    if "/vendor/" in path:
        return path.rindex("/vendor/") + 1
    if path.startswith("vendor/"):
        return 0
    return None


class PackageLoader(Protocol):
    """Loads package metadata for an import path.

    The loader resolves ``path`` relative to ``src_dir`` and returns a
    Package whose import_path is canonical. Failures are reported on
    Package.error rather than raised.
    """

    def load(
        self,
        ctx: Context,
        path: str,
        src_dir: str,
        parent: Package | None,
        stack: ImportStack,
        use_vendor: bool,
    ) -> Package: ...


class VendorResolver(Protocol):
    def vendored_import_path(self, parent: Package, path: str) -> str:
        """Return the vendored form of ``path`` as seen from ``parent``."""
        ...


class NoVendoring:
    """Vendoring resolver for workspaces that never vendor."""

    def vendored_import_path(self, parent: Package, path: str) -> str:
        return path
