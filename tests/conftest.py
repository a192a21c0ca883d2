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

"""Pytest fixtures and in-memory collaborators for pkgetter tests."""

from __future__ import annotations

import os
import posixpath
import tempfile
import threading
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest import mock

import pytest
import responses

from pkgetter.core.buildenv import BuildEnvironment
from pkgetter.core.cancel import Context
from pkgetter.core.exceptions import CheckoutError, RepoResolutionError
from pkgetter.get.getter import Getter
from pkgetter.get.package import BuildInfo, ImportStack, Package, PackageError, Severity
from pkgetter.vcs.repo import RepoRoot

WORKSPACE = "/ws"
SRC_ROOT = "/ws/src"
STD_ROOT = "/usr/lib/std"


class FakeFilesystem:
    """Filesystem holding a set of existing paths."""

    def __init__(self) -> None:
        self.paths: set[str] = set()
        self.mkdirs: list[str] = []

    def stat(self, path: str) -> os.stat_result:
        if posixpath.normpath(path) not in self.paths:
            raise FileNotFoundError(path)
        return os.stat_result((0o40755, 0, 0, 1, 0, 0, 0, 0, 0, 0))

    def mkdir_all(self, path: str, mode: int = 0o777) -> None:
        self.mkdirs.append(path)
        self.paths.add(posixpath.normpath(path))


class FakeBackend:
    """Repository backend over a table of repository roots.

    Every call is recorded so tests can count network operations.
    """

    def __init__(self) -> None:
        self.repos: dict[str, str] = {}
        self.checked_out: set[str] = set()
        self.created: list[str] = []
        self.downloaded: list[str] = []
        self.resolved: list[str] = []
        self.failing: set[str] = set()
        self.create_hook: Callable[[RepoRoot], None] | None = None
        self._lock = threading.Lock()

    def add_repo(self, root: str, repo: str | None = None) -> None:
        self.repos[root] = repo or f"https://{root}"

    def root_for(self, import_path: str) -> str | None:
        best = None
        for root in self.repos:
            if import_path == root or import_path.startswith(root + "/"):
                if best is None or len(root) > len(best):
                    best = root
        return best

    def is_checked_out(self, import_path: str) -> bool:
        root = self.root_for(import_path)
        return root is not None and root in self.checked_out

    def identify_from_directory(self, dir: str, src_root: str) -> RepoRoot:
        rel = posixpath.relpath(dir, src_root)
        root = self.root_for(rel)
        if root is None:
            raise RepoResolutionError(message=f"directory {dir!r} is not using a known version control system")
        return RepoRoot(
            root=root,
            repo=self.repos[root],
            dir=posixpath.join(src_root, root),
            exists=True,
        )

    def resolve_from_import_path(self, ctx: Context, import_path: str, insecure: bool) -> RepoRoot:
        with self._lock:
            self.resolved.append(import_path)
        root = self.root_for(import_path)
        if root is None:
            raise RepoResolutionError(message=f"unrecognized import path {import_path!r}", import_path=import_path)
        return RepoRoot(root=root, repo=self.repos[root])

    def create(self, ctx: Context, root: RepoRoot) -> None:
        if self.create_hook is not None:
            self.create_hook(root)
        with self._lock:
            self.created.append(root.root)
        if root.root in self.failing:
            raise CheckoutError(message=f"Clone failed: {root.repo}", repo=root.repo)
        self.checked_out.add(root.root)

    def download(self, ctx: Context, root: RepoRoot) -> None:
        with self._lock:
            self.downloaded.append(root.root)


class FakeLoader:
    """Package loader over an in-memory import graph.

    A package is present on disk if it was marked present or its repository
    has been checked out by the backend.
    """

    def __init__(self, backend: FakeBackend) -> None:
        self.backend = backend
        self.entries: dict[str, dict[str, Any]] = {}
        self.aliases: dict[str, str] = {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def add(
        self,
        path: str,
        imports: list[str] | None = None,
        standard: bool = False,
        present: bool = False,
        build_imports: list[str] | None = None,
        error: PackageError | None = None,
    ) -> None:
        imports = list(imports or [])
        self.entries[path] = {
            "imports": imports,
            "build_imports": list(imports if build_imports is None else build_imports),
            "standard": standard,
            "present": present,
            "error": error,
        }

    def load(
        self,
        ctx: Context,
        path: str,
        src_dir: str,
        parent: Package | None,
        stack: ImportStack,
        use_vendor: bool,
    ) -> Package:
        with self._lock:
            self.calls.append(path)
        canonical = self.aliases.get(path, path)
        entry = self.entries.get(canonical)
        if entry is None:
            return Package(
                import_path=canonical,
                error=PackageError(import_stack=stack.copy(), err=f"malformed import path {canonical!r}"),
            )
        if entry["standard"]:
            return Package(import_path=canonical, dir=posixpath.join(STD_ROOT, "src", canonical), standard=True)
        if not (entry["present"] or self.backend.is_checked_out(canonical)):
            return Package(
                import_path=canonical,
                error=PackageError(
                    import_stack=stack.copy(),
                    err=f"cannot find package {canonical!r}",
                    severity=Severity.SOFT,
                ),
            )
        return Package(
            import_path=canonical,
            dir=posixpath.join(SRC_ROOT, canonical),
            imports=list(entry["imports"]),
            error=entry["error"],
            build=BuildInfo(
                src_root=SRC_ROOT,
                root=WORKSPACE,
                pkg_root=posixpath.join(WORKSPACE, "pkg"),
                imports=list(entry["build_imports"]),
            ),
        )


class PrefixVendoring:
    """Vendoring resolver that rewrites every path under the parent's vendor dir."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def vendored_import_path(self, parent: Package, path: str) -> str:
        self.calls.append((parent.import_path, path))
        return f"{parent.import_path}/vendor/{path}"


class RecordingHintSink:
    def __init__(self) -> None:
        self.hints: list[dict[str, list[str]]] = []

    def set_hints(self, hints: dict[str, list[str]]) -> None:
        self.hints.append(hints)


@pytest.fixture
def fake_fs() -> FakeFilesystem:
    return FakeFilesystem()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fake_loader(fake_backend: FakeBackend) -> FakeLoader:
    return FakeLoader(fake_backend)


@pytest.fixture
def hint_sink() -> RecordingHintSink:
    return RecordingHintSink()


@pytest.fixture
def build_env() -> BuildEnvironment:
    return BuildEnvironment(workspace_roots=[WORKSPACE], std_root=STD_ROOT)


@pytest.fixture
def ctx() -> Generator[Context, None, None]:
    context = Context.background()
    yield context
    context.cancel()


@pytest.fixture
def make_getter(
    fake_loader: FakeLoader,
    fake_backend: FakeBackend,
    fake_fs: FakeFilesystem,
    build_env: BuildEnvironment,
    hint_sink: RecordingHintSink,
) -> Callable[..., Getter]:
    """Return a factory building Getters wired to the in-memory collaborators."""

    def _make(**kwargs: Any) -> Getter:
        options: dict[str, Any] = {
            "backend": fake_backend,
            "fs": fake_fs,
            "hint_sink": hint_sink,
        }
        options.update(kwargs)
        return Getter(fake_loader, build_env, **options)

    return _make


@pytest.fixture
def prefix_vendoring() -> PrefixVendoring:
    return PrefixVendoring()


@pytest.fixture
def temp_home(monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a temporary home directory and set HOME/XDG paths."""
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir)
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
        monkeypatch.setattr(Path, "home", lambda: home)
        yield home


@pytest.fixture
def mock_config(temp_home: Path) -> Path:
    """Create a minimal config file in the temp home."""
    config_dir = temp_home / ".config" / "pkgetter"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / "config.yaml"
    config_file.write_text(f"""
workspace:
  roots: ["{temp_home}/ws"]
  std_root: "{temp_home}/std"

network:
  timeout: 5
  user_agent: "pkgetter-test"

behavior:
  insecure: false
  allow_update: false
  loader: ""

paths:
  hints_file: "~/.cache/pkgetter/hints.json"
""")
    return config_file


@pytest.fixture
def mock_responses() -> Generator[responses.RequestsMock, None, None]:
    """Activate responses mock for HTTP requests."""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def non_tty_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock sys.__stdout__.isatty() to return False."""
    mock_stdout = mock.MagicMock()
    mock_stdout.isatty.return_value = False
    monkeypatch.setattr("sys.__stdout__", mock_stdout)


@pytest.fixture
def tty_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock sys.__stdout__.isatty() to return True."""
    mock_stdout = mock.MagicMock()
    mock_stdout.isatty.return_value = True
    mock_stdout.write = lambda x: None
    mock_stdout.flush = lambda: None
    monkeypatch.setattr("sys.__stdout__", mock_stdout)
