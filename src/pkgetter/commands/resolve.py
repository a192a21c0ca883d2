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

"""Implementation of `pkgetter resolve` and `pkgetter config`."""

from __future__ import annotations

import typer
import yaml

from pkgetter.core.cancel import Context
from pkgetter.core.config import load_config
from pkgetter.core.exceptions import GetterError
from pkgetter.core.spinner import activity, activity_spinner
from pkgetter.get.package import Package
from pkgetter.get.resolver import RepoRootResolver
from pkgetter.vcs.fetchcache import CoalescedFetchCache
from pkgetter.vcs.gitbackend import GitBackend
from pkgetter.vcs.meta import CoalescedMetaLookup, MetaClient


def resolve(
    path: str = typer.Argument(..., help="Import path to resolve"),
    insecure: bool = typer.Option(False, help="Allow repositories on insecure transports"),
) -> None:
    """Show the repository that owns an import path, without fetching it."""
    cfg = load_config()
    network = cfg["network"]
    client = MetaClient(timeout=network["timeout"], user_agent=network["user_agent"])
    resolver = RepoRootResolver(GitBackend(CoalescedMetaLookup(client, CoalescedFetchCache())))

    try:
        with activity_spinner("resolve", f"Resolving {path}"):
            root = resolver.resolve_root(Context.background(), Package(import_path=path), insecure)
    except GetterError as e:
        activity("resolve", f"Failed: {e}")
        raise typer.Exit(e.exit_code) from None

    typer.echo(f"root: {root.root}")
    typer.echo(f"vcs:  {root.vcs}")
    typer.echo(f"repo: {root.repo}")


def show_config() -> None:
    """Print the effective configuration."""
    typer.echo(yaml.safe_dump(load_config()), nl=False)
