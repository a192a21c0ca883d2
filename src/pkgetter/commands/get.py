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

"""Implementation of `pkgetter get`."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path

import typer

from pkgetter.core.buildenv import BuildEnvironment
from pkgetter.core.cancel import Context
from pkgetter.core.config import load_config
from pkgetter.core.exceptions import ConfigError, GetterError
from pkgetter.core.spinner import activity, activity_spinner, console_sink
from pkgetter.get.getter import Getter
from pkgetter.get.hints import JsonHintWriter
from pkgetter.get.package import PackageLoader
from pkgetter.vcs.meta import MetaClient


def load_loader(spec: str) -> PackageLoader:
    """Instantiate a package loader from a ``module:callable`` spec.

    Raises:
        ConfigError: The spec is malformed or does not name a callable.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(message=f"invalid loader {spec!r}, expected module:callable")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(message=f"cannot import loader module {module_name!r}: {e}") from e
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigError(message=f"loader {spec!r} is not callable")
    return factory()


def get(
    path: str = typer.Argument(..., help="Import path of the root package"),
    loader: str = typer.Option("", help="Package loader factory as module:callable"),
    update: bool = typer.Option(False, "--update", "-u", help="Update packages that are already present"),
    insecure: bool = typer.Option(False, help="Allow fetching over insecure transports"),
    single: bool = typer.Option(False, help="Fetch only this package, not its dependencies"),
    hints_out: str = typer.Option("", help="Write the hint map to this file"),
    timeout: float = typer.Option(0.0, help="Give up after this many seconds (0 for no limit)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Fetch a package and everything it imports.

    Exit codes:
      0 - Success
      1 - Configuration error
      2 - Package error
      3 - Repository could not be resolved
      4 - Insecure transport refused
      5 - Checkout directory conflict
      6 - Update of an existing checkout refused
      7 - Cancelled or timed out
      8 - Checkout failed
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    cfg = load_config()
    behavior = cfg["behavior"]
    network = cfg["network"]
    env = BuildEnvironment.from_config(cfg)

    try:
        pkg_loader = load_loader(loader or behavior.get("loader") or "")
    except ConfigError as e:
        activity("get", str(e))
        raise typer.Exit(e.exit_code) from None

    hints_path = Path(hints_out).expanduser() if hints_out else Path(cfg["paths"]["hints_file"])
    getter = Getter(
        pkg_loader,
        env,
        hint_sink=JsonHintWriter(hints_path),
        send=console_sink("get"),
        allow_update=bool(behavior.get("allow_update")),
        meta_client=MetaClient(timeout=network["timeout"], user_agent=network["user_agent"]),
    )

    ctx = Context.background()
    if timeout > 0:
        ctx = ctx.with_timeout(timeout)

    try:
        with activity_spinner("get", f"Resolving {path}"):
            hints = getter.get(
                ctx,
                path,
                update=update,
                insecure=insecure or bool(behavior.get("insecure")),
                single=single,
            )
    except GetterError as e:
        activity("get", f"Failed: {e}")
        raise typer.Exit(e.exit_code) from None
    finally:
        ctx.cancel()

    if hints is not None:
        activity("get", f"Wrote hints for {len(hints)} packages to {hints_path}")
    activity("get", f"Done: {path}")
