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

"""CLI application definition for pkgetter."""

from __future__ import annotations

from typer import Typer

from pkgetter.commands.get import get
from pkgetter.commands.resolve import resolve, show_config

app: Typer = Typer(
    name="pkgetter",
    help="Fetch a source package and its transitive dependencies.",
    add_completion=False,
)

# Register commands
app.command(name="get")(get)
app.command(name="resolve")(resolve)
app.command(name="config")(show_config)
