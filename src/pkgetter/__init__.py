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

"""pkgetter: fetch the transitive dependency graph of a source package."""

__version__ = "0.1.0"
