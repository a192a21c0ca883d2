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

"""Progress events and TTY-aware activity output.

Uses Rich spinners when stdout is a TTY, falls back to plain text otherwise.
Output is written directly to the real terminal (sys.__stdout__).
"""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner


@dataclass(frozen=True)
class Downloading:
    """Emitted once per repository root just before its checkout starts."""

    message: str


ProgressSink = Callable[[Downloading], None]


def is_tty() -> bool:
    """Return True if stdout is a TTY."""
    try:
        if sys.__stdout__ is None:
            return False  # pragma: no cover
        return sys.__stdout__.isatty()
    except Exception:  # pragma: no cover
        return False


def activity(phase: str, description: str) -> None:
    with contextlib.suppress(Exception):
        print(f"[{phase}] {description}", file=sys.__stdout__, flush=True)


def console_sink(phase: str = "get") -> ProgressSink:
    """Return a progress sink that prints each event as an activity line."""

    def _send(event: Downloading) -> None:
        activity(phase, f"downloading {event.message}")

    return _send


@contextlib.contextmanager
def activity_spinner(phase: str, description: str, disable: bool = False) -> Iterator[None]:
    """Context manager that shows a spinner while the wrapped block runs.

    Args:
        phase: Short phase label (e.g., "get", "resolve").
        description: Human-readable description of current activity.
        disable: Force disable spinner even on TTY.

    When stdout is not a TTY or disable is True, the activity line is printed
    without animation and immediately returned.
    """
    text = f"[{phase}] {description}"

    if disable or not is_tty():
        with contextlib.suppress(Exception):  # pragma: no cover
            print(text, file=sys.__stdout__, flush=True)
        yield
        return

    console = Console(file=sys.__stdout__, force_terminal=True)
    spinner = Spinner("dots", text=text)
    with Live(spinner, console=console, refresh_per_second=12, transient=True):
        yield

    with contextlib.suppress(Exception):  # pragma: no cover
        print(text, file=sys.__stdout__, flush=True)
