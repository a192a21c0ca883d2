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

"""Cancellation contexts and the guarded runner.

A Context is threaded through every fetch. Cancelling it never stops work
that is already running; run_guarded only lets the waiting caller give up
early and leaves the still-running operation to finish on its own thread.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TypeVar

from pkgetter.core.exceptions import OperationCancelled

T = TypeVar("T")


class Context:
    """A cancellation signal that can be shared across threads.

    Children created with ``child()`` or ``with_timeout()`` are cancelled
    when their parent is, but cancelling a child leaves the parent alone.
    """

    def __init__(self) -> None:
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._timer: threading.Timer | None = None

    @classmethod
    def background(cls) -> Context:
        """Return a context that is only cancelled explicitly."""
        return cls()

    def child(self) -> Context:
        ctx = Context()
        self.add_done_callback(ctx.cancel)
        return ctx

    def with_timeout(self, seconds: float) -> Context:
        """Return a child context that cancels itself after ``seconds``."""
        ctx = self.child()
        timer = threading.Timer(seconds, ctx.cancel)
        timer.daemon = True
        ctx._timer = timer
        timer.start()
        return ctx

    def cancel(self) -> None:
        with self._lock:
            if self._done.is_set():
                return
            self._done.set()
            callbacks, self._callbacks = self._callbacks, []
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        for callback in callbacks:
            callback()

    def cancelled(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return cancelled()."""
        return self._done.wait(timeout)

    def add_done_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation, immediately if already cancelled."""
        with self._lock:
            if not self._done.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_done_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        if self.cancelled():
            raise OperationCancelled()


def run_guarded(ctx: Context, operation: Callable[[], None]) -> bool:
    """Run ``operation`` on its own thread and wait for it or for ``ctx``.

    Args:
        ctx: Cancellation context of the caller.
        operation: Blocking callable. Exceptions it raises are the
            operation's own business; wrap it if the caller needs them.

    Returns:
        True if ``ctx`` was cancelled before ``operation`` completed.
    """
    finished = threading.Event()
    wake = threading.Event()

    def _target() -> None:
        try:
            operation()
        finally:
            finished.set()
            wake.set()

    thread = threading.Thread(target=_target, name="pkgetter-guarded", daemon=True)
    thread.start()
    ctx.add_done_callback(wake.set)
    try:
        wake.wait()
    finally:
        ctx.remove_done_callback(wake.set)
    return not finished.is_set()


def call_guarded(ctx: Context, operation: Callable[[], T]) -> T:
    """Run ``operation`` under run_guarded and hand back its outcome.

    Raises:
        OperationCancelled: ``ctx`` fired before the operation finished.
    """
    ctx.raise_if_cancelled()
    outcome: dict[str, object] = {}

    def _capture() -> None:
        try:
            outcome["value"] = operation()
        except BaseException as e:  # re-raised on the caller's thread below
            outcome["error"] = e

    if run_guarded(ctx, _capture):
        raise OperationCancelled()
    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    return outcome["value"]  # type: ignore[return-value]
