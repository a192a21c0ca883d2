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

"""Request coalescing cache for remote metadata lookups.

The first caller for a key performs the lookup. Callers arriving while it
is in flight wait on the same Future. Once finished, the outcome (value or
exception) is kept for the rest of the session and replayed to later
callers without another lookup.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    value: T | None = None
    error: BaseException | None = None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class CoalescedFetchCache(Generic[T]):
    """Key to outcome map with at most one lookup per key."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: dict[str, FetchOutcome[T]] = {}
        self._inflight: dict[str, Future[FetchOutcome[T]]] = {}

    def fetch(self, key: str, lookup: Callable[[], T]) -> T:
        """Return the outcome of ``lookup`` for ``key``, running it at most once.

        Raises:
            Whatever ``lookup`` raised, for every caller of that key.
        """
        with self._lock:
            done = self._results.get(key)
            if done is not None:
                logger.debug("fetch cache hit for %s", key)
                return done.unwrap()
            future = self._inflight.get(key)
            owner = future is None
            if future is None:
                future = Future()
                self._inflight[key] = future

        if not owner:
            logger.debug("joining in-flight fetch for %s", key)
            return future.result().unwrap()

        try:
            outcome: FetchOutcome[T] = FetchOutcome(value=lookup())
        except BaseException as e:
            outcome = FetchOutcome(error=e)
            raise
        finally:
            # Waiters must never be left blocked on an unresolved future.
            with self._lock:
                self._results[key] = outcome
                del self._inflight[key]
            future.set_result(outcome)
        return outcome.value  # type: ignore[return-value]
