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

"""Remote import path metadata.

A server hosting custom import paths answers ``https://<path>?go-get=1``
with HTML containing tags such as::

    <meta name="go-import" content="example.com/mod git https://github.com/org/mod">

The first field is the import path prefix owned by a repository, followed
by the version control kind and the repository URL.
"""

from __future__ import annotations

import html.parser
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import requests

from pkgetter.core.cancel import call_guarded
from pkgetter.core.exceptions import RepoResolutionError
from pkgetter.vcs.fetchcache import CoalescedFetchCache

if TYPE_CHECKING:
    from pkgetter.core.cancel import Context

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class MetaImport:
    prefix: str
    vcs: str
    repo_root: str


@dataclass(frozen=True)
class MetaLookupResult:
    """Metadata served for one import path prefix."""

    url: str
    imports: tuple[MetaImport, ...]


class _GoImportParser(html.parser.HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.imports: list[MetaImport] = []
        self._in_body = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "body":
            self._in_body = True
        if tag != "meta" or self._in_body:
            return
        attrs_dict = dict(attrs)
        if attrs_dict.get("name") != "go-import":
            return
        fields = (attrs_dict.get("content") or "").split()
        if len(fields) == 3:
            self.imports.append(MetaImport(prefix=fields[0], vcs=fields[1], repo_root=fields[2]))


def parse_meta_imports(text: str) -> list[MetaImport]:
    """Return the go-import tags found in the head of an HTML document."""
    parser = _GoImportParser()
    parser.feed(text)
    return parser.imports


def match_meta_import(imports: list[MetaImport] | tuple[MetaImport, ...], import_path: str) -> MetaImport:
    """Return the single tag whose prefix owns ``import_path``.

    Raises:
        RepoResolutionError: No tag or more than one tag matches.
    """
    matches = [mi for mi in imports if import_path == mi.prefix or import_path.startswith(mi.prefix + "/")]
    if not matches:
        raise RepoResolutionError(
            message=f"unrecognized import path {import_path!r}: no go-import meta tag",
            import_path=import_path,
        )
    if len(matches) > 1:
        raise RepoResolutionError(
            message=f"multiple go-import meta tags match import path {import_path!r}",
            import_path=import_path,
        )
    return matches[0]


class MetaClient:
    """Fetches go-import metadata over HTTP."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "pkgetter",
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent

    def fetch(self, prefix: str, insecure: bool) -> MetaLookupResult:
        """Fetch the metadata for ``prefix``.

        HTTPS is tried first. Plain HTTP is only tried when ``insecure``.

        Raises:
            RepoResolutionError: Every attempted scheme failed.
        """
        schemes = ["https", "http"] if insecure else ["https"]
        last_error: Exception | None = None
        for scheme in schemes:
            url = f"{scheme}://{prefix}?go-get=1"
            logger.debug("fetching %s", url)
            try:
                resp = self.session.get(url, timeout=self.timeout, headers={"User-Agent": self.user_agent})
                resp.raise_for_status()
            except requests.RequestException as e:
                logger.debug("fetch of %s failed: %s", url, e)
                last_error = e
                continue
            return MetaLookupResult(url=url, imports=tuple(parse_meta_imports(resp.text)))
        raise RepoResolutionError(
            message=f"unrecognized import path {prefix!r}: {last_error}",
            import_path=prefix,
        )


class CoalescedMetaLookup:
    """Metadata lookups deduplicated per prefix through a CoalescedFetchCache.

    The wait for a lookup is bounded by the caller's context; a cancelled
    caller gets OperationCancelled while the lookup itself keeps running and
    still populates the cache.
    """

    def __init__(self, client: MetaClient, cache: CoalescedFetchCache[MetaLookupResult]) -> None:
        self.client = client
        self.cache = cache

    def __call__(self, ctx: Context, prefix: str, insecure: bool) -> MetaLookupResult:
        return call_guarded(ctx, lambda: self.cache.fetch(prefix, lambda: self.client.fetch(prefix, insecure)))
