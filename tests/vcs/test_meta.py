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

"""Tests for go-import metadata parsing and fetching."""

from __future__ import annotations

import threading

import pytest
import requests
import responses

from pkgetter.core.cancel import Context
from pkgetter.core.exceptions import OperationCancelled, RepoResolutionError
from pkgetter.vcs.fetchcache import CoalescedFetchCache
from pkgetter.vcs.meta import (
    CoalescedMetaLookup,
    MetaClient,
    MetaImport,
    MetaLookupResult,
    match_meta_import,
    parse_meta_imports,
)

PAGE = """<!DOCTYPE html>
<html>
<head>
<meta name="go-import" content="example.com/mod git https://git.example.com/mod">
<meta name="go-source" content="example.com/mod _ _ _">
</head>
<body>
<meta name="go-import" content="example.com/ignored git https://git.example.com/ignored">
</body>
</html>
"""


class TestParseMetaImports:
    def test_reads_head_tags(self) -> None:
        imports = parse_meta_imports(PAGE)
        assert imports == [MetaImport(prefix="example.com/mod", vcs="git", repo_root="https://git.example.com/mod")]

    def test_ignores_malformed_content(self) -> None:
        text = '<html><head><meta name="go-import" content="example.com/mod git"></head></html>'
        assert parse_meta_imports(text) == []

    def test_empty_document(self) -> None:
        assert parse_meta_imports("") == []


class TestMatchMetaImport:
    def test_prefix_match(self) -> None:
        mi = MetaImport(prefix="example.com/mod", vcs="git", repo_root="https://git.example.com/mod")
        assert match_meta_import([mi], "example.com/mod/sub") == mi
        assert match_meta_import([mi], "example.com/mod") == mi

    def test_partial_element_does_not_match(self) -> None:
        mi = MetaImport(prefix="example.com/mod", vcs="git", repo_root="https://git.example.com/mod")
        with pytest.raises(RepoResolutionError, match="no go-import meta tag"):
            match_meta_import([mi], "example.com/module")

    def test_multiple_matches(self) -> None:
        imports = [
            MetaImport(prefix="example.com/mod", vcs="git", repo_root="https://a.example.com/mod"),
            MetaImport(prefix="example.com/mod", vcs="hg", repo_root="https://b.example.com/mod"),
        ]
        with pytest.raises(RepoResolutionError, match="multiple go-import meta tags"):
            match_meta_import(imports, "example.com/mod")


class TestMetaClient:
    def test_fetch_over_https(self, mock_responses: responses.RequestsMock) -> None:
        mock_responses.add(responses.GET, "https://example.com/mod/sub?go-get=1", body=PAGE, status=200)

        result = MetaClient().fetch("example.com/mod/sub", insecure=False)

        assert result.url == "https://example.com/mod/sub?go-get=1"
        assert result.imports[0].prefix == "example.com/mod"
        assert mock_responses.calls[0].request.headers["User-Agent"] == "pkgetter"

    def test_no_http_fallback_when_secure(self, mock_responses: responses.RequestsMock) -> None:
        mock_responses.add(responses.GET, "https://example.com/mod?go-get=1", status=404)

        with pytest.raises(RepoResolutionError, match="unrecognized import path"):
            MetaClient().fetch("example.com/mod", insecure=False)
        assert len(mock_responses.calls) == 1

    def test_http_fallback_when_insecure(self, mock_responses: responses.RequestsMock) -> None:
        mock_responses.add(
            responses.GET,
            "https://example.com/mod?go-get=1",
            body=requests.ConnectionError("refused"),
        )
        mock_responses.add(responses.GET, "http://example.com/mod?go-get=1", body=PAGE, status=200)

        result = MetaClient(user_agent="custom").fetch("example.com/mod", insecure=True)

        assert result.url == "http://example.com/mod?go-get=1"
        assert mock_responses.calls[1].request.headers["User-Agent"] == "custom"


class StubClient:
    def __init__(self, result: MetaLookupResult, release: threading.Event | None = None) -> None:
        self.result = result
        self.release = release
        self.calls: list[tuple[str, bool]] = []

    def fetch(self, prefix: str, insecure: bool) -> MetaLookupResult:
        self.calls.append((prefix, insecure))
        if self.release is not None:
            self.release.wait(5)
        return self.result


class TestCoalescedMetaLookup:
    def test_lookups_are_cached_per_prefix(self) -> None:
        result = MetaLookupResult(url="https://example.com/mod?go-get=1", imports=())
        client = StubClient(result)
        lookup = CoalescedMetaLookup(client, CoalescedFetchCache())  # type: ignore[arg-type]
        ctx = Context.background()

        assert lookup(ctx, "example.com/mod", False) is result
        assert lookup(ctx, "example.com/mod", False) is result
        assert client.calls == [("example.com/mod", False)]

    def test_cancelled_caller_gives_up_while_lookup_completes(self) -> None:
        result = MetaLookupResult(url="https://example.com/mod?go-get=1", imports=())
        release = threading.Event()
        client = StubClient(result, release)
        cache: CoalescedFetchCache[MetaLookupResult] = CoalescedFetchCache()
        lookup = CoalescedMetaLookup(client, cache)  # type: ignore[arg-type]
        ctx = Context.background().with_timeout(0.05)

        with pytest.raises(OperationCancelled):
            lookup(ctx, "example.com/mod", False)

        release.set()
        # A later caller reuses the lookup that kept running.
        assert lookup(Context.background(), "example.com/mod", False) is result
        assert client.calls == [("example.com/mod", False)]
