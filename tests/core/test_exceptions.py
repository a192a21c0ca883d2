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

"""Tests for pkgetter.core.exceptions module."""

from __future__ import annotations

import pytest

from pkgetter.core import exceptions


class TestGetterError:
    """Tests for GetterError base class."""

    def test_default_message(self) -> None:
        error = exceptions.GetterError()
        assert error.message == "An error occurred"

    def test_default_exit_code(self) -> None:
        error = exceptions.GetterError()
        assert error.exit_code == 1

    def test_str_is_message(self) -> None:
        error = exceptions.GetterError(message="Custom error")
        assert str(error) == "Custom error"


@pytest.mark.parametrize(
    ("cls", "code"),
    [
        (exceptions.ConfigError, 1),
        (exceptions.RepoResolutionError, 3),
        (exceptions.InsecureTransportError, 4),
        (exceptions.DirectoryCollisionError, 5),
        (exceptions.PathDisagreementError, 5),
        (exceptions.UpdateUnsupportedError, 6),
        (exceptions.OperationCancelled, 7),
        (exceptions.CheckoutError, 8),
    ],
)
def test_exit_codes(cls: type[exceptions.GetterError], code: int) -> None:
    error = cls(message="boom")
    assert error.exit_code == code
    assert isinstance(error, exceptions.GetterError)


class TestOperationCancelled:
    def test_default_message(self) -> None:
        assert str(exceptions.OperationCancelled()) == "operation cancelled"


class TestPathDisagreementError:
    def test_carries_both_paths(self) -> None:
        error = exceptions.PathDisagreementError(message="path disagreement", calculated="/a", expected="/b")
        assert error.calculated == "/a"
        assert error.expected == "/b"

    def test_can_be_raised(self) -> None:
        with pytest.raises(exceptions.GetterError, match="path disagreement"):
            raise exceptions.PathDisagreementError(message="path disagreement")
