# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared fixtures for signature tests.

Validators here never touch DNS or the wall clock: the resolver is a
stub and the clock is pinned to ``FIXED_NOW``.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from s3gate.signature.validation import SignedHeaderValidator
from tests.signature.vectors import FIXED_NOW


@pytest.fixture
def resolver() -> MagicMock:
    """Resolver stub that accepts every hostname."""
    return MagicMock(return_value="127.0.0.1")


@pytest.fixture
def validator(resolver: MagicMock) -> SignedHeaderValidator:
    """Validator with a stub resolver and a clock fixed at FIXED_NOW."""
    return SignedHeaderValidator(resolver=resolver, clock=lambda: FIXED_NOW)


@pytest.fixture
def make_validator(
    resolver: MagicMock,
) -> Callable[..., SignedHeaderValidator]:
    """Factory for validators with a custom clock or settings."""

    def _make(**kwargs: Any) -> SignedHeaderValidator:
        kwargs.setdefault("resolver", resolver)
        kwargs.setdefault("clock", lambda: FIXED_NOW)
        return SignedHeaderValidator(**kwargs)

    return _make
