# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Semantic checks on signed header values.

Only two signed headers are inspected:

- ``host`` must parse as ``scheme://value`` and (optionally) resolve
- ``x-amz-date`` must be a strict ``yyyyMMddTHHmmssZ`` UTC timestamp
  within the presign window of the validator's clock

Everything else, ``x-amz-content-sha256`` included, is accepted as is.

Host resolution blocks on the system resolver.  Callers that cannot
block, or that front virtual-hosted buckets, inject a resolver or turn
resolution off.
"""

from __future__ import annotations

import logging
import re
import socket
import urllib.parse
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Literal

from s3gate.errors import S3ErrorCode, S3Exception


logger = logging.getLogger(__name__)

HOST = "host"
X_AMZ_DATE = "x-amz-date"
X_AMZ_CONTENT_SHA256 = "x-amz-content-sha256"

#: Strict SigV4 timestamp format (ISO 8601 basic, UTC).
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
_AMZ_DATE_RE = re.compile(r"[0-9]{8}T[0-9]{6}Z")

#: Seconds in a week, the longest expiration SigV4 accepts.
PRESIGN_URL_MAX_EXPIRATION_SECONDS = 60 * 60 * 24 * 7

DateGranularity = Literal["instant", "day"]

Resolver = Callable[[str], object]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _getaddrinfo(hostname: str) -> object:
    # Both address families, unlike gethostbyname
    return socket.getaddrinfo(hostname, None)


def parse_amz_date(value: str) -> datetime:
    """Parse a ``yyyyMMddTHHmmssZ`` timestamp as an aware UTC datetime.

    Raises:
        ValueError: If *value* does not match the format exactly.
    """
    # strptime alone accepts unpadded fields like "2024011T..."
    if not _AMZ_DATE_RE.fullmatch(value):
        raise ValueError(f"Not a yyyyMMddTHHmmssZ timestamp: {value!r}")
    return datetime.strptime(value, AMZ_DATE_FORMAT).replace(tzinfo=UTC)


class SignedHeaderValidator:
    """Validates signed header values before they enter the canonical form.

    Args:
        resolver: Called with a hostname; must raise ``OSError`` when the
            name cannot be resolved.  Defaults to ``socket.getaddrinfo``.
        clock: Returns the current time as an aware datetime.
        validate_host: When False, ``host`` is only checked syntactically.
        presign_window: Maximum distance between ``x-amz-date`` and now.
        date_granularity: ``"instant"`` compares full timestamps;
            ``"day"`` compares calendar dates only.
    """

    def __init__(
        self,
        *,
        resolver: Resolver | None = None,
        clock: Clock | None = None,
        validate_host: bool = True,
        presign_window: timedelta = timedelta(
            seconds=PRESIGN_URL_MAX_EXPIRATION_SECONDS
        ),
        date_granularity: DateGranularity = "instant",
    ) -> None:
        if presign_window <= timedelta(0):
            raise ValueError(
                f"Presign window must be positive: {presign_window}"
            )
        if date_granularity not in ("instant", "day"):
            raise ValueError(f"Unknown date granularity: {date_granularity!r}")
        self._resolver = resolver or _getaddrinfo
        self._clock = clock or _utc_now
        self.validate_host = validate_host
        self.presign_window = presign_window
        self.date_granularity = date_granularity

    def validate(self, scheme: str, header: str, value: str) -> None:
        """Validate a single signed header.

        Args:
            scheme: Request scheme (``http``/``https``).
            header: Header name; compared case-insensitively.
            value: Header value as received.

        Raises:
            S3Exception: ``AUTHINFO_CREATION_ERROR`` carrying *value*.
        """
        name = header.lower()
        if name == HOST:
            self._validate_host(scheme, value)
        elif name == X_AMZ_DATE:
            self._validate_date(value)

    def _validate_host(self, scheme: str, value: str) -> None:
        try:
            parts = urllib.parse.urlsplit(f"{scheme}://{value}")
            hostname = parts.hostname
            # .port raises ValueError on a non-numeric or out-of-range port
            parts.port
            if not hostname:
                raise ValueError("empty host")
            if any(ch.isspace() for ch in value):
                raise ValueError("whitespace in host")
            if self.validate_host:
                self._resolver(hostname)
        except (ValueError, OSError, UnicodeError) as exc:
            logger.error(
                "Host value mentioned in signed header is not valid. "
                "Host:%s (%s)",
                value,
                exc,
            )
            raise S3Exception(
                value, S3ErrorCode.AUTHINFO_CREATION_ERROR
            ) from exc

    def _validate_date(self, value: str) -> None:
        try:
            request_time = parse_amz_date(value)
        except ValueError as exc:
            logger.error("AWS date is malformed. Request timestamp:%s", value)
            raise S3Exception(
                value, S3ErrorCode.AUTHINFO_CREATION_ERROR
            ) from exc

        now = self._clock()
        if self.date_granularity == "day":
            in_range = (
                (now - self.presign_window).date()
                <= request_time.date()
                <= (now + self.presign_window).date()
            )
        else:
            in_range = abs(now - request_time) <= self.presign_window

        if not in_range:
            logger.error(
                "AWS date not in valid range. Request timestamp:%s should "
                "not be older than %d seconds.",
                value,
                int(self.presign_window.total_seconds()),
            )
            raise S3Exception(value, S3ErrorCode.AUTHINFO_CREATION_ERROR)
