# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""SignatureInfo and its extraction from a request.

A SigV4 request carries its signing parameters in one of two places:

- the ``Authorization`` header (plus ``x-amz-date``)::

      AWS4-HMAC-SHA256 Credential=<key>/<scope>,
      SignedHeaders=<h1;h2>, Signature=<hex>

- presigned URL query parameters (``X-Amz-Algorithm``,
  ``X-Amz-Credential``, ``X-Amz-Date``, ``X-Amz-SignedHeaders``,
  ``X-Amz-Signature``, ``X-Amz-Expires``)

Header-signed requests sign their payload; presigned URLs do not.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from werkzeug.wrappers import Request

from s3gate.errors import S3ErrorCode, S3Exception
from s3gate.signature.canonical import split_signed_headers
from s3gate.signature.headers import LowerCaseKeyStringMap, first_value_map
from s3gate.signature.validation import (
    PRESIGN_URL_MAX_EXPIRATION_SECONDS,
    X_AMZ_DATE,
)


AWS4_HMAC_SHA256 = "AWS4-HMAC-SHA256"

AUTHORIZATION = "authorization"

_AUTH_HEADER_RE = re.compile(
    r"(?P<algorithm>[A-Za-z0-9-]+)\s+"
    r"Credential=(?P<access_id>[^/,\s]+)/(?P<scope>[^,\s]+),\s*"
    r"SignedHeaders=(?P<signed_headers>[^,\s]+),\s*"
    r"Signature=(?P<signature>[0-9a-f]+)\s*$"
)

# date/region/service/aws4_request
_SCOPE_RE = re.compile(r"[0-9]{8}/[^/]+/[^/]+/aws4_request")


class SignatureVersion(Enum):
    """Where the signature was found."""

    HEADER = "header"
    QUERY = "query"


@dataclass(frozen=True)
class SignatureInfo:
    """Signing parameters extracted from a request.

    Attributes:
        algorithm: Signing algorithm, e.g. ``AWS4-HMAC-SHA256``.
        credential_scope: ``date/region/service/aws4_request``.
        date_time: Request timestamp, ``yyyyMMddTHHmmssZ``.
        signed_headers: ``;``-separated lowercase header names in the
            order the client listed them.
        sign_payload: True to use the client's ``x-amz-content-sha256``;
            False to treat the payload as unsigned.
        access_id: Client access key ID.
        signature: Client-supplied hex signature.
        version: Where the parameters were found.
    """

    algorithm: str
    credential_scope: str
    date_time: str
    signed_headers: str
    sign_payload: bool = True
    access_id: str = ""
    signature: str = ""
    version: SignatureVersion = SignatureVersion.HEADER

    @property
    def scope_parts(self) -> list[str]:
        return self.credential_scope.split("/")

    @property
    def date(self) -> str:
        """Date from credential scope (YYYYMMDD)."""
        return self.scope_parts[0]

    @property
    def region(self) -> str:
        return self.scope_parts[1]

    @property
    def service(self) -> str:
        return self.scope_parts[2]

    @property
    def signed_header_list(self) -> list[str]:
        """Signed header names in client order, empty entries dropped."""
        return split_signed_headers(self.signed_headers)


def _check_credential(raw: str, access_id: str, scope: str) -> None:
    if not access_id or not _SCOPE_RE.fullmatch(scope):
        raise S3Exception(raw, S3ErrorCode.AUTHORIZATION_HEADER_MALFORMED)


def _check_algorithm(raw: str, algorithm: str) -> None:
    if algorithm != AWS4_HMAC_SHA256:
        raise S3Exception(
            raw,
            S3ErrorCode.AUTHORIZATION_HEADER_MALFORMED,
            f"Unsupported signing algorithm: {algorithm}",
        )


def parse_authorization_header(
    auth_value: str, date_header: str
) -> SignatureInfo:
    """Parse a SigV4 ``Authorization`` header.

    Args:
        auth_value: Full ``Authorization`` header value.
        date_header: Value of the ``x-amz-date`` header.

    Returns:
        SignatureInfo with ``sign_payload=True``.

    Raises:
        S3Exception: ``AUTHORIZATION_HEADER_MALFORMED`` if the header is
            not a well-formed SigV4 authorization.
    """
    m = _AUTH_HEADER_RE.match(auth_value.strip())
    if not m:
        raise S3Exception(
            auth_value, S3ErrorCode.AUTHORIZATION_HEADER_MALFORMED
        )
    _check_algorithm(auth_value, m.group("algorithm"))
    _check_credential(auth_value, m.group("access_id"), m.group("scope"))
    if not date_header:
        raise S3Exception(
            auth_value,
            S3ErrorCode.AUTHORIZATION_HEADER_MALFORMED,
            "Missing x-amz-date header",
        )
    return SignatureInfo(
        algorithm=m.group("algorithm"),
        credential_scope=m.group("scope"),
        date_time=date_header,
        signed_headers=m.group("signed_headers"),
        sign_payload=True,
        access_id=m.group("access_id"),
        signature=m.group("signature"),
        version=SignatureVersion.HEADER,
    )


def parse_presigned_query(query: Mapping[str, str]) -> SignatureInfo | None:
    """Parse presigned URL query parameters.

    Args:
        query: Decoded query parameters, one value per name.

    Returns:
        SignatureInfo with ``sign_payload=False``, or None if the query
        carries no ``X-Amz-Credential``.

    Raises:
        S3Exception: ``AUTHORIZATION_HEADER_MALFORMED`` if parameters are
            missing, malformed, or the expiry exceeds seven days.
    """
    credential = query.get("X-Amz-Credential")
    if credential is None:
        return None

    access_id, _, scope = credential.partition("/")
    _check_credential(credential, access_id, scope)

    algorithm = query.get("X-Amz-Algorithm", "")
    _check_algorithm(credential, algorithm)

    date_time = query.get("X-Amz-Date", "")
    signed_headers = query.get("X-Amz-SignedHeaders", "")
    signature = query.get("X-Amz-Signature", "")
    for name, value in (
        ("X-Amz-Date", date_time),
        ("X-Amz-SignedHeaders", signed_headers),
        ("X-Amz-Signature", signature),
    ):
        if not value:
            raise S3Exception(
                credential,
                S3ErrorCode.AUTHORIZATION_HEADER_MALFORMED,
                f"Missing {name} query parameter",
            )

    expires = query.get("X-Amz-Expires")
    if expires is not None:
        if (
            not expires.isdigit()
            or int(expires) > PRESIGN_URL_MAX_EXPIRATION_SECONDS
        ):
            raise S3Exception(
                expires,
                S3ErrorCode.AUTHORIZATION_HEADER_MALFORMED,
                f"X-Amz-Expires must be between 0 and "
                f"{PRESIGN_URL_MAX_EXPIRATION_SECONDS} seconds",
            )

    return SignatureInfo(
        algorithm=algorithm,
        credential_scope=scope,
        date_time=date_time,
        signed_headers=signed_headers,
        sign_payload=False,
        access_id=access_id,
        signature=signature,
        version=SignatureVersion.QUERY,
    )


def signature_info_from_parts(
    headers: Mapping[str, str], query: Any
) -> SignatureInfo:
    """Extract SignatureInfo from request headers or query parameters.

    The ``Authorization`` header takes precedence over presigned query
    parameters.

    Raises:
        S3Exception: ``ACCESS_DENIED_ERROR`` when the request carries no
            SigV4 signature, or ``AUTHORIZATION_HEADER_MALFORMED`` when it
            carries a broken one.
    """
    lookup = LowerCaseKeyStringMap.from_headers(headers)
    auth_value = lookup.get(AUTHORIZATION)
    if auth_value:
        date_header = lookup.get(X_AMZ_DATE, "")
        return parse_authorization_header(auth_value, date_header)

    info = parse_presigned_query(first_value_map(query))
    if info is None:
        raise S3Exception("Authorization", S3ErrorCode.ACCESS_DENIED_ERROR)
    return info


def signature_info_from_request(request: Request) -> SignatureInfo:
    """Extract SignatureInfo from a werkzeug request.

    See ``signature_info_from_parts`` for precedence and errors.
    """
    return signature_info_from_parts(request.headers, request.args)
