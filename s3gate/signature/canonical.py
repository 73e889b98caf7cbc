# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""SigV4 canonical request construction.

The canonical request is six newline-separated fields::

    <METHOD>
    <CanonicalURI>
    <CanonicalQueryString>
    <name1>:<value1>\\n<name2>:<value2>\\n...
    <SignedHeaders>
    <PayloadHash>

Every header line ends with a newline, so the header block is followed by
an empty line before the signed headers list.

Path and query inputs must already be percent-decoded.  S3 canonicalizes
paths literally: no ``.``/``..`` resolution, no slash collapsing.
"""

from __future__ import annotations

from collections.abc import Mapping

from s3gate.errors import S3ErrorCode, S3Exception
from s3gate.signature.encoding import encode_query_token, encode_segment
from s3gate.signature.headers import LowerCaseKeyStringMap
from s3gate.signature.validation import (
    X_AMZ_CONTENT_SHA256,
    SignedHeaderValidator,
)


UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"

#: Query parameter carrying a presigned URL's signature; never signed.
X_AMZ_SIGNATURE = "X-Amz-Signature"


def canonical_uri(path: str) -> str:
    """Build the canonical URI from a decoded request path.

    Each ``/``-separated segment is encoded on its own and the segments
    are rejoined with literal slashes, so empty segments (``//``) and
    trailing slashes survive.

    Args:
        path: Decoded absolute path.  Blank paths become ``/``.

    Returns:
        Encoded canonical URI.
    """
    if not path.strip():
        return "/"
    return "/".join(encode_segment(part) for part in path.split("/"))


def canonical_query_string(query: Mapping[str, str]) -> str:
    """Build the canonical query string.

    Args:
        query: Decoded query parameters, one value per name.

    Returns:
        ``name=value`` pairs sorted by name then value, joined with ``&``.
        ``X-Amz-Signature`` is left out.  Empty when there are no
        parameters.
    """
    params = sorted(
        (name, value)
        for name, value in query.items()
        if name != X_AMZ_SIGNATURE
    )
    return "&".join(
        f"{encode_query_token(name)}={encode_query_token(value)}"
        for name, value in params
    )


def split_signed_headers(signed_headers: str) -> list[str]:
    """Split a ``;``-separated signed headers list, dropping empty names."""
    return [name.strip() for name in signed_headers.split(";") if name.strip()]


def canonical_headers_string(
    scheme: str,
    signed_headers: str,
    headers: Mapping[str, str],
    validator: SignedHeaderValidator,
) -> str:
    """Build the canonical headers block.

    Headers are emitted in the order the client listed them in
    *signed_headers*, each as ``name:value`` plus a newline.  Values are
    used verbatim.

    Args:
        scheme: Request scheme, used to validate ``host``.
        signed_headers: ``;``-separated header names from the client.
        headers: Request headers, looked up case-insensitively.
        validator: Checks each signed header before it is emitted.

    Returns:
        Canonical headers block.

    Raises:
        S3Exception: ``AUTHINFO_CREATION_ERROR`` if a signed header is
            missing or fails validation.
    """
    lookup = LowerCaseKeyStringMap.from_headers(headers)
    lines: list[str] = []
    for name in split_signed_headers(signed_headers):
        name = name.lower()
        if name not in lookup:
            raise S3Exception(
                name,
                S3ErrorCode.AUTHINFO_CREATION_ERROR,
                f"Header {name} not present in request but requested "
                f"to be signed.",
            )
        value = lookup[name]
        validator.validate(scheme, name, value)
        lines.append(f"{name}:{value}\n")
    return "".join(lines)


def payload_hash(
    headers: Mapping[str, str], *, unsigned_payload: bool = False
) -> str:
    """Select the payload hash field.

    Args:
        headers: Request headers, looked up case-insensitively.
        unsigned_payload: True when the client did not sign the body
            (presigned URLs).

    Returns:
        ``UNSIGNED-PAYLOAD`` when unsigned or when the client declared it
        in ``x-amz-content-sha256``; otherwise that header's value, or an
        empty string if the header is absent.
    """
    lookup = LowerCaseKeyStringMap.from_headers(headers)
    content_sha256 = lookup.get(X_AMZ_CONTENT_SHA256)
    if unsigned_payload or content_sha256 == UNSIGNED_PAYLOAD:
        return UNSIGNED_PAYLOAD
    return content_sha256 or ""


def build_canonical_request(
    scheme: str,
    method: str,
    path: str,
    signed_headers: str,
    headers: Mapping[str, str],
    query: Mapping[str, str],
    *,
    unsigned_payload: bool = False,
    validator: SignedHeaderValidator | None = None,
) -> str:
    """Build the canonical request string.

    Args:
        scheme: Request scheme.
        method: HTTP method, used verbatim.
        path: Decoded request path.
        signed_headers: ``;``-separated signed header names, echoed
            verbatim into the signed headers field.
        headers: Request headers.
        query: Decoded query parameters, one value per name.
        unsigned_payload: Force ``UNSIGNED-PAYLOAD`` as the payload hash.
        validator: Signed header validator.  A default
            ``SignedHeaderValidator`` is used when omitted.

    Returns:
        Canonical request string.

    Raises:
        S3Exception: ``AUTHINFO_CREATION_ERROR`` for missing or invalid
            signed headers.
    """
    if validator is None:
        validator = SignedHeaderValidator()
    lookup = LowerCaseKeyStringMap.from_headers(headers)

    return "\n".join(
        [
            method,
            canonical_uri(path),
            canonical_query_string(query),
            canonical_headers_string(scheme, signed_headers, lookup, validator),
            signed_headers,
            payload_hash(lookup, unsigned_payload=unsigned_payload),
        ]
    )
