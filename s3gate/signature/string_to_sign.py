# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""StringToSign assembly.

The string to sign is::

    <Algorithm>
    <RequestDateTime>
    <CredentialScope>
    <lowercase hex SHA-256 of the canonical request>

with no trailing newline.  A verifier HMACs it with the derived signing
key and compares against the client's signature.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping

from werkzeug.wrappers import Request

from s3gate.errors import S3ErrorCode, S3Exception
from s3gate.signature.canonical import build_canonical_request
from s3gate.signature.headers import LowerCaseKeyStringMap, first_value_map
from s3gate.signature.info import SignatureInfo
from s3gate.signature.validation import SignedHeaderValidator


logger = logging.getLogger(__name__)

_HASH_ALGORITHM = "sha256"
_HASH_ALGORITHM_NAME = "SHA-256"


def hash_payload(payload: str) -> str:
    """Lowercase hex SHA-256 of the UTF-8 encoding of *payload*.

    Raises:
        S3Exception: ``INTERNAL_ERROR`` if the runtime lacks SHA-256.
    """
    try:
        digest = hashlib.new(_HASH_ALGORITHM)
    except ValueError as exc:
        logger.error("Hash algorithm %s is unavailable", _HASH_ALGORITHM)
        raise S3Exception(
            _HASH_ALGORITHM_NAME, S3ErrorCode.INTERNAL_ERROR
        ) from exc
    digest.update(payload.encode("utf-8"))
    return digest.hexdigest()


def create_signature_base(
    signature_info: SignatureInfo,
    scheme: str,
    method: str,
    path: str,
    headers: Mapping[str, str],
    query: Mapping[str, str],
    *,
    validator: SignedHeaderValidator | None = None,
) -> str:
    """Build the SigV4 string to sign for a request.

    Args:
        signature_info: Signing parameters extracted from the request.
        scheme: Request scheme.
        method: HTTP method.
        path: Decoded request path.
        headers: Request headers (any case, first value per name).
        query: Decoded query parameters, one value per name.
        validator: Signed header validator; a default one (real DNS,
            system clock) is used when omitted.

    Returns:
        The string to sign.

    Raises:
        S3Exception: ``AUTHINFO_CREATION_ERROR`` for missing or invalid
            signed headers, ``INTERNAL_ERROR`` if hashing is unavailable.
    """
    canonical_request = build_canonical_request(
        scheme,
        method,
        path,
        signature_info.signed_headers,
        headers,
        query,
        unsigned_payload=not signature_info.sign_payload,
        validator=validator,
    )
    string_to_sign = "\n".join(
        [
            signature_info.algorithm,
            signature_info.date_time,
            signature_info.credential_scope,
            hash_payload(canonical_request),
        ]
    )
    logger.debug("canonicalRequest:[%s]", canonical_request)
    logger.debug("StringToSign:[%s]", string_to_sign)
    return string_to_sign


def request_parts(
    request: Request,
) -> tuple[str, str, str, LowerCaseKeyStringMap, dict[str, str]]:
    """Split a werkzeug request into the pieces the signer needs.

    werkzeug has already percent-decoded the path and query, which is
    what the canonicalization expects.

    Returns:
        ``(scheme, method, path, headers, query)``.
    """
    return (
        request.scheme,
        request.method,
        request.path,
        LowerCaseKeyStringMap.from_headers(request.headers),
        first_value_map(request.args),
    )


def create_signature_base_from_request(
    signature_info: SignatureInfo,
    request: Request,
    *,
    validator: SignedHeaderValidator | None = None,
) -> str:
    """Build the string to sign directly from a werkzeug request.

    See ``create_signature_base`` for errors.
    """
    scheme, method, path, headers, query = request_parts(request)
    return create_signature_base(
        signature_info,
        scheme,
        method,
        path,
        headers,
        query,
        validator=validator,
    )
