# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""AWS Signature Version 4 canonicalization and StringToSign production.

Typical use from a request handler::

    processor = SignatureProcessor(config.validator())
    try:
        auth = processor.get_authentication(request)
    except S3Exception as exc:
        return exc.to_response()
    verifier.verify(auth)
"""

from s3gate.signature.auth import S3Auth, SignatureProcessor, build_s3_auth
from s3gate.signature.canonical import (
    UNSIGNED_PAYLOAD,
    build_canonical_request,
    canonical_headers_string,
    canonical_query_string,
    canonical_uri,
    payload_hash,
)
from s3gate.signature.encoding import encode_query_token, encode_segment
from s3gate.signature.headers import LowerCaseKeyStringMap, first_value_map
from s3gate.signature.info import (
    SignatureInfo,
    SignatureVersion,
    parse_authorization_header,
    parse_presigned_query,
    signature_info_from_parts,
    signature_info_from_request,
)
from s3gate.signature.string_to_sign import (
    create_signature_base,
    create_signature_base_from_request,
    hash_payload,
)
from s3gate.signature.validation import (
    PRESIGN_URL_MAX_EXPIRATION_SECONDS,
    SignedHeaderValidator,
)


__all__ = [
    "PRESIGN_URL_MAX_EXPIRATION_SECONDS",
    "UNSIGNED_PAYLOAD",
    "LowerCaseKeyStringMap",
    "S3Auth",
    "SignatureInfo",
    "SignatureProcessor",
    "SignatureVersion",
    "SignedHeaderValidator",
    "build_canonical_request",
    "build_s3_auth",
    "canonical_headers_string",
    "canonical_query_string",
    "canonical_uri",
    "create_signature_base",
    "create_signature_base_from_request",
    "encode_query_token",
    "encode_segment",
    "first_value_map",
    "hash_payload",
    "parse_authorization_header",
    "parse_presigned_query",
    "payload_hash",
    "signature_info_from_parts",
    "signature_info_from_request",
]
