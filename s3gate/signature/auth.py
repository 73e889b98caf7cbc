# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""S3Auth: what the signature verifier needs to authenticate a request."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.wrappers import Request

from s3gate.signature.info import SignatureInfo, signature_info_from_parts
from s3gate.signature.string_to_sign import (
    create_signature_base,
    request_parts,
)
from s3gate.signature.validation import SignedHeaderValidator


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class S3Auth:
    """The produced string to sign plus the client's claimed identity.

    Attributes:
        string_to_sign: StringToSign built from the request.
        signature: Hex signature supplied by the client.
        access_id: Client access key ID.
    """

    string_to_sign: str
    signature: str
    access_id: str

    def __str__(self) -> str:
        return (
            f"S3Auth{{StringToSign={self.string_to_sign}, "
            f"Signature={self.signature}, AccessID={self.access_id}}}"
        )


def build_s3_auth(
    signature_info: SignatureInfo, string_to_sign: str
) -> S3Auth:
    """Pair a string to sign with the signature and access ID in *info*."""
    return S3Auth(
        string_to_sign=string_to_sign,
        signature=signature_info.signature,
        access_id=signature_info.access_id,
    )


class SignatureProcessor:
    """Turns an inbound werkzeug request into an ``S3Auth``.

    Extracts SignatureInfo from the ``Authorization`` header or presigned
    query parameters, builds the string to sign and hands both to the
    verifier in one value.

    Args:
        validator: Signed header validator shared by all requests.
    """

    def __init__(self, validator: SignedHeaderValidator | None = None) -> None:
        self._validator = validator or SignedHeaderValidator()

    def get_authentication(self, request: Request) -> S3Auth:
        """Build the ``S3Auth`` for *request*.

        Raises:
            S3Exception: ``ACCESS_DENIED_ERROR`` for unsigned requests,
                ``AUTHORIZATION_HEADER_MALFORMED`` for unparseable
                signatures, ``AUTHINFO_CREATION_ERROR`` for missing or
                invalid signed headers.
        """
        scheme, method, path, headers, query = request_parts(request)
        info = signature_info_from_parts(headers, query)

        string_to_sign = create_signature_base(
            info,
            scheme,
            method,
            path,
            headers,
            query,
            validator=self._validator,
        )
        auth = build_s3_auth(info, string_to_sign)
        logger.debug("Built %s", auth)
        return auth
