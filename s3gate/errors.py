# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""S3 error catalog and the gateway's typed failure.

Error codes follow
https://docs.aws.amazon.com/AmazonS3/latest/API/ErrorResponses.html
(API version 2006-03-01); a few entries are gateway-specific.

Every failure leaving the signing pipeline is an ``S3Exception`` pairing a
catalog entry with the resource it concerns (usually the offending header
value).  Callers render it as an S3 XML error body.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from enum import Enum
from http import HTTPStatus

from werkzeug.wrappers import Response


_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


class S3ErrorCode(Enum):
    """Catalog of S3 error codes.

    Each member carries the wire ``code`` string, a human ``description``
    and the HTTP ``status`` returned to the client.
    """

    # Official error codes
    BAD_DIGEST = (
        "BadDigest",
        "The Content-MD5 you specified did not match what we received.",
        HTTPStatus.BAD_REQUEST,
    )
    BUCKET_ALREADY_EXISTS = (
        "BucketAlreadyExists",
        "The requested bucket name already exists",
        HTTPStatus.CONFLICT,
    )
    BUCKET_NOT_EMPTY = (
        "BucketNotEmpty",
        "The bucket you tried to delete is not empty",
        HTTPStatus.CONFLICT,
    )
    INVALID_BUCKET_NAME = (
        "InvalidBucketName",
        "The specified bucket name is invalid",
        HTTPStatus.BAD_REQUEST,
    )
    INTERNAL_ERROR = (
        "InternalError",
        "We encountered an internal error. Please try again.",
        HTTPStatus.INTERNAL_SERVER_ERROR,
    )
    NO_SUCH_BUCKET = (
        "NoSuchBucket",
        "The specified bucket or prefix does not exist",
        HTTPStatus.NOT_FOUND,
    )
    NO_SUCH_KEY = (
        "NoSuchKey",
        "The specified key does not exist",
        HTTPStatus.NOT_FOUND,
    )
    NO_SUCH_UPLOAD = (
        "NoSuchUpload",
        "The specified multipart upload does not exist. "
        "The upload ID might be invalid, or the multipart upload might "
        "have been aborted or completed.",
        HTTPStatus.NOT_FOUND,
    )
    PRECONDITION_FAILED = (
        "PreconditionFailed",
        "At least one of the preconditions did not hold",
        HTTPStatus.PRECONDITION_FAILED,
    )
    INVALID_CONTINUATION_TOKEN = (
        "InvalidContinuationToken",
        "The continuation token provided is incorrect",
        HTTPStatus.BAD_REQUEST,
    )
    UPLOAD_ALREADY_EXISTS = (
        "UploadAlreadyExists",
        "The specified multipart upload already exists",
        HTTPStatus.CONFLICT,
    )
    AUTHORIZATION_HEADER_MALFORMED = (
        "AuthorizationHeaderMalformed",
        "The authorization header provided is invalid.",
        HTTPStatus.BAD_REQUEST,
    )
    AUTHINFO_CREATION_ERROR = (
        "AuthInfoCreationError",
        "Error creating s3 auth info",
        HTTPStatus.BAD_REQUEST,
    )
    ACCESS_DENIED_ERROR = (
        "AccessDenied",
        "User doesn't have the right to access this resource",
        HTTPStatus.FORBIDDEN,
    )
    INVALID_IDENTIFIER = (
        "InvalidIdentifier",
        "Invalid S3 identifier",
        HTTPStatus.FORBIDDEN,
    )
    NOT_FOUND_CUSTOMIZED_SECRET_MANAGER = (
        "NotProvidCustomSecretManager",
        "Not found implementation for S3SecretManager",
        HTTPStatus.INTERNAL_SERVER_ERROR,
    )

    # Gateway-specific codes.  The nested-bucket entry shares the
    # BucketAlreadyExists code string with existing clients.
    INVALID_NESTED_BUCKET_NAME = (
        "BucketAlreadyExists",
        "The specified bucket is not a directory directly under a mount point",
        HTTPStatus.BAD_REQUEST,
    )

    def __init__(
        self, code: str, description: str, status: HTTPStatus
    ) -> None:
        self.code = code
        self.description = description
        self.status = status

    @classmethod
    def from_code(cls, code: str) -> S3ErrorCode:
        """Look up the first catalog entry with wire code *code*.

        Raises:
            KeyError: If no entry uses *code*.
        """
        for member in cls:
            if member.code == code:
                return member
        raise KeyError(code)


class S3Exception(Exception):
    """A gateway failure: a catalog entry plus the resource it concerns.

    Attributes:
        resource: Contextual identifier (offending value, bucket, key...).
        error_code: The catalog entry describing the failure.
    """

    def __init__(
        self,
        resource: str,
        error_code: S3ErrorCode,
        message: str | None = None,
    ) -> None:
        super().__init__(message or f"{error_code.code}: {resource}")
        self.resource = resource
        self.error_code = error_code

    @property
    def code(self) -> str:
        return self.error_code.code

    @property
    def description(self) -> str:
        return self.error_code.description

    @property
    def status(self) -> HTTPStatus:
        return self.error_code.status

    def to_xml(self, request_id: str = "") -> str:
        """Render the S3 ``<Error>`` document for this failure."""
        root = ET.Element("Error")
        ET.SubElement(root, "Code").text = self.code
        ET.SubElement(root, "Message").text = self.description
        ET.SubElement(root, "Resource").text = self.resource
        ET.SubElement(root, "RequestId").text = request_id
        return _XML_DECLARATION + ET.tostring(root, encoding="unicode")

    def to_response(self, request_id: str = "") -> Response:
        """Wrap the XML error document in an HTTP response."""
        return Response(
            self.to_xml(request_id),
            status=int(self.status),
            content_type="application/xml",
        )
