# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""URI encoding (AWS-specific RFC 3986 subset).

- Unreserved characters are not encoded: A-Z, a-z, 0-9, -, _, ., ~
- Everything else is UTF-8 encoded and percent-escaped as %XX
  (uppercase hex), including ``/`` and ``+``
- Spaces become ``%20``, never ``+``

Inputs are expected to be already percent-decoded; an escaped ``%2F``
arriving here is encoded again to ``%252F``.
"""

import urllib.parse


def _aws_quote(value: str) -> str:
    # quote_plus escapes a literal "+" as %2B before turning spaces into
    # "+", so the replacement below only ever touches spaces.
    encoded = urllib.parse.quote_plus(value, safe="", encoding="utf-8")
    return encoded.replace("+", "%20").replace("%7E", "~")


def encode_segment(segment: str) -> str:
    """Encode a single path segment (must not contain ``/``).

    Args:
        segment: Decoded path segment.

    Returns:
        Percent-encoded segment.
    """
    return _aws_quote(segment)


def encode_query_token(token: str) -> str:
    """Encode a query parameter name or value.

    Args:
        token: Decoded parameter name or value.

    Returns:
        Percent-encoded token.
    """
    return _aws_quote(token)
