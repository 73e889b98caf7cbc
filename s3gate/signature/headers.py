# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Case-insensitive header lookup and first-value collapsing.

HTTP allows repeated headers and query parameters; SigV4 canonicalization
here only ever looks at the first occurrence.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any


class LowerCaseKeyStringMap(Mapping[str, str]):
    """Read-only header map keyed by lowercase name.

    Keys are lowercased on construction and on lookup, so
    ``m["X-Amz-Date"]`` and ``m["x-amz-date"]`` are the same entry.  The
    first value seen for a name wins; later duplicates are dropped.
    """

    __slots__ = ("_data",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        data: dict[str, str] = {}
        for name, value in items:
            data.setdefault(name.lower(), value)
        self._data = data

    @classmethod
    def from_items(
        cls, items: Iterable[tuple[str, str]]
    ) -> LowerCaseKeyStringMap:
        """Build from (name, value) pairs in wire order."""
        return cls(items)

    @classmethod
    def from_headers(cls, headers: Any) -> LowerCaseKeyStringMap:
        """Build from a header container.

        Accepts a ``Mapping`` (one value per name), a werkzeug
        ``Headers``/``EnvironHeaders`` (``items()`` yields every
        occurrence in wire order) or an iterable of ``(name, value)``
        pairs.
        """
        if isinstance(headers, LowerCaseKeyStringMap):
            return headers
        if hasattr(headers, "items"):
            return cls(headers.items())
        return cls(headers)

    def __getitem__(self, name: str) -> str:
        return self._data[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"LowerCaseKeyStringMap({self._data!r})"


def first_value_map(params: Any) -> dict[str, str]:
    """Collapse a multi-valued parameter container to first values.

    Args:
        params: A werkzeug ``MultiDict`` (``items()`` returns the first
            value per key), a plain ``Mapping`` whose values may be lists,
            or an iterable of ``(name, value)`` pairs.

    Returns:
        Dict of name to first value.  Names are case-sensitive.
    """
    items = params.items() if hasattr(params, "items") else params
    result: dict[str, str] = {}
    for name, value in items:
        if isinstance(value, list | tuple):
            if not value:
                continue
            value = value[0]
        result.setdefault(name, value)
    return result
