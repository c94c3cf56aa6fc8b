"""HTTP methods accepted by the resource operations."""
from __future__ import annotations

from enum import Enum

__all__ = ["HttpMethod"]


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return str(self.value)


class HttpMethod(_StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def coerce(cls, value: "str | HttpMethod") -> "HttpMethod | None":
        try:
            return cls(str(value).upper())
        except ValueError:
            return None
