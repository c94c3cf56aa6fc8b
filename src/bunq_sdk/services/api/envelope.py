"""Decoding of bunq response bodies.

bunq wraps results in ``{"Response": [{"Kind": {...}}, ...]}``.  Each element is
decoded into the model registered for its kind, so callers ask for entities by
type instead of by index and key name.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import ValidationError

from .errors import ApiErrorResponse, EnvelopeDecodeError
from .models import ENTITY_TYPES, BunqModel, UnknownEntity

__all__ = ["ResponseItem", "ResponseEnvelope", "decode_envelope"]

M = TypeVar("M", bound=BunqModel)


@dataclass(frozen=True, slots=True)
class ResponseItem:
    kind: str
    value: BunqModel


def _names(types: tuple[type[BunqModel], ...]) -> str:
    return " | ".join(t.__name__ for t in types)


@dataclass(frozen=True, slots=True)
class ResponseEnvelope:
    items: tuple[ResponseItem, ...]

    def __len__(self) -> int:
        return len(self.items)

    @property
    def kinds(self) -> list[str]:
        return [item.kind for item in self.items]

    def all(self, *types: type[M]) -> list[M]:
        if not types:
            return [item.value for item in self.items]  # type: ignore[misc]
        return [item.value for item in self.items if isinstance(item.value, types)]  # type: ignore[misc]

    def first(self, *types: type[M]) -> M:
        for item in self.items:
            if isinstance(item.value, types):
                return item.value  # type: ignore[return-value]
        raise EnvelopeDecodeError(f"response has no {_names(types)} entity (got {self.kinds})")

    def at(self, index: int, *types: type[M]) -> M:
        try:
            item = self.items[index]
        except IndexError:
            raise EnvelopeDecodeError(f"response has no entity at index {index} (size {len(self.items)})") from None
        if types and not isinstance(item.value, types):
            raise EnvelopeDecodeError(f"entity at index {index} is {item.kind}, expected {_names(types)}")
        return item.value  # type: ignore[return-value]


def _error_messages(errors: Any) -> list[str]:
    messages: list[str] = []
    if isinstance(errors, list):
        for entry in errors:
            if isinstance(entry, dict):
                text = entry.get("error_description") or entry.get("error_description_translated")
                if text:
                    messages.append(str(text))
    return messages


def _decode_item(index: int, raw: Any) -> ResponseItem:
    if not isinstance(raw, dict) or len(raw) != 1:
        raise EnvelopeDecodeError(f"Response[{index}] must be an object with exactly one key")
    kind, payload = next(iter(raw.items()))
    if not isinstance(payload, dict):
        raise EnvelopeDecodeError(f"Response[{index}].{kind} must be an object")
    model = ENTITY_TYPES.get(kind)
    if model is None:
        return ResponseItem(kind=kind, value=UnknownEntity(kind=kind, payload=payload))
    try:
        value = model.model_validate(payload)
    except ValidationError as exc:
        raise EnvelopeDecodeError(f"Response[{index}].{kind} is invalid: {exc}") from exc
    return ResponseItem(kind=kind, value=value)


def decode_envelope(body: str | bytes, *, status_code: int | None = None) -> ResponseEnvelope:
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise EnvelopeDecodeError(f"response body is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise EnvelopeDecodeError("response body must be a JSON object")
    if "Error" in data:
        raise ApiErrorResponse(_error_messages(data["Error"]), status_code=status_code)
    entries = data.get("Response")
    if not isinstance(entries, list):
        raise EnvelopeDecodeError("response body has no 'Response' array")
    return ResponseEnvelope(items=tuple(_decode_item(i, raw) for i, raw in enumerate(entries)))
