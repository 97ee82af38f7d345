"""Uniform JSON envelopes returned by every route."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from fastapi.encoders import jsonable_encoder


def success(data: Any = None, message: Optional[str] = None) -> dict:
    body: dict[str, Any] = {"success": True, "data": jsonable_encoder(data)}
    if message is not None:
        body["message"] = message
    return body


def success_list(items: Sequence[Any], count: Optional[int] = None, message: Optional[str] = None) -> dict:
    body: dict[str, Any] = {
        "success": True,
        "data": jsonable_encoder(list(items)),
        "count": len(items) if count is None else count,
    }
    if message is not None:
        body["message"] = message
    return body


def paginated(items: Sequence[Any], next_cursor: Optional[int], has_more: bool) -> dict:
    return {
        "success": True,
        "data": jsonable_encoder(list(items)),
        "count": len(items),
        "next_cursor": next_cursor,
        "has_more": has_more,
    }


def error_body(message: str) -> dict:
    return {"error": message}
