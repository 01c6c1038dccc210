"""Uniform response envelope.

Success: {"success": true, "data": ..., "meta": {"pagination": ..., "requestId": ...}}
Error:   {"success": false, "error": {"message": ..., "code": ..., "details": ...}}

Optional keys are omitted rather than rendered as null.
"""

from typing import Any


def api_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "data": data}
    if meta:
        meta = {key: value for key, value in meta.items() if value is not None}
        if meta:
            body["meta"] = meta
    return body


def api_error(message: str, code: int, details: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"message": message, "code": int(code)}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}
