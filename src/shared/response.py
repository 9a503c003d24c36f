"""Response error extraction for backend calls.

Parses commerce backend error responses into human-readable messages.
Handles the response shapes the backend produces:

- Handler errors: {"error": "msg"}, {"Error": "msg"} or {"error": {"field": "msg"}}
- Plain messages: {"message": "msg"} or a bare JSON string ("Not Found")
- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.errors import GENERIC_ERROR_MESSAGE

if TYPE_CHECKING:
    from requests import Response

_MESSAGE_KEYS = ("error", "Error", "message")


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Falls back to GENERIC_ERROR_MESSAGE when the body carries nothing usable.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON: raw text, truncated
        text = (getattr(response, "text", "") or "").strip()
        return text[:300] or GENERIC_ERROR_MESSAGE

    if isinstance(body, str):
        return body.strip() or GENERIC_ERROR_MESSAGE

    if not isinstance(body, dict):
        return GENERIC_ERROR_MESSAGE

    # Pydantic validation errors: {"detail": [{"loc": [...], "msg": "..."}]}
    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            if not isinstance(err, dict):
                parts.append(str(err))
                continue
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts) or GENERIC_ERROR_MESSAGE

    if isinstance(body.get("detail"), str):
        return body["detail"]

    for key in _MESSAGE_KEYS:
        if key not in body or not body[key]:
            continue
        error = body[key]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        return str(error)

    return GENERIC_ERROR_MESSAGE
