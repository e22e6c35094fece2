"""Response error extraction for load test observability.

Bookstore API errors share one body shape:
``{"status": "fail" | "error", "error": "<type>", "message": "<text>"}``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Return ``"<type>: <message>"`` for an API error, or a truncated raw body."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body, dict) and "error" in body:
        return f"{body['error']}: {body.get('message', '')}"
    return str(body)[:300]


def error_type(response: Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("error") if isinstance(body, dict) else None
