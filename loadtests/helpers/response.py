"""Response error extraction for load test observability.

Parses marketplace API error responses into human-readable messages.
Handles two response shapes:

- Request validation (400): {"error": "Invalid request", "details": [{"loc": [...], "msg": "..."}]}
- Domain errors (400/403/404/409): {"error": "msg", "code": "...", "product_id": "..."}
  or {"error": {"field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body.get("details"), list):
        parts = []
        for err in body["details"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        if body.get("code"):
            return f"{body['code']}: {error}"
        return str(error)

    return str(body)[:300]
