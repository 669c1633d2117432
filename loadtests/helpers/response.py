"""Response error extraction for load test observability.

Parses Warehouse API error responses into human-readable messages.
Handles two response shapes:

- Pydantic request validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- Domain errors (400/404/409/500): {"error": "msg"} or {"error": {"field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from locust.clients import ResponseContextManager


def extract_error_detail(response: ResponseContextManager) -> str:
    """Extract a compact error message for Locust failure messages and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(
                f"{k}: {', '.join(map(str, v)) if isinstance(v, list) else v}" for k, v in error.items()
            )
        return str(error)

    return str(body)[:300]
