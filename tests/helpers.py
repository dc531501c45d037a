"""
Response builders shared by the test suite.

The backend zlib-compresses every body and reports outcomes through the
``{err, errmsg, data}`` envelope, so tests build responses the same way.
"""

from __future__ import annotations

import json
from typing import Any

from httpx import Response

from tarkov_api.api.codec import compress


def envelope_body(code: int = 0, data: Any = None, message: str | None = None) -> bytes:
    """Serialize and compress an envelope the way the backend does."""
    payload = {"err": code, "errmsg": message, "data": data}
    return compress(json.dumps(payload, ensure_ascii=False).encode("utf-8"))


def envelope_response(
    code: int = 0,
    data: Any = None,
    message: str | None = None,
    *,
    status_code: int = 200,
) -> Response:
    """A backend response carrying the given envelope."""
    return Response(status_code, content=envelope_body(code, data, message))


def login_data(access_token: str = "token") -> dict[str, Any]:
    """Payload of a successful credential submission."""
    return {
        "aid": 1234567,
        "lang": "en",
        "region": "EUR",
        "gameVersion": "0.12.5.7295",
        "dataCenters": [],
        "ipRegion": "NL",
        "token_type": "Bearer",
        "expires_in": 3600,
        "access_token": access_token,
        "refresh_token": "refresh",
    }


def session_data(session: str = "abc123", queued: bool = False) -> dict[str, Any]:
    """Payload of a successful token exchange."""
    return {"queued": queued, "session": session}
