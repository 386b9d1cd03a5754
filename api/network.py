"""
Request-level helpers: caller address resolution and JSON body reading.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from fastapi import Request

from services.errors import ClientInputError, PayloadTooLarge

MAX_BODY_BYTES = 200 * 1024


def client_address(request: Request, trusted_hops: int = 1) -> str:
    """
    Resolve the caller's address, trusting `trusted_hops` reverse proxies.

    The chain is read right to left: the socket peer first, then the
    X-Forwarded-For entries in reverse. With one trusted hop (a single load
    balancer in front of the app) the right-most forwarded entry is the caller.
    Spoofed entries further left are ignored.
    """

    peer = request.client.host if request.client else "unknown"
    if trusted_hops <= 0:
        return peer

    forwarded = [
        part.strip()
        for part in request.headers.get("x-forwarded-for", "").split(",")
        if part.strip()
    ]
    chain = [peer] + forwarded[::-1]
    return chain[min(trusted_hops, len(chain) - 1)]


async def read_json_payload(request: Request) -> Dict[str, Any]:
    """
    Read the request body as a JSON object.

    An empty body or a JSON value that is not an object yields `{}`, which then
    fails validation with a field-specific reason.

    Raises:
        PayloadTooLarge: If the body exceeds MAX_BODY_BYTES
        ClientInputError: If the body is not valid UTF-8 JSON or nests too deeply
    """

    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > MAX_BODY_BYTES:
        raise PayloadTooLarge()

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > MAX_BODY_BYTES:
            raise PayloadTooLarge()
        chunks.append(chunk)
    raw = b"".join(chunks)
    if not raw.strip():
        return {}

    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError):
        # RecursionError: valid but too deeply nested to decode
        raise ClientInputError("Invalid JSON") from None

    return payload if isinstance(payload, dict) else {}


__all__ = ["MAX_BODY_BYTES", "client_address", "read_json_payload"]
