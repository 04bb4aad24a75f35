"""Body parsing helpers shared by the dispatcher and stream decoders."""

from __future__ import annotations

import json
from typing import Any

from .errors import DecodeError


def decode_json(body: bytes | str) -> Any:
    """Decode a JSON body; an empty body decodes to ``None``."""
    text = _decode_body(body) if isinstance(body, bytes) else body
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Invalid JSON response: {exc}", context=text[:200]) from exc


def extract_error_message(body: bytes | str | None) -> str:
    """Best-effort extraction of the daemon's ``{"message": ...}`` field."""
    if not body:
        return "Error occurred"
    text = _decode_body(body) if isinstance(body, bytes) else body
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return text.strip() or "Error occurred"
    if isinstance(parsed, dict) and "message" in parsed:
        message = parsed["message"]
        if isinstance(message, str):
            return message
        return str(message)
    return text.strip() or "Error occurred"


def encode_json(body: Any) -> bytes:
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def encode_params(params: dict[str, Any] | None) -> dict[str, str]:
    """Render query parameters the way the Engine API expects them."""
    encoded: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (list, dict)):
            encoded[key] = json.dumps(value, separators=(",", ":"))
        else:
            encoded[key] = str(value)
    return encoded


def _decode_body(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


__all__ = ["decode_json", "encode_json", "encode_params", "extract_error_message"]
