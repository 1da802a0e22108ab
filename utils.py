"""Utility functions for the route handlers."""

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from starlette.convertors import Convertor, register_url_convertor


class SegmentConvertor(Convertor):
    """Path segment that may be empty.

    Starlette's default `str` convertor needs at least one character, so
    `/profiles//allowlist` would never reach a handler. Matching the empty
    segment lets the handler answer 400 instead of the router's 404.
    """

    regex = "[^/]*"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("segment", SegmentConvertor())


def require_param(value: Optional[str], message: str) -> str:
    """Return the value unchanged, or raise a 400 when it is empty or blank."""
    if value is None or not value.strip():
        raise HTTPException(status_code=400, detail=message)
    return value


def flatten_query(request: Request) -> Dict[str, str]:
    """Flatten query parameters into a plain dict (last value wins)."""
    return {key: value for key, value in request.query_params.multi_items()}


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object, answering 400 otherwise."""
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body
