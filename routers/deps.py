"""Shared dependencies for API endpoints."""

from fastapi import Request

from models import ErrorResponse
from nextdns_client import NextDNSClient

PROFILE_ID_REQUIRED = "Profile ID is required"

# OpenAPI documentation for the `{error: true, message}` failures
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid identifier or body"},
    502: {"model": ErrorResponse, "description": "NextDNS unreachable"},
}


async def get_nextdns_client(request: Request) -> NextDNSClient:
    """Dependency returning the application's NextDNS client.

    The client is created in the app lifespan and stored on app.state.
    """
    return request.app.state.nextdns_client
