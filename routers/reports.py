"""Analytics and query log endpoints.

Query parameters are forwarded to NextDNS verbatim (from, to, limit,
cursor, status, ...). Both endpoints answer with an empty/zero result
instead of an error when NextDNS cannot be reached.
"""

import logging

from fastapi import APIRouter, Depends, Request

from models import AnalyticsSnapshot, LogsResponse
from nextdns_client import NextDNSClient
from utils import flatten_query, require_param

from .deps import ERROR_RESPONSES, PROFILE_ID_REQUIRED, get_nextdns_client

router = APIRouter(tags=["reports"])
logger = logging.getLogger(__name__)


@router.get(
    "/profiles/{profile_id:segment}/analytics",
    responses={200: {"model": AnalyticsSnapshot}, 400: ERROR_RESPONSES[400]},
)
async def get_analytics(
    profile_id: str,
    request: Request,
    client: NextDNSClient = Depends(get_nextdns_client),
):
    """Get the analytics status snapshot for a profile."""
    require_param(profile_id, PROFILE_ID_REQUIRED)
    params = flatten_query(request)
    logger.info(f"[Analytics] Get status: {profile_id} params={params}")
    return await client.get_analytics(profile_id, params)


@router.get(
    "/profiles/{profile_id:segment}/logs",
    responses={200: {"model": LogsResponse}, 400: ERROR_RESPONSES[400]},
)
async def get_logs(
    profile_id: str,
    request: Request,
    client: NextDNSClient = Depends(get_nextdns_client),
):
    """Get query logs for a profile."""
    require_param(profile_id, PROFILE_ID_REQUIRED)
    params = flatten_query(request)
    logger.info(f"[Logs] Get logs: {profile_id} params={params}")
    return {"data": await client.get_logs(profile_id, params)}
