"""Allowlist and denylist endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from models import ListEntry, ListEntryRequest, ListResponse, SuccessResponse
from nextdns_client import LIST_KINDS, NextDNSClient
from utils import read_json_object, require_param

from .deps import ERROR_RESPONSES, PROFILE_ID_REQUIRED, get_nextdns_client

router = APIRouter(tags=["lists"])
logger = logging.getLogger(__name__)


def list_router(kind: str) -> APIRouter:
    """Build GET/POST/DELETE endpoints for a profile's allowlist or denylist."""
    entries = APIRouter()
    tag = kind.capitalize()

    @entries.get(
        f"/profiles/{{profile_id:segment}}/{kind}",
        name=f"get_{kind}",
        summary=f"List {kind} entries (empty when NextDNS is unreachable)",
        responses={200: {"model": ListResponse}, 400: ERROR_RESPONSES[400]},
    )
    async def get_entries(profile_id: str, client: NextDNSClient = Depends(get_nextdns_client)):
        require_param(profile_id, PROFILE_ID_REQUIRED)
        logger.info(f"[{tag}] Get entries: {profile_id}")
        return {"data": await client.get_list(profile_id, kind)}

    @entries.post(
        f"/profiles/{{profile_id:segment}}/{kind}",
        status_code=201,
        name=f"add_to_{kind}",
        summary=f"Add a domain to the {kind}",
        responses={201: {"model": ListEntry}, **ERROR_RESPONSES},
    )
    async def add_entry(
        profile_id: str,
        request: Request,
        client: NextDNSClient = Depends(get_nextdns_client),
    ):
        """Body: {"domain": "..."} or {"id": "..."}. `domain` wins when both are set."""
        require_param(profile_id, PROFILE_ID_REQUIRED)
        body = await read_json_object(request)
        try:
            entry = ListEntryRequest.model_validate(body)
        except ValidationError:
            raise HTTPException(status_code=400, detail="Domain must be a string")
        domain = require_param(entry.entry_id, "Domain is required")

        logger.info(f"[{tag}] Add entry: {profile_id} {domain}")
        return await client.add_to_list(profile_id, kind, domain)

    @entries.delete(
        f"/profiles/{{profile_id:segment}}/{kind}/{{domain:segment}}",
        name=f"remove_from_{kind}",
        summary=f"Remove a domain from the {kind}",
        responses={200: {"model": SuccessResponse}, **ERROR_RESPONSES},
    )
    async def remove_entry(
        profile_id: str,
        domain: str,
        client: NextDNSClient = Depends(get_nextdns_client),
    ):
        if not profile_id.strip() or not domain.strip():
            raise HTTPException(status_code=400, detail="Profile ID and domain are required")

        logger.info(f"[{tag}] Remove entry: {profile_id} {domain}")
        await client.remove_from_list(profile_id, kind, domain)
        return {"success": True}

    return entries


for _kind in LIST_KINDS:
    router.include_router(list_router(_kind))
