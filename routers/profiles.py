"""Profile and settings-group endpoints."""

import logging

from fastapi import APIRouter, Depends, Request

from models import Profile
from nextdns_client import SETTINGS_FIELDS, NextDNSClient
from utils import read_json_object, require_param

from .deps import ERROR_RESPONSES, PROFILE_ID_REQUIRED, get_nextdns_client

router = APIRouter(tags=["profiles"])
logger = logging.getLogger(__name__)


@router.get("/profiles/{profile_id:segment}", responses={200: {"model": Profile}, **ERROR_RESPONSES})
async def get_profile(profile_id: str, client: NextDNSClient = Depends(get_nextdns_client)):
    """Get a profile with all of its settings groups."""
    require_param(profile_id, PROFILE_ID_REQUIRED)
    logger.info(f"[Profiles] Get profile: {profile_id}")
    return await client.get_profile(profile_id)


@router.patch("/profiles/{profile_id:segment}", responses={200: {"model": Profile}, **ERROR_RESPONSES})
async def update_profile(
    profile_id: str,
    request: Request,
    client: NextDNSClient = Depends(get_nextdns_client),
):
    """Update a profile with a partial set of fields. Returns the merged profile."""
    require_param(profile_id, PROFILE_ID_REQUIRED)
    body = await read_json_object(request)
    logger.info(f"[Profiles] Update profile: {profile_id} fields={sorted(body)}")
    return await client.update_profile(profile_id, body)


def settings_router(segment: str, field: str) -> APIRouter:
    """Build GET/PATCH endpoints for one settings group of a profile.

    Args:
        segment: URL segment under the profile (e.g. "parental-control")
        field: Profile field holding the group (e.g. "parentalControl")
    """
    settings = APIRouter(tags=["settings"])
    label = segment.replace("-", " ")

    @settings.get(
        f"/profiles/{{profile_id:segment}}/{segment}",
        name=f"get_{field}_settings",
        summary=f"Get the {label} settings of a profile",
        responses=ERROR_RESPONSES,
    )
    async def get_settings_group(profile_id: str, client: NextDNSClient = Depends(get_nextdns_client)):
        require_param(profile_id, PROFILE_ID_REQUIRED)
        logger.info(f"[Settings] Get {label}: {profile_id}")
        return await client.get_settings_group(profile_id, field)

    @settings.patch(
        f"/profiles/{{profile_id:segment}}/{segment}",
        name=f"update_{field}_settings",
        summary=f"Replace the {label} settings of a profile",
        responses=ERROR_RESPONSES,
    )
    async def update_settings_group(
        profile_id: str,
        request: Request,
        client: NextDNSClient = Depends(get_nextdns_client),
    ):
        require_param(profile_id, PROFILE_ID_REQUIRED)
        body = await read_json_object(request)
        logger.info(f"[Settings] Update {label}: {profile_id}")
        return await client.update_settings_group(profile_id, field, body)

    return settings


for _segment, _field in SETTINGS_FIELDS.items():
    router.include_router(settings_router(_segment, _field))
