"""LinkedIn prospect search."""

import logging

from fastapi import APIRouter, HTTPException

from leadengine.core.exceptions import ConfigurationError
from leadengine.schemas.payload import LinkedInSearchRequest
from leadengine.services.linkedin import ProxycurlClient

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/search")
async def linkedin_search(body: LinkedInSearchRequest):
    try:
        profiles = await ProxycurlClient().search_people(body.job_title, body.location, body.limit)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.error("[LinkedIn Search Error]: %s", e)
        raise HTTPException(status_code=502, detail=f"Search failed: {e}")
    return {"success": True, "count": len(profiles), "profiles": profiles}


@router.get("/search")
async def linkedin_search_info():
    return {
        "endpoint": "linkedin-search",
        "description": "Search for LinkedIn profiles by job title and location",
        "required_fields": ["job_title", "location"],
        "optional_fields": ["limit"],
    }
