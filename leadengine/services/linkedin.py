"""LinkedIn prospect search through the Proxycurl person search API."""

import logging
from typing import Any, Dict, List

import httpx

from leadengine.core.config import settings
from leadengine.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PROXYCURL_SEARCH_URL = "https://nubela.co/proxycurl/api/search/person/"


def _trim_profile(profile: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "public_identifier": profile.get("public_identifier"),
        "profile_pic_url": profile.get("profile_pic_url"),
        "first_name": profile.get("first_name"),
        "last_name": profile.get("last_name"),
        "headline": profile.get("headline"),
        "summary": profile.get("summary"),
        "occupation": profile.get("occupation"),
        "location": profile.get("city"),
        "connections": profile.get("connections"),
    }


class ProxycurlClient:
    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        self.api_key = api_key if api_key is not None else settings.PROXYCURL_API_KEY
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    async def search_people(self, job_title: str, location: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Search South African profiles by current job title and region."""
        if not self.api_key:
            raise ConfigurationError("Proxycurl API key not configured")

        params = {
            "country": "za",
            "current_job_title": job_title,
            "region": location,
            "enrich_profiles": "enrich",
            "page_size": str(limit),
        }
        logger.info("[LinkedIn Search] Searching for: %s in %s", job_title, location)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                PROXYCURL_SEARCH_URL,
                params=params,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        if response.status_code != 200:
            logger.error("[LinkedIn Search] API error: %s", response.text[:300])
            raise RuntimeError(f"Proxycurl API error: {response.status_code}")

        results = response.json().get("results") or []
        profiles = [_trim_profile(item.get("profile") or item) for item in results]
        logger.info("[LinkedIn Search] Found %d profiles", len(profiles))
        return profiles
