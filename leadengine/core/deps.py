"""FastAPI dependencies for worker authentication and pipeline integrations."""

import hmac
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from leadengine.core.config import settings
from leadengine.core.exceptions import ConfigurationError
from leadengine.services.lead_processor import Integrations

optional_security = HTTPBearer(auto_error=False)


@lru_cache
def get_integrations() -> Integrations:
    """Integration clients shared by every request. Overridden in tests."""
    return Integrations()


async def verify_worker_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> None:
    """Require ``Authorization: Bearer <WEBHOOK_SECRET>``.

    Raises ConfigurationError (500) when no secret is configured and 401
    when the header is missing or wrong.
    """
    if not settings.WEBHOOK_SECRET:
        raise ConfigurationError("WEBHOOK_SECRET not configured")

    if not credentials or not hmac.compare_digest(credentials.credentials, settings.WEBHOOK_SECRET):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
