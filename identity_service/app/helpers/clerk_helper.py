import logging
from typing import Optional

import requests

from shared.core.config import settings

logger = logging.getLogger(__name__)


def push_public_metadata(clerk_id: Optional[str], metadata: dict) -> bool:
    """Merge `metadata` into the Clerk user's public metadata. Failures are logged, never raised."""
    if not settings.CLERK_SECRET_KEY or not clerk_id:
        return False
    try:
        resp = requests.patch(
            f"{settings.CLERK_API_URL}/users/{clerk_id}/metadata",
            json={"public_metadata": metadata},
            headers={
                "Authorization": f"Bearer {settings.CLERK_SECRET_KEY}",
                "Content-Type": "application/json",
            },
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        return True
    except requests.RequestException:
        logger.exception("Failed to update Clerk metadata for %s", clerk_id)
        return False
