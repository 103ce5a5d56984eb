"""Advisory page-cache revalidation signal sent to the frontend."""
import logging

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


def revalidate_path(path: str) -> bool:
    """Ask the frontend to re-render ``path``. Returns False on any failure."""
    if not settings.REVALIDATE_URL:
        logger.debug("Revalidation disabled, skipping %s", path)
        return False
    headers = {}
    if settings.REVALIDATE_TOKEN:
        headers["Authorization"] = f"Bearer {settings.REVALIDATE_TOKEN}"
    try:
        resp = httpx.post(settings.REVALIDATE_URL, json={"path": path}, headers=headers, timeout=5.0)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Revalidation of %s failed: %s", path, exc)
        return False
    return True
