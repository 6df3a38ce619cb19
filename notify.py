from __future__ import annotations

import logging
from datetime import date

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


def send_gotify(origin: str, token: str, message: str, title: str | None = None) -> bool:
    """Push the summary to a Gotify server. Returns False when delivery failed."""
    title = title or f"{date.today():%d/%m/%Y}"
    url = f"{origin.rstrip('/')}/message"
    try:
        resp = requests.post(
            url,
            params={"token": token},
            data={"title": title, "message": message},
            timeout=REQUEST_TIMEOUT,
        )
        resp.raise_for_status()
    except requests.RequestException:
        logger.exception(f"Failed to push summary to {origin}")
        return False
    logger.info(f"Summary pushed to {origin}")
    return True
