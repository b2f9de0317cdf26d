"""
Human Verification (hCaptcha)

Verifies the captcha token sent with anonymous submissions against hCaptcha's
siteverify endpoint.
"""

import logging

import httpx

from volugram.core.config import settings

logger = logging.getLogger(__name__)


async def verify_captcha(token: str, remote_ip: str | None = None) -> bool:
    """
    Check a captcha response token.

    Any transport failure or non-success answer counts as a failed check.
    In development with no secret configured every token passes.

    Args:
        token: The h-captcha-response value from the client
        remote_ip: Client address, forwarded to hCaptcha when known

    Returns:
        True if the token verified
    """
    if not settings.hcaptcha_secret:
        if settings.is_development:
            logger.warning("HCAPTCHA_SECRET not set - accepting captcha in development")
            return True
        logger.error("HCAPTCHA_SECRET not set - rejecting captcha")
        return False

    if not token:
        return False

    data = {"secret": settings.hcaptcha_secret, "response": token}
    if remote_ip:
        data["remoteip"] = remote_ip

    try:
        async with httpx.AsyncClient(timeout=settings.hcaptcha_timeout_seconds) as client:
            response = await client.post(settings.hcaptcha_verify_url, data=data)
    except httpx.HTTPError as e:
        logger.error(f"Captcha verification request failed: {e}")
        return False

    if response.status_code >= 400:
        logger.error(f"Captcha verification returned HTTP {response.status_code}")
        return False

    result = response.json()
    if result.get("success") is True:
        return True

    logger.info(f"Captcha rejected: {result.get('error-codes', [])}")
    return False
