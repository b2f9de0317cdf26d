"""
Account Background Jobs

Periodic sweep removing expired activation and password reset tokens.
Registered only when at least one registry has a TTL.
"""

import logging
from datetime import timedelta

from apscheduler.triggers.interval import IntervalTrigger

from volugram.core.config import settings
from volugram.core.scheduler import register_job
from volugram.core.tokens import TokenRegistries

logger = logging.getLogger(__name__)

JOB_PURGE_EXPIRED_TOKENS = "auth_purge_expired_tokens"


def build_token_registries() -> TokenRegistries:
    """Create the registries with TTLs from settings (None disables expiry)."""
    activation_ttl = settings.activation_token_ttl_hours
    reset_ttl = settings.password_reset_token_ttl_hours
    return TokenRegistries.create(
        activation_ttl=timedelta(hours=activation_ttl) if activation_ttl else None,
        password_reset_ttl=timedelta(hours=reset_ttl) if reset_ttl else None,
    )


def make_purge_job(registries: TokenRegistries):
    async def purge_expired_tokens() -> int:
        removed = registries.purge_expired()
        if removed:
            logger.info(f"Token sweep removed {removed} expired token(s)")
        return removed

    return purge_expired_tokens


def register_auth_jobs(registries: TokenRegistries) -> bool:
    """
    Schedule the token sweep.

    Returns:
        True if the job was registered
    """
    if registries.activation.ttl is None and registries.password_reset.ttl is None:
        logger.info("Token TTLs disabled, token sweep not scheduled")
        return False

    register_job(
        JOB_PURGE_EXPIRED_TOKENS,
        make_purge_job(registries),
        IntervalTrigger(minutes=settings.token_sweep_interval_minutes),
    )
    return True
