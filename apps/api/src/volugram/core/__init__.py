"""
Core module - Configuration, database, security, tokens and utilities.
"""

from volugram.core.config import get_settings, settings
from volugram.core.database import Base, close_db, get_db, init_db
from volugram.core.redis import close_redis, get_redis, init_redis
from volugram.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from volugram.core.tokens import TokenRegistries, TokenRegistry, get_token_registries

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    # Security
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
    # Single-use tokens
    "TokenRegistry",
    "TokenRegistries",
    "get_token_registries",
]
