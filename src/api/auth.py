"""API key authentication for LearnBotX API clients

Clients are trusted backends (the frontend's server side). They resolve
end-user identity themselves and pass the user_id in the path; this module
only checks that the caller holds one of the keys in config.API_KEYS.
"""
import logging
from typing import Optional
from fastapi import Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from src import config
from src.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header raises AuthenticationError like a bad key
bearer_scheme = HTTPBearer(auto_error=False)


async def verify_api_key(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme)
) -> str:
    """
    FastAPI dependency returning the caller's API key

    Raises:
        ConfigurationError: no API keys configured (served as 503)
        AuthenticationError: header missing or key unknown (served as 401)
    """
    if not config.API_KEYS:
        raise ConfigurationError(
            "No API keys configured - rejecting all requests",
            config_key="API_KEYS",
            operation="verify_api_key",
        )

    if credentials is None:
        raise AuthenticationError("Missing bearer token", operation="verify_api_key")

    api_key = credentials.credentials
    if api_key not in config.API_KEYS:
        raise AuthenticationError(
            "Invalid API key",
            operation="verify_api_key",
            context={"key_prefix": api_key[:4]},
        )

    return api_key
