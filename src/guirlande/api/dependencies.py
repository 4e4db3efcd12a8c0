"""Request dependencies: service context and bearer authentication."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from fastapi.requests import HTTPConnection

from ..common.exceptions import AuthenticationError
from ..core.context import ServiceContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class User:
    name: str


def get_context(connection: HTTPConnection) -> ServiceContext:
    """Dependency injection for the service context"""
    state = connection.app.state
    if not state.startup_complete or state.context is None:
        raise HTTPException(
            status_code=503,
            detail="Server is still starting up. Please try again in a moment.",
        )
    return state.context


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    context: ServiceContext = Depends(get_context),
) -> Optional[User]:
    """Resolve the caller from an `Authorization: Bearer <token>` header"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        logger.debug("Ignored malformed authorization header")
        return None
    for index, expected in enumerate(context.config.auth.api_tokens):
        if context.crypto.matches(expected, token.strip()):
            return User(name=f"api-token-{index}")
    logger.warning("Rejected unknown bearer token")
    return None


def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise AuthenticationError("Authentication required")
    return user
