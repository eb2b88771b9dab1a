"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract and
validate the current principal from the request. Authentication here is
purely cryptographic: the Bearer token is verified against the signing
secret and its claims become the Principal, without a database lookup.

The tenant guard (eduflow.auth.tenant_guard) builds on get_current_user.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from eduflow.auth.context import Principal
from eduflow.auth.service import AuthService
from eduflow.auth.tokens import ACCESS, TokenService
from eduflow.config import settings
from eduflow.errors import AuthenticationRequired, MalformedToken
from eduflow.repositories.providers import get_user_repository
from eduflow.repositories.users import UserRepository


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide TokenService built from settings."""
    return TokenService.from_settings(settings)


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(users=users, tokens=tokens)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate_token(token: str, tokens: TokenService) -> Principal:
    """Verify an access token and build the Principal from its claims."""
    claims = tokens.verify(token, ACCESS)
    try:
        return Principal.from_claims(claims)
    except (KeyError, ValueError):
        raise MalformedToken("Token claims are not a valid principal")


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[Principal]:
    """Soft auth — None if no Bearer token, 401 if the token is bad."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    return authenticate_token(token, tokens)


async def get_current_user(
    principal: Optional[Principal] = Depends(get_current_user_optional),
) -> Principal:
    """Hard auth — 401 unless a valid access token was presented."""
    if principal is None:
        raise AuthenticationRequired()
    return principal
