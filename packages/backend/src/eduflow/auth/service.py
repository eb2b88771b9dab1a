"""Auth service — credentials in, token pairs out.

Learn: The service is constructed with its collaborators (a user
repository and a TokenService) instead of importing singletons, so tests
can hand it an in-memory repository and a token service with a fixed
clock.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from eduflow.auth.context import Principal, Role
from eduflow.auth.password import decoy_hash, hash_password, verify_password
from eduflow.auth.tokens import REFRESH, TokenPair, TokenService
from eduflow.errors import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    PrincipalNotFound,
)
from eduflow.repositories.users import UserRepository

logger = structlog.get_logger()


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True)
class LoginResult:
    principal: Principal
    access_token: str
    refresh_token: str

    @classmethod
    def build(cls, principal: Principal, pair: TokenPair) -> "LoginResult":
        return cls(
            principal=principal,
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        )


class AuthService:
    """Business logic for registration, login, and token refresh."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self.users = users
        self.tokens = tokens

    async def register(self, email: str, password: str, name: str) -> Principal:
        """Create a student account. Institutes are joined/created later."""
        email = normalize_email(email)
        if await self.users.get_by_email(email):
            raise EmailAlreadyRegistered()

        user = await self.users.create(
            email=email,
            name=name,
            password_hash=hash_password(password),
            role=Role.STUDENT.value,
        )
        principal = Principal.from_user(user)
        logger.info("auth.registered", user_id=principal.id)
        return principal

    async def login(self, email: str, password: str) -> LoginResult:
        """Check credentials and issue an access/refresh token pair.

        Raises InvalidCredentials for an unknown email or a wrong password,
        with the same message and (roughly) the same cost for both.
        """
        user = await self.users.get_by_email(normalize_email(email))
        if user is None:
            # Burn a bcrypt comparison so unknown emails aren't faster
            verify_password(password, decoy_hash())
            logger.info("auth.login_failed", reason="unknown_email")
            raise InvalidCredentials()

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", reason="bad_password", user_id=str(user.id))
            raise InvalidCredentials()

        principal = Principal.from_user(user)
        pair = self.tokens.issue_pair(principal.to_claims())
        await self._record_login(principal.id)
        logger.info("auth.login_succeeded", user_id=principal.id, role=principal.role.value)
        return LoginResult.build(principal, pair)

    async def refresh(self, refresh_token: str) -> LoginResult:
        """Exchange a refresh token for a fresh pair.

        The principal is reloaded so claims pick up changes made since the
        last login (e.g. a newly created institute).
        """
        claims = self.tokens.verify(refresh_token, REFRESH)
        user = await self.users.get(claims["sub"])
        if user is None:
            raise InvalidCredentials()
        principal = Principal.from_user(user)
        return LoginResult.build(principal, self.tokens.issue_pair(principal.to_claims()))

    async def profile(self, principal_id: str):
        """The stored user row behind a principal."""
        user = await self.users.get(principal_id)
        if user is None:
            raise PrincipalNotFound()
        return user

    def logout(self) -> None:
        """Tokens are stateless; the HTTP layer clears the refresh cookie."""
        return None

    async def _record_login(self, user_id: str) -> None:
        """Best-effort last-login bookkeeping. Never fails the login."""
        try:
            await self.users.update_last_login(user_id, datetime.now(timezone.utc))
        except Exception as e:
            logger.warning("auth.last_login_update_failed", user_id=user_id, error=str(e))
