"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (15min), sent as a Bearer header
- Refresh token: long-lived (7 days), kept in an HTTP-only cookie

Each type is signed with its own secret. The claims carry the principal's
id, role, and institute_id so the tenant guard can decide without a
database round trip.

Expiry is checked against an injected clock rather than PyJWT's internal
one, which keeps verify() a pure function of (token, secret, now).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

import jwt

from eduflow.config import Settings
from eduflow.errors import Expired, InvalidSignature, MalformedToken

ACCESS = "access"
REFRESH = "refresh"

# Claims the service owns; callers can't override them through the payload
_TIMING_CLAIMS = ("iat", "exp", "type")
_REQUIRED_CLAIMS = ("sub", "role", "type", "iat", "exp")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Issues and verifies signed access/refresh tokens."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = utcnow,
    ):
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self._ttls = {ACCESS: access_ttl, REFRESH: refresh_ttl}
        self.algorithm = algorithm
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            access_secret=settings.jwt_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
            algorithm=settings.jwt_algorithm,
        )

    def _check_type(self, token_type: str) -> None:
        if token_type not in self._secrets:
            raise ValueError(f"Unknown token type: {token_type!r}")

    def issue(self, payload: Mapping[str, Any], token_type: str = ACCESS) -> str:
        """Sign a token carrying payload plus iat/exp/type claims."""
        self._check_type(token_type)
        if "sub" not in payload:
            raise ValueError("Token payload requires a 'sub' claim")
        now = self.clock()
        claims = {k: v for k, v in payload.items() if k not in _TIMING_CLAIMS}
        claims.update(
            type=token_type,
            iat=int(now.timestamp()),
            exp=int((now + self._ttls[token_type]).timestamp()),
        )
        return jwt.encode(claims, self._secrets[token_type], algorithm=self.algorithm)

    def issue_pair(self, payload: Mapping[str, Any]) -> TokenPair:
        return TokenPair(
            access_token=self.issue(payload, ACCESS),
            refresh_token=self.issue(payload, REFRESH),
        )

    def verify(self, token: str, token_type: str = ACCESS) -> dict[str, Any]:
        """Verify and decode a token.

        Raises InvalidSignature, Expired, or MalformedToken on failure.
        A token of another type (e.g. a refresh token presented as an
        access token) is malformed for this purpose.
        """
        self._check_type(token_type)
        try:
            claims = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": list(_REQUIRED_CLAIMS),
                },
            )
        except jwt.InvalidSignatureError:
            raise InvalidSignature()
        except jwt.MissingRequiredClaimError as e:
            raise MalformedToken(f"Token is missing a required claim: {e.claim}")
        except jwt.InvalidTokenError as e:
            raise MalformedToken(f"Token is malformed: {e}")

        if claims["type"] != token_type:
            raise MalformedToken(f"Expected a {token_type} token")
        if int(claims["exp"]) <= int(self.clock().timestamp()):
            raise Expired()
        return claims
