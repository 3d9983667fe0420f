"""
Survey Analytics - Admin Capability.
Identity is delegated to an external provider that issues signed JWTs; this
module verifies the bearer token and turns an admin verdict into an explicit
capability passed to admin-only operations.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

import jwt
import structlog

from .config import SecurityConfig
from .exceptions import AuthorizationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AdminCapability:
    """Proof that the caller was authenticated as an administrator."""
    subject: str
    roles: tuple[str, ...] = ()
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class IdentityProvider(Protocol):
    def authenticate(self, token: str | None) -> AdminCapability | None: ...


def _claim(claims: dict[str, Any], path: str) -> Any:
    value: Any = claims
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _roles_from(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return ()


class JWTIdentityProvider:
    """
    Verifies bearer JWTs and grants a capability to admin-role holders.

    The role claim may be nested (``app_metadata.role``) and may hold a single
    role or a list. Tokens must carry ``sub`` and ``exp``.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: str | None = None,
        issuer: str | None = None,
        role_claim: str = "app_metadata.role",
        admin_roles: Sequence[str] = ("admin",),
        leeway: int = 30,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._audience = audience or None
        self._issuer = issuer or None
        self._role_claim = role_claim
        self._admin_roles = frozenset(admin_roles)
        self._leeway = leeway

    @classmethod
    def from_config(cls, config: SecurityConfig) -> JWTIdentityProvider:
        return cls(
            config.jwt_secret,
            algorithm=config.jwt_algorithm,
            audience=config.jwt_audience,
            issuer=config.jwt_issuer,
            role_claim=config.role_claim,
            admin_roles=config.admin_roles,
            leeway=config.clock_skew_seconds,
        )

    def _decode(self, token: str) -> dict[str, Any] | None:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                leeway=self._leeway,
                options={"require": ["exp", "sub"], "verify_aud": self._audience is not None},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("admin_authentication_failed", reason="token_expired")
        except jwt.InvalidAudienceError:
            logger.warning("admin_authentication_failed", reason="invalid_audience")
        except jwt.InvalidIssuerError:
            logger.warning("admin_authentication_failed", reason="invalid_issuer")
        except jwt.InvalidTokenError as e:
            logger.warning("admin_authentication_failed", reason="invalid_token", error=str(e))
        return None

    def authenticate(self, token: str | None) -> AdminCapability | None:
        if not self._secret or not token:
            return None
        claims = self._decode(token)
        if claims is None:
            return None

        roles = _roles_from(_claim(claims, self._role_claim))
        if not self._admin_roles.intersection(roles):
            logger.warning("admin_role_missing", subject=claims["sub"], roles=list(roles))
            return None

        issued_at = claims.get("iat")
        return AdminCapability(
            subject=str(claims["sub"]),
            roles=roles,
            issued_at=(datetime.fromtimestamp(issued_at, timezone.utc)
                       if isinstance(issued_at, (int, float)) else datetime.now(timezone.utc)),
        )


def require_capability(capability: AdminCapability | None) -> AdminCapability:
    if not isinstance(capability, AdminCapability):
        raise AuthorizationError()
    return capability
