"""Authentication utilities for the DSCommerce API.

This module provides:
- Principal: the authenticated caller as an immutable value
- Password hashing with bcrypt
- JWT access token issuance and verification (PyJWT)
- FastAPI dependencies: get_current_principal and require_roles

Tokens are HS256 JWTs with claims:
    sub          user email
    user_id      integer user id
    authorities  granted role authorities (e.g. ["ROLE_CLIENT"])
    iat / exp    issue and expiry timestamps
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from dscommerce.api.shared.helpers.errors import (
    AuthenticationError,
    AuthorizationError,
    ErrorCode,
)
from dscommerce.config import SecurityConfig, get_config
from dscommerce.db.models import RoleName, User
from dscommerce.db.repositories import UserRepository
from dscommerce.db.session import get_db
from dscommerce.logging_config import get_logger, set_context

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


# =============================================================================
# Principal
# =============================================================================


@dataclass(frozen=True)
class Principal:
    """The authenticated identity making the current request."""

    id: int
    email: str
    name: str = ""
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            roles=user.authorities,
        )

    def has_role(self, role: RoleName | str) -> bool:
        authority = role.value if isinstance(role, RoleName) else role
        return authority in self.roles

    def has_any_role(self, *roles: RoleName | str) -> bool:
        return any(self.has_role(role) for role in roles)

    @property
    def is_admin(self) -> bool:
        return self.has_role(RoleName.ADMIN)


# =============================================================================
# Passwords
# =============================================================================


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt.

    Args:
        password: Plain-text password
        rounds: bcrypt cost factor (default: security.bcrypt_rounds)
    """
    if rounds is None:
        rounds = get_config().security.bcrypt_rounds
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain-text password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        logger.warning("password_hash_malformed")
        return False


# =============================================================================
# Tokens
# =============================================================================


def create_access_token(
    user: User,
    security: Optional[SecurityConfig] = None,
    now: Optional[datetime] = None,
) -> str:
    """Issue a signed access token for a user."""
    security = security or get_config().security
    issued_at = now or datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": user.email,
        "user_id": user.id,
        "authorities": sorted(user.authorities),
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=security.jwt_ttl_seconds),
    }
    return jwt.encode(payload, security.jwt_secret, algorithm=security.jwt_algorithm)


def decode_access_token(
    token: str,
    security: Optional[SecurityConfig] = None,
) -> Dict[str, Any]:
    """Verify a token's signature and expiry and return its claims.

    Raises:
        AuthenticationError: If the token is malformed, tampered or expired
    """
    security = security or get_config().security
    try:
        claims = jwt.decode(
            token,
            security.jwt_secret,
            algorithms=[security.jwt_algorithm],
            options={"require": ["exp", "sub", "user_id"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Access token expired") from e
    except jwt.PyJWTError as e:
        logger.info("access_token_rejected", reason=str(e))
        raise AuthenticationError() from e

    if not isinstance(claims.get("user_id"), int):
        raise AuthenticationError()
    return claims


# =============================================================================
# FastAPI dependencies
# =============================================================================


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Resolve the bearer token into a Principal.

    The token is only trusted for the user id; roles and names are reloaded
    from the database so revoked roles take effect immediately.

    Raises:
        AuthenticationError: Missing or invalid token, or unknown user
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(error_code=ErrorCode.AUTH_MISSING_TOKEN)

    claims = decode_access_token(credentials.credentials)
    user = await UserRepository(db).get(claims["user_id"])
    if user is None or user.email != claims["sub"]:
        raise AuthenticationError(error_code=ErrorCode.AUTH_USER_NOT_FOUND)

    set_context(user_id=user.id)
    return Principal.from_user(user)


def require_roles(*roles: RoleName) -> Callable[..., Awaitable[Principal]]:
    """Build a dependency that requires at least one of the given roles.

    Usage:
        @router.delete("/{id}")
        async def delete(principal: Principal = Depends(require_roles(RoleName.ADMIN))):
            ...
    """
    names = ", ".join(role.value for role in roles)

    async def _require(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.has_any_role(*roles):
            logger.info("role_required", required=names, user_id=principal.id)
            raise AuthorizationError(
                f"Access denied. Requires one of: {names}",
                error_code=ErrorCode.AUTH_ROLE_REQUIRED,
            )
        return principal

    return _require
