"""
API Dependencies

FastAPI dependency injection for authentication, client contexts and
permission checks.

Security: JWT tokens are verified cryptographically using Supabase JWKS (ES256)
with HS256 fallback via the JWT secret. Never decode without verification.
"""

import logging
from typing import Annotated, Optional
from uuid import UUID

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from collabhub.config.settings import get_settings
from collabhub.domain.context import ClientContext, ContextRegistry
from collabhub.domain.models import Permission, Principal, Role
from collabhub.infrastructure.exceptions import PermissionDeniedError


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Cached JWKS client. PyJWKClient caches keys internally and refreshes them.
_jwks_client: Optional[PyJWKClient] = None


def _get_jwks_client() -> PyJWKClient:
    """Return a singleton PyJWKClient for the Supabase JWKS endpoint."""
    global _jwks_client
    if _jwks_client is None:
        settings = get_settings()
        jwks_url = f"{settings.supabase_url}/auth/v1/.well-known/jwks.json"
        _jwks_client = PyJWKClient(jwks_url, cache_keys=True)
    return _jwks_client


def _decode_with_jwks(token: str, issuer: str) -> dict:
    """Verify JWT using Supabase JWKS endpoint (ES256 asymmetric keys)."""
    client = _get_jwks_client()
    signing_key = client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["ES256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


def _decode_with_secret(token: str, secret: str, issuer: str) -> dict:
    """Verify JWT using HS256 symmetric secret (legacy Supabase signing)."""
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


def verify_token(token: str) -> dict:
    """
    Verify a Supabase JWT and return its claims.

    Verification strategy (in order):
      1. JWKS (ES256), preferred, supports key rotation automatically.
      2. HS256 with ``SUPABASE_JWT_SECRET``, fallback for legacy signing.

    Raises:
        HTTPException 401: token expired, invalid, or missing a subject.
    """
    settings = get_settings()
    issuer = f"{settings.supabase_url}/auth/v1"

    payload: Optional[dict] = None

    # --- Strategy 1: JWKS (ES256) ---
    if settings.supabase_jwks_enabled:
        try:
            payload = _decode_with_jwks(token, issuer)
        except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as jwks_err:
            logger.debug("JWKS verification failed, trying HS256 fallback: %s", jwks_err)

    # --- Strategy 2: HS256 fallback ---
    if payload is None and settings.supabase_jwt_secret:
        try:
            payload = _decode_with_secret(
                token, settings.supabase_jwt_secret, issuer
            )
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
            )
        except jwt.InvalidTokenError as e:
            logger.warning("HS256 JWT verification also failed: %s", e)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return payload


def _require_credentials(
    credentials: Optional[HTTPAuthorizationCredentials],
) -> str:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    token = _require_credentials(credentials)
    verify_token(token)
    return token


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Principal built from verified token claims."""
    claims = verify_token(_require_credentials(credentials))
    try:
        return Principal(
            id=UUID(claims["sub"]),
            email=claims.get("email"),
            metadata=claims.get("user_metadata") or {},
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed user ID",
        )


# =============================================================================
# Client contexts
# =============================================================================

def get_context_registry(request: Request) -> ContextRegistry:
    return request.app.state.contexts


RegistryDep = Annotated[ContextRegistry, Depends(get_context_registry)]


async def get_client_context(
    registry: RegistryDep,
    principal: Principal = Depends(get_current_principal),
) -> ClientContext:
    """Context for the authenticated principal, created on first use."""
    return await registry.for_principal(principal)


async def get_optional_context(
    registry: RegistryDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> ClientContext:
    """
    Context for the caller, anonymous when no token is provided.

    An invalid token is still rejected with 401.
    """
    if not credentials:
        return await registry.anonymous()
    principal = await get_current_principal(credentials)
    return await registry.for_principal(principal)


ContextDep = Annotated[ClientContext, Depends(get_client_context)]
OptionalContextDep = Annotated[ClientContext, Depends(get_optional_context)]


def require_permission(permission: Permission):
    """Dependency factory: the caller's context, if it holds `permission`."""

    async def dependency(context: ContextDep) -> ClientContext:
        context.authorization.require(permission)
        return context

    return dependency


def ensure_owner(context: ClientContext, owner_id: UUID, what: str = "resource") -> None:
    """
    Reject callers that do not own `what`.

    Requests run with the service-role client, which bypasses row-level
    security, so ownership is checked here. Platform admins pass.
    """
    if context.authorization.role == Role.PLATFORM_ADMIN:
        return
    if context.principal_id != owner_id:
        raise PermissionDeniedError(
            f"Only the owner can modify this {what}",
            role=context.authorization.role.value if context.authorization.role else None,
        )
