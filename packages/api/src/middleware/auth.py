# This project was developed with assistance from AI tools.
"""
JWT authentication middleware for Keycloak OIDC.

Validates Bearer tokens against Keycloak's JWKS endpoint, extracts user
identity and role, and provides FastAPI dependencies for route-level auth.

Set AUTH_DISABLED=true to bypass validation (tests / local dev without Keycloak).
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from db.enums import UserRole
from fastapi import Depends, HTTPException, Request, status

from ..core.config import settings
from ..schemas.auth import DataScope, TokenPayload, UserContext

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# JWKS cache
# ---------------------------------------------------------------------------

_jwks_data: dict | None = None
_jwks_fetched_at: float = 0


def _fetch_jwks() -> dict:
    """Fetch JSON Web Key Set from Keycloak. Raises on failure."""
    url = (
        f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"
        "/protocol/openid-connect/certs"
    )
    response = httpx.get(url, timeout=5)
    response.raise_for_status()
    return response.json()


def _get_jwks(force_refresh: bool = False) -> dict:
    """Return cached JWKS, refreshing if stale or forced."""
    global _jwks_data, _jwks_fetched_at  # noqa: PLW0603

    now = time.time()
    if _jwks_data is None or force_refresh or (now - _jwks_fetched_at) > settings.JWKS_CACHE_TTL:
        _jwks_data = _fetch_jwks()
        _jwks_fetched_at = now

    return _jwks_data


def _find_key(jwks: dict, kid: str | None) -> jwt.PyJWK | None:
    for key in jwt.PyJWKSet.from_dict(jwks).keys:
        if key.key_id == kid:
            return key
    return None


def _get_signing_key(token: str) -> jwt.PyJWK:
    """Find the signing key for the given token from the JWKS."""
    try:
        kid = jwt.get_unverified_header(token).get("kid")
        key = _find_key(_get_jwks(), kid)
        if key is None:
            # kid not found -- cache-bust and retry once (key rotation)
            key = _find_key(_get_jwks(force_refresh=True), kid)
        if key is None:
            raise jwt.InvalidTokenError(f"No matching key found for kid={kid}")
        return key

    except (httpx.HTTPError, httpx.TimeoutException) as exc:
        logger.error("Failed to fetch JWKS from Keycloak: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        ) from exc


# ---------------------------------------------------------------------------
# Token validation
# ---------------------------------------------------------------------------

def _extract_token(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:]
    return None


def _decode_token(token: str) -> TokenPayload:
    """Validate and decode a JWT against Keycloak's JWKS."""
    signing_key = _get_signing_key(token)
    issuer = f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"

    payload = jwt.decode(
        token,
        signing_key.key,
        algorithms=["RS256"],
        issuer=issuer,
        options={"verify_aud": False},
    )
    return TokenPayload(**payload)


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    """Extract the primary role from realm_access.roles.

    When several registry roles are present the most privileged one wins.
    """
    roles = set(token_payload.realm_access.get("roles", []))

    for role in (UserRole.SUPERADMIN, UserRole.BARANGAY_ADMIN, UserRole.APPLICANT):
        if role.value in roles:
            return role

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="No recognized role assigned",
    )


def _build_data_scope(role: UserRole, token_payload: TokenPayload) -> DataScope:
    """Build data scope rules based on the user's role."""
    if role == UserRole.SUPERADMIN:
        return DataScope(all_barangays=True)
    if role == UserRole.BARANGAY_ADMIN:
        if not token_payload.barangay:
            logger.warning("Barangay admin %s has no barangay claim", token_payload.sub)
        return DataScope(barangay=token_payload.barangay or None)
    return DataScope(own_data_only=True, user_id=token_payload.sub)


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------

_DISABLED_USER = UserContext(
    user_id="dev-user",
    role=UserRole.SUPERADMIN,
    email="dev@solo-parent.local",
    name="Dev User",
    data_scope=DataScope(all_barangays=True),
)


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: validate JWT and return UserContext.

    When AUTH_DISABLED=true, returns a dev superadmin without token validation.
    """
    if settings.AUTH_DISABLED:
        return _DISABLED_USER

    token = _extract_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except jwt.InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    role = _resolve_role(payload)

    return UserContext(
        user_id=payload.sub,
        role=role,
        email=payload.email,
        name=payload.name or payload.preferred_username,
        data_scope=_build_data_scope(role, payload),
    )


# Type alias for use in route signatures
CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Dependency factory: restrict a route to specific roles.

    Usage:
        @router.get("/staff-only", dependencies=[Depends(require_roles(UserRole.SUPERADMIN))])
    """

    async def _check(user: CurrentUser) -> UserContext:
        if user.role not in allowed_roles:
            logger.warning(
                "RBAC denied: user=%s role=%s attempted route requiring %s",
                user.user_id,
                user.role.value,
                [r.value for r in allowed_roles],
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check
