from __future__ import annotations

import time
from typing import Any, Dict, Optional
import logging

import httpx
from jose import jwk, jwt
from jose.exceptions import JWKError, JWTError
from fastapi import HTTPException, status

from boost_portal.config import settings


logger = logging.getLogger("auth.clerk")


class _JWKSCache:
    def __init__(self, ttl_seconds: int = 300) -> None:
        self.jwks: Optional[Dict[str, Any]] = None
        self.cached_at: float = 0.0
        self.ttl_seconds = ttl_seconds

    def get(self) -> Optional[Dict[str, Any]]:
        if self.jwks and (time.time() - self.cached_at) < self.ttl_seconds:
            return self.jwks
        return None

    def set(self, jwks: Optional[Dict[str, Any]]) -> None:
        self.jwks = jwks
        self.cached_at = time.time()

    def clear(self) -> None:
        self.set(None)


_cache = _JWKSCache()


def _unauthorized(detail: str = "Invalid token") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _fetch_jwks() -> Dict[str, Any]:
    cached = _cache.get()
    if cached:
        return cached
    try:
        resp = httpx.get(settings.CLERK_JWKS_URL, timeout=10)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as exc:
        logger.exception("JWKS fetch failed", extra={"jwks_url": settings.CLERK_JWKS_URL})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to fetch Clerk JWKS",
        ) from exc
    _cache.set(data)
    return data


def _lookup_key(jwks: Dict[str, Any], kid: str) -> Optional[Dict[str, Any]]:
    return next((key for key in jwks.get("keys", []) if key.get("kid") == kid), None)


def _signing_key(token: str) -> Dict[str, Any]:
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError as exc:
        logger.warning("Invalid token header", exc_info=exc)
        raise _unauthorized() from exc
    if not kid:
        raise _unauthorized("Missing kid in token")
    key = _lookup_key(_fetch_jwks(), kid)
    if key is None:
        # Keys rotate; refetch once before giving up.
        _cache.clear()
        key = _lookup_key(_fetch_jwks(), kid)
    if key is None:
        logger.warning("Signing key not found", extra={"kid": kid})
        raise _unauthorized("Signing key not found")
    return key


def _audience_accepted(claims: Dict[str, Any]) -> bool:
    """Tokens without ``aud`` (Clerk session tokens) pass; otherwise one value must be configured."""
    if "aud" not in claims:
        return True
    token_audience = claims["aud"]
    if isinstance(token_audience, str):
        token_audience = [token_audience]
    if not isinstance(token_audience, list):
        return False
    return bool(set(token_audience) & set(settings.CLERK_AUDIENCE))


def verify_clerk_token(token: str) -> Dict[str, Any]:
    public_key = _signing_key(token)
    algorithm = public_key.get("alg", "RS256")
    try:
        pem = jwk.construct(public_key, algorithm=algorithm).to_pem().decode()
        # python-jose only compares against a single audience string, so the list is checked below.
        claims = jwt.decode(
            token,
            key=pem,
            algorithms=[algorithm],
            issuer=settings.CLERK_JWT_ISSUER,
            options={"verify_aud": False},
        )
    except (JWTError, JWKError, ValueError) as exc:
        logger.warning("Token verification failed", exc_info=exc)
        raise _unauthorized() from exc
    if not _audience_accepted(claims):
        logger.warning("Token audience rejected", extra={"aud": claims.get("aud"), "sub": claims.get("sub")})
        raise _unauthorized()
    logger.debug(
        "Verified Clerk token",
        extra={"kid": public_key.get("kid"), "iss": claims.get("iss"), "sub": claims.get("sub")},
    )
    return claims


def identity_claims(claims: Dict[str, Any]) -> tuple[Optional[str], Optional[str]]:
    """``(sub, email)`` from verified claims, email read from ``CLERK_EMAIL_CLAIM``."""
    email = claims.get(settings.CLERK_EMAIL_CLAIM) or claims.get("email")
    if email is not None:
        email = str(email).strip().lower() or None
    return claims.get("sub"), email
