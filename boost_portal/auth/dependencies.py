import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from boost_portal.auth.clerk import identity_claims, verify_clerk_token
from boost_portal.auth.resolution import Principal, resolve_actor
from boost_portal.db.deps import get_session
from boost_portal.policy.context import Actor


bearer_scheme = HTTPBearer(auto_error=False)
logger = logging.getLogger("auth.deps")


def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    claims = verify_clerk_token(credentials.credentials)
    user_id, email = identity_claims(claims)
    if not user_id or not email:
        logger.warning(
            "Token missing identity claims",
            extra={"sub": user_id, "claims_keys": list(claims.keys())},
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token claims")
    return Principal(id=user_id, email=email)


def get_current_actor(
    principal: Principal = Depends(get_current_principal),
    session: Session = Depends(get_session),
) -> Actor:
    actor = resolve_actor(session, principal)
    logger.debug("Actor resolved", extra={"sub": actor.id, **actor.describe()})
    return actor
