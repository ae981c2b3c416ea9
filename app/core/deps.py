"""
FastAPI dependencies for the identity provider boundary.

Every operation endpoint depends on get_current_actor to learn who is
acting and which capabilities their roles grant.
"""

from dataclasses import dataclass
from typing import FrozenSet

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from app.core.security import decode_token
from app.workflow.permissions import Permissions, Role, parse_roles, resolve_permissions

# HTTP Bearer token scheme (Authorization: Bearer <token>)
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    """The acting user: id, role set and resolved capabilities."""
    id: str
    roles: FrozenSet[Role]
    permissions: Permissions


def actor_from_claims(payload: dict) -> Actor:
    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return Actor(
        id=str(payload["sub"]),
        roles=parse_roles(roles),
        permissions=resolve_permissions(roles),
    )


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Actor:
    """
    Extract the acting user from the JWT bearer token.

    Raises:
        HTTPException 401: If the token is missing, invalid, expired or has no subject
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise credentials_exception

    if not payload.get("sub"):
        raise credentials_exception

    return actor_from_claims(payload)
