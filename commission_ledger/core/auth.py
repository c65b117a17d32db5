from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from fastapi import HTTPException, Request

from commission_ledger.core.config import settings


class ActorRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


@dataclass(frozen=True)
class Actor:
    """The back-office user on whose behalf an operation runs."""

    id: str
    name: str
    role: ActorRole = ActorRole.STAFF

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN


def create_actor_token(actor: Actor, expires_in: timedelta = timedelta(hours=12)) -> str:
    """Issue a signed bearer token for an actor."""
    payload = {
        "sub": actor.id,
        "name": actor.name,
        "role": actor.role.value,
        "exp": datetime.now(UTC) + expires_in,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_actor_token(token: str) -> Actor:
    """Decode a bearer token into an Actor.

    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
    """
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if not payload.get("sub"):
        raise jwt.InvalidTokenError("Token has no subject")
    return Actor(
        id=str(payload["sub"]),
        name=str(payload.get("name") or payload["sub"]),
        role=ActorRole(payload.get("role", ActorRole.STAFF.value)),
    )


def get_current_actor(request: Request) -> Actor:
    """Resolve the calling actor from the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Authorization header is required")

    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = auth_header[7:]
    if not token:
        raise HTTPException(status_code=401, detail="Token is required")

    try:
        return decode_actor_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired") from None
    except (jwt.InvalidTokenError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token") from None
