"""Caller identity for API routes.

A bearer token identifies a signed-in user (tokens are issued elsewhere; only
the signature is checked here). Without a token, a well-formed ``x-guest-id``
header identifies a guest whose cart lives under that UUID.
"""

import re
from dataclasses import dataclass

import jwt
from fastapi import Depends, Header

from bookstore.config import get_settings
from bookstore.errors import Forbidden, Unauthorized

GUEST_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_GUEST = "guest"


@dataclass(frozen=True)
class Identity:
    id: str
    role: str = ROLE_USER

    @property
    def is_guest(self) -> bool:
        return self.role == ROLE_GUEST

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def decode_token(token: str) -> Identity:
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired") from None
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token") from None

    user_id = claims.get("id") or claims.get("sub")
    if not user_id:
        raise Unauthorized("Token does not identify a user")
    role = ROLE_ADMIN if claims.get("role") == ROLE_ADMIN else ROLE_USER
    return Identity(id=str(user_id), role=role)


def issue_token(user_id: str, role: str = ROLE_USER) -> str:
    """Sign a token the way the account service does. Used by tests and local tooling."""
    settings = get_settings()
    return jwt.encode({"id": user_id, "role": role}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def resolve_identity(
    authorization: str | None = Header(default=None),
    x_guest_id: str | None = Header(default=None),
) -> Identity | None:
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthorized("Authorization header must be 'Bearer <token>'")
        return decode_token(token.strip())

    if x_guest_id and GUEST_ID_PATTERN.match(x_guest_id):
        return Identity(id=x_guest_id.lower(), role=ROLE_GUEST)
    return None


def current_identity(identity: Identity | None = Depends(resolve_identity)) -> Identity:
    """A signed-in user or a guest."""
    if identity is None:
        raise Unauthorized()
    return identity


def current_user(identity: Identity = Depends(current_identity)) -> Identity:
    """A signed-in user; guests are turned away."""
    if identity.is_guest:
        raise Unauthorized("Sign in to continue")
    return identity


def current_admin(identity: Identity = Depends(current_user)) -> Identity:
    if not identity.is_admin:
        raise Forbidden("Admin access required")
    return identity


def guest_id_header(x_guest_id: str | None = Header(default=None)) -> str | None:
    """The guest id sent alongside a user's token, used when merging carts at sign-in."""
    if x_guest_id and GUEST_ID_PATTERN.match(x_guest_id):
        return x_guest_id.lower()
    return None
