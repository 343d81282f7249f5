"""
Authentication Dependency for FastAPI.

- Extracts and validates the JWT from the Authorization header (HTTP) or
  the `token` query parameter (WebSocket, browsers cannot set headers there)
- The `sub` claim is the account id; `name` and `picture` are optional
  profile hints used on first sign-in
- Raises HTTPException 401 if unauthorized

Config needed (from friendchat.config.settings):
- SERVICE_AUTH_SECRET
- SERVICE_AUTH_ISSUER
- SERVICE_AUTH_AUDIENCE
"""

from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from friendchat.config.settings import Config
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId


@dataclass
class AuthAccount:
    account_id: AccountId
    name: Optional[str] = None
    picture: Optional[str] = None


security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_account_token(token: str) -> AuthAccount:
    """
    Validate a service token and return the account it authenticates.

    Raises:
        HTTPException 401 if token is invalid, expired, or missing required claims
    """
    try:
        claims = jwt.decode(
            token,
            Config.SERVICE_AUTH_SECRET,
            algorithms=["HS256"],
            audience=Config.SERVICE_AUTH_AUDIENCE,
            issuer=Config.SERVICE_AUTH_ISSUER,
            options={"require": ["exp", "iat", "aud", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")

    try:
        account_id = AccountId(claims.get("sub") or "")
    except ValueError as e:
        raise _unauthorized(f"Invalid subject claim: {e}")

    return AuthAccount(
        account_id=account_id,
        name=claims.get("name"),
        picture=claims.get("picture"),
    )


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthAccount:
    return decode_account_token(credentials.credentials)


def parse_account_id(value: str) -> AccountId:
    """Path parameter → AccountId, 422 when malformed."""
    try:
        return AccountId(value)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e


def parse_conversation_id(value: str) -> ConversationId:
    try:
        return ConversationId(value)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e
