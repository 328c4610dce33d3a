"""
JWT utilities for issuing and verifying access tokens.

Functions
---------
create_access_token(data: dict, settings: Settings) -> str
    Creates a signed JWT access token with `exp`, `iss` and `aud` claims.
verify_token(token: str, settings: Settings) -> str | None
    Verify a JWT's signature, expiration, issuer and audience and return the
    subject (`sub`) if valid.
parse_uuid(value: str) -> UUID | None
    Lenient id parsing; malformed ids behave like unknown ids.

Settings contract
-----------------
SECRET_KEY : str
    HMAC signing key for JWTs.
ALGORITHM : str
    JWT signing algorithm (e.g., "HS256").
ACCESS_TOKEN_EXPIRE_MINUTES : int
    Token lifetime window in minutes.
TOKEN_ISSUER, TOKEN_AUDIENCE : str
    Values written to and required from the `iss` / `aud` claims.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from jose import jwt, JWTError

from humanlenk.database.config.config import Settings

logger = logging.getLogger(__name__)


def create_access_token(data: dict, settings: Settings) -> str:
    """
    Create a signed JWT access token.

    Parameters
    ----------
    data : dict
        Claims to embed in the token; `sub` carries the user id and is
        returned again by `verify_token`.
    settings : Settings
        Application settings holding the signing parameters.

    Returns
    -------
    str
        Encoded JWT string.
    """
    encoding = data.copy()
    # exp is a NumericDate (seconds since epoch)
    expires = int(datetime.now(timezone.utc).timestamp()) + (int(settings.ACCESS_TOKEN_EXPIRE_MINUTES) * 60)
    encoding.update({"exp": expires, "iss": settings.TOKEN_ISSUER, "aud": settings.TOKEN_AUDIENCE})
    return jwt.encode(encoding, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str, settings: Settings) -> Optional[str]:
    """
    Verify a JWT and return its subject.

    Returns
    -------
    str | None
        The `sub` claim if the token is valid, otherwise None (invalid
        signature, expired, wrong issuer/audience, malformed).
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.TOKEN_AUDIENCE,
            issuer=settings.TOKEN_ISSUER,
        )
        return payload.get("sub")
    except JWTError as e:
        logger.info("Rejected access token: %s", e)
        return None


def parse_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None
