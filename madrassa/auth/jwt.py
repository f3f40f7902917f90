"""
JWT (JSON Web Token) Utilities
=============================================================================
CONCEPT: Where does the role come from?

This service does not log anyone in. The school's session provider
authenticates the user and issues a signed JWT; we only verify the
signature and read the claims:

    {
      "sub": "j.dekker",          <- Subject (who the token is for)
      "role": "teacher",          <- Role used for every permission check
      "exp": 1705312245,          <- Expiration time (Unix timestamp)
      "iat": 1705308645           <- Issued at (Unix timestamp)
    }

The role is assigned at account creation and carried unchanged for the
lifetime of the token. Nothing here derives or upgrades it.

The payload is base64-encoded, NOT encrypted. Anyone can read it. The
signature only guarantees that nobody changed "guardian" into "admin".

create_access_token() exists for the development token script and for
tests; in production, tokens come from the session provider using the
same secret and algorithm.
=============================================================================
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from madrassa.config import settings


def create_access_token(
    data: dict,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT access token.

    PARAMETERS:
      data: Claims to include. Expected keys:
            - "sub": the username
            - "role": one of admin, secretariat, teacher, guardian, student
      expires_delta: Token lifetime. Defaults to
          settings.jwt_access_token_expire_minutes.

    RETURNS:
      The encoded token string.

    USAGE:
        token = create_access_token({"sub": "m.bakker", "role": "guardian"})
    """
    to_encode = data.copy()

    now = datetime.now(timezone.utc)
    if expires_delta is not None:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    to_encode.update({"exp": expire, "iat": now})

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Checks the signature and the "exp" claim, and requires a "sub" claim.
    The "role" claim is NOT validated here; the auth dependency turns an
    unknown role into a 401 so that the check lives next to the Role enum.

    RAISES:
      ValueError: If the token is invalid, expired, malformed, or has no
          subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        # JWTError covers expired signatures, bad claims and bad signatures.
        raise ValueError(f"Could not validate token: {e}") from e

    if "sub" not in payload:
        raise ValueError("Token payload missing 'sub' claim")

    return payload
