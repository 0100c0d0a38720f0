"""
Local JWT inspection.

Nothing here verifies a signature: the client never holds the signing key.
These helpers only read the ``exp`` claim so start-up can skip restoring a
session that is already dead. The server stays the authority and a 401
from it overrides anything decided here.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import jwt
from jose.exceptions import JOSEError

from civicportal.exceptions import InvalidTokenError


def decode_token_claims(token: str) -> Dict[str, Any]:
    """Decode the payload segment of a JWT without verifying it.

    Raises InvalidTokenError for anything that is not a three-segment token
    with a base64url JSON object in the middle.
    """
    if not isinstance(token, str) or token.count(".") != 2:
        raise InvalidTokenError("Token is not a dot-delimited JWT")
    try:
        claims = jwt.get_unverified_claims(token)
    except (JOSEError, ValueError, TypeError) as e:
        raise InvalidTokenError(f"Could not decode token claims: {e}") from e
    if not isinstance(claims, dict):
        raise InvalidTokenError("Token payload is not a JSON object")
    return claims


def _exp_claim(token: str) -> float:
    claims = decode_token_claims(token)
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise InvalidTokenError("Token has no numeric exp claim")
    return float(exp)


def is_token_expired(token: Optional[str], now: Optional[float] = None) -> bool:
    """
    Return True when the token's ``exp`` is in the past.

    Fails closed: a token that cannot be decoded, or carries no usable
    ``exp``, is reported as expired.
    """
    if not token:
        return True
    current_time = time.time() if now is None else now
    try:
        exp = _exp_claim(token)
    except InvalidTokenError:
        return True
    return exp < current_time


def token_expires_at(token: Optional[str]) -> Optional[datetime]:
    """Expiry of a token as an aware datetime, or None if unreadable"""
    if not token:
        return None
    try:
        return datetime.fromtimestamp(_exp_claim(token), tz=timezone.utc)
    except (InvalidTokenError, OverflowError, OSError, ValueError):
        return None
