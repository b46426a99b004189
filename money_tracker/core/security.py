"""Local inspection of bearer tokens"""

import time
from typing import Any, Dict, Optional

from jose import JWTError, jwt


def decode_unverified_claims(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode a JWT payload without verifying its signature.

    The client never holds the signing key, so this is only used to read
    claims such as the expiry ahead of a request.

    Args:
        token: Encoded JWT

    Returns:
        Claims dictionary, or None if the token is not a decodable JWT
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def get_token_expiry(token: str) -> Optional[float]:
    """
    Get the `exp` claim of a token as a Unix timestamp.

    Args:
        token: Encoded JWT

    Returns:
        Expiry timestamp, or None if the token has no readable `exp` claim
    """
    claims = decode_unverified_claims(token)
    if not claims:
        return None

    exp = claims.get("exp")
    try:
        return float(exp) if exp is not None else None
    except (TypeError, ValueError):
        return None


def is_token_expired(token: str, leeway_seconds: int = 0, now: Optional[float] = None) -> bool:
    """
    Check whether a token's expiry claim is in the past.

    Tokens without a readable expiry are reported as not expired; the
    server remains the authority for those.

    Args:
        token: Encoded JWT
        leeway_seconds: Treat tokens expiring within this window as expired
        now: Current Unix time (defaults to time.time())

    Returns:
        True if the token is known to be expired
    """
    expiry = get_token_expiry(token)
    if expiry is None:
        return False

    current = time.time() if now is None else now
    return expiry <= current + leeway_seconds
