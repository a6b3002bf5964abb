"""Google ID token verification for federated sign-in."""

import logging

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from memantra.schemas.auth import GoogleIdentity

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


def _is_verified(claims: dict) -> bool:
    # Older tokens carry the flag as the string "true".
    return claims.get("email_verified") in (True, "true")


def verify_google_id_token(token: str, audience: str | None) -> GoogleIdentity | None:
    """
    Verify a Google-issued ID token for the given OAuth client id.

    Returns the verified identity, or None when the token is malformed, expired,
    issued for another audience or by an untrusted issuer, or carries no email
    that Google has verified. An unverified email must never be trusted to
    match an existing account.
    """
    if not audience:
        logger.error("GOOGLE_CLIENT_ID is not configured; rejecting Google sign-in")
        return None
    try:
        claims = id_token.verify_oauth2_token(token, google_requests.Request(), audience)
    except (ValueError, google_exceptions.GoogleAuthError) as e:
        logger.warning("Google ID token rejected: %s", e)
        return None

    if claims.get("iss") not in GOOGLE_ISSUERS:
        logger.warning("Google ID token has untrusted issuer: %s", claims.get("iss"))
        return None
    email = claims.get("email")
    if not email or not claims.get("sub"):
        logger.warning("Google ID token has no email or subject claim")
        return None
    if not _is_verified(claims):
        logger.warning("Google ID token email is not verified")
        return None
    return GoogleIdentity(
        subject=str(claims["sub"]),
        email=email,
        name=claims.get("name"),
    )
