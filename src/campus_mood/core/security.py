"""Identity-provider token helpers and the college email policy."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from campus_mood.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityClaims:
    """The parts of a verified identity the service relies on."""

    user_id: str
    email: str
    display_name: str | None = None


def create_access_token(
    user_id: str,
    email: str,
    display_name: str | None = None,
    *,
    expires_minutes: int | None = None,
) -> str:
    """Create a signed token in the identity provider's format.

    Used by local tooling and tests; in production the provider issues tokens.
    """
    expire = datetime.now(UTC) + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    to_encode: dict[str, object] = {"sub": user_id, "email": email, "exp": expire}
    if display_name:
        to_encode["name"] = display_name
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> IdentityClaims:
    """Verify a token and return its identity claims.

    Raises:
        ValueError: If the token is invalid, expired or lacks ``sub``/``email``.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise ValueError("Could not validate credentials") from err

    subject = payload.get("sub")
    email = payload.get("email")
    if not subject or not email:
        raise ValueError("Could not validate credentials")
    return IdentityClaims(user_id=str(subject), email=str(email), display_name=payload.get("name"))


def is_allowed_email(email: str, allowed_domains: list[str]) -> bool:
    """Return True if the email's domain is one of the allowed college domains.

    An empty allow-list admits every address. That is a development fallback
    and is logged as such; production must configure ``ALLOWED_EMAIL_DOMAINS``.
    """
    if not allowed_domains:
        logger.warning("No email domains configured. Allowing all emails for development.")
        return True

    _, _, domain = email.rpartition("@")
    domain = domain.lower()
    return bool(domain) and any(domain == allowed.lower() for allowed in allowed_domains)
