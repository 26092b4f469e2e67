"""Shared API dependencies for authentication and service access."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campus_mood.core.errors import EmailDomainNotAllowedError
from campus_mood.core.security import IdentityClaims, decode_access_token
from campus_mood.services.container import ServiceContainer

# HTTP Bearer scheme for identity-provider tokens
bearer_scheme = HTTPBearer()


def get_services(request: Request) -> ServiceContainer:
    """Return the service container built at application startup."""
    return request.app.state.services


# Type alias for the service container dependency
ServicesDep = Annotated[ServiceContainer, Depends(get_services)]


def authenticate(token: str, services: ServiceContainer) -> IdentityClaims:
    """Verify an identity token and the college email policy.

    Raises:
        HTTPException: 401 if the token is invalid, 403 if the email domain is not allowed.
    """
    try:
        claims = decode_access_token(token)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    try:
        services.identity.check_email(claims.email)
    except EmailDomainNotAllowedError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=err.message) from err
    return claims


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    services: ServicesDep,
) -> IdentityClaims:
    """Get the caller's identity from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials
        services: Service container

    Returns:
        Verified identity claims of the caller
    """
    return authenticate(credentials.credentials, services)


# Type alias for current identity dependency
CurrentIdentityDep = Annotated[IdentityClaims, Depends(get_current_identity)]
