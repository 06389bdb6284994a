"""Shared API dependencies for admin access and service wiring."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.requests import HTTPConnection
from sqlalchemy.orm import Session

from top_chart.core.security import admin_key_matches, client_address, client_agent
from top_chart.core.settings import settings
from top_chart.db.session import get_db
from top_chart.services.captcha import CaptchaVerifier, get_captcha_verifier
from top_chart.services.moderation import ModerationService
from top_chart.services.voting import VotingService, get_voting_service

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_voting_service_dep(conn: HTTPConnection) -> VotingService:
    """Return the voting service attached to the running application."""
    service = getattr(conn.app.state, "voting_service", None)
    if service is None:
        service = get_voting_service()
        conn.app.state.voting_service = service
    return service


def get_moderation_service_dep(
    voting: Annotated[VotingService, Depends(get_voting_service_dep)],
) -> ModerationService:
    """Return a moderation service sharing the voting service's ranking cycle."""
    return ModerationService(voting.coordinator)


def get_captcha_verifier_dep() -> CaptchaVerifier:
    """Return the captcha verifier."""
    return get_captcha_verifier()


def require_admin(
    x_admin_key: Annotated[str | None, Header(alias="X-Admin-Key")] = None,
) -> None:
    """Reject the request unless it carries the configured admin key.

    Raises:
        HTTPException: If the header is missing or does not match
    """
    if not admin_key_matches(x_admin_key, settings.admin_api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
        )


def get_client_identity(conn: HTTPConnection) -> tuple[str, str]:
    """Return the (address, user agent) pair used to fingerprint a voter."""
    address = client_address(conn, trust_forwarded_for=settings.trust_forwarded_for)
    return address, client_agent(conn)


VotingServiceDep = Annotated[VotingService, Depends(get_voting_service_dep)]
ModerationServiceDep = Annotated[ModerationService, Depends(get_moderation_service_dep)]
CaptchaVerifierDep = Annotated[CaptchaVerifier, Depends(get_captcha_verifier_dep)]
ClientIdentityDep = Annotated[tuple[str, str], Depends(get_client_identity)]
AdminDep = Depends(require_admin)
