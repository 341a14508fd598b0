"""Operator sign-in, token refresh, sign-out and session lookup"""

from fastapi import APIRouter, Depends, Response

from comissio_ledger.api.dependencies import get_identity_client, require_session
from comissio_ledger.api.v1.schemas import LoginRequest, RefreshRequest, SessionResponse
from comissio_ledger.domain.models import IdentitySession
from comissio_ledger.infrastructure.clients.identity import IdentityClient

router = APIRouter()


def session_response(session: IdentitySession) -> SessionResponse:
    return SessionResponse(
        user_id=session.user_id,
        email=session.email,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
    )


@router.post("/auth/login", response_model=SessionResponse)
async def login(
    request_body: LoginRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Exchange e-mail and password for a session.

    Bad credentials surface as 401 with the provider's message; the session
    is not established.
    """
    session = await identity.sign_in(request_body.email, request_body.password)
    return session_response(session)


@router.post("/auth/refresh", response_model=SessionResponse)
async def refresh(
    request_body: RefreshRequest,
    identity: IdentityClient = Depends(get_identity_client),
):
    """
    Trade a refresh token for a new session.

    No bearer token is required since the access token may already have
    expired. A spent or unknown refresh token is a 401.
    """
    session = await identity.exchange_refresh_token(request_body.refresh_token)
    return session_response(session)


@router.post("/auth/logout", status_code=204)
async def logout(
    session: IdentitySession = Depends(require_session),
    identity: IdentityClient = Depends(get_identity_client),
):
    """Revoke the session; the operator's application context is torn down"""
    await identity.sign_out(session)
    return Response(status_code=204)


@router.get("/auth/session", response_model=SessionResponse)
def current_session(session: IdentitySession = Depends(require_session)):
    return SessionResponse(user_id=session.user_id, email=session.email)
