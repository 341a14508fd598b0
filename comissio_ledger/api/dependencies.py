"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import sessionmaker

from comissio_ledger.context import AppContext, ContextRegistry
from comissio_ledger.domain.exceptions import AuthenticationError
from comissio_ledger.domain.models import IdentitySession
from comissio_ledger.infrastructure.clients.identity import IdentityClient
from comissio_ledger.infrastructure.database.session import get_session_factory

bearer_scheme = HTTPBearer(auto_error=False)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity_client(request: Request) -> IdentityClient:
    """Provide the app-wide identity provider client"""
    return request.app.state.identity


def get_context_registry(request: Request) -> ContextRegistry:
    """Provide the registry of live application contexts"""
    return request.app.state.contexts


async def require_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IdentityClient = Depends(get_identity_client),
) -> IdentitySession:
    """Validate the bearer token with the identity provider"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")
    return await identity.get_user(credentials.credentials)


def get_app_context(
    session: IdentitySession = Depends(require_session),
    session_factory: sessionmaker = Depends(get_session_factory),
    registry: ContextRegistry = Depends(get_context_registry),
) -> AppContext:
    """Application context for the signed-in operator"""
    return registry.for_session(session, session_factory)
