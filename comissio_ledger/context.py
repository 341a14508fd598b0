"""Application context - explicit per-operator state tied to the identity session lifecycle"""

import asyncio
import logging
from datetime import date, datetime
from typing import Callable, Dict, Optional, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from comissio_ledger.domain.exceptions import StoreError
from comissio_ledger.domain.models import IdentitySession, SessionEvent, Workspace
from comissio_ledger.infrastructure.database.repositories import DebtorRepository, DebtRepository, ProjectRepository
from comissio_ledger.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _fetch(session_factory: sessionmaker, query: Callable[[Session], T]) -> T:
    """Run one read on its own session so concurrent fetches never share a connection"""
    db = session_factory()
    try:
        return query(db)
    finally:
        db.close()


async def load_workspace(session_factory: sessionmaker) -> Workspace:
    """
    Initial load: debtors, projects and debts (with installments) fetched concurrently.

    Fail-fast: if any fetch fails the whole load fails with that store error
    and no partial workspace is returned. Fetches already in flight run to
    completion; there is no cancellation.
    """
    try:
        debtors, projects, debts = await asyncio.gather(
            asyncio.to_thread(_fetch, session_factory, lambda db: DebtorRepository(db).list_all("name")),
            asyncio.to_thread(_fetch, session_factory, lambda db: ProjectRepository(db).list_all("name")),
            asyncio.to_thread(_fetch, session_factory, lambda db: DebtRepository(db).list_with_installments()),
        )
    except StoreError as e:
        logger.error(f"Initial load failed: {e}")
        raise

    return Workspace(debtors=debtors, projects=projects, debts=debts)


class AppContext:
    """
    State for one signed-in operator.

    Built when a session is first seen, closed when that session signs out.
    Holds the identity session, the store session factory, a clock, and the
    cached workspace snapshot.
    """

    def __init__(
        self,
        identity: IdentitySession,
        session_factory: sessionmaker,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.identity = identity
        self.session_factory = session_factory
        self.clock = clock
        self.closed = False
        self._workspace: Optional[Workspace] = None

    def today(self) -> date:
        return self.clock().date()

    async def workspace(self, refresh: bool = False) -> Workspace:
        """Cached snapshot; reloaded after invalidate() or when refresh is requested"""
        if self.closed:
            raise RuntimeError("Application context is closed")
        if refresh or self._workspace is None:
            self._workspace = await load_workspace(self.session_factory)
        return self._workspace

    def invalidate(self) -> None:
        self._workspace = None

    def close(self) -> None:
        self._workspace = None
        self.closed = True


class ContextRegistry:
    """Live application contexts keyed by user id"""

    def __init__(self):
        self._contexts: Dict[str, AppContext] = {}

    def for_session(self, identity: IdentitySession, session_factory: sessionmaker) -> AppContext:
        context = self._contexts.get(identity.user_id)
        if context is None or context.closed or context.session_factory is not session_factory:
            context = AppContext(identity, session_factory)
            self._contexts[identity.user_id] = context
        else:
            context.identity = identity
        return context

    def invalidate_all(self) -> None:
        """Drop every cached workspace after a mutation"""
        for context in self._contexts.values():
            context.invalidate()

    def close(self, user_id: str) -> None:
        context = self._contexts.pop(user_id, None)
        if context is not None:
            context.close()

    def handle_session_event(self, event: SessionEvent, identity: Optional[IdentitySession]) -> None:
        """Identity listener: follow token refreshes, tear the context down on sign-out"""
        if event is SessionEvent.TOKEN_REFRESHED:
            context = self._contexts.get(identity.user_id) if identity else None
            if context is not None:
                context.identity = identity
            return
        if event is not SessionEvent.SIGNED_OUT:
            return
        if identity is None:
            for user_id in list(self._contexts):
                self.close(user_id)
        else:
            self.close(identity.user_id)
