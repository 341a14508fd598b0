"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from comissio_ledger.api.dependencies import require_session
from comissio_ledger.api.main import create_app
from comissio_ledger.domain.models import IdentitySession
from comissio_ledger.infrastructure.database.models import Base, Debt, Debtor, Project
from comissio_ledger.infrastructure.database.repositories import (
    DebtorRepository,
    DebtRepository,
    ProjectRepository,
)
from comissio_ledger.infrastructure.database.session import (
    enable_sqlite_foreign_keys,
    get_db,
    get_session_factory,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def operator() -> IdentitySession:
    """Signed-in operator used by authenticated endpoints"""
    return IdentitySession(
        access_token="test-token",
        refresh_token="test-refresh",
        expires_at=None,
        user_id="operator-1",
        email="ops@comissio.local",
    )


@pytest.fixture
def client(db: Session, operator: IdentitySession) -> TestClient:
    """Create FastAPI test client with test database and an authenticated operator"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[require_session] = lambda: operator
    return TestClient(app)


@pytest.fixture
def debtor(db: Session) -> Debtor:
    record = DebtorRepository(db).create(
        name="Maria Souza",
        tax_id="123.456.789-00",
        email="maria@example.com",
        phone="(11) 99999-0000",
    )
    db.commit()
    return record


@pytest.fixture
def project(db: Session) -> Project:
    record = ProjectRepository(db).create(
        name="Residencial Aurora",
        tower="A",
        unit="101",
        vgv=Decimal("240000.00"),
    )
    db.commit()
    return record


@pytest.fixture
def debt(db: Session, debtor: Debtor, project: Project) -> Debt:
    """5% of 240000.00 = 12000.00 over 12 monthly installments from 2024-01-15"""
    record = DebtRepository(db).create_with_schedule(
        debtor_id=debtor.id,
        project_id=project.id,
        commission_rate=Decimal("5"),
        installment_count=12,
        start_date=date(2024, 1, 15),
    )
    db.commit()
    return DebtRepository(db).get_with_installments(record.id)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Session factory bound to the test database (tables created by `db`)"""
    return TestingSessionLocal
