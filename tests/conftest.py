"""
Test fixtures for Entity Access Core.

This module provides shared test fixtures including database setup,
seeded example entities, key material and configuration isolation.
"""

import uuid

import nacl.utils
import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from entity_access_core.config import reset_config
from entity_access_core.db import Base
from entity_access_core.exceptions import clear_correlation_id
from entity_access_core.services import IdentifierResolver
from entity_access_core.utils.logger import reset_logging

from tests.fixtures.example_models import (
    PROJECT_ALPHA_ID,
    PROJECT_BETA_ID,
    PROJECT_GAMMA_ID,
    Attachment,
    Project,
    Ticket,
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep each test independent of the host environment and global state."""
    for variable in (
        "ENCRYPTION_KEY",
        "IDENTIFIER_ATTRIBUTE",
        "LOG_LEVEL",
        "LOG_QUEUE_ENABLED",
    ):
        monkeypatch.delenv(variable, raising=False)
    monkeypatch.setenv("AzureWebJobsStorage", "")

    reset_config()
    reset_logging()
    clear_correlation_id()
    yield
    reset_config()
    reset_logging()
    clear_correlation_id()


@pytest.fixture(scope="session")
def db_engine() -> Engine:
    """Create a SQLite in-memory engine shared by the whole test session."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine: Engine) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test so rows never
    leak between tests.
    """
    Base.metadata.create_all(db_engine)
    session = sessionmaker(bind=db_engine)()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(db_engine)


@pytest.fixture
def seeded_projects(db_session):
    """Three projects; alpha and beta share the first 8 hex digits."""
    projects = {
        "alpha": Project(id=uuid.UUID(PROJECT_ALPHA_ID), name="Alpha"),
        "beta": Project(id=uuid.UUID(PROJECT_BETA_ID), name="Beta"),
        "gamma": Project(id=uuid.UUID(PROJECT_GAMMA_ID), name="Gamma"),
    }
    db_session.add_all(projects.values())
    db_session.flush()
    return projects


@pytest.fixture
def seeded_tickets(db_session):
    """Tickets mirroring the project identifiers; gamma is stored upper-case."""
    tickets = {
        "alpha": Ticket(id=PROJECT_ALPHA_ID, title="Alpha"),
        "beta": Ticket(id=PROJECT_BETA_ID, title="Beta"),
        "gamma": Ticket(id=PROJECT_GAMMA_ID.upper(), title="Gamma"),
    }
    db_session.add_all(tickets.values())
    db_session.flush()
    return tickets


@pytest.fixture
def seeded_attachments(db_session):
    """Attachments keyed by raw bytes of the project identifiers."""
    attachments = {
        "alpha": Attachment(id=uuid.UUID(PROJECT_ALPHA_ID).bytes, filename="alpha.pdf"),
        "beta": Attachment(id=uuid.UUID(PROJECT_BETA_ID).bytes, filename="beta.pdf"),
        "gamma": Attachment(id=uuid.UUID(PROJECT_GAMMA_ID).bytes, filename="gamma.pdf"),
    }
    db_session.add_all(attachments.values())
    db_session.flush()
    return attachments


@pytest.fixture
def resolver(db_session) -> IdentifierResolver:
    """Resolver over the test session using each entity's primary key."""
    return IdentifierResolver.for_session(db_session)


@pytest.fixture
def encryption_key() -> bytes:
    """Fresh 32 bytes of key material."""
    return nacl.utils.random(32)


@pytest.fixture
def other_key() -> bytes:
    """A second, unrelated key."""
    return nacl.utils.random(32)
