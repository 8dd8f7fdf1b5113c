"""Shared fixtures: in-memory database, recording mailer, test client."""
import copy
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from ticketdesk.config import Settings
from ticketdesk.database import create_engine, create_session_factory, init_db
from ticketdesk.main import create_app
from ticketdesk.models import Company, Profile, Ticket
from ticketdesk.services.notification_service import RecordingMailer


SUBMISSION = {
    "ticket": {
        "subject": "Printer down",
        "description": "No power",
        "priority": "high",
    },
    "user": {
        "firstName": "Jane",
        "surname": "Doe",
        "email": "jane@x.com",
        "phone": "0821234567",
        "companyName": "Acme",
        "anyDeskId": "123 456 789",
    },
}


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite+aiosqlite://",
        "smtp_host": "",
        "smtp_user": "desk@piot.co.za",
        "support_email": "support@piot.co.za",
        "base_url": "https://support.example.com",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_ticket(**fields) -> Ticket:
    values = {
        "ticket_number": "PIOT-TEST1",
        "subject": "Laptop slow",
        "description": "Takes ages to boot",
        "priority": "medium",
        "status": "unassigned",
        "contact_preference": "asap",
    }
    values.update(fields)
    return Ticket(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def mailer():
    return RecordingMailer()


# ---------------------------------------------------------------------------
# Service-level fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine(settings):
    engine = create_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def acme(db):
    """A company with one registered profile."""
    company = Company(name="Acme")
    db.add(company)
    await db.flush()
    profile = Profile(
        first_name="Jane",
        surname="Doe",
        email="jane@x.com",
        phone="0821234567",
        company_id=company.id,
    )
    db.add(profile)
    await db.commit()
    return company, profile


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app(settings, mailer):
    return create_app(settings, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def seed(client):
    """Insert ORM objects through the running app's session factory."""

    def _seed(*objects):
        async def _add():
            async with client.app.state.session_factory() as session:
                session.add_all(objects)
                await session.commit()

        client.portal.call(_add)
        return objects

    return _seed


@pytest.fixture
def fixed_time():
    return datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def submission():
    """The example submission payload; a fresh copy per test."""
    return copy.deepcopy(SUBMISSION)


@pytest.fixture
def ticket_factory():
    return make_ticket


@pytest.fixture
def settings_factory():
    return make_settings
