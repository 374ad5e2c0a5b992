"""Shared test fixtures for the lead engine.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
Outbound integrations are replaced with AsyncMock-backed fakes.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import leadengine.models  # noqa: F401 - registers every table on Base.metadata
from leadengine.core.config import settings
from leadengine.core.database import Base, get_db
from leadengine.core.deps import get_integrations
from leadengine.main import app
from leadengine.models.lead import Language, LeadUrgency
from leadengine.schemas.qualification import ExtractedData, QualificationResult
from leadengine.services.auto_reply import AutoReplyResult
from leadengine.services.hubspot import HubSpotSyncResult
from leadengine.services.lead_processor import Integrations
from leadengine.services.whatsapp import NotificationResult

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
WORKER_SECRET = "test-worker-secret"


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    """Direct DB session for test setup/assertions."""
    async with session_factory() as session:
        yield session


def build_verdict(
    is_lead=True,
    urgency=LeadUrgency.HIGH,
    intent_score=92.0,
    suggested_reply="Hi! We can send a plumber today. What's your address?",
    name=None,
    email=None,
    phone=None,
):
    return QualificationResult(
        is_lead=is_lead,
        urgency=urgency,
        intent_score=intent_score,
        suggested_reply=suggested_reply,
        extracted_data=ExtractedData(name=name, email=email, phone=phone, service_requested="plumbing"),
        language_detected=Language.ENGLISH,
        reasoning="Urgent service request",
    )


@pytest.fixture
def make_verdict():
    return build_verdict


@pytest.fixture
def integrations():
    """Fakes for every outbound integration, all succeeding by default."""
    qualifier = MagicMock()
    qualifier.qualify = AsyncMock(return_value=build_verdict())

    hubspot = MagicMock()
    hubspot.sync_lead = AsyncMock(
        return_value=HubSpotSyncResult(success=True, contact_id="501", deal_id="901", action="created")
    )

    whatsapp = MagicMock()
    whatsapp.send_lead_alert = AsyncMock(return_value=NotificationResult(success=True, message_sid="SM123"))

    auto_reply = MagicMock()
    auto_reply.send_auto_reply = AsyncMock(return_value=AutoReplyResult(success=True, reply_id="r-1"))

    return Integrations(qualifier=qualifier, hubspot=hubspot, whatsapp=whatsapp, auto_reply=auto_reply)


@pytest.fixture
def worker_secret(monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", WORKER_SECRET)
    return WORKER_SECRET


@pytest.fixture
def auth_headers(worker_secret):
    return {"Authorization": f"Bearer {worker_secret}"}


@pytest_asyncio.fixture
async def client(session_factory, integrations):
    """Async HTTP test client wired to the test database and fake integrations."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_integrations] = lambda: integrations

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
