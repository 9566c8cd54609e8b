"""Pytest configuration and fixtures for testing."""

import os

# Settings are read at import time, so the test environment goes first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_URL"] = "redis://localhost:6399/15"
os.environ["CHAT_MODE"] = "pipeline"
os.environ["LINE_CHANNEL_SECRET"] = "test-channel-secret"
os.environ["LINE_CHANNEL_ACCESS_TOKEN"] = "test-channel-token"
os.environ["ADMIN_BYPASS_TOKEN"] = "test-admin-token"

from typing import AsyncGenerator, Dict, List  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from docchat.api.deps import get_llm_client  # noqa: E402
from docchat.database import Base, get_db  # noqa: E402
from docchat.main import app  # noqa: E402
from docchat.models import Document, DocumentSection  # noqa: E402
from docchat.schemas.chat import Source  # noqa: E402
from docchat.services.llm.ollama_client import OllamaClient  # noqa: E402
from tests.utils import make_source  # noqa: E402

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create test database and session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def async_client(test_db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Data Factories
# ============================================================================


@pytest_asyncio.fixture
async def seeded_documents(test_db: AsyncSession) -> Dict[str, Document]:
    """Two documents with ordered sections about activities and membership."""
    activities = Document(title="Pedoman Kegiatan", doc_type="pedoman")
    activities.sections = [
        DocumentSection(
            section_title="Pengajuan Kegiatan",
            content="Pengajuan kegiatan harus dilakukan minimal 14 hari sebelum pelaksanaan.",
            section_order=1,
        ),
        DocumentSection(
            section_title="Laporan Kegiatan",
            content="Laporan kegiatan diserahkan paling lambat 7 hari setelah kegiatan selesai.",
            section_order=2,
        ),
    ]
    membership = Document(title="AD/ART", doc_type="anggaran dasar")
    membership.sections = [
        DocumentSection(
            section_title="Keanggotaan",
            content="Anggota adalah seluruh mahasiswa S1 yang terdaftar aktif.",
            section_order=2,
        ),
        DocumentSection(
            section_title="Nama dan Kedudukan",
            content="Organisasi ini bernama Keluarga Mahasiswa.",
            section_order=1,
        ),
    ]

    test_db.add_all([activities, membership])
    await test_db.commit()
    await test_db.refresh(activities)
    await test_db.refresh(membership)
    return {"activities": activities, "membership": membership}


@pytest.fixture
def sources() -> List[Source]:
    """Three distinct passages."""
    return [
        make_source("Pedoman Kegiatan", "Pengajuan Kegiatan"),
        make_source("Pedoman Kegiatan", "Laporan Kegiatan"),
        make_source("AD/ART", "Keanggotaan"),
    ]


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_ollama(mocker):
    """Mock Ollama completion endpoint."""
    mock = mocker.patch("docchat.services.llm.ollama_client.OllamaClient.generate")
    mock.return_value = "Pengajuan kegiatan butuh 14 hari [src:1]."
    return mock


@pytest.fixture
def mock_ollama_chat(mocker):
    """Mock Ollama chat endpoint (agent mode)."""
    mock = mocker.patch("docchat.services.llm.ollama_client.OllamaClient.chat")
    mock.return_value = {"role": "assistant", "content": "Halo!", "tool_calls": []}
    return mock


@pytest.fixture
def mock_line_reply(mocker):
    """Mock LINE reply API."""
    mock = mocker.patch(
        "docchat.services.line_messaging.LineMessagingClient.reply"
    )
    mock.return_value = None
    return mock


@pytest.fixture
def mock_redis(mocker):
    """Mock Redis for rate limiting."""
    mock = mocker.patch("docchat.services.rate_limiter.redis.from_url")
    mock_client = mocker.MagicMock()
    mock_client.ping.return_value = True
    mock.return_value = mock_client
    return mock


@pytest.fixture
def healthy_llm(mocker):
    """LLM client whose health check passes, injected into the app."""
    client = OllamaClient()
    mocker.patch.object(client, "health_check", return_value=True)
    app.dependency_overrides[get_llm_client] = lambda: client
    yield client
    app.dependency_overrides.pop(get_llm_client, None)
