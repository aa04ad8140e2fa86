"""
Synapse Scribble Backend - Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Test environment variables are set before any application import, so
       the settings singleton and the Gemini service see test values.

Fixture Hierarchy (all function-scoped):
    ├── mock_llm: One AsyncMock backend patched into every flow module
    ├── session: A fresh SessionContext registered in the store
    ├── sample_cycles: Three completed CycleRecords
    ├── audio_data_uri: A small fake webm recording
    └── test_client: HTTPX AsyncClient bound to the FastAPI app
"""

import base64
import os
from contextlib import ExitStack
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from synapse_scribble.schemas.flows import CycleRecord  # noqa: E402
from synapse_scribble.services.session_service import session_store  # noqa: E402

# Every module holding its own reference to the gemini_service singleton
FLOW_MODULES = (
    "synapse_scribble.flows.summarize",
    "synapse_scribble.flows.themes",
    "synapse_scribble.flows.whiteboard",
    "synapse_scribble.flows.image",
    "synapse_scribble.flows.insights",
    "synapse_scribble.flows.report",
)

PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(b"\x89PNG\r\n\x1a\nfake").decode()


@pytest.fixture(autouse=True)
def clear_sessions():
    """Sessions live in a module-level store; start every test empty."""
    session_store.clear()
    yield
    session_store.clear()


@pytest.fixture
def mock_llm():
    """
    Replace the Gemini backend in all flows with one mock.

    Usage:
        async def test_summary(mock_llm):
            mock_llm.generate_text.return_value = "Key points"
            result = await summarize_transcription(...)
            mock_llm.generate_text.assert_awaited_once()
    """
    llm = MagicMock()
    llm.generate_text = AsyncMock(return_value="")
    llm.generate_image = AsyncMock(return_value=PNG_DATA_URI)
    llm.health_check = AsyncMock(return_value=True)
    with ExitStack() as stack:
        for module in FLOW_MODULES:
            stack.enter_context(patch(f"{module}.gemini_service", llm))
        yield llm


@pytest.fixture
def session():
    return session_store.create()


@pytest.fixture
def sample_cycles():
    return [
        CycleRecord(
            transcription="Vi talte om budgettet for Q3.",
            summary="Budget for Q3 blev gennemgået.",
            identified_themes="Budget, Planlægning",
            whiteboard_content="- Stram budget\n- Ny plan",
            generated_image_data_uri=PNG_DATA_URI,
            new_insights="Hvordan prioriterer vi?",
        ),
        CycleRecord(
            transcription="Ansættelser i efteråret.",
            summary="To nye stillinger.",
            identified_themes="Ansættelser",
            generated_image_data_uri="Fejl under billedgenerering: quota exceeded",
        ),
        CycleRecord(
            transcription="Opfølgning.",
            generated_image_data_uri="",
        ),
    ]


@pytest.fixture
def audio_data_uri():
    return "data:audio/webm;codecs=opus;base64," + base64.b64encode(b"\x1aE\xdf\xa3" * 256).decode()


@pytest_asyncio.fixture
async def test_client():
    """
    Async HTTP client routed straight into the FastAPI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from synapse_scribble.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
