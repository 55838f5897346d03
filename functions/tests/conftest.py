"""Pytest configuration and shared fixtures for Costeo AI tests."""

import os
import sys
import pytest
from unittest.mock import AsyncMock, patch


# ============================================================================
# Ensure local imports work (config/, models/, services/, validators/)
# ============================================================================
#
# The codebase uses absolute imports like `from models...` / `from services...`.
# This guarantees that `functions/` is importable as the top-level module root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


# ============================================================================
# Settings
# ============================================================================


@pytest.fixture
def test_settings():
    """Settings with small limits so size-policy paths are easy to reach."""
    from config.settings import Settings

    return Settings(
        llm_model="gpt-4o-mini",
        llm_temperature=0.2,
        llm_timeout_seconds=5,
        llm_max_tokens=None,
        max_source_chars=5000,
        direct_max_chars=400,
        condensation_enabled=True,
        condense_chunk_chars=300,
        condense_concurrency=2,
        catalog_sample_size=3,
        search_limit=20,
        max_upload_mb=1,
        _openai_api_key="test-api-key",
    )


# ============================================================================
# LLM Mocks
# ============================================================================


@pytest.fixture
def mock_chat_openai():
    """Mock ChatOpenAI client."""
    from tests.fixtures.mock_costing_data import make_llm_message

    mock = AsyncMock()
    mock.ainvoke.return_value = make_llm_message("Mock response content")
    return mock


@pytest.fixture
def mock_llm_service(mock_chat_openai):
    """LLMService whose ChatOpenAI client is mocked."""
    from services.llm_service import LLMService

    with patch('services.llm_service.ChatOpenAI', return_value=mock_chat_openai):
        service = LLMService(api_key="test-api-key", timeout_seconds=5)
        service._client = mock_chat_openai
        return service


@pytest.fixture
def unconfigured_llm_service():
    """LLMService without a credential."""
    from services.llm_service import LLMService

    service = LLMService(api_key="placeholder")
    service.api_key = None
    return service


# ============================================================================
# Orchestrator & App
# ============================================================================


@pytest.fixture
def orchestrator(mock_llm_service, test_settings):
    """EstimationOrchestrator wired to the mocked LLM."""
    from services.estimation_orchestrator import EstimationOrchestrator

    return EstimationOrchestrator(llm_service=mock_llm_service, settings=test_settings)


@pytest.fixture
def stores():
    """Fresh in-memory stores."""
    from main import Stores

    return Stores()


@pytest.fixture
def app(stores, orchestrator, test_settings):
    """Flask app with injected stores and orchestrator."""
    from main import create_app

    flask_app = create_app(stores=stores, orchestrator=orchestrator, app_settings=test_settings)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_params():
    """Default financial parameters."""
    from models.costing import CostParameters

    return CostParameters(factor_prestacional=1.58, imprevistos_pct=5, margen_pct=30)


@pytest.fixture
def sample_sources():
    """Short contract texts that fit a direct call."""
    from models.costing import EstimationSources

    return EstimationSources(
        object_text="Interventoría técnica a la construcción de un puente vehicular",
        notes="Plazo de 6 meses",
        tdr_text="Se requiere un director de interventoría y dos inspectores residentes.",
    )


@pytest.fixture
def sample_oracle_plan():
    """Plan as the oracle is asked to return it."""
    from tests.fixtures.mock_costing_data import get_valid_oracle_plan

    return get_valid_oracle_plan()
