import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from impact_api.models import ReceiptData, ReceiptItem
from impact_api.services.transitions import initial_state
from impact_api.services.wizard import WizardController


def make_message(text):
    """Build a fake Anthropic message whose first block carries `text`."""
    mock_message = MagicMock()
    mock_content = MagicMock()
    mock_content.text = text
    mock_message.content = [mock_content]
    return mock_message


@pytest.fixture
def mock_settings():
    """Mock settings for gateway tests."""
    with patch("impact_api.services.ai_gateway.get_settings") as mock:
        settings = MagicMock()
        settings.anthropic_api_key = "test-api-key"
        settings.anthropic_model = "claude-sonnet-4-20250514"
        settings.openai_api_key = "test-openai-key"
        settings.transcription_model = "whisper-1"
        settings.max_tokens = 2048
        settings.story_temperature = 0.7
        mock.return_value = settings
        yield settings


@pytest.fixture
def mock_anthropic(mock_settings):
    """Patched AsyncAnthropic client; set `messages.create` per test."""
    with patch("impact_api.services.ai_gateway.AsyncAnthropic") as mock_client_class:
        mock_client = AsyncMock()
        mock_client_class.return_value = mock_client
        yield mock_client


@pytest.fixture
def reply_with(mock_anthropic):
    """Queue one Claude reply per call; returns the `messages.create` mock."""
    def _reply(*texts):
        mock_anthropic.messages.create = AsyncMock(
            side_effect=[make_message(text) for text in texts]
        )
        return mock_anthropic.messages.create
    return _reply


@pytest.fixture
def mock_openai(mock_settings):
    """Patched AsyncOpenAI client used for transcription."""
    with patch("impact_api.services.ai_gateway.AsyncOpenAI") as mock_client_class:
        mock_client = AsyncMock()
        mock_client_class.return_value = mock_client
        yield mock_client


@pytest.fixture
def acme_receipt():
    """Receipt from ACME Mart: 2 bags of rice for USD 120."""
    return ReceiptData(
        store_name="ACME Mart",
        date="2025-03-01",
        total_amount=120,
        currency="USD",
        trust_score=90,
        items=[ReceiptItem(name="Rice", quantity=2, price=60)],
    )


@pytest.fixture
def idr_receipt():
    return ReceiptData(
        store_name="Padang Supplies Depot",
        date="2025-01-14",
        total_amount=5000000,
        currency="IDR",
        trust_score=98,
        items=[ReceiptItem(name="Rice Bags (20kg)", quantity=20, price=250000)],
    )


@pytest.fixture
def eur_receipt():
    return ReceiptData(
        store_name="Marché Central",
        date="2025-01-20",
        total_amount=45.5,
        currency="EUR",
        trust_score=72,
        fraud_notes="Slight blur on the total line.",
        items=[
            ReceiptItem(name="Blankets", quantity=3, price=12.5),
            ReceiptItem(name="Water (5L)", quantity=2, price=4),
        ],
    )


@pytest.fixture
def empty_state():
    """Application state with no reports at all."""
    return initial_state(seed_sample_report=False)


@pytest.fixture
def controller(empty_state):
    return WizardController(empty_state)
