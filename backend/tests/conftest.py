"""
Shared test fixtures and configuration.
"""

import json
import pytest
import os
from unittest.mock import AsyncMock

# Set test environment variables before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/healthlink_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_API_REQUESTS", "false")

from healthlink.llm.base import LLMResponse
from healthlink.storage.local_storage import LocalDocumentStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store(tmp_path):
    """A document store rooted in a fresh temporary directory."""
    return LocalDocumentStore(str(tmp_path / "data"))


def make_llm(payload):
    """Mock LLM provider whose every answer is the given payload as JSON text."""
    provider = AsyncMock()
    content = payload if isinstance(payload, str) else json.dumps(payload)
    provider.chat_completion.return_value = LLMResponse(content=content, model="stub")
    return provider


PREDICTION_ANSWER = {
    "prediction": "Risk: mild dehydration",
    "suggestedMedication": "Drink water",
    "doctorReference": {"name": "Dr. A", "specialization": "GP", "contact": "555-0100"},
}

CHAT_ANSWER = {
    "response": "Try a consistent bedtime.",
    "suggestions": ["No screens before bed", "Keep room cool"],
}

METRICS = {
    "heartRate": 80,
    "steps": 5000,
    "calories": 1200,
    "age": 30,
    "gender": "male",
    "existingConditions": "",
}
