"""
Shared fixtures: settings without a .env file, a recording sleep and
LLM services backed by httpx.MockTransport.
"""
import asyncio
import random
from typing import Callable, List, Optional

import httpx
import pytest

from core.config import Settings
from models.rag_model import ModelRequest, ModelResponse
from rag_services.llm import LLMService


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedTransport:
    """Replays a list of outcomes, one per request.

    An outcome is an httpx.Response, a dict (sent as a 200 JSON body) or an
    exception class from httpx to raise.
    """

    def __init__(self, outcomes: list):
        self.outcomes = list(outcomes)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, type) and issubclass(outcome, Exception):
            raise outcome("connection refused", request=request)
        if isinstance(outcome, dict):
            return httpx.Response(200, json=outcome)
        return outcome


class GatedLLM:
    """LLM double whose answers are released by the test."""

    def __init__(self, answer: str = "gated answer"):
        self.answer = answer
        self.gate = asyncio.Event()
        self.requests: List[ModelRequest] = []

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        await self.gate.wait()
        return ModelResponse(answer_text=self.answer)

    async def close(self) -> None:
        return None


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        GEMINI_API_KEY="test-key",
        GEMINI_API_BASE="https://model.test/v1beta",
        GEMINI_MODEL="test-model",
        MAX_RETRIES=3,
        RETRY_BASE_DELAY_S=1.0,
        RETRY_JITTER_MAX_S=0.5,
        CHUNK_SIZE=1500,
        MAX_FILE_SIZE_MB=1,
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_llm(test_settings, recording_sleep) -> Callable[..., LLMService]:
    """Build an LLMService whose HTTP calls are answered by ScriptedTransport."""

    def _make(outcomes: list, settings: Optional[Settings] = None) -> LLMService:
        transport = ScriptedTransport(outcomes)
        client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        service = LLMService(
            settings or test_settings,
            client=client,
            sleep=recording_sleep,
            rng=random.Random(7),
        )
        service.transport = transport
        return service

    return _make
