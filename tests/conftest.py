# tests/conftest.py
import asyncio
import os
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from voice_interview.application.feedback import FeedbackRequest, FeedbackResult
from voice_interview.core.interfaces import FeedbackService
from voice_interview.providers.base import EventEmitterCallProvider

TEST_ENV = {
    "ENVIRONMENT": "testing",
    "DEBUG": "true",
    "APP_NAME": "Voice Interview Test",
    "GENERATE_WORKFLOW_ID": "workflow-test",
    "INTERVIEWER_ASSISTANT_ID": "interviewer-test",
    "FEEDBACK_SERVICE_URL": "http://feedback.test/api/feedback",
    "FEEDBACK_TIMEOUT_SECONDS": "1",
}


class FakeCallProvider(EventEmitterCallProvider):
    """Records commands; tests drive events with ``emit``."""

    def __init__(self, fail_start: bool = False, fail_stop: bool = False):
        super().__init__()
        self.fail_start = fail_start
        self.fail_stop = fail_stop
        self.started: List[Dict[str, Any]] = []
        self.stop_count = 0

    async def start(self, target_id: str, parameters: Dict[str, Any]) -> None:
        self.started.append({"target_id": target_id, "parameters": parameters})
        if self.fail_start:
            raise RuntimeError("start rejected")

    async def stop(self) -> None:
        self.stop_count += 1
        if self.fail_stop:
            raise RuntimeError("stop rejected")


class FakeFeedbackService(FeedbackService):
    def __init__(self, result: FeedbackResult | None = None, error: Exception | None = None, delay: float = 0):
        self.result = result or FeedbackResult(success=True, feedback_id="fb1")
        self.error = error
        self.delay = delay
        self.requests: List[FeedbackRequest] = []

    async def create_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def test_env_vars():
    """Set up test environment variables."""
    for key, value in TEST_ENV.items():
        os.environ[key] = value
    yield
    # Clean up
    for key in TEST_ENV:
        os.environ.pop(key, None)

@pytest.fixture
def settings(test_env_vars):
    """Get test settings."""
    from voice_interview.core.config import get_settings
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()

@pytest.fixture
def provider():
    return FakeCallProvider()

@pytest.fixture
def feedback_service():
    return FakeFeedbackService()

@pytest.fixture
def app(settings, feedback_service):
    """Create test app instance."""
    from voice_interview.interface.api.main import create_app
    from voice_interview.interface.api.routers.call import get_feedback_service
    app = create_app()
    app.dependency_overrides[get_feedback_service] = lambda: feedback_service
    return app

@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)
