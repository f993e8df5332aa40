import asyncio
from typing import Iterable

import httpx
import structlog

from ..application.feedback import FeedbackRequest, FeedbackResult, TranscriptEntry
from ..application.transcript import TranscriptMessage
from ..core.config import Settings, get_settings
from ..core.interfaces import FeedbackService

logger = structlog.get_logger(__name__)


class HttpFeedbackService(FeedbackService):
    """Remote feedback generator reached over HTTP."""

    def __init__(self, settings: Settings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or get_settings()
        self._client = client

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.settings.FEEDBACK_SERVICE_TOKEN:
            headers["Authorization"] = f"Bearer {self.settings.FEEDBACK_SERVICE_TOKEN}"
        return headers

    async def create_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        if self._client is not None:
            response = await self._client.post(
                self.settings.FEEDBACK_SERVICE_URL,
                json=request.to_wire(),
                headers=self._headers(),
            )
        else:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.settings.FEEDBACK_SERVICE_URL,
                    json=request.to_wire(),
                    headers=self._headers(),
                )
        response.raise_for_status()
        data = response.json() if response.content else {}
        return FeedbackResult.model_validate(data)


class FeedbackDispatcher:
    """Makes exactly one feedback attempt and never raises to the caller."""

    def __init__(self, service: FeedbackService, timeout: float | None = None):
        self.service = service
        self.timeout = timeout

    @staticmethod
    def build_request(
        interview_id: str | None,
        user_id: str,
        feedback_id: str | None,
        transcript: Iterable[TranscriptMessage],
    ) -> FeedbackRequest:
        return FeedbackRequest(
            interview_id=interview_id,
            user_id=user_id,
            feedback_id=feedback_id,
            transcript=[
                TranscriptEntry(role=message.role.value, content=message.content)
                for message in transcript
            ],
        )

    async def generate(self, request: FeedbackRequest, timeout: float | None = None) -> FeedbackResult:
        timeout = self.timeout if timeout is None else timeout
        log = logger.bind(interview_id=request.interview_id, user_id=request.user_id)
        log.info("feedback_requested", messages=len(request.transcript))

        try:
            result = await asyncio.wait_for(self.service.create_feedback(request), timeout)
        except asyncio.TimeoutError:
            log.warning("feedback_timed_out", timeout=timeout)
            return FeedbackResult(success=False)
        except Exception as e:
            log.error("feedback_failed", error=str(e))
            return FeedbackResult(success=False)

        if not result.success:
            log.warning("feedback_rejected")
        else:
            log.info("feedback_created", feedback_id=result.feedback_id)
        return result
