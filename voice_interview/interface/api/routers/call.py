import json
from typing import Any, Dict

import structlog
from fastapi import Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ....application.interview_session import SessionContext
from ....core.config import Settings, get_settings
from ....core.exceptions import InterviewCallError, InvalidTransitionError
from ....core.interfaces import FeedbackService
from ....managers.call_session import CallSessionController, NavigationIntent
from ....managers.feedback import FeedbackDispatcher, HttpFeedbackService
from ....providers.relay import RelayCallProvider

logger = structlog.get_logger(__name__)


def get_feedback_service(settings: Settings = Depends(get_settings)) -> FeedbackService:
    return HttpFeedbackService(settings)


async def call_websocket(
    websocket: WebSocket,
    settings: Settings = Depends(get_settings),
    feedback_service: FeedbackService = Depends(get_feedback_service),
):
    """One websocket connection drives one call session.

    Client -> server: ``start`` (session context), ``stop`` and
    ``provider_event`` (relayed voice SDK events).
    Server -> client: ``command``, ``state``, ``error`` and a single ``navigate``.
    """
    await websocket.accept()
    provider = RelayCallProvider(websocket.send_json)
    dispatcher = FeedbackDispatcher(feedback_service, timeout=settings.FEEDBACK_TIMEOUT_SECONDS)

    async def send_navigation(intent: NavigationIntent) -> None:
        await websocket.send_json({"type": "navigate", **intent.to_dict()})

    async def send_error(error: InterviewCallError) -> None:
        await websocket.send_json({"type": "error", **error.to_dict()})

    controller = CallSessionController(
        provider,
        dispatcher,
        settings=settings,
        on_navigate=send_navigation,
        on_error=send_error,
    )
    async with controller:
        await websocket.send_json({"type": "connection_established"})
        try:
            while True:
                try:
                    message = await websocket.receive_json()
                except json.JSONDecodeError:
                    logger.error("invalid_json_received")
                    await _send_invalid(websocket, "message is not valid JSON")
                    continue

                await _handle_message(websocket, controller, provider, message)
                await websocket.send_json({"type": "state", **controller.view()})
        except WebSocketDisconnect:
            logger.info("call_websocket_disconnected", status=controller.status.value)


async def _handle_message(
    websocket: WebSocket,
    controller: CallSessionController,
    provider: RelayCallProvider,
    message: Dict[str, Any],
) -> None:
    message_type = message.get("type") if isinstance(message, dict) else None

    if message_type == "start":
        try:
            context = SessionContext.model_validate(message.get("data") or {})
        except ValidationError as e:
            await _send_invalid(websocket, "invalid session context", errors=e.errors(include_url=False, include_context=False))
            return
        try:
            await controller.start_call(context)
        except InvalidTransitionError as e:
            await websocket.send_json({"type": "error", **e.to_dict()})
    elif message_type == "stop":
        await controller.stop_call()
    elif message_type == "provider_event":
        try:
            provider.receive(message.get("data") or {})
        except ValidationError as e:
            await _send_invalid(websocket, "invalid provider event", errors=e.errors(include_url=False, include_context=False))
    else:
        await _send_invalid(websocket, f"unknown message type: {message_type}")


async def _send_invalid(websocket: WebSocket, message: str, errors: Any = None) -> None:
    await websocket.send_json({
        "type": "error",
        "kind": "InvalidMessage",
        "message": message,
        "details": {"errors": errors} if errors else {},
    })
