"""Call provider backed by the browser voice SDK.

The browser owns the audio transport. Commands go out as websocket messages
and the SDK's events come back the same way.
"""
from typing import Any, Awaitable, Callable, Dict

import structlog

from ..application.events import ProviderEvent, parse_provider_event
from .base import EventEmitterCallProvider

logger = structlog.get_logger(__name__)

Sender = Callable[[Dict[str, Any]], Awaitable[None]]


class RelayCallProvider(EventEmitterCallProvider):
    def __init__(self, send: Sender):
        super().__init__()
        self._send = send

    async def start(self, target_id: str, parameters: Dict[str, Any]) -> None:
        if not target_id:
            raise ValueError("call target id is not configured")
        logger.info("relay_start_command", target_id=target_id)
        await self._send({
            "type": "command",
            "command": "start",
            "targetId": target_id,
            "parameters": parameters,
        })

    async def stop(self) -> None:
        logger.info("relay_stop_command")
        await self._send({"type": "command", "command": "stop"})

    def receive(self, payload: Dict[str, Any]) -> ProviderEvent:
        """Parse a relayed SDK message and deliver it to subscribers."""
        event = parse_provider_event(payload)
        self.emit(event)
        return event
