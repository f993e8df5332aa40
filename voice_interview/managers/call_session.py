import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Set

import structlog

from ..application.events import (
    CallEnded,
    CallStarted,
    ProviderErrorEvent,
    ProviderEvent,
    SpeechEnded,
    SpeechStarted,
    TranscriptEvent,
)
from ..application.interview_session import (
    CallStatus,
    SessionContext,
    SessionType,
    build_call_parameters,
)
from ..application.transcript import TranscriptBuffer, TranscriptMessage
from ..core.config import Settings, get_settings
from ..core.exceptions import (
    FeedbackDispatchFailure,
    InterviewCallError,
    InvalidTransitionError,
    ProviderRuntimeError,
    ProviderStartFailure,
)
from ..core.interfaces import CallProvider
from .feedback import FeedbackDispatcher

logger = structlog.get_logger(__name__)


class NavigationKind(str, Enum):
    HOME = "home"
    FEEDBACK = "feedback"


@dataclass(frozen=True)
class NavigationIntent:
    kind: NavigationKind
    path: str
    interview_id: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "destination": self.path, "interviewId": self.interview_id}


class CallSessionController:
    """Owns the call status and transcript of one interview call.

    Provider events and the start/stop commands are the only mutators. The
    post-call workflow (feedback and/or navigation) runs at most once per
    session and always ends in exactly one navigation intent.

    Usage::

        async with CallSessionController(provider, dispatcher) as controller:
            await controller.start_call(context)
            ...
            intent = await controller.wait_for_navigation()
    """

    def __init__(
        self,
        provider: CallProvider,
        dispatcher: FeedbackDispatcher,
        settings: Settings | None = None,
        on_navigate: Callable[[NavigationIntent], Any] | None = None,
        on_error: Callable[[InterviewCallError], Any] | None = None,
    ):
        self.settings = settings or get_settings()
        self.provider = provider
        self.dispatcher = dispatcher
        self.on_navigate = on_navigate
        self.on_error = on_error

        self.status = CallStatus.INACTIVE
        self.transcript = TranscriptBuffer()
        self.context: SessionContext | None = None
        self.is_speaking = False
        self.errors: List[InterviewCallError] = []
        self.navigation: NavigationIntent | None = None

        self._post_call_latched = False
        self._post_call_task: asyncio.Task | None = None
        self._navigated = asyncio.Event()
        self._hook_tasks: Set[asyncio.Task] = set()
        self._closed = False
        self._log = logger

        self._subscription = provider.subscribe(self.handle_event)

    async def __aenter__(self) -> "CallSessionController":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Commands

    async def start_call(self, context: SessionContext) -> bool:
        """Start a new session. Returns False if the provider rejected the call."""
        if self._closed:
            raise InvalidTransitionError("controller is closed")
        if self.status not in (CallStatus.INACTIVE, CallStatus.FINISHED):
            raise InvalidTransitionError(
                f"cannot start a call while {self.status.value}",
                details={"status": self.status.value},
            )
        if self._post_call_task is not None and not self._post_call_task.done():
            raise InvalidTransitionError("previous session is still resolving")

        self._begin_session(context)
        self._set_status(CallStatus.CONNECTING)

        if context.session_type == SessionType.GENERATE:
            target_id = self.settings.GENERATE_WORKFLOW_ID
        else:
            target_id = self.settings.INTERVIEWER_ASSISTANT_ID
        parameters = build_call_parameters(context)

        try:
            await self.provider.start(target_id, parameters)
        except Exception as e:
            self._report(ProviderStartFailure(
                "call provider rejected the start command",
                details={"error": str(e), "target_id": target_id},
            ))
            # A stop or call-end may have moved us on while start was pending.
            if self.status == CallStatus.CONNECTING:
                self._set_status(CallStatus.INACTIVE)
            return False
        return True

    async def stop_call(self) -> None:
        if self.status not in (CallStatus.CONNECTING, CallStatus.ACTIVE):
            self._log.debug("stop_ignored", status=self.status.value)
            return

        self._finish()
        try:
            await self.provider.stop()
        except Exception as e:
            self._report(ProviderRuntimeError(
                "call provider rejected the stop command",
                details={"error": str(e)},
            ))

    # Provider events

    def handle_event(self, event: ProviderEvent) -> None:
        if self._closed:
            return

        if isinstance(event, ProviderErrorEvent):
            self._report(ProviderRuntimeError("call provider error", details={"error": event.details}))
        elif isinstance(event, CallStarted):
            if self.status == CallStatus.CONNECTING:
                self._set_status(CallStatus.ACTIVE)
            else:
                self._ignore(event)
        elif isinstance(event, CallEnded):
            if self.status in (CallStatus.CONNECTING, CallStatus.ACTIVE):
                self._finish()
            else:
                self._ignore(event)
        elif isinstance(event, TranscriptEvent):
            if self.status != CallStatus.ACTIVE:
                self._ignore(event)
            elif event.is_final:
                self.transcript.append_final(event.role, event.transcript)
            else:
                self.transcript.set_partial(event.transcript)
        elif isinstance(event, SpeechStarted):
            self.is_speaking = True
        elif isinstance(event, SpeechEnded):
            self.is_speaking = False
        else:
            self._ignore(event)

    # Outcome

    async def wait_for_navigation(self, timeout: float | None = None) -> NavigationIntent:
        await asyncio.wait_for(self._navigated.wait(), timeout)
        return self.navigation

    def view(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "isSpeaking": self.is_speaking,
            "lastMessage": self.transcript.last_message,
            "pendingUtterance": self.transcript.pending_utterance,
            "history": self.transcript.to_payload(),
        }

    async def close(self, cancel_pending: bool = False) -> None:
        """Release the provider subscription.

        A pending post-call workflow is awaited (it is bounded by the feedback
        timeout) unless ``cancel_pending`` is set.
        """
        if self._closed:
            return
        self._closed = True
        self._subscription.cancel()

        task = self._post_call_task
        if task is not None:
            if not task.done():
                if cancel_pending:
                    task.cancel()
                await asyncio.gather(task, return_exceptions=True)
            # A task cancelled before its first step never reaches its handler.
            if self.navigation is None:
                self._report(FeedbackDispatchFailure("post-call workflow ended without a decision"))
                await self._navigate(self._home())
        if self._hook_tasks:
            await asyncio.gather(*self._hook_tasks, return_exceptions=True)
        self._log.info("controller_closed", status=self.status.value)

    # Internals

    def _begin_session(self, context: SessionContext) -> None:
        self.context = context
        self.transcript.reset()
        self.is_speaking = False
        self.errors = []
        self.navigation = None
        self._post_call_latched = False
        self._post_call_task = None
        self._navigated.clear()
        self._log = logger.bind(
            user_id=context.user_id,
            interview_id=context.interview_id,
            session_type=context.session_type.value,
        )

    def _set_status(self, status: CallStatus) -> None:
        self._log.info("call_status_changed", previous=self.status.value, status=status.value)
        self.status = status

    def _ignore(self, event: ProviderEvent) -> None:
        self._log.debug("event_ignored", event_type=event.type, status=self.status.value)

    def _finish(self) -> None:
        self._set_status(CallStatus.FINISHED)
        if self._post_call_latched:
            return
        self._post_call_latched = True
        self.is_speaking = False
        snapshot = self.transcript.snapshot()
        self._post_call_task = asyncio.get_running_loop().create_task(
            self._run_post_call(self.context, snapshot)
        )

    async def _run_post_call(self, context: SessionContext, snapshot: tuple[TranscriptMessage, ...]) -> None:
        try:
            if context.session_type == SessionType.GENERATE:
                intent = self._home()
            else:
                intent = await self._dispatch_feedback(context, snapshot)
        except asyncio.CancelledError:
            self._report(FeedbackDispatchFailure("feedback dispatch was cancelled"))
            await self._navigate(self._home())
            raise
        except Exception as e:
            self._log.exception("post_call_failed")
            self._report(FeedbackDispatchFailure("post-call workflow failed", details={"error": str(e)}))
            intent = self._home()
        await self._navigate(intent)

    async def _dispatch_feedback(
        self, context: SessionContext, snapshot: tuple[TranscriptMessage, ...]
    ) -> NavigationIntent:
        request = self.dispatcher.build_request(
            interview_id=context.interview_id,
            user_id=context.user_id,
            feedback_id=context.feedback_id,
            transcript=snapshot,
        )
        result = await self.dispatcher.generate(request)

        if result.success and result.feedback_id and context.interview_id:
            return NavigationIntent(
                kind=NavigationKind.FEEDBACK,
                path=self.settings.FEEDBACK_PATH_TEMPLATE.format(interview_id=context.interview_id),
                interview_id=context.interview_id,
            )

        self._report(FeedbackDispatchFailure(
            "error saving feedback",
            details={"success": result.success, "feedback_id": result.feedback_id},
        ))
        return self._home()

    def _home(self) -> NavigationIntent:
        return NavigationIntent(kind=NavigationKind.HOME, path=self.settings.HOME_PATH)

    async def _navigate(self, intent: NavigationIntent) -> None:
        if self.navigation is not None:
            return
        self.navigation = intent
        self._navigated.set()
        self._log.info("navigation_decided", kind=intent.kind.value, destination=intent.path)

        # Reported errors reach the UI before the terminal navigation.
        if self._hook_tasks:
            await asyncio.gather(*list(self._hook_tasks), return_exceptions=True)

        if self.on_navigate is None:
            return
        try:
            result = self.on_navigate(intent)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self._log.exception("navigate_hook_failed")

    def _report(self, error: InterviewCallError) -> None:
        self.errors.append(error)
        self._log.warning("call_error_reported", **error.to_dict())

        if self.on_error is None:
            return
        try:
            result = self.on_error(error)
        except Exception:
            self._log.exception("error_hook_failed")
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._hook_tasks.add(task)
            task.add_done_callback(self._hook_done)

    def _hook_done(self, task: asyncio.Task) -> None:
        self._hook_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self._log.error("error_hook_failed", error=str(task.exception()))
