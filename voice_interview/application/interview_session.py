from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class CallStatus(str, Enum):
    INACTIVE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class SessionType(str, Enum):
    GENERATE = "generate"
    EVALUATE = "evaluate"


class SessionContext(BaseModel):
    """Identifiers for one interview call; fixed for the session's lifetime."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(alias="userId")
    user_name: str = Field(default="", alias="userName")
    interview_id: str | None = Field(default=None, alias="interviewId")
    feedback_id: str | None = Field(default=None, alias="feedbackId")
    session_type: SessionType = Field(default=SessionType.GENERATE, alias="type")
    questions: List[str] = Field(default_factory=list)


def format_questions(questions: List[str]) -> str:
    """Collapse prepared questions into the bullet list the interviewer reads."""
    return "\n".join(f"- {question}" for question in questions)


def build_call_parameters(context: SessionContext) -> Dict[str, Any]:
    if context.session_type == SessionType.GENERATE:
        variables = {
            "username": context.user_name,
            "userid": context.user_id,
        }
    else:
        variables = {"questions": format_questions(context.questions)}
    return {"variableValues": variables}
