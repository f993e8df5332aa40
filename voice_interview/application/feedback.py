from typing import List

from pydantic import BaseModel, ConfigDict, Field


class TranscriptEntry(BaseModel):
    role: str
    content: str


class FeedbackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    interview_id: str | None = Field(default=None, alias="interviewId")
    user_id: str = Field(alias="userId")
    feedback_id: str | None = Field(default=None, alias="feedbackId")
    transcript: List[TranscriptEntry] = Field(default_factory=list)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class FeedbackResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    feedback_id: str | None = Field(default=None, alias="feedbackId")
