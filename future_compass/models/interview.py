"""
Mock Interview Data Models

Transcript turns as persisted (UI-shaped) and chat messages as sent to the
provider. The codec between the two lives in agents/transcript_codec.py.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class SessionState(str, Enum):
    """Lifecycle of an interview session."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    FINISHED = "finished"


class UserTurn(BaseModel):
    """An answer typed by the student."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user"] = "user"
    text: str


class CoachTurn(BaseModel):
    """A coach reply: feedback plus either the next question or the final summary."""

    model_config = ConfigDict(frozen=True)

    role: Literal["model"] = "model"
    feedback: Optional[str] = None
    question: Optional[str] = None
    summary: Optional[str] = None

    @property
    def is_final(self) -> bool:
        """True when this turn ends the interview."""
        return bool(self.summary)


InterviewTurn = Annotated[Union[UserTurn, CoachTurn], Field(discriminator="role")]

TRANSCRIPT_ADAPTER: TypeAdapter[List[InterviewTurn]] = TypeAdapter(List[InterviewTurn])


class ChatMessage(BaseModel):
    """One entry of the provider-visible conversation history."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str
