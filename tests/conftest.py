"""
Shared fixtures for FutureCompass tests.
"""

import json
from typing import Any, List, Optional, Sequence, Union

import pytest

from future_compass.models.interview import ChatMessage
from future_compass.models.profile import Profile
from future_compass.utils.errors import FutureCompassError
from future_compass.utils.transcript_store import InMemoryTranscriptStore


def coach_reply(
    feedback: str = "Welcome!",
    question: str = "Tell me about yourself.",
    summary: Optional[str] = None,
) -> str:
    """Build a provider reply text in the interview turn shape."""
    payload = {"feedback": feedback, "nextQuestion": question}
    if summary is not None:
        payload["interviewSummary"] = summary
    return json.dumps(payload)


def completion_body(content: Any) -> dict:
    """Wrap assistant content in a chat-completions response envelope."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class ScriptedClient:
    """
    Stand-in for ChatCompletionClient that replays scripted replies.

    Each scripted item is either reply text or an exception to raise. Every
    call records a copy of the messages it was given.
    """

    def __init__(self, replies: Sequence[Union[str, Exception]] = ()):
        self.replies: List[Union[str, Exception]] = list(replies)
        self.calls: List[List[ChatMessage]] = []
        self.schema_names: List[str] = []

    def queue(self, *replies: Union[str, Exception]) -> None:
        self.replies.extend(replies)

    async def complete(
        self, messages: Sequence[ChatMessage], schema_name: str, response_name: str
    ) -> str:
        self.calls.append(list(messages))
        self.schema_names.append(schema_name)
        if not self.replies:
            raise AssertionError("ScriptedClient ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, FutureCompassError):
            raise reply
        return reply


@pytest.fixture
def scripted_client() -> ScriptedClient:
    return ScriptedClient()


@pytest.fixture
def memory_store() -> InMemoryTranscriptStore:
    return InMemoryTranscriptStore()


@pytest.fixture
def sample_profile() -> Profile:
    return Profile(
        name="Maya",
        gradeLevel="11th Grade",
        favoriteSubjects="Biology, Chemistry",
        hobbies="Volunteering at the animal shelter, robotics club",
        skills="Patient, good at explaining things",
        dream="Help animals and people live healthier lives",
    )


@pytest.fixture
def analysis_payload() -> dict:
    """A well-formed analysis reply as the provider would send it."""
    return {
        "skillsReport": [
            {"category": "Critical Thinking", "score": 82, "reasoning": "Robotics problem solving"},
            {"category": "Creativity", "score": 70, "reasoning": "Designs club projects"},
            {"category": "Communication", "score": 88, "reasoning": "Explains things patiently"},
            {"category": "Technical Proficiency", "score": 65, "reasoning": "Robotics club"},
            {"category": "Leadership", "score": 60, "reasoning": "Volunteer coordination"},
        ],
        "careers": [
            {
                "title": "Veterinarian",
                "matchScore": 92,
                "description": "Diagnoses and treats animals.",
                "salaryRange": "$100k - $130k",
                "educationRequired": "Doctor of Veterinary Medicine",
                "roadmap": ["Take AP Biology", "Volunteer at clinics", "Join HOSA"],
            },
            {
                "title": "Biomedical Engineer",
                "matchScore": 80,
                "description": "Builds medical devices.",
                "salaryRange": "$90k - $120k",
                "educationRequired": "Bachelor's in Biomedical Engineering",
                "roadmap": ["Take AP Physics", "Stay in robotics", "Learn CAD"],
            },
            {
                "title": "Public Health Educator",
                "matchScore": 74,
                "description": "Teaches communities healthy habits.",
                "salaryRange": "$50k - $70k",
                "educationRequired": "Bachelor's in Public Health",
                "roadmap": ["Join debate", "Volunteer at health fairs", "Take statistics"],
            },
        ],
        "summary": "You combine care for others with hands-on problem solving. Keep exploring!",
    }


@pytest.fixture
def make_reply():
    """Factory for interview turn reply text."""
    return coach_reply


@pytest.fixture
def make_completion():
    """Factory for chat-completions response envelopes."""
    return completion_body
