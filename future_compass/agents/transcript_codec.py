"""
Transcript Codec

Both directions between persisted interview turns and provider chat messages
live here, so a transcript saved by one run replays into exactly the history
a live session had at that point.

    transcript turn                       provider message
    {role:"user", text}              <->  {role:"user", content: text}
    {role:"model", feedback,         <->  {role:"assistant", content:
     question, summary}                     '{"feedback":..,"nextQuestion":..,"interviewSummary":..}'}

Every replayed history starts with the bootstrap user message, which is part
of the wire contract and must match BOOTSTRAP_MESSAGE exactly.
"""

import json
from typing import Any, List, Sequence

from pydantic import ValidationError as PydanticValidationError

from future_compass.models.interview import (
    TRANSCRIPT_ADAPTER,
    ChatMessage,
    CoachTurn,
    InterviewTurn,
    UserTurn,
)
from future_compass.utils.errors import SchemaError
from future_compass.utils.llm_client import parse_json_reply
from future_compass.utils.validator import get_default_validator

BOOTSTRAP_MESSAGE = "Start the interview."
FINISH_SENTINEL = "FINISH_INTERVIEW"
END_MARKER = "END"

INTERVIEW_SCHEMA = "interview_turn_schema.json"

# Provider field name for each CoachTurn attribute, in serialization order
_PAYLOAD_FIELDS = (
    ("feedback", "feedback"),
    ("question", "nextQuestion"),
    ("summary", "interviewSummary"),
)


def coach_turn_to_payload(turn: CoachTurn) -> str:
    """Serialize a coach turn into the compact JSON the provider emitted.

    Keys whose value is None are omitted.
    """
    payload = {
        wire_name: getattr(turn, attr)
        for attr, wire_name in _PAYLOAD_FIELDS
        if getattr(turn, attr) is not None
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def coach_turn_from_payload(payload: dict[str, Any]) -> CoachTurn:
    """Map a provider payload dict onto a coach turn, ignoring unknown keys.

    An empty interviewSummary counts as absent.
    """
    values = {}
    for attr, wire_name in _PAYLOAD_FIELDS:
        value = payload.get(wire_name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise SchemaError(f"'{wire_name}' must be a string, got {type(value).__name__}")
        values[attr] = value
    if values.get("summary") == "":
        del values["summary"]
    return CoachTurn(**values)


def parse_coach_reply(response_text: str) -> CoachTurn:
    """Parse and validate a live provider reply.

    Raises:
        SchemaError: If the reply is not JSON or lacks feedback/nextQuestion
    """
    data = parse_json_reply(response_text)
    get_default_validator().validate_response(
        data, INTERVIEW_SCHEMA, raw_response=response_text
    )
    return coach_turn_from_payload(data)


def transcript_to_history(turns: Sequence[InterviewTurn]) -> List[ChatMessage]:
    """Rebuild provider-visible history (without the system message) from turns."""
    history = [ChatMessage(role="user", content=BOOTSTRAP_MESSAGE)]
    for turn in turns:
        if isinstance(turn, UserTurn):
            history.append(ChatMessage(role="user", content=turn.text))
        else:
            history.append(
                ChatMessage(role="assistant", content=coach_turn_to_payload(turn))
            )
    return history


def history_to_transcript(messages: Sequence[ChatMessage]) -> List[InterviewTurn]:
    """Inverse of transcript_to_history.

    System messages and the leading bootstrap message are dropped.

    Raises:
        SchemaError: If an assistant message is not a JSON object
    """
    conversation = [m for m in messages if m.role != "system"]
    if conversation and conversation[0].role == "user" and conversation[0].content == BOOTSTRAP_MESSAGE:
        conversation = conversation[1:]

    turns: List[InterviewTurn] = []
    for message in conversation:
        if message.role == "user":
            turns.append(UserTurn(text=message.content))
            continue
        data = parse_json_reply(message.content)
        if not isinstance(data, dict):
            raise SchemaError("Assistant message is not a JSON object", raw_response=message.content)
        turns.append(coach_turn_from_payload(data))
    return turns


def serialize_transcript(turns: Sequence[InterviewTurn]) -> str:
    """Encode turns in the persisted format: a JSON array of turn objects."""
    return json.dumps(
        [turn.model_dump(exclude_none=True) for turn in turns], ensure_ascii=False
    )


def deserialize_transcript(raw: str) -> List[InterviewTurn]:
    """Decode the persisted format.

    Raises:
        SchemaError: If raw is not a JSON array of valid turns
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Transcript is not valid JSON: {e}", raw_response=raw[:200])

    if not isinstance(data, list):
        raise SchemaError("Transcript must be a JSON array", raw_response=raw[:200])

    try:
        return TRANSCRIPT_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise SchemaError(f"Transcript has invalid turns: {e}", raw_response=raw[:200])
