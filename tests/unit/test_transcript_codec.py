"""
Unit tests for the transcript codec.
"""

import json

import pytest

from future_compass.agents.transcript_codec import (
    BOOTSTRAP_MESSAGE,
    coach_turn_from_payload,
    coach_turn_to_payload,
    deserialize_transcript,
    history_to_transcript,
    parse_coach_reply,
    serialize_transcript,
    transcript_to_history,
)
from future_compass.models.interview import ChatMessage, CoachTurn, UserTurn
from future_compass.utils.errors import SchemaError


@pytest.fixture
def finished_transcript():
    return [
        CoachTurn(feedback="Welcome, Maya!", question="Why nursing?"),
        UserTurn(text="I like helping people."),
        CoachTurn(feedback="Good start, add an example.", question="Describe a hard day."),
        UserTurn(text="I stayed calm when a client's dog got hurt."),
        CoachTurn(
            feedback="Great job practicing today!",
            question="END",
            summary="- Strength: empathy\n- Improve: structure answers",
        ),
    ]


class TestCoachPayload:
    """Test cases for coach turn <-> provider payload mapping."""

    def test_payload_uses_provider_field_names_in_order(self):
        # Act
        payload = coach_turn_to_payload(CoachTurn(feedback="Hi", question="Why?"))

        # Assert
        assert payload == '{"feedback":"Hi","nextQuestion":"Why?"}'

    def test_payload_includes_summary_when_final(self):
        payload = coach_turn_to_payload(CoachTurn(feedback="Bye", question="END", summary="Done"))

        assert json.loads(payload) == {
            "feedback": "Bye",
            "nextQuestion": "END",
            "interviewSummary": "Done",
        }

    def test_payload_keeps_non_ascii_text(self):
        payload = coach_turn_to_payload(CoachTurn(feedback="¡Muy bien!", question="¿Por qué?"))

        assert "¡Muy bien!" in payload

    def test_fallback_turn_payload_has_only_question(self):
        payload = coach_turn_to_payload(CoachTurn(question="I didn't catch that."))

        assert payload == '{"nextQuestion":"I didn\'t catch that."}'

    def test_from_payload_ignores_unknown_keys(self):
        turn = coach_turn_from_payload({"feedback": "Hi", "nextQuestion": "Why?", "mood": "warm"})

        assert turn == CoachTurn(feedback="Hi", question="Why?")

    def test_empty_summary_is_not_final(self):
        turn = coach_turn_from_payload({"feedback": "Hi", "nextQuestion": "Why?", "interviewSummary": ""})

        assert turn.summary is None
        assert not turn.is_final

    def test_non_string_field_rejected(self):
        with pytest.raises(SchemaError):
            coach_turn_from_payload({"feedback": "Hi", "nextQuestion": 3})


class TestParseCoachReply:
    """Test cases for validating live replies."""

    def test_parses_regular_turn(self):
        turn = parse_coach_reply('{"feedback":"Nice","nextQuestion":"Next?"}')

        assert turn.feedback == "Nice"
        assert turn.question == "Next?"
        assert not turn.is_final

    def test_parses_fenced_final_turn(self):
        turn = parse_coach_reply(
            '```json\n{"feedback":"Bye","nextQuestion":"END","interviewSummary":"Strong"}\n```'
        )

        assert turn.is_final
        assert turn.summary == "Strong"

    @pytest.mark.parametrize(
        "reply",
        ["not json", '{"feedback":"only feedback"}', "[1, 2]", '{"nextQuestion": null, "feedback": "x"}'],
    )
    def test_invalid_replies_raise_schema_error(self, reply):
        with pytest.raises(SchemaError):
            parse_coach_reply(reply)


class TestHistoryMapping:
    """Test cases for transcript <-> provider history."""

    def test_history_starts_with_bootstrap(self, finished_transcript):
        # Act
        history = transcript_to_history(finished_transcript)

        # Assert
        assert history[0] == ChatMessage(role="user", content=BOOTSTRAP_MESSAGE)
        assert [m.role for m in history] == [
            "user",
            "assistant",
            "user",
            "assistant",
            "user",
            "assistant",
        ]
        assert history[2].content == "I like helping people."
        assert json.loads(history[1].content) == {
            "feedback": "Welcome, Maya!",
            "nextQuestion": "Why nursing?",
        }

    def test_empty_transcript_is_bootstrap_only(self):
        assert transcript_to_history([]) == [ChatMessage(role="user", content=BOOTSTRAP_MESSAGE)]

    def test_round_trip_through_history(self, finished_transcript):
        assert history_to_transcript(transcript_to_history(finished_transcript)) == finished_transcript

    def test_history_to_transcript_drops_system_message(self):
        # Arrange
        messages = [
            ChatMessage(role="system", content="You are a coach."),
            ChatMessage(role="user", content=BOOTSTRAP_MESSAGE),
            ChatMessage(role="assistant", content='{"feedback":"Hi","nextQuestion":"Why?"}'),
        ]

        # Act
        turns = history_to_transcript(messages)

        # Assert
        assert turns == [CoachTurn(feedback="Hi", question="Why?")]

    def test_assistant_message_must_be_object(self):
        with pytest.raises(SchemaError):
            history_to_transcript([ChatMessage(role="assistant", content='["a"]')])


class TestPersistedFormat:
    """Test cases for the stored JSON array."""

    def test_serialized_turns_match_ui_shape(self, finished_transcript):
        # Act
        data = json.loads(serialize_transcript(finished_transcript[:2]))

        # Assert
        assert data == [
            {"role": "model", "feedback": "Welcome, Maya!", "question": "Why nursing?"},
            {"role": "user", "text": "I like helping people."},
        ]

    def test_round_trip_through_storage(self, finished_transcript):
        assert deserialize_transcript(serialize_transcript(finished_transcript)) == finished_transcript

    def test_deserialize_accepts_browser_written_array(self):
        raw = '[{"role":"model","feedback":"Hi","question":"Why?"},{"role":"user","text":"Because"}]'

        turns = deserialize_transcript(raw)

        assert turns == [CoachTurn(feedback="Hi", question="Why?"), UserTurn(text="Because")]

    @pytest.mark.parametrize(
        "raw",
        ["{not json", '{"role":"user"}', '[{"role":"robot","text":"beep"}]', '[{"role":"user"}]'],
    )
    def test_corrupt_content_raises_schema_error(self, raw):
        with pytest.raises(SchemaError):
            deserialize_transcript(raw)
