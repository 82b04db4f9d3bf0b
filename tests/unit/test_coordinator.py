"""
Unit tests for the CLI coordinator.
"""

import json

import pytest
from rich.console import Console

from future_compass.coordinator import FutureCompassCoordinator
from future_compass.models.config import AppSettings
from future_compass.models.profile import Profile
from future_compass.utils.errors import ConfigurationError, ProviderError


@pytest.fixture
def console():
    return Console(record=True, width=120)


@pytest.fixture
def coordinator(scripted_client, memory_store, console):
    return FutureCompassCoordinator(
        settings=AppSettings(),
        client=scripted_client,
        store=memory_store,
        console=console,
        correlation_id="test-run",
    )


def scripted_input(*lines):
    remaining = list(lines)
    return lambda: remaining.pop(0)


class TestLoadProfile:
    def test_loads_valid_profile(self, coordinator, tmp_path):
        # Arrange
        profile_file = tmp_path / "profile.json"
        profile_file.write_text(
            json.dumps({"name": "Maya", "gradeLevel": "9th Grade", "hobbies": "Chess"}),
            encoding="utf-8",
        )

        # Act
        profile = coordinator.load_profile(profile_file)

        # Assert
        assert profile == Profile(name="Maya", grade_level="9th Grade", hobbies="Chess")

    def test_missing_hobbies_rejected(self, coordinator, tmp_path):
        profile_file = tmp_path / "profile.json"
        profile_file.write_text(json.dumps({"name": "Maya"}), encoding="utf-8")

        with pytest.raises(ConfigurationError):
            coordinator.load_profile(str(profile_file))


class TestRunAnalysis:
    @pytest.mark.asyncio
    async def test_renders_dashboard(self, coordinator, scripted_client, console, sample_profile, analysis_payload):
        # Arrange
        scripted_client.queue(json.dumps(analysis_payload))

        # Act
        result = await coordinator.run_analysis(sample_profile)

        # Assert
        output = console.export_text()
        assert result.top_career().title == "Veterinarian"
        assert "Skills Report Card" in output
        assert "Veterinarian (92% match)" in output
        assert "1. Take AP Biology" in output

    @pytest.mark.asyncio
    async def test_incomplete_profile_returns_none(self, coordinator, scripted_client, console):
        result = await coordinator.run_analysis(Profile(name="Maya"))

        assert result is None
        assert scripted_client.calls == []
        assert "hobbies" in console.export_text()

    @pytest.mark.asyncio
    async def test_provider_failure_returns_none(self, coordinator, scripted_client, console, sample_profile):
        scripted_client.queue(ProviderError("down"))

        result = await coordinator.run_analysis(sample_profile)

        assert result is None
        assert "Something went wrong" in console.export_text()


class TestRunInterview:
    @pytest.mark.asyncio
    async def test_answer_then_finish(self, coordinator, scripted_client, console, make_reply):
        # Arrange
        scripted_client.queue(
            make_reply("Welcome!", "Why nursing?"),
            make_reply("Good", "Describe a hard day."),
            make_reply("Great job!", "END", summary="- Strength: empathy"),
        )

        # Act
        session = await coordinator.run_interview(
            "Nurse", read_input=scripted_input("I like helping people", "/finish")
        )

        # Assert
        output = console.export_text()
        assert session.is_finished
        assert "Why nursing?" in output
        assert "Describe a hard day." in output
        assert "Interview Summary" in output
        assert "- Strength: empathy" in output

    @pytest.mark.asyncio
    async def test_quit_keeps_progress(self, coordinator, scripted_client, memory_store, make_reply):
        scripted_client.queue(make_reply("Welcome!", "Q1"))

        session = await coordinator.run_interview("Nurse", read_input=scripted_input("", "/quit"))

        assert not session.is_finished
        assert coordinator.list_sessions() == ["futurecompass_interview_nurse"]
        assert memory_store.load("futurecompass_interview_nurse") == session.transcript

    @pytest.mark.asyncio
    async def test_title_with_brackets_printed_literally(self, coordinator, scripted_client, console, make_reply):
        scripted_client.queue(make_reply("Welcome!", "Q1"))

        await coordinator.run_interview("Nurse [ICU]", read_input=scripted_input("/quit"))

        assert "Coach Interview: Nurse [ICU]" in console.export_text()

    @pytest.mark.asyncio
    async def test_reset_restarts_interview(self, coordinator, scripted_client, make_reply):
        scripted_client.queue(make_reply("Welcome!", "Q1"), make_reply("Welcome again!", "Fresh Q1"))

        session = await coordinator.run_interview("Nurse", read_input=scripted_input("/reset", "/quit"))

        assert len(session.transcript) == 1
        assert session.transcript[0].question == "Fresh Q1"

    @pytest.mark.asyncio
    async def test_failed_finish_keeps_loop_running(self, coordinator, scripted_client, console, make_reply):
        scripted_client.queue(make_reply("Welcome!", "Q1"), ProviderError("down"))

        session = await coordinator.run_interview("Nurse", read_input=scripted_input("/finish", "/quit"))

        assert not session.is_finished
        assert "Could not complete that" in console.export_text()

    @pytest.mark.asyncio
    async def test_resumed_finished_interview_shows_summary(self, coordinator, scripted_client, console, make_reply):
        # Arrange
        scripted_client.queue(make_reply("Welcome!", "Q1"), make_reply("Bye", "END", summary="Well done"))
        await coordinator.run_interview("Nurse", read_input=scripted_input("/finish"))

        # Act
        session = await coordinator.run_interview("Nurse", read_input=scripted_input())

        # Assert
        assert session.is_finished
        assert len(scripted_client.calls) == 2

    @pytest.mark.asyncio
    async def test_start_failure_returns_none(self, coordinator, scripted_client, console):
        scripted_client.queue(ProviderError("down"))

        session = await coordinator.run_interview("Nurse", read_input=scripted_input())

        assert session is None
        assert "couldn't start the interview" in console.export_text()
