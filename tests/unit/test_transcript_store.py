"""
Unit tests for transcript storage.
"""

import os

import pytest

from future_compass.models.interview import CoachTurn, UserTurn
from future_compass.utils.errors import StorageError
from future_compass.utils.transcript_store import (
    InMemoryTranscriptStore,
    TranscriptStore,
    interview_storage_key,
)

TURNS = [
    CoachTurn(feedback="Welcome!", question="Why this career?"),
    UserTurn(text="I love data."),
]


class TestStorageKey:
    """Test cases for storage key derivation."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Data Scientist", "futurecompass_interview_data_scientist"),
            ("Nurse", "futurecompass_interview_nurse"),
            ("UX  /  UI\tDesigner", "futurecompass_interview_ux_/_ui_designer"),
        ],
    )
    def test_key_format(self, title, expected):
        assert interview_storage_key(title) == expected

    def test_titles_differing_in_case_share_a_key(self):
        assert interview_storage_key("data scientist") == interview_storage_key("Data Scientist")


class TestFileTranscriptStore:
    """Test cases for the file-backed store."""

    def test_load_missing_key_returns_none(self, tmp_path):
        assert TranscriptStore(tmp_path).load("futurecompass_interview_nurse") is None

    def test_save_then_load(self, tmp_path):
        # Arrange
        store = TranscriptStore(tmp_path / "interviews")
        key = interview_storage_key("Data Scientist")

        # Act
        store.save(key, TURNS)
        loaded = store.load(key)

        # Assert
        assert loaded == TURNS
        assert (tmp_path / "interviews" / f"{key}.json").exists()

    def test_save_replaces_previous_transcript(self, tmp_path):
        store = TranscriptStore(tmp_path)
        store.save("k", TURNS)

        store.save("k", TURNS[:1])

        assert store.load("k") == TURNS[:1]

    def test_key_with_slash_stays_inside_directory(self, tmp_path):
        # Arrange
        store = TranscriptStore(tmp_path)
        key = interview_storage_key("UX / UI Designer")

        # Act
        store.save(key, TURNS)

        # Assert
        assert store.load(key) == TURNS
        assert store.keys() == [key]
        assert [p.parent for p in tmp_path.iterdir()] == [tmp_path]

    def test_no_temp_files_left_behind(self, tmp_path):
        store = TranscriptStore(tmp_path)

        store.save("k", TURNS)

        assert sorted(os.listdir(tmp_path)) == ["k.json"]

    def test_corrupted_file_is_discarded(self, tmp_path):
        # Arrange
        store = TranscriptStore(tmp_path)
        (tmp_path / "futurecompass_interview_nurse.json").write_text("{oops", encoding="utf-8")

        # Act
        loaded = store.load("futurecompass_interview_nurse")

        # Assert
        assert loaded is None
        assert not (tmp_path / "futurecompass_interview_nurse.json").exists()

    def test_empty_array_loads_as_none(self, tmp_path):
        store = TranscriptStore(tmp_path)
        (tmp_path / "k.json").write_text("[]", encoding="utf-8")

        assert store.load("k") is None

    def test_clear_removes_and_ignores_missing(self, tmp_path):
        store = TranscriptStore(tmp_path)
        store.save("k", TURNS)

        store.clear("k")
        store.clear("k")

        assert store.load("k") is None
        assert store.keys() == []

    def test_keys_without_directory(self, tmp_path):
        assert TranscriptStore(tmp_path / "missing").keys() == []

    def test_write_failure_raises_storage_error(self, tmp_path):
        # Arrange
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file", encoding="utf-8")
        store = TranscriptStore(blocker / "interviews")

        # Act & Assert
        with pytest.raises(StorageError):
            store.save("k", TURNS)


class TestInMemoryTranscriptStore:
    """Test cases for the in-memory store."""

    def test_save_then_load(self):
        store = InMemoryTranscriptStore()

        store.save("k", TURNS)

        assert store.load("k") == TURNS
        assert store.keys() == ["k"]

    def test_raw_is_json_array_of_turns(self):
        store = InMemoryTranscriptStore()

        store.save("k", TURNS[1:])

        assert store.raw("k") == '[{"role": "user", "text": "I love data."}]'

    def test_corrupted_entry_is_removed(self):
        # Arrange
        store = InMemoryTranscriptStore()
        store.put_raw("k", '[{"role": "model", "feedback": 5}]')

        # Act
        loaded = store.load("k")

        # Assert
        assert loaded is None
        assert store.raw("k") is None

    def test_clear(self):
        store = InMemoryTranscriptStore()
        store.save("k", TURNS)

        store.clear("k")

        assert store.keys() == []
