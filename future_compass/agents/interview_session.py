"""
Interview Session Agent

Turn-based mock interview for one career, driven by the chat-completions
client and persisted through the transcript store after every change.

State machine:
    UNINITIALIZED --open()--> ACTIVE --send() with summary / finish()--> FINISHED
    any state --reset()--> brand-new ACTIVE session under the same key

The transcript is the single source of truth: the provider-visible history
is always rebuilt from it (system prompt + transcript_to_history), so a
session restored from storage sends exactly what a live one would.

Example Usage:
    session = await InterviewSession.open("Data Scientist", client=client, store=store)
    turn = await session.send("I debugged a production outage")
    summary = await session.finish()
    session = await session.reset()
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from future_compass.agents.transcript_codec import (
    BOOTSTRAP_MESSAGE,
    END_MARKER,
    FINISH_SENTINEL,
    INTERVIEW_SCHEMA,
    parse_coach_reply,
    transcript_to_history,
)
from future_compass.models.interview import (
    ChatMessage,
    CoachTurn,
    InterviewTurn,
    SessionState,
    UserTurn,
)
from future_compass.utils.errors import (
    ProviderError,
    SchemaError,
    SessionBusyError,
    SessionStateError,
    StorageError,
    ValidationError,
)
from future_compass.utils.llm_client import ChatCompletionClient
from future_compass.utils.logger import get_logger
from future_compass.utils.prompt_loader import render_prompt
from future_compass.utils.transcript_store import TranscriptStore, interview_storage_key

RESPONSE_NAME = "InterviewTurn"

# Literal coach questions used when a turn cannot be completed
PROVIDER_FALLBACK_QUESTION = "Sorry, I encountered an error. Please try again."
PARSE_FALLBACK_QUESTION = "I didn't catch that."


def build_system_prompt(career_title: str) -> str:
    """Render the fixed coaching instruction for a career."""
    return render_prompt(
        "interview/coach_system.j2",
        career_title=career_title,
        finish_sentinel=FINISH_SENTINEL,
        end_marker=END_MARKER,
    ).strip()


class InterviewSession:
    """Mock interview for one career title."""

    def __init__(
        self,
        career_title: str,
        client: ChatCompletionClient,
        store: TranscriptStore,
        correlation_id: Optional[str] = None,
    ):
        """
        Create an UNINITIALIZED session. Use InterviewSession.open() instead.

        Args:
            career_title: Career being interviewed for
            client: Chat-completions client (proxy or provider)
            store: Transcript store keyed by normalized career name
            correlation_id: Optional correlation ID for logging

        Raises:
            ValidationError: If career_title is blank
        """
        if not career_title or not career_title.strip():
            raise ValidationError("Career title is required", missing_fields=["career_title"])

        self._career_title = career_title
        self._client = client
        self._store = store
        self._correlation_id = correlation_id
        self._storage_key = interview_storage_key(career_title)
        self._system_prompt = build_system_prompt(career_title)
        self._turns: List[InterviewTurn] = []
        self._state = SessionState.UNINITIALIZED
        self._busy = False
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="interview",
            component="interview_session",
        ).bind(storage_key=self._storage_key)

    @classmethod
    async def open(
        cls,
        career_title: str,
        client: ChatCompletionClient,
        store: TranscriptStore,
        correlation_id: Optional[str] = None,
    ) -> "InterviewSession":
        """
        Open the interview for a career, resuming a saved transcript if any.

        A saved transcript is replayed without a network call; one that ends
        with a summary yields a FINISHED session. A saved transcript that ends
        with an unanswered student reply gets that reply answered first, with
        the same fallback rules as send(). Otherwise the coach is asked to
        begin and its opening turn is stored as turn 0.

        Raises:
            ValidationError: If career_title is blank
            ProviderError: If the opening request fails
            SchemaError: If the opening reply cannot be parsed
        """
        session = cls(career_title, client, store, correlation_id=correlation_id)
        saved = session._load_saved()
        if saved:
            session._restore(saved)
            if isinstance(session.last_turn, UserTurn):
                with session._exclusive():
                    await session._answer_pending()
        else:
            with session._exclusive():
                await session._bootstrap()
        return session

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def career_title(self) -> str:
        return self._career_title

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_finished(self) -> bool:
        return self._state is SessionState.FINISHED

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def transcript(self) -> List[InterviewTurn]:
        """Copy of the transcript turns, oldest first."""
        return list(self._turns)

    @property
    def last_turn(self) -> Optional[InterviewTurn]:
        return self._turns[-1] if self._turns else None

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def history(self) -> List[ChatMessage]:
        """Provider-visible conversation: system prompt, bootstrap, then every turn."""
        return [
            ChatMessage(role="system", content=self._system_prompt),
            *transcript_to_history(self._turns),
        ]

    # ------------------------------------------------------------------
    # Turn protocol
    # ------------------------------------------------------------------

    async def send(self, user_text: str) -> CoachTurn:
        """
        Answer the current question and get the coach's next turn.

        The answer is persisted before the provider call. Provider or parse
        failures become a fallback coach turn and the session stays ACTIVE.

        Args:
            user_text: The student's answer

        Returns:
            The appended coach turn

        Raises:
            SessionBusyError: If another call is in flight on this session
            SessionStateError: If the session is not ACTIVE
            ValidationError: If user_text is blank
        """
        with self._exclusive():
            self._require_active("send")
            if not user_text or not user_text.strip():
                raise ValidationError("Answer text is required", missing_fields=["text"])

            self._append(UserTurn(text=user_text))
            return await self._answer_pending()

    async def finish(self) -> CoachTurn:
        """
        End the interview and get the summary.

        Nothing is appended unless the reply parses and carries a summary;
        failures are raised and the session stays ACTIVE.

        Returns:
            The final coach turn (summary populated)

        Raises:
            SessionBusyError: If another call is in flight on this session
            SessionStateError: If the session is not ACTIVE
            ProviderError: If the provider call fails
            SchemaError: If the reply cannot be parsed or has no summary
        """
        with self._exclusive():
            self._require_active("finish")

            messages = [*self.history, ChatMessage(role="user", content=FINISH_SENTINEL)]
            reply = await self._request(messages)
            turn = parse_coach_reply(reply)
            if not turn.is_final:
                raise SchemaError(
                    "Finish reply did not include an interviewSummary", raw_response=reply
                )

            turn = self._closing(turn)
            self._append(turn)
            self._state = SessionState.FINISHED
            self.logger.info("Interview finished", turn_count=len(self._turns))
            return turn

    async def reset(self) -> "InterviewSession":
        """
        Discard this session and its saved transcript and start over.

        Returns:
            A new ACTIVE session for the same career with only the opening turn

        Raises:
            SessionBusyError: If another call is in flight on this session
            ProviderError: If the opening request fails
            SchemaError: If the opening reply cannot be parsed
        """
        with self._exclusive():
            try:
                self._store.clear(self._storage_key)
            except StorageError as e:
                self.logger.error("Failed to clear saved transcript", error=str(e))

            self._turns = []
            self._state = SessionState.UNINITIALIZED
            self.logger.info("Interview reset")

            fresh = InterviewSession(
                self._career_title,
                self._client,
                self._store,
                correlation_id=self._correlation_id,
            )
            with fresh._exclusive():
                await fresh._bootstrap()
            return fresh

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Allow only one send/finish/reset at a time on this session."""
        if self._busy:
            raise SessionBusyError(
                f"Interview for '{self._career_title}' is waiting on a reply"
            )
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _require_active(self, operation: str) -> None:
        if self._state is not SessionState.ACTIVE:
            raise SessionStateError(
                f"Cannot {operation} an interview in state '{self._state.value}'"
            )

    async def _request(self, messages: List[ChatMessage]) -> str:
        return await self._client.complete(
            messages, schema_name=INTERVIEW_SCHEMA, response_name=RESPONSE_NAME
        )

    async def _answer_pending(self) -> CoachTurn:
        """Get the coach turn for the trailing user turn; failures become fallback turns."""
        try:
            reply = await self._request(self.history)
            turn = parse_coach_reply(reply)
        except ProviderError as e:
            self.logger.error("Interview turn failed, using fallback", error=str(e))
            turn = CoachTurn(question=PROVIDER_FALLBACK_QUESTION)
        except SchemaError as e:
            self.logger.warning("Interview reply unparseable, using fallback", error=str(e))
            turn = CoachTurn(question=PARSE_FALLBACK_QUESTION)

        if turn.is_final:
            turn = self._closing(turn)
        self._append(turn)
        if turn.is_final:
            self._state = SessionState.FINISHED
            self.logger.info("Interview finished by coach", turn_count=len(self._turns))
        return turn

    @staticmethod
    def _closing(turn: CoachTurn) -> CoachTurn:
        # Only the summary is shown on the closing turn; drop the END marker
        return turn.model_copy(update={"question": ""})

    async def _bootstrap(self) -> None:
        """Ask the coach to begin and store the opening turn."""
        messages = [
            ChatMessage(role="system", content=self._system_prompt),
            ChatMessage(role="user", content=BOOTSTRAP_MESSAGE),
        ]
        reply = await self._request(messages)
        turn = parse_coach_reply(reply)

        self._append(turn)
        self._state = SessionState.FINISHED if turn.is_final else SessionState.ACTIVE
        self.logger.info("Interview started", career_title=self._career_title)

    def _load_saved(self) -> Optional[List[InterviewTurn]]:
        try:
            return self._store.load(self._storage_key)
        except StorageError as e:
            self.logger.error("Saved transcript unavailable, starting fresh", error=str(e))
            return None

    def _restore(self, turns: List[InterviewTurn]) -> None:
        self._turns = list(turns)
        last = self._turns[-1]
        if isinstance(last, CoachTurn) and last.is_final:
            self._state = SessionState.FINISHED
        else:
            self._state = SessionState.ACTIVE
        if isinstance(last, UserTurn):
            self.logger.warning("Resumed transcript ends with an unanswered reply, answering it")
        self.logger.info(
            "Interview resumed",
            turn_count=len(self._turns),
            state=self._state.value,
        )

    def _append(self, turn: InterviewTurn) -> None:
        """Append then persist; a failed write leaves the in-memory session usable."""
        self._turns.append(turn)
        try:
            self._store.save(self._storage_key, self._turns)
        except StorageError as e:
            self.logger.error("Failed to persist transcript", error=str(e))
