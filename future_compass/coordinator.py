"""
CLI Coordinator Module

Runs the wizard flow in a terminal: profile -> analysis dashboard -> mock
interview for a chosen career. Library errors are turned into notices here
and nowhere else.
"""

import uuid
from pathlib import Path
from typing import Callable, List, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from future_compass.agents.career_analyzer import CareerAnalyzer
from future_compass.agents.interview_session import InterviewSession
from future_compass.models.analysis import AnalysisResult
from future_compass.models.config import AppSettings
from future_compass.models.interview import InterviewTurn, UserTurn
from future_compass.models.profile import Profile
from future_compass.utils.errors import (
    ProviderError,
    SchemaError,
    SessionStateError,
    ValidationError,
)
from future_compass.utils.llm_client import ChatCompletionClient
from future_compass.utils.logger import get_logger
from future_compass.utils.transcript_store import TranscriptStore
from future_compass.utils.validator import get_default_validator

PROFILE_SCHEMA = "profile_schema.json"

FINISH_COMMAND = "/finish"
RESET_COMMAND = "/reset"
QUIT_COMMAND = "/quit"


class FutureCompassCoordinator:
    """
    Wires settings, provider client and transcript store into the two flows.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        client: Optional[ChatCompletionClient] = None,
        store: Optional[TranscriptStore] = None,
        console: Optional[Console] = None,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            settings: Application settings (defaults to AppSettings.load())
            client: Chat-completions client (built from settings if None)
            store: Transcript store (file store in settings.storage.interview_dir if None)
            console: Rich console for output
            correlation_id: Correlation ID for logging (auto-generated if None)
        """
        self.settings = settings or AppSettings.load()
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.client = client or ChatCompletionClient.from_settings(
            self.settings, correlation_id=self.correlation_id
        )
        self.store = store or TranscriptStore(self.settings.storage.interview_dir)
        self.console = console or Console()
        self.logger = get_logger(
            correlation_id=self.correlation_id,
            phase="coordinator",
            component="cli_coordinator",
        )

    # ------------------------------------------------------------------
    # Profile + analysis
    # ------------------------------------------------------------------

    def load_profile(self, profile_path: Union[Path, str]) -> Profile:
        """
        Load and validate a profile JSON file.

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        data = get_default_validator().validate_file(Path(profile_path), PROFILE_SCHEMA)
        return Profile.model_validate(data)

    async def run_analysis(self, profile: Profile) -> Optional[AnalysisResult]:
        """
        Analyze a profile and render the dashboard.

        Returns:
            The result, or None when the flow goes back to the input step
        """
        analyzer = CareerAnalyzer(self.client, correlation_id=self.correlation_id)
        try:
            with self.console.status("Analyzing your profile..."):
                result = await analyzer.analyze(profile)
        except ValidationError as e:
            self.console.print(f"[yellow][!] {escape(str(e))}[/yellow]")
            return None
        except (ProviderError, SchemaError) as e:
            self.logger.error("Analysis failed", error=str(e))
            self.console.print(
                "[red][X] Something went wrong analyzing your profile. "
                "Please try again.[/red]"
            )
            return None

        self.render_analysis(profile, result)
        return result

    def render_analysis(self, profile: Profile, result: AnalysisResult) -> None:
        """Print the skills report card and career cards."""
        self.console.print(
            Panel(escape(result.summary), title=escape(f"Your Future, {profile.name}"), expand=False)
        )

        skills = Table(title="Skills Report Card")
        skills.add_column("Category")
        skills.add_column("Score", justify="right")
        skills.add_column("Reasoning")
        for metric in result.skills_report:
            skills.add_row(metric.category, str(metric.score), escape(metric.reasoning))
        self.console.print(skills)

        for career in result.careers:
            roadmap = "\n".join(
                f"{step_no}. {escape(step)}" for step_no, step in enumerate(career.roadmap, start=1)
            )
            body = (
                f"{escape(career.description)}\n\n"
                f"[bold]Salary:[/bold] {escape(career.salary_range)}\n"
                f"[bold]Education:[/bold] {escape(career.education_required)}\n\n"
                f"[bold]Roadmap:[/bold]\n{roadmap}"
            )
            self.console.print(
                Panel(body, title=escape(f"{career.title} ({career.match_score}% match)"), expand=False)
            )

    # ------------------------------------------------------------------
    # Mock interview
    # ------------------------------------------------------------------

    def render_turn(self, turn: InterviewTurn) -> None:
        """Print one transcript turn."""
        if isinstance(turn, UserTurn):
            self.console.print(f"[bold cyan]You:[/bold cyan] {escape(turn.text)}")
            return

        if turn.is_final:
            summary = escape(turn.summary or "")
            body = f"[italic]{escape(turn.feedback)}[/italic]\n\n{summary}" if turn.feedback else summary
            self.console.print(Panel(body, title="Interview Summary", expand=False))
            return

        if turn.feedback:
            self.console.print(f"[yellow]Coach's Feedback:[/yellow] {escape(turn.feedback)}")
        if turn.question:
            self.console.print(f"[bold]Coach:[/bold] {escape(turn.question)}")

    async def run_interview(
        self,
        career_title: str,
        read_input: Optional[Callable[[], str]] = None,
    ) -> Optional[InterviewSession]:
        """
        Run the interview loop for a career until it finishes or the user quits.

        Commands: /finish ends with a summary, /reset starts over, /quit leaves
        (progress is already saved).

        Args:
            career_title: Career to practice for
            read_input: Source of user lines (defaults to a rich prompt)

        Returns:
            The session as it stands when the loop ends, or None if it could not start
        """
        read_input = read_input or (lambda: Prompt.ask("[bold cyan]Your answer[/bold cyan]"))

        try:
            with self.console.status("Starting the interview..."):
                session = await InterviewSession.open(
                    career_title,
                    client=self.client,
                    store=self.store,
                    correlation_id=self.correlation_id,
                )
        except (ProviderError, SchemaError) as e:
            self.logger.error("Interview could not start", error=str(e))
            self.console.print(
                "[red]Sorry, I couldn't start the interview. Please check your connection.[/red]"
            )
            return None

        self.console.rule(f"Coach Interview: {escape(career_title)}")
        for turn in session.transcript:
            self.render_turn(turn)

        while not session.is_finished:
            line = read_input().strip()
            if not line:
                continue
            if line == QUIT_COMMAND:
                break

            try:
                if line == FINISH_COMMAND:
                    with self.console.status("Preparing your summary..."):
                        turn = await session.finish()
                elif line == RESET_COMMAND:
                    with self.console.status("Restarting..."):
                        session = await session.reset()
                    self.console.rule(f"Coach Interview: {escape(career_title)}")
                    turn = session.transcript[0]
                else:
                    with self.console.status("Coach is thinking..."):
                        turn = await session.send(line)
            except (ProviderError, SchemaError) as e:
                self.logger.error("Interview action failed", action=line, error=str(e))
                self.console.print("[red]Could not complete that. Please try again.[/red]")
                continue
            except SessionStateError as e:
                self.console.print(f"[yellow][!] {escape(str(e))}[/yellow]")
                break

            self.render_turn(turn)

        return session

    def list_sessions(self) -> List[str]:
        """Return storage keys of saved interviews."""
        return self.store.keys()
