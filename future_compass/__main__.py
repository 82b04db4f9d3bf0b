"""
FutureCompass command line.

    future-compass analyze config/profile.example.json
    future-compass interview "Data Scientist"
    future-compass sessions
    future-compass proxy
    future-compass credentials
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from future_compass.models.config import AppSettings
from future_compass.utils.errors import ConfigurationError, ValidationError
from future_compass.utils.logger import configure_logging

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="future-compass",
        description="Career guidance: profile analysis and mock interviews",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings JSON file (default: config/settings.json if present)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze a student profile")
    analyze.add_argument("profile", type=Path, help="Profile JSON file")
    analyze.add_argument(
        "--interview",
        action="store_true",
        help="Start a mock interview for the top career afterwards",
    )

    interview = subparsers.add_parser("interview", help="Mock interview for a career")
    interview.add_argument("career", help="Career title, e.g. 'Data Scientist'")

    subparsers.add_parser("sessions", help="List saved interview transcripts")
    subparsers.add_parser("proxy", help="Run the credential proxy")
    subparsers.add_parser("credentials", help="Store the provider API key in .env")
    return parser


async def _analyze(settings: AppSettings, profile_path: Path, then_interview: bool) -> int:
    from future_compass.coordinator import FutureCompassCoordinator

    coordinator = FutureCompassCoordinator(settings=settings)
    profile = coordinator.load_profile(profile_path)
    result = await coordinator.run_analysis(profile)
    if result is None:
        return 1
    if then_interview:
        await coordinator.run_interview(result.top_career().title)
    return 0


async def _interview(settings: AppSettings, career_title: str) -> int:
    from future_compass.coordinator import FutureCompassCoordinator

    coordinator = FutureCompassCoordinator(settings=settings)
    session = await coordinator.run_interview(career_title)
    return 0 if session is not None else 1


def _sessions(settings: AppSettings) -> int:
    from future_compass.utils.transcript_store import TranscriptStore

    keys = TranscriptStore(settings.storage.interview_dir).keys()
    if not keys:
        console.print("No saved interviews.")
    for key in keys:
        console.print(key)
    return 0


def _proxy(settings: AppSettings) -> int:
    import uvicorn

    from future_compass.proxy import create_app

    uvicorn.run(
        create_app(settings),
        host=settings.proxy.host,
        port=settings.proxy.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _credentials(settings: AppSettings) -> int:
    from future_compass.utils.credential_manager import CredentialManager

    CredentialManager().ensure_api_key(settings.proxy.api_key_env)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = AppSettings.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red][X] {escape(str(e))}[/red]")
        return 2

    configure_logging(log_file=settings.log_file, log_level=settings.log_level)

    try:
        if args.command == "analyze":
            return asyncio.run(_analyze(settings, args.profile, args.interview))
        if args.command == "interview":
            return asyncio.run(_interview(settings, args.career))
        if args.command == "sessions":
            return _sessions(settings)
        if args.command == "proxy":
            return _proxy(settings)
        return _credentials(settings)
    except (ConfigurationError, ValidationError, ValueError) as e:
        console.print(f"[red][X] {escape(str(e))}[/red]")
        return 2
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted. Progress has been saved.[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
