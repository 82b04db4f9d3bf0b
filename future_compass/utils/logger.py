"""
Structured logging for FutureCompass.

Every record is one JSON object carrying the correlation id of the CLI run
or proxy process, the flow it belongs to ("analysis", "interview", "proxy")
and the emitting component, so one student's session can be followed from
the terminal through the proxy to the transcript store.

    configure_logging(log_file="logs/future-compass.log", log_level="INFO")
    log = get_logger(correlation_id=run_id, phase="interview", component="interview_session")
    log.info("Interview resumed", turn_count=5)

Levels used:
    DEBUG    prompts rendered, payload sizes, transcript reads/writes
    INFO     analysis done, interview opened/finished/reset, proxied calls
    WARNING  discarded transcripts, fallback coach turns, lenient analysis replies
    ERROR    provider failures, storage failures, missing proxy secret
"""

import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

import structlog
from structlog.types import BindableLogger, EventDict, WrappedLogger

MASK = "***MASKED***"

# Field names (or _/- separated parts of them) whose values never reach a log
SENSITIVE_FIELDS = frozenset(
    {"password", "api_key", "token", "secret", "credential", "auth", "authorization"}
)


def _is_sensitive(field_name: str) -> bool:
    name = field_name.lower()
    return any(
        name == word
        or name.startswith((f"{word}_", f"{word}-"))
        or name.endswith((f"_{word}", f"-{word}"))
        for word in SENSITIVE_FIELDS
    )


def mask_credentials(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """structlog processor replacing secret-looking fields with a fixed mask."""
    for field_name in list(event_dict):
        if _is_sensitive(field_name):
            event_dict[field_name] = MASK
    return event_dict


def configure_logging(
    log_file: Optional[str] = "logs/future-compass.log", log_level: str = "INFO"
) -> None:
    """
    Route structlog through stdlib logging as JSON lines.

    Called once by the CLI before any flow starts. Records go to stdout and,
    when log_file is set, to that file (its directory is created).
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            mask_credentials,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    correlation_id: Optional[str] = None,
    phase: Optional[str] = None,
    component: Optional[str] = None,
) -> BindableLogger:
    """
    Logger with run context bound.

    Args:
        correlation_id: Id shared by everything in one run (a new UUID if None)
        phase: Flow name: "analysis", "interview", "proxy" or "coordinator"
        component: Emitting class, e.g. "career_analyzer"
    """
    context = {"correlation_id": correlation_id or str(uuid.uuid4())}
    if phase:
        context["phase"] = phase
    if component:
        context["component"] = component
    return structlog.get_logger().bind(**context)
