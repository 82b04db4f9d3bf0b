"""
Prompt templates for the counselor and interview coach.

Templates live in future_compass/prompts/ and are rendered with jinja2.
Missing variables fail loudly so a renamed field never produces a prompt
with a silent gap.

    from future_compass.utils.prompt_loader import render_prompt

    system_prompt = render_prompt("interview/coach_system.j2", career_title="Nurse",
                                  finish_sentinel="FINISH_INTERVIEW", end_marker="END")
"""

from pathlib import Path
from typing import Any, Optional

import structlog
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    Undefined,
)

logger = structlog.get_logger(__name__)

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


class PromptLoader:
    """jinja2 environment bound to one prompts directory."""

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        strict_undefined: bool = True,
    ) -> None:
        self.template_dir = template_dir or PROMPTS_DIR
        self.strict_undefined = strict_undefined
        # Plain-text prompts: no HTML escaping, block tags leave no blank lines
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined if strict_undefined else Undefined,
        )

    def render(
        self,
        template_name: str,
        correlation_id: Optional[str] = None,
        **variables: Any,
    ) -> str:
        """
        Render a template by its path under the prompts directory.

        Raises:
            TemplateNotFound, TemplateSyntaxError, UndefinedError: from jinja2,
            after logging which template and variables were involved
        """
        try:
            rendered = self.env.get_template(template_name).render(**variables)
        except TemplateError as e:
            logger.error(
                "Prompt rendering failed",
                template_name=template_name,
                template_dir=str(self.template_dir),
                error_type=type(e).__name__,
                error=str(e),
                variables_provided=sorted(variables),
                correlation_id=correlation_id,
            )
            raise

        logger.debug(
            "Prompt rendered",
            template_name=template_name,
            rendered_length=len(rendered),
            correlation_id=correlation_id,
        )
        return rendered

    def get_system_prompt(
        self,
        prompt_type: str,
        correlation_id: Optional[str] = None,
        **variables: Any,
    ) -> str:
        """Render base/<prompt_type>.j2."""
        return self.render(
            f"base/{prompt_type}.j2", correlation_id=correlation_id, **variables
        )


_default_loader: Optional[PromptLoader] = None


def get_default_loader() -> PromptLoader:
    """Shared loader for the packaged prompts."""
    global _default_loader
    if _default_loader is None:
        _default_loader = PromptLoader()
    return _default_loader


def render_prompt(
    template_name: str,
    correlation_id: Optional[str] = None,
    **variables: Any,
) -> str:
    return get_default_loader().render(
        template_name, correlation_id=correlation_id, **variables
    )
