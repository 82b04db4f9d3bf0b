"""
Career Analyzer Agent
Turns a student profile into a skills report card and career recommendations.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from future_compass.models.analysis import SKILL_CATEGORIES, AnalysisResult
from future_compass.models.interview import ChatMessage
from future_compass.models.profile import Profile
from future_compass.utils.errors import SchemaError
from future_compass.utils.llm_client import ChatCompletionClient, parse_json_reply
from future_compass.utils.logger import get_logger
from future_compass.utils.prompt_loader import get_default_loader
from future_compass.utils.validator import get_default_validator

ANALYSIS_SCHEMA = "analysis_result_schema.json"
RESPONSE_NAME = "AnalysisResult"

# Requested in the prompt; not enforced on the reply
EXPECTED_CAREER_COUNT = 3
EXPECTED_ROADMAP_STEPS = 3


class CareerAnalyzer:
    """Single-shot profile analysis against the chat-completions endpoint."""

    def __init__(
        self, client: ChatCompletionClient, correlation_id: Optional[str] = None
    ):
        """
        Initialize career analyzer.

        Args:
            client: Chat-completions client (proxy or provider)
            correlation_id: Optional correlation ID for logging
        """
        self.client = client
        self.correlation_id = correlation_id
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="analysis",
            component="career_analyzer",
        )

    def build_messages(self, profile: Profile) -> List[ChatMessage]:
        """Build the system + user messages for one analysis request."""
        loader = get_default_loader()
        system_prompt = loader.get_system_prompt(
            "career_counselor", correlation_id=self.correlation_id
        ).strip()
        prompt = loader.render(
            "analysis/profile_analysis.j2",
            correlation_id=self.correlation_id,
            grade_level=profile.grade_level,
            favorite_subjects=profile.favorite_subjects,
            hobbies=profile.hobbies,
            skills=profile.skills,
            dream=profile.dream,
            categories=SKILL_CATEGORIES,
            career_count=EXPECTED_CAREER_COUNT,
            roadmap_steps=EXPECTED_ROADMAP_STEPS,
        )
        return [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=prompt),
        ]

    async def analyze(self, profile: Profile) -> AnalysisResult:
        """
        Analyze a profile. Exactly one provider call, no retries.

        Args:
            profile: Submitted student profile

        Returns:
            AnalysisResult with exactly the five skill categories and at least one career

        Raises:
            ValidationError: If name or hobbies is blank (no network call made)
            ProviderError: If the provider call fails
            SchemaError: If the reply cannot be parsed into an AnalysisResult
        """
        profile.require_complete()
        self.logger.info("Starting profile analysis", grade_level=profile.grade_level)

        reply = await self.client.complete(
            self.build_messages(profile),
            schema_name=ANALYSIS_SCHEMA,
            response_name=RESPONSE_NAME,
        )

        data = parse_json_reply(reply)
        get_default_validator().validate_response(data, ANALYSIS_SCHEMA, raw_response=reply)
        data = self._reconcile(data, reply)

        try:
            result = AnalysisResult.model_validate(data)
        except PydanticValidationError as e:
            raise SchemaError(f"Invalid analysis structure: {e}", raw_response=reply)

        self.logger.info(
            "Profile analysis complete",
            career_count=len(result.careers),
            top_career=result.top_career().title if result.careers else None,
        )
        return result

    def _reconcile(self, data: Dict[str, Any], reply: str) -> Dict[str, Any]:
        """
        Normalize the skills report to the five fixed categories and check careers.

        Skill rows are matched to categories case-insensitively; duplicates and
        unknown categories are dropped. Career and roadmap counts that differ
        from what was requested are accepted and logged.

        Raises:
            SchemaError: If a category is missing or no careers were returned
        """
        by_category: Dict[str, Dict[str, Any]] = {}
        lookup = {category.lower(): category for category in SKILL_CATEGORIES}
        dropped = []
        for metric in data["skillsReport"]:
            canonical = lookup.get(metric["category"].strip().lower())
            if canonical is None or canonical in by_category:
                dropped.append(metric["category"])
                continue
            by_category[canonical] = {**metric, "category": canonical}

        if dropped:
            self.logger.warning("Dropping unexpected skill rows", categories=dropped)

        missing = [c for c in SKILL_CATEGORIES if c not in by_category]
        if missing:
            raise SchemaError(
                f"Skills report is missing categories: {', '.join(missing)}",
                raw_response=reply,
            )

        careers = data["careers"]
        if not careers:
            raise SchemaError("Analysis returned no careers", raw_response=reply)
        if len(careers) != EXPECTED_CAREER_COUNT:
            self.logger.warning(
                "Unexpected career count",
                expected=EXPECTED_CAREER_COUNT,
                received=len(careers),
            )
        short_roadmaps = [
            career["title"]
            for career in careers
            if len(career["roadmap"]) != EXPECTED_ROADMAP_STEPS
        ]
        if short_roadmaps:
            self.logger.warning(
                "Unexpected roadmap length",
                expected=EXPECTED_ROADMAP_STEPS,
                careers=short_roadmaps,
            )

        return {
            **data,
            "skillsReport": [by_category[c] for c in SKILL_CATEGORIES],
        }
