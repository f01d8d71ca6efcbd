"""
Post generation orchestrator.

Single entry point for generating a complete article from a brief, content
idea or topic: brief resolution, outline check, draft generation, the quality
gate and the bounded repair loop.
"""

import dataclasses
import logging
import time
from functools import lru_cache
from typing import Optional
from uuid import uuid4

from core.domain.content import Author, Brief, DraftArtifact, SearchIntent, TopicSuggestion
from core.domain.generation import (
    BriefInput,
    BriefInputKind,
    DraftGenerationInput,
    GenerationOptions,
    GenerationOutcome,
    GenerationResult,
)
from core.domain.validation import Severity, ValidationResult
from core.interfaces.services import DraftGenerator, FieldRepairService, OutlineService
from core.options import ValidationConfig
from services.brief_resolver import (
    DEFAULT_ANGLE,
    DEFAULT_UNIQUE_ANGLE,
    NEUTRAL_EEAT_SCORE,
    BriefResolutionError,
    BriefResolver,
)
from services.content_signals import ContentSignalClassifier
from services.content_validator import ContentValidator, quick_validate, validate_content
from services.deadline import CollaboratorTimeoutError, call_with_deadline
from services.repair_dispatcher import MAX_REPAIR_ATTEMPTS, RepairDispatcher

logger = logging.getLogger(__name__)

RESOLUTION_ERROR = "Could not resolve or generate brief from input"


def build_draft_input(
    brief: Brief,
    brief_input: BriefInput,
    author: Author,
    options: GenerationOptions,
) -> DraftGenerationInput:
    """Assemble draft generation input; keyword and intent come from the richest source."""
    draft_input = DraftGenerationInput(
        brief=brief,
        author=author,
        primary_keyword=" ".join(brief.suggested_title.split()[:3]),
        search_intent=SearchIntent.INFORMATIONAL.value,
        exemplar_posts=list(options.exemplar_posts),
        use_style_analysis=options.use_style_analysis,
        target_opening_hook=options.target_opening_hook,
        product_links=list(options.product_links),
    )

    if brief_input.kind == BriefInputKind.CONTENT_IDEA:
        idea = brief_input.payload
        draft_input.primary_keyword = idea.primary_keyword
        draft_input.search_intent = idea.search_intent.value
        draft_input.cluster_topic_id = idea.cluster_topic_id
    elif brief_input.kind == BriefInputKind.TOPIC:
        topic = brief_input.payload
        draft_input.primary_keyword = topic.primary_keyword
        draft_input.search_intent = topic.search_intent.value

    return draft_input


class PostGenerationOrchestrator:
    """Sequences brief resolution, draft generation, validation and repair."""

    def __init__(
        self,
        outline_service: OutlineService,
        draft_generator: DraftGenerator,
        repair_service: FieldRepairService,
        validation_config: Optional[ValidationConfig] = None,
        classifier: Optional[ContentSignalClassifier] = None,
        timeout_seconds: Optional[float] = None,
        max_repair_attempts: int = MAX_REPAIR_ATTEMPTS,
    ):
        self.outline_service = outline_service
        self.draft_generator = draft_generator
        self.repair_service = repair_service
        self.validation_config = validation_config or ValidationConfig()
        self.classifier = classifier
        self.timeout_seconds = timeout_seconds
        self.max_repair_attempts = max_repair_attempts
        self.resolver = BriefResolver(outline_service, timeout_seconds)

    def _validator(self, options: GenerationOptions) -> ContentValidator:
        return ContentValidator(options.validation_config or self.validation_config, self.classifier)

    async def generate_post_from_brief(
        self,
        brief_input: Optional[BriefInput],
        author: Author,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResult:
        """
        Generate a complete post from a brief, content idea or topic.

        Never raises: failures are reported through ``errors`` and ``outcome``.
        """
        options = options or GenerationOptions()
        start_time = time.perf_counter()
        run_id = uuid4().hex[:12]
        errors: list[str] = []
        warnings: list[str] = []
        outline = None
        post: Optional[DraftArtifact] = None
        validation: Optional[ValidationResult] = None
        repair_attempts = 0

        def elapsed_ms() -> int:
            return int((time.perf_counter() - start_time) * 1000)

        try:
            # Step 1: Resolve brief
            try:
                brief, generated_outline = await self.resolver.resolve_with_outline(brief_input, options)
            except BriefResolutionError as e:
                logger.warning("Brief resolution failed: %s", e, extra={"run_id": run_id, "stage": "resolve"})
                return GenerationResult(
                    success=False,
                    errors=[RESOLUTION_ERROR],
                    duration_ms=elapsed_ms(),
                    outcome=GenerationOutcome.FAILED,
                    run_id=run_id,
                )

            # Step 2: Check the outline when we started from a raw topic
            if brief_input.kind == BriefInputKind.TOPIC:
                outline = generated_outline
                outline_validation = self.outline_service.validate_outline(outline)
                if not outline_validation.valid:
                    errors.extend(outline_validation.issues)
                warnings.extend(outline_validation.warnings)

            # Step 3: Prepare draft generation input
            draft_input = build_draft_input(brief, brief_input, author, options)

            # Step 4: Generate the draft
            logger.info(
                "Generating draft for '%s'",
                brief.suggested_title,
                extra={"run_id": run_id, "stage": "draft"},
            )
            post = await call_with_deadline(
                self.draft_generator.generate_draft(draft_input),
                self.timeout_seconds,
                "Draft generation",
            )

            # Step 5: Validate and repair unless skipped
            if not options.skip_validation:
                validator = self._validator(options)
                validation = validator.validate(post)

                dispatcher = RepairDispatcher(
                    self.repair_service,
                    validator,
                    timeout_seconds=self.timeout_seconds,
                    max_attempts=self.max_repair_attempts,
                )
                repair = await dispatcher.run(
                    post, validation, draft_input, options.auto_repair_attempts, run_id=run_id
                )
                post, validation, repair_attempts = repair.draft, repair.validation, repair.attempts
                warnings.extend(repair.warnings)

                for issue in validation.issues:
                    if issue.severity == Severity.ERROR:
                        errors.append(f"[{issue.field}] {issue.message}")
                    elif issue.severity == Severity.WARNING:
                        warnings.append(f"[{issue.field}] {issue.message}")

            success = validation.valid if validation is not None else True
            outcome = GenerationOutcome.SUCCEEDED if success else GenerationOutcome.NEEDS_REVIEW

        except CollaboratorTimeoutError as e:
            logger.error("Generation timed out: %s", e, extra={"run_id": run_id})
            errors.append(f"Generation failed: {e}")
            success, outcome = False, GenerationOutcome.TIMED_OUT

        except Exception as e:
            logger.exception("Generation failed: %s", e, extra={"run_id": run_id})
            errors.append(f"Generation failed: {e}")
            success, outcome = False, GenerationOutcome.FAILED

        duration_ms = elapsed_ms()
        logger.info(
            "Generation finished: %s",
            outcome.value,
            extra={
                "run_id": run_id,
                "stage": "done",
                "duration_ms": duration_ms,
                "score": validation.score if validation else None,
            },
        )
        return GenerationResult(
            success=success,
            post=post,
            outline=outline,
            validation=validation,
            repair_attempts=repair_attempts,
            errors=errors,
            warnings=warnings,
            duration_ms=duration_ms,
            outcome=outcome,
            run_id=run_id,
        )

    async def quick_generate(self, topic: str, keyword: str, author: Author) -> GenerationResult:
        """Generate from a plain topic string with default options."""
        suggestion = TopicSuggestion(
            topic=topic,
            primary_keyword=keyword,
            angle=DEFAULT_ANGLE,
            search_intent=SearchIntent.INFORMATIONAL,
            unique_angle=DEFAULT_UNIQUE_ANGLE,
            eeat_score=dict(NEUTRAL_EEAT_SCORE),
        )
        return await self.generate_post_from_brief(
            BriefInput.from_topic(suggestion),
            author,
            GenerationOptions(skip_validation=False),
        )

    async def generate_with_validation(
        self,
        brief_input: Optional[BriefInput],
        author: Author,
        options: Optional[GenerationOptions] = None,
    ) -> GenerationResult:
        """Generate with validation forced on and both repair attempts."""
        options = dataclasses.replace(
            options or GenerationOptions(),
            skip_validation=False,
            auto_repair_attempts=MAX_REPAIR_ATTEMPTS,
        )
        return await self.generate_post_from_brief(brief_input, author, options)


def validate_post(post: DraftArtifact, config: Optional[ValidationConfig] = None) -> ValidationResult:
    """Validate an existing post without regenerating."""
    return validate_content(post, config)


def is_post_valid(post: DraftArtifact) -> bool:
    """Quick check that a post has no error-severity issues."""
    valid, _ = quick_validate(post)
    return valid


@lru_cache
def get_orchestrator() -> PostGenerationOrchestrator:
    """
    Get singleton orchestrator wired to the Anthropic collaborators.

    Returns:
        Configured PostGenerationOrchestrator instance
    """
    from adapters.ai.anthropic_adapter import content_ai_service
    from infrastructure.config.settings import settings

    return PostGenerationOrchestrator(
        outline_service=content_ai_service,
        draft_generator=content_ai_service,
        repair_service=content_ai_service,
        validation_config=ValidationConfig.from_settings(settings),
        timeout_seconds=settings.collaborator_timeout_seconds,
        max_repair_attempts=settings.max_repair_attempts,
    )
