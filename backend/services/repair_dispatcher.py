"""
Bounded field-level repair loop.

When a draft fails validation, only the fields carrying error-severity
issues are repaired; everything else is carried over unchanged. The loop
never runs more than MAX_REPAIR_ATTEMPTS times, no matter what the caller
requests.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from core.domain.content import FAQ, DraftArtifact, ExperienceEvidence
from core.domain.generation import DraftGenerationInput
from core.domain.patch import DraftPatch
from core.domain.validation import RepairSuggestion, ValidationResult, base_field
from core.interfaces.services import FieldRepairService
from services.content_validator import ContentValidator
from services.deadline import call_with_deadline

logger = logging.getLogger(__name__)

MAX_REPAIR_ATTEMPTS = 2
FAQ_REPAIR_FLOOR = 5
EVIDENCE_REPAIR_SUMMARY = "Experience evidence placeholders for editorial review"

_SECTION_INDEX = re.compile(r"^sections\[(\d+)\]$")


class RepairState(str, Enum):
    VALIDATED = "validated"
    REPAIRING = "repairing"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


class RepairStrategyError(Exception):
    """A field strategy ran but could not produce a usable value."""


@dataclass
class RepairOutcome:
    draft: DraftArtifact
    validation: ValidationResult
    attempts: int = 0
    state: RepairState = RepairState.VALIDATED
    warnings: list[str] = field(default_factory=list)


def collect_error_repairs(validation: ValidationResult) -> list[RepairSuggestion]:
    """Suggestions whose exact field path carries at least one error."""
    return [s for s in validation.repair_suggestions if validation.has_error_on(s.field)]


def group_by_field(suggestions: list[RepairSuggestion]) -> dict[str, list[RepairSuggestion]]:
    """Group suggestions by base field name, in order of first appearance."""
    groups: dict[str, list[RepairSuggestion]] = {}
    for suggestion in suggestions:
        groups.setdefault(base_field(suggestion.field), []).append(suggestion)
    return groups


class RepairDispatcher:
    """Runs targeted repairs against a failing draft until it passes or the attempts run out."""

    def __init__(
        self,
        repair_service: FieldRepairService,
        validator: ContentValidator,
        timeout_seconds: Optional[float] = None,
        max_attempts: int = MAX_REPAIR_ATTEMPTS,
    ):
        self.repair_service = repair_service
        self.validator = validator
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(0, min(max_attempts, MAX_REPAIR_ATTEMPTS))

    async def run(
        self,
        draft: DraftArtifact,
        validation: ValidationResult,
        draft_input: DraftGenerationInput,
        requested_attempts: Optional[int] = 0,
        run_id: str = "",
    ) -> RepairOutcome:
        limit = max(0, min(requested_attempts or 0, self.max_attempts))
        outcome = RepairOutcome(draft=draft, validation=validation)

        while not outcome.validation.valid and outcome.attempts < limit:
            outcome.attempts += 1
            outcome.state = RepairState.REPAIRING
            attempt = outcome.attempts

            failing = [i.field for i in outcome.validation.errors][:3]
            outcome.warnings.append(
                f"Validation failed (attempt {attempt}/{limit}), repairing: {', '.join(failing)}"
            )

            suggestions = collect_error_repairs(outcome.validation)
            if not suggestions:
                outcome.warnings.append(
                    f"Repair attempt {attempt} found no actionable error-level repairs"
                )
                break

            patch = DraftPatch(outcome.draft)
            for field_name, group in group_by_field(suggestions).items():
                try:
                    await self._dispatch(field_name, group, patch, draft_input, attempt, outcome.warnings)
                except Exception as e:
                    logger.warning(
                        "Repair of %s failed in attempt %d: %s",
                        field_name,
                        attempt,
                        e,
                        extra={"run_id": run_id, "stage": "repair", "attempt": attempt, "field": field_name},
                    )
                    outcome.warnings.append(f"Repair of {field_name} failed in attempt {attempt}: {e}")

            if not patch.has_changes:
                outcome.warnings.append(f"Repair attempt {attempt} produced no changes")
                break

            logger.info(
                "Repair attempt %d touched %s",
                attempt,
                ", ".join(patch.touched_fields),
                extra={"run_id": run_id, "stage": "repair", "attempt": attempt},
            )
            outcome.draft = patch.apply()
            outcome.validation = self.validator.validate(outcome.draft)

        if outcome.validation.valid:
            outcome.state = RepairState.SUCCEEDED
        else:
            outcome.state = RepairState.EXHAUSTED
            outcome.warnings.append(
                f"Post still has {len(outcome.validation.errors)} error(s) after "
                f"{outcome.attempts} repair attempt(s). Manual review required."
            )

        return outcome

    async def _dispatch(
        self,
        field_name: str,
        suggestions: list[RepairSuggestion],
        patch: DraftPatch,
        draft_input: DraftGenerationInput,
        attempt: int,
        warnings: list[str],
    ) -> None:
        if field_name == "heroAnswer":
            await self._repair_hero_answer(suggestions, patch, draft_input)
        elif field_name == "sections":
            await self._repair_sections(suggestions, patch, draft_input, attempt, warnings)
        elif field_name in ("faq", "faqs"):
            self._repair_faq(patch, draft_input)
        elif field_name == "experienceEvidence":
            self._repair_experience_evidence(patch, draft_input)
        else:
            logger.info("Cannot repair field %s in place, skipping", field_name)
            warnings.append(f"Cannot repair field {field_name} in place, skipping")

    # ------------------------------------------------------------------
    # Field strategies
    # ------------------------------------------------------------------

    async def _repair_hero_answer(self, suggestions, patch, draft_input) -> None:
        text = await call_with_deadline(
            self.repair_service.regenerate_hero_answer(
                draft_input,
                patch.base.hero_answer,
                "\n".join(s.prompt for s in suggestions),
            ),
            self.timeout_seconds,
            "Hero answer repair",
        )
        if not text or not text.strip():
            raise RepairStrategyError("repair produced an empty hero answer")
        patch.set_hero_answer(text)

    async def _repair_sections(self, suggestions, patch, draft_input, attempt, warnings) -> None:
        indexed: dict[int, list[str]] = {}
        general: list[str] = []
        for suggestion in suggestions:
            match = _SECTION_INDEX.match(suggestion.field)
            if match:
                indexed.setdefault(int(match.group(1)), []).append(suggestion.prompt)
            else:
                general.append(suggestion.prompt)

        sections = patch.base.sections
        for index, prompts in indexed.items():
            if index >= len(sections):
                continue
            try:
                repaired = await call_with_deadline(
                    self.repair_service.regenerate_section(
                        draft_input, sections[index], "\n".join(prompts)
                    ),
                    self.timeout_seconds,
                    f"Section {index} repair",
                )
                if repaired is None:
                    raise RepairStrategyError("no section returned")
                patch.replace_section(index, repaired)
            except Exception as e:
                logger.warning("Repair of sections[%d] failed in attempt %d: %s", index, attempt, e)
                warnings.append(f"Repair of sections[{index}] failed in attempt {attempt}: {e}")

        if general:
            # a draft without sections needs full regeneration, not an extra section
            if not sections:
                raise RepairStrategyError("draft has no sections to extend")
            added = await call_with_deadline(
                self.repair_service.generate_section(
                    draft_input, patch.base, "\n".join(general)
                ),
                self.timeout_seconds,
                "Section generation",
            )
            if added is None:
                raise RepairStrategyError("no section returned")
            patch.append_section(added)

    def _repair_faq(self, patch: DraftPatch, draft_input: DraftGenerationInput) -> None:
        suggestions = draft_input.brief.faq_suggestions
        cap = max(len(suggestions), FAQ_REPAIR_FLOOR)
        faqs = list(patch.base.faq)

        for suggestion in suggestions:
            if len(faqs) >= cap:
                break
            probe = suggestion.question.lower()[:20]
            if any(probe in existing.question.lower() for existing in faqs):
                continue
            faqs.append(
                FAQ(
                    id=f"faq-repair-{uuid.uuid4().hex[:8]}",
                    question=suggestion.question,
                    answer=(
                        "[PLACEHOLDER: Answer based on: "
                        f"{', '.join(suggestion.key_points_for_answer)}]"
                    ),
                )
            )

        patch.set_faq(faqs)

    def _repair_experience_evidence(self, patch: DraftPatch, draft_input: DraftGenerationInput) -> None:
        patch.set_experience_evidence(
            ExperienceEvidence(
                summary=EVIDENCE_REPAIR_SUMMARY,
                details=None,
                placeholders=tuple(
                    f"[EXPERIENCE_EVIDENCE_{n}]: {prompt}"
                    for n, prompt in enumerate(draft_input.brief.experience_prompts, start=1)
                ),
            )
        )
