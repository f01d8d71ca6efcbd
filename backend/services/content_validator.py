"""
Post-generation quality gate.

Measures a draft, runs every rule check, scores the result and emits
repair suggestions for the repair dispatcher. Validation is pure: the same
draft and config always yield an equal result, and the draft is never
modified.
"""

import logging
import re
from typing import Optional

from core.domain.content import DraftArtifact
from core.domain.text import count_words, strip_html
from core.domain.validation import (
    ContentMetrics,
    RepairAction,
    RepairSuggestion,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from core.options import ValidationConfig
from services.content_signals import (
    CALLOUT,
    CTA,
    HAZARD,
    SAFETY_CALLOUT,
    ContentSignalClassifier,
    KeywordSignalClassifier,
)

logger = logging.getLogger(__name__)

PASSING_SCORE = 70
HERO_MIN_CHARS = 50
EVIDENCE_MIN_SUMMARY_CHARS = 20
FAQ_MIN_ANSWER_WORDS = 20

SEVERITY_PENALTY = {
    Severity.ERROR: 15,
    Severity.WARNING: 5,
    Severity.INFO: 1,
}

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PLACEHOLDER = re.compile(r"\[.*?\]|\{.*?\}|TODO|PLACEHOLDER|TBD", re.IGNORECASE)


def count_sentences(text: str) -> int:
    """Count sentence fragments longer than 10 characters."""
    if not text:
        return 0
    return sum(1 for s in _SENTENCE_SPLIT.split(text) if len(s.strip()) > 10)


class ContentValidator:
    """Rule checker and scorer for generated drafts."""

    def __init__(
        self,
        config: Optional[ValidationConfig] = None,
        classifier: Optional[ContentSignalClassifier] = None,
    ):
        self.config = config or ValidationConfig()
        self.classifier = classifier or KeywordSignalClassifier(self.config.hazardous_keywords)

    def validate(self, draft: DraftArtifact) -> ValidationResult:
        issues: list[ValidationIssue] = []
        repairs: list[RepairSuggestion] = []

        section_words = [count_words(strip_html(s.body)) for s in draft.sections]
        section_tags = [self.classifier.classify(s.body) for s in draft.sections]
        metrics = self._measure(draft, section_words, section_tags)

        self._check_word_count(metrics, issues, repairs)
        self._check_sections(draft, section_words, issues, repairs)
        self._check_hero_answer(metrics, issues, repairs)
        self._check_faqs(draft, metrics, issues, repairs)
        self._check_internal_links(metrics, issues, repairs)
        self._check_cta(metrics, issues, repairs)
        self._check_safety(draft, metrics, issues, repairs)
        self._check_experience_evidence(metrics, issues, repairs)
        self._check_placeholders(draft, issues)

        score = self.score(issues, metrics)
        valid = score >= PASSING_SCORE and not any(i.severity == Severity.ERROR for i in issues)

        logger.debug(
            "Validated draft '%s': score=%d valid=%s issues=%d",
            draft.slug or draft.title,
            score,
            valid,
            len(issues),
            extra={"stage": "validate", "score": score},
        )

        return ValidationResult(
            valid=valid,
            score=score,
            issues=issues,
            metrics=metrics,
            repair_suggestions=repairs,
        )

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def _measure(
        self,
        draft: DraftArtifact,
        section_words: list[int],
        section_tags: list[set[str]],
    ) -> ContentMetrics:
        total_section_words = sum(section_words)
        hero = draft.hero_answer or ""
        evidence = draft.experience_evidence

        if draft.word_count and draft.word_count > 0:
            word_count = draft.word_count
        else:
            word_count = total_section_words + count_words(hero)

        return ContentMetrics(
            word_count=word_count,
            section_count=len(draft.sections),
            avg_words_per_section=(
                total_section_words / len(section_words) if section_words else 0.0
            ),
            min_section_words=min(section_words) if section_words else 0,
            max_section_words=max(section_words) if section_words else 0,
            faq_count=len(draft.faq),
            internal_link_count=len(draft.internal_links),
            cta_count=sum(1 for tags in section_tags if CTA in tags),
            has_hero_answer=len(hero) >= HERO_MIN_CHARS,
            hero_answer_sentences=count_sentences(hero),
            has_experience_evidence=bool(
                evidence and len(evidence.summary or "") > EVIDENCE_MIN_SUMMARY_CHARS
            ),
            placeholder_count=len(evidence.placeholders) if evidence else 0,
            callout_count=sum(1 for tags in section_tags if CALLOUT in tags),
            safety_callout_count=sum(1 for tags in section_tags if SAFETY_CALLOUT in tags),
        )

    # ------------------------------------------------------------------
    # Rule checks
    # ------------------------------------------------------------------

    def _check_word_count(self, metrics, issues, repairs) -> None:
        minimum = self.config.min_total_words
        if metrics.word_count >= minimum:
            return
        issues.append(
            ValidationIssue(
                field="wordCount",
                severity=Severity.ERROR,
                message=f"Total word count ({metrics.word_count}) is below minimum ({minimum})",
                current_value=metrics.word_count,
                expected_value=minimum,
            )
        )
        repairs.append(
            RepairSuggestion(
                field="sections",
                action=RepairAction.EXTEND,
                prompt=(
                    f"Expand the content to reach at least {minimum} words. "
                    f"Current count: {metrics.word_count}. "
                    "Add more detail, examples, or additional subsections."
                ),
            )
        )

    def _check_sections(self, draft, section_words, issues, repairs) -> None:
        if not draft.sections:
            issues.append(
                ValidationIssue(
                    field="sections",
                    severity=Severity.ERROR,
                    message="No sections found in content",
                )
            )
            return

        minimum = self.config.min_section_words
        for index, (section, words) in enumerate(zip(draft.sections, section_words)):
            if words >= minimum:
                continue
            path = f"sections[{index}]"
            issues.append(
                ValidationIssue(
                    field=path,
                    severity=Severity.WARNING,
                    message=(
                        f'Section "{section.heading_text}" has only {words} words '
                        f"(minimum: {minimum})"
                    ),
                    current_value=words,
                    expected_value=minimum,
                )
            )
            repairs.append(
                RepairSuggestion(
                    field=path,
                    action=RepairAction.EXTEND,
                    prompt=(
                        f'Expand the section "{section.heading_text}" to at least {minimum} words. '
                        f"Current: {words} words. "
                        "Add more detail, practical examples, or step-by-step guidance."
                    ),
                )
            )

    def _check_hero_answer(self, metrics, issues, repairs) -> None:
        lo, hi = self.config.hero_min_sentences, self.config.hero_max_sentences

        if not metrics.has_hero_answer:
            issues.append(
                ValidationIssue(
                    field="heroAnswer",
                    severity=Severity.ERROR,
                    message="Missing or too short hero answer (featured snippet)",
                )
            )
            repairs.append(
                RepairSuggestion(
                    field="heroAnswer",
                    action=RepairAction.ADD,
                    prompt=(
                        f"Write a {lo}-{hi} sentence hero answer that directly answers the main "
                        "question. This will be used for featured snippets. "
                        "Be concise and authoritative."
                    ),
                )
            )
            return

        sentences = metrics.hero_answer_sentences
        if lo <= sentences <= hi:
            return

        issues.append(
            ValidationIssue(
                field="heroAnswer",
                severity=Severity.WARNING,
                message=f"Hero answer has {sentences} sentences (expected {lo}-{hi})",
                current_value=sentences,
                expected_value=f"{lo}-{hi}",
            )
        )
        if sentences < lo:
            repairs.append(
                RepairSuggestion(
                    field="heroAnswer",
                    action=RepairAction.EXTEND,
                    prompt=f"Expand the hero answer to {lo}-{hi} sentences. Current: {sentences} sentences.",
                )
            )
        else:
            repairs.append(
                RepairSuggestion(
                    field="heroAnswer",
                    action=RepairAction.FIX,
                    prompt=(
                        f"Condense the hero answer to {lo}-{hi} sentences. "
                        f"Current: {sentences} sentences. Keep the most essential information."
                    ),
                )
            )

    def _check_faqs(self, draft, metrics, issues, repairs) -> None:
        minimum = self.config.min_faqs
        if metrics.faq_count < minimum:
            issues.append(
                ValidationIssue(
                    field="faqs",
                    severity=Severity.WARNING,
                    message=f"Only {metrics.faq_count} FAQs (recommended: at least {minimum})",
                    current_value=metrics.faq_count,
                    expected_value=minimum,
                )
            )
            repairs.append(
                RepairSuggestion(
                    field="faqs",
                    action=RepairAction.ADD,
                    prompt=(
                        f"Add {minimum - metrics.faq_count} more FAQ items. Focus on common "
                        "questions users ask about this topic. Each answer should be 2-4 sentences."
                    ),
                )
            )

        for index, faq in enumerate(draft.faq):
            words = count_words(faq.answer)
            if words < FAQ_MIN_ANSWER_WORDS:
                issues.append(
                    ValidationIssue(
                        field=f"faqs[{index}]",
                        severity=Severity.INFO,
                        message=f'FAQ answer "{faq.question[:30]}..." is very short ({words} words)',
                    )
                )

    def _check_internal_links(self, metrics, issues, repairs) -> None:
        minimum = self.config.min_internal_links
        if metrics.internal_link_count >= minimum:
            return
        issues.append(
            ValidationIssue(
                field="internalLinks",
                severity=Severity.WARNING,
                message=(
                    f"Only {metrics.internal_link_count} internal links "
                    f"(recommended: at least {minimum})"
                ),
                current_value=metrics.internal_link_count,
                expected_value=minimum,
            )
        )
        repairs.append(
            RepairSuggestion(
                field="internalLinks",
                action=RepairAction.ADD,
                prompt=(
                    f"Add {minimum - metrics.internal_link_count} more internal links to related "
                    "products or articles. Place them naturally within the content."
                ),
            )
        )

    def _check_cta(self, metrics, issues, repairs) -> None:
        if not self.config.require_end_cta or metrics.cta_count > 0:
            return
        issues.append(
            ValidationIssue(
                field="sections",
                severity=Severity.WARNING,
                message="No CTA (call-to-action) found in content",
            )
        )
        repairs.append(
            RepairSuggestion(
                field="sections",
                action=RepairAction.ADD,
                prompt=(
                    "Add a call-to-action section at the end of the content. Include a compelling "
                    "reason to take action and a clear next step "
                    '(e.g., "Shop Now", "Contact Us", "Learn More").'
                ),
            )
        )

    def is_hazardous_topic(self, draft: DraftArtifact) -> bool:
        """Whether title, keyword or body mention any hazardous keyword."""
        text = " ".join(
            [draft.title or "", draft.primary_keyword or ""] + [s.body for s in draft.sections]
        )
        return HAZARD in self.classifier.classify(text)

    def _check_safety(self, draft, metrics, issues, repairs) -> None:
        if not self.config.require_safety_callouts:
            return
        if metrics.safety_callout_count > 0 or not self.is_hazardous_topic(draft):
            return
        issues.append(
            ValidationIssue(
                field="sections",
                severity=Severity.ERROR,
                message="Content involves hazardous materials but has no safety callouts",
            )
        )
        repairs.append(
            RepairSuggestion(
                field="sections",
                action=RepairAction.ADD,
                prompt=(
                    "Add safety warning callouts to the content. Include PPE requirements, handling "
                    "precautions, and storage guidelines. "
                    "Use warning or danger callout styles for visibility."
                ),
            )
        )

    def _check_experience_evidence(self, metrics, issues, repairs) -> None:
        if metrics.has_experience_evidence:
            return
        issues.append(
            ValidationIssue(
                field="experienceEvidence",
                severity=Severity.WARNING,
                message="Missing experience evidence for E-E-A-T compliance",
            )
        )
        repairs.append(
            RepairSuggestion(
                field="experienceEvidence",
                action=RepairAction.ADD,
                prompt=(
                    "Add experience evidence showing first-hand expertise. Include specific details "
                    "about hands-on experience with the topic, real-world applications, "
                    "or customer success stories."
                ),
            )
        )

    def _check_placeholders(self, draft, issues) -> None:
        flagged = sum(1 for s in draft.sections if _PLACEHOLDER.search(s.body or ""))
        if flagged:
            issues.append(
                ValidationIssue(
                    field="sections",
                    severity=Severity.WARNING,
                    message=f"{flagged} section(s) contain unfilled placeholders",
                    suggested_fix="Review and fill in all placeholder content before publishing",
                )
            )

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, issues: list[ValidationIssue], metrics: ContentMetrics) -> int:
        cfg = self.config
        score = 100 - sum(SEVERITY_PENALTY[i.severity] for i in issues)

        if metrics.word_count >= cfg.min_total_words * 1.2:
            score += 5
        if metrics.faq_count >= cfg.min_faqs + 2:
            score += 3
        if metrics.internal_link_count >= cfg.min_internal_links + 2:
            score += 3
        if metrics.has_experience_evidence:
            score += 5

        return max(0, min(100, score))


def validate_content(
    draft: DraftArtifact,
    config: Optional[ValidationConfig] = None,
) -> ValidationResult:
    """Validate a draft with the given (or default) thresholds."""
    return ContentValidator(config).validate(draft)


def quick_validate(
    draft: DraftArtifact,
    config: Optional[ValidationConfig] = None,
) -> tuple[bool, list[str]]:
    """Pass/fail plus the messages of error-severity issues."""
    result = validate_content(draft, config)
    critical = [i.message for i in result.errors]
    return not critical, critical


def get_repair_prompt(
    draft: DraftArtifact,
    issue: ValidationIssue,
    config: Optional[ValidationConfig] = None,
) -> Optional[str]:
    """Return the first repair prompt targeting the issue's field, if any."""
    result = validate_content(draft, config)
    for suggestion in result.repair_suggestions:
        if suggestion.field == issue.field:
            return suggestion.prompt
    return None
