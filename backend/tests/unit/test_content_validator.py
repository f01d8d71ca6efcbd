"""
Unit tests for the content validator (metrics, rule checks, scoring).
"""

import pytest

from core.domain.content import FAQ, DraftArtifact, HeadingLevel, Section
from core.domain.validation import RepairAction, Severity, ValidationIssue
from core.options import ValidationConfig
from services.content_validator import (
    ContentValidator,
    count_sentences,
    count_words,
    get_repair_prompt,
    quick_validate,
    strip_html,
    validate_content,
)

SAFETY_CALLOUT = '<div class="callout callout-warning"><p>Wear gloves and goggles.</p></div>'


def _issue(result, field, severity=None):
    return [i for i in result.issues if i.field == field and (severity is None or i.severity == severity)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestTextHelpers:
    def test_strip_html_returns_visible_text(self):
        assert strip_html("<p>Hello <strong>world</strong></p>").split() == ["Hello", "world"]

    def test_strip_html_empty(self):
        assert strip_html("") == ""

    def test_count_words_ignores_extra_whitespace(self):
        assert count_words("  one   two\nthree ") == 3

    def test_count_sentences_skips_short_fragments(self):
        assert count_sentences("Yes. This sentence is long enough! Ok? Another long sentence here.") == 2


# ---------------------------------------------------------------------------
# Passing draft
# ---------------------------------------------------------------------------


class TestPassingDraft:
    def test_complete_draft_is_valid(self, make_draft):
        result = validate_content(make_draft())

        assert result.valid is True
        assert result.issues == []
        assert result.repair_suggestions == []
        assert result.score == 100

    def test_metrics_are_measured(self, make_draft):
        metrics = validate_content(make_draft()).metrics

        assert metrics.section_count == 8
        assert metrics.min_section_words == 132
        assert metrics.max_section_words == 134
        assert metrics.word_count == 7 * 132 + 134 + 25
        assert metrics.faq_count == 2
        assert metrics.internal_link_count == 2
        assert metrics.cta_count == 1
        assert metrics.has_hero_answer is True
        assert metrics.hero_answer_sentences == 2
        assert metrics.has_experience_evidence is True
        assert metrics.callout_count == 0
        assert metrics.safety_callout_count == 0

    def test_precomputed_word_count_takes_precedence(self, make_draft):
        result = validate_content(make_draft(word_count=5000))
        assert result.metrics.word_count == 5000

    def test_validation_is_idempotent(self, make_draft):
        draft = make_draft(hero_answer="", faq=[])
        validator = ContentValidator()

        assert validator.validate(draft) == validator.validate(draft)

    def test_validation_does_not_modify_draft(self, make_draft):
        draft = make_draft(title="Acid Storage")
        sections_before = list(draft.sections)

        validate_content(draft)

        assert draft.sections == sections_before
        assert draft.word_count == 0


# ---------------------------------------------------------------------------
# Example scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_short_draft_without_hero_or_faqs(self):
        draft = DraftArtifact(
            title="Home Composting Guide",
            sections=[
                Section(
                    id="only",
                    heading_text="Overview",
                    heading_level=HeadingLevel.H2,
                    body="<p>" + " ".join(["soil"] * 50) + "</p>",
                )
            ],
        )

        result = validate_content(draft)

        assert result.valid is False
        assert _issue(result, "heroAnswer", Severity.ERROR)
        assert _issue(result, "wordCount", Severity.ERROR)
        assert _issue(result, "faqs", Severity.WARNING)
        assert _issue(result, "sections[0]", Severity.WARNING)
        assert result.score <= 55

    def test_hazardous_title_without_safety_callout(self, make_draft):
        result = validate_content(make_draft(title="Sulfuric Acid Handling Guide"))

        errors = _issue(result, "sections", Severity.ERROR)
        assert len(errors) == 1
        assert "no safety callouts" in errors[0].message
        assert result.valid is False
        assert any(
            s.field == "sections" and s.action == RepairAction.ADD and "safety" in s.prompt
            for s in result.repair_suggestions
        )


# ---------------------------------------------------------------------------
# Rule checks
# ---------------------------------------------------------------------------


class TestSafetyCallouts:
    def test_safety_callout_satisfies_hazard_check(self, make_draft, make_section):
        draft = make_draft(title="Sulfuric Acid Handling Guide")
        draft.sections.append(make_section(8, extra=SAFETY_CALLOUT))

        result = validate_content(draft)

        assert not _issue(result, "sections", Severity.ERROR)
        assert result.metrics.callout_count == 1
        assert result.metrics.safety_callout_count == 1

    def test_plain_callout_is_not_a_safety_callout(self, make_draft, make_section):
        draft = make_draft(primary_keyword="muriatic acid")
        draft.sections.append(make_section(8, extra='<div class="callout callout-tip"><p>Tip</p></div>'))

        result = validate_content(draft)

        assert result.metrics.callout_count == 1
        assert result.metrics.safety_callout_count == 0
        assert _issue(result, "sections", Severity.ERROR)

    def test_hazard_keyword_in_body_triggers_check(self, make_draft, make_section):
        draft = make_draft()
        draft.sections.append(make_section(8, extra="<p>Keep the bin away from toxic runoff.</p>"))

        assert _issue(validate_content(draft), "sections", Severity.ERROR)

    def test_check_can_be_disabled(self, make_draft):
        config = ValidationConfig(require_safety_callouts=False)
        result = validate_content(make_draft(title="Sulfuric Acid Handling Guide"), config)

        assert result.valid is True

    def test_custom_keyword_list(self, make_draft):
        config = ValidationConfig(hazardous_keywords=["compost"])
        result = validate_content(make_draft(), config)

        assert _issue(result, "sections", Severity.ERROR)


class TestHeroAnswer:
    def test_hero_under_50_chars_is_missing(self, make_draft):
        result = validate_content(make_draft(hero_answer="x" * 49))

        issues = _issue(result, "heroAnswer", Severity.ERROR)
        assert issues and issues[0].message == "Missing or too short hero answer (featured snippet)"
        assert result.repair_suggestions[0].action == RepairAction.ADD

    def test_single_sentence_hero_needs_extending(self, make_draft):
        hero = "Compost turns kitchen scraps into rich garden soil within a few months."
        result = validate_content(make_draft(hero_answer=hero))

        warnings = _issue(result, "heroAnswer", Severity.WARNING)
        assert warnings[0].current_value == 1
        assert warnings[0].expected_value == "2-4"
        repair = [s for s in result.repair_suggestions if s.field == "heroAnswer"]
        assert repair[0].action == RepairAction.EXTEND

    def test_long_hero_needs_condensing(self, make_draft):
        hero = " ".join(["Compost turns kitchen scraps into rich garden soil."] * 5)
        result = validate_content(make_draft(hero_answer=hero))

        repair = [s for s in result.repair_suggestions if s.field == "heroAnswer"]
        assert repair[0].action == RepairAction.FIX
        assert "Condense" in repair[0].prompt


class TestSectionsAndCounts:
    def test_no_sections_is_an_error(self, make_draft):
        result = validate_content(make_draft(sections=[], word_count=1500))

        assert _issue(result, "sections", Severity.ERROR)[0].message == "No sections found in content"

    def test_short_section_gets_indexed_warning(self, make_draft, make_section):
        draft = make_draft()
        draft.sections[2] = make_section(2, repeats=3)

        result = validate_content(draft)

        warning = _issue(result, "sections[2]", Severity.WARNING)[0]
        assert warning.current_value == 33
        assert warning.expected_value == 120
        assert any(s.field == "sections[2]" and s.action == RepairAction.EXTEND for s in result.repair_suggestions)

    def test_low_total_word_count(self, make_draft):
        result = validate_content(make_draft(word_count=400))

        issue = _issue(result, "wordCount", Severity.ERROR)[0]
        assert issue.message == "Total word count (400) is below minimum (1000)"
        assert any(s.field == "sections" and s.action == RepairAction.EXTEND for s in result.repair_suggestions)

    def test_short_faq_answer_is_info(self, make_draft):
        faq = [
            FAQ(id="1", question="How long does compost take to be ready?", answer="About three months."),
            FAQ(id="2", question="Is it hard?", answer=" ".join(["Compost"] * 25)),
        ]
        result = validate_content(make_draft(faq=faq))

        info = _issue(result, "faqs[0]", Severity.INFO)
        assert len(info) == 1
        assert info[0].message.startswith('FAQ answer "How long does compost take to ..."')
        assert not _issue(result, "faqs[1]")

    def test_missing_internal_links_and_cta(self, make_draft, make_section):
        draft = make_draft(internal_links=[], sections=[make_section(i) for i in range(8)])
        result = validate_content(draft)

        assert _issue(result, "internalLinks", Severity.WARNING)
        cta = _issue(result, "sections", Severity.WARNING)
        assert cta[0].message == "No CTA (call-to-action) found in content"

    def test_cta_check_can_be_disabled(self, make_draft, make_section):
        draft = make_draft(sections=[make_section(i) for i in range(8)])
        result = validate_content(draft, ValidationConfig(require_end_cta=False))

        assert result.issues == []

    def test_missing_experience_evidence(self, make_draft):
        result = validate_content(make_draft(experience_evidence=None))

        assert _issue(result, "experienceEvidence", Severity.WARNING)
        assert result.metrics.has_experience_evidence is False

    def test_placeholders_warn_without_repair(self, make_draft, make_section):
        draft = make_draft()
        draft.sections[1] = make_section(1, extra="<p>[PLACEHOLDER: add photo]</p>")
        draft.sections[3] = make_section(3, extra="<p>Price TBD</p>")

        result = validate_content(draft)

        warning = _issue(result, "sections", Severity.WARNING)
        assert warning[0].message == "2 section(s) contain unfilled placeholders"
        assert not [s for s in result.repair_suggestions if s.field == "sections"]


# ---------------------------------------------------------------------------
# Scoring and validity
# ---------------------------------------------------------------------------


class TestScoring:
    def test_more_issues_never_score_higher(self, make_draft):
        clean = validate_content(make_draft())
        one_warning = validate_content(make_draft(internal_links=[]))
        plus_error = validate_content(make_draft(internal_links=[], hero_answer=""))

        assert clean.score >= one_warning.score >= plus_error.score
        assert one_warning.score - plus_error.score == 15

    def test_bonuses_apply(self, make_draft):
        validator = ContentValidator()
        draft = make_draft(word_count=1200, experience_evidence=None)

        result = validator.validate(draft)

        # one evidence warning, word count bonus
        assert result.score == 100

    def test_score_is_clamped_at_zero(self):
        validator = ContentValidator()
        issues = [ValidationIssue(field="x", severity=Severity.ERROR, message="bad")] * 10
        assert validator.score(issues, validate_content(DraftArtifact()).metrics) == 0

    def test_low_score_without_errors_is_invalid(self, make_draft, make_section):
        draft = make_draft(
            sections=[make_section(i, repeats=2) for i in range(8)],
            word_count=1100,
            internal_links=[],
            faq=[],
            experience_evidence=None,
        )

        result = validate_content(draft)

        assert result.errors == []
        assert result.score < 70
        assert result.valid is False


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------


class TestConvenience:
    def test_quick_validate_returns_error_messages(self, make_draft):
        valid, critical = quick_validate(make_draft(hero_answer=""))

        assert valid is False
        assert critical == ["Missing or too short hero answer (featured snippet)"]

    def test_quick_validate_passes_clean_draft(self, make_draft):
        assert quick_validate(make_draft()) == (True, [])

    def test_get_repair_prompt(self, make_draft):
        draft = make_draft(hero_answer="")
        issue = ValidationIssue(field="heroAnswer", severity=Severity.ERROR, message="missing")

        prompt = get_repair_prompt(draft, issue)

        assert prompt.startswith("Write a 2-4 sentence hero answer")

    def test_get_repair_prompt_none_without_suggestion(self, make_draft):
        issue = ValidationIssue(field="faqs[0]", severity=Severity.INFO, message="short")
        assert get_repair_prompt(make_draft(), issue) is None


@pytest.mark.parametrize("hero_min,hero_max", [(3, 2)])
def test_config_rejects_inverted_hero_range(hero_min, hero_max):
    with pytest.raises(ValueError):
        ValidationConfig(hero_min_sentences=hero_min, hero_max_sentences=hero_max)
