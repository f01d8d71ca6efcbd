"""
Unit tests for DraftPatch.
"""

import pytest

from core.domain.content import FAQ, ExperienceEvidence
from core.domain.patch import DraftPatch
from core.domain.text import draft_word_count


class TestDraftPatch:
    def test_empty_patch_has_no_changes(self, make_draft):
        draft = make_draft()
        patch = DraftPatch(draft)

        assert patch.has_changes is False
        assert patch.touched_fields == []

    def test_apply_returns_new_draft_and_keeps_base(self, make_draft):
        draft = make_draft(word_count=1083)
        patch = DraftPatch(draft)
        patch.set_hero_answer("A brand new hero answer that is long enough to count.")

        patched = patch.apply()

        assert patched is not draft
        assert patched.hero_answer.startswith("A brand new")
        assert draft.hero_answer != patched.hero_answer
        assert draft.word_count == 1083

    def test_unchanged_value_is_not_recorded(self, make_draft):
        draft = make_draft()
        patch = DraftPatch(draft)
        patch.set_hero_answer(draft.hero_answer)
        patch.replace_section(0, draft.sections[0])

        assert patch.has_changes is False

    def test_blank_hero_is_rejected(self, make_draft):
        with pytest.raises(ValueError):
            DraftPatch(make_draft()).set_hero_answer("   ")

    def test_replace_section_keeps_other_sections_identical(self, make_draft, make_section):
        draft = make_draft()
        patch = DraftPatch(draft)
        patch.replace_section(3, make_section(3, repeats=20))

        patched = patch.apply()

        assert patch.touched_fields == ["sections[3]"]
        for i, section in enumerate(patched.sections):
            if i == 3:
                assert section is not draft.sections[3]
            else:
                assert section is draft.sections[i]
        assert patched.sections is not draft.sections

    def test_replace_section_out_of_range(self, make_draft, make_section):
        with pytest.raises(IndexError):
            DraftPatch(make_draft()).replace_section(99, make_section(99))

    def test_append_section(self, make_draft, make_section):
        draft = make_draft()
        patch = DraftPatch(draft)
        patch.append_section(make_section(8))

        patched = patch.apply()

        assert len(patched.sections) == len(draft.sections) + 1
        assert patch.touched_fields == ["sections"]

    def test_faq_cannot_shrink(self, make_draft):
        draft = make_draft()
        with pytest.raises(ValueError):
            DraftPatch(draft).set_faq(draft.faq[:1])

    def test_faq_change_recounts_word_count(self, make_draft):
        draft = make_draft(word_count=1083)
        patch = DraftPatch(draft)
        patch.set_faq(draft.faq + [FAQ(id="faq-3", question="New?", answer="Yes.")])
        patch.set_experience_evidence(ExperienceEvidence(summary="Editorial review pending"))

        patched = patch.apply()

        assert patch.touched_fields == ["faq", "experienceEvidence"]
        assert len(patched.faq) == 3
        assert patched.word_count == draft_word_count(patched) == draft_word_count(draft) + 2
        assert patched.sections is draft.sections

    def test_hero_change_recounts_word_count(self, make_draft):
        draft = make_draft()
        draft.word_count = draft_word_count(draft)
        patch = DraftPatch(draft)
        patch.set_hero_answer("A brand new hero answer that is long enough to count.")

        patched = patch.apply()

        assert patched.word_count == draft.word_count - 25 + 11
        assert draft.word_count == draft_word_count(draft)

    def test_section_change_recounts_word_count(self, make_draft, make_section):
        draft = make_draft(word_count=1083)
        patch = DraftPatch(draft)
        patch.replace_section(3, make_section(3, repeats=20))
        patch.append_section(make_section(8))

        patched = patch.apply()

        assert patched.word_count == draft_word_count(patched)
        assert patched.word_count > 1083

    def test_evidence_change_keeps_word_count(self, make_draft):
        draft = make_draft(word_count=1083)
        patch = DraftPatch(draft)
        patch.set_experience_evidence(ExperienceEvidence(summary="Editorial review pending"))

        assert patch.apply().word_count == 1083

    def test_missing_word_count_stays_unset(self, make_draft):
        draft = make_draft()
        patch = DraftPatch(draft)
        patch.set_hero_answer("A brand new hero answer that is long enough to count.")

        assert patch.apply().word_count == 0
