"""Field-level patch builder for draft repairs."""
from dataclasses import replace
from typing import Optional

from .content import FAQ, DraftArtifact, ExperienceEvidence, Section
from .text import draft_word_count


class DraftPatch:
    """
    Collects field replacements against a base draft and applies them to a copy.

    Only fields explicitly set on the patch change; every other attribute of the
    new draft is the same object as on the base. Sections that were not replaced
    keep their identity, so untouched sections are guaranteed unchanged.
    """

    def __init__(self, base: DraftArtifact):
        self._base = base
        self._hero_answer: Optional[str] = None
        self._section_updates: dict[int, Section] = {}
        self._appended_sections: list[Section] = []
        self._faq: Optional[list[FAQ]] = None
        self._experience_evidence: Optional[ExperienceEvidence] = None

    @property
    def base(self) -> DraftArtifact:
        return self._base

    def set_hero_answer(self, text: str) -> None:
        if not text or not text.strip():
            raise ValueError("hero answer cannot be empty")
        if text != self._base.hero_answer:
            self._hero_answer = text

    def replace_section(self, index: int, section: Section) -> None:
        if not 0 <= index < len(self._base.sections):
            raise IndexError(f"sections[{index}] does not exist")
        if section != self._base.sections[index]:
            self._section_updates[index] = section

    def append_section(self, section: Section) -> None:
        self._appended_sections.append(section)

    def set_faq(self, faqs: list[FAQ]) -> None:
        if len(faqs) < len(self._base.faq):
            raise ValueError("FAQ repair may not remove entries")
        if list(faqs) != list(self._base.faq):
            self._faq = list(faqs)

    def set_experience_evidence(self, evidence: ExperienceEvidence) -> None:
        if evidence != self._base.experience_evidence:
            self._experience_evidence = evidence

    @property
    def touched_fields(self) -> list[str]:
        fields = []
        if self._hero_answer is not None:
            fields.append("heroAnswer")
        fields.extend(f"sections[{i}]" for i in sorted(self._section_updates))
        if self._appended_sections:
            fields.append("sections")
        if self._faq is not None:
            fields.append("faq")
        if self._experience_evidence is not None:
            fields.append("experienceEvidence")
        return fields

    @property
    def has_changes(self) -> bool:
        return bool(self.touched_fields)

    def apply(self) -> DraftArtifact:
        """Return a new draft with the recorded changes. The base is not modified."""
        changes = {}
        if self._hero_answer is not None:
            changes["hero_answer"] = self._hero_answer
        if self._section_updates or self._appended_sections:
            sections = [
                self._section_updates.get(i, section)
                for i, section in enumerate(self._base.sections)
            ]
            sections.extend(self._appended_sections)
            changes["sections"] = sections
        if self._faq is not None:
            changes["faq"] = self._faq
        if self._experience_evidence is not None:
            changes["experience_evidence"] = self._experience_evidence
        patched = replace(self._base, **changes)
        # keep a precomputed total in step with the repaired hero, sections and FAQs
        if self._base.word_count > 0 and ({"hero_answer", "sections", "faq"} & changes.keys()):
            patched.word_count = draft_word_count(patched)
        return patched
