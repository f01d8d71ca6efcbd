"""Service interfaces for the generative collaborators."""

from abc import ABC, abstractmethod
from typing import Optional

from ..domain.content import DraftArtifact, Section, TopicSuggestion
from ..domain.generation import DraftGenerationInput
from ..domain.outline import (
    BlogPostReference,
    ContentOutline,
    OutlineValidation,
    validate_outline,
)


class OutlineService(ABC):
    """Abstract service producing content outlines from topics."""

    @abstractmethod
    async def generate_outline(
        self,
        topic: TopicSuggestion,
        target_word_count: Optional[int] = None,
        faq_count: Optional[int] = None,
        existing_posts: Optional[list[BlogPostReference]] = None,
    ) -> ContentOutline:
        """Generate a complete outline for a topic."""
        ...

    def validate_outline(self, outline: ContentOutline) -> OutlineValidation:
        """Check an outline for completeness."""
        return validate_outline(outline)


class DraftGenerator(ABC):
    """Abstract service producing full drafts from a brief."""

    @abstractmethod
    async def generate_draft(self, draft_input: DraftGenerationInput) -> DraftArtifact:
        """Generate a schema-valid draft artifact."""
        ...


class FieldRepairService(ABC):
    """
    Field-level regeneration used by the repair loop.

    Each method receives a natural-language repair prompt. Returning None (or
    raising) signals that no usable value was produced.
    """

    @abstractmethod
    async def regenerate_hero_answer(
        self,
        draft_input: DraftGenerationInput,
        current: str,
        repair_prompt: str,
    ) -> str:
        """Rewrite the hero answer."""
        ...

    @abstractmethod
    async def regenerate_section(
        self,
        draft_input: DraftGenerationInput,
        section: Section,
        repair_prompt: str,
    ) -> Optional[Section]:
        """Rewrite a single existing section."""
        ...

    @abstractmethod
    async def generate_section(
        self,
        draft_input: DraftGenerationInput,
        draft: DraftArtifact,
        repair_prompt: str,
    ) -> Optional[Section]:
        """Write one additional section to append to the draft."""
        ...
