"""
Brief resolution.

Turns one of three input variants (explicit brief, content idea, raw topic)
into the Brief consumed by draft generation. Only the idea-without-brief and
topic variants call the outline collaborator.
"""

import logging
import re
from typing import Optional

from core.domain.content import (
    Brief,
    BriefInternalLink,
    BriefOutlineEntry,
    ContentIdea,
    FAQSuggestion,
    SearchIntent,
    TopicSuggestion,
)
from core.domain.generation import BriefInput, BriefInputKind, GenerationOptions
from core.domain.outline import ContentOutline
from core.interfaces.services import OutlineService
from services.deadline import call_with_deadline

logger = logging.getLogger(__name__)

DEFAULT_ANGLE = "howto"
DEFAULT_UNIQUE_ANGLE = "Expert chemical supplier perspective"
NEUTRAL_EEAT_SCORE = {"experience": 8, "expertise": 8, "authority": 8, "trust": 8}
SLUG_MAX_LENGTH = 60

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class BriefResolutionError(Exception):
    """No brief could be resolved or generated from the input."""


def slugify(text: str) -> str:
    """Create a URL-safe slug: lowercase, dash-separated, at most 60 characters."""
    slug = _NON_ALNUM.sub("-", (text or "").lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH]


def topic_from_idea(idea: ContentIdea) -> TopicSuggestion:
    """Synthesise a topic suggestion for an idea that has no brief yet."""
    intent = idea.search_intent
    if intent == SearchIntent.NAVIGATIONAL:
        intent = SearchIntent.INFORMATIONAL
    return TopicSuggestion(
        topic=idea.topic,
        primary_keyword=idea.primary_keyword,
        angle=DEFAULT_ANGLE,
        search_intent=intent,
        unique_angle=idea.justification or DEFAULT_UNIQUE_ANGLE,
        eeat_score=dict(NEUTRAL_EEAT_SCORE),
        relevant_products=[],
    )


def outline_to_brief(outline: ContentOutline) -> Brief:
    """Convert a generated outline into a brief."""
    topic = outline.meta.topic
    return Brief(
        suggested_title=topic,
        suggested_slug=slugify(topic),
        hero_answer_draft=" ".join(outline.hero_answer.key_points),
        outline=tuple(
            BriefOutlineEntry(
                heading_level=section.heading_level,
                heading_text=section.heading,
                key_points=tuple(section.key_points),
                estimated_word_count=section.estimated_words,
            )
            for section in outline.sections
        ),
        key_questions=tuple(q.question for q in outline.faq_questions),
        suggested_internal_links=tuple(
            BriefInternalLink(
                target_url=section.internal_link,
                suggested_anchor_text=section.heading,
                placement=section.heading,
                reason="Related content",
            )
            for section in outline.sections
            if section.internal_link
        ),
        external_references=(),
        faq_suggestions=tuple(
            FAQSuggestion(
                question=q.question,
                key_points_for_answer=tuple(q.key_points_for_answer),
            )
            for q in outline.faq_questions
        ),
        experience_prompts=tuple(
            f"[PLACEHOLDER: Share specific experience with {hook}]"
            for hook in outline.meta.eeat_hooks
        ),
    )


class BriefResolver:
    """Resolves a BriefInput into a Brief, generating an outline when needed."""

    def __init__(self, outline_service: OutlineService, timeout_seconds: Optional[float] = None):
        self.outline_service = outline_service
        self.timeout_seconds = timeout_seconds

    async def resolve(
        self,
        brief_input: Optional[BriefInput],
        options: Optional[GenerationOptions] = None,
    ) -> Brief:
        brief, _ = await self.resolve_with_outline(brief_input, options)
        return brief

    async def resolve_with_outline(
        self,
        brief_input: Optional[BriefInput],
        options: Optional[GenerationOptions] = None,
    ) -> tuple[Brief, Optional[ContentOutline]]:
        """
        Resolve the input and also return the outline generated on the way, if any.

        Raises:
            BriefResolutionError: If no input variant is populated.
        """
        if brief_input is None:
            raise BriefResolutionError("No brief, content idea or topic provided")

        options = options or GenerationOptions()

        if brief_input.kind == BriefInputKind.BRIEF:
            return brief_input.payload, None

        if brief_input.kind == BriefInputKind.CONTENT_IDEA:
            idea: ContentIdea = brief_input.payload
            if idea.brief is not None:
                return idea.brief, None
            logger.info("Generating brief for content idea %s", idea.id, extra={"stage": "resolve"})
            outline = await self._generate_outline(topic_from_idea(idea), options)
            return outline_to_brief(outline), outline

        topic: TopicSuggestion = brief_input.payload
        outline = await self._generate_outline(topic, options)
        return outline_to_brief(outline), outline

    async def _generate_outline(
        self, topic: TopicSuggestion, options: GenerationOptions
    ) -> ContentOutline:
        return await call_with_deadline(
            self.outline_service.generate_outline(
                topic,
                target_word_count=options.target_word_count,
                faq_count=options.faq_count,
                existing_posts=options.existing_posts or None,
            ),
            self.timeout_seconds,
            "Outline generation",
        )
