"""
Anthropic Claude adapter for outline, draft and field-repair generation.
"""

import asyncio
import json
import logging
import random
import re
import uuid
from typing import Any, Optional

import anthropic

from core.domain.content import (
    FAQ,
    DraftArtifact,
    ExperienceEvidence,
    HeadingLevel,
    InternalLink,
    LinkType,
    PostStatus,
    SearchIntent,
    Section,
    TopicSuggestion,
)
from core.domain.generation import DraftGenerationInput
from core.domain.outline import (
    BlogPostReference,
    ContentOutline,
    CTASection,
    FAQOutlineItem,
    HeroAnswerPlan,
    OpeningHook,
    OutlineMeta,
    OutlineSection,
)
from core.domain.text import draft_word_count, html_word_count
from core.interfaces.services import DraftGenerator, FieldRepairService, OutlineService
from infrastructure.config.settings import settings

from .style_cache import StyleProfileCache, build_style_profile, exemplar_key

logger = logging.getLogger(__name__)

DEFAULT_TARGET_WORD_COUNT = 1500
DEFAULT_FAQ_COUNT = 5
OUTLINE_MAX_TOKENS = 4096
REPAIR_MAX_TOKENS = 2048


class AIGenerationError(Exception):
    """The model returned an empty or unusable response."""


async def _retry_with_backoff(coro_factory, max_retries=3, base_delay=1.0):
    """Retry an async operation with exponential backoff + jitter."""
    for attempt in range(max_retries + 1):
        try:
            return await coro_factory()
        except Exception as e:
            error_str = str(e).lower()
            is_transient = any(k in error_str for k in ["rate_limit", "429", "500", "502", "503", "504", "overloaded", "connection", "timeout"])
            if not is_transient or attempt == max_retries:
                raise
            delay = base_delay * (2 ** attempt) + random.uniform(0, 1)
            logger.warning("Transient API error (attempt %d/%d), retrying in %.1fs: %s", attempt + 1, max_retries, delay, str(e))
            await asyncio.sleep(delay)


def _extract_json(response_text: str) -> dict[str, Any]:
    """Parse a JSON object from a response, handling markdown code blocks."""
    if "```json" in response_text:
        response_text = response_text.split("```json")[1].split("```")[0]
    elif "```" in response_text:
        response_text = response_text.split("```")[1].split("```")[0]
    try:
        data = json.loads(response_text.strip())
    except json.JSONDecodeError as e:
        raise AIGenerationError(f"AI returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AIGenerationError("AI returned JSON that is not an object")
    return data


def _heading_level(value: Any) -> HeadingLevel:
    try:
        return HeadingLevel(str(value).lower())
    except ValueError:
        return HeadingLevel.H2


def _search_intent(value: Any, default: SearchIntent = SearchIntent.INFORMATIONAL) -> SearchIntent:
    try:
        return SearchIntent(str(value).lower())
    except ValueError:
        return default


def _link_type(value: Any) -> LinkType:
    try:
        return LinkType(str(value).lower())
    except ValueError:
        return LinkType.BLOG_POST


DRAFT_SYSTEM_PROMPT = """You are an expert technical content writer producing long-form, E-E-A-T compliant blog articles.

CRITICAL RULES:
1. Write like a skilled human expert, not an AI. Vary sentence length and use transitional phrases.
2. The hero answer directly answers the main question in 2-4 sentences, suitable for a featured snippet.
3. Every section body is HTML (<p>, <ul>, <ol>, <table>) with substantial content (120+ words).
4. Hazardous materials always get a safety callout: <div class="callout callout-warning">...</div>.
5. End with a call-to-action section.
6. Use [PLACEHOLDER: ...] markers where an editor must add real-world experience, data or credentials.
7. Respond with a single JSON object and nothing else."""


class AnthropicContentService(OutlineService, DraftGenerator, FieldRepairService):
    """Outline, draft and repair generation using Anthropic Claude.

    Without an API key every method returns deterministic mock output so the
    pipeline can run offline.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        style_cache: Optional[StyleProfileCache] = None,
    ):
        api_key = api_key if api_key is not None else settings.anthropic_api_key
        if api_key:
            self._client = anthropic.AsyncAnthropic(
                api_key=api_key,
                timeout=float(settings.anthropic_timeout),
            )
        else:
            self._client = None
        self._model = model or settings.anthropic_model
        self._max_tokens = settings.anthropic_max_tokens
        self._temperature = settings.anthropic_temperature
        self._style_cache = style_cache or StyleProfileCache(settings.style_cache_ttl_seconds)

    @property
    def model(self) -> str:
        return self._model

    @staticmethod
    def _sanitize_prompt_input(text: Optional[str], max_length: int) -> str:
        """Strip control characters and limit length to prevent prompt injection."""
        if not text:
            return ""
        text = re.sub(r'[\r\n\t\x00-\x1f\x7f]', ' ', text)
        text = re.sub(r' +', ' ', text).strip()
        return text[:max_length]

    async def _complete(self, prompt: str, system: str, max_tokens: int) -> str:
        """Send one message and return the text of the first content block."""
        message = await _retry_with_backoff(lambda: self._client.messages.create(
            model=self._model,
            max_tokens=max_tokens,
            temperature=self._temperature,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        ))

        if getattr(message, "stop_reason", None) == "max_tokens":
            logger.warning("Response truncated at max_tokens=%d", max_tokens)

        if not message.content:
            raise AIGenerationError("AI returned empty response")
        response_text = message.content[0].text
        if not response_text or not response_text.strip():
            raise AIGenerationError("AI returned empty response")
        return response_text

    # ------------------------------------------------------------------
    # Outline
    # ------------------------------------------------------------------

    async def generate_outline(
        self,
        topic: TopicSuggestion,
        target_word_count: Optional[int] = None,
        faq_count: Optional[int] = None,
        existing_posts: Optional[list[BlogPostReference]] = None,
    ) -> ContentOutline:
        """
        Generate a content outline for a topic.

        Args:
            topic: Topic suggestion with keyword, angle and intent
            target_word_count: Target word count for the final article
            faq_count: Number of FAQ questions to plan
            existing_posts: Posts available for internal linking

        Returns:
            ContentOutline with sections, FAQs and CTA
        """
        target_word_count = target_word_count or DEFAULT_TARGET_WORD_COUNT
        faq_count = faq_count or DEFAULT_FAQ_COUNT

        if not self._client:
            return self._mock_outline(topic, target_word_count, faq_count)

        title = self._sanitize_prompt_input(topic.topic, 300)
        keyword = self._sanitize_prompt_input(topic.primary_keyword, 200)
        unique_angle = self._sanitize_prompt_input(topic.unique_angle, 500)
        links_text = "\n".join(
            f"- {self._sanitize_prompt_input(p.title, 200)}: {p.url}" for p in (existing_posts or [])[:20]
        ) or "None"

        prompt = f"""Create a detailed content outline for the following article:

Topic: {title}
Primary keyword: {keyword}
Angle: {topic.angle}
Search intent: {topic.search_intent.value}
Unique angle: {unique_angle}
Target word count: {target_word_count} words
FAQ questions: {faq_count}

Existing posts available for internal links (use their URLs only):
{links_text}

Respond in JSON format:
{{
    "meta": {{
        "topic": "Article title",
        "primary_keyword": "{keyword}",
        "search_intent": "{topic.search_intent.value}",
        "content_type": "educational",
        "target_word_count": {target_word_count},
        "secondary_keywords": ["..."],
        "eeat_hooks": ["hands-on experience to share"]
    }},
    "opening_hook": {{"type": "problem", "description": "..."}},
    "hero_answer": {{"key_points": ["..."], "target_length": "2-3 sentences"}},
    "sections": [
        {{
            "heading": "Section heading",
            "heading_level": "h2",
            "key_points": ["..."],
            "estimated_words": 250,
            "eeat_element": "expertise signal or null",
            "internal_link": "URL or null",
            "component": "table|steps|callout_warning|null"
        }}
    ],
    "faq_questions": [{{"question": "...", "key_points_for_answer": ["..."]}}],
    "cta": {{"primary_product": "...", "primary_product_url": null, "value_proposition": "..."}}
}}"""

        response_text = await self._complete(prompt, DRAFT_SYSTEM_PROMPT, OUTLINE_MAX_TOKENS)
        return self._parse_outline(_extract_json(response_text), topic, target_word_count)

    def _parse_outline(
        self, data: dict[str, Any], topic: TopicSuggestion, target_word_count: int
    ) -> ContentOutline:
        meta = data.get("meta") or {}
        hook = data.get("opening_hook") or {}
        hero = data.get("hero_answer") or {}
        cta = data.get("cta") or {}

        try:
            sections = [
                OutlineSection(
                    heading=s["heading"],
                    heading_level=_heading_level(s.get("heading_level", "h2")),
                    key_points=list(s.get("key_points") or []),
                    estimated_words=int(s.get("estimated_words") or 200),
                    eeat_element=s.get("eeat_element"),
                    internal_link=s.get("internal_link"),
                    component=s.get("component"),
                    image_opportunity=s.get("image_opportunity"),
                )
                for s in data.get("sections", [])
            ]
            faqs = [
                FAQOutlineItem(
                    question=q["question"],
                    key_points_for_answer=list(q.get("key_points_for_answer") or []),
                    source=q.get("source"),
                )
                for q in data.get("faq_questions", [])
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise AIGenerationError(f"AI returned a malformed outline: {e}") from e

        return ContentOutline(
            meta=OutlineMeta(
                topic=meta.get("topic") or topic.topic,
                primary_keyword=meta.get("primary_keyword") or topic.primary_keyword,
                search_intent=_search_intent(meta.get("search_intent"), topic.search_intent),
                content_type=meta.get("content_type") or "educational",
                target_word_count=int(meta.get("target_word_count") or target_word_count),
                secondary_keywords=list(meta.get("secondary_keywords") or []),
                eeat_hooks=list(meta.get("eeat_hooks") or []),
            ),
            opening_hook=OpeningHook(
                type=hook.get("type") or "problem",
                description=hook.get("description") or "",
            ),
            hero_answer=HeroAnswerPlan(
                key_points=list(hero.get("key_points") or []),
                target_length=hero.get("target_length") or "2-3 sentences",
            ),
            sections=sections,
            faq_questions=faqs,
            cta=CTASection(
                primary_product=cta.get("primary_product") or "",
                primary_product_url=cta.get("primary_product_url"),
                value_proposition=cta.get("value_proposition") or "",
                secondary_cta=cta.get("secondary_cta"),
            ),
        )

    # ------------------------------------------------------------------
    # Draft
    # ------------------------------------------------------------------

    async def _style_guide(self, draft_input: DraftGenerationInput) -> str:
        if not draft_input.use_style_analysis:
            return ""
        exemplars = draft_input.exemplar_posts

        async def build():
            return build_style_profile(exemplars)

        profile = await self._style_cache.get_or_build(exemplar_key(exemplars), build)
        return profile.to_prompt()

    def _build_draft_prompt(self, draft_input: DraftGenerationInput) -> str:
        brief = draft_input.brief
        author = draft_input.author

        outline_text = "\n".join(
            f"### {o.heading_level.value.upper()}: {o.heading_text}\n"
            + "\n".join(f"- {p}" for p in o.key_points)
            + f"\nTarget word count: ~{o.estimated_word_count} words"
            for o in brief.outline
        )
        links_text = "\n".join(
            f'- Link to: {link.target_url} (anchor: "{link.suggested_anchor_text}", place in: {link.placement})'
            for link in brief.suggested_internal_links
        )
        refs_text = "\n".join(f"- {r.type}: {r.description} ({r.reason})" for r in brief.external_references)
        faq_text = "\n".join(
            f"Q: {f.question}\n" + "\n".join(f"  - {p}" for p in f.key_points_for_answer)
            for f in brief.faq_suggestions
        )
        products_text = "\n".join(f"- {p.name}: {p.url}" for p in draft_input.product_links)
        hook = self._sanitize_prompt_input(draft_input.target_opening_hook, 50)

        return f"""## BRIEF

Title: {self._sanitize_prompt_input(brief.suggested_title, 300)}
Slug: {brief.suggested_slug}
Primary Keyword: {self._sanitize_prompt_input(draft_input.primary_keyword, 200)}
Search Intent: {draft_input.search_intent}
{f"Opening hook: {hook}" if hook else ""}

Hero Answer Draft:
{brief.hero_answer_draft}

## OUTLINE

{outline_text}

## KEY QUESTIONS TO ANSWER

{chr(10).join(f"- {q}" for q in brief.key_questions)}

## SUGGESTED INTERNAL LINKS

{links_text or "None"}

## EXTERNAL REFERENCES TO MENTION

{refs_text or "None"}

## FAQ SUGGESTIONS

{faq_text or "None"}

## PRODUCTS TO FEATURE

{products_text or "None"}

## EXPERIENCE EVIDENCE

Include these prompts as [PLACEHOLDER: ...] markers for editors to fill in:
{chr(10).join(f"- {p}" for p in brief.experience_prompts)}

## AUTHOR

Name: {self._sanitize_prompt_input(author.name, 200)}
Role: {self._sanitize_prompt_input(author.role, 200)}
Credentials: {self._sanitize_prompt_input(author.credentials, 500)}

Respond in JSON format:
{{
    "title": "...",
    "slug": "{brief.suggested_slug}",
    "meta_title": "50-60 characters",
    "meta_description": "130-160 characters",
    "hero_answer": "2-4 sentences",
    "sections": [{{"heading_text": "...", "heading_level": "h2", "body": "<p>HTML</p>"}}],
    "faq": [{{"question": "...", "answer": "..."}}],
    "experience_evidence": {{"summary": "...", "details": null, "placeholders": ["[PLACEHOLDER: ...]"]}},
    "internal_links": [{{"href": "...", "anchor_text": "...", "link_type": "blog_post"}}],
    "secondary_keywords": ["..."]
}}"""

    async def generate_draft(self, draft_input: DraftGenerationInput) -> DraftArtifact:
        """
        Generate a full draft from a brief.

        Args:
            draft_input: Brief, author, keyword and style options

        Returns:
            DraftArtifact with ids, author and word count filled in
        """
        if not self._client:
            return self._mock_draft(draft_input)

        system = DRAFT_SYSTEM_PROMPT
        style_guide = await self._style_guide(draft_input)
        if style_guide:
            system = f"{system}\n\n{style_guide}"

        response_text = await self._complete(
            self._build_draft_prompt(draft_input), system, self._max_tokens
        )
        draft = self._parse_draft(_extract_json(response_text), draft_input)
        logger.info("Generated draft '%s' (%d words)", draft.slug, draft.word_count)
        return draft

    def _parse_draft(self, data: dict[str, Any], draft_input: DraftGenerationInput) -> DraftArtifact:
        brief = draft_input.brief
        try:
            sections = [
                self._parse_section(s) for s in data.get("sections", [])
            ]
            faqs = [
                FAQ(id=f.get("id") or str(uuid.uuid4()), question=f["question"], answer=f["answer"])
                for f in data.get("faq", [])
            ]
            links = [
                InternalLink(
                    href=link["href"],
                    anchor_text=link.get("anchor_text", ""),
                    link_type=_link_type(link.get("link_type")),
                    target_post_id=link.get("target_post_id"),
                )
                for link in data.get("internal_links", [])
            ]
        except (KeyError, TypeError) as e:
            raise AIGenerationError(f"AI returned a malformed draft: {e}") from e

        evidence_data = data.get("experience_evidence")
        evidence = None
        if isinstance(evidence_data, dict):
            evidence = ExperienceEvidence(
                summary=evidence_data.get("summary") or "",
                details=evidence_data.get("details"),
                placeholders=tuple(evidence_data.get("placeholders") or ()),
            )

        draft = DraftArtifact(
            id=str(uuid.uuid4()),
            title=data.get("title") or brief.suggested_title,
            slug=data.get("slug") or brief.suggested_slug,
            hero_answer=data.get("hero_answer") or "",
            sections=sections,
            faq=faqs,
            experience_evidence=evidence,
            internal_links=links,
            primary_keyword=draft_input.primary_keyword,
            secondary_keywords=list(data.get("secondary_keywords") or []),
            search_intent=_search_intent(draft_input.search_intent),
            meta_title=data.get("meta_title") or "",
            meta_description=(data.get("meta_description") or "")[:160],
            status=PostStatus.DRAFT,
            author=draft_input.author,
            cluster_topic_id=draft_input.cluster_topic_id,
            ai_model=self._model,
        )
        draft.word_count = draft_word_count(draft)
        return draft

    @staticmethod
    def _parse_section(data: dict[str, Any], section_id: Optional[str] = None) -> Section:
        body = data["body"]
        return Section(
            id=section_id or data.get("id") or str(uuid.uuid4()),
            heading_text=data["heading_text"],
            heading_level=_heading_level(data.get("heading_level", "h2")),
            body=body,
            word_count=html_word_count(body),
        )

    # ------------------------------------------------------------------
    # Field repair
    # ------------------------------------------------------------------

    async def regenerate_hero_answer(
        self,
        draft_input: DraftGenerationInput,
        current: str,
        repair_prompt: str,
    ) -> str:
        """Rewrite only the hero answer."""
        if not self._client:
            return self._mock_hero_answer(draft_input)

        prompt = f"""Rewrite the hero answer (featured snippet) for this article.

Title: {self._sanitize_prompt_input(draft_input.brief.suggested_title, 300)}
Primary keyword: {self._sanitize_prompt_input(draft_input.primary_keyword, 200)}

Current hero answer:
{current or "(none)"}

Instructions:
{repair_prompt}

Respond with the hero answer text only, no JSON and no quotes."""

        text = await self._complete(prompt, DRAFT_SYSTEM_PROMPT, REPAIR_MAX_TOKENS)
        return text.strip().strip('"')

    async def regenerate_section(
        self,
        draft_input: DraftGenerationInput,
        section: Section,
        repair_prompt: str,
    ) -> Optional[Section]:
        """Rewrite one section, keeping its id and heading."""
        if not self._client:
            return self._mock_section(draft_input, section.heading_text, section.heading_level, section.id)

        prompt = f"""Rewrite this section of the article "{self._sanitize_prompt_input(draft_input.brief.suggested_title, 300)}".

Heading ({section.heading_level.value}): {section.heading_text}

Current body:
{section.body}

Instructions:
{repair_prompt}

Respond in JSON format:
{{"heading_text": "{section.heading_text}", "heading_level": "{section.heading_level.value}", "body": "<p>HTML</p>"}}"""

        response_text = await self._complete(prompt, DRAFT_SYSTEM_PROMPT, REPAIR_MAX_TOKENS)
        try:
            return self._parse_section(_extract_json(response_text), section_id=section.id)
        except (KeyError, TypeError) as e:
            raise AIGenerationError(f"AI returned a malformed section: {e}") from e

    async def generate_section(
        self,
        draft_input: DraftGenerationInput,
        draft: DraftArtifact,
        repair_prompt: str,
    ) -> Optional[Section]:
        """Write one new section to append to the draft."""
        if not self._client:
            return self._mock_section(draft_input, "Safety and Next Steps", HeadingLevel.H2)

        headings = "\n".join(f"- {s.heading_text}" for s in draft.sections)
        prompt = f"""Write one additional section for the article "{self._sanitize_prompt_input(draft.title, 300)}".

Existing sections:
{headings or "(none)"}

Instructions:
{repair_prompt}

Respond in JSON format:
{{"heading_text": "...", "heading_level": "h2", "body": "<p>HTML</p>"}}"""

        response_text = await self._complete(prompt, DRAFT_SYSTEM_PROMPT, REPAIR_MAX_TOKENS)
        try:
            return self._parse_section(_extract_json(response_text))
        except (KeyError, TypeError) as e:
            raise AIGenerationError(f"AI returned a malformed section: {e}") from e

    # ------------------------------------------------------------------
    # Mock outputs for development
    # ------------------------------------------------------------------

    def _mock_outline(self, topic: TopicSuggestion, target_word_count: int, faq_count: int) -> ContentOutline:
        """Generate mock outline for development."""
        keyword = topic.primary_keyword
        headings = [
            f"What is {keyword.title()}?",
            f"How to Use {keyword.title()}",
            "Safety and Handling",
            "Best Practices and Tips",
        ]
        per_section = max(target_word_count // len(headings), 120)
        return ContentOutline(
            meta=OutlineMeta(
                topic=topic.topic,
                primary_keyword=keyword,
                search_intent=topic.search_intent,
                target_word_count=target_word_count,
                eeat_hooks=[f"{keyword} in day-to-day use"],
            ),
            opening_hook=OpeningHook(type="problem", description=f"Common mistakes with {keyword}"),
            hero_answer=HeroAnswerPlan(
                key_points=[
                    f"{keyword.capitalize()} is covered step by step in this guide.",
                    "Follow the handling advice before you start.",
                ]
            ),
            sections=[
                OutlineSection(
                    heading=heading,
                    key_points=[f"Key point about {heading.lower()}"],
                    estimated_words=per_section,
                    eeat_element="expertise" if i == 0 else None,
                    component="callout_warning" if heading == "Safety and Handling" else None,
                )
                for i, heading in enumerate(headings)
            ],
            faq_questions=[
                FAQOutlineItem(
                    question=f"Question {n} about {keyword}?",
                    key_points_for_answer=[f"Answer point {n}"],
                )
                for n in range(1, faq_count + 1)
            ],
            cta=CTASection(primary_product=keyword, value_proposition=f"Get {keyword} delivered"),
        )

    def _mock_paragraphs(self, heading: str, keyword: str) -> str:
        sentence = (
            f"This part of the guide on {keyword} explains {heading.lower()} in practical terms "
            "so readers can apply each step with confidence."
        )
        return "".join(f"<p>{sentence} {sentence}</p>" for _ in range(4))

    def _mock_section(
        self,
        draft_input: DraftGenerationInput,
        heading: str,
        level: HeadingLevel,
        section_id: Optional[str] = None,
    ) -> Section:
        body = self._mock_paragraphs(heading, draft_input.primary_keyword)
        if heading == "Safety and Next Steps":
            body += (
                '<div class="callout callout-warning"><p>Wear protective gloves and eye '
                "protection.</p></div>"
                '<p><a class="cta" href="/contact">Contact us</a> for product advice.</p>'
            )
        return Section(
            id=section_id or str(uuid.uuid4()),
            heading_text=heading,
            heading_level=level,
            body=body,
            word_count=html_word_count(body),
        )

    def _mock_hero_answer(self, draft_input: DraftGenerationInput) -> str:
        keyword = draft_input.primary_keyword
        return (
            f"{keyword.capitalize()} works best when you follow a tested, step-by-step process. "
            f"This guide explains how to choose, use and store {keyword} safely."
        )

    def _mock_draft(self, draft_input: DraftGenerationInput) -> DraftArtifact:
        """Generate mock draft for development."""
        brief = draft_input.brief
        entries = brief.outline or ()
        sections = [
            self._mock_section(draft_input, entry.heading_text, entry.heading_level, f"section-{i + 1}")
            for i, entry in enumerate(entries)
        ]
        faqs = [
            FAQ(
                id=f"faq-{i + 1}",
                question=suggestion.question,
                answer=(
                    f"In short, {', '.join(suggestion.key_points_for_answer) or draft_input.primary_keyword}. "
                    "Check the product data sheet and local regulations before you start, "
                    "and contact our team if you are unsure."
                ),
            )
            for i, suggestion in enumerate(brief.faq_suggestions)
        ]
        draft = DraftArtifact(
            id=str(uuid.uuid4()),
            title=brief.suggested_title,
            slug=brief.suggested_slug,
            hero_answer=brief.hero_answer_draft or self._mock_hero_answer(draft_input),
            sections=sections,
            faq=faqs,
            experience_evidence=ExperienceEvidence(
                summary="[PLACEHOLDER] Editor to add first-hand experience",
                placeholders=tuple(brief.experience_prompts),
            ),
            internal_links=[
                InternalLink(href=link.target_url, anchor_text=link.suggested_anchor_text)
                for link in brief.suggested_internal_links
            ],
            primary_keyword=draft_input.primary_keyword,
            search_intent=_search_intent(draft_input.search_intent),
            meta_title=brief.suggested_title[:60],
            meta_description=f"Learn about {draft_input.primary_keyword}: {brief.suggested_title}"[:160],
            status=PostStatus.DRAFT,
            author=draft_input.author,
            cluster_topic_id=draft_input.cluster_topic_id,
            ai_model="mock",
        )
        draft.word_count = draft_word_count(draft)
        return draft


# Singleton instance
content_ai_service = AnthropicContentService()
