"""Outline entities produced by the outline collaborator."""
from dataclasses import dataclass, field
from typing import Optional

from .content import HeadingLevel, SearchIntent


@dataclass
class OutlineMeta:
    topic: str
    primary_keyword: str
    search_intent: SearchIntent = SearchIntent.INFORMATIONAL
    content_type: str = "educational"
    target_word_count: int = 1500
    secondary_keywords: list[str] = field(default_factory=list)
    eeat_hooks: list[str] = field(default_factory=list)


@dataclass
class OpeningHook:
    type: str  # story, problem, statistic, question
    description: str = ""


@dataclass
class HeroAnswerPlan:
    key_points: list[str] = field(default_factory=list)
    target_length: str = "2-3 sentences"


@dataclass
class OutlineSection:
    heading: str
    heading_level: HeadingLevel = HeadingLevel.H2
    key_points: list[str] = field(default_factory=list)
    estimated_words: int = 200
    eeat_element: Optional[str] = None
    internal_link: Optional[str] = None
    component: Optional[str] = None  # table, steps, callout_warning, ...
    image_opportunity: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.heading_level, str):
            self.heading_level = HeadingLevel(self.heading_level)


@dataclass
class FAQOutlineItem:
    question: str
    key_points_for_answer: list[str] = field(default_factory=list)
    source: Optional[str] = None


@dataclass
class CTASection:
    primary_product: str = ""
    primary_product_url: Optional[str] = None
    value_proposition: str = ""
    secondary_cta: Optional[str] = None


@dataclass
class ContentOutline:
    """Complete content outline for article generation."""

    meta: OutlineMeta
    opening_hook: OpeningHook
    hero_answer: HeroAnswerPlan
    sections: list[OutlineSection] = field(default_factory=list)
    faq_questions: list[FAQOutlineItem] = field(default_factory=list)
    cta: CTASection = field(default_factory=CTASection)


@dataclass
class BlogPostReference:
    """Existing post that may be linked internally."""

    slug: str
    title: str
    url: str
    primary_keyword: Optional[str] = None


@dataclass
class OutlineValidation:
    valid: bool
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: dict = field(default_factory=dict)


def validate_outline(outline: ContentOutline) -> OutlineValidation:
    """Check an outline for completeness.

    Missing topic / keyword and fewer than three sections make the outline
    invalid; everything else is reported as a warning.
    """
    issues: list[str] = []
    warnings: list[str] = []

    if not outline.meta.topic:
        issues.append("Missing topic")
    if not outline.meta.primary_keyword:
        issues.append("Missing primary keyword")
    if outline.meta.target_word_count < 500:
        warnings.append("Target word count seems low")

    if not outline.opening_hook.description:
        warnings.append("Opening hook description is empty")

    if len(outline.hero_answer.key_points) < 2:
        warnings.append("Hero answer should have at least 2 key points")

    if len(outline.sections) < 3:
        issues.append("Outline should have at least 3 sections")

    h2_count = sum(1 for s in outline.sections if s.heading_level == HeadingLevel.H2)
    if h2_count < 2:
        warnings.append("Consider more H2 sections for better structure")

    has_eeat_elements = any(s.eeat_element for s in outline.sections)
    if not has_eeat_elements:
        warnings.append("No E-E-A-T elements specified in sections")

    if len(outline.faq_questions) < 2:
        warnings.append("Consider adding more FAQs")

    if not outline.cta.primary_product:
        warnings.append("CTA section missing primary product")

    return OutlineValidation(
        valid=not issues,
        issues=issues,
        warnings=warnings,
        stats={
            "total_sections": len(outline.sections),
            "total_faqs": len(outline.faq_questions),
            "estimated_word_count": sum(s.estimated_words for s in outline.sections),
            "has_eeat_elements": has_eeat_elements,
            "has_internal_links": any(s.internal_link for s in outline.sections),
        },
    )
