"""Content domain entities."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class PostStatus(str, Enum):
    """Article lifecycle status."""
    IDEA = "idea"
    BRIEF = "brief"
    DRAFT = "draft"
    REVIEWING = "reviewing"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class SearchIntent(str, Enum):
    """Search intent behind a target keyword."""
    INFORMATIONAL = "informational"
    COMMERCIAL = "commercial"
    TRANSACTIONAL = "transactional"
    NAVIGATIONAL = "navigational"


class HeadingLevel(str, Enum):
    H2 = "h2"
    H3 = "h3"


class LinkType(str, Enum):
    PRODUCT = "product"
    COLLECTION = "collection"
    BLOG_POST = "blog_post"
    CATEGORY = "category"
    EXTERNAL = "external"


@dataclass
class Author:
    """Author information shown for E-E-A-T."""

    id: str
    name: str
    role: str = ""
    credentials: str = ""
    profile_url: Optional[str] = None


# ============================================================================
# Brief
# ============================================================================


@dataclass(frozen=True)
class BriefOutlineEntry:
    heading_level: HeadingLevel
    heading_text: str
    key_points: tuple[str, ...] = ()
    estimated_word_count: int = 200


@dataclass(frozen=True)
class BriefInternalLink:
    target_url: str
    suggested_anchor_text: str
    placement: str
    reason: str


@dataclass(frozen=True)
class ExternalReference:
    type: str  # standard, regulation, study, authority
    description: str
    reason: str


@dataclass(frozen=True)
class FAQSuggestion:
    question: str
    key_points_for_answer: tuple[str, ...] = ()


@dataclass(frozen=True)
class Brief:
    """Content plan consumed by draft generation. Immutable once produced."""

    suggested_title: str
    suggested_slug: str
    hero_answer_draft: str = ""
    outline: tuple[BriefOutlineEntry, ...] = ()
    key_questions: tuple[str, ...] = ()
    suggested_internal_links: tuple[BriefInternalLink, ...] = ()
    external_references: tuple[ExternalReference, ...] = ()
    faq_suggestions: tuple[FAQSuggestion, ...] = ()
    experience_prompts: tuple[str, ...] = ()


# ============================================================================
# Inputs that can be resolved into a brief
# ============================================================================


@dataclass
class ContentIdea:
    """A planned article that may or may not already carry a brief."""

    id: str
    topic: str
    primary_keyword: str
    search_intent: SearchIntent = SearchIntent.INFORMATIONAL
    secondary_keywords: list[str] = field(default_factory=list)
    target_audience: Optional[str] = None
    cluster_topic_id: Optional[str] = None
    justification: Optional[str] = None
    brief: Optional[Brief] = None

    def __post_init__(self):
        if isinstance(self.search_intent, str):
            self.search_intent = SearchIntent(self.search_intent)


@dataclass
class TopicSuggestion:
    """A raw topic, typically produced by topic discovery."""

    topic: str
    primary_keyword: str
    angle: str = "howto"  # howto, comparison, safety, technical, faq, application
    search_intent: SearchIntent = SearchIntent.INFORMATIONAL
    unique_angle: str = ""
    eeat_score: dict[str, int] = field(default_factory=dict)
    relevant_products: list[str] = field(default_factory=list)

    def __post_init__(self):
        if isinstance(self.search_intent, str):
            self.search_intent = SearchIntent(self.search_intent)


# ============================================================================
# Draft artifact
# ============================================================================


@dataclass(frozen=True)
class Section:
    """One body section; ``body`` is HTML."""

    id: str
    heading_text: str
    heading_level: HeadingLevel
    body: str
    word_count: int = 0


@dataclass(frozen=True)
class FAQ:
    id: str
    question: str
    answer: str


@dataclass(frozen=True)
class InternalLink:
    href: str
    anchor_text: str
    link_type: LinkType = LinkType.BLOG_POST
    target_post_id: Optional[str] = None


@dataclass(frozen=True)
class ExperienceEvidence:
    summary: str = ""
    details: Optional[str] = None
    placeholders: tuple[str, ...] = ()


@dataclass
class DraftArtifact:
    """Generated article record.

    Repairs never mutate a draft in place; they produce a new version through
    :class:`core.domain.patch.DraftPatch`.
    """

    id: str = ""
    title: str = ""
    slug: str = ""
    hero_answer: str = ""
    sections: list[Section] = field(default_factory=list)
    faq: list[FAQ] = field(default_factory=list)
    experience_evidence: Optional[ExperienceEvidence] = None
    internal_links: list[InternalLink] = field(default_factory=list)

    # SEO metadata
    primary_keyword: str = ""
    secondary_keywords: list[str] = field(default_factory=list)
    search_intent: SearchIntent = SearchIntent.INFORMATIONAL
    meta_title: str = ""
    meta_description: str = ""

    # Generation metadata
    word_count: int = 0
    status: PostStatus = PostStatus.DRAFT
    author: Optional[Author] = None
    cluster_topic_id: Optional[str] = None
    ai_model: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.status, str):
            self.status = PostStatus(self.status)
        if isinstance(self.search_intent, str):
            self.search_intent = SearchIntent(self.search_intent)
