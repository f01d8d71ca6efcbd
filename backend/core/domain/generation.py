"""Orchestration records: pipeline input, options and the terminal result."""
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from .content import Author, Brief, ContentIdea, DraftArtifact, TopicSuggestion
from .outline import BlogPostReference, ContentOutline
from .validation import ValidationResult

if TYPE_CHECKING:
    from core.options import ValidationConfig


class BriefInputKind(str, Enum):
    BRIEF = "brief"
    CONTENT_IDEA = "content_idea"
    TOPIC = "topic"


_PAYLOAD_TYPES = {
    BriefInputKind.BRIEF: Brief,
    BriefInputKind.CONTENT_IDEA: ContentIdea,
    BriefInputKind.TOPIC: TopicSuggestion,
}


@dataclass(frozen=True)
class BriefInput:
    """Exactly one of: an explicit brief, a content idea, or a raw topic."""

    kind: BriefInputKind
    payload: Union[Brief, ContentIdea, TopicSuggestion]

    def __post_init__(self):
        expected = _PAYLOAD_TYPES[self.kind]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"BriefInput of kind '{self.kind.value}' needs a {expected.__name__} payload, "
                f"got {type(self.payload).__name__}"
            )

    @classmethod
    def from_brief(cls, brief: Brief) -> "BriefInput":
        return cls(BriefInputKind.BRIEF, brief)

    @classmethod
    def from_content_idea(cls, idea: ContentIdea) -> "BriefInput":
        return cls(BriefInputKind.CONTENT_IDEA, idea)

    @classmethod
    def from_topic(cls, topic: TopicSuggestion) -> "BriefInput":
        return cls(BriefInputKind.TOPIC, topic)

    @classmethod
    def from_fields(
        cls,
        brief: Optional[Brief] = None,
        content_idea: Optional[ContentIdea] = None,
        topic: Optional[TopicSuggestion] = None,
    ) -> Optional["BriefInput"]:
        """Build from optional fields. Returns None when none is set."""
        populated = [
            (kind, value)
            for kind, value in (
                (BriefInputKind.BRIEF, brief),
                (BriefInputKind.CONTENT_IDEA, content_idea),
                (BriefInputKind.TOPIC, topic),
            )
            if value is not None
        ]
        if not populated:
            return None
        if len(populated) > 1:
            names = ", ".join(kind.value for kind, _ in populated)
            raise ValueError(f"Exactly one brief input variant may be set (got: {names})")
        kind, value = populated[0]
        return cls(kind, value)


@dataclass
class ProductLink:
    url: str
    name: str


@dataclass
class DraftGenerationInput:
    """Everything the draft generator needs for one article."""

    brief: Brief
    author: Author
    primary_keyword: str
    search_intent: str = "informational"
    exemplar_posts: list[DraftArtifact] = field(default_factory=list)
    cluster_topic_id: Optional[str] = None
    use_style_analysis: bool = False
    target_opening_hook: Optional[str] = None  # story, problem, statistic, question
    product_links: list[ProductLink] = field(default_factory=list)


@dataclass
class GenerationOptions:
    use_style_analysis: bool = False
    target_opening_hook: Optional[str] = None
    product_links: list[ProductLink] = field(default_factory=list)
    exemplar_posts: list[DraftArtifact] = field(default_factory=list)
    existing_posts: list[BlogPostReference] = field(default_factory=list)
    target_word_count: Optional[int] = None
    faq_count: Optional[int] = None
    validation_config: Optional["ValidationConfig"] = None
    auto_repair_attempts: int = 0
    skip_validation: bool = False


class GenerationOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    NEEDS_REVIEW = "needs_review"  # draft produced but the quality gate still fails
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class GenerationResult:
    """Terminal output of one orchestration run."""

    success: bool
    post: Optional[DraftArtifact] = None
    outline: Optional[ContentOutline] = None
    validation: Optional[ValidationResult] = None
    repair_attempts: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    duration_ms: int = 0
    outcome: GenerationOutcome = GenerationOutcome.FAILED
    run_id: str = ""
