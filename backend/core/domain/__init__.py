# Domain Entities
# Business objects and text measurement, free of infrastructure dependencies
from .content import (
    FAQ,
    Author,
    Brief,
    BriefInternalLink,
    BriefOutlineEntry,
    ContentIdea,
    DraftArtifact,
    ExperienceEvidence,
    ExternalReference,
    FAQSuggestion,
    HeadingLevel,
    InternalLink,
    LinkType,
    PostStatus,
    SearchIntent,
    Section,
    TopicSuggestion,
)
from .generation import (
    BriefInput,
    BriefInputKind,
    DraftGenerationInput,
    GenerationOptions,
    GenerationOutcome,
    GenerationResult,
    ProductLink,
)
from .outline import (
    BlogPostReference,
    ContentOutline,
    CTASection,
    FAQOutlineItem,
    HeroAnswerPlan,
    OpeningHook,
    OutlineMeta,
    OutlineSection,
    OutlineValidation,
    validate_outline,
)
from .patch import DraftPatch
from .validation import (
    ContentMetrics,
    RepairAction,
    RepairSuggestion,
    Severity,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "Author",
    "Brief",
    "BriefInternalLink",
    "BriefOutlineEntry",
    "ContentIdea",
    "DraftArtifact",
    "ExperienceEvidence",
    "ExternalReference",
    "FAQ",
    "FAQSuggestion",
    "HeadingLevel",
    "InternalLink",
    "LinkType",
    "PostStatus",
    "SearchIntent",
    "Section",
    "TopicSuggestion",
    "BriefInput",
    "BriefInputKind",
    "DraftGenerationInput",
    "GenerationOptions",
    "GenerationOutcome",
    "GenerationResult",
    "ProductLink",
    "BlogPostReference",
    "ContentOutline",
    "CTASection",
    "FAQOutlineItem",
    "HeroAnswerPlan",
    "OpeningHook",
    "OutlineMeta",
    "OutlineSection",
    "OutlineValidation",
    "validate_outline",
    "DraftPatch",
    "ContentMetrics",
    "RepairAction",
    "RepairSuggestion",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
]
