"""
Service layer: brief resolution, the quality gate, repair and orchestration.
"""

from services.batch_generation import BatchGenerator, BatchSummary, get_batch_generator
from services.brief_resolver import BriefResolutionError, BriefResolver, outline_to_brief, slugify
from services.content_validator import (
    ContentValidator,
    get_repair_prompt,
    quick_validate,
    validate_content,
)
from services.deadline import CollaboratorTimeoutError, call_with_deadline
from services.orchestrator import (
    PostGenerationOrchestrator,
    get_orchestrator,
    is_post_valid,
    validate_post,
)
from services.repair_dispatcher import (
    MAX_REPAIR_ATTEMPTS,
    RepairDispatcher,
    RepairOutcome,
    RepairState,
    RepairStrategyError,
)

__all__ = [
    "BatchGenerator",
    "BatchSummary",
    "get_batch_generator",
    "BriefResolutionError",
    "BriefResolver",
    "outline_to_brief",
    "slugify",
    "ContentValidator",
    "get_repair_prompt",
    "quick_validate",
    "validate_content",
    "CollaboratorTimeoutError",
    "call_with_deadline",
    "PostGenerationOrchestrator",
    "get_orchestrator",
    "is_post_valid",
    "validate_post",
    "MAX_REPAIR_ATTEMPTS",
    "RepairDispatcher",
    "RepairOutcome",
    "RepairState",
    "RepairStrategyError",
]
