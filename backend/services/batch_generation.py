"""
Batch content generation.

Runs many orchestration runs concurrently, bounded by a semaphore, and
summarises them the way bulk jobs are reported: completed,
partially_failed or failed.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from core.domain.content import Author
from core.domain.generation import (
    BriefInput,
    GenerationOptions,
    GenerationOutcome,
    GenerationResult,
)
from services.orchestrator import PostGenerationOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    status: str  # completed, partially_failed, failed
    results: list[GenerationResult] = field(default_factory=list)
    total_items: int = 0
    completed_items: int = 0
    failed_items: int = 0
    duration_ms: int = 0

    @property
    def timed_out_items(self) -> int:
        return sum(1 for r in self.results if r.outcome == GenerationOutcome.TIMED_OUT)


def batch_status(completed: int, failed: int) -> str:
    if failed == 0:
        return "completed"
    if completed == 0:
        return "failed"
    return "partially_failed"


class BatchGenerator:
    """Generate posts for many inputs with bounded concurrency."""

    def __init__(
        self,
        orchestrator: PostGenerationOrchestrator,
        concurrency: int = 3,
        item_delay_seconds: float = 0.0,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.orchestrator = orchestrator
        self.concurrency = concurrency
        self.item_delay_seconds = item_delay_seconds

    async def run(
        self,
        inputs: Sequence[Optional[BriefInput]],
        author: Author,
        options: Optional[GenerationOptions] = None,
    ) -> BatchSummary:
        """
        Generate one post per input.

        Results keep the order of ``inputs``. A run that raises is recorded as
        a failed result; it never cancels its siblings.
        """
        start_time = time.perf_counter()
        semaphore = asyncio.Semaphore(self.concurrency)

        async def generate_one(index: int, brief_input: Optional[BriefInput]) -> GenerationResult:
            async with semaphore:
                try:
                    result = await self.orchestrator.generate_post_from_brief(brief_input, author, options)
                except Exception as e:
                    logger.error("Batch item %d failed: %s", index, e)
                    result = GenerationResult(success=False, errors=[f"Generation failed: {e}"])
                # Pause between items to avoid overloading the AI API
                if self.item_delay_seconds:
                    await asyncio.sleep(self.item_delay_seconds)
                return result

        results = list(
            await asyncio.gather(*(generate_one(i, item) for i, item in enumerate(inputs)))
        )

        completed = sum(1 for r in results if r.success)
        failed = len(results) - completed
        summary = BatchSummary(
            status=batch_status(completed, failed),
            results=results,
            total_items=len(results),
            completed_items=completed,
            failed_items=failed,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
        )
        logger.info(
            "Batch finished: %d/%d completed, %d failed",
            completed,
            summary.total_items,
            failed,
            extra={"stage": "batch", "duration_ms": summary.duration_ms},
        )
        return summary


def get_batch_generator() -> BatchGenerator:
    """Batch generator using the shared orchestrator and settings."""
    from infrastructure.config.settings import settings
    from services.orchestrator import get_orchestrator

    return BatchGenerator(
        get_orchestrator(),
        concurrency=settings.batch_concurrency,
        item_delay_seconds=settings.batch_item_delay_seconds,
    )
