"""Per-call deadlines for generative collaborator calls."""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollaboratorTimeoutError(Exception):
    """A collaborator call did not finish within its deadline."""

    def __init__(self, operation: str, timeout_seconds: float):
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(f"{operation} timed out after {timeout_seconds:g}s")


async def call_with_deadline(
    awaitable: Awaitable[T],
    timeout_seconds: Optional[float],
    operation: str,
) -> T:
    """
    Await a collaborator call, cancelling it once the deadline passes.

    A timeout of None or 0 disables the deadline.

    Raises:
        CollaboratorTimeoutError: If the call is still running at the deadline.
    """
    if not timeout_seconds:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.warning("%s exceeded its %gs deadline", operation, timeout_seconds)
        raise CollaboratorTimeoutError(operation, timeout_seconds) from e
