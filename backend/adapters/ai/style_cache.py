"""
Writing-style profile derived from exemplar posts, with a time-boxed cache.

Building a profile means parsing every exemplar, so the draft generator
keeps the last profile per exemplar set for ``style_cache_ttl_seconds``.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from bs4 import BeautifulSoup

from core.domain.content import DraftArtifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StyleProfile:
    """Structural averages of the exemplar posts."""

    exemplar_count: int = 0
    avg_word_count: int = 0
    avg_sections_per_post: float = 0.0
    avg_words_per_section: int = 0
    avg_faqs_per_post: float = 0.0
    uses_bullet_points: bool = False
    uses_tables: bool = False
    uses_callouts: bool = False
    uses_ctas: bool = False

    def to_prompt(self) -> str:
        """Render the profile as a style guide block for the system prompt."""
        if not self.exemplar_count:
            return ""
        parts = [
            "## Writing Style Guide",
            "",
            "### Structure",
            f"- Target {round(self.avg_sections_per_post)} sections per post",
            f"- Aim for ~{self.avg_words_per_section} words per section",
            f"- Include about {round(self.avg_faqs_per_post)} FAQs",
        ]
        if self.uses_bullet_points:
            parts.append("- Use bullet points for lists")
        if self.uses_tables:
            parts.append("- Include comparison tables where relevant")
        if self.uses_callouts:
            parts.append("- Use callout boxes for important warnings and tips")
        if self.uses_ctas:
            parts.append("- Include calls-to-action")
        parts += ["", "### Writing Metrics", f"- Target word count: ~{self.avg_word_count} words"]
        return "\n".join(parts)


def build_style_profile(exemplars: Sequence[DraftArtifact]) -> StyleProfile:
    """Measure exemplar posts. An empty sequence yields an empty profile."""
    if not exemplars:
        return StyleProfile()

    total_words = 0
    total_sections = 0
    total_faqs = 0
    bullets = tables = callouts = ctas = False

    for post in exemplars:
        total_faqs += len(post.faq)
        total_sections += len(post.sections)
        for section in post.sections:
            soup = BeautifulSoup(section.body or "", "html.parser")
            total_words += len(soup.get_text(" ").split())
            bullets = bullets or soup.find(["ul", "ol"]) is not None
            tables = tables or soup.find("table") is not None
            callouts = callouts or soup.select_one('[class*="callout"]') is not None
            ctas = ctas or soup.select_one('[class*="cta"], [class*="button"]') is not None

    count = len(exemplars)
    return StyleProfile(
        exemplar_count=count,
        avg_word_count=round(total_words / count),
        avg_sections_per_post=total_sections / count,
        avg_words_per_section=round(total_words / total_sections) if total_sections else 0,
        avg_faqs_per_post=total_faqs / count,
        uses_bullet_points=bullets,
        uses_tables=tables,
        uses_callouts=callouts,
        uses_ctas=ctas,
    )


def exemplar_key(exemplars: Sequence[DraftArtifact]) -> str:
    """Cache key for a set of exemplars, independent of their order."""
    return "|".join(sorted(p.id or p.slug for p in exemplars)) or "default"


class StyleProfileCache:
    """In-memory profile cache whose entries expire after ``ttl_seconds``."""

    def __init__(self, ttl_seconds: float = 3600, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, StyleProfile]] = {}
        self._lock = asyncio.Lock()

    def get(self, key: str) -> Optional[StyleProfile]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, profile = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return profile

    def put(self, key: str, profile: StyleProfile) -> None:
        self._entries[key] = (self._clock(), profile)

    def invalidate(self, key: Optional[str] = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    async def get_or_build(
        self,
        key: str,
        builder: Callable[[], Awaitable[StyleProfile]],
    ) -> StyleProfile:
        """Return the cached profile, building and storing it when missing or stale."""
        cached = self.get(key)
        if cached is not None:
            return cached
        async with self._lock:
            cached = self.get(key)
            if cached is not None:
                return cached
            logger.debug("Building style profile for %s", key)
            profile = await builder()
            self.put(key, profile)
            return profile
