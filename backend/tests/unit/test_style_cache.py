"""
Unit tests for style profiles and their cache.
"""

from unittest.mock import AsyncMock

import pytest

from adapters.ai.style_cache import (
    StyleProfile,
    StyleProfileCache,
    build_style_profile,
    exemplar_key,
)
from core.domain.content import HeadingLevel, Section


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestBuildStyleProfile:
    def test_empty(self):
        profile = build_style_profile([])
        assert profile == StyleProfile()
        assert profile.to_prompt() == ""

    def test_measures_exemplars(self, make_draft):
        table_section = Section(
            id="t",
            heading_text="Compare",
            heading_level=HeadingLevel.H2,
            body="<table><tr><td>one two</td></tr></table><ul><li>three</li></ul>",
        )
        posts = [make_draft(), make_draft(id="draft-2", sections=[table_section], faq=[])]

        profile = build_style_profile(posts)

        assert profile.exemplar_count == 2
        assert profile.avg_sections_per_post == 4.5
        assert profile.avg_faqs_per_post == 1.0
        assert profile.uses_tables is True
        assert profile.uses_bullet_points is True
        assert profile.uses_ctas is True
        assert profile.uses_callouts is False
        prompt = profile.to_prompt()
        assert "Include comparison tables where relevant" in prompt
        assert "Target 4 sections per post" in prompt


class TestExemplarKey:
    def test_order_independent(self, make_draft):
        a, b = make_draft(id="a"), make_draft(id="b")
        assert exemplar_key([a, b]) == exemplar_key([b, a]) == "a|b"

    def test_default(self):
        assert exemplar_key([]) == "default"


class TestStyleProfileCache:
    def test_entries_expire(self):
        clock = FakeClock()
        cache = StyleProfileCache(ttl_seconds=60, clock=clock)
        profile = StyleProfile(exemplar_count=1)

        cache.put("k", profile)
        clock.now += 59
        assert cache.get("k") is profile
        clock.now += 1
        assert cache.get("k") is None

    def test_invalidate(self):
        cache = StyleProfileCache()
        cache.put("a", StyleProfile())
        cache.put("b", StyleProfile())

        cache.invalidate("a")
        assert cache.get("a") is None
        assert cache.get("b") is not None

        cache.invalidate()
        assert cache.get("b") is None

    @pytest.mark.asyncio
    async def test_get_or_build_reuses_fresh_profile(self):
        clock = FakeClock()
        cache = StyleProfileCache(ttl_seconds=10, clock=clock)
        builder = AsyncMock(side_effect=[StyleProfile(exemplar_count=1), StyleProfile(exemplar_count=2)])

        first = await cache.get_or_build("k", builder)
        second = await cache.get_or_build("k", builder)
        clock.now += 10
        third = await cache.get_or_build("k", builder)

        assert first is second
        assert third.exemplar_count == 2
        assert builder.await_count == 2
