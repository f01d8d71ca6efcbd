"""
Pytest configuration and shared fixtures for backend tests.
"""

import os
import sys
from pathlib import Path

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Keep the production secret check out of the way of unit tests
os.environ["ENVIRONMENT"] = "test"

from unittest.mock import AsyncMock, MagicMock

import pytest

# Import after path is set
from core.domain.content import (
    FAQ,
    Author,
    Brief,
    BriefOutlineEntry,
    DraftArtifact,
    ExperienceEvidence,
    FAQSuggestion,
    HeadingLevel,
    InternalLink,
    Section,
)
from core.domain.generation import DraftGenerationInput
from core.domain.outline import validate_outline

# 11 words; contains none of the hazardous keywords, CTA signals or placeholder markers
FILLER = "Compost improves garden soil structure and feeds helpful microbes over time."

GOOD_HERO = (
    "Compost turns kitchen scraps into rich garden soil within a few months. "
    "Turn the pile weekly and keep it as moist as a wrung sponge."
)
CTA_MARKUP = '<p><a class="cta" href="/shop/compost-bins">Shop now</a></p>'


def filler_html(repeats: int) -> str:
    return f"<p>{' '.join([FILLER] * repeats)}</p>"


@pytest.fixture
def author() -> Author:
    return Author(id="author-1", name="Jordan Lee", role="Head Gardener", credentials="Master composter")


@pytest.fixture
def brief() -> Brief:
    return Brief(
        suggested_title="Home Composting Guide",
        suggested_slug="home-composting-guide",
        hero_answer_draft="Composting at home recycles kitchen scraps into garden soil.",
        outline=(
            BriefOutlineEntry(HeadingLevel.H2, "Getting Started", ("Pick a bin", "Pick a spot")),
            BriefOutlineEntry(HeadingLevel.H2, "Greens and Browns", ("Balance the mix",)),
            BriefOutlineEntry(HeadingLevel.H3, "Turning the Pile", ("Weekly aeration",)),
        ),
        key_questions=("How long does compost take?",),
        faq_suggestions=(
            FAQSuggestion("How long does compost take to finish?", ("Two to six months",)),
            FAQSuggestion("Can I compost citrus peels at home?", ("In moderation",)),
            FAQSuggestion("Should I add worms to my compost bin?", ("Optional",)),
        ),
        experience_prompts=(
            "[PLACEHOLDER: Share specific experience with bin selection]",
            "[PLACEHOLDER: Share specific experience with winter composting]",
        ),
    )


@pytest.fixture
def make_section():
    """Factory for sections made of filler text."""

    def _make(index: int, repeats: int = 12, extra: str = "", heading: str = "") -> Section:
        return Section(
            id=f"section-{index}",
            heading_text=heading or f"Heading {index}",
            heading_level=HeadingLevel.H2,
            body=filler_html(repeats) + extra,
        )

    return _make


@pytest.fixture
def make_draft(make_section):
    """Factory for a draft that passes every check; override fields to break it."""

    def _make(**overrides) -> DraftArtifact:
        sections = [make_section(i) for i in range(7)]
        sections.append(make_section(7, extra=CTA_MARKUP))
        fields = dict(
            id="draft-1",
            title="Home Composting Guide",
            slug="home-composting-guide",
            hero_answer=GOOD_HERO,
            sections=sections,
            faq=[
                FAQ(id="faq-1", question="How long does compost take?", answer=" ".join([FILLER] * 2)),
                FAQ(id="faq-2", question="What can go in the bin?", answer=" ".join([FILLER] * 2)),
            ],
            experience_evidence=ExperienceEvidence(
                summary="Our team has composted at three community gardens since 2019.",
            ),
            internal_links=[
                InternalLink(href="/blog/compost-bins", anchor_text="compost bins"),
                InternalLink(href="/blog/worm-farms", anchor_text="worm farms"),
            ],
            primary_keyword="home composting",
        )
        fields.update(overrides)
        return DraftArtifact(**fields)

    return _make


@pytest.fixture
def draft_input(brief, author) -> DraftGenerationInput:
    return DraftGenerationInput(brief=brief, author=author, primary_keyword="home composting")


@pytest.fixture
def repair_service():
    """FieldRepairService double; every method is an AsyncMock."""
    service = MagicMock()
    service.regenerate_hero_answer = AsyncMock(return_value=GOOD_HERO)
    service.regenerate_section = AsyncMock(return_value=None)
    service.generate_section = AsyncMock(return_value=None)
    return service


@pytest.fixture
def outline_service():
    """OutlineService double with the real outline checks."""
    service = MagicMock()
    service.generate_outline = AsyncMock()
    service.validate_outline = MagicMock(side_effect=validate_outline)
    return service
