"""Quality-gate thresholds."""
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from infrastructure.config.settings import Settings

DEFAULT_HAZARDOUS_KEYWORDS = [
    "acid",
    "chemical",
    "toxic",
    "hazardous",
    "corrosive",
    "flammable",
    "caustic",
    "dangerous",
    "safety",
    "ppe",
    "protective",
    "burn",
    "irritant",
    "poison",
    "reactive",
    "oxidizer",
]


class ValidationConfig(BaseModel):
    """Thresholds the content validator checks a draft against."""

    model_config = ConfigDict(frozen=True)

    min_total_words: int = Field(default=1000, ge=0)
    min_section_words: int = Field(default=120, ge=0)
    min_faqs: int = Field(default=2, ge=0)
    min_internal_links: int = Field(default=2, ge=0)
    hero_min_sentences: int = Field(default=2, ge=0)
    hero_max_sentences: int = Field(default=4, ge=1)
    require_end_cta: bool = True
    require_safety_callouts: bool = True
    hazardous_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_HAZARDOUS_KEYWORDS))

    @model_validator(mode="after")
    def check_hero_range(self) -> "ValidationConfig":
        if self.hero_min_sentences > self.hero_max_sentences:
            raise ValueError("hero_min_sentences cannot exceed hero_max_sentences")
        return self

    @classmethod
    def from_settings(cls, app_settings: Optional["Settings"] = None) -> "ValidationConfig":
        """Build from ``validation_*`` settings."""
        if app_settings is None:
            from infrastructure.config.settings import get_settings

            app_settings = get_settings()
        return cls(
            min_total_words=app_settings.validation_min_total_words,
            min_section_words=app_settings.validation_min_section_words,
            min_faqs=app_settings.validation_min_faqs,
            min_internal_links=app_settings.validation_min_internal_links,
            hero_min_sentences=app_settings.validation_hero_min_sentences,
            hero_max_sentences=app_settings.validation_hero_max_sentences,
            require_end_cta=app_settings.validation_require_end_cta,
            require_safety_callouts=app_settings.validation_require_safety_callouts,
            hazardous_keywords=app_settings.hazardous_keywords_list,
        )
