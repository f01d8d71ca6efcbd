"""
Unit tests for settings and quality-gate configuration.
"""

import pytest
from pydantic import ValidationError

from core.options import DEFAULT_HAZARDOUS_KEYWORDS, ValidationConfig
from infrastructure.config.settings import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_pipeline_defaults(self):
        s = _settings()

        assert s.max_repair_attempts == 2
        assert s.collaborator_timeout_seconds == 300.0
        assert s.batch_concurrency == 3
        assert s.style_cache_ttl_seconds == 3600
        assert s.hazardous_keywords_list == DEFAULT_HAZARDOUS_KEYWORDS

    def test_hazardous_keywords_from_comma_list(self):
        s = _settings(validation_hazardous_keywords="Bleach, LYE ,,ammonia")
        assert s.hazardous_keywords_list == ["bleach", "lye", "ammonia"]

    def test_hazardous_keywords_from_json(self):
        s = _settings(validation_hazardous_keywords='["Bleach", "lye"]')
        assert s.hazardous_keywords_list == ["bleach", "lye"]

    def test_negative_repair_attempts_rejected(self):
        with pytest.raises(ValidationError):
            _settings(max_repair_attempts=-1)

    def test_zero_repair_attempts_allowed(self):
        assert _settings(max_repair_attempts=0).max_repair_attempts == 0

    @pytest.mark.parametrize("value", [0, -2, "0"])
    def test_batch_concurrency_must_be_positive(self, value):
        with pytest.raises(ValidationError, match="must be at least 1"):
            _settings(batch_concurrency=value)

    def test_string_values_are_coerced(self):
        assert _settings(batch_concurrency="5").batch_concurrency == 5

    def test_production_requires_api_key(self):
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            _settings(environment="production", anthropic_api_key=None).validate_production_secrets()

    def test_production_rejects_debug(self):
        s = _settings(environment="staging", anthropic_api_key="sk-ant-test", debug=True)
        with pytest.raises(ValueError, match="DEBUG"):
            s.validate_production_secrets()

    def test_development_needs_no_key(self):
        s = _settings(environment="development", anthropic_api_key=None)
        s.validate_production_secrets()
        assert s.is_development is True
        assert s.is_production is False


class TestValidationConfig:
    def test_defaults(self):
        config = ValidationConfig()

        assert config.min_total_words == 1000
        assert config.min_section_words == 120
        assert config.hero_min_sentences == 2
        assert config.hero_max_sentences == 4

    def test_from_settings(self):
        s = _settings(
            validation_min_total_words=600,
            validation_require_end_cta=False,
            validation_hazardous_keywords="lye",
        )

        config = ValidationConfig.from_settings(s)

        assert config.min_total_words == 600
        assert config.require_end_cta is False
        assert config.hazardous_keywords == ["lye"]

    def test_hero_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ValidationConfig(hero_min_sentences=5, hero_max_sentences=3)

    def test_negative_thresholds_rejected(self):
        with pytest.raises(ValidationError):
            ValidationConfig(min_faqs=-1)
