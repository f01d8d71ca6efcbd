# AI Adapters
# Anthropic outline, draft and repair generation
from .anthropic_adapter import AIGenerationError, AnthropicContentService, content_ai_service
from .style_cache import StyleProfile, StyleProfileCache, build_style_profile

__all__ = [
    "AIGenerationError",
    "AnthropicContentService",
    "content_ai_service",
    "StyleProfile",
    "StyleProfileCache",
    "build_style_profile",
]
