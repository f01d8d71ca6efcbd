"""Quality-gate records: issues, repair suggestions, metrics and results."""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

_INDEX_SUFFIX = re.compile(r"\[\d+\]$")


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RepairAction(str, Enum):
    EXTEND = "extend"
    ADD = "add"
    FIX = "fix"
    REMOVE = "remove"


def base_field(field_path: str) -> str:
    """Strip a trailing index: ``sections[2]`` -> ``sections``."""
    return _INDEX_SUFFIX.sub("", field_path)


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    severity: Severity
    message: str
    suggested_fix: Optional[str] = None
    current_value: Optional[Union[int, str]] = None
    expected_value: Optional[Union[int, str]] = None


@dataclass(frozen=True)
class RepairSuggestion:
    field: str
    action: RepairAction
    prompt: str


@dataclass(frozen=True)
class ContentMetrics:
    """Measured facts about a draft. Always recomputed, never stored."""

    word_count: int = 0
    section_count: int = 0
    avg_words_per_section: float = 0.0
    min_section_words: int = 0
    max_section_words: int = 0
    faq_count: int = 0
    internal_link_count: int = 0
    cta_count: int = 0
    has_hero_answer: bool = False
    hero_answer_sentences: int = 0
    has_experience_evidence: bool = False
    placeholder_count: int = 0
    callout_count: int = 0
    safety_callout_count: int = 0


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    score: int
    issues: list[ValidationIssue] = field(default_factory=list)
    metrics: ContentMetrics = field(default_factory=ContentMetrics)
    repair_suggestions: list[RepairSuggestion] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    def has_error_on(self, field_path: str) -> bool:
        return any(i.field == field_path and i.severity == Severity.ERROR for i in self.issues)
