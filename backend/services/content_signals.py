"""
Heuristic signal detection for article HTML.

The validator never inspects markup itself; it asks a classifier which
signals a piece of text carries. The default classifier is a set of
case-insensitive substring checks.
"""

import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from core.options import DEFAULT_HAZARDOUS_KEYWORDS

# Signal tags
CTA = "cta"
CALLOUT = "callout"
SAFETY_CALLOUT = "safety_callout"
HAZARD = "hazard"

CTA_SIGNALS = (
    "shop now",
    "buy now",
    "contact us",
    "get started",
    "learn more",
    "request a quote",
    'class="cta',
    'class="button',
    "call-to-action",
)

SAFETY_SIGNALS = (
    "callout-warning",
    "callout-danger",
    "warning-callout",
    "danger-callout",
    "warning",
    "caution",
    "danger",
    "⚠",
    "safety",
)

_CALLOUT_MARKUP = re.compile(r'class="[^"]*callout[^"]*"')


class ContentSignalClassifier(ABC):
    """Maps a piece of text to the set of signal tags it carries."""

    @abstractmethod
    def classify(self, text: str) -> set[str]:
        ...


class KeywordSignalClassifier(ContentSignalClassifier):
    """Substring-based classifier."""

    def __init__(self, hazardous_keywords: Optional[Iterable[str]] = None):
        keywords = DEFAULT_HAZARDOUS_KEYWORDS if hazardous_keywords is None else hazardous_keywords
        self.hazardous_keywords = tuple(k.lower() for k in keywords if k)

    def classify(self, text: str) -> set[str]:
        html = (text or "").lower()
        tags: set[str] = set()

        if any(signal in html for signal in CTA_SIGNALS):
            tags.add(CTA)

        if _CALLOUT_MARKUP.search(html):
            tags.add(CALLOUT)
            if any(signal in html for signal in SAFETY_SIGNALS):
                tags.add(SAFETY_CALLOUT)

        if any(keyword in html for keyword in self.hazardous_keywords):
            tags.add(HAZARD)

        return tags
