"""Text measurement shared by the generator, the patch builder and the validator."""
from bs4 import BeautifulSoup

from .content import DraftArtifact


def strip_html(html: str) -> str:
    """Return the visible text of an HTML fragment."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text(" ")


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def html_word_count(html: str) -> int:
    return count_words(strip_html(html))


def draft_word_count(draft: DraftArtifact) -> int:
    """Hero answer, section text and FAQ words."""
    count = count_words(draft.hero_answer)
    count += sum(s.word_count or html_word_count(s.body) for s in draft.sections)
    count += sum(count_words(f.question) + count_words(f.answer) for f in draft.faq)
    return count
