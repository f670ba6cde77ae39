"""
Chapter Parsing module for Web Novel Chapter Translator

Assembles a structured chapter record from raw page markup using a
parsing rule set, falling back to heuristics when selectors miss
"""

import re
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, Optional
from config import EXTRACTION_CONFIG
from errors import InputError
from html_processor import (clean_text, extract_all_text, extract_content_by_id, extract_field,
                            extract_link, extract_text_from_selector,
                            extract_text_matching, remove_tags_with_content)
from rule_sets import DEFAULT_RULES, ParsingRules
from utils import count_words

logger = logging.getLogger('novel_translator')

HEADING_TITLE_PATTERN = r'<h[123][^>]*>[^<]*chapter[^<]*</h[123]>'
CHAPTER_NUMBER_RE = re.compile(r'chapter[\s-]*(\d+)', re.IGNORECASE)

FieldExtractor = Callable[[str, str], Optional[str]]


@dataclass(frozen=True)
class ChapterRecord:
    """Structured content of one novel chapter"""

    chapter_title: str
    content: str
    novel_title: Optional[str] = None
    chapter_number: Optional[str] = None
    previous_chapter_url: Optional[str] = None
    next_chapter_url: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def full_text(self) -> str:
        """Novel title, chapter title and content separated by blank lines"""
        parts = [self.novel_title] if self.novel_title else []
        parts += [self.chapter_title, self.content]
        return "\n\n".join(parts)

    @property
    def content_preview(self) -> str:
        limit = EXTRACTION_CONFIG['preview_length']
        return self.content[:limit] + "..." if len(self.content) > limit else self.content

    @property
    def word_count(self) -> int:
        return count_words(self.content)

    def with_content(self, content: str) -> "ChapterRecord":
        return replace(self, content=content)


class ChapterParser:
    """
    Turns raw chapter markup into a ChapterRecord
    The per-selector field extractor is swappable, e.g. for a tree-based parser
    """

    def __init__(self, rules: ParsingRules = DEFAULT_RULES,
                 field_extractor: FieldExtractor = extract_text_from_selector):
        self.rules = rules
        self.field_extractor = field_extractor

    def parse_chapter(self, html: str) -> ChapterRecord:
        if not html or not html.strip():
            raise InputError("No markup to parse")

        # Body comes from a copy without the rule set's discarded subtrees
        cleaned_html = remove_tags_with_content(html, self.rules.tags_to_remove)

        chapter_title = self.extract_chapter_title(html)
        return ChapterRecord(
            novel_title=self._first_match(html, self.rules.novel_title_selectors),
            chapter_title=chapter_title or EXTRACTION_CONFIG['placeholder_title'],
            chapter_number=self.extract_chapter_number(html, chapter_title),
            content=self.extract_content(cleaned_html),
            previous_chapter_url=extract_link(html, self.rules.previous_chapter_selectors),
            next_chapter_url=extract_link(html, self.rules.next_chapter_selectors),
        )

    def _first_match(self, html: str, selectors: Iterable[str]) -> Optional[str]:
        return extract_field(html, selectors, self.field_extractor, clean_text)

    def extract_chapter_title(self, html: str) -> Optional[str]:
        if title := self._first_match(html, self.rules.title_selectors):
            return title

        # Fallback: an h1-h3 mentioning "chapter"
        heading = extract_text_matching(html, HEADING_TITLE_PATTERN)
        if heading and (title := clean_text(heading)):
            logger.debug(f"Chapter title from heading fallback: {title}")
            return title
        return None

    def extract_chapter_number(self, html: str, chapter_title: Optional[str]) -> Optional[str]:
        if number := self._first_match(html, self.rules.chapter_number_selectors):
            return number

        if chapter_title and (match := CHAPTER_NUMBER_RE.search(chapter_title)):
            return match.group(1)
        return None

    def extract_content(self, html: str) -> str:
        min_length = EXTRACTION_CONFIG['min_content_length']
        content_id = EXTRACTION_CONFIG['primary_content_id']

        if (chunk := extract_content_by_id(html, content_id)) is not None:
            cleaned = clean_text(chunk)
            if len(cleaned) > min_length:
                logger.debug(f"Content from id=\"{content_id}\" fast path ({len(cleaned)} chars)")
                return cleaned

        def substantial(raw: str) -> Optional[str]:
            cleaned = clean_text(raw)
            return cleaned if len(cleaned) > min_length else None

        if content := extract_field(html, self.rules.content_selectors, self.field_extractor, substantial):
            logger.debug(f"Content from selectors ({len(content)} chars)")
            return content

        logger.info("No content selector matched, using the whole document text")
        return extract_all_text(html)
