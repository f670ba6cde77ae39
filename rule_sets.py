"""
Parsing rules for Web Novel Chapter Translator

Selector bundles per source site. A selector is a literal attribute
fragment such as 'id="chr-content"', located by text proximity
"""

from dataclasses import dataclass
from typing import Dict, Tuple
from errors import InputError


@dataclass(frozen=True)
class ParsingRules:
    """Ordered selectors per extraction target plus tags dropped with their content"""

    content_selectors: Tuple[str, ...]
    title_selectors: Tuple[str, ...]
    novel_title_selectors: Tuple[str, ...]
    chapter_number_selectors: Tuple[str, ...]
    next_chapter_selectors: Tuple[str, ...]
    previous_chapter_selectors: Tuple[str, ...]
    tags_to_remove: Tuple[str, ...]


# Works with most novel websites
DEFAULT_RULES = ParsingRules(
    content_selectors=(
        'id="chr-content"',
        'class="chapter-content"',
        'class="chapter_content"',
        'class="entry-content"',
        'class="text_story"',
        'class="content-area"',
        'id="chapter-content"',
        'class="reading-content"',
        'id="chaptercontent"',
    ),
    title_selectors=(
        'class="chapter-title"',
        'class="chapter_title"',
        'class="title_chapter"',
        'class="entry-title"',
        'class="chapter-heading"',
        'id="chapter-heading"',
    ),
    novel_title_selectors=(
        'class="novel-title"',
        'class="novel_title"',
        'class="book-title"',
        'class="series-title"',
        'property="og:title"',
    ),
    chapter_number_selectors=(
        'class="chapter-number"',
        'class="chapter_number"',
        'data-chapter',
    ),
    next_chapter_selectors=(
        'id="next_chap"',
        'class="next-chapter"',
        'class="next_chapter"',
        'rel="next"',
        'data-next',
    ),
    previous_chapter_selectors=(
        'id="prev_chap"',
        'class="prev-chapter"',
        'class="previous-chapter"',
        'rel="prev"',
        'data-prev',
    ),
    tags_to_remove=("script", "style", "nav", "header", "footer", "aside", "iframe"),
)

# novelbin.com and its mirrors
NOVELBIN_RULES = ParsingRules(
    content_selectors=(
        'id="chr-content"',
        'class="chapter-content"',
        'class="reading-content"',
        'id="chapter-content"',
    ),
    title_selectors=(
        'class="chapter-title"',
        'class="chr-title"',
        'class="chapter-heading"',
    ),
    novel_title_selectors=(
        'class="novel-title"',
        'class="book-name"',
        'property="og:title"',
    ),
    chapter_number_selectors=(
        'class="chapter-number"',
        'data-chapter-id',
    ),
    next_chapter_selectors=(
        'id="next_chap"',
        'class="next-chapter"',
        'data-next-id',
    ),
    previous_chapter_selectors=(
        'id="prev_chap"',
        'class="prev-chapter"',
        'data-prev-id',
    ),
    tags_to_remove=("script", "style", "nav", "header", "footer", "aside", "iframe", "ins"),
)

RULE_SETS: Dict[str, ParsingRules] = {
    "default": DEFAULT_RULES,
    "novelbin": NOVELBIN_RULES,
}


def get_rule_set(name: str) -> ParsingRules:
    try:
        return RULE_SETS[name]
    except KeyError:
        raise InputError(f"Unknown rule set '{name}'. Available: {', '.join(sorted(RULE_SETS))}") from None
