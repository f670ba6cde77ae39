"""
Utility functions for Web Novel Chapter Translator

Contains helper functions for entity decoding, word budgeting,
input sanitising and log formatting
"""

import re
from typing import List

# Replaced in this order; '&amp;' goes last so '&amp;lt;' decodes to '&lt;'
NAMED_ENTITIES = {
    '&nbsp;': ' ',
    '&lt;': '<',
    '&gt;': '>',
    '&quot;': '"',
    '&apos;': "'",
    '&#39;': "'",
    '&ndash;': '–',
    '&mdash;': '—',
    '&hellip;': '…',
    '&lsquo;': '‘',
    '&rsquo;': '’',
    '&ldquo;': '“',
    '&rdquo;': '”',
    '&amp;': '&',
}

NUMERIC_ENTITY_RE = re.compile(r'&#(\d+);')
LINE_BREAKS_RE = re.compile(r'\r\n|\r|\u2028|\u2029|\x85')
CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0b-\x1f\x7f-\x9f]')

def truncate_str(s: str, length: int = 30) -> str:
    """Truncates string with ellipsis in middle if too long"""
    return f"{s[:length]}...{s[-length:]}" if len(s) > length * 2 else s

def _scalar(code: int) -> str:
    """Returns the character for a code point, or '' if it is not a Unicode scalar"""
    if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
        return ''
    return chr(code)

def decode_html_entities(text: str) -> str:
    """
    Replaces the named entity table and every '&#N;' reference
    Numeric references are rewritten right to left so earlier offsets stay valid;
    references outside the Unicode scalar range are left untouched
    """
    result = text
    for entity, replacement in NAMED_ENTITIES.items():
        if entity == '&amp;':
            continue
        result = result.replace(entity, replacement)

    for match in reversed(list(NUMERIC_ENTITY_RE.finditer(result))):
        char = _scalar(int(match.group(1)))
        if char:
            result = result[:match.start()] + char + result[match.end():]

    return result.replace('&amp;', '&')

def split_words(text: str) -> List[str]:
    """Splits on the space character only, dropping empty tokens"""
    return [word for word in text.split(' ') if word]

def count_words(text: str) -> int:
    return len(split_words(text))

def limit_words(text: str, max_words: int) -> str:
    """
    Bounds text to max_words space-separated tokens
    Text within budget is returned unchanged. Truncated text is re-joined with
    single spaces, so the original whitespace and newlines are lost
    """
    if max_words < 0:
        raise ValueError(f"max_words must not be negative: {max_words}")
    words = split_words(text)
    if len(words) <= max_words:
        return text
    return ' '.join(words[:max_words])

def sanitize_text(text: str) -> str:
    """Normalizes line endings to '\\n' and strips control characters except tab and newline"""
    return CONTROL_CHARS_RE.sub('', LINE_BREAKS_RE.sub('\n', text))
