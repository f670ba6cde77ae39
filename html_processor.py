"""
HTML Processing module for Web Novel Chapter Translator

Handles tag stripping, whitespace normalization and selector-based
field extraction directly on raw markup text, without building a DOM
"""

import re
from typing import Callable, Iterable, List, Optional
from utils import decode_html_entities
from config import EXTRACTION_CONFIG

COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
PARAGRAPH_TAG_RE = re.compile(r'</p\s*>|<p\b[^>]*>|<br\b[^>]*>', re.IGNORECASE)
ANY_TAG_RE = re.compile(r'<[^>]*>', re.DOTALL)
SPACES_RE = re.compile(r'[ \t]+')
EXCESS_NEWLINES_RE = re.compile(r'\n{3,}')
TAG_NAME_RE = re.compile(r'<\s*([A-Za-z][\w:-]*)')
ANCHOR_START_RE = re.compile(r'<a\b', re.IGNORECASE)
HREF_RE = re.compile(r'href\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)
META_CONTENT_RE = re.compile(r'content\s*=\s*(["\'])(.*?)\1', re.IGNORECASE | re.DOTALL)
AMP_CHAIN_RE = re.compile(r'&(?:amp;)+')

def _subtree_pattern(tag: str) -> re.Pattern:
    """Matches an innermost <tag ...>...</tag> pair (no nested opening tag inside)"""
    tag = re.escape(tag)
    return re.compile(rf'<{tag}\b[^>]*>(?:(?!<{tag}\b).)*?</{tag}\s*>',
                      re.IGNORECASE | re.DOTALL)

def remove_tags_with_content(html: str, tags: Iterable[str]) -> str:
    """
    Removes each tag together with everything inside it
    Innermost pairs are removed first and the pass repeats, so nested
    same-name tags disappear entirely
    """
    result = html
    for tag in tags:
        pattern = _subtree_pattern(tag)
        while True:
            stripped = pattern.sub('', result)
            if stripped == result:
                break
            result = stripped
    return result

def _decode_until_stable(text: str) -> str:
    # Nested &amp;amp;... chains collapse to one "&" in a single pass,
    # so the loop only runs again for entities formed after that
    text = AMP_CHAIN_RE.sub("&", text)
    while True:
        decoded = decode_html_entities(text)
        if decoded == text:
            return decoded
        text = decoded

def _decode_and_drop_brackets(text: str) -> str:
    # Dropping a bracket can join an entity back together, as in "&nb<sp;"
    while True:
        stripped = _decode_until_stable(text).replace("<", "").replace(">", "")
        if stripped == text:
            return stripped
        text = stripped

def clean_text(html: str, strip_tags: Optional[List[str]] = None) -> str:
    """
    Turns a markup fragment into plain text with paragraph breaks
    Output never contains '<', '>' or an entity from the decoder's named table
    """
    cleaned = remove_tags_with_content(
        html, EXTRACTION_CONFIG['strip_tags'] if strip_tags is None else strip_tags)
    cleaned = COMMENT_RE.sub('', cleaned)

    # Paragraph and line-break tags become blank lines before tags are dropped
    cleaned = PARAGRAPH_TAG_RE.sub('\n\n', cleaned)

    for _ in range(EXTRACTION_CONFIG['tag_strip_passes']):
        before = cleaned
        cleaned = ANY_TAG_RE.sub(' ', cleaned)
        if cleaned == before:
            break

    cleaned = _decode_and_drop_brackets(cleaned)

    cleaned = SPACES_RE.sub(' ', cleaned)
    cleaned = '\n'.join(line.strip() for line in cleaned.split('\n'))
    cleaned = EXCESS_NEWLINES_RE.sub('\n\n', cleaned)
    return cleaned.strip()

def extract_plain_text(html: str) -> str:
    """
    Flattens a whole page into one line of text
    Script and style are dropped, every whitespace run becomes one space
    """
    text = remove_tags_with_content(html, ["script", "style"])
    text = _decode_and_drop_brackets(ANY_TAG_RE.sub(" ", _decode_until_stable(text)))
    return re.sub(r'\s+', ' ', text).strip()

def extract_all_text(html: str) -> str:
    """Last-resort body: the cleaned text of the entire document"""
    return clean_text(html)

def _find_selector(html: str, selector: str) -> Optional[re.Match]:
    return re.search(re.escape(selector), html, re.IGNORECASE)

def extract_tag_name(tag_start: str) -> str:
    match = TAG_NAME_RE.match(tag_start.strip())
    return match.group(1).lower() if match else "div"

def extract_text_from_selector(html: str, selector: str) -> Optional[str]:
    """
    Returns the inner markup of the element whose opening tag holds `selector`
    The selector is found by plain text proximity and the element ends at the
    first closing tag of the same name; nesting is not tracked
    """
    found = _find_selector(html, selector)
    if not found:
        return None

    tag_start = html.rfind('<', 0, found.start())
    if tag_start == -1:
        return None

    tag_end = html.find('>', found.start())
    if tag_end == -1:
        return None

    tag_name = extract_tag_name(html[tag_start:found.start()])
    if tag_name == "meta":
        # <meta property="og:title" content="..."> has no inner text
        content = META_CONTENT_RE.search(html, tag_start, tag_end + 1)
        return content.group(2) if content else None

    closing = re.compile(rf'</{re.escape(tag_name)}\s*>', re.IGNORECASE).search(html, tag_end + 1)
    if not closing:
        return None

    return html[tag_end + 1:closing.start()]

def extract_field(html: str, selectors: Iterable[str],
                  extractor: Optional[Callable[[str, str], Optional[str]]] = None,
                  clean: Optional[Callable[[str], Optional[str]]] = None) -> Optional[str]:
    """
    First selector in priority order that yields content wins
    With `clean`, the cleaned content is returned and selectors whose content
    cleans to nothing are skipped
    """
    extractor = extractor or extract_text_from_selector
    for selector in selectors:
        content = extractor(html, selector)
        if content is None:
            continue
        if clean is None:
            return content
        cleaned = clean(content)
        if cleaned:
            return cleaned
    return None

def extract_href_attribute(tag: str) -> Optional[str]:
    match = HREF_RE.search(tag)
    return match.group(1) if match else None

def extract_url_from_selector(html: str, selector: str) -> Optional[str]:
    """
    Returns the href of the nearest anchor starting before the selector
    The anchor tag is read up to the '>' that closes the tag holding the selector
    """
    found = _find_selector(html, selector)
    if not found:
        return None

    anchor_start = None
    for anchor_start in ANCHOR_START_RE.finditer(html, 0, found.start()):
        pass
    if anchor_start is None:
        return None

    tag_end = html.find('>', found.end())
    tag_end = len(html) if tag_end == -1 else tag_end + 1
    return extract_href_attribute(html[anchor_start.start():tag_end])

def extract_link(html: str, selectors: Iterable[str]) -> Optional[str]:
    for selector in selectors:
        url = extract_url_from_selector(html, selector)
        if url:
            return url
    return None

def extract_content_by_id(html: str, element_id: str) -> Optional[str]:
    """
    Fast path for the common content container
    Returns everything after the opening tag, capped at the configured chunk size;
    cleaning takes care of the trailing markup
    """
    escaped = re.escape(element_id)
    for pattern in (rf'id\s*=\s*"{escaped}"', rf"id\s*=\s*'{escaped}'"):
        found = re.search(pattern, html, re.IGNORECASE)
        if not found:
            continue
        content_start = html.find('>', found.end())
        if content_start == -1:
            continue
        content_start += 1
        return html[content_start:content_start + EXTRACTION_CONFIG['by_id_chunk_size']]
    return None

def extract_text_matching(html: str, pattern: str) -> Optional[str]:
    match = re.search(pattern, html, re.IGNORECASE)
    return match.group(0) if match else None
