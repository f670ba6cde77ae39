from __future__ import annotations

import pytest

from utils import count_words, decode_html_entities, limit_words, sanitize_text, truncate_str


def test_decode_named_entities():
    text = "Tom&nbsp;&amp;&nbsp;Jerry &lt;3 &quot;hi&quot; it&#39;s&apos; a&ndash;b&mdash;c&hellip;"
    assert decode_html_entities(text) == "Tom & Jerry <3 \"hi\" it's' a–b—c…"


def test_decode_numeric_entities():
    assert decode_html_entities("&#72;&#105;&#33; &#8220;quoted&#8221;") == "Hi! “quoted”"


def test_decode_leaves_invalid_code_points_untouched():
    text = "bad &#55296; huge &#99999999; ok &#65;"
    assert decode_html_entities(text) == "bad &#55296; huge &#99999999; ok A"


def test_decode_amp_is_single_pass():
    assert decode_html_entities("&amp;lt;") == "&lt;"


def test_decode_is_pure_for_plain_text():
    assert decode_html_entities("no entities here") == "no entities here"


def test_limit_words_within_budget_is_unchanged():
    text = "One  two\n\nthree   four"
    assert limit_words(text, 10) == text


def test_limit_words_truncates_and_joins_with_single_spaces():
    assert limit_words("a  b c   d e", 3) == "a b c"


def test_limit_words_is_idempotent():
    text = "The  quick brown\nfox jumps over   the lazy dog"
    once = limit_words(text, 4)
    assert limit_words(once, 4) == once


def test_limit_words_only_splits_on_spaces():
    # Newlines are not separators, so this is two tokens
    assert count_words("first\nline second") == 2
    assert limit_words("first\nline second", 1) == "first\nline"


def test_limit_words_rejects_negative_budget():
    with pytest.raises(ValueError):
        limit_words("text", -1)


def test_sanitize_text_normalizes_line_endings_and_strips_controls():
    text = "one\r\ntwo\rthree\u2028four\x00\x07five\tsix"
    assert sanitize_text(text) == "one\ntwo\nthree\nfourfive\tsix"


def test_truncate_str():
    assert truncate_str("short") == "short"
    assert truncate_str("x" * 100, 5) == "xxxxx...xxxxx"
