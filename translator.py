"""
Main Translation module for Web Novel Chapter Translator

Handles the retrying translation client, the chapter pipeline
(fetch, extract, word budget, translate) for URLs and pasted text,
batch translation, and the command line entry point
"""

import os
import re
import sys
import asyncio
import logging
import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union
from tqdm import tqdm

from api_client import TranslationAPIClient
from chapter_parser import ChapterParser, ChapterRecord
from config import API_CONFIG, EXTRACTION_CONFIG, TRANSLATION_CONFIG
from errors import (GenerationError, GenerationErrorKind, InputError,
                    InsufficientContentError, NovelTranslatorError,
                    TranslationError, TranslationErrorKind)
from fetcher import fetch_raw
from html_processor import extract_plain_text
from logger import setup_logger, set_verbose_mode
from rule_sets import ParsingRules, RULE_SETS, get_rule_set
from utils import limit_words, sanitize_text, truncate_str

logger = logging.getLogger('novel_translator')


@dataclass(frozen=True)
class TranslationProgress:
    """Per-call status pushed to observers: sending, retrying, succeeded or failed"""

    state: str
    attempt: int
    retries: int
    delay: float = 0.0
    message: str = ""


GenerateFn = Callable[[str], Awaitable[str]]
SleepFn = Callable[[float], Awaitable[None]]
ProgressFn = Callable[[TranslationProgress], None]
FetchFn = Callable[[str], Awaitable[str]]


def build_prompt(text: str, source_language: str, target_language: str) -> str:
    return f"""Translate the following text from {source_language} to {target_language}.
Provide only the translation without any explanations or additional text.
Preserve the paragraph structure: keep every blank line between paragraphs.

Text to translate:
{text}"""


class TranslationClient:
    """
    Wraps a generate(prompt) call with error classification and exponential backoff
    Holds no per-call state, so one instance serves concurrent translations
    """

    def __init__(self, generate: GenerateFn,
                 max_retries: int = TRANSLATION_CONFIG['max_retries'],
                 initial_delay: float = TRANSLATION_CONFIG['initial_delay'],
                 sleep: SleepFn = asyncio.sleep,
                 deadline: Optional[float] = TRANSLATION_CONFIG['deadline']):
        if max_retries < 0:
            raise ValueError(f"max_retries must not be negative: {max_retries}")
        self.generate = generate
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.sleep = sleep
        self.deadline = deadline

    async def translate(self, text: str,
                        source_language: str = TRANSLATION_CONFIG['source_language'],
                        target_language: str = TRANSLATION_CONFIG['target_language'],
                        progress: Optional[ProgressFn] = None) -> str:
        """
        Returns the trimmed translation of `text`
        Raises InputError for empty text and TranslationError when the call cannot succeed
        """
        text = sanitize_text(text)
        if not text.strip():
            raise InputError("No text to translate")

        prompt = build_prompt(text, source_language, target_language)
        if self.deadline is None:
            return await self._translate_with_retry(prompt, progress)

        try:
            return await asyncio.wait_for(self._translate_with_retry(prompt, progress), self.deadline)
        except asyncio.TimeoutError as e:
            raise TranslationError(TranslationErrorKind.DEADLINE_EXCEEDED,
                                   f"Translation did not finish within {self.deadline}s") from e

    async def _attempt(self, prompt: str) -> Tuple[Optional[str], Optional[GenerationError]]:
        try:
            answer = await self.generate(prompt)
        except GenerationError as e:
            return None, e
        except Exception as e:
            error = GenerationError(GenerationErrorKind.UNKNOWN, f"Unexpected error: {e}")
            error.__cause__ = e
            return None, error

        translated = (answer or "").strip()
        if not translated:
            return None, GenerationError(GenerationErrorKind.EMPTY_RESPONSE)
        return translated, None

    async def _translate_with_retry(self, prompt: str, progress: Optional[ProgressFn]) -> str:
        total_attempts = self.max_retries + 1
        delay = self.initial_delay
        last_error: Optional[GenerationError] = None

        for attempt in range(1, total_attempts + 1):
            _notify(progress, TranslationProgress(
                "sending", attempt, attempt - 1,
                message=f"Translating (attempt {attempt} of {total_attempts})..."))

            translated, error = await self._attempt(prompt)
            if error is None:
                logger.info(f"Translation succeeded on attempt {attempt}: {truncate_str(translated, 40)}")
                _notify(progress, TranslationProgress("succeeded", attempt, attempt - 1,
                                                      message="Translation complete"))
                return translated

            last_error = error
            if not error.retryable:
                logger.error(f"Terminal translation error [{error.kind.value}]: {error}")
                _notify(progress, TranslationProgress("failed", attempt, attempt - 1, message=str(error)))
                raise TranslationError(TranslationErrorKind.TERMINAL, str(error),
                                       attempts=attempt, cause_kind=error.kind) from error

            if attempt == total_attempts:
                break

            logger.warning(f"Attempt {attempt}/{total_attempts} failed [{error.kind.value}]: {error}. "
                           f"Retrying in {delay:.1f}s")
            _notify(progress, TranslationProgress(
                "retrying", attempt + 1, attempt, delay=delay,
                message=f"Retrying in {delay:.1f}s (attempt {attempt + 1} of {total_attempts})..."))
            await self.sleep(delay)
            delay *= 2

        message = f"Translation failed after {total_attempts} attempts: {last_error}"
        logger.error(message)
        _notify(progress, TranslationProgress("failed", total_attempts, self.max_retries, message=message))
        raise TranslationError(TranslationErrorKind.MAX_RETRIES_EXCEEDED, message,
                               attempts=total_attempts, cause_kind=last_error.kind) from last_error


def _notify(progress: Optional[ProgressFn], event: TranslationProgress) -> None:
    if progress is not None:
        progress(event)


def log_progress(event: TranslationProgress) -> None:
    """Progress observer used by the command line"""
    if event.state == "retrying":
        logger.warning(event.message)
    else:
        logger.info(event.message)


@dataclass(frozen=True)
class ChapterTranslation:
    chapter: ChapterRecord
    translated_text: str


class ChapterTranslator:
    """Fetch, extract, budget and translate one chapter at a time"""

    def __init__(self, client: TranslationClient, rules: Optional[ParsingRules] = None,
                 fetch: Optional[FetchFn] = None,
                 max_words: int = TRANSLATION_CONFIG['max_words'],
                 source_language: str = TRANSLATION_CONFIG['source_language'],
                 target_language: str = TRANSLATION_CONFIG['target_language']):
        if max_words < 0:
            raise ValueError(f"max_words must not be negative: {max_words}")
        self.client = client
        self.parser = ChapterParser(rules) if rules else ChapterParser()
        self.fetch = fetch or fetch_raw
        self.max_words = max_words
        self.source_language = source_language
        self.target_language = target_language

    def prepare_content(self, text: str) -> str:
        """
        Applies the word budget and rejects text too short to translate
        Raises InsufficientContentError so callers can suggest pasting the text
        """
        limited = limit_words(text, self.max_words)
        if not limited.strip():
            raise InsufficientContentError(
                "No text content could be extracted. The page may be empty or require JavaScript.")

        word_count = len(limited.split())
        if word_count < TRANSLATION_CONFIG['min_words']:
            raise InsufficientContentError(
                f"Insufficient text extracted (less than {TRANSLATION_CONFIG['min_words']} words). "
                "Try a different URL or copy the text directly.", word_count=word_count)
        return limited

    async def _translate(self, text: str, progress: Optional[ProgressFn]) -> str:
        return await self.client.translate(text, self.source_language, self.target_language, progress)

    async def fetch_chapter(self, url: str) -> ChapterRecord:
        html = await self.fetch(url)
        chapter = self.parser.parse_chapter(html)
        logger.info(f"Extracted '{chapter.chapter_title}' ({chapter.word_count} words): "
                    f"{truncate_str(chapter.content_preview, 40)}")
        return chapter

    async def translate_url(self, url: str, progress: Optional[ProgressFn] = None) -> ChapterTranslation:
        chapter = await self.fetch_chapter(url)
        limited = self.prepare_content(chapter.content)
        translated = await self._translate(limited, progress)
        return ChapterTranslation(chapter.with_content(limited), translated)

    async def translate_text(self, text: str, progress: Optional[ProgressFn] = None) -> ChapterTranslation:
        """Pasted-text mode: no extraction, only sanitising and the word budget"""
        text = sanitize_text(text).strip()
        if not text:
            raise InputError("No text to translate")
        limited = self.prepare_content(text)
        translated = await self._translate(limited, progress)
        chapter = ChapterRecord(chapter_title=EXTRACTION_CONFIG['placeholder_title'], content=limited)
        return ChapterTranslation(chapter, translated)

    async def translate_page(self, url: str, progress: Optional[ProgressFn] = None) -> ChapterTranslation:
        """Legacy mode: translate the flattened text of the whole page"""
        html = await self.fetch(url)
        limited = self.prepare_content(extract_plain_text(html))
        translated = await self._translate(limited, progress)
        chapter = ChapterRecord(chapter_title=EXTRACTION_CONFIG['placeholder_title'], content=limited)
        return ChapterTranslation(chapter, translated)

    async def translate_urls(self, urls: Sequence[str],
                             concurrency: int = TRANSLATION_CONFIG['batch_concurrency']
                             ) -> List[Tuple[str, Union[ChapterTranslation, NovelTranslatorError]]]:
        """
        Translates several chapters concurrently
        Each URL yields either its translation or the error that stopped it
        """
        semaphore = asyncio.Semaphore(max(1, concurrency))
        pbar = tqdm(total=len(urls), ncols=70)

        async def run(url: str) -> Tuple[str, Union[ChapterTranslation, NovelTranslatorError]]:
            async with semaphore:
                try:
                    result = await self.translate_url(url)
                except NovelTranslatorError as e:
                    logger.error(f"Failure processing {url}: {e}")
                    result = e
                pbar.update(1)
                return url, result

        try:
            return list(await asyncio.gather(*(run(url) for url in urls)))
        finally:
            pbar.close()


def read_url_list(path: Path) -> List[str]:
    """One URL per line; blank lines and '#' comments are skipped"""
    lines = path.read_text(encoding='utf-8').splitlines()
    return [line.strip() for line in lines if line.strip() and not line.strip().startswith('#')]


def output_filename(index: int, chapter: ChapterRecord) -> str:
    name = chapter.chapter_number or chapter.chapter_title
    slug = re.sub(r'[^\w-]+', '_', name).strip('_')[:60] or "chapter"
    return f"{index:03d}_{slug}.txt"


def format_translation(result: ChapterTranslation) -> str:
    return f"{result.chapter.full_text}\n\n---\n\n{result.translated_text}\n"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Web Novel Chapter Translator')
    parser.add_argument('source', nargs='?', help='Chapter URL, or "-" to read text from stdin')
    parser.add_argument('--text-file', type=Path, help='Translate pasted text from a file')
    parser.add_argument('--urls-file', type=Path, help='Batch: file with one chapter URL per line')
    parser.add_argument('--output-dir', type=Path, default=Path('translations'),
                        help='Batch output directory')
    parser.add_argument('--rules', default='novelbin', choices=sorted(RULE_SETS),
                        help='Parsing rule set for the source site')
    parser.add_argument('--source-lang', default=TRANSLATION_CONFIG['source_language'])
    parser.add_argument('--target-lang', default=TRANSLATION_CONFIG['target_language'])
    parser.add_argument('--max-words', type=int, default=TRANSLATION_CONFIG['max_words'])
    parser.add_argument('--plain', action='store_true',
                        help='Translate the whole page text instead of the extracted chapter')
    parser.add_argument('--check', action='store_true', help='Only check the API connection')
    parser.add_argument('--api-key', help=f"Anthropic API key (default: ${API_CONFIG['api_key_env']})")
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args(argv)

    if args.max_words < 0:
        parser.error(f"--max-words must not be negative: {args.max_words}")

    inputs = [args.source, args.text_file, args.urls_file]
    if not args.check and sum(value is not None for value in inputs) != 1:
        parser.error('Provide exactly one of: source, --text-file, --urls-file')
    return args


async def run(args: argparse.Namespace) -> int:
    api_key = args.api_key or os.environ.get(API_CONFIG['api_key_env'])
    if not api_key:
        raise InputError(f"No API key. Pass --api-key or set {API_CONFIG['api_key_env']}")

    api_client = TranslationAPIClient(api_key)
    if args.check:
        status = await api_client.check_connection()
        print(f"{status['model']}: {'available' if status['available'] else 'NOT available'}")
        return 0 if status['available'] else 1

    translator = ChapterTranslator(
        TranslationClient(api_client.generate), get_rule_set(args.rules),
        max_words=args.max_words, source_language=args.source_lang,
        target_language=args.target_lang)

    if args.urls_file:
        urls = read_url_list(args.urls_file)
        logger.info(f"Translating {len(urls)} chapters to {args.target_lang}")
        args.output_dir.mkdir(parents=True, exist_ok=True)
        error_count = 0
        for index, (url, result) in enumerate(await translator.translate_urls(urls), start=1):
            if isinstance(result, NovelTranslatorError):
                error_count += 1
                continue
            target_file = args.output_dir / output_filename(index, result.chapter)
            target_file.write_text(format_translation(result), encoding='utf-8')
        logger.info(f"Finished {len(urls)} chapters with {error_count} failures")
        return 1 if error_count else 0

    if args.text_file or args.source == '-':
        text = args.text_file.read_text(encoding='utf-8') if args.text_file else sys.stdin.read()
        result = await translator.translate_text(text, log_progress)
    elif args.plain:
        result = await translator.translate_page(args.source, log_progress)
    else:
        result = await translator.translate_url(args.source, log_progress)

    print(format_translation(result))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the translation process"""
    args = parse_args(argv)
    logger = setup_logger('batch', args.output_dir) if args.urls_file else setup_logger()
    set_verbose_mode(logger, args.verbose)

    try:
        return asyncio.run(run(args))
    except (NovelTranslatorError, OSError) as error:
        logger.error(f"Error: {error}")
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
