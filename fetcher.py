"""
Page Fetching module for Web Novel Chapter Translator

Retrieves raw chapter markup over HTTP and reports failures as
structured fetch errors
"""

import logging
from typing import Optional
from urllib.parse import urlparse
import httpx
from config import FETCH_CONFIG
from errors import FetchError, FetchErrorKind
from utils import truncate_str

logger = logging.getLogger('novel_translator')

def validate_url(url: str) -> str:
    """Returns the stripped URL, or raises FetchError(INVALID_URL)"""
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise FetchError(FetchErrorKind.INVALID_URL, f"The URL provided is invalid: '{url}'")
    return url

async def _get(client: httpx.AsyncClient, url: str, timeout: float) -> httpx.Response:
    try:
        return await client.get(url, timeout=timeout,
                                headers={"User-Agent": FETCH_CONFIG['user_agent']})
    except httpx.InvalidURL as e:
        raise FetchError(FetchErrorKind.INVALID_URL, f"The URL provided is invalid: {e}") from e
    except httpx.HTTPError as e:
        raise FetchError(FetchErrorKind.TRANSPORT, f"Network error: {e}") from e

async def fetch_raw(url: str, client: Optional[httpx.AsyncClient] = None,
                    timeout: float = FETCH_CONFIG['timeout']) -> str:
    """
    GETs a page and returns its text decoded as UTF-8
    Status codes outside 200-299 raise FetchError(BAD_STATUS)
    """
    url = validate_url(url)
    logger.info(f"Fetching chapter content from: {url}")

    if client is None:
        async with httpx.AsyncClient(follow_redirects=True) as own_client:
            response = await _get(own_client, url, timeout)
    else:
        response = await _get(client, url, timeout)

    if not 200 <= response.status_code <= 299:
        raise FetchError(FetchErrorKind.BAD_STATUS,
                         f"Invalid response from server (Status code: {response.status_code}). "
                         "The website may be blocking automated requests.",
                         status_code=response.status_code)

    try:
        html = response.content.decode('utf-8')
    except UnicodeDecodeError as e:
        raise FetchError(FetchErrorKind.DECODE_FAILURE, "Failed to decode response data.") from e

    logger.info(f"Fetched {len(html)} characters: {truncate_str(' '.join(html[:500].split()), 40)}")
    return html
