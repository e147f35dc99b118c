"""
Full Content Fetcher
====================

Fetches the full article page behind a feed entry, reusing cookies from
the local browser so paywalled or login-gated sites serve the same body
they would serve in the browser, and extracts readable text from it.

Every failure here is soft: callers get ``None`` and keep the feed's own
summary.
"""

import asyncio
import ssl
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import urlparse

import aiohttp
import certifi

from ..config.settings import BeatCheckSettings, get_settings
from ..cookies.jar import BrowserCookieJar
from ..ingestion.content_cleaner import ContentCleaner
from ..utils.exceptions import ContentExtractionError
from ..utils.logging import get_logger_for_component


class ContentFetcher:
    """Cookie-authenticated article page fetcher."""

    def __init__(
        self,
        cookie_jar: Optional[BrowserCookieJar] = None,
        settings: Optional[BeatCheckSettings] = None,
        request_timeout: Optional[int] = None,
    ):
        """Initialize content fetcher.

        Args:
            cookie_jar: Cookie source, defaults to Chromium then Firefox
            settings: Settings instance, defaults to the global settings
            request_timeout: Total request timeout in seconds (default from config)
        """
        settings = settings or get_settings()
        self.cookie_jar = cookie_jar or BrowserCookieJar(settings=settings)
        self.request_timeout = request_timeout or settings.content.request_timeout
        self.user_agent = settings.content.browser_user_agent
        self.min_content_length = settings.content.min_content_length
        self.cleaner = ContentCleaner(width=settings.content.text_width)
        self.logger = get_logger_for_component("content_fetcher")

        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @asynccontextmanager
    async def get_session(self):
        """Get configured aiohttp session."""
        connector = aiohttp.TCPConnector(ssl=self.ssl_context)
        timeout = aiohttp.ClientTimeout(total=self.request_timeout)

        async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
            yield session

    async def fetch_full_content(
        self, article_url: str, session: Optional[aiohttp.ClientSession] = None
    ) -> Optional[str]:
        """Fetch an article page and extract its readable text.

        Args:
            article_url: Article page URL
            session: aiohttp session, a private one is opened if omitted

        Returns:
            Extracted text, or None if the page is unreachable or too thin
        """
        try:
            domain = urlparse(article_url).hostname
        except ValueError:
            domain = None

        if not domain:
            self.logger.debug(f"Skipping full content for unusable URL: {article_url!r}")
            return None

        if session is None:
            async with self.get_session() as own_session:
                return await self.fetch_full_content(article_url, own_session)

        headers = {"User-Agent": self.user_agent}
        cookie_header = await self._lookup_cookies(domain)
        if cookie_header:
            headers["Cookie"] = cookie_header

        try:
            async with session.get(article_url, headers=headers) as response:
                if not 200 <= response.status < 300:
                    self.logger.debug(f"Failed to fetch {article_url}: HTTP {response.status}")
                    return None
                html = await response.text(errors="replace")
        except asyncio.TimeoutError:
            self.logger.debug(f"Timeout fetching {article_url}")
            return None
        except (aiohttp.ClientError, ValueError) as e:
            self.logger.debug(f"Network error fetching {article_url}: {e}")
            return None

        return self.extract_content(html)

    def extract_content(self, html: str) -> Optional[str]:
        """Render HTML to cleaned text, keeping it only if long enough.

        Args:
            html: Page markup

        Returns:
            Non-blank stripped lines joined by newlines, or None
        """
        try:
            text = self.cleaner.html_to_text(html)
        except ContentExtractionError as e:
            self.logger.debug(f"Failed to convert HTML to text: {e}")
            return None

        cleaned = self.cleaner.clean_lines(text)

        if len(cleaned) > self.min_content_length:
            return cleaned

        self.logger.debug(f"Extracted content too short ({len(cleaned)} chars)")
        return None

    async def _lookup_cookies(self, domain: str) -> str:
        # sqlite3 is blocking
        try:
            return await asyncio.to_thread(self.cookie_jar.cookie_header, domain)
        except Exception as e:
            self.logger.warning(f"Cookie lookup failed for {domain}: {e}")
            return ""
