"""
RSS Feed Fetcher
================

RSS/Atom feed fetching with bounded concurrent refresh, per-entry article
extraction, and feed discovery from arbitrary site URLs.
"""

import asyncio
import hashlib
import ssl
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Iterable, List, Optional, Tuple

import aiohttp
import certifi
import feedparser

from ..config.settings import BeatCheckSettings, get_settings
from ..ingestion.content_cleaner import ContentCleaner
from ..models import Feed, NewArticle, NewFeed
from ..utils.exceptions import (
    DiscoveryError,
    ErrorCode,
    FeedError,
    FeedParseError,
    FetchError,
    ContentExtractionError,
)
from ..utils.logging import PerformanceLogger, get_logger_for_component
from .feed_discovery import find_feed_link


@dataclass
class HttpResponse:
    """Fully read HTTP response."""

    status: int
    url: str
    content_type: str
    body: bytes
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def looks_like_html(self) -> bool:
        return (
            "html" in self.content_type.lower()
            or self.body.startswith(b"<!")
            or self.body.startswith(b"<html")
        )


@dataclass
class FetchResult:
    """Result of fetching one feed during a refresh."""

    feed_id: int
    feed_url: str
    success: bool
    articles: List[NewArticle] = None
    error: Optional[str] = None
    fetch_time: Optional[datetime] = None
    article_count: int = 0

    def __post_init__(self):
        if self.articles is None:
            self.articles = []
        self.article_count = len(self.articles)
        if not self.fetch_time:
            self.fetch_time = datetime.now(timezone.utc)


class FeedFetcher:
    """Concurrent RSS/Atom feed fetcher and feed discoverer."""

    def __init__(
        self,
        max_concurrent: Optional[int] = None,
        request_timeout: Optional[int] = None,
        connect_timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
        settings: Optional[BeatCheckSettings] = None,
    ):
        """Initialize feed fetcher.

        Args:
            max_concurrent: Maximum concurrent feed fetches (default from config)
            request_timeout: Total request timeout in seconds (default from config)
            connect_timeout: Connection timeout in seconds (default from config)
            user_agent: User-Agent header (default from config)
            settings: Settings instance, defaults to the global settings
        """
        settings = settings or get_settings()
        self.max_concurrent = max_concurrent or settings.fetch.parallel_feeds
        self.request_timeout = request_timeout or settings.fetch.request_timeout
        self.connect_timeout = connect_timeout or settings.fetch.connect_timeout
        self.user_agent = user_agent or settings.fetch.user_agent
        self.cleaner = ContentCleaner(width=settings.content.text_width)
        self.logger = get_logger_for_component("feed_fetcher")

        # SSL context for secure requests
        self.ssl_context = ssl.create_default_context(cafile=certifi.where())

    @asynccontextmanager
    async def get_session(self):
        """Get configured aiohttp session."""
        connector = aiohttp.TCPConnector(
            ssl=self.ssl_context,
            limit=self.max_concurrent * 2,
            limit_per_host=self.max_concurrent,
        )

        timeout = aiohttp.ClientTimeout(
            total=self.request_timeout, connect=self.connect_timeout
        )

        headers = {
            "User-Agent": self.user_agent,
            "Accept": (
                "application/rss+xml, application/atom+xml, application/xml, "
                "text/xml, text/html;q=0.9, */*;q=0.8"
            ),
        }

        async with aiohttp.ClientSession(
            connector=connector, timeout=timeout, headers=headers
        ) as session:
            yield session

    async def fetch_feed(
        self,
        feed_id: int,
        url: str,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> List[NewArticle]:
        """Fetch and parse a single RSS/Atom feed.

        Args:
            feed_id: ID of the feed the articles belong to
            url: Feed document URL
            session: aiohttp session, a private one is opened if omitted

        Returns:
            Articles in document order

        Raises:
            FetchError: On network failure, timeout or non-success status
            FeedParseError: If the body is not an RSS or Atom document
        """
        if session is None:
            async with self.get_session() as own_session:
                return await self.fetch_feed(feed_id, url, own_session)

        self.logger.debug(f"Fetching feed: {url}", extra={"feed_id": feed_id})

        response = await self._get(session, url)
        if not response.ok:
            raise FetchError(
                f"Failed to fetch feed: HTTP {response.status}",
                feed_url=url,
                status_code=response.status,
            )

        parsed = self._parse_feed(response.body, url)
        articles = [
            self._build_article(entry, feed_id, url) for entry in parsed.entries
        ]

        self.logger.debug(
            f"Parsed {len(articles)} articles from {url}", extra={"feed_id": feed_id}
        )
        return articles

    async def fetch_feeds(
        self, feeds: List[Feed]
    ) -> AsyncGenerator[FetchResult, None]:
        """Fetch multiple feeds concurrently.

        Args:
            feeds: Feeds to fetch

        Yields:
            FetchResult objects as feeds complete
        """
        if not feeds:
            return

        async with self.get_session() as session:
            # Semaphore bounds the number of in-flight fetches
            semaphore = asyncio.Semaphore(self.max_concurrent)

            async def fetch_with_semaphore(feed: Feed) -> FetchResult:
                async with semaphore:
                    return await self._fetch_result(feed, session)

            tasks = [fetch_with_semaphore(feed) for feed in feeds]

            for completed_task in asyncio.as_completed(tasks):
                yield await completed_task

    async def refresh_all(
        self, feeds: Iterable[Feed]
    ) -> List[Tuple[int, List[NewArticle]]]:
        """Refresh all feeds, keeping only the ones that succeeded.

        Args:
            feeds: Feeds to refresh

        Returns:
            ``(feed_id, articles)`` pairs in completion order
        """
        feeds = list(feeds)
        if not feeds:
            return []

        refreshed: List[Tuple[int, List[NewArticle]]] = []
        failed = 0

        with PerformanceLogger(
            self.logger, f"refresh of {len(feeds)} feeds", feed_count=len(feeds)
        ):
            async for result in self.fetch_feeds(feeds):
                if result.success:
                    refreshed.append((result.feed_id, result.articles))
                else:
                    failed += 1

        total_articles = sum(len(articles) for _, articles in refreshed)
        self.logger.info(
            f"Feed refresh complete: {len(refreshed)}/{len(feeds)} feeds successful, "
            f"{total_articles} total articles"
        )
        if failed:
            self.logger.debug(f"{failed} feeds failed during refresh")

        return refreshed

    async def discover_feed(
        self, url: str, session: Optional[aiohttp.ClientSession] = None
    ) -> NewFeed:
        """Discover a feed from a feed URL or from a site URL.

        The URL is first tried as a feed document. If it serves HTML, the
        page's alternate RSS/Atom link is followed instead.

        Args:
            url: Feed URL or site URL
            session: aiohttp session, a private one is opened if omitted

        Returns:
            NewFeed ready to be persisted

        Raises:
            FetchError: On network failure or non-success status for ``url``
            DiscoveryError: If no feed could be found
        """
        if session is None:
            async with self.get_session() as own_session:
                return await self.discover_feed(url, own_session)

        response = await self._get(session, url)
        if not response.ok:
            raise FetchError(
                f"Failed to fetch URL: HTTP {response.status}",
                feed_url=url,
                status_code=response.status,
            )

        final_url = response.url

        try:
            return self._build_new_feed(self._parse_feed(response.body, final_url), final_url)
        except FeedParseError:
            self.logger.debug(f"{final_url} is not a feed document, looking for feed links")

        if response.looks_like_html():
            html = response.body.decode("utf-8", errors="replace")
            feed_url = find_feed_link(html, final_url)

            if feed_url:
                self.logger.info(f"Found feed link {feed_url} on {final_url}")
                feed_response = await self._get(session, feed_url)

                if feed_response.ok:
                    try:
                        parsed = self._parse_feed(feed_response.body, feed_url)
                        return self._build_new_feed(parsed, feed_url)
                    except FeedParseError as e:
                        self.logger.debug(f"Advertised feed {feed_url} did not parse: {e}")
                else:
                    self.logger.debug(
                        f"Advertised feed {feed_url} returned HTTP {feed_response.status}"
                    )

        raise DiscoveryError("Could not find RSS/Atom feed at this URL", feed_url=url)

    async def _get(self, session: aiohttp.ClientSession, url: str) -> HttpResponse:
        """Issue a GET and read the whole body."""
        try:
            async with session.get(url) as response:
                body = await response.read()
                return HttpResponse(
                    status=response.status,
                    url=str(response.url),
                    content_type=response.headers.get("Content-Type", ""),
                    body=body,
                    reason=response.reason,
                )
        except asyncio.TimeoutError as e:
            raise FetchError(
                f"Request timeout after {self.request_timeout}s",
                feed_url=url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e
        except aiohttp.ClientError as e:
            raise FetchError(
                f"Network error: {e}",
                feed_url=url,
                error_code=ErrorCode.FEED_NETWORK_ERROR,
            ) from e

    async def _fetch_result(
        self, feed: Feed, session: aiohttp.ClientSession
    ) -> FetchResult:
        """Fetch one feed, converting any failure into an unsuccessful result."""
        start_time = datetime.now(timezone.utc)

        try:
            articles = await self.fetch_feed(feed.id, feed.url, session)
        except FeedError as e:
            self.logger.debug(f"Failed to fetch {feed.url}: {e}", extra={"feed_id": feed.id})
            return FetchResult(
                feed_id=feed.id,
                feed_url=feed.url,
                success=False,
                error=str(e),
                fetch_time=start_time,
            )
        except Exception as e:
            self.logger.error(
                f"Unexpected error fetching {feed.url}: {e}",
                exc_info=True,
                extra={"feed_id": feed.id},
            )
            return FetchResult(
                feed_id=feed.id,
                feed_url=feed.url,
                success=False,
                error=f"Fetch error: {e}",
                fetch_time=start_time,
            )

        self.logger.debug(
            f"Fetched {len(articles)} articles from {feed.title}",
            extra={"feed_id": feed.id},
        )
        return FetchResult(
            feed_id=feed.id,
            feed_url=feed.url,
            success=True,
            articles=articles,
            fetch_time=start_time,
        )

    def _parse_feed(self, body: bytes, url: str) -> Any:
        """Parse a feed document, rejecting anything that is not RSS or Atom."""
        parsed = feedparser.parse(body)
        version = parsed.get("version") or ""

        if not version.startswith(("rss", "atom")):
            reason = parsed.get("bozo_exception")
            message = "Unrecognized feed format"
            if reason:
                message = f"{message}: {reason}"
            raise FeedParseError(message, feed_url=url)

        if parsed.get("bozo"):
            self.logger.debug(
                f"Feed parse warning for {url}: {parsed.get('bozo_exception')}"
            )

        return parsed

    def _build_new_feed(self, parsed: Any, url: str) -> NewFeed:
        feed = parsed.feed
        return NewFeed(
            title=feed.get("title") or "Untitled Feed",
            url=url,
            site_url=self._first_link(feed),
            description=feed.get("subtitle") or None,
        )

    def _build_article(self, entry: Any, feed_id: int, feed_url: str) -> NewArticle:
        """Map one feed entry to a NewArticle."""
        content_html = self._extract_content(entry)
        link = self._first_link(entry)

        return NewArticle(
            feed_id=feed_id,
            guid=self._entry_guid(entry, link, feed_url, content_html),
            title=entry.get("title") or "Untitled",
            url=link or "",
            author=self._first_author(entry),
            content=content_html,
            content_text=self._render_text(content_html),
            published_at=self._parse_date(entry),
        )

    def _extract_content(self, entry: Any) -> Optional[str]:
        """Inline content body if present, else the summary."""
        contents = entry.get("content") or []
        if contents:
            value = contents[0].get("value")
            if value is not None:
                return value

        return entry.get("summary")

    def _render_text(self, content_html: Optional[str]) -> Optional[str]:
        if content_html is None:
            return None

        try:
            return self.cleaner.html_to_text(content_html)
        except ContentExtractionError as e:
            self.logger.debug(f"Could not render entry content: {e}")
            return None

    @staticmethod
    def _first_link(element: Any) -> Optional[str]:
        links = element.get("links") or []
        if links:
            return links[0].get("href") or None
        return None

    @staticmethod
    def _first_author(entry: Any) -> Optional[str]:
        authors = entry.get("authors") or []
        if not authors:
            return None
        return authors[0].get("name") or entry.get("author") or None

    @staticmethod
    def _entry_guid(
        entry: Any, link: Optional[str], feed_url: str, content_html: Optional[str]
    ) -> str:
        """Entry id, else its link, else a digest of its visible fields."""
        guid = entry.get("id") or link
        if guid:
            return guid

        fingerprint = "|".join(
            [feed_url, entry.get("title") or "", content_html or ""]
        ).encode("utf-8")
        return hashlib.sha256(fingerprint).hexdigest()

    @staticmethod
    def _parse_date(entry: Any) -> Optional[datetime]:
        """Published date, falling back to updated date, in UTC."""
        for field in ("published_parsed", "updated_parsed"):
            date_tuple = entry.get(field)
            if date_tuple:
                try:
                    return datetime(*date_tuple[:6], tzinfo=timezone.utc)
                except (TypeError, ValueError):
                    continue

        return None
