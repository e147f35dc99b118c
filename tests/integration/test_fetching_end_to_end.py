"""
End-to-end fetching tests against a local aiohttp server.

Exercises the real HTTP stack: redirects, status handling, timeouts, feed
discovery through an HTML page, concurrent refresh and cookie-authenticated
article fetching. Nothing here touches the public network.
"""

import asyncio
from unittest.mock import Mock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from beatcheck.models import Feed
from beatcheck.processing.feed_fetcher import FeedFetcher
from beatcheck.services.content_fetcher import ContentFetcher
from beatcheck.utils.exceptions import DiscoveryError, ErrorCode, FetchError


pytestmark = pytest.mark.integration


def make_app(seen, sample_rss, sample_atom, sample_html_with_feed, long_article_html):
    async def rss(request):
        seen["feed_user_agent"] = request.headers.get("User-Agent")
        return web.Response(body=sample_rss, content_type="application/rss+xml")

    async def atom(request):
        return web.Response(body=sample_atom, content_type="application/atom+xml")

    async def moved(request):
        raise web.HTTPMovedPermanently(location="/feed.xml")

    async def blog(request):
        return web.Response(text=sample_html_with_feed, content_type="text/html")

    async def plain_page(request):
        return web.Response(text="<html><body>No feeds here</body></html>", content_type="text/html")

    async def server_error(request):
        return web.Response(status=500, text="boom")

    async def slow(request):
        await asyncio.sleep(2)
        return web.Response(body=sample_rss, content_type="application/rss+xml")

    async def article(request):
        seen["article_cookie"] = request.headers.get("Cookie")
        seen["article_user_agent"] = request.headers.get("User-Agent")
        return web.Response(text=long_article_html, content_type="text/html")

    async def paywall(request):
        return web.Response(status=402, text="Subscribe")

    app = web.Application()
    app.router.add_get("/feed.xml", rss)
    app.router.add_get("/atom.xml", atom)
    app.router.add_get("/old-feed", moved)
    app.router.add_get("/blog/", blog)
    app.router.add_get("/plain", plain_page)
    app.router.add_get("/error", server_error)
    app.router.add_get("/slow", slow)
    app.router.add_get("/article", article)
    app.router.add_get("/paywall", paywall)
    return app


@pytest.fixture
def seen():
    """Request details recorded by the server handlers."""
    return {}


@pytest.fixture
def app(seen, sample_rss, sample_atom, sample_html_with_feed, long_article_html):
    return make_app(seen, sample_rss, sample_atom, sample_html_with_feed, long_article_html)


class TestFeedFetchingOverHttp:

    @pytest.mark.asyncio
    async def test_fetch_feed(self, app, seen, test_settings):
        async with TestServer(app) as server:
            fetcher = FeedFetcher(settings=test_settings)
            articles = await fetcher.fetch_feed(1, str(server.make_url("/feed.xml")))

        assert [a.title for a in articles] == ["First Article", "Second Article", "Untitled"]
        assert seen["feed_user_agent"] == "beatcheck/1.2.0"

    @pytest.mark.asyncio
    async def test_error_status(self, app, test_settings):
        async with TestServer(app) as server:
            fetcher = FeedFetcher(settings=test_settings)
            with pytest.raises(FetchError) as exc_info:
                await fetcher.fetch_feed(1, str(server.make_url("/error")))

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_timeout(self, app, test_settings):
        async with TestServer(app) as server:
            fetcher = FeedFetcher(request_timeout=1, connect_timeout=1, settings=test_settings)
            with pytest.raises(FetchError) as exc_info:
                await fetcher.fetch_feed(1, str(server.make_url("/slow")))

        assert exc_info.value.error_code == ErrorCode.FEED_FETCH_TIMEOUT

    @pytest.mark.asyncio
    async def test_connection_refused(self, test_settings):
        server = TestServer(web.Application())
        await server.start_server()
        url = str(server.make_url("/feed.xml"))
        await server.close()

        fetcher = FeedFetcher(settings=test_settings)
        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch_feed(1, url)

        assert exc_info.value.error_code == ErrorCode.FEED_NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_refresh_all_mixed_results(self, app, test_settings):
        async with TestServer(app) as server:
            feeds = [
                Feed(id=1, title="rss", url=str(server.make_url("/feed.xml"))),
                Feed(id=2, title="atom", url=str(server.make_url("/atom.xml"))),
                Feed(id=3, title="broken", url=str(server.make_url("/error"))),
                Feed(id=4, title="html", url=str(server.make_url("/plain"))),
            ]
            results = dict(await FeedFetcher(settings=test_settings).refresh_all(feeds))

        assert set(results) == {1, 2}
        assert len(results[1]) == 3
        assert len(results[2]) == 1


class TestDiscoveryOverHttp:

    @pytest.mark.asyncio
    async def test_redirect_uses_final_url(self, app, test_settings):
        async with TestServer(app) as server:
            feed = await FeedFetcher(settings=test_settings).discover_feed(
                str(server.make_url("/old-feed"))
            )
            expected = str(server.make_url("/feed.xml"))

        assert feed.url == expected
        assert feed.title == "Test Feed"

    @pytest.mark.asyncio
    async def test_html_page_with_feed_link(self, app, test_settings):
        async with TestServer(app) as server:
            feed = await FeedFetcher(settings=test_settings).discover_feed(
                str(server.make_url("/blog/"))
            )
            expected = str(server.make_url("/feed.xml"))

        assert feed.url == expected
        assert feed.site_url == "https://example.com/"

    @pytest.mark.asyncio
    async def test_html_page_without_feed(self, app, test_settings):
        async with TestServer(app) as server:
            with pytest.raises(DiscoveryError):
                await FeedFetcher(settings=test_settings).discover_feed(
                    str(server.make_url("/plain"))
                )


class TestFullContentOverHttp:

    @pytest.fixture
    def cookie_jar(self):
        jar = Mock()
        jar.cookie_header.return_value = "sid=42"
        return jar

    @pytest.mark.asyncio
    async def test_article_fetched_with_cookies(self, app, seen, test_settings, cookie_jar):
        async with TestServer(app) as server:
            fetcher = ContentFetcher(cookie_jar=cookie_jar, settings=test_settings)
            text = await fetcher.fetch_full_content(str(server.make_url("/article")))

        assert text is not None and text.startswith("Headline")
        assert seen["article_cookie"] == "sid=42"
        assert "Firefox/128.0" in seen["article_user_agent"]
        cookie_jar.cookie_header.assert_called_once_with("127.0.0.1")

    @pytest.mark.asyncio
    async def test_paywalled_article(self, app, test_settings, cookie_jar):
        async with TestServer(app) as server:
            fetcher = ContentFetcher(cookie_jar=cookie_jar, settings=test_settings)
            text = await fetcher.fetch_full_content(str(server.make_url("/paywall")))

        assert text is None
