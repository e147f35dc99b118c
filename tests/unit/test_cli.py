"""
Operator CLI tests using click's CliRunner with the core patched out.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from click.testing import CliRunner

from main import cli
from beatcheck.models import NewArticle, NewFeed
from beatcheck.utils.exceptions import DiscoveryError, FetchError


@pytest.fixture
def runner():
    return CliRunner()


class TestBlocklistCommand:

    @pytest.fixture
    def blocklist_file(self, tmp_path):
        path = tmp_path / "blocklist.txt"
        path.write_text("Bitcoin\nnft drops\n", encoding="utf-8")
        return path

    def test_lists_keywords(self, runner, blocklist_file):
        result = runner.invoke(cli, ["blocklist", "--path", str(blocklist_file)])

        assert result.exit_code == 0
        assert "bitcoin" in result.output
        assert "nft drops" in result.output

    def test_check_blocked(self, runner, blocklist_file):
        result = runner.invoke(cli, ["blocklist", "--path", str(blocklist_file), "--check", "BITCOIN"])

        assert result.exit_code == 0
        assert "is blocked" in result.output

    def test_check_not_blocked(self, runner, blocklist_file):
        result = runner.invoke(cli, ["blocklist", "--path", str(blocklist_file), "--check", "weather"])

        assert "is not blocked" in result.output

    def test_empty_blocklist(self, runner, tmp_path):
        result = runner.invoke(cli, ["blocklist", "--path", str(tmp_path / "none.txt")])

        assert result.exit_code == 0
        assert "empty" in result.output


class TestFeedCommands:

    def test_discover_success(self, runner):
        feed = NewFeed(title="Example Blog", url="https://example.com/feed.xml", site_url="https://example.com/")

        with patch("main.FeedFetcher") as fetcher_cls:
            fetcher_cls.return_value.discover_feed = AsyncMock(return_value=feed)
            result = runner.invoke(cli, ["discover", "https://example.com/"])

        assert result.exit_code == 0
        assert "Example Blog" in result.output
        fetcher_cls.return_value.discover_feed.assert_awaited_once_with("https://example.com/")

    def test_discover_failure(self, runner):
        with patch("main.FeedFetcher") as fetcher_cls:
            fetcher_cls.return_value.discover_feed = AsyncMock(side_effect=DiscoveryError("nothing"))
            result = runner.invoke(cli, ["discover", "https://example.com/"])

        assert result.exit_code == 1
        assert "No RSS or Atom feed found" in result.output

    def test_fetch_feed_lists_articles(self, runner):
        articles = [NewArticle(feed_id=0, guid="g1", title="Hello World", url="https://example.com/1")]

        with patch("main.FeedFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch_feed = AsyncMock(return_value=articles)
            result = runner.invoke(cli, ["fetch-feed", "https://example.com/feed.xml"])

        assert result.exit_code == 0
        assert "Parsed 1 articles" in result.output
        assert "Hello World" in result.output

    def test_fetch_feed_error(self, runner):
        with patch("main.FeedFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch_feed = AsyncMock(
                side_effect=FetchError("HTTP 500", feed_url="x", status_code=500)
            )
            result = runner.invoke(cli, ["fetch-feed", "https://example.com/feed.xml"])

        assert result.exit_code == 1

    def test_refresh_summary(self, runner):
        with patch("main.FeedFetcher") as fetcher_cls:
            fetcher_cls.return_value.refresh_all = AsyncMock(return_value=[(1, [Mock(), Mock()])])
            result = runner.invoke(cli, ["refresh", "https://a.example/feed", "https://b.example/feed"])

        assert result.exit_code == 0
        assert "1 successful, 1 failed" in result.output

    def test_refresh_all_failed(self, runner):
        with patch("main.FeedFetcher") as fetcher_cls:
            fetcher_cls.return_value.refresh_all = AsyncMock(return_value=[])
            result = runner.invoke(cli, ["refresh", "https://a.example/feed"])

        assert result.exit_code == 1


class TestFetchContentCommand:

    def test_prints_text(self, runner):
        with patch("main.ContentFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch_full_content = AsyncMock(return_value="Article body " * 30)
            result = runner.invoke(cli, ["fetch-content", "https://example.com/a"])

        assert result.exit_code == 0
        assert "Extracted" in result.output

    def test_nothing_extracted(self, runner):
        with patch("main.ContentFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch_full_content = AsyncMock(return_value=None)
            result = runner.invoke(cli, ["fetch-content", "https://example.com/a"])

        assert result.exit_code == 1
