"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for BeatCheck tests.

- Sample RSS/Atom documents and HTML pages
- Throwaway Chromium and Firefox cookie databases
- Isolated settings that never read the developer's real profile
"""

import os
import sqlite3
import sys
from pathlib import Path

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["BEATCHECK_DEBUG"] = "true"
os.environ["BEATCHECK_LOGGING__CONSOLE_LOGGING"] = "false"

from beatcheck.config.settings import BeatCheckSettings


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing every local path into a temporary directory."""
    return BeatCheckSettings(
        db_path=str(tmp_path / "feeds.db"),
        content={
            "chromium_cookie_paths": [str(tmp_path / "chrome" / "Cookies")],
            "firefox_profiles_dir": str(tmp_path / "firefox"),
        },
        blocklist={"path": str(tmp_path / "blocklist.txt")},
    )


# ============================================================================
# Feed Documents
# ============================================================================


SAMPLE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com/</link>
    <description>A feed for testing</description>
    <item>
      <title>First Article</title>
      <link>https://example.com/first</link>
      <guid>https://example.com/first</guid>
      <dc:creator>Jane Writer</dc:creator>
      <pubDate>Mon, 06 Jan 2025 10:30:00 GMT</pubDate>
      <description>Short summary of the first article</description>
      <content:encoded><![CDATA[<p>Full <b>body</b> of the first article.</p>]]></content:encoded>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/second</link>
      <guid isPermaLink="false">second-guid</guid>
      <description><![CDATA[<p>Only a summary here.</p>]]></description>
    </item>
    <item>
      <link>https://example.com/third</link>
    </item>
  </channel>
</rss>
"""

SAMPLE_ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Test Feed</title>
  <subtitle>Atom feed for testing</subtitle>
  <link href="https://atom.example.com/"/>
  <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
  <updated>2025-01-06T18:30:02Z</updated>
  <entry>
    <title>Atom Entry</title>
    <link href="https://atom.example.com/entry"/>
    <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
    <updated>2025-01-05T08:00:00Z</updated>
    <author><name>Atom Author</name></author>
    <summary>Entry summary</summary>
  </entry>
</feed>
"""

SAMPLE_HTML_WITH_FEED = """<!DOCTYPE html>
<html>
<head>
  <title>Example Blog</title>
  <link rel="alternate" type="application/rss+xml" title="RSS" href="/feed.xml">
</head>
<body><p>Welcome to the blog.</p></body>
</html>
"""


@pytest.fixture
def sample_rss():
    return SAMPLE_RSS


@pytest.fixture
def sample_atom():
    return SAMPLE_ATOM


@pytest.fixture
def sample_html_with_feed():
    return SAMPLE_HTML_WITH_FEED


@pytest.fixture
def long_article_html():
    """Article page whose text comfortably exceeds the content threshold."""
    paragraphs = "".join(
        f"<p>Paragraph {i} of the article body with enough words to matter.</p>"
        for i in range(10)
    )
    return (
        "<html><head><script>var tracking = 1;</script></head>"
        f"<body><article><h1>Headline</h1>{paragraphs}</article></body></html>"
    )


# ============================================================================
# Cookie Database Fixtures
# ============================================================================


def _write_cookie_db(path: Path, table: str, columns, rows) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    host, name, value, expiry = columns
    connection = sqlite3.connect(path)
    try:
        connection.execute(
            f"CREATE TABLE {table} ({host} TEXT, {name} TEXT, {value} TEXT, {expiry} INTEGER)"
        )
        connection.executemany(f"INSERT INTO {table} VALUES (?, ?, ?, ?)", rows)
        connection.commit()
    finally:
        connection.close()
    return path


@pytest.fixture
def make_chromium_db():
    """Factory creating a Chromium ``Cookies`` database with given rows.

    Rows are ``(host_key, name, value, expires_utc)`` tuples.
    """
    def _make(path: Path, rows):
        return _write_cookie_db(
            path, "cookies", ("host_key", "name", "value", "expires_utc"), rows
        )

    return _make


@pytest.fixture
def make_firefox_profile():
    """Factory creating a Firefox profile directory with ``cookies.sqlite``.

    Rows are ``(host, name, value, expiry)`` tuples.
    """
    def _make(profiles_dir: Path, profile_name: str, rows):
        return _write_cookie_db(
            profiles_dir / profile_name / "cookies.sqlite",
            "moz_cookies",
            ("host", "name", "value", "expiry"),
            rows,
        )

    return _make
