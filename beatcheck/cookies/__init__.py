"""
Browser cookie access for authenticated article fetching.
"""

from .base import Cookie, CookieStore, chromium_timestamp, firefox_timestamp, format_cookie_header
from .chromium import ChromiumCookieStore
from .firefox import FirefoxCookieStore
from .jar import BrowserCookieJar

__all__ = [
    "Cookie",
    "CookieStore",
    "ChromiumCookieStore",
    "FirefoxCookieStore",
    "BrowserCookieJar",
    "chromium_timestamp",
    "firefox_timestamp",
    "format_cookie_header",
]
