"""
Content Cleaner
===============

HTML to plain text rendering for feed entries and fetched article pages.

This module provides:
- Removal of non-content elements (scripts, styles, embeds, comments)
- Block-aware text rendering wrapped to a fixed column width
- Line cleanup used to judge whether a page carries a real article body
"""

import re
import textwrap
from typing import List, Optional

from bs4 import BeautifulSoup, Comment
from bs4.element import CData, ProcessingInstruction, Doctype

from ..utils.logging import get_logger_for_component
from ..utils.exceptions import ContentExtractionError


# Sentinels inserted into the parse tree to mark hard line breaks
_BLOCK_BREAK = "\u2029"
_LINE_BREAK = "\u2028"


class ContentCleaner:
    """
    HTML to text renderer.

    Features:
    - Drops elements whose content is never readable text
    - Starts a new paragraph at every block-level element
    - Wraps paragraphs at a fixed width without splitting words
    - Prefixes list items with ``* ``
    """

    # HTML elements to completely remove (including content)
    NON_CONTENT_ELEMENTS = {
        "head",
        "script",
        "style",
        "iframe",
        "embed",
        "object",
        "applet",
        "noscript",
        "canvas",
        "template",
        "svg",
        "meta",
        "link",
        "base",
    }

    # Elements that start on a new line
    BLOCK_ELEMENTS = {
        "p",
        "div",
        "section",
        "article",
        "header",
        "footer",
        "nav",
        "aside",
        "main",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "blockquote",
        "pre",
        "ul",
        "ol",
        "li",
        "dl",
        "dt",
        "dd",
        "table",
        "tr",
        "figure",
        "figcaption",
        "hr",
        "address",
        "form",
        "fieldset",
    }

    WHITESPACE_PATTERN = re.compile(r"\s+")
    BREAK_PATTERN = re.compile(f"[{_BLOCK_BREAK}{_LINE_BREAK}]")

    def __init__(self, width: int = 80):
        """Initialize content cleaner.

        Args:
            width: Column width for wrapped output
        """
        self.width = width
        self.logger = get_logger_for_component("content_cleaner")
        self.parser = "html.parser"  # Built-in parser, no external deps

    def html_to_text(self, html_content: str, width: Optional[int] = None) -> str:
        """
        Render HTML as wrapped plain text.

        Args:
            html_content: HTML fragment or full document
            width: Column width, defaults to the cleaner's width

        Returns:
            Plain text, paragraphs separated by a blank line

        Raises:
            ContentExtractionError: If the HTML cannot be processed
        """
        if not html_content or not html_content.strip():
            return ""

        width = width or self.width

        try:
            soup = BeautifulSoup(html_content, self.parser)

            self._remove_non_content_elements(soup)
            self._mark_line_breaks(soup)

            text = soup.get_text()
        except Exception as e:
            raise ContentExtractionError(f"Failed to render HTML to text: {e}") from e

        rendered = "\n".join(self._wrap_paragraphs(text, width))

        self.logger.debug(
            f"Rendered HTML: {len(html_content)} -> {len(rendered)} chars"
        )
        return rendered

    def clean_lines(self, text: str) -> str:
        """Strip every line and drop blank ones."""
        return "\n".join(line.strip() for line in text.splitlines() if line.strip())

    def _remove_non_content_elements(self, soup: BeautifulSoup) -> None:
        """Remove elements and markup nodes that never render as text."""
        for element in soup.find_all(self.NON_CONTENT_ELEMENTS):
            element.decompose()

        for node in soup.find_all(
            string=lambda s: isinstance(s, (Comment, CData, ProcessingInstruction, Doctype))
        ):
            node.extract()

    def _mark_line_breaks(self, soup: BeautifulSoup) -> None:
        """Insert break sentinels around block elements and at <br>."""
        for br in soup.find_all("br"):
            br.replace_with(_LINE_BREAK)

        for item in soup.find_all("li"):
            item.insert(0, "* ")

        for block in soup.find_all(self.BLOCK_ELEMENTS):
            block.insert_before(_BLOCK_BREAK)
            block.insert_after(_BLOCK_BREAK)

    def _wrap_paragraphs(self, text: str, width: int) -> List[str]:
        rendered: List[str] = []

        for raw in self.BREAK_PATTERN.split(text):
            line = self.WHITESPACE_PATTERN.sub(" ", raw).strip()

            if not line:
                if rendered and rendered[-1] != "":
                    rendered.append("")
                continue

            rendered.extend(
                textwrap.wrap(
                    line,
                    width=width,
                    break_long_words=False,
                    break_on_hyphens=False,
                )
            )

        while rendered and rendered[-1] == "":
            rendered.pop()

        return rendered
