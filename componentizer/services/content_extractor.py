"""Structured content extraction from section markup.

Pulls headings, paragraphs, call-to-action buttons, links, images and list
items out of a captured section so templates can be filled with the page's
real text instead of placeholders.
"""

import logging
import re
from html.parser import HTMLParser
from typing import Dict, List, Optional, Tuple

from .models import ContentImage, ContentLink, RegionContent

logger = logging.getLogger(__name__)

MAX_ITEMS_PER_KIND = 24
MAX_TEXT_LENGTH = 300

_HEADING_TAGS = frozenset(['h1', 'h2', 'h3', 'h4', 'h5', 'h6'])
_SKIP_TAGS = frozenset(['script', 'style', 'noscript', 'svg', 'template'])
_CAPTURE_TAGS = _HEADING_TAGS | frozenset(['p', 'a', 'button', 'li'])
_BUTTON_CLASS_RE = re.compile(r'\b(?:btn|button|cta)', re.IGNORECASE)


def _clean_text(parts: List[str]) -> str:
    text = re.sub(r'\s+', ' ', ''.join(parts)).strip()
    if len(text) > MAX_TEXT_LENGTH:
        text = text[:MAX_TEXT_LENGTH].rstrip() + '...'
    return text


class _ContentParser(HTMLParser):
    """Collect text per capture element; nested captures share the text."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.headings: List[Tuple[int, str]] = []
        self.paragraphs: List[str] = []
        self.buttons: List[ContentLink] = []
        self.links: List[ContentLink] = []
        self.images: List[ContentImage] = []
        self.list_items: List[str] = []
        self._open: List[Tuple[str, Dict[str, Optional[str]], List[str]]] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in _SKIP_TAGS:
            self._skip_depth += 1
            return
        if self._skip_depth:
            return

        attrs_dict = dict(attrs)
        if tag == 'img':
            src = attrs_dict.get('src') or ''
            if src and len(self.images) < MAX_ITEMS_PER_KIND:
                self.images.append(ContentImage(src=src, alt=attrs_dict.get('alt') or ''))
            return

        if tag in _CAPTURE_TAGS:
            self._open.append((tag, attrs_dict, []))

    def handle_endtag(self, tag):
        if tag in _SKIP_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if self._skip_depth:
            return

        for index in range(len(self._open) - 1, -1, -1):
            if self._open[index][0] == tag:
                _, attrs, parts = self._open.pop(index)
                self._finish(tag, attrs, _clean_text(parts))
                break

    def handle_data(self, data):
        if self._skip_depth:
            return
        for _, _, parts in self._open:
            parts.append(data)

    def close(self):
        super().close()
        # Flush elements the markup never closed
        while self._open:
            tag, attrs, parts = self._open.pop()
            self._finish(tag, attrs, _clean_text(parts))

    def _finish(self, tag: str, attrs: Dict[str, Optional[str]], text: str) -> None:
        if not text:
            return

        if tag in _HEADING_TAGS:
            if len(self.headings) < MAX_ITEMS_PER_KIND:
                self.headings.append((int(tag[1]), text))
        elif tag == 'p':
            if len(self.paragraphs) < MAX_ITEMS_PER_KIND:
                self.paragraphs.append(text)
        elif tag == 'li':
            if len(self.list_items) < MAX_ITEMS_PER_KIND:
                self.list_items.append(text)
        elif tag == 'button':
            if len(self.buttons) < MAX_ITEMS_PER_KIND:
                self.buttons.append(ContentLink(text=text, href=None))
        elif tag == 'a':
            link = ContentLink(text=text, href=attrs.get('href'))
            css_class = attrs.get('class') or ''
            if _BUTTON_CLASS_RE.search(css_class) or attrs.get('role') == 'button':
                if len(self.buttons) < MAX_ITEMS_PER_KIND:
                    self.buttons.append(link)
            elif len(self.links) < MAX_ITEMS_PER_KIND:
                self.links.append(link)


def extract_region_content(markup: str) -> RegionContent:
    """
    Extract structured content from section markup.

    Args:
        markup: Section outerHTML (normalized or raw).

    Returns:
        RegionContent; empty when markup is empty or unparseable.
    """
    if not markup or not markup.strip():
        return RegionContent()

    parser = _ContentParser()
    parser.feed(markup)
    parser.close()

    return RegionContent(
        headings=[text for _, text in parser.headings],
        heading_levels=[level for level, _ in parser.headings],
        paragraphs=parser.paragraphs,
        buttons=parser.buttons,
        links=parser.links,
        images=parser.images,
        list_items=parser.list_items,
    )
