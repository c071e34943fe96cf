"""Raw markup to JSX conversion for generated components.

Handles the subset of HTML that landing-page sections contain:

- attribute renames for React (class -> className, for -> htmlFor, ...)
- inline style strings -> style={{...}} maps, dropping vendor-prefixed,
  custom, invalid and unsupported properties
- void element self-closing
- removal of event handlers, script URLs and attributes React rejects
- <svg> elision, script/style/comment stripping
- truncation at a UTF-8 byte budget with re-closing of open tags
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_CONTENT_BYTES = 15000
SAFE_CUT_RATIO = 0.7
SVG_PLACEHOLDER = '<div className="svg-placeholder" />'
CHILDREN_PLACEHOLDER = '{children}'

VOID_ELEMENTS = frozenset([
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr',
])

ATTRIBUTE_RENAMES: Dict[str, str] = {
    'class': 'className',
    'for': 'htmlFor',
    'tabindex': 'tabIndex',
    'colspan': 'colSpan',
    'rowspan': 'rowSpan',
    'readonly': 'readOnly',
    'maxlength': 'maxLength',
    'autocomplete': 'autoComplete',
    'crossorigin': 'crossOrigin',
    'frameborder': 'frameBorder',
    'allowfullscreen': 'allowFullScreen',
}

# Site-builder attributes React warns about or cannot render
_DROPPED_ATTRIBUTES = frozenset(['srcset', 'parentsize', 'rotation', 'shadows'])

_DROPPED_STYLE_PROPERTIES = frozenset(['corner-shape', 'backdrop-filter'])

_URL_ATTRIBUTES = frozenset(['href', 'src', 'action', 'formaction', 'xlink:href', 'poster', 'background'])
_UNSAFE_URL_PREFIXES = ('javascript:', 'vbscript:', 'data:text/html')
# Browsers ignore whitespace and control characters inside a URL scheme
_URL_IGNORED_CHARS_RE = re.compile(r'[\x00-\x20]+')

_TAG_RE = re.compile(r'<(/?)([a-zA-Z][a-zA-Z0-9-]*)((?:\s+[^<>]*?)?)\s*(/?)>', re.DOTALL)
_ATTR_RE = re.compile(r'([^\s=/>]+)(?:\s*=\s*("[^"]*"|\'[^\']*\'|[^\s"\'>]+))?')
_VALID_PROPERTY_RE = re.compile(r'^[a-zA-Z-]+$')
_CSS_VAR_FALLBACK_RE = re.compile(r'var\([^,()]+,\s*([^)]+)\)')

_SCRIPT_RE = re.compile(r'<script\b[^>]*>.*?</script\s*>', re.IGNORECASE | re.DOTALL)
_STYLE_BLOCK_RE = re.compile(r'<style\b[^>]*>.*?</style\s*>', re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
_SVG_RE = re.compile(r'<svg\b[^>]*>.*?</svg\s*>', re.IGNORECASE | re.DOTALL)
_OPEN_CLOSE_TAG_RE = re.compile(r'<(/?)([a-zA-Z][a-zA-Z0-9]*)[^>]*>')

_CAROUSEL_PATTERNS = [
    re.compile(r'transform\s*:\s*[\'"]?translateX\([^)]+\)', re.IGNORECASE),
    re.compile(r'class(?:Name)?="[^"]*(?:carousel|slider|swiper)[^"]*"', re.IGNORECASE),
    re.compile(r'data-framer-name="[^"]*(?:carousel|slider|gallery)[^"]*"', re.IGNORECASE),
    re.compile(r'(?:flex-shrink|flexShrink)\s*:\s*[\'"]?0[\'"]?[^>]*?width\s*:\s*[\'"]?100%', re.IGNORECASE),
]


def to_camel_case(css_property: str) -> str:
    """background-color -> backgroundColor"""
    return re.sub(r'-([a-z])', lambda m: m.group(1).upper(), css_property)


def js_string(value: str) -> str:
    """Single-quoted JS string literal."""
    return "'" + str(value).replace('\\', '\\\\').replace("'", "\\'") + "'"


# ---------------------------------------------------------------------------
# Inline styles
# ---------------------------------------------------------------------------

def parse_style_declarations(style: str) -> List[Tuple[str, str]]:
    """
    Split an inline style string into (camelCaseProperty, value) pairs.

    Drops custom/vendor-prefixed properties (leading '-'), corrupted names,
    corner-shape, backdrop-filter and the overlay blend mode used by noise
    textures. var(--token, fallback) resolves to its fallback.
    """
    declarations: List[Tuple[str, str]] = []
    for chunk in style.split(';'):
        if ':' not in chunk:
            continue
        prop, _, value = chunk.partition(':')
        prop = prop.strip()
        value = value.strip()
        if not prop or not value:
            continue
        if prop.startswith('-') or not _VALID_PROPERTY_RE.match(prop):
            continue
        prop = prop.lower()
        if prop in _DROPPED_STYLE_PROPERTIES:
            continue
        if prop == 'mix-blend-mode' and value.lower() == 'overlay':
            continue
        value = _CSS_VAR_FALLBACK_RE.sub(lambda m: m.group(1).strip(), value)
        declarations.append((to_camel_case(prop), value))
    return declarations


def format_style_object(declarations: List[Tuple[str, str]]) -> str:
    """[('color', 'red')] -> "color: 'red'" """
    return ', '.join(f"{prop}: {js_string(value)}" for prop, value in declarations)


def style_to_jsx(style: str) -> str:
    """Inline style string -> style={{...}} attribute, or '' when nothing survives."""
    body = format_style_object(parse_style_declarations(style))
    return f'style={{{{{body}}}}}' if body else ''


# ---------------------------------------------------------------------------
# Tags and attributes
# ---------------------------------------------------------------------------

def _unquote(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in '"\'':
        return raw[1:-1]
    return raw


def is_unsafe_url(value: str) -> bool:
    """Script-executing URL such as javascript:, vbscript: or an HTML data URL."""
    return _URL_IGNORED_CHARS_RE.sub('', value).lower().startswith(_UNSAFE_URL_PREFIXES)


def _convert_attributes(attr_text: str) -> str:
    parts: List[str] = []
    for match in _ATTR_RE.finditer(attr_text):
        name, raw_value = match.group(1), match.group(2)
        value = _unquote(raw_value)
        lower = name.lower()

        if lower.startswith('on') and len(lower) > 2:
            continue
        if lower in _DROPPED_ATTRIBUTES or lower.startswith('xmlns') or name.startswith('_'):
            continue
        if lower.startswith('data-') and value is not None and ('{' in value or '[' in value):
            continue
        if lower in _URL_ATTRIBUTES and value is not None and is_unsafe_url(value):
            continue

        if lower == 'style':
            converted = style_to_jsx(value or '')
            if converted:
                parts.append(converted)
            continue

        jsx_name = ATTRIBUTE_RENAMES.get(lower, name)
        if value is None:
            parts.append(jsx_name)
        else:
            parts.append(f'{jsx_name}="{value.replace(chr(34), "&quot;")}"')
    return (' ' + ' '.join(parts)) if parts else ''


def _convert_tag(match: re.Match) -> str:
    closing, tag, attrs, self_closing = match.groups()
    lower = tag.lower()
    if closing:
        # </br>, </img> have no JSX equivalent
        return '' if lower in VOID_ELEMENTS else f'</{tag}>'
    converted = _convert_attributes(attrs or '')
    if self_closing or lower in VOID_ELEMENTS:
        return f'<{tag}{converted} />'
    return f'<{tag}{converted}>'


def _escape_text(text: str) -> str:
    return text.replace('{', '&#123;').replace('}', '&#125;')


def html_to_jsx(html: str) -> str:
    """
    Convert an HTML fragment into JSX-compatible markup.

    Args:
        html: HTML fragment (no script/style blocks expected).

    Returns:
        JSX markup, or '' for empty input.
    """
    if not html or not html.strip():
        return ''

    out: List[str] = []
    position = 0
    for match in _TAG_RE.finditer(html):
        out.append(_escape_text(html[position:match.start()]))
        out.append(_convert_tag(match))
        position = match.end()
    out.append(_escape_text(html[position:]))
    return ''.join(out)


# ---------------------------------------------------------------------------
# Content extraction
# ---------------------------------------------------------------------------

def close_open_tags(fragment: str) -> str:
    """Append closing tags for anything left open, innermost first."""
    open_tags: List[str] = []
    for match in _OPEN_CLOSE_TAG_RE.finditer(fragment):
        is_closing = match.group(1) == '/'
        tag = match.group(2).lower()
        if tag in VOID_ELEMENTS or match.group(0).endswith('/>'):
            continue
        if is_closing:
            for index in range(len(open_tags) - 1, -1, -1):
                if open_tags[index] == tag:
                    del open_tags[index]
                    break
        else:
            open_tags.append(tag)
    return fragment + ''.join(f'</{tag}>' for tag in reversed(open_tags))


def truncate_markup(markup: str, max_bytes: int = MAX_CONTENT_BYTES) -> str:
    """
    Cut markup to a UTF-8 byte budget without leaving tags open.

    The cut moves back to the last '>' when that keeps at least 70% of
    the budget; a dangling partial tag is dropped either way.
    """
    encoded = markup.encode('utf-8')
    if len(encoded) <= max_bytes:
        return markup

    cut = max_bytes
    last_close = encoded.rfind(b'>', 0, cut)
    if last_close > max_bytes * SAFE_CUT_RATIO:
        cut = last_close + 1
    # A multi-byte character split by the cut is dropped
    fragment = encoded[:cut].decode('utf-8', errors='ignore')

    dangling = fragment.rfind('<')
    if dangling > fragment.rfind('>'):
        fragment = fragment[:dangling]

    logger.debug(f"Truncated markup from {len(encoded)} to {len(fragment.encode('utf-8'))} bytes")
    return close_open_tags(fragment)


def strip_non_visual(markup: str) -> str:
    """Remove scripts, style blocks and comments; elide svg subtrees."""
    markup = _SCRIPT_RE.sub('', markup)
    markup = _STYLE_BLOCK_RE.sub('', markup)
    markup = _COMMENT_RE.sub('', markup)
    return _SVG_RE.sub(SVG_PLACEHOLDER, markup)


def extract_jsx_content(markup: str, max_bytes: int = MAX_CONTENT_BYTES) -> str:
    """
    Produce the JSX body for a pixel-faithful component.

    Returns '{children}' when nothing renderable remains.
    """
    if not markup or not markup.strip():
        return CHILDREN_PLACEHOLDER

    jsx = html_to_jsx(truncate_markup(strip_non_visual(markup), max_bytes))
    return jsx if jsx.strip() else CHILDREN_PLACEHOLDER


def is_carousel_markup(markup: str) -> bool:
    """Slider/carousel structure that needs clipping to avoid visual bleed."""
    return any(pattern.search(markup or '') for pattern in _CAROUSEL_PATTERNS)
