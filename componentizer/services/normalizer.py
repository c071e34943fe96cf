"""Content normalizer for captured section markup.

Site builders ship sections in their pre-animation state: zero opacity,
offset transforms, blur filters and hidden visibility that scroll-reveal
scripts later undo. Captured outerHTML keeps those values, so generated
components would render invisible. This module resets them and removes
decorative noise-texture overlays.

Purely textual, idempotent: normalize_markup(normalize_markup(x)) == normalize_markup(x).
"""

import logging
import re

logger = logging.getLogger(__name__)

# Empty or self-closing <div> whose inline style paints a repeating texture
# (256x256 tiles, background-repeat: repeat) or a noise/grain/texture image.
_NOISE_OVERLAY_RE = re.compile(
    r'<div\b[^>]*\sstyle=(["\'])'
    r'(?:(?!\1).)*?'
    r'(?:background-image\s*:\s*url\([^)]*(?:width=256|height=256)[^)]*\)'
    r'|background-repeat\s*:\s*repeat(?![-\w])'
    r'|url\([^)]*(?:noise|grain|texture)[^)]*\))'
    r'(?:(?!\1).)*\1[^>]*(?:/>|>\s*</div>)',
    re.IGNORECASE | re.DOTALL,
)

_STYLE_ATTR_RE = re.compile(r'(?<=\s)style=(["\'])(.*?)\1', re.IGNORECASE | re.DOTALL)

_ZERO_OPACITY_RE = re.compile(r'(?<![-\w])opacity\s*:\s*[\'"]?0(?![.\d])[\'"]?\s*(?:;|$)', re.IGNORECASE)
_HIDDEN_VISIBILITY_RE = re.compile(r'(?<![-\w])visibility\s*:\s*[\'"]?hidden[\'"]?\s*(?:;|$)', re.IGNORECASE)
_ENTRY_TRANSFORM_RE = re.compile(
    r'(?<![-\w])transform\s*:\s*[^;]*?\b(?:translate[XYZ]?|translate3d|scale[XYZ]?|scale3d|rotate[XYZ]?|rotate3d)\([^;]*(?:;|$)',
    re.IGNORECASE,
)
_BLUR_FILTER_RE = re.compile(r'(?<![-\w])filter\s*:\s*[\'"]?blur\([^)]*\)[\'"]?\s*(?:;|$)', re.IGNORECASE)
_WILL_CHANGE_RE = re.compile(r'(?<![-\w])will-change\s*:\s*[^;]*(?:;|$)', re.IGNORECASE)


def _normalize_declarations(style: str) -> str:
    """Rewrite one inline style value."""
    style = _ZERO_OPACITY_RE.sub('opacity: 1;', style)
    style = _HIDDEN_VISIBILITY_RE.sub('visibility: visible;', style)
    style = _ENTRY_TRANSFORM_RE.sub('', style)
    style = _BLUR_FILTER_RE.sub('', style)
    style = _WILL_CHANGE_RE.sub('', style)

    # Collapse empty declarations, drop leading/trailing separators
    style = re.sub(r';(\s*;)+', ';', style)
    style = re.sub(r'^\s*;\s*', '', style)
    style = re.sub(r';\s*$', '', style)
    return style.strip()


def remove_noise_overlays(markup: str) -> str:
    """Remove decorative repeating-texture overlay elements entirely."""
    total = 0
    # Removing an inner overlay can leave its parent empty and matchable
    while True:
        markup, count = _NOISE_OVERLAY_RE.subn('', markup)
        if not count:
            break
        total += count
    if total:
        logger.debug(f"Removed {total} noise overlay element(s)")
    return markup


def normalize_markup(markup: str) -> str:
    """
    Reset animation entry states and strip noise overlays from markup.

    Args:
        markup: Raw outerHTML of a captured section.

    Returns:
        Markup with visible, un-transformed inline styles.
    """
    if not markup:
        return markup

    cleaned = remove_noise_overlays(markup)

    def _rewrite(match: re.Match) -> str:
        quote = match.group(1)
        return f'style={quote}{_normalize_declarations(match.group(2))}{quote}'

    return _STYLE_ATTR_RE.sub(_rewrite, cleaned)
