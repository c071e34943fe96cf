"""Decorative enhancement context for pixel-faithful synthesis.

Some site builders (Framer in particular) paint blurred gradient "orbs"
behind dark sections with canvas/WebGL layers that never appear in the
captured markup. The enhancement context carries those accents per
section type so the pixel-faithful variant can re-create them.

The context is an opaque input to synthesis: callers may build it with
build_enhancement_context() or supply their own.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..models import Region, SectionType

logger = logging.getLogger(__name__)

DARK_BRIGHTNESS_THRESHOLD = 80
DEFAULT_DARK_TYPES = (SectionType.FOOTER, SectionType.CTA)
DARK_SECTION_BACKGROUND = "rgb(27, 12, 37)"
DARK_SECTION_TEXT = "rgb(255, 255, 255)"

_RGB_RE = re.compile(r'rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)')


class GradientAccent(BaseModel):
    """One absolutely positioned, blurred gradient orb."""
    top: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None
    right: Optional[str] = None
    width: str
    height: str
    gradient: str
    blur: str = "40px"
    opacity: float = 1.0


class SectionEnhancement(BaseModel):
    add_accents: bool = False
    is_dark: bool = False
    accents: List[GradientAccent] = Field(default_factory=list)
    background_color: Optional[str] = None
    text_color: Optional[str] = None


class EnhancementContext(BaseModel):
    platform: str = "generic"
    enhancements: Dict[SectionType, SectionEnhancement] = Field(default_factory=dict)

    def for_type(self, section_type: SectionType) -> Optional[SectionEnhancement]:
        return self.enhancements.get(SectionType(section_type))

    def should_add_accents(self, section_type: SectionType) -> bool:
        enhancement = self.for_type(section_type)
        return bool(enhancement and enhancement.add_accents and enhancement.accents)

    def accents_for(self, section_type: SectionType) -> List[GradientAccent]:
        """Gradient accents for a section type, or [] when none apply."""
        if not self.should_add_accents(section_type):
            return []
        return list(self.for_type(section_type).accents)


# ---------------------------------------------------------------------------
# Accent presets
# ---------------------------------------------------------------------------

ABOUT_SECTION_ACCENTS = [
    GradientAccent(
        top="-150px", left="-150px", width="500px", height="450px",
        gradient="linear-gradient(143deg, rgb(128, 169, 252) 0%, rgb(211, 123, 255) 31%, "
                 "rgb(252, 171, 131) 70%, rgb(255, 73, 212) 100%)",
        blur="40px", opacity=0.9,
    ),
    GradientAccent(
        bottom="-180px", right="-100px", width="450px", height="400px",
        gradient="linear-gradient(140deg, rgb(239, 232, 246) 0%, rgb(213, 136, 251) 60%, "
                 "rgb(255, 73, 212) 100%)",
        blur="40px", opacity=0.8,
    ),
]

FOOTER_ACCENTS = [
    GradientAccent(
        top="-100px", right="-150px", width="400px", height="400px",
        gradient="radial-gradient(circle, rgba(168, 85, 247, 0.3) 0%, transparent 70%)",
        blur="60px", opacity=1,
    ),
    GradientAccent(
        bottom="100px", left="-100px", width="300px", height="300px",
        gradient="radial-gradient(circle, rgba(236, 72, 153, 0.2) 0%, transparent 70%)",
        blur="50px", opacity=1,
    ),
]


def color_brightness(color: str) -> Optional[float]:
    """Average channel value of an rgb()/rgba() color, None if unparseable or transparent."""
    if not color:
        return None
    match = _RGB_RE.search(color)
    if not match:
        return None
    if color.strip().startswith('rgba') and re.search(r',\s*0(?:\.0+)?\s*\)\s*$', color):
        return None
    r, g, b = (int(v) for v in match.groups())
    return (r + g + b) / 3


def detect_dark_sections(regions: Sequence[Region]) -> List[SectionType]:
    dark: List[SectionType] = []
    for region in regions:
        brightness = color_brightness(region.styles.get('backgroundColor', ''))
        if brightness is not None and brightness < DARK_BRIGHTNESS_THRESHOLD:
            dark.append(region.type)
    return dark


def build_enhancement_context(regions: Sequence[Region], platform: str = "framer") -> EnhancementContext:
    """
    Derive accents from detected regions.

    Rules:
        - sections with background brightness < 80 are dark, footer/cta by default
        - dark sections get accents
        - footer always gets the footer accent pair
        - pricing/cta sections that read like an "about" block get the about pair
    """
    dark_types = set(detect_dark_sections(regions)) | set(DEFAULT_DARK_TYPES)
    enhancements: Dict[SectionType, SectionEnhancement] = {}

    for region in regions:
        is_dark = region.type in dark_types
        enhancement = SectionEnhancement(
            add_accents=is_dark,
            is_dark=is_dark,
            accents=list(FOOTER_ACCENTS) if is_dark else [],
            background_color=DARK_SECTION_BACKGROUND if is_dark else None,
            text_color=DARK_SECTION_TEXT if is_dark else None,
        )

        if region.type in (SectionType.PRICING, SectionType.CTA):
            background = region.styles.get('backgroundColor', '')
            if 'about' in region.html_snapshot.lower() or '27, 12, 37' in background:
                enhancement.add_accents = True
                enhancement.is_dark = True
                enhancement.accents = list(ABOUT_SECTION_ACCENTS)

        if region.type == SectionType.FOOTER:
            enhancement.add_accents = True
            enhancement.accents = list(FOOTER_ACCENTS)

        enhancements[region.type] = enhancement

    logger.debug(f"Built enhancement context for {len(enhancements)} section types")
    return EnhancementContext(platform=platform, enhancements=enhancements)
