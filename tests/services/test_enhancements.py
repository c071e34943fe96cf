"""
Tests for build_enhancement_context.
"""

from componentizer.services.models import Region, SectionType
from componentizer.services.synthesis.enhancements import (
    ABOUT_SECTION_ACCENTS,
    FOOTER_ACCENTS,
    EnhancementContext,
    build_enhancement_context,
    color_brightness,
)


def _region(section_type, html="", background=None):
    styles = {"backgroundColor": background} if background else {}
    return Region(type=section_type, html_snapshot=html, styles=styles)


class TestBrightness:
    def test_rgb(self):
        assert color_brightness("rgb(30, 60, 90)") == 60

    def test_transparent_rgba(self):
        assert color_brightness("rgba(0, 0, 0, 0)") is None

    def test_unparseable(self):
        assert color_brightness("#ffffff") is None


class TestContext:
    """Dark detection and accent assignment."""

    def test_footer_always_gets_footer_accents(self):
        context = build_enhancement_context([_region(SectionType.FOOTER, background="rgb(255, 255, 255)")])
        assert context.accents_for(SectionType.FOOTER) == FOOTER_ACCENTS

    def test_dark_features_section(self):
        context = build_enhancement_context([_region(SectionType.FEATURES, background="rgb(10, 10, 10)")])
        enhancement = context.for_type(SectionType.FEATURES)
        assert enhancement.is_dark
        assert context.should_add_accents(SectionType.FEATURES)

    def test_light_features_section(self):
        context = build_enhancement_context([_region(SectionType.FEATURES, background="rgb(250, 250, 250)")])
        assert context.accents_for(SectionType.FEATURES) == []

    def test_about_pricing_gets_about_accents(self):
        context = build_enhancement_context([_region(SectionType.PRICING, html="<section>About us</section>")])
        assert context.accents_for(SectionType.PRICING) == ABOUT_SECTION_ACCENTS

    def test_unknown_type_has_no_accents(self):
        assert EnhancementContext().accents_for(SectionType.HERO) == []
