"""
Tests for VariantSynthesizer - fault-isolated three-strategy synthesis.
"""

from unittest.mock import AsyncMock, patch

import pytest

from componentizer.services.models import BoundingBox, ComponentStatus, Region, SectionType, VariantStrategy
from componentizer.services.synthesis import (
    VariantSynthesizer,
    get_variant_by_strategy,
    has_valid_variants,
)
from componentizer.services.synthesis import strategies


def _region(section_type=SectionType.HERO, html="<section><h1>Welcome</h1></section>"):
    return Region(
        type=section_type,
        bounding_box=BoundingBox(x=0, y=0, width=1200, height=600),
        html_snapshot=html,
    )


class TestSynthesize:
    """All three strategies run in order."""

    @pytest.mark.asyncio
    async def test_three_variants(self):
        result = await VariantSynthesizer().synthesize(_region())

        assert [v.strategy for v in result.variants] == [
            VariantStrategy.PIXEL_FAITHFUL,
            VariantStrategy.SEMANTIC,
            VariantStrategy.ACCESSIBLE,
        ]
        assert [v.name for v in result.variants] == ["Variant A", "Variant B", "Variant C"]
        assert result.metadata.errors == {}
        assert has_valid_variants(result)

    @pytest.mark.asyncio
    async def test_empty_markup_never_throws(self):
        result = await VariantSynthesizer().synthesize(_region(html=""))

        semantic = get_variant_by_strategy(result.variants, VariantStrategy.SEMANTIC)
        accessible = get_variant_by_strategy(result.variants, VariantStrategy.ACCESSIBLE)
        assert semantic is not None and semantic.code.strip()
        assert accessible is not None and accessible.code.strip()

    @pytest.mark.asyncio
    async def test_semantic_hero_contains_headline(self):
        result = await VariantSynthesizer().synthesize(_region())
        semantic = get_variant_by_strategy(result.variants, VariantStrategy.SEMANTIC)
        assert ">Welcome</h1>" in semantic.code

    @pytest.mark.asyncio
    async def test_skip_strategies(self):
        result = await VariantSynthesizer().synthesize(
            _region(), skip_strategies=[VariantStrategy.PIXEL_FAITHFUL]
        )
        assert len(result.variants) == 2
        assert VariantStrategy.PIXEL_FAITHFUL not in result.metadata.strategies_attempted


class TestFaultIsolation:
    """One failing strategy never blocks the others."""

    @pytest.mark.asyncio
    async def test_one_failure(self):
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        with patch.dict(strategies.STRATEGY_BUILDERS, {VariantStrategy.SEMANTIC: failing}):
            result = await VariantSynthesizer().synthesize(_region())

        assert len(result.variants) == 2
        assert result.metadata.errors[VariantStrategy.SEMANTIC] == "boom"
        component = result.to_component(_region())
        assert component.status == ComponentStatus.PENDING

    @pytest.mark.asyncio
    async def test_all_fail_gives_failed_component(self):
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        with patch.dict(strategies.STRATEGY_BUILDERS, {s: failing for s in VariantStrategy}):
            result = await VariantSynthesizer().synthesize(_region())

        assert result.variants == []
        assert not result.succeeded
        component = result.to_component(_region())
        assert component.status == ComponentStatus.FAILED
        assert component.is_failed
        assert component.error_message
        assert "semantic: boom" in component.error_message
