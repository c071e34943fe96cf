"""
Tests for batch refinement of pixel-faithful variants.
"""

from unittest.mock import AsyncMock

import pytest

from componentizer.services.models import Region, SectionType, VariantStrategy
from componentizer.services.synthesis import VariantSynthesizer, refine_components
from componentizer.services.synthesis.vision_generator import VisionGenerationResult


async def _components_for(regions):
    synthesizer = VariantSynthesizer()
    components = []
    for region in regions:
        result = await synthesizer.synthesize(region)
        components.append(result.to_component(region))
    return components


def _regions(count, with_screenshot=True):
    return [
        Region(
            type=SectionType.FEATURES,
            order=i,
            html_snapshot=f"<section><h2>Block {i}</h2></section>",
            screenshot_path=f"/tmp/{i:02d}-features.png" if with_screenshot else None,
        )
        for i in range(count)
    ]


class TestRefineComponents:
    @pytest.mark.asyncio
    async def test_replaces_pixel_faithful_code(self):
        regions = _regions(1)
        components = await _components_for(regions)
        generator = AsyncMock()
        generator.generate.return_value = VisionGenerationResult(success=True, code="'use client';\nREFINED", tokens_used=10)

        results = await refine_components(components, regions, generator)

        assert len(results) == 1
        assert results[0].success
        refined = results[0].component
        pixel = next(v for v in refined.variants if v.strategy == VariantStrategy.PIXEL_FAITHFUL)
        semantic = next(v for v in refined.variants if v.strategy == VariantStrategy.SEMANTIC)
        assert "REFINED" in pixel.code
        assert "REFINED" not in semantic.code

    @pytest.mark.asyncio
    async def test_batches_and_progress(self):
        regions = _regions(5)
        components = await _components_for(regions)
        generator = AsyncMock()
        generator.generate.return_value = VisionGenerationResult(success=True, code="X")
        progress = []

        results = await refine_components(
            components, regions, generator, max_concurrent=2, on_progress=lambda done, total: progress.append((done, total))
        )

        assert len(results) == 5
        assert progress == [(2, 5), (4, 5), (5, 5)]

    @pytest.mark.asyncio
    async def test_skips_regions_without_screenshots(self):
        regions = _regions(2, with_screenshot=False)
        components = await _components_for(regions)
        generator = AsyncMock()

        results = await refine_components(components, regions, generator)

        assert results == []
        generator.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_keeps_original(self):
        regions = _regions(1)
        components = await _components_for(regions)
        generator = AsyncMock()
        generator.generate.side_effect = RuntimeError("api down")

        results = await refine_components(components, regions, generator)

        assert not results[0].success
        assert results[0].error == "api down"
        assert results[0].component is components[0]
