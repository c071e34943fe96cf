"""
End-to-end tests for run_component_generation and retry_component.

The graph runs against the in-memory FakePage; screenshots and component
files go to tmp_path, and no browser, API or database is touched.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from componentizer.pipelines.component_generation import (
    ComponentGenerationDeps,
    has_generated_components,
    list_generated_components,
    retry_component,
    run_component_generation,
)
from componentizer.services.models import ComponentStatus, GenerationPhase, SectionType, VariantStrategy
from componentizer.services.recovery import ErrorCode
from componentizer.services.synthesis import strategies

from fakes import FakePage, landing_page


def _deps(page, tmp_path, fast_retry, **kwargs):
    deps = ComponentGenerationDeps.create(
        page, "site", output_dir=str(tmp_path / "generated"), selector_overrides={}, **kwargs
    )
    deps.retry_policy = fast_retry
    return deps


class TestSuccessfulRun:
    """A clean header / hero / footer page."""

    @pytest.mark.asyncio
    async def test_generates_every_section(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry)

        result = await run_component_generation(fake_page, "site", deps=deps)

        assert result.success
        assert result.errors == []
        assert [c.type for c in result.components] == [
            SectionType.HEADER, SectionType.HERO, SectionType.FOOTER,
        ]
        assert all(len(c.variants) == 3 for c in result.components)
        assert all(c.status == ComponentStatus.PENDING for c in result.components)
        assert result.metadata.detected_count == 3
        assert result.metadata.generated_count == 3
        assert result.metadata.failed_count == 0

        components_dir = tmp_path / "generated" / "src" / "components"
        assert (components_dir / "Hero" / "Hero.tsx").exists()
        assert (components_dir / "index.ts").exists()
        assert len(list((tmp_path / "generated" / "sections").glob("*.png"))) == 3

    @pytest.mark.asyncio
    async def test_progress_sequence(self, fake_page, tmp_path, fast_retry, websites_dir):
        updates = []
        deps = _deps(fake_page, tmp_path, fast_retry)

        await run_component_generation(fake_page, "site", deps=deps, on_progress=updates.append)

        percents = [u.percent for u in updates]
        assert percents[:3] == [0, 5, 15]
        assert percents[-1] == 100
        assert percents == sorted(percents)
        assert all(0 <= p <= 100 for p in percents)
        assert updates[2].message == "Detected 3 components"

        phases = []
        for update in updates:
            if not phases or phases[-1] != update.phase:
                phases.append(update.phase)
        assert phases == [
            GenerationPhase.INITIALIZING,
            GenerationPhase.DETECTING,
            GenerationPhase.CAPTURING_SCREENSHOTS,
            GenerationPhase.GENERATING_VARIANTS,
            GenerationPhase.SAVING,
            GenerationPhase.COMPLETE,
        ]

    @pytest.mark.asyncio
    async def test_async_progress_callback(self, fake_page, tmp_path, fast_retry, websites_dir):
        callback = AsyncMock()
        deps = _deps(fake_page, tmp_path, fast_retry, on_progress=callback)

        await run_component_generation(fake_page, "site", deps=deps)

        assert callback.await_count > 0

    @pytest.mark.asyncio
    async def test_failing_progress_callback_is_ignored(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry, on_progress=MagicMock(side_effect=RuntimeError("ui gone")))

        result = await run_component_generation(fake_page, "site", deps=deps)

        assert result.success

    @pytest.mark.asyncio
    async def test_skip_screenshots(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry)

        result = await run_component_generation(fake_page, "site", deps=deps, skip_screenshots=True)

        assert result.success
        assert fake_page.screenshots == []

    @pytest.mark.asyncio
    async def test_default_output_location(self, fake_page, fast_retry, websites_dir):
        deps = ComponentGenerationDeps.create(fake_page, "site", selector_overrides={})
        deps.retry_policy = fast_retry

        result = await run_component_generation(fake_page, "site", deps=deps)

        assert result.metadata.output_dir == str(websites_dir / "site" / "generated")
        assert has_generated_components("site")
        assert list_generated_components("site") == ["Footer", "Header", "Hero"]


class TestFailureModes:
    """Detection is fatal; everything else is isolated per region."""

    @pytest.mark.asyncio
    async def test_detection_failure(self, tmp_path, fast_retry, websites_dir):
        page = landing_page()
        page.fail_queries = 3
        deps = _deps(page, tmp_path, fast_retry)

        result = await run_component_generation(page, "site", deps=deps)

        assert not result.success
        assert result.components == []
        assert result.errors[0].phase == GenerationPhase.DETECTING
        assert "after 3 attempts" in result.errors[0].message
        assert [e.code for e in deps.error_queue] == [ErrorCode.DETECTION_FAILED]
        assert (websites_dir / "site" / "failed-components" / "page.error.json").exists()

    @pytest.mark.asyncio
    async def test_detection_recovers_within_retry_budget(self, tmp_path, fast_retry, websites_dir):
        page = landing_page()
        page.fail_queries = 2
        deps = _deps(page, tmp_path, fast_retry)

        result = await run_component_generation(page, "site", deps=deps)

        assert result.success
        assert len(result.components) == 3

    @pytest.mark.asyncio
    async def test_all_variants_failing(self, fake_page, tmp_path, fast_retry, websites_dir):
        failing = AsyncMock(side_effect=RuntimeError("renderer down"))
        deps = _deps(fake_page, tmp_path, fast_retry)

        with patch.dict(strategies.STRATEGY_BUILDERS, {s: failing for s in VariantStrategy}):
            result = await run_component_generation(fake_page, "site", deps=deps)

        assert not result.success
        assert len(result.components) == 3
        assert all(c.status == ComponentStatus.FAILED for c in result.components)
        assert all(c.error_message for c in result.components)
        assert [e.phase for e in result.errors] == [GenerationPhase.GENERATING_VARIANTS] * 3
        assert result.errors[1].message == "Failed to generate variants for Hero Section"
        assert not (tmp_path / "generated" / "src" / "components" / "index.ts").exists()

        codes = [e.code for e in deps.error_queue]
        assert codes.count(ErrorCode.ALL_VARIANTS_FAILED) == 3
        assert codes.count(ErrorCode.VARIANT_A_FAILED) == 3

    @pytest.mark.asyncio
    async def test_one_failed_component_keeps_run_successful(self, fake_page, tmp_path, fast_retry, websites_dir):
        originals = dict(strategies.STRATEGY_BUILDERS)

        def failing_for_hero(strategy):
            async def builder(region, options):
                if region.type == SectionType.HERO:
                    raise RuntimeError("hero renderer down")
                return await originals[strategy](region, options)
            return builder

        deps = _deps(fake_page, tmp_path, fast_retry)
        with patch.dict(strategies.STRATEGY_BUILDERS, {s: failing_for_hero(s) for s in VariantStrategy}):
            result = await run_component_generation(fake_page, "site", deps=deps)

        assert result.success
        assert [c.is_failed for c in result.components] == [False, True, False]
        assert result.metadata.generated_count == 2
        assert result.metadata.failed_count == 1
        assert len(result.errors) == 1
        assert result.errors[0].component_type == SectionType.HERO

    @pytest.mark.asyncio
    async def test_skip_strategies(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry)

        result = await run_component_generation(
            fake_page, "site", deps=deps, skip_strategies=[VariantStrategy.PIXEL_FAITHFUL]
        )

        assert all(len(c.variants) == 2 for c in result.components)

    @pytest.mark.asyncio
    async def test_screenshot_failure_is_isolated(self, tmp_path, fast_retry, websites_dir):
        page = landing_page()
        page.fail_screenshots = 3
        deps = _deps(page, tmp_path, fast_retry)

        result = await run_component_generation(page, "site", deps=deps)

        assert result.success
        assert result.metadata.generated_count == 3
        assert len(page.screenshots) == 2
        errors = deps.error_queue.all()
        assert [e.code for e in errors] == [ErrorCode.SCREENSHOT_FAILED]
        assert errors[0].component_type == SectionType.HEADER
        assert errors[0].metadata["attempts"] == 3
        assert [e.phase for e in result.errors] == [GenerationPhase.CAPTURING_SCREENSHOTS]
        assert result.errors[0].recoverable
        assert result.errors[0].component_type == SectionType.HEADER

    @pytest.mark.asyncio
    async def test_metadata_failure_recorded(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry)
        deps.metadata_store = MagicMock()
        deps.metadata_store.save_component.side_effect = RuntimeError("connection refused")

        result = await run_component_generation(fake_page, "site", deps=deps, save_metadata=True)

        assert result.success
        assert len(result.errors) == 3
        assert all(e.phase == GenerationPhase.SAVING and not e.recoverable for e in result.errors)
        assert (tmp_path / "generated" / "src" / "components" / "Hero" / "Hero.tsx").exists()
        assert [e.code for e in deps.error_queue] == [ErrorCode.DATABASE_FAILED] * 3

    @pytest.mark.asyncio
    async def test_metadata_recorded(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry)
        deps.metadata_store = MagicMock()
        deps.metadata_store.save_component.side_effect = lambda component, website_id: component.id

        result = await run_component_generation(fake_page, "site", deps=deps, save_metadata=True)

        assert result.errors == []
        assert deps.metadata_store.save_component.call_count == 3

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_reported(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry)

        result = await run_component_generation(fake_page, "", deps=deps)

        assert not result.success
        assert result.errors[0].phase == GenerationPhase.INITIALIZING
        assert result.errors[0].message == "Component generation failed: website_id is required"


class TestRetryComponent:
    @pytest.mark.asyncio
    async def test_regenerates_one_type(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry)

        component = await retry_component(fake_page, SectionType.HERO, deps=deps)

        assert component is not None
        assert component.type == SectionType.HERO
        assert len(component.variants) == 3

    @pytest.mark.asyncio
    async def test_missing_type(self, fake_page, tmp_path, fast_retry, websites_dir):
        deps = _deps(fake_page, tmp_path, fast_retry)
        assert await retry_component(fake_page, SectionType.PRICING, deps=deps) is None

    @pytest.mark.asyncio
    async def test_detection_error_returns_none(self, tmp_path, fast_retry, websites_dir):
        page = FakePage(page_height=1000, fail_queries=1)
        deps = _deps(page, tmp_path, fast_retry)
        assert await retry_component(page, SectionType.HERO, deps=deps) is None
