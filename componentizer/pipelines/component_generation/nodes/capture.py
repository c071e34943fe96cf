"""
CaptureNode - Screenshot every detected region.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..dependencies import ComponentGenerationDeps
from ..state import ComponentGenerationState
from ...metadata import NodeMetadata
from ....core.exceptions import RetryExhaustedError
from ....core.retry import with_retry
from ....services.models import GenerationError, GenerationPhase
from ....services.recovery import ErrorCode, create_pipeline_error

logger = logging.getLogger(__name__)


@dataclass
class CaptureNode(BaseNode[ComponentGenerationState]):
    """
    Step 3: Capture a clipped screenshot per region, one region at a time.

    Each region retries on its own; a region that still fails simply has
    no screenshot path, an entry in errors, and the run continues.

    Reads: regions, skip_screenshots
    Writes: regions (screenshot_path), screenshot_paths, errors
    Services: ScreenshotCapturer.capture()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        phase="capturing_screenshots",
        inputs=["regions", "skip_screenshots"],
        outputs=["regions", "screenshot_paths", "errors"],
        services=["capturer.capture"],
    )

    async def run(
        self,
        ctx: GraphRunContext[ComponentGenerationState, ComponentGenerationDeps]
    ) -> "GenerateVariantsNode":
        from .generate_variants import GenerateVariantsNode

        ctx.state.current_step = "capture"
        regions = ctx.state.regions

        if ctx.state.skip_screenshots or not regions:
            logger.info("Step 3: Skipping screenshot capture")
            ctx.state.mark_step_complete("capture")
            return GenerateVariantsNode()

        logger.info(f"Step 3: Capturing {len(regions)} screenshots...")

        try:
            total = len(regions)
            for index, region in enumerate(regions):
                await ctx.deps.report_progress(
                    GenerationPhase.CAPTURING_SCREENSHOTS,
                    20 + 20 * index / total,
                    f"Capturing screenshot {index + 1}/{total}: {region.type.value}",
                    current_item=index + 1,
                    total_items=total,
                )

                try:
                    path = await with_retry(
                        f"Screenshot capture for {region.type.value}",
                        lambda: ctx.deps.capturer.capture(ctx.deps.page, region, index),
                        ctx.deps.retry_policy,
                    )
                except RetryExhaustedError as e:
                    logger.warning(f"No screenshot for {region.type.value}: {e}")
                    ctx.deps.record_error(create_pipeline_error(
                        e,
                        region.type,
                        website_id=ctx.state.website_id,
                        code=ErrorCode.SCREENSHOT_FAILED,
                        metadata={"region_id": region.id, "attempts": e.attempts},
                    ))
                    ctx.state.errors.append(GenerationError(
                        phase=GenerationPhase.CAPTURING_SCREENSHOTS,
                        message=f"No screenshot for {region.type.value}: {e}",
                        recoverable=True,
                        component_type=region.type,
                    ))
                    continue

                regions[index] = region.with_screenshot(path)
                ctx.state.screenshot_paths[region.id] = path

            logger.info(f"Captured {len(ctx.state.screenshot_paths)}/{total} screenshots")
            ctx.state.mark_step_complete("capture")
            return GenerateVariantsNode()

        except Exception as e:
            ctx.state.error = str(e)
            ctx.state.error_step = "capture"
            logger.error(f"Screenshot capture failed: {e}")
            raise
