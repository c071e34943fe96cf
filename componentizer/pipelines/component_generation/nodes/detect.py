"""
DetectNode - Find the page's sections with retry.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Union

from pydantic_graph import BaseNode, End, GraphRunContext

from ..dependencies import ComponentGenerationDeps
from ..state import ComponentGenerationState
from ...metadata import NodeMetadata
from ....core.exceptions import RetryExhaustedError
from ....core.retry import with_retry
from ....services.models import GenerationError, GenerationPhase, GenerationResult
from ....services.recovery import create_detection_error

logger = logging.getLogger(__name__)


@dataclass
class DetectNode(BaseNode[ComponentGenerationState]):
    """
    Step 2: Detect ordered, typed regions on the page.

    Detection is the only whole-run fatal step: when it still fails after
    the retry policy gives up, the run ends with zero components.

    Reads: max_regions, min_height
    Writes: regions, detection_stage, coverage
    Services: SectionDetector.detect()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        phase="detecting",
        inputs=["max_regions", "min_height"],
        outputs=["regions", "detection_stage", "coverage"],
        services=["detector.detect"],
        ends_run_on_failure=True,
    )

    async def run(
        self,
        ctx: GraphRunContext[ComponentGenerationState, ComponentGenerationDeps]
    ) -> Union["CaptureNode", End[GenerationResult]]:
        from .capture import CaptureNode

        logger.info("Step 2: Detecting page components...")
        ctx.state.current_step = "detect"
        await ctx.deps.report_progress(GenerationPhase.DETECTING, 5, "Detecting page components...")

        try:
            detection = await with_retry(
                "Component detection",
                lambda: ctx.deps.detector.detect(
                    ctx.deps.page, ctx.state.max_regions, ctx.state.min_height
                ),
                ctx.deps.retry_policy,
            )
        except RetryExhaustedError as e:
            logger.error(f"Detection failed: {e}")
            ctx.deps.record_error(
                create_detection_error(None, str(e), website_id=ctx.state.website_id)
            )
            ctx.state.errors.append(GenerationError(
                phase=GenerationPhase.DETECTING,
                message=str(e),
                recoverable=True,
            ))
            ctx.state.regions = []
            return End(ctx.state.build_result(success=False))

        try:
            ctx.state.regions = list(detection.regions)
            ctx.state.detection_stage = detection.stage
            ctx.state.coverage = detection.coverage

            await ctx.deps.report_progress(
                GenerationPhase.DETECTING,
                15,
                f"Detected {len(ctx.state.regions)} components",
                total_items=len(ctx.state.regions),
            )
            logger.info(
                f"Detected {len(ctx.state.regions)} regions via '{detection.stage}' "
                f"(coverage {detection.coverage:.2f})"
            )

            ctx.state.mark_step_complete("detect")
            return CaptureNode()

        except Exception as e:
            ctx.state.error = str(e)
            ctx.state.error_step = "detect"
            logger.error(f"Detection step failed: {e}")
            raise
