"""
InitializeNode - Validate inputs and prepare output directories.

First node in the component generation pipeline.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from pydantic_graph import BaseNode, GraphRunContext

from ..dependencies import ComponentGenerationDeps
from ..state import ComponentGenerationState
from ...metadata import NodeMetadata
from ....services.models import GenerationPhase

logger = logging.getLogger(__name__)


@dataclass
class InitializeNode(BaseNode[ComponentGenerationState]):
    """
    Step 1: Validate the run and create the output directories.

    Reads: website_id, max_regions
    Writes: output_dir, screenshots_dir
    Services: (none)
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        phase="initializing",
        inputs=["website_id", "max_regions"],
        outputs=["output_dir", "screenshots_dir"],
        services=[],
    )

    async def run(
        self,
        ctx: GraphRunContext[ComponentGenerationState, ComponentGenerationDeps]
    ) -> "DetectNode":
        from .detect import DetectNode

        logger.info(f"Step 1: Initializing component generation for {ctx.state.website_id}...")
        ctx.state.current_step = "initialize"

        try:
            if not ctx.state.website_id:
                raise ValueError("website_id is required")
            if ctx.state.max_regions < 1:
                raise ValueError(f"max_regions must be at least 1, got {ctx.state.max_regions}")

            await ctx.deps.report_progress(
                GenerationPhase.INITIALIZING, 0, "Initializing component generation..."
            )

            output_dir = Path(ctx.deps.output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            ctx.state.output_dir = str(output_dir)
            ctx.state.screenshots_dir = str(ctx.deps.capturer.output_dir)

            ctx.state.mark_step_complete("initialize")
            return DetectNode()

        except Exception as e:
            ctx.state.error = str(e)
            ctx.state.error_step = "initialize"
            logger.error(f"Initialization failed: {e}")
            raise
