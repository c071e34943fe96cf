"""
SaveNode - Write components to disk and record them in the metadata store.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import ClassVar

from pydantic_graph import BaseNode, End, GraphRunContext

from ..dependencies import ComponentGenerationDeps
from ..state import ComponentGenerationState
from ...metadata import NodeMetadata
from ....services.models import GenerationError, GenerationPhase, GenerationResult
from ....services.recovery import ErrorCode, create_pipeline_error

logger = logging.getLogger(__name__)


@dataclass
class SaveNode(BaseNode[ComponentGenerationState]):
    """
    Step 5: Persist results and compile the GenerationResult.

    File writes and metadata records are independent. A failure in
    either is recorded as a saving-phase error; nothing already written
    is rolled back.

    Reads: components, save_metadata, website_id
    Writes: saved_paths, recorded_ids, errors
    Services: FileOutputStore.save_component(), .write_index(),
              SupabaseMetadataStore.save_component()
    """

    metadata: ClassVar[NodeMetadata] = NodeMetadata(
        phase="saving",
        inputs=["components", "save_metadata", "website_id"],
        outputs=["saved_paths", "recorded_ids", "errors"],
        services=[
            "output_store.save_component",
            "output_store.write_index",
            "metadata_store.save_component",
        ],
    )

    async def run(
        self,
        ctx: GraphRunContext[ComponentGenerationState, ComponentGenerationDeps]
    ) -> End[GenerationResult]:
        logger.info("Step 5: Saving components...")
        ctx.state.current_step = "save"

        try:
            await self._save_files(ctx)
            if ctx.state.save_metadata and ctx.deps.metadata_store is not None:
                await self._record_metadata(ctx)

            await ctx.deps.report_progress(
                GenerationPhase.COMPLETE, 100, "Component generation complete"
            )
            ctx.state.mark_step_complete("save")

            result = ctx.state.build_result()
            logger.info(
                f"Component generation finished: success={result.success}, "
                f"{result.metadata.generated_count}/{result.metadata.detected_count} generated, "
                f"{len(result.errors)} errors"
            )
            return End(result)

        except Exception as e:
            ctx.state.error = str(e)
            ctx.state.error_step = "save"
            logger.error(f"Save step failed: {e}")
            raise

    async def _save_files(
        self, ctx: GraphRunContext[ComponentGenerationState, ComponentGenerationDeps]
    ) -> None:
        await ctx.deps.report_progress(GenerationPhase.SAVING, 70, "Saving components to filesystem...")

        successful = [c for c in ctx.state.components if not c.is_failed]
        if not successful:
            return

        store = ctx.deps.output_store
        total = len(successful)
        for index, component in enumerate(successful):
            await ctx.deps.report_progress(
                GenerationPhase.SAVING,
                70 + 20 * index / total,
                f"Saving {component.name}",
                current_item=index + 1,
                total_items=total,
            )
            try:
                path = store.save_component(component)
            except (OSError, ValueError) as e:
                self._storage_failure(ctx, f"Failed to save {component.name}: {e}", component)
                continue
            ctx.state.saved_paths.append(str(path))

        if store.saved_names:
            try:
                store.write_index()
            except OSError as e:
                self._storage_failure(ctx, f"Failed to write components index: {e}")

    def _storage_failure(self, ctx, message: str, component=None) -> None:
        logger.warning(message)
        ctx.deps.record_error(create_pipeline_error(
            message,
            component.type if component else None,
            website_id=ctx.state.website_id,
            component_id=component.id if component else None,
            code=ErrorCode.STORAGE_FAILED,
        ))
        ctx.state.errors.append(GenerationError(
            phase=GenerationPhase.SAVING,
            message=message,
            recoverable=True,
            component_id=component.id if component else None,
            component_type=component.type if component else None,
        ))

    async def _record_metadata(
        self, ctx: GraphRunContext[ComponentGenerationState, ComponentGenerationDeps]
    ) -> None:
        await ctx.deps.report_progress(GenerationPhase.SAVING, 90, "Persisting to database...")

        components = ctx.state.components
        total = len(components)
        for index, component in enumerate(components):
            await ctx.deps.report_progress(
                GenerationPhase.SAVING,
                90 + 8 * index / total,
                f"Recording {component.name}",
                current_item=index + 1,
                total_items=total,
            )
            try:
                record_id = await asyncio.to_thread(
                    ctx.deps.metadata_store.save_component, component, ctx.state.website_id
                )
            except Exception as e:
                message = f"Failed to persist {component.name} to database: {e}"
                logger.warning(message)
                ctx.deps.record_error(create_pipeline_error(
                    message,
                    component.type,
                    website_id=ctx.state.website_id,
                    component_id=component.id,
                    code=ErrorCode.DATABASE_FAILED,
                ))
                ctx.state.errors.append(GenerationError(
                    phase=GenerationPhase.SAVING,
                    message=message,
                    recoverable=False,
                    component_id=component.id,
                    component_type=component.type,
                ))
                continue
            ctx.state.recorded_ids.append(record_id)
