"""
Component Generation Dependencies - services injected into every node.
"""

import inspect
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...core.config import Config, load_selector_overrides
from ...core.retry import RetryPolicy
from ...services.capture import ScreenshotCapturer
from ...services.detection import SectionDetector, build_selector_table
from ...services.models import GenerationPhase, GenerationProgress
from ...services.recovery import ErrorQueue, FailedComponentStore, PipelineError
from ...services.stores import FileOutputStore, SupabaseMetadataStore
from ...services.synthesis import EnhancementContext, VariantSynthesizer, VisionCodeGenerator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[GenerationProgress], Any]


class ComponentGenerationDeps(BaseModel):
    """
    Everything a generation run talks to.

    The error queue belongs to this run; a new deps object means a new queue.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    page: Any
    output_dir: str
    detector: SectionDetector
    synthesizer: VariantSynthesizer
    capturer: ScreenshotCapturer
    output_store: FileOutputStore
    metadata_store: Optional[SupabaseMetadataStore] = None
    error_queue: ErrorQueue = Field(default_factory=ErrorQueue)
    failed_store: Optional[FailedComponentStore] = None
    enhancement_context: Optional[EnhancementContext] = None
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy.linear)
    on_progress: Optional[ProgressCallback] = None

    @classmethod
    def create(
        cls,
        page: Any,
        website_id: str,
        output_dir: Optional[str] = None,
        save_metadata: bool = False,
        use_vision: bool = False,
        persist_errors: bool = True,
        selector_overrides: Optional[Dict[str, List[str]]] = None,
        enhancement_context: Optional[EnhancementContext] = None,
        on_progress: Optional[ProgressCallback] = None,
        metadata_store: Optional[SupabaseMetadataStore] = None,
    ) -> "ComponentGenerationDeps":
        """
        Build the default service set for one run.

        Args:
            page: Navigated Playwright page (or compatible object)
            website_id: Run owner; picks the default output directory
            output_dir: Where components and screenshots go
                (default {WEBSITES_DIR}/{website_id}/generated)
            save_metadata: Record components in Supabase
            use_vision: Use Claude vision for pixel-faithful variants
            persist_errors: Write failures to failed-components/*.error.json
            selector_overrides: Extra detection selectors per type
                (default: loaded from SELECTOR_OVERRIDES_PATH)
            enhancement_context: Decorative accents per section type
            on_progress: Progress callback, sync or async
            metadata_store: Pre-built metadata store (implies save_metadata)
        """
        root = Path(output_dir) if output_dir else Config.website_dir(website_id) / "generated"
        overrides = selector_overrides if selector_overrides is not None else load_selector_overrides()

        vision = VisionCodeGenerator() if use_vision else None
        if metadata_store is None and save_metadata:
            metadata_store = SupabaseMetadataStore()

        deps = cls(
            page=page,
            output_dir=str(root),
            detector=SectionDetector(selectors=build_selector_table(overrides)),
            synthesizer=VariantSynthesizer(vision_generator=vision, use_vision=use_vision),
            capturer=ScreenshotCapturer(str(root / "sections")),
            output_store=FileOutputStore(str(root / "src")),
            metadata_store=metadata_store,
            failed_store=FailedComponentStore() if persist_errors else None,
            enhancement_context=enhancement_context,
            on_progress=on_progress,
        )
        logger.info(f"Generation deps ready for {website_id}: output={root}, vision={use_vision}")
        return deps

    async def report_progress(
        self,
        phase: GenerationPhase,
        percent: float,
        message: str,
        current_item: Optional[int] = None,
        total_items: Optional[int] = None,
    ) -> None:
        """Send a progress update; callback failures are logged and ignored."""
        progress = GenerationProgress(
            phase=phase,
            percent=max(0, min(100, int(round(percent)))),
            message=message,
            current_item=current_item,
            total_items=total_items,
        )
        logger.debug(f"[{progress.phase.value} {progress.percent}%] {message}")
        if self.on_progress is None:
            return
        try:
            outcome = self.on_progress(progress)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")

    def record_error(self, error: PipelineError) -> PipelineError:
        """Queue an error for this run and persist it when a failed store is set."""
        self.error_queue.add(error)
        if self.failed_store is not None and error.website_id:
            try:
                self.failed_store.save(error)
            except OSError as e:
                logger.warning(f"Could not persist {error.code.value} for {error.scope}: {e}")
        return error
