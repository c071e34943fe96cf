"""
Component Generation State - dataclass passed through all pipeline nodes.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ...services.models import (
    GeneratedComponent,
    GenerationError,
    GenerationMetadata,
    GenerationResult,
    Region,
    VariantStrategy,
)


@dataclass
class ComponentGenerationState:
    """
    State passed through the component generation nodes.

    Lifecycle:
        1. Caller creates with the run inputs
        2. Each node reads what it needs and writes its outputs
        3. SaveNode returns the GenerationResult via End()
    """

    # === REQUIRED INPUT ===
    website_id: str

    # === CONFIGURATION (set at creation, not changed by nodes) ===
    max_regions: int = 10
    min_height: int = 50
    design_tokens: Optional[Dict[str, Any]] = None
    skip_screenshots: bool = False
    save_metadata: bool = True
    skip_strategies: List[VariantStrategy] = field(default_factory=list)

    # === POPULATED BY NODES ===

    # InitializeNode
    output_dir: Optional[str] = None
    screenshots_dir: Optional[str] = None

    # DetectNode
    regions: List[Region] = field(default_factory=list)
    detection_stage: Optional[str] = None
    coverage: float = 0.0

    # CaptureNode
    screenshot_paths: Dict[str, str] = field(default_factory=dict)

    # GenerateVariantsNode
    components: List[GeneratedComponent] = field(default_factory=list)

    # SaveNode
    saved_paths: List[str] = field(default_factory=list)
    recorded_ids: List[str] = field(default_factory=list)

    # === TRACKING ===
    current_step: str = "pending"
    errors: List[GenerationError] = field(default_factory=list)
    error: Optional[str] = None
    error_step: Optional[str] = None

    def mark_step_complete(self, step_name: str) -> None:
        self.current_step = f"{step_name}_complete"

    @property
    def generated_count(self) -> int:
        return sum(1 for c in self.components if not c.is_failed)

    @property
    def failed_count(self) -> int:
        return sum(1 for c in self.components if c.is_failed)

    def build_result(self, success: Optional[bool] = None) -> GenerationResult:
        """
        Assemble the run result.

        Success defaults to: no errors, or at least one generated component.
        """
        if success is None:
            success = not self.errors or self.generated_count > 0
        return GenerationResult(
            success=success,
            components=list(self.components),
            errors=list(self.errors),
            metadata=GenerationMetadata(
                detected_count=len(self.regions),
                generated_count=self.generated_count,
                failed_count=self.failed_count,
                generated_at=datetime.now(timezone.utc),
                output_dir=self.output_dir,
            ),
        )
