"""
Error summaries, display formatting and failed-component records.
"""

from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, Optional

from pydantic import BaseModel, Field

from ..models import SectionType
from .errors import ErrorCode, ErrorSeverity, PipelineError, classify_error

ERROR_DESCRIPTIONS: Dict[ErrorCode, str] = {
    ErrorCode.DETECTION_FAILED: "Failed to detect component on the page",
    ErrorCode.DETECTION_TIMEOUT: "Component detection timed out",
    ErrorCode.DETECTION_NO_ELEMENTS: "No matching elements found for component",
    ErrorCode.GENERATION_FAILED: "Failed to generate component code",
    ErrorCode.GENERATION_TIMEOUT: "Component generation timed out",
    ErrorCode.GENERATION_INVALID_HTML: "Source HTML was invalid or unparseable",
    ErrorCode.VARIANT_A_FAILED: "Failed to generate pixel-faithful variant",
    ErrorCode.VARIANT_B_FAILED: "Failed to generate semantic variant",
    ErrorCode.VARIANT_C_FAILED: "Failed to generate accessible variant",
    ErrorCode.ALL_VARIANTS_FAILED: "All variant generations failed",
    ErrorCode.SCREENSHOT_FAILED: "Failed to capture component screenshot",
    ErrorCode.STORAGE_FAILED: "Failed to save component to storage",
    ErrorCode.DATABASE_FAILED: "Database operation failed",
    ErrorCode.UNKNOWN_ERROR: "An unknown error occurred",
}


def describe_error_code(code: ErrorCode) -> str:
    try:
        return ERROR_DESCRIPTIONS[ErrorCode(code)]
    except ValueError:
        return "Unknown error"


class ErrorSummary(BaseModel):
    total: int = 0
    by_code: Dict[ErrorCode, int] = Field(default_factory=dict)
    by_severity: Dict[ErrorSeverity, int] = Field(default_factory=dict)
    by_component_type: Dict[str, int] = Field(default_factory=dict, description="Keyed by section type value or \"page\"")
    recoverable: int = 0
    non_recoverable: int = 0
    retryable: int = 0


def summarize_errors(errors: Iterable[PipelineError]) -> ErrorSummary:
    errors = list(errors)
    recoverable = [e for e in errors if e.recoverable]
    return ErrorSummary(
        total=len(errors),
        by_code=dict(Counter(e.code for e in errors)),
        by_severity=dict(Counter(e.severity for e in errors)),
        by_component_type=dict(Counter(e.scope for e in errors)),
        recoverable=len(recoverable),
        non_recoverable=len(errors) - len(recoverable),
        retryable=sum(1 for e in recoverable if e.retry_count < (e.max_retries or 0)),
    )


def format_error(error: PipelineError) -> str:
    """[RECOVERABLE|FATAL] [SEVERITY] type: message (attempt n/max)"""
    prefix = "[RECOVERABLE]" if error.recoverable else "[FATAL]"
    severity = error.severity.value.upper()
    retry = f" (attempt {error.retry_count}/{error.max_retries})" if error.retry_count > 0 else ""
    return f"{prefix} [{severity}] {error.scope}: {error.message}{retry}"


class FailedComponent(BaseModel):
    """Flat record shape used by listings of failed components."""
    id: str
    website_id: str = ""
    component_type: Optional[SectionType] = None
    error: str
    attempted_at: datetime
    retry_count: int = 0


def to_failed_component(error: PipelineError) -> FailedComponent:
    return FailedComponent(
        id=error.id,
        website_id=error.website_id or "",
        component_type=error.component_type,
        error=error.message,
        attempted_at=error.timestamp,
        retry_count=error.retry_count,
    )


def from_failed_component(failed: FailedComponent, code: Optional[ErrorCode] = None) -> PipelineError:
    """Rebuild a PipelineError; the code is re-classified from the message unless given."""
    return PipelineError(
        id=failed.id,
        code=code or classify_error(failed.error),
        component_type=failed.component_type,
        message=failed.error,
        timestamp=failed.attempted_at,
        retry_count=failed.retry_count,
        website_id=failed.website_id or None,
    )
