"""
Pipeline error codes, classification and factories.

Severity, recoverability and retry budget are fixed per code; an error's
message is mapped to a code by keyword matching when the caller does not
know it up front.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from ..models import SectionType

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    DETECTION_FAILED = "DETECTION_FAILED"
    DETECTION_TIMEOUT = "DETECTION_TIMEOUT"
    DETECTION_NO_ELEMENTS = "DETECTION_NO_ELEMENTS"
    GENERATION_FAILED = "GENERATION_FAILED"
    GENERATION_TIMEOUT = "GENERATION_TIMEOUT"
    GENERATION_INVALID_HTML = "GENERATION_INVALID_HTML"
    VARIANT_A_FAILED = "VARIANT_A_FAILED"
    VARIANT_B_FAILED = "VARIANT_B_FAILED"
    VARIANT_C_FAILED = "VARIANT_C_FAILED"
    ALL_VARIANTS_FAILED = "ALL_VARIANTS_FAILED"
    SCREENSHOT_FAILED = "SCREENSHOT_FAILED"
    STORAGE_FAILED = "STORAGE_FAILED"
    DATABASE_FAILED = "DATABASE_FAILED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_BY_CODE: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.DETECTION_FAILED: ErrorSeverity.MEDIUM,
    ErrorCode.DETECTION_TIMEOUT: ErrorSeverity.MEDIUM,
    ErrorCode.DETECTION_NO_ELEMENTS: ErrorSeverity.LOW,
    ErrorCode.GENERATION_FAILED: ErrorSeverity.HIGH,
    ErrorCode.GENERATION_TIMEOUT: ErrorSeverity.MEDIUM,
    ErrorCode.GENERATION_INVALID_HTML: ErrorSeverity.MEDIUM,
    ErrorCode.VARIANT_A_FAILED: ErrorSeverity.LOW,
    ErrorCode.VARIANT_B_FAILED: ErrorSeverity.LOW,
    ErrorCode.VARIANT_C_FAILED: ErrorSeverity.LOW,
    ErrorCode.ALL_VARIANTS_FAILED: ErrorSeverity.HIGH,
    ErrorCode.SCREENSHOT_FAILED: ErrorSeverity.MEDIUM,
    ErrorCode.STORAGE_FAILED: ErrorSeverity.HIGH,
    ErrorCode.DATABASE_FAILED: ErrorSeverity.CRITICAL,
    ErrorCode.UNKNOWN_ERROR: ErrorSeverity.HIGH,
}

RECOVERABLE_BY_CODE: Dict[ErrorCode, bool] = {
    ErrorCode.DETECTION_FAILED: True,
    ErrorCode.DETECTION_TIMEOUT: True,
    ErrorCode.DETECTION_NO_ELEMENTS: False,
    ErrorCode.GENERATION_FAILED: True,
    ErrorCode.GENERATION_TIMEOUT: True,
    ErrorCode.GENERATION_INVALID_HTML: True,
    ErrorCode.VARIANT_A_FAILED: True,
    ErrorCode.VARIANT_B_FAILED: True,
    ErrorCode.VARIANT_C_FAILED: True,
    ErrorCode.ALL_VARIANTS_FAILED: True,
    ErrorCode.SCREENSHOT_FAILED: True,
    ErrorCode.STORAGE_FAILED: True,
    ErrorCode.DATABASE_FAILED: False,
    ErrorCode.UNKNOWN_ERROR: False,
}

MAX_RETRIES_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.DETECTION_FAILED: 3,
    ErrorCode.DETECTION_TIMEOUT: 2,
    ErrorCode.DETECTION_NO_ELEMENTS: 0,
    ErrorCode.GENERATION_FAILED: 3,
    ErrorCode.GENERATION_TIMEOUT: 2,
    ErrorCode.GENERATION_INVALID_HTML: 2,
    ErrorCode.VARIANT_A_FAILED: 2,
    ErrorCode.VARIANT_B_FAILED: 2,
    ErrorCode.VARIANT_C_FAILED: 2,
    ErrorCode.ALL_VARIANTS_FAILED: 2,
    ErrorCode.SCREENSHOT_FAILED: 3,
    ErrorCode.STORAGE_FAILED: 2,
    ErrorCode.DATABASE_FAILED: 0,
    ErrorCode.UNKNOWN_ERROR: 1,
}

PAGE_SCOPE = "page"

VARIANT_ERROR_CODES: Dict[str, ErrorCode] = {
    "Variant A": ErrorCode.VARIANT_A_FAILED,
    "Variant B": ErrorCode.VARIANT_B_FAILED,
    "Variant C": ErrorCode.VARIANT_C_FAILED,
}


def severity_for(code: ErrorCode) -> ErrorSeverity:
    return SEVERITY_BY_CODE[ErrorCode(code)]


def is_recoverable(code: ErrorCode) -> bool:
    return RECOVERABLE_BY_CODE[ErrorCode(code)]


def max_retries_for(code: ErrorCode) -> int:
    return MAX_RETRIES_BY_CODE[ErrorCode(code)]


class PipelineError(BaseModel):
    """A classified failure owned by one run and one section type."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    code: ErrorCode
    component_type: Optional[SectionType] = None
    message: str
    detail: Optional[str] = None
    severity: Optional[ErrorSeverity] = None
    recoverable: Optional[bool] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    retry_count: int = Field(default=0, ge=0)
    max_retries: Optional[int] = None
    website_id: Optional[str] = None
    component_id: Optional[str] = None
    variant_name: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _fill_from_code(self) -> "PipelineError":
        # Derived attributes always follow the code tables
        self.severity = severity_for(self.code)
        self.recoverable = is_recoverable(self.code)
        self.max_retries = max_retries_for(self.code)
        return self

    @property
    def scope(self) -> str:
        """Section type value, or "page" for whole-page failures."""
        return self.component_type.value if self.component_type else PAGE_SCOPE


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def _has_any(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)


def classify_error(error: Union[BaseException, str]) -> ErrorCode:
    """
    Map an exception or message to an error code.

    Keyword checks run in a fixed order (case-insensitive); the first
    matching group wins.
    """
    lower = str(error).lower()

    if _has_any(lower, 'detection', 'detect'):
        if 'timeout' in lower:
            return ErrorCode.DETECTION_TIMEOUT
        if _has_any(lower, 'no elements', 'not found'):
            return ErrorCode.DETECTION_NO_ELEMENTS
        return ErrorCode.DETECTION_FAILED

    if _has_any(lower, 'generation', 'generate'):
        if 'timeout' in lower:
            return ErrorCode.GENERATION_TIMEOUT
        if _has_any(lower, 'invalid html', 'parse'):
            return ErrorCode.GENERATION_INVALID_HTML
        return ErrorCode.GENERATION_FAILED

    if _has_any(lower, 'variant a', 'pixel-perfect', 'pixel-faithful'):
        return ErrorCode.VARIANT_A_FAILED
    if _has_any(lower, 'variant b', 'semantic'):
        return ErrorCode.VARIANT_B_FAILED
    if _has_any(lower, 'variant c', 'modernized', 'accessible'):
        return ErrorCode.VARIANT_C_FAILED
    if 'all variants' in lower:
        return ErrorCode.ALL_VARIANTS_FAILED

    if _has_any(lower, 'screenshot', 'capture'):
        return ErrorCode.SCREENSHOT_FAILED
    if _has_any(lower, 'storage', 'file', 'write', 'save'):
        return ErrorCode.STORAGE_FAILED
    if _has_any(lower, 'database', 'sqlite', 'query', 'supabase'):
        return ErrorCode.DATABASE_FAILED

    return ErrorCode.UNKNOWN_ERROR


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _detail_from(error: Union[BaseException, str]) -> Optional[str]:
    if isinstance(error, BaseException) and error.__traceback__ is not None:
        frames = traceback.format_tb(error.__traceback__)
        return ''.join(frames[-4:]).rstrip() or None
    return None


def create_pipeline_error(
    error: Union[BaseException, str],
    component_type: Optional[SectionType],
    website_id: Optional[str] = None,
    component_id: Optional[str] = None,
    variant_name: Optional[str] = None,
    code: Optional[ErrorCode] = None,
    retry_count: int = 0,
    metadata: Optional[Dict[str, Any]] = None,
) -> PipelineError:
    """
    Build a PipelineError from an exception or message.

    The code is classified from the message unless given explicitly.
    """
    return PipelineError(
        code=code or classify_error(error),
        component_type=component_type,
        message=str(error),
        detail=_detail_from(error),
        retry_count=retry_count,
        website_id=website_id,
        component_id=component_id,
        variant_name=variant_name,
        metadata=metadata or {},
    )


def create_detection_error(
    component_type: Optional[SectionType],
    message: str,
    website_id: Optional[str] = None,
    timeout: bool = False,
    no_elements: bool = False,
) -> PipelineError:
    code = ErrorCode.DETECTION_FAILED
    if timeout:
        code = ErrorCode.DETECTION_TIMEOUT
    elif no_elements:
        code = ErrorCode.DETECTION_NO_ELEMENTS
    return create_pipeline_error(
        message, component_type, website_id=website_id, code=code,
        metadata={"timeout": timeout, "no_elements": no_elements},
    )


def create_generation_error(
    component_type: SectionType,
    message: str,
    website_id: Optional[str] = None,
    component_id: Optional[str] = None,
    timeout: bool = False,
    invalid_html: bool = False,
) -> PipelineError:
    code = ErrorCode.GENERATION_FAILED
    if timeout:
        code = ErrorCode.GENERATION_TIMEOUT
    elif invalid_html:
        code = ErrorCode.GENERATION_INVALID_HTML
    return create_pipeline_error(
        message, component_type, website_id=website_id, component_id=component_id, code=code,
        metadata={"timeout": timeout, "invalid_html": invalid_html},
    )


def create_variant_error(
    component_type: SectionType,
    variant_name: str,
    message: str,
    website_id: Optional[str] = None,
    component_id: Optional[str] = None,
) -> PipelineError:
    """Error for one failed strategy, keyed by its display name (Variant A|B|C)."""
    if variant_name not in VARIANT_ERROR_CODES:
        raise ValueError(f"Unknown variant name: {variant_name}")
    return create_pipeline_error(
        message, component_type, website_id=website_id, component_id=component_id,
        variant_name=variant_name, code=VARIANT_ERROR_CODES[variant_name],
    )
