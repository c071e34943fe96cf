"""
Error classification, queueing, backoff and persistence for pipeline failures.
"""

from .errors import (
    ErrorCode,
    ErrorSeverity,
    PipelineError,
    classify_error,
    create_pipeline_error,
    create_detection_error,
    create_generation_error,
    create_variant_error,
    is_recoverable,
    max_retries_for,
    severity_for,
)
from .queue import ErrorQueue, QueueState, RetryHandler, calculate_backoff_delay, can_retry
from .store import FailedComponentStore
from .reporting import (
    ErrorSummary,
    FailedComponent,
    describe_error_code,
    format_error,
    from_failed_component,
    summarize_errors,
    to_failed_component,
)

__all__ = [
    'ErrorCode',
    'ErrorSeverity',
    'PipelineError',
    'classify_error',
    'create_pipeline_error',
    'create_detection_error',
    'create_generation_error',
    'create_variant_error',
    'is_recoverable',
    'max_retries_for',
    'severity_for',
    'ErrorQueue',
    'QueueState',
    'RetryHandler',
    'calculate_backoff_delay',
    'can_retry',
    'FailedComponentStore',
    'ErrorSummary',
    'FailedComponent',
    'describe_error_code',
    'format_error',
    'from_failed_component',
    'summarize_errors',
    'to_failed_component',
]
