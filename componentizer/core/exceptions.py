"""
Exception types raised across the componentizer package.
"""

from typing import Optional


class ComponentizerError(Exception):
    """Base class for componentizer failures."""


class RetryExhaustedError(ComponentizerError):
    """An operation kept failing until its retry policy gave up."""

    def __init__(self, operation: str, attempts: int, last_error: Optional[BaseException]):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} failed after {attempts} attempts: {last_error}")


class DetectionError(ComponentizerError):
    """The page handle failed while detecting sections."""


class StrategyError(ComponentizerError):
    """A synthesis strategy could not render a region."""

    def __init__(self, strategy: str, message: str):
        self.strategy = strategy
        super().__init__(message)
