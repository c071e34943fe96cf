"""
Tracing for generation runs.

Runs, detection stages and vision calls are traced with Logfire when a
LOGFIRE_TOKEN is configured. Without one, get_logfire() hands back a
stand-in whose spans accept the same calls and record nothing, so callers
never branch on whether tracing is on.

    setup_logfire()                      # once, from the CLI
    lf = get_logfire()
    with lf.span("detect_regions", max_regions=10) as span:
        span.set_attribute("stage", "structural")
"""

import logging
from typing import Any, Optional

from .config import Config

logger = logging.getLogger(__name__)

_configured = False


def setup_logfire(
    project_name: Optional[str] = None,
    environment: Optional[str] = None,
    service_name: str = "componentizer",
    instrument_anthropic: bool = True,
) -> bool:
    """
    Configure Logfire for this process.

    Args:
        project_name: Overrides Config.LOGFIRE_PROJECT_NAME
        environment: Overrides Config.LOGFIRE_ENVIRONMENT
        service_name: Service name attached to every span
        instrument_anthropic: Trace Claude vision calls as child spans

    Returns:
        True once Logfire is active, False when no token is configured
        or configuration failed
    """
    global _configured

    if _configured:
        return True

    if not Config.LOGFIRE_TOKEN:
        logger.info("LOGFIRE_TOKEN not set, tracing disabled")
        return False

    import logfire

    project = project_name or Config.LOGFIRE_PROJECT_NAME
    env = environment or Config.LOGFIRE_ENVIRONMENT

    try:
        logfire.configure(
            token=Config.LOGFIRE_TOKEN,
            project_name=project,
            service_name=service_name,
            environment=env,
            send_to_logfire=True,
        )
        logfire.instrument_pydantic()
        if instrument_anthropic:
            logfire.instrument_anthropic()
    except Exception as e:
        logger.error(f"Logfire configuration failed: {e}")
        return False

    _configured = True
    logger.info(f"Tracing runs to Logfire project {project} ({env})")
    return True


def get_logfire() -> Any:
    """The logfire module when configured, else a recording-free stand-in."""
    if _configured:
        import logfire
        return logfire
    return _DisabledLogfire()


class _DisabledSpan:
    def __enter__(self) -> "_DisabledSpan":
        return self

    def __exit__(self, *exc_info) -> bool:
        return False

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def set_attributes(self, attributes: dict) -> None:
        pass


class _DisabledLogfire:
    def span(self, *args, **kwargs) -> _DisabledSpan:
        return _DisabledSpan()

    def __getattr__(self, name):
        # info/warn/error and friends
        return lambda *args, **kwargs: None
