"""
Shared fixtures for the componentizer test suite.
"""

import pytest

from componentizer.core.retry import RetryPolicy
from fakes import FakePage, landing_page


@pytest.fixture
def fake_page() -> FakePage:
    return landing_page()


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Linear policy that does not sleep between attempts."""
    return RetryPolicy.linear(max_attempts=3, base_delay=0)


@pytest.fixture
def websites_dir(tmp_path, monkeypatch):
    """Point Config.WEBSITES_DIR at a temporary directory."""
    from componentizer.core.config import Config

    root = tmp_path / "Websites"
    monkeypatch.setattr(Config, "WEBSITES_DIR", str(root))
    return root
