"""
Configuration management for Componentizer
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Output layout
    WEBSITES_DIR: str = os.getenv('WEBSITES_DIR', './Websites')

    # Browser capture
    VIEWPORT_WIDTH: int = int(os.getenv('VIEWPORT_WIDTH', '1440'))
    VIEWPORT_HEIGHT: int = int(os.getenv('VIEWPORT_HEIGHT', '900'))
    PAGE_TIMEOUT_MS: int = int(os.getenv('PAGE_TIMEOUT_MS', '45000'))

    # Detection defaults
    MAX_SECTIONS: int = int(os.getenv('MAX_SECTIONS', '10'))
    MIN_SECTION_HEIGHT: int = int(os.getenv('MIN_SECTION_HEIGHT', '50'))
    SELECTOR_OVERRIDES_PATH: str = os.getenv('SELECTOR_OVERRIDES_PATH', '')

    # Retry / backoff
    MAX_RETRIES: int = int(os.getenv('MAX_RETRIES', '3'))
    RETRY_DELAY_MS: int = int(os.getenv('RETRY_DELAY_MS', '1000'))
    BACKOFF_BASE_MS: int = int(os.getenv('BACKOFF_BASE_MS', '1000'))
    BACKOFF_MAX_MS: int = int(os.getenv('BACKOFF_MAX_MS', '30000'))

    # Anthropic (vision refinement)
    ANTHROPIC_API_KEY: str = os.getenv('ANTHROPIC_API_KEY', '')
    VISION_MODEL: str = os.getenv('VISION_MODEL', 'claude-sonnet-4-20250514')
    VISION_MAX_TOKENS: int = int(os.getenv('VISION_MAX_TOKENS', '8000'))
    REFINE_MAX_CONCURRENT: int = int(os.getenv('REFINE_MAX_CONCURRENT', '2'))

    # Supabase (metadata store)
    SUPABASE_URL: str = os.getenv('SUPABASE_URL', '')
    SUPABASE_SERVICE_KEY: str = os.getenv('SUPABASE_SERVICE_KEY', '')
    COMPONENTS_TABLE: str = os.getenv('COMPONENTS_TABLE', 'components')
    VARIANTS_TABLE: str = os.getenv('VARIANTS_TABLE', 'component_variants')

    # Logfire tracing
    LOGFIRE_TOKEN: str = os.getenv('LOGFIRE_TOKEN', '')
    LOGFIRE_PROJECT_NAME: str = os.getenv('LOGFIRE_PROJECT_NAME', 'componentizer')
    LOGFIRE_ENVIRONMENT: str = os.getenv('LOGFIRE_ENVIRONMENT', 'development')

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration needed by the metadata store"""
        required = {
            'SUPABASE_URL': cls.SUPABASE_URL,
            'SUPABASE_SERVICE_KEY': cls.SUPABASE_SERVICE_KEY,
        }

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[Any] = None) -> Optional[Any]:
        """Get configuration value"""
        return getattr(cls, key, default)

    @classmethod
    def website_dir(cls, website_id: str) -> Path:
        """Root directory for one website's generated artifacts."""
        return Path(cls.WEBSITES_DIR) / website_id


def load_selector_overrides(path: Optional[str] = None) -> Dict[str, List[str]]:
    """
    Load extra detection selectors from a YAML file.

    The file maps section type names to lists of CSS selectors, e.g.:

        hero:
          - '[data-framer-name="Hero"]'
        pricing:
          - '.plans'

    Args:
        path: YAML path (defaults to Config.SELECTOR_OVERRIDES_PATH)

    Returns:
        Dict of section type -> selectors. Empty if no file is configured.
    """
    path = path or Config.SELECTOR_OVERRIDES_PATH
    if not path:
        return {}

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Selector override file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Selector override file must contain a mapping: {config_path}")

    overrides: Dict[str, List[str]] = {}
    for key, selectors in data.items():
        if isinstance(selectors, str):
            selectors = [selectors]
        overrides[str(key)] = [str(s) for s in selectors or []]

    return overrides
