"""
Supabase client for the component metadata store
"""

import logging
from typing import Optional

from supabase import Client, create_client

from .config import Config

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Shared Supabase client, created on first use.

    Only runs that record metadata need it, so generation without
    Supabase credentials never reaches this.

    Raises:
        ValueError: If SUPABASE_URL / SUPABASE_SERVICE_KEY are not configured
    """
    global _supabase_client

    if _supabase_client is None:
        Config.validate()
        _supabase_client = create_client(Config.SUPABASE_URL, Config.SUPABASE_SERVICE_KEY)
        logger.info("Supabase client created for metadata store")

    return _supabase_client
