"""
Tests for the shared Supabase client.
"""

from unittest.mock import patch

import pytest

from componentizer.core import database
from componentizer.core.config import Config
from componentizer.services.stores import SupabaseMetadataStore


@pytest.fixture(autouse=True)
def fresh_client(monkeypatch):
    monkeypatch.setattr(database, "_supabase_client", None)


class TestSupabaseClient:
    def test_missing_credentials(self, monkeypatch):
        monkeypatch.setattr(Config, "SUPABASE_URL", "")
        monkeypatch.setattr(Config, "SUPABASE_SERVICE_KEY", "")

        with pytest.raises(ValueError, match="Missing required configuration"):
            database.get_supabase_client()

    def test_created_once(self, monkeypatch):
        monkeypatch.setattr(Config, "SUPABASE_URL", "https://example.supabase.co")
        monkeypatch.setattr(Config, "SUPABASE_SERVICE_KEY", "key")

        with patch.object(database, "create_client", return_value="client") as create:
            assert database.get_supabase_client() == "client"
            assert database.get_supabase_client() == "client"

        create.assert_called_once_with("https://example.supabase.co", "key")

    def test_metadata_store_uses_shared_client(self, monkeypatch):
        monkeypatch.setattr(Config, "SUPABASE_URL", "https://example.supabase.co")
        monkeypatch.setattr(Config, "SUPABASE_SERVICE_KEY", "key")

        with patch.object(database, "create_client", return_value="client"):
            store = SupabaseMetadataStore()

        assert store.supabase == "client"
