"""
Tests for the Supabase-backed SettingsStore
"""
import pytest
from unittest.mock import MagicMock

from services.settings_store import SettingsStore, OPTIONS_TABLE


@pytest.fixture
def supabase_client():
    client = MagicMock()
    table = MagicMock()

    # Fluent interface returns the same table object
    table.select.return_value = table
    table.eq.return_value = table
    table.limit.return_value = table
    table.upsert.return_value = table
    table.delete.return_value = table

    client.table.return_value = table
    return client


@pytest.fixture
def store(supabase_client):
    return SettingsStore(client=supabase_client)


def _table(client):
    return client.table.return_value


class TestSettingsStore:

    def test_get_existing_option(self, store, supabase_client):
        _table(supabase_client).execute.return_value.data = [{"value": "my-api"}]

        assert store.get("api_url_prefix_override") == "my-api"
        supabase_client.table.assert_called_with(OPTIONS_TABLE)
        _table(supabase_client).eq.assert_called_with("name", "api_url_prefix_override")

    def test_get_missing_option(self, store, supabase_client):
        _table(supabase_client).execute.return_value.data = []

        assert store.get("api_url_prefix_override") is None

    def test_get_propagates_errors(self, store, supabase_client):
        _table(supabase_client).execute.side_effect = Exception("connection refused")

        with pytest.raises(Exception, match="connection refused"):
            store.get("api_url_prefix_override")

    def test_set_upserts_by_name(self, store, supabase_client):
        store.set("api_url_prefix_override", "my-api")

        _table(supabase_client).upsert.assert_called_once_with(
            {"name": "api_url_prefix_override", "value": "my-api"},
            on_conflict="name"
        )
        _table(supabase_client).execute.assert_called_once()

    def test_delete_by_name(self, store, supabase_client):
        store.delete("api_url_prefix_override")

        _table(supabase_client).delete.assert_called_once()
        _table(supabase_client).eq.assert_called_with("name", "api_url_prefix_override")
        _table(supabase_client).execute.assert_called_once()

    def test_requires_credentials(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)

        with pytest.raises(ValueError, match="SUPABASE_URL"):
            SettingsStore()
