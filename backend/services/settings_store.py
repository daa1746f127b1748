"""
Settings Store
Durable name/value options backed by a Supabase table
"""
import os
from typing import Optional
from supabase import create_client, Client, ClientOptions
from dotenv import load_dotenv

from services.observability import logger

load_dotenv()

OPTIONS_TABLE = "options"


class SettingsStore:
    """Named string settings stored one row per name in the options table"""

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            supabase_url = os.getenv("SUPABASE_URL")
            supabase_key = os.getenv("SUPABASE_KEY")

            if not supabase_url or not supabase_key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")

            # Server-side client: no session to refresh or persist
            options = ClientOptions(
                auto_refresh_token=False,
                persist_session=False
            )
            client = create_client(supabase_url, supabase_key, options)
            logger.info("Settings store initialized", table=OPTIONS_TABLE)

        self.client: Client = client

    def get(self, name: str) -> Optional[str]:
        """Get an option value, None if the row doesn't exist"""
        result = (
            self.client.table(OPTIONS_TABLE)
            .select("value")
            .eq("name", name)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return result.data[0].get("value")

    def set(self, name: str, value: str) -> None:
        """Create or overwrite an option"""
        self.client.table(OPTIONS_TABLE).upsert(
            {"name": name, "value": value},
            on_conflict="name"
        ).execute()

    def delete(self, name: str) -> None:
        """Delete an option; deleting a missing option is a no-op"""
        self.client.table(OPTIONS_TABLE).delete().eq("name", name).execute()


# Create singleton instance
_settings_store = None

def get_settings_store() -> SettingsStore:
    """Get or create Settings store instance"""
    global _settings_store
    if _settings_store is None:
        _settings_store = SettingsStore()
    return _settings_store
