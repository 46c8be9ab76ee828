"""FrisFocus database access (Supabase)."""

from frisfocus.db.adapter import DatabaseAdapter
from frisfocus.db.client import get_client, get_service_client

__all__ = ["DatabaseAdapter", "get_client", "get_service_client"]
