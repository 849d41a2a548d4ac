"""Supabase (aggregation service) client."""

from pnl_listener.clients.supabase.supabase_client import SupabaseRpcClient

__all__ = ["SupabaseRpcClient"]
