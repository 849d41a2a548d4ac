"""Clients for the chain node (WebSocket JSON-RPC) and the aggregation service."""

from pnl_listener.clients.http import AsyncHttpClient, HttpResponse
from pnl_listener.clients.supabase import SupabaseRpcClient

__all__ = ["AsyncHttpClient", "HttpResponse", "SupabaseRpcClient"]
