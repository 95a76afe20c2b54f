"""Remote backend infrastructure package."""

from .supabase_rest_client import SupabaseRestClient

__all__ = ["SupabaseRestClient"]
