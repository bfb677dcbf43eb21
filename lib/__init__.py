# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - similarity.py: IP filing similarity (AI comparison + word overlap)
# - ledger.py: Smart-contract client for IP filing decisions
# - messages.py: Chat id, message merge and SSE encoding helpers
# - utils.py: Shared utilities (error base class, UUID/time helpers)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.messages import chat_id, chat_participants, merge_messages, format_sse
from lib.utils import ApplicationError, normalize_uuid, utc_now_iso

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Messages
    "chat_id",
    "chat_participants",
    "merge_messages",
    "format_sse",
    # Utils
    "ApplicationError",
    "normalize_uuid",
    "utc_now_iso",
]
