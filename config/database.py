"""
Database connection management.

Provides the Supabase client singleton used by every service.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings
from exceptions import StoreConnectionError

logger = structlog.get_logger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        StoreConnectionError: If connection fails
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        # Test connection with simple query
        client.table("products").select("id").limit(1).execute()

        logger.info(
            "supabase_connected",
            status="success"
        )

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise StoreConnectionError(f"Failed to connect to Supabase: {e}") from e


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check database connection health.

    Returns:
        dict: Connection status with details
    """
    try:
        client = get_supabase_client()

        products = client.table("products").select("id", count="exact").execute()
        sessions = client.table("order_sessions").select("id", count="exact").execute()

        return {
            "status": "healthy",
            "products_count": products.count,
            "sessions_count": sessions.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
