import logging
from supabase import create_client, Client
from gear_exchange.config.settings import settings

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Client with the anon key; row-level security applies."""
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Only hand it out after the role checks ran."""
        if cls._service_client is None:
            if settings.supabase_service_role_key:
                cls._service_client = create_client(
                    settings.supabase_url, settings.supabase_service_role_key
                )
            else:
                logger.warning("SUPABASE_SERVICE_ROLE_KEY not set, privileged operations fall back to the anon client")
                cls._service_client = cls.get_client()
        return cls._service_client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()
