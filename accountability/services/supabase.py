import logging

from supabase import create_client

from accountability import config
from accountability.errors import ServerFault

logger = logging.getLogger(__name__)


def get_client():
    if not config.SUPABASE_URL or not config.SUPABASE_KEY:
        logger.error("Supabase URL or Key not found in environment variables")
        raise ServerFault("Server configuration error")
    return create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
