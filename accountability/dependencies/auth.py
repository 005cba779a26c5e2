from fastapi import Header, HTTPException
import time
import logging

from accountability import config
from accountability.adapters.memory_store import MemoryStore
from accountability.adapters.supabase_store import SupabaseStore
from accountability.errors import ServerFault
from accountability.services.supabase import get_client

logger = logging.getLogger(__name__)

_memory_store = None


def get_store(supabase):
    global _memory_store
    if config.STORAGE_BACKEND == "memory":
        if _memory_store is None:
            logger.info("Using in-memory store")
            _memory_store = MemoryStore()
        return _memory_store
    return SupabaseStore(supabase)


async def current_user_context(authorization: str = Header(...)):
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid token format")

    token = authorization.split(" ")[1]

    try:
        supabase = get_client()
    except ServerFault:
        raise HTTPException(status_code=500, detail="Server configuration error")

    try:
        start_time = time.time()
        logger.info("Validating token with Supabase")
        user_res = supabase.auth.get_user(token)
        end_time = time.time()
        logger.info(f"Token validation completed in {end_time - start_time:.2f} seconds")
    except Exception as e:
        logger.error(f"Supabase token validation error: {str(e)}")
        if "timed out" in str(e).lower():
            raise HTTPException(
                status_code=504,
                detail="Connection to authentication service timed out. Please try again later."
            )
        raise HTTPException(status_code=401, detail="Authentication error")

    if not user_res or not user_res.user:
        logger.warning("User not found after successful token validation")
        raise HTTPException(status_code=401, detail="User not found")

    logger.info(f"Successfully authenticated user: {user_res.user.id}")
    return {
        "store": get_store(supabase),
        "user_id": str(user_res.user.id),
        "user": user_res.user,
    }
