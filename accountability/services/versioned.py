import logging

from accountability import config
from accountability.errors import ConcurrencyConflict, ServerFault

logger = logging.getLogger(__name__)


def retry_on_conflict(operation, description: str):
    """Run a read-modify-write operation, re-running it when its versioned write loses a race."""
    limit = max(1, config.WRITE_RETRY_LIMIT)
    for attempt in range(1, limit + 1):
        try:
            return operation()
        except ConcurrencyConflict as e:
            logger.warning(f"{description}: {e} (attempt {attempt}/{limit})")

    logger.error(f"{description}: gave up after {limit} conflicting writes")
    raise ServerFault(f"{description} could not be committed")
