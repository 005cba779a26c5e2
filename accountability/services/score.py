import logging

from accountability.utils.numbers import round_half_up

logger = logging.getLogger(__name__)


def score_delta(progress: int) -> int:
    return round_half_up(progress / 10)


def accrue_score(store, user_id: str, progress: int) -> int:
    """Add the points earned by a progress update to the user's score.

    Uses the store's atomic increment so concurrent updates never lose points.
    Scores only ever go up, even when progress moves backward.
    """
    delta = score_delta(progress)
    new_score = store.increment_score(user_id, delta)
    logger.info(f"Score for user {user_id} +{delta} -> {new_score}")
    return new_score
