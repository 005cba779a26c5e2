from datetime import date, datetime

from accountability.schemas.goal import GoalStatus

BEHIND_PROGRESS_THRESHOLD = 50
BEHIND_DAYS_THRESHOLD = 7


def derive_status(current_progress: int, target_date: date, now) -> GoalStatus:
    """
    Compute a goal's lifecycle status from its latest progress.

    Rules are ordered: a finished goal stays completed even past its target
    date, and an untouched goal is not-started regardless of the date.
    """
    if isinstance(now, datetime):
        now = now.date()
    if isinstance(target_date, datetime):
        target_date = target_date.date()

    if current_progress == 100:
        return GoalStatus.COMPLETED
    if current_progress == 0:
        return GoalStatus.NOT_STARTED

    days_left = (target_date - now).days
    if days_left < 0 or (current_progress < BEHIND_PROGRESS_THRESHOLD and days_left < BEHIND_DAYS_THRESHOLD):
        return GoalStatus.BEHIND_SCHEDULE
    return GoalStatus.IN_PROGRESS
