from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from accountability import config
from accountability.schemas.analytics import Analytics, MonthlyPoint
from accountability.schemas.goal import Goal, GoalStatus, utcnow
from accountability.services.score import score_delta
from accountability.utils.numbers import round_half_up


def _utc_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


def _month_key(value) -> str:
    if isinstance(value, datetime):
        value = _utc_date(value)
    return f"{value.year:04d}-{value.month:02d}"


def category_data(goals: Iterable[Goal]) -> Dict[str, int]:
    counts = Counter(goal.category.value for goal in goals)
    return dict(counts)


def monthly_progress(goals: Iterable[Goal]) -> Dict[str, int]:
    # Raw sum per creation month, not an average
    totals = defaultdict(int)
    for goal in goals:
        totals[_month_key(goal.created_at)] += goal.current_progress
    return dict(sorted(totals.items()))


def completion_rate(goals: List[Goal]) -> float:
    if not goals:
        return 0.0
    completed = sum(1 for goal in goals if goal.current_progress == 100)
    return completed / len(goals) * 100


def streak(goals: Iterable[Goal], today: date, window: int = config.STREAK_WINDOW_DAYS) -> int:
    """Count consecutive days with at least one progress update, walking back from today."""
    active_days = {
        _utc_date(update.date)
        for goal in goals
        for update in goal.progress_updates
    }

    count = 0
    day = today
    while count < window and day in active_days:
        count += 1
        day -= timedelta(days=1)
    return count


def time_series(goals: List[Goal], today: date, months: int = config.TIME_SERIES_MONTHS) -> List[MonthlyPoint]:
    by_month = defaultdict(list)
    for goal in goals:
        by_month[_month_key(goal.created_at)].append(goal.current_progress)

    current_month = today.replace(day=1)
    points = []
    for offset in range(months - 1, -1, -1):
        month_start = current_month - relativedelta(months=offset)
        key = _month_key(month_start)
        progress_values = by_month.get(key, [])
        average = sum(progress_values) / len(progress_values) if progress_values else 0
        points.append(MonthlyPoint(
            month=key,
            label=month_start.strftime("%b"),
            goals=len(progress_values),
            progress=round_half_up(average),
            score=len(progress_values) * 10 + round_half_up(average * 0.5),
        ))
    return points


def status_distribution(goals: Iterable[Goal]) -> Dict[str, int]:
    counts = {status.value: 0 for status in GoalStatus}
    for goal in goals:
        counts[goal.status.value] += 1
    return counts


def overdue_goals(goals: Iterable[Goal], today: date) -> int:
    return sum(
        1 for goal in goals
        if goal.target_date < today and goal.status != GoalStatus.COMPLETED
    )


def total_score(goals: Iterable[Goal]) -> int:
    return sum(score_delta(goal.current_progress) for goal in goals)


def build_analytics(goals: List[Goal], now: Optional[datetime] = None) -> Analytics:
    today = _utc_date(now or utcnow())
    return Analytics(
        category_data=category_data(goals),
        monthly_progress=monthly_progress(goals),
        completion_rate=completion_rate(goals),
        streak=streak(goals, today),
        time_series=time_series(goals, today),
        status_distribution=status_distribution(goals),
        overdue_goals=overdue_goals(goals, today),
        total_score=total_score(goals),
    )


def get_analytics(store, owner_id: str, now: Optional[datetime] = None) -> Analytics:
    return build_analytics(store.list_goals(owner_id), now)
