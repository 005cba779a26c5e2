import logging
from datetime import datetime
from typing import List, Optional

from accountability.errors import DomainError, NotFoundError, ValidationError
from accountability.schemas.goal import (
    Goal,
    GoalCreate,
    GoalList,
    GoalStats,
    GoalStatus,
    Milestone,
    MilestoneCreate,
    ProgressUpdate,
    as_utc,
    utcnow,
)
from accountability.services.score import accrue_score, score_delta
from accountability.services.status import derive_status
from accountability.services.versioned import retry_on_conflict
from accountability.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

TITLE_MAX = 100
DESCRIPTION_MAX = 500
NOTES_MAX = 300


def _validate_milestone(milestone: MilestoneCreate):
    if not milestone.title or not milestone.title.strip():
        raise ValidationError("Milestone title is required")


def validate_goal_input(data: GoalCreate):
    title = (data.title or "").strip()
    if not title:
        raise ValidationError("Please provide a goal title")
    if len(title) > TITLE_MAX:
        raise ValidationError(f"Title cannot be more than {TITLE_MAX} characters")
    if data.description and len(data.description) > DESCRIPTION_MAX:
        raise ValidationError(f"Description cannot be more than {DESCRIPTION_MAX} characters")
    if data.target_date is None:
        raise ValidationError("Please provide a target date")
    for milestone in data.milestones:
        _validate_milestone(milestone)


def validate_progress_input(progress: int, notes: Optional[str]):
    if progress is None or not 0 <= progress <= 100:
        raise ValidationError("Progress must be between 0 and 100")
    if notes and len(notes) > NOTES_MAX:
        raise ValidationError(f"Notes cannot be more than {NOTES_MAX} characters")


def create_goal(store, owner_id: str, data: GoalCreate, now: Optional[datetime] = None) -> Goal:
    validate_goal_input(data)
    if store.get_user(owner_id) is None:
        raise NotFoundError("User not found")

    goal = Goal(
        user_id=owner_id,
        title=data.title.strip(),
        description=data.description,
        category=data.category,
        target_date=data.target_date,
        priority=data.priority,
        is_public=data.is_public,
        milestones=[Milestone(**m.model_dump()) for m in data.milestones],
        created_at=as_utc(now) if now else utcnow(),
    )
    created = store.create_goal(goal)
    logger.info(f"Created goal {created.id} for user {owner_id}")
    return created


def get_goal(store, owner_id: str, goal_id: str) -> Goal:
    goal = store.get_goal(goal_id, owner_id)
    if goal is None:
        raise NotFoundError("Goal not found")
    return goal


def goal_stats(goals: List[Goal]) -> GoalStats:
    total = len(goals)
    average = sum(g.current_progress for g in goals) / total if total else 0
    return GoalStats(
        total_goals=total,
        completed_goals=sum(1 for g in goals if g.current_progress == 100),
        average_progress=round_half_up(average),
        in_progress_goals=sum(1 for g in goals if g.status == GoalStatus.IN_PROGRESS),
        behind_schedule=sum(1 for g in goals if g.status == GoalStatus.BEHIND_SCHEDULE),
    )


def list_goals(store, owner_id: str) -> GoalList:
    goals = store.list_goals(owner_id)
    return GoalList(goals=goals, stats=goal_stats(goals))


def record_progress(
    store,
    owner_id: str,
    goal_id: str,
    progress: int,
    notes: Optional[str] = "",
    now: Optional[datetime] = None,
) -> Goal:
    """
    Append a progress observation to a goal's ledger.

    The goal's current progress and status follow the new entry, the write
    is versioned and retried on conflict, and the owner earns score points
    once the entry is committed.
    """
    validate_progress_input(progress, notes)
    now = as_utc(now) if now else utcnow()

    def apply():
        goal = get_goal(store, owner_id, goal_id)
        expected_version = goal.version

        goal.progress_updates.append(ProgressUpdate(date=now, progress=progress, notes=notes or ""))
        goal.current_progress = progress
        goal.status = derive_status(goal.current_progress, goal.target_date, now)

        return store.save_goal(goal, expected_version)

    updated = retry_on_conflict(apply, f"Progress update on goal {goal_id}")
    logger.info(f"Goal {goal_id} progress -> {progress} ({updated.status.value})")

    # The ledger entry is already committed; a failed accrual is not retried
    try:
        accrue_score(store, owner_id, progress)
    except DomainError as e:
        logger.error(
            f"Score accrual failed for goal {goal_id}: user {owner_id} missed "
            f"+{score_delta(progress)} after a committed update: {e.message}"
        )
        raise
    return updated


def add_milestone(store, owner_id: str, goal_id: str, milestone: MilestoneCreate) -> Goal:
    _validate_milestone(milestone)

    def apply():
        goal = get_goal(store, owner_id, goal_id)
        expected_version = goal.version
        goal.milestones.append(Milestone(**milestone.model_dump()))
        return store.save_goal(goal, expected_version)

    return retry_on_conflict(apply, f"Milestone add on goal {goal_id}")


def set_milestone_completed(store, owner_id: str, goal_id: str, index: int, completed: bool) -> Goal:
    def apply():
        goal = get_goal(store, owner_id, goal_id)
        if not 0 <= index < len(goal.milestones):
            raise NotFoundError("Milestone not found")
        expected_version = goal.version
        goal.milestones[index].completed = completed
        return store.save_goal(goal, expected_version)

    return retry_on_conflict(apply, f"Milestone update on goal {goal_id}")
