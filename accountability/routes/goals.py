from fastapi import APIRouter, Depends
from accountability.schemas.goal import GoalCreate, ProgressUpdateCreate, MilestoneCreate, MilestoneCompletion
from accountability.dependencies.auth import current_user_context
from accountability.services import goals as goal_service
from accountability.services.analytics import get_analytics

router = APIRouter()

# -------- Goals --------

@router.post("/goal", status_code=201)
def create_goal(goal: GoalCreate, context=Depends(current_user_context)):
    return goal_service.create_goal(context["store"], context["user_id"], goal)

@router.get("/goals")
def get_goals(context=Depends(current_user_context)):
    return goal_service.list_goals(context["store"], context["user_id"])

@router.get("/analytics")
def get_goal_analytics(context=Depends(current_user_context)):
    return get_analytics(context["store"], context["user_id"])

@router.get("/goal/{goal_id}")
def get_goal(goal_id: str, context=Depends(current_user_context)):
    return goal_service.get_goal(context["store"], context["user_id"], goal_id)

# -------- Progress --------

@router.patch("/goal/{goal_id}/progress")
def update_goal_progress(goal_id: str, update: ProgressUpdateCreate, context=Depends(current_user_context)):
    return goal_service.record_progress(
        context["store"],
        context["user_id"],
        goal_id,
        update.progress,
        update.notes,
    )

# -------- Milestones --------

@router.post("/goal/{goal_id}/milestones", status_code=201)
def add_milestone(goal_id: str, milestone: MilestoneCreate, context=Depends(current_user_context)):
    return goal_service.add_milestone(context["store"], context["user_id"], goal_id, milestone)

@router.patch("/goal/{goal_id}/milestones/{index}")
def update_milestone(goal_id: str, index: int, body: MilestoneCompletion, context=Depends(current_user_context)):
    return goal_service.set_milestone_completed(
        context["store"],
        context["user_id"],
        goal_id,
        index,
        body.completed,
    )
