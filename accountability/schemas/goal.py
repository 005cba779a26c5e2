from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime, timezone
from enum import Enum
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # naive datetimes are taken to be UTC already
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class GoalCategory(str, Enum):
    HEALTH = "health"
    CAREER = "career"
    EDUCATION = "education"
    FINANCE = "finance"
    PERSONAL = "personal"
    RELATIONSHIP = "relationship"
    OTHER = "other"


class GoalStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BEHIND_SCHEDULE = "behind-schedule"


class GoalPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# --- Progress ledger ---
class ProgressUpdate(BaseModel):
    date: datetime = Field(default_factory=utcnow)
    progress: int = Field(..., ge=0, le=100)
    notes: str = ""


class Milestone(BaseModel):
    title: str
    target_date: Optional[date] = None
    completed: bool = False


# --- Goals ---
class Goal(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    description: Optional[str] = None
    category: GoalCategory = GoalCategory.PERSONAL
    target_date: date
    current_progress: int = Field(0, ge=0, le=100)
    status: GoalStatus = GoalStatus.NOT_STARTED
    priority: GoalPriority = GoalPriority.MEDIUM
    is_public: bool = False
    progress_updates: List[ProgressUpdate] = Field(default_factory=list)
    milestones: List[Milestone] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    version: int = 0

    @property
    def latest_update(self) -> Optional[ProgressUpdate]:
        return self.progress_updates[-1] if self.progress_updates else None


class MilestoneCreate(BaseModel):
    title: str
    target_date: Optional[date] = None
    completed: bool = False


class GoalCreate(BaseModel):
    # title and target_date are Optional here so missing values surface as
    # field messages from the goal service, not as a 422
    title: Optional[str] = None
    description: Optional[str] = None
    category: GoalCategory = GoalCategory.PERSONAL
    target_date: Optional[date] = None
    priority: GoalPriority = GoalPriority.MEDIUM
    is_public: bool = False
    milestones: List[MilestoneCreate] = Field(default_factory=list)


class ProgressUpdateCreate(BaseModel):
    progress: int
    notes: Optional[str] = ""


class MilestoneCompletion(BaseModel):
    completed: bool


class GoalStats(BaseModel):
    total_goals: int
    completed_goals: int
    average_progress: int
    in_progress_goals: int
    behind_schedule: int


class GoalList(BaseModel):
    goals: List[Goal]
    stats: GoalStats
