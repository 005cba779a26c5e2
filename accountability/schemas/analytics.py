from pydantic import BaseModel
from typing import Dict, List


class MonthlyPoint(BaseModel):
    month: str  # YYYY-MM
    label: str  # short month name, e.g. "Oct"
    goals: int
    progress: int
    score: int


class Analytics(BaseModel):
    category_data: Dict[str, int]
    monthly_progress: Dict[str, int]
    completion_rate: float
    streak: int
    time_series: List[MonthlyPoint]
    status_distribution: Dict[str, int]
    overdue_goals: int
    total_score: int
