import threading
from typing import Dict, List, Optional

from accountability.errors import ConcurrencyConflict, NotFoundError
from accountability.ports.store import IStore
from accountability.schemas.goal import Goal
from accountability.schemas.user import User


class MemoryStore(IStore):
    """In-process store; every operation runs under one lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, User] = {}
        self._goals: Dict[str, Goal] = {}

    # -------- Users --------

    def create_user(self, user: User) -> User:
        with self._lock:
            stored = user.model_copy(deep=True)
            self._users[stored.id] = stored
            return stored.model_copy(deep=True)

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy(deep=True) if user else None

    def find_user_by_email(self, email: str) -> Optional[User]:
        needle = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email.lower() == needle:
                    return user.model_copy(deep=True)
        return None

    def search_users(self, excluding_user_id: str, query: str) -> List[User]:
        needle = query.lower()
        with self._lock:
            return [
                user.model_copy(deep=True)
                for user in self._users.values()
                if user.id != excluding_user_id
                and (needle in user.name.lower() or needle in user.email.lower())
            ]

    def save_user(self, user: User, expected_version: int) -> User:
        with self._lock:
            current = self._users.get(user.id)
            if current is None:
                raise NotFoundError("User not found")
            if current.version != expected_version:
                raise ConcurrencyConflict("user", user.id, expected_version)
            # score is owned by increment_score and never written back from a copy
            stored = user.model_copy(deep=True, update={
                "version": expected_version + 1,
                "score": current.score,
            })
            self._users[user.id] = stored
            return stored.model_copy(deep=True)

    def increment_score(self, user_id: str, amount: int) -> int:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError("User not found")
            user.score += amount
            return user.score

    # -------- Goals --------

    def create_goal(self, goal: Goal) -> Goal:
        with self._lock:
            stored = goal.model_copy(deep=True)
            self._goals[stored.id] = stored
            return stored.model_copy(deep=True)

    def get_goal(self, goal_id: str, owner_id: str) -> Optional[Goal]:
        with self._lock:
            goal = self._goals.get(goal_id)
            if goal is None or goal.user_id != owner_id:
                return None
            return goal.model_copy(deep=True)

    def list_goals(self, owner_id: str, public_only: bool = False) -> List[Goal]:
        with self._lock:
            goals = [
                goal.model_copy(deep=True)
                for goal in self._goals.values()
                if goal.user_id == owner_id and (goal.is_public or not public_only)
            ]
        goals.sort(key=lambda g: g.created_at, reverse=True)
        return goals

    def save_goal(self, goal: Goal, expected_version: int) -> Goal:
        with self._lock:
            current = self._goals.get(goal.id)
            if current is None:
                raise NotFoundError("Goal not found")
            if current.version != expected_version:
                raise ConcurrencyConflict("goal", goal.id, expected_version)
            stored = goal.model_copy(deep=True, update={"version": expected_version + 1})
            self._goals[goal.id] = stored
            return stored.model_copy(deep=True)
