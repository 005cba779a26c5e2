import logging
import uuid
from typing import List, Optional

from accountability.errors import ConcurrencyConflict, NotFoundError, ServerFault, ValidationError
from accountability.ports.store import IStore
from accountability.schemas.goal import Goal
from accountability.schemas.user import User

logger = logging.getLogger(__name__)

USERS = "users"
GOALS = "goals"

# Postgres SQLSTATE for a unique index violation
UNIQUE_VIOLATION = "23505"


def _is_uuid(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _ilike_pattern(query: str) -> str:
    # Characters that would break the PostgREST or() filter syntax are dropped,
    # LIKE wildcards in the user's text are escaped so matching stays literal
    cleaned = "".join(ch for ch in query if ch not in ',()"')
    return f"%{_escape_like(cleaned)}%"


class SupabaseStore(IStore):
    """
    Store backed by Supabase tables `users` and `goals` (see scripts/schema.sql).

    Versioned writes filter on the version column: an update that matches no
    row lost the race. Score increments go through the `increment_score`
    Postgres function so they are atomic on the database side.
    """

    def __init__(self, supabase):
        self.supabase = supabase

    def _execute(self, query, action: str, duplicate_message: Optional[str] = None):
        try:
            return query.execute()
        except Exception as e:
            if duplicate_message and getattr(e, "code", None) == UNIQUE_VIOLATION:
                logger.warning(f"Supabase {action} hit a unique index: {str(e)}")
                raise ValidationError(duplicate_message) from e
            logger.error(f"Supabase {action} failed: {str(e)}")
            raise ServerFault(f"Supabase {action} failed") from e

    # -------- Users --------

    def create_user(self, user: User) -> User:
        row = user.model_dump(mode="json")
        response = self._execute(
            self.supabase.table(USERS).insert(row),
            "user insert",
            duplicate_message="User already exists",
        )
        return User.model_validate(response.data[0])

    def get_user(self, user_id: str) -> Optional[User]:
        # ids are UUID columns; anything else can't name a row
        if not _is_uuid(user_id):
            return None
        response = self._execute(
            self.supabase.table(USERS).select("*").eq("id", user_id),
            "user fetch",
        )
        return User.model_validate(response.data[0]) if response.data else None

    def find_user_by_email(self, email: str) -> Optional[User]:
        response = self._execute(
            self.supabase.table(USERS).select("*").ilike("email", _escape_like(email.strip())),
            "user fetch by email",
        )
        return User.model_validate(response.data[0]) if response.data else None

    def search_users(self, excluding_user_id: str, query: str) -> List[User]:
        pattern = _ilike_pattern(query)
        response = self._execute(
            self.supabase
            .table(USERS)
            .select("*")
            .neq("id", excluding_user_id)
            .or_(f"name.ilike.{pattern},email.ilike.{pattern}"),
            "user search",
        )
        return [User.model_validate(row) for row in response.data]

    def save_user(self, user: User, expected_version: int) -> User:
        row = user.model_dump(mode="json", exclude={"id", "score", "created_at"})
        row["version"] = expected_version + 1
        response = self._execute(
            self.supabase
            .table(USERS)
            .update(row)
            .eq("id", user.id)
            .eq("version", expected_version),
            "user update",
        )
        if not response.data:
            if self.get_user(user.id) is None:
                raise NotFoundError("User not found")
            raise ConcurrencyConflict("user", user.id, expected_version)
        return User.model_validate(response.data[0])

    def increment_score(self, user_id: str, amount: int) -> int:
        response = self._execute(
            self.supabase.rpc("increment_score", {"p_user_id": user_id, "p_amount": amount}),
            "score increment",
        )
        if response.data is None:
            raise NotFoundError("User not found")
        return int(response.data)

    # -------- Goals --------

    def create_goal(self, goal: Goal) -> Goal:
        row = goal.model_dump(mode="json")
        response = self._execute(self.supabase.table(GOALS).insert(row), "goal insert")
        return Goal.model_validate(response.data[0])

    def get_goal(self, goal_id: str, owner_id: str) -> Optional[Goal]:
        if not (_is_uuid(goal_id) and _is_uuid(owner_id)):
            return None
        response = self._execute(
            self.supabase
            .table(GOALS)
            .select("*")
            .eq("id", goal_id)
            .eq("user_id", owner_id),
            "goal fetch",
        )
        return Goal.model_validate(response.data[0]) if response.data else None

    def list_goals(self, owner_id: str, public_only: bool = False) -> List[Goal]:
        query = self.supabase.table(GOALS).select("*").eq("user_id", owner_id)
        if public_only:
            query = query.eq("is_public", True)
        response = self._execute(query.order("created_at", desc=True), "goal list")
        return [Goal.model_validate(row) for row in response.data]

    def save_goal(self, goal: Goal, expected_version: int) -> Goal:
        row = goal.model_dump(mode="json", exclude={"id", "user_id", "created_at"})
        row["version"] = expected_version + 1
        response = self._execute(
            self.supabase
            .table(GOALS)
            .update(row)
            .eq("id", goal.id)
            .eq("user_id", goal.user_id)
            .eq("version", expected_version),
            "goal update",
        )
        if not response.data:
            if self.get_goal(goal.id, goal.user_id) is None:
                raise NotFoundError("Goal not found")
            raise ConcurrencyConflict("goal", goal.id, expected_version)
        return Goal.model_validate(response.data[0])
