from abc import ABC, abstractmethod
from typing import List, Optional

from accountability.schemas.goal import Goal
from accountability.schemas.user import User


class IStore(ABC):
    """Persistence boundary for users and goals.

    Entities handed out are copies; mutate them and write them back with
    the version they were read at.
    """

    # -------- Users --------

    @abstractmethod
    def create_user(self, user: User) -> User:
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""
        pass

    @abstractmethod
    def search_users(self, excluding_user_id: str, query: str) -> List[User]:
        """Case-insensitive substring match on name or email, caller excluded."""
        pass

    @abstractmethod
    def save_user(self, user: User, expected_version: int) -> User:
        """Commit only if the stored version still equals expected_version.

        Raises ConcurrencyConflict otherwise. Returns the user at its new version.
        """
        pass

    @abstractmethod
    def increment_score(self, user_id: str, amount: int) -> int:
        """Atomically add amount to the user's score and return the new score."""
        pass

    # -------- Goals --------

    @abstractmethod
    def create_goal(self, goal: Goal) -> Goal:
        pass

    @abstractmethod
    def get_goal(self, goal_id: str, owner_id: str) -> Optional[Goal]:
        """Returns None when the goal is missing or owned by someone else."""
        pass

    @abstractmethod
    def list_goals(self, owner_id: str, public_only: bool = False) -> List[Goal]:
        """Goals of one owner, newest first."""
        pass

    @abstractmethod
    def save_goal(self, goal: Goal, expected_version: int) -> Goal:
        """Same contract as save_user."""
        pass
