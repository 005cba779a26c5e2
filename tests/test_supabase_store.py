"""
Tests for the Supabase-backed store with a mocked client
"""

import pytest
from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock

from postgrest.exceptions import APIError

from accountability.adapters.supabase_store import SupabaseStore, _ilike_pattern
from accountability.errors import ConcurrencyConflict, NotFoundError, ServerFault, ValidationError
from accountability.schemas.goal import Goal
from accountability.schemas.user import User
from accountability.services import goals as goal_service


GOAL_ID = "3f2b8c1e-6a4d-4e0f-9b7a-2c5d8e1f0a93"
ALICE_ID = "9c1d2e3f-4a5b-4c6d-8e7f-0a1b2c3d4e5f"


def _result(data):
    return SimpleNamespace(data=data)


@pytest.fixture
def supabase():
    return MagicMock()


@pytest.fixture
def supabase_store(supabase):
    return SupabaseStore(supabase)


@pytest.fixture
def goal():
    return Goal(id=GOAL_ID, user_id=ALICE_ID, title="Save money", target_date=date(2024, 12, 31), version=3)


def _goal_update_chain(supabase):
    return supabase.table.return_value.update.return_value.eq.return_value.eq.return_value.eq.return_value


def _goal_select_chain(supabase):
    return supabase.table.return_value.select.return_value.eq.return_value.eq.return_value


class TestGoalWrites:
    def test_versioned_update(self, supabase, supabase_store, goal):
        row = goal.model_dump(mode="json")
        row["version"] = 4
        _goal_update_chain(supabase).execute.return_value = _result([row])

        saved = supabase_store.save_goal(goal, 3)

        assert saved.version == 4
        sent = supabase.table.return_value.update.call_args[0][0]
        assert sent["version"] == 4
        assert "id" not in sent
        update = supabase.table.return_value.update.return_value
        update.eq.assert_called_with("id", GOAL_ID)
        update.eq.return_value.eq.return_value.eq.assert_called_with("version", 3)

    def test_no_row_updated_is_a_conflict(self, supabase, supabase_store, goal):
        _goal_update_chain(supabase).execute.return_value = _result([])
        _goal_select_chain(supabase).execute.return_value = _result([goal.model_dump(mode="json")])

        with pytest.raises(ConcurrencyConflict):
            supabase_store.save_goal(goal, 3)

    def test_no_row_and_no_goal_is_not_found(self, supabase, supabase_store, goal):
        _goal_update_chain(supabase).execute.return_value = _result([])
        _goal_select_chain(supabase).execute.return_value = _result([])

        with pytest.raises(NotFoundError):
            supabase_store.save_goal(goal, 3)

    def test_client_errors_become_server_faults(self, supabase, supabase_store, goal):
        _goal_update_chain(supabase).execute.side_effect = RuntimeError("connection refused")

        with pytest.raises(ServerFault) as excinfo:
            supabase_store.save_goal(goal, 3)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_get_goal_filters_by_owner(self, supabase, supabase_store, goal):
        _goal_select_chain(supabase).execute.return_value = _result([goal.model_dump(mode="json")])

        fetched = supabase_store.get_goal(GOAL_ID, ALICE_ID)

        assert fetched.title == "Save money"
        select = supabase.table.return_value.select.return_value
        select.eq.assert_called_with("id", GOAL_ID)
        select.eq.return_value.eq.assert_called_with("user_id", ALICE_ID)

    @pytest.mark.parametrize("goal_id, owner_id", [("xyz", ALICE_ID), (GOAL_ID, "alice")])
    def test_malformed_ids_are_absent(self, supabase, supabase_store, goal_id, owner_id):
        """Non-UUID ids never reach PostgREST, so they read as missing rather than failing"""
        assert supabase_store.get_goal(goal_id, owner_id) is None
        supabase.table.assert_not_called()

    def test_progress_on_malformed_goal_id_is_not_found(self, supabase, supabase_store):
        with pytest.raises(NotFoundError, match="Goal not found"):
            goal_service.record_progress(supabase_store, ALICE_ID, "not-a-uuid", 50)
        supabase.rpc.assert_not_called()


class TestUsers:
    def test_increment_score_uses_rpc(self, supabase, supabase_store):
        supabase.rpc.return_value.execute.return_value = _result(12)

        assert supabase_store.increment_score("alice", 5) == 12
        supabase.rpc.assert_called_with("increment_score", {"p_user_id": "alice", "p_amount": 5})

    def test_increment_unknown_user(self, supabase, supabase_store):
        supabase.rpc.return_value.execute.return_value = _result(None)
        with pytest.raises(NotFoundError):
            supabase_store.increment_score("ghost", 5)

    def test_save_user_never_writes_score(self, supabase, supabase_store):
        user = User(id="bob", name="Bob", email="bob@example.com", score=99, version=1)
        chain = supabase.table.return_value.update.return_value.eq.return_value.eq.return_value
        chain.execute.return_value = _result([user.model_dump(mode="json")])

        supabase_store.save_user(user, 1)

        sent = supabase.table.return_value.update.call_args[0][0]
        assert "score" not in sent
        assert sent["version"] == 2

    def test_malformed_user_id_is_absent(self, supabase, supabase_store):
        assert supabase_store.get_user("not-a-uuid") is None
        supabase.table.assert_not_called()

    def test_get_user_by_uuid(self, supabase, supabase_store):
        chain = supabase.table.return_value.select.return_value.eq.return_value
        chain.execute.return_value = _result([{"id": ALICE_ID, "name": "Alice", "email": "a@example.com"}])

        assert supabase_store.get_user(ALICE_ID).name == "Alice"
        supabase.table.return_value.select.return_value.eq.assert_called_with("id", ALICE_ID)

    def test_email_lookup_is_literal(self, supabase, supabase_store):
        chain = supabase.table.return_value.select.return_value.ilike.return_value
        chain.execute.return_value = _result([])

        assert supabase_store.find_user_by_email(" j_hn%@example.com ") is None
        supabase.table.return_value.select.return_value.ilike.assert_called_with(
            "email", "j\\_hn\\%@example.com"
        )

    def test_duplicate_insert_is_a_validation_error(self, supabase, supabase_store):
        supabase.table.return_value.insert.return_value.execute.side_effect = APIError({
            "code": "23505",
            "message": 'duplicate key value violates unique constraint "idx_users_email"',
        })
        user = User(id=ALICE_ID, name="Alice", email="a@example.com")

        with pytest.raises(ValidationError, match="User already exists"):
            supabase_store.create_user(user)

    def test_other_insert_errors_are_server_faults(self, supabase, supabase_store):
        supabase.table.return_value.insert.return_value.execute.side_effect = APIError({
            "code": "08006",
            "message": "connection failure",
        })
        user = User(id=ALICE_ID, name="Alice", email="a@example.com")

        with pytest.raises(ServerFault):
            supabase_store.create_user(user)

    def test_search_users(self, supabase, supabase_store):
        chain = supabase.table.return_value.select.return_value.neq.return_value.or_.return_value
        chain.execute.return_value = _result([{"id": "bob", "name": "Bob", "email": "bob@example.com"}])

        users = supabase_store.search_users("alice", "bo")

        assert [u.id for u in users] == ["bob"]
        supabase.table.return_value.select.return_value.neq.assert_called_with("id", "alice")
        supabase.table.return_value.select.return_value.neq.return_value.or_.assert_called_with(
            "name.ilike.%bo%,email.ilike.%bo%"
        )


class TestIlikePattern:
    def test_plain(self):
        assert _ilike_pattern("ann") == "%ann%"

    def test_strips_filter_syntax(self):
        assert _ilike_pattern('a,b(c)"') == "%abc%"

    def test_escapes_wildcards(self):
        assert _ilike_pattern("50%_off") == "%50\\%\\_off%"
