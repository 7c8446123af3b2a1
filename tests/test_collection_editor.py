"""Tests for reorderable progress-list editing."""

import pytest
from pydantic import ValidationError

from app.exceptions import ItemNotFoundException
from app.submission.models import Goal
from app.submission.services import collection_editor as editor


@pytest.fixture
def goals():
    return [Goal(id=f"g{i}", name=f"Goal {i}") for i in range(4)]


def _ids(items):
    return [item.id for item in items]


class TestInsert:

    def test_appends_by_default(self, goals):
        result = editor.insert(goals, Goal(id="new"))

        assert _ids(result) == ["g0", "g1", "g2", "g3", "new"]
        assert _ids(goals) == ["g0", "g1", "g2", "g3"]

    def test_inserts_at_clamped_index(self, goals):
        assert _ids(editor.insert(goals, Goal(id="a"), 1))[1] == "a"
        assert _ids(editor.insert(goals, Goal(id="b"), 99))[-1] == "b"
        assert _ids(editor.insert(goals, Goal(id="c"), -5))[0] == "c"

    def test_rejects_duplicate_ids(self, goals):
        with pytest.raises(ValueError):
            editor.insert(goals, Goal(id="g1"))

    def test_new_items_get_unique_ids(self):
        assert Goal().id != Goal().id


class TestRemoveAndUpdate:

    def test_remove_by_id(self, goals):
        assert _ids(editor.remove_by_id(goals, "g2")) == ["g0", "g1", "g3"]

    def test_remove_unknown_id(self, goals):
        with pytest.raises(ItemNotFoundException) as exc_info:
            editor.remove_by_id(goals, "missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.item_id == "missing"

    def test_update_returns_validated_copy(self, goals):
        result = editor.update_by_id(goals, "g1", status="completed", notes="Done")

        assert result[1].status == "completed"
        assert result[1].notes == "Done"
        assert goals[1].status == "not-started"
        assert result[0] is goals[0]

    def test_update_rejects_invalid_values(self, goals):
        with pytest.raises(ValidationError):
            editor.update_by_id(goals, "g1", status="abandoned")

    def test_ids_are_immutable(self, goals):
        with pytest.raises(ValueError):
            editor.update_by_id(goals, "g1", id="other")


class TestMove:

    def test_move_item_by_index(self, goals):
        assert _ids(editor.move_item(goals, 0, 2)) == ["g1", "g2", "g0", "g3"]

    def test_move_to_by_id(self, goals):
        assert _ids(editor.move_to(goals, "g3", 0)) == ["g3", "g0", "g1", "g2"]

    def test_move_clamps_target(self, goals):
        assert _ids(editor.move_to(goals, "g0", 42)) == ["g1", "g2", "g3", "g0"]

    def test_move_keeps_item_identity(self, goals):
        result = editor.move_to(goals, "g2", 0)

        assert result[0] is goals[2]
        assert sorted(_ids(result)) == sorted(_ids(goals))

    def test_move_item_out_of_range(self, goals):
        with pytest.raises(IndexError):
            editor.move_item(goals, 7, 0)
