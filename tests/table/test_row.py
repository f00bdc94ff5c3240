import pytest

from rowmapper.errors import ImmutableRowError, UnknownColumnError
from rowmapper.table import Row, RowStatus, Table

AUTHOR = Table("author", ["id", "name", "email"], "id", autoincrement="id")


def clean_row(**values):
    return Row(AUTHOR, values or {"id": 1, "name": "Ada", "email": "ada@example.com"}, status=RowStatus.CLEAN)


def test_new_row_is_new_and_writable():
    row = Row(AUTHOR, {"name": "Ada"})
    assert row.status is RowStatus.NEW
    row.id = 10
    row["email"] = "ada@example.com"
    assert row.to_dict() == {"name": "Ada", "id": 10, "email": "ada@example.com"}
    assert row.status is RowStatus.NEW


def test_clean_row_becomes_dirty_on_change():
    row = clean_row()
    assert row.status is RowStatus.CLEAN
    row.name = "Grace"
    assert row.status is RowStatus.DIRTY
    assert row.get_dirty_columns() == {"name": "Grace"}
    assert row.get_initial()["name"] == "Ada"


def test_assigning_equal_value_keeps_row_clean():
    row = clean_row()
    row.name = "Ada"
    assert row.status is RowStatus.CLEAN
    assert not row.has_dirty_columns()


def test_reverting_change_leaves_no_dirty_columns():
    row = clean_row()
    row.name = "Grace"
    row.name = "Ada"
    assert row.status is RowStatus.DIRTY
    assert row.get_dirty_columns() == {}


def test_primary_key_of_stored_row_is_immutable():
    row = clean_row()
    with pytest.raises(ImmutableRowError):
        row.id = 2
    row.id = 1
    assert row.status is RowStatus.CLEAN


def test_deleted_row_rejects_writes():
    row = clean_row()
    row._mark_deleted()
    with pytest.raises(ImmutableRowError):
        row.name = "Grace"


def test_unknown_columns_raise():
    row = clean_row()
    with pytest.raises(UnknownColumnError):
        row["nickname"] = "x"
    with pytest.raises(UnknownColumnError):
        row.get("nickname")
    with pytest.raises(AttributeError):
        row.nickname


def test_partially_selected_row_tracks_initialized_columns():
    row = Row(AUTHOR, {"id": 1, "name": "Ada"}, status=RowStatus.CLEAN)
    assert row.email is None
    assert not row.is_initialized("email")
    row.email = None
    assert row.is_initialized("email")
    assert row.get_dirty_columns() == {"email": None}


def test_memento_round_trip_restores_state():
    row = clean_row()
    memento = row.memento()
    row.name = "Grace"
    row._mark_clean()
    row.restore(memento)
    assert row.status is RowStatus.CLEAN
    assert row.name == "Ada"
    assert row.get_initial()["name"] == "Ada"


def test_rows_cannot_start_dirty():
    with pytest.raises(ValueError):
        Row(AUTHOR, {"id": 1}, status=RowStatus.DIRTY)
