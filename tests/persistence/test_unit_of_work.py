import pytest

from rowmapper.adapters import ConnectionConfig, SQLiteAdapter
from rowmapper.config import Settings
from rowmapper.errors import CannotUpdateError, TransactionError, UnexpectedRowCountError
from rowmapper.persistence import Session, TransactionState
from rowmapper.table import RowStatus, Table

AUTHOR = Table("author", ["id", "name"], "id", autoincrement="id")
THREAD = Table("thread", ["id", "author_id", "title"], "id", autoincrement="id")


@pytest.fixture
def session(tmp_path):
    session = Session(
        SQLiteAdapter(),
        connection_config=ConnectionConfig(url=f"sqlite:///{tmp_path / 'uow.db'}"),
        settings=Settings(),
    )
    session.execute('CREATE TABLE "author" (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL)')
    session.execute(
        'CREATE TABLE "thread" (id INTEGER PRIMARY KEY AUTOINCREMENT, author_id INTEGER, title TEXT NOT NULL)'
    )
    session.register(AUTHOR)
    session.register(THREAD)
    yield session
    session.close()


def count(session, table):
    return session.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]


def test_exec_runs_work_in_order_and_commits(session):
    author = session.new_record("author", name="Ada")
    thread = session.new_record("thread", author_id=1, title="Hello")
    transaction = session.new_transaction()
    transaction.insert(author)
    transaction.insert(thread)

    assert [work.operation for work in transaction.get_plan()] == ["insert", "insert"]
    assert transaction.exec() is True
    assert transaction.state is TransactionState.COMMITTED
    assert [work.result for work in transaction.get_completed()] == [True, True]
    assert transaction.get_failed() is None
    assert author.id == 1 and thread.id == 1
    assert count(session, "thread") == 1


def test_failure_rolls_back_storage_and_memory(session):
    existing = session.new_record("author", name="Ada")
    assert session.insert(existing)

    existing.name = "Ada L."
    fresh = session.new_record("author", name="Grace")
    broken = session.new_record("thread", author_id=1)  # title is NOT NULL

    transaction = session.new_transaction()
    transaction.update(existing)
    transaction.insert(fresh)
    transaction.insert(broken)

    assert transaction.exec() is False
    assert transaction.state is TransactionState.ROLLED_BACK
    assert [work.record for work in transaction.get_completed()] == [existing, fresh]
    assert transaction.get_failed().record is broken
    assert transaction.get_exception() is not None

    assert count(session, "author") == 1
    assert session.execute('SELECT name FROM "author"').fetchone()[0] == "Ada"

    assert existing.row.status is RowStatus.DIRTY
    assert existing.name == "Ada L."
    assert existing.row.get_initial()["name"] == "Ada"
    assert fresh.row.status is RowStatus.NEW
    assert fresh.id is None
    assert session.fetch_record("author", 2) is None
    assert broken.row.status is RowStatus.NEW


def test_rolled_back_records_can_be_retried(session):
    author = session.new_record("author", name="Ada")
    broken = session.new_record("thread", author_id=1)
    transaction = session.new_transaction()
    transaction.insert(author)
    transaction.insert(broken)
    assert transaction.exec() is False

    broken.title = "Fixed"
    retry = session.new_transaction()
    retry.insert(author)
    retry.insert(broken)
    assert retry.exec() is True
    assert count(session, "author") == 1


def test_state_errors_stop_execution(session):
    author = session.new_record("author", name="Ada")
    transaction = session.new_transaction()
    transaction.update(author)
    assert transaction.exec() is False
    assert isinstance(transaction.get_exception(), CannotUpdateError)
    assert transaction.get_completed() == []


def test_transaction_runs_once(session):
    transaction = session.new_transaction()
    transaction.insert(session.new_record("author", name="Ada"))
    transaction.exec()
    with pytest.raises(TransactionError):
        transaction.exec()
    with pytest.raises(TransactionError):
        transaction.insert(session.new_record("author", name="Grace"))


def test_planning_requires_records(session):
    with pytest.raises(TypeError):
        session.new_transaction().insert({"name": "Ada"})


def test_delete_of_vanished_row_completes_with_false(session):
    author = session.new_record("author", name="Ada")
    session.insert(author)
    session.execute('DELETE FROM "author"')
    transaction = session.new_transaction()
    transaction.delete(author)
    assert transaction.exec() is True
    assert transaction.get_completed()[0].result is False
    assert author.row.status is RowStatus.DELETED


def test_exec_inside_outer_transaction_uses_savepoint(session):
    with session.transaction():
        session.insert(session.new_record("author", name="Ada"))
        transaction = session.new_transaction()
        transaction.insert(session.new_record("thread", author_id=1))
        assert transaction.exec() is False
    assert count(session, "author") == 1
    assert count(session, "thread") == 0


def test_outer_rollback_restores_rows_from_inner_transactions(session):
    author = session.new_record("author", name="Ada")
    with pytest.raises(RuntimeError):
        with session.transaction():
            assert session.insert(author) is True
            assert author.row.status is RowStatus.CLEAN
            raise RuntimeError("abort")
    assert count(session, "author") == 0
    assert author.row.status is RowStatus.NEW
    assert author.id is None


def test_commit_failure_is_reported(session, monkeypatch):
    def failing_commit():
        raise UnexpectedRowCountError(0)

    author = session.new_record("author", name="Ada")
    transaction = session.new_transaction()
    transaction.insert(author)
    monkeypatch.setattr(session.adapter, "commit", failing_commit)
    assert transaction.exec() is False
    assert isinstance(transaction.get_exception(), UnexpectedRowCountError)
    assert author.row.status is RowStatus.NEW


class MiscountingCursor:
    def __init__(self, cursor, rowcount):
        self._cursor = cursor
        self.rowcount = rowcount

    def __getattr__(self, name):
        return getattr(self._cursor, name)


def test_row_count_mismatch_stops_before_later_work(session, monkeypatch):
    doomed = session.new_record("author", name="Linus")
    session.insert(doomed)
    a = session.new_record("author", name="Ada")
    b = session.new_record("thread", author_id=1, title="Hello")
    c = doomed

    execute = session.adapter.execute

    def miscounting_execute(sql, params=None):
        cursor = execute(sql, params)
        if sql.startswith('INSERT INTO "thread"'):
            return MiscountingCursor(cursor, 2)
        return cursor

    monkeypatch.setattr(session.adapter, "execute", miscounting_execute)

    transaction = session.new_transaction()
    transaction.insert(a)
    work_b = transaction.insert(b)
    work_c = transaction.delete(c)
    assert transaction.exec() is False

    assert transaction.get_failed() is work_b
    assert isinstance(transaction.get_exception(), UnexpectedRowCountError)
    assert transaction.get_exception().count == 2
    assert [work.record for work in transaction.get_completed()] == [a]
    assert work_c.pending
    assert c.row.status is RowStatus.CLEAN
    assert a.row.status is RowStatus.NEW

    monkeypatch.undo()
    assert count(session, "author") == 1
    assert count(session, "thread") == 0
