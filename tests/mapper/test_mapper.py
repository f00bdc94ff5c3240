import pytest

from rowmapper.adapters import ConnectionConfig, SQLiteAdapter
from rowmapper.errors import MapperNotFoundError, RowMapperError
from rowmapper.hooks import HookDispatcher
from rowmapper.mapper import Mapper, MapperLocator, Record, RecordSet
from rowmapper.table import RowStatus, Table, TableGateway

AUTHOR = Table("author", ["id", "name"], "id", autoincrement="id")
TAGGING = Table("tagging", ["thread_id", "tag", "weight"], ["thread_id", "tag"])


class AuthorRecord(Record):
    @property
    def shout(self):
        return self.name.upper()


class AuthorRecordSet(RecordSet):
    pass


@pytest.fixture
def adapter(tmp_path):
    adapter = SQLiteAdapter()
    adapter.connect(ConnectionConfig(url=f"sqlite:///{tmp_path / 'mapper.db'}"))
    adapter.execute('CREATE TABLE "author" (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)')
    adapter.execute(
        'CREATE TABLE "tagging" (thread_id INTEGER, tag TEXT, weight INTEGER, '
        "PRIMARY KEY (thread_id, tag))"
    )
    for name in ("Ada", "Grace", "Linus"):
        adapter.execute('INSERT INTO "author" (name) VALUES (?)', (name,))
    yield adapter
    adapter.close()


@pytest.fixture
def authors(adapter):
    return Mapper(
        TableGateway(AUTHOR, adapter),
        record_class=AuthorRecord,
        record_set_class=AuthorRecordSet,
    )


@pytest.fixture
def taggings(adapter):
    return Mapper(TableGateway(TAGGING, adapter))


def test_fetch_record_returns_same_instance(authors):
    first = authors.fetch_record(1)
    second = authors.fetch_record_by(name="Ada")
    assert isinstance(first, AuthorRecord)
    assert first.row is second.row
    assert first.shout == "ADA"


def test_fetch_record_missing_returns_none(authors):
    assert authors.fetch_record(42) is None
    assert authors.fetch_record_by(name="Nobody") is None


def test_fetch_record_set_by_primary_values(authors):
    records = authors.fetch_record_set([3, 1])
    assert isinstance(records, AuthorRecordSet)
    assert [record.name for record in records] == ["Linus", "Ada"]
    assert not authors.fetch_record_set([99])


def test_fetch_record_set_by_filters(authors):
    records = authors.fetch_record_set_by(name=["Ada", "Grace"])
    assert sorted(record.name for record in records) == ["Ada", "Grace"]
    assert not authors.fetch_record_set_by(name="Nobody")


def test_mapper_select_chains(authors):
    select = authors.select().where('"name" LIKE ?', "%a%").order_by("-name").limit(2)
    assert [record.name for record in select.fetch_record_set()] == ["Grace", "Ada"]
    assert authors.select(name="Ada").fetch_count() == 1
    assert authors.select().cols("id").fetch_all() == [{"id": 1}, {"id": 2}, {"id": 3}]


def test_partial_select_maps_clean_rows(authors):
    record = authors.select(id=2).cols("id").fetch_record()
    assert record.row.status is RowStatus.CLEAN
    assert not record.row.is_initialized("name")


def test_insert_update_delete_round_trip(authors, adapter):
    record = authors.new_record(name="Barbara")
    assert authors.insert(record) is True
    assert record.id == 4
    assert authors.fetch_record(4) is not None
    assert authors.fetch_record(4).row is record.row

    record.name = "Barbara L."
    assert authors.update(record) is True
    assert authors.update(record) is False

    assert authors.delete(record) is True
    assert authors.fetch_record(4) is None
    assert adapter.execute('SELECT COUNT(*) FROM "author"').fetchone()[0] == 3


def test_composite_primary_key(taggings):
    record = taggings.new_record(thread_id=1, tag="python", weight=3)
    taggings.insert(record)
    assert taggings.fetch_record({"thread_id": 1, "tag": "python"}) is not None
    assert taggings.fetch_record((1, "python")).row is record.row
    record.weight = 5
    assert taggings.update(record) is True
    assert taggings.fetch_record_set([(1, "python"), (2, "go")]).to_list() == [
        {"thread_id": 1, "tag": "python", "weight": 5}
    ]


def test_hooks_fire_around_writes(authors):
    events = []
    for event in ("before_insert", "modify_insert", "after_insert", "before_update", "after_update"):
        authors.hooks.register(event, lambda record, event=event, **ctx: events.append(event))

    record = authors.new_record(name="Barbara")
    authors.insert(record)
    authors.update(record)
    record.name = "B"
    authors.update(record)

    assert events == [
        "before_insert",
        "modify_insert",
        "after_insert",
        "before_update",
        "before_update",
        "after_update",
    ]


def test_modify_hook_can_change_statement(authors):
    @authors.hooks.on("modify_insert")
    def stamp(record, statement, **context):
        statement.cols["name"] = statement.cols["name"].title()

    record = authors.new_record(name="barbara")
    authors.insert(record)
    stored = authors.adapter.execute('SELECT name FROM "author" WHERE id = ?', (record.id,)).fetchone()
    assert stored[0] == "Barbara"


def test_modify_new_record_hook(authors):
    authors.hooks.register("modify_new_record", lambda record, **ctx: setattr(record, "name", "anon"))
    assert authors.new_record().name == "anon"


def test_mapper_rejects_foreign_rows(authors, taggings):
    with pytest.raises(RowMapperError):
        authors.insert(taggings.new_record(thread_id=1, tag="x"))


def test_related_names_must_not_shadow_columns(adapter):
    with pytest.raises(RowMapperError):
        Mapper(TableGateway(AUTHOR, adapter), related=("name",))


def test_locator_registers_mappers(authors, taggings):
    locator = MapperLocator()
    locator.register("author", authors)
    locator.register("tagging", taggings)
    assert locator.get("author") is authors
    assert "tagging" in locator
    assert len(locator) == 2
    with pytest.raises(MapperNotFoundError):
        locator.get("reply")
    with pytest.raises(ValueError):
        locator.register("author", taggings)


def test_mapper_hooks_inherit_parent_handlers(adapter):
    calls = []
    parent = HookDispatcher()
    parent.register("before_insert", lambda record, **ctx: calls.append("parent"))
    mapper = Mapper(TableGateway(AUTHOR, adapter), hooks=HookDispatcher(parent=parent))
    mapper.hooks.register("before_insert", lambda record, **ctx: calls.append("mapper"))
    mapper.insert(mapper.new_record(name="Barbara"))
    assert calls == ["parent", "mapper"]
