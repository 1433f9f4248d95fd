"""Functional tests for the SQLAlchemy-backed position store and projections."""

from __future__ import annotations

import anyio
import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from folder_order.logic import repository_folders as repo
from folder_order.logic.cleanup import CleanupCoordinator
from folder_order.logic.errors import MembershipConflict, NotFound, SnapshotCorrupted
from folder_order.logic.repository_folders import SqlPositionStore
from folder_order.logic.snapshot import FOLDER_LIST, Edge, Side


def _folder(engine: Engine, name: str, position: int) -> str:
    return repo.create_folder(name, position, engine=engine)["id"]


def _source(engine: Engine, name: str, folder_id: str, position: int) -> str:
    return repo.create_source(name, folder_id, position, engine=engine)["id"]


def test_default_folder_is_seeded_outside_folder_list(engine: Engine) -> None:
    default_id = repo.get_default_folder_id(engine=engine)
    assert repo.read_snapshot(FOLDER_LIST, engine=engine).positions == []
    assert repo.read_snapshot(default_id, engine=engine).positions == []
    folders = repo.list_folders(engine=engine)
    assert [f["id"] for f in folders] == [default_id]
    assert folders[0]["is_default"] is True


def test_list_folders_orders_default_first_and_reports_next_position(engine: Engine) -> None:
    default_id = repo.get_default_folder_id(engine=engine)
    tech = _folder(engine, "Tech", 2000)
    news = _folder(engine, "News", 1000)
    _source(engine, "feed", tech, 1500)

    folders = repo.list_folders(engine=engine)
    assert [f["id"] for f in folders] == [default_id, news, tech]
    by_id = {f["id"]: f for f in folders}
    assert by_id[tech]["next_position"] == 2500
    assert by_id[news]["next_position"] == 1000

    without = repo.list_folders(exclude_folder_id=news, include_default=False, engine=engine)
    assert [f["id"] for f in without] == [tech]


def test_renumber_folder_list_preserves_order(engine: Engine) -> None:
    ids = [_folder(engine, f"f{n}", pos) for n, pos in enumerate([7, 8, 9, 4000])]
    assert repo.renumber(FOLDER_LIST, 1000, engine=engine) == 4
    snapshot = repo.read_snapshot(FOLDER_LIST, engine=engine)
    assert [s.id for s in snapshot] == ids
    assert snapshot.positions == [1000, 2000, 3000, 4000]
    default = repo.get_folder(repo.get_default_folder_id(engine=engine), engine=engine)
    assert default is not None and default["position"] == 0


def test_renumber_sources_is_idempotent(engine: Engine) -> None:
    folder = _folder(engine, "News", 1000)
    sources = [_source(engine, f"s{n}", folder, n + 1) for n in range(5)]
    repo.renumber(folder, 1000, engine=engine)
    first = repo.read_snapshot(folder, engine=engine)
    repo.renumber(folder, 1000, engine=engine)
    second = repo.read_snapshot(folder, engine=engine)
    assert first == second
    assert [s.id for s in second] == sources
    assert second.positions == [1000, 2000, 3000, 4000, 5000]


def test_renumber_unknown_folder_is_not_found(engine: Engine) -> None:
    with pytest.raises(NotFound):
        repo.renumber("no-such-folder", 1000, engine=engine)


def test_persist_move_across_folders(engine: Engine) -> None:
    f1 = _folder(engine, "One", 1000)
    f2 = _folder(engine, "Two", 2000)
    source = _source(engine, "feed", f1, 1000)

    repo.persist_move(source, f2, 500, from_collection_id=f1, engine=engine)
    assert repo.list_sources_in_folder(f1, engine=engine) == []
    assert repo.list_sources_in_folder(f2, engine=engine) == [{"id": source, "name": "feed", "position": 500}]


def test_persist_move_into_taken_position_conflicts(engine: Engine) -> None:
    folder = _folder(engine, "News", 1000)
    _source(engine, "a", folder, 1000)
    b = _source(engine, "b", folder, 2000)
    with pytest.raises(MembershipConflict):
        repo.persist_move(b, folder, 1000, engine=engine)
    assert repo.read_snapshot(folder, engine=engine).positions == [1000, 2000]


def test_persist_move_of_unknown_item_is_not_found(engine: Engine) -> None:
    folder = _folder(engine, "News", 1000)
    with pytest.raises(NotFound):
        repo.persist_move("ghost", folder, 1000, engine=engine)
    with pytest.raises(NotFound):
        repo.persist_move("ghost", FOLDER_LIST, 1000, engine=engine)


def test_persist_copy_requires_known_source(engine: Engine) -> None:
    folder = _folder(engine, "News", 1000)
    with pytest.raises(NotFound):
        repo.persist_copy("ghost", folder, 1000, engine=engine)


def test_sources_projection_excludes_requested_source(engine: Engine) -> None:
    folder = _folder(engine, "News", 1000)
    a = _source(engine, "a", folder, 1000)
    b = _source(engine, "b", folder, 2000)
    assert [s["id"] for s in repo.list_sources_in_folder(folder, engine=engine)] == [a, b]
    assert [s["id"] for s in repo.list_sources_in_folder(folder, exclude_source_id=a, engine=engine)] == [b]
    with pytest.raises(NotFound):
        repo.list_sources_in_folder("no-such-folder", engine=engine)


def test_delete_source_removes_every_membership(engine: Engine) -> None:
    f1 = _folder(engine, "One", 1000)
    f2 = _folder(engine, "Two", 2000)
    source = _source(engine, "feed", f1, 1000)
    repo.persist_copy(source, f2, 1000, engine=engine)

    repo.delete_source_from_folder(source, f1, engine=engine)
    assert repo.list_sources_in_folder(f1, engine=engine) == []
    repo.delete_source(source, engine=engine)
    assert repo.list_sources_in_folder(f2, engine=engine) == []
    with pytest.raises(NotFound):
        repo.delete_source(source, engine=engine)


def test_corrupted_rows_surface_as_snapshot_corrupted(engine: Engine) -> None:
    # Simulate legacy data written before the position check existed
    folder = _folder(engine, "News", 1000)
    _source(engine, "a", folder, 1000)
    with engine.begin() as conn:
        conn.execute(text("DROP INDEX uq_folder_sources_position"))
    _source(engine, "b", folder, 1000)
    with pytest.raises(SnapshotCorrupted):
        repo.read_snapshot(folder, engine=engine)
    # An explicit cleanup restores a valid order
    repo.renumber(folder, 1000, engine=engine)
    assert repo.read_snapshot(folder, engine=engine).positions == [1000, 2000]


def test_sql_store_resolves_exhaustion_through_renumber(engine: Engine) -> None:
    folder = _folder(engine, "News", 1000)
    a = _source(engine, "a", folder, 1000)
    _source(engine, "b", folder, 1001)
    store = SqlPositionStore(engine, step=1000)
    coordinator = CleanupCoordinator(store, step=1000)

    async def _resolve() -> int:
        return await coordinator.resolve(folder, a, Side.AFTER)

    assert anyio.run(_resolve) == 1500
    assert repo.read_snapshot(folder, engine=engine).positions == [1000, 2000]


def test_sql_store_appends_to_empty_folder(engine: Engine) -> None:
    folder = _folder(engine, "Empty", 1000)
    coordinator = CleanupCoordinator(SqlPositionStore(engine))

    async def _resolve() -> int:
        return await coordinator.resolve(folder, Edge.END, Side.AFTER)

    assert anyio.run(_resolve) == 1000


def test_folder_list_is_not_a_source_destination(engine: Engine) -> None:
    folder = _folder(engine, "News", 1000)
    source = _source(engine, "feed", folder, 1000)
    with pytest.raises(NotFound) as info:
        repo.persist_move(source, FOLDER_LIST, 5000, from_collection_id=folder, engine=engine)
    assert (info.value.kind, info.value.ident) == ("collection", FOLDER_LIST)
    with pytest.raises(NotFound) as info:
        repo.persist_copy(source, FOLDER_LIST, 5000, engine=engine)
    assert (info.value.kind, info.value.ident) == ("collection", FOLDER_LIST)
    assert repo.read_snapshot(folder, engine=engine).positions == [1000]
    assert repo.read_snapshot(FOLDER_LIST, engine=engine).positions == [1000]
