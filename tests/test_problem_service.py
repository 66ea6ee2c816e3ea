from datetime import datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from algotracker.errors import NotFoundError, StorageError, ValidationError
from algotracker.models import Problem, problem_tags
from algotracker.schemas import ProblemFilter
from algotracker.services.problem_service import ProblemService
from algotracker.services.tag_service import TagService


def _association_count(db) -> int:
    return db.scalar(select(func.count()).select_from(problem_tags))


def test_two_sum_scenario(db, make_problem):
    created = ProblemService.create(db, make_problem(tags=["Hash Map", "Array"]))

    fetched = ProblemService.get_by_id(db, created.id)
    assert fetched.tag_names == ["Array", "Hash Map"]

    easy = ProblemService.get_all(db, ProblemFilter(difficulty="Easy"))
    hard = ProblemService.get_all(db, ProblemFilter(difficulty="Hard"))
    assert created.id in [p.id for p in easy]
    assert created.id not in [p.id for p in hard]


def test_create_then_get_preserves_fields(db, make_problem):
    data = make_problem(tags=["Array"])
    created = ProblemService.create(db, data)
    fetched = ProblemService.get_by_id(db, created.id)

    for field in ("name", "link", "platform", "difficulty", "solve_time", "notes", "code_snippet"):
        assert getattr(fetched, field) == data[field]
    assert fetched.created_at == fetched.updated_at


def test_create_dedupes_tags_by_name(db, make_problem):
    created = ProblemService.create(
        db, make_problem(tags=["Array", {"name": "Array"}, "", "Two Pointers"])
    )
    assert created.tag_names == ["Array", "Two Pointers"]
    assert _association_count(db) == 2


def test_create_reuses_existing_tags(db, make_problem):
    ProblemService.create(db, make_problem(tags=["Array"]))
    ProblemService.create(db, make_problem(name="3Sum", tags=["Array"]))
    assert [t.name for t in TagService.get_all(db)] == ["Array"]


def test_ids_are_not_reused(db, make_problem):
    first_id = ProblemService.create(db, make_problem()).id
    ProblemService.delete(db, first_id)
    second = ProblemService.create(db, make_problem())
    assert second.id > first_id


def test_id_of_deleted_newest_problem_is_not_reused(db, make_problem):
    ProblemService.create(db, make_problem(name="A"))
    last_id = ProblemService.create(db, make_problem(name="B")).id
    ProblemService.delete(db, last_id)

    third = ProblemService.create(db, make_problem(name="C"))
    assert third.id > last_id


def test_create_rejects_invalid_problem(db, make_problem):
    with pytest.raises(ValidationError):
        ProblemService.create(db, make_problem(difficulty="easy", tags=["Array"]))
    assert ProblemService.get_all(db) == []
    assert TagService.get_all(db) == []


def test_create_rolls_back_on_failure(db, make_problem, monkeypatch):
    original = TagService.get_or_create

    def failing_get_or_create(session, name):
        if name == "Broken":
            raise SQLAlchemyError("tag insert failed")
        return original(session, name)

    monkeypatch.setattr(TagService, "get_or_create", staticmethod(failing_get_or_create))

    with pytest.raises(StorageError):
        ProblemService.create(db, make_problem(tags=["Array", "Broken"]))

    assert ProblemService.get_all(db) == []
    assert TagService.get_all(db) == []
    assert _association_count(db) == 0


def test_get_missing_problem_raises(db):
    with pytest.raises(NotFoundError):
        ProblemService.get_by_id(db, 42)


def test_update_replaces_fields_and_tags(db, make_problem):
    created = ProblemService.create(db, make_problem(tags=["Array", "Hash Map"]))
    created_at = created.created_at
    first_updated_at = created.updated_at

    updated = ProblemService.update(
        db,
        make_problem(
            id=created.id,
            name="Two Sum II",
            difficulty="Medium",
            solve_time=25,
            tags=["Two Pointers", "Array"],
        ),
    )

    assert updated.name == "Two Sum II"
    assert updated.difficulty == "Medium"
    assert updated.solve_time == 25
    assert updated.tag_names == ["Array", "Two Pointers"]
    assert updated.created_at == created_at
    assert updated.updated_at >= first_updated_at
    # Hash Map lost its only problem but the tag itself stays
    assert [t.name for t in TagService.get_all(db)] == ["Array", "Hash Map", "Two Pointers"]


def test_update_is_idempotent(db, make_problem):
    created = ProblemService.create(db, make_problem(tags=["Array"]))
    change = make_problem(id=created.id, notes="use a dict", tags=["Array", "Hash Map"])

    once = ProblemService.update(db, change)
    snapshot = (once.name, once.notes, once.difficulty, once.created_at, once.tag_names)
    twice = ProblemService.update(db, change)

    assert (twice.name, twice.notes, twice.difficulty, twice.created_at, twice.tag_names) == snapshot
    assert _association_count(db) == 2


def test_update_can_clear_tags(db, make_problem):
    created = ProblemService.create(db, make_problem(tags=["Array"]))
    updated = ProblemService.update(db, make_problem(id=created.id, tags=[]))
    assert updated.tag_names == []
    assert _association_count(db) == 0


def test_update_missing_problem_returns_none(db, make_problem):
    assert ProblemService.update(db, make_problem(id=777, tags=["Array"])) is None
    assert ProblemService.get_all(db) == []
    assert TagService.get_all(db) == []


def test_update_validates_first(db, make_problem):
    created = ProblemService.create(db, make_problem())
    with pytest.raises(ValidationError):
        ProblemService.update(db, make_problem(id=created.id, platform=""))
    assert ProblemService.get_by_id(db, created.id).platform == "LeetCode"


def test_delete_removes_associations_keeps_tags(db, make_problem):
    problem_id = ProblemService.create(db, make_problem(tags=["Array", "Hash Map"])).id
    ProblemService.delete(db, problem_id)

    with pytest.raises(NotFoundError):
        ProblemService.get_by_id(db, problem_id)
    assert _association_count(db) == 0
    assert [t.name for t in TagService.get_all(db)] == ["Array", "Hash Map"]


def test_delete_missing_problem_is_noop(db, make_problem):
    ProblemService.create(db, make_problem())
    ProblemService.delete(db, 12345)
    assert len(ProblemService.get_all(db)) == 1


def test_get_all_newest_first(db, make_problem):
    ProblemService.create(db, make_problem(name="old"), created_at=datetime(2023, 5, 1, 9, 0))
    ProblemService.create(db, make_problem(name="newest"), created_at=datetime(2024, 5, 1, 9, 0))
    ProblemService.create(db, make_problem(name="middle"), created_at=datetime(2024, 1, 1, 9, 0))

    assert [p.name for p in ProblemService.get_all(db)] == ["newest", "middle", "old"]


def test_get_all_loads_tags(db, make_problem):
    ProblemService.create(db, make_problem(tags=["Graph", "BFS"]))
    (problem,) = ProblemService.get_all(db, None)
    assert problem.tag_names == ["BFS", "Graph"]


def test_created_at_override_keeps_updated_at_now(db, make_problem):
    problem = ProblemService.create(db, make_problem(), created_at=datetime(2020, 2, 3, 4, 5, 6))
    assert problem.created_at == datetime(2020, 2, 3, 4, 5, 6)
    assert problem.updated_at > problem.created_at
    assert db.scalar(select(func.count(Problem.id))) == 1
