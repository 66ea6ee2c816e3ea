"""
problem_service.py — Problem records
CRUD for problems. Tag associations are written in the same transaction as
the problem row and replaced wholesale on update.
"""

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import select, insert, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from algotracker.database import utcnow
from algotracker.errors import NotFoundError, StorageError
from algotracker.models.problem import Problem
from algotracker.models.problem_tag import problem_tags
from algotracker.services.query_builder import ProblemQuery
from algotracker.services.tag_service import TagService
from algotracker.services.validation import validate_problem

logger = logging.getLogger(__name__)


def _tag_names(tags) -> list[str]:
    """Accepts names or {"name": ...} mappings; drops blanks and repeats, keeps order."""
    names = []
    for tag in tags or []:
        name = tag.get("name") if isinstance(tag, Mapping) else tag
        if name and name not in names:
            names.append(name)
    return names


def _fields(data: Mapping[str, Any]) -> dict:
    return {
        "name": data.get("name"),
        "link": data.get("link") or "",
        "platform": data.get("platform"),
        "difficulty": data.get("difficulty"),
        "solve_time": data.get("solve_time") or 0,
        "notes": data.get("notes") or "",
        "code_snippet": data.get("code_snippet") or "",
    }


class ProblemService:
    @staticmethod
    def _attach_tags(db: Session, problem_id: int, names: list[str]) -> None:
        for name in names:
            tag_id = TagService.get_or_create(db, name)
            db.execute(insert(problem_tags).values(problem_id=problem_id, tag_id=tag_id))

    @staticmethod
    def create(db: Session, data: Mapping[str, Any], created_at: Optional[datetime] = None) -> Problem:
        """
        Insert a problem and its tag associations in one transaction.

        Both timestamps are set to now. `created_at` overrides the creation
        time only, so imported records keep their original date.
        """
        validate_problem(data)
        names = _tag_names(data.get("tags"))
        now = utcnow()
        try:
            problem_id = db.execute(
                insert(Problem.__table__).values(
                    **_fields(data),
                    created_at=created_at or now,
                    updated_at=now,
                )
            ).inserted_primary_key[0]
            ProblemService._attach_tags(db, problem_id, names)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create problem {data.get('name')!r}: {e}")
            raise StorageError(f"Failed to create problem: {e}") from e

        logger.info(f"Created problem {problem_id} with {len(names)} tags")
        return ProblemService.get_by_id(db, problem_id)

    @staticmethod
    def update(db: Session, data: Mapping[str, Any]) -> Optional[Problem]:
        """
        Overwrite every mutable field and replace the tag set.

        Returns None when no problem has the given id; nothing is written then.
        """
        validate_problem(data)
        problem_id = data.get("id")
        names = _tag_names(data.get("tags"))
        try:
            result = db.execute(
                update(Problem.__table__)
                .where(Problem.id == problem_id)
                .values(**_fields(data), updated_at=utcnow())
            )
            if result.rowcount == 0:
                db.rollback()
                logger.info(f"Update skipped, problem {problem_id} does not exist")
                return None

            db.execute(delete(problem_tags).where(problem_tags.c.problem_id == problem_id))
            ProblemService._attach_tags(db, problem_id, names)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update problem {problem_id}: {e}")
            raise StorageError(f"Failed to update problem: {e}") from e

        return ProblemService.get_by_id(db, problem_id)

    @staticmethod
    def delete(db: Session, problem_id: int) -> None:
        try:
            db.execute(delete(Problem.__table__).where(Problem.id == problem_id))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete problem {problem_id}: {e}")
            raise StorageError(f"Failed to delete problem: {e}") from e

    @staticmethod
    def get_by_id(db: Session, problem_id: int) -> Problem:
        try:
            problem = db.execute(
                select(Problem)
                .where(Problem.id == problem_id)
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load problem {problem_id}: {e}")
            raise StorageError(f"Failed to load problem: {e}") from e
        if problem is None:
            raise NotFoundError(f"Problem {problem_id} not found")
        return problem

    @staticmethod
    def get_all(db: Session, problem_filter=None) -> list[Problem]:
        """Problems matching the filter, newest first. None means no filter."""
        query = ProblemQuery.from_filter(problem_filter)
        if logger.isEnabledFor(logging.DEBUG):
            sql, params = query.compile()
            logger.debug(f"Problem query: {sql} params={params}")
        try:
            return list(db.scalars(query.statement()).all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list problems: {e}")
            raise StorageError(f"Failed to list problems: {e}") from e
