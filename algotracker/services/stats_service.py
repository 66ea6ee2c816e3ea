"""
stats_service.py — Aggregate statistics
Totals, per-difficulty / per-platform / per-tag counts and the mean solve time.
"""

import logging

from sqlalchemy import select, func, distinct
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from algotracker.errors import StorageError
from algotracker.models.problem import Problem
from algotracker.models.problem_tag import problem_tags
from algotracker.models.tag import Tag

logger = logging.getLogger(__name__)


class StatsService:
    @staticmethod
    def get_statistics(db: Session) -> dict:
        try:
            total = db.scalar(select(func.count(Problem.id)))

            by_difficulty = dict(
                db.execute(
                    select(Problem.difficulty, func.count(Problem.id)).group_by(Problem.difficulty)
                ).all()
            )
            by_platform = dict(
                db.execute(
                    select(Problem.platform, func.count(Problem.id)).group_by(Problem.platform)
                ).all()
            )

            # Left join keeps tags that no problem uses
            by_tag = dict(
                db.execute(
                    select(Tag.name, func.count(distinct(problem_tags.c.problem_id)))
                    .select_from(Tag)
                    .outerjoin(problem_tags, Tag.id == problem_tags.c.tag_id)
                    .group_by(Tag.id, Tag.name)
                ).all()
            )

            # 0 means the time was not recorded, so it stays out of the mean
            average = db.scalar(
                select(func.coalesce(func.avg(Problem.solve_time), 0.0)).where(Problem.solve_time > 0)
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to compute statistics: {e}")
            raise StorageError(f"Failed to compute statistics: {e}") from e

        return {
            "total_problems": total or 0,
            "by_difficulty": by_difficulty,
            "by_platform": by_platform,
            "by_tag": by_tag,
            "average_solve_time": float(average or 0.0),
        }
