"""
api.py — JSON boundary
TrackerAPI is what a UI host calls: JSON strings in, a JSON envelope
{"success", "message", "data"} out. Errors never escape as exceptions.
"""

import logging
from functools import wraps
from typing import Any, Optional

import pydantic

from algotracker.config import DATABASE_PATH
from algotracker.database import Database
from algotracker.errors import TrackerError
from algotracker.schemas import ProblemFilter, ProblemSchema, Response, Statistics, TagSchema
from algotracker.services.problem_service import ProblemService
from algotracker.services.stats_service import StatsService
from algotracker.services.tag_service import TagService
from algotracker.services.transfer_service import TransferService

logger = logging.getLogger(__name__)


def success_response(message: str, data: Any = None) -> str:
    return Response(success=True, message=message, data=data).model_dump_json(exclude_none=True)


def error_response(message: str) -> str:
    return Response(success=False, message=message).model_dump_json(exclude_none=True)


def handle_errors(method):
    """Turn any exception raised by an API method into a failure envelope."""

    @wraps(method)
    def wrapper(*args, **kwargs) -> str:
        try:
            return method(*args, **kwargs)
        except TrackerError as e:
            logger.warning(f"{method.__name__} failed: {e.detail}")
            return error_response(e.detail)
        except pydantic.ValidationError as e:
            return error_response(f"Invalid JSON: {e}")
        except Exception as e:
            logger.error(f"Unexpected error in {method.__name__}: {e}", exc_info=True)
            return error_response(str(e))

    return wrapper


def _problem_json(problem) -> dict:
    return ProblemSchema.model_validate(problem).model_dump(mode="json")


def _tag_json(tag) -> dict:
    return TagSchema.model_validate(tag).model_dump(mode="json")


class TrackerAPI:
    def __init__(self, database: Optional[Database] = None):
        self.database = database or Database()

    # --- Database lifecycle ---

    @handle_errors
    def init_db(self, path: Optional[str] = None) -> str:
        self.database.initialize(path or DATABASE_PATH)
        return success_response("Database initialized successfully")

    @handle_errors
    def close_db(self) -> str:
        self.database.close()
        return success_response("Database closed successfully")

    # --- Problems ---

    @handle_errors
    def add_problem(self, json_data: str) -> str:
        problem = ProblemSchema.model_validate_json(json_data)
        with self.database.session() as db:
            created = ProblemService.create(db, problem.model_dump())
            return success_response("Problem added successfully", _problem_json(created))

    @handle_errors
    def update_problem(self, json_data: str) -> str:
        problem = ProblemSchema.model_validate_json(json_data)
        with self.database.session() as db:
            updated = ProblemService.update(db, problem.model_dump())
            # Unknown ids are not an error; echo the input back
            data = _problem_json(updated) if updated is not None else problem.model_dump(mode="json")
            return success_response("Problem updated successfully", data)

    @handle_errors
    def delete_problem(self, problem_id: int) -> str:
        with self.database.session() as db:
            ProblemService.delete(db, problem_id)
        return success_response("Problem deleted successfully")

    @handle_errors
    def get_problem(self, problem_id: int) -> str:
        with self.database.session() as db:
            problem = ProblemService.get_by_id(db, problem_id)
            return success_response("Problem retrieved successfully", _problem_json(problem))

    @handle_errors
    def get_problems(self, filter_json: str = "") -> str:
        problem_filter = None
        if filter_json and filter_json.strip() != "{}":
            try:
                problem_filter = ProblemFilter.model_validate_json(filter_json)
            except pydantic.ValidationError as e:
                return error_response(f"Invalid filter JSON: {e}")

        with self.database.session() as db:
            problems = ProblemService.get_all(db, problem_filter)
            return success_response(
                "Problems retrieved successfully", [_problem_json(p) for p in problems]
            )

    # --- Tags ---

    @handle_errors
    def add_tag(self, name: str) -> str:
        with self.database.session() as db:
            tag = TagService.create(db, name)
            return success_response("Tag added successfully", _tag_json(tag))

    @handle_errors
    def get_tags(self) -> str:
        with self.database.session() as db:
            tags = TagService.get_all(db)
            return success_response("Tags retrieved successfully", [_tag_json(t) for t in tags])

    @handle_errors
    def delete_tag(self, tag_id: int) -> str:
        with self.database.session() as db:
            TagService.delete(db, tag_id)
        return success_response("Tag deleted successfully")

    # --- Statistics ---

    @handle_errors
    def get_statistics(self) -> str:
        with self.database.session() as db:
            stats = Statistics(**StatsService.get_statistics(db))
        return success_response("Statistics retrieved successfully", stats.model_dump())

    # --- Export / import ---

    @handle_errors
    def export_data(self, fmt: str, file_path: str) -> str:
        exporters = {
            "json": TransferService.export_json,
            "csv": TransferService.export_csv,
        }
        if fmt not in exporters:
            return error_response("Invalid format. Use 'json' or 'csv'")

        with self.database.session() as db:
            count = exporters[fmt](db, file_path)
        return success_response("Data exported successfully", {"count": count})

    @handle_errors
    def import_data(self, fmt: str, file_path: str) -> str:
        if fmt != "json":
            return error_response("Only JSON import is supported")

        with self.database.session() as db:
            count = TransferService.import_json(db, file_path)
        return success_response("Data imported successfully", {"count": count})

    # --- Backup / restore ---

    @handle_errors
    def backup_database(self, backup_path: str) -> str:
        TransferService.backup(self.database, backup_path)
        return success_response("Database backed up successfully")

    @handle_errors
    def restore_database(self, backup_path: str) -> str:
        TransferService.restore(self.database, backup_path)
        return success_response("Database restored successfully")
