"""
transfer_service.py — Export, import, backup and restore
Moves problem data in and out of the database as JSON / CSV files and copies
the database file itself for backups.
"""

import csv
import json
import shutil
import logging

import pydantic
from sqlalchemy.orm import Session

from algotracker.database import Database
from algotracker.errors import StorageError, ValidationError
from algotracker.schemas import ProblemSchema
from algotracker.services.problem_service import ProblemService

logger = logging.getLogger(__name__)

CSV_HEADER = ["ID", "Name", "Link", "Platform", "Difficulty", "SolveTime", "Tags", "Notes", "CreatedAt"]


class TransferService:
    @staticmethod
    def export_json(db: Session, path: str) -> int:
        """Write every problem as a pretty-printed JSON array. Returns the count."""
        problems = [
            ProblemSchema.model_validate(p).model_dump(mode="json")
            for p in ProblemService.get_all(db)
        ]
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(problems, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to write JSON export {path}: {e}")
            raise StorageError(f"Failed to write export file: {e}") from e
        logger.info(f"Exported {len(problems)} problems to {path}")
        return len(problems)

    @staticmethod
    def export_csv(db: Session, path: str) -> int:
        problems = ProblemService.get_all(db)
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(CSV_HEADER)
                for p in problems:
                    writer.writerow([
                        p.id,
                        p.name,
                        p.link or "",
                        p.platform,
                        p.difficulty,
                        p.solve_time or 0,
                        "; ".join(p.tag_names),
                        p.notes or "",
                        p.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                    ])
        except OSError as e:
            logger.error(f"Failed to write CSV export {path}: {e}")
            raise StorageError(f"Failed to write export file: {e}") from e
        logger.info(f"Exported {len(problems)} problems to {path}")
        return len(problems)

    @staticmethod
    def import_json(db: Session, path: str) -> int:
        """
        Create a new problem for every record in a JSON export.

        Ids are discarded so every record gets a fresh one; created_at is kept.
        Records are committed one by one: if one fails, the ones before it
        stay imported and the error is raised.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except OSError as e:
            logger.error(f"Failed to read import file {path}: {e}")
            raise StorageError(f"Failed to read import file: {e}") from e
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in import file: {e}") from e

        if not isinstance(records, list):
            raise ValidationError("Import file must contain a JSON array of problems")

        imported = 0
        for index, record in enumerate(records):
            try:
                problem = ProblemSchema.model_validate(record)
            except pydantic.ValidationError as e:
                raise ValidationError(f"Invalid problem at position {index}: {e}") from e
            problem.id = 0
            ProblemService.create(db, problem.model_dump(), created_at=problem.created_at)
            imported += 1

        logger.info(f"Imported {imported} problems from {path}")
        return imported

    @staticmethod
    def backup(database: Database, backup_path: str) -> None:
        """Byte-for-byte copy of the open database file."""
        if not database.path or database.path == ":memory:":
            raise StorageError("No database file to back up")
        try:
            shutil.copyfile(database.path, backup_path)
        except OSError as e:
            logger.error(f"Backup to {backup_path} failed: {e}")
            raise StorageError(f"Failed to back up database: {e}") from e
        logger.info(f"Backed up {database.path} to {backup_path}")

    @staticmethod
    def restore(database: Database, backup_path: str) -> None:
        """Close the connection, copy the backup over the file, reopen the same path."""
        path = database.path
        if not path or path == ":memory:":
            raise StorageError("No database file to restore into")

        database.close()
        try:
            shutil.copyfile(backup_path, path)
        except OSError as e:
            logger.error(f"Restore from {backup_path} failed: {e}")
            database.initialize(path)
            raise StorageError(f"Failed to restore database: {e}") from e

        database.initialize(path)
        logger.info(f"Restored {path} from {backup_path}")
