"""
tag_service.py — Knowledge-point tags
Get-or-create resolution used by problem writes, plus standalone tag CRUD.
"""

import logging

from sqlalchemy import select, delete
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from algotracker.database import utcnow
from algotracker.errors import StorageError
from algotracker.models.tag import Tag
from algotracker.services.validation import validate_tag_name

logger = logging.getLogger(__name__)


class TagService:
    @staticmethod
    def get_or_create(db: Session, name: str) -> int:
        """
        Return the id of the tag called `name`, inserting it if absent.

        Runs inside the caller's transaction and does not commit. The insert
        is an upsert, so a name created concurrently resolves to that row.
        """
        db.execute(
            sqlite_insert(Tag.__table__)
            .values(name=name, created_at=utcnow())
            .on_conflict_do_nothing(index_elements=["name"])
        )
        return db.execute(select(Tag.id).where(Tag.name == name)).scalar_one()

    @staticmethod
    def create(db: Session, name: str) -> Tag:
        """Insert a new tag. Duplicates are not merged; use get_or_create for that."""
        validate_tag_name(name)
        try:
            tag = Tag(name=name, created_at=utcnow())
            db.add(tag)
            db.commit()
            db.refresh(tag)
            return tag
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create tag {name!r}: {e}")
            raise StorageError(f"Failed to create tag: {e}") from e

    @staticmethod
    def get_all(db: Session) -> list[Tag]:
        try:
            return list(db.scalars(select(Tag).order_by(Tag.name)).all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list tags: {e}")
            raise StorageError(f"Failed to list tags: {e}") from e

    @staticmethod
    def delete(db: Session, tag_id: int) -> None:
        """Delete a tag; its problem associations go with it. Unknown ids are ignored."""
        try:
            db.execute(delete(Tag.__table__).where(Tag.id == tag_id))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete tag {tag_id}: {e}")
            raise StorageError(f"Failed to delete tag: {e}") from e
