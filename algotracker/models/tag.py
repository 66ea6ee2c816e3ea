from sqlalchemy import Column, Integer, String
from algotracker.database import Base, Timestamp, utcnow


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)  # case-sensitive
    created_at = Column(Timestamp, default=utcnow)

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<Tag {self.id} {self.name!r}>"
