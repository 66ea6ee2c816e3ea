from sqlalchemy import Column, Integer, String, Text, Index
from sqlalchemy.orm import relationship
from algotracker.database import Base, Timestamp, utcnow
from algotracker.models.problem_tag import problem_tags


class Problem(Base):
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(300), nullable=False)
    link = Column(String(500), default="", server_default="")
    platform = Column(String(100), nullable=False)  # LeetCode/Codeforces/AtCoder/...
    difficulty = Column(String(20), nullable=False)  # Easy/Medium/Hard
    solve_time = Column(Integer, default=0)  # minutes, 0 = not recorded
    notes = Column(Text, nullable=True)
    code_snippet = Column(Text, nullable=True)
    created_at = Column(Timestamp, default=utcnow)
    updated_at = Column(Timestamp, default=utcnow)

    # Association rows are written directly by ProblemService
    tags = relationship(
        "Tag",
        secondary=problem_tags,
        order_by="Tag.name",
        lazy="selectin",
        viewonly=True,
    )

    __table_args__ = (
        Index("idx_problems_difficulty", "difficulty"),
        Index("idx_problems_platform", "platform"),
        Index("idx_problems_created_at", "created_at"),
        {"sqlite_autoincrement": True},  # ids are never reused
    )

    @property
    def tag_names(self) -> list[str]:
        return [t.name for t in self.tags]

    def __repr__(self):
        return f"<Problem {self.id} {self.name!r}>"
