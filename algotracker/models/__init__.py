# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from algotracker.models.problem_tag import problem_tags
from algotracker.models.tag import Tag
from algotracker.models.problem import Problem

__all__ = [
    "problem_tags",
    "Tag",
    "Problem",
]
