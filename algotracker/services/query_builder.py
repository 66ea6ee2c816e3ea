"""
query_builder.py — Problem filter to SQL
Turns a ProblemFilter into one parameterized SELECT. Every condition is a
Clause that carries its own value, so the rendered placeholders and the
bound parameters always come from the same object.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import ColumnElement, Select, String, select, type_coerce
from sqlalchemy.dialects import sqlite

from algotracker.models.problem import Problem
from algotracker.models.problem_tag import problem_tags
from algotracker.models.tag import Tag


OPERATORS: dict[str, Callable[[Any, Any], ColumnElement]] = {
    "eq": lambda column, value: column == value,
    # SQLite lower() folds ASCII letters only, so "édit" does not match "Édit"
    "icontains": lambda column, value: column.icontains(value, autoescape=True),
    # Lexical comparison against the stored ISO-8601 text
    "gte": lambda column, value: type_coerce(column, String) >= value,
    "lte": lambda column, value: type_coerce(column, String) <= value,
    "in": lambda column, value: column.in_(list(value)),
}

# "YYYY-MM-DD HH:MM..." bounds are rewritten to the stored "T" separator
DATE_SEPARATOR = re.compile(r"^(\d{4}-\d{2}-\d{2}) ")


def _date_bound(value: str) -> str:
    return DATE_SEPARATOR.sub(r"\1T", value.strip(), count=1)


@dataclass(frozen=True, eq=False)
class Clause:
    """A single filter condition: column, operator and the value bound to it."""

    column: Any
    op: str
    value: Any

    def render(self) -> ColumnElement:
        try:
            build = OPERATORS[self.op]
        except KeyError:
            raise ValueError(f"Unsupported filter operator: {self.op}") from None
        return build(self.column, self.value)

    @property
    def needs_tags(self) -> bool:
        return getattr(self.column, "class_", None) is Tag


class ProblemQuery:
    """Ordered list of clauses rendered into a DISTINCT, newest-first SELECT."""

    def __init__(self):
        self.clauses: list[Clause] = []

    @classmethod
    def from_filter(cls, problem_filter=None) -> "ProblemQuery":
        query = cls()
        if problem_filter is None:
            return query

        tag_names = [name for name in (problem_filter.tags or []) if name]
        if tag_names:
            # Any listed tag qualifies a problem
            query.where(Tag.name, "in", tuple(tag_names))
        if problem_filter.difficulty:
            query.where(Problem.difficulty, "eq", problem_filter.difficulty)
        if problem_filter.platform:
            query.where(Problem.platform, "eq", problem_filter.platform)
        if problem_filter.search_query:
            query.where(Problem.name, "icontains", problem_filter.search_query)
        if problem_filter.start_date:
            query.where(Problem.created_at, "gte", _date_bound(problem_filter.start_date))
        if problem_filter.end_date:
            query.where(Problem.created_at, "lte", _date_bound(problem_filter.end_date))
        return query

    def where(self, column, op: str, value) -> "ProblemQuery":
        if op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {op}")
        self.clauses.append(Clause(column, op, value))
        return self

    @property
    def joins_tags(self) -> bool:
        return any(clause.needs_tags for clause in self.clauses)

    def statement(self) -> Select:
        stmt = select(Problem).distinct()
        if self.joins_tags:
            stmt = (
                stmt.join(problem_tags, problem_tags.c.problem_id == Problem.id)
                .join(Tag, Tag.id == problem_tags.c.tag_id)
            )
        if self.clauses:
            stmt = stmt.where(*[clause.render() for clause in self.clauses])
        return stmt.order_by(Problem.created_at.desc(), Problem.id.desc())

    def compile(self) -> tuple[str, dict]:
        """Render SQL text and bound parameters the way SQLite will receive them."""
        compiled = self.statement().compile(
            dialect=sqlite.dialect(),
            compile_kwargs={"render_postcompile": True},
        )
        return str(compiled), dict(compiled.params)
