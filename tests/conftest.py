import logging

import pytest

from algotracker.database import Database


@pytest.fixture
def database(tmp_path):
    database = Database()
    database.initialize(str(tmp_path / "tracker.db"))
    yield database
    database.close()


@pytest.fixture
def db(database):
    with database.session() as session:
        yield session


@pytest.fixture
def make_problem():
    def _make(**overrides):
        data = {
            "name": "Two Sum",
            "link": "https://leetcode.com/problems/two-sum/",
            "platform": "LeetCode",
            "difficulty": "Easy",
            "solve_time": 15,
            "notes": "hash the complement",
            "code_snippet": "def two_sum(nums, target): ...",
            "tags": [],
        }
        data.update(overrides)
        return data

    return _make


# Keep test output quiet
@pytest.fixture(autouse=True)
def quiet_logging():
    logger = logging.getLogger("algotracker")
    level = logger.level
    logger.setLevel(logging.CRITICAL)
    yield
    logger.setLevel(level)
