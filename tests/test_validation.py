import pytest

from algotracker.errors import ValidationError
from algotracker.services.validation import validate_problem, validate_tag_name


def test_valid_problem_passes(make_problem):
    for difficulty in ("Easy", "Medium", "Hard"):
        validate_problem(make_problem(difficulty=difficulty))


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"name": ""}, "name"),
        ({"name": None}, "name"),
        ({"platform": ""}, "platform"),
        ({"difficulty": ""}, "difficulty"),
        ({"difficulty": "hard"}, "difficulty"),
        ({"difficulty": "Extreme"}, "difficulty"),
        ({"solve_time": -5}, "solve_time"),
        ({"solve_time": "ten"}, "solve_time"),
    ],
)
def test_invalid_problem_names_field(make_problem, overrides, field):
    with pytest.raises(ValidationError) as exc:
        validate_problem(make_problem(**overrides))
    assert exc.value.field == field


def test_rules_checked_in_order(make_problem):
    with pytest.raises(ValidationError) as exc:
        validate_problem(make_problem(name="", platform="", difficulty=""))
    assert exc.value.detail == "problem name is required"


def test_missing_solve_time_counts_as_unrecorded(make_problem):
    data = make_problem()
    del data["solve_time"]
    validate_problem(data)


def test_empty_tag_name_rejected():
    with pytest.raises(ValidationError):
        validate_tag_name("")
    validate_tag_name("Graph")
