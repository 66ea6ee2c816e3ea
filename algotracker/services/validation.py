"""
validation.py — Write gating
Field-presence and enumerated-value rules checked before any problem or tag write.
"""

from typing import Mapping, Any

from algotracker.errors import ValidationError

DIFFICULTIES = ("Easy", "Medium", "Hard")


def validate_problem(data: Mapping[str, Any]) -> None:
    """Raise ValidationError naming the first rule the payload breaks."""
    if not data.get("name"):
        raise ValidationError("problem name is required", field="name")
    if not data.get("platform"):
        raise ValidationError("platform is required", field="platform")
    if not data.get("difficulty"):
        raise ValidationError("difficulty is required", field="difficulty")
    if data["difficulty"] not in DIFFICULTIES:
        raise ValidationError("difficulty must be Easy, Medium, or Hard", field="difficulty")

    solve_time = data.get("solve_time") or 0
    if isinstance(solve_time, bool) or not isinstance(solve_time, int):
        raise ValidationError("solve time must be a whole number of minutes", field="solve_time")
    if solve_time < 0:
        raise ValidationError("solve time cannot be negative", field="solve_time")


def validate_tag_name(name: str) -> None:
    if not name:
        raise ValidationError("tag name cannot be empty", field="name")
