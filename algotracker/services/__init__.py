from algotracker.services.tag_service import TagService
from algotracker.services.problem_service import ProblemService
from algotracker.services.stats_service import StatsService
from algotracker.services.transfer_service import TransferService


__all__ = [
    "TagService",
    "ProblemService",
    "StatsService",
    "TransferService",
]
