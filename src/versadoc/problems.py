"""Sinks for the recoverable problems found while reading documents."""

import logging

from versadoc.domain import Problem
from versadoc.errors import DefinitionParsingError

__all__ = ["ProblemReporter", "CollectingProblemReporter", "FailFastProblemReporter"]

logger = logging.getLogger(__name__)


class ProblemReporter:
    def error(self, problem: Problem):
        raise NotImplementedError

    def warning(self, problem: Problem):
        raise NotImplementedError


class CollectingProblemReporter(ProblemReporter):
    """Logs every problem and keeps it, leaving the verdict to the caller."""

    def __init__(self):
        self.errors: list[Problem] = []
        self.warnings: list[Problem] = []

    def error(self, problem: Problem):
        logger.error("%s", problem, exc_info=problem.cause)
        self.errors.append(problem)

    def warning(self, problem: Problem):
        logger.warning("%s", problem, exc_info=problem.cause)
        self.warnings.append(problem)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class FailFastProblemReporter(ProblemReporter):
    """Raises on the first error; warnings are only logged."""

    def error(self, problem: Problem):
        raise DefinitionParsingError(problem) from problem.cause

    def warning(self, problem: Problem):
        logger.warning("%s", problem, exc_info=problem.cause)
