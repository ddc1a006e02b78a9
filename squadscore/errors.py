"""Error types raised by the scoring engine."""


class ScoringError(Exception):
    """Base class for scoring engine errors."""


class InvalidInput(ScoringError, ValueError):
    """Raw input that cannot be scored (e.g. win/loss save with no winner selected)."""


class InconsistentState(ScoringError):
    """
    Input that references entities missing from the supplied data.

    Always signals a caller bug, such as a score for a team that is not
    part of the competition. Never swallow this.
    """
