from .models import (
    Activity,
    ActivityRank,
    ActivityResult,
    ActivityType,
    MVPResult,
    Participant,
    PointRecord,
    RankedEntry,
    RawScores,
    ScoredEntry,
    ScoreKind,
    Team,
    TeamScoringMode,
)
from .errors import ScoringError, InvalidInput, InconsistentState
from .schemas import ScoringRules, CompetitionFile
from .scoring import (
    score_activity,
    score_win_loss,
    score_custom_team,
    score_individual,
)
from .ranking import (
    rank_entries,
    compute_effective_placements,
    compute_mvp,
    individual_results,
    determine_activity_winner,
)
from .aggregation import (
    recompute_team_totals,
    recompute_all_for_rule_change,
    raw_scores_from_records,
    apply_team_totals,
)
from .results import build_results, build_standings, format_results
from .store import CompetitionStore

__all__ = [
    # Models
    'Activity',
    'ActivityRank',
    'ActivityResult',
    'ActivityType',
    'MVPResult',
    'Participant',
    'PointRecord',
    'RankedEntry',
    'RawScores',
    'ScoredEntry',
    'ScoreKind',
    'Team',
    'TeamScoringMode',
    # Errors
    'ScoringError',
    'InvalidInput',
    'InconsistentState',
    # Configuration
    'ScoringRules',
    'CompetitionFile',
    # Activity scoring
    'score_activity',
    'score_win_loss',
    'score_custom_team',
    'score_individual',
    # Rankings
    'rank_entries',
    'compute_effective_placements',
    'compute_mvp',
    'individual_results',
    'determine_activity_winner',
    # Totals
    'recompute_team_totals',
    'recompute_all_for_rule_change',
    'raw_scores_from_records',
    'apply_team_totals',
    # Results
    'build_results',
    'build_standings',
    'format_results',
    # Storage
    'CompetitionStore',
]
