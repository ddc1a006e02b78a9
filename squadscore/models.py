"""Data models for the squadscore engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ActivityType(str, Enum):
    """How an activity is contested."""
    TEAM = 'team'
    INDIVIDUAL = 'individual'


class ScoreKind(str, Enum):
    """Which entity a point record is attributed to."""
    TEAM = 'team'
    INDIVIDUAL = 'individual'


class TeamScoringMode(str, Enum):
    """Toggle chosen when saving a team activity."""
    WIN_LOSS = 'win_loss'
    CUSTOM = 'custom'


@dataclass
class Team:
    """A competing team. total_score is a cache of its team point records."""
    id: str
    name: str
    captain: str = ''
    total_score: int = 0


@dataclass
class Participant:
    """A drafted participant."""
    id: str
    name: str
    team_id: str


@dataclass
class Activity:
    """A single event within a competition."""
    id: str
    type: ActivityType
    name: str = ''
    unit: Optional[str] = None
    completed: bool = False
    winner_name: Optional[str] = None
    scoring_mode: Optional[TeamScoringMode] = None  # set on save of team activities

    def __post_init__(self):
        # accept plain strings
        self.type = ActivityType(self.type)
        if self.scoring_mode is not None:
            self.scoring_mode = TeamScoringMode(self.scoring_mode)


@dataclass
class RawScores:
    """
    Raw input for one save of an activity.

    Only the part matching the activity type and mode is read:
    winning_team_id for win/loss, team_scores for custom team scores,
    participant_scores for individual activities. A participant mapped
    to None has no entry.
    """
    winning_team_id: Optional[str] = None
    team_scores: Dict[str, float] = field(default_factory=dict)
    participant_scores: Dict[str, Optional[float]] = field(default_factory=dict)


@dataclass(frozen=True)
class PointRecord:
    """Points attributed to one team or participant for one activity."""
    activity_id: str
    kind: ScoreKind
    points: int
    team_id: Optional[str] = None
    participant_id: Optional[str] = None
    raw_value: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, 'kind', ScoreKind(self.kind))


@dataclass
class ActivityResult:
    """Output of scoring one activity."""
    point_records: List[PointRecord] = field(default_factory=list)
    winner_name: Optional[str] = None


@dataclass(frozen=True)
class ScoredEntry:
    id: str
    score: float


@dataclass(frozen=True)
class RankedEntry:
    id: str
    score: float
    rank: int


@dataclass(frozen=True)
class ActivityRank:
    """One participant's placing in one individual activity."""
    activity_id: str
    activity_name: str
    rank: int
    score: float


@dataclass
class MVPResult:
    """Best average competition rank across every individual activity."""
    participant_id: str
    participant_name: str
    team_id: str
    average_rank: float
    activity_ranks: List[ActivityRank] = field(default_factory=list)
