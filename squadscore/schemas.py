"""Pydantic schemas for scoring rules and competition files."""

from pydantic import BaseModel, Field, StrictInt, field_validator

from .models import ActivityType, ScoreKind, TeamScoringMode


DEFAULT_TEAM_WIN = 50
DEFAULT_TEAM_LOSS = 0
DEFAULT_FIRST_PLACE = 10
DEFAULT_SECOND_PLACE = 5
DEFAULT_LAST_PLACE = -5


class ScoringRules(BaseModel):
    """
    Point values for one competition.

    Any value may be zero or negative; a negative value is a penalty.
    Serialized with camelCase keys (teamWin, teamLoss, firstPlace,
    secondPlace, lastPlace).
    """

    team_win: StrictInt = Field(DEFAULT_TEAM_WIN, alias='teamWin')
    team_loss: StrictInt = Field(DEFAULT_TEAM_LOSS, alias='teamLoss')
    first_place: StrictInt = Field(DEFAULT_FIRST_PLACE, alias='firstPlace')
    second_place: StrictInt = Field(DEFAULT_SECOND_PLACE, alias='secondPlace')
    last_place: StrictInt = Field(DEFAULT_LAST_PLACE, alias='lastPlace')

    @classmethod
    def get_default(cls) -> 'ScoringRules':
        """Rules used when a competition has not customized anything."""
        return cls(
            team_win=DEFAULT_TEAM_WIN,
            team_loss=DEFAULT_TEAM_LOSS,
            first_place=DEFAULT_FIRST_PLACE,
            second_place=DEFAULT_SECOND_PLACE,
            last_place=DEFAULT_LAST_PLACE,
        )

    class Config:
        extra = 'forbid'
        frozen = True
        populate_by_name = True


class TeamEntry(BaseModel):
    """Team as stored in a competition file."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    captain: str = ''
    total_score: int = 0

    class Config:
        extra = 'forbid'


class ParticipantEntry(BaseModel):
    """Participant as stored in a competition file."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    team_id: str = Field(..., min_length=1)

    class Config:
        extra = 'forbid'


class ActivityEntry(BaseModel):
    """Activity as stored in a competition file."""

    id: str = Field(..., min_length=1)
    name: str = ''
    type: ActivityType
    unit: str | None = None
    completed: bool = False
    winner_name: str | None = None
    scoring_mode: TeamScoringMode | None = None

    class Config:
        extra = 'forbid'


class PointRecordEntry(BaseModel):
    """Point record as stored in a competition file."""

    activity_id: str = Field(..., min_length=1)
    kind: ScoreKind
    points: int
    team_id: str | None = None
    participant_id: str | None = None
    raw_value: float | None = None

    class Config:
        extra = 'forbid'


class CompetitionFile(BaseModel):
    """Complete competition JSON file structure."""

    code: str = Field(..., min_length=1)
    name: str = ''
    rules: ScoringRules = Field(default_factory=ScoringRules.get_default)
    teams: list[TeamEntry] = Field(default_factory=list)
    participants: list[ParticipantEntry] = Field(default_factory=list)
    activities: list[ActivityEntry] = Field(default_factory=list)
    point_records: list[PointRecordEntry] = Field(default_factory=list)
    updated_at: str | None = None

    @field_validator('teams', 'participants', 'activities')
    @classmethod
    def validate_unique_ids(cls, v):
        """Ensure ids are unique within each collection."""
        seen = set()
        for item in v:
            if item.id in seen:
                raise ValueError(f'Duplicate id: {item.id}')
            seen.add(item.id)
        return v

    class Config:
        extra = 'forbid'
