"""JSON file backed competition store.

Each competition lives in one JSON file. Every change is computed on
copies of the current state and written with a single atomic file
replace, so a reader never sees point records and team totals that
disagree. Saving an activity replaces all of its point records
(delete-then-insert), never patches them.
"""

import dataclasses
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .aggregation import apply_team_totals, recompute_team_totals, rescore_activities
from .errors import InconsistentState
from .models import (
    Activity,
    ActivityResult,
    ActivityType,
    Participant,
    PointRecord,
    RawScores,
    Team,
    TeamScoringMode,
)
from .schemas import (
    ActivityEntry,
    CompetitionFile,
    ParticipantEntry,
    PointRecordEntry,
    ScoringRules,
    TeamEntry,
)
from .scoring import score_activity
from .utils import load_json, save_json
from .validators import validate_competition

logger = logging.getLogger('squadscore.store')


class CompetitionStore:
    """
    Competition data plus the scoring sequences that change it.

    Example:
        store = CompetitionStore('data/competitions/ABC123.json')
        store.save_activity_scores('tug-of-war', RawScores(winning_team_id='red'))
        print(store.teams)
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        data = load_json(self.path, schema=CompetitionFile)

        self.code = data.code
        self.name = data.name
        self._rules = data.rules
        self._teams = [Team(**e.model_dump()) for e in data.teams]
        self._participants = [Participant(**e.model_dump()) for e in data.participants]
        self._activities = [Activity(**e.model_dump()) for e in data.activities]
        self._records = [PointRecord(**e.model_dump()) for e in data.point_records]

        logger.debug(
            f'Loaded competition {self.code}: {len(self._teams)} teams, '
            f'{len(self._activities)} activities, {len(self._records)} point records'
        )

    @classmethod
    def create(
        cls,
        path: Path | str,
        code: str,
        name: str = '',
        rules: Optional[ScoringRules] = None,
    ) -> 'CompetitionStore':
        """Write an empty competition file and open it."""
        path = Path(path)
        if path.exists():
            raise FileExistsError(f'Competition file already exists: {path}')

        save_json(
            path,
            CompetitionFile(
                code=code,
                name=name,
                rules=rules or ScoringRules.get_default(),
                updated_at=datetime.now(timezone.utc).isoformat(),
            ),
        )
        return cls(path)

    @property
    def rules(self) -> ScoringRules:
        return self._rules

    @property
    def teams(self) -> List[Team]:
        return list(self._teams)

    @property
    def participants(self) -> List[Participant]:
        return list(self._participants)

    @property
    def activities(self) -> List[Activity]:
        return list(self._activities)

    @property
    def point_records(self) -> List[PointRecord]:
        return list(self._records)

    @property
    def point_records_by_activity(self) -> Dict[str, List[PointRecord]]:
        grouped: Dict[str, List[PointRecord]] = {a.id: [] for a in self._activities}
        for record in self._records:
            grouped.setdefault(record.activity_id, []).append(record)
        return grouped

    def get_activity(self, activity_id: str) -> Activity:
        activity = next((a for a in self._activities if a.id == activity_id), None)
        if activity is None:
            raise InconsistentState(f'Unknown activity {activity_id} in competition {self.code}')
        return activity

    def add_team(self, team: Team) -> None:
        if any(t.id == team.id for t in self._teams):
            raise ValueError(f'Team {team.id} already exists')
        self._commit(teams=self._teams + [dataclasses.replace(team, total_score=0)])

    def add_participant(self, participant: Participant) -> None:
        if not any(t.id == participant.team_id for t in self._teams):
            raise InconsistentState(
                f'Participant {participant.id} assigned to unknown team {participant.team_id}'
            )
        if any(p.id == participant.id for p in self._participants):
            raise ValueError(f'Participant {participant.id} already exists')
        self._commit(participants=self._participants + [participant])

    def add_activity(self, activity: Activity) -> None:
        if any(a.id == activity.id for a in self._activities):
            raise ValueError(f'Activity {activity.id} already exists')
        self._commit(activities=self._activities + [activity])

    def save_activity_scores(
        self,
        activity_id: str,
        raw_scores: RawScores,
        mode: TeamScoringMode = TeamScoringMode.WIN_LOSS,
    ) -> ActivityResult:
        """
        Score an activity and store the result.

        Replaces the activity's point records, marks it completed (only
        if anything was scored), records the winner and recomputes every
        team total, all in one write.

        Returns:
            The ActivityResult that was stored
        """
        activity = self.get_activity(activity_id)
        result = score_activity(
            activity, raw_scores, self._rules, self._teams, self._participants, mode=mode
        )

        records = [r for r in self._records if r.activity_id != activity_id]
        records.extend(result.point_records)

        updated = dataclasses.replace(
            activity,
            completed=bool(result.point_records),
            winner_name=result.winner_name,
            scoring_mode=TeamScoringMode(mode) if activity.type is ActivityType.TEAM else None,
        )
        activities = [updated if a.id == activity_id else a for a in self._activities]

        self._commit(activities=activities, records=records, recompute=True)
        logger.info(
            f'Saved {len(result.point_records)} point records for {activity.name or activity.id}'
            f' (winner: {result.winner_name or "none"})'
        )
        return result

    def delete_activity(self, activity_id: str) -> None:
        """Remove an activity with all of its point records and recompute totals."""
        self.get_activity(activity_id)

        activities = [a for a in self._activities if a.id != activity_id]
        records = [r for r in self._records if r.activity_id != activity_id]

        self._commit(activities=activities, records=records, recompute=True)
        logger.info(f'Deleted activity {activity_id}')

    def update_rules(self, rules: ScoringRules) -> Dict[str, int]:
        """
        Replace the scoring rules and rescore every completed activity.

        Returns:
            Recomputed team totals
        """
        results = rescore_activities(
            self._activities,
            self.point_records_by_activity,
            rules,
            self._teams,
            self._participants,
        )

        records = [r for result in results.values() for r in result.point_records]
        activities = [
            dataclasses.replace(a, winner_name=results[a.id].winner_name) for a in self._activities
        ]

        self._commit(rules=rules, activities=activities, records=records, recompute=True)
        logger.info(f'Rules updated for {self.code}; rescored {len(results)} activities')
        return {t.id: t.total_score for t in self._teams}

    def recompute_totals(self) -> Dict[str, int]:
        """Rebuild every team total from the stored point records. Safe to re-run."""
        self._commit(recompute=True)
        return {t.id: t.total_score for t in self._teams}

    def validate(self) -> tuple[list[str], list[str]]:
        """Run the competition consistency checks. Returns (errors, warnings)."""
        return validate_competition(
            self._rules, self._teams, self._activities, self.point_records_by_activity
        )

    def _commit(
        self,
        rules: Optional[ScoringRules] = None,
        teams: Optional[List[Team]] = None,
        participants: Optional[List[Participant]] = None,
        activities: Optional[List[Activity]] = None,
        records: Optional[List[PointRecord]] = None,
        recompute: bool = False,
    ) -> None:
        """Write the new state to disk, then adopt it in memory."""
        rules = rules if rules is not None else self._rules
        teams = teams if teams is not None else self._teams
        participants = participants if participants is not None else self._participants
        activities = activities if activities is not None else self._activities
        records = records if records is not None else self._records

        if recompute:
            teams = apply_team_totals(teams, recompute_team_totals(teams, records))

        save_json(
            self.path,
            CompetitionFile(
                code=self.code,
                name=self.name,
                rules=rules,
                teams=[TeamEntry(**dataclasses.asdict(t)) for t in teams],
                participants=[ParticipantEntry(**dataclasses.asdict(p)) for p in participants],
                activities=[ActivityEntry(**dataclasses.asdict(a)) for a in activities],
                point_records=[PointRecordEntry(**dataclasses.asdict(r)) for r in records],
                updated_at=datetime.now(timezone.utc).isoformat(),
            ),
        )

        self._rules = rules
        self._teams = list(teams)
        self._participants = list(participants)
        self._activities = list(activities)
        self._records = list(records)
