"""Team totals and full recomputation after rule changes.

Totals are always rebuilt from the complete set of point records; they are
never updated by adding deltas to a previous total.
"""

import dataclasses
import logging
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .errors import InconsistentState
from .models import (
    Activity,
    ActivityResult,
    ActivityType,
    Participant,
    PointRecord,
    RawScores,
    ScoreKind,
    Team,
    TeamScoringMode,
)
from .schemas import ScoringRules
from .scoring import score_activity

logger = logging.getLogger('squadscore.aggregation')


def recompute_team_totals(
    teams: Iterable[Team],
    point_records: Iterable[PointRecord],
) -> Dict[str, int]:
    """
    Sum team point records into a total per team.

    Participant records are not counted; their bonuses already live in
    the team record of the same activity. Teams without records total 0.

    Args:
        teams: All teams in the competition
        point_records: Every point record of the competition, all activities

    Returns:
        Dict mapping team id to total score

    Raises:
        InconsistentState: If a team record references an unknown team
    """
    totals = {team.id: 0 for team in teams}

    for record in point_records:
        if record.kind is not ScoreKind.TEAM:
            continue
        if record.team_id not in totals:
            raise InconsistentState(
                f'Point record for activity {record.activity_id} references unknown team {record.team_id}'
            )
        totals[record.team_id] += record.points

    return totals


def apply_team_totals(teams: Iterable[Team], totals: Mapping[str, int]) -> List[Team]:
    """Return copies of teams with total_score replaced by the recomputed totals."""
    return [dataclasses.replace(team, total_score=totals.get(team.id, 0)) for team in teams]


def raw_scores_from_records(
    activity: Activity,
    records: Sequence[PointRecord],
) -> Tuple[RawScores, TeamScoringMode]:
    """
    Rebuild the raw input of a scored activity from its stored records.

    Returns:
        Tuple of (raw_scores, mode) suitable for score_activity()

    Raises:
        InconsistentState: If a win/loss activity has no recorded winner
    """
    mode = activity.scoring_mode or TeamScoringMode.WIN_LOSS

    if activity.type is ActivityType.INDIVIDUAL:
        participant_scores = {
            r.participant_id: r.raw_value
            for r in records
            if r.kind is ScoreKind.INDIVIDUAL and r.participant_id
        }
        return RawScores(participant_scores=participant_scores), mode

    team_records = [r for r in records if r.kind is ScoreKind.TEAM and r.team_id]

    if mode is TeamScoringMode.CUSTOM:
        team_scores = {r.team_id: r.raw_value or 0.0 for r in team_records}
        return RawScores(team_scores=team_scores), mode

    winners = [r.team_id for r in team_records if r.raw_value]
    if len(winners) != 1:
        raise InconsistentState(
            f'Cannot find the selected winner of activity {activity.id} in its point records'
        )
    return RawScores(winning_team_id=winners[0]), mode


def rescore_activities(
    activities: Iterable[Activity],
    point_records_by_activity: Mapping[str, Sequence[PointRecord]],
    rules: ScoringRules,
    teams: Iterable[Team],
    participants: Iterable[Participant],
) -> Dict[str, ActivityResult]:
    """
    Score every completed activity again under the given rules.

    Activities that are not completed, or completed without any records,
    keep their current records and winner.
    """
    teams = list(teams)
    participants = list(participants)
    results: Dict[str, ActivityResult] = {}

    for activity in activities:
        records = list(point_records_by_activity.get(activity.id, []))

        if not activity.completed or not records:
            results[activity.id] = ActivityResult(
                point_records=records, winner_name=activity.winner_name
            )
            continue

        raw_scores, mode = raw_scores_from_records(activity, records)
        results[activity.id] = score_activity(
            activity, raw_scores, rules, teams, participants, mode=mode
        )
        logger.debug(f'Rescored activity {activity.id} ({len(records)} records)')

    return results


def recompute_all_for_rule_change(
    activities: Iterable[Activity],
    point_records_by_activity: Mapping[str, Sequence[PointRecord]],
    new_rules: ScoringRules,
    teams: Iterable[Team],
    participants: Iterable[Participant],
) -> Dict[str, List[PointRecord]]:
    """
    Recompute point records of every completed activity under new rules.

    Args:
        activities: All activities of the competition
        point_records_by_activity: Activity id -> current point records
        new_rules: Rules to apply
        teams: All teams in the competition
        participants: All participants in the competition

    Returns:
        Dict mapping activity id to its replacement point records
    """
    results = rescore_activities(
        activities, point_records_by_activity, new_rules, teams, participants
    )
    return {activity_id: result.point_records for activity_id, result in results.items()}
