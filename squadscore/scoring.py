"""Scoring functions for each activity type.

Points per activity:
    - Team activity, win/loss: winner gets team_win, every other team team_loss
    - Team activity, custom scores: each team's positive score is its points
    - Individual activity: team placement bonus (team_win / team_loss by
      summed participant scores) plus each participant's placement bonus
      (first_place, second_place, last_place), all credited to the team
"""

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import InconsistentState, InvalidInput
from .models import (
    Activity,
    ActivityResult,
    ActivityType,
    Participant,
    PointRecord,
    RawScores,
    ScoredEntry,
    ScoreKind,
    Team,
    TeamScoringMode,
)
from .ranking import compute_effective_placements, placement_groups
from .schemas import ScoringRules

logger = logging.getLogger('squadscore.scoring')


def _check_value(value: float, label: str) -> float:
    """Reject raw values that cannot be ranked or summed."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f'{label} has non-numeric score: {value!r}')
    if not math.isfinite(value):
        raise InvalidInput(f'{label} has non-finite score: {value!r}')
    return float(value)


def _strict_leader(records: List[PointRecord]) -> Optional[PointRecord]:
    """Record with strictly the most positive points, if any."""
    if not records:
        return None
    best = max(r.points for r in records)
    leaders = [r for r in records if r.points == best]
    if best <= 0 or len(leaders) > 1:
        return None
    return leaders[0]


def score_win_loss(
    activity: Activity,
    winning_team_id: Optional[str],
    rules: ScoringRules,
    teams: Iterable[Team],
) -> ActivityResult:
    """
    Score a team activity decided by picking a winner.

    Args:
        activity: The team activity being saved
        winning_team_id: Selected winner (required)
        rules: Competition scoring rules
        teams: All teams in the competition

    Returns:
        ActivityResult with one team record per team

    Raises:
        InvalidInput: If no winner was selected
        InconsistentState: If the winner is not one of the teams
    """
    teams = list(teams)

    if not winning_team_id:
        raise InvalidInput(f'No winning team selected for activity {activity.id}')

    winner = next((t for t in teams if t.id == winning_team_id), None)
    if winner is None:
        raise InconsistentState(
            f'Winning team {winning_team_id} of activity {activity.id} is not in the competition'
        )

    records = []
    for team in teams:
        won = team.id == winner.id
        records.append(
            PointRecord(
                activity_id=activity.id,
                kind=ScoreKind.TEAM,
                points=rules.team_win if won else rules.team_loss,
                team_id=team.id,
                raw_value=1.0 if won else 0.0,
            )
        )

    logger.debug(f'{activity.id}: {winner.name} wins ({rules.team_win} pts)')
    return ActivityResult(point_records=records, winner_name=winner.name)


def score_custom_team(
    activity: Activity,
    team_scores: Mapping[str, float],
    teams: Iterable[Team],
) -> ActivityResult:
    """
    Score a team activity from numeric scores entered per team.

    A team's positive score, rounded half up to an integer (2.5 -> 3),
    is its points; zero or negative scores earn nothing. Teams without
    an entry are scored as 0. With no entries at all the result is empty.

    Raises:
        InconsistentState: If a score references an unknown team
        InvalidInput: If a score is not a finite number
    """
    teams = list(teams)
    team_ids = {t.id for t in teams}

    for team_id in team_scores:
        if team_id not in team_ids:
            raise InconsistentState(
                f'Score for unknown team {team_id} in activity {activity.id}'
            )

    if not team_scores:
        logger.debug(f'{activity.id}: no team scores entered')
        return ActivityResult()

    records = []
    for team in teams:
        raw = _check_value(team_scores.get(team.id, 0), f'Team {team.id}')
        records.append(
            PointRecord(
                activity_id=activity.id,
                kind=ScoreKind.TEAM,
                points=math.floor(raw + 0.5) if raw > 0 else 0,
                team_id=team.id,
                raw_value=raw,
            )
        )

    leader = _strict_leader(records)
    winner_name = next((t.name for t in teams if leader and t.id == leader.team_id), None)
    return ActivityResult(point_records=records, winner_name=winner_name)


def team_placement_bonuses(
    team_totals: Mapping[str, float],
    rules: ScoringRules,
) -> Dict[str, int]:
    """
    Placement bonus for each scored team in an individual activity.

    Highest total gets team_win, lowest gets team_loss, anything in
    between gets 0. Teams tied for the highest total share team_win.
    Needs at least two scored teams and at least one positive total,
    otherwise every team gets 0.

    Args:
        team_totals: Team id -> summed participant scores (scored teams only)
        rules: Competition scoring rules
    """
    bonuses = {team_id: 0 for team_id in team_totals}

    if len(team_totals) < 2 or not any(total > 0 for total in team_totals.values()):
        return bonuses

    placements = compute_effective_placements(
        ScoredEntry(id=team_id, score=total) for team_id, total in team_totals.items()
    )
    best = min(placements.values())
    worst = max(placements.values())

    for team_id, placement in placements.items():
        if placement == best:
            bonuses[team_id] = rules.team_win
        elif placement == worst:
            bonuses[team_id] = rules.team_loss

    return bonuses


def individual_bonuses(
    scores: Mapping[str, float],
    rules: ScoringRules,
) -> Dict[str, int]:
    """
    Placement bonus for each participant in an individual activity.

    Bonuses by effective placement across all scored participants:
        - Leading tie group: first_place (more than 1 participant)
        - Next tie group: second_place (more than 2 participants)
        - Lowest tie group: last_place (more than 2 participants)

    A participant can collect a top bonus and last_place at once when
    ties leave only one or two groups; both apply.
    """
    bonuses = {participant_id: 0 for participant_id in scores}
    count = len(scores)

    placements = compute_effective_placements(
        ScoredEntry(id=participant_id, score=score) for participant_id, score in scores.items()
    )
    groups = placement_groups(placements)

    if count > 1:
        for participant_id in groups[0]:
            bonuses[participant_id] += rules.first_place

    if count > 2:
        if len(groups) > 1:
            for participant_id in groups[1]:
                bonuses[participant_id] += rules.second_place

        for participant_id in groups[-1]:
            bonuses[participant_id] += rules.last_place

        if len(groups) <= 2:
            logger.warning(
                f'Last-place bonus overlaps a top bonus for {", ".join(sorted(groups[-1]))}'
            )

    return bonuses


def score_individual(
    activity: Activity,
    participant_scores: Mapping[str, Optional[float]],
    rules: ScoringRules,
    teams: Iterable[Team],
    participants: Iterable[Participant],
) -> ActivityResult:
    """
    Score an individual activity.

    Participant records keep the raw score with 0 points. All bonus
    points (team placement and participant placement) go into one team
    record per team, so team totals come from team records only.

    Args:
        activity: The individual activity being saved
        participant_scores: Participant id -> raw score (None = no entry)
        rules: Competition scoring rules
        teams: All teams in the competition
        participants: All participants in the competition

    Returns:
        ActivityResult with participant records followed by team records

    Raises:
        InconsistentState: If a score references an unknown participant,
            or a participant belongs to an unknown team
        InvalidInput: If a score is not a finite number
    """
    teams = list(teams)
    team_ids = {t.id for t in teams}
    by_id = {p.id: p for p in participants}

    scores: Dict[str, float] = {}
    for participant_id, value in participant_scores.items():
        participant = by_id.get(participant_id)
        if participant is None:
            raise InconsistentState(
                f'Score for unknown participant {participant_id} in activity {activity.id}'
            )
        if participant.team_id not in team_ids:
            raise InconsistentState(
                f'Participant {participant_id} belongs to unknown team {participant.team_id}'
            )
        if value is None:
            continue
        scores[participant_id] = _check_value(value, f'Participant {participant_id}')

    if not scores:
        logger.debug(f'{activity.id}: no individual scores entered')
        return ActivityResult()

    team_totals: Dict[str, float] = {}
    for participant_id, score in scores.items():
        team_id = by_id[participant_id].team_id
        team_totals[team_id] = team_totals.get(team_id, 0.0) + score

    placement_bonus = team_placement_bonuses(team_totals, rules)
    bonus_by_participant = individual_bonuses(scores, rules)

    records = [
        PointRecord(
            activity_id=activity.id,
            kind=ScoreKind.INDIVIDUAL,
            points=0,
            team_id=by_id[participant_id].team_id,
            participant_id=participant_id,
            raw_value=score,
        )
        for participant_id, score in scores.items()
    ]

    team_records = []
    for team in teams:
        bonus_total = sum(
            bonus for participant_id, bonus in bonus_by_participant.items()
            if by_id[participant_id].team_id == team.id
        )
        team_records.append(
            PointRecord(
                activity_id=activity.id,
                kind=ScoreKind.TEAM,
                points=placement_bonus.get(team.id, 0) + bonus_total,
                team_id=team.id,
                raw_value=team_totals.get(team.id, 0.0),
            )
        )

    leader = _strict_leader(team_records)
    winner_name = next((t.name for t in teams if leader and t.id == leader.team_id), None)
    return ActivityResult(point_records=records + team_records, winner_name=winner_name)


def score_activity(
    activity: Activity,
    raw_scores: RawScores,
    rules: ScoringRules,
    teams: Iterable[Team],
    participants: Iterable[Participant] = (),
    mode: TeamScoringMode = TeamScoringMode.WIN_LOSS,
) -> ActivityResult:
    """
    Compute the point records and winner for one activity.

    Dispatches on the activity type, and for team activities on the
    scoring mode chosen for this save.

    Args:
        activity: Activity being saved
        raw_scores: RawScores for this save
        rules: Competition scoring rules
        teams: All teams in the competition
        participants: All participants (needed for individual activities)
        mode: Win/loss or custom scores (team activities only)

    Returns:
        ActivityResult (empty when nothing was entered)
    """
    try:
        activity_type = ActivityType(activity.type)
        mode = TeamScoringMode(mode)
    except ValueError as e:
        raise InvalidInput(f'Cannot score activity {activity.id}: {e}') from e

    if activity_type is ActivityType.TEAM:
        if mode is TeamScoringMode.WIN_LOSS:
            return score_win_loss(activity, raw_scores.winning_team_id, rules, teams)
        elif mode is TeamScoringMode.CUSTOM:
            return score_custom_team(activity, raw_scores.team_scores, teams)
    elif activity_type is ActivityType.INDIVIDUAL:
        return score_individual(activity, raw_scores.participant_scores, rules, teams, participants)

    raise InvalidInput(f'Unhandled activity {activity.id}: {activity_type} / {mode}')
