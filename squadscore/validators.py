"""Validation functions for rules, point records and team totals."""

from typing import Iterable, Mapping, Sequence

from .aggregation import recompute_team_totals
from .errors import InconsistentState
from .models import Activity, ActivityType, PointRecord, ScoreKind, Team
from .schemas import ScoringRules


def validate_rules(rules: ScoringRules) -> list[str]:
    """
    Check a rule set for values that are legal but probably mistakes.

    Checks:
    - Losing a team event pays at least as much as winning it
    - Second place pays more than first place
    - Last place pays more than second place

    Returns:
        List of warning messages (empty if nothing looks off)
    """
    warnings = []

    if rules.team_loss >= rules.team_win:
        warnings.append(
            f'Team loss ({rules.team_loss}) pays at least as much as team win ({rules.team_win})'
        )
    if rules.second_place > rules.first_place:
        warnings.append(
            f'Second place ({rules.second_place}) pays more than first place ({rules.first_place})'
        )
    if rules.last_place > rules.second_place:
        warnings.append(
            f'Last place ({rules.last_place}) pays more than second place ({rules.second_place})'
        )

    return warnings


def validate_point_records(activity: Activity, records: Sequence[PointRecord]) -> list[str]:
    """
    Check the point records of one activity for internal consistency.

    Checks:
    - Every record belongs to the activity
    - At most one record per (activity, entity) pair
    - Team records carry a team id and no participant id
    - Participant records carry a participant id and 0 points
    - Team activities have no participant records

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    seen = set()

    for record in records:
        if record.activity_id != activity.id:
            errors.append(f'{activity.id} has a record for activity {record.activity_id}')

        if record.kind is ScoreKind.TEAM:
            if not record.team_id or record.participant_id:
                errors.append(f'{activity.id} has a malformed team record: {record}')
            key = ('team', record.team_id)
        else:
            if not record.participant_id:
                errors.append(f'{activity.id} has a participant record without participant')
            if record.points != 0:
                errors.append(
                    f'{activity.id} participant {record.participant_id} has {record.points} pts '
                    '(bonuses belong on the team record)'
                )
            if activity.type is ActivityType.TEAM:
                errors.append(f'{activity.id} is a team activity but has participant records')
            key = ('participant', record.participant_id)

        if key in seen:
            errors.append(f'{activity.id} has duplicate records for {key[0]} {key[1]}')
        seen.add(key)

    return errors


def validate_team_totals(teams: Iterable[Team], point_records: Iterable[PointRecord]) -> list[str]:
    """
    Check that each team's cached total equals the sum of its team records.

    Returns:
        List of validation error messages (empty if every total matches)
    """
    teams = list(teams)
    errors = []

    try:
        totals = recompute_team_totals(teams, point_records)
    except InconsistentState as e:
        return [str(e)]

    for team in teams:
        expected = totals[team.id]
        if team.total_score != expected:
            errors.append(
                f'{team.name} total is {team.total_score} but its records sum to {expected}'
            )

    return errors


def validate_competition(
    rules: ScoringRules,
    teams: Sequence[Team],
    activities: Sequence[Activity],
    point_records_by_activity: Mapping[str, Sequence[PointRecord]],
) -> tuple[list[str], list[str]]:
    """
    Validate a whole competition.

    Returns:
        Tuple of (errors, warnings)
        - errors: Records or totals that are inconsistent
        - warnings: Suspicious rules or scored-but-open activities
    """
    errors: list[str] = []
    warnings: list[str] = validate_rules(rules)

    activity_ids = {a.id for a in activities}
    for activity_id in point_records_by_activity:
        if activity_id not in activity_ids and point_records_by_activity[activity_id]:
            errors.append(f'Point records left for deleted activity {activity_id}')

    for activity in activities:
        records = point_records_by_activity.get(activity.id, [])
        errors.extend(validate_point_records(activity, records))
        if records and not activity.completed:
            warnings.append(f'{activity.id} has point records but is not completed')

    all_records = [r for records in point_records_by_activity.values() for r in records]
    errors.extend(validate_team_totals(teams, all_records))

    return errors, warnings
