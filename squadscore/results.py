"""Standings, podium and per-activity summaries for display."""

from typing import Any, Iterable, Mapping, Optional, Sequence

from .models import (
    Activity,
    ActivityType,
    MVPResult,
    Participant,
    PointRecord,
    ScoredEntry,
    ScoreKind,
    Team,
)
from .ranking import compute_mvp, determine_activity_winner, individual_results, rank_entries


def build_standings(teams: Iterable[Team]) -> list[dict[str, Any]]:
    """Teams ordered by total score with competition ranks."""
    teams = list(teams)
    by_id = {t.id: t for t in teams}
    ranked = rank_entries(ScoredEntry(id=t.id, score=t.total_score) for t in teams)

    return [
        {
            'team_id': entry.id,
            'name': by_id[entry.id].name,
            'captain': by_id[entry.id].captain,
            'total_score': by_id[entry.id].total_score,
            'rank': entry.rank,
        }
        for entry in ranked
    ]


def podium(standings: Sequence[dict[str, Any]], places: int = 3) -> list[dict[str, Any]]:
    """Standings entries whose rank is within the podium places."""
    return [s for s in standings if s['rank'] <= places]


def summarize_activities(
    activities: Iterable[Activity],
    point_records_by_activity: Mapping[str, Sequence[PointRecord]],
    teams: Sequence[Team],
    participants: Sequence[Participant],
) -> list[dict[str, Any]]:
    """
    One summary dict per activity.

    Each summary carries the winning team (strictly most points, None on
    a tie), each team's points, and for individual activities the ranked
    participant scores.
    """
    activities = list(activities)
    team_names = {t.id: t.name for t in teams}
    participant_names = {p.id: p.name for p in participants}
    ranked_by_activity = individual_results(activities, point_records_by_activity)

    summaries = []
    for activity in activities:
        records = point_records_by_activity.get(activity.id, [])
        winner = determine_activity_winner(records, teams)

        summary: dict[str, Any] = {
            'activity_id': activity.id,
            'name': activity.name,
            'type': activity.type.value,
            'unit': activity.unit,
            'completed': activity.completed,
            'winner': winner.name if winner else None,
            'team_points': {
                team_names.get(r.team_id, r.team_id): r.points
                for r in records
                if r.kind is ScoreKind.TEAM
            },
        }

        if activity.type is ActivityType.INDIVIDUAL:
            summary['individual'] = [
                {
                    'participant_id': entry.id,
                    'name': participant_names.get(entry.id, entry.id),
                    'score': entry.score,
                    'rank': entry.rank,
                }
                for entry in ranked_by_activity.get(activity.id, [])
            ]

        summaries.append(summary)

    return summaries


def build_results(
    teams: Sequence[Team],
    participants: Sequence[Participant],
    activities: Sequence[Activity],
    point_records_by_activity: Mapping[str, Sequence[PointRecord]],
) -> dict[str, Any]:
    """Everything the results page shows: standings, podium, activities and MVP."""
    standings = build_standings(teams)
    mvp: Optional[MVPResult] = compute_mvp(
        activities,
        individual_results(activities, point_records_by_activity),
        participants,
    )

    return {
        'standings': standings,
        'podium': podium(standings),
        'leader': standings[0] if standings else None,
        'activities': summarize_activities(
            activities, point_records_by_activity, teams, participants
        ),
        'mvp': mvp,
    }


def format_results(results: Mapping[str, Any]) -> str:
    """Plain-text rendering of build_results() output."""
    lines = ['=' * 60, 'FINAL STANDINGS', '=' * 60]

    for entry in results['standings']:
        lines.append(
            f"  {entry['rank']}. {entry['name']}: {entry['total_score']} pts"
            f" (captain: {entry['captain']})"
        )

    lines.append('')
    lines.append('ACTIVITIES')
    for summary in results['activities']:
        status = '✓' if summary['completed'] else '…'
        winner = summary['winner'] or '-'
        lines.append(f"  {status} {summary['name'] or summary['activity_id']}: winner {winner}")
        for team_name, points in summary['team_points'].items():
            lines.append(f'      {team_name}: {points} pts')
        for entry in summary.get('individual', []):
            lines.append(f"      #{entry['rank']} {entry['name']}: {entry['score']:g}")

    mvp = results.get('mvp')
    lines.append('')
    if mvp:
        lines.append(f'MVP: {mvp.participant_name} (average rank {mvp.average_rank:.2f})')
    else:
        lines.append('MVP: none (nobody competed in every individual activity)')

    return '\n'.join(lines)
