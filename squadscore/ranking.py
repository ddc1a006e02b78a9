"""Tie-aware rankings, MVP selection and activity winners."""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import (
    Activity,
    ActivityRank,
    ActivityType,
    MVPResult,
    Participant,
    PointRecord,
    RankedEntry,
    ScoredEntry,
    ScoreKind,
    Team,
)

logger = logging.getLogger('squadscore.ranking')


def rank_entries(entries: Iterable[ScoredEntry]) -> List[RankedEntry]:
    """
    Rank entries by score using competition ranking ("1224").

    Entries are sorted by score descending. Each entry's rank is its
    1-based position, unless its score equals the entry directly above
    it, in which case it shares that entry's rank. Equal scores keep
    their input order.

    Example:
        [10, 10, 5] -> ranks [1, 1, 3]
        [10, 10, 8, 2] -> ranks [1, 1, 3, 4]
    """
    ordered = sorted(entries, key=lambda e: e.score, reverse=True)

    ranked: List[RankedEntry] = []
    current_rank = 1
    for i, entry in enumerate(ordered):
        if i > 0 and ordered[i - 1].score != entry.score:
            current_rank = i + 1
        ranked.append(RankedEntry(id=entry.id, score=entry.score, rank=current_rank))

    return ranked


def compute_effective_placements(entries: Iterable[ScoredEntry]) -> Dict[str, int]:
    """
    Map each entry id to its effective placement for bonus thresholds.

    A value's placement is 1 + the number of entries with a strictly
    greater value, so a tie group shares a placement and the next
    distinct value skips ahead by the size of the group.
    """
    entries = list(entries)
    values = [e.score for e in entries]

    placement_by_value: Dict[float, int] = {}
    for value in set(values):
        placement_by_value[value] = 1 + sum(1 for other in values if other > value)

    return {e.id: placement_by_value[e.score] for e in entries}


def placement_groups(placements: Mapping[str, int]) -> List[List[str]]:
    """Group entry ids by placement, best placement first."""
    groups: Dict[int, List[str]] = {}
    for entry_id, placement in placements.items():
        groups.setdefault(placement, []).append(entry_id)
    return [groups[p] for p in sorted(groups)]


def individual_results(
    activities: Iterable[Activity],
    point_records_by_activity: Mapping[str, Sequence[PointRecord]],
) -> Dict[str, List[RankedEntry]]:
    """
    Rank participants within each completed individual activity.

    Only participant records count; an activity with no participant
    records is left out of the result.

    Returns:
        Dict mapping activity id to ranked participant entries
    """
    results: Dict[str, List[RankedEntry]] = {}

    for activity in activities:
        if activity.type is not ActivityType.INDIVIDUAL or not activity.completed:
            continue

        entries = [
            ScoredEntry(id=record.participant_id, score=record.raw_value or 0)
            for record in point_records_by_activity.get(activity.id, [])
            if record.kind is ScoreKind.INDIVIDUAL and record.participant_id
        ]
        if entries:
            results[activity.id] = rank_entries(entries)

    return results


def compute_mvp(
    individual_activities: Iterable[Activity],
    per_activity_results: Mapping[str, Sequence[RankedEntry]],
    participants: Iterable[Participant] = (),
) -> Optional[MVPResult]:
    """
    Find the participant with the best average rank across individual activities.

    Only completed individual activities with at least one ranked entry
    are considered, and only participants ranked in every one of them
    are eligible. Ties on average rank go to the participant whose name
    sorts first, then to the lowest id.

    Args:
        individual_activities: Candidate activities (others are ignored)
        per_activity_results: Activity id -> ranked participant entries
        participants: Used for names and team ids in the result

    Returns:
        MVPResult, or None if no participant was ranked in every activity
    """
    activities = [
        a for a in individual_activities
        if a.type is ActivityType.INDIVIDUAL and a.completed and per_activity_results.get(a.id)
    ]
    if not activities:
        return None

    by_id = {p.id: p for p in participants}

    ranks_by_participant: Dict[str, List[ActivityRank]] = {}
    for activity in activities:
        for entry in per_activity_results[activity.id]:
            ranks_by_participant.setdefault(entry.id, []).append(
                ActivityRank(
                    activity_id=activity.id,
                    activity_name=activity.name,
                    rank=entry.rank,
                    score=entry.score,
                )
            )

    candidates = []
    for participant_id, ranks in ranks_by_participant.items():
        if len({r.activity_id for r in ranks}) != len(activities):
            continue
        average_rank = sum(r.rank for r in ranks) / len(ranks)
        participant = by_id.get(participant_id)
        name = participant.name if participant else participant_id
        candidates.append((average_rank, name, participant_id, ranks))

    if not candidates:
        logger.debug('No participant ranked in all %d individual activities', len(activities))
        return None

    average_rank, name, participant_id, ranks = min(candidates, key=lambda c: (c[0], c[1], c[2]))
    participant = by_id.get(participant_id)

    return MVPResult(
        participant_id=participant_id,
        participant_name=name,
        team_id=participant.team_id if participant else '',
        average_rank=average_rank,
        activity_ranks=ranks,
    )


def determine_activity_winner(
    point_records: Iterable[PointRecord],
    teams: Iterable[Team],
) -> Optional[Team]:
    """
    Team whose record for an activity has strictly the most points.

    Ties for the most points declare no winner.
    """
    team_records = [r for r in point_records if r.kind is ScoreKind.TEAM and r.team_id]
    if not team_records:
        return None

    best = max(r.points for r in team_records)
    leaders = [r for r in team_records if r.points == best]
    if len(leaders) > 1:
        return None

    return next((t for t in teams if t.id == leaders[0].team_id), None)
