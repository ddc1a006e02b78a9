"""Unit tests for validation functions."""

import dataclasses

from squadscore.models import Activity, ActivityType, Participant, PointRecord, ScoreKind, Team
from squadscore.schemas import ScoringRules
from squadscore.scoring import score_individual
from squadscore.validators import (
    validate_competition,
    validate_point_records,
    validate_rules,
    validate_team_totals,
)

TEAMS = [Team('a', 'Team A', 'Alice'), Team('b', 'Team B', 'Bob')]
PARTICIPANTS = [Participant('alice', 'Alice', 'a'), Participant('bob', 'Bob', 'b'), Participant('ben', 'Ben', 'b')]
DARTS = Activity(id='darts', type=ActivityType.INDIVIDUAL, completed=True)
TUG = Activity(id='tug', type=ActivityType.TEAM, completed=True)


class TestRulesValidation:
    """Tests for rule sanity checks."""

    def test_default_rules(self):
        """Test the default rules raise no warnings."""
        assert validate_rules(ScoringRules.get_default()) == []

    def test_loss_pays_more_than_win(self):
        """Test a losing team paid at least as much as a winner."""
        warnings = validate_rules(ScoringRules(team_win=0, team_loss=10))
        assert len(warnings) == 1
        assert 'Team loss (10)' in warnings[0]

    def test_inverted_placements(self):
        """Test second beating first and last beating second."""
        warnings = validate_rules(ScoringRules(first_place=1, second_place=5, last_place=8))
        assert len(warnings) == 2


class TestPointRecordValidation:
    """Tests for per-activity record checks."""

    def test_scored_activity_is_valid(self):
        """Test records produced by the scorer pass."""
        result = score_individual(
            DARTS, {'alice': 4, 'bob': 3, 'ben': 1}, ScoringRules.get_default(), TEAMS, PARTICIPANTS
        )
        assert validate_point_records(DARTS, result.point_records) == []

    def test_participant_record_with_points(self):
        """Test bonus points stored on a participant record."""
        records = [PointRecord('darts', ScoreKind.INDIVIDUAL, 10, team_id='a', participant_id='alice')]
        errors = validate_point_records(DARTS, records)
        assert len(errors) == 1
        assert 'belong on the team record' in errors[0]

    def test_duplicate_team_records(self):
        """Test two records for the same team in one activity."""
        records = [
            PointRecord('tug', ScoreKind.TEAM, 50, team_id='a'),
            PointRecord('tug', ScoreKind.TEAM, 50, team_id='a'),
        ]
        errors = validate_point_records(TUG, records)
        assert any('duplicate' in e for e in errors)

    def test_participant_record_in_team_activity(self):
        """Test team activities can't hold participant records."""
        records = [PointRecord('tug', ScoreKind.INDIVIDUAL, 0, team_id='a', participant_id='alice')]
        errors = validate_point_records(TUG, records)
        assert errors == ['tug is a team activity but has participant records']

    def test_record_for_other_activity(self):
        """Test a record filed under the wrong activity."""
        records = [PointRecord('darts', ScoreKind.TEAM, 5, team_id='a')]
        errors = validate_point_records(TUG, records)
        assert errors == ['tug has a record for activity darts']


class TestTeamTotalValidation:
    """Tests for cached total checks."""

    def test_matching_totals(self):
        """Test totals equal to record sums pass."""
        teams = [dataclasses.replace(TEAMS[0], total_score=50), TEAMS[1]]
        records = [
            PointRecord('tug', ScoreKind.TEAM, 50, team_id='a'),
            PointRecord('tug', ScoreKind.TEAM, 0, team_id='b'),
        ]
        assert validate_team_totals(teams, records) == []

    def test_stale_total(self):
        """Test a total that was never recomputed."""
        teams = [dataclasses.replace(TEAMS[0], total_score=100), TEAMS[1]]
        records = [PointRecord('tug', ScoreKind.TEAM, 50, team_id='a')]
        errors = validate_team_totals(teams, records)
        assert errors == ['Team A total is 100 but its records sum to 50']

    def test_unknown_team(self):
        """Test records for a missing team are reported, not raised."""
        errors = validate_team_totals(TEAMS, [PointRecord('tug', ScoreKind.TEAM, 5, team_id='zzz')])
        assert len(errors) == 1
        assert 'zzz' in errors[0]


class TestCompetitionValidation:
    """Tests for whole-competition checks."""

    def test_orphan_records(self):
        """Test records left behind by a deleted activity."""
        records = {'gone': [PointRecord('gone', ScoreKind.TEAM, 5, team_id='a')]}
        errors, warnings = validate_competition(ScoringRules.get_default(), TEAMS, [], records)
        assert 'Point records left for deleted activity gone' in errors
        assert warnings == []

    def test_open_activity_with_records(self):
        """Test records on an activity that was never completed."""
        activity = Activity(id='tug', type=ActivityType.TEAM)
        teams = [dataclasses.replace(TEAMS[0], total_score=50), TEAMS[1]]
        records = {'tug': [PointRecord('tug', ScoreKind.TEAM, 50, team_id='a')]}
        errors, warnings = validate_competition(ScoringRules.get_default(), teams, [activity], records)
        assert errors == []
        assert warnings == ['tug has point records but is not completed']
