"""Integration tests for the competition store, results and CLI."""

import json
import logging
import sys

import pytest

from squadscore.config import clear_config_cache, get_default_rules, load_scoring_rules
from squadscore.errors import InconsistentState, InvalidInput
from squadscore.logging_config import log_file_path, resolve_level, setup_logging
from squadscore.models import (
    Activity,
    ActivityType,
    Participant,
    RawScores,
    ScoreKind,
    Team,
    TeamScoringMode,
)
from squadscore.results import build_results, format_results
from squadscore.schemas import ScoringRules
from squadscore.store import CompetitionStore


@pytest.fixture
def store(tmp_path):
    """Competition with two teams of two, one team and one individual activity."""
    store = CompetitionStore.create(tmp_path / 'competitions' / 'ABC123.json', 'ABC123', 'Office Games')
    store.add_team(Team('red', 'Red Rockets', 'Alice'))
    store.add_team(Team('blue', 'Blue Bolts', 'Bob'))
    for participant in [
        Participant('alice', 'Alice', 'red'),
        Participant('ann', 'Ann', 'red'),
        Participant('bob', 'Bob', 'blue'),
        Participant('ben', 'Ben', 'blue'),
    ]:
        store.add_participant(participant)
    store.add_activity(Activity(id='tug', type=ActivityType.TEAM, name='Tug of war'))
    store.add_activity(Activity(id='darts', type=ActivityType.INDIVIDUAL, name='Darts', unit='points'))
    return store


def totals(store):
    return {t.id: t.total_score for t in store.teams}


DARTS_SCORES = RawScores(participant_scores={'alice': 20, 'ann': 15, 'bob': 10, 'ben': 5})


class TestCompetitionStore:
    """Tests for the save / delete / rule-change sequences."""

    def test_save_win_loss(self, store):
        """Test saving a winner stores records, completes the activity and updates totals."""
        result = store.save_activity_scores('tug', RawScores(winning_team_id='red'))

        assert result.winner_name == 'Red Rockets'
        assert totals(store) == {'red': 50, 'blue': 0}

        tug = store.get_activity('tug')
        assert tug.completed
        assert tug.winner_name == 'Red Rockets'
        assert tug.scoring_mode is TeamScoringMode.WIN_LOSS

    def test_resave_replaces_previous_points(self, store):
        """Test re-entering scores overwrites instead of accumulating."""
        store.save_activity_scores('tug', RawScores(winning_team_id='red'))
        store.save_activity_scores('tug', RawScores(winning_team_id='blue'))

        assert totals(store) == {'red': 0, 'blue': 50}
        assert len(store.point_records_by_activity['tug']) == 2

    def test_individual_scenario(self, store):
        """Test the individual activity totals and participant records."""
        store.save_activity_scores('darts', DARTS_SCORES)

        assert totals(store) == {'red': 65, 'blue': -5}
        individual = [r for r in store.point_records if r.kind is ScoreKind.INDIVIDUAL]
        assert len(individual) == 4
        assert all(r.points == 0 for r in individual)

    def test_persisted_to_disk(self, store):
        """Test a reopened store sees the same data."""
        store.save_activity_scores('tug', RawScores(winning_team_id='red'))
        store.save_activity_scores('darts', DARTS_SCORES)

        reopened = CompetitionStore(store.path)
        assert totals(reopened) == {'red': 115, 'blue': -5}
        assert reopened.point_records == store.point_records
        assert reopened.get_activity('darts').winner_name == 'Red Rockets'

        with open(store.path) as f:
            data = json.load(f)
        assert data['rules']['teamWin'] == 50
        assert data['code'] == 'ABC123'

    def test_delete_activity(self, store):
        """Test deleting an activity removes its records and its points."""
        store.save_activity_scores('tug', RawScores(winning_team_id='red'))
        store.save_activity_scores('darts', DARTS_SCORES)
        store.delete_activity('darts')

        assert totals(store) == {'red': 50, 'blue': 0}
        assert all(r.activity_id == 'tug' for r in store.point_records)
        assert [a.id for a in store.activities] == ['tug']

    def test_update_rules(self, store):
        """Test a rule change rescores every completed activity."""
        store.save_activity_scores('tug', RawScores(winning_team_id='blue'))
        store.save_activity_scores('darts', DARTS_SCORES)

        new_totals = store.update_rules(ScoringRules(first_place=20))

        # tug: blue 50 | darts: red 50 + 20 + 5, blue 0 - 5
        assert new_totals == {'red': 75, 'blue': 45}
        assert CompetitionStore(store.path).rules.first_place == 20

    def test_update_rules_changes_winner(self, store):
        """Test activity winners follow the rescored points."""
        store.save_activity_scores(
            'darts', RawScores(participant_scores={'alice': 3, 'bob': 2, 'ben': 1})
        )
        assert store.get_activity('darts').winner_name == 'Red Rockets'

        store.update_rules(ScoringRules(team_win=0, first_place=0, last_place=10))
        # red: 0 placement, blue: second 5 + last 10
        assert totals(store) == {'red': 0, 'blue': 15}
        assert store.get_activity('darts').winner_name == 'Blue Bolts'

    def test_custom_team_scores(self, store):
        """Test the custom-score toggle is remembered for later rescoring."""
        store.save_activity_scores(
            'tug', RawScores(team_scores={'red': 3, 'blue': 8}), mode=TeamScoringMode.CUSTOM
        )
        store.update_rules(ScoringRules(team_win=100))

        assert totals(store) == {'red': 3, 'blue': 8}
        assert store.get_activity('tug').scoring_mode is TeamScoringMode.CUSTOM

    def test_invalid_save_changes_nothing(self, store, tmp_path):
        """Test a rejected save leaves the file and totals untouched."""
        store.save_activity_scores('tug', RawScores(winning_team_id='red'))
        before = store.path.read_text()

        with pytest.raises(InvalidInput):
            store.save_activity_scores('tug', RawScores())
        with pytest.raises(InconsistentState):
            store.save_activity_scores('darts', RawScores(participant_scores={'zed': 1}))

        assert store.path.read_text() == before
        assert totals(store) == {'red': 50, 'blue': 0}

    def test_empty_save_leaves_activity_open(self, store):
        """Test saving no entries clears records without completing the activity."""
        store.save_activity_scores('darts', RawScores())
        assert not store.get_activity('darts').completed
        assert store.point_records == []

    def test_unknown_activity(self, store):
        """Test operations on a missing activity."""
        with pytest.raises(InconsistentState):
            store.delete_activity('nope')

    def test_recompute_repairs_stale_totals(self, store):
        """Test recompute_totals rebuilds totals from records."""
        store.save_activity_scores('tug', RawScores(winning_team_id='red'))
        store._teams[0].total_score = 999

        assert store.recompute_totals() == {'red': 50, 'blue': 0}
        assert store.recompute_totals() == {'red': 50, 'blue': 0}

    def test_validate_clean_store(self, store):
        """Test a store built through the scoring sequences is consistent."""
        store.save_activity_scores('tug', RawScores(winning_team_id='red'))
        store.save_activity_scores('darts', DARTS_SCORES)
        errors, warnings = store.validate()
        assert errors == []

    def test_create_refuses_overwrite(self, store):
        """Test an existing competition file is never overwritten."""
        with pytest.raises(FileExistsError):
            CompetitionStore.create(store.path, 'ABC123')

    def test_participant_needs_team(self, store):
        """Test a participant can't join a missing team."""
        with pytest.raises(InconsistentState):
            store.add_participant(Participant('zed', 'Zed', 'green'))


class TestResults:
    """Tests for the results summary."""

    def test_results_summary(self, store):
        """Test standings, activity winners and MVP."""
        store.save_activity_scores('tug', RawScores(winning_team_id='blue'))
        store.save_activity_scores('darts', DARTS_SCORES)

        results = build_results(
            store.teams, store.participants, store.activities, store.point_records_by_activity
        )

        assert [s['name'] for s in results['standings']] == ['Red Rockets', 'Blue Bolts']
        assert results['leader']['total_score'] == 65
        assert len(results['podium']) == 2

        by_id = {a['activity_id']: a for a in results['activities']}
        assert by_id['tug']['winner'] == 'Blue Bolts'
        assert by_id['darts']['winner'] == 'Red Rockets'
        assert [e['name'] for e in by_id['darts']['individual']] == ['Alice', 'Ann', 'Bob', 'Ben']

        assert results['mvp'].participant_name == 'Alice'
        assert results['mvp'].average_rank == 1

    def test_tied_standings(self, store):
        """Test teams level on points share a rank."""
        store.save_activity_scores(
            'tug', RawScores(team_scores={'red': 4, 'blue': 4}), mode=TeamScoringMode.CUSTOM
        )
        results = build_results(
            store.teams, store.participants, store.activities, store.point_records_by_activity
        )
        assert [s['rank'] for s in results['standings']] == [1, 1]
        assert results['activities'][0]['winner'] is None
        assert results['mvp'] is None

    def test_format_results(self, store):
        """Test the text rendering."""
        store.save_activity_scores('darts', DARTS_SCORES)
        text = format_results(
            build_results(
                store.teams, store.participants, store.activities, store.point_records_by_activity
            )
        )
        assert 'FINAL STANDINGS' in text
        assert '1. Red Rockets: 65 pts' in text
        assert 'MVP: Alice' in text


class TestConfig:
    """Tests for rules configuration files."""

    def test_default_rules(self):
        """Test shipped defaults match the built-in defaults."""
        clear_config_cache()
        assert get_default_rules() == ScoringRules.get_default()

    def test_load_rules_file(self, tmp_path):
        """Test loading a rules file with camelCase keys."""
        path = tmp_path / 'rules.json'
        path.write_text(json.dumps({'teamWin': 25, 'teamLoss': -5}))
        rules = load_scoring_rules(path)
        assert (rules.team_win, rules.team_loss, rules.first_place) == (25, -5, 10)

    def test_invalid_rules_file(self, tmp_path):
        """Test a malformed rules file is rejected."""
        path = tmp_path / 'rules.json'
        path.write_text(json.dumps({'teamWin': 'lots'}))
        with pytest.raises(ValueError):
            load_scoring_rules(path)

    def test_missing_rules_file(self, tmp_path):
        """Test an explicit missing path raises."""
        with pytest.raises(FileNotFoundError):
            load_scoring_rules(tmp_path / 'nope.json')


class TestCLI:
    """Tests for the score_competition.py entry point."""

    def run(self, monkeypatch, *args):
        import score_competition

        monkeypatch.setattr(sys, 'argv', ['score_competition.py', *args])
        try:
            score_competition.main()
        finally:
            logging.getLogger('squadscore').handlers = []

    def test_score_and_print(self, store, monkeypatch, capsys):
        """Test scoring an individual activity from the command line."""
        self.run(
            monkeypatch, '-c', str(store.path), '--activity', 'darts',
            '--score', 'alice=20', '--score', 'ann=15', '--score', 'bob=10', '--score', 'ben=5',
        )
        out = capsys.readouterr().out
        assert 'Scored darts: winner Red Rockets' in out
        assert '1. Red Rockets: 65 pts' in out
        assert totals(CompetitionStore(store.path)) == {'red': 65, 'blue': -5}

    def test_missing_winner_exits(self, store, monkeypatch, capsys):
        """Test a win/loss save without a winner exits with an error."""
        with pytest.raises(SystemExit) as exc:
            self.run(monkeypatch, '-c', str(store.path), '--activity', 'tug', '-q')
        assert exc.value.code == 1
        assert 'No winning team selected' in capsys.readouterr().out

    def test_winner_and_team_scores_rejected(self, store, monkeypatch, capsys):
        """Test picking a winner and entering team scores together is a usage error."""
        with pytest.raises(SystemExit) as exc:
            self.run(
                monkeypatch, '-c', str(store.path), '--activity', 'tug',
                '--winner', 'red', '--team-score', 'blue=8',
            )
        assert exc.value.code == 2
        assert 'mutually exclusive' in capsys.readouterr().err
        assert not CompetitionStore(store.path).get_activity('tug').completed

    def test_log_file_named_after_competition(self, store, monkeypatch, tmp_path):
        """Test --log-dir writes a per-run log prefixed with the competition code."""
        log_dir = tmp_path / 'logs'
        self.run(
            monkeypatch, '-c', str(store.path), '--activity', 'tug', '--winner', 'red',
            '-q', '--log-level', 'debug', '--log-dir', str(log_dir),
        )
        log_files = list(log_dir.glob('ABC123_*.log'))
        assert len(log_files) == 1
        assert 'Saved 2 point records for Tug of war' in log_files[0].read_text()


class TestLoggingSetup:
    """Tests for the run logging setup."""

    def teardown_method(self):
        logging.getLogger('squadscore').handlers = []

    def test_level_names(self):
        """Test levels given by name or number."""
        assert resolve_level('debug') == logging.DEBUG
        assert resolve_level('WARNING') == logging.WARNING
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_unknown_level(self):
        """Test a misspelled level name is rejected."""
        with pytest.raises(ValueError):
            resolve_level('chatty')

    def test_console_only_by_default(self):
        """Test no file handler without a log directory."""
        logger = setup_logging()
        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]

    def test_quiet_console(self):
        """Test quiet keeps warnings on the console while the logger stays at debug."""
        logger = setup_logging(level='debug', quiet=True)
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.WARNING

    def test_log_file_prefix(self, tmp_path):
        """Test the log file name falls back to the package name."""
        assert log_file_path(tmp_path).name.startswith('squadscore_')
        assert log_file_path(tmp_path, 'ABC123').name.startswith('ABC123_')
