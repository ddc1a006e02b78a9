"""Scoring rules configuration."""

import logging
from functools import lru_cache
from pathlib import Path

from .schemas import ScoringRules
from .utils import load_json

logger = logging.getLogger('squadscore.config')

DEFAULT_RULES_PATH = Path(__file__).parent.parent / 'data' / 'scoring_rules.json'


@lru_cache(maxsize=8)
def load_scoring_rules(path: Path | str | None = None) -> ScoringRules:
    """
    Load scoring rules from a JSON file.

    Rules are cached per path after first load. Without a path the
    shipped data/scoring_rules.json is used, falling back to
    ScoringRules.get_default() if that file is absent.

    Returns:
        ScoringRules object with validated values

    Raises:
        FileNotFoundError: If an explicit path doesn't exist
        ValueError: If the file has invalid structure

    Example:
        from squadscore.config import load_scoring_rules
        rules = load_scoring_rules('my_rules.json')
        print(f"Team win: {rules.team_win}")
    """
    if path is None:
        if not DEFAULT_RULES_PATH.exists():
            logger.debug(f'No rules file at {DEFAULT_RULES_PATH}, using defaults')
            return ScoringRules.get_default()
        path = DEFAULT_RULES_PATH

    return load_json(path, schema=ScoringRules)


def get_default_rules() -> ScoringRules:
    """Get the rules new competitions start with."""
    return load_scoring_rules()


def clear_config_cache() -> None:
    """
    Clear the rules cache.

    Use this if a rules file is modified during runtime.
    """
    load_scoring_rules.cache_clear()
