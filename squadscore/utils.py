"""Utility functions for competition file I/O."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('squadscore.utils')


def load_json(
    path: Path | str,
    schema: type[T] | None = None,
) -> Any | T:
    """
    Load JSON file with optional schema validation.

    Args:
        path: Path to JSON file (str or Path object)
        schema: Optional Pydantic model to validate against

    Returns:
        Parsed JSON (validated if schema provided)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        ValueError: If schema validation fails

    Example:
        from squadscore.schemas import CompetitionFile
        competition = load_json('data/competitions/ABC123.json', schema=CompetitionFile)
    """
    path = Path(path)

    logger.debug(f'Loading JSON from: {path}')

    if not path.exists():
        logger.error(f'File not found: {path}')
        raise FileNotFoundError(f'File not found: {path}')

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
        raise json.JSONDecodeError(f'Invalid JSON in {path}: {e.msg}', e.doc, e.pos) from e

    if schema:
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            logger.error(f'Schema validation failed for {path}: {e}')
            raise ValueError(f'Schema validation failed for {path}:\n{e}') from e

    return data


def save_json(
    path: Path | str,
    data: Any,
    indent: int = 2,
) -> None:
    """
    Save data as JSON, replacing the target file in one step.

    The data is written to a temporary file next to the target and then
    moved over it, so readers see either the old or the new file.

    Args:
        path: Path to write to (str or Path object)
        data: JSON-serializable data or Pydantic model (dumped by alias)
        indent: Indentation level (default: 2 spaces)

    Raises:
        TypeError: If data is not JSON-serializable
        OSError: If file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    json_data = data.model_dump(mode='json', by_alias=True) if isinstance(data, BaseModel) else data

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f'.{path.name}.', suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(json_data, f, indent=indent, ensure_ascii=False)
        os.replace(tmp_name, path)
    except (TypeError, OSError) as e:
        logger.error(f'Failed to write {path}: {e}')
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug(f'Saved JSON to: {path}')
