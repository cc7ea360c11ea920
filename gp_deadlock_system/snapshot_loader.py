"""
Offline lock snapshots: pg_locks rows saved as JSON.
"""

import json
import logging
from typing import Any, Dict, List

from .core.exceptions import SourceUnavailable
from .utils.validator import SnapshotValidator

logger = logging.getLogger(__name__)


def load_snapshot_file(file_path: str) -> List[Dict[str, Any]]:
    """
    Load lock rows from a JSON file.

    The file holds either a list of rows or ``{"rows": [...]}``; each row uses
    the pg_locks column names.

    Args:
        file_path: Path to the snapshot file

    Returns:
        List of row dictionaries

    Raises:
        SourceUnavailable: If the file cannot be read or decoded
        ValidationError: If the document is not a list of rows
    """
    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except OSError as e:
        raise SourceUnavailable(f"cannot read snapshot file {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SourceUnavailable(f"snapshot file {file_path} is not valid JSON: {e}") from e

    rows = SnapshotValidator.validate_rows_container(data)
    logger.info(f"Loaded {len(rows)} lock rows from {file_path}")
    return rows


def save_snapshot_file(rows: List[Dict[str, Any]], file_path: str):
    """Write lock rows in the format read by load_snapshot_file."""
    with open(file_path, 'w') as f:
        json.dump({'rows': rows}, f, indent=2, default=str)
    logger.info(f"Saved {len(rows)} lock rows to {file_path}")
