"""
Cursor State Persistence

Keeps the relay's pagination cursor in a small JSON file so a restarted relay
resumes where it stopped.
"""

import logging
import os
from pathlib import Path

import orjson
from pydantic import ValidationError

from utils.schemas import CursorState

logger = logging.getLogger(__name__)


def load_cursor_state(path: str) -> CursorState:
    """
    Load cursor state from disk.

    Args:
        path: Path to the cursor state file

    Returns:
        Stored CursorState, or an empty one if the file does not exist

    Raises:
        ValueError: If the file content is not a valid cursor state
    """
    state_path = Path(path)

    if not state_path.exists():
        logger.info("No cursor state found, starting fresh: path=%s", path)
        return CursorState()

    try:
        return CursorState.model_validate(orjson.loads(state_path.read_bytes()))
    except (orjson.JSONDecodeError, ValidationError) as e:
        error_msg = f"Invalid cursor state file: {path} - {e}"
        logger.error(error_msg)
        raise ValueError(error_msg) from e


def save_cursor_state(path: str, state: CursorState) -> None:
    """
    Atomically write cursor state to disk, creating parent directories.

    Args:
        path: Path to the cursor state file
        state: State to persist
    """
    state_path = Path(path)
    state_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = state_path.with_name(state_path.name + ".tmp")
    tmp_path.write_bytes(orjson.dumps(state.model_dump(mode="json")))
    os.replace(tmp_path, state_path)

    logger.debug(
        "Cursor state saved",
        extra={"file_path": path, "cursor": state.cursor, "newest_id": state.newest_id},
    )
