# justify/state.py
from __future__ import annotations

import json
from pathlib import Path

from .errors import StateNotFoundError, StateParseError
from .fs import write_file
from .targets import STATE_DIR

STATE_FILENAME = "state.json"


def state_path(root: Path) -> Path:
    return root / STATE_DIR / STATE_FILENAME


def read_last_used(root: Path) -> str:
    """
    Return the name stored in <root>/.justify/state.json.
    """
    path = state_path(root)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise StateNotFoundError(f"{path} does not exist") from e
    except UnicodeDecodeError as e:
        raise StateParseError(f"{path} is not valid UTF-8: {e.reason}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StateParseError(f"Invalid JSON in {path}: {e.msg}") from e
    except RecursionError as e:
        raise StateParseError(f"Invalid JSON in {path}: nested too deeply") from e
    if not isinstance(data, dict):
        raise StateParseError(f"{path}: expected a JSON object")

    last_used = data.get("last_used", "")
    if not isinstance(last_used, str):
        raise StateParseError(f"{path}: invalid last_used (expected string)")
    return last_used


def write_last_used(root: Path, name: str) -> Path:
    path = state_path(root)
    write_file(path, json.dumps({"last_used": name}, indent=2) + "\n", overwrite=True)
    return path
