# justify/editors.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .errors import AlreadyExistsError
from .fs import write_file
from .targets import Target

VSCODE_DIR = ".vscode"
TASKS_VERSION = "2.0.0"
LAUNCH_VERSION = "0.2.0"


def vscode_tasks(targets: list[Target]) -> dict[str, Any]:
    return {
        "version": TASKS_VERSION,
        "tasks": [
            {
                "label": t.name,
                "type": "shell",
                "command": t.program,
            }
            for t in targets
        ],
    }


def _launch_configuration(target: Target) -> dict[str, Any]:
    cfg: dict[str, Any] = {
        "name": target.name,
        "type": target.kind.value,
        "request": target.effective_request.value,
        "program": target.program,
    }
    if target.cwd is not None:
        cfg["cwd"] = target.cwd
    if target.args is not None:
        cfg["args"] = list(target.args)
    if target.env is not None:
        cfg["env"] = dict(target.env)
    if target.port:
        cfg["port"] = target.port
    return cfg


def vscode_launch(targets: list[Target]) -> dict[str, Any]:
    return {
        "version": LAUNCH_VERSION,
        "configurations": [_launch_configuration(t) for t in targets],
    }


def generate_vscode(root: Path, targets: list[Target], force: bool = False) -> list[Path]:
    """
    Write .vscode/tasks.json and .vscode/launch.json for the given targets.

    Both files are checked before either is written, so a refused run
    leaves the directory untouched.
    """
    vscode_dir = root / VSCODE_DIR
    outputs = [
        (vscode_dir / "tasks.json", vscode_tasks(targets)),
        (vscode_dir / "launch.json", vscode_launch(targets)),
    ]
    if not force:
        for path, _ in outputs:
            if path.exists():
                raise AlreadyExistsError(f"{path} exists (use --force)")

    for path, payload in outputs:
        write_file(path, json.dumps(payload, indent=2) + "\n", overwrite=True)
    return [path for path, _ in outputs]
