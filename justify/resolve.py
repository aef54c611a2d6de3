# justify/resolve.py
from __future__ import annotations

import logging
from pathlib import Path

from .detect import detect_all
from .errors import JustifyError, NoTargetsError, UnknownTargetError
from .state import read_last_used
from .targets import Target, load_targets, targets_path

logger = logging.getLogger(__name__)


def list_targets(root: Path) -> list[Target]:
    """
    Targets from the persisted registry when it exists, else from detection.
    """
    if targets_path(root).exists():
        return load_targets(root).targets
    return detect_all(root)


def find_by_name(targets: list[Target], name: str) -> Target | None:
    for target in targets:
        if target.name == name:
            return target
    return None


def _last_used_or_none(root: Path) -> str | None:
    try:
        return read_last_used(root) or None
    except (JustifyError, OSError) as e:
        logger.debug("ignoring last-used marker: %s", e)
        return None


def resolve_program(root: Path, name: str | None = None) -> str:
    """
    Pick the program to launch.

    Precedence: explicit name, then the last-used marker (ignored when it
    is unreadable or names a missing target), then the first listed target.
    """
    targets = list_targets(root)

    if name:
        target = find_by_name(targets, name)
        if target is None:
            raise UnknownTargetError(name)
        return target.program

    last_used = _last_used_or_none(root)
    if last_used:
        target = find_by_name(targets, last_used)
        if target is not None:
            logger.debug("using last-used target %r", last_used)
            return target.program

    if not targets:
        raise NoTargetsError()
    return targets[0].program
