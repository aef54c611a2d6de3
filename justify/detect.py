# justify/detect.py
from __future__ import annotations

import logging
import os
from pathlib import Path

from .targets import Target, TargetKind

logger = logging.getLogger(__name__)


def detect_all(root: Path) -> list[Target]:
    """
    Synthesize one target per toolchain marker found at the project root.

    Probe order is fixed (Cargo.toml, go.mod, package.json, CMakeLists.txt)
    and determines output order. Only existence is checked.
    """
    out: list[Target] = []

    if (root / "Cargo.toml").exists():
        out.append(
            Target(
                name="rust-app",
                kind=TargetKind.RUST,
                program=os.path.join(root, "target", "debug", "app"),
            )
        )
    if (root / "go.mod").exists():
        out.append(Target(name="go-app", kind=TargetKind.GO, program=str(root)))
    if (root / "package.json").exists():
        out.append(
            Target(
                name="node-app",
                kind=TargetKind.NODE,
                program=os.path.join(root, "index.js"),
            )
        )
    if (root / "CMakeLists.txt").exists():
        out.append(
            Target(
                name="cpp-app",
                kind=TargetKind.CPP,
                program=os.path.join(root, "build", "app"),
            )
        )

    logger.debug("detected %d target(s) in %s", len(out), root)
    return out
