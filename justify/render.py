# justify/render.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from importlib import resources
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError

from .errors import ProjectTypeNotDetectedError, TemplateExecutionError, TemplateParseError

logger = logging.getLogger(__name__)

DEFAULT_CMAKE_DIRS = ("build", ".build", "cmake-build-debug")
DEFAULT_CPP_EXES = ("app", "main", "Debug/app", "Debug/main")
DEFAULT_MAKE_EXES = ("app", "main", "a.out")
DEFAULT_GO_EXES = ("app", "main")
DEFAULT_NODE_ENTRIES = (
    "dist/index.js",
    "dist/server/index.js",
    "dist/server/entry.mjs",
    "build/index.js",
    ".next/standalone/server.js",
)
DEFAULT_CARGO_BIN = "app"


class ProjectType(Enum):
    AUTO = "auto"
    RUST = "rust"
    GO = "go"
    CPP = "cpp"
    NODE = "node"


@dataclass(frozen=True)
class RenderOptions:
    """
    Values exposed to a Justfile template.

    Sequence fields keep caller order; the first element is the preferred
    candidate. Duplicates are kept as given.
    """

    cmake_dirs: tuple[str, ...] = DEFAULT_CMAKE_DIRS
    cpp_exe_candidates: tuple[str, ...] = DEFAULT_CPP_EXES
    make_exe_candidates: tuple[str, ...] = DEFAULT_MAKE_EXES
    go_exe_candidates: tuple[str, ...] = DEFAULT_GO_EXES
    node_entries: tuple[str, ...] = DEFAULT_NODE_ENTRIES
    attach_on_dev: bool = True
    cargo_bin_guess: str = DEFAULT_CARGO_BIN


def _environment() -> Environment:
    return Environment(
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def normalize_lf(text: str) -> str:
    return text.replace("\r\n", "\n")


def render(template_text: str, options: RenderOptions) -> str:
    """
    Render a Justfile template with the given options.

    CRLF pairs are normalized to LF before parsing, so the output never
    contains carriage returns. Syntax errors raise TemplateParseError;
    references to unknown fields (or any other failure while rendering)
    raise TemplateExecutionError. Nothing is returned on error.
    """
    env = _environment()
    try:
        template = env.from_string(normalize_lf(template_text))
    except TemplateSyntaxError as e:
        raise TemplateParseError(f"template syntax error at line {e.lineno}: {e.message}") from e

    try:
        rendered = template.render(**asdict(options))
    except TemplateError as e:
        raise TemplateExecutionError(f"template execution failed: {e}") from e
    except Exception as e:
        raise TemplateExecutionError(f"template execution failed: {type(e).__name__}: {e}") from e

    return rendered


def split_clean(value: str) -> list[str]:
    """
    Split a comma-separated string into trimmed, non-empty pieces.

      "  a, b ,, c  , " -> ["a", "b", "c"]
    """
    out: list[str] = []
    for part in value.split(","):
        part = part.strip()
        if part:
            out.append(part)
    return out


def load_template(project_type: ProjectType) -> str:
    if project_type is ProjectType.AUTO:
        raise ValueError("resolve 'auto' with detect_project_type() before loading a template")
    name = f"Justfile.{project_type.value}.j2"
    return resources.files("justify").joinpath("templates", name).read_text(encoding="utf-8")


def _has_suffix(root: Path, suffix: str) -> bool:
    try:
        entries = list(root.iterdir())
    except OSError:
        return False
    return any(entry.is_file() and entry.name.endswith(suffix) for entry in entries)


def detect_project_type(root: Path) -> ProjectType:
    """
    Pick the bundled template for a project directory.

    Priority: rust > go > cpp > node.
    """
    if (root / "Cargo.toml").exists():
        detected = ProjectType.RUST
    elif (root / "go.mod").exists() or _has_suffix(root, ".go"):
        detected = ProjectType.GO
    elif (root / "CMakeLists.txt").exists() or (root / "Makefile").exists():
        detected = ProjectType.CPP
    elif (root / "package.json").exists():
        detected = ProjectType.NODE
    else:
        raise ProjectTypeNotDetectedError(
            "unable to detect project type (use --type or --template)"
        )
    logger.debug("detected project type %s in %s", detected.value, root)
    return detected
