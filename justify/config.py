# justify/config.py
from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from .errors import JustifyConfigError
from .render import ProjectType, split_clean
from .targets import STATE_DIR

CONFIG_FILENAME = "config.toml"

_LIST_KEYS = {
    "cmake_dirs": "cmake_dirs",
    "cpp_exes": "cpp_exe_candidates",
    "make_exes": "make_exe_candidates",
    "go_exes": "go_exe_candidates",
    "node_entries": "node_entries",
}


@dataclass
class RenderConfig:
    """
    Render defaults read from [render] in .justify/config.toml.

    None means "not set": the CLI default applies.
    """

    cmake_dirs: list[str] | None = None
    cpp_exe_candidates: list[str] | None = None
    make_exe_candidates: list[str] | None = None
    go_exe_candidates: list[str] | None = None
    node_entries: list[str] | None = None
    attach_on_dev: bool | None = None
    cargo_bin_guess: str | None = None
    template: Path | None = None
    project_type: ProjectType | None = None


def config_path(root: Path) -> Path:
    return root / STATE_DIR / CONFIG_FILENAME


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _field_type_error(path: Path, field: str, expected: str, value: object) -> JustifyConfigError:
    return JustifyConfigError(
        f"{path}: invalid {field} (expected {expected}, got {_type_name(value)})"
    )


def _parse_list(path: Path, key: str, value: object) -> list[str]:
    if isinstance(value, str):
        return split_clean(value)
    if not isinstance(value, list):
        raise _field_type_error(
            path, f"[render].{key}", "array of strings or comma-separated string", value
        )
    parsed: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str):
            raise _field_type_error(path, f"[render].{key}[{idx}]", "string", item)
        item = item.strip()
        if item:
            parsed.append(item)
    return parsed


def load_render_config(root: Path) -> RenderConfig:
    """
    Load render defaults. A missing file yields an empty RenderConfig.
    """
    path = config_path(root)
    if not path.exists():
        return RenderConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise JustifyConfigError(f"Invalid TOML in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise JustifyConfigError(f"{path} is not valid UTF-8: {e.reason}") from e

    cfg = RenderConfig()
    section = data.get("render")
    if section is None:
        return cfg
    if not isinstance(section, dict):
        raise _field_type_error(path, "[render]", "table/object", section)

    for key, attr in _LIST_KEYS.items():
        raw = section.get(key)
        if raw is not None:
            setattr(cfg, attr, _parse_list(path, key, raw))

    raw_attach = section.get("attach_on_dev")
    if raw_attach is not None:
        if not isinstance(raw_attach, bool):
            raise _field_type_error(path, "[render].attach_on_dev", "boolean", raw_attach)
        cfg.attach_on_dev = raw_attach

    raw_cargo = section.get("cargo_bin")
    if raw_cargo is not None:
        if not isinstance(raw_cargo, str) or not raw_cargo.strip():
            raise _field_type_error(path, "[render].cargo_bin", "non-empty string", raw_cargo)
        cfg.cargo_bin_guess = raw_cargo.strip()

    raw_template = section.get("template")
    if raw_template is not None:
        if not isinstance(raw_template, str) or not raw_template.strip():
            raise _field_type_error(path, "[render].template", "non-empty string", raw_template)
        template = Path(raw_template.strip())
        # relative paths are relative to the project root, not the cwd
        cfg.template = template if template.is_absolute() else root / template

    raw_type = section.get("type")
    if raw_type is not None:
        if not isinstance(raw_type, str):
            raise _field_type_error(path, "[render].type", "string", raw_type)
        try:
            cfg.project_type = ProjectType(raw_type.strip().lower())
        except ValueError:
            allowed = ", ".join(t.value for t in ProjectType)
            raise JustifyConfigError(
                f"{path}: invalid [render].type (expected one of {allowed}, got {raw_type!r})"
            ) from None

    return cfg
