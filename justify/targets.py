# justify/targets.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import RegistryNotFoundError, RegistryParseError
from .fs import write_file

logger = logging.getLogger(__name__)

STATE_DIR = ".justify"
TARGETS_FILENAME = "targets.json"
DEFAULT_REGISTRY_VERSION = 1

# Program value meaning "attach to a running Node dev server" instead of launching.
ATTACH_NODE = "attach:node"


class TargetKind(str, Enum):
    RUST = "rust"
    GO = "go"
    CPP = "cpp"
    NODE = "node"


class RequestMode(str, Enum):
    LAUNCH = "launch"
    ATTACH = "attach"


@dataclass
class Target:
    name: str
    kind: TargetKind
    program: str
    cwd: str | None = None
    args: list[str] | None = None
    env: dict[str, str] | None = None
    request: RequestMode | None = None
    port: int | None = None

    @property
    def effective_request(self) -> RequestMode:
        return self.request or RequestMode.LAUNCH

    @property
    def is_attach(self) -> bool:
        return self.program == ATTACH_NODE

    def to_dict(self) -> dict[str, Any]:
        """
        JSON-ready mapping. Unset optional fields are omitted; a port of 0
        means unused and is omitted too.
        """
        out: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "program": self.program,
        }
        if self.cwd is not None:
            out["cwd"] = self.cwd
        if self.args is not None:
            out["args"] = list(self.args)
        if self.env is not None:
            out["env"] = dict(self.env)
        if self.request is not None:
            out["request"] = self.request.value
        if self.port:
            out["port"] = self.port
        return out


@dataclass
class TargetsFile:
    version: int = DEFAULT_REGISTRY_VERSION
    targets: list[Target] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "targets": [t.to_dict() for t in self.targets],
        }


def targets_path(root: Path) -> Path:
    return root / STATE_DIR / TARGETS_FILENAME


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _field_error(path: Path, field_name: str, expected: str, value: object) -> RegistryParseError:
    return RegistryParseError(
        f"{path}: invalid {field_name} (expected {expected}, got {_type_name(value)})"
    )


def _parse_str(path: Path, field_name: str, value: object) -> str:
    if not isinstance(value, str):
        raise _field_error(path, field_name, "string", value)
    return value


def _parse_enum(path: Path, field_name: str, enum_cls: type[Enum], value: object) -> Any:
    if not isinstance(value, str):
        raise _field_error(path, field_name, "string", value)
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise RegistryParseError(
            f"{path}: invalid {field_name} (expected one of {allowed}, got {value!r})"
        ) from None


def _parse_target(path: Path, idx: int, raw: object) -> Target:
    prefix = f"targets[{idx}]"
    if not isinstance(raw, dict):
        raise _field_error(path, prefix, "object", raw)

    name = _parse_str(path, f"{prefix}.name", raw.get("name"))
    if not name.strip():
        raise RegistryParseError(f"{path}: invalid {prefix}.name (expected non-empty string)")
    kind = _parse_enum(path, f"{prefix}.kind", TargetKind, raw.get("kind"))
    program = _parse_str(path, f"{prefix}.program", raw.get("program"))

    cwd: str | None = None
    if raw.get("cwd") is not None:
        cwd = _parse_str(path, f"{prefix}.cwd", raw["cwd"])

    args: list[str] | None = None
    raw_args = raw.get("args")
    if raw_args is not None:
        if not isinstance(raw_args, list) or not all(isinstance(a, str) for a in raw_args):
            raise _field_error(path, f"{prefix}.args", "array of strings", raw_args)
        args = list(raw_args)

    env: dict[str, str] | None = None
    raw_env = raw.get("env")
    if raw_env is not None:
        if not isinstance(raw_env, dict) or not all(
            isinstance(v, str) for v in raw_env.values()
        ):
            raise _field_error(path, f"{prefix}.env", "object of strings", raw_env)
        env = dict(raw_env)

    request: RequestMode | None = None
    if raw.get("request") is not None:
        request = _parse_enum(path, f"{prefix}.request", RequestMode, raw["request"])

    port: int | None = None
    raw_port = raw.get("port")
    if raw_port is not None:
        if isinstance(raw_port, bool) or not isinstance(raw_port, int) or raw_port < 0:
            raise _field_error(path, f"{prefix}.port", "non-negative integer", raw_port)
        port = raw_port or None

    return Target(
        name=name,
        kind=kind,
        program=program,
        cwd=cwd,
        args=args,
        env=env,
        request=request,
        port=port,
    )


def parse_targets_file(path: Path, text: str) -> TargetsFile:
    """
    Parse registry JSON. Unknown fields are dropped; a missing or zero
    version is read as 1.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RegistryParseError(f"Invalid JSON in {path}: {e.msg} (line {e.lineno})") from e
    except RecursionError as e:
        raise RegistryParseError(f"Invalid JSON in {path}: nested too deeply") from e

    if not isinstance(data, dict):
        raise _field_error(path, "registry", "object", data)

    raw_version = data.get("version")
    if raw_version is None:
        raw_version = 0
    if isinstance(raw_version, bool) or not isinstance(raw_version, int):
        raise _field_error(path, "version", "integer", raw_version)
    version = raw_version or DEFAULT_REGISTRY_VERSION

    raw_targets = data.get("targets")
    if raw_targets is None:
        raw_targets = []
    if not isinstance(raw_targets, list):
        raise _field_error(path, "targets", "array", raw_targets)

    targets = [_parse_target(path, idx, raw) for idx, raw in enumerate(raw_targets)]
    return TargetsFile(version=version, targets=targets)


def load_targets(root: Path) -> TargetsFile:
    path = targets_path(root)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise RegistryNotFoundError(f"{path} does not exist") from e
    except UnicodeDecodeError as e:
        raise RegistryParseError(f"{path} is not valid UTF-8: {e.reason}") from e

    registry = parse_targets_file(path, text)
    logger.debug("loaded %d target(s) from %s", len(registry.targets), path)
    return registry


def dump_targets_file(registry: TargetsFile) -> str:
    return json.dumps(registry.to_dict(), indent=2) + "\n"


def save_targets(root: Path, registry: TargetsFile, overwrite: bool = False) -> Path:
    """
    Write the registry to <root>/.justify/targets.json.

    Raises AlreadyExistsError when the file exists and overwrite is false.
    """
    path = targets_path(root)
    write_file(path, dump_targets_file(registry), overwrite=overwrite)
    return path


def upsert_target(root: Path, target: Target) -> TargetsFile:
    """
    Replace the target with the same name (keeping its position) or append it.
    """
    try:
        registry = load_targets(root)
    except RegistryNotFoundError:
        registry = TargetsFile(version=DEFAULT_REGISTRY_VERSION)

    for idx, existing in enumerate(registry.targets):
        if existing.name == target.name:
            registry.targets[idx] = target
            logger.debug("replaced target %r at position %d", target.name, idx)
            break
    else:
        registry.targets.append(target)
        logger.debug("appended target %r", target.name)

    save_targets(root, registry, overwrite=True)
    return registry
