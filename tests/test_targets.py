# test_targets.py
import json
from pathlib import Path

import pytest

from justify.errors import AlreadyExistsError, RegistryNotFoundError, RegistryParseError
from justify.targets import (
    ATTACH_NODE,
    RequestMode,
    Target,
    TargetKind,
    TargetsFile,
    load_targets,
    save_targets,
    targets_path,
    upsert_target,
)


def write_registry(tmp_path: Path, payload: object) -> Path:
    path = targets_path(tmp_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = payload if isinstance(payload, str) else json.dumps(payload)
    path.write_text(text, encoding="utf-8")
    return path


def test_to_dict_omits_unset_optional_fields() -> None:
    target = Target(name="api", kind=TargetKind.GO, program="./bin/api")

    assert target.to_dict() == {"name": "api", "kind": "go", "program": "./bin/api"}


def test_to_dict_keeps_explicit_empty_values_but_drops_zero_port() -> None:
    target = Target(
        name="api",
        kind=TargetKind.GO,
        program="./bin/api",
        cwd="",
        args=[],
        env={},
        port=0,
    )

    assert target.to_dict() == {
        "name": "api",
        "kind": "go",
        "program": "./bin/api",
        "cwd": "",
        "args": [],
        "env": {},
    }


def test_effective_request_defaults_to_launch() -> None:
    target = Target(name="web", kind=TargetKind.NODE, program=ATTACH_NODE)

    assert target.effective_request is RequestMode.LAUNCH
    assert target.is_attach is True


def test_save_then_load_keeps_every_field(tmp_path: Path) -> None:
    target = Target(
        name="web",
        kind=TargetKind.NODE,
        program=ATTACH_NODE,
        cwd="frontend",
        args=["--inspect", "--port", "3000"],
        env={"NODE_ENV": "development"},
        request=RequestMode.ATTACH,
        port=9229,
    )
    save_targets(tmp_path, TargetsFile(targets=[target]))

    loaded = load_targets(tmp_path)

    assert loaded.version == 1
    assert loaded.targets == [target]


def test_save_creates_state_dir_and_omits_nulls(tmp_path: Path) -> None:
    path = save_targets(
        tmp_path,
        TargetsFile(targets=[Target(name="a", kind=TargetKind.RUST, program="A")]),
    )

    assert path == tmp_path / ".justify" / "targets.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {
        "version": 1,
        "targets": [{"name": "a", "kind": "rust", "program": "A"}],
    }


def test_save_refuses_existing_file_without_overwrite(tmp_path: Path) -> None:
    path = write_registry(tmp_path, {"version": 1, "targets": []})
    before = path.read_text(encoding="utf-8")

    with pytest.raises(AlreadyExistsError) as excinfo:
        save_targets(
            tmp_path,
            TargetsFile(targets=[Target(name="a", kind=TargetKind.GO, program="A")]),
        )

    assert "exists" in str(excinfo.value)
    assert path.read_text(encoding="utf-8") == before


def test_save_overwrite_truncates(tmp_path: Path) -> None:
    write_registry(tmp_path, {"version": 1, "targets": [{"name": "x" * 200, "kind": "go", "program": "X"}]})

    save_targets(tmp_path, TargetsFile(), overwrite=True)

    assert load_targets(tmp_path).targets == []


def test_load_missing_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(RegistryNotFoundError) as excinfo:
        load_targets(tmp_path)

    assert isinstance(excinfo.value, FileNotFoundError)


@pytest.mark.parametrize("payload", [{"targets": []}, {"version": 0, "targets": []}])
def test_load_normalizes_missing_version(tmp_path: Path, payload: dict) -> None:
    write_registry(tmp_path, payload)

    assert load_targets(tmp_path).version == 1


def test_load_keeps_explicit_version(tmp_path: Path) -> None:
    write_registry(tmp_path, {"version": 2, "targets": []})

    assert load_targets(tmp_path).version == 2


def test_load_invalid_json(tmp_path: Path) -> None:
    write_registry(tmp_path, '{"version": 1,')

    with pytest.raises(RegistryParseError) as excinfo:
        load_targets(tmp_path)

    assert "Invalid JSON" in str(excinfo.value)


def test_load_invalid_utf8(tmp_path: Path) -> None:
    path = write_registry(tmp_path, "")
    path.write_bytes(b'{"targets": [{"name": "\xff", "kind": "go", "program": "A"}]}')

    with pytest.raises(RegistryParseError) as excinfo:
        load_targets(tmp_path)

    assert "UTF-8" in str(excinfo.value)


def test_load_deeply_nested_json(tmp_path: Path) -> None:
    write_registry(tmp_path, "[" * 100000)

    with pytest.raises(RegistryParseError):
        load_targets(tmp_path)


def test_load_unknown_kind_is_parse_error(tmp_path: Path) -> None:
    write_registry(
        tmp_path,
        {"version": 1, "targets": [{"name": "a", "kind": "python", "program": "A"}]},
    )

    with pytest.raises(RegistryParseError) as excinfo:
        load_targets(tmp_path)

    msg = str(excinfo.value)
    assert "targets[0].kind" in msg
    assert "'python'" in msg


def test_load_unknown_request_is_parse_error(tmp_path: Path) -> None:
    write_registry(
        tmp_path,
        {
            "version": 1,
            "targets": [{"name": "a", "kind": "go", "program": "A", "request": "spawn"}],
        },
    )

    with pytest.raises(RegistryParseError):
        load_targets(tmp_path)


def test_load_rejects_wrong_field_types(tmp_path: Path) -> None:
    write_registry(
        tmp_path,
        {"version": 1, "targets": [{"name": "a", "kind": "go", "program": "A", "port": "80"}]},
    )

    with pytest.raises(RegistryParseError) as excinfo:
        load_targets(tmp_path)

    assert "expected non-negative integer, got str" in str(excinfo.value)


def test_unknown_fields_are_dropped_on_resave(tmp_path: Path) -> None:
    write_registry(
        tmp_path,
        {
            "version": 1,
            "owner": "team-a",
            "targets": [{"name": "a", "kind": "go", "program": "A", "color": "red"}],
        },
    )

    save_targets(tmp_path, load_targets(tmp_path), overwrite=True)

    data = json.loads(targets_path(tmp_path).read_text(encoding="utf-8"))
    assert data == {"version": 1, "targets": [{"name": "a", "kind": "go", "program": "A"}]}


def test_upsert_creates_registry_when_missing(tmp_path: Path) -> None:
    upsert_target(tmp_path, Target(name="a", kind=TargetKind.GO, program="A"))

    loaded = load_targets(tmp_path)
    assert loaded.version == 1
    assert [t.name for t in loaded.targets] == ["a"]


def test_upsert_appends_new_names(tmp_path: Path) -> None:
    upsert_target(tmp_path, Target(name="a", kind=TargetKind.GO, program="A"))
    upsert_target(tmp_path, Target(name="b", kind=TargetKind.RUST, program="B"))

    assert [t.name for t in load_targets(tmp_path).targets] == ["a", "b"]


def test_upsert_replaces_in_place(tmp_path: Path) -> None:
    for name in ("a", "b", "c"):
        upsert_target(tmp_path, Target(name=name, kind=TargetKind.GO, program=name.upper()))

    upsert_target(tmp_path, Target(name="b", kind=TargetKind.CPP, program="build/b", port=2345))

    loaded = load_targets(tmp_path).targets
    assert [t.name for t in loaded] == ["a", "b", "c"]
    assert loaded[1].kind is TargetKind.CPP
    assert loaded[1].program == "build/b"
    assert loaded[1].port == 2345


def test_upsert_is_idempotent(tmp_path: Path) -> None:
    upsert_target(tmp_path, Target(name="a", kind=TargetKind.GO, program="A"))
    target = Target(name="b", kind=TargetKind.NODE, program="index.js", args=["--x"])

    upsert_target(tmp_path, target)
    first = targets_path(tmp_path).read_text(encoding="utf-8")
    upsert_target(tmp_path, target)

    assert targets_path(tmp_path).read_text(encoding="utf-8") == first
    assert [t.name for t in load_targets(tmp_path).targets] == ["a", "b"]


def test_upsert_propagates_parse_errors(tmp_path: Path) -> None:
    path = write_registry(tmp_path, "not json")

    with pytest.raises(RegistryParseError):
        upsert_target(tmp_path, Target(name="a", kind=TargetKind.GO, program="A"))

    assert path.read_text(encoding="utf-8") == "not json"
