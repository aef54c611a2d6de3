# test_config.py
from pathlib import (
    Path,
)

import pytest

from justify.config import (
    RenderConfig,
    config_path,
    load_render_config,
)
from justify.errors import JustifyConfigError
from justify.render import ProjectType


def write_config(
    tmp_path: Path,
    content: str,
) -> Path:
    """Helper: write .justify/config.toml under tmp_path and return its path"""
    path = config_path(tmp_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        content,
        encoding="utf-8",
    )
    return path


def test_missing_config_gives_empty_defaults(
    tmp_path: Path,
) -> None:
    assert load_render_config(tmp_path) == RenderConfig()


def test_config_without_render_table(
    tmp_path: Path,
) -> None:
    write_config(
        tmp_path,
        """
        [other]
        key = 1
        """,
    )

    assert load_render_config(tmp_path) == RenderConfig()


def test_config_full_render_table(
    tmp_path: Path,
) -> None:
    write_config(
        tmp_path,
        """
        [render]
        cmake_dirs = ["out", " build ", ""]
        cpp_exes = "app, main ,,"
        make_exes = ["a.out"]
        go_exes = ["tool"]
        node_entries = ["dist/server/entry.mjs"]
        attach_on_dev = false
        cargo_bin = " my_crate "
        template = "templates/Justfile.j2"
        type = "Node"
        """,
    )

    cfg = load_render_config(tmp_path)

    assert cfg.cmake_dirs == ["out", "build"]
    assert cfg.cpp_exe_candidates == ["app", "main"]
    assert cfg.make_exe_candidates == ["a.out"]
    assert cfg.go_exe_candidates == ["tool"]
    assert cfg.node_entries == ["dist/server/entry.mjs"]
    assert cfg.attach_on_dev is False
    assert cfg.cargo_bin_guess == "my_crate"
    assert cfg.template == tmp_path / "templates" / "Justfile.j2"
    assert cfg.project_type is ProjectType.NODE


def test_config_invalid_toml(
    tmp_path: Path,
) -> None:
    write_config(tmp_path, "[render\n")

    with pytest.raises(JustifyConfigError) as excinfo:
        load_render_config(tmp_path)

    assert "Invalid TOML" in str(excinfo.value)


def test_config_invalid_utf8(
    tmp_path: Path,
) -> None:
    path = write_config(tmp_path, "")
    path.write_bytes(b'[render]\ncargo_bin = "caf\xe9"\n')

    with pytest.raises(JustifyConfigError) as excinfo:
        load_render_config(tmp_path)

    assert "UTF-8" in str(excinfo.value)


def test_config_list_wrong_type(
    tmp_path: Path,
) -> None:
    write_config(
        tmp_path,
        """
        [render]
        cmake_dirs = 3
        """,
    )

    with pytest.raises(JustifyConfigError) as excinfo:
        load_render_config(tmp_path)

    msg = str(excinfo.value)
    assert "config.toml" in msg
    assert "invalid [render].cmake_dirs" in msg
    assert "got int" in msg


def test_config_list_item_wrong_type(
    tmp_path: Path,
) -> None:
    write_config(
        tmp_path,
        """
        [render]
        go_exes = ["ok", 1]
        """,
    )

    with pytest.raises(JustifyConfigError) as excinfo:
        load_render_config(tmp_path)

    assert "[render].go_exes[1]" in str(excinfo.value)


def test_config_attach_on_dev_must_be_bool(
    tmp_path: Path,
) -> None:
    write_config(
        tmp_path,
        """
        [render]
        attach_on_dev = "yes"
        """,
    )

    with pytest.raises(JustifyConfigError) as excinfo:
        load_render_config(tmp_path)

    assert "expected boolean, got str" in str(excinfo.value)


def test_config_empty_cargo_bin(
    tmp_path: Path,
) -> None:
    write_config(
        tmp_path,
        """
        [render]
        cargo_bin = "  "
        """,
    )

    with pytest.raises(JustifyConfigError):
        load_render_config(tmp_path)


def test_config_unknown_type(
    tmp_path: Path,
) -> None:
    write_config(
        tmp_path,
        """
        [render]
        type = "python"
        """,
    )

    with pytest.raises(JustifyConfigError) as excinfo:
        load_render_config(tmp_path)

    assert "expected one of auto, rust, go, cpp, node" in str(excinfo.value)


def test_config_render_must_be_table(
    tmp_path: Path,
) -> None:
    write_config(tmp_path, 'render = "yes"\n')

    with pytest.raises(JustifyConfigError) as excinfo:
        load_render_config(tmp_path)

    assert "expected table/object" in str(excinfo.value)
