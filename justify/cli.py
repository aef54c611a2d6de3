# justify/cli.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn

import typer

from . import __version__
from .config import RenderConfig, load_render_config
from .detect import detect_all
from .editors import generate_vscode
from .errors import (
    AlreadyExistsError,
    JustifyConfigError,
    NoTargetsError,
    ParseError,
    ProjectTypeNotDetectedError,
    TemplateExecutionError,
    TemplateParseError,
    UnknownTargetError,
)
from .fs import write_file
from .log import setup_logging
from .render import (
    DEFAULT_CMAKE_DIRS,
    DEFAULT_CPP_EXES,
    DEFAULT_GO_EXES,
    DEFAULT_MAKE_EXES,
    DEFAULT_NODE_ENTRIES,
    ProjectType,
    RenderOptions,
    detect_project_type,
    load_template,
    render,
    split_clean,
)
from .resolve import list_targets, resolve_program
from .state import write_last_used
from .targets import (
    RequestMode,
    Target,
    TargetKind,
    TargetsFile,
    save_targets,
    upsert_target,
)

app = typer.Typer(
    help="justify: generate a Justfile and editor debug/run scaffolding",
    invoke_without_command=True,
)
target_app = typer.Typer(help="Manage persisted debug/run targets")
app.add_typer(target_app, name="target")

ERR_USAGE = "JUSTIFY001"
ERR_CONFIG_INVALID = "JUSTIFY002"
ERR_EXISTS = "JUSTIFY003"
ERR_TEMPLATE = "JUSTIFY101"
ERR_DETECT = "JUSTIFY102"
ERR_REGISTRY = "JUSTIFY201"
ERR_RESOLVE = "JUSTIFY301"

MANUAL_TEXT = """justify manual

OVERVIEW
  justify renders a Justfile from a Jinja2 template. A template per project
  type (rust, go, cpp, node) is bundled; you can also provide your own with
  --template.

TEMPLATE DATA
  cmake_dirs            list[str]  CMake build directories to probe (first is used by -B)
  cpp_exe_candidates    list[str]  candidate executable names inside build dirs
  make_exe_candidates   list[str]  root-level executable names for Makefile builds
  go_exe_candidates     list[str]  Go binary names to try
  node_entries          list[str]  common Node built entries to try
  attach_on_dev         bool       if true, `program` prints 'attach:node' on dev-only
  cargo_bin_guess       str        fallback cargo bin name

CONFIG
  Defaults for every flag can be set in .justify/config.toml:

    [render]
    cmake_dirs = ["out", "build"]
    attach_on_dev = false
    cargo_bin = "my_crate"

WORKFLOW
  1) Run 'justify generate' to write Justfile
  2) 'just build' builds using defaults
  3) 'just program' prints the executable to run or 'attach:node'

TIPS
  - Use --template to point to a team-specific template
  - Use --print-template in CI to validate rendering
"""


def _fail(code: str, message: str, exit_code: int = 1) -> NoReturn:
    typer.echo(f"[{code}] Error: {message}", err=True)
    raise typer.Exit(code=exit_code)


@app.callback()
def _root(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit", is_eager=True),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr"),
) -> None:
    if version:
        typer.echo(f"justify {__version__}")
        raise typer.Exit(code=0)

    if verbose:
        setup_logging(logging.DEBUG)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def _folder_name(root: Path) -> str:
    return root.resolve().name or "app"


def _pick(flag: str | None, configured: list[str] | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if flag is not None:
        return tuple(split_clean(flag))
    if configured is not None:
        return tuple(configured)
    return default


def _build_options(
    root: Path,
    cfg: RenderConfig,
    cmake_dirs: str | None,
    cpp_exes: str | None,
    make_exes: str | None,
    go_exes: str | None,
    node_entries: str | None,
    attach_on_dev: bool | None,
    cargo_bin: str | None,
) -> RenderOptions:
    if attach_on_dev is None:
        attach_on_dev = cfg.attach_on_dev if cfg.attach_on_dev is not None else True
    if cargo_bin is None:
        cargo_bin = cfg.cargo_bin_guess or _folder_name(root)

    return RenderOptions(
        cmake_dirs=_pick(cmake_dirs, cfg.cmake_dirs, DEFAULT_CMAKE_DIRS),
        cpp_exe_candidates=_pick(cpp_exes, cfg.cpp_exe_candidates, DEFAULT_CPP_EXES),
        make_exe_candidates=_pick(make_exes, cfg.make_exe_candidates, DEFAULT_MAKE_EXES),
        go_exe_candidates=_pick(go_exes, cfg.go_exe_candidates, DEFAULT_GO_EXES),
        node_entries=_pick(node_entries, cfg.node_entries, DEFAULT_NODE_ENTRIES),
        attach_on_dev=attach_on_dev,
        cargo_bin_guess=cargo_bin,
    )


def _template_text(root: Path, template: Path | None, project_type: ProjectType) -> str:
    if template is not None:
        try:
            return template.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            _fail(ERR_TEMPLATE, f"read template: {e}")

    if project_type is ProjectType.AUTO:
        try:
            project_type = detect_project_type(root)
        except ProjectTypeNotDetectedError as e:
            _fail(ERR_DETECT, str(e))
        typer.echo(f"Detected project type: {project_type.value}", err=True)
    return load_template(project_type)


@app.command()
def generate(
    output: Path = typer.Option(Path("Justfile"), "-o", "--output", help="Output filename"),
    force: bool = typer.Option(False, "--force", help="Overwrite the output file if it already exists"),
    print_template: bool = typer.Option(
        False, "--print-template", help="Print the rendered template to stdout"
    ),
    template: Path | None = typer.Option(
        None, "--template", help="Use a custom template instead of the bundled one"
    ),
    project_type: ProjectType | None = typer.Option(
        None, "--type", case_sensitive=False, help="Project type (default: auto)"
    ),
    cmake_dirs: str | None = typer.Option(
        None, "--cmake-dirs", help="Comma-separated CMake build dirs (first is used by -B)"
    ),
    cpp_exes: str | None = typer.Option(
        None, "--cpp-exes", help="Comma-separated executable names inside CMake dirs"
    ),
    make_exes: str | None = typer.Option(
        None, "--make-exes", help="Comma-separated root-level Makefile executables"
    ),
    go_exes: str | None = typer.Option(
        None, "--go-exes", help="Comma-separated Go binary names to try"
    ),
    node_entries: str | None = typer.Option(
        None, "--node-entries", help="Comma-separated Node build entry files"
    ),
    attach_on_dev: bool | None = typer.Option(
        None,
        "--attach-on-dev/--no-attach-on-dev",
        help="Emit attach:node when only a dev server is present (default: on)",
    ),
    cargo_bin: str | None = typer.Option(
        None, "--cargo-bin", help="Fallback cargo bin name (default: folder name)"
    ),
    root: Path = typer.Option(Path("."), "--root", help="Project root directory"),
) -> None:
    """
    Render a Justfile for the project.

    Flags override .justify/config.toml, which overrides built-in defaults.
    """
    try:
        cfg = load_render_config(root)
    except JustifyConfigError as e:
        _fail(ERR_CONFIG_INVALID, str(e), exit_code=2)

    options = _build_options(
        root,
        cfg,
        cmake_dirs=cmake_dirs,
        cpp_exes=cpp_exes,
        make_exes=make_exes,
        go_exes=go_exes,
        node_entries=node_entries,
        attach_on_dev=attach_on_dev,
        cargo_bin=cargo_bin,
    )
    effective_type = project_type or cfg.project_type or ProjectType.AUTO
    tmpl = _template_text(root, template or cfg.template, effective_type)

    try:
        rendered = render(tmpl, options)
    except (TemplateParseError, TemplateExecutionError) as e:
        _fail(ERR_TEMPLATE, f"render: {e}")

    if print_template:
        typer.echo(rendered, nl=False)
        raise typer.Exit(code=0)

    dst = output if output.is_absolute() else root / output
    if dst.exists() and not force:
        typer.echo(f"[{ERR_EXISTS}] Refusing to overwrite {dst} (use --force to override)", err=True)
        raise typer.Exit(code=1)

    try:
        write_file(dst, rendered, overwrite=True)
    except OSError as e:
        _fail(ERR_EXISTS, f"write {dst}: {e}")
    typer.echo(f"Wrote {dst}")


@app.command()
def manual() -> None:
    """
    Show the template data reference and workflow.
    """
    typer.echo(MANUAL_TEXT, nl=False)


@app.command()
def targets(
    json_out: bool = typer.Option(False, "--json", help="Print targets as JSON"),
    init: bool = typer.Option(False, "--init", help="Write detected targets to .justify/targets.json"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing targets file (with --init)"),
    root: Path = typer.Option(Path("."), "--root", help="Project root directory"),
) -> None:
    """
    List debug/run targets (persisted, or detected when none are saved).
    """
    if force and not init:
        _fail(ERR_USAGE, "--force requires --init", exit_code=2)

    if init:
        registry = TargetsFile(targets=detect_all(root))
        try:
            path = save_targets(root, registry, overwrite=force)
        except AlreadyExistsError as e:
            _fail(ERR_EXISTS, str(e))
        typer.echo(f"Wrote {path}")
        raise typer.Exit(code=0)

    try:
        found = list_targets(root)
    except ParseError as e:
        _fail(ERR_REGISTRY, str(e))

    if json_out:
        typer.echo(json.dumps([t.to_dict() for t in found], indent=2))
        raise typer.Exit(code=0)

    for t in found:
        typer.echo(f"{t.name:<16} {t.kind.value:<5} {t.program}")


@app.command()
def program(
    target: str | None = typer.Option(None, "--target", help="Target name (default: last used, then first)"),
    root: Path = typer.Option(Path("."), "--root", help="Project root directory"),
) -> None:
    """
    Print the program of the selected target.
    """
    try:
        typer.echo(resolve_program(root, target))
    except (UnknownTargetError, NoTargetsError) as e:
        _fail(ERR_RESOLVE, str(e))
    except ParseError as e:
        _fail(ERR_REGISTRY, str(e))


@target_app.command("set")
def target_set(
    name: str = typer.Argument(..., help="Target name to remember as last used"),
    root: Path = typer.Option(Path("."), "--root", help="Project root directory"),
) -> None:
    """
    Remember NAME as the last-used target.
    """
    if not name.strip():
        _fail(ERR_USAGE, "target name cannot be empty", exit_code=2)
    try:
        write_last_used(root, name)
    except OSError as e:
        _fail(ERR_REGISTRY, str(e))
    typer.echo(f"Last-used target: {name}")


def _parse_env(pairs: list[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            _fail(ERR_USAGE, f"invalid --env value {pair!r} (expected KEY=VALUE)", exit_code=2)
        env[key.strip()] = value
    return env


@target_app.command("add")
def target_add(
    name: str = typer.Option(..., "--name", help="Unique target name"),
    kind: TargetKind = typer.Option(..., "--kind", case_sensitive=False, help="Target kind"),
    program_path: str = typer.Option(..., "--program", help="Program path, or attach:node"),
    port: int | None = typer.Option(None, "--port", min=0, help="Debugger port (0 = unused)"),
    request: RequestMode | None = typer.Option(None, "--request", case_sensitive=False),
    cwd: str | None = typer.Option(None, "--cwd", help="Working directory"),
    args: list[str] = typer.Option([], "--arg", help="Program argument (repeatable)"),
    env: list[str] = typer.Option([], "--env", help="Environment entry KEY=VALUE (repeatable)"),
    root: Path = typer.Option(Path("."), "--root", help="Project root directory"),
) -> None:
    """
    Add a target to .justify/targets.json, replacing one with the same name.
    """
    if not name.strip():
        _fail(ERR_USAGE, "--name cannot be empty", exit_code=2)

    new_target = Target(
        name=name.strip(),
        kind=kind,
        program=program_path,
        cwd=cwd,
        args=list(args) or None,
        env=_parse_env(env) or None,
        request=request,
        port=port or None,
    )
    try:
        upsert_target(root, new_target)
    except ParseError as e:
        _fail(ERR_REGISTRY, str(e))
    typer.echo(f"Saved target {new_target.name}")


@app.command()
def editor(
    editor_name: str = typer.Option("vscode", "--editor", help="Editor to generate config for: vscode"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing editor files"),
    root: Path = typer.Option(Path("."), "--root", help="Project root directory"),
) -> None:
    """
    Generate editor task and debug configs from the targets.
    """
    if editor_name != "vscode":
        _fail(ERR_USAGE, f"unknown --editor: {editor_name} (expected: vscode)", exit_code=2)

    try:
        found = list_targets(root)
    except ParseError as e:
        _fail(ERR_REGISTRY, str(e))

    try:
        generate_vscode(root, found, force=force)
    except AlreadyExistsError as e:
        _fail(ERR_EXISTS, str(e))
    typer.echo("Wrote .vscode/tasks.json and .vscode/launch.json")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
