"""CLI entrypoint for pattern-lint."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from pattern_lint import __version__
from pattern_lint.aggregate import AnalysisResult
from pattern_lint.analysis import InputNotFoundError, ToolProfile, analyze_path, build_profile
from pattern_lint.batch import run_batch
from pattern_lint.config import AppConfig, default_config_template, load_app_config
from pattern_lint.output import (
    render_batch_json,
    render_batch_summary,
    render_human,
    render_json,
)
from pattern_lint.registry import TOOLS, list_rule_info

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_INPUT_ERROR = 3

app = typer.Typer(
    name="pattern-lint",
    no_args_is_help=True,
    help="Pattern-based source analyzers with severity reports and pass/fail exit codes.",
)

PathArgument = Annotated[
    Path | None, typer.Argument(help="File to analyze.", show_default=False)
]
DirOption = Annotated[
    Path | None,
    typer.Option("--dir", help="Analyze every eligible file under this directory."),
]
FormatOption = Annotated[
    str | None, typer.Option(help="Output format: human|json.", show_default="human")
]
RootOption = Annotated[Path, typer.Option(help="Project root used to discover config.")]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config TOML file."),
]


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log debug details to stderr.")
    ] = False,
) -> None:
    """Root command callback."""
    _ = version
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command("modernize")
def modernize_command(
    path: PathArgument = None,
    directory: DirOption = None,
    format: FormatOption = None,
    root: RootOption = Path("."),
    config_file: ConfigOption = None,
) -> None:
    """Suggest ES6+ improvements (var, arrows, template literals, spread...)."""
    _run_tool("modernize", path, directory, format, root, config_file)


@app.command("fundamentals")
def fundamentals_command(
    path: PathArgument = None,
    directory: DirOption = None,
    format: FormatOption = None,
    root: RootOption = Path("."),
    config_file: ConfigOption = None,
) -> None:
    """Validate fundamentals: declarations, strict equality, console use, layout."""
    _run_tool("fundamentals", path, directory, format, root, config_file)


@app.command("functions")
def functions_command(
    path: PathArgument = None,
    directory: DirOption = None,
    format: FormatOption = None,
    root: RootOption = Path("."),
    config_file: ConfigOption = None,
) -> None:
    """Analyze function patterns, callback anti-patterns and branch density."""
    _run_tool("functions", path, directory, format, root, config_file)


@app.command("markup")
def markup_command(
    path: PathArgument = None,
    directory: DirOption = None,
    format: FormatOption = None,
    root: RootOption = Path("."),
    config_file: ConfigOption = None,
) -> None:
    """Analyze markup structure, accessibility and nesting depth."""
    _run_tool("markup", path, directory, format, root, config_file)


@app.command("rules")
def rules_command(
    tool: Annotated[str | None, typer.Option(help="Only list rules of this tool.")] = None,
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    root: RootOption = Path("."),
    config_file: ConfigOption = None,
) -> None:
    """List available rules and document checks."""
    output_format = _validate_format(format)
    if tool is not None and tool not in TOOLS:
        raise typer.BadParameter(f"tool must be one of: {', '.join(TOOLS)}", param_hint="--tool")

    app_config = _load_config_or_raise(root, config_file)
    tools = [tool] if tool is not None else list(TOOLS)
    active_ids = {name: set(_build_profile_or_raise(name, app_config).rule_set.ids) for name in tools}
    rule_info = [
        item
        for name in tools
        for item in list_rule_info(
            name,
            custom_rules=app_config.custom_rules,
            thresholds=app_config.thresholds,
        )
    ]

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "description": item.description,
                    "severity": item.severity,
                    "tool": item.tool,
                    "kind": item.kind,
                    "has_suggestion": item.has_suggestion,
                    "enabled": item.rule_id in active_ids[item.tool],
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids[item.tool] else "disabled"
        lines.append(
            f"- {item.tool}/{item.rule_id} [{item.severity}, {status}] - {item.description}"
        )
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    root: RootOption = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: ConfigOption = None,
) -> None:
    """Show resolved configuration."""
    output_format = _validate_format(format)
    app_config = _load_config_or_raise(root, config_file)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = {
        name: _build_profile_or_raise(name, app_config).rule_set.ids for name in TOOLS
    }

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- rules.custom: {[item['id'] for item in payload['rules']['custom']]}",
        f"- thresholds: {payload['thresholds']}",
        f"- batch.exclude_dirs: {payload['batch']['exclude_dirs']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".pattern-lint.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter project config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


def main() -> None:
    """Console script entrypoint."""
    app()


def _run_tool(
    tool: str,
    path: Path | None,
    directory: Path | None,
    format: str | None,
    root: Path,
    config_file: Path | None,
) -> None:
    app_config = _load_config_or_raise(root, config_file)
    output_format = _validate_format(format or app_config.format)
    if (path is None) == (directory is None):
        raise typer.BadParameter("Provide either a PATH or --dir, not both.")

    profile = _build_profile_or_raise(tool, app_config)

    if path is not None:
        _run_file(profile, path, output_format)
    elif directory is not None and directory.is_dir():
        _run_directory(profile, directory, output_format, app_config)
    else:
        _input_error(f"Directory not found: {directory}")


def _run_file(profile: ToolProfile, path: Path, output_format: str) -> None:
    try:
        result = analyze_path(path, profile)
    except InputNotFoundError as exc:
        _input_error(str(exc))
    except (OSError, UnicodeDecodeError) as exc:
        _input_error(f"Could not read file {path}: {exc}")

    if output_format == "json":
        typer.echo(render_json(result, tool=profile.name))
    else:
        typer.echo(render_human(result, tool=profile.name))
    raise typer.Exit(code=EXIT_PASSED if result.passed else EXIT_FAILED)


def _run_directory(
    profile: ToolProfile,
    directory: Path,
    output_format: str,
    app_config: AppConfig,
) -> None:
    def _print_result(result: AnalysisResult) -> None:
        typer.echo(render_human(result, tool=profile.name))
        typer.echo("")

    summary = run_batch(
        directory,
        profile,
        exclude_dirs=app_config.batch.exclude_dirs,
        on_result=_print_result if output_format == "human" else None,
    )
    if output_format == "json":
        typer.echo(render_batch_json(summary, tool=profile.name))
    else:
        typer.echo(render_batch_summary(summary, tool=profile.name))
    raise typer.Exit(code=EXIT_PASSED if summary.passed else EXIT_FAILED)


def _input_error(message: str) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=EXIT_INPUT_ERROR)


def _validate_format(value: str) -> str:
    output_format = value.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    return output_format


def _load_config_or_raise(root: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(root, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_profile_or_raise(tool: str, app_config: AppConfig) -> ToolProfile:
    try:
        return build_profile(tool, app_config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc
