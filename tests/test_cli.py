"""CLI tests for analyzer commands, exit codes and config commands."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from pattern_lint import __version__
from pattern_lint.cli import app

runner = CliRunner()


def _write(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def test_root_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("modernize", "fundamentals", "functions", "markup", "rules", "config-init"):
        assert command in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_modernize_var_declaration_passes_with_warning(tmp_path: Path) -> None:
    source = _write(tmp_path / "app.js", "var x = 1;\n")

    result = runner.invoke(app, ["modernize", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "WARNINGS (1)" in result.stdout
    assert "[var_declaration]" in result.stdout
    assert "-> const x =" in result.stdout
    assert "Status: PASSED" in result.stdout


def test_fundamentals_loose_equality_fails(tmp_path: Path) -> None:
    source = _write(tmp_path / "app.js", '"use strict";\nif (a == b) {}\n')

    result = runner.invoke(
        app,
        ["fundamentals", str(source), "--format", "json", "--root", str(tmp_path)],
    )

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["result"]["passed"] is False
    assert [item["rule_id"] for item in payload["result"]["findings"]["error"]] == [
        "loose_equality"
    ]
    assert payload["meta"]["tool"] == "fundamentals"


def test_markup_depth_metrics(tmp_path: Path) -> None:
    nested = _write(tmp_path / "nested.html", "<div><span></span></div>")
    flat = _write(tmp_path / "flat.html", "<img/>")

    nested_result = runner.invoke(
        app, ["markup", str(nested), "--format", "json", "--root", str(tmp_path)]
    )
    flat_result = runner.invoke(
        app, ["markup", str(flat), "--format", "json", "--root", str(tmp_path)]
    )

    assert json.loads(nested_result.stdout)["result"]["metrics"]["max_depth"] == 2
    assert json.loads(flat_result.stdout)["result"]["metrics"]["max_depth"] == 0


def test_functions_reports_complexity_metric(tmp_path: Path) -> None:
    source = _write(tmp_path / "flow.js", "".join(f"if (x{n}) {{}}\n" for n in range(5)))

    result = runner.invoke(app, ["functions", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "complexity: 6 (Low)" in result.stdout


def test_missing_input_exits_with_input_error(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["modernize", str(tmp_path / "missing.js"), "--root", str(tmp_path)]
    )

    assert result.exit_code == 3
    assert "File not found" in result.output


def test_directory_given_as_path_exits_with_input_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["modernize", str(tmp_path), "--root", str(tmp_path)])

    assert result.exit_code == 3
    assert "Could not read file" in result.output


def test_path_and_dir_are_mutually_exclusive(tmp_path: Path) -> None:
    source = _write(tmp_path / "app.js", "const a = 1;\n")

    neither = runner.invoke(app, ["modernize", "--root", str(tmp_path)])
    both = runner.invoke(
        app, ["modernize", str(source), "--dir", str(tmp_path), "--root", str(tmp_path)]
    )

    assert neither.exit_code == 2
    assert both.exit_code == 2


def test_file_and_directory_runs_report_the_same_tool(tmp_path: Path) -> None:
    source = _write(tmp_path / "src" / "page.html", "<h1>Title</h1>\n")

    single = runner.invoke(
        app, ["markup", str(source), "--format", "json", "--root", str(tmp_path)]
    )
    batch = runner.invoke(
        app,
        ["markup", "--dir", str(tmp_path / "src"), "--format", "json", "--root", str(tmp_path)],
    )

    assert single.exit_code == 0
    assert batch.exit_code == 0
    assert json.loads(single.stdout)["meta"]["tool"] == "markup"
    assert json.loads(batch.stdout)["meta"]["tool"] == "markup"


def test_batch_run_reports_read_failures(tmp_path: Path) -> None:
    project = tmp_path / "src"
    _write(project / "a.js", "const a = 1;\n")
    _write(project / "b.js", b"\xff\xfe\xfa\n")
    _write(project / "lib" / "c.js", "let c = 2;\n")

    result = runner.invoke(
        app,
        ["modernize", "--dir", str(project), "--format", "json", "--root", str(tmp_path)],
    )

    assert result.exit_code == 1
    summary = json.loads(result.stdout)["summary"]
    assert summary["files"] == 3
    assert summary["analyzed"] == 2
    assert summary["io_failures"] == 1
    assert summary["passed"] is False
    assert summary["inputs"][str(project / "b.js")] is False


def test_batch_human_output_prints_each_report_then_summary(tmp_path: Path) -> None:
    _write(tmp_path / "one.js", "const a = 1;\n")
    _write(tmp_path / "two.js", "var b = 2;\n")

    result = runner.invoke(app, ["modernize", "--dir", str(tmp_path), "--root", str(tmp_path)])

    assert result.exit_code == 0
    output = result.stdout
    assert output.index("one.js") < output.index("two.js") < output.index("modernize summary")
    assert "Analyzed:     2" in output


def test_batch_missing_directory_exits_with_input_error(tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["modernize", "--dir", str(tmp_path / "nope"), "--root", str(tmp_path)]
    )

    assert result.exit_code == 3
    assert "Directory not found" in result.output


def test_config_format_is_used_when_flag_missing(tmp_path: Path) -> None:
    _write(tmp_path / ".pattern-lint.toml", 'format = "json"\n')
    source = _write(tmp_path / "app.js", "const a = 1;\n")

    result = runner.invoke(app, ["modernize", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["result"]["name"] == str(source)


def test_disabled_rule_is_not_reported(tmp_path: Path) -> None:
    _write(tmp_path / ".pattern-lint.toml", '[rules]\ndisable = ["loose_equality"]\n')
    source = _write(tmp_path / "app.js", '"use strict";\nif (a == b) {}\n')

    result = runner.invoke(app, ["fundamentals", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "loose_equality" not in result.stdout


def test_disabled_function_advice_is_not_reported(tmp_path: Path) -> None:
    _write(tmp_path / ".pattern-lint.toml", '[rules]\ndisable = ["default_params"]\n')
    source = _write(tmp_path / "app.js", "const f = function (a) { return a; };\n")

    result = runner.invoke(app, ["functions", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "default_params" not in result.stdout
    assert "prefer_arrows" in result.stdout

    listed = runner.invoke(
        app, ["rules", "--tool", "functions", "--format", "json", "--root", str(tmp_path)]
    )

    assert listed.exit_code == 0
    rules = {item["rule_id"]: item for item in json.loads(listed.stdout)["rules"]}
    assert rules["default_params"]["enabled"] is False
    assert rules["closure_usage"]["enabled"] is True


def test_unknown_rule_id_in_config_is_a_usage_error(tmp_path: Path) -> None:
    _write(tmp_path / ".pattern-lint.toml", '[rules]\ndisable = ["does_not_exist"]\n')
    source = _write(tmp_path / "app.js", "const a = 1;\n")

    result = runner.invoke(app, ["modernize", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 2


def test_invalid_custom_pattern_is_a_usage_error(tmp_path: Path) -> None:
    _write(
        tmp_path / "lint.toml",
        "\n".join(
            [
                "[[rules.custom]]",
                'id = "broken"',
                'pattern = "(unclosed"',
                'message = "broken"',
            ]
        ),
    )
    source = _write(tmp_path / "app.js", "const a = 1;\n")

    result = runner.invoke(
        app,
        ["modernize", str(source), "--root", str(tmp_path), "--config", "lint.toml"],
    )

    assert result.exit_code == 2


def test_invalid_format_is_a_usage_error(tmp_path: Path) -> None:
    source = _write(tmp_path / "app.js", "const a = 1;\n")

    result = runner.invoke(
        app, ["modernize", str(source), "--format", "xml", "--root", str(tmp_path)]
    )

    assert result.exit_code == 2


def test_rules_command_lists_enabled_state(tmp_path: Path) -> None:
    _write(tmp_path / ".pattern-lint.toml", '[rules]\ndisable = ["img_missing_dimensions"]\n')

    result = runner.invoke(
        app, ["rules", "--tool", "markup", "--format", "json", "--root", str(tmp_path)]
    )

    assert result.exit_code == 0
    rules = {item["rule_id"]: item for item in json.loads(result.stdout)["rules"]}
    assert rules["img_missing_alt"]["enabled"] is True
    assert rules["img_missing_alt"]["has_suggestion"] is True
    assert rules["img_missing_dimensions"]["enabled"] is False
    assert rules["duplicate_id"]["kind"] == "document"
    assert {item["tool"] for item in rules.values()} == {"markup"}


def test_rules_command_human_output(tmp_path: Path) -> None:
    result = runner.invoke(app, ["rules", "--root", str(tmp_path)])

    assert result.exit_code == 0
    assert "modernize/var_declaration [warning, enabled]" in result.stdout
    assert "functions/complexity [warning, disabled]" in result.stdout


def test_rules_command_rejects_unknown_tool(tmp_path: Path) -> None:
    result = runner.invoke(app, ["rules", "--tool", "lint", "--root", str(tmp_path)])

    assert result.exit_code == 2


def test_config_command_shows_resolved_values(tmp_path: Path) -> None:
    _write(tmp_path / ".pattern-lint.toml", "[thresholds]\ncomplexity = 30\n")

    result = runner.invoke(app, ["config", "--root", str(tmp_path), "--format", "json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["thresholds"]["complexity"] == 30
    assert "complexity" in payload["active_rule_ids"]["functions"]
    assert payload["source"].endswith(".pattern-lint.toml")


def test_config_init_writes_and_refuses_overwrite(tmp_path: Path) -> None:
    target = tmp_path / ".pattern-lint.toml"

    first = runner.invoke(app, ["config-init", "--out", str(target)])
    second = runner.invoke(app, ["config-init", "--out", str(target)])
    forced = runner.invoke(app, ["config-init", "--out", str(target), "--force"])

    assert first.exit_code == 0
    assert target.exists()
    assert second.exit_code == 2
    assert forced.exit_code == 0

    check = runner.invoke(app, ["config", "--root", str(tmp_path), "--format", "json"])
    assert check.exit_code == 0
    assert json.loads(check.stdout)["rules"]["disable"] == ["magic_number"]


def test_verbose_flag_is_accepted(tmp_path: Path) -> None:
    source = _write(tmp_path / "app.js", "const a = 1;\n")

    result = runner.invoke(app, ["--verbose", "modernize", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 0
