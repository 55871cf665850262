"""Configuration loading for pattern-lint."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILENAMES = (".pattern-lint.toml", "pattern-lint.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("pattern_lint", "pattern-lint")

SEVERITY_CHOICES = {"error", "warning", "info"}
TOOL_CHOICES = {"modernize", "fundamentals", "functions", "markup"}
DEFAULT_EXCLUDE_DIRS = ["node_modules", "bower_components", "__pycache__", "dist", "build"]


@dataclass(slots=True)
class ThresholdsConfig:
    """Advisory limits used by document-level checks."""

    complexity: int | None = None
    max_line_length: int = 120
    brace_depth: int = 4
    markup_depth: int = 15

    def to_dict(self) -> dict[str, Any]:
        return {
            "complexity": self.complexity,
            "max_line_length": self.max_line_length,
            "brace_depth": self.brace_depth,
            "markup_depth": self.markup_depth,
        }


@dataclass(slots=True)
class BatchConfig:
    """Directory traversal controls for --dir runs."""

    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    extensions: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "exclude_dirs": list(self.exclude_dirs),
            "extensions": {key: list(value) for key, value in self.extensions.items()},
        }


@dataclass(slots=True)
class CustomRuleConfig:
    """User-supplied pattern rule, compiled when rules are built."""

    rule_id: str
    pattern: str
    message: str
    severity: str = "warning"
    exceptions: list[str] = field(default_factory=list)
    context_width: int = 0
    suggestion: str | None = None
    tools: list[str] = field(default_factory=list)

    def applies_to(self, tool: str) -> bool:
        return not self.tools or tool in self.tools

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.rule_id,
            "pattern": self.pattern,
            "message": self.message,
            "severity": self.severity,
            "exceptions": list(self.exceptions),
            "context_width": self.context_width,
            "suggestion": self.suggestion,
            "tools": list(self.tools),
        }


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    custom_rules: list[CustomRuleConfig] = field(default_factory=list)
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
                "custom": [item.to_dict() for item in self.custom_rules],
            },
            "thresholds": self.thresholds.to_dict(),
            "batch": self.batch.to_dict(),
            "source": self.source,
        }


def load_app_config(root: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or project-local files with precedence."""
    root = root.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (root / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = root / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = root / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            'format = "human"',
            "",
            "[rules]",
            "# enable = []",
            'disable = ["magic_number"]',
            "",
            "[[rules.custom]]",
            'id = "debugger_statement"',
            'pattern = "\\\\bdebugger\\\\s*;"',
            'message = "Remove debugger statements"',
            'severity = "error"',
            'tools = ["fundamentals", "modernize"]',
            "",
            "[thresholds]",
            "# complexity = 40",
            "max_line_length = 120",
            "brace_depth = 4",
            "markup_depth = 15",
            "",
            "[batch]",
            'exclude_dirs = ["node_modules", "bower_components", "__pycache__", "dist", "build"]',
            "",
            "[batch.extensions]",
            '# markup = [".html", ".htm", ".xhtml"]',
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    thresholds_mapping = _as_table(mapping.get("thresholds"), "thresholds")
    batch_mapping = _as_table(mapping.get("batch"), "batch")

    raw_format = mapping.get("format", "human")
    format_value = str(raw_format).lower()
    if format_value not in {"human", "json"}:
        format_value = "human"

    return AppConfig(
        format=format_value,
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable")),
        rule_disable=_as_str_list(rules_mapping.get("disable")),
        custom_rules=_parse_custom_rules(rules_mapping.get("custom")),
        thresholds=_parse_thresholds(thresholds_mapping),
        batch=_parse_batch(batch_mapping),
        source=source,
    )


def _parse_thresholds(value: dict[str, Any]) -> ThresholdsConfig:
    raw_complexity = value.get("complexity")
    complexity = (
        None if raw_complexity is None else _as_positive_int(raw_complexity, "thresholds.complexity")
    )
    return ThresholdsConfig(
        complexity=complexity,
        max_line_length=_as_positive_int(
            value.get("max_line_length", 120), "thresholds.max_line_length"
        ),
        brace_depth=_as_positive_int(value.get("brace_depth", 4), "thresholds.brace_depth"),
        markup_depth=_as_positive_int(value.get("markup_depth", 15), "thresholds.markup_depth"),
    )


def _parse_batch(value: dict[str, Any]) -> BatchConfig:
    raw_exclude = value.get("exclude_dirs")
    extensions_table = _as_table(value.get("extensions"), "batch.extensions")
    extensions: dict[str, list[str]] = {}
    for tool, raw in extensions_table.items():
        if tool not in TOOL_CHOICES:
            choices = ", ".join(sorted(TOOL_CHOICES))
            raise ValueError(f"batch.extensions keys must be one of: {choices}")
        items = _as_str_list(raw)
        for item in items:
            if not item.startswith("."):
                raise ValueError(f"batch.extensions.{tool} entries must start with '.'")
        extensions[tool] = [item.lower() for item in items]
    return BatchConfig(
        exclude_dirs=list(DEFAULT_EXCLUDE_DIRS) if raw_exclude is None else _as_str_list(raw_exclude),
        extensions=extensions,
    )


def _parse_custom_rules(value: Any) -> list[CustomRuleConfig]:
    items = _as_table_list(value, "rules.custom")
    parsed: list[CustomRuleConfig] = []
    for item in items:
        tools = _as_str_list(item.get("tools"))
        unknown_tools = [tool for tool in tools if tool not in TOOL_CHOICES]
        if unknown_tools:
            joined = ", ".join(sorted(unknown_tools))
            raise ValueError(f"rules.custom.tools has unknown tools: {joined}")
        suggestion = item.get("suggestion")
        parsed.append(
            CustomRuleConfig(
                rule_id=_as_str(item.get("id"), "rules.custom.id"),
                pattern=_as_str(item.get("pattern"), "rules.custom.pattern"),
                message=_as_str(item.get("message"), "rules.custom.message"),
                severity=_as_choice(
                    item.get("severity", "warning"), SEVERITY_CHOICES, "rules.custom.severity"
                ),
                exceptions=_as_str_list(item.get("exceptions")),
                context_width=_as_int(item.get("context_width", 0), "rules.custom.context_width"),
                suggestion=(
                    None if suggestion is None else _as_str(suggestion, "rules.custom.suggestion")
                ),
                tools=tools,
            )
        )
    return parsed


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_table_list(value: Any, field_name: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list of tables")
    output: list[dict[str, Any]] = []
    for item in value:
        if not isinstance(item, dict):
            raise ValueError(f"{field_name} must be a list of tables")
        output.append(item)
    return output


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("Expected a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("Expected a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value)


def _as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value


def _as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def _as_positive_int(raw: Any, field_name: str) -> int:
    value = _as_int(raw, field_name)
    if value <= 0:
        raise ValueError(f"{field_name} must be > 0")
    return value
