"""ES6+ improvement suggestions for script sources."""

from __future__ import annotations

import re

from pattern_lint.rules.base import RawMatch, Rule, make_rule

_UNSAFE_IN_ARROW = re.compile(r"(?<![\w$.])(?:this|arguments|super)(?![\w$])")


def _arrow_conversion_is_safe(buffer: str, raw: RawMatch) -> bool:
    """An anonymous function may become an arrow only if its body has no own ``this``."""
    _ = buffer
    return _UNSAFE_IN_ARROW.search(raw.group(2)) is None


RULES: tuple[Rule, ...] = (
    make_rule(
        "var_declaration",
        r"\bvar[ \t]+([A-Za-z_$][\w$]*)[ \t]*=",
        "Use let or const instead of var",
        "warning",
        name="var -> let/const",
        suggestion="const {1} =",
    ),
    make_rule(
        "function_expression",
        r"(\w+)[ \t]*:[ \t]*function[ \t]*\(([^)\n]*)\)[ \t]*\{",
        "Consider using arrow function syntax",
        "info",
        name="function -> arrow",
        suggestion="{1}: ({2}) => {{",
    ),
    make_rule(
        "anonymous_function",
        r"function[ \t]*\(([^)\n]*)\)[ \t]*\{([^}\n]{0,50})\}",
        "Consider using arrow function",
        "info",
        name="anonymous -> arrow",
        suggestion=lambda match, params, body: f"({params}) => {{{body}}}",
        usage_check=_arrow_conversion_is_safe,
    ),
    make_rule(
        "string_concat",
        r"(['\"])([^'\"\n]*)\1[ \t]*\+[ \t]*(\w+)[ \t]*\+[ \t]*(['\"])([^'\"\n]*)\4",
        "Use template literals instead of string concatenation",
        "info",
        name="concat -> template",
        suggestion=lambda match, _q1, head, name, _q2, tail: f"`{head}${{{name}}}{tail}`",
    ),
    make_rule(
        "property_longhand",
        r"(?<![\w$.])(\w+)[ \t]*:[ \t]*\1(?=[ \t]*[,}])",
        "Use shorthand property syntax",
        "info",
        name="property shorthand",
        suggestion="{1}",
    ),
    make_rule(
        "bind_this",
        r"\.bind\(this\)",
        "Use arrow function instead of .bind(this)",
        "warning",
        name=".bind(this) -> arrow",
    ),
    make_rule(
        "object_assign",
        r"Object\.assign[ \t]*\([ \t]*\{[ \t]*\}[ \t]*,",
        "Consider using object spread operator",
        "info",
        name="Object.assign -> spread",
        suggestion="{{ ...",
    ),
    make_rule(
        "array_concat",
        r"(\w+)\.concat\((\w+)\)",
        "Consider using array spread operator",
        "info",
        name=".concat() -> spread",
        suggestion="[...{1}, ...{2}]",
    ),
    make_rule(
        "arguments_keyword",
        r"\barguments\b",
        "Use rest parameters instead of arguments object",
        "warning",
        name="arguments -> rest",
    ),
    make_rule(
        "index_of_check",
        r"(\w+)\.indexOf\(([^)\n]+)\)[ \t]*(?:!==?|===?)[ \t]*-1",
        "Use .includes() for existence check",
        "info",
        name="indexOf -> includes",
        suggestion="{1}.includes({2})",
    ),
    make_rule(
        "indexed_for_loop",
        r"for[ \t]*\([ \t]*(?:var|let)[ \t]+(\w+)[ \t]*=[ \t]*0[ \t]*;"
        r"[ \t]*\1[ \t]*<[ \t]*(\w+)\.length[ \t]*;[ \t]*\1\+\+[ \t]*\)",
        "Consider using for...of loop",
        "info",
        name="for -> for...of",
        suggestion="for (const item of {2})",
    ),
    make_rule(
        "callback_parameter",
        r"function[ \t]*\w*[ \t]*\([^)\n]*,[ \t]*(callback|cb|done)[ \t]*\)",
        "Consider using Promises or async/await",
        "info",
        name="callback -> Promise",
    ),
    make_rule(
        "loose_equality",
        r"(?<![!=<>])==(?!=)",
        "Use strict equality (===) instead of loose equality (==)",
        "warning",
        name="== -> ===",
        suggestion="===",
    ),
    make_rule(
        "loose_inequality",
        r"!=(?!=)",
        "Use strict inequality (!==) instead of loose inequality (!=)",
        "warning",
        name="!= -> !==",
        suggestion="!==",
    ),
    make_rule(
        "console_statement",
        r"console\.(log|warn|error|info|debug)\(",
        "Remove or replace console statements in production",
        "info",
        name="console.log",
    ),
    make_rule(
        "require_statement",
        r"(?:const|let|var)[ \t]+(\w+)[ \t]*=[ \t]*require[ \t]*\([ \t]*(['\"][^'\"\n]+['\"])[ \t]*\)",
        "Consider using ES module import syntax",
        "info",
        name="require -> import",
        suggestion="import {1} from {2}",
    ),
    make_rule(
        "module_exports",
        r"module\.exports[ \t]*=",
        "Consider using ES module export syntax",
        "info",
        name="module.exports -> export",
        suggestion="export default",
    ),
    make_rule(
        "or_default",
        r"(\w+)[ \t]*\|\|[ \t]*(['\"][^'\"\n]*['\"]|\d+|true|false|null|\[\]|\{\})",
        "Consider using nullish coalescing (??) if only null/undefined should trigger default",
        "info",
        name="|| -> ??",
        suggestion="{1} ?? {2}",
    ),
    make_rule(
        "nested_access",
        r"(\w+)[ \t]*&&[ \t]*\1\.(\w+)[ \t]*&&[ \t]*\1\.\2\.(\w+)",
        "Consider using optional chaining (?.)",
        "info",
        name="nested && -> ?.",
        suggestion="{1}?.{2}?.{3}",
    ),
)
