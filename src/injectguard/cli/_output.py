from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

from injectguard import __version__
from injectguard.core._types import SEVERITY_LEVEL, Severity

if TYPE_CHECKING:
    from injectguard.cli._runner import CheckReport
    from injectguard.core.diagnostic import Diagnostic
    from injectguard.core.rule import Rule

_SEVERITY_COLORS: dict[Severity, str] = {
    Severity.ERROR: "\033[31m",  # red
    Severity.WARNING: "\033[33m",  # yellow
    Severity.INFO: "\033[36m",  # cyan
}
_GREEN = "\033[32m"
_RED = "\033[31m"
_BOLD = "\033[1m"
_RESET = "\033[0m"

_LINE_WIDTH = 66


def _use_color(no_color_flag: bool) -> bool:
    if no_color_flag:
        return False
    return not os.environ.get("NO_COLOR", "")


def _c(text: str, code: str, *, color: bool) -> str:
    if not color:
        return text
    return f"{code}{text}{_RESET}"


def _section(title: str, *, color: bool) -> str:
    header = f"── {title} "
    fill = "─" * max(0, _LINE_WIDTH - len(header))
    return _c(header + fill, _BOLD, color=color)


def format_text(
    report: CheckReport,
    *,
    min_severity: Severity = Severity.INFO,
    no_color: bool = False,
) -> str:
    color = _use_color(no_color)
    min_level = SEVERITY_LEVEL[min_severity]
    lines: list[str] = []
    w = lines.append

    w(f"injectguard {__version__}")

    all_filtered: list[Diagnostic] = []
    for result in report.results:
        result_diagnostics = [
            d for d in result.diagnostics if SEVERITY_LEVEL[d.severity] >= min_level
        ]
        all_filtered.extend(result_diagnostics)

        w("")
        w(_section(result.filename, color=color))

        if result.error:
            w(f"  {_c('ERROR', _RED, color=color)}: {result.error}")
            continue
        if result.fixed:
            noun = "fix" if result.fixed == 1 else "fixes"
            w(f"  {_c(f'applied {result.fixed} {noun}', _GREEN, color=color)}")
        if not result_diagnostics and not result.fixed:
            w(f"  {_c('OK', _GREEN, color=color)}")
        for d in result_diagnostics:
            sev_color = _SEVERITY_COLORS.get(d.severity, "")
            tag = _c(f"[{d.rule_id}]", _BOLD, color=color)
            sev = _c(d.severity, sev_color, color=color)
            fixable = " (fixable)" if d.fix is not None else ""
            w(f"  {d.line}:{d.column} {tag} {sev}: {d.message}{fixable}")
            if d.hint:
                w(f"    hint: {d.hint}")

    w("")
    w(_summary_line(all_filtered, color=color))
    return "\n".join(lines)


def _summary_line(diagnostics: list[Diagnostic], *, color: bool) -> str:
    total = len(diagnostics)
    if total == 0:
        return _c("No problems found.", _GREEN, color=color)
    by_sev: dict[Severity, int] = dict.fromkeys(Severity, 0)
    for d in diagnostics:
        by_sev[d.severity] += 1
    parts = [
        _c(f"{by_sev[s]} {s}", _SEVERITY_COLORS.get(s, ""), color=color)
        for s in (Severity.ERROR, Severity.WARNING, Severity.INFO)
        if by_sev[s]
    ]
    noun = "problem" if total == 1 else "problems"
    fixable = sum(1 for d in diagnostics if d.fix is not None)
    line = f"{total} {noun} ({', '.join(parts)})"
    if fixable:
        line += f", {fixable} fixable with --fix"
    return line


def format_json(
    report: CheckReport,
    *,
    min_severity: Severity = Severity.INFO,
) -> str:
    min_level = SEVERITY_LEVEL[min_severity]
    diagnostics = [
        d for d in report.all_diagnostics if SEVERITY_LEVEL[d.severity] >= min_level
    ]

    by_sev: dict[Severity, int] = dict.fromkeys(Severity, 0)
    for d in diagnostics:
        by_sev[d.severity] += 1

    data = {
        "version": __version__,
        "files": [
            {"filename": r.filename, "fixed": r.fixed, "error": r.error} for r in report.results
        ],
        "diagnostics": [
            {
                "rule_id": d.rule_id,
                "severity": str(d.severity),
                "message": d.message,
                "message_id": d.message_id,
                "hint": d.hint,
                "filename": d.filename,
                "node_type": d.node_type,
                "line": d.line,
                "column": d.column,
                "fix": (
                    {"offset": d.fix.offset, "text": d.fix.text} if d.fix is not None else None
                ),
            }
            for d in diagnostics
        ],
        "summary": {
            "total": len(diagnostics),
            "error": by_sev[Severity.ERROR],
            "warning": by_sev[Severity.WARNING],
            "info": by_sev[Severity.INFO],
            "fixable": sum(1 for d in diagnostics if d.fix is not None),
        },
    }
    return json.dumps(data, indent=2)


_LAYER_TITLES: dict[str, str] = {
    "class.members": "Class Members",
}


def format_rules_text(
    rules: list[Rule],
    *,
    no_color: bool = False,
    total: int | None = None,
) -> str:
    color = _use_color(no_color)
    lines: list[str] = []
    w = lines.append

    id_w = max((len(r.id) for r in rules), default=0)
    sev_w = max((len(str(r.severity)) for r in rules), default=0)

    groups: dict[str, list[Rule]] = {}
    for r in rules:
        groups.setdefault(r.layer, []).append(r)

    count = len(rules)
    header = f"injectguard {__version__} - {count} rules"
    if total is not None and total != count:
        header += f" (filtered from {total})"
    w(header)

    for layer, group in groups.items():
        title = _LAYER_TITLES.get(layer, layer)
        w("")
        w(_section(f"{title} ({len(group)})", color=color))
        w("")
        for r in group:
            sev_color = _SEVERITY_COLORS.get(r.severity, "")
            rule_id = _c(r.id.ljust(id_w), _BOLD, color=color)
            severity = _c(str(r.severity).ljust(sev_w), sev_color, color=color)
            fixable = " [fix]" if r.fixable else ""
            w(f"  {rule_id}  {severity}  {r.name}: {r.summary}{fixable}")

    return "\n".join(lines)


def format_rules_json(rules: list[Rule]) -> str:
    data = {
        "version": __version__,
        "rules": [
            {
                "id": r.id,
                "name": r.name,
                "severity": str(r.severity),
                "summary": r.summary,
                "hint": r.hint,
                "layer": r.layer,
                "fixable": r.fixable,
            }
            for r in rules
        ],
        "total": len(rules),
    }
    return json.dumps(data, indent=2)
